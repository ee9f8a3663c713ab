"""
Main API module for the SEO Redirect platform.

Responsibilities:
    - Expose admin REST endpoints to list, create, edit and delete redirect configurations
    - Build the public landing-page URL for a configuration
    - Report storage status (cloud connected / degraded / local)
    - Provision a JSONBin bin for the blob-store deployment

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Storage is chosen from the environment (memory, JSONBin, Firestore) unless injected.
    - RedirectManager owns validation, ownership and the degrade-on-read policy;
      routes only translate its errors into HTTP status codes.
    - HTTP Basic identifies the admin; the username is the ownership scope
      when the backend is multi-tenant.

LLM Prompt Example:
    "Explain how to structure a FastAPI service with an application factory,
    injected storage, and a clean separation between API and business logic."
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from auth.dependencies import get_current_user
from seo_redirect.config import load_settings
from seo_redirect.errors import (
    RedirectNotFound,
    RedirectValidationError,
    StorageUnavailable,
    Unauthorized,
)
from seo_redirect.manager.redirect_manager import RedirectManager
from seo_redirect.storage.base import BaseStorage
from seo_redirect.storage.jsonbin_storage import JSONBinStorage
from seo_redirect.storage.storage_factory import get_storage


class RedirectPayload(BaseModel):
    """
    Request payload for creating or editing a redirect configuration.

    Every field is optional at this layer so that missing required fields are
    reported by RedirectManager validation (HTTP 400), not by the schema (422).
    Accepts camelCase (`targetUrl`) or snake_case (`target_url`) keys.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    target_url: Optional[str] = None
    image: Optional[str] = None
    keywords: Optional[str] = None
    site_name: Optional[str] = None
    type: Optional[str] = None


def create_app(storage: Optional[BaseStorage] = None, settings=None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage (Optional[BaseStorage]): Adapter to use; chosen from the
            environment when omitted.
        settings: Settings object; read from the environment when omitted.

    Returns:
        FastAPI: A fully configured application with its own RedirectManager.

    Why an app factory?
        - Enables per-test isolation in pytest.
        - Lets tests inject a memory store or a fake cloud backend.
        - Avoids accidental global state across workers/processes.
    """
    settings = settings or load_settings()

    # basic console logging unless the host process configured handlers
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    log = logging.getLogger("seo_redirect.api")

    app = FastAPI(
        title="SEO Redirect Platform",
        description="Manage redirect configurations that render Open-Graph landing pages",
        docs_url="/docs",
    )

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    storage = storage or get_storage(settings=settings)
    manager = RedirectManager(storage=storage, index_fallback=settings.FIRESTORE_INDEX_FALLBACK)
    app.state.settings = settings
    app.state.manager = manager

    log.info(
        "SEO redirect storage backend: %s (available=%s, multi_tenant=%s)",
        storage.name,
        storage.is_available(),
        manager.multi_tenant,
    )

    # ----------------------------------------------------------------
    # Error translation
    # ----------------------------------------------------------------
    @app.exception_handler(RedirectValidationError)
    def _validation_error(request: Request, exc: RedirectValidationError) -> JSONResponse:
        return JSONResponse({"detail": str(exc), "field": exc.field}, status_code=400)

    @app.exception_handler(RedirectNotFound)
    def _not_found(request: Request, exc: RedirectNotFound) -> JSONResponse:
        return JSONResponse({"detail": "Redirect not found"}, status_code=404)

    @app.exception_handler(Unauthorized)
    def _forbidden(request: Request, exc: Unauthorized) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=403)

    @app.exception_handler(StorageUnavailable)
    def _unavailable(request: Request, exc: StorageUnavailable) -> JSONResponse:
        return JSONResponse(
            {"detail": "Storage unavailable; the change was not saved", "error": str(exc)},
            status_code=503,
        )

    # ----------------------------------------------------------------
    # Utilities
    # ----------------------------------------------------------------
    def _public_base(request: Request) -> str:
        """Configured public origin, else the origin the request came in on."""
        return settings.PUBLIC_BASE_URL or str(request.base_url).rstrip("/")

    def _payload(req: RedirectPayload) -> Dict[str, Any]:
        return req.model_dump(exclude_unset=True)

    # Health check
    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/api/redirects")
    def list_redirects(user: str = Depends(get_current_user)) -> List[Dict[str, Any]]:
        """
        List the caller's redirect configurations, newest first.

        Storage outages do not fail this call: the list is empty and
        `/api/storage/status` reports `degraded: true`.
        """
        return [config.to_public() for config in manager.list_all(owner_id=user)]

    @app.post("/api/redirects", status_code=status.HTTP_201_CREATED)
    def create_redirect(req: RedirectPayload, user: str = Depends(get_current_user)) -> Dict[str, Any]:
        """
        Create a redirect configuration.

        Returns:
            dict: The stored configuration (camelCase keys).

        Raises:
            400 on validation errors, 503 if storage could not be written.
        """
        return manager.create(_payload(req), owner_id=user).to_public()

    @app.get("/api/redirects/{redirect_id}")
    def get_redirect(redirect_id: str, user: str = Depends(get_current_user)) -> Dict[str, Any]:
        config = manager.get_by_id(redirect_id, owner_id=user)
        if config is None:
            raise HTTPException(status_code=404, detail="Redirect not found")
        return config.to_public()

    @app.api_route("/api/redirects/{redirect_id}", methods=["PATCH", "PUT"])
    def update_redirect(
        redirect_id: str, req: RedirectPayload, user: str = Depends(get_current_user)
    ) -> Dict[str, Any]:
        """Partially update a configuration; only the fields sent are changed."""
        return manager.update(redirect_id, _payload(req), owner_id=user).to_public()

    @app.delete("/api/redirects/{redirect_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_redirect(redirect_id: str, user: str = Depends(get_current_user)) -> Response:
        if not manager.delete(redirect_id, owner_id=user):
            raise HTTPException(status_code=404, detail="Redirect not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/api/redirects/{redirect_id}/url")
    def redirect_url(redirect_id: str, request: Request, user: str = Depends(get_current_user)) -> Dict[str, str]:
        """Return the public landing-page URL the admin copies and shares."""
        config = manager.get_by_id(redirect_id, owner_id=user)
        if config is None:
            raise HTTPException(status_code=404, detail="Redirect not found")
        return {"id": config.id, "url": manager.build_public_url(_public_base(request), config)}

    @app.get("/api/storage/status")
    def storage_status(user: str = Depends(get_current_user)) -> Dict[str, Any]:
        return manager.storage_status()

    @app.post("/api/setup-storage")
    def setup_storage(user: str = Depends(get_current_user)) -> JSONResponse:
        """
        Create a JSONBin bin for the redirect collection and report its id.

        The id must then be configured as JSONBIN_BIN_ID.
        """
        if not settings.JSONBIN_API_KEY:
            return JSONResponse(
                {
                    "error": "JSONBin API key not configured",
                    "message": "Please add JSONBIN_API_KEY to your environment variables",
                },
                status_code=400,
            )
        # Provisioning never changes the bin the manager is using.
        bin_store = JSONBinStorage(
            api_key=settings.JSONBIN_API_KEY,
            api_base=settings.JSONBIN_API_BASE,
            session=storage.session if isinstance(storage, JSONBinStorage) else None,
        )
        try:
            bin_id = bin_store.create_bin()
        except StorageUnavailable as exc:
            log.error("JSONBin provisioning failed: %s", exc)
            return JSONResponse(
                {"error": "Failed to initialize cloud storage", "message": str(exc)},
                status_code=500,
            )
        return JSONResponse(
            {
                "success": True,
                "binId": bin_id,
                "message": "Cloud storage initialized successfully",
                "instructions": f"Set JSONBIN_BIN_ID={bin_id} in your environment",
            }
        )

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
