"""
RedirectManager module for the SEO Redirect platform.

Responsibilities:
    - Own the RedirectConfig lifecycle: create, read, partial update, delete
    - Validate required fields before any storage call
    - Enforce ownership in multi-tenant mode (existence checked before ownership)
    - Generate ids and maintain createdAt/updatedAt
    - Build the public landing-page URL
    - Apply one failure policy: degrade on read, surface on write

Design notes:
    - Exactly one storage adapter is injected (memory, JSONBin or Firestore);
      multi-tenant mode follows the adapter unless overridden.
    - Reads that hit StorageUnavailable return an empty result, log a warning
      and flag the manager as degraded; writes log and re-raise.
    - Listing asks for the ordered query first. If the adapter raises
      IndexUnavailable the manager re-reads unordered (owner filter only) and
      sorts by createdAt descending itself, giving the same contents and order.
    - Clock and id factory are injectable for deterministic tests.

LLM Prompt Example:
    "Show how a repository can centralize a degrade-on-read / fail-on-write
    policy over interchangeable storage adapters, including a client-side
    sort fallback when a server-side composite index is missing."
"""

import contextlib
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union
from urllib.parse import urlencode, urlparse

from pydantic import ValidationError as ModelValidationError

from ..errors import (
    IndexUnavailable,
    RedirectNotFound,
    RedirectValidationError,
    StorageUnavailable,
    Unauthorized,
)
from ..models import DEFAULT_TYPE, EDITABLE_FIELDS, REDIRECT_TYPES, RedirectConfig, RedirectFields
from ..storage.base import BaseStorage, Record, sort_newest_first
from .ids import new_redirect_id

log = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "target_url")

# Accept both attribute names and their camelCase aliases on input.
_FIELD_NAMES: Dict[str, str] = {}
for _name in EDITABLE_FIELDS:
    _FIELD_NAMES[_name] = _name
    _FIELD_NAMES[RedirectFields.model_fields[_name].alias or _name] = _name

# Owned by the repository; silently dropped when a client sends them.
_MANAGED_KEYS = {"id", "owner_id", "ownerId", "created_at", "createdAt", "updated_at", "updatedAt"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_public_url(base_url: str, config: Union[RedirectFields, Mapping[str, Any]]) -> str:
    """
    Build the public landing-page URL for a configuration.

    Format:
        {base_url}/u?title=..&desc=..&url=..[&image=..][&keywords=..][&site_name=..][&type=..]

    The three mandatory parameters always come first; optional ones follow in
    the fixed order image, keywords, site_name, type and only when non-empty.
    Values use standard query-string escaping (`urlencode`).

    Args:
        base_url: Site origin, e.g. "https://seo.example.com". A trailing slash is ignored.
        config: A RedirectConfig/RedirectFields, or a mapping with camelCase or
            snake_case keys.

    Returns:
        str: The landing-page URL.

    Example:
        >>> build_public_url("https://h", {"title": "A", "description": "B", "targetUrl": "https://x"})
        'https://h/u?title=A&desc=B&url=https%3A%2F%2Fx'
    """
    if not isinstance(config, RedirectFields):
        config = RedirectFields.model_validate(dict(config))
    params = [
        ("title", config.title),
        ("desc", config.description),
        ("url", config.target_url),
    ]
    optional = (
        ("image", config.image),
        ("keywords", config.keywords),
        ("site_name", config.site_name),
        ("type", config.type),
    )
    params.extend((key, value) for key, value in optional if value)
    return f"{base_url.rstrip('/')}/u?{urlencode(params)}"


class RedirectManager:
    """
    Domain-level CRUD manager for redirect configurations.

    In multi-tenant mode every operation takes the caller's `owner_id`; in
    global mode (`multi_tenant=False`) it is ignored and never stored.
    """

    def __init__(
        self,
        storage: BaseStorage,
        multi_tenant: Optional[bool] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
        index_fallback: bool = True,
    ):
        """
        Args:
            storage (BaseStorage): Active storage adapter.
            multi_tenant (Optional[bool]): Override the adapter's ownership mode.
            clock (Optional[Callable]): Returns "now" as an aware datetime.
            id_factory (Optional[Callable]): Returns a fresh redirect id.
            index_fallback (bool): Sort in memory when the ordered query is unavailable.
        """
        self.storage = storage
        self.multi_tenant = storage.multi_tenant if multi_tenant is None else multi_tenant
        self.clock = clock or _utcnow
        self.id_factory = id_factory or new_redirect_id
        self.index_fallback = index_fallback
        self.degraded = False
        self.last_error: Optional[str] = None

    build_public_url = staticmethod(build_public_url)

    # ---------------------------------------------------------------------
    # Failure policy
    # ---------------------------------------------------------------------
    def _degrade(self, action: str, exc: StorageUnavailable) -> None:
        self.degraded = True
        self.last_error = str(exc)
        log.warning("Storage %r unavailable during %s; serving empty result: %s", self.storage.name, action, exc)

    def _healthy(self) -> None:
        self.degraded = False
        self.last_error = None

    @contextlib.contextmanager
    def _writing(self, action: str) -> Iterator[None]:
        """Surface storage failures on write paths after recording them."""
        try:
            yield
        except StorageUnavailable as exc:
            self.degraded = True
            self.last_error = str(exc)
            log.error("Storage %r failed during %s: %s", self.storage.name, action, exc)
            raise
        self._healthy()

    # ---------------------------------------------------------------------
    # Validation helpers
    # ---------------------------------------------------------------------
    def _require_owner(self, owner_id: Optional[str]) -> None:
        if self.multi_tenant and not owner_id:
            raise Unauthorized("An owner id is required in multi-tenant mode")

    def _scope(self, owner_id: Optional[str]) -> Optional[str]:
        return owner_id if self.multi_tenant else None

    def _normalize(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Map input keys to attribute names and clean values.

        Strings are stripped; empty optional fields become None; required
        fields keep "" so validation can report them.

        Raises:
            RedirectValidationError: unknown key or non-string value.
        """
        values: Dict[str, Any] = {}
        for key, value in fields.items():
            if key in _MANAGED_KEYS:
                continue
            name = _FIELD_NAMES.get(key)
            if name is None:
                raise RedirectValidationError(f"Unknown field: {key}", field=key)
            if value is not None and not isinstance(value, str):
                raise RedirectValidationError(f"{key} must be a string", field=name)
            value = (value or "").strip()
            values[name] = value if (value or name in REQUIRED_FIELDS) else None
        return values

    def _validate_url(self, url: str, field: str) -> None:
        """
        Validate that a URL has an http/https scheme and a netloc.

        Raises:
            RedirectValidationError: If the URL is malformed.
        """
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise RedirectValidationError("Invalid URL format", field=field)

    def _validate(self, values: Dict[str, Any], partial: bool = False) -> None:
        """Check required fields, target URL and type. `partial` checks only present keys."""
        for name in REQUIRED_FIELDS:
            if partial and name not in values:
                continue
            if not values.get(name):
                raise RedirectValidationError(f"{name} is required", field=name)
        if "target_url" in values:
            self._validate_url(values["target_url"], "target_url")
        kind = values.get("type")
        if kind is not None and kind not in REDIRECT_TYPES:
            raise RedirectValidationError(
                f"type must be one of {', '.join(REDIRECT_TYPES)}", field="type"
            )

    def _parse(self, raw: Record) -> Optional[RedirectConfig]:
        try:
            return RedirectConfig.model_validate(raw)
        except ModelValidationError as exc:
            log.warning("Ignoring malformed redirect record %r: %s", raw.get("id"), exc)
            return None

    def _load_owned(self, redirect_id: str, owner_id: Optional[str]) -> RedirectConfig:
        """Fetch a record for mutation: existence first, then ownership."""
        raw = self.storage.read_one(redirect_id)
        config = self._parse(raw) if raw is not None else None
        if config is None:
            raise RedirectNotFound(f"Redirect {redirect_id!r} not found")
        if self.multi_tenant and config.owner_id != owner_id:
            raise Unauthorized(f"Redirect {redirect_id!r} belongs to another owner")
        return config

    # ---------------------------------------------------------------------
    # Reads (degrade on failure)
    # ---------------------------------------------------------------------
    def _read_sorted(self, scope: Optional[str]) -> List[Record]:
        try:
            return self.storage.read_all(scope, ordered=True)
        except IndexUnavailable as exc:
            if not self.index_fallback:
                raise
            log.info("Ordered query unavailable on %r (%s); sorting in memory", self.storage.name, exc)
            return sort_newest_first(self.storage.read_all(scope, ordered=False))

    def list_all(self, owner_id: Optional[str] = None) -> List[RedirectConfig]:
        """
        Return the configurations visible to the caller, newest first.

        In multi-tenant mode `owner_id=None` is the unscoped all-records view
        used by public consumers such as a sitemap.

        Never raises for storage unavailability: returns [] and marks the
        manager as degraded.
        """
        try:
            raw = self._read_sorted(self._scope(owner_id))
        except StorageUnavailable as exc:
            self._degrade("list", exc)
            return []
        self._healthy()
        return [c for c in (self._parse(r) for r in raw) if c is not None]

    def get_by_id(self, redirect_id: str, owner_id: Optional[str] = None) -> Optional[RedirectConfig]:
        """
        Return a configuration, or None when it is missing, owned by someone
        else (existence is not leaked), or storage is unavailable.
        """
        if self.multi_tenant and not owner_id:
            return None
        try:
            raw = self.storage.read_one(redirect_id, scope=self._scope(owner_id))
        except StorageUnavailable as exc:
            self._degrade("get", exc)
            return None
        self._healthy()
        return self._parse(raw) if raw is not None else None

    # ---------------------------------------------------------------------
    # Writes (surface failures)
    # ---------------------------------------------------------------------
    def create(self, fields: Mapping[str, Any], owner_id: Optional[str] = None) -> RedirectConfig:
        """
        Validate and persist a new configuration.

        Rules:
            - title, description, targetUrl are required; targetUrl must be http(s).
            - type defaults to "website" and must be a known type.
            - id, createdAt, updatedAt, ownerId are assigned here, never taken from input.

        Raises:
            RedirectValidationError: before any storage call.
            Unauthorized: multi-tenant mode without an owner id.
            StorageUnavailable: the write did not reach storage.
        """
        self._require_owner(owner_id)
        values = self._normalize(fields)
        if not values.get("type"):
            values["type"] = DEFAULT_TYPE
        self._validate(values)

        now = self.clock()
        config = RedirectConfig(
            id=self.id_factory(),
            owner_id=owner_id if self.multi_tenant else None,
            created_at=now,
            updated_at=now,
            **values,
        )
        with self._writing("create"):
            self.storage.write_one(config.to_record())
        log.info("Created redirect %s -> %s", config.id, config.target_url)
        return config

    def update(self, redirect_id: str, partial: Mapping[str, Any], owner_id: Optional[str] = None) -> RedirectConfig:
        """
        Merge the provided fields into an existing configuration.

        Only keys present in `partial` change; updatedAt is always refreshed.

        Raises:
            RedirectValidationError: a provided field is empty or malformed.
            RedirectNotFound: the id does not exist.
            Unauthorized: the id exists but belongs to another owner.
            StorageUnavailable: the read or write did not reach storage.
        """
        self._require_owner(owner_id)
        changes = self._normalize(partial)
        if "type" in changes and not changes["type"]:
            changes["type"] = DEFAULT_TYPE
        self._validate(changes, partial=True)

        with self._writing("update"):
            current = self._load_owned(redirect_id, owner_id)
            updated = current.model_copy(update={**changes, "updated_at": max(self.clock(), current.created_at)})
            patch = {RedirectFields.model_fields[name].alias: value for name, value in changes.items()}
            patch["updatedAt"] = updated.updated_at
            if self.storage.update_one(redirect_id, patch) is None:
                raise RedirectNotFound(f"Redirect {redirect_id!r} not found")
        log.info("Updated redirect %s (%s)", redirect_id, ", ".join(sorted(changes)) or "touch")
        return updated

    def delete(self, redirect_id: str, owner_id: Optional[str] = None) -> bool:
        """
        Hard-delete a configuration.

        Returns:
            bool: True if a record was removed, False if there was nothing to remove.

        Raises:
            Unauthorized: the id exists but belongs to another owner.
            StorageUnavailable: the read or write did not reach storage.
        """
        self._require_owner(owner_id)
        with self._writing("delete"):
            if self.multi_tenant:
                try:
                    self._load_owned(redirect_id, owner_id)
                except RedirectNotFound:
                    return False
            removed = self.storage.delete_one(redirect_id)
        if removed:
            log.info("Deleted redirect %s", redirect_id)
        return removed

    # ---------------------------------------------------------------------
    # Status
    # ---------------------------------------------------------------------
    def storage_status(self) -> Dict[str, Any]:
        """Report the active backend and whether the last call degraded."""
        return {
            "backend": self.storage.name,
            "available": self.storage.is_available(),
            "multiTenant": self.multi_tenant,
            "degraded": self.degraded,
            "lastError": self.last_error,
        }
