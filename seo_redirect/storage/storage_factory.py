"""
Storage factory – switch storage backend from config
====================================================

Centralizes selection of the storage backend so the rest of the app stays
ignorant of where redirect data lives. Settings are read **at call time** so
tests can monkeypatch the environment, and the Firestore client library is
imported only when that backend is selected.

Backends
--------
- "memory"    : MemoryStorage, optionally seeded with the sample configurations
- "jsonbin"   : JSONBinStorage (global mode, whole collection in one bin)
- "firestore" : FirestoreStorage (multi-tenant, one document per redirect)
- "auto"      : firestore if FIREBASE_PROJECT_ID is set, else jsonbin if both
                JSONBin credentials are set, else memory

Selecting "jsonbin" or "firestore" explicitly without credentials does not
fail: the adapter reports itself unavailable, reads degrade to empty results
and writes fail with StorageUnavailable.
"""

import logging
from typing import Optional

from ..config import load_settings
from ..samples import sample_records
from .base import BaseStorage
from .jsonbin_storage import JSONBinStorage
from .memory_storage import MemoryStorage

log = logging.getLogger(__name__)

BACKENDS = ("auto", "memory", "jsonbin", "firestore")


def resolve_backend(backend: Optional[str] = None, settings=None) -> str:
    """Return the concrete backend name for `backend` (or SEO_STORAGE_BACKEND)."""
    settings = settings or load_settings()
    be = (backend or settings.STORAGE_BACKEND or "auto").strip().lower()
    if be not in BACKENDS:
        raise ValueError(f"Unknown storage backend: {be!r}")
    if be != "auto":
        return be
    if settings.FIREBASE_PROJECT_ID:
        return "firestore"
    if settings.jsonbin_configured:
        return "jsonbin"
    return "memory"


def get_storage(backend: Optional[str] = None, settings=None, **kwargs) -> BaseStorage:
    """
    Return a storage adapter based on configuration.

    Parameters
    ----------
    backend : str, optional
        One of BACKENDS. If omitted, reads SEO_STORAGE_BACKEND.
    settings : optional
        Settings object; a fresh one is loaded from the environment when omitted.
    kwargs : dict
        Extra constructor arguments (e.g. `session=` for JSONBin, `client=` for Firestore).

    Returns
    -------
    BaseStorage-compatible instance
    """
    settings = settings or load_settings()
    be = resolve_backend(backend, settings)
    log.info("Selected storage backend: %s", be)

    if be == "memory":
        return MemoryStorage(records=sample_records() if settings.SEED_SAMPLES else None)

    if be == "jsonbin":
        if not settings.jsonbin_configured:
            log.warning("JSONBin credentials not configured; storage will report unavailable")
        return JSONBinStorage(
            api_key=settings.JSONBIN_API_KEY,
            bin_id=settings.JSONBIN_BIN_ID,
            api_base=settings.JSONBIN_API_BASE,
            **kwargs,
        )

    # Local import keeps google-cloud-firestore off the import path unless needed.
    from .firestore_storage import FirestoreStorage

    if not settings.FIREBASE_PROJECT_ID and "client" not in kwargs:
        log.warning("FIREBASE_PROJECT_ID not set; Firestore storage will report unavailable")
    return FirestoreStorage(
        project=settings.FIREBASE_PROJECT_ID,
        collection=settings.FIRESTORE_COLLECTION,
        **kwargs,
    )
