"""
Runtime configuration for the SEO Redirect platform
===================================================

Simple settings module that reads from environment variables (only here),
and exposes a `settings` object plus `load_settings()` for callers that need
a fresh read (the storage factory and the app factory read lazily so tests
can monkeypatch the environment).

Storage
-------
- SEO_STORAGE_BACKEND          : "auto" (default), "memory", "jsonbin" or "firestore"
- JSONBIN_API_KEY              : JSONBin master key
- JSONBIN_BIN_ID               : bin holding the redirect collection
- JSONBIN_API_BASE             : API root (default "https://api.jsonbin.io/v3")
- FIREBASE_PROJECT_ID          : Google Cloud project hosting Firestore
- SEO_FIRESTORE_COLLECTION     : collection name (default "redirects")
- SEO_FIRESTORE_INDEX_FALLBACK : "1" (default) to sort in memory when the
                                 composite (ownerId, createdAt) index is missing
- SEO_SEED_SAMPLES             : "1" to seed the in-memory store with samples

Application
-----------
- SEO_PUBLIC_BASE_URL : base of public landing URLs (default: request base URL)
- SEO_ADMIN_USERS     : "user:password,user2:password2" (default "admin:admin")
- SEO_LOG_LEVEL       : logging level name (default "INFO")
"""

import os
from typing import Dict

DEFAULT_JSONBIN_API_BASE = "https://api.jsonbin.io/v3"


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_users(raw: str) -> Dict[str, str]:
    users: Dict[str, str] = {}
    for pair in raw.split(","):
        name, sep, password = pair.strip().partition(":")
        if sep and name:
            users[name] = password
    return users


class _Settings:
    def __init__(self) -> None:
        # -------- Storage --------
        self.STORAGE_BACKEND: str = os.getenv("SEO_STORAGE_BACKEND", "auto").strip().lower()

        self.JSONBIN_API_KEY: str = os.getenv("JSONBIN_API_KEY", "")
        self.JSONBIN_BIN_ID: str = os.getenv("JSONBIN_BIN_ID", "")
        self.JSONBIN_API_BASE: str = os.getenv("JSONBIN_API_BASE", DEFAULT_JSONBIN_API_BASE).rstrip("/")

        self.FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "")
        self.FIRESTORE_COLLECTION: str = os.getenv("SEO_FIRESTORE_COLLECTION", "redirects")
        self.FIRESTORE_INDEX_FALLBACK: bool = _get_bool("SEO_FIRESTORE_INDEX_FALLBACK", True)

        self.SEED_SAMPLES: bool = _get_bool("SEO_SEED_SAMPLES", False)

        # -------- Application --------
        self.PUBLIC_BASE_URL: str = os.getenv("SEO_PUBLIC_BASE_URL", "").rstrip("/")
        self.ADMIN_USERS: Dict[str, str] = _parse_users(os.getenv("SEO_ADMIN_USERS", "admin:admin"))
        self.LOG_LEVEL: str = os.getenv("SEO_LOG_LEVEL", "INFO").strip().upper()

    @property
    def jsonbin_configured(self) -> bool:
        return bool(self.JSONBIN_API_KEY and self.JSONBIN_BIN_ID)


def load_settings() -> _Settings:
    """Read the environment now and return a fresh settings object."""
    return _Settings()


settings = load_settings()
