"""
Unit tests for the storage factory.

Settings are read at call time, so tests only need to monkeypatch the
environment before calling `get_storage()`.
"""

import pytest

from seo_redirect.config import load_settings
from seo_redirect.storage.firestore_storage import FirestoreStorage
from seo_redirect.storage.jsonbin_storage import JSONBinStorage
from seo_redirect.storage.memory_storage import MemoryStorage
from seo_redirect.storage.storage_factory import get_storage, resolve_backend

ENV_VARS = (
    "SEO_STORAGE_BACKEND",
    "JSONBIN_API_KEY",
    "JSONBIN_BIN_ID",
    "FIREBASE_PROJECT_ID",
    "SEO_SEED_SAMPLES",
    "SEO_FIRESTORE_COLLECTION",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_auto_without_credentials_is_memory():
    assert resolve_backend() == "memory"
    storage = get_storage()
    assert isinstance(storage, MemoryStorage)
    assert storage.read_all() == []


def test_auto_prefers_jsonbin_when_both_credentials_set(monkeypatch):
    monkeypatch.setenv("JSONBIN_API_KEY", "key")
    monkeypatch.setenv("JSONBIN_BIN_ID", "bin")
    assert resolve_backend() == "jsonbin"


def test_auto_needs_both_jsonbin_credentials(monkeypatch):
    monkeypatch.setenv("JSONBIN_API_KEY", "key")
    assert resolve_backend() == "memory"


def test_auto_prefers_firestore_when_project_set(monkeypatch):
    monkeypatch.setenv("FIREBASE_PROJECT_ID", "demo-project")
    monkeypatch.setenv("JSONBIN_API_KEY", "key")
    monkeypatch.setenv("JSONBIN_BIN_ID", "bin")
    assert resolve_backend() == "firestore"


def test_explicit_argument_overrides_environment(monkeypatch):
    monkeypatch.setenv("SEO_STORAGE_BACKEND", "jsonbin")
    assert resolve_backend("Memory") == "memory"


def test_unknown_backend(monkeypatch):
    monkeypatch.setenv("SEO_STORAGE_BACKEND", "nosuch")
    with pytest.raises(ValueError, match="Unknown storage backend"):
        get_storage()


def test_memory_seeded_with_samples(monkeypatch):
    monkeypatch.setenv("SEO_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("SEO_SEED_SAMPLES", "1")
    storage = get_storage()
    assert len(storage.read_all()) == 3


def test_jsonbin_backend_passes_credentials_and_session(monkeypatch, jsonbin_session):
    monkeypatch.setenv("SEO_STORAGE_BACKEND", "jsonbin")
    monkeypatch.setenv("JSONBIN_API_KEY", "key")
    monkeypatch.setenv("JSONBIN_BIN_ID", "bin-test")
    storage = get_storage(session=jsonbin_session)
    assert isinstance(storage, JSONBinStorage)
    assert storage.is_available() is True
    assert storage.read_all() == []
    assert jsonbin_session.calls[0][2]["X-Master-Key"] == "key"


def test_jsonbin_backend_without_credentials_is_unavailable(monkeypatch, caplog):
    monkeypatch.setenv("SEO_STORAGE_BACKEND", "jsonbin")
    storage = get_storage()
    assert isinstance(storage, JSONBinStorage)
    assert storage.is_available() is False
    assert "not configured" in caplog.text


def test_firestore_backend_with_injected_client(monkeypatch, firestore_client):
    monkeypatch.setenv("SEO_STORAGE_BACKEND", "firestore")
    monkeypatch.setenv("SEO_FIRESTORE_COLLECTION", "seo")
    storage = get_storage(client=firestore_client)
    assert isinstance(storage, FirestoreStorage)
    assert storage.is_available() is True
    assert storage.collection_name == "seo"


def test_firestore_backend_without_project_is_unavailable(monkeypatch):
    monkeypatch.setenv("SEO_STORAGE_BACKEND", "firestore")
    storage = get_storage()
    assert isinstance(storage, FirestoreStorage)
    assert storage.is_available() is False


def test_settings_object_can_be_passed_directly():
    settings = load_settings()
    settings.STORAGE_BACKEND = "jsonbin"
    assert resolve_backend(settings=settings) == "jsonbin"
