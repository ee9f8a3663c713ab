"""
Global pytest fixtures for the SEO Redirect test suite.

Responsibilities:
    - Provide isolated in-memory storages (global and multi-tenant)
    - Provide RedirectManager fixtures with a deterministic, ticking clock
    - Provide in-test fakes for the JSONBin HTTP API (a requests.Session
      stand-in) and for the Firestore client, so no test touches the network
    - Provide FastAPI TestClients built through the app factory

LLM Prompt Example:
    "Show how to structure pytest fixtures so cloud-backed adapters can be
    exercised against faithful in-memory fakes."
"""

import copy
import json as jsonlib
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
import requests
from fastapi.testclient import TestClient
from google.api_core import exceptions as gexc
from google.cloud import firestore

from main import create_app
from seo_redirect.config import load_settings
from seo_redirect.manager.redirect_manager import RedirectManager
from seo_redirect.storage.jsonbin_storage import JSONBinStorage
from seo_redirect.storage.memory_storage import MemoryStorage

ADMIN_USERS = {"admin": "admin", "alice": "pw-alice", "bob": "pw-bob"}


# ---------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------

class TickingClock:
    """Deterministic clock: every call returns a later instant."""

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


# ---------------------------------------------------------------------
# JSONBin fake
# ---------------------------------------------------------------------

class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or jsonlib.dumps(payload)

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeJSONBinSession:
    """
    Minimal stand-in for `requests.Session` speaking the JSONBin v3 API.

    Bodies go through a real JSON round-trip, so non-serializable payloads
    fail here exactly as they would with requests.
    """

    def __init__(self):
        self.bins: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_with: Any = None  # an exception to raise or a FakeResponse to return

    def _failure(self) -> Optional[FakeResponse]:
        if isinstance(self.fail_with, Exception):
            raise self.fail_with
        return self.fail_with

    @staticmethod
    def _bin_id(url: str) -> str:
        return url.split("/b/", 1)[1].split("/")[0]

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> FakeResponse:
        self.calls.append(("GET", url, headers))
        failure = self._failure()
        if failure is not None:
            return failure
        bin_id = self._bin_id(url)
        if bin_id not in self.bins:
            return FakeResponse(404, {"message": "Bin not found or it doesn't belong to your account"})
        return FakeResponse(200, {"record": copy.deepcopy(self.bins[bin_id]), "metadata": {"id": bin_id}})

    def put(self, url: str, json: Any = None, headers: Optional[Dict[str, str]] = None) -> FakeResponse:
        self.calls.append(("PUT", url, headers))
        failure = self._failure()
        if failure is not None:
            return failure
        bin_id = self._bin_id(url)
        if bin_id not in self.bins:
            return FakeResponse(404, {"message": "Bin not found"})
        self.bins[bin_id] = jsonlib.loads(jsonlib.dumps(json))
        return FakeResponse(200, {"record": json, "metadata": {"parentId": bin_id}})

    def post(self, url: str, json: Any = None, headers: Optional[Dict[str, str]] = None) -> FakeResponse:
        self.calls.append(("POST", url, headers))
        failure = self._failure()
        if failure is not None:
            return failure
        bin_id = f"bin{len(self.bins) + 1:04d}"
        self.bins[bin_id] = jsonlib.loads(jsonlib.dumps(json))
        name = (headers or {}).get("X-Bin-Name")
        return FakeResponse(200, {"record": json, "metadata": {"id": bin_id, "name": name, "private": True}})


@pytest.fixture
def jsonbin_session() -> FakeJSONBinSession:
    session = FakeJSONBinSession()
    session.bins["bin-test"] = {"redirects": [], "lastUpdated": "2024-01-01T00:00:00+00:00"}
    return session


@pytest.fixture
def jsonbin_storage(jsonbin_session) -> JSONBinStorage:
    return JSONBinStorage(api_key="test-key", bin_id="bin-test", session=jsonbin_session)


# ---------------------------------------------------------------------
# Firestore fake
# ---------------------------------------------------------------------

class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]):
        self.id = doc_id
        self._data = copy.deepcopy(data)
        self.exists = data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data)


class FakeDocumentRef:
    def __init__(self, collection: "FakeCollection", doc_id: str):
        self.collection = collection
        self.id = doc_id

    def get(self) -> FakeSnapshot:
        self.collection.client.check()
        return FakeSnapshot(self.id, self.collection.docs.get(self.id))

    def create(self, data: Dict[str, Any]) -> None:
        self.collection.client.check()
        if self.id in self.collection.docs:
            raise gexc.AlreadyExists(f"Document already exists: {self.id}")
        self.collection.docs[self.id] = copy.deepcopy(data)

    def update(self, data: Dict[str, Any]) -> None:
        self.collection.client.check()
        if self.id not in self.collection.docs:
            raise gexc.NotFound(f"No document to update: {self.id}")
        self.collection.docs[self.id].update(copy.deepcopy(data))

    def delete(self) -> None:
        self.collection.client.check()
        self.collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection: "FakeCollection", filters: tuple = (), order: Optional[tuple] = None):
        self._collection = collection
        self.filters = filters
        self.order = order

    def where(self, filter=None) -> "FakeQuery":
        return FakeQuery(self._collection, self.filters + (filter,), self.order)

    def order_by(self, field_path: str, direction: str = firestore.Query.ASCENDING) -> "FakeQuery":
        return FakeQuery(self._collection, self.filters, (field_path, direction))

    def _matches(self, data: Dict[str, Any]) -> bool:
        for f in self.filters:
            assert f.op_string == "==", "fake supports equality filters only"
            if data.get(f.field_path) != f.value:
                return False
        return True

    def stream(self):
        client = self._collection.client
        client.check()
        if self.order and self.filters and not client.composite_index:
            raise gexc.FailedPrecondition(
                "The query requires an index. You can create it here: https://console.firebase.google.com/..."
            )
        items = [(doc_id, data) for doc_id, data in self._collection.docs.items() if self._matches(data)]
        if self.order:
            field_path, direction = self.order
            items.sort(key=lambda item: item[1][field_path], reverse=direction == firestore.Query.DESCENDING)
        return iter([FakeSnapshot(doc_id, data) for doc_id, data in items])


class FakeCollection(FakeQuery):
    def __init__(self, client: "FakeFirestoreClient", name: str):
        self.client = client
        self.name = name
        self.docs: Dict[str, Dict[str, Any]] = {}
        super().__init__(self)

    def document(self, doc_id: str) -> FakeDocumentRef:
        return FakeDocumentRef(self, doc_id)


class FakeFirestoreClient:
    """
    In-memory Firestore stand-in.

    - `composite_index=False` makes filtered + ordered queries fail with
      FAILED_PRECONDITION, as Firestore does before the index is built.
    - Unordered queries return documents in insertion order.
    - `fail_with` makes every call raise the given exception.
    """

    def __init__(self, composite_index: bool = False):
        self.composite_index = composite_index
        self.fail_with: Optional[Exception] = None
        self.collections: Dict[str, FakeCollection] = {}

    def check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def collection(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        return self.collections[name]


@pytest.fixture
def firestore_client() -> FakeFirestoreClient:
    return FakeFirestoreClient()


# ---------------------------------------------------------------------
# Storage / manager fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def storage() -> MemoryStorage:
    """Fresh global-mode in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def tenant_storage() -> MemoryStorage:
    """Fresh multi-tenant in-memory storage."""
    return MemoryStorage(multi_tenant=True)


@pytest.fixture
def manager(storage, clock) -> RedirectManager:
    return RedirectManager(storage=storage, clock=clock)


@pytest.fixture
def tenant_manager(tenant_storage, clock) -> RedirectManager:
    return RedirectManager(storage=tenant_storage, clock=clock)


@pytest.fixture
def valid_fields() -> Dict[str, str]:
    return {
        "title": "Premium Leather Wallet",
        "description": "Handcrafted from full-grain leather.",
        "targetUrl": "https://example.com/products/leather-wallet",
    }


# ---------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def app_settings():
    settings = load_settings()
    settings.ADMIN_USERS = dict(ADMIN_USERS)
    settings.PUBLIC_BASE_URL = "https://seo.example.com"
    settings.JSONBIN_API_KEY = ""
    return settings


@pytest.fixture
def client(app_settings) -> TestClient:
    """TestClient over a fresh app with a global-mode memory store."""
    return TestClient(create_app(storage=MemoryStorage(), settings=app_settings))


@pytest.fixture
def tenant_client(app_settings) -> TestClient:
    """TestClient over a fresh app with a multi-tenant memory store."""
    return TestClient(create_app(storage=MemoryStorage(multi_tenant=True), settings=app_settings))


@pytest.fixture
def network_down() -> requests.ConnectionError:
    return requests.ConnectionError("Failed to establish a new connection")


@pytest.fixture
def make_response():
    """Build canned JSONBin responses for `FakeJSONBinSession.fail_with`."""
    return FakeResponse
