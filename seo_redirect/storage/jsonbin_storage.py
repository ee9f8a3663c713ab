"""
JSONBinStorage – blob-backed storage for the SEO Redirect platform
=================================================================

Persists the whole redirect collection as a single JSON document in a
JSONBin.io bin. It implements the `BaseStorage` interface, so it can replace
the in-memory store without touching RedirectManager.

Document shape
--------------
    {
        "redirects": [ {<record>}, ... ],
        "lastUpdated": "2024-01-15T10:00:00+00:00"
    }

Key Design Points
-----------------
- **Read-modify-write**: every mutation GETs the latest blob, changes the list
  in memory and PUTs the whole document back. There is no partial write and no
  version check, so two overlapping writers lose the earlier write
  (last-writer-wins). Acceptable for a single admin; not a guarantee.
- **Availability**: without both an API key and a bin id the adapter reports
  `is_available() == False` and raises `StorageUnavailable` from every call
  instead of attempting network I/O.
- **Transport**: a `requests.Session` (injectable for tests). No retries and
  no timeout beyond the transport defaults.
- **Provisioning**: `create_bin()` creates an empty bin and returns its id,
  which then goes into `JSONBIN_BIN_ID`.

Example
-------
>>> storage = JSONBinStorage(api_key="$2a$10$...", bin_id="65a1f0...")
>>> storage.write_one({"id": "abc", "title": "T", ...})
>>> [r["id"] for r in storage.read_all()]
['abc']
"""

import copy
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from ..config import DEFAULT_JSONBIN_API_BASE
from ..errors import StorageUnavailable
from .base import BaseStorage, Record, sort_newest_first

log = logging.getLogger(__name__)

DEFAULT_BIN_NAME = "seo-redirects-data"


def _jsonable(value: Any) -> Any:
    """Convert datetimes (recursively) into ISO strings for the JSON body."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


class JSONBinStorage(BaseStorage):
    """JSONBin.io implementation of the redirect storage contract.

    Parameters
    ----------
    api_key : str
        JSONBin master key (sent as `X-Master-Key`).
    bin_id : str
        Id of the bin holding the collection.
    api_base : str
        API root, default "https://api.jsonbin.io/v3".
    session : requests.Session, optional
        Pre-built session; a new one is created when omitted.
    """

    name = "jsonbin"
    multi_tenant = False

    def __init__(
        self,
        api_key: str = "",
        bin_id: str = "",
        api_base: str = DEFAULT_JSONBIN_API_BASE,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.bin_id = bin_id
        self.api_base = api_base.rstrip("/")
        self.session = session or requests.Session()

    # ---- Internal helpers -------------------------------------------------

    def _headers(self, **extra: str) -> Dict[str, str]:
        headers = {"X-Master-Key": self.api_key, "Content-Type": "application/json"}
        headers.update(extra)
        return headers

    def _require_configured(self) -> None:
        if not self.is_available():
            raise StorageUnavailable("JSONBin credentials not configured")

    def _check(self, response: requests.Response, action: str) -> None:
        if not response.ok:
            raise StorageUnavailable(
                f"JSONBin {action} failed: HTTP {response.status_code} {response.text[:200]}"
            )

    def _read_blob(self) -> List[Record]:
        """GET the latest version of the bin and return its redirect list."""
        self._require_configured()
        try:
            response = self.session.get(f"{self.api_base}/b/{self.bin_id}/latest", headers=self._headers())
            self._check(response, "read")
            payload = response.json()
        except requests.RequestException as exc:
            raise StorageUnavailable(f"JSONBin read failed: {exc}") from exc
        except ValueError as exc:
            raise StorageUnavailable(f"JSONBin returned invalid JSON: {exc}") from exc
        document = (payload.get("record") or {}) if isinstance(payload, dict) else None
        entries = (document.get("redirects") or []) if isinstance(document, dict) else None
        if not isinstance(entries, list):
            raise StorageUnavailable(f"JSONBin bin {self.bin_id} has an unexpected shape")
        kept = [r for r in entries if isinstance(r, dict)]
        if len(kept) != len(entries):
            log.warning("Ignoring %d non-object entries in JSONBin bin %s", len(entries) - len(kept), self.bin_id)
        return kept

    def _write_blob(self, redirects: List[Record]) -> None:
        """PUT the whole collection back, stamping lastUpdated."""
        self._require_configured()
        body = {
            "redirects": _jsonable(redirects),
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }
        try:
            response = self.session.put(f"{self.api_base}/b/{self.bin_id}", json=body, headers=self._headers())
            self._check(response, "write")
        except requests.RequestException as exc:
            raise StorageUnavailable(f"JSONBin write failed: {exc}") from exc
        log.debug("JSONBin bin %s rewritten with %d redirects", self.bin_id, len(redirects))

    @staticmethod
    def _in_scope(record: Record, scope: Optional[str]) -> bool:
        return scope is None or record.get("ownerId") == scope

    # ---- Contract methods -------------------------------------------------

    def is_available(self) -> bool:
        return bool(self.api_key and self.bin_id)

    def read_all(self, scope: Optional[str] = None, ordered: bool = True) -> List[Record]:
        records = [r for r in self._read_blob() if self._in_scope(r, scope)]
        return sort_newest_first(records) if ordered else records

    def read_one(self, record_id: str, scope: Optional[str] = None) -> Optional[Record]:
        for record in self._read_blob():
            if record.get("id") == record_id:
                return record if self._in_scope(record, scope) else None
        return None

    def write_one(self, record: Record) -> Record:
        redirects = self._read_blob()
        if any(r.get("id") == record["id"] for r in redirects):
            raise StorageUnavailable(f"Duplicate redirect id {record['id']!r}")
        redirects.append(copy.deepcopy(record))
        self._write_blob(redirects)
        return record

    def update_one(self, record_id: str, partial: Record) -> Optional[Record]:
        redirects = self._read_blob()
        for index, record in enumerate(redirects):
            if record.get("id") == record_id:
                merged = {**record, **_jsonable(partial)}
                redirects[index] = merged
                self._write_blob(redirects)
                return merged
        return None

    def delete_one(self, record_id: str) -> bool:
        redirects = self._read_blob()
        remaining = [r for r in redirects if r.get("id") != record_id]
        if len(remaining) == len(redirects):
            return False
        self._write_blob(remaining)
        return True

    # ---- Provisioning -----------------------------------------------------

    def create_bin(self, name: str = DEFAULT_BIN_NAME) -> str:
        """Create an empty bin for the collection and return its id.

        Only the API key is required. The new id is also stored on the
        instance so the adapter becomes available immediately.

        Raises
        ------
        StorageUnavailable
            No API key, transport error, or a non-2xx response.
        """
        if not self.api_key:
            raise StorageUnavailable("JSONBin API key not configured")
        body = {"redirects": [], "lastUpdated": datetime.now(timezone.utc).isoformat()}
        try:
            response = self.session.post(
                f"{self.api_base}/b", json=body, headers=self._headers(**{"X-Bin-Name": name})
            )
            self._check(response, "bin creation")
            bin_id = response.json()["metadata"]["id"]
        except requests.RequestException as exc:
            raise StorageUnavailable(f"JSONBin bin creation failed: {exc}") from exc
        except (ValueError, KeyError, TypeError) as exc:
            raise StorageUnavailable(f"Unexpected JSONBin response: {exc}") from exc
        log.info("Created JSONBin bin %s (%s)", bin_id, name)
        self.bin_id = bin_id
        return bin_id
