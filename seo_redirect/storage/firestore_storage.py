"""
FirestoreStorage – document-store backend for the SEO Redirect platform
======================================================================

One Firestore document per redirect in a single collection (default
"redirects"). The document id is the redirect id; every document carries an
`ownerId`, so this backend runs in multi-tenant mode.

Key Design Points
-----------------
- **Scoped reads**: the owner filter is applied server-side with a
  `FieldFilter("ownerId", "==", scope)`.
- **Ordering**: `ownerId ==` combined with `order_by("createdAt", DESCENDING)`
  needs a composite index. When Firestore answers FAILED_PRECONDITION for the
  ordered query, the adapter raises `IndexUnavailable`; RedirectManager then
  re-queries unordered and sorts in memory.
- **No transactions**: `update_one` reads then updates. If the update call
  fails mid-flight the remote state is unknown and callers must re-fetch.
- **Availability**: the client is built from `project` with Application
  Default Credentials. Missing credentials leave the adapter unavailable
  instead of raising at import or construction time.

Index definition
----------------
    collection: redirects
    fields:     ownerId ASC, createdAt DESC
"""

import logging
from typing import List, Optional

from google.api_core import exceptions as gexc
from google.auth.exceptions import DefaultCredentialsError
from google.cloud import firestore
from google.cloud.firestore_v1 import FieldFilter

from ..errors import IndexUnavailable, StorageUnavailable
from .base import BaseStorage, Record

log = logging.getLogger(__name__)


class FirestoreStorage(BaseStorage):
    """Cloud Firestore implementation of the redirect storage contract.

    Parameters
    ----------
    client : firestore.Client, optional
        Ready client (tests inject a fake). Built from `project` when omitted.
    project : str
        Google Cloud project id.
    collection : str
        Collection holding redirect documents.
    """

    name = "firestore"
    multi_tenant = True

    def __init__(self, client=None, project: str = "", collection: str = "redirects") -> None:
        self.collection_name = collection
        self._client = client
        if self._client is None and project:
            try:
                self._client = firestore.Client(project=project)
            except DefaultCredentialsError as exc:
                log.warning("Firestore credentials not found for project %s: %s", project, exc)

    # ---- Internal helpers -------------------------------------------------

    def _collection(self):
        if self._client is None:
            raise StorageUnavailable("Firestore is not configured")
        return self._client.collection(self.collection_name)

    @staticmethod
    def _to_record(snapshot) -> Record:
        data = snapshot.to_dict() or {}
        data["id"] = snapshot.id
        return data

    @staticmethod
    def _in_scope(record: Record, scope: Optional[str]) -> bool:
        return scope is None or record.get("ownerId") == scope

    # ---- Contract methods -------------------------------------------------

    def is_available(self) -> bool:
        return self._client is not None

    def read_all(self, scope: Optional[str] = None, ordered: bool = True) -> List[Record]:
        query = self._collection()
        if scope is not None:
            query = query.where(filter=FieldFilter("ownerId", "==", scope))
        if ordered:
            query = query.order_by("createdAt", direction=firestore.Query.DESCENDING)
        try:
            snapshots = list(query.stream())
        except gexc.FailedPrecondition as exc:
            if ordered:
                raise IndexUnavailable(f"Firestore index missing: {exc.message}") from exc
            raise StorageUnavailable(f"Firestore query failed: {exc}") from exc
        except gexc.GoogleAPIError as exc:
            raise StorageUnavailable(f"Firestore query failed: {exc}") from exc
        return [self._to_record(s) for s in snapshots]

    def read_one(self, record_id: str, scope: Optional[str] = None) -> Optional[Record]:
        try:
            snapshot = self._collection().document(record_id).get()
        except gexc.GoogleAPIError as exc:
            raise StorageUnavailable(f"Firestore read failed: {exc}") from exc
        if not snapshot.exists:
            return None
        record = self._to_record(snapshot)
        return record if self._in_scope(record, scope) else None

    def write_one(self, record: Record) -> Record:
        data = {k: v for k, v in record.items() if k != "id"}
        try:
            self._collection().document(record["id"]).create(data)
        except gexc.AlreadyExists as exc:
            raise StorageUnavailable(f"Duplicate redirect id {record['id']!r}") from exc
        except gexc.GoogleAPIError as exc:
            raise StorageUnavailable(f"Firestore write failed: {exc}") from exc
        return dict(record)

    def update_one(self, record_id: str, partial: Record) -> Optional[Record]:
        data = {k: v for k, v in partial.items() if k != "id"}
        ref = self._collection().document(record_id)
        try:
            snapshot = ref.get()
            if not snapshot.exists:
                return None
            ref.update(data)
        except gexc.GoogleAPIError as exc:
            raise StorageUnavailable(f"Firestore update failed: {exc}") from exc
        return {**self._to_record(snapshot), **data}

    def delete_one(self, record_id: str) -> bool:
        ref = self._collection().document(record_id)
        try:
            if not ref.get().exists:
                return False
            ref.delete()
        except gexc.GoogleAPIError as exc:
            raise StorageUnavailable(f"Firestore delete failed: {exc}") from exc
        return True
