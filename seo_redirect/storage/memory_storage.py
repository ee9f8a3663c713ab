"""
In-memory storage for the SEO Redirect platform.

Responsibilities:
    - Hold redirect records for the lifetime of the owning instance
    - Serve scoped and unscoped reads, ordered newest first
    - Reject duplicate ids on write

Design:
    - Replaces the module-level array of the local deployment mode: state is
      owned by an instance that the app factory creates and injects.
    - `multi_tenant=True` makes it behave like the document store (records keep
      their ownerId, reads filter by scope), which keeps manager tests fast.
    - Always available; never raises IndexUnavailable.

LLM Prompt Example:
    "Explain how an instance-owned in-memory store can stand in for a cloud
     backend in tests and local development without global state."
"""

import copy
from typing import Dict, Iterable, List, Optional

from ..errors import StorageUnavailable
from .base import BaseStorage, Record, sort_newest_first


class MemoryStorage(BaseStorage):
    name = "memory"

    def __init__(self, records: Optional[Iterable[Record]] = None, multi_tenant: bool = False):
        """
        Initialize the store, optionally pre-populated.

        Internal schema:
            self.records = {record_id: {"id": ..., "title": ..., "createdAt": ...}}
        """
        self.multi_tenant = multi_tenant
        self.records: Dict[str, Record] = {}
        for record in records or ():
            self.records[record["id"]] = copy.deepcopy(record)

    def is_available(self) -> bool:
        return True

    def _in_scope(self, record: Record, scope: Optional[str]) -> bool:
        return scope is None or record.get("ownerId") == scope

    def read_all(self, scope: Optional[str] = None, ordered: bool = True) -> List[Record]:
        found = [copy.deepcopy(r) for r in self.records.values() if self._in_scope(r, scope)]
        return sort_newest_first(found) if ordered else found

    def read_one(self, record_id: str, scope: Optional[str] = None) -> Optional[Record]:
        record = self.records.get(record_id)
        if record is None or not self._in_scope(record, scope):
            return None
        return copy.deepcopy(record)

    def write_one(self, record: Record) -> Record:
        if record["id"] in self.records:
            raise StorageUnavailable(f"Duplicate redirect id {record['id']!r}")
        self.records[record["id"]] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def update_one(self, record_id: str, partial: Record) -> Optional[Record]:
        if record_id not in self.records:
            return None
        self.records[record_id].update(copy.deepcopy(partial))
        return copy.deepcopy(self.records[record_id])

    def delete_one(self, record_id: str) -> bool:
        return self.records.pop(record_id, None) is not None
