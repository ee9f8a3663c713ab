"""
Base storage interface for the SEO Redirect platform.

Purpose:
    Define a small, stable contract that the in-memory, JSONBin (blob) and
    Firestore (document) backends implement, so RedirectManager never needs
    to know where records live.

Records:
    Adapters exchange *raw records*: plain dicts in the camelCase storage
    shape (`id`, `title`, `targetUrl`, `createdAt`, ...). Parsing into
    RedirectConfig happens in the manager.

Failures:
    Adapters raise StorageUnavailable for network/credential problems and
    IndexUnavailable when an ordered query cannot be served. They never
    decide whether a failure is swallowed; that policy lives in the manager.

Testing & Coverage:
    Abstract methods are annotated with `# pragma: no cover`.

LLM Prompt Example:
    "Show how a narrow, explicit storage interface lets a blob store and a
    document store back the same repository without touching service code."
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


def _created_at(record: Record) -> Optional[datetime]:
    """Parse createdAt; None when it is missing or not a timestamp."""
    value = record.get("createdAt")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def sort_newest_first(records: List[Record]) -> List[Record]:
    """Order raw records by createdAt descending.

    Accepts native datetimes (memory, Firestore) and ISO strings (JSONBin).
    Records whose createdAt is missing or unparseable sort last, in input order.
    """
    keyed = [(_created_at(r), r) for r in records]
    with_date = [(key, r) for key, r in keyed if key is not None]
    without_date = [r for key, r in keyed if key is None]
    with_date.sort(key=lambda item: item[0], reverse=True)
    return [r for _, r in with_date] + without_date


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    #: Short backend name used in logs and status reports.
    name: str = "base"

    #: True when records carry an ownerId and reads are scoped by it.
    multi_tenant: bool = False

    @abstractmethod  # pragma: no cover
    def is_available(self) -> bool:
        """
        Return True when the backend is configured and usable.

        Must not raise; missing credentials simply mean "unavailable".
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def read_all(self, scope: Optional[str] = None, ordered: bool = True) -> List[Record]:
        """
        Return all raw records, optionally restricted to an owner scope.

        Args:
            scope: ownerId to filter by; None returns every record.
            ordered: ask the backend for createdAt-descending order.

        Raises:
            IndexUnavailable: ordered=True cannot be served by the backend.
            StorageUnavailable: backend unreachable or unconfigured.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def read_one(self, record_id: str, scope: Optional[str] = None) -> Optional[Record]:
        """
        Return one raw record, or None when absent (or outside `scope`).
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def write_one(self, record: Record) -> Record:
        """
        Persist a new record (its `id` is already assigned) and return it as stored.

        Raises:
            StorageUnavailable: the write did not reach the backend.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def update_one(self, record_id: str, partial: Record) -> Optional[Record]:
        """
        Merge `partial` into an existing record.

        Returns:
            The stored record after the merge, or None if the id is unknown.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_one(self, record_id: str) -> bool:
        """
        Hard-delete a record.

        Returns:
            bool: True if a record was removed, False if it did not exist.
        """
        raise NotImplementedError
