"""
Error taxonomy for the SEO Redirect platform.

Propagation policy (applied by RedirectManager):
    - RedirectValidationError, Unauthorized, RedirectNotFound: always surfaced.
    - StorageUnavailable: swallowed on reads (empty result + degraded flag),
      surfaced on writes so data loss is never silent.
    - IndexUnavailable: internal only; triggers the unordered query + in-memory sort.
"""

from typing import Optional


class RedirectError(Exception):
    """Base class for all redirect platform errors."""


class RedirectValidationError(RedirectError, ValueError):
    """Missing or malformed field, raised before any storage call."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class RedirectNotFound(RedirectError, LookupError):
    """The id does not exist in the active storage scope."""


class Unauthorized(RedirectError):
    """The id exists but belongs to a different owner."""


class StorageUnavailable(RedirectError):
    """Backend unreachable, misconfigured or returned an error."""


class IndexUnavailable(StorageUnavailable):
    """The backend cannot serve the ordered query (missing composite index)."""
