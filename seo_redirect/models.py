"""
Domain models for redirect configurations.

Python attributes are snake_case; the storage/wire shape is camelCase
(`targetUrl`, `siteName`, `createdAt`, ...), matching the JSON documents
already stored in JSONBin and Firestore.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

REDIRECT_TYPES = ("website", "product", "article", "service")
DEFAULT_TYPE = "website"

# Fields a client may set; everything else is owned by the repository.
EDITABLE_FIELDS = (
    "title",
    "description",
    "target_url",
    "image",
    "keywords",
    "site_name",
    "type",
)


class RedirectFields(BaseModel):
    """The metadata + target URL that drive one landing page."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    description: str
    target_url: str
    image: Optional[str] = None
    keywords: Optional[str] = None
    site_name: Optional[str] = None
    type: Optional[str] = None


class RedirectConfig(RedirectFields):
    """A stored redirect configuration."""

    id: str
    owner_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Older blobs may hold naive timestamps; treat them as UTC.
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    def to_record(self) -> dict:
        """Raw storage shape (camelCase keys, datetimes kept native)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_public(self) -> dict:
        """JSON-safe camelCase shape for API responses."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
