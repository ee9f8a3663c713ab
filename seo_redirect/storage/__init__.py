"""Storage adapters for redirect configurations."""

from .base import BaseStorage
from .jsonbin_storage import JSONBinStorage
from .memory_storage import MemoryStorage
from .storage_factory import get_storage

__all__ = ["BaseStorage", "JSONBinStorage", "MemoryStorage", "get_storage"]
