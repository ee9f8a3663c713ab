"""
seo_redirect package initializer.
"""

from . import manager
from . import storage

__all__ = ["manager", "storage"]
