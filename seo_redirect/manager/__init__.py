"""Domain-level redirect management."""

from .redirect_manager import RedirectManager, build_public_url

__all__ = ["RedirectManager", "build_public_url"]
