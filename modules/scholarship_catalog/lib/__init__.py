# modules/scholarship_catalog/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience
from .auth import AuthProvider, StaticAuth
from .backends import BackendError, CatalogBackend
from .browser import CatalogBrowser, open_browser
from .config import ConfigError, Settings
from .filters import FilterState, filter_listings
from .models import FundingSource, Listing, LoadState, User
from .view import CatalogView, derive_view

__all__ = [
    "AuthProvider",
    "BackendError",
    "CatalogBackend",
    "CatalogBrowser",
    "CatalogView",
    "ConfigError",
    "FilterState",
    "FundingSource",
    "Listing",
    "LoadState",
    "Settings",
    "StaticAuth",
    "User",
    "derive_view",
    "filter_listings",
    "open_browser",
]
