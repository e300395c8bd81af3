# modules/scholarship_catalog/lib/backends/__init__.py
from __future__ import annotations

from .base import BackendError, CatalogBackend
from .registry import all_kinds, build, get, register

# Built-in backends register themselves on import.
from . import memory as _memory  # noqa: E402,F401
from . import sqlite as _sqlite  # noqa: E402,F401
from . import postgrest as _postgrest  # noqa: E402,F401

__all__ = [
    "BackendError",
    "CatalogBackend",
    "all_kinds",
    "build",
    "get",
    "register",
]
