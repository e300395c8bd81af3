from __future__ import annotations

from ..config import Settings
from .base import CatalogBackend

# Global in-process registry: kind -> backend class
_REGISTRY: dict[str, type[CatalogBackend]] = {}


def register(cls: type[CatalogBackend]) -> type[CatalogBackend]:
    """
    Class decorator or direct call to register a backend class.
    Requires cls.kind to be a non-empty string.
    """
    kind = getattr(cls, "kind", "") or ""
    if not isinstance(kind, str) or not kind.strip():
        raise ValueError(f"Cannot register backend {cls!r}: missing/empty 'kind'.")
    key = kind.strip().lower()
    if key in _REGISTRY and _REGISTRY[key] is not cls:
        # Allow idempotent re-registers of the same class; otherwise reject.
        raise ValueError(f"Backend kind {key!r} already registered to {_REGISTRY[key]!r}.")
    _REGISTRY[key] = cls
    return cls


def get(kind: str) -> type[CatalogBackend]:
    """
    Look up a backend class by kind (case-insensitive).
    Raises KeyError if not found.
    """
    key = (kind or "").strip().lower()
    if key not in _REGISTRY:
        raise KeyError(f"No backend registered for kind {kind!r}.")
    return _REGISTRY[key]


def all_kinds() -> dict[str, type[CatalogBackend]]:
    """
    Return a shallow copy of the registry (useful for debugging/tests).
    """
    return dict(_REGISTRY)


def build(settings: Settings) -> CatalogBackend:
    """
    Instantiate the backend named by `settings.backend`.
    Raises KeyError for an unknown kind; backend constructors may raise BackendError.
    """
    return get(settings.backend).from_settings(settings)
