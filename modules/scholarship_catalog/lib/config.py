from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .utils import getenv_str


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env cannot form a valid Settings."""


# -----------------------------
# Models
# -----------------------------
@dataclass
class Settings:
    """
    Canonical configuration for a catalog browsing session.

    Backend selection:
      backend: registry kind ("postgrest", "sqlite", "memory")
      rest_url/api_key: required for "postgrest"
      sqlite_path: required for "sqlite"

    Paging and loading mirror the catalog page: 15 cards per page, a first
    batch of 15 listings, then 30 per "load more".
    """

    # Backend
    backend: str = "postgrest"
    rest_url: str | None = None
    api_key: str | None = None
    sqlite_path: str = "/app/local/state/catalog.db"
    http_timeout: float = 15.0

    # Session
    user_id: str | None = None
    sign_in_path: str = "/login"

    # Paging / loading
    page_size: int = 15
    batch_size: int = 30
    initial_batch_size: int = 15
    facet_option_limit: int = 10
    search_debounce_ms: int = 200

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs with validation; env fills the gaps.

        Expected kwargs (all optional):

            backend: str = $CATALOG_BACKEND or "postgrest"
            rest_url: str = $CATALOG_REST_URL
            api_key: str = $CATALOG_API_KEY
            sqlite_path: str = $CATALOG_SQLITE_PATH or "/app/local/state/catalog.db"
            user_id: str | None   # authenticated user, None for anonymous
            page_size: int = 15
            batch_size: int = 30
            initial_batch_size: int = 15
            facet_option_limit: int = 10
            search_debounce_ms: int = 200
            sign_in_path: str = "/login"
            http_timeout: float = 15
        """
        kw = dict(kwargs or {})

        backend = str(kw.get("backend") or getenv_str("CATALOG_BACKEND") or "postgrest").strip().lower()
        rest_url = str(kw.get("rest_url") or getenv_str("CATALOG_REST_URL") or "").strip() or None
        api_key = str(kw.get("api_key") or getenv_str("CATALOG_API_KEY") or "").strip() or None
        sqlite_path = str(
            kw.get("sqlite_path") or getenv_str("CATALOG_SQLITE_PATH") or "/app/local/state/catalog.db"
        )

        user_id = kw.get("user_id")
        user_id = str(user_id).strip() or None if user_id is not None else None

        try:
            settings = cls(
                backend=backend,
                rest_url=rest_url,
                api_key=api_key,
                sqlite_path=sqlite_path,
                http_timeout=float(kw.get("http_timeout") or 15.0),
                user_id=user_id,
                sign_in_path=str(kw.get("sign_in_path") or "/login"),
                page_size=_int(kw, "page_size", 15),
                batch_size=_int(kw, "batch_size", 30),
                initial_batch_size=_int(kw, "initial_batch_size", 15),
                facet_option_limit=_int(kw, "facet_option_limit", 10),
                search_debounce_ms=_int(kw, "search_debounce_ms", 200),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid catalog settings: {e}") from e

        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def _int(kw: Mapping[str, Any], key: str, default: int) -> int:
    raw = kw.get(key)
    if raw is None or raw == "":
        return default
    return int(raw)


def _validate_settings(s: Settings) -> None:
    if not s.backend:
        raise ConfigError("'backend' cannot be empty.")
    if s.backend == "postgrest" and not s.rest_url:
        raise ConfigError("The postgrest backend needs 'rest_url' (or CATALOG_REST_URL).")
    if s.backend == "sqlite" and not s.sqlite_path.strip():
        raise ConfigError("'sqlite_path' cannot be empty.")

    for name in ("page_size", "batch_size", "initial_batch_size"):
        if getattr(s, name) <= 0:
            raise ConfigError(f"'{name}' must be >= 1.")
    if s.facet_option_limit < 0:
        raise ConfigError("'facet_option_limit' cannot be negative.")
    if s.search_debounce_ms < 0:
        raise ConfigError("'search_debounce_ms' cannot be negative.")
    if s.http_timeout <= 0:
        raise ConfigError("'http_timeout' must be positive.")
