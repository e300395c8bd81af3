from __future__ import annotations

import asyncio
from typing import Any

from .lib import backends
from .lib.auth import StaticAuth
from .lib.browser import open_browser
from .lib.config import Settings
from .lib.logging_bridge import activity as log_activity
from .lib.render import build_page, results_header, wrap_document


def run(**kwargs: Any) -> tuple[str, dict]:
    """
    Entry point for the 'scholarship_catalog' module.

    Opens a browsing session, applies any requested search/facets/page and
    renders that page of the catalog.

    Accepts kwargs, including:
      backend: str = "postgrest"        # or "sqlite" / "memory"
      rest_url, api_key, sqlite_path    # backend options (see Settings)
      user_id: str | None = None        # signed-in user, None for anonymous

      # Browsing state to apply before rendering:
      search: str = ""
      degree_levels / countries / fields: list[str] = []
      load_more: int = 0                # extra batches to fetch first
      page: int = 1

      backend_instance: CatalogBackend  # injected backend (tests)

    Returns:
      (html: str, meta: dict)
    """
    backend_instance = kwargs.pop("backend_instance", None)
    settings = Settings.from_env_and_kwargs(kwargs)

    log_activity({
        "component": "scholarship_catalog.main",
        "op": "start",
        "backend": settings.backend if backend_instance is None else backend_instance.kind,
        "user": settings.user_id,
        "page_size": settings.page_size,
    })

    if backend_instance is None:
        backend_instance = backends.build(settings)
    return asyncio.run(_browse(backend_instance, settings, kwargs))


async def _browse(backend: backends.CatalogBackend, settings: Settings, kw: dict[str, Any]) -> tuple[str, dict]:
    browser = await open_browser(backend, StaticAuth(settings.user_id), settings)
    try:
        for _ in range(int(kw.get("load_more") or 0)):
            if not await browser.load_more():
                break

        browser.set_search(str(kw.get("search") or ""))
        for facet in ("degree_levels", "countries", "fields"):
            for value in _as_list(kw.get(facet)):
                browser.toggle_facet(facet, value)
        browser.go_to_page(int(kw.get("page") or 1))

        view = browser.view()
    finally:
        await browser.close()

    html = wrap_document(build_page(view), heading="Scholarships", intro=results_header(view))
    meta = {
        "message": results_header(view),
        "page": view.current_page,
        "total_pages": view.total_pages,
        "filtered": view.filtered_count,
        "loaded": view.loaded_count,
        "total": view.total_count,
        "has_more": view.has_more,
        "saved_on_page": [c.listing.id for c in view.cards if c.saved],
    }
    log_activity({
        "component": "scholarship_catalog.main",
        "op": "rendered",
        **{k: v for k, v in meta.items() if k != "saved_on_page"},
    })
    return html, meta


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v) for v in value]
