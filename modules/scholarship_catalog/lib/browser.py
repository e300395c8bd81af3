"""
Catalog browser: the stateful shell around store, loader, filters, paging and saves.

Features:
  - Session bootstrap (`open_browser`): first batch, count and saved marks in parallel
  - Search/facet mutators that always reset the page window to page 1
  - Debounced search for typing (asyncio timer handle, last call wins)
  - "Load more" disabled while any filter is active (filtering only sees loaded data)
  - Dependency injection of backend and auth for testability
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

from . import logging_bridge
from .auth import AuthProvider
from .backends.base import CatalogBackend
from .config import Settings
from .filters import FilterCache, FilterState
from .loader import IncrementalLoader
from .paging import PageWindow, total_pages
from .saves import SaveSynchronizer
from .store import ListingStore
from .view import CatalogView, derive_view


class Debouncer:
    """Run a callback once input has been quiet for `delay` seconds."""

    def __init__(self, delay: float) -> None:
        self.delay = max(0.0, float(delay))
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self, fn: Callable[[], None]) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()

        def _fire() -> None:
            self._handle = None
            fn()

        self._handle = loop.call_later(self.delay, _fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class CatalogBrowser:
    def __init__(
        self,
        backend: CatalogBackend,
        auth: AuthProvider,
        settings: Settings,
        *,
        on_sign_in_required: Callable[[str], None] | None = None,
    ) -> None:
        self.settings = settings
        self.backend = backend
        self.store = ListingStore()
        self.loader = IncrementalLoader(backend, self.store, batch_size=settings.batch_size)
        self.saves = SaveSynchronizer(
            backend,
            auth,
            on_sign_in_required=on_sign_in_required,
            sign_in_path=settings.sign_in_path,
        )
        self.window = PageWindow(settings.page_size)
        self.filters = FilterState()
        self._cache = FilterCache()
        self._search_debounce = Debouncer(settings.search_debounce_ms / 1000.0)

    # ---- bootstrap ----
    async def start(self) -> None:
        await asyncio.gather(
            self.loader.initialize(self.settings.initial_batch_size),
            self.saves.seed(),
        )

    # ---- filter inputs ----
    def _apply_filters(self, new_state: FilterState) -> None:
        if new_state == self.filters:
            return
        self.filters = new_state
        self.window.reset()

    def set_search(self, text: str) -> None:
        self._search_debounce.cancel()
        self._apply_filters(self.filters.with_search(text))

    def set_search_debounced(self, text: str) -> None:
        """Apply `text` after the configured quiet period; later calls replace earlier ones."""
        self._search_debounce.call(lambda: self._apply_filters(self.filters.with_search(text)))

    def toggle_facet(self, facet: str, value: str) -> None:
        self._apply_filters(self.filters.toggle(facet, value))

    def clear_filters(self) -> None:
        self._search_debounce.cancel()
        self._apply_filters(self.filters.cleared())

    # ---- page window ----
    def _total_pages(self) -> int:
        filtered = self._cache.get(self.store.items, self.filters)
        return total_pages(len(filtered), self.window.page_size)

    def go_to_page(self, page: int) -> int:
        return self.window.go_to(page, self._total_pages())

    def next_page(self) -> int:
        return self.window.next(self._total_pages())

    def previous_page(self) -> int:
        return self.window.previous()

    # ---- remote-backed actions ----
    async def load_more(self) -> int:
        if self.filters.is_active:
            logging_bridge.activity({
                "component": "scholarship_catalog.browser",
                "op": "load_more_skipped",
                "reason": "filters_active",
            })
            return 0
        return await self.loader.load_more()

    async def toggle_save(self, listing_id: str) -> bool | None:
        return await self.saves.toggle(listing_id)

    # ---- projection ----
    def view(self, now: datetime | None = None) -> CatalogView:
        v = derive_view(
            self.store.items,
            self.saves.saved_ids,
            self.filters,
            self.window.current_page,
            self.window.page_size,
            self.loader.state,
            facet_limit=self.settings.facet_option_limit,
            now=now,
            cache=self._cache,
        )
        self.window.current_page = v.current_page
        return v

    async def close(self) -> None:
        self._search_debounce.cancel()
        await self.backend.close()


async def open_browser(
    backend: CatalogBackend,
    auth: AuthProvider,
    settings: Settings,
    *,
    on_sign_in_required: Callable[[str], None] | None = None,
) -> CatalogBrowser:
    """Create a browser and load the first batch, the count and the user's saved marks."""
    browser = CatalogBrowser(backend, auth, settings, on_sign_in_required=on_sign_in_required)
    await browser.start()
    return browser
