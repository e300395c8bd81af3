from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import datetime

from .filters import FacetOptions, FilterCache, FilterState, facet_options, filter_listings
from .models import Listing, LoadState
from .paging import page_numbers, slice_page, total_pages, visible_range
from .utils import days_until


@dataclass(frozen=True)
class ListingCard:
    listing: Listing
    saved: bool
    days_left: int | None


@dataclass(frozen=True)
class CatalogView:
    """Everything the catalog page renders for one state of the browser."""

    cards: tuple[ListingCard, ...]
    filtered_count: int
    loaded_count: int
    total_count: int
    current_page: int
    total_pages: int
    page_size: int
    page_numbers: tuple[int | None, ...]
    showing: tuple[int, int]
    result_label: str
    has_more: bool
    can_load_more: bool
    is_loading_more: bool
    filtered_notice: str | None
    facets: FacetOptions
    filters: FilterState

    @property
    def show_pagination(self) -> bool:
        return self.filtered_count > self.page_size

    @property
    def is_empty(self) -> bool:
        return self.filtered_count == 0


def derive_view(
    listings: Sequence[Listing],
    saved_ids: Collection[str],
    state: FilterState,
    page: int,
    page_size: int,
    load_state: LoadState | None = None,
    *,
    facet_limit: int = 10,
    now: datetime | None = None,
    cache: FilterCache | None = None,
) -> CatalogView:
    """
    Pure projection of browser state into a CatalogView.

    `page` is clamped into [1, total_pages]; nothing passed in is mutated.
    Pass a FilterCache to reuse the previous filter pass when neither the
    listings snapshot nor the filter state changed.
    """
    ls = load_state or LoadState(loaded_count=len(listings), total_count=len(listings))
    filtered = cache.get(listings, state) if cache is not None else filter_listings(listings, state)
    n = len(filtered)
    pages = total_pages(n, page_size)
    current = min(max(1, page), pages)

    cards = tuple(
        ListingCard(listing=x, saved=x.id in saved_ids, days_left=days_until(x.deadline, now))
        for x in slice_page(filtered, current, page_size)
    )

    loaded = len(listings)
    if state.is_active:
        label = "filtered"
    elif loaded < ls.total_count:
        label = "loaded"
    else:
        label = ""

    notice = None
    if ls.has_more and state.is_active:
        notice = (
            f"Showing {n} of {loaded} loaded scholarships. "
            f"Clear filters to load more ({ls.total_count} total available)."
        )

    return CatalogView(
        cards=cards,
        filtered_count=n,
        loaded_count=loaded,
        total_count=ls.total_count,
        current_page=current,
        total_pages=pages,
        page_size=page_size,
        page_numbers=tuple(page_numbers(current, pages)),
        showing=visible_range(current, page_size, n),
        result_label=label,
        has_more=ls.has_more,
        can_load_more=ls.has_more and not state.is_active,
        is_loading_more=ls.is_loading_more,
        filtered_notice=notice,
        facets=facet_options(listings, facet_limit),
        filters=state,
    )
