"""
Client-side search and facet filtering over the loaded listings.

Everything here is pure: no I/O, no clock, no mutation of inputs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from .models import Listing

DEGREE_LEVELS: tuple[str, ...] = ("masters", "phd", "postdoc")

_DEGREE_LABELS = {"masters": "Master's", "phd": "PhD", "postdoc": "Postdoc"}

# FilterState attribute per facet name
FACETS: tuple[str, ...] = ("degree_levels", "countries", "fields")


@dataclass(frozen=True)
class FilterState:
    """Search text plus the selected values of each facet."""

    search: str = ""
    degree_levels: frozenset[str] = frozenset()
    countries: frozenset[str] = frozenset()
    fields: frozenset[str] = frozenset()

    @property
    def query(self) -> str:
        return self.search.lower()

    @property
    def has_facets(self) -> bool:
        return bool(self.degree_levels or self.countries or self.fields)

    @property
    def is_active(self) -> bool:
        return bool(self.query) or self.has_facets

    def with_search(self, text: str) -> FilterState:
        return replace(self, search=text or "")

    def toggle(self, facet: str, value: str) -> FilterState:
        """Add `value` to the facet selection, or remove it if already selected."""
        if facet not in FACETS:
            raise ValueError(f"Unknown facet {facet!r}; expected one of {FACETS}.")
        current: frozenset[str] = getattr(self, facet)
        updated = current - {value} if value in current else current | {value}
        return replace(self, **{facet: updated})

    def cleared(self) -> FilterState:
        return FilterState()


def _matches_search(listing: Listing, query: str) -> bool:
    if not query:
        return True
    haystacks = (
        listing.title,
        listing.description,
        listing.funder_name,
        listing.funder_country or "",
    )
    return any(query in (h or "").lower() for h in haystacks)


def _intersects(tags: Sequence[str], selected: frozenset[str]) -> bool:
    return not selected or any(t in selected for t in tags)


def matches(listing: Listing, state: FilterState) -> bool:
    """AND of search, degree level, country and field-of-study predicates."""
    if not _matches_search(listing, state.query):
        return False
    if not _intersects(listing.degree_levels, state.degree_levels):
        return False
    if state.countries and listing.funder_country not in state.countries:
        return False
    return _intersects(listing.fields_of_study, state.fields)


def filter_listings(listings: Iterable[Listing], state: FilterState) -> list[Listing]:
    """Return the listings matching `state`, preserving input order."""
    if not state.is_active:
        return list(listings)
    return [listing for listing in listings if matches(listing, state)]


class FilterCache:
    """
    Remembers the last (listings, state) -> result computation.

    The listings argument is compared by identity, so callers must pass the
    store's tuple snapshot rather than a fresh copy.
    """

    def __init__(self) -> None:
        self._listings: Sequence[Listing] | None = None
        self._state: FilterState | None = None
        self._result: tuple[Listing, ...] = ()
        self.hits = 0
        self.misses = 0

    def get(self, listings: Sequence[Listing], state: FilterState) -> tuple[Listing, ...]:
        if listings is self._listings and state == self._state:
            self.hits += 1
            return self._result
        self.misses += 1
        self._result = tuple(filter_listings(listings, state))
        self._listings = listings
        self._state = state
        return self._result


@dataclass(frozen=True)
class FacetOptions:
    degree_levels: tuple[str, ...]
    countries: tuple[str, ...]
    fields: tuple[str, ...]


def facet_options(listings: Iterable[Listing], limit: int = 10) -> FacetOptions:
    """
    Selectable facet values. Degree levels are fixed; countries and fields
    come from the loaded listings in first-seen order, capped at `limit`.
    """
    countries: dict[str, None] = {}
    fields: dict[str, None] = {}
    for listing in listings:
        if listing.funder_country:
            countries.setdefault(listing.funder_country, None)
        for f in listing.fields_of_study:
            fields.setdefault(f, None)
    return FacetOptions(
        degree_levels=DEGREE_LEVELS,
        countries=tuple(countries)[:limit],
        fields=tuple(fields)[:limit],
    )


def degree_label(level: str) -> str:
    return _DEGREE_LABELS.get(level, level)
