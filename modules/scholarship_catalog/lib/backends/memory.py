from __future__ import annotations

from collections.abc import Iterable

from ..models import Listing
from .base import CatalogBackend
from .registry import register


@register
class MemoryBackend(CatalogBackend):
    """
    A zero-network backend used for tests and dry-runs.

    Listings are kept newest-first (created_at descending), the same order
    the hosted store serves them in. Save marks live in a set of
    (user_id, listing_id) pairs.
    """

    kind = "memory"

    def __init__(self, listings: Iterable[Listing] = (), saves: Iterable[tuple[str, str]] = ()) -> None:
        self._listings: list[Listing] = sorted(listings, key=lambda x: x.created_at, reverse=True)
        self._saves: set[tuple[str, str]] = set(saves)
        self.fetch_calls: list[tuple[int, int]] = []

    async def fetch_listings(self, offset: int, limit: int) -> list[Listing]:
        self.fetch_calls.append((offset, limit))
        return list(self._listings[offset : offset + limit])

    async def count_listings(self) -> int:
        return len(self._listings)

    async def list_saved(self, user_id: str) -> list[str]:
        return sorted(lid for uid, lid in self._saves if uid == user_id)

    async def insert_save(self, user_id: str, listing_id: str) -> None:
        self._saves.add((user_id, listing_id))

    async def delete_save(self, user_id: str, listing_id: str) -> None:
        self._saves.discard((user_id, listing_id))

    def has_save(self, user_id: str, listing_id: str) -> bool:
        return (user_id, listing_id) in self._saves
