from __future__ import annotations

from collections.abc import Iterable, Iterator

from .models import Listing


class ListingStore:
    """
    Append-only, in-memory sequence of the listings materialized so far.

    Batches arrive pre-sorted (newest first) and are kept in arrival order;
    the store never re-sorts, so already-seen cards do not move. Identifiers
    already present are skipped to tolerate overlapping re-fetches.

    `items` is an immutable tuple; every append that adds something swaps in
    a new tuple, which is what the filter memo keys on.
    """

    def __init__(self, initial: Iterable[Listing] = ()) -> None:
        self._items: tuple[Listing, ...] = ()
        self._by_id: dict[str, Listing] = {}
        self.append(initial)

    @property
    def items(self) -> tuple[Listing, ...]:
        return self._items

    def append(self, batch: Iterable[Listing]) -> int:
        """Append unseen listings in order; return how many were added."""
        added: list[Listing] = []
        for listing in batch:
            if listing.id in self._by_id:
                continue
            self._by_id[listing.id] = listing
            added.append(listing)
        if added:
            self._items = self._items + tuple(added)
        return len(added)

    def get(self, listing_id: str) -> Listing | None:
        return self._by_id.get(listing_id)

    def __contains__(self, listing_id: object) -> bool:
        return listing_id in self._by_id

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Listing]:
        return iter(self._items)
