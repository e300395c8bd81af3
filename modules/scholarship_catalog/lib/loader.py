"""
Incremental loading of catalog batches into the ListingStore.

The first batch and the authoritative count are fetched together; after that
each `load_more()` asks for the next `batch_size` listings by offset.
`is_loading_more` is a plain guard, not a queue: a call that arrives while a
batch is in flight is dropped.
"""

from __future__ import annotations

import asyncio
import time

from . import logging_bridge
from .backends.base import CatalogBackend
from .models import LoadState
from .store import ListingStore

BATCH_SIZE = 30
INITIAL_BATCH_SIZE = 15


class IncrementalLoader:
    def __init__(self, backend: CatalogBackend, store: ListingStore, batch_size: int = BATCH_SIZE) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be >= 1")
        self.backend = backend
        self.store = store
        self.batch_size = batch_size
        self.state = LoadState(loaded_count=len(store))

    # ---- read-only views ----
    @property
    def has_more(self) -> bool:
        return self.state.has_more

    @property
    def is_loading_more(self) -> bool:
        return self.state.is_loading_more

    @property
    def total_count(self) -> int:
        return self.state.total_count

    @property
    def loaded_count(self) -> int:
        return self.state.loaded_count

    # ---- session start ----
    async def initialize(self, initial_batch_size: int = INITIAL_BATCH_SIZE) -> None:
        """
        Fetch the first batch and the total count concurrently.

        A failed first batch leaves the store empty; a failed count makes
        total_count equal what is loaded, so no further loads are offered.
        """
        t0 = time.perf_counter_ns()
        batch_res, count_res = await asyncio.gather(
            self.backend.fetch_listings(0, initial_batch_size),
            self.backend.count_listings(),
            return_exceptions=True,
        )

        if isinstance(batch_res, BaseException):
            _reraise_if_fatal(batch_res)
            logging_bridge.error({
                "component": "scholarship_catalog.loader",
                "op": "initial_batch",
                "limit": initial_batch_size,
                "error": repr(batch_res),
            })
        else:
            self.store.append(batch_res)
        self.state.loaded_count = len(self.store)

        if isinstance(count_res, BaseException):
            _reraise_if_fatal(count_res)
            logging_bridge.error({
                "component": "scholarship_catalog.loader",
                "op": "count",
                "error": repr(count_res),
                "fallback_total": self.state.loaded_count,
            })
            self.state.total_count = self.state.loaded_count
        else:
            self.state.total_count = int(count_res)

        logging_bridge.activity({
            "component": "scholarship_catalog.loader",
            "op": "initialized",
            "loaded": self.state.loaded_count,
            "total": self.state.total_count,
            "has_more": self.state.has_more,
            "total_us": int((time.perf_counter_ns() - t0) // 1000),
        })

    # ---- load more ----
    async def load_more(self) -> int:
        """
        Append the next batch. Returns how many listings were added
        (0 when skipped, empty, or failed).
        """
        if self.state.is_loading_more or not self.state.has_more:
            return 0

        self.state.is_loading_more = True
        offset = len(self.store)
        t0 = time.perf_counter_ns()
        try:
            batch = await self.backend.fetch_listings(offset, self.batch_size)
        except Exception as e:
            # Nothing appended; has_more unchanged so the user can retry.
            logging_bridge.error({
                "component": "scholarship_catalog.loader",
                "op": "load_more",
                "offset": offset,
                "limit": self.batch_size,
                "error": repr(e),
            })
            return 0
        finally:
            self.state.is_loading_more = False

        added = self.store.append(batch)
        self.state.loaded_count = len(self.store)
        if not batch:
            self.state.exhausted = True

        logging_bridge.activity({
            "component": "scholarship_catalog.loader",
            "op": "load_more",
            "offset": offset,
            "received": len(batch),
            "added": added,
            "loaded": self.state.loaded_count,
            "total": self.state.total_count,
            "has_more": self.state.has_more,
            "total_us": int((time.perf_counter_ns() - t0) // 1000),
        })
        return added


def _reraise_if_fatal(exc: BaseException) -> None:
    # gather(return_exceptions=True) also captures cancellation; let that through.
    if not isinstance(exc, Exception):
        raise exc
