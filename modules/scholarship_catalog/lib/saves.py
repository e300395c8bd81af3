"""
Optimistic bookmark ("save") state.

The local mirror is flipped synchronously, before the remote write is even
issued. There are no automatic retries; the next explicit toggle is the retry.

Writes for the same listing are serialized with a per-listing lock, so a
rapid save/unsave reaches the store in click order. The optimistic flip is
never held back by the lock.

While writes for a listing are in flight, the last membership the store
confirmed is remembered. When a write fails and no later write for that
listing is queued, the mirror falls back to that confirmed membership.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from . import logging_bridge
from .auth import AuthProvider
from .backends.base import CatalogBackend


def _log_redirect(path: str) -> None:
    logging_bridge.activity({
        "component": "scholarship_catalog.saves",
        "op": "sign_in_redirect",
        "path": path,
    })


class SaveSynchronizer:
    def __init__(
        self,
        backend: CatalogBackend,
        auth: AuthProvider,
        *,
        on_sign_in_required: Callable[[str], None] | None = None,
        sign_in_path: str = "/login",
    ) -> None:
        self.backend = backend
        self.auth = auth
        self.on_sign_in_required = on_sign_in_required or _log_redirect
        self.sign_in_path = sign_in_path
        self._saved: set[str] = set()
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: dict[str, int] = {}
        self._confirmed: dict[str, bool] = {}

    @property
    def saved_ids(self) -> frozenset[str]:
        return frozenset(self._saved)

    def is_saved(self, listing_id: str) -> bool:
        return listing_id in self._saved

    def is_pending(self, listing_id: str) -> bool:
        return self._pending.get(listing_id, 0) > 0

    async def seed(self) -> None:
        """Load the user's marks once at session start; anonymous users get none."""
        user = self.auth.current_user()
        if user is None:
            self._saved = set()
            return
        try:
            ids = await self.backend.list_saved(user.id)
        except Exception as e:
            logging_bridge.error({
                "component": "scholarship_catalog.saves",
                "op": "seed",
                "user": user.id,
                "error": repr(e),
            })
            return
        self._saved = set(ids)
        logging_bridge.activity({
            "component": "scholarship_catalog.saves",
            "op": "seeded",
            "user": user.id,
            "count": len(self._saved),
        })

    async def toggle(self, listing_id: str) -> bool | None:
        """
        Flip the saved state of `listing_id`.

        Returns the resulting saved state, or the last confirmed state if the
        write failed. Returns None when nobody is signed in and the caller was
        sent to the sign-in page instead.
        """
        user = self.auth.current_user()
        if user is None:
            self.on_sign_in_required(self.sign_in_path)
            return None

        was_saved = listing_id in self._saved
        if listing_id not in self._pending:
            # Nothing in flight, so the mirror agrees with the store.
            self._confirmed[listing_id] = was_saved
        # Optimistic: visible before any await.
        if was_saved:
            self._saved.discard(listing_id)
        else:
            self._saved.add(listing_id)

        self._pending[listing_id] = self._pending.get(listing_id, 0) + 1
        lock = self._locks.setdefault(listing_id, asyncio.Lock())
        try:
            async with lock:
                if was_saved:
                    await self.backend.delete_save(user.id, listing_id)
                else:
                    await self.backend.insert_save(user.id, listing_id)
            self._confirmed[listing_id] = not was_saved
        except Exception as e:
            confirmed = self._confirmed[listing_id]
            if self._pending[listing_id] == 1:
                # Last queued write for this listing: settle on the store's state.
                if confirmed:
                    self._saved.add(listing_id)
                else:
                    self._saved.discard(listing_id)
            logging_bridge.error({
                "component": "scholarship_catalog.saves",
                "op": "delete" if was_saved else "insert",
                "user": user.id,
                "listing_id": listing_id,
                "error": repr(e),
            })
            return confirmed
        finally:
            self._pending[listing_id] -= 1
            if self._pending[listing_id] <= 0:
                del self._pending[listing_id]
                self._locks.pop(listing_id, None)
                self._confirmed.pop(listing_id, None)

        logging_bridge.activity({
            "component": "scholarship_catalog.saves",
            "op": "delete" if was_saved else "insert",
            "user": user.id,
            "listing_id": listing_id,
        })
        return not was_saved
