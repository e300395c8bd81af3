from __future__ import annotations

from abc import ABC, abstractmethod

from ..config import Settings
from ..models import Listing


class BackendError(Exception):
    """Base exception for remote store failures."""


class CatalogBackend(ABC):
    """
    Abstract remote store interface.

    Contract:
      - fetch_listings(offset, limit) returns listings ordered by created_at
        descending, covering [offset, offset + limit - 1]. Short or empty
        lists mean the end of the catalog.
      - count_listings() returns the authoritative total.
      - Save marks are (user_id, listing_id) pairs.
      - Failures raise BackendError. Do NOT log or mutate client state here;
        callers decide how to degrade.
    """

    # Concrete subclasses MUST set this to a stable string, e.g. "postgrest", "sqlite", "memory"
    kind: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> CatalogBackend:
        """Build an instance from run settings; backends with options override this."""
        return cls()

    @abstractmethod
    async def fetch_listings(self, offset: int, limit: int) -> list[Listing]:
        raise NotImplementedError

    @abstractmethod
    async def count_listings(self) -> int:
        raise NotImplementedError

    @abstractmethod
    async def list_saved(self, user_id: str) -> list[str]:
        """Listing ids the user has saved."""
        raise NotImplementedError

    @abstractmethod
    async def insert_save(self, user_id: str, listing_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete_save(self, user_id: str, listing_id: str) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        """Release connections; no-op by default."""
        return None
