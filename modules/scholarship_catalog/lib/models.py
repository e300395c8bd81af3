from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .utils import parse_timestamp


@dataclass(frozen=True)
class FundingSource:
    """The university (or other funder) a listing belongs to."""

    id: str
    name: str
    country: str | None = None
    city: str | None = None
    logo_url: str | None = None

    @property
    def initials(self) -> str:
        """Up to three upper-cased initials, e.g. 'Technical University of Munich' -> 'TUO'."""
        words = [w for w in (self.name or "").split(" ") if w]
        out = "".join(w[0] for w in words)[:3].upper()
        return out or "UNI"

    @classmethod
    def from_row(cls, row: Any) -> FundingSource | None:
        # Embedded relations come back as an object or a one-element list.
        if isinstance(row, list):
            row = row[0] if row else None
        if not isinstance(row, Mapping):
            return None
        return cls(
            id=str(row.get("id") or ""),
            name=str(row.get("name") or ""),
            country=row.get("country") or None,
            city=row.get("city") or None,
            logo_url=row.get("logo_url") or None,
        )


@dataclass(frozen=True)
class Listing:
    """
    A single scholarship record as fetched from the remote store.
    Listings are never mutated client-side; the id is opaque and unique.
    """

    id: str
    title: str
    created_at: datetime
    description: str = ""
    degree_levels: tuple[str, ...] = ()
    fields_of_study: tuple[str, ...] = ()
    funder: FundingSource | None = None
    deadline: datetime | None = None
    is_featured: bool = False

    # Card details carried through from the row; not used for filtering.
    grant_type: str | None = None
    funding_amount: str | None = None
    min_gpa: float | None = None
    covers_tuition: bool = False
    covers_living: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Listing:
        """
        Build a Listing from a `grants` row joined with its university.
        Raises ValueError when the row has no id or no creation timestamp.
        """
        listing_id = row.get("id")
        if listing_id is None or str(listing_id) == "":
            raise ValueError(f"listing row without id: {row!r}")
        created_at = parse_timestamp(row.get("created_at"))
        if created_at is None:
            raise ValueError(f"listing {listing_id!r} has no created_at")

        min_gpa = row.get("min_gpa")
        return cls(
            id=str(listing_id),
            title=str(row.get("title") or ""),
            description=str(row.get("description") or ""),
            degree_levels=_tags(row.get("degree_levels")),
            fields_of_study=_tags(row.get("fields_of_study")),
            funder=FundingSource.from_row(row.get("universities")),
            deadline=parse_timestamp(row.get("deadline")),
            created_at=created_at,
            is_featured=bool(row.get("is_featured")),
            grant_type=row.get("grant_type") or None,
            funding_amount=(str(row["funding_amount"]) if row.get("funding_amount") is not None else None),
            min_gpa=float(min_gpa) if min_gpa is not None else None,
            covers_tuition=bool(row.get("covers_tuition")),
            covers_living=bool(row.get("covers_living")),
        )

    @property
    def funder_name(self) -> str:
        return self.funder.name if self.funder else ""

    @property
    def funder_country(self) -> str | None:
        return self.funder.country if self.funder else None


@dataclass(frozen=True)
class User:
    id: str


@dataclass
class LoadState:
    """
    Incremental-load bookkeeping.
    - loaded_count: listings currently in the store
    - total_count: authoritative server count (fetched once)
    - is_loading_more: true only while one batch fetch is in flight
    """

    loaded_count: int = 0
    total_count: int = 0
    is_loading_more: bool = False
    exhausted: bool = False  # server returned an empty batch

    @property
    def has_more(self) -> bool:
        if self.exhausted:
            return False
        return self.loaded_count < self.total_count


def _tags(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value if v)
