from __future__ import annotations

import asyncio
import contextlib
import json
import os
import sqlite3
from collections.abc import Iterable
from typing import Any

from ..config import Settings
from ..logging_bridge import error as log_error
from ..models import Listing
from ..utils import now_iso
from .base import BackendError, CatalogBackend
from .registry import register

# ---- Public API -------------------------------------------------------------


def init_db(sqlite_path: str) -> None:
    """
    Ensure the SQLite database and schema exist.
    Safe to call multiple times.
    """
    _ensure_dir(sqlite_path)
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)


def seed_listings(sqlite_path: str, listings: Iterable[Listing]) -> int:
    """
    Upsert listings (and their funding sources) into the catalog tables.

    Returns:
        Number of listing rows written.
    """
    init_db(sqlite_path)
    written = 0
    try:
        with contextlib.closing(_connect(sqlite_path)) as conn:
            _apply_pragmas(conn)
            cur = conn.cursor()
            cur.execute("BEGIN IMMEDIATE")
            for listing in listings:
                funder = listing.funder
                if funder is not None:
                    cur.execute(
                        """
                        INSERT INTO universities (id, name, country, city, logo_url)
                        VALUES (?, ?, ?, ?, ?)
                        ON CONFLICT(id) DO UPDATE SET
                          name = excluded.name,
                          country = excluded.country,
                          city = excluded.city,
                          logo_url = excluded.logo_url
                        """,
                        (funder.id, funder.name, funder.country, funder.city, funder.logo_url),
                    )
                cur.execute(
                    """
                    INSERT OR REPLACE INTO grants (
                      id, title, description, grant_type, university_id, degree_levels,
                      fields_of_study, min_gpa, funding_amount, covers_tuition, covers_living,
                      deadline, is_featured, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        listing.id,
                        listing.title,
                        listing.description,
                        listing.grant_type,
                        funder.id if funder else None,
                        json.dumps(list(listing.degree_levels)),
                        json.dumps(list(listing.fields_of_study)),
                        listing.min_gpa,
                        listing.funding_amount,
                        int(listing.covers_tuition),
                        int(listing.covers_living),
                        listing.deadline.isoformat() if listing.deadline else None,
                        int(listing.is_featured),
                        listing.created_at.isoformat(),
                    ),
                )
                written += 1
            conn.commit()
    except Exception as e:
        log_error({
            "component": "scholarship_catalog.sqlite",
            "op": "seed_listings",
            "sqlite_path": sqlite_path,
            "error": repr(e),
        })
        raise
    return written


def fetch_listing_rows(sqlite_path: str, offset: int, limit: int) -> list[dict[str, Any]]:
    """Rows shaped like the hosted store's (university embedded under 'universities')."""
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)
        cur = conn.execute(
            """
            SELECT g.id, g.title, g.description, g.grant_type, g.university_id,
                   g.degree_levels, g.fields_of_study, g.min_gpa, g.funding_amount,
                   g.covers_tuition, g.covers_living, g.deadline, g.is_featured, g.created_at,
                   u.id, u.name, u.country, u.city, u.logo_url
              FROM grants g
              LEFT JOIN universities u ON u.id = g.university_id
             ORDER BY g.created_at DESC, g.id DESC
             LIMIT ? OFFSET ?
            """,
            (limit, offset),
        )
        rows = cur.fetchall()
    return [_row_to_dict(r) for r in rows]


def count_rows(sqlite_path: str, table: str = "grants") -> int:
    """Return total rows in a catalog table; 0 if DB missing/empty."""
    if table not in ("grants", "universities", "saved_grants"):
        raise ValueError(f"unknown table {table!r}")
    if not os.path.exists(sqlite_path):
        return 0
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)
        (n,) = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()
    return int(n or 0)


def saved_ids(sqlite_path: str, user_id: str) -> list[str]:
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)
        rows = conn.execute(
            "SELECT grant_id FROM saved_grants WHERE user_id = ? ORDER BY created_at DESC",
            (user_id,),
        ).fetchall()
    return [str(r[0]) for r in rows]


def add_save(sqlite_path: str, user_id: str, listing_id: str) -> None:
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)
        # Saving twice is a no-op rather than a conflict.
        conn.execute(
            "INSERT OR IGNORE INTO saved_grants (user_id, grant_id, created_at) VALUES (?, ?, ?)",
            (user_id, listing_id, now_iso()),
        )


def remove_save(sqlite_path: str, user_id: str, listing_id: str) -> None:
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)
        conn.execute(
            "DELETE FROM saved_grants WHERE user_id = ? AND grant_id = ?",
            (user_id, listing_id),
        )


def reset_db(sqlite_path: str) -> None:
    """
    Remove the DB file entirely (for pytest fixtures).
    Safe if it doesn't exist.
    """
    for suffix in ("", "-wal", "-shm"):
        with contextlib.suppress(FileNotFoundError):
            os.remove(sqlite_path + suffix)


# ---- Backend ----------------------------------------------------------------


@register
class SqliteBackend(CatalogBackend):
    """
    Local relational store with the hosted schema, for development and tests.
    Each call opens its own connection inside a worker thread.
    """

    kind = "sqlite"

    def __init__(self, sqlite_path: str) -> None:
        self.sqlite_path = sqlite_path
        init_db(sqlite_path)

    @classmethod
    def from_settings(cls, settings: Settings) -> SqliteBackend:
        return cls(settings.sqlite_path)

    async def _call(self, op: str, fn: Any, *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, self.sqlite_path, *args)
        except (sqlite3.Error, OSError, ValueError) as e:
            raise BackendError(f"{op} failed: {e!r}") from e

    async def fetch_listings(self, offset: int, limit: int) -> list[Listing]:
        if limit <= 0:
            return []
        rows = await self._call("fetch_listings", fetch_listing_rows, offset, limit)
        try:
            return [Listing.from_row(r) for r in rows]
        except (TypeError, ValueError) as e:
            raise BackendError(f"fetch_listings: malformed row: {e}") from e

    async def count_listings(self) -> int:
        return await self._call("count_listings", count_rows)

    async def list_saved(self, user_id: str) -> list[str]:
        return await self._call("list_saved", saved_ids, user_id)

    async def insert_save(self, user_id: str, listing_id: str) -> None:
        await self._call("insert_save", add_save, user_id, listing_id)

    async def delete_save(self, user_id: str, listing_id: str) -> None:
        await self._call("delete_save", remove_save, user_id, listing_id)


# ---- Internal utilities -----------------------------------------------------


def _ensure_dir(sqlite_path: str) -> None:
    d = os.path.dirname(os.path.abspath(sqlite_path)) or "."
    os.makedirs(d, exist_ok=True)


def _connect(sqlite_path: str) -> sqlite3.Connection:
    # isolation_level=None gives autocommit mode; we'll manage transactions explicitly.
    return sqlite3.connect(sqlite_path, timeout=30.0, isolation_level=None)


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute("PRAGMA temp_store=MEMORY;")


def _ensure_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS universities (
          id       TEXT PRIMARY KEY,
          name     TEXT NOT NULL,
          country  TEXT,
          city     TEXT,
          logo_url TEXT
        );
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS grants (
          id              TEXT PRIMARY KEY,
          title           TEXT NOT NULL,
          description     TEXT,
          grant_type      TEXT,
          university_id   TEXT REFERENCES universities(id),
          degree_levels   TEXT NOT NULL DEFAULT '[]',
          fields_of_study TEXT NOT NULL DEFAULT '[]',
          min_gpa         REAL,
          funding_amount  TEXT,
          covers_tuition  INTEGER NOT NULL DEFAULT 0,
          covers_living   INTEGER NOT NULL DEFAULT 0,
          deadline        TEXT,
          is_featured     INTEGER NOT NULL DEFAULT 0,
          created_at      TEXT NOT NULL
        );
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS ix_grants_created_at ON grants (created_at DESC);")
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS saved_grants (
          id         INTEGER PRIMARY KEY,
          user_id    TEXT NOT NULL,
          grant_id   TEXT NOT NULL,
          created_at TEXT NOT NULL
        );
        """
    )
    conn.execute(
        """
        CREATE UNIQUE INDEX IF NOT EXISTS ux_saved_grants_user_grant
          ON saved_grants (user_id, grant_id);
        """
    )


def _row_to_dict(r: tuple) -> dict[str, Any]:
    (
        gid, title, description, grant_type, university_id, degree_levels, fields_of_study,
        min_gpa, funding_amount, covers_tuition, covers_living, deadline, is_featured, created_at,
        uid, uname, ucountry, ucity, ulogo,
    ) = r
    university = None
    if uid is not None:
        university = {"id": uid, "name": uname, "country": ucountry, "city": ucity, "logo_url": ulogo}
    return {
        "id": gid,
        "title": title,
        "description": description,
        "grant_type": grant_type,
        "university_id": university_id,
        "degree_levels": json.loads(degree_levels or "[]"),
        "fields_of_study": json.loads(fields_of_study or "[]"),
        "min_gpa": min_gpa,
        "funding_amount": funding_amount,
        "covers_tuition": bool(covers_tuition),
        "covers_living": bool(covers_living),
        "deadline": deadline,
        "is_featured": bool(is_featured),
        "created_at": created_at,
        "universities": university,
    }
