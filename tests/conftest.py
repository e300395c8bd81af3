# tests/conftest.py
import asyncio
import tempfile
import types
from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from modules.scholarship_catalog.lib import config as sc_config
from modules.scholarship_catalog.lib.backends.base import BackendError
from modules.scholarship_catalog.lib.backends.memory import MemoryBackend
from modules.scholarship_catalog.lib.models import FundingSource, Listing

BASE_TS = datetime(2025, 1, 1, tzinfo=timezone.utc)

_FUNDERS = [
    FundingSource(id="u1", name="Technical University of Munich", country="Germany", city="Munich"),
    FundingSource(id="u2", name="University of Toronto", country="Canada", city="Toronto"),
    FundingSource(id="u3", name="ETH Zurich", country="Switzerland", city="Zurich"),
]


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch):
    # Write logs to a throwaway dir so real logs stay clean (per test)
    tmp_logs = tempfile.mkdtemp(prefix="sc-pytest-logs-")
    monkeypatch.setenv("LOG_DIR", tmp_logs)
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    for name in ("CATALOG_BACKEND", "CATALOG_REST_URL", "CATALOG_API_KEY", "CATALOG_SQLITE_PATH"):
        monkeypatch.delenv(name, raising=False)
    yield tmp_logs


@pytest.fixture
def frozen_utc():
    with freeze_time("2025-01-01T00:00:00Z"):
        yield


# ---------------------------------------------------------------------
# Listing factories
# ---------------------------------------------------------------------
@pytest.fixture
def make_listing():
    """Build Listing i; larger i means older, so index order == server order."""

    def _make(i, **overrides):
        fields = {
            "id": f"g{i:03d}",
            "title": f"Scholarship {i}",
            "description": "Fully funded graduate position.",
            "degree_levels": ("masters",) if i % 2 else ("phd",),
            "fields_of_study": ("Engineering",) if i % 3 else ("Biology",),
            "funder": _FUNDERS[i % len(_FUNDERS)],
            "created_at": BASE_TS - timedelta(minutes=i),
            "deadline": None,
        }
        fields.update(overrides)
        return Listing(**fields)

    return _make


@pytest.fixture
def listings(make_listing):
    """100 listings in server order (newest first)."""
    return [make_listing(i) for i in range(100)]


@pytest.fixture
def memory_backend(listings):
    return MemoryBackend(listings)


@pytest.fixture
def settings():
    return sc_config.Settings.from_env_and_kwargs({"backend": "memory"})


# ---------------------------------------------------------------------
# Backends with controllable failure/latency
# ---------------------------------------------------------------------
@pytest.fixture
def gated_backend_cls():
    """MemoryBackend whose fetch_listings blocks until `gate` is set."""

    class Gated(MemoryBackend):
        def __init__(self, *a, **kw):
            super().__init__(*a, **kw)
            self.gate = asyncio.Event()

        async def fetch_listings(self, offset, limit):
            self.fetch_calls.append((offset, limit))
            await self.gate.wait()
            return list(self._listings[offset : offset + limit])

    return Gated


@pytest.fixture
def flaky_backend_cls():
    """
    MemoryBackend with switchable failures:
      fail_fetch, fail_count, fail_writes, fail_list_saved
    """

    class Flaky(MemoryBackend):
        def __init__(self, *a, **kw):
            super().__init__(*a, **kw)
            self.fail_fetch = False
            self.fail_count = False
            self.fail_writes = False
            self.fail_list_saved = False
            self.write_log = []

        async def fetch_listings(self, offset, limit):
            if self.fail_fetch:
                self.fetch_calls.append((offset, limit))
                raise BackendError("network down")
            return await super().fetch_listings(offset, limit)

        async def count_listings(self):
            if self.fail_count:
                raise BackendError("count failed")
            return await super().count_listings()

        async def list_saved(self, user_id):
            if self.fail_list_saved:
                raise BackendError("saved query failed")
            return await super().list_saved(user_id)

        async def insert_save(self, user_id, listing_id):
            await asyncio.sleep(0)
            self.write_log.append(("insert", listing_id))
            if self.fail_writes:
                raise BackendError("offline")
            await super().insert_save(user_id, listing_id)

        async def delete_save(self, user_id, listing_id):
            await asyncio.sleep(0)
            self.write_log.append(("delete", listing_id))
            if self.fail_writes:
                raise BackendError("offline")
            await super().delete_save(user_id, listing_id)

    return Flaky


@pytest.fixture
def redirects():
    """Collects sign-in redirects instead of navigating."""
    ns = types.SimpleNamespace(paths=[])
    ns.push = ns.paths.append
    return ns
