# tests/test_registry.py
import pytest

from modules.scholarship_catalog.lib import backends
from modules.scholarship_catalog.lib.backends.base import CatalogBackend
from modules.scholarship_catalog.lib.backends.memory import MemoryBackend
from modules.scholarship_catalog.lib.backends.postgrest import PostgrestBackend
from modules.scholarship_catalog.lib.backends.sqlite import SqliteBackend
from modules.scholarship_catalog.lib.config import Settings


def test_builtin_backends_are_registered():
    kinds = backends.all_kinds()
    assert kinds["memory"] is MemoryBackend
    assert kinds["sqlite"] is SqliteBackend
    assert kinds["postgrest"] is PostgrestBackend


def test_lookup_is_case_insensitive_and_strict():
    assert backends.get(" Memory ") is MemoryBackend
    with pytest.raises(KeyError):
        backends.get("graphql")


def test_register_rejects_missing_kind_and_duplicates():
    class NoKind(MemoryBackend):
        kind = ""

    class Impostor(MemoryBackend):
        kind = "memory"

    with pytest.raises(ValueError):
        backends.register(NoKind)
    with pytest.raises(ValueError):
        backends.register(Impostor)
    # Re-registering the same class is fine.
    assert backends.register(MemoryBackend) is MemoryBackend


def test_from_settings_builds_each_backend(tmp_path):
    mem = backends.get("memory").from_settings(Settings.from_env_and_kwargs({"backend": "memory"}))
    assert isinstance(mem, CatalogBackend) and mem.kind == "memory"

    s = Settings.from_env_and_kwargs({"backend": "sqlite", "sqlite_path": str(tmp_path / "c.db")})
    lite = backends.get("sqlite").from_settings(s)
    assert lite.sqlite_path.endswith("c.db")

    s = Settings.from_env_and_kwargs({"backend": "postgrest", "rest_url": "https://db.example.test/rest/v1", "api_key": "k"})
    rest = backends.get("postgrest").from_settings(s)
    assert rest.base_url == "https://db.example.test/rest/v1"


def test_build_uses_settings_backend(tmp_path):
    s = Settings.from_env_and_kwargs({"backend": "sqlite", "sqlite_path": str(tmp_path / "b.db")})
    assert isinstance(backends.build(s), SqliteBackend)

    s = Settings.from_env_and_kwargs({"backend": "graphql"})
    with pytest.raises(KeyError):
        backends.build(s)
