# =============================================================================
# tests/unit/test_local_cache.py
# Unit Tests for the SQLite snapshot cache
# =============================================================================

import pytest

from school_core.errors.exceptions import SerializationFailure
from school_core.offline.local_cache import CacheKeys, LocalCache


class TestCacheKeys:

    def test_default_keys(self):
        keys = CacheKeys()

        assert keys.profile == "escola-cadastro"
        assert keys.projects == "escola-projetos"
        assert keys.class_groups == "escola-turmas-projetos"
        assert keys.assignments == "escola-atribuicoes-projetos"

    def test_namespace_prefix(self):
        assert CacheKeys("demo").projects == "demo-projetos"


class TestLocalCache:

    def test_save_and_load(self, cache):
        snapshot = [{"id": "p1", "name": "Coral", "active": True}]

        assert cache.save(cache.keys.projects, snapshot)
        assert cache.load(cache.keys.projects) == snapshot

    def test_missing_key_is_none(self, cache):
        assert cache.load("nothing-here") is None

    def test_save_replaces_previous_snapshot(self, cache):
        cache.save("k", [1, 2, 3])
        cache.save("k", [])

        assert cache.load("k") == []

    def test_corrupt_snapshot_raises(self, cache):
        with cache.transaction() as conn:
            conn.execute("INSERT INTO snapshots (key, value) VALUES (?, ?)", ["k", "{not json"])

        with pytest.raises(SerializationFailure) as exc_info:
            cache.load("k")

        assert exc_info.value.details["key"] == "k"

    def test_unserializable_value_is_not_raised(self, cache):
        assert cache.save("k", {"when": object()}) is False
        assert cache.load("k") is None

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "nested" / "school.db"
        first = LocalCache(path)
        first.save(first.keys.profile, {"name": "Escola"})
        first.close()

        second = LocalCache(path)
        try:
            assert second.load(second.keys.profile) == {"name": "Escola"}
        finally:
            second.close()

    def test_clear(self, cache):
        cache.save("a", 1)
        cache.save("b", 2)

        cache.clear()

        assert cache.load("a") is None
        assert cache.load("b") is None

    def test_in_memory_cache(self):
        cache = LocalCache()
        cache.save("k", {"x": 1})

        assert cache.load("k") == {"x": 1}
        cache.close()
