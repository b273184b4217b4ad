"""Tests for cache keys, cache stores and the cached recovery wrapper."""
import pytest

from sitesmith.core.recovery import RecoveryFailure, RecoveryStage
from sitesmith.core.result_cache import (
    FileCacheStore,
    InMemoryCacheStore,
    make_cache_key,
    recover_with_cache,
)

GOOD_RAW = '{"files": {"index.html": "<h1>Hi</h1>"}}'
PARAMS = {"name": "Demo", "description": "A demo site", "userFlow": ["land", "sign up"]}


class CountingModel:
    def __init__(self, raw=GOOD_RAW):
        self.raw = raw
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.raw


class BrokenStore:
    def get(self, key):
        raise RuntimeError("store down")

    def set(self, key, value):
        raise RuntimeError("store down")


class TestCacheKey:
    def test_field_order_does_not_matter(self):
        a = make_cache_key({"name": "a", "description": "b"})
        b = make_cache_key({"description": "b", "name": "a"})
        assert a == b

    def test_values_change_key(self):
        assert make_cache_key({"name": "a"}) != make_cache_key({"name": "b"})
        assert make_cache_key({"flow": ["x", "y"]}) != make_cache_key({"flow": ["y", "x"]})

    def test_none_counts_as_absent(self):
        assert make_cache_key({"name": "a", "extra": None}) == make_cache_key({"name": "a"})

    def test_namespace_prefix(self):
        key = make_cache_key({"name": "a"})
        assert key.startswith("generate-code-")
        assert make_cache_key({"name": "a"}, namespace="other") != key


class TestInMemoryStore:
    def test_last_write_wins(self):
        store = InMemoryCacheStore()
        store.set("k", 1)
        store.set("k", 2)

        assert store.get("k") == 2
        assert store.entry("k").created_at > 0
        assert len(store) == 1

    def test_missing_key(self):
        assert InMemoryCacheStore().get("nope") is None


class TestFileStore:
    def test_round_trip(self, tmp_path):
        store = FileCacheStore(str(tmp_path / "cache"))
        store.set("abc-123", {"files": {}})

        assert store.get("abc-123") == {"files": {}}
        assert (tmp_path / "cache" / "abc-123.json").exists()
        assert not (tmp_path / "cache" / "abc-123.json.tmp").exists()

    def test_missing_and_corrupt_entries_read_as_none(self, tmp_path):
        store = FileCacheStore(str(tmp_path))
        (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")

        assert store.get("missing") is None
        assert store.get("bad") is None

    def test_unsafe_key_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            FileCacheStore(str(tmp_path)).get("../etc/passwd")

    def test_unwritable_dir_does_not_raise(self, tmp_path):
        blocked = tmp_path / "blocked"
        blocked.write_text("a file, not a folder", encoding="utf-8")
        store = FileCacheStore(str(blocked))

        store.set("k", 1)
        assert store.get("k") is None


class TestRecoverWithCache:
    @pytest.mark.asyncio
    async def test_hit_skips_model(self):
        store = InMemoryCacheStore()
        model = CountingModel()

        first = await recover_with_cache(PARAMS, model, store)
        second = await recover_with_cache(dict(reversed(list(PARAMS.items()))), model, store)

        assert model.calls == 1
        assert not first.cache_hit
        assert second.cache_hit
        assert second.result.stage == RecoveryStage.CACHED
        assert second.result.document == first.result.document
        assert first.key == second.key

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self):
        store = InMemoryCacheStore()
        model = CountingModel(raw="no json here")

        first = await recover_with_cache(PARAMS, model, store)
        await recover_with_cache(PARAMS, model, store)

        assert first.result.failure == RecoveryFailure.NO_CANDIDATE
        assert len(store) == 0
        assert model.calls == 2

    @pytest.mark.asyncio
    async def test_malformed_entry_is_a_miss(self):
        store = InMemoryCacheStore()
        key = make_cache_key(PARAMS)
        store.set(key, {"nope": 1})
        model = CountingModel()

        outcome = await recover_with_cache(PARAMS, model, store)

        assert not outcome.cache_hit
        assert model.calls == 1
        assert "files" in store.get(key)

    @pytest.mark.asyncio
    async def test_broken_store_degrades_to_miss(self):
        model = CountingModel()

        outcome = await recover_with_cache(PARAMS, model, BrokenStore())

        assert outcome.result.ok
        assert model.calls == 1

    @pytest.mark.asyncio
    async def test_no_store(self):
        model = CountingModel()

        await recover_with_cache(PARAMS, model, None)
        await recover_with_cache(PARAMS, model, None)

        assert model.calls == 2

    @pytest.mark.asyncio
    async def test_model_errors_propagate(self):
        async def failing():
            raise RuntimeError("quota")

        with pytest.raises(RuntimeError):
            await recover_with_cache(PARAMS, failing, InMemoryCacheStore())
