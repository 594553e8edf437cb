from spec_portal.catalog.cache import CacheEntry, SpecCache


class TestSpecCache:
    def test_get_missing_key(self):
        assert SpecCache().get(("en", "v2")) is None

    def test_put_then_get(self):
        cache = SpecCache()
        cache.put(("en", "v2"), ["spec"], 100.0)
        entry = cache.get(("en", "v2"))
        assert entry.value == ["spec"]
        assert entry.timestamp == 100.0
        assert ("en", "v2") in cache

    def test_put_overwrites(self):
        cache = SpecCache()
        cache.put("k", [1], 1.0)
        cache.put("k", [2], 2.0)
        assert cache.get("k").value == [2]
        assert len(cache) == 1

    def test_put_keeps_value_identity(self):
        cache = SpecCache()
        value = ["a"]
        cache.put("k", value, 0.0)
        assert cache.get("k").value is value

    def test_clear_removes_all_keys(self):
        cache = SpecCache()
        cache.put(("en", "v1"), [], 0.0)
        cache.put(("ar", "v2"), [], 0.0)
        cache.clear()
        assert len(cache) == 0
        assert cache.get(("en", "v1")) is None


class TestCacheEntry:
    def test_fresh_within_ttl(self):
        entry = CacheEntry(value=[], timestamp=1000.0)
        assert entry.is_fresh(1299.9, 300)

    def test_stale_at_ttl(self):
        entry = CacheEntry(value=[], timestamp=1000.0)
        assert not entry.is_fresh(1300.0, 300)
