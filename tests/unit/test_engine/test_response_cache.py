"""Unit tests for the response cache."""

from tagoio_engine.fetch.cache import CacheEntry, ResponseCache
from tests.helpers.clock import FakeClock


class TestCacheEntry:
    """Tests for entry visibility."""

    def test_live_before_expiry(self) -> None:
        """Test that entries are visible strictly before expiry."""
        entry = CacheEntry(value="v", expires_at=10.0)

        assert entry.is_live(9.999) is True
        assert entry.is_live(10.0) is False


class TestResponseCache:
    """Tests for TTL behavior of ResponseCache."""

    def test_set_and_get(self) -> None:
        """Test a basic round trip."""
        cache = ResponseCache(clock=FakeClock())
        cache.set(1, {"id": "abc"}, ttl_ms=5000)

        assert cache.get(1) == {"id": "abc"}
        assert 1 in cache

    def test_miss_returns_default(self) -> None:
        """Test lookups of unknown keys."""
        cache = ResponseCache(clock=FakeClock())

        assert cache.get(42) is None
        assert cache.get(42, default="fallback") == "fallback"
        assert cache.lookup(42) is None

    def test_cached_none_is_a_hit(self) -> None:
        """Test that a None result is distinguishable from a miss."""
        cache = ResponseCache(clock=FakeClock())
        cache.set(7, None, ttl_ms=1000)

        entry = cache.lookup(7)

        assert entry is not None
        assert entry.value is None

    def test_entry_expires(self) -> None:
        """Test that entries disappear once their TTL elapses."""
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set(1, "value", ttl_ms=5000)

        clock.advance_ms(4999)
        assert cache.get(1) == "value"

        clock.advance_ms(1)
        assert cache.get(1) is None
        assert len(cache) == 0

    def test_sweep_removes_only_expired(self) -> None:
        """Test the opportunistic sweep."""
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("short", 1, ttl_ms=100)
        cache.set("long", 2, ttl_ms=10_000)

        clock.advance_ms(500)
        removed = cache.sweep()

        assert removed == 1
        assert len(cache) == 1
        assert cache.get("long") == 2

    def test_set_replaces_entry(self) -> None:
        """Test that setting a key again replaces value and expiry."""
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set(1, "old", ttl_ms=100)
        first = cache.lookup(1)
        cache.set(1, "new", ttl_ms=1000)

        assert cache.lookup(1) is not first
        clock.advance_ms(500)
        assert cache.get(1) == "new"

    def test_clear(self) -> None:
        """Test explicit clearing."""
        cache = ResponseCache(clock=FakeClock())
        cache.set(1, "a", ttl_ms=1000)
        cache.set(2, "b", ttl_ms=1000)

        cache.clear()

        assert len(cache) == 0
