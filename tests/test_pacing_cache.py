"""Tests for request pacing and the decimals cache."""

import threading
import time

import pytest

from wallet_accumulator.rpc.cache import CacheEntry, DecimalsCache
from wallet_accumulator.rpc.pacing import RequestPacer


class FakeClock:
    """Manual clock whose sleep advances time."""

    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_first_request_is_not_delayed():
    """Test the first wait returns immediately."""
    clock = FakeClock()
    pacer = RequestPacer(0.5, sleep=clock.sleep, clock=clock)

    assert pacer.wait() == 0.0
    assert clock.sleeps == []


def test_consecutive_requests_are_spaced():
    """Test back-to-back waits sleep the remaining interval."""
    clock = FakeClock()
    pacer = RequestPacer(0.5, sleep=clock.sleep, clock=clock)

    pacer.wait()
    clock.now += 0.2
    slept = pacer.wait()

    assert slept == pytest.approx(0.3)
    assert clock.sleeps == [pytest.approx(0.3)]


def test_no_delay_after_interval_elapsed():
    """Test no sleep when the interval already passed."""
    clock = FakeClock()
    pacer = RequestPacer(0.2, sleep=clock.sleep, clock=clock)

    pacer.wait()
    clock.now += 1.0

    assert pacer.wait() == 0.0
    assert clock.sleeps == []


def test_reset_forgets_previous_request():
    """Test reset lets the next request start immediately."""
    clock = FakeClock()
    pacer = RequestPacer(0.2, sleep=clock.sleep, clock=clock)

    pacer.wait()
    pacer.reset()

    assert pacer.wait() == 0.0


def test_negative_interval_rejected():
    """Test invalid interval."""
    with pytest.raises(ValueError):
        RequestPacer(-1)


def test_shared_pacer_across_threads():
    """Test concurrent callers are serialized to one request per interval."""
    clock = FakeClock()
    pacer = RequestPacer(0.2, sleep=clock.sleep, clock=clock)

    threads = [threading.Thread(target=pacer.wait) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    # The first caller goes straight through, every later one waits a full interval
    assert clock.sleeps == [pytest.approx(0.2)] * 4


def test_cache_entry_expiry():
    """Test TTL expiry of a cache entry."""
    assert not CacheEntry(6, ttl=None, created_at=time.time() - 1000).is_expired()
    assert not CacheEntry(6, ttl=60).is_expired()
    assert CacheEntry(6, ttl=1, created_at=time.time() - 10).is_expired()


def test_decimals_cache_case_insensitive_address():
    """Test contract addresses are matched regardless of checksum casing."""
    cache = DecimalsCache()
    cache.set("ethereum", "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", 6)

    assert cache.get("ethereum", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48") == 6
    assert cache.get("base", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48") is None
    assert len(cache) == 1


def test_decimals_cache_expired_entry_is_evicted():
    """Test an expired entry reads as a miss and is removed."""
    cache = DecimalsCache(default_ttl=60)
    cache.set("bsc", "0xabc", 18)
    cache._cache[("bsc", "0xabc")].created_at -= 120

    assert cache.get("bsc", "0xabc") is None
    assert len(cache) == 0


def test_decimals_cache_clear():
    """Test clearing the cache."""
    cache = DecimalsCache()
    cache.set("ethereum", "0x1", 6)
    cache.set("polygon", "0x2", 18)

    cache.clear()

    assert len(cache) == 0
