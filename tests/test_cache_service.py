import time

from trackwise_crypto.models.summary import WalletSnapshot
from trackwise_crypto.services.cache_service import CacheService, PortfolioCacheService


def test_set_and_get():
    cache = CacheService(default_ttl=30)
    cache.set("key", {"value": 1})

    assert cache.get("key") == {"value": 1}
    assert cache.get("missing") is None
    assert len(cache) == 1


def test_expired_entries_are_dropped():
    cache = CacheService(default_ttl=30)
    cache.set("key", 1)
    cache._cache["key"].timestamp = time.time() - 60

    assert cache.get("key") is None
    assert len(cache) == 0


def test_get_or_load_calls_loader_once():
    cache = CacheService()
    calls = []

    def loader():
        calls.append(1)
        return "data"

    assert cache.get_or_load("k", loader) == "data"
    assert cache.get_or_load("k", loader) == "data"
    assert len(calls) == 1


def test_cleanup_and_clear():
    cache = CacheService(default_ttl=30)
    cache.set("old", 1)
    cache.set("new", 2)
    cache._cache["old"].timestamp = time.time() - 60

    assert cache.cleanup_expired() == 1
    assert cache.delete("new")
    assert not cache.delete("new")
    cache.set("a", 1)
    assert cache.clear() == 1


def test_entry_ttl_overrides_default():
    cache = CacheService(default_ttl=30)
    cache.set("short", 1, ttl=5)
    cache.set("long", 2)
    for key in ("short", "long"):
        cache._cache[key].timestamp = time.time() - 10

    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_stats_count_hits_and_misses():
    cache = CacheService()
    cache.set("k", 1)
    cache.get("k")
    cache.get("missing")

    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 0.5
    assert stats["total_entries"] == 1


def test_snapshot_cache(drift_wallet, hyperliquid_wallet):
    cache = PortfolioCacheService()
    cache.cache_snapshot(WalletSnapshot(wallet=drift_wallet))
    cache.cache_snapshot(WalletSnapshot(wallet=hyperliquid_wallet))
    cache.set("other", 1)

    assert cache.get_snapshot(drift_wallet.address).wallet == drift_wallet
    assert cache.get_snapshot(drift_wallet.address, sub_account_id=1) is None
    assert cache.invalidate_snapshots() == 2
    assert cache.get("other") == 1
