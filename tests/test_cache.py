# tests/test_cache.py

"""
Tests for caching functionality.
"""

from unittest.mock import patch

from core.cache import TTLCache, cache_clear, cache_delete_prefix, cache_get, cache_key, cache_set


def test_cache_set_and_get():
    cache_set("test_key", "test_value", ttl_seconds=60)
    assert cache_get("test_key") == "test_value"
    assert cache_get("missing_key") is None


def test_cache_expiration():
    """Entries expire once their TTL has passed."""
    cache = TTLCache(default_ttl=10)

    with patch("core.cache.monotonic", return_value=1000.0):
        cache.set("expiring_key", "value")
    with patch("core.cache.monotonic", return_value=1009.0):
        assert cache.get("expiring_key") == "value"
    with patch("core.cache.monotonic", return_value=1010.0):
        assert cache.get("expiring_key") is None

    assert len(cache) == 0


def test_cache_delete_prefix():
    """Prefix eviction only touches keys under that prefix."""
    cache_set(cache_key("plan_features", "free", "enabled"), {"reports"})
    cache_set(cache_key("plan_features", "freemium", "enabled"), {"sms_reminders"})

    removed = cache_delete_prefix(cache_key("plan_features", "free", ""))

    assert removed == 1
    assert cache_get("plan_features:free:enabled") is None
    assert cache_get("plan_features:freemium:enabled") == {"sms_reminders"}


def test_cache_clear():
    cache_set("key1", "value1")
    cache_set("key2", "value2")

    cache_clear()

    assert cache_get("key1") is None
    assert cache_get("key2") is None
