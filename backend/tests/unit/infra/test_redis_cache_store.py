"""Tests for RedisCacheStore against fakeredis."""

from __future__ import annotations

import logging

import pytest

from authcore.infra.redis.redis_cache_store import RedisCacheStore
from authcore.services._shared.ports import CacheStatus


@pytest.fixture()
def store(fake_redis) -> RedisCacheStore:
    return RedisCacheStore(fake_redis, default_ttl=60, scan_batch=2)


@pytest.fixture()
def down(broken_redis) -> RedisCacheStore:
    return RedisCacheStore(broken_redis)


class TestRedisCacheStore:
    def test_get_distinguishes_miss_and_cached_null(self, store):
        assert store.get("absent").status is CacheStatus.MISS

        store.set("nothing", None)
        lookup = store.get("nothing")
        assert lookup.hit
        assert lookup.value is None

    def test_set_uses_json_and_ttl(self, store, fake_redis):
        assert store.set("user:1", {"id": "1", "roles": ["USER"]}, ttl=30)
        assert fake_redis.get("user:1") == b'{"id": "1", "roles": ["USER"]}'
        assert 0 < fake_redis.ttl("user:1") <= 30
        assert store.get("user:1").value == {"id": "1", "roles": ["USER"]}

    def test_set_falls_back_to_default_ttl(self, store, fake_redis):
        store.set("k", True)
        assert 0 < fake_redis.ttl("k") <= 60

    def test_undecodable_payload_is_an_error(self, store, fake_redis):
        fake_redis.set("raw", b"not-json{")
        assert store.get("raw").status is CacheStatus.ERROR

    def test_set_many_writes_every_key(self, store, fake_redis):
        written = store.set_many(["refresh_token:a", "refresh_token:b"], True, ttl=100)
        assert written == 2
        assert store.get("refresh_token:a").value is True
        assert 0 < fake_redis.ttl("refresh_token:b") <= 100

    def test_set_many_with_no_keys(self, store):
        assert store.set_many([], True) == 0

    def test_delete(self, store):
        store.set("k", 1)
        assert store.delete("k") is True
        assert store.get("k").status is CacheStatus.MISS

    def test_delete_by_prefix_removes_only_matching_keys(self, store, fake_redis):
        for i in range(5):
            store.set(f"session:{i}", i)
        store.set("user:1", "keep")

        assert store.delete_by_prefix("session:") == 5
        assert fake_redis.keys("session:*") == []
        assert store.get("user:1").value == "keep"

    def test_delete_by_prefix_escapes_glob_characters(self, store):
        store.set("a*b:1", 1)
        store.set("axb:1", 2)

        assert store.delete_by_prefix("a*b:") == 1
        assert store.get("axb:1").value == 2

    def test_get_or_set_caches_factory_result(self, store):
        calls = []

        def load():
            calls.append(1)
            return {"v": 1}

        assert store.get_or_set("k", load) == {"v": 1}
        assert store.get_or_set("k", load) == {"v": 1}
        assert len(calls) == 1


class TestRedisCacheStoreOutage:
    """Every transport failure degrades instead of raising."""

    def test_get_reports_error(self, down):
        assert down.get("k").status is CacheStatus.ERROR

    def test_writes_report_failure(self, down):
        assert down.set("k", 1) is False
        assert down.delete("k") is False
        assert down.set_many(["a", "b"], True) == 0
        assert down.delete_by_prefix("session:") == 0

    def test_get_or_set_falls_through_to_factory(self, down):
        assert down.get_or_set("k", lambda: "fresh") == "fresh"

    def test_failures_are_logged_without_token_values(self, down, caplog):
        token = "f" * 128
        with caplog.at_level(logging.ERROR, logger="authcore.infra.redis.redis_cache_store"):
            down.get(f"refresh_token:{token}")

        assert caplog.records
        record = caplog.records[-1]
        assert record.operation == "get"
        assert token not in record.cache_key
        assert record.cache_key.startswith("refresh_token:ffffffff")
