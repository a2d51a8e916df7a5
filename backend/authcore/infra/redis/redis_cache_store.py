from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from authcore.services._shared.cache_keys import DEFAULT_TTL, loggable_key
from authcore.services._shared.ports import CacheLookup, CacheStore

log = logging.getLogger(__name__)

_GLOB_SPECIALS = re.compile(r"([*?\[\]\\])")


@dataclass(slots=True)
class RedisCacheStore(CacheStore):
    """
    Redis-backed cache with JSON values.

    Every :class:`redis.exceptions.RedisError` is logged and swallowed here,
    so a cache outage degrades to misses instead of failing requests.

    :param r: A Redis client (already connected).
    :param default_ttl: TTL in seconds when callers pass none.
    :param scan_batch: Keys per ``SCAN`` page and per bulk ``DEL``.
    """

    r: redis.Redis
    default_ttl: int = DEFAULT_TTL
    scan_batch: int = 500

    def _failed(self, operation: str, key: str) -> None:
        log.error(
            "cache %s failed",
            operation,
            extra={"operation": operation, "cache_key": loggable_key(key)},
            exc_info=True,
        )

    def get(self, key: str) -> CacheLookup:
        try:
            raw = self.r.get(key)
        except RedisError:
            self._failed("get", key)
            return CacheLookup.error()
        if raw is None:
            return CacheLookup.miss()
        try:
            return CacheLookup.found(json.loads(raw))
        except ValueError:
            self._failed("decode", key)
            return CacheLookup.error()

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        try:
            self.r.set(key, json.dumps(value, default=str), ex=ttl or self.default_ttl)
        except RedisError:
            self._failed("set", key)
            return False
        return True

    def set_many(self, keys: Iterable[str], value: Any, ttl: int | None = None) -> int:
        """
        Write ``value`` under every key through one non-transactional pipeline.

        Commands are independent: a failing ``SET`` is logged and the others
        still apply.
        """
        keys = list(keys)
        if not keys:
            return 0
        payload = json.dumps(value, default=str)
        pipe = self.r.pipeline(transaction=False)
        for key in keys:
            pipe.set(key, payload, ex=ttl or self.default_ttl)
        try:
            results = pipe.execute(raise_on_error=False)
        except RedisError:
            self._failed("set_many", keys[0])
            return 0
        written = 0
        for key, result in zip(keys, results):
            if isinstance(result, Exception):
                log.error(
                    "cache set failed: %s",
                    result,
                    extra={"operation": "set_many", "cache_key": loggable_key(key)},
                )
            else:
                written += 1
        return written

    def delete(self, key: str) -> bool:
        try:
            self.r.delete(key)
        except RedisError:
            self._failed("delete", key)
            return False
        return True

    def delete_by_prefix(self, prefix: str) -> int:
        """
        Remove every key starting with ``prefix`` using ``SCAN`` + batched ``DEL``.

        Best-effort: on a transport error the keys deleted so far are counted
        and the rest are left for the next run.
        """
        pattern = _GLOB_SPECIALS.sub(r"\\\1", prefix) + "*"
        deleted = 0
        batch: list[bytes] = []
        try:
            for key in self.r.scan_iter(match=pattern, count=self.scan_batch):
                batch.append(key)
                if len(batch) >= self.scan_batch:
                    deleted += int(self.r.delete(*batch))
                    batch.clear()
            if batch:
                deleted += int(self.r.delete(*batch))
        except RedisError:
            self._failed("delete_by_prefix", prefix)
        return deleted
