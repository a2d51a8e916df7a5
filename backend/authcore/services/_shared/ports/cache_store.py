from __future__ import annotations

import json
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Any, Protocol

from authcore.core.clock import utc_now


class CacheStatus(Enum):
    """Outcome of a cache read."""

    HIT = auto()
    MISS = auto()
    ERROR = auto()


@dataclass(frozen=True, slots=True)
class CacheLookup:
    """
    Result of :meth:`CacheStore.get`.

    A HIT whose ``value`` is ``None`` means ``null`` was cached on purpose and
    is distinct from a MISS. ERROR means the transport failed; callers treat
    it like a miss.

    :ivar status: HIT, MISS or ERROR.
    :ivar value: Decoded value on HIT, otherwise ``None``.
    """

    status: CacheStatus
    value: Any = None

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT

    @classmethod
    def found(cls, value: Any) -> CacheLookup:
        return cls(CacheStatus.HIT, value)

    @classmethod
    def miss(cls) -> CacheLookup:
        return cls(CacheStatus.MISS)

    @classmethod
    def error(cls) -> CacheLookup:
        return cls(CacheStatus.ERROR)


class CacheStore(Protocol):
    """
    Key/value cache with TTLs.

    Implementations never raise on transport failures: reads report
    :attr:`CacheStatus.ERROR`, writes and deletes report failure through
    their return value, and the failure is logged by the adapter.
    Values must be JSON-serializable.
    """

    def get(self, key: str) -> CacheLookup: ...

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store ``value`` under ``key``. :returns: True when written."""

    def set_many(self, keys: Iterable[str], value: Any, ttl: int | None = None) -> int:
        """
        Write the same value under several keys as independent writes.

        :returns: Number of keys written successfully.
        """

    def delete(self, key: str) -> bool:
        """Remove ``key``. :returns: True when the command succeeded."""

    def delete_by_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``. :returns: keys removed."""

    def get_or_set(self, key: str, factory: Callable[[], Any], ttl: int | None = None) -> Any:
        """
        Read-through helper.

        A HIT returns the cached value, including a cached ``None``. On MISS
        or ERROR the factory runs and a non-``None`` result is cached.

        :param key: Cache key.
        :param factory: Loader called on miss.
        :param ttl: TTL for the stored result, in seconds.
        :returns: Cached or freshly loaded value.
        """
        lookup = self.get(key)
        if lookup.hit:
            return lookup.value
        value = factory()
        if value is not None:
            self.set(key, value, ttl)
        return value


class InMemoryCacheStore(CacheStore):
    """
    Process-local cache used by unit tests.

    Values go through the same JSON encoding as the Redis adapter, and
    expiry follows the injected clock so TTLs can be tested deterministically.
    """

    def __init__(
        self,
        *,
        default_ttl: int = 300,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.default_ttl = default_ttl
        self.clock = clock
        self._data: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def _now(self) -> float:
        return self.clock().timestamp()

    def _live(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        payload, expires = entry
        if expires <= self._now():
            del self._data[key]
            return None
        return payload

    def get(self, key: str) -> CacheLookup:
        with self._lock:
            payload = self._live(key)
        if payload is None:
            return CacheLookup.miss()
        return CacheLookup.found(json.loads(payload))

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        payload = json.dumps(value, default=str)
        with self._lock:
            self._data[key] = (payload, self._now() + (ttl or self.default_ttl))
        return True

    def set_many(self, keys: Iterable[str], value: Any, ttl: int | None = None) -> int:
        return sum(1 for key in keys if self.set(key, value, ttl))

    def delete(self, key: str) -> bool:
        with self._lock:
            self._data.pop(key, None)
        return True

    def delete_by_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [k for k in self._data if k.startswith(prefix)]
            for k in doomed:
                del self._data[k]
        return len(doomed)

    def ttl(self, key: str) -> float | None:
        """Remaining lifetime in seconds, or ``None`` when absent."""
        with self._lock:
            if self._live(key) is None:
                return None
            return self._data[key][1] - self._now()
