"""
authcore.services._shared.ports
===============================

Ports (hexagonal interfaces) the token lifecycle depends on.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider`, signing and decoding of access tokens.
- :mod:`cache_store`:
    :class:`~.CacheStore` with the tri-state :class:`~.CacheLookup`, used for
    the refresh-token blacklist and cache-aside user reads.

Concrete adapters live under ``authcore.infra``; the in-memory doubles here
back the unit tests.
"""

from __future__ import annotations

from .cache_store import CacheLookup, CacheStatus, CacheStore, InMemoryCacheStore
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "CacheLookup",
    "CacheStatus",
    "CacheStore",
    "InMemoryCacheStore",
    "StubTokenProvider",
    "TokenProvider",
]
