from __future__ import annotations

from datetime import timedelta

from authcore.infra.redis.redis_cache_store import RedisCacheStore
from authcore.repositories.refresh_token import RefreshTokenRepository
from authcore.services._shared.ports import InMemoryCacheStore
from authcore.services.maintenance.service import TokenMaintenanceService
from tests.factories.refresh_token import RefreshTokenFactory
from tests.helpers.utils import FrozenClock


class TestTokenMaintenanceService:
    def test_purge_expired_tokens(self, session):
        clock = FrozenClock()
        stale = RefreshTokenFactory(expires_at=clock.now - timedelta(minutes=1))
        live = RefreshTokenFactory(expires_at=clock.now + timedelta(days=1))
        stale_token, live_token = stale.token, live.token
        svc = TokenMaintenanceService(cache=InMemoryCacheStore(), clock=clock)

        assert svc.purge_expired_tokens() == 1

        repo = RefreshTokenRepository()
        assert repo.find_by_token(stale_token) is None
        assert repo.find_by_token(live_token) is not None

    def test_purge_session_cache_keeps_blacklist(self, redis_cache: RedisCacheStore, session):
        redis_cache.set("session:a", {"user": "1"})
        redis_cache.set("session:b", {"user": "2"})
        redis_cache.set("refresh_token:abc", True)
        svc = TokenMaintenanceService(cache=redis_cache)

        assert svc.purge_session_cache() == 2
        assert redis_cache.get("refresh_token:abc").hit

    def test_purge_session_cache_with_cache_down(self, broken_redis, session):
        svc = TokenMaintenanceService(cache=RedisCacheStore(broken_redis))
        assert svc.purge_session_cache() == 0
