"""
Periodic cleanup jobs for the token store and the cache.

Both jobs are idempotent and safe to run concurrently with normal traffic;
they are exposed as ``flask tokens ...`` commands and scheduled externally.
"""

from __future__ import annotations

import logging

from authcore.core.clock import Clock, utc_now
from authcore.services._shared.base import BaseService
from authcore.services._shared.cache_keys import SESSION_PREFIX
from authcore.services._shared.ports import CacheStore

log = logging.getLogger(__name__)


class TokenMaintenanceService(BaseService):
    """
    :param cache: Cache whose ``session:*`` keys are purged.
    :param clock: Source of "now" for the expiry cutoff.
    """

    def __init__(self, *, cache: CacheStore, clock: Clock = utc_now) -> None:
        self.cache = cache
        self.clock = clock

    def purge_expired_tokens(self) -> int:
        """
        Delete refresh tokens whose ``expires_at`` is at or before now.

        :returns: Number of rows removed.
        """
        with self.rw_uow() as uow:
            removed = uow.refresh_tokens.delete_expired(self.clock())
        log.info("expired refresh tokens purged", extra={"operation": "purge_expired", "count": removed})
        return removed

    def purge_session_cache(self) -> int:
        """
        Drop every ``session:*`` cache entry.

        :returns: Number of keys removed; ``0`` when the cache is unreachable.
        """
        removed = self.cache.delete_by_prefix(SESSION_PREFIX)
        log.info("session cache purged", extra={"operation": "purge_sessions", "count": removed})
        return removed
