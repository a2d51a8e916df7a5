"""Durable refresh token store backed by the ``refresh_tokens`` table."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select

from authcore.models.refresh_token import RefreshToken
from authcore.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence for issued refresh tokens.

    ``add`` flushes immediately, so a duplicate ``token`` value surfaces as
    :class:`sqlalchemy.exc.IntegrityError` at insert time.
    """

    model = RefreshToken

    def _filterable_fields(self):
        return {
            "token": RefreshToken.token,
            "user_id": RefreshToken.user_id,
        }

    def find_by_token(self, token: str) -> RefreshToken | None:
        """Return the record for ``token`` or ``None``."""
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def delete_by_id(self, record_id: str) -> bool:
        """
        Delete one record by primary key, reporting whether this call removed it.

        Two callers that both read the same row race on this statement; the
        database lets exactly one of them see ``rowcount == 1``. Rotation
        relies on that to keep a token single-use.

        :param record_id: Primary key of the record.
        :type record_id: str
        :returns: ``True`` when the row existed and was deleted by this call.
        :rtype: bool
        """
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.id == record_id)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def tokens_for_user(self, user_id: str) -> list[str]:
        """List the token values currently stored for ``user_id``."""
        stmt = select(RefreshToken.token).where(RefreshToken.user_id == user_id)
        return list(self.session.execute(stmt).scalars())

    def delete_expired(self, now: datetime) -> int:
        """
        Purge every record whose ``expires_at`` is at or before ``now``.

        :returns: Number of rows removed.
        :rtype: int
        """
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
