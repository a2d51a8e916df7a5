from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Final

from sqlalchemy.exc import SQLAlchemyError

from authcore.core.clock import Clock, as_utc, utc_now
from authcore.models.refresh_token import RefreshToken
from authcore.repositories.refresh_token import RefreshTokenRepository
from authcore.repositories.user import UserRepository
from authcore.services._shared.base import BaseService
from authcore.services._shared.cache_keys import blacklist_ttl, refresh_token_key
from authcore.services._shared.errors import AuthenticationError, AuthFailureReason
from authcore.services._shared.ports import CacheStore, TokenProvider
from authcore.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from authcore.services.auth.expiry import parse_expiry_to_seconds
from authcore.services.users.service import UserService
from authcore.uow.base import UnitOfWork

log = logging.getLogger(__name__)

REFRESH_TOKEN_BYTES: Final[int] = 64
INVALID_CREDENTIALS: Final[str] = "Invalid credentials"


def new_refresh_token() -> str:
    """Return 64 CSPRNG bytes as 128 hex chars; collisions are not retried."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


class AuthService(BaseService):
    """
    Refresh-token lifecycle: issue, rotate and revoke.

    Refresh tokens are opaque random strings stored in the database and
    consumed on use. Revocation writes a blacklist entry to the cache before
    deleting durable rows; the cache is consulted first on refresh, so a
    revoked token stays dead even if its row survives. Access tokens are
    stateless JWTs and cannot be revoked.

    Cache failures never fail a call (the adapter reports them as misses);
    database failures propagate, except where noted on :meth:`logout`.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        cache: CacheStore,
        users: UserService | None = None,
        token_cfg: AuthTokenConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Signs access tokens.
        :param cache: Holds refresh-token blacklist entries.
        :param users: User service used by registration. Defaults to one
            sharing ``cache``.
        :param token_cfg: Access/refresh lifetime configuration.
        :param clock: Source of "now"; injectable for expiry tests.
        """
        self.tokens = token_provider
        self.cache = cache
        self.users = users or UserService(cache=cache)
        self.cfg = token_cfg or AuthTokenConfig()
        self.clock = clock

    @property
    def blacklist_ttl(self) -> int:
        return blacklist_ttl(self.cfg.refresh_expiry_days)

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def issue(self, user_id: str, email: str, role: str) -> TokenPairOut:
        """
        Issue an access/refresh pair and persist the refresh record.

        :param user_id: Subject of the access token and owner of the record.
        :param email: ``email`` claim.
        :param role: ``role`` claim.
        :returns: The new pair with the access lifetime in seconds.
        :raises sqlalchemy.exc.SQLAlchemyError: If the insert fails.
        """
        with self.rw_uow() as uow:
            return self._issue(uow, user_id=user_id, email=email, role=role)

    def _issue(
        self, uow: UnitOfWork, *, user_id: str, email: str, role: str
    ) -> TokenPairOut:
        access_ttl = parse_expiry_to_seconds(self.cfg.access_expiry)
        access = self.tokens.create_access_token(
            identity=user_id,
            additional_claims={"email": email, "role": role},
            expires_delta=timedelta(seconds=access_ttl),
        )
        refresh = new_refresh_token()
        uow.refresh_tokens.add(
            RefreshToken(
                token=refresh,
                user_id=user_id,
                expires_at=self.clock() + timedelta(days=self.cfg.refresh_expiry_days),
            )
        )
        return TokenPairOut(access_token=access, refresh_token=refresh, expires_in=access_ttl)

    # ------------------------------------------------------------------ #
    # Register / login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> TokenPairOut:
        """
        Create an account and sign it in.

        :raises ConflictError: If the email is already registered.
        """
        user = self.users.create(email=dto.email, password=dto.password, name=dto.name)
        return self.issue(user.id, user.email, user.role)

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Verify credentials and issue a pair.

        Unknown email, deactivated account and wrong password all raise the
        same public error; only the logged reason differs.

        :raises AuthenticationError: On any credential failure.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_email(dto.email)
            if user is None:
                raise self._reject("credentials", public_message=INVALID_CREDENTIALS)
            if not user.is_active:
                raise self._reject("deactivated", user.id, public_message=INVALID_CREDENTIALS)
            if not user.verify_password(dto.password):
                raise self._reject("credentials", user.id, public_message=INVALID_CREDENTIALS)
            user_id, email, role = user.id, user.email, user.role

        pair = self.issue(user_id, email, role)
        log.info("login succeeded", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange a refresh token for a new pair, consuming the old one.

        Checks run in order and stop at the first failure:

        1. blacklist entry in the cache → ``revoked``
        2. no durable record → ``invalid``
        3. ``expires_at <= now`` → record deleted, then ``expired``
        4. owner deactivated → ``deactivated`` (record kept)
        5. conditional delete of the record; losing a concurrent race on
           the same token → ``invalid``

        The old row's delete and the new row's insert commit together.

        :param dto: Presented refresh token.
        :returns: A fresh pair with a different refresh token.
        :raises AuthenticationError: On any rejected state.
        """
        token = dto.refresh_token
        if self._is_blacklisted(token):
            raise self._reject("revoked")

        now = self.clock()
        expired_owner: str | None = None
        with self.rw_uow() as uow:
            repo: RefreshTokenRepository = uow.refresh_tokens
            record = repo.find_by_token(token)
            if record is None:
                raise self._reject("invalid")
            record_id, user_id = record.id, record.user_id

            if as_utc(record.expires_at) <= now:
                repo.delete_by_id(record_id)
                expired_owner = user_id
            else:
                user = record.user
                if not user.is_active:
                    raise self._reject("deactivated", user_id)
                email, role = user.email, user.role
                if not repo.delete_by_id(record_id):
                    raise self._reject("invalid", user_id)
                pair = self._issue(uow, user_id=user_id, email=email, role=role)

        # Raised outside the unit of work so the cleanup delete commits.
        if expired_owner is not None:
            raise self._reject("expired", expired_owner)

        log.info("refresh token rotated", extra={"user_id": user_id})
        return pair

    def _is_blacklisted(self, token: str) -> bool:
        # ERROR and MISS both mean "not blacklisted".
        lookup = self.cache.get(refresh_token_key(token))
        return lookup.hit and lookup.value is True

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def logout(self, token: str, user_id: str) -> None:
        """
        Revoke one refresh token owned by ``user_id``.

        The blacklist entry is written first with a TTL equal to the full
        refresh lifetime, then the row matching both ``token`` and
        ``user_id`` is deleted. When the blacklist write succeeded, a database
        failure on the delete is logged and swallowed since the entry already
        blocks reuse; otherwise it propagates.

        :param token: Refresh token to revoke.
        :param user_id: Authenticated caller; rows of other users are untouched.
        """
        blacklisted = self.cache.set(refresh_token_key(token), True, self.blacklist_ttl)
        if not blacklisted:
            log.warning("blacklist write failed on logout", extra={"user_id": user_id})
        try:
            with self.rw_uow() as uow:
                removed = uow.refresh_tokens.delete_many(token=token, user_id=user_id)
        except SQLAlchemyError:
            if not blacklisted:
                raise
            log.error(
                "refresh token delete failed after blacklisting",
                extra={"user_id": user_id},
                exc_info=True,
            )
            return
        log.info("logout", extra={"user_id": user_id, "count": removed})

    def logout_all(self, user_id: str) -> int:
        """
        Revoke every refresh token of ``user_id``.

        Blacklist writes are independent; individual failures are logged by
        the cache adapter and do not stop the bulk delete. Database failures on
        the delete follow the same rule as :meth:`logout`, keyed on whether
        every blacklist write succeeded.

        :returns: Number of durable rows removed.
        """
        with self.ro_uow() as uow:
            tokens = uow.refresh_tokens.tokens_for_user(user_id)

        written = self.cache.set_many(
            (refresh_token_key(t) for t in tokens), True, self.blacklist_ttl
        )
        fully_blacklisted = written == len(tokens)
        if not fully_blacklisted:
            log.warning(
                "blacklisted %d of %d refresh tokens",
                written,
                len(tokens),
                extra={"user_id": user_id},
            )
        try:
            with self.rw_uow() as uow:
                removed = uow.refresh_tokens.delete_many(user_id=user_id)
        except SQLAlchemyError:
            if not fully_blacklisted:
                raise
            log.error(
                "bulk refresh token delete failed after blacklisting",
                extra={"user_id": user_id},
                exc_info=True,
            )
            return 0
        log.info("logout from all sessions", extra={"user_id": user_id, "count": removed})
        return removed

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _reject(
        self,
        reason: AuthFailureReason,
        user_id: str | None = None,
        *,
        public_message: str | None = None,
    ) -> AuthenticationError:
        log.warning("authentication rejected", extra={"reason": reason, "user_id": user_id})
        if public_message is None:
            return AuthenticationError(reason)
        return AuthenticationError(reason, public_message)

