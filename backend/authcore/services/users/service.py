"""
UserService
===========

Application service for the ``User`` aggregate with cache-aside reads:

- ``get_by_id`` / ``find_by_email`` read through ``user:<id>`` and
  ``user:email:<email>``.
- Writes go to the database first, then invalidate (or prime) the cache.
- Credential checks never use the cache; see
  :class:`authcore.services.auth.service.AuthService`.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from authcore.models.user import User, UserRole
from authcore.repositories.user import UserRepository
from authcore.services._shared.base import BaseService
from authcore.services._shared.cache_keys import (
    USER_BY_EMAIL_TTL,
    USER_TTL,
    user_by_email_key,
    user_key,
)
from authcore.services._shared.errors import ConflictError, NotFoundError, violates
from authcore.services._shared.ports import CacheStore
from authcore.services.users.dto import UserOut

log = logging.getLogger(__name__)


class UserService(BaseService):
    """
    User lookups and lifecycle with read-through caching.

    :param cache: Cache used for the ``user:*`` keys.
    """

    def __init__(self, *, cache: CacheStore) -> None:
        self.cache = cache

    # --------------------------------------------------------------------- #
    # Reads (cache-aside)
    # --------------------------------------------------------------------- #

    def get_by_id(self, user_id: str) -> UserOut:
        """
        Return the user, reading through the cache.

        :param user_id: User identifier.
        :type user_id: str
        :returns: Public user snapshot.
        :rtype: UserOut
        :raises NotFoundError: If the user does not exist.
        """
        data = self.cache.get_or_set(user_key(user_id), lambda: self._load(id=user_id), USER_TTL)
        if data is None:
            raise NotFoundError("User", user_id)
        return UserOut.from_cache(data)

    def find_by_email(self, email: str) -> UserOut | None:
        """Return the user with ``email`` or ``None``, reading through the cache."""
        data = self.cache.get_or_set(
            user_by_email_key(email),
            lambda: self._load(email=email),
            USER_BY_EMAIL_TTL,
        )
        return None if data is None else UserOut.from_cache(data)

    def _load(self, *, id: str | None = None, email: str | None = None) -> dict[str, Any] | None:
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(id) if id is not None else repo.get_by_email(email or "")
            return None if user is None else UserOut.from_model(user).to_cache()

    # --------------------------------------------------------------------- #
    # Writes
    # --------------------------------------------------------------------- #

    def create(
        self,
        *,
        email: str,
        password: str,
        name: str | None = None,
        role: str = UserRole.USER.value,
    ) -> UserOut:
        """
        Persist a new user and prime its ``user:<id>`` entry.

        :raises ConflictError: If the email is already registered.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            if repo.exists_by_email(email):
                raise ConflictError("User", "email already in use")
            user = User(email=email, name=name, role=role)
            user.password = password
            try:
                repo.add(user)
            except IntegrityError as exc:
                if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                    raise ConflictError("User", "email already in use") from exc
                raise
            out = UserOut.from_model(user)

        self.cache.set(user_key(out.id), out.to_cache(), USER_TTL)
        log.info("user created", extra={"user_id": out.id})
        return out

    def update(self, user_id: str, *, name: str | None = None, role: str | None = None) -> UserOut:
        """
        Update profile fields and drop the cached snapshots.

        :raises NotFoundError: If the user does not exist.
        """
        updates = {k: v for k, v in {"name": name, "role": role}.items() if v is not None}
        return self._write(user_id, updates)

    def set_active(self, user_id: str, active: bool) -> UserOut:
        """
        Activate or deactivate an account.

        Deactivation blocks login and refresh immediately because both read
        ``is_active`` from the database; the cache is invalidated for reads.
        """
        return self._write(user_id, {"is_active": active})

    def _write(self, user_id: str, updates: dict[str, Any]) -> UserOut:
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            if updates:
                repo.update(user, **updates)
            out = UserOut.from_model(user)

        self.invalidate(out.id, out.email)
        return out

    def delete(self, user_id: str) -> None:
        """
        Delete a user together with its refresh tokens.

        :raises NotFoundError: If the user does not exist.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            email = user.email
            uow.refresh_tokens.delete_many(user_id=user_id)
            uow.users.delete(user)

        self.invalidate(user_id, email)
        log.info("user deleted", extra={"user_id": user_id})

    def invalidate(self, user_id: str, email: str) -> None:
        self.cache.delete(user_key(user_id))
        self.cache.delete(user_by_email_key(email))
