"""
Transaction scope shared by the auth and user services.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authcore.repositories import RefreshTokenRepository, UserRepository


class UnitOfWork(ABC):
    """
    One transaction over the ``users`` and ``refresh_tokens`` repositories.

    Rotation relies on both repositories sharing it: the old refresh token
    delete and the replacement insert land together or not at all.
    Leaving the block cleanly commits; leaving it with an exception rolls
    back and re-raises.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
