from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from authcore.models.user import User


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public user snapshot, safe to cache and to return to clients.

    :param id: User identifier.
    :param email: Normalized login email.
    :param name: Display name, if any.
    :param role: ``USER`` or ``ADMIN``.
    :param is_active: Whether the account may authenticate.
    :param created_at: Creation timestamp.
    :param updated_at: Last update timestamp.
    """

    id: str
    email: str
    name: str | None
    role: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            is_active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def to_cache(self) -> dict[str, Any]:
        """JSON-ready dict; datetimes become ISO 8601 strings."""
        data = asdict(self)
        for key in ("created_at", "updated_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data

    @classmethod
    def from_cache(cls, data: dict[str, Any]) -> UserOut:
        values = dict(data)
        for key in ("created_at", "updated_at"):
            if values.get(key):
                values[key] = datetime.fromisoformat(values[key])
        return cls(**values)
