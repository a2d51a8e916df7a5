"""Generic SQLAlchemy repository primitives shared by all aggregates."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import ColumnElement, and_, delete, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from authcore.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Persistence-only repository for a single aggregate.

    Subclasses MUST define ``model`` and MAY override
    ``_filterable_fields`` / ``_updatable_fields`` to whitelist the keys that
    callers can filter and assign.

    This class never opens, commits or rolls back transactions; services own
    the transaction boundary through a unit of work.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared across the unit of work. Falls back to
            the Flask-scoped session when omitted.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Whitelists --------------------------------

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Public key to column mapping accepted by equality filters."""
        return {}

    def _updatable_fields(self) -> set[str]:
        """Public keys that :meth:`update` may assign."""
        return set()

    # ------------------------------ Internals ---------------------------------

    def _equality_clause(self, filters: Mapping[str, Any]) -> ColumnElement[bool]:
        """
        Build an ``AND`` of equality comparisons from whitelisted keys.

        :param filters: Field=value pairs.
        :returns: SQL boolean clause.
        :raises ValueError: On empty filters or keys outside the whitelist.
        """
        if not filters:
            raise ValueError("At least one filter is required.")
        allowed = self._filterable_fields()
        unknown = sorted(k for k in filters if k not in allowed)
        if unknown:
            raise ValueError(f"Unknown or non-filterable fields: {unknown}")
        return and_(*(allowed[k] == v for k, v in filters.items()))

    # --------------------------------- CRUD -----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush so constraints and the PK materialize."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Return the entity with primary key ``entity_id`` or ``None``."""
        return self.session.get(self.model, entity_id)

    def find_one(self, **filters: Any) -> E | None:
        stmt = select(self.model).where(self._equality_clause(filters))
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def count_where(self, **filters: Any) -> int:
        """Count rows matching whitelisted equality filters."""
        stmt = select(func.count()).select_from(self.model).where(self._equality_clause(filters))
        return int(self.session.execute(stmt).scalar_one())

    def delete_many(self, **filters: Any) -> int:
        """
        Bulk-delete rows matching whitelisted equality filters.

        The identity map is not synchronized; instances already loaded in the
        session stay stale until the unit of work commits and expires them.

        :returns: Number of rows removed.
        :rtype: int
        """
        stmt = delete(self.model).where(self._equality_clause(filters))
        result = self.session.execute(stmt.execution_options(synchronize_session=False))
        return int(result.rowcount or 0)

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def update(self, instance: E, **fields: Any) -> E:
        """
        Assign whitelisted fields and flush.

        :raises ValueError: If a key is not updatable.
        """
        unknown = sorted(k for k in fields if k not in self._updatable_fields())
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()
