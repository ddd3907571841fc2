"""
Cat Registry API — Entity Store Base
=====================================

What:  Generic persistence interface shared by CatStore and UserStore.
Why:   Handlers speak in filters ({"id": ..., "owner_id": ...}) and projections
       (exclude=("password", "role")), never in SQL. Every operation returns a
       whole entity, a list, or None; never a partial record.
How:   Filters are dicts of field → value translated into WHERE clauses.
       Subclasses add special keys (e.g. "location" → bounding box) by
       overriding `_clause`. Projections defer the excluded columns with
       raiseload, so a redacted field cannot be read by accident.

Error Handling:
    IntegrityError      → ValidationError (400) via `_integrity_error`
    other SQLAlchemyError → DatabaseError (500), details logged server-side
"""

import logging
import uuid
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from catapi.database import Base
from catapi.exceptions import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

Filter = Dict[str, Any]


class EntityStore(Generic[ModelT]):
    """
    Async CRUD over one ORM model, bound to one request's session.

    Subclasses set `model` and `resource`, and may override:
        _clause(key, value)   — translate a filter entry into a WHERE clause
        _load_options()       — eager-load options applied to every read
        _integrity_error(exc) — map constraint violations to client errors
    """

    model: Type[ModelT]
    resource: str = "entity"

    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Query building ────────────────────────────────────────────────────

    def _clause(self, key: str, value: Any):
        column = getattr(self.model, key, None)
        if column is None:
            raise ValueError(f"Unknown filter field '{key}' for {self.resource}")
        return column == value

    def _load_options(self) -> List[Any]:
        return []

    def _select(self, filter: Optional[Filter], exclude: Iterable[str]):
        query = select(self.model)
        for key, value in (filter or {}).items():
            query = query.where(self._clause(key, value))
        options = list(self._load_options())
        for name in exclude:
            options.append(defer(getattr(self.model, name), raiseload=True))
        if options:
            query = query.options(*options)
        return query

    # ── Read operations ───────────────────────────────────────────────────

    async def find(
        self,
        filter: Optional[Filter] = None,
        exclude: Iterable[str] = (),
    ) -> List[ModelT]:
        """All entities matching `filter` (all entities when it is empty)."""
        query = self._select(filter, exclude).order_by(self.model.created_at)
        result = await self._execute(query)
        return list(result.scalars().all())

    async def find_one(
        self,
        filter: Filter,
        exclude: Iterable[str] = (),
        refresh: bool = False,
    ) -> Optional[ModelT]:
        """First entity matching `filter`, or None."""
        query = self._select(filter, exclude).limit(1)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self._execute(query)
        return result.scalars().first()

    async def find_by_id(
        self,
        entity_id: uuid.UUID,
        exclude: Iterable[str] = (),
    ) -> Optional[ModelT]:
        return await self.find_one({"id": entity_id}, exclude=exclude)

    # ── Write operations ──────────────────────────────────────────────────

    async def create(self, values: Dict[str, Any]) -> ModelT:
        """Insert one entity and return it re-read with the default load options."""
        entity = self.model(**values)
        self.db.add(entity)
        await self._flush()
        logger.info("%s created: %s", self.resource, entity.id)
        return await self.find_one({"id": entity.id}, refresh=True)

    async def update(self, filter: Filter, values: Dict[str, Any]) -> Optional[ModelT]:
        """
        Apply `values` to the first entity matching `filter`.

        Returns None when nothing matched; an ownership constraint inside
        `filter` therefore behaves exactly like a missing id.
        """
        entity = await self.find_one(filter)
        if entity is None:
            return None
        for key, value in values.items():
            setattr(entity, key, value)
        await self._flush()
        logger.info("%s updated: %s (%s)", self.resource, entity.id, ", ".join(sorted(values)))
        return await self.find_one({"id": entity.id}, refresh=True)

    async def delete(self, filter: Filter) -> Optional[ModelT]:
        """Delete the first entity matching `filter` and return it, or None."""
        entity = await self.find_one(filter)
        if entity is None:
            return None
        await self._before_delete(entity)
        await self.db.delete(entity)
        await self._flush()
        logger.info("%s deleted: %s", self.resource, entity.id)
        return entity

    async def _before_delete(self, entity: ModelT) -> None:
        """Hook for dependent-row cleanup; runs in the same transaction."""

    # ── Error translation ─────────────────────────────────────────────────

    def _integrity_error(self, exc: IntegrityError) -> ValidationError:
        return ValidationError(
            message=f"Constraint violated: {self.resource}",
            context={"original_error": type(exc.orig).__name__ if exc.orig else "IntegrityError"},
        )

    async def _execute(self, statement):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Database error in %s store: %s", self.resource, str(e), exc_info=True)
            raise DatabaseError(context={"resource": self.resource, "error_type": type(e).__name__})

    async def _flush(self) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.warning("Integrity error in %s store: %s", self.resource, str(e.orig))
            raise self._integrity_error(e)
        except SQLAlchemyError as e:
            logger.error("Database error in %s store: %s", self.resource, str(e), exc_info=True)
            raise DatabaseError(context={"resource": self.resource, "error_type": type(e).__name__})
