"""Document-style collection access over SQLAlchemy tables.

Every method is one independent unit of work: it opens its own session and
commits before returning. Nothing here spans two calls, so callers that chain
operations (like the cascade delete) get no atomicity between them.
"""

import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base, Storage
from app.core.errors import StorageFailure
from app.services.identifiers import new_id

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DocumentCollection:
    """A named collection of documents backed by one mapped table."""

    def __init__(self, storage: Storage, model: type[Base]) -> None:
        self._storage = storage
        self._model = model
        self._fields = [column.key for column in model.__table__.columns]

    @property
    def name(self) -> str:
        return self._model.__tablename__

    @property
    def fields(self) -> list[str]:
        return list(self._fields)

    @asynccontextmanager
    async def _unit_of_work(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._storage.session() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"{operation} on '{self.name}' failed: {e}")
            raise StorageFailure(f"Database error during {operation} on '{self.name}'") from e

    def _to_document(self, row: Base) -> Document:
        return {field: getattr(row, field) for field in self._fields}

    async def insert_one(self, document: Mapping[str, Any]) -> Document:
        """Insert a document, assigning an ``id`` when it has none."""
        values = dict(document)
        values.setdefault("id", new_id())
        async with self._unit_of_work("insert_one") as session:
            row = self._model(**values)
            session.add(row)
            await session.flush()
            await session.refresh(row)
            return self._to_document(row)

    async def insert_many(self, documents: Sequence[Mapping[str, Any]]) -> list[str]:
        """Insert all documents in one commit and return their ids."""
        rows = []
        for document in documents:
            values = dict(document)
            values.setdefault("id", new_id())
            rows.append(self._model(**values))
        async with self._unit_of_work("insert_many") as session:
            session.add_all(rows)
            await session.flush()
        return [row.id for row in rows]

    async def find_all(self) -> list[Document]:
        async with self._unit_of_work("find_all") as session:
            result = await session.execute(select(self._model))
            return [self._to_document(row) for row in result.scalars().all()]

    async def find_one(self, record_id: str) -> Document | None:
        async with self._unit_of_work("find_one") as session:
            result = await session.execute(select(self._model).where(self._model.id == record_id))
            row = result.scalar_one_or_none()
            return self._to_document(row) if row is not None else None

    async def update_one(self, record_id: str, values: Mapping[str, Any]) -> int:
        """Merge ``values`` into the matching document (``$set`` semantics).

        Returns the number of matched documents (0 or 1).
        """
        async with self._unit_of_work("update_one") as session:
            result = await session.execute(
                update(self._model).where(self._model.id == record_id).values(**values)
            )
            return result.rowcount

    async def delete_one(self, record_id: str) -> int:
        async with self._unit_of_work("delete_one") as session:
            result = await session.execute(delete(self._model).where(self._model.id == record_id))
            return result.rowcount

    async def delete_many(self, filters: Mapping[str, Any]) -> int:
        """Delete every document whose fields equal ``filters``. Empty matches all."""
        statement = delete(self._model)
        for field, value in filters.items():
            statement = statement.where(getattr(self._model, field) == value)
        async with self._unit_of_work("delete_many") as session:
            result = await session.execute(statement)
            return result.rowcount
