"""PostgreSQL implementation of DocumentStore (single JSONB table)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import UpstreamUnavailable
from app.db.engine import session_scope
from app.db.tables import DocumentRow
from app.repos.document_store import Document

logger = logging.getLogger(__name__)


class PgDocumentStore:
    """Satisfies the DocumentStore Protocol using PostgreSQL via SQLAlchemy.

    Each call runs in its own session.  Driver and connection errors are
    translated to UpstreamUnavailable so services see one failure type
    regardless of backend.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._factory = session_factory

    async def insert(self, collection: str, doc_id: str, doc: Document) -> None:
        try:
            async with session_scope(self._factory) as session:
                session.add(DocumentRow(collection=collection, doc_id=doc_id, body=doc))
                await session.flush()
        except IntegrityError:
            raise KeyError(f"{collection}/{doc_id} already exists") from None
        except SQLAlchemyError as exc:
            raise _unavailable(collection, exc) from exc

    async def get(self, collection: str, doc_id: str) -> Document | None:
        stmt = select(DocumentRow.body).where(
            DocumentRow.collection == collection, DocumentRow.doc_id == doc_id
        )
        try:
            async with session_scope(self._factory) as session:
                return (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise _unavailable(collection, exc) from exc

    async def find(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> list[Document]:
        stmt = select(DocumentRow.body).where(DocumentRow.collection == collection)
        if where:
            stmt = stmt.where(DocumentRow.body.contains(dict(where)))
        stmt = stmt.order_by(DocumentRow.seq)
        try:
            async with session_scope(self._factory) as session:
                return list((await session.execute(stmt)).scalars())
        except SQLAlchemyError as exc:
            raise _unavailable(collection, exc) from exc

    async def replace(self, collection: str, doc_id: str, doc: Document) -> bool:
        stmt = (
            update(DocumentRow)
            .where(DocumentRow.collection == collection, DocumentRow.doc_id == doc_id)
            .values(body=doc)
        )
        try:
            async with session_scope(self._factory) as session:
                result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise _unavailable(collection, exc) from exc
        return result.rowcount > 0

    async def upsert(self, collection: str, doc_id: str, doc: Document) -> None:
        stmt = pg_insert(DocumentRow).values(collection=collection, doc_id=doc_id, body=doc)
        stmt = stmt.on_conflict_do_update(
            index_elements=[DocumentRow.collection, DocumentRow.doc_id],
            set_={"body": stmt.excluded.body},
        )
        try:
            async with session_scope(self._factory) as session:
                await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise _unavailable(collection, exc) from exc

    async def delete(self, collection: str, doc_id: str) -> bool:
        stmt = delete(DocumentRow).where(
            DocumentRow.collection == collection, DocumentRow.doc_id == doc_id
        )
        try:
            async with session_scope(self._factory) as session:
                result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise _unavailable(collection, exc) from exc
        return result.rowcount > 0

    async def delete_many(self, collection: str, where: Mapping[str, Any]) -> int:
        stmt = delete(DocumentRow).where(
            DocumentRow.collection == collection,
            DocumentRow.body.contains(dict(where)),
        )
        try:
            async with session_scope(self._factory) as session:
                result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise _unavailable(collection, exc) from exc
        return result.rowcount


def _unavailable(collection: str, exc: Exception) -> UpstreamUnavailable:
    logger.error(
        "Document store call failed for collection=%s: %s",
        collection,
        exc,
        extra={"source": collection},
    )
    return UpstreamUnavailable(source=collection)
