"""SQLAlchemy table definitions.

Every collection (courses, reviews, enrollments, assignments, decisions,
messages) lives in one JSONB table keyed by ``(collection, doc_id)``.
The engine never relies on a relational schema for course records: the
three course sources disagree on shape, and a JSONB body keeps partial
overrides (a handful of edited fields on a seed course) representable.

Repos convert between the JSON bodies and the frozen dataclasses in
app/models/.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import BigInteger, Identity, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.engine import Base


class DocumentRow(Base):
    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(64), primary_key=True)
    doc_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Insertion order; ``find`` returns documents in submission order.
    seq: Mapped[int] = mapped_column(BigInteger, Identity(), nullable=False)
    body: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)

    __table_args__ = (
        Index("ix_documents_body", "body", postgresql_using="gin"),
        Index("ix_documents_collection_seq", "collection", "seq"),
    )
