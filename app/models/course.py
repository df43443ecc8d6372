from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Literal

from app.services.identifiers import new_document_id

CourseStatus = Literal["pending", "approved", "rejected"]
CreatorRole = Literal["teacher", "admin"]

# Seed courses carry small integers; persisted courses carry 24-hex strings.
CourseId = int | str

# Every field below ``id`` is optional so a submitted record can describe a
# partial edit.  ``None`` means "not specified", never "clear this field".


@dataclass(frozen=True, slots=True)
class SectionItem:
    title: str
    duration: str = ""
    type: str = "session"  # video|quiz|resource|assignment|session


@dataclass(frozen=True, slots=True)
class Section:
    title: str
    items: tuple[SectionItem, ...] = ()
    duration: str = ""


@dataclass(frozen=True, slots=True)
class Course:
    id: CourseId
    document_id: str | None = None
    title: str | None = None
    description: str | None = None
    full_description: str | None = None
    category: str | None = None
    level: str | None = None
    price: float | None = None
    original_price: float | None = None
    image: str | None = None
    learnings: tuple[str, ...] | None = None
    requirements: tuple[str, ...] | None = None
    sections: tuple[Section, ...] | None = None
    status: CourseStatus | None = None
    created_by: str | None = None
    created_by_role: CreatorRole | None = None
    teacher_id: str | None = None
    teacher_name: str | None = None
    rating: float | None = None
    rating_count: int | None = None
    rejection_reason: str | None = None
    created_at: int | None = None
    updated_at: int | None = None

    @property
    def is_seed(self) -> bool:
        return self.created_by is None

    @property
    def effective_status(self) -> CourseStatus:
        """Seed courses are always approved; their stored status is ignored."""
        if self.is_seed:
            return "approved"
        return self.status or "pending"

    @property
    def section_count(self) -> int:
        return len(self.sections or ())

    @staticmethod
    def new(
        *,
        created_by: str,
        created_by_role: CreatorRole,
        title: str,
        **fields: object,
    ) -> Course:
        """A freshly authored course with a new document id.

        Teacher-authored courses start pending; administrators self-publish.
        """
        now = int(time.time())
        doc_id = new_document_id()
        status: CourseStatus = "approved" if created_by_role == "admin" else "pending"
        return Course(
            id=doc_id,
            document_id=doc_id,
            title=title,
            status=status,
            created_by=created_by,
            created_by_role=created_by_role,
            created_at=now,
            updated_at=now,
            **fields,  # type: ignore[arg-type]
        )
