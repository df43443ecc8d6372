"""Course persistence on top of the document store.

Documents are keyed by the canonical string form of the course id.  A
persisted document may be:

  - a teacher- or admin-authored course (24-hex id), or
  - a partial override of a seed course (legacy id, only the edited
    fields present).  Overrides carry ``override_of_seed: true`` and are
    returned through the admin stream.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, fields
from typing import Any, Protocol

from app.models.course import Course, CourseStatus, Section, SectionItem
from app.repos.document_store import Document, DocumentStore
from app.services.identifiers import IdKind, classify, storage_key

logger = logging.getLogger(__name__)

COLLECTION = "courses"

_COURSE_FIELDS = tuple(f.name for f in fields(Course))


class CourseRepo(Protocol):
    async def fetch_all(self, include_pending: bool) -> list[Course]: ...
    async def fetch_by_teacher(self, teacher_id: str) -> list[Course]: ...
    async def get(self, course_id: object) -> Course | None: ...
    async def persist(self, course: Course) -> Course: ...
    async def delete(self, course_id: object) -> bool: ...
    async def set_status(
        self,
        course_id: object,
        status: CourseStatus,
        actor_id: str,
        reason: str | None = None,
    ) -> Course | None: ...


class DocumentCourseRepo:
    """Satisfies CourseRepo using any DocumentStore."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def fetch_all(self, include_pending: bool) -> list[Course]:
        docs = await self._store.find(COLLECTION)
        courses = [course_from_doc(d) for d in docs]
        if include_pending:
            return courses
        return [c for c in courses if c.status in (None, "approved")]

    async def fetch_by_teacher(self, teacher_id: str) -> list[Course]:
        docs = await self._store.find(COLLECTION, {"created_by": teacher_id})
        return [course_from_doc(d) for d in docs]

    async def get(self, course_id: object) -> Course | None:
        doc = await self._store.get(COLLECTION, storage_key(classify(course_id)))
        return course_from_doc(doc) if doc is not None else None

    async def persist(self, course: Course) -> Course:
        await self._store.upsert(
            COLLECTION, storage_key(classify(course.id)), course_to_doc(course)
        )
        return course

    async def delete(self, course_id: object) -> bool:
        return await self._store.delete(COLLECTION, storage_key(classify(course_id)))

    async def set_status(
        self,
        course_id: object,
        status: CourseStatus,
        actor_id: str,
        reason: str | None = None,
    ) -> Course | None:
        key = storage_key(classify(course_id))
        doc = await self._store.get(COLLECTION, key)
        if doc is None:
            return None
        doc["status"] = status
        doc["rejection_reason"] = reason if status == "rejected" else None
        doc["moderated_by"] = actor_id
        if not await self._store.replace(COLLECTION, key, doc):
            return None
        logger.debug("Course %s status set to %s by %s", key, status, actor_id)
        return course_from_doc(doc)


# ---------------------------------------------------------------------------
# Document <-> dataclass conversion
# ---------------------------------------------------------------------------


def _jsonable(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def course_to_doc(course: Course) -> Document:
    doc: Document = {
        name: _jsonable(value)
        for name, value in asdict(course).items()
        if value is not None
    }
    if classify(course.id).kind is IdKind.LEGACY:
        doc["override_of_seed"] = True
    return doc


def course_from_doc(doc: dict[str, Any]) -> Course:
    values: dict[str, Any] = {k: doc[k] for k in _COURSE_FIELDS if k in doc}
    for name in ("learnings", "requirements"):
        if values.get(name) is not None:
            values[name] = tuple(values[name])
    if values.get("sections") is not None:
        values["sections"] = tuple(section_from_dict(s) for s in values["sections"])
    return Course(**values)


def section_from_dict(raw: dict[str, Any]) -> Section:
    items = tuple(
        SectionItem(
            title=str(item.get("title", "")),
            duration=str(item.get("duration", "")),
            type=str(item.get("type", "session")),
        )
        for item in raw.get("items") or ()
    )
    return Section(
        title=str(raw.get("title", "")),
        items=items,
        duration=str(raw.get("duration", "")),
    )
