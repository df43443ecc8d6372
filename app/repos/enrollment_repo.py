from __future__ import annotations

from typing import Any, Protocol

from app.models.enrollment import Enrollment, derive_progress
from app.repos.document_store import Document, DocumentStore

COLLECTION = "enrollments"


def _key(course_id: str, student_id: str) -> str:
    return f"{student_id}:{course_id}"


class EnrollmentRepo(Protocol):
    async def fetch_for_student(self, student_id: str) -> list[Enrollment]: ...
    async def get(self, course_id: str, student_id: str) -> Enrollment | None: ...
    async def upsert(self, enrollment: Enrollment) -> Enrollment: ...
    async def update_progress(
        self,
        course_id: str,
        student_id: str,
        completed_sections: frozenset[int],
        total_sections: int,
    ) -> Enrollment | None: ...


class DocumentEnrollmentRepo:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def fetch_for_student(self, student_id: str) -> list[Enrollment]:
        docs = await self._store.find(COLLECTION, {"student_id": student_id})
        return [_enrollment_from_doc(d) for d in docs]

    async def get(self, course_id: str, student_id: str) -> Enrollment | None:
        doc = await self._store.get(COLLECTION, _key(course_id, student_id))
        return _enrollment_from_doc(doc) if doc is not None else None

    async def upsert(self, enrollment: Enrollment) -> Enrollment:
        await self._store.upsert(
            COLLECTION,
            _key(enrollment.course_id, enrollment.student_id),
            _enrollment_to_doc(enrollment),
        )
        return enrollment

    async def update_progress(
        self,
        course_id: str,
        student_id: str,
        completed_sections: frozenset[int],
        total_sections: int,
    ) -> Enrollment | None:
        current = await self.get(course_id, student_id)
        if current is None:
            return None
        updated = current.with_sections(completed_sections, total_sections)
        await self._store.replace(
            COLLECTION, _key(course_id, student_id), _enrollment_to_doc(updated)
        )
        return updated


def _enrollment_to_doc(enrollment: Enrollment) -> Document:
    return {
        "course_id": enrollment.course_id,
        "student_id": enrollment.student_id,
        "status": enrollment.status,
        "completed_sections": sorted(enrollment.completed_sections),
        "progress": enrollment.progress,
        "enrolled_at": enrollment.enrolled_at,
        "updated_at": enrollment.updated_at,
    }


def _enrollment_from_doc(doc: dict[str, Any]) -> Enrollment:
    completed = frozenset(int(i) for i in doc.get("completed_sections") or ())
    progress = doc.get("progress")
    return Enrollment(
        course_id=str(doc["course_id"]),
        student_id=doc["student_id"],
        status=doc.get("status", "active"),
        completed_sections=completed,
        progress=int(progress) if progress is not None else derive_progress(completed, 0),
        enrolled_at=doc.get("enrolled_at"),
        updated_at=doc.get("updated_at"),
    )
