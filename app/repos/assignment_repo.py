from __future__ import annotations

from dataclasses import asdict
from typing import Protocol

from app.models.assignment import InstructorAssignment
from app.repos.document_store import DocumentStore

COLLECTION = "instructor_assignments"


class AssignmentRepo(Protocol):
    async def get_for_course(self, course_id: str) -> InstructorAssignment | None: ...
    async def list_all(self) -> list[InstructorAssignment]: ...
    async def add(self, assignment: InstructorAssignment) -> None: ...
    async def remove(self, course_id: str, teacher_id: str) -> bool: ...
    async def remove_for_course(self, course_id: str) -> int: ...


class DocumentAssignmentRepo:
    """One document per course: the store key is the course id itself,
    which is what keeps "at most one assignment per course" true.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def get_for_course(self, course_id: str) -> InstructorAssignment | None:
        doc = await self._store.get(COLLECTION, course_id)
        return InstructorAssignment(**doc) if doc is not None else None

    async def list_all(self) -> list[InstructorAssignment]:
        return [InstructorAssignment(**d) for d in await self._store.find(COLLECTION)]

    async def add(self, assignment: InstructorAssignment) -> None:
        await self._store.insert(COLLECTION, assignment.course_id, asdict(assignment))

    async def remove(self, course_id: str, teacher_id: str) -> bool:
        removed = await self._store.delete_many(
            COLLECTION, {"course_id": course_id, "teacher_id": teacher_id}
        )
        return removed > 0

    async def remove_for_course(self, course_id: str) -> int:
        return await self._store.delete_many(COLLECTION, {"course_id": course_id})
