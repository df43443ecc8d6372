"""Enrollment and section-completion progress.

``progress`` is always derived from ``completed_sections`` and the
course's section count; it is never accepted from the caller.  Every
progress write invalidates the sync caches of the student and of the
course's instructor before returning, since both look at the same
enrollment from different sides.
"""

from __future__ import annotations

import logging

from app.core.errors import NotFound, ValidationFailed
from app.models.enrollment import Enrollment
from app.repos.enrollment_repo import EnrollmentRepo
from app.services.catalog_service import CatalogService
from app.services.identifiers import classify, storage_key
from app.services.sync_cache import SyncCacheFactory

logger = logging.getLogger(__name__)


class ProgressService:
    def __init__(
        self,
        *,
        catalog: CatalogService,
        enrollments: EnrollmentRepo,
        sync_caches: SyncCacheFactory,
    ) -> None:
        self._catalog = catalog
        self._enrollments = enrollments
        self._caches = sync_caches

    async def enroll(self, course_id: object, student_id: str) -> Enrollment:
        course = await self._catalog.find_course(course_id)
        if course.effective_status != "approved":
            raise NotFound("Course not found")
        key = storage_key(classify(course.id))
        existing = await self._enrollments.get(key, student_id)
        if existing is not None:
            return existing
        enrollment = await self._enrollments.upsert(
            Enrollment.new(course_id=key, student_id=student_id)
        )
        instructor = await self._catalog.get_instructor(course.id)
        await self._caches.invalidate(
            student_id, instructor.teacher_id if instructor else None
        )
        logger.info(
            "Student %s enrolled in course %s",
            student_id,
            key,
            extra={"course_id": key, "actor_id": student_id},
        )
        return enrollment

    async def list_enrollments(self, student_id: str) -> list[Enrollment]:
        return await self._enrollments.fetch_for_student(student_id)

    async def get_enrollment(self, course_id: object, student_id: str) -> Enrollment | None:
        course = await self._catalog.find_course(course_id)
        return await self._enrollments.get(storage_key(classify(course.id)), student_id)

    async def toggle_section(
        self,
        course_id: object,
        student_id: str,
        section_index: int,
        completing: bool,
        total_sections: int | None = None,
    ) -> Enrollment:
        course = await self._catalog.find_course(course_id)
        total = total_sections if total_sections is not None else course.section_count
        if total <= 0:
            raise ValidationFailed("Course has no sections", fields=["sections"])
        if not 0 <= section_index < total:
            raise ValidationFailed(
                f"Section index {section_index} out of range 0..{total - 1}",
                fields=["section_index"],
            )

        key = storage_key(classify(course.id))
        current = await self._enrollments.get(key, student_id)
        if current is None:
            raise NotFound("Not enrolled in this course")

        completed = set(current.completed_sections)
        if completing:
            completed.add(section_index)
        else:
            completed.discard(section_index)

        updated = await self._enrollments.update_progress(
            key, student_id, frozenset(completed), total
        )
        if updated is None:
            raise NotFound("Not enrolled in this course")

        instructor = await self._catalog.get_instructor(course.id)
        await self._caches.invalidate(
            student_id, instructor.teacher_id if instructor else None
        )
        logger.info(
            "Progress for %s on course %s: %d%%",
            student_id,
            key,
            updated.progress,
            extra={"course_id": key, "actor_id": student_id},
        )
        return updated
