"""Enrollment and section-progress endpoints.

Section toggles write through the progress service, which derives the
percentage from the completed set and invalidates the sync caches of the
student and the course instructor before the response goes out.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from app.api.dependencies import require_role
from app.models.enrollment import Enrollment
from app.models.principal import Principal
from app.services.registry import progress_service

router = APIRouter(prefix="/v1/progress", tags=["progress"])

_require_student = require_role("student")


class ToggleSectionIn(BaseModel):
    completed: bool


class EnrollmentOut(BaseModel):
    course_id: str
    student_id: str
    status: str
    completed_sections: list[int]
    progress: int
    enrolled_at: int | None = None
    updated_at: int | None = None


def _enrollment_out(enrollment: Enrollment) -> EnrollmentOut:
    return EnrollmentOut(
        course_id=enrollment.course_id,
        student_id=enrollment.student_id,
        status=enrollment.status,
        completed_sections=sorted(enrollment.completed_sections),
        progress=enrollment.progress,
        enrolled_at=enrollment.enrolled_at,
        updated_at=enrollment.updated_at,
    )


@router.get("/enrollments", response_model=list[EnrollmentOut])
async def list_enrollments(
    principal: Annotated[Principal, Depends(_require_student)],
) -> list[EnrollmentOut]:
    enrollments = await progress_service.list_enrollments(principal.user_id)
    return [_enrollment_out(e) for e in enrollments]


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll(
    course_id: str,
    principal: Annotated[Principal, Depends(_require_student)],
) -> EnrollmentOut:
    enrollment = await progress_service.enroll(course_id, principal.user_id)
    return _enrollment_out(enrollment)


@router.put("/{course_id}/sections/{section_index}", response_model=EnrollmentOut)
async def toggle_section(
    course_id: str,
    section_index: int,
    body: ToggleSectionIn,
    principal: Annotated[Principal, Depends(_require_student)],
) -> EnrollmentOut:
    enrollment = await progress_service.toggle_section(
        course_id, principal.user_id, section_index, body.completed
    )
    return _enrollment_out(enrollment)
