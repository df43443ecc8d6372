from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class InstructorAssignment:
    """A teacher volunteering to teach a course they did not author."""

    course_id: str
    teacher_id: str
    teacher_name: str
    assigned_at: int = 0

    @staticmethod
    def new(*, course_id: str, teacher_id: str, teacher_name: str) -> InstructorAssignment:
        return InstructorAssignment(
            course_id=course_id,
            teacher_id=teacher_id,
            teacher_name=teacher_name,
            assigned_at=int(time.time()),
        )


@dataclass(frozen=True, slots=True)
class Instructor:
    """The resolved instructor of record for a course."""

    teacher_id: str
    teacher_name: str | None = None
