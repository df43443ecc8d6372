from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Literal

ReviewStatus = Literal["active", "hidden", "flagged"]

MIN_RATING = 1
MAX_RATING = 5
MAX_REVIEW_TEXT = 2000


@dataclass(frozen=True, slots=True)
class Review:
    """A student's review of the teacher who taught one specific course.

    ``course_id`` is stored in whichever form the course had when the
    review was written: a legacy integer string or a document id.  The id
    is derived from (student, course), so the store's key uniqueness is
    what allows only one review per student per course.
    """

    id: str
    teacher_id: str
    student_id: str
    course_id: str
    rating: int
    review_text: str
    status: ReviewStatus = "active"
    created_at: int | None = None
    updated_at: int | None = None

    @staticmethod
    def new(
        *,
        teacher_id: str,
        student_id: str,
        course_id: str,
        rating: int,
        review_text: str,
    ) -> Review:
        now = int(time.time())
        return Review(
            id=review_key(student_id, course_id),
            teacher_id=teacher_id,
            student_id=student_id,
            course_id=course_id,
            rating=rating,
            review_text=review_text,
            created_at=now,
            updated_at=now,
        )


def review_key(student_id: str, course_key: str) -> str:
    return f"{student_id}:{course_key}"
