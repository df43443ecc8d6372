"""Rating aggregator.

A course's rating is derived on every read from its instructor's review
list, never stored on the course:

  1. resolve the instructor (attribution); none -> (0.0, 0)
  2. fetch that teacher's reviews, once per teacher per page
  3. keep the active reviews whose course id names this course, by its
     own id or its document id (older reviews were recorded against the
     legacy id, newer ones against the document id)
  4. average, rounded half-up to one decimal

Zero matching reviews is (0.0, 0) even if the teacher has reviews for
other courses.  The UI renders that as "no ratings yet".
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass

from app.core.metrics import UPSTREAM_FAILURES
from app.models.assignment import Instructor
from app.models.course import Course
from app.models.review import Review
from app.services.identifiers import record_matches

logger = logging.getLogger(__name__)

ReviewFetcher = Callable[[str], Awaitable[list[Review]]]


@dataclass(frozen=True, slots=True)
class RatingSummary:
    average: float = 0.0
    count: int = 0


NO_RATINGS = RatingSummary()


def round_half_up(value: float, places: int = 1) -> float:
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor


def summarize(reviews: Iterable[Review]) -> RatingSummary:
    ratings = [r.rating for r in reviews if r.status == "active"]
    if not ratings:
        return NO_RATINGS
    return RatingSummary(
        average=round_half_up(sum(ratings) / len(ratings)), count=len(ratings)
    )


def course_rating(
    course: Course, instructor: Instructor | None, reviews: Iterable[Review]
) -> RatingSummary:
    if instructor is None:
        return NO_RATINGS
    matching = (
        r
        for r in reviews
        if r.teacher_id == instructor.teacher_id
        and record_matches(course, r.course_id)
    )
    return summarize(matching)


def teacher_summary(reviews: Iterable[Review]) -> RatingSummary:
    """A teacher's overall average across every course they teach."""
    return summarize(reviews)


async def rate_courses(
    pairs: Sequence[tuple[Course, Instructor | None]],
    fetch_reviews: ReviewFetcher,
    *,
    timeout: float,
) -> list[RatingSummary]:
    """Ratings for a page of courses, one review fetch per distinct teacher.

    Fetches run concurrently.  A teacher whose fetch fails or times out
    contributes (0.0, 0) for all of their courses; the page still renders.
    """
    teacher_ids = sorted({i.teacher_id for _, i in pairs if i is not None})

    async def _fetch(teacher_id: str) -> list[Review]:
        try:
            return await asyncio.wait_for(fetch_reviews(teacher_id), timeout)
        except Exception as exc:
            UPSTREAM_FAILURES.labels(source="reviews").inc()
            logger.warning(
                "Review fetch for teacher %s failed, ratings degrade to none: %r",
                teacher_id,
                exc,
                extra={"source": "reviews"},
            )
            return []

    results = await asyncio.gather(*(_fetch(t) for t in teacher_ids))
    by_teacher = dict(zip(teacher_ids, results, strict=True))
    return [
        course_rating(course, instructor, by_teacher.get(instructor.teacher_id, ()))
        if instructor is not None
        else NO_RATINGS
        for course, instructor in pairs
    ]
