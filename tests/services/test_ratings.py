from __future__ import annotations

import asyncio

from app.models.assignment import Instructor
from app.models.course import Course
from app.models.review import Review
from app.services.ratings import (
    NO_RATINGS,
    RatingSummary,
    course_rating,
    rate_courses,
    round_half_up,
    summarize,
)

DOC_X = "65f0c0ffee0000000000000a"
TEACHER = Instructor("tch-1", "Tess")


def _review(course_id: str, rating: int, *, teacher: str = "tch-1", status: str = "active") -> Review:
    return Review(
        id=f"r-{course_id}-{rating}-{status}",
        teacher_id=teacher,
        student_id="stu-1",
        course_id=course_id,
        rating=rating,
        review_text="",
        status=status,  # type: ignore[arg-type]
    )


# ---- rounding ----


def test_round_half_up_not_bankers() -> None:
    assert round_half_up(4.25) == 4.3
    assert round_half_up(0.25) == 0.3
    assert round_half_up(3.0) == 3.0


def test_summarize_ignores_inactive_reviews() -> None:
    reviews = [_review("1", 5), _review("1", 1, status="hidden")]
    assert summarize(reviews) == RatingSummary(5.0, 1)


# ---- course_rating ----


def test_rating_is_scoped_to_the_course() -> None:
    reviews = [_review(DOC_X, 5), _review(DOC_X, 4), _review("9", 1)]
    x = Course(id=DOC_X, document_id=DOC_X)
    assert course_rating(x, TEACHER, reviews) == RatingSummary(4.5, 2)


def test_course_with_no_matching_reviews_is_zero() -> None:
    reviews = [_review(DOC_X, 5), _review("9", 1)]
    z = Course(id=12)
    assert course_rating(z, TEACHER, reviews) == NO_RATINGS


def test_reviews_under_legacy_and_document_ids_both_count() -> None:
    course = Course(id=3, document_id=DOC_X)
    reviews = [_review("3", 5), _review(DOC_X, 2)]
    assert course_rating(course, TEACHER, reviews) == RatingSummary(3.5, 2)


def test_no_instructor_means_no_ratings() -> None:
    assert course_rating(Course(id=1), None, [_review("1", 5)]) == NO_RATINGS


def test_other_teachers_reviews_do_not_count() -> None:
    reviews = [_review("1", 5, teacher="tch-2")]
    assert course_rating(Course(id=1), TEACHER, reviews) == NO_RATINGS


# ---- rate_courses ----


def test_rate_courses_fetches_once_per_teacher() -> None:
    calls: list[str] = []

    async def fetch(teacher_id: str) -> list[Review]:
        calls.append(teacher_id)
        return [_review("1", 4), _review("2", 2)]

    pairs = [(Course(id=1), TEACHER), (Course(id=2), TEACHER), (Course(id=3), None)]
    ratings = asyncio.run(rate_courses(pairs, fetch, timeout=1.0))
    assert calls == ["tch-1"]
    assert ratings == [RatingSummary(4.0, 1), RatingSummary(2.0, 1), NO_RATINGS]


def test_failed_fetch_degrades_to_no_ratings() -> None:
    async def fetch(teacher_id: str) -> list[Review]:
        if teacher_id == "tch-2":
            raise ConnectionError("review store down")
        return [_review("1", 5)]

    pairs = [(Course(id=1), TEACHER), (Course(id=2), Instructor("tch-2"))]
    ratings = asyncio.run(rate_courses(pairs, fetch, timeout=1.0))
    assert ratings == [RatingSummary(5.0, 1), NO_RATINGS]


def test_slow_fetch_times_out_to_no_ratings() -> None:
    async def fetch(teacher_id: str) -> list[Review]:
        await asyncio.sleep(1)
        return [_review("1", 5)]

    ratings = asyncio.run(rate_courses([(Course(id=1), TEACHER)], fetch, timeout=0.01))
    assert ratings == [NO_RATINGS]
