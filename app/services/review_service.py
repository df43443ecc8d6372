"""Reviews: students rate the teacher who taught a course they finished.

A review can be created only when the student's enrollment progress for
that course is 100, and only once per (student, course).  The course
reference is compared through the identifier normalizer, so a review
recorded against the legacy id still blocks a second one submitted
against the document id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from app.models.review import MAX_RATING, MAX_REVIEW_TEXT, MIN_RATING, Review
from app.repos.enrollment_repo import EnrollmentRepo
from app.repos.review_repo import ReviewRepo
from app.services.catalog_service import CatalogService
from app.services.identifiers import classify, equals, record_matches, storage_key
from app.services.ratings import RatingSummary, teacher_summary

logger = logging.getLogger(__name__)

DUPLICATE_REVIEW = "You have already reviewed this course"


@dataclass(frozen=True, slots=True)
class ReviewEligibility:
    eligible: bool
    reason: str | None = None


def validate_rating(rating: object) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationFailed("Rating must be a whole number", fields=["rating"])
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationFailed(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}", fields=["rating"]
        )
    return rating


def validate_text(text: str | None) -> str:
    cleaned = (text or "").strip()
    if len(cleaned) > MAX_REVIEW_TEXT:
        raise ValidationFailed(
            f"Review text cannot exceed {MAX_REVIEW_TEXT} characters",
            fields=["review_text"],
        )
    return cleaned


class ReviewService:
    def __init__(
        self,
        *,
        catalog: CatalogService,
        reviews: ReviewRepo,
        enrollments: EnrollmentRepo,
    ) -> None:
        self._catalog = catalog
        self._reviews = reviews
        self._enrollments = enrollments

    async def _existing_review(self, student_id: str, course_ids: list[object]) -> Review | None:
        for review in await self._reviews.fetch_for_student(student_id):
            if any(equals(review.course_id, c) for c in course_ids):
                return review
        return None

    async def check_eligibility(self, student_id: str, course_id: object) -> ReviewEligibility:
        course = await self._catalog.find_course(course_id)
        enrollment = await self._enrollments.get(storage_key(classify(course.id)), student_id)
        if enrollment is None:
            return ReviewEligibility(False, "Not enrolled in this course")
        if not enrollment.is_complete:
            return ReviewEligibility(False, "Complete the course before reviewing it")
        ids = [course.id] + ([course.document_id] if course.document_id else [])
        if await self._existing_review(student_id, ids) is not None:
            return ReviewEligibility(False, DUPLICATE_REVIEW)
        if await self._catalog.get_instructor(course.id) is None:
            return ReviewEligibility(False, "This course has no instructor to review")
        return ReviewEligibility(True)

    async def create_review(
        self,
        student_id: str,
        course_id: object,
        rating: object,
        review_text: str | None,
    ) -> Review:
        value = validate_rating(rating)
        text = validate_text(review_text)
        eligibility = await self.check_eligibility(student_id, course_id)
        if not eligibility.eligible:
            if eligibility.reason == DUPLICATE_REVIEW:
                raise Conflict(DUPLICATE_REVIEW)
            raise ValidationFailed(eligibility.reason, fields=["course_id"])

        instructor = await self._catalog.get_instructor(course_id)
        if instructor is None:
            raise ValidationFailed("This course has no instructor to review")
        course = await self._catalog.find_course(course_id)
        review = Review.new(
            teacher_id=instructor.teacher_id,
            student_id=student_id,
            course_id=storage_key(classify(course.id)),
            rating=value,
            review_text=text,
        )
        try:
            await self._reviews.create(review)
        except KeyError:
            # A concurrent submission for the same course got there first.
            raise Conflict(DUPLICATE_REVIEW) from None
        logger.info(
            "Review %s recorded for teacher %s on course %s",
            review.id,
            review.teacher_id,
            review.course_id,
            extra={"course_id": review.course_id, "actor_id": student_id},
        )
        return review

    async def teacher_reviews(self, teacher_id: str) -> tuple[list[Review], RatingSummary]:
        reviews = [
            r
            for r in await self._reviews.fetch_for_teacher(teacher_id)
            if r.status == "active"
        ]
        reviews.sort(key=lambda r: r.created_at or 0, reverse=True)
        return reviews, teacher_summary(reviews)

    async def course_reviews(self, course_id: object) -> list[Review]:
        instructor = await self._catalog.get_instructor(course_id)
        if instructor is None:
            return []
        course = await self._catalog.find_course(course_id)
        reviews, _ = await self.teacher_reviews(instructor.teacher_id)
        return [r for r in reviews if record_matches(course, r.course_id)]

    async def _own_review(self, student_id: str, review_id: str) -> Review:
        review = await self._reviews.find(review_id)
        if review is None:
            raise NotFound("Review not found")
        if review.student_id != student_id:
            raise Forbidden("You can only change your own reviews")
        return review

    async def update_review(
        self,
        student_id: str,
        review_id: str,
        *,
        rating: object = None,
        review_text: str | None = None,
    ) -> Review:
        await self._own_review(student_id, review_id)
        value = validate_rating(rating) if rating is not None else None
        text = validate_text(review_text) if review_text is not None else None
        updated = await self._reviews.update(review_id, rating=value, review_text=text)
        if updated is None:
            raise NotFound("Review not found")
        logger.info("Review %s updated by %s", review_id, student_id)
        return updated

    async def delete_review(self, student_id: str, review_id: str) -> None:
        await self._own_review(student_id, review_id)
        if not await self._reviews.delete(review_id):
            raise NotFound("Review not found")
        logger.info("Review %s deleted by %s", review_id, student_id)
