"""Teacher reviews written by students who finished a course."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from app.api.dependencies import require_role
from app.models.principal import Principal
from app.models.review import MAX_REVIEW_TEXT, Review
from app.services.registry import review_service

router = APIRouter(prefix="/v1/reviews", tags=["reviews"])

_require_student = require_role("student")


class ReviewIn(BaseModel):
    course_id: str
    # Range is checked by the service so every caller gets the same message.
    rating: int
    review_text: str = Field(default="", max_length=MAX_REVIEW_TEXT)


class ReviewUpdateIn(BaseModel):
    rating: int | None = None
    review_text: str | None = Field(default=None, max_length=MAX_REVIEW_TEXT)


class ReviewOut(BaseModel):
    id: str
    teacher_id: str
    student_id: str
    course_id: str
    rating: int
    review_text: str
    status: str
    created_at: int | None = None
    updated_at: int | None = None


class TeacherReviewsOut(BaseModel):
    teacher_id: str
    average: float
    count: int
    reviews: list[ReviewOut]


class EligibilityOut(BaseModel):
    eligible: bool
    reason: str | None = None


def _review_out(review: Review) -> ReviewOut:
    return ReviewOut(
        id=review.id,
        teacher_id=review.teacher_id,
        student_id=review.student_id,
        course_id=review.course_id,
        rating=review.rating,
        review_text=review.review_text,
        status=review.status,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("/teachers/{teacher_id}", response_model=TeacherReviewsOut)
async def teacher_reviews(teacher_id: str) -> TeacherReviewsOut:
    reviews, summary = await review_service.teacher_reviews(teacher_id)
    return TeacherReviewsOut(
        teacher_id=teacher_id,
        average=summary.average,
        count=summary.count,
        reviews=[_review_out(r) for r in reviews],
    )


@router.get("/courses/{course_id}", response_model=list[ReviewOut])
async def course_reviews(course_id: str) -> list[ReviewOut]:
    return [_review_out(r) for r in await review_service.course_reviews(course_id)]


@router.get("/eligibility", response_model=EligibilityOut)
async def check_eligibility(
    course_id: str,
    principal: Annotated[Principal, Depends(_require_student)],
) -> EligibilityOut:
    result = await review_service.check_eligibility(principal.user_id, course_id)
    return EligibilityOut(eligible=result.eligible, reason=result.reason)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
async def create_review(
    body: ReviewIn,
    principal: Annotated[Principal, Depends(_require_student)],
) -> ReviewOut:
    review = await review_service.create_review(
        principal.user_id, body.course_id, body.rating, body.review_text
    )
    return _review_out(review)


@router.put("/{review_id}", response_model=ReviewOut)
async def update_review(
    review_id: str,
    body: ReviewUpdateIn,
    principal: Annotated[Principal, Depends(_require_student)],
) -> ReviewOut:
    review = await review_service.update_review(
        principal.user_id,
        review_id,
        rating=body.rating,
        review_text=body.review_text,
    )
    return _review_out(review)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: str,
    principal: Annotated[Principal, Depends(_require_student)],
) -> Response:
    await review_service.delete_review(principal.user_id, review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
