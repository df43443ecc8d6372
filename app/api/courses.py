"""Catalog, course detail, authoring and instructor-assignment endpoints.

Anonymous callers and students see the public catalog.  A signed-in
teacher also sees their own pending and rejected courses, and an admin
can ask for everything with ``include_pending``.
"""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from app.api.dependencies import optional_user, require_any_role, require_role
from app.models.course import Course
from app.models.principal import Principal, ViewerRole
from app.services.catalog_service import PAGE_SIZE, CatalogEntry, CatalogQuery, SortKey
from app.services.moderation import PendingForOwner
from app.services.ratings import RatingSummary
from app.services.registry import catalog_service

router = APIRouter(prefix="/v1/courses", tags=["courses"])

_require_author = require_any_role({"teacher", "admin"})


class SectionItemIn(BaseModel):
    title: str
    duration: str = ""
    type: str = "session"


class SectionIn(BaseModel):
    title: str
    items: list[SectionItemIn] = Field(default_factory=list)
    duration: str = ""


class CourseIn(BaseModel):
    title: str | None = None
    description: str | None = None
    full_description: str | None = None
    category: str | None = None
    level: str | None = None
    price: float | None = None
    original_price: float | None = None
    image: str | None = None
    learnings: list[str] | None = None
    requirements: list[str] | None = None
    sections: list[SectionIn] | None = None


class CourseUpdateIn(CourseIn):
    # Only "pending" is accepted: a teacher resubmitting for review.
    status: Literal["pending"] | None = None


class SectionItemOut(BaseModel):
    title: str
    duration: str
    type: str


class SectionOut(BaseModel):
    title: str
    duration: str
    items: list[SectionItemOut]


class CourseOut(BaseModel):
    id: int | str
    document_id: str | None = None
    title: str | None = None
    description: str | None = None
    full_description: str | None = None
    category: str | None = None
    level: str | None = None
    price: float | None = None
    original_price: float | None = None
    image: str | None = None
    learnings: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    sections: list[SectionOut] = Field(default_factory=list)
    status: str
    created_by: str | None = None
    created_by_role: str | None = None
    teacher_id: str | None = None
    teacher_name: str | None = None
    rating: float = 0.0
    rating_count: int = 0
    rejection_reason: str | None = None
    created_at: int | None = None
    updated_at: int | None = None


def course_out(course: Course) -> CourseOut:
    return CourseOut(
        id=course.id,
        document_id=course.document_id,
        title=course.title,
        description=course.description,
        full_description=course.full_description,
        category=course.category,
        level=course.level,
        price=course.price,
        original_price=course.original_price,
        image=course.image,
        learnings=list(course.learnings or ()),
        requirements=list(course.requirements or ()),
        sections=[
            SectionOut(
                title=s.title,
                duration=s.duration,
                items=[
                    SectionItemOut(title=i.title, duration=i.duration, type=i.type)
                    for i in s.items
                ],
            )
            for s in course.sections or ()
        ],
        status=course.effective_status,
        created_by=course.created_by,
        created_by_role=course.created_by_role,
        teacher_id=course.teacher_id,
        teacher_name=course.teacher_name,
        rating=course.rating or 0.0,
        rating_count=course.rating_count or 0,
        rejection_reason=course.rejection_reason,
        created_at=course.created_at,
        updated_at=course.updated_at,
    )


def entry_out(entry: CatalogEntry) -> CourseOut:
    return course_out(entry.course)


class CatalogPageOut(BaseModel):
    items: list[CourseOut]
    total: int
    page: int
    page_size: int
    pages: int


class CourseDetailOut(BaseModel):
    course: CourseOut
    presentation: Literal["published", "awaiting_moderation", "rejected"]
    reason: str | None = None


class RatingOut(BaseModel):
    average: float
    count: int


def rating_out(summary: RatingSummary) -> RatingOut:
    return RatingOut(average=summary.average, count=summary.count)


class InstructorOut(BaseModel):
    assigned: bool
    teacher_id: str | None = None
    teacher_name: str | None = None


class AssignmentOut(BaseModel):
    course_id: str
    teacher_id: str
    teacher_name: str
    assigned_at: int


def _viewer(principal: Principal | None) -> tuple[ViewerRole, str | None]:
    if principal is None:
        return "public", None
    return principal.viewer_role, principal.user_id


# ---------------------------------------------------------------------------
# Catalog reads
# ---------------------------------------------------------------------------


@router.get("", response_model=CatalogPageOut)
async def list_courses(
    principal: Annotated[Principal | None, Depends(optional_user)],
    q: str | None = None,
    category: Annotated[list[str] | None, Query()] = None,
    level: str | None = None,
    min_rating: Annotated[float | None, Query(ge=0, le=5)] = None,
    sort: SortKey = "relevant",
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = PAGE_SIZE,
    include_pending: bool = False,
) -> CatalogPageOut:
    role, actor_id = _viewer(principal)
    if include_pending and role == "admin":
        entries = await catalog_service.list_visible_courses(
            role, actor_id, include_pending=True
        )
        return CatalogPageOut(
            items=[entry_out(e) for e in entries],
            total=len(entries),
            page=1,
            page_size=len(entries),
            pages=1,
        )
    result = await catalog_service.search(
        role,
        actor_id,
        CatalogQuery(
            search=q,
            categories=tuple(category or ()),
            level=level,
            min_rating=min_rating,
            sort=sort,
            page=page,
            page_size=page_size,
        ),
    )
    return CatalogPageOut(
        items=[entry_out(e) for e in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        pages=result.pages,
    )


@router.get("/assignment-status")
async def assignment_status(
    principal: Annotated[Principal, Depends(require_role("teacher"))],
    ids: Annotated[str, Query(description="Comma-separated course ids")] = "",
) -> dict[str, dict[str, str | None]]:
    course_ids = [i.strip() for i in ids.split(",") if i.strip()]
    taught_by = await catalog_service.assignment_status(course_ids, principal.user_id)
    return {"assignment_status": taught_by}


@router.get("/{course_id}", response_model=CourseDetailOut)
async def get_course(
    course_id: str,
    principal: Annotated[Principal | None, Depends(optional_user)],
) -> CourseDetailOut:
    role, actor_id = _viewer(principal)
    view = await catalog_service.get_course_detail(course_id, role, actor_id)
    if isinstance(view, PendingForOwner):
        return CourseDetailOut(
            course=course_out(view.course),
            presentation=view.presentation,
            reason=view.reason,
        )
    return CourseDetailOut(course=entry_out(view), presentation="published")


# ---------------------------------------------------------------------------
# Authoring
# ---------------------------------------------------------------------------


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CourseIn,
    principal: Annotated[Principal, Depends(_require_author)],
) -> CourseOut:
    course = await catalog_service.create_course(principal, body.model_dump())
    return course_out(course)


@router.put("/{course_id}", response_model=CourseOut)
async def update_course(
    course_id: str,
    body: CourseUpdateIn,
    principal: Annotated[Principal, Depends(_require_author)],
) -> CourseOut:
    course = await catalog_service.update_course(
        principal, course_id, body.model_dump(exclude_none=True)
    )
    return course_out(course)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: str,
    principal: Annotated[Principal, Depends(_require_author)],
) -> Response:
    await catalog_service.delete_course(principal, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{course_id}/rating", response_model=RatingOut)
async def get_course_rating(course_id: str) -> RatingOut:
    return rating_out(await catalog_service.get_course_rating(course_id))


# ---------------------------------------------------------------------------
# Instructor assignment
# ---------------------------------------------------------------------------


@router.get("/{course_id}/instructor", response_model=InstructorOut)
async def get_instructor(course_id: str) -> InstructorOut:
    instructor = await catalog_service.get_instructor(course_id)
    if instructor is None:
        return InstructorOut(assigned=False)
    return InstructorOut(
        assigned=True,
        teacher_id=instructor.teacher_id,
        teacher_name=instructor.teacher_name,
    )


@router.post(
    "/{course_id}/instructor",
    response_model=AssignmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def assign_instructor(
    course_id: str,
    principal: Annotated[Principal, Depends(require_role("teacher"))],
) -> AssignmentOut:
    assignment = await catalog_service.assign_instructor(
        course_id, principal.user_id, principal.display_name
    )
    return AssignmentOut(
        course_id=assignment.course_id,
        teacher_id=assignment.teacher_id,
        teacher_name=assignment.teacher_name,
        assigned_at=assignment.assigned_at,
    )


@router.delete("/{course_id}/instructor", status_code=status.HTTP_204_NO_CONTENT)
async def remove_instructor(
    course_id: str,
    principal: Annotated[Principal, Depends(require_role("teacher"))],
) -> Response:
    await catalog_service.remove_assignment(course_id, principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
