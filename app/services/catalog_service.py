"""Catalog orchestration: the read pipeline and every course mutation.

READ PIPELINE
---------------
    fetch sources concurrently (each under UPSTREAM_TIMEOUT_SECONDS)
      -> merge(seed, teacher stream, admin stream)
      -> visibility filter for the caller's role
      -> attribution (trusted lookups fetched concurrently first)
      -> ratings (one review fetch per distinct teacher)

A source that fails or times out counts as empty.  The catalog renders
with fewer courses, "not assigned" instructors or "no ratings yet"; a
read never fails because a collaborator did.

WRITES
--------
Create, update, delete, moderate and assign go straight to the stores
and let every failure propagate.  Nothing is changed locally before the
store call returns.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, Literal

from app.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from app.core.metrics import UPSTREAM_FAILURES
from app.models.assignment import Instructor, InstructorAssignment
from app.models.course import Course
from app.models.moderation import ModerationDecision
from app.models.principal import Principal, ViewerRole
from app.repos.assignment_repo import AssignmentRepo
from app.repos.course_repo import CourseRepo, section_from_dict
from app.repos.review_repo import ReviewRepo
from app.services import moderation
from app.services.attribution import (
    AttributionContext,
    apply_instructor,
    authored_by,
    is_teacher_authored,
    resolve_instructor,
)
from app.services.identifiers import (
    IdKind,
    classify,
    record_matches,
    require_course_id,
    storage_key,
)
from app.services.instructor_lookup import InstructorLookup, lookup_many
from app.services.merger import merge, override
from app.services.moderation import ModerationStateMachine, PendingForOwner
from app.services.ratings import NO_RATINGS, RatingSummary, rate_courses

logger = logging.getLogger(__name__)

PAGE_SIZE = 12

SortKey = Literal["relevant", "rating", "newest", "price_low", "price_high"]

CATEGORIES = (
    "Animation & VR",
    "Artificial Intelligence (AI)",
    "Cloud Computing",
    "Cyber Security",
    "Data Science",
    "Database",
    "Design",
    "DevOps",
    "Management",
    "Marketing",
    "Mobile Development",
    "Programming",
    "Web Development",
)

_CATEGORY_ALIASES = {
    "Artificial Intelligence": "Artificial Intelligence (AI)",
    "AI": "Artificial Intelligence (AI)",
    "Managment": "Management",
    "Cybersecurity": "Cyber Security",
}

_TAUGHT_BY_ANOTHER = "This course is already taught by another instructor"


def normalize_category(raw: str) -> str:
    value = raw.strip()
    return _CATEGORY_ALIASES.get(value, value)


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """One displayed course: attributed, with its live rating."""

    course: Course
    rating: RatingSummary = NO_RATINGS

    @property
    def instructor_assigned(self) -> bool:
        return self.course.teacher_id is not None


@dataclass(frozen=True)
class CatalogQuery:
    search: str | None = None
    categories: tuple[str, ...] = ()
    level: str | None = None
    min_rating: float | None = None
    sort: SortKey = "relevant"
    page: int = 1
    page_size: int = PAGE_SIZE


@dataclass(frozen=True)
class CatalogPage:
    items: list[CatalogEntry]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0


# ---------------------------------------------------------------------------
# Submission validation
# ---------------------------------------------------------------------------

_REQUIRED_TEXT = ("title", "description", "full_description", "image", "category", "level")
_REQUIRED_LISTS = ("learnings", "requirements", "sections")
_EDITABLE = (
    "title",
    "description",
    "full_description",
    "category",
    "level",
    "price",
    "original_price",
    "image",
    "learnings",
    "requirements",
    "sections",
)


def _clean_text_list(values: Sequence[Any] | None) -> tuple[str, ...]:
    return tuple(str(v).strip() for v in values or () if v and str(v).strip())


def _clean_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize whichever editable fields are present; None means absent."""
    out: dict[str, Any] = {}
    for name in _EDITABLE:
        value = raw.get(name)
        if value is None:
            continue
        if name in ("learnings", "requirements"):
            out[name] = _clean_text_list(value)
        elif name == "sections":
            out[name] = tuple(
                section_from_dict(s if isinstance(s, Mapping) else dict(s)) for s in value
            )
        elif name == "category":
            out[name] = normalize_category(str(value))
        elif name in ("price", "original_price"):
            try:
                price = float(value)
            except (TypeError, ValueError):
                raise ValidationFailed(f"{name} must be a number", fields=[name]) from None
            if math.isnan(price) or price < 0:
                raise ValidationFailed(f"{name} must be a non-negative number", fields=[name])
            out[name] = price
        else:
            out[name] = str(value).strip()
    return out


def _check_values(fields: Mapping[str, Any]) -> None:
    """Reject present-but-unusable values (blank text, empty lists, bad category)."""
    bad = [n for n in _REQUIRED_TEXT if n in fields and not fields[n]]
    bad += [n for n in _REQUIRED_LISTS if n in fields and not fields[n]]
    if bad:
        raise ValidationFailed(f"Missing required fields: {', '.join(bad)}", fields=bad)
    if "category" in fields and fields["category"] not in CATEGORIES:
        raise ValidationFailed(f"Unknown category: {fields['category']}", fields=["category"])
    for section in fields.get("sections", ()):
        if not section.title:
            raise ValidationFailed("Every section needs a title", fields=["sections"])


def validate_submission(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a new course submission and return its cleaned fields."""
    fields = _clean_fields(raw)
    fields.setdefault("level", "Beginner")
    if "full_description" not in fields and fields.get("description"):
        fields["full_description"] = fields["description"]
    if "original_price" not in fields and "price" in fields:
        fields["original_price"] = fields["price"]

    missing = [n for n in _REQUIRED_TEXT if not fields.get(n)]
    missing += [n for n in _REQUIRED_LISTS if not fields.get(n)]
    if "original_price" not in fields:
        missing.append("original_price")
    if missing:
        raise ValidationFailed(
            f"Missing required fields: {', '.join(missing)}", fields=missing
        )
    _check_values(fields)
    return fields


def _id_sort_key(course: Course) -> tuple[int, Any]:
    ref = classify(course.id)
    return (0, ref.value) if ref.kind is IdKind.LEGACY else (1, str(ref.value))


def _matches_query(entry: CatalogEntry, q: CatalogQuery) -> bool:
    course = entry.course
    if q.search:
        needle = q.search.strip().lower()
        haystack = (course.title, course.description, course.teacher_name)
        if needle and not any(needle in (h or "").lower() for h in haystack):
            return False
    if q.categories:
        wanted = {normalize_category(c) for c in q.categories}
        if course.category not in wanted:
            return False
    if q.level and (course.level or "").lower() != q.level.lower():
        return False
    return q.min_rating is None or entry.rating.average >= q.min_rating


def sort_entries(entries: list[CatalogEntry], sort: SortKey) -> list[CatalogEntry]:
    if sort == "rating":
        return sorted(entries, key=lambda e: (-e.rating.average, -e.rating.count))
    if sort == "newest":
        return sorted(
            entries,
            key=lambda e: (e.course.created_at or 0, _id_sort_key(e.course)),
            reverse=True,
        )
    if sort == "price_low":
        return sorted(entries, key=lambda e: e.course.price if e.course.price is not None else math.inf)
    if sort == "price_high":
        return sorted(entries, key=lambda e: -(e.course.price or 0))
    return sorted(entries, key=lambda e: -(e.rating.average * e.rating.count))


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CatalogService:
    def __init__(
        self,
        *,
        seed: Sequence[Course],
        courses: CourseRepo,
        assignments: AssignmentRepo,
        reviews: ReviewRepo,
        state_machine: ModerationStateMachine,
        instructor_lookup: InstructorLookup,
        timeout: float,
    ) -> None:
        self._seed = tuple(seed)
        self._courses = courses
        self._assignments = assignments
        self._reviews = reviews
        self._moderation = state_machine
        self._lookup = instructor_lookup
        self._timeout = timeout

    # -- read pipeline -------------------------------------------------------

    async def _guarded(self, source: str, fetch: Awaitable[list[Any]]) -> list[Any]:
        try:
            return await asyncio.wait_for(fetch, self._timeout)
        except Exception as exc:
            UPSTREAM_FAILURES.labels(source=source).inc()
            logger.warning(
                "Source %s unavailable, treating as empty: %r",
                source,
                exc,
                extra={"source": source},
            )
            return []

    async def _merged(
        self, role: ViewerRole, actor_id: str | None, *, include_pending: bool
    ) -> tuple[list[Course], list[InstructorAssignment]]:
        async def _nothing() -> list[Course]:
            return []

        own = (
            self._courses.fetch_by_teacher(actor_id)
            if role == "teacher" and actor_id
            else _nothing()
        )
        submitted, mine, assignments = await asyncio.gather(
            self._guarded("courses", self._courses.fetch_all(include_pending)),
            self._guarded("teacher_courses", own),
            self._guarded("assignments", self._assignments.list_all()),
        )
        teacher_stream = [c for c in submitted if is_teacher_authored(c)]
        teacher_stream += [c for c in mine if is_teacher_authored(c)]
        admin_stream = [c for c in submitted if not is_teacher_authored(c)]
        return merge(self._seed, teacher_stream, admin_stream), assignments

    async def _decorate(
        self, courses: list[Course], assignments: list[InstructorAssignment]
    ) -> list[CatalogEntry]:
        trusted = await lookup_many(
            self._lookup, [c.id for c in courses], timeout=self._timeout
        )
        ctx = AttributionContext(
            trusted=trusted,
            assignments=AttributionContext.build(assignments=assignments).assignments,
        )
        pairs: list[tuple[Course, Instructor | None]] = [
            (c, resolve_instructor(c, ctx)) for c in courses
        ]
        ratings = await rate_courses(
            pairs, self._reviews.fetch_for_teacher, timeout=self._timeout
        )
        entries = []
        for (course, instructor), rating in zip(pairs, ratings, strict=True):
            course = replace(
                apply_instructor(course, instructor),
                rating=rating.average,
                rating_count=rating.count,
            )
            entries.append(CatalogEntry(course=course, rating=rating))
        return entries

    async def list_visible_courses(
        self,
        role: ViewerRole,
        actor_id: str | None = None,
        *,
        include_pending: bool = False,
    ) -> list[CatalogEntry]:
        admin_view = role == "admin" and include_pending
        merged, assignments = await self._merged(
            role, actor_id, include_pending=admin_view
        )
        visible = moderation.filter_visible(
            merged, role, actor_id, include_pending=admin_view
        )
        return await self._decorate(visible, assignments)

    async def search(
        self, role: ViewerRole, actor_id: str | None, query: CatalogQuery
    ) -> CatalogPage:
        if query.page < 1 or query.page_size < 1:
            raise ValidationFailed("page and page_size must be positive", fields=["page"])
        entries = await self.list_visible_courses(role, actor_id)
        matched = sort_entries([e for e in entries if _matches_query(e, query)], query.sort)
        start = (query.page - 1) * query.page_size
        return CatalogPage(
            items=matched[start : start + query.page_size],
            total=len(matched),
            page=query.page,
            page_size=query.page_size,
        )

    async def moderation_queue(self) -> list[CatalogEntry]:
        merged, assignments = await self._merged("admin", None, include_pending=True)
        return await self._decorate(moderation.moderation_queue(merged), assignments)

    async def _find(
        self, course_id: object, role: ViewerRole = "admin", actor_id: str | None = None
    ) -> tuple[Course | None, list[InstructorAssignment]]:
        ref = require_course_id(course_id)
        merged, assignments = await self._merged(role, actor_id, include_pending=True)
        for course in merged:
            if record_matches(course, ref):
                return course, assignments
        return None, assignments

    async def get_course_detail(
        self, course_id: object, role: ViewerRole, actor_id: str | None = None
    ) -> CatalogEntry | PendingForOwner:
        course, assignments = await self._find(course_id, role, actor_id)
        view = moderation.detail_view(course, role, actor_id)
        if isinstance(view, PendingForOwner):
            (entry,) = await self._decorate([view.course], assignments)
            return replace(view, course=entry.course)
        (entry,) = await self._decorate([view], assignments)
        return entry

    async def get_course_rating(self, course_id: object) -> RatingSummary:
        course, assignments = await self._find(course_id)
        if course is None:
            raise NotFound("Course not found")
        (entry,) = await self._decorate([course], assignments)
        return entry.rating

    async def get_instructor(self, course_id: object) -> Instructor | None:
        course, assignments = await self._find(course_id)
        if course is None:
            raise NotFound("Course not found")
        (entry,) = await self._decorate([course], assignments)
        if entry.course.teacher_id is None:
            return None
        return Instructor(entry.course.teacher_id, entry.course.teacher_name)

    async def find_course(self, course_id: object) -> Course:
        """The merged record for ``course_id`` regardless of status."""
        course, _ = await self._find(course_id)
        if course is None:
            raise NotFound("Course not found")
        return course

    # -- course mutations ----------------------------------------------------

    async def create_course(
        self, principal: Principal, submission: Mapping[str, Any]
    ) -> Course:
        if principal.is_admin():
            role = "admin"
        elif principal.has_role("teacher"):
            role = "teacher"
        else:
            raise Forbidden("Only teachers and admins can create courses")

        fields = validate_submission(submission)
        if role == "teacher":
            fields["teacher_id"] = principal.user_id
            fields["teacher_name"] = principal.display_name
        title = fields.pop("title")
        course = Course.new(
            created_by=principal.user_id,
            created_by_role=role,
            title=title,
            **fields,
        )
        await self._courses.persist(course)
        logger.info(
            "Course %s created by %s (%s), status=%s",
            course.id,
            principal.user_id,
            role,
            course.status,
            extra={"course_id": str(course.id), "actor_id": principal.user_id},
        )
        return course

    def _check_can_modify(self, principal: Principal, course: Course) -> None:
        if principal.has_role("teacher") and moderation.is_owner(course, principal.user_id):
            return
        if principal.is_admin():
            return
        logger.warning(
            "Modify denied: user=%s course=%s",
            principal.user_id,
            course.id,
            extra={"course_id": str(course.id), "actor_id": principal.user_id},
        )
        raise Forbidden("You can only modify your own courses")

    async def update_course(
        self, principal: Principal, course_id: object, changes: Mapping[str, Any]
    ) -> Course:
        ref = require_course_id(course_id)
        stored = await self._courses.get(ref)
        seed = next((c for c in self._seed if record_matches(c, ref)), None)
        if stored is None and seed is None:
            raise NotFound("Course not found")

        if seed is not None:
            # Seed edits are stored as a partial override on the legacy id.
            current = stored or Course(id=seed.id)
            effective = override(seed, current)
        else:
            current = effective = stored  # type: ignore[assignment]
        self._check_can_modify(principal, effective)

        fields = _clean_fields(changes)
        _check_values(fields)
        now = int(time.time())
        updated = replace(current, **fields, updated_at=now)

        status = changes.get("status")
        if status is not None:
            # Resubmission is the only way back to pending.
            if status != "pending" or current.is_seed or not moderation.is_owner(
                current, principal.user_id
            ):
                raise ValidationFailed(
                    "Only the owning teacher can resubmit a course for review",
                    fields=["status"],
                )
            updated = replace(updated, status="pending", rejection_reason=None)

        await self._courses.persist(updated)
        logger.info(
            "Course %s updated by %s",
            updated.id,
            principal.user_id,
            extra={"course_id": str(updated.id), "actor_id": principal.user_id},
        )
        return override(seed, updated) if seed is not None else updated

    async def delete_course(self, principal: Principal, course_id: object) -> None:
        ref = require_course_id(course_id)
        stored = await self._courses.get(ref)
        if stored is None:
            if any(record_matches(c, ref) for c in self._seed):
                raise Forbidden("Seed catalog courses cannot be deleted")
            raise NotFound("Course not found")
        if stored.is_seed:
            raise Forbidden("Seed catalog courses cannot be deleted")
        self._check_can_modify(principal, stored)

        await self._courses.delete(stored.id)
        keys = {storage_key(classify(stored.id))}
        if stored.document_id:
            keys.add(storage_key(classify(stored.document_id)))
        for key in keys:
            await self._assignments.remove_for_course(key)
        logger.info(
            "Course %s deleted by %s",
            stored.id,
            principal.user_id,
            extra={"course_id": str(stored.id), "actor_id": principal.user_id},
        )

    # -- moderation ----------------------------------------------------------

    async def moderate(
        self,
        course_id: object,
        decision: Literal["approve", "reject"],
        principal: Principal,
        reason: str | None = None,
    ) -> Course:
        if not principal.is_admin():
            raise Forbidden()
        if decision == "approve":
            return await self._moderation.approve(
                course_id, principal.user_id, principal.display_name
            )
        if decision == "reject":
            return await self._moderation.reject(
                course_id, principal.user_id, principal.display_name, reason
            )
        raise ValidationFailed(f"Unknown decision: {decision}", fields=["decision"])

    async def decision_history(self, course_id: object) -> list[ModerationDecision]:
        return await self._moderation.history(course_id)

    # -- instructor assignment -----------------------------------------------

    async def assign_instructor(
        self, course_id: object, teacher_id: str, teacher_name: str
    ) -> InstructorAssignment:
        course, assignments = await self._find(course_id)
        if course is None or course.effective_status != "approved":
            raise NotFound("Course not found")
        key = storage_key(classify(course.id))

        existing = AttributionContext.build(assignments=assignments)
        current = next(
            (a for ref, a in existing.assignments.items() if record_matches(course, ref)),
            None,
        )
        if current is not None:
            if current.teacher_id == teacher_id:
                raise Conflict("You are already assigned to this course")
            raise Conflict(_TAUGHT_BY_ANOTHER)
        if authored_by(course, teacher_id) or course.teacher_id == teacher_id:
            raise Conflict("You are already the owner of this course")
        if course.teacher_id or is_teacher_authored(course):
            raise Conflict(_TAUGHT_BY_ANOTHER)

        trusted = await lookup_many(self._lookup, [course.id], timeout=self._timeout)
        of_record = resolve_instructor(
            course, AttributionContext(trusted=trusted, assignments=existing.assignments)
        )
        if of_record is not None:
            if of_record.teacher_id == teacher_id:
                raise Conflict("You are already the instructor of this course")
            raise Conflict(_TAUGHT_BY_ANOTHER)

        assignment = InstructorAssignment.new(
            course_id=key, teacher_id=teacher_id, teacher_name=teacher_name
        )
        try:
            await self._assignments.add(assignment)
        except KeyError:
            raise Conflict(_TAUGHT_BY_ANOTHER) from None
        logger.info(
            "Teacher %s assigned to course %s",
            teacher_id,
            key,
            extra={"course_id": key, "actor_id": teacher_id},
        )
        return assignment

    async def remove_assignment(self, course_id: object, teacher_id: str) -> bool:
        key = storage_key(require_course_id(course_id))
        removed = await self._assignments.remove(key, teacher_id)
        if removed:
            logger.info(
                "Teacher %s removed from course %s",
                teacher_id,
                key,
                extra={"course_id": key, "actor_id": teacher_id},
            )
        return removed

    async def assignment_status(
        self, course_ids: Sequence[object], teacher_id: str
    ) -> dict[str, str | None]:
        """For each id, the name of *another* teacher teaching it, or None."""
        merged, assignments = await self._merged("admin", None, include_pending=False)
        found = {
            str(raw): next((c for c in merged if record_matches(c, raw)), None)
            for raw in course_ids
        }
        trusted = await lookup_many(
            self._lookup, [c.id for c in found.values() if c], timeout=self._timeout
        )
        ctx = AttributionContext(
            trusted=trusted,
            assignments=AttributionContext.build(assignments=assignments).assignments,
        )
        status: dict[str, str | None] = {}
        for raw, course in found.items():
            instructor = resolve_instructor(course, ctx) if course else None
            if instructor is None or instructor.teacher_id == teacher_id:
                status[str(raw)] = None
            else:
                status[str(raw)] = instructor.teacher_name or "Another instructor"
        return status

