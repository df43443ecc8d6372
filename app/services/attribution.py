"""Attribution resolver: who teaches this course?

Candidate answers are spread across several, often absent, fields.  They
are tried as an explicit ranked list of strategies; the first one that
returns an Instructor wins:

  1. trusted      instructor-of-record from the lookup service, fetched
                  ahead of time for the whole page
  2. assignment   a teacher who volunteered via "assign me as instructor"
  3. teacher_id   the course's own explicit instructor field
  4. authored     the course was written by a teacher: its author
  5. (none)       "not assigned"

There is no rule that turns an admin author into an instructor.  An
admin publishing a course is not its teacher of record, and guessing one
would point review/rating aggregation at an identity nobody reviews.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace

from app.models.assignment import Instructor, InstructorAssignment
from app.models.course import Course
from app.services.identifiers import CourseRef, classify

logger = logging.getLogger(__name__)

TEACHER_PREFIX = "teacher-"


def strip_teacher_prefix(created_by: str) -> str:
    if created_by.startswith(TEACHER_PREFIX):
        return created_by[len(TEACHER_PREFIX) :]
    return created_by


def is_teacher_authored(course: Course) -> bool:
    if course.created_by is None:
        return False
    return course.created_by_role == "teacher" or course.created_by.startswith(
        TEACHER_PREFIX
    )


def author_id(course: Course) -> str | None:
    """The authoring user's id with any role prefix removed."""
    if course.created_by is None:
        return None
    return strip_teacher_prefix(course.created_by)


def authored_by(course: Course, user_id: str | None) -> bool:
    """True if ``user_id`` wrote the course, in raw or role-prefixed form."""
    if user_id is None or course.created_by is None:
        return False
    return user_id in (course.created_by, author_id(course))


@dataclass(frozen=True)
class AttributionContext:
    """Everything the strategies may consult, gathered before resolving.

    Both maps are keyed by normalized course identity; a course is looked
    up by its own id and then by its document id.
    """

    trusted: Mapping[CourseRef, Instructor] = field(default_factory=dict)
    assignments: Mapping[CourseRef, InstructorAssignment] = field(default_factory=dict)

    @staticmethod
    def build(
        trusted: Mapping[object, Instructor] | None = None,
        assignments: list[InstructorAssignment] | None = None,
    ) -> AttributionContext:
        return AttributionContext(
            trusted={classify(k): v for k, v in (trusted or {}).items()},
            assignments={classify(a.course_id): a for a in assignments or ()},
        )


def _lookup(course: Course, table: Mapping[CourseRef, object]) -> object | None:
    for raw in (course.id, course.document_id):
        if raw is None:
            continue
        hit = table.get(classify(raw))
        if hit is not None:
            return hit
    return None


Strategy = Callable[[Course, AttributionContext], Instructor | None]


def _from_trusted_lookup(course: Course, ctx: AttributionContext) -> Instructor | None:
    hit = _lookup(course, ctx.trusted)
    return hit if isinstance(hit, Instructor) else None


def _from_assignment(course: Course, ctx: AttributionContext) -> Instructor | None:
    hit = _lookup(course, ctx.assignments)
    if isinstance(hit, InstructorAssignment):
        return Instructor(teacher_id=hit.teacher_id, teacher_name=hit.teacher_name)
    return None


def _from_teacher_id(course: Course, ctx: AttributionContext) -> Instructor | None:
    if course.teacher_id:
        return Instructor(teacher_id=course.teacher_id, teacher_name=course.teacher_name)
    return None


def _from_teacher_author(course: Course, ctx: AttributionContext) -> Instructor | None:
    if is_teacher_authored(course):
        return Instructor(
            teacher_id=author_id(course) or "", teacher_name=course.teacher_name
        )
    return None


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("trusted", _from_trusted_lookup),
    ("assignment", _from_assignment),
    ("teacher_id", _from_teacher_id),
    ("authored", _from_teacher_author),
)


def resolve_instructor(
    course: Course, ctx: AttributionContext | None = None
) -> Instructor | None:
    ctx = ctx or AttributionContext()
    for name, strategy in STRATEGIES:
        instructor = strategy(course, ctx)
        if instructor is not None:
            logger.debug(
                "attribution: course %s -> %s via %s",
                course.id,
                instructor.teacher_id,
                name,
            )
            return instructor
    return None


def apply_instructor(course: Course, instructor: Instructor | None) -> Course:
    """Return ``course`` with its instructor fields filled in (or cleared)."""
    if instructor is None:
        return replace(course, teacher_id=None, teacher_name=None)
    return replace(
        course,
        teacher_id=instructor.teacher_id,
        teacher_name=instructor.teacher_name or course.teacher_name,
    )


def attribute(course: Course, ctx: AttributionContext | None = None) -> Course:
    return apply_instructor(course, resolve_instructor(course, ctx))
