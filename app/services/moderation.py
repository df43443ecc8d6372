"""Moderation state machine and visibility rules.

    teacher create ──► pending ──approve──► approved
                          │
                          └────reject────► rejected

    admin create ──► approved   (administrators self-publish)

``pending`` is the only valid source state.  Approving or rejecting
anything else (including a course that does not exist) is reported as
NotFound: from the moderator's point of view there is no pending record.

Persistence first: the status change is written to the course store
before anything else happens.  If that call fails, the caller gets
UpstreamUnavailable and nothing, including the decision log, has moved.
There is no optimistic update to roll back.

Concurrent moderators are not coordinated: two simultaneous decisions on
the same course both pass the pending check and the last successful
write wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from app.core.errors import NotFound
from app.core.metrics import MODERATION_DECISIONS
from app.models.course import Course
from app.models.moderation import Decision, ModerationDecision
from app.models.principal import ViewerRole
from app.repos.course_repo import CourseRepo
from app.repos.decision_repo import DecisionRepo
from app.services.attribution import authored_by
from app.services.identifiers import require_course_id, storage_key

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "Course does not meet our standards"


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


def is_owner(course: Course, actor_id: str | None) -> bool:
    return authored_by(course, actor_id)


def is_visible(
    course: Course,
    role: ViewerRole,
    actor_id: str | None = None,
    *,
    include_pending: bool = False,
) -> bool:
    if course.effective_status == "approved":
        return True
    if role == "admin" and include_pending:
        return True
    return role == "teacher" and is_owner(course, actor_id)


def filter_visible(
    courses: Iterable[Course],
    role: ViewerRole,
    actor_id: str | None = None,
    *,
    include_pending: bool = False,
) -> list[Course]:
    return [
        c
        for c in courses
        if is_visible(c, role, actor_id, include_pending=include_pending)
    ]


def moderation_queue(courses: Iterable[Course]) -> list[Course]:
    return [c for c in courses if c.effective_status == "pending"]


@dataclass(frozen=True, slots=True)
class PendingForOwner:
    """What an owner sees for their own unpublished course instead of 404."""

    course: Course
    presentation: Literal["awaiting_moderation", "rejected"]
    reason: str | None = None


def detail_view(
    course: Course | None, role: ViewerRole, actor_id: str | None
) -> Course | PendingForOwner:
    if course is None:
        raise NotFound("Course not found")
    status = course.effective_status
    if status == "approved" or role == "admin":
        return course
    if role == "teacher" and is_owner(course, actor_id):
        if status == "rejected":
            return PendingForOwner(
                course=course,
                presentation="rejected",
                reason=course.rejection_reason or DEFAULT_REJECTION_REASON,
            )
        return PendingForOwner(course=course, presentation="awaiting_moderation")
    raise NotFound("Course not found")


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


class ModerationStateMachine:
    def __init__(self, courses: CourseRepo, decisions: DecisionRepo) -> None:
        self._courses = courses
        self._decisions = decisions

    async def approve(self, course_id: object, actor_id: str, actor_name: str) -> Course:
        return await self._transition(course_id, "approved", actor_id, actor_name, None)

    async def reject(
        self,
        course_id: object,
        actor_id: str,
        actor_name: str,
        reason: str | None = None,
    ) -> Course:
        reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
        return await self._transition(course_id, "rejected", actor_id, actor_name, reason)

    async def history(self, course_id: object) -> list[ModerationDecision]:
        key = storage_key(require_course_id(course_id))
        return await self._decisions.list_for_course(key)

    async def _transition(
        self,
        course_id: object,
        decision: Decision,
        actor_id: str,
        actor_name: str,
        reason: str | None,
    ) -> Course:
        ref = require_course_id(course_id)
        current = await self._courses.get(ref)
        if current is None or current.is_seed or current.status != "pending":
            logger.warning(
                "No pending course to %s: %s",
                "approve" if decision == "approved" else "reject",
                ref,
                extra={"course_id": str(ref), "actor_id": actor_id},
            )
            raise NotFound("No pending course with that id")

        updated = await self._courses.set_status(ref, decision, actor_id, reason)
        if updated is None:
            # Deleted between the read and the write.
            raise NotFound("No pending course with that id")

        await self._decisions.append(
            ModerationDecision.new(
                course_id=storage_key(ref),
                decided_by=actor_id,
                decided_by_name=actor_name,
                decision=decision,
                reason=reason,
            )
        )
        MODERATION_DECISIONS.labels(decision=decision).inc()
        logger.info(
            "Course %s %s by %s",
            ref,
            decision,
            actor_id,
            extra={"course_id": str(ref), "actor_id": actor_id},
        )
        return updated
