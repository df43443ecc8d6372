"""Admin moderation: the pending queue, approve/reject, decision history."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.courses import CourseOut, course_out, entry_out
from app.api.dependencies import require_role
from app.models.moderation import ModerationDecision
from app.models.principal import Principal
from app.services.registry import catalog_service

router = APIRouter(prefix="/v1/moderation", tags=["moderation"])

_require_admin = require_role("admin")


class RejectIn(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class DecisionOut(BaseModel):
    id: str
    course_id: str
    decided_by: str
    decided_by_name: str
    decision: str
    reason: str | None = None
    decided_at: int


def _decision_out(decision: ModerationDecision) -> DecisionOut:
    return DecisionOut(
        id=decision.id,
        course_id=decision.course_id,
        decided_by=decision.decided_by,
        decided_by_name=decision.decided_by_name,
        decision=decision.decision,
        reason=decision.reason,
        decided_at=decision.decided_at,
    )


@router.get("/queue", response_model=list[CourseOut])
async def moderation_queue(
    _principal: Annotated[Principal, Depends(_require_admin)],
) -> list[CourseOut]:
    return [entry_out(e) for e in await catalog_service.moderation_queue()]


@router.post("/{course_id}/approve", response_model=CourseOut)
async def approve_course(
    course_id: str,
    principal: Annotated[Principal, Depends(_require_admin)],
) -> CourseOut:
    course = await catalog_service.moderate(course_id, "approve", principal)
    return course_out(course)


@router.post("/{course_id}/reject", response_model=CourseOut)
async def reject_course(
    course_id: str,
    principal: Annotated[Principal, Depends(_require_admin)],
    body: RejectIn | None = None,
) -> CourseOut:
    reason = body.reason if body is not None else None
    course = await catalog_service.moderate(course_id, "reject", principal, reason)
    return course_out(course)


@router.get("/{course_id}/decisions", response_model=list[DecisionOut])
async def decision_history(
    course_id: str,
    _principal: Annotated[Principal, Depends(_require_admin)],
) -> list[DecisionOut]:
    return [_decision_out(d) for d in await catalog_service.decision_history(course_id)]
