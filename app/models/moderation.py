from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Literal

from app.services.identifiers import new_document_id

Decision = Literal["approved", "rejected"]


@dataclass(frozen=True, slots=True)
class ModerationDecision:
    """Append-only record of one approve/reject action.

    A later re-approval is a new decision; recorded decisions are never
    edited.
    """

    id: str
    course_id: str
    decided_by: str
    decided_by_name: str
    decision: Decision
    reason: str | None = None
    decided_at: int = 0

    @staticmethod
    def new(
        *,
        course_id: str,
        decided_by: str,
        decided_by_name: str,
        decision: Decision,
        reason: str | None = None,
    ) -> ModerationDecision:
        return ModerationDecision(
            id=new_document_id(),
            course_id=course_id,
            decided_by=decided_by,
            decided_by_name=decided_by_name,
            decision=decision,
            reason=reason if decision == "rejected" else None,
            decided_at=int(time.time()),
        )
