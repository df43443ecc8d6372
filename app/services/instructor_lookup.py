"""Trusted instructor-of-record lookup (attribution strategy 1).

Two implementations:

  StoreInstructorLookup  computes the instructor of record from persisted
                         data (assignment, then the stored course's own
                         instructor fields).  Seed courses that were never
                         edited have no stored document and resolve to None.
  HttpInstructorLookup   asks a remote directory service:
                         GET {base}/courses/{id}/instructor
                         200 {"id": ..., "name": ...} or 404.

``lookup_many`` runs one lookup per course concurrently under a timeout.
A lookup that fails is skipped and attribution falls through to the next
strategy; it never fails the catalog read.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Protocol

import httpx

from app.core.errors import UpstreamUnavailable
from app.core.metrics import UPSTREAM_FAILURES
from app.models.assignment import Instructor
from app.repos.assignment_repo import AssignmentRepo
from app.repos.course_repo import CourseRepo
from app.services.attribution import author_id, is_teacher_authored
from app.services.identifiers import CourseRef, classify, storage_key

logger = logging.getLogger(__name__)


class InstructorLookup(Protocol):
    async def fetch_instructor(self, course_id: object) -> Instructor | None: ...


class StoreInstructorLookup:
    def __init__(self, courses: CourseRepo, assignments: AssignmentRepo) -> None:
        self._courses = courses
        self._assignments = assignments

    async def fetch_instructor(self, course_id: object) -> Instructor | None:
        ref = classify(course_id)
        assignment = await self._assignments.get_for_course(storage_key(ref))
        if assignment is not None:
            return Instructor(assignment.teacher_id, assignment.teacher_name)
        course = await self._courses.get(ref)
        if course is None:
            return None
        if course.teacher_id:
            return Instructor(course.teacher_id, course.teacher_name)
        if is_teacher_authored(course):
            return Instructor(author_id(course) or "", course.teacher_name)
        return None


class HttpInstructorLookup:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def fetch_instructor(self, course_id: object) -> Instructor | None:
        url = f"{self._base_url}/courses/{storage_key(classify(course_id))}/instructor"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(url)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(
                f"Instructor service unreachable: {exc}", source="instructor_lookup"
            ) from exc

        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise UpstreamUnavailable(
                f"Instructor service returned {resp.status_code}",
                source="instructor_lookup",
            )
        body = resp.json()
        teacher_id = body.get("id") or body.get("teacher_id")
        if not teacher_id:
            return None
        return Instructor(str(teacher_id), body.get("name") or body.get("teacher_name"))


async def lookup_many(
    lookup: InstructorLookup, course_ids: Iterable[object], *, timeout: float
) -> dict[CourseRef, Instructor]:
    refs = list(dict.fromkeys(classify(c) for c in course_ids))

    async def _one(ref: CourseRef) -> Instructor | None:
        try:
            return await asyncio.wait_for(lookup.fetch_instructor(ref), timeout)
        except Exception as exc:
            UPSTREAM_FAILURES.labels(source="instructor_lookup").inc()
            logger.warning(
                "Instructor lookup for course %s failed, skipping: %r",
                ref,
                exc,
                extra={"course_id": str(ref), "source": "instructor_lookup"},
            )
            return None

    results = await asyncio.gather(*(_one(r) for r in refs))
    return {ref: found for ref, found in zip(refs, results, strict=True) if found}
