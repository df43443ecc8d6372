"""Record merger: three course streams in, one de-duplicated catalog out.

Sources, applied in this order:

  1. seed     the static catalog, legacy integer ids
  2. teacher  teacher-submitted courses, in submission order
  3. admin    admin-submitted courses and partial edits of seed courses,
              in submission order

Each submitted record is matched against what has been merged so far by
normalized identity: its own id, or its ``document_id`` cross-reference.
A match is replaced by a field-level override, where every field the
submitted record actually specifies (non-None) wins and the existing
record supplies the rest.  That is what lets an admin retitle a seed
course without wiping its image and long description.  No match means
the record is appended.

The same identity arriving from both the teacher and the admin stream is
resolved by source order: the admin write lands last and wins.  No
attempt is made to reconcile simultaneous edits.

The merged list is built fresh for every call and never persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import fields, replace

from app.core.metrics import CATALOG_MERGE_RECORDS
from app.models.course import Course
from app.services.identifiers import CourseRef, IdKind, classify, identity_key

logger = logging.getLogger(__name__)

_OVERRIDABLE = tuple(f.name for f in fields(Course) if f.name != "id")


def override(base: Course, submitted: Course) -> Course:
    """Field-level override: ``submitted``'s non-None fields win."""
    changes = {
        name: getattr(submitted, name)
        for name in _OVERRIDABLE
        if getattr(submitted, name) is not None
    }
    return replace(base, **changes)


def _refs(course: Course) -> list[CourseRef]:
    refs = [identity_key(course)]
    if course.document_id:
        doc_ref = classify(course.document_id)
        if doc_ref != refs[0]:
            refs.append(doc_ref)
    return refs


class _MergedView:
    """Ordered merge target with an identity index over id and document_id."""

    def __init__(self) -> None:
        self._records: list[Course] = []
        self._index: dict[CourseRef, int] = {}

    def _position(self, course: Course) -> int | None:
        for ref in _refs(course):
            pos = self._index.get(ref)
            if pos is not None:
                return pos
        return None

    def apply(self, course: Course, source: str) -> None:
        pos = self._position(course)
        if pos is None:
            pos = len(self._records)
            self._records.append(course)
        else:
            logger.debug(
                "merge: %s record %s overrides %s",
                source,
                course.id,
                self._records[pos].id,
            )
            self._records[pos] = override(self._records[pos], course)
        for ref in _refs(self._records[pos]):
            if ref.kind is IdKind.OPAQUE:
                logger.debug("merge: %s record has opaque id %r", source, ref.value)
            self._index.setdefault(ref, pos)

    def records(self) -> list[Course]:
        return list(self._records)


def merge(
    seed: Sequence[Course],
    teacher: Iterable[Course],
    admin: Iterable[Course],
) -> list[Course]:
    """Merge the three sources.  Each identity appears exactly once.

    Deterministic and idempotent: the same inputs always produce the same
    output, and a record already present in the result never produces a
    second entry.
    """
    view = _MergedView()
    for course in seed:
        view.apply(course, "seed")
    for course in teacher:
        view.apply(course, "teacher")
    for course in admin:
        view.apply(course, "admin")

    merged = view.records()
    CATALOG_MERGE_RECORDS.observe(len(merged))
    return merged
