"""Identifier normalization for course records.

Course ids arrive in two incompatible schemes plus garbage:

  LEGACY    small integers from the static seed catalog.  They show up as
            ints, or as strings like "7" once they have been through a
            URL or a JSON round trip.
  DOCUMENT  24-character hex strings minted by the document store for
            everything a teacher or admin submits.
  OPAQUE    anything else.  Compared by exact text only, never coerced.

A review written against a seed course stores "7"; the course object
carries 7.  A persisted course may be referenced by its own id or by a
``document_id`` cross-reference.  Every comparison in the service goes
through ``equals`` / ``record_matches`` so those cases are handled in
exactly one place.  Cross-kind equality is never inferred: legacy 1 and a
document id that happens to end in 1 are different courses.
"""

from __future__ import annotations

import enum
import re
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.core.errors import ValidationFailed

if TYPE_CHECKING:
    from app.models.course import Course

_DOCUMENT_ID = re.compile(r"^[0-9a-fA-F]{24}$")
_LEGACY_ID = re.compile(r"^[+-]?\d+$")


class IdKind(enum.Enum):
    LEGACY = "legacy"
    DOCUMENT = "document"
    OPAQUE = "opaque"


@dataclass(frozen=True, slots=True)
class CourseRef:
    """A classified course id.  Hashable, so usable as a merge key."""

    kind: IdKind
    value: int | str

    def __str__(self) -> str:
        return str(self.value)


def new_document_id() -> str:
    """A fresh 24-hex document id."""
    return secrets.token_hex(12)


def classify(raw: object) -> CourseRef:
    if isinstance(raw, bool):
        raise ValidationFailed("A boolean is not a course id", fields=["id"])
    if isinstance(raw, CourseRef):
        return raw
    if isinstance(raw, int):
        return CourseRef(IdKind.LEGACY, raw)
    if raw is None:
        return CourseRef(IdKind.OPAQUE, "")

    text = str(raw)
    stripped = text.strip()
    if _DOCUMENT_ID.match(stripped):
        return CourseRef(IdKind.DOCUMENT, stripped.lower())
    if _LEGACY_ID.match(stripped):
        return CourseRef(IdKind.LEGACY, int(stripped))
    return CourseRef(IdKind.OPAQUE, text)


def equals(a: object, b: object) -> bool:
    if a is None or b is None:
        return False
    return classify(a) == classify(b)


def _field(record: Course | Mapping[str, Any], name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def record_matches(record: Course | Mapping[str, Any], query_id: object) -> bool:
    """True if the record is the one ``query_id`` names.

    Checks the record's own id first, then its ``document_id``
    cross-reference.
    """
    if query_id is None:
        return False
    target = classify(query_id)
    for name in ("id", "document_id"):
        value = _field(record, name)
        if value is not None and value != "" and classify(value) == target:
            return True
    return False


def identity_key(record: Course | Mapping[str, Any]) -> CourseRef:
    """The key the merger de-duplicates on: the record's own id."""
    return classify(_field(record, "id"))


def require_course_id(raw: object) -> CourseRef:
    """Classify an id where a real course id is required."""
    ref = classify(raw)
    if ref.kind is IdKind.OPAQUE:
        raise ValidationFailed(f"Invalid course id: {raw!r}", fields=["id"])
    return ref


def storage_key(ref: CourseRef) -> str:
    """Canonical string form used for persisted cross-references."""
    return str(ref.value)
