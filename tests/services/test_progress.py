from __future__ import annotations

import asyncio

import pytest

from app.core.errors import NotFound, ValidationFailed
from app.models.enrollment import Enrollment, derive_progress
from app.models.principal import Principal
from app.services.cache import cache_service
from app.services.registry import catalog_service, progress_service, sync_caches
from tests.conftest import course_payload


def run(coro):
    return asyncio.run(coro)


# ---- derivation ----


def test_progress_derivation() -> None:
    assert derive_progress(frozenset({0, 2, 4}), 5) == 60
    assert derive_progress(frozenset({0, 4}), 5) == 40
    assert derive_progress(frozenset(), 5) == 0
    assert derive_progress(frozenset({0}), 0) == 0


def test_progress_rounds_half_up() -> None:
    assert derive_progress(frozenset({0}), 8) == 13  # 12.5
    assert derive_progress(frozenset({0, 1}), 3) == 67


def test_completion_sets_and_clears_completed_status() -> None:
    done = Enrollment.new(course_id="1", student_id="s").with_sections(frozenset({0, 1}), 2)
    assert done.status == "completed"
    assert done.progress == 100
    reopened = done.with_sections(frozenset({0}), 2)
    assert reopened.status == "active"
    assert reopened.progress == 50


# ---- enroll ----


def test_enroll_is_idempotent() -> None:
    first = run(progress_service.enroll(1, "stu-1"))
    second = run(progress_service.enroll("1", "stu-1"))
    assert first == second
    assert first.status == "active"
    assert len(run(progress_service.list_enrollments("stu-1"))) == 1


def test_cannot_enroll_in_pending_course() -> None:
    teacher = Principal("tch-1", frozenset({"teacher"}), "Tess")
    pending = run(catalog_service.create_course(teacher, course_payload()))
    with pytest.raises(NotFound):
        run(progress_service.enroll(pending.id, "stu-1"))


# ---- toggling sections ----


def test_toggling_sections_updates_derived_progress() -> None:
    run(progress_service.enroll(1, "stu-1"))  # seed course 1 has 5 sections
    for index in (0, 2, 4):
        enrollment = run(progress_service.toggle_section(1, "stu-1", index, True))
    assert enrollment.progress == 60
    assert enrollment.completed_sections == frozenset({0, 2, 4})

    enrollment = run(progress_service.toggle_section(1, "stu-1", 2, False))
    assert enrollment.progress == 40


def test_completing_every_section_completes_the_enrollment() -> None:
    run(progress_service.enroll(1, "stu-1"))
    for index in range(5):
        enrollment = run(progress_service.toggle_section(1, "stu-1", index, True))
    assert enrollment.progress == 100
    assert enrollment.status == "completed"


def test_toggling_twice_is_harmless() -> None:
    run(progress_service.enroll(1, "stu-1"))
    run(progress_service.toggle_section(1, "stu-1", 0, True))
    enrollment = run(progress_service.toggle_section(1, "stu-1", 0, True))
    assert enrollment.progress == 20


@pytest.mark.parametrize("index", [-1, 5])
def test_section_index_out_of_range(index: int) -> None:
    run(progress_service.enroll(1, "stu-1"))
    with pytest.raises(ValidationFailed, match="out of range"):
        run(progress_service.toggle_section(1, "stu-1", index, True))


def test_toggle_without_enrollment_is_not_found() -> None:
    with pytest.raises(NotFound, match="Not enrolled"):
        run(progress_service.toggle_section(1, "stu-1", 0, True))


def test_progress_write_invalidates_student_and_instructor_caches() -> None:
    run(catalog_service.assign_instructor(1, "tch-1", "Tess"))
    run(progress_service.enroll(1, "stu-1"))
    run(sync_caches.for_owner("stu-1").put("student", [{"id": "m"}]))
    run(sync_caches.for_owner("tch-1").put("teacher", [{"id": "m"}]))

    run(progress_service.toggle_section(1, "stu-1", 0, True))

    assert not any(k.startswith("sync:stu-1:") for k in cache_service._store)
    assert not any(k.startswith("sync:tch-1:") for k in cache_service._store)
