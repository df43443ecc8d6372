from __future__ import annotations

import asyncio

import pytest

from app.models.course import Course, Section
from app.repos.course_repo import DocumentCourseRepo, course_from_doc, course_to_doc
from app.repos.document_store import InMemoryDocumentStore


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


# ---- InMemoryDocumentStore ----


def test_find_returns_insertion_order_and_filters(store: InMemoryDocumentStore) -> None:
    run(store.insert("reviews", "b", {"teacher_id": "t1", "rating": 4}))
    run(store.insert("reviews", "a", {"teacher_id": "t2", "rating": 5}))
    run(store.insert("reviews", "c", {"teacher_id": "t1", "rating": 2}))

    assert [d["rating"] for d in run(store.find("reviews"))] == [4, 5, 2]
    assert [d["rating"] for d in run(store.find("reviews", {"teacher_id": "t1"}))] == [4, 2]
    assert run(store.find("reviews", {"missing_field": None})) == []


def test_insert_rejects_duplicate_ids(store: InMemoryDocumentStore) -> None:
    run(store.insert("courses", "x", {"title": "One"}))
    with pytest.raises(KeyError):
        run(store.insert("courses", "x", {"title": "Two"}))


def test_returned_documents_are_copies(store: InMemoryDocumentStore) -> None:
    doc = {"tags": ["a"]}
    run(store.insert("courses", "x", doc))
    doc["tags"].append("mutated")

    fetched = run(store.get("courses", "x"))
    fetched["tags"].append("also mutated")
    assert run(store.get("courses", "x")) == {"tags": ["a"]}


def test_replace_only_touches_existing(store: InMemoryDocumentStore) -> None:
    assert run(store.replace("courses", "x", {"title": "New"})) is False
    assert run(store.get("courses", "x")) is None
    run(store.upsert("courses", "x", {"title": "Old"}))
    assert run(store.replace("courses", "x", {"title": "New"})) is True
    assert run(store.get("courses", "x")) == {"title": "New"}


def test_delete_and_delete_many(store: InMemoryDocumentStore) -> None:
    for doc_id, course in (("1", "c1"), ("2", "c1"), ("3", "c2")):
        run(store.insert("assignments", doc_id, {"course_id": course}))
    assert run(store.delete_many("assignments", {"course_id": "c1"})) == 2
    assert run(store.delete("assignments", "3")) is True
    assert run(store.delete("assignments", "3")) is False
    assert run(store.find("assignments")) == []


# ---- DocumentCourseRepo ----


def test_course_document_round_trip_keeps_sections() -> None:
    course = Course(
        id="65f0c0ffee65f0c0ffee65f0",
        title="Kubernetes",
        learnings=("pods",),
        sections=(Section(title="Intro"),),
        status="pending",
        created_by="tch-1",
    )
    doc = course_to_doc(course)
    assert "description" not in doc
    assert "override_of_seed" not in doc
    assert course_from_doc(doc) == course


def test_seed_override_is_flagged() -> None:
    doc = course_to_doc(Course(id=3, price=10.0))
    assert doc == {"id": 3, "price": 10.0, "override_of_seed": True}


def test_fetch_all_hides_unapproved_unless_asked(store: InMemoryDocumentStore) -> None:
    repo = DocumentCourseRepo(store)
    run(repo.persist(Course(id="a" * 24, status="pending", created_by="tch-1")))
    run(repo.persist(Course(id="b" * 24, status="approved", created_by="adm-1")))
    run(repo.persist(Course(id=2, price=5.0)))

    assert [c.id for c in run(repo.fetch_all(include_pending=False))] == ["b" * 24, 2]
    assert len(run(repo.fetch_all(include_pending=True))) == 3
    assert [c.id for c in run(repo.fetch_by_teacher("tch-1"))] == ["a" * 24]


def test_get_accepts_any_spelling_of_the_id(store: InMemoryDocumentStore) -> None:
    repo = DocumentCourseRepo(store)
    run(repo.persist(Course(id="ab" * 12, title="Mixed case")))
    assert run(repo.get("AB" * 12)).title == "Mixed case"
    run(repo.persist(Course(id=7, price=1.0)))
    assert run(repo.get(" 7 ")).price == 1.0


def test_set_status_records_reason_only_on_reject(store: InMemoryDocumentStore) -> None:
    repo = DocumentCourseRepo(store)
    course_id = "c" * 24
    run(repo.persist(Course(id=course_id, status="pending", created_by="tch-1")))

    rejected = run(repo.set_status(course_id, "rejected", "adm-1", "Too short"))
    assert rejected.status == "rejected"
    assert rejected.rejection_reason == "Too short"

    approved = run(repo.set_status(course_id, "approved", "adm-1", "ignored"))
    assert approved.rejection_reason is None
    assert run(repo.set_status("d" * 24, "approved", "adm-1")) is None
