"""Tests for catalog, course detail, authoring and assignment endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.services.seed_catalog import SEED_COURSES
from tests.conftest import auth, course_payload


def _create(client: TestClient, token: str, **overrides: object) -> dict:
    resp = client.post("/v1/courses", json=course_payload(**overrides), headers=auth(token))
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---- catalog listing ----


def test_list_courses_returns_seed_catalog(client: TestClient) -> None:
    resp = client.get("/v1/courses")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == len(SEED_COURSES)
    assert body["page"] == 1
    assert body["page_size"] == 12
    ids = [c["id"] for c in body["items"]]
    assert set(ids) == {c.id for c in SEED_COURSES}
    assert all(c["status"] == "approved" for c in body["items"])


def test_list_courses_filters_and_pages(client: TestClient) -> None:
    resp = client.get(
        "/v1/courses",
        params={"category": ["Data Science", "DevOps"], "sort": "price_high"},
    )
    items = resp.json()["items"]
    assert {c["category"] for c in items} <= {"Data Science", "DevOps"}
    prices = [c["price"] for c in items]
    assert prices == sorted(prices, reverse=True)

    paged = client.get("/v1/courses", params={"page": 2, "page_size": 5}).json()
    assert len(paged["items"]) == len(SEED_COURSES) - 5
    assert paged["pages"] == 2


def test_list_courses_rejects_unknown_sort(client: TestClient) -> None:
    assert client.get("/v1/courses", params={"sort": "cheapest"}).status_code == 422


def test_pending_course_hidden_from_public_but_visible_to_owner(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    created = _create(client, teacher_token)
    assert created["status"] == "pending"
    assert created["teacher_id"] == "tch-1"

    public_ids = [c["id"] for c in client.get("/v1/courses").json()["items"]]
    assert created["id"] not in public_ids
    student_ids = [
        c["id"]
        for c in client.get("/v1/courses", headers=auth(student_token)).json()["items"]
    ]
    assert created["id"] not in student_ids
    owner_ids = [
        c["id"]
        for c in client.get("/v1/courses", headers=auth(teacher_token)).json()["items"]
    ]
    assert created["id"] in owner_ids


def test_admin_include_pending_lists_everything(
    client: TestClient, teacher_token: str, admin_token: str
) -> None:
    created = _create(client, teacher_token)
    resp = client.get(
        "/v1/courses", params={"include_pending": True}, headers=auth(admin_token)
    )
    assert created["id"] in [c["id"] for c in resp.json()["items"]]


# ---- course detail ----


def test_get_seed_course_by_string_id(client: TestClient) -> None:
    resp = client.get("/v1/courses/1")
    assert resp.status_code == 200
    body = resp.json()
    assert body["presentation"] == "published"
    assert body["course"]["id"] == 1
    assert len(body["course"]["sections"]) == 5
    assert body["course"]["teacher_id"] is None


def test_owner_sees_awaiting_moderation(client: TestClient, teacher_token: str) -> None:
    created = _create(client, teacher_token)
    resp = client.get(f"/v1/courses/{created['id']}", headers=auth(teacher_token))
    assert resp.status_code == 200
    assert resp.json()["presentation"] == "awaiting_moderation"

    assert client.get(f"/v1/courses/{created['id']}").status_code == 404


def test_unknown_course_is_404(client: TestClient) -> None:
    resp = client.get("/v1/courses/65f0c0ffee00000000000bad")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Course not found"}


# ---- authoring ----


def test_admin_course_is_published_immediately(client: TestClient, admin_token: str) -> None:
    created = _create(client, admin_token)
    assert created["status"] == "approved"
    assert created["teacher_id"] is None
    assert created["id"] == created["document_id"]
    assert created["original_price"] == created["price"]

    instructor = client.get(f"/v1/courses/{created['id']}/instructor").json()
    assert instructor == {"assigned": False, "teacher_id": None, "teacher_name": None}


def test_create_with_missing_fields_is_422(client: TestClient, teacher_token: str) -> None:
    resp = client.post("/v1/courses", json={"title": "Half done"}, headers=auth(teacher_token))
    assert resp.status_code == 422
    assert resp.json()["detail"].startswith("Missing required fields:")


def test_admin_edits_seed_course(client: TestClient, admin_token: str) -> None:
    resp = client.put("/v1/courses/1", json={"price": 10}, headers=auth(admin_token))
    assert resp.status_code == 200
    assert resp.json()["price"] == 10
    assert resp.json()["title"] == SEED_COURSES[0].title

    detail = client.get("/v1/courses/1").json()["course"]
    assert detail["price"] == 10
    assert detail["image"] == SEED_COURSES[0].image


def test_teacher_cannot_edit_another_teachers_course(
    client: TestClient, teacher_token: str, other_teacher_token: str
) -> None:
    created = _create(client, teacher_token)
    resp = client.put(
        f"/v1/courses/{created['id']}",
        json={"title": "Hijacked"},
        headers=auth(other_teacher_token),
    )
    assert resp.status_code == 403
    assert resp.json() == {"detail": "You can only modify your own courses"}


def test_admin_edits_and_deletes_teacher_course(
    client: TestClient, teacher_token: str, admin_token: str
) -> None:
    created = _create(client, teacher_token)
    resp = client.put(
        f"/v1/courses/{created['id']}",
        json={"title": "Retitled by admin"},
        headers=auth(admin_token),
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Retitled by admin"
    assert resp.json()["status"] == "pending"

    resp = client.delete(f"/v1/courses/{created['id']}", headers=auth(admin_token))
    assert resp.status_code == 204
    assert client.get("/v1/moderation/queue", headers=auth(admin_token)).json() == []


def test_delete_course(client: TestClient, teacher_token: str) -> None:
    created = _create(client, teacher_token)
    resp = client.delete(f"/v1/courses/{created['id']}", headers=auth(teacher_token))
    assert resp.status_code == 204
    resp = client.get(f"/v1/courses/{created['id']}", headers=auth(teacher_token))
    assert resp.status_code == 404


def test_seed_course_cannot_be_deleted(client: TestClient, admin_token: str) -> None:
    resp = client.delete("/v1/courses/1", headers=auth(admin_token))
    assert resp.status_code == 403


# ---- instructor assignment ----


def test_self_assign_and_unassign(
    client: TestClient, teacher_token: str, other_teacher_token: str
) -> None:
    resp = client.post("/v1/courses/6/instructor", headers=auth(teacher_token))
    assert resp.status_code == 201
    assert resp.json()["course_id"] == "6"
    assert resp.json()["teacher_name"] == "Tess Teacher"

    instructor = client.get("/v1/courses/6/instructor").json()
    assert instructor["teacher_id"] == "tch-1"
    assert client.get("/v1/courses/6").json()["course"]["teacher_name"] == "Tess Teacher"

    status = client.get(
        "/v1/courses/assignment-status",
        params={"ids": "6"},
        headers=auth(other_teacher_token),
    ).json()
    assert status == {"assignment_status": {"6": "Tess Teacher"}}

    conflict = client.post("/v1/courses/6/instructor", headers=auth(other_teacher_token))
    assert conflict.status_code == 409

    resp = client.delete("/v1/courses/6/instructor", headers=auth(teacher_token))
    assert resp.status_code == 204
    assert client.get("/v1/courses/6/instructor").json()["assigned"] is False


def test_rating_endpoint_starts_at_zero(client: TestClient) -> None:
    resp = client.get("/v1/courses/2/rating")
    assert resp.status_code == 200
    assert resp.json() == {"average": 0.0, "count": 0}
