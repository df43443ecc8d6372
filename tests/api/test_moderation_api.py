"""Moderation endpoints: submit -> queue -> approve/reject -> history."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth, course_payload


def _submit(client: TestClient, token: str) -> str:
    resp = client.post("/v1/courses", json=course_payload(), headers=auth(token))
    assert resp.status_code == 201
    return resp.json()["id"]


def test_submit_approve_publish(
    client: TestClient, teacher_token: str, admin_token: str
) -> None:
    course_id = _submit(client, teacher_token)

    queue = client.get("/v1/moderation/queue", headers=auth(admin_token)).json()
    assert [c["id"] for c in queue] == [course_id]
    assert client.get(f"/v1/courses/{course_id}").status_code == 404

    resp = client.post(f"/v1/moderation/{course_id}/approve", headers=auth(admin_token))
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"

    public = client.get(f"/v1/courses/{course_id}")
    assert public.status_code == 200
    assert public.json()["course"]["teacher_id"] == "tch-1"
    assert public.json()["course"]["teacher_name"] == "Tess Teacher"
    assert client.get("/v1/moderation/queue", headers=auth(admin_token)).json() == []


def test_reject_with_reason_then_owner_sees_it(
    client: TestClient, teacher_token: str, admin_token: str
) -> None:
    course_id = _submit(client, teacher_token)
    resp = client.post(
        f"/v1/moderation/{course_id}/reject",
        json={"reason": "Add a syllabus"},
        headers=auth(admin_token),
    )
    assert resp.status_code == 200
    assert resp.json()["rejection_reason"] == "Add a syllabus"

    detail = client.get(f"/v1/courses/{course_id}", headers=auth(teacher_token)).json()
    assert detail["presentation"] == "rejected"
    assert detail["reason"] == "Add a syllabus"


def test_reject_without_body_uses_default_reason(
    client: TestClient, teacher_token: str, admin_token: str
) -> None:
    course_id = _submit(client, teacher_token)
    resp = client.post(f"/v1/moderation/{course_id}/reject", headers=auth(admin_token))
    assert resp.status_code == 200
    assert resp.json()["rejection_reason"] == "Course does not meet our standards"


def test_approving_twice_is_404(
    client: TestClient, teacher_token: str, admin_token: str
) -> None:
    course_id = _submit(client, teacher_token)
    client.post(f"/v1/moderation/{course_id}/approve", headers=auth(admin_token))
    resp = client.post(f"/v1/moderation/{course_id}/approve", headers=auth(admin_token))
    assert resp.status_code == 404
    assert resp.json() == {"detail": "No pending course with that id"}


def test_seed_course_cannot_be_moderated(client: TestClient, admin_token: str) -> None:
    resp = client.post("/v1/moderation/1/reject", headers=auth(admin_token))
    assert resp.status_code == 404


def test_invalid_course_id_is_422(client: TestClient, admin_token: str) -> None:
    resp = client.post("/v1/moderation/not-a-course/approve", headers=auth(admin_token))
    assert resp.status_code == 422


def test_decision_history_records_each_decision(
    client: TestClient, teacher_token: str, admin_token: str
) -> None:
    course_id = _submit(client, teacher_token)
    client.post(
        f"/v1/moderation/{course_id}/reject",
        json={"reason": "Too short"},
        headers=auth(admin_token),
    )
    client.put(
        f"/v1/courses/{course_id}",
        json={"description": "Much longer now", "status": "pending"},
        headers=auth(teacher_token),
    )
    client.post(f"/v1/moderation/{course_id}/approve", headers=auth(admin_token))

    history = client.get(
        f"/v1/moderation/{course_id}/decisions", headers=auth(admin_token)
    ).json()
    assert [d["decision"] for d in history] == ["rejected", "approved"]
    assert history[0]["reason"] == "Too short"
    assert history[1]["reason"] is None
    assert history[1]["decided_by_name"] == "Ada Admin"
