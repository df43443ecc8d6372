"""Course messaging between an enrolled student and the instructor."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth


@pytest.fixture
def taught_enrolled(client: TestClient, teacher_token: str, student_token: str) -> str:
    client.post("/v1/courses/1/instructor", headers=auth(teacher_token))
    client.post("/v1/progress/1/enroll", headers=auth(student_token))
    return "1"


def test_student_question_reaches_instructor(
    client: TestClient, taught_enrolled: str, student_token: str, teacher_token: str
) -> None:
    resp = client.post(
        "/v1/messages",
        json={
            "as_role": "student",
            "course_id": taught_enrolled,
            "body": "Is the week 3 session recorded?",
            "message_type": "question",
        },
        headers=auth(student_token),
    )
    assert resp.status_code == 201
    sent = resp.json()
    assert sent["recipient_id"] == "tch-1"
    assert sent["sender_name"] == "Sam Student"
    assert sent["is_read"] is False

    inbox = client.get(
        "/v1/messages", params={"role": "teacher"}, headers=auth(teacher_token)
    ).json()
    assert [m["id"] for m in inbox] == [sent["id"]]


def test_reply_is_visible_after_cached_read(
    client: TestClient, taught_enrolled: str, student_token: str, teacher_token: str
) -> None:
    # Prime the student's cached list before the reply lands.
    assert client.get("/v1/messages", headers=auth(student_token)).json() == []

    client.post(
        "/v1/messages",
        json={
            "as_role": "teacher",
            "course_id": taught_enrolled,
            "body": "Zoom link is in the course page",
            "recipient_id": "stu-1",
            "message_type": "zoom",
        },
        headers=auth(teacher_token),
    )

    listed = client.get("/v1/messages", headers=auth(student_token)).json()
    assert [m["body"] for m in listed] == ["Zoom link is in the course page"]


def test_mark_read_by_recipient(
    client: TestClient, taught_enrolled: str, student_token: str, teacher_token: str
) -> None:
    message_id = client.post(
        "/v1/messages",
        json={"as_role": "student", "course_id": taught_enrolled, "body": "Hello"},
        headers=auth(student_token),
    ).json()["id"]

    resp = client.post(f"/v1/messages/{message_id}/read", headers=auth(teacher_token))
    assert resp.status_code == 200
    assert resp.json()["is_read"] is True

    # Only the recipient can mark a message read.
    resp = client.post(f"/v1/messages/{message_id}/read", headers=auth(student_token))
    assert resp.status_code == 404


def test_student_not_enrolled_is_forbidden(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    client.post("/v1/courses/1/instructor", headers=auth(teacher_token))
    resp = client.post(
        "/v1/messages",
        json={"as_role": "student", "course_id": "1", "body": "Hi"},
        headers=auth(student_token),
    )
    assert resp.status_code == 403
    assert resp.json() == {"detail": "Not enrolled in this course"}


def test_teacher_of_other_course_is_forbidden(
    client: TestClient, taught_enrolled: str, other_teacher_token: str
) -> None:
    resp = client.post(
        "/v1/messages",
        json={
            "as_role": "teacher",
            "course_id": taught_enrolled,
            "body": "Hi",
            "recipient_id": "stu-1",
        },
        headers=auth(other_teacher_token),
    )
    assert resp.status_code == 403


def test_acting_as_missing_role_is_forbidden(
    client: TestClient, student_token: str
) -> None:
    resp = client.get(
        "/v1/messages", params={"role": "teacher"}, headers=auth(student_token)
    )
    assert resp.status_code == 403


def test_empty_body_is_422(client: TestClient, taught_enrolled: str, student_token: str) -> None:
    resp = client.post(
        "/v1/messages",
        json={"as_role": "student", "course_id": taught_enrolled, "body": ""},
        headers=auth(student_token),
    )
    assert resp.status_code == 422


def test_messages_require_auth(client: TestClient) -> None:
    assert client.get("/v1/messages").status_code == 401
