from __future__ import annotations

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_health_returns_ok() -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_public_catalog_needs_no_token() -> None:
    resp = client.get("/v1/courses")
    assert resp.status_code == 200
    assert resp.json()["total"] >= 1


def test_engine_errors_map_to_detail_body() -> None:
    resp = client.get("/v1/courses/424242")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Course not found"}


def test_opaque_course_id_is_422() -> None:
    resp = client.get("/v1/courses/not-a-course-id")
    assert resp.status_code == 422
    assert "detail" in resp.json()


def test_bad_token_is_401_even_on_public_routes() -> None:
    resp = client.get("/v1/courses", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
