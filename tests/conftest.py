from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services import registry, token_service
from app.services.cache import cache_service


@pytest.fixture(autouse=True)
def reset_document_store() -> None:
    """Clear every collection between tests."""
    if hasattr(registry.document_store, "clear"):
        registry.document_store.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "stu-1",
    roles: list[str] | None = None,
    name: str | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles, name=name)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_token() -> str:
    return mint_token("stu-1", ["student"], "Sam Student")


@pytest.fixture
def teacher_token() -> str:
    return mint_token("tch-1", ["teacher"], "Tess Teacher")


@pytest.fixture
def other_teacher_token() -> str:
    return mint_token("tch-2", ["teacher"], "Otto Other")


@pytest.fixture
def admin_token() -> str:
    return mint_token("adm-1", ["admin"], "Ada Admin")


def course_payload(**overrides: object) -> dict:
    """A complete, valid course submission."""
    payload: dict = {
        "title": "Rust for Pythonistas",
        "description": "Ownership without tears",
        "category": "Programming",
        "level": "Intermediate",
        "price": 49.0,
        "image": "https://img.example.com/rust.png",
        "learnings": ["Borrow checker", "Traits"],
        "requirements": ["Some Python"],
        "sections": [
            {"title": "Basics", "items": [{"title": "Hello", "type": "video"}]},
            {"title": "Ownership"},
        ],
    }
    payload.update(overrides)
    return payload
