from __future__ import annotations

import pytest

from app.core.config import AppEnv, Settings, load_settings

# ---- valid values ----


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "APP_ENV",
        "LOG_LEVEL",
        "SYNC_CACHE_TTL_SECONDS",
        "UPSTREAM_TIMEOUT_SECONDS",
        "INSTRUCTOR_SERVICE_URL",
        "JWT_PUBLIC_KEY_PATH",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.sync_cache_ttl_seconds == 30.0
    assert settings.upstream_timeout_seconds == 5.0
    assert settings.instructor_service_url is None
    assert settings.jwt_public_key_path is None
    assert settings.cors_origins == ("http://localhost:5173",)


def test_env_values_are_trimmed_and_lowercased(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  PROD ")
    monkeypatch.setenv("LOG_LEVEL", "Warning")
    monkeypatch.setenv("SYNC_CACHE_TTL_SECONDS", " 12.5 ")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "warning"
    assert settings.sync_cache_ttl_seconds == 12.5


def test_cors_origins_split_on_commas(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,,")
    assert load_settings().cors_origins == ("https://a.example", "https://b.example")


def test_instructor_service_url_is_optional(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INSTRUCTOR_SERVICE_URL", "http://instructors.internal")
    assert load_settings().instructor_service_url == "http://instructors.internal"
    monkeypatch.setenv("INSTRUCTOR_SERVICE_URL", "   ")
    assert load_settings().instructor_service_url is None


# ---- invalid values ----


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("APP_ENV", "staging", "APP_ENV must be dev|test|prod"),
        ("APP_ENV", "", "APP_ENV must be dev|test|prod"),
        ("LOG_LEVEL", "verbose", "LOG_LEVEL must be debug|info|warning|error"),
        ("PORT", "eighty", "PORT must be an integer"),
        ("LOG_JSON", "maybe", "LOG_JSON must be a boolean"),
        ("SYNC_CACHE_TTL_SECONDS", "0", "SYNC_CACHE_TTL_SECONDS must be positive"),
        ("UPSTREAM_TIMEOUT_SECONDS", "soon", "UPSTREAM_TIMEOUT_SECONDS must be a number"),
    ],
)
def test_invalid_values_are_rejected(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str, message: str
) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError) as excinfo:
        load_settings()
    assert str(excinfo.value).startswith(message)


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
        redis_url=None,
        sync_cache_ttl_seconds=30.0,
        upstream_timeout_seconds=5.0,
        instructor_service_url=None,
        jwt_public_key_path=None,
        cors_origins=("http://localhost:5173",),
    )


@pytest.mark.parametrize("env", ["dev", "test", "prod"])
def test_exactly_one_env_flag_is_set(env: AppEnv) -> None:
    s = _make_settings(env)
    flags = {"dev": s.is_dev, "test": s.is_test, "prod": s.is_prod}
    assert [name for name, on in flags.items() if on] == [env]


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]
