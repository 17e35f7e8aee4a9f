import pytest

from backend.app.config import load_settings
from backend.app.utils.jwt import ConfigurationError


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///tmp.db")
    monkeypatch.setenv("JWT_SECRET", "  s3cret-value-0123456789abcdef0123  ")
    monkeypatch.setenv("JWT_LIFETIME_SECONDS", "600")
    monkeypatch.setenv("GATE_JWT_BACKEND", "JOSE")
    monkeypatch.setenv("COOKIE_SECURE", "true")
    monkeypatch.setenv("FRONTEND_ORIGINS", "https://app.example.com, https://admin.example.com")

    settings = load_settings()
    assert settings.database_url == "sqlite:///tmp.db"
    assert settings.jwt_secret == "s3cret-value-0123456789abcdef0123"
    assert settings.jwt_lifetime_seconds == 600
    assert settings.gate_jwt_backend == "jose"
    assert settings.jwt_backend == "jose"
    assert settings.cookie_secure is True
    assert settings.frontend_origins == ["https://app.example.com", "https://admin.example.com"]


def test_missing_secret_fails_at_startup(settings):
    from dataclasses import replace

    from backend.app.main import create_app

    with pytest.raises(ConfigurationError):
        create_app(replace(settings, jwt_secret=""))


def test_unknown_backend_fails_at_startup(settings):
    from dataclasses import replace

    from backend.app.main import create_app

    with pytest.raises(ConfigurationError):
        create_app(replace(settings, gate_jwt_backend="rot13"))


def test_cookie_lifetime_matches_token_lifetime(settings):
    from dataclasses import replace

    from fastapi.testclient import TestClient

    from backend.app.main import create_app

    app = create_app(replace(settings, jwt_lifetime_seconds=900))
    c = TestClient(app)
    r = c.post(
        "/auth/signup",
        json={"name": "Cara", "email": "cara@example.com", "password": "secret123", "role": "candidate"},
    )
    assert r.status_code == 200, r.text
    assert "Max-Age=900" in r.headers["set-cookie"]
    app.state.db.dispose()
