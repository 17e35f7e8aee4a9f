import os
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


# Ensure `import backend.app...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"

# backend.app.main builds a module-level app on import; keep it off the developer's .env
# and off any real database.
os.environ["DISABLE_DOTENV"] = "1"
os.environ.setdefault("JWT_SECRET", TEST_SECRET)
os.environ.setdefault("DATABASE_URL", "sqlite://")

PASSWORD = "secret123"
JOB_TEXT = "Build and maintain services that power the hiring platform for our customers."


@pytest.fixture()
def settings(tmp_path: Path):
    from backend.app.config import Settings

    return Settings(
        database_url=f"sqlite+pysqlite:///{tmp_path / 'test.sqlite3'}",
        jwt_secret=TEST_SECRET,
        cv_summarizer_url="http://summarizer.test/summarize",
        quiz_service_url="http://quiz.test",
        upstream_timeout_s=2.0,
    )


@pytest.fixture()
def app(settings) -> FastAPI:
    """
    Create the app wired to a temporary SQLite DB.
    """
    from backend.app.main import create_app

    fastapi_app = create_app(settings)
    yield fastapi_app
    fastapi_app.state.db.dispose()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def make_client(app: FastAPI):
    """Independent clients (separate cookie jars) for multi-user scenarios."""
    def _make(**kwargs) -> TestClient:
        return TestClient(app, **kwargs)
    return _make


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    db = app.state.db.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def tokens(app: FastAPI):
    return app.state.token_service


def signup(client, *, email: str, role: str, name: str = "Test User", password: str = PASSWORD, company: str | None = None):
    body = {"name": name, "email": email, "password": password, "role": role}
    if company is not None:
        body["company"] = company
    return client.post("/auth/signup", json=body)


def signup_hr(client, email: str = "hr@example.com", name: str = "Hana HR"):
    r = signup(client, email=email, role="hr", name=name, company="Acme Corp")
    assert r.status_code == 200, r.text
    return r.json()["user"]


def signup_candidate(client, email: str = "cand@example.com", name: str = "Cara Candidate"):
    r = signup(client, email=email, role="candidate", name=name)
    assert r.status_code == 200, r.text
    return r.json()["user"]


def job_body(**overrides) -> dict:
    body = {
        "title": "Backend Engineer",
        "department": "Engineering",
        "location": "Remote",
        "type": "Full-time",
        "description": JOB_TEXT,
        "requirements": JOB_TEXT,
        "companyName": "Acme Corp",
        "postedByName": "Hana HR",
        "postedByDesignation": "Talent Lead",
        "status": "active",
    }
    body.update(overrides)
    return body


def create_job(client, **overrides) -> dict:
    r = client.post("/jobs", json=job_body(**overrides))
    assert r.status_code == 201, r.text
    return r.json()
