import os
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

# Override=True so changes in backend/.env take effect on process reload (and not get
# stuck on old environment variables).
#
# For automated tests, set DISABLE_DOTENV=1 so a developer's .env can't leak in.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)

_TRUTHY = {"1", "true", "True", "yes", "YES"}


def _env_bool(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or default).strip() in _TRUTHY


def _default_database_url() -> str:
    # Use an absolute path so it works regardless of current working directory.
    sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
    return f"sqlite:///{sqlite_path}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    jwt_lifetime_seconds: int = 24 * 60 * 60
    # Resource endpoints and the route gate verify tokens through separate backends.
    jwt_backend: str = "jose"
    gate_jwt_backend: str = "pyjwt"
    cookie_name: str = "token"
    cookie_samesite: str = "lax"
    cookie_secure: bool = False
    cv_summarizer_url: str = "http://localhost:8001/summarize"
    quiz_service_url: str = "http://localhost:8000"
    upstream_timeout_s: float = 30.0
    frontend_origins: list[str] = field(default_factory=list)
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment (after the optional .env load)."""
    return Settings(
        database_url=(os.getenv("DATABASE_URL") or "").strip() or _default_database_url(),
        jwt_secret=(os.getenv("JWT_SECRET") or "").strip(),
        jwt_lifetime_seconds=int(os.getenv("JWT_LIFETIME_SECONDS", "86400") or "86400"),
        jwt_backend=(os.getenv("JWT_BACKEND", "jose") or "jose").strip().lower(),
        gate_jwt_backend=(os.getenv("GATE_JWT_BACKEND", "pyjwt") or "pyjwt").strip().lower(),
        cookie_name=os.getenv("COOKIE_NAME", "token") or "token",
        cookie_samesite=(os.getenv("COOKIE_SAMESITE", "lax") or "lax").strip().lower(),
        cookie_secure=_env_bool("COOKIE_SECURE"),
        cv_summarizer_url=os.getenv("CV_SUMMARIZER_URL", "http://localhost:8001/summarize"),
        quiz_service_url=os.getenv("QUIZ_SERVICE_URL", "http://localhost:8000"),
        upstream_timeout_s=float(os.getenv("UPSTREAM_TIMEOUT_S", "30") or "30"),
        frontend_origins=[
            origin.strip()
            for origin in os.getenv("FRONTEND_ORIGINS", "").split(",")
            if origin.strip()
        ],
        log_level=(os.getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
