import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from .api import application as application_api
from .api import auth as auth_api
from .api import cv_summary as cv_summary_api
from .api import hr as hr_api
from .api import interview as interview_api
from .api import job as job_api
from .api import mock_interview as mock_interview_api
from .api import pages as pages_api
from .api import quiz as quiz_api
from .config import Settings, load_settings
from .database import Database
from .gate import RouteGate
from .utils.error_handlers import create_error_response, get_error_message, register_exception_handlers
from .utils.jwt import TokenService

logger = logging.getLogger(__name__)

_default_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]


def create_app(settings: Settings | None = None, *, database: Database | None = None) -> FastAPI:
    """
    Build the application with its database handle and token services.

    Everything stateful is created here once and hung off app.state; handlers reach it
    through dependencies. A missing JWT secret fails here, at startup.
    """
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    endpoint_tokens = TokenService(
        settings.jwt_secret,
        lifetime_seconds=settings.jwt_lifetime_seconds,
        backend=settings.jwt_backend,
    )
    gate_tokens = TokenService(
        settings.jwt_secret,
        lifetime_seconds=settings.jwt_lifetime_seconds,
        backend=settings.gate_jwt_backend,
    )

    db = database or Database(settings.database_url)
    db.create_all()

    app = FastAPI(title="Recruit & Interview Practice")
    app.state.settings = settings
    app.state.db = db
    app.state.token_service = endpoint_tokens
    app.state.gate_token_service = gate_tokens

    app.include_router(pages_api.router)
    app.include_router(auth_api.router)
    app.include_router(job_api.router)
    app.include_router(application_api.router)
    app.include_router(interview_api.router)
    app.include_router(mock_interview_api.router)
    app.include_router(cv_summary_api.router)
    app.include_router(quiz_api.router)
    app.include_router(hr_api.router)

    register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "Backend running",
            "service": "Recruit & Interview Practice",
        }

    @app.get("/db/health")
    def db_health():
        try:
            with db.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database health check failed: %s", e)
            return create_error_response(503, get_error_message("database_error"))
        return {"status": "ok"}

    # Added first so it sits inside CORS: preflight requests never reach the gate.
    app.add_middleware(RouteGate, tokens=gate_tokens, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[*_default_origins, *settings.frontend_origins],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info(
        "App created (db=%s, endpoint jwt=%s, gate jwt=%s)",
        db.engine.dialect.name,
        endpoint_tokens.backend.name,
        gate_tokens.backend.name,
    )
    return app


app = create_app()
