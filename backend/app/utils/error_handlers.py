"""
Centralized error handling and user-friendly error messages.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthMissing(AppError):
    """No session cookie on the request."""
    def __init__(self, message: str = "Not authenticated", details: dict | None = None):
        super().__init__(message, status_code=401, details=details)


class AuthInvalid(AppError):
    """Bad signature, malformed token or unusable claims."""
    def __init__(self, message: str = "Invalid token", details: dict | None = None):
        super().__init__(message, status_code=401, details=details)


class AuthExpired(AppError):
    def __init__(self, message: str = "Session expired", details: dict | None = None):
        super().__init__(message, status_code=401, details=details)


class AuthForbidden(AppError):
    """Valid token, wrong role."""
    def __init__(self, message: str = "Access forbidden", details: dict | None = None):
        super().__init__(message, status_code=403, details=details)


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class ValidationError(AppError):
    """Validation error."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class UpstreamError(AppError):
    """External summarizer / quiz service failure. The upstream message is passed through."""
    def __init__(self, message: str = "Upstream service unavailable", status_code: int = 502, details: dict | None = None):
        super().__init__(message, status_code=status_code, details=details)


class InternalError(AppError):
    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or get_error_message("server_error"), status_code=500, details=details)


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid credentials",
    "email_exists": "Email already exists",
    "missing_fields": "Please provide all required fields",
    "missing_login_fields": "Please provide email and password",
    "company_required": "Company name is required for HR accounts",
    "not_authenticated": "Not authenticated",
    "invalid_token": "Invalid token",
    "user_not_found": "User not found",

    # Jobs
    "job_not_found": "Job not found",
    "job_closed": "This job is not currently accepting applications",

    # Applications
    "application_not_found": "Application not found",
    "already_applied": "You have already applied to this job",
    "application_ids_required": "Job ID and Candidate ID are required",
    "candidate_not_found": "Candidate not found",

    # CV summaries / quiz
    "summary_fields_required": "Missing required fields",
    "summarizer_failed": "Failed to summarize CV",
    "quiz_failed": "Quiz service request failed",
    "mock_interview_not_found": "Mock interview not found",

    # General
    "forbidden": "You don't have permission to access this resource.",
    "not_found": "The requested resource was not found.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def handle_database_error(error: Exception, operation: str = "") -> AppError:
    """Map a database error to an AppError without leaking driver details."""
    logger.error(f"Database error during {operation}: {error}")

    error_str = str(error).lower()

    if "duplicate" in error_str or "unique" in error_str:
        return AppError("This record already exists. Please check your input.", status_code=409)

    if "foreign key" in error_str:
        return ValidationError("Invalid reference. The related record may have been deleted.")

    if "connection" in error_str or "operational" in error_str:
        return AppError(get_error_message("database_error"), status_code=503)

    return InternalError()


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response; details are merged into the top level."""
    content = {
        "success": False,
        "error": message,
    }

    if details:
        for key, value in details.items():
            content.setdefault(key, value)

    return JSONResponse(
        status_code=status_code,
        content=content
    )


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors() or []
    if not errors:
        return get_error_message("validation_error")
    first = errors[0]
    loc = [str(part) for part in (first.get("loc") or ()) if part != "body"]
    msg = str(first.get("msg") or get_error_message("validation_error"))
    return f"{'.'.join(loc)}: {msg}" if loc else msg


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers used by every router."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("AppError %s on %s: %s", exc.status_code, request.url.path, exc.message)
        return create_error_response(exc.status_code, exc.message, exc.details)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTPException with user-friendly messages."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
                "status_code": exc.status_code,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Request validation failed on %s: %s", request.url.path, exc.errors())
        return create_error_response(400, _first_validation_message(exc))

    @app.exception_handler(OperationalError)
    async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
        """Handle database operational errors."""
        logger.exception("Database OperationalError: %s", exc)
        return create_error_response(503, get_error_message("database_error"))

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        """Handle general database errors."""
        logger.exception("Database SQLAlchemyError: %s", exc)
        return create_error_response(500, get_error_message("database_error"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors globally."""
        logger.exception("Unhandled exception: %s", exc)
        return create_error_response(500, get_error_message("server_error"))
