import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..models.user import User
from ..utils.cookies import clear_token_cookie, set_token_cookie
from ..utils.dependencies import get_current_user, get_settings, get_token_service
from ..utils.error_handlers import (
    AuthInvalid,
    InternalError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.jwt import Identity, TokenService
from ..utils.security import hash_password, verify_password
from ..utils.validation import validate_email, validate_password, validate_role, validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# Everything optional so missing fields get our own 400 message instead of a schema error.
class SignupRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None  # candidate / hr
    company: str | None = None  # required for hr


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


def _issue_session(response: Response, user: User, tokens: TokenService, settings: Settings) -> None:
    try:
        token = tokens.issue(Identity(user_id=str(user.id), name=user.name, role=user.role))
    except Exception as e:
        logger.error(f"Token creation error: {e}")
        raise InternalError()
    # Cookie goes on the response before it is returned, so the next request is authenticated.
    set_token_cookie(response, token, settings)


@router.post("/signup")
def signup(
    payload: SignupRequest,
    response: Response,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
):
    if not payload.name or not payload.email or not payload.password or not payload.role:
        raise ValidationError(get_error_message("missing_fields"))

    name = validate_string_field(payload.name, "Name", max_length=50)
    email = validate_email(payload.email)
    validate_password(payload.password)
    role = validate_role(payload.role)

    company = validate_string_field(payload.company, "Company", max_length=255, required=False)
    if role == "hr" and not company:
        raise ValidationError(get_error_message("company_required"))

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise ValidationError(get_error_message("email_exists"))

    try:
        hashed = hash_password(payload.password)
    except ValueError as e:
        raise ValidationError(str(e))

    user = User(
        name=name,
        email=email,
        password=hashed,
        role=role,
        company=company if role == "hr" else None,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as e:
        db.rollback()
        # Lost a race with a concurrent signup for the same email.
        if db.query(User).filter(User.email == email).first():
            raise ValidationError(get_error_message("email_exists"))
        raise handle_database_error(e, "creating user")
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating user")

    _issue_session(response, user, tokens, settings)
    logger.info("New %s account %s", user.role, user.id)
    return {"user": user.to_public()}


@router.post("/login")
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
):
    if not payload.email or not payload.password:
        raise ValidationError(get_error_message("missing_login_fields"))

    email = payload.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    # Same answer for unknown email and wrong password; no cookie in either case.
    if not user or not verify_password(payload.password, user.password):
        logger.info("Failed login attempt for %s", email)
        raise AuthInvalid(get_error_message("invalid_credentials"))

    _issue_session(response, user, tokens, settings)
    return {"user": user.to_public()}


@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)):
    clear_token_cookie(response, settings)
    return {"message": "Logged out successfully"}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"user": user.to_public()}
