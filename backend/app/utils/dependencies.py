import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..models.user import User
from .cookies import read_token
from .error_handlers import AuthExpired, AuthInvalid, AuthMissing, NotFoundError, get_error_message
from .jwt import TokenClaims, TokenError, TokenExpired, TokenService
from .validation import parse_id

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_current_identity(
    request: Request,
    settings: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    Re-verify the session cookie for this endpoint.

    Never relies on the route gate having run: anything the gate put on request.state
    is ignored here.
    """
    token = read_token(request, settings)
    if not token:
        raise AuthMissing(get_error_message("not_authenticated"))
    try:
        return tokens.verify(token)
    except TokenExpired:
        logger.info("Expired token on %s", request.url.path)
        raise AuthExpired()
    except TokenError as e:
        logger.info("Rejected token on %s (%s)", request.url.path, e.kind)
        raise AuthInvalid(get_error_message("invalid_token"))


def get_current_user(
    claims: TokenClaims = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> User:
    user_id = parse_id(claims.user_id)
    if user_id is None:
        raise AuthInvalid("Invalid token payload")
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(get_error_message("user_not_found"))
    return user
