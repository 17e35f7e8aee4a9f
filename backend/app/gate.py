"""
Route gate: the choke point every request passes before reaching a router.

* PUBLIC paths are forwarded untouched.
* PAGE paths (browser areas) redirect to /login when the session cookie is missing or
  fails verification, and redirect to the caller's own home when the area belongs to
  the other role.
* Everything else is API: a missing or bad cookie gets a 401 JSON body.

The gate only looks at the token's own claims; it never opens a database session.
Routers re-verify the cookie themselves (see utils/dependencies.py).
"""
import enum
import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from .config import Settings
from .utils.cookies import clear_token_cookie, read_token
from .utils.error_handlers import create_error_response, get_error_message
from .utils.jwt import TokenError, TokenService
from .utils.roles import home_for, page_area_for, path_has_prefix, required_roles_for, role_permits

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"

PUBLIC_PATHS = frozenset({
    "/",
    "/login",
    "/signup",
    "/features",
    "/how-it-works",
    "/contact",
    "/health",
    "/db/health",
    "/docs",
    "/redoc",
    "/openapi.json",
})
PUBLIC_PREFIXES = ("/auth", "/api/auth")


class RouteClass(enum.Enum):
    PUBLIC = "public"
    PAGE = "page"
    API = "api"


def classify(path: str) -> RouteClass:
    path = path.rstrip("/") or "/"
    if path in PUBLIC_PATHS or any(path_has_prefix(path, p) for p in PUBLIC_PREFIXES):
        return RouteClass.PUBLIC
    if page_area_for(path) is not None:
        return RouteClass.PAGE
    return RouteClass.API


class RouteGate(BaseHTTPMiddleware):
    def __init__(self, app, *, tokens: TokenService, settings: Settings):
        super().__init__(app)
        self.tokens = tokens
        self.settings = settings

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        route_class = classify(path)
        if route_class is RouteClass.PUBLIC:
            return await call_next(request)

        token = read_token(request, self.settings)
        if not token:
            logger.info("No session cookie for %s", path)
            return self._reject(route_class, get_error_message("not_authenticated"), clear_cookie=False)

        try:
            claims = self.tokens.verify(token)
        except TokenError as e:
            # Every failure kind looks the same to the client.
            logger.info("Session cookie rejected for %s (%s)", path, e.kind)
            return self._reject(route_class, get_error_message("invalid_token"), clear_cookie=True)

        if route_class is RouteClass.PAGE:
            if not role_permits(claims.role, required_roles_for(path)):
                target = home_for(claims.role)
                logger.info("Role %s not allowed on %s, redirecting to %s", claims.role, path, target)
                return RedirectResponse(target, status_code=307)

        request.state.identity = claims.identity
        return await call_next(request)

    def _reject(self, route_class: RouteClass, message: str, *, clear_cookie: bool) -> Response:
        if route_class is RouteClass.PAGE:
            response = RedirectResponse(LOGIN_PATH, status_code=307)
        else:
            response = create_error_response(401, message)
        if clear_cookie:
            clear_token_cookie(response, self.settings)
        return response
