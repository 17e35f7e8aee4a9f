from fastapi import Depends

from ..models.user import ROLES, User
from .dependencies import get_current_user
from .error_handlers import AuthForbidden

# Where each role lands after login or after hitting another role's area.
ROLE_HOME = {
    "hr": "/hr-dashboard",
    "candidate": "/candidate-dashboard",
}

FORBIDDEN_MESSAGES = {
    "hr": "Unauthorized, not an HR user",
    "candidate": "Unauthorized, not a candidate user",
}

# Browser areas and the roles allowed in them. /profile is shared by both roles:
# the page renders whatever account is signed in.
PAGE_ROLES: dict[str, frozenset[str]] = {
    "/hr-dashboard": frozenset({"hr"}),
    "/candidate-dashboard": frozenset({"candidate"}),
    "/profile": frozenset(ROLES),
}


def path_has_prefix(path: str, prefix: str) -> bool:
    """Segment-aware prefix match: /profile matches /profile and /profile/x, not /profile-x."""
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def page_area_for(path: str) -> str | None:
    for prefix in PAGE_ROLES:
        if path_has_prefix(path, prefix):
            return prefix
    return None


def required_roles_for(path: str) -> frozenset[str] | None:
    """Roles allowed in the browser area `path` belongs to, or None when it is not a page."""
    area = page_area_for(path)
    return PAGE_ROLES[area] if area is not None else None


def role_permits(role: str | None, allowed: frozenset[str] | tuple[str, ...]) -> bool:
    return bool(role) and role in allowed


def home_for(role: str | None) -> str:
    return ROLE_HOME.get(role or "", "/login")


def require_role(*roles: str):
    allowed = frozenset(roles)
    message = FORBIDDEN_MESSAGES.get(roles[0], "Access forbidden") if len(roles) == 1 else "Access forbidden"

    def check_role(user: User = Depends(get_current_user)) -> User:
        # Checked against the stored account, not the token's role claim.
        if not role_permits(user.role, allowed):
            raise AuthForbidden(message)
        return user
    return check_role


hr_only = require_role("hr")
candidate_only = require_role("candidate")
