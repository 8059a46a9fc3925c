import logging
from dataclasses import dataclass
from urllib.parse import urlencode
from constants import (
    PAGE_ROUTES,
    PUBLIC_ROUTES,
    ENTRY_ROUTES,
    ROLE_HOME,
    LOGIN_PATH,
    API_PREFIXES,
    OPERATION_ROLES,
    OPERATION_FORBIDDEN_MESSAGES,
)
from database.models import Intake
from enums import RoleEnum
from exceptions import Unauthenticated, Forbidden
from logic.session import SessionIdentity

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    redirect_to: str | None = None

ALLOW = AccessDecision(allowed=True)

def path_matches(path: str, route: str) -> bool:
    if route == "/":
        return path == "/"
    return path == route or path.startswith(route + "/")

def is_api_path(path: str) -> bool:
    return any(path_matches(path, prefix) for prefix in API_PREFIXES)

def role_for_page(path: str) -> RoleEnum | None: #which role owns this page, None means public
    if path in PUBLIC_ROUTES:
        return None
    for role, routes in PAGE_ROUTES.items():
        if any(path_matches(path, route) for route in routes):
            return role
    return None

def login_redirect(path: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'redirect': path})}"

def route_decision(path: str, identity: SessionIdentity | None) -> AccessDecision: #what the page gate does with a request for path
    if is_api_path(path):
        return ALLOW

    owner_role = role_for_page(path)

    if identity is None:
        if owner_role is not None:
            return AccessDecision(allowed=False, redirect_to=login_redirect(path))
        return ALLOW

    if path in ENTRY_ROUTES: #already signed in, skip the login/signup pages
        return AccessDecision(allowed=False, redirect_to=ROLE_HOME[identity.role])

    if owner_role is not None and owner_role != identity.role:
        return AccessDecision(allowed=False, redirect_to=ROLE_HOME[identity.role])

    return ALLOW

def authorize(identity: SessionIdentity | None, operation: str) -> SessionIdentity:
    if identity is None:
        raise Unauthenticated()
    if identity.role not in OPERATION_ROLES[operation]:
        logger.warning("Forbidden %s for user %s with role %s", operation, identity.user_id, identity.role.value)
        raise Forbidden(OPERATION_FORBIDDEN_MESSAGES.get(operation))
    return identity

def can_access_intake(identity: SessionIdentity, intake: Intake) -> bool:
    if identity.role == RoleEnum.REVIEWER:
        return True
    return intake.submitted_by_id == identity.user_id

def ensure_intake_access(identity: SessionIdentity, intake: Intake, message: str | None = None):
    if not can_access_intake(identity, intake): #patients only ever see their own submissions
        logger.warning("User %s denied access to intake %s", identity.user_id, intake.id)
        raise Forbidden(message or "You don't have permission to view this intake")
