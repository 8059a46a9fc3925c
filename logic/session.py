import logging
import time
from collections.abc import Mapping
import jwt
from fastapi import Response
from pydantic import BaseModel, ValidationError
from sqlmodel import Session
from config import settings
from constants import SESSION_COOKIE_NAME, LEGACY_USER_COOKIE_NAME
from database.models import User
from enums import RoleEnum

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

class SessionIdentity(BaseModel):
    user_id: str
    email: str
    role: RoleEnum
    expires_at: int #epoch milliseconds

def session_max_age_seconds() -> int:
    return settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60

def now_ms() -> int:
    return int(time.time() * 1000)

def identity_for_user(user: User, issued_at_ms: int | None = None) -> SessionIdentity:
    issued_at_ms = now_ms() if issued_at_ms is None else issued_at_ms
    return SessionIdentity(
        user_id=user.id,
        email=user.email,
        role=user.role,
        expires_at=issued_at_ms + session_max_age_seconds() * 1000,
    )

def issue_session_token(identity: SessionIdentity) -> str: #always signed with the current secret
    payload = {
        "user_id": identity.user_id,
        "email": identity.email,
        "role": identity.role.value,
        "expires_at": identity.expires_at,
        "iat": int(time.time()),
        "exp": identity.expires_at // 1000,
    }
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=ALGORITHM)

def verify_session_token(token: str | None, at_ms: int | None = None) -> SessionIdentity | None:
    """Return the identity in ``token`` or None.

    Bad signatures, malformed payloads and expired tokens all come back as
    None so callers treat them exactly like a missing session. Secrets are
    tried current first, then previous, to allow rotation.
    """
    if not token:
        return None

    payload = None
    for secret in settings.session_secrets:
        try:
            payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
            break
        except jwt.InvalidTokenError:
            continue
    if payload is None:
        return None

    try:
        identity = SessionIdentity.model_validate(payload)
    except ValidationError:
        return None

    at_ms = now_ms() if at_ms is None else at_ms
    if identity.expires_at < at_ms:
        return None
    return identity

def set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=session_max_age_seconds(),
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )

def clear_session_cookie(response: Response):
    for cookie_name in (SESSION_COOKIE_NAME, LEGACY_USER_COOKIE_NAME): #overwrite with an empty, already expired value
        response.set_cookie(
            key=cookie_name,
            value="",
            max_age=0,
            path="/",
            httponly=True,
            samesite="lax",
            secure=settings.is_production,
        )

def resolve_current_identity(cookies: Mapping[str, str], session: Session | None = None) -> SessionIdentity | None:
    """Resolve the caller from request cookies.

    The signed session cookie is always tried first. The unsigned legacy
    ``userId`` cookie is only honoured when LEGACY_USER_COOKIE_ENABLED is set
    and a database session is supplied; delete ``_resolve_legacy_identity``
    together with the setting once the migration is over.
    """
    identity = verify_session_token(cookies.get(SESSION_COOKIE_NAME))
    if identity is not None:
        return identity
    if settings.LEGACY_USER_COOKIE_ENABLED and session is not None:
        return _resolve_legacy_identity(cookies.get(LEGACY_USER_COOKIE_NAME), session)
    return None

def _resolve_legacy_identity(legacy_user_id: str | None, session: Session) -> SessionIdentity | None:
    if not legacy_user_id:
        return None
    user = session.get(User, legacy_user_id)
    if not user:
        return None
    logger.info("Resolved user %s from legacy cookie", user.id)
    return identity_for_user(user)
