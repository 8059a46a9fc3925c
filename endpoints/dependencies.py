from fastapi import Request
from sqlmodel import Session
from config import settings
from database.database import engine
from logic.session import SessionIdentity, resolve_current_identity

def current_identity(request: Request) -> SessionIdentity | None: #None means "no session", handlers decide whether that is a 401
    if settings.LEGACY_USER_COOKIE_ENABLED:
        with Session(engine) as session:
            return resolve_current_identity(request.cookies, session)
    return resolve_current_identity(request.cookies)
