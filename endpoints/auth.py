from fastapi import APIRouter, Depends, Response
from sqlmodel import Session
from database.database import engine
from database.models import UserRegister, UserLogin, User
from endpoints.dependencies import current_identity
from endpoints.payloads import user_payload
from exceptions import Unauthenticated
from logic.accounts import register_user, authenticate_user
from logic.session import SessionIdentity, identity_for_user, issue_session_token, set_session_cookie, clear_session_cookie

router = APIRouter(prefix="/auth", tags=["Auth"])

@router.post("/register", status_code=201) #POST endpoint to create an account and sign it in
def register(user_data: UserRegister, response: Response):
    with Session(engine) as session:
        user = register_user(user_data, session)
        set_session_cookie(response, issue_session_token(identity_for_user(user)))
        return {
            "message": "User registered successfully",
            "user": user_payload(user),
        }

@router.post("/login", status_code=200)
def login(credentials: UserLogin, response: Response):
    with Session(engine) as session:
        user = authenticate_user(credentials, session)
        set_session_cookie(response, issue_session_token(identity_for_user(user)))
        return {
            "message": "Login successful",
            "user": user_payload(user),
        }

@router.post("/logout", status_code=200)
def logout(response: Response):
    clear_session_cookie(response)
    return {"message": "Logged out successfully"}

@router.get("/me", status_code=200) #GET endpoint for the signed in user
def me(identity: SessionIdentity | None = Depends(current_identity)):
    if identity is None:
        raise Unauthenticated()
    with Session(engine) as session:
        user = session.get(User, identity.user_id)
        if not user:
            raise Unauthenticated()
        return {"user": user_payload(user)}
