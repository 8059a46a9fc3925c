from fastapi import APIRouter, Depends
from sqlmodel import Session, select, col
from database.database import engine
from database.models import User
from endpoints.dependencies import current_identity
from endpoints.payloads import user_payload
from exceptions import NotFound
from logic.access import authorize
from logic.accounts import find_user_by_email
from logic.session import SessionIdentity

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("", status_code=200) #GET endpoint listing accounts, or looking one up by email
def list_users(email: str | None = None, identity: SessionIdentity | None = Depends(current_identity)):
    authorize(identity, "user:list")
    with Session(engine) as session:
        if email:
            user = find_user_by_email(email, session)
            if not user:
                raise NotFound("User not found")
            return {"exists": True, "user": user_payload(user)}

        users = session.exec(select(User).order_by(col(User.created_at).desc())).all()
        return {"users": [user_payload(user) for user in users]}
