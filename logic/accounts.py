import logging
import re
import bcrypt
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy import func
from sqlmodel import Session, select
from config import settings
from constants import MIN_PASSWORD_LENGTH, MAX_PASSWORD_BYTES
from database.models import User, UserRegister, UserLogin
from enums import RoleEnum
from exceptions import ValidationFailed, Conflict, Unauthenticated, Unavailable

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode()

def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError: #malformed stored hash or an over-long password
        return False

def find_user_by_email(email: str, session: Session) -> User | None:
    return session.exec(select(User).where(func.lower(User.email) == email.lower())).first()

def register_user(data: UserRegister, session: Session) -> User:
    if not data.email or not data.password or not data.name or not data.role:
        raise ValidationFailed("Missing required fields: email, password, name, and role are required")
    try:
        role = RoleEnum(data.role)
    except ValueError:
        raise ValidationFailed("Invalid role. Must be PATIENT or REVIEWER")
    if not EMAIL_PATTERN.match(data.email):
        raise ValidationFailed("Invalid email format")
    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(data.password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationFailed(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")

    email = data.email.lower()
    if find_user_by_email(email, session):
        raise Conflict("An account with this email already exists")

    user = User(
        email=email,
        password_hash=hash_password(data.password),
        name=data.name,
        role=role,
        organization=data.organization or None,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError: #lost a race with another registration for the same email
        session.rollback()
        raise Conflict("An account with this email already exists")
    session.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role.value)
    return user

def authenticate_user(data: UserLogin, session: Session) -> User:
    """Check credentials. Messages tell the user what went wrong, the error kind stays generic."""
    if not data.email or not data.password:
        raise ValidationFailed("Email and password are required")
    try:
        user = find_user_by_email(data.email, session)
    except OperationalError:
        logger.exception("Database unavailable during login")
        raise Unavailable("Unable to connect to database. Please try again later.")
    if not user:
        logger.info("Login failed: no account for submitted email")
        raise Unauthenticated("No account found with this email. Please sign up first.")
    if not check_password(data.password, user.password_hash):
        logger.info("Login failed: wrong password for user %s", user.id)
        raise Unauthenticated("Incorrect password. Please try again.")
    return user
