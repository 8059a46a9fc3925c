import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import NamedTuple
from sqlalchemy import func, or_
from sqlmodel import Session, select, col
from constants import AUDIT_ACTION_CONFIG, DEFAULT_ACTION_COLOR
from database.models import AuditLog, Intake, User
from enums import AuditActionEnum, RoleEnum
from exceptions import NotFound, ValidationFailed
from logic.audit_details import AuditDetails, serialize_details

logger = logging.getLogger(__name__)

NO_FILTER = "all" #filter UIs send "all" for an unset dropdown

class AuditRecord(NamedTuple):
    entry: AuditLog
    user: User
    intake: Intake

@dataclass
class AuditFilters:
    search: str | None = None
    action: str | None = None
    actor_id: str | None = None
    start_date: str | None = None
    end_date: str | None = None

def action_label(action: str) -> str:
    try:
        return AUDIT_ACTION_CONFIG[AuditActionEnum(action)]["label"]
    except ValueError:
        return action

def action_color(action: str) -> str:
    try:
        return AUDIT_ACTION_CONFIG[AuditActionEnum(action)]["color"]
    except ValueError:
        return DEFAULT_ACTION_COLOR

def parse_action(action: str | None) -> AuditActionEnum:
    if not action:
        raise ValidationFailed("Action is required")
    try:
        return AuditActionEnum(action)
    except ValueError:
        allowed = ", ".join(a.value for a in AuditActionEnum)
        raise ValidationFailed(f"Invalid action. Must be one of: {allowed}")

def append_audit_entry(session: Session, intake_id: str, actor_id: str, action: AuditActionEnum, details: AuditDetails | dict | None = None) -> AuditLog:
    """Stage one ledger entry in the caller's session.

    Nothing is committed here: the caller commits the entry together with the
    change it describes, so an entry never outlives a rolled back mutation.
    """
    entry = AuditLog(
        action=action.value,
        details=serialize_details(details),
        user_id=actor_id,
        intake_id=intake_id,
    )
    session.add(entry)
    session.flush() #surfaces foreign key problems now, inside the caller's transaction
    logger.info("Audit %s on intake %s by user %s", action.value, intake_id, actor_id)
    return entry

def parse_date_bound(value: str, name: str, end_of_range: bool = False) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationFailed(f"Invalid {name}. Use YYYY-MM-DD or an ISO-8601 timestamp")
    if parsed.tzinfo is None: #bounds without an offset are read as UTC
        parsed = parsed.replace(tzinfo=timezone.utc)
    else:
        parsed = parsed.astimezone(timezone.utc)
    if end_of_range and len(value) == 10: #a bare YYYY-MM-DD end bound covers that whole day
        parsed += timedelta(days=1)
    return parsed

def query_audit_logs(session: Session, filters: AuditFilters | None = None) -> list[AuditRecord]: #newest first, filters are ANDed together
    filters = filters or AuditFilters()
    statement = (
        select(AuditLog, User, Intake)
        .join(User, AuditLog.user_id == User.id)
        .join(Intake, AuditLog.intake_id == Intake.id)
    )

    if filters.action and filters.action != NO_FILTER:
        statement = statement.where(AuditLog.action == filters.action)
    if filters.actor_id and filters.actor_id != NO_FILTER:
        statement = statement.where(AuditLog.user_id == filters.actor_id)
    if filters.start_date:
        statement = statement.where(AuditLog.created_at >= parse_date_bound(filters.start_date, "startDate"))
    if filters.end_date:
        statement = statement.where(AuditLog.created_at <= parse_date_bound(filters.end_date, "endDate", end_of_range=True))
    if filters.search:
        term = filters.search.lower()
        statement = statement.where(or_( #search matches actor or intake, any one is enough
            func.lower(col(User.name)).contains(term, autoescape=True),
            func.lower(col(User.email)).contains(term, autoescape=True),
            func.lower(col(Intake.client_name)).contains(term, autoescape=True),
            func.lower(col(Intake.id)).contains(term, autoescape=True),
        ))

    statement = statement.order_by(col(AuditLog.created_at).desc())
    return [AuditRecord(entry, user, intake) for entry, user, intake in session.exec(statement).all()]

def intake_audit_trail(session: Session, intake_id: str) -> list[AuditRecord]: #case history for one intake, oldest first
    intake = session.get(Intake, intake_id)
    if not intake:
        raise NotFound("Intake not found")
    statement = (
        select(AuditLog, User)
        .join(User, AuditLog.user_id == User.id)
        .where(AuditLog.intake_id == intake_id)
        .order_by(col(AuditLog.created_at).asc())
    )
    return [AuditRecord(entry, user, intake) for entry, user in session.exec(statement).all()]

def list_reviewers(session: Session) -> list[User]:
    return list(session.exec(select(User).where(User.role == RoleEnum.REVIEWER).order_by(User.name)).all())

def list_action_types(session: Session) -> list[str]:
    return list(session.exec(select(AuditLog.action).distinct().order_by(AuditLog.action)).all())
