import logging
from dataclasses import dataclass, field
from datetime import date
from sqlalchemy import func
from sqlmodel import Session, select, col
from database.models import Intake, IntakeCreate, User, Document, AuditLog
from enums import RoleEnum, AuditActionEnum
from exceptions import NotFound, ValidationFailed
from logic.access import authorize, ensure_intake_access
from logic.audit import AuditRecord, append_audit_entry, intake_audit_trail, parse_action
from logic.audit_details import CreatedDetails, ViewedDetails
from logic.session import SessionIdentity

logger = logging.getLogger(__name__)

REQUIRED_INTAKE_FIELDS = ("client_name", "client_email", "client_phone", "date_of_birth", "ssn", "description")

@dataclass
class IntakeSummary: #one row of the intake list
    intake: Intake
    submitted_by: User
    reviewer: User | None
    document_count: int

@dataclass
class IntakeDetail:
    intake: Intake
    submitted_by: User
    reviewer: User | None
    documents: list[Document] = field(default_factory=list)
    audit_trail: list[AuditRecord] = field(default_factory=list)

def get_intake_or_404(intake_id: str, session: Session) -> Intake:
    intake = session.get(Intake, intake_id)
    if not intake:
        raise NotFound("Intake not found")
    return intake

def create_intake(data: IntakeCreate, patient: SessionIdentity, session: Session) -> Intake:
    authorize(patient, "intake:create")
    if any(not getattr(data, name) for name in REQUIRED_INTAKE_FIELDS):
        raise ValidationFailed("Missing required fields")
    try:
        date_of_birth = date.fromisoformat(data.date_of_birth)
    except ValueError:
        raise ValidationFailed("Invalid date of birth. Use YYYY-MM-DD")

    intake = Intake(**data.model_dump(), submitted_by_id=patient.user_id)
    intake.date_of_birth = date_of_birth.isoformat() #stored as YYYY-MM-DD so the redacted view can keep only the year
    intake.notes = data.notes or None
    session.add(intake)
    session.flush()
    append_audit_entry(session, intake.id, patient.user_id, AuditActionEnum.CREATED, CreatedDetails(intake_id=intake.id))
    session.commit() #intake and its CREATED entry are written together
    session.refresh(intake)
    logger.info("Intake %s submitted by user %s", intake.id, patient.user_id)
    return intake

def list_intakes(identity: SessionIdentity, session: Session) -> list[IntakeSummary]:
    """Patients see their own submissions, reviewers see everything. Newest first."""
    authorize(identity, "intake:list")
    statement = select(Intake).order_by(col(Intake.created_at).desc())
    if identity.role == RoleEnum.PATIENT:
        statement = statement.where(Intake.submitted_by_id == identity.user_id)
    intakes = session.exec(statement).all()
    if not intakes:
        return []

    intake_ids = [intake.id for intake in intakes]
    document_counts = dict(session.exec(
        select(Document.intake_id, func.count(Document.id))
        .where(col(Document.intake_id).in_(intake_ids))
        .group_by(Document.intake_id)
    ).all())

    user_ids = {intake.submitted_by_id for intake in intakes} | {intake.reviewer_id for intake in intakes if intake.reviewer_id}
    users = {user.id: user for user in session.exec(select(User).where(col(User.id).in_(user_ids))).all()}

    return [
        IntakeSummary(
            intake=intake,
            submitted_by=users[intake.submitted_by_id],
            reviewer=users.get(intake.reviewer_id) if intake.reviewer_id else None,
            document_count=document_counts.get(intake.id, 0),
        )
        for intake in intakes
    ]

def get_intake_detail(intake_id: str, identity: SessionIdentity, session: Session, skip_audit: bool = False) -> IntakeDetail:
    """Load one intake for display.

    A reviewer read is journaled as VIEWED unless ``skip_audit`` is set, which
    callers use for the refresh that follows their own mutation.
    """
    authorize(identity, "intake:read")
    intake = get_intake_or_404(intake_id, session)
    ensure_intake_access(identity, intake)

    if identity.role == RoleEnum.REVIEWER and not skip_audit:
        viewer = session.get(User, identity.user_id)
        append_audit_entry(session, intake.id, identity.user_id, AuditActionEnum.VIEWED, ViewedDetails(viewed_by=viewer.name if viewer else None))
        session.commit()
        session.refresh(intake)

    documents = session.exec(
        select(Document).where(Document.intake_id == intake.id).order_by(col(Document.created_at).desc())
    ).all()
    return IntakeDetail(
        intake=intake,
        submitted_by=session.get(User, intake.submitted_by_id),
        reviewer=session.get(User, intake.reviewer_id) if intake.reviewer_id else None,
        documents=list(documents),
        audit_trail=intake_audit_trail(session, intake.id),
    )

def append_manual_audit_entry(intake_id: str, action: str | None, details: dict | None, reviewer: SessionIdentity, session: Session) -> AuditLog:
    authorize(reviewer, "audit:append")
    audit_action = parse_action(action)
    intake = get_intake_or_404(intake_id, session)
    entry = append_audit_entry(session, intake.id, reviewer.user_id, audit_action, details or None)
    session.commit()
    session.refresh(entry)
    return entry
