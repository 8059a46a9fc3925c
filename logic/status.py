import logging
from dataclasses import dataclass
from sqlmodel import Session, select, col
from database.models import Intake, utc_now
from enums import IntakeStatusEnum, AuditActionEnum
from exceptions import NotFound, ValidationFailed
from logic.access import authorize
from logic.audit import append_audit_entry
from logic.audit_details import StatusChangedDetails
from logic.session import SessionIdentity

logger = logging.getLogger(__name__)

@dataclass
class BulkUpdateResult:
    updated_count: int
    skipped_count: int

def parse_status(status: str | None) -> IntakeStatusEnum:
    try:
        return IntakeStatusEnum(status)
    except ValueError:
        allowed = ", ".join(s.value for s in IntakeStatusEnum)
        raise ValidationFailed(f"Invalid status. Must be one of: {allowed}")

def apply_status_change(intake: Intake, new_status: IntakeStatusEnum, reviewer: SessionIdentity, session: Session, bulk_action: bool = False) -> bool:
    """Set status and reviewer together and stage one STATUS_CHANGED entry. No-op when the status is unchanged."""
    if intake.status == new_status:
        return False
    previous_status = intake.status
    intake.status = new_status
    intake.reviewer_id = reviewer.user_id
    intake.updated_at = utc_now()
    session.add(intake)
    append_audit_entry(session, intake.id, reviewer.user_id, AuditActionEnum.STATUS_CHANGED, StatusChangedDetails(
        previous_status=previous_status.value,
        new_status=new_status.value,
        bulk_action=bulk_action,
    ))
    return True

def update_intake_status(intake_id: str, reviewer: SessionIdentity, session: Session, status: str | None = None, notes: str | None = None) -> Intake:
    """Apply a reviewer's status and/or notes change and commit it as one unit.

    Notes are saved without an audit entry.
    """
    authorize(reviewer, "intake:update")
    intake = session.get(Intake, intake_id)
    if not intake:
        raise NotFound("Intake not found")

    new_status = parse_status(status) if status else None #validate before touching anything

    status_changed = False
    if new_status is not None:
        status_changed = apply_status_change(intake, new_status, reviewer, session)
    if notes is not None:
        intake.notes = notes
        intake.updated_at = utc_now()
        session.add(intake)

    session.commit() #status, reviewer and the audit entry land together or not at all
    session.refresh(intake)
    if status_changed:
        logger.info("Intake %s moved to %s by reviewer %s", intake.id, intake.status.value, reviewer.user_id)
    return intake

def bulk_update_intake_status(intake_ids: list[str] | None, status: str | None, reviewer: SessionIdentity, session: Session) -> BulkUpdateResult:
    authorize(reviewer, "intake:bulk_update")
    if not isinstance(intake_ids, list) or len(intake_ids) == 0:
        raise ValidationFailed("intakeIds must be a non-empty array")
    if not status:
        raise ValidationFailed("status is required")
    new_status = parse_status(status)

    existing_intakes = session.exec(select(Intake).where(col(Intake.id).in_(list(set(intake_ids))))).all() #ids that do not resolve are ignored
    if len(existing_intakes) == 0:
        raise NotFound("No intakes found with the provided IDs")

    updated_count = 0
    for intake in existing_intakes:
        if apply_status_change(intake, new_status, reviewer, session, bulk_action=True):
            updated_count += 1

    session.commit()
    skipped_count = len(existing_intakes) - updated_count
    logger.info("Bulk status %s by reviewer %s: %d updated, %d skipped", new_status.value, reviewer.user_id, updated_count, skipped_count)
    return BulkUpdateResult(updated_count=updated_count, skipped_count=skipped_count)
