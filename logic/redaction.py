import re
from sqlmodel import Session
from constants import PHONE_MASK, SSN_MASK, DOB_MASK, EMPTY_MASK
from database.models import AuditLog, Intake
from enums import MaskedFieldEnum, ViewModeEnum, AuditActionEnum
from exceptions import NotFound, ValidationFailed
from logic.access import authorize
from logic.audit import append_audit_entry
from logic.audit_details import ViewModeDetails
from logic.session import SessionIdentity

MASKED_INTAKE_FIELDS = { #intake attribute -> how it is masked. Name, email and address are never masked
    "client_phone": MaskedFieldEnum.phone,
    "ssn": MaskedFieldEnum.ssn,
    "date_of_birth": MaskedFieldEnum.dob,
}

VIEW_MODE_ACTIONS = {
    ViewModeEnum.privileged: AuditActionEnum.VIEW_MODE_PRIVILEGED,
    ViewModeEnum.redacted: AuditActionEnum.VIEW_MODE_REDACTED,
}

ISO_DATE = re.compile(r"^(\d{4})-\d{2}-\d{2}$")

def last_four_digits(value: str) -> str:
    return re.sub(r"\D", "", value)[-4:]

def mask_value(value: str | None, field: MaskedFieldEnum) -> str:
    if not value:
        return EMPTY_MASK
    if field == MaskedFieldEnum.phone:
        return PHONE_MASK + last_four_digits(value)
    if field == MaskedFieldEnum.ssn:
        return SSN_MASK + last_four_digits(value)
    if field == MaskedFieldEnum.dob:
        match = ISO_DATE.match(value)
        return DOB_MASK + (match.group(1) if match else "****") #anything but YYYY-MM-DD is masked whole
    return value

def redact_intake_payload(payload: dict) -> dict: #returns a copy with the sensitive fields masked
    redacted = dict(payload)
    for field_name, field in MASKED_INTAKE_FIELDS.items():
        if field_name in redacted:
            redacted[field_name] = mask_value(redacted[field_name], field)
    return redacted

def parse_view_mode(mode: str | None) -> ViewModeEnum:
    try:
        return ViewModeEnum(mode)
    except ValueError:
        raise ValidationFailed("Invalid mode. Must be one of: privileged, redacted")

def record_view_mode(intake_id: str, mode: str | None, reviewer: SessionIdentity, session: Session) -> AuditLog:
    """Journal a reviewer switching between raw and masked display of an intake."""
    authorize(reviewer, "intake:view_mode")
    view_mode = parse_view_mode(mode)
    intake = session.get(Intake, intake_id)
    if not intake:
        raise NotFound("Intake not found")
    entry = append_audit_entry(session, intake.id, reviewer.user_id, VIEW_MODE_ACTIONS[view_mode], ViewModeDetails(mode=view_mode.value))
    session.commit()
    session.refresh(entry)
    return entry
