from constants import STATUS_LABELS
from database.models import User, Intake, Document, AuditLog
from logic.audit import AuditRecord, action_label, action_color
from logic.audit_details import details_for_display
from logic.intakes import IntakeSummary, IntakeDetail
from logic.redaction import redact_intake_payload

#JSON shapes returned by the endpoints. Password hashes never leave this module

def user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "organization": user.organization,
        "created_at": user.created_at,
    }

def user_summary(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}

def intake_payload(intake: Intake, redacted: bool = False) -> dict:
    payload = {
        "id": intake.id,
        "client_name": intake.client_name,
        "client_email": intake.client_email,
        "client_phone": intake.client_phone,
        "date_of_birth": intake.date_of_birth,
        "ssn": intake.ssn,
        "description": intake.description,
        "notes": intake.notes,
        "status": intake.status,
        "status_label": STATUS_LABELS[intake.status],
        "created_at": intake.created_at,
        "updated_at": intake.updated_at,
        "submitted_by_id": intake.submitted_by_id,
        "reviewer_id": intake.reviewer_id,
    }
    return redact_intake_payload(payload) if redacted else payload

def document_payload(document: Document) -> dict:
    return {
        "id": document.id,
        "file_name": document.file_name,
        "file_type": document.file_type,
        "file_size": document.file_size,
        "file_path": document.file_path,
        "description": document.description,
        "created_at": document.created_at,
        "intake_id": document.intake_id,
    }

def audit_entry_payload(entry: AuditLog, user: User | None = None, intake: Intake | None = None) -> dict:
    payload = {
        "id": entry.id,
        "action": entry.action,
        "action_label": action_label(entry.action),
        "action_color": action_color(entry.action),
        "details": details_for_display(entry.action, entry.details),
        "created_at": entry.created_at,
        "user_id": entry.user_id,
        "intake_id": entry.intake_id,
    }
    if user is not None:
        payload["user"] = user_summary(user)
    if intake is not None:
        payload["intake"] = {
            "id": intake.id,
            "client_name": intake.client_name,
            "client_email": intake.client_email,
            "status": intake.status,
        }
    return payload

def audit_record_payload(record: AuditRecord, include_intake: bool = True) -> dict:
    return audit_entry_payload(record.entry, record.user, record.intake if include_intake else None)

def intake_summary_payload(summary: IntakeSummary) -> dict:
    return {
        **intake_payload(summary.intake),
        "submitted_by": user_summary(summary.submitted_by),
        "reviewer": user_summary(summary.reviewer),
        "document_count": summary.document_count,
    }

def intake_detail_payload(detail: IntakeDetail, redacted: bool = False) -> dict:
    return {
        **intake_payload(detail.intake, redacted=redacted),
        "submitted_by": user_summary(detail.submitted_by),
        "reviewer": user_summary(detail.reviewer),
        "documents": [document_payload(document) for document in detail.documents],
        "audit_logs": [audit_record_payload(record, include_intake=False) for record in detail.audit_trail],
    }
