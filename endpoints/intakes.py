from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlmodel import Session
from database.database import engine
from database.models import IntakeCreate, IntakeUpdate, IntakeBulkUpdate, AuditLogCreate, ViewModeChange, User
from endpoints.dependencies import current_identity
from endpoints.payloads import intake_payload, intake_summary_payload, intake_detail_payload, audit_entry_payload, user_summary
from logic.access import authorize
from logic.audit import intake_audit_trail
from logic.export import intake_audit_csv, intake_export_filename
from logic.intakes import create_intake, list_intakes, get_intake_detail, append_manual_audit_entry, get_intake_or_404
from logic.redaction import record_view_mode
from logic.session import SessionIdentity
from logic.status import update_intake_status, bulk_update_intake_status

router = APIRouter(prefix="/intakes", tags=["Intakes"])

@router.get("", status_code=200) #GET endpoint for the caller's intakes (all intakes for reviewers)
def get_intakes(identity: SessionIdentity | None = Depends(current_identity)):
    identity = authorize(identity, "intake:list")
    with Session(engine) as session:
        return [intake_summary_payload(summary) for summary in list_intakes(identity, session)]

@router.post("", status_code=201) #POST endpoint to submit a new intake
def post_intake(intake_data: IntakeCreate, identity: SessionIdentity | None = Depends(current_identity)):
    identity = authorize(identity, "intake:create")
    with Session(engine) as session:
        intake = create_intake(intake_data, identity, session)
        return {
            **intake_payload(intake),
            "submitted_by": user_summary(session.get(User, intake.submitted_by_id)),
            "documents": [],
        }

@router.patch("/bulk", status_code=200) #declared before /{intake_id} so "bulk" is not read as an id
def patch_intakes_bulk(bulk_data: IntakeBulkUpdate, identity: SessionIdentity | None = Depends(current_identity)):
    identity = authorize(identity, "intake:bulk_update")
    with Session(engine) as session:
        result = bulk_update_intake_status(bulk_data.intake_ids, bulk_data.status, identity, session)
        if result.updated_count == 0:
            message = "No intakes needed status change"
        else:
            message = f"Successfully updated {result.updated_count} intake(s)"
        return {
            "message": message,
            "updated": result.updated_count,
            "skipped": result.skipped_count,
        }

@router.get("/{intake_id}", status_code=200)
def get_intake(intake_id: str, skip_audit: bool = Query(False, alias="skipAudit"), redacted: bool = False, identity: SessionIdentity | None = Depends(current_identity)):
    identity = authorize(identity, "intake:read")
    with Session(engine) as session:
        detail = get_intake_detail(intake_id, identity, session, skip_audit=skip_audit)
        return intake_detail_payload(detail, redacted=redacted)

@router.patch("/{intake_id}", status_code=200)
def patch_intake(intake_id: str, update_data: IntakeUpdate, identity: SessionIdentity | None = Depends(current_identity)):
    identity = authorize(identity, "intake:update")
    with Session(engine) as session:
        intake = update_intake_status(intake_id, identity, session, status=update_data.status, notes=update_data.notes)
        return {
            **intake_payload(intake),
            "submitted_by": user_summary(session.get(User, intake.submitted_by_id)),
            "reviewer": user_summary(session.get(User, intake.reviewer_id)) if intake.reviewer_id else None,
        }

@router.post("/{intake_id}/audit", status_code=201) #POST endpoint for reviewer-logged events such as view mode toggles
def post_intake_audit(intake_id: str, audit_data: AuditLogCreate, identity: SessionIdentity | None = Depends(current_identity)):
    identity = authorize(identity, "audit:append")
    with Session(engine) as session:
        entry = append_manual_audit_entry(intake_id, audit_data.action, audit_data.details, identity, session)
        return audit_entry_payload(entry, session.get(User, entry.user_id))

@router.post("/{intake_id}/view-mode", status_code=201)
def post_view_mode(intake_id: str, view_mode: ViewModeChange, identity: SessionIdentity | None = Depends(current_identity)):
    identity = authorize(identity, "intake:view_mode")
    with Session(engine) as session:
        entry = record_view_mode(intake_id, view_mode.mode, identity, session)
        return {
            "mode": view_mode.mode,
            "audit_log": audit_entry_payload(entry, session.get(User, entry.user_id)),
        }

@router.get("/{intake_id}/audit/export", status_code=200) #GET endpoint for the intake's case history as CSV, oldest first
def export_intake_audit(intake_id: str, identity: SessionIdentity | None = Depends(current_identity)):
    identity = authorize(identity, "audit:export")
    with Session(engine) as session:
        intake = get_intake_or_404(intake_id, session)
        csv_content = intake_audit_csv(intake_audit_trail(session, intake.id))
        return Response(
            content=csv_content,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{intake_export_filename(intake.id)}"'},
        )
