from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlmodel import Session
from database.database import engine
from endpoints.dependencies import current_identity
from endpoints.payloads import audit_record_payload, user_summary
from logic.access import authorize
from logic.audit import AuditFilters, query_audit_logs, list_reviewers, list_action_types
from logic.export import global_audit_csv, global_export_filename
from logic.session import SessionIdentity

router = APIRouter(prefix="/audit-logs", tags=["Audit Logs"])

def audit_filters(
    search: str | None = None,
    action: str | None = None,
    actor_id: str | None = Query(None, alias="actorId"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
) -> AuditFilters: #shared by the JSON and CSV endpoints so both filter identically
    return AuditFilters(search=search, action=action, actor_id=actor_id, start_date=start_date, end_date=end_date)

@router.get("", status_code=200) #GET endpoint for the global audit trail, newest first, plus the options for filter dropdowns
def get_audit_logs(filters: AuditFilters = Depends(audit_filters), identity: SessionIdentity | None = Depends(current_identity)):
    authorize(identity, "audit:read")
    with Session(engine) as session:
        records = query_audit_logs(session, filters)
        return {
            "audit_logs": [audit_record_payload(record) for record in records],
            "reviewers": [user_summary(reviewer) for reviewer in list_reviewers(session)],
            "action_types": list_action_types(session),
        }

@router.get("/export", status_code=200)
def export_audit_logs(filters: AuditFilters = Depends(audit_filters), identity: SessionIdentity | None = Depends(current_identity)):
    authorize(identity, "audit:export")
    with Session(engine) as session:
        csv_content = global_audit_csv(query_audit_logs(session, filters))
        return Response(
            content=csv_content,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{global_export_filename()}"'},
        )
