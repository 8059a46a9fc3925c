import csv
import io
from datetime import datetime, timezone, date
from collections.abc import Iterable, Sequence
from constants import GLOBAL_AUDIT_CSV_HEADERS, INTAKE_AUDIT_CSV_HEADERS
from logic.audit import AuditRecord, action_label

def format_timestamp(value: datetime) -> str: #ISO-8601 in UTC with millisecond precision and a Z suffix, e.g. 2024-01-01T23:59:00.000Z
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"

def write_csv(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n") #minimal quoting: only fields with a comma, quote or newline are wrapped, inner quotes doubled
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return output.getvalue()

def global_audit_csv(records: Iterable[AuditRecord]) -> str:
    return write_csv(GLOBAL_AUDIT_CSV_HEADERS, (
        [
            format_timestamp(record.entry.created_at),
            action_label(record.entry.action),
            record.user.name,
            record.user.email,
            record.intake.id,
            record.intake.client_name,
            record.intake.status.value,
            record.entry.details or "",
        ]
        for record in records
    ))

def intake_audit_csv(records: Iterable[AuditRecord]) -> str:
    return write_csv(INTAKE_AUDIT_CSV_HEADERS, (
        [
            format_timestamp(record.entry.created_at),
            action_label(record.entry.action),
            record.user.name,
            record.user.email,
            record.entry.details or "",
        ]
        for record in records
    ))

def global_export_filename(today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"audit-trail-{today.isoformat()}.csv"

def intake_export_filename(intake_id: str, today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"audit-log-{intake_id}-{today.isoformat()}.csv"
