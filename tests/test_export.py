import csv
import io
import json
from datetime import date, datetime, timezone, timedelta
from database.models import AuditLog, Intake, User
from enums import RoleEnum, IntakeStatusEnum
from logic.audit import AuditRecord
from logic.export import format_timestamp, write_csv, global_audit_csv, intake_audit_csv, global_export_filename, intake_export_filename

def test_format_timestamp():
    assert format_timestamp(datetime(2024, 1, 1, 23, 59)) == "2024-01-01T23:59:00.000Z"
    assert format_timestamp(datetime(2024, 3, 5, 7, 8, 9, 123456)) == "2024-03-05T07:08:09.123Z"
    assert format_timestamp(datetime(2024, 1, 2, 1, 0, tzinfo=timezone(timedelta(hours=2)))) == "2024-01-01T23:00:00.000Z"

def test_write_csv_quotes_only_when_needed():
    content = write_csv(["A", "B"], [["plain", 'say "hi", then\nleave']])
    assert content == 'A,B\nplain,"say ""hi"", then\nleave"\n'

def test_awkward_values_survive_a_csv_reader():
    user = User(id="u1", email="o'brien@x.com", password_hash="x", name='Dr. "Bones", MD', role=RoleEnum.REVIEWER)
    intake = Intake(id="i1", client_name="Smith, Jane\nJr.", client_email="j@x.com", client_phone="1", date_of_birth="2000-01-01", ssn="1", description="d", status=IntakeStatusEnum.APPROVED, submitted_by_id="p1")
    details = json.dumps({"previousStatus": "PENDING", "newStatus": "APPROVED"}, separators=(",", ":"))
    entry = AuditLog(id="a1", action="STATUS_CHANGED", details=details, user_id="u1", intake_id="i1", created_at=datetime(2024, 1, 1, 23, 59))

    rows = list(csv.reader(io.StringIO(global_audit_csv([AuditRecord(entry, user, intake)]))))
    assert rows[0] == ["Timestamp", "Activity", "Reviewer Name", "Reviewer Email", "Application ID", "Patient Name", "Application Status", "Details"]
    assert rows[1] == [
        "2024-01-01T23:59:00.000Z",
        "Status Changed",
        'Dr. "Bones", MD',
        "o'brien@x.com",
        "i1",
        "Smith, Jane\nJr.",
        "APPROVED",
        details,
    ]

def test_intake_csv_has_short_header_and_empty_details():
    user = User(id="u1", email="r@x.com", password_hash="x", name="R", role=RoleEnum.REVIEWER)
    intake = Intake(id="i1", client_name="C", client_email="c@x.com", client_phone="1", date_of_birth="2000-01-01", ssn="1", description="d", submitted_by_id="p1")
    entry = AuditLog(id="a1", action="VIEWED", details=None, user_id="u1", intake_id="i1", created_at=datetime(2024, 1, 1))
    rows = list(csv.reader(io.StringIO(intake_audit_csv([AuditRecord(entry, user, intake)]))))
    assert rows == [
        ["Timestamp", "Activity", "Reviewer Name", "Reviewer Email", "Details"],
        ["2024-01-01T00:00:00.000Z", "Viewed", "R", "r@x.com", ""],
    ]

def test_export_filenames():
    assert global_export_filename(date(2024, 2, 29)) == "audit-trail-2024-02-29.csv"
    assert intake_export_filename("abc", date(2024, 2, 29)) == "audit-log-abc-2024-02-29.csv"

def test_global_export_endpoint(reviewer_client, intake_id):
    reviewer_client.patch(f"/intakes/{intake_id}", json={"status": "REJECTED"})
    response = reviewer_client.get("/audit-logs/export", params={"actorId": reviewer_client.user["id"]})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"].startswith('attachment; filename="audit-trail-')

    rows = list(csv.reader(io.StringIO(response.text)))
    assert len(rows) == 2
    assert rows[1][1] == "Status Changed"
    assert rows[1][4] == intake_id
    assert rows[1][6] == "REJECTED"
    assert json.loads(rows[1][7])["newStatus"] == "REJECTED"

def test_intake_export_endpoint(reviewer_client, intake_id):
    reviewer_client.get(f"/intakes/{intake_id}")
    response = reviewer_client.get(f"/intakes/{intake_id}/audit/export")
    assert response.status_code == 200
    assert f'filename="audit-log-{intake_id}-' in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert [row[1] for row in rows[1:]] == ["Application Submitted", "Viewed"]

    assert reviewer_client.get("/intakes/00000000-0000-0000-0000-000000000000/audit/export").status_code == 404
