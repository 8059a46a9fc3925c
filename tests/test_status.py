import json
import pytest
from sqlmodel import Session, select
from database.database import engine
from database.models import AuditLog, Intake, IntakeCreate
from enums import IntakeStatusEnum, AuditActionEnum, RoleEnum
from exceptions import Forbidden, NotFound, ValidationFailed
from logic.intakes import create_intake
from logic.status import apply_status_change, update_intake_status, bulk_update_intake_status
from conftest import SAMPLE_INTAKE, make_user

def new_intake(session, patient):
    return create_intake(IntakeCreate(**SAMPLE_INTAKE), patient, session)

def status_entries(session, intake_id):
    return session.exec(
        select(AuditLog).where(AuditLog.intake_id == intake_id, AuditLog.action == AuditActionEnum.STATUS_CHANGED.value)
    ).all()

def test_status_change_sets_reviewer_and_writes_one_entry(session, patient, reviewer):
    intake = new_intake(session, patient)
    updated = update_intake_status(intake.id, reviewer, session, status="APPROVED")

    assert updated.status == IntakeStatusEnum.APPROVED
    assert updated.reviewer_id == reviewer.user_id
    entries = status_entries(session, intake.id)
    assert len(entries) == 1
    assert entries[0].user_id == reviewer.user_id
    assert json.loads(entries[0].details) == {"previousStatus": "PENDING", "newStatus": "APPROVED", "bulkAction": False}

def test_same_status_is_a_no_op(session, patient, reviewer):
    intake = new_intake(session, patient)
    update_intake_status(intake.id, reviewer, session, status="IN_REVIEW")
    updated_at = session.get(Intake, intake.id).updated_at

    again = update_intake_status(intake.id, reviewer, session, status="IN_REVIEW")
    assert again.status == IntakeStatusEnum.IN_REVIEW
    assert again.updated_at == updated_at
    assert len(status_entries(session, intake.id)) == 1

def test_any_transition_is_allowed(session, patient, reviewer):
    intake = new_intake(session, patient)
    for status in ("APPROVED", "PENDING", "REJECTED", "IN_REVIEW"):
        assert update_intake_status(intake.id, reviewer, session, status=status).status == IntakeStatusEnum(status)
    assert len(status_entries(session, intake.id)) == 4

def test_notes_only_update_is_not_audited(session, patient, reviewer):
    intake = new_intake(session, patient)
    updated = update_intake_status(intake.id, reviewer, session, notes="Called the patient")
    assert updated.notes == "Called the patient"
    assert updated.status == IntakeStatusEnum.PENDING
    assert updated.reviewer_id is None
    assert status_entries(session, intake.id) == []

def test_invalid_status_changes_nothing(session, patient, reviewer):
    intake = new_intake(session, patient)
    with pytest.raises(ValidationFailed):
        update_intake_status(intake.id, reviewer, session, status="ARCHIVED", notes="should not be saved")
    session.refresh(intake)
    assert intake.notes is None
    assert intake.status == IntakeStatusEnum.PENDING

def test_patient_cannot_change_status(session, patient):
    intake = new_intake(session, patient)
    with pytest.raises(Forbidden):
        update_intake_status(intake.id, patient, session, status="APPROVED")
    session.refresh(intake)
    assert intake.status == IntakeStatusEnum.PENDING
    assert status_entries(session, intake.id) == []

def test_bulk_update_partitions_updated_and_skipped(session, patient, reviewer):
    first, second, third = (new_intake(session, patient) for _ in range(3))
    update_intake_status(second.id, reviewer, session, status="APPROVED")

    result = bulk_update_intake_status([first.id, second.id, third.id, "does-not-exist"], "APPROVED", reviewer, session)
    assert result.updated_count == 2
    assert result.skipped_count == 1

    for intake in (first, second, third):
        session.refresh(intake)
        assert intake.status == IntakeStatusEnum.APPROVED
    bulk_entries = status_entries(session, first.id) + status_entries(session, third.id)
    assert all(json.loads(entry.details)["bulkAction"] is True for entry in bulk_entries)
    assert len(status_entries(session, second.id)) == 1 #already approved, nothing new

def test_bulk_update_with_duplicate_ids_counts_each_intake_once(session, patient, reviewer):
    intake = new_intake(session, patient)
    result = bulk_update_intake_status([intake.id, intake.id], "REJECTED", reviewer, session)
    assert (result.updated_count, result.skipped_count) == (1, 0)
    assert len(status_entries(session, intake.id)) == 1

def test_bulk_update_validation(session, patient, reviewer):
    intake = new_intake(session, patient)
    with pytest.raises(ValidationFailed, match="intakeIds must be a non-empty array"):
        bulk_update_intake_status([], "APPROVED", reviewer, session)
    with pytest.raises(ValidationFailed, match="intakeIds must be a non-empty array"):
        bulk_update_intake_status(None, "APPROVED", reviewer, session)
    with pytest.raises(ValidationFailed, match="status is required"):
        bulk_update_intake_status([intake.id], None, reviewer, session)
    with pytest.raises(ValidationFailed, match="Invalid status"):
        bulk_update_intake_status([intake.id], "DONE", reviewer, session)
    with pytest.raises(NotFound, match="No intakes found with the provided IDs"):
        bulk_update_intake_status(["missing-1", "missing-2"], "APPROVED", reviewer, session)

def test_bulk_endpoint(reviewer_client, intake_id):
    response = reviewer_client.patch("/intakes/bulk", json={"intakeIds": [intake_id], "status": "IN_REVIEW"})
    assert response.status_code == 200
    assert response.json() == {"message": "Successfully updated 1 intake(s)", "updated": 1, "skipped": 0}

    again_response = reviewer_client.patch("/intakes/bulk", json={"intakeIds": [intake_id], "status": "IN_REVIEW"})
    assert again_response.json() == {"message": "No intakes needed status change", "updated": 0, "skipped": 1}

def test_bulk_endpoint_accepts_snake_case_ids(reviewer_client, intake_id):
    response = reviewer_client.patch("/intakes/bulk", json={"intake_ids": [intake_id], "status": "REJECTED"})
    assert response.status_code == 200
    assert response.json()["updated"] == 1

def test_concurrent_reviewers_leave_one_matching_entry(session, patient, reviewer):
    intake = new_intake(session, patient)
    second_reviewer = make_user(session, RoleEnum.REVIEWER, "Second Reviewer")

    with Session(engine) as first_session, Session(engine) as second_session:
        first_copy = first_session.get(Intake, intake.id)
        second_copy = second_session.get(Intake, intake.id) #both reviewers loaded PENDING before either saved
        assert apply_status_change(first_copy, IntakeStatusEnum.APPROVED, reviewer, first_session)
        first_session.commit()
        assert apply_status_change(second_copy, IntakeStatusEnum.REJECTED, second_reviewer, second_session) #still holds the stale PENDING copy
        second_session.commit()

    session.refresh(intake)
    assert intake.status in (IntakeStatusEnum.APPROVED, IntakeStatusEnum.REJECTED)
    entries = status_entries(session, intake.id)
    assert len(entries) == 2
    matching = [entry for entry in entries if json.loads(entry.details)["newStatus"] == intake.status.value]
    assert len(matching) == 1
    assert matching[0].user_id == intake.reviewer_id #status and reviewer come from the same write
