import logging
from sqlalchemy import delete
from sqlmodel import Session, select
from database.database import engine, create_database_tables
from database.models import User, Intake, Document, AuditLog
from enums import RoleEnum, IntakeStatusEnum, AuditActionEnum
from logic.accounts import hash_password
from logic.audit import append_audit_entry
from logic.audit_details import CreatedDetails

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo123"

def seed_demo_data(session: Session) -> dict: #wipes every table and loads one patient, one reviewer and a sample intake
    session.execute(delete(AuditLog))
    session.execute(delete(Document))
    session.execute(delete(Intake))
    session.execute(delete(User))

    password_hash = hash_password(DEMO_PASSWORD)
    patient = User(email="patient@demo.com", password_hash=password_hash, name="Demo Patient", role=RoleEnum.PATIENT)
    reviewer = User(email="reviewer@demo.com", password_hash=password_hash, name="Dr. Sarah Chen", role=RoleEnum.REVIEWER, organization="PharmaCorp Trial Coordinator")
    session.add_all([patient, reviewer])
    session.flush()

    intake = Intake(
        client_name="Jane Martinez",
        client_email="jane.martinez@example.com",
        client_phone="555-987-6543",
        date_of_birth="1978-06-22",
        ssn="987-65-4321",
        description="Applying for Phase III cardiovascular clinical trial. History of hypertension, currently on beta blockers.",
        notes="Referred by cardiologist. Patient meets initial age and diagnosis criteria.",
        status=IntakeStatusEnum.PENDING,
        submitted_by_id=patient.id,
    )
    session.add(intake)
    session.flush()
    append_audit_entry(session, intake.id, patient.id, AuditActionEnum.CREATED, CreatedDetails(status=IntakeStatusEnum.PENDING.value))
    session.commit()

    return {"patient": patient.email, "reviewer": reviewer.email, "intake_id": intake.id}

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_database_tables()
    with Session(engine) as session:
        seeded = seed_demo_data(session)
        users = session.exec(select(User)).all()
    for user in users:
        logger.info("Seeded %s (%s)", user.email, user.role.value)
    logger.info("Seeded sample intake %s", seeded["intake_id"])
