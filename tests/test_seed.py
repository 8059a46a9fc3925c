import os
from sqlmodel import SQLModel, Session, create_engine, select
from conftest import TEST_ROOT
from database.models import AuditLog, Intake, User
from enums import RoleEnum, IntakeStatusEnum
from logic.accounts import check_password
from seed import seed_demo_data, DEMO_PASSWORD

def test_seed_is_repeatable():
    seed_engine = create_engine(f"sqlite:///{os.path.join(TEST_ROOT, 'seed.db')}") #own database so the wipe does not touch other tests
    SQLModel.metadata.create_all(seed_engine)
    with Session(seed_engine) as session:
        seed_demo_data(session)
        seeded = seed_demo_data(session) #second run replaces the first

        users = session.exec(select(User).order_by(User.email)).all()
        assert [(user.email, user.role) for user in users] == [
            ("patient@demo.com", RoleEnum.PATIENT),
            ("reviewer@demo.com", RoleEnum.REVIEWER),
        ]
        assert all(check_password(DEMO_PASSWORD, user.password_hash) for user in users)

        intakes = session.exec(select(Intake)).all()
        assert [intake.id for intake in intakes] == [seeded["intake_id"]]
        assert intakes[0].status == IntakeStatusEnum.PENDING

        entries = session.exec(select(AuditLog)).all()
        assert [entry.action for entry in entries] == ["CREATED"]
    seed_engine.dispose()
