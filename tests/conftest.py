import os
import tempfile
import uuid

#point the app at a throwaway database and upload area before anything imports config
TEST_ROOT = tempfile.mkdtemp(prefix="intake-portal-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(TEST_ROOT, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(TEST_ROOT, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["ENV"] = "development"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from main import app
from database.database import engine
from database.models import User
from enums import RoleEnum
from logic.accounts import hash_password
from logic.session import SessionIdentity, identity_for_user

SAMPLE_INTAKE = {
    "client_name": "Jane Martinez",
    "client_email": "jane.martinez@example.com",
    "client_phone": "555-987-6543",
    "date_of_birth": "1978-06-22",
    "ssn": "987-65-4321",
    "description": "Applying for the cardiovascular trial",
}

def unique_email(prefix: str) -> str: #every test registers fresh accounts so tests never collide in the shared database
    return f"{prefix}-{uuid.uuid4().hex[:8]}@x.com"

def register(client: TestClient, role: str, email: str | None = None, password: str = "secret1", name: str | None = None) -> dict:
    response = client.post("/auth/register", json={
        "email": email or unique_email(role.lower()),
        "password": password,
        "name": name or f"Test {role.title()}",
        "role": role,
    })
    assert response.status_code == 201, response.text
    return response.json()["user"]

@pytest.fixture
def patient_client():
    client = TestClient(app)
    client.user = register(client, "PATIENT")
    return client

@pytest.fixture
def other_patient_client():
    client = TestClient(app)
    client.user = register(client, "PATIENT")
    return client

@pytest.fixture
def reviewer_client():
    client = TestClient(app)
    client.user = register(client, "REVIEWER", name="Dr. Review")
    return client

@pytest.fixture
def anonymous_client():
    return TestClient(app)

@pytest.fixture
def intake_id(patient_client) -> str:
    response = patient_client.post("/intakes", json=SAMPLE_INTAKE)
    assert response.status_code == 201, response.text
    return response.json()["id"]

@pytest.fixture
def session():
    with Session(engine) as session:
        yield session

def make_user(session: Session, role: RoleEnum, name: str = "Direct User") -> SessionIdentity: #creates a user without going through HTTP and returns its identity
    user = User(email=unique_email(role.value.lower()), password_hash=hash_password("secret1"), name=name, role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return identity_for_user(user)

@pytest.fixture
def patient(session) -> SessionIdentity:
    return make_user(session, RoleEnum.PATIENT, "Direct Patient")

@pytest.fixture
def reviewer(session) -> SessionIdentity:
    return make_user(session, RoleEnum.REVIEWER, "Direct Reviewer")
