from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from sqlalchemy.types import TypeDecorator, DateTime
from sqlmodel import SQLModel, Field
from enums import RoleEnum, IntakeStatusEnum #import enums from enums.py to have access to fixed choices in models
import uuid

def new_id() -> str: #ids are UUID4 strings so they can be matched by substring in audit search
    return str(uuid.uuid4())

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class AwareDateTime(TypeDecorator): #stored as naive UTC on every backend, always handed back as aware UTC
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            raise ValueError("Datetime values must have timezone information")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

class WireModel(BaseModel): #request bodies accept camelCase names and the snake_case attribute names
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True, unique=True) #always stored lowercased so uniqueness is case-insensitive
    password_hash: str
    name: str
    role: RoleEnum #role never changes after registration
    organization: str | None = None
    created_at: datetime = Field(default_factory=utc_now, sa_type=AwareDateTime)

class UserRegister(WireModel): #fields are loose strings so the register handler can return specific messages
    email: str | None = None
    password: str | None = None
    name: str | None = None
    role: str | None = None
    organization: str | None = None

class UserLogin(WireModel):
    email: str | None = None
    password: str | None = None

class Intake(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    client_name: str = Field(index=True)
    client_email: str
    client_phone: str
    date_of_birth: str #YYYY-MM-DD
    ssn: str
    description: str
    notes: str | None = None
    status: IntakeStatusEnum = Field(default=IntakeStatusEnum.PENDING, index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=AwareDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=AwareDateTime)
    submitted_by_id: str = Field(foreign_key="users.id", index=True) #the patient who submitted, never changes
    reviewer_id: str | None = Field(default=None, foreign_key="users.id") #set together with every status change

class IntakeCreate(WireModel):
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    date_of_birth: str | None = None
    ssn: str | None = None
    description: str | None = None
    notes: str | None = None

class IntakeUpdate(WireModel):
    status: str | None = None
    notes: str | None = None

class IntakeBulkUpdate(WireModel):
    intake_ids: list[str] | None = None
    status: str | None = None

class Document(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    file_name: str #original name as uploaded
    file_type: str #MIME type
    file_size: int #bytes
    file_path: str #relative to UPLOAD_DIR
    description: str | None = None
    created_at: datetime = Field(default_factory=utc_now, sa_type=AwareDateTime)
    intake_id: str = Field(foreign_key="intake.id", index=True)

class AuditLog(SQLModel, table=True): #append only, rows are never updated or deleted
    id: str = Field(default_factory=new_id, primary_key=True)
    action: str = Field(index=True)
    details: str | None = None #serialized JSON, only deserialized for display
    created_at: datetime = Field(default_factory=utc_now, sa_type=AwareDateTime, index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    intake_id: str = Field(foreign_key="intake.id", index=True)

class AuditLogCreate(WireModel):
    action: str | None = None
    details: dict | None = None

class ViewModeChange(WireModel):
    mode: str | None = None
