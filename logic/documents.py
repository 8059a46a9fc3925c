import logging
import os
import re
import time
from pathlib import Path
from sqlmodel import Session
from config import UPLOAD_DIR
from constants import ALLOWED_FILE_TYPES, MAX_FILE_SIZE
from database.models import Document, Intake
from enums import AuditActionEnum
from exceptions import NotFound, ValidationFailed
from logic.access import authorize, ensure_intake_access
from logic.audit import append_audit_entry
from logic.audit_details import DocumentUploadedDetails
from logic.session import SessionIdentity

logger = logging.getLogger(__name__)

UNSAFE_FILENAME_CHARACTERS = re.compile(r"[^a-zA-Z0-9.-]")

def validate_upload(mime_type: str | None, size: int):
    if mime_type not in ALLOWED_FILE_TYPES:
        raise ValidationFailed("Invalid file type. Allowed: PDF, images, Word documents")
    if size > MAX_FILE_SIZE:
        raise ValidationFailed("File too large. Maximum size is 10MB")

def sanitize_filename(file_name: str) -> str:
    return UNSAFE_FILENAME_CHARACTERS.sub("_", file_name)

def document_relative_path(intake_id: str, file_name: str, timestamp_ms: int) -> str: #uploads/documents/<intake id>/<timestamp>-<safe name>
    return os.path.join("documents", sanitize_filename(intake_id), f"{timestamp_ms}-{sanitize_filename(file_name)}")

def absolute_path(relative_path: str) -> Path:
    return Path(UPLOAD_DIR) / relative_path

def allocate_path(intake_id: str, file_name: str) -> str:
    timestamp_ms = int(time.time() * 1000)
    relative_path = document_relative_path(intake_id, file_name, timestamp_ms)
    while absolute_path(relative_path).exists(): #same name uploaded twice in one millisecond, never overwrite
        timestamp_ms += 1
        relative_path = document_relative_path(intake_id, file_name, timestamp_ms)
    return relative_path

def store_document(intake_id: str | None, file_bytes: bytes, file_name: str | None, mime_type: str | None, uploader: SessionIdentity, session: Session, description: str | None = None) -> Document:
    """Validate, write the bytes and record the Document plus its DOCUMENT_UPLOADED entry."""
    authorize(uploader, "document:upload")
    if not file_name:
        raise ValidationFailed("No file provided")
    if not intake_id:
        raise ValidationFailed("Intake ID required")

    intake = session.get(Intake, intake_id)
    if not intake:
        raise NotFound("Intake not found")
    ensure_intake_access(uploader, intake, "You can only upload documents to your own intakes")
    validate_upload(mime_type, len(file_bytes)) #nothing is written until the upload passes every check

    relative_path = allocate_path(intake.id, file_name)
    stored_path = absolute_path(relative_path)
    stored_path.parent.mkdir(parents=True, exist_ok=True)
    with open(stored_path, "wb") as f:
        f.write(file_bytes) #write binary contents of the upload to its derived path

    document = Document(
        file_name=file_name,
        file_type=mime_type,
        file_size=len(file_bytes),
        file_path=relative_path,
        description=description or None,
        intake_id=intake.id,
    )
    try:
        session.add(document)
        session.flush()
        append_audit_entry(session, intake.id, uploader.user_id, AuditActionEnum.DOCUMENT_UPLOADED, DocumentUploadedDetails(
            document_id=document.id,
            file_name=document.file_name,
            file_type=document.file_type,
        ))
        session.commit()
    except Exception:
        session.rollback()
        stored_path.unlink(missing_ok=True) #no orphaned blob when the row could not be written
        raise
    session.refresh(document)
    logger.info("Document %s (%d bytes) stored for intake %s", document.id, document.file_size, intake.id)
    return document

def fetch_document(document_id: str, identity: SessionIdentity, session: Session) -> tuple[Document, bytes]:
    authorize(identity, "document:read")
    document = session.get(Document, document_id)
    if not document:
        raise NotFound("Document not found")
    intake = session.get(Intake, document.intake_id)
    ensure_intake_access(identity, intake, "You don't have permission to view this document")
    try:
        with open(absolute_path(document.file_path), "rb") as f:
            contents = f.read()
    except FileNotFoundError:
        logger.error("Blob missing for document %s at %s", document.id, document.file_path)
        raise NotFound("File not found on server")
    return document, contents
