from urllib.parse import quote
from fastapi import APIRouter, Depends, UploadFile, File, Form
from fastapi.responses import Response
from sqlmodel import Session
from constants import MAX_FILE_SIZE
from database.database import engine
from endpoints.dependencies import current_identity
from endpoints.payloads import document_payload
from exceptions import ValidationFailed
from logic.access import authorize
from logic.documents import store_document, fetch_document, sanitize_filename
from logic.session import SessionIdentity

router = APIRouter(prefix="/documents", tags=["Documents"])

@router.post("", status_code=201) #POST endpoint to upload one document to an intake
async def upload_document(
    file: UploadFile | None = File(None),
    intake_id: str | None = Form(None, alias="intakeId"),
    description: str | None = Form(None),
    identity: SessionIdentity | None = Depends(current_identity),
): #async so the upload body is read without blocking, the store itself runs to completion before returning
    identity = authorize(identity, "document:upload")
    if file is None:
        raise ValidationFailed("No file provided")
    file_contents = await file.read(MAX_FILE_SIZE + 1) #never reads more than one byte past the limit, enough for the size check
    with Session(engine) as session:
        document = store_document(intake_id, file_contents, file.filename, file.content_type, identity, session, description=description)
        return document_payload(document)

@router.get("/{document_id}", status_code=200) #GET endpoint streaming the stored bytes back with their original type and name
def get_document(document_id: str, identity: SessionIdentity | None = Depends(current_identity)):
    identity = authorize(identity, "document:read")
    with Session(engine) as session:
        document, contents = fetch_document(document_id, identity, session)
        return Response(
            content=contents,
            media_type=document.file_type,
            headers={"Content-Disposition": f"inline; filename=\"{sanitize_filename(document.file_name)}\"; filename*=UTF-8''{quote(document.file_name)}"}, #plain ASCII name for old clients, exact name for the rest
        )
