import json
import logging
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel
from enums import AuditActionEnum

logger = logging.getLogger(__name__)

#one payload model per audit action. Details are stored as JSON text and only parsed back for display, never for decisions

class AuditDetails(BaseModel):
    model_config = ConfigDict(extra="allow", alias_generator=to_camel, populate_by_name=True) #stored and shown with camelCase keys

class CreatedDetails(AuditDetails):
    intake_id: str | None = None
    status: str | None = None

class ViewedDetails(AuditDetails):
    viewed_by: str | None = None

class StatusChangedDetails(AuditDetails):
    previous_status: str
    new_status: str
    bulk_action: bool = False

class DocumentUploadedDetails(AuditDetails):
    document_id: str
    file_name: str
    file_type: str

class DocumentDeletedDetails(AuditDetails):
    document_id: str | None = None
    file_name: str | None = None

class AssignedDetails(AuditDetails):
    reviewer_id: str | None = None

class ViewModeDetails(AuditDetails):
    mode: str | None = None

DETAILS_MODELS: dict[AuditActionEnum, type[AuditDetails]] = {
    AuditActionEnum.CREATED: CreatedDetails,
    AuditActionEnum.VIEWED: ViewedDetails,
    AuditActionEnum.STATUS_CHANGED: StatusChangedDetails,
    AuditActionEnum.DOCUMENT_UPLOADED: DocumentUploadedDetails,
    AuditActionEnum.DOCUMENT_DELETED: DocumentDeletedDetails,
    AuditActionEnum.ASSIGNED: AssignedDetails,
    AuditActionEnum.VIEW_MODE_PRIVILEGED: ViewModeDetails,
    AuditActionEnum.VIEW_MODE_REDACTED: ViewModeDetails,
}

def serialize_details(details: AuditDetails | dict | None) -> str | None:
    if details is None:
        return None
    if isinstance(details, AuditDetails):
        details = details.model_dump(exclude_none=True, by_alias=True)
    return json.dumps(details, separators=(",", ":"), default=str)

def parse_details(action: str, raw: str | None) -> AuditDetails | dict | str | None:
    """Typed view of a stored payload: the action's model, else a dict, else the raw text."""
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return raw
    if not isinstance(data, dict):
        return data
    try:
        model = DETAILS_MODELS[AuditActionEnum(action)]
    except (ValueError, KeyError):
        return data
    try:
        return model.model_validate(data)
    except ValidationError:
        logger.debug("Audit details for %s do not match %s", action, model.__name__)
        return data

def details_for_display(action: str, raw: str | None):
    parsed = parse_details(action, raw)
    if isinstance(parsed, AuditDetails):
        return parsed.model_dump(exclude_none=True, by_alias=True)
    return parsed
