from enum import Enum

#enums set the fixed options a field can take. Each enum the models need must be defined here first

class RoleEnum(str, Enum): #a user is either a patient submitting applications or a reviewer triaging them
    PATIENT = "PATIENT"
    REVIEWER = "REVIEWER"

class IntakeStatusEnum(str, Enum): #any reviewer may set any of these at any time, there is no forward-only rule
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

class AuditActionEnum(str, Enum):
    CREATED = "CREATED"
    VIEWED = "VIEWED"
    STATUS_CHANGED = "STATUS_CHANGED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DOCUMENT_DELETED = "DOCUMENT_DELETED" #reserved, no deletion endpoint exists
    ASSIGNED = "ASSIGNED"
    VIEW_MODE_PRIVILEGED = "VIEW_MODE_PRIVILEGED"
    VIEW_MODE_REDACTED = "VIEW_MODE_REDACTED"

class ViewModeEnum(str, Enum):
    privileged = "privileged"
    redacted = "redacted"

class MaskedFieldEnum(str, Enum): #only these fields are ever masked in the redacted view
    phone = "phone"
    ssn = "ssn"
    dob = "dob"
