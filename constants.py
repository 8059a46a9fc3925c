from enums import RoleEnum, AuditActionEnum, IntakeStatusEnum

SESSION_COOKIE_NAME = "session"
LEGACY_USER_COOKIE_NAME = "userId" #unsigned cookie from before signed sessions, only read when LEGACY_USER_COOKIE_ENABLED is set

#page routes per role, used by the pre-routing gate in main.py. Any path not listed is public
PAGE_ROUTES = {
    RoleEnum.PATIENT: ("/dashboard", "/intake"),
    RoleEnum.REVIEWER: ("/queue",),
}
PUBLIC_ROUTES = ("/", "/signup")
ENTRY_ROUTES = ("/", "/signup") #authenticated users landing here are sent to their home page
LOGIN_PATH = "/"
ROLE_HOME = {
    RoleEnum.PATIENT: "/dashboard",
    RoleEnum.REVIEWER: "/queue",
}

#resource endpoints do their own checks against OPERATION_ROLES, so the page gate skips them
API_PREFIXES = ("/auth", "/intakes", "/documents", "/audit-logs", "/users", "/docs", "/openapi.json", "/redoc")

BOTH_ROLES = frozenset({RoleEnum.PATIENT, RoleEnum.REVIEWER})
REVIEWER_ONLY = frozenset({RoleEnum.REVIEWER})
PATIENT_ONLY = frozenset({RoleEnum.PATIENT})

OPERATION_ROLES = { #operation name -> roles allowed to call it. Ownership is checked separately for patients
    "intake:list": BOTH_ROLES,
    "intake:create": PATIENT_ONLY,
    "intake:read": BOTH_ROLES,
    "intake:update": REVIEWER_ONLY,
    "intake:bulk_update": REVIEWER_ONLY,
    "intake:view_mode": REVIEWER_ONLY,
    "audit:append": REVIEWER_ONLY,
    "audit:read": REVIEWER_ONLY,
    "audit:export": REVIEWER_ONLY,
    "document:upload": BOTH_ROLES,
    "document:read": BOTH_ROLES,
    "user:list": REVIEWER_ONLY,
}

OPERATION_FORBIDDEN_MESSAGES = { #messages shown when the role check fails
    "intake:create": "Only patients can submit intakes",
    "intake:update": "Only reviewers can update intakes",
    "intake:bulk_update": "Only reviewers can bulk update intakes",
    "intake:view_mode": "Only reviewers can change the view mode",
    "audit:append": "Only reviewers can log audit events",
    "audit:read": "Only reviewers can view audit logs",
    "audit:export": "Only reviewers can export audit logs",
    "user:list": "Only reviewers can list users",
}

AUDIT_ACTION_CONFIG = { #display label and color for each audit action, presentation metadata only
    AuditActionEnum.CREATED: {"label": "Application Submitted", "color": "bg-emerald-500"},
    AuditActionEnum.VIEWED: {"label": "Viewed", "color": "bg-blue-500"},
    AuditActionEnum.STATUS_CHANGED: {"label": "Status Changed", "color": "bg-amber-500"},
    AuditActionEnum.DOCUMENT_UPLOADED: {"label": "Document Uploaded", "color": "bg-blue-500"},
    AuditActionEnum.DOCUMENT_DELETED: {"label": "Document Deleted", "color": "bg-red-500"},
    AuditActionEnum.ASSIGNED: {"label": "Assigned", "color": "bg-blue-500"},
    AuditActionEnum.VIEW_MODE_PRIVILEGED: {"label": "Viewed Full PII", "color": "bg-purple-500"},
    AuditActionEnum.VIEW_MODE_REDACTED: {"label": "Switched to Redacted", "color": "bg-gray-500"},
}
DEFAULT_ACTION_COLOR = "bg-gray-500"

STATUS_LABELS = {
    IntakeStatusEnum.PENDING: "Pending",
    IntakeStatusEnum.IN_REVIEW: "In Review",
    IntakeStatusEnum.APPROVED: "Approved",
    IntakeStatusEnum.REJECTED: "Rejected",
}

ALLOWED_FILE_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
MAX_FILE_SIZE = 10 * 1024 * 1024 #10 MiB

GLOBAL_AUDIT_CSV_HEADERS = [
    "Timestamp",
    "Activity",
    "Reviewer Name",
    "Reviewer Email",
    "Application ID",
    "Patient Name",
    "Application Status",
    "Details",
]
INTAKE_AUDIT_CSV_HEADERS = ["Timestamp", "Activity", "Reviewer Name", "Reviewer Email", "Details"]

PHONE_MASK = "***-***-"
SSN_MASK = "***-**-"
DOB_MASK = "**/**/"
EMPTY_MASK = "—"

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72 #bcrypt only looks at the first 72 bytes
