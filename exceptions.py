class PortalError(Exception): #raised by logic/, main.py turns it into {"detail": message, "error": kind}
    status_code = 500
    kind = "internal"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class Unauthenticated(PortalError):
    status_code = 401
    kind = "unauthenticated"
    default_message = "Unauthorized"

class Forbidden(PortalError):
    status_code = 403
    kind = "forbidden"
    default_message = "You don't have permission to perform this action"

class NotFound(PortalError):
    status_code = 404
    kind = "not_found"
    default_message = "Not found"

class ValidationFailed(PortalError):
    status_code = 400
    kind = "validation"
    default_message = "Invalid request"

class Conflict(PortalError):
    status_code = 409
    kind = "conflict"
    default_message = "Conflict"

class Unavailable(PortalError):
    status_code = 503
    kind = "unavailable"
    default_message = "Service temporarily unavailable. Please try again later."

class InternalError(PortalError):
    pass
