"""Error kinds raised by the association workflow.

Services raise these; the handler registered in ``create_app`` turns them into
``{"msg": ..., "error": ...}`` JSON responses with the matching status code.
"""


class FitcoachError(Exception):
    status_code = 500
    kind = "error"
    default_message = "Unexpected error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"msg": self.message, "error": self.kind}


class ValidationError(FitcoachError):
    status_code = 400
    kind = "validation_error"
    default_message = "Invalid input"


class ForbiddenError(FitcoachError):
    status_code = 403
    kind = "forbidden"
    default_message = "Forbidden"


class NotFoundError(FitcoachError):
    status_code = 404
    kind = "not_found"
    default_message = "Not found"


class ConflictError(FitcoachError):
    status_code = 409
    kind = "conflict"
    default_message = "A pending request already exists"


class InvalidStateError(FitcoachError):
    status_code = 409
    kind = "invalid_state"
    default_message = "This request has already been processed"


class CapacityExceededError(FitcoachError):
    status_code = 409
    kind = "capacity_exceeded"
    default_message = "Trainer has reached the maximum number of clients"


class StaleRosterError(FitcoachError):
    """Raised when another transaction changed a trainer's roster first."""
    status_code = 409
    kind = "stale_roster"
    default_message = "Trainer roster changed, retry"
