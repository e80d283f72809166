"""
Domain errors raised by the service and repository layers.

Each error carries the HTTP status it maps to; the handlers registered in
``jobconnect.main`` turn them into ``{"success": false, "message": ...}``.
"""


class JobConnectError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(JobConnectError):
    """Raised when a job, application or user does not exist."""

    status_code = 404


class ConflictError(JobConnectError):
    """Raised when a write would break a uniqueness rule."""

    status_code = 409


class DuplicateRecordError(ConflictError):
    """Raised by a repository when a unique key is already taken."""

    def __init__(self, collection: str, message: str = "Duplicate record"):
        super().__init__(message)
        self.collection = collection


class InvalidStateError(JobConnectError):
    """Raised when the target is in a state that does not allow the operation."""

    status_code = 400


class ForbiddenError(JobConnectError):
    """Raised when the caller fails an ownership or role check."""

    status_code = 403
