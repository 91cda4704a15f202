"""
Error taxonomy for the submission, scoring and suspend flows.

Services raise these; a single exception handler in `main.py` renders them
as `{"detail": message}` with the matching HTTP status, the same body shape
FastAPI uses for HTTPException.
"""


class EduTestError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(EduTestError):
    """Missing or malformed input (unparseable startTime, empty answers)."""

    status_code = 400


class NotFoundError(EduTestError):
    """Test, attempt or draft does not exist."""

    status_code = 404


class PolicyError(EduTestError):
    """
    Eligibility denied.

    `reason` is one of the gate's reason codes; not-open and expired are
    reported as 400, max-attempts as 403.
    """

    def __init__(self, message: str, reason: str, status_code: int = 400):
        super().__init__(message, status_code)
        self.reason = reason


class AccessDeniedError(EduTestError):
    """Caller's role does not allow the action."""

    status_code = 403


class PersistenceError(EduTestError):
    """Database failure; the caller only ever sees a generic message."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
