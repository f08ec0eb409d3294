"""
Error taxonomy shared by services and routes.

Every error carries a human-readable message and a ``kind`` the caller can
branch on: ``validation`` (fix the request), ``transient`` (retry later) or
``fatal`` (something is broken on our side).
"""

VALIDATION = "validation"
TRANSIENT = "transient"
FATAL = "fatal"


class AppError(Exception):
    kind = FATAL
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class InputValidationError(AppError):
    kind = VALIDATION
    status_code = 400


class PayloadTooLargeError(InputValidationError):
    status_code = 413


class NotFoundError(InputValidationError):
    status_code = 404


class UpstreamServiceError(AppError):
    """Embedding or completion provider failed."""
    kind = TRANSIENT
    status_code = 502


class QueryTimeoutError(AppError):
    kind = TRANSIENT
    status_code = 504


class StoreError(AppError):
    kind = FATAL
    status_code = 500
