"""Error taxonomy shared by the store, the services and the HTTP layer."""
from typing import Iterable


class SurveyError(RuntimeError):
    """Base error; rendered to callers as (kind, message, fields)."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str, fields: Iterable[str] | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "fields": self.fields}


class NotFoundError(SurveyError):
    """Entity is absent, not owned by the caller, or not publicly active."""

    kind = "not_found"
    status_code = 404


class ValidationError(SurveyError):
    kind = "validation"
    status_code = 400


class ConflictError(SurveyError):
    kind = "conflict"
    status_code = 409


class InternalError(SurveyError):
    kind = "internal"
    status_code = 500

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)


class UnauthenticatedError(SurveyError):
    kind = "unauthenticated"
    status_code = 401
