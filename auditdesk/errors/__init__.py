"""
AuditDesk — Error Kinds

Every failure of a user action maps to one of these. None of them is retried:
the action is considered not applied and the caller re-triggers it.
"""


class AuditDeskError(Exception):
    """Base class. `status` is the HTTP status the API answers with."""
    kind = "error"
    status = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class ValidationError(AuditDeskError):
    """A required field is missing or a value is out of range."""
    kind = "validation"
    status = 400


class PermissionDenied(AuditDeskError):
    """Structural editing attempted without edit permission."""
    kind = "permission_denied"
    status = 403


class NotFound(AuditDeskError):
    kind = "not_found"
    status = 404


class MalformedSnapshot(AuditDeskError):
    """Imported draft file lacks the expected shape."""
    kind = "malformed_snapshot"
    status = 400


class PersistenceUnavailable(AuditDeskError):
    """Storage could not be read or written."""
    kind = "persistence_unavailable"
    status = 503
