"""Typed failures raised by services and mapped to HTTP responses in crm.main"""

from typing import Any, Optional


class CRMError(Exception):
    """Base class for errors with a defined HTTP mapping"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[list[dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(CRMError):
    """Malformed or missing input"""

    status_code = 400
    default_message = "Validation failed"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])


class NotFoundError(CRMError):
    status_code = 404
    default_message = "Not found"


class ConflictError(CRMError):
    """Operation not allowed in the current state of the record"""

    status_code = 400
    default_message = "Conflict"


class InternalError(CRMError):
    status_code = 500
    default_message = "Internal server error"


class AuthenticationError(CRMError):
    """Caller identity missing"""

    status_code = 401
    default_message = "Authentication required"
