"""
PhaseBoard Core Exception Handling
Error taxonomy surfaced by the service layer and mapped to HTTP at the boundary
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(str, Enum):
    """Error categories used for response mapping and log routing"""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DATABASE = "database"
    SYSTEM = "system"


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation violation"""
    field: str
    message: str
    type: str = "value_error"

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "type": self.type}


@dataclass
class ErrorContext:
    """Context captured when an error is raised"""
    error_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: Optional[str] = None
    additional_data: Dict[str, Any] = field(default_factory=dict)


class PhaseBoardError(Exception):
    """
    Base exception class for all PhaseBoard errors.

    Carries the HTTP status the boundary should answer with, a stable
    error code and the message that is safe to show to API callers.
    """

    status_code: int = 500
    error_code: str = "PHASEBOARD_ERROR"
    category: ErrorCategory = ErrorCategory.SYSTEM

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message)
        self.message = message
        self.context = ErrorContext(operation=operation, additional_data=kwargs)

    @property
    def error_id(self) -> str:
        return self.context.error_id

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(PhaseBoardError):
    """Malformed or missing input; answered with 400 and per-field messages"""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str = "Invalid request data",
        errors: Optional[List[FieldError]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.errors = list(errors or [])

    @classmethod
    def for_field(cls, field_name: str, message: str, error_type: str = "value_error", **kwargs) -> "ValidationError":
        return cls(errors=[FieldError(field_name, message, error_type)], **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "errors": [error.to_dict() for error in self.errors],
        }


class NotFoundError(PhaseBoardError):
    """Referenced entity does not exist"""

    status_code = 404
    error_code = "NOT_FOUND"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, message: str, resource: Optional[str] = None, resource_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.resource = resource
        self.resource_id = resource_id


class PersistenceError(PhaseBoardError):
    """
    Underlying store unreachable or a constraint was violated.

    ``message`` is what the caller sees; the driver exception stays in
    ``__cause__`` and is only written to the server log.
    """

    status_code = 500
    error_code = "PERSISTENCE_ERROR"
    category = ErrorCategory.DATABASE

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errorId": self.error_id}
