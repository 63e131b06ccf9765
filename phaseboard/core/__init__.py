"""PhaseBoard core: error taxonomy, error handling and logging."""

from .exceptions import (
    ErrorCategory,
    FieldError,
    NotFoundError,
    PersistenceError,
    PhaseBoardError,
    ValidationError,
)

__all__ = [
    "ErrorCategory",
    "FieldError",
    "NotFoundError",
    "PersistenceError",
    "PhaseBoardError",
    "ValidationError",
]
