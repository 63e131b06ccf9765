"""
PhaseBoard - Error Handler
Maps the error taxonomy onto HTTP responses at the API boundary
"""

# ===============================================================================
# STANDARD IMPORTS SECTION
# ===============================================================================

# Standard library imports (alphabetical)
import uuid
from typing import Any, Dict, List

# Third-party imports (alphabetical)
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

# Local imports (alphabetical)
from phaseboard.core.exceptions import (
    ErrorCategory,
    NotFoundError,
    PersistenceError,
    PhaseBoardError,
    ValidationError,
)

# ===============================================================================
# LOGGING CONFIGURATION
# ===============================================================================

logger = structlog.get_logger("phaseboard.error_handler")

# ===============================================================================
# CONSTANTS & CONFIGURATION
# ===============================================================================

GENERIC_ERROR_MESSAGE = "Internal server error"
REQUEST_VALIDATION_MESSAGE = "Invalid request data"

# Leading location segments that name the request part, not the field
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}

# ===============================================================================
# CORE IMPLEMENTATION CLASSES
# ===============================================================================

class ErrorClassifier:
    """Classify exceptions into categories and HTTP status codes"""

    def classify_error(self, error: Exception) -> ErrorCategory:
        if isinstance(error, PhaseBoardError):
            return error.category
        if isinstance(error, RequestValidationError):
            return ErrorCategory.VALIDATION
        if isinstance(error, SQLAlchemyError):
            return ErrorCategory.DATABASE
        return ErrorCategory.SYSTEM

    def status_code_for(self, error: Exception) -> int:
        if isinstance(error, PhaseBoardError):
            return error.status_code
        if isinstance(error, RequestValidationError):
            return status.HTTP_400_BAD_REQUEST
        return status.HTTP_500_INTERNAL_SERVER_ERROR


class ErrorResponseBuilder:
    """Build standardized JSON error bodies"""

    def build(self, error: Exception, status_code: int) -> JSONResponse:
        if isinstance(error, PhaseBoardError):
            content = error.to_dict()
            error_id = error.error_id
        elif isinstance(error, RequestValidationError):
            content = {
                "message": REQUEST_VALIDATION_MESSAGE,
                "errors": extract_validation_errors(error),
            }
            error_id = str(uuid.uuid4())
        else:
            error_id = str(uuid.uuid4())
            content = {"message": GENERIC_ERROR_MESSAGE, "errorId": error_id}

        return JSONResponse(
            status_code=status_code,
            content=content,
            headers={"X-Error-ID": error_id},
        )


def extract_validation_errors(error: RequestValidationError) -> List[Dict[str, Any]]:
    """Flatten FastAPI/pydantic validation errors into field messages"""
    validation_errors = []
    for err in error.errors():
        location = [str(part) for part in err.get("loc", ())]
        if location and location[0] in _LOCATION_PREFIXES:
            location = location[1:]
        validation_errors.append({
            "field": ".".join(location) if location else "body",
            "message": err.get("msg", "Invalid value"),
            "type": err.get("type", "value_error"),
        })
    return validation_errors


_classifier = ErrorClassifier()
_builder = ErrorResponseBuilder()


async def handle_error(request: Request, error: Exception) -> JSONResponse:
    """Single exception handler shared by every registered error type."""
    category = _classifier.classify_error(error)
    status_code = _classifier.status_code_for(error)
    response = _builder.build(error, status_code)

    log = logger.bind(
        method=request.method,
        path=request.url.path,
        category=category.value,
        status_code=status_code,
        error_id=response.headers.get("X-Error-ID"),
    )

    if status_code >= 500:
        log.error(
            "Request failed with server error",
            error_type=type(error).__name__,
            error=str(error),
            cause=repr(error.__cause__) if error.__cause__ else None,
            exc_info=error,
        )
    elif isinstance(error, NotFoundError):
        log.info("Resource not found", resource=error.resource, resource_id=error.resource_id)
    else:
        log.info("Request rejected by validation")

    return response


def register_error_handlers(app: FastAPI) -> None:
    """Install the boundary handlers on ``app``."""
    app.add_exception_handler(ValidationError, handle_error)
    app.add_exception_handler(NotFoundError, handle_error)
    app.add_exception_handler(PersistenceError, handle_error)
    app.add_exception_handler(PhaseBoardError, handle_error)
    app.add_exception_handler(RequestValidationError, handle_error)
    app.add_exception_handler(SQLAlchemyError, handle_error)
    app.add_exception_handler(Exception, handle_error)
