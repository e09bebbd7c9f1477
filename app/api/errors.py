"""
Domain error → HTTP response mapping.

Every error body has the same shape: {"error": <message>, "code": <CODE>}.
"""
from fastapi import status
from fastapi.responses import JSONResponse
import logging

from app.domain.entities import (
    DomainError,
    AlreadyInitializedError,
    CapacityError,
    ConflictError,
    ConsistencyError,
    NotFoundError,
    StorageError,
    UnsupportedMediaTypeError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# First matching class wins - subclasses must come before their bases
ERROR_STATUS_CODES = (
    (UnsupportedMediaTypeError, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (CapacityError, status.HTTP_400_BAD_REQUEST),
    (AlreadyInitializedError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ConsistencyError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_code_for(exc: DomainError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc: DomainError) -> JSONResponse:
    """Render a domain error as {"error", "code"} with its mapped status"""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"❌ {exc.code}: {exc.message}")
    else:
        logger.info(f"Request rejected with {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "code": exc.code},
    )
