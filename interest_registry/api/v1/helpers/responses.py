"""
Standardized response helpers for consistent API responses.
"""

from typing import Any
from fastapi import HTTPException, status
from pydantic import BaseModel

from interest_registry.core.errors import ErrorKind, InvalidPayload, RegistryError


class APIResponse(BaseModel):
    """Standard API response model"""

    success: bool
    message: str
    data: Any | None = None
    errors: list[str] | None = None


# Status code per registry failure kind
ERROR_STATUS_CODES = {
    ErrorKind.INVALID_PAYLOAD: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.INVALID_EMAIL: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.PROJECT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PROJECT_SUSPENDED: status.HTTP_409_CONFLICT,
    ErrorKind.ALREADY_SUSPENDED: status.HTTP_409_CONFLICT,
    ErrorKind.INACTIVE_PROJECT: status.HTTP_409_CONFLICT,
    ErrorKind.PROJECT_BUSY: status.HTTP_409_CONFLICT,
}


def success_response(
    message: str = "Success",
    data: Any = None,
) -> APIResponse:
    """Create a successful response"""
    return APIResponse(success=True, message=message, data=data)


def error_response(
    message: str = "An error occurred",
    errors: list[str] | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> HTTPException:
    """Create an error response"""
    response_data = APIResponse(success=False, message=message, errors=errors or [])
    return HTTPException(status_code=status_code, detail=response_data.model_dump())


def not_found_response(message: str = "Resource not found") -> HTTPException:
    """Create a not found error response"""
    return error_response(message=message, status_code=status.HTTP_404_NOT_FOUND)


def registry_error_response(exc: RegistryError) -> HTTPException:
    """Translate a registry failure into an error response.

    ``errors`` always starts with the failure kind so clients can branch on it.
    """
    errors = [exc.kind.value]
    if isinstance(exc, InvalidPayload):
        errors.extend(exc.errors)
    return error_response(
        message=exc.message,
        errors=errors,
        status_code=ERROR_STATUS_CODES.get(exc.kind, status.HTTP_400_BAD_REQUEST),
    )
