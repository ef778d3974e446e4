"""
Custom exception classes and the response envelope helpers
"""

from typing import Any, List, Optional
from fastapi import status


class ApiError(Exception):
    """Base exception for errors reported to API clients"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        errors: Optional[List[Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.errors = errors or []
        super().__init__(self.message)


class InvalidArgumentError(ApiError):
    """Malformed identifier or missing/invalid input"""

    def __init__(self, message: str, field: str = None):
        errors = [{"field": field, "message": message}] if field else []
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            errors=errors
        )


class UnauthorizedError(ApiError):
    """Missing, invalid or revoked credentials"""

    def __init__(self, message: str = "Unauthorized request"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class PermissionDeniedError(ApiError):
    """Actor is authenticated but does not own the resource"""

    def __init__(self, operation: str = "modify", resource: str = "resource"):
        message = f"You are not allowed to {operation} this {resource}"
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN
        )


class NotFoundError(ApiError):
    """Exception raised when an entity is not found"""

    def __init__(self, resource: str = None, resource_id: Any = None, message: str = None):
        if message is None:
            if resource and resource_id is not None:
                message = f"{resource.title()} with ID {resource_id} not found"
            elif resource:
                message = f"{resource.title()} not found"
            else:
                message = "Resource not found"

        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND
        )


class ConflictError(ApiError):
    """Exception raised when a unique value is already taken"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT
        )


class InternalError(ApiError):
    """Exception raised when a dependency fails in a way the client cannot fix"""

    def __init__(self, message: str = "Something went wrong", errors: Optional[List[Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            errors=errors
        )


class MediaUploadError(InternalError):
    """Exception raised when the media store rejects or fails an upload"""

    def __init__(self, message: str, filename: str = None):
        errors = [{"filename": filename}] if filename else None
        super().__init__(message=message, errors=errors)


class DatabaseError(InternalError):
    """Exception raised when a database operation fails"""

    def __init__(self, message: str, operation: str = None):
        errors = [{"operation": operation}] if operation else None
        super().__init__(message=message, errors=errors)


def create_error_response(
    status_code: int,
    message: str,
    error_type: str,
    errors: Optional[List[Any]] = None
) -> dict:
    """
    Build the failure envelope shared by every error handler

    Args:
        status_code: HTTP status code
        message: Human readable message
        error_type: Exception class name or error category
        errors: Optional list of detail entries

    Returns:
        Dictionary in the standard failure format
    """
    return {
        "status_code": status_code,
        "data": None,
        "message": message,
        "success": False,
        "error_type": error_type,
        "errors": errors or []
    }


def api_error_response(error: ApiError) -> dict:
    """Failure envelope for an ApiError"""
    return create_error_response(
        status_code=error.status_code,
        message=error.message,
        error_type=error.__class__.__name__,
        errors=error.errors
    )
