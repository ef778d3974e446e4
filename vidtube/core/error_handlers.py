"""
Global error handlers for FastAPI application
"""

import structlog
from fastapi import Request, status
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from vidtube.core.exceptions import ApiError, api_error_response, create_error_response

logger = structlog.get_logger()


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """
    Handle ApiError and its subclasses

    Args:
        request: FastAPI request object
        exc: ApiError exception

    Returns:
        JSONResponse with the failure envelope
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "API error occurred",
        error_type=exc.__class__.__name__,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
        method=request.method
    )

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=exc.status_code,
        content=api_error_response(exc),
        headers=headers
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException (routing 404/405 and framework errors) with the standard envelope
    """
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            status_code=exc.status_code,
            message=str(exc.detail),
            error_type="HTTPException"
        ),
        headers=getattr(exc, "headers", None)
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors as InvalidArgument (400)
    """
    logger.warning(
        "Validation error occurred",
        errors=exc.errors(),
        path=request.url.path,
        method=request.method
    )

    # Format validation errors for better readability
    formatted_errors = []
    for error in exc.errors():
        field_path = " -> ".join(str(loc) for loc in error["loc"])
        formatted_errors.append({
            "field": field_path,
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=create_error_response(
            status_code=status.HTTP_400_BAD_REQUEST,
            message="Validation error occurred",
            error_type="ValidationError",
            errors=formatted_errors
        )
    )


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Handle SQLAlchemy database errors
    """
    logger.error(
        "Database error occurred",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method
    )

    if isinstance(exc, IntegrityError):
        error_msg = str(exc.orig) if hasattr(exc, 'orig') else str(exc)

        if "UNIQUE constraint failed" in error_msg or "duplicate key" in error_msg.lower():
            status_code = status.HTTP_409_CONFLICT
            message = "A record with this information already exists"
            error_type = "DuplicateError"
        elif "FOREIGN KEY constraint failed" in error_msg or "foreign key" in error_msg.lower():
            status_code = status.HTTP_400_BAD_REQUEST
            message = "Referenced record does not exist"
            error_type = "ForeignKeyError"
        else:
            status_code = status.HTTP_400_BAD_REQUEST
            message = "Database integrity constraint violation"
            error_type = "IntegrityError"
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        message = "Database operation failed"
        error_type = "DatabaseError"

    return JSONResponse(
        status_code=status_code,
        content=create_error_response(status_code, message, error_type)
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions
    """
    logger.error(
        "Unexpected error occurred",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="An unexpected error occurred. Please try again later.",
            error_type="InternalServerError"
        )
    )


def register_error_handlers(app):
    """
    Register all error handlers with the FastAPI application

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
