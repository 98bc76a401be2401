"""Error handlers for FastAPI application.

Every failure leaves the API as the same JSON envelope:
``{"error": {"message", "status_code", "code", "details"?}}`` where `code`
is the stable machine-readable failure code clients branch on.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import AppException
from core.logger import get_logger

logger = get_logger("core.error_handlers")

HTTP_STATUS_CODES = {
    status.HTTP_401_UNAUTHORIZED: "NO_TOKEN",
    status.HTTP_403_FORBIDDEN: "UNAUTHORIZED",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def create_error_response(
    message: str,
    status_code: int = 500,
    code: str = "SERVER_ERROR",
    details: dict = None,
) -> JSONResponse:
    """Create a standardized error response.

    Args:
        message: Error message.
        status_code: HTTP status code.
        code: Machine-readable failure code.
        details: Optional error details dictionary.

    Returns:
        JSONResponse with error details.
    """
    error_body = {
        "error": {
            "message": message,
            "status_code": status_code,
            "code": code,
        }
    }
    if details:
        error_body["error"]["details"] = details

    return JSONResponse(status_code=status_code, content=error_body)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render application exceptions with their own status and code."""
    logger.warning("%s %s failed with %s: %s", request.method, request.url.path, exc.code, exc.message)
    return create_error_response(exc.message, exc.status_code, exc.code, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing-level HTTP errors (unknown route, wrong method) in the same envelope."""
    code = HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    return create_error_response(str(exc.detail), exc.status_code, code)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body, query and path validation errors.

    Each entry in `details.validation_errors` names the offending field as
    a dotted location such as ``body.ingredients``.
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, errors)

    return create_error_response(
        message="Validation error",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="VALIDATION_ERROR",
        details={"validation_errors": errors},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)

    # Internal database errors are not exposed to clients
    return create_error_response(
        message="A database error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="DATABASE_ERROR",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return create_error_response(
        message="An internal server error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
