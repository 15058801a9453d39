"""
app/core/errors.py

Purpose: Exception to response mapping

- Every error leaves the API as ErrorResponse {error, code, details}
- MealMateError subclasses carry their own status and code
- Mongo write conflicts surface as duplicate actions, outages as 503
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.exceptions import MealMateError
from app.core.logging import get_logger
from app.schemas.response import ErrorResponse

logger = get_logger(__name__)


def error_response(status_code: int, message: str, code: str, details=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, code=code, details=details).model_dump(),
        headers=headers,
    )


def _request_info(request: Request) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "client": request.client.host if request.client else "unknown",
    }


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(MealMateError)
    async def mealmate_exception_handler(request: Request, exc: MealMateError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code}: {exc.message}", extra=_request_info(request))
        elif exc.status_code == 403:
            logger.warning(f"Forbidden: {request.method} {request.url.path}")

        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return error_response(exc.status_code, exc.message, exc.code, exc.details, headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Unknown routes and wrong methods.
        """
        return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            422, "Input validation failed", "VALIDATION_ERROR", jsonable_encoder(exc.errors())
        )

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
        # A unique index rejected a write that the service-level check let through
        logger.warning(f"Duplicate key on {request.url.path}: {exc.details.get('keyValue') if exc.details else ''}")
        return error_response(400, "Duplicate record", "DUPLICATE_ACTION")

    @app.exception_handler(PyMongoError)
    async def database_exception_handler(request: Request, exc: PyMongoError):
        logger.error(f"Database error: {exc}", extra=_request_info(request), exc_info=True)
        return error_response(503, "Database unavailable", "DATABASE_UNAVAILABLE")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(f"Unhandled exception: {exc}", extra=_request_info(request), exc_info=True)

        message = "An internal error occurred. Please try again later." if settings.is_production else str(exc)
        return error_response(500, message, "INTERNAL_ERROR")
