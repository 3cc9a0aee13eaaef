# todo_app/core/exceptions.py

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException


class TodoAppError(Exception):
    """Base class for every error the store reports to callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TodoAppError):
    """Missing or invalid input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(TodoAppError):
    status_code = status.HTTP_404_NOT_FOUND


class InternalError(TodoAppError):
    """Unexpected storage or runtime failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(message: str) -> dict:
    return {"error": message}


def describe_validation_error(exc: RequestValidationError) -> str:
    """Turns the first pydantic error into a short human readable message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    msg = first.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg


async def todo_app_error_handler(request: Request, exc: TodoAppError) -> JSONResponse:
    log = logger.bind(path=request.url.path, error_type=type(exc).__name__)
    if exc.status_code >= 500:
        log.error(f"Request failed: {exc.message}")
    else:
        log.info(f"Request rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_validation_error(exc)
    logger.bind(path=request.url.path).info(f"Request validation failed: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.bind(path=request.url.path).opt(exception=exc).error("Unhandled error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(TodoAppError, todo_app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
