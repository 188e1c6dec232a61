"""Translation of application errors into HTTP responses.

This is the only place where errors become status codes. Every error path
answers with the same body:

    {"title": ..., "timestamp": ..., "status": ..., "exception": ..., "details": {...}}
"""
from datetime import datetime
from typing import Dict, Tuple, Type

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from credit_system.core.exceptions import BusinessException, ContactAdminError, PersistenceConflict
from credit_system.core.logging import get_logger

logger = get_logger(__name__)

BAD_REQUEST_TITLE = "Bad Request! Consult the documentation"
CONFLICT_TITLE = "Conflict exception! Consult the documentation"
INTERNAL_ERROR_TITLE = "INTERNAL SERVER ERROR! Contact admin"

# error type -> (status code, title)
ERROR_RESPONSES: Dict[Type[Exception], Tuple[int, str]] = {
    RequestValidationError: (status.HTTP_400_BAD_REQUEST, BAD_REQUEST_TITLE),
    BusinessException: (status.HTTP_400_BAD_REQUEST, BAD_REQUEST_TITLE),
    PersistenceConflict: (status.HTTP_409_CONFLICT, CONFLICT_TITLE),
    ContactAdminError: (status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_TITLE),
}


class ExceptionDetails(BaseModel):
    """Error body shared by every failing endpoint."""
    title: str
    timestamp: datetime
    status: int
    exception: str
    details: Dict[str, str]


def qualified_name(exc: Exception) -> str:
    cls = type(exc)
    return f"{cls.__module__}.{cls.__qualname__}"


def validation_details(exc: RequestValidationError) -> Dict[str, str]:
    """One entry per invalid field: field name -> message."""
    details: Dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else "body"
        message = error.get("msg", "Invalid input")
        details[field] = message.removeprefix("Value error, ")
    return details


def error_details(exc: Exception) -> Dict[str, str]:
    if isinstance(exc, RequestValidationError):
        return validation_details(exc)
    return {repr(exc.__cause__): str(exc)}


def build_error_response(exc: Exception) -> JSONResponse:
    """Map an error to its status/title and render the error body."""
    status_code, title = status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_TITLE
    for error_type in type(exc).__mro__:
        if error_type in ERROR_RESPONSES:
            status_code, title = ERROR_RESPONSES[error_type]
            break

    body = ExceptionDetails(
        title=title,
        timestamp=datetime.now(),
        status=status_code,
        exception=qualified_name(exc),
        details=error_details(exc),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def application_error_handler(request: Request, exc: Exception) -> JSONResponse:
    response = build_error_response(exc)
    log = logger.error if response.status_code >= 500 else logger.warning
    log(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "error_type": type(exc).__name__,
        }
    )
    return response


def register_exception_handlers(app: FastAPI) -> None:
    """Register the error translation for every type in ERROR_RESPONSES."""
    for error_type in ERROR_RESPONSES:
        app.add_exception_handler(error_type, application_error_handler)

    logger.info("Exception handlers registered")
