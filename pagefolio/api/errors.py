"""
Maps service errors to HTTP responses: {"error": {"code", "message", "details"?}}.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..errors import (
    ContentNotFoundError,
    InvalidContentError,
    InvalidThemeError,
    InvalidUrlFormatError,
    PageAlreadyExistsError,
    PageNotFoundError,
    PagefolioError,
    ParentPageMissingError,
    ProjectNotFoundError,
    ReorderValidationError,
    ReservedUrlError,
    UrlAlreadyTakenError,
)
from ..logging_config import logger
from ..schemas import format_field_path

# (status, code) per error class; first match wins, so subclasses go first
ERROR_RESPONSES = [
    (InvalidContentError, 400, "INVALID_YAML"),
    (InvalidUrlFormatError, 400, "INVALID_URL"),
    (ReservedUrlError, 400, "RESERVED_URL"),
    (UrlAlreadyTakenError, 409, "URL_ALREADY_TAKEN"),
    (PageAlreadyExistsError, 409, "PAGE_ALREADY_EXISTS"),
    (InvalidThemeError, 400, "VALIDATION_ERROR"),
    (ReorderValidationError, 400, "VALIDATION_ERROR"),
    (PageNotFoundError, 404, "PAGE_NOT_FOUND"),
    (ProjectNotFoundError, 404, "PROJECT_NOT_FOUND"),
    (ContentNotFoundError, 404, "CONTENT_NOT_FOUND"),
    (ParentPageMissingError, 409, "PARENT_PAGE_MISSING"),
]


def error_body(code: str, message: str, details=None) -> dict:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"error": error}


async def handle_pagefolio_error(request: Request, exc: PagefolioError):
    if exc.is_internal:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
        )

    for error_class, status_code, code in ERROR_RESPONSES:
        if isinstance(exc, error_class):
            details = [issue.model_dump() for issue in exc.issues] if exc.issues else None
            return JSONResponse(status_code=status_code, content=error_body(code, exc.message, details))

    logger.error(f"Unmapped error {type(exc).__name__}: {exc.message}")
    return JSONResponse(
        status_code=500,
        content=error_body("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        # drop the leading "body"/"path"/"query" segment
        details.append({"field": format_field_path(err["loc"][1:]), "issue": err["msg"]})
    return JSONResponse(
        status_code=400,
        content=error_body("VALIDATION_ERROR", "Request validation failed", details),
    )


async def handle_http_exception(request: Request, exc: HTTPException):
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        content = {"error": exc.detail}
    else:
        content = error_body("HTTP_ERROR", str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PagefolioError, handle_pagefolio_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
