import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from videohub.config import is_development

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, cause: BaseException | None = None) -> None:
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation error"


class FileTypeError(ValidationError):
    default_message = "Unsupported file type"


class FileSizeError(ValidationError):
    default_message = "File too large"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Authentication required"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Not authorized"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Video not found"


class StorageError(AppError):
    status_code = 500
    default_message = "Storage failure"


def error_body(message: str, cause: BaseException | None = None, details=None) -> dict:
    body: dict = {"success": False, "message": message}
    if details is not None:
        body["details"] = details
    if cause is not None and is_development():
        body["error"] = str(cause)
    return body


def validation_message(errors) -> str:
    if not errors:
        return "Validation error"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part not in {"body", "query", "path", "form"})
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s (%r)", request.method, request.url.path, exc.message, exc.cause)
        else:
            logger.info("%s %s rejected with %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.cause), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        return JSONResponse(
            status_code=400,
            content=error_body(validation_message(errors), details=[
                {"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in errors
            ]),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=error_body("Database error", exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=error_body("Internal server error", exc))
