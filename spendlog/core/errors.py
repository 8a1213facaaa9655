"""Application error taxonomy and the single place that maps it to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from spendlog.core.config import get_settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for every expected failure raised by services and dependencies."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or missing input, password/confirmation mismatch, invalid or expired single-use token."""


class ConflictError(AppError):
    """Unique resource already exists (duplicate e-mail)."""


class AuthenticationError(AppError):
    """Caller is not authenticated: bad credentials or unusable bearer token."""


class InvalidTokenError(AuthenticationError):
    """Bearer token is missing, malformed, revoked or has a bad signature."""


class TokenExpiredError(AuthenticationError):
    """Bearer token's own expiry has passed."""


class StaleTokenError(AuthenticationError):
    """Password was changed after the bearer token was issued."""


class AuthorizationError(AppError):
    """Authenticated user's role is not allowed to perform the action."""


class NotFoundError(AppError):
    """Requested resource does not exist (or is not visible to the caller)."""


class DeliveryError(AppError):
    """Outgoing e-mail could not be delivered."""


# Closed mapping; subclasses resolve through the MRO to their nearest listed base.
_STATUS_BY_ERROR: dict[type[AppError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    DeliveryError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(error: AppError) -> int:
    """Return the HTTP status for an application error."""
    for cls in type(error).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    raise TypeError(f"No status mapping for {type(error).__name__}")


def _error_response(
    status_code: int,
    detail: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "fail" if status_code < 500 else "error", "detail": detail},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for app errors, routing errors, request validation and unexpected failures."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        status_code = status_code_for(exc)
        headers = None
        if status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        if status_code >= 500:
            logger.error(
                "%s on %s %s: %s",
                type(exc).__name__,
                request.method,
                request.url.path,
                exc.message,
            )
        return _error_response(status_code, exc.message, headers)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail = str(exc.detail)
        if exc.status_code == status.HTTP_404_NOT_FOUND and detail == "Not Found":
            detail = f"Can't find this URL {request.url.path}."
        return _error_response(exc.status_code, detail, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            msg = err.get("msg", "Invalid value")
            messages.append(f"{loc}: {msg}" if loc else msg)
        detail = "Invalid data input. " + "; ".join(messages)
        return _error_response(status.HTTP_400_BAD_REQUEST, detail)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        detail = "Something went wrong."
        if get_settings().APP_ENV == "dev":
            detail = f"{detail} {type(exc).__name__}: {exc}"
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
