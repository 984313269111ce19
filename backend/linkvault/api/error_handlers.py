"""Error Handlers - map LinkVault failures onto the REST error envelope.

Invariants:
    - LinkVaultError -> its own http_status and to_response() envelope;
      ValidationError adds the offending field under "details"
    - RequestValidationError -> 400 with the same "details" shape
    - Exception (catch-all) -> 500, never leaks internal details
    - Log level follows the error's severity; the store context (collection,
      document_id) and the signed-in user ride along as log extras

Design Decisions:
    - Three layers: domain (LinkVaultError), request validation, catch-all
    - The signed-in user is read from the workspace at log time, not stored
      on the error: most errors are raised below the HTTP layer
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

import linkvault.services.workspace as workspace_module
from linkvault.core.errors import ErrorSeverity, LinkVaultError, ValidationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _current_user() -> str | None:
    ws = workspace_module.workspace
    return ws.identity.current_user_id if ws else None


def _log_level(exc: LinkVaultError) -> int:
    # 4xx logs at WARNING at most
    if exc.http_status < 500:
        return min(_LOG_LEVELS[exc.severity], logging.WARNING)
    return _LOG_LEVELS[exc.severity]


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(LinkVaultError)
    async def linkvault_error_handler(request: Request, exc: LinkVaultError):
        logger.log(
            _log_level(exc),
            f"{request.method} {request.url.path} -> {exc.http_status}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "user_id": exc.context.user_id or _current_user(),
                "collection": exc.context.collection,
                "document_id": exc.context.document_id,
                "operation": getattr(exc, "operation", None),
            },
        )
        body = exc.to_response()
        if isinstance(exc, ValidationError):
            body["error"]["details"] = [
                {"field": exc.field, "message": exc.message, "type": "value_error"},
            ]
        return JSONResponse(status_code=exc.http_status, content=body)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Rejected request body on {request.url.path}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_request_validation_body(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path, "user_id": _current_user()},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc]
    return ".".join(parts[1:]) or ".".join(parts)


def _request_validation_body(exc: RequestValidationError) -> dict:
    """Body/query failures, with the transport prefix ("body", "query") dropped."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": _field_name(e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
