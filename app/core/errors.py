from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

_LOG = logging.getLogger("app.errors")


class CatalogError(Exception):
    """Base for every error the catalog surfaces to a caller.

    Carries the HTTP status it maps to, a human-readable message and optional
    structured details. The same classes are raised server side and
    re-raised by the HTTP client from error envelopes.
    """

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, *, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(CatalogError):
    status_code = 400
    default_message = "Invalid request"


class InvalidFilterField(ValidationError):
    def __init__(self, field: str, *, table: str | None = None):
        self.field = field
        self.table = table
        where = f' on "{table}"' if table else ""
        super().__init__(f'Field "{field}" cannot be filtered{where}', details={"field": field})


class NotFound(CatalogError):
    status_code = 404
    default_message = "Not found"


class Unauthorized(CatalogError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(CatalogError):
    status_code = 403
    default_message = "Insufficient permissions"


class RemoteFailure(CatalogError):
    status_code = 500
    default_message = "Data store request failed"


class NetworkError(CatalogError):
    # Raised client side only: the request never produced a response.
    status_code = 503
    default_message = "Network request failed"


_STATUS_TO_ERROR: dict[int, type[CatalogError]] = {
    400: ValidationError,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    422: ValidationError,
}


def error_from_status(status_code: int, message: str | None = None, details: Any = None) -> CatalogError:
    error_cls = _STATUS_TO_ERROR.get(int(status_code), RemoteFailure)
    return error_cls(message, details=details)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CatalogError)
    async def _catalog_error_handler(request: Request, exc: CatalogError):
        if exc.status_code >= 500:
            _LOG.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError("Invalid request parameters", details=jsonable_encoder(exc.errors()))
        return JSONResponse(status_code=error.status_code, content=error.to_payload())
