"""
Error Taxonomy
Exceptions raised by handlers and the JSON bodies they turn into.
"""

import errno
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for every failure that maps to an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[str] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra = extra

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body


class BadRequest(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(CatalogError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(CatalogError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(CatalogError):
    status_code = status.HTTP_409_CONFLICT


class InternalError(CatalogError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def os_error_code(exc: OSError) -> Optional[str]:
    """Symbolic errno name of a filesystem failure, e.g. ENOENT."""
    if exc.errno is None:
        return None
    return errno.errorcode.get(exc.errno, str(exc.errno))


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"[VALIDATION] {request.method} {request.url.path}: {exc.errors()}")
    first = exc.errors()[0] if exc.errors() else {}
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request.", "details": first.get("msg")},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"[UNHANDLED] {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error."},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
