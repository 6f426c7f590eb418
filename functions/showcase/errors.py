"""
Error taxonomy for the showcase API and the handlers that map it onto HTTP.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ShowcaseError(Exception):
    """Base class for expected failures. Carries the HTTP status it maps to."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(ShowcaseError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ShowcaseError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ShowcaseError):
    status_code = 404
    default_message = "Not found"


class InvalidInput(ShowcaseError):
    status_code = 400
    default_message = "Invalid input"


class InvalidRating(InvalidInput):
    default_message = "Rating must be 1-5"


class InternalError(ShowcaseError):
    pass


async def showcase_error_handler(request: Request, exc: ShowcaseError):
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code, content={"error": exc.default_message}
        )
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=InvalidInput.status_code,
        content={
            "message": InvalidInput.default_message,
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    # Detail stays in the server log; callers only see a generic message.
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=InternalError.status_code,
        content={"error": InternalError.default_message},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShowcaseError, showcase_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
