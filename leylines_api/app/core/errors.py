"""
Typed service errors and their HTTP mapping.

Services raise the exceptions defined here with a human readable
message.  ``register_exception_handlers`` translates them into JSON
responses of the form ``{"error": message}`` so that endpoint
functions never have to catch them individually.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class LeylinesException(Exception):
    """Base exception for all expected service failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class NotFoundException(LeylinesException):
    """A referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(LeylinesException):
    """The write would break a uniqueness rule (tag names)."""

    status_code = status.HTTP_409_CONFLICT


class ValidationException(LeylinesException):
    """A required field is missing or blank."""

    status_code = status.HTTP_400_BAD_REQUEST


class MalformedIdentifierException(LeylinesException):
    """An identifier is not in the store's id syntax."""

    status_code = status.HTTP_400_BAD_REQUEST


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI app."""

    @app.exception_handler(LeylinesException)
    async def handle_leylines_exception(request: Request, exc: LeylinesException):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("Rejected %s %s: invalid request", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == status.HTTP_404_NOT_FOUND else exc.detail
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Something went wrong!"},
        )
