"""
Handler-level errors and their JSON rendering.

Every error leaves the service as ``{"error": "<message>"}``.
"""
from http import HTTPStatus
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AuthServiceError(Exception):
    status = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class BadRequest(AuthServiceError):
    status = HTTPStatus.BAD_REQUEST


class Conflict(AuthServiceError):
    # Duplicates are reported as 400, not 409
    status = HTTPStatus.BAD_REQUEST


class InternalError(AuthServiceError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR


async def auth_service_error_handler(_request: Request, exc: AuthServiceError) -> JSONResponse:
    return JSONResponse(status_code=int(exc.status), content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=int(HTTPStatus.BAD_REQUEST),
        content={"error": "Invalid request body"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthServiceError, auth_service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
