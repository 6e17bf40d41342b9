# src/api/exceptions/handlers.py
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from src.api.dependencies.db import SimulationNotFoundError
from src.logging_config import app_logger
from src.schema.base import BaseResponse
from src.services.grading.engine import GradeValidationError
from src.services.grading.parsing import InvalidInputError
from src.services.identity import AuthError

AUTH_ERROR_STATUS = {
    "auth/user-not-found": status.HTTP_401_UNAUTHORIZED,
    "auth/wrong-password": status.HTTP_401_UNAUTHORIZED,
    "auth/invalid-credential": status.HTTP_401_UNAUTHORIZED,
    "auth/user-disabled": status.HTTP_403_FORBIDDEN,
    "auth/too-many-requests": status.HTTP_429_TOO_MANY_REQUESTS,
    "auth/network-request-failed": status.HTTP_502_BAD_GATEWAY,
}


def error_response(
    status_code: int, message: str, error: dict = None
) -> JSONResponse:
    body = BaseResponse(status=False, message=message, data=None, error=error)
    return JSONResponse(
        status_code=status_code, content=jsonable_encoder(body)
    )


def grade_error_response(error: GradeValidationError) -> JSONResponse:
    """Translate a rejected evaluation set into a 400 response"""
    app_logger.info(f"Rejected evaluations: {error.kind.value}")
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        error.message,
        {"kind": error.kind.value, "index": error.index},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Invalid input",
        {"kind": "invalid_input", "detail": jsonable_encoder(exc.errors())},
    )


async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        exc.message,
        {"kind": "invalid_input", "index": exc.index},
    )


async def auth_error_handler(request: Request, exc: AuthError):
    return error_response(
        AUTH_ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
        exc.message,
        {"kind": "auth", "code": exc.code},
    )


async def not_found_handler(request: Request, exc: SimulationNotFoundError):
    return error_response(status.HTTP_404_NOT_FOUND, str(exc))


async def http_exception_handler(request: Request, exc: HTTPException):
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception):
    app_logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(SimulationNotFoundError, not_found_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
