# app/api/__init__.py
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder

from app.api.responses import error_response
from app.domain.errors import ServiceError, PersistenceError, RateLimitExceededError
from app.utils.logging import get_logger

logger = get_logger(__name__)

_HTTP_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
}


def register_exception_handlers(app: FastAPI) -> None:
    """Serwisy rzucaja wyjatki domenowe, tutaj zamieniamy je na koperte odpowiedzi."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        headers = None
        if isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(exc.retry_after)}
        if isinstance(exc, PersistenceError):
            #szczegoly bledu bazy juz sa w logach
            return error_response(exc.code, "An unexpected error occurred", exc.status_code)
        return error_response(exc.code, exc.message, exc.status_code, exc.details, headers)

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        code = _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
        return error_response(code, str(exc.detail), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response(
            "VALIDATION_ERROR",
            "Invalid input data",
            400,
            details={"errors": jsonable_encoder(exc.errors(), exclude={"ctx", "input"})},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return error_response("INVALID_INPUT", str(exc), 400)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500)
