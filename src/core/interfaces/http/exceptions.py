"""HTTP exception handlers.

Every error leaves the API as ``{"error": {"code": ..., "message": ...}}``.
Domain exceptions choose their status through the ``http_status_code`` and
``error_code`` class attributes.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from src.core.domain.exceptions import DomainException


class BizException(Exception):
    """Failure raised by a route handler with an explicit status and code."""

    def __init__(
        self,
        message: str = "Business logic error",
        code: int = 400,
        error_code: str = "BIZ_ERROR",
    ):
        self.message = message
        self.code = code
        self.error_code = error_code
        super().__init__(message)


def error_response(status_code: int, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": error_code, "message": message}},
    )


async def biz_exception_handler(_request: Request, exc: BizException) -> JSONResponse:
    return error_response(exc.code, exc.error_code, exc.message)


async def domain_exception_handler(
    _request: Request, exc: DomainException
) -> JSONResponse:
    return error_response(exc.http_status_code, exc.error_code, exc.message)


async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Query/path parameter errors, e.g. a batch_size out of range."""
    messages = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    ]
    return error_response(
        422,
        "VALIDATION_ERROR",
        "; ".join(messages) or "Invalid request",
    )


async def global_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception: {exc}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
