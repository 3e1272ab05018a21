"""
Unified error handling
Standard error response format and FastAPI exception handlers

Main features:
- one JSON error shape for every failure
- error code to HTTP status mapping
- unknown exceptions logged with their traceback
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


class ErrorResponse:
    """Standard error response"""

    def __init__(self, error_code: str, message: str,
                 details: Optional[Dict[str, Any]] = None,
                 http_status: int = 400):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }

    def to_json_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.http_status,
            content=self.to_dict()
        )


class ErrorHandler:
    """Global error handler"""

    # Error code to HTTP status
    ERROR_CODE_STATUS_MAP = {
        "VALIDATION_ERROR": 422,
        "AUTHENTICATION_REQUIRED": 401,
        "INTERNAL_ERROR": 500,

        # Identity
        "AUTH_ERROR": 401,
        "INVALID_CREDENTIALS": 401,
        "INVALID_TOKEN": 401,
        "TOKEN_EXPIRED": 401,
        "USER_ALREADY_REGISTERED": 409,

        # Reservations
        "DATE_NOT_SELECTABLE": 422,
        "DATE_ALREADY_RESERVED": 422,
        "RESERVATION_LOCKED": 409,
        "RESERVATION_NOT_FOUND": 404,

        # Data store
        "DUPLICATE_KEY": 409,
        "CONSTRAINT_VIOLATION": 409,
        "PERSISTENCE_ERROR": 500,
    }

    @classmethod
    def handle_application_error(cls, error: BaseApplicationError) -> ErrorResponse:
        http_status = cls.ERROR_CODE_STATUS_MAP.get(error.error_code, 400)
        if http_status >= 500:
            logger.error("%s: %s", error.error_code, error.message)

        return ErrorResponse(
            error_code=error.error_code,
            message=error.message,
            details=error.details,
            http_status=http_status
        )

    @classmethod
    def handle_http_exception(cls, error: HTTPException) -> ErrorResponse:
        error_code = "AUTHENTICATION_REQUIRED" if error.status_code == 401 else "HTTP_ERROR"
        return ErrorResponse(
            error_code=error_code,
            message=str(error.detail),
            details={"status_code": error.status_code},
            http_status=error.status_code
        )

    @classmethod
    def handle_validation_error(cls, error: RequestValidationError) -> ErrorResponse:
        """Request body/query validation; the first message is surfaced"""
        errors = error.errors()
        message = "Datos inválidos"
        if errors:
            message = str(errors[0].get("msg", message)).removeprefix("Value error, ")
        return ErrorResponse(
            error_code="VALIDATION_ERROR",
            message=message,
            details={"validation_errors": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors
            ]},
            http_status=422
        )

    @classmethod
    def handle_unknown_error(cls, error: Exception) -> ErrorResponse:
        logger.exception("Unhandled %s", type(error).__name__, exc_info=error)
        return ErrorResponse(
            error_code="INTERNAL_ERROR",
            message=str(error) or "Internal server error",
            details={"error_type": type(error).__name__},
            http_status=500
        )


async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
    return ErrorHandler.handle_application_error(exc).to_json_response()


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return ErrorHandler.handle_http_exception(exc).to_json_response()


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return ErrorHandler.handle_validation_error(exc).to_json_response()


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return ErrorHandler.handle_unknown_error(exc).to_json_response()
