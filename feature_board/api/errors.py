# feature_board/api/errors.py
import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from feature_board.config import constants
from feature_board.errors import (
    ConflictError,
    FeatureBoardError,
    JobTimeoutError,
    MisconfigurationError,
    NotFoundError,
    StoreBusyError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ValidationError: 400,
    UnauthorizedError: 401,
    NotFoundError: 404,
    ConflictError: 409,
    MisconfigurationError: 500,
    JobTimeoutError: 500,
    StoreBusyError: 503,
}


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str, errors: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.errors = errors


def error_body(code: str, message: str, errors: Optional[Dict[str, str]] = None) -> dict:
    body = {"success": False, "error": message, "code": code}
    if errors:
        body["errors"] = errors
    return body


def status_for(exc: FeatureBoardError) -> int:
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message, exc.errors),
        )

    @app.exception_handler(FeatureBoardError)
    async def domain_error_handler(request: Request, exc: FeatureBoardError):
        status_code = status_for(exc)
        if status_code == 500 and not isinstance(exc, (MisconfigurationError, JobTimeoutError)):
            logger.error(f"Unhandled domain error on {request.url.path}: {exc}")
            return JSONResponse(
                status_code=500,
                content=error_body("internal_error", constants.INTERNAL_ERROR),
            )
        return JSONResponse(
            status_code=status_code,
            content=error_body(exc.code, exc.message, getattr(exc, "field_errors", None)),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = {
            ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body": err.get("msg", "")
            for err in exc.errors()
        }
        return JSONResponse(
            status_code=400,
            content=error_body("invalid_request", constants.VALIDATION_FAILED, errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # never leak internals in the response body
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=error_body("internal_error", constants.INTERNAL_ERROR),
        )
