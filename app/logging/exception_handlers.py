# app/logging/exception_handlers.py

import logging
import traceback

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse

from app.logging.recorder import safe_json_dumps, write_log

logger = logging.getLogger(__name__)


def _jsonable_errors(error):
    if isinstance(error, dict):
        return {k: _jsonable_errors(v) for k, v in error.items()}
    if isinstance(error, (list, tuple)):
        return [_jsonable_errors(item) for item in error]
    if isinstance(error, (str, int, float, bool)) or error is None:
        return error
    return str(error)


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and log them to database"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    write_log(
        request,
        500,
        safe_json_dumps({"error": str(exc), "type": type(exc).__name__, "traceback": traceback.format_exc()}),
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


async def response_validation_exception_handler(request: Request, exc: ResponseValidationError):
    write_log(request, 500, safe_json_dumps(_jsonable_errors(exc.errors())))
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error: Response validation failed."},
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    errors = _jsonable_errors(exc.errors())
    write_log(request, 422, safe_json_dumps(errors))
    return JSONResponse(status_code=422, content={"detail": errors})


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions and log 4xx/5xx errors"""
    headers = getattr(exc, "headers", None)
    if exc.status_code >= 400:
        write_log(request, exc.status_code, safe_json_dumps({"detail": exc.detail, "headers": headers}))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)
