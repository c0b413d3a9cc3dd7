"""Request/response logging middleware."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.config import APPLICATION_ID
from app.logging.recorder import HOSTNAME, USERNAME, write_log

logger = logging.getLogger(__name__)

# Paths that should be excluded from logging
EXCLUDED_PATHS = ("/api/logs", "/api/docs", "/api/redoc", "/api/openapi.json")


class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)
        logger.info(
            "Logging middleware initialized with username: %s on host: %s, App ID: %s",
            USERNAME,
            HOSTNAME,
            APPLICATION_ID,
        )

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path.startswith(EXCLUDED_PATHS):
            return await call_next(request)

        start_time = time.time()

        body_bytes = await request.body()
        request_body = body_bytes.decode("utf-8", errors="ignore")
        # exception handlers read the body from here
        request.state.body = request_body

        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        status_code = response.status_code
        content_type = response.headers.get("content-type", "")
        response_body = b""

        if isinstance(response, Response) and hasattr(response, "body"):
            response_body = response.body
        elif hasattr(response, "body_iterator"):
            # Streaming response: buffer chunks as they are sent
            original_iterator = response.body_iterator
            chunks = []

            async def buffer_iterator():
                nonlocal response_body
                async for chunk in original_iterator:
                    chunks.append(chunk)
                    yield chunk
                response_body = b"".join(chunks)

            response.body_iterator = buffer_iterator()

        def log_to_db():
            if "spreadsheetml" in content_type or "text/csv" in content_type:
                body_to_log = "[Export file not logged]"
            elif response_body:
                body_to_log = response_body.decode("utf-8", errors="ignore")
            else:
                body_to_log = "[Response body not available]"
            write_log(request, status_code, body_to_log, request_body=request_body, processing_time=duration_ms)

        response.background = getattr(response, "background", None) or BackgroundTask(log_to_db)
        return response
