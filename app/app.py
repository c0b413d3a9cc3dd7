"""FastAPI application entry point for the construction reports service."""

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import configure_logging
from app.core.database import init_db
from app.core.router import register_routes
from app.logging.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    response_validation_exception_handler,
)
from app.logging.middleware import LoggingMiddleware


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Construction Reports",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    init_db()

    # Add request logger middleware
    app.add_middleware(LoggingMiddleware)

    # Response validation errors aren't captured by the middleware
    app.add_exception_handler(ResponseValidationError, response_validation_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, replace with specific origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app
