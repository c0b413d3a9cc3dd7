"""Persists request log rows for the middleware and exception handlers."""

import getpass
import json
import logging
import platform
import socket
from datetime import datetime
from typing import Any, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from app.core import database
from app.core.config import APPLICATION_ID
from app.logging.models import Log

logger = logging.getLogger(__name__)


def _username() -> str:
    try:
        return getpass.getuser() or "unknown_user"
    except (KeyError, OSError):
        return "unknown_user"


USERNAME = _username()
HOSTNAME = socket.gethostname() or platform.node() or "unknown_host"


def safe_json_dumps(obj: Any) -> str:
    return json.dumps(obj, indent=2, default=str)


def write_log(
    request: Request,
    status_code: int,
    response_body: str,
    request_body: Optional[str] = None,
    processing_time: Optional[float] = None,
) -> None:
    """Insert one Log row through a short-lived config-database session."""
    log = Log(
        timestamp=datetime.now(),
        method=request.method,
        path=str(request.url.path),
        status_code=status_code,
        client_ip=request.client.host if request.client else None,
        request_headers=json.dumps(dict(request.headers)),
        request_body=request_body if request_body is not None else getattr(request.state, "body", None),
        response_body=response_body,
        processing_time=processing_time,
        user_agent=request.headers.get("user-agent"),
        user_id=request.headers.get("x-user-id"),
        username=USERNAME,
        hostname=HOSTNAME,
        application_id=APPLICATION_ID,
    )
    with database.SessionLocal() as session:
        try:
            session.add(log)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning("Could not write request log for %s %s: %s", request.method, request.url.path, e)
