# app/logging/router.py
"""API router for the logging module."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.core.dependencies import SessionDep
from app.logging.dao import LogDAO
from app.logging.schemas import LogRead
from app.logging.service import LogService

router = APIRouter(
    prefix="/logs",
    tags=["logs"],
)


# ===== DEPENDENCY INJECTION =====

def get_log_service(session: SessionDep) -> LogService:
    return LogService(LogDAO(session))


@router.get("/", response_model=List[LogRead])
def get_logs(
    response: Response,
    limit: int = Query(50, ge=1, le=1000, description="Maximum number of logs to return"),
    offset: int = Query(0, ge=0, description="Number of logs to skip"),
    hours: int = Query(24, ge=1, le=168, description="Time window in hours"),
    status_min: Optional[int] = Query(None, ge=100, le=599, description="Minimum status code"),
    status_max: Optional[int] = Query(None, ge=100, le=599, description="Maximum status code"),
    search: Optional[str] = Query(None, description="Search term for filtering logs"),
    log_service: LogService = Depends(get_log_service),
) -> List[LogRead]:
    """Get recent request logs with pagination and filtering."""
    if status_min is not None and status_max is not None and status_min > status_max:
        raise HTTPException(status_code=400, detail="status_min cannot be greater than status_max")

    filters = dict(hours=hours, status_min=status_min, status_max=status_max, search=search)
    logs = log_service.get_logs_with_filters(limit=limit, offset=offset, **filters)

    # Pagination headers
    response.headers["X-Total-Count"] = str(log_service.get_logs_count_with_filters(**filters))
    response.headers["X-Page-Size"] = str(limit)
    response.headers["X-Page-Offset"] = str(offset)
    return logs


@router.get("/{log_id}", response_model=LogRead)
def get_log(log_id: int, log_service: LogService = Depends(get_log_service)) -> LogRead:
    log = log_service.get_log(log_id)
    if log is None:
        raise HTTPException(status_code=404, detail="Log not found")
    return log
