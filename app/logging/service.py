# app/logging/service.py
"""Service layer for the logging module."""

from typing import List, Optional

from app.logging.dao import LogDAO
from app.logging.schemas import LogRead


class LogService:
    """Service for retrieving log data."""

    def __init__(self, log_dao: LogDAO):
        self.dao = log_dao

    def get_log(self, log_id: int) -> Optional[LogRead]:
        log = self.dao.get_by_id(log_id)
        return LogRead.model_validate(log) if log else None

    def get_logs_with_filters(self, **filters) -> List[LogRead]:
        return [LogRead.model_validate(log) for log in self.dao.get_logs_with_filters(**filters)]

    def get_logs_count_with_filters(self, **filters) -> int:
        return self.dao.count_logs_with_filters(**filters)
