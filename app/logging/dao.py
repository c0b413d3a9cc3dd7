# app/logging/dao.py
"""Data Access Objects for the logging module."""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.orm import Session

from app.core.base_dao import BaseDAO
from app.logging.models import Log


class LogDAO(BaseDAO[Log]):
    """DAO for Log operations."""

    def __init__(self, db_session: Session):
        super().__init__(Log, db_session)

    def _filtered(self, query, hours: int, status_min: Optional[int], status_max: Optional[int], search: Optional[str]):
        time_threshold = datetime.now() - timedelta(hours=hours)
        query = query.where(self.model.timestamp >= time_threshold)

        if status_min is not None:
            query = query.where(self.model.status_code >= status_min)
        if status_max is not None:
            query = query.where(self.model.status_code <= status_max)

        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    self.model.path.ilike(search_term),
                    self.model.method.ilike(search_term),
                    self.model.user_id.ilike(search_term),
                    self.model.username.ilike(search_term),
                    cast(self.model.status_code, String).ilike(search_term),
                )
            )
        return query

    def get_logs_with_filters(
        self,
        limit: int = 50,
        offset: int = 0,
        hours: int = 24,
        status_min: Optional[int] = None,
        status_max: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[Log]:
        """Logs within the last `hours`, newest first."""
        query = self._filtered(select(self.model), hours, status_min, status_max, search)
        query = query.order_by(self.model.timestamp.desc(), self.model.id.desc()).offset(offset).limit(limit)
        return list(self.db.execute(query).scalars().all())

    def count_logs_with_filters(
        self,
        hours: int = 24,
        status_min: Optional[int] = None,
        status_max: Optional[int] = None,
        search: Optional[str] = None,
    ) -> int:
        query = self._filtered(select(func.count()).select_from(self.model), hours, status_min, status_max, search)
        return self.db.execute(query).scalar() or 0
