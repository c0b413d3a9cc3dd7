"""Data Access Objects for the reporting module."""

from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.base_dao import BaseDAO
from app.reporting.column_preferences import ColumnPreferences, ColumnPreferenceStore
from app.reporting.models import ColumnPreferenceRecord, ReportExecutionLog, SavedReport


class TemplateDAO:
    """DAO for saved report templates."""

    def __init__(self, db_session: Session):
        self.db = db_session

    async def get_for_owner(self, owner_id: str, category: Optional[str] = None) -> List[SavedReport]:
        """Templates saved by one user, newest first."""
        stmt = select(SavedReport).where(SavedReport.owner_id == owner_id)
        if category:
            stmt = stmt.where(SavedReport.category == category)
        stmt = stmt.order_by(SavedReport.created_at.desc(), SavedReport.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    async def get_by_id(self, template_id: int) -> Optional[SavedReport]:
        return self.db.get(SavedReport, template_id)

    async def create(self, **data) -> SavedReport:
        record = SavedReport(**data)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    async def update(self, record: SavedReport, **data) -> SavedReport:
        for field, value in data.items():
            setattr(record, field, value)
        self.db.commit()
        self.db.refresh(record)
        return record

    async def delete(self, template_id: int) -> bool:
        record = self.db.get(SavedReport, template_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.commit()
        return True


class ColumnPreferenceDAO(BaseDAO[ColumnPreferenceRecord], ColumnPreferenceStore):
    """Column preferences of one user, keyed by view."""

    def __init__(self, db_session: Session, user_id: str):
        super().__init__(ColumnPreferenceRecord, db_session)
        self.user_id = user_id

    def _record(self, view_key: str) -> Optional[ColumnPreferenceRecord]:
        stmt = select(self.model).where(self.model.user_id == self.user_id, self.model.view_key == view_key)
        return self.db.execute(stmt).scalars().first()

    def read(self, view_key: str) -> Optional[ColumnPreferences]:
        record = self._record(view_key)
        if record is None:
            return None
        return ColumnPreferences(order=record.column_order or [], hidden=record.hidden_columns or [])

    def write(self, view_key: str, preferences: ColumnPreferences) -> ColumnPreferences:
        record = self._record(view_key)
        data = {"column_order": list(preferences.order), "hidden_columns": list(preferences.hidden)}
        if record is None:
            record = self.create(user_id=self.user_id, view_key=view_key, **data)
        else:
            record = self.update(record, **data)
        return ColumnPreferences(order=record.column_order, hidden=record.hidden_columns)


class ExecutionLogDAO(BaseDAO[ReportExecutionLog]):
    """DAO for report execution log operations."""

    def __init__(self, db_session: Session):
        super().__init__(ReportExecutionLog, db_session)

    def record(self, **data) -> ReportExecutionLog:
        """Create a new execution log entry."""
        try:
            return self.create(**data)
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def get_recent_executions(self, limit: int = 100, executed_by: Optional[str] = None) -> List[ReportExecutionLog]:
        """Most recent executions first, optionally for one user."""
        stmt = select(self.model)
        if executed_by:
            stmt = stmt.where(self.model.executed_by == executed_by)
        stmt = stmt.order_by(desc(self.model.executed_at), desc(self.model.id)).limit(limit)
        return list(self.db.execute(stmt).scalars().all())
