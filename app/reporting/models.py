# app/reporting/models.py
"""Config-database models for saved templates, column preferences and execution logs."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text, UniqueConstraint

from app.core.database import Base


class SavedReport(Base):
    """User-saved report template (custom or ai-generated)."""

    __tablename__ = "saved_reports"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False, default="custom")  # 'custom' or 'ai-generated'
    group_name = Column(String, nullable=True)
    data_source = Column(String, nullable=False)
    config = Column(JSON, nullable=False)
    fields = Column(JSON, nullable=False)  # ordered field keys
    owner_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class ColumnPreferenceRecord(Base):
    """Column order and visibility of one report view for one user."""

    __tablename__ = "column_preferences"
    __table_args__ = (UniqueConstraint("user_id", "view_key", name="uq_column_preferences_user_view"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    view_key = Column(String, nullable=False)
    column_order = Column(JSON, nullable=False, default=list)
    hidden_columns = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class ReportExecutionLog(Base):
    """Log of report executions with performance metrics."""

    __tablename__ = "report_execution_logs"

    id = Column(Integer, primary_key=True, index=True)
    data_source = Column(String, nullable=False)
    template_id = Column(String, nullable=True)
    executed_by = Column(String, nullable=True)
    execution_time_ms = Column(Float, nullable=True)
    row_count = Column(Integer, nullable=True)
    success = Column(Boolean, nullable=False)
    error_message = Column(String, nullable=True)
    executed_at = Column(DateTime, default=datetime.now)
