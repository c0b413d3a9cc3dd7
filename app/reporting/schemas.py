"""Pydantic schemas for the reporting API."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from app.core.config import REPORT_DEFAULT_LIMIT
from app.reporting.column_preferences import ColumnPreferences
from app.reporting.configuration import SortDirection
from app.reporting.export import ExportFormat
from app.reporting.field_catalog import FieldType


# ===== CATALOG SCHEMAS =====


class DataSourceRead(BaseModel):
    value: str
    label: str


class FieldRead(BaseModel):
    """One field of a data source."""

    key: str
    label: str
    type: FieldType
    group: Optional[str] = None
    help_text: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ===== CONFIGURATION SCHEMAS =====


class FilterIn(BaseModel):
    """Filter predicate as sent by a client. Invalid predicates are dropped at execution."""

    id: Optional[str] = None
    field: str
    operator: str
    value: Any = None


class ReportConfigIn(BaseModel):
    data_source: str
    fields: List[str]
    filters: List[FilterIn] = []
    sort_by: str = "created_at"
    sort_dir: str = "desc"
    limit: int = REPORT_DEFAULT_LIMIT

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v):
        if not v:
            raise ValueError("At least one field must be selected")
        return v


class RunReportRequest(BaseModel):
    config: ReportConfigIn
    request_token: Optional[int] = None


class RunTemplateRequest(BaseModel):
    request_token: Optional[int] = None


class ReportRunResponse(BaseModel):
    """Result of one execution: raw rows for client-side work and their display strings."""

    request_token: Optional[int] = None
    template_id: Optional[str] = None
    data_source: str
    fields: List[FieldRead]
    rows: List[Dict[str, Any]]
    formatted_rows: List[Dict[str, str]]
    totals: Dict[str, Optional[float]]
    row_count: int
    execution_time_ms: float
    executed_at: datetime


# ===== TEMPLATE SCHEMAS =====


class TemplateCreate(BaseModel):
    name: str
    description: Optional[str] = None
    category: str = "custom"
    group: str = "other"
    config: ReportConfigIn

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Template name cannot be empty")
        return v.strip()


class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    config: Optional[ReportConfigIn] = None


class TemplateRead(BaseModel):
    id: str
    name: str
    category: str
    group: str
    description: Optional[str] = None
    data_source: Optional[str] = None
    owner_id: Optional[str] = None
    config: Dict[str, Any]
    fields: List[FieldRead]


# ===== EXPORT SCHEMAS =====


class ExportRequest(BaseModel):
    """Raw rows to shape and serialize; usually the rows of a previous run, optionally re-sorted."""

    report_name: str = "Report"
    format: ExportFormat = ExportFormat.CSV
    data_source: str
    fields: List[str]
    rows: List[Dict[str, Any]] = []
    sort_by: Optional[str] = None
    sort_dir: SortDirection = SortDirection.ASC


# ===== PREFERENCES AND LOGS =====


class ColumnPreferencesRead(ColumnPreferences):
    view_key: str


class ExecutionLogRead(BaseModel):
    id: int
    data_source: str
    template_id: Optional[str] = None
    executed_by: Optional[str] = None
    execution_time_ms: Optional[float] = None
    row_count: Optional[int] = None
    success: bool
    error_message: Optional[str] = None
    executed_at: datetime

    model_config = ConfigDict(from_attributes=True)
