"""API router for the reporting module."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.core.dependencies import CurrentUserDep, DSSessionDep, SessionDep
from app.reporting.column_preferences import ColumnPreferences
from app.reporting.dao import ColumnPreferenceDAO, ExecutionLogDAO, TemplateDAO
from app.reporting.data_client import SqlAlchemyDataClient
from app.reporting.executor import ReportExecutor
from app.reporting.schemas import (
    ColumnPreferencesRead,
    DataSourceRead,
    ExecutionLogRead,
    ExportRequest,
    FieldRead,
    ReportRunResponse,
    RunReportRequest,
    RunTemplateRequest,
    TemplateCreate,
    TemplateRead,
    TemplateUpdate,
)
from app.reporting.service import ReportService
from app.reporting.templates import TemplateRegistry

router = APIRouter(prefix="/reports", tags=["reporting"])


# Dependency functions
def get_execution_log_dao(db: SessionDep) -> ExecutionLogDAO:
    return ExecutionLogDAO(db)


def get_report_executor(
    ds_db: DSSessionDep, execution_log: ExecutionLogDAO = Depends(get_execution_log_dao)
) -> ReportExecutor:
    return ReportExecutor(SqlAlchemyDataClient(ds_db), execution_log=execution_log)


def get_template_registry(db: SessionDep) -> TemplateRegistry:
    return TemplateRegistry(TemplateDAO(db))


def get_report_service(
    db: SessionDep,
    user_id: CurrentUserDep,
    registry: TemplateRegistry = Depends(get_template_registry),
    executor: ReportExecutor = Depends(get_report_executor),
    execution_log_dao: ExecutionLogDAO = Depends(get_execution_log_dao),
) -> ReportService:
    return ReportService(
        registry,
        executor,
        preference_store=ColumnPreferenceDAO(db, user_id or "anonymous"),
        execution_log_dao=execution_log_dao,
    )


# ===== CATALOG ENDPOINTS =====


@router.get("/data-sources", response_model=List[DataSourceRead])
async def get_data_sources(service: ReportService = Depends(get_report_service)) -> List[DataSourceRead]:
    """Get all reportable data sources."""
    return service.get_data_sources()


@router.get("/fields/{data_source}", response_model=List[FieldRead])
async def get_fields(data_source: str, service: ReportService = Depends(get_report_service)) -> List[FieldRead]:
    """Get the field catalog of a data source."""
    return service.get_fields(data_source)


@router.get("/operators/{field_type}", response_model=List[str])
async def get_operators(field_type: str, service: ReportService = Depends(get_report_service)) -> List[str]:
    """Get the filter operators legal for a field type."""
    return service.get_operators(field_type)


# ===== TEMPLATE ENDPOINTS =====


@router.get("/templates", response_model=List[TemplateRead])
async def list_templates(
    user_id: CurrentUserDep,
    category: Optional[str] = Query(None, description="standard, custom or ai-generated"),
    service: ReportService = Depends(get_report_service),
) -> List[TemplateRead]:
    """List standard templates and the requesting user's own templates."""
    return await service.list_templates(category=category, user_id=user_id)


@router.get("/templates/{template_id}", response_model=TemplateRead)
async def get_template(
    template_id: str, user_id: CurrentUserDep, service: ReportService = Depends(get_report_service)
) -> TemplateRead:
    return await service.get_template(template_id, user_id)


@router.post("/templates", response_model=TemplateRead, status_code=201)
async def create_template(
    template_in: TemplateCreate, user_id: CurrentUserDep, service: ReportService = Depends(get_report_service)
) -> TemplateRead:
    """Save a configuration as a custom template."""
    return await service.create_template(template_in, user_id)


@router.put("/templates/{template_id}", response_model=TemplateRead)
async def update_template(
    template_id: str,
    template_in: TemplateUpdate,
    user_id: CurrentUserDep,
    service: ReportService = Depends(get_report_service),
) -> TemplateRead:
    return await service.update_template(template_id, template_in, user_id)


@router.delete("/templates/{template_id}", status_code=204)
async def delete_template(
    template_id: str, user_id: CurrentUserDep, service: ReportService = Depends(get_report_service)
) -> Response:
    await service.delete_template(template_id, user_id)
    return Response(status_code=204)


# ===== EXECUTION ENDPOINTS =====


@router.post("/templates/{template_id}/run", response_model=ReportRunResponse)
async def run_template(
    template_id: str,
    user_id: CurrentUserDep,
    request: Optional[RunTemplateRequest] = None,
    service: ReportService = Depends(get_report_service),
) -> ReportRunResponse:
    """Instantiate a template and run it."""
    request_token = request.request_token if request else None
    return await service.run_template(template_id, user_id=user_id, request_token=request_token)


@router.post("/run", response_model=ReportRunResponse)
async def run_report(
    request: RunReportRequest, user_id: CurrentUserDep, service: ReportService = Depends(get_report_service)
) -> ReportRunResponse:
    """Run an ad-hoc configuration."""
    return await service.run_configuration(request.config, user_id=user_id, request_token=request.request_token)


@router.get("/executions", response_model=List[ExecutionLogRead])
async def get_recent_executions(
    user_id: CurrentUserDep,
    limit: int = Query(50, ge=1, le=500),
    service: ReportService = Depends(get_report_service),
) -> List[ExecutionLogRead]:
    """Recent executions of the requesting user; empty without X-User-Id."""
    return service.get_recent_executions(limit=limit, user_id=user_id)


# ===== EXPORT ENDPOINTS =====


@router.post("/export")
async def export_report(request: ExportRequest, service: ReportService = Depends(get_report_service)) -> Response:
    """Shape rows and return them as a CSV or Excel download."""
    artifact = service.export_rows(request)
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f"attachment; filename={artifact.filename}"},
    )


# ===== COLUMN PREFERENCE ENDPOINTS =====


@router.get("/column-preferences/{view_key}", response_model=ColumnPreferencesRead)
async def get_column_preferences(
    view_key: str, service: ReportService = Depends(get_report_service)
) -> ColumnPreferencesRead:
    return service.get_column_preferences(view_key)


@router.put("/column-preferences/{view_key}", response_model=ColumnPreferencesRead)
async def save_column_preferences(
    view_key: str, preferences: ColumnPreferences, service: ReportService = Depends(get_report_service)
) -> ColumnPreferencesRead:
    return service.save_column_preferences(view_key, preferences)
