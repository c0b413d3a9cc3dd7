# app/reporting/service.py
"""Reporting service: maps report engine operations onto the HTTP layer."""

import logging
from typing import List, Optional

from fastapi import HTTPException

from app.reporting.column_preferences import ColumnPreferences, ColumnPreferenceStore
from app.reporting.configuration import ReportConfiguration, field_key
from app.reporting.dao import ExecutionLogDAO
from app.reporting.exceptions import ConfigurationError, ExportError, TemplateError, TemplateNotFoundError
from app.reporting.executor import ReportExecutor
from app.reporting.export import ExportArtifact, export
from app.reporting.field_catalog import DATA_SOURCE_LABELS, DataSource, FieldMetadata, FieldType, fields_for, resolve_field
from app.reporting.filters import FilterPredicate, new_filter_id, operators_for
from app.reporting.schemas import (
    ColumnPreferencesRead,
    DataSourceRead,
    ExecutionLogRead,
    ExportRequest,
    FieldRead,
    ReportConfigIn,
    ReportRunResponse,
    TemplateCreate,
    TemplateRead,
    TemplateUpdate,
)
from app.reporting.shaper import compute_totals, shape, sort_rows
from app.reporting.templates import ReportTemplate, TemplateRegistry, instantiate, normalize_field_order

logger = logging.getLogger(__name__)


def _data_source(value: str) -> DataSource:
    try:
        return DataSource(value)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown data source: {value}")


def _field_read(field: FieldMetadata) -> FieldRead:
    return FieldRead(key=field.key, label=field.label, type=field.type, group=field.group, help_text=field.help_text)


class ReportService:
    """Service layer over the template registry, executor and preference store."""

    def __init__(
        self,
        registry: TemplateRegistry,
        executor: ReportExecutor,
        preference_store: Optional[ColumnPreferenceStore] = None,
        execution_log_dao: Optional[ExecutionLogDAO] = None,
    ):
        self.registry = registry
        self.executor = executor
        self.preference_store = preference_store
        self.execution_log_dao = execution_log_dao

    # ===== CATALOG =====

    def get_data_sources(self) -> List[DataSourceRead]:
        return [DataSourceRead(value=source.value, label=DATA_SOURCE_LABELS[source]) for source in DataSource]

    def get_fields(self, data_source: str) -> List[FieldRead]:
        return [_field_read(field) for field in fields_for(_data_source(data_source))]

    def get_operators(self, field_type: str) -> List[str]:
        try:
            field_type = FieldType(field_type)
        except ValueError:
            raise HTTPException(status_code=404, detail=f"Unknown field type: {field_type}")
        return sorted(operator.value for operator in operators_for(field_type))

    # ===== EXECUTION =====

    @staticmethod
    def build_configuration(config_in: ReportConfigIn) -> ReportConfiguration:
        """Builder path: unknown field keys and structural errors are rejected with 422."""
        try:
            return ReportConfiguration.build(
                data_source=config_in.data_source,
                fields=config_in.fields,
                filters=[
                    FilterPredicate(field=f.field, operator=f.operator, value=f.value, id=f.id or new_filter_id())
                    for f in config_in.filters
                ],
                sort_by=config_in.sort_by,
                sort_direction=config_in.sort_dir,
                limit=config_in.limit,
            )
        except ConfigurationError as e:
            raise HTTPException(status_code=422, detail=str(e))

    async def run_configuration(
        self, config_in: ReportConfigIn, user_id: Optional[str] = None, request_token: Optional[int] = None
    ) -> ReportRunResponse:
        config = self.build_configuration(config_in)
        fields = [resolve_field(config.data_source, key) for key in config.fields]
        return await self._run(config, fields, user_id, request_token)

    async def run_template(
        self, template_id: str, user_id: Optional[str] = None, request_token: Optional[int] = None
    ) -> ReportRunResponse:
        template = await self._get_template(template_id, user_id)
        config, fields = self._instantiate(template)
        return await self._run(config, fields, user_id, request_token, template_id=template.id)

    async def _run(
        self,
        config: ReportConfiguration,
        fields: List[FieldMetadata],
        user_id: Optional[str],
        request_token: Optional[int],
        template_id: Optional[str] = None,
    ) -> ReportRunResponse:
        result = await self.executor.execute(config, template_id=template_id, user_id=user_id)
        if result is None:
            raise HTTPException(status_code=502, detail="Could not run report")

        return ReportRunResponse(
            request_token=request_token,
            template_id=template_id,
            data_source=config.data_source.value,
            fields=[_field_read(field) for field in fields],
            rows=result.rows,
            formatted_rows=shape(result.rows, fields),
            totals=compute_totals(result.rows, fields),
            row_count=result.row_count,
            execution_time_ms=result.execution_time_ms,
            executed_at=result.executed_at,
        )

    # ===== TEMPLATES =====

    async def list_templates(self, category: Optional[str] = None, user_id: Optional[str] = None) -> List[TemplateRead]:
        try:
            templates = await self.registry.list_templates(category=category, user_id=user_id)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown template category: {category}")
        return [self._template_read(template) for template in templates]

    async def get_template(self, template_id: str, user_id: Optional[str] = None) -> TemplateRead:
        return self._template_read(await self._get_template(template_id, user_id))

    async def create_template(self, template_in: TemplateCreate, user_id: Optional[str]) -> TemplateRead:
        if not user_id:
            raise HTTPException(status_code=401, detail="X-User-Id header is required")
        config = self.build_configuration(template_in.config)
        try:
            template = await self.registry.save(
                name=template_in.name,
                config=config,
                fields=list(config.fields),
                user_id=user_id,
                description=template_in.description,
                category=template_in.category,
                group=template_in.group,
            )
        except TemplateError as e:
            raise HTTPException(status_code=403, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return self._template_read(template)

    async def update_template(self, template_id: str, template_in: TemplateUpdate, user_id: Optional[str]) -> TemplateRead:
        config = self.build_configuration(template_in.config) if template_in.config else None
        try:
            template = await self.registry.update(
                template_id,
                user_id,
                name=template_in.name,
                config=config,
                description=template_in.description,
            )
        except TemplateNotFoundError:
            raise HTTPException(status_code=404, detail="Template not found")
        except TemplateError as e:
            raise HTTPException(status_code=403, detail=str(e))
        return self._template_read(template)

    async def delete_template(self, template_id: str, user_id: Optional[str]) -> None:
        try:
            await self.registry.delete(template_id, user_id)
        except TemplateNotFoundError:
            raise HTTPException(status_code=404, detail="Template not found")
        except TemplateError as e:
            raise HTTPException(status_code=403, detail=str(e))

    async def _get_template(self, template_id: str, user_id: Optional[str]) -> ReportTemplate:
        try:
            return await self.registry.get_template(template_id, user_id)
        except TemplateNotFoundError:
            raise HTTPException(status_code=404, detail="Template not found")

    @staticmethod
    def _instantiate(template: ReportTemplate):
        try:
            return instantiate(template)
        except ConfigurationError as e:
            logger.error("Template %s cannot be instantiated: %s", template.id, e)
            raise HTTPException(status_code=422, detail=f"Template is not runnable: {e}")

    @staticmethod
    def _template_read(template: ReportTemplate) -> TemplateRead:
        keys = [key for key in (field_key(entry) for entry in template.fields) if key]
        keys = normalize_field_order(template.data_source, keys)
        return TemplateRead(
            id=template.id,
            name=template.name,
            category=template.category.value,
            group=template.group.value,
            description=template.description,
            data_source=template.data_source,
            owner_id=template.owner_id,
            config=template.config,
            fields=[_field_read(resolve_field(template.data_source, key)) for key in keys],
        )

    # ===== EXPORT =====

    def export_rows(self, export_request: ExportRequest) -> ExportArtifact:
        data_source = _data_source(export_request.data_source)
        fields = [resolve_field(data_source, key) for key in export_request.fields]
        rows = export_request.rows
        if export_request.sort_by:
            rows = sort_rows(rows, fields, export_request.sort_by, export_request.sort_dir)
        try:
            return export(
                shape(rows, fields),
                fields,
                export_request.report_name,
                export_request.format,
            )
        except ExportError as e:
            logger.error("Export failed: %s", e)
            raise HTTPException(status_code=500, detail="Could not export report")

    # ===== COLUMN PREFERENCES =====

    def get_column_preferences(self, view_key: str) -> ColumnPreferencesRead:
        preferences = self.preference_store.read(view_key) or ColumnPreferences()
        return ColumnPreferencesRead(view_key=view_key, **preferences.model_dump())

    def save_column_preferences(self, view_key: str, preferences: ColumnPreferences) -> ColumnPreferencesRead:
        saved = self.preference_store.write(view_key, preferences)
        return ColumnPreferencesRead(view_key=view_key, **saved.model_dump())

    # ===== EXECUTION LOG =====

    def get_recent_executions(self, limit: int = 50, user_id: Optional[str] = None) -> List[ExecutionLogRead]:
        if not user_id:
            return []
        logs = self.execution_log_dao.get_recent_executions(limit=limit, executed_by=user_id)
        return [ExecutionLogRead.model_validate(log) for log in logs]
