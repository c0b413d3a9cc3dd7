# app/reporting/templates.py
"""
Template registry: standard (bundled, read-only) and user-saved report templates.

A template is a stored configuration plus its field list. Instantiating one
rehydrates the configuration leniently: field keys that have since left the
catalog are kept and rendered with a humanized label, and identifier fields
are placed directly before the name fields they identify.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from app.reporting.configuration import ReportConfiguration, field_key
from app.reporting.exceptions import TemplateError, TemplateNotFoundError
from app.reporting.field_catalog import DataSource, FieldMetadata, get_field, resolve_field

logger = logging.getLogger(__name__)

STANDARD_PREFIX = "std-"


class TemplateCategory(str, Enum):
    STANDARD = "standard"
    CUSTOM = "custom"
    AI_GENERATED = "ai-generated"


class TemplateGroup(str, Enum):
    """Gallery grouping of templates."""

    FINANCIAL = "financial"
    OPERATIONAL = "operational"
    COST = "cost"
    LABOR = "labor"
    VENDOR = "vendor"
    OTHER = "other"


@dataclass(frozen=True)
class ReportTemplate:
    """A named, persisted configuration plus its field list."""

    id: str
    name: str
    category: TemplateCategory
    config: Dict[str, Any]
    fields: Tuple[str, ...]
    description: Optional[str] = None
    group: TemplateGroup = TemplateGroup.OTHER
    owner_id: Optional[str] = None

    @property
    def data_source(self) -> Optional[str]:
        return self.config.get("data_source")

    @property
    def is_standard(self) -> bool:
        return self.category == TemplateCategory.STANDARD


def _standard(
    slug: str,
    name: str,
    description: str,
    group: TemplateGroup,
    data_source: DataSource,
    fields: Sequence[str],
    sort_by: str,
    sort_dir: str = "DESC",
    limit: int = 100,
    filters: Optional[Dict[str, Any]] = None,
) -> ReportTemplate:
    return ReportTemplate(
        id=f"{STANDARD_PREFIX}{slug}",
        name=name,
        category=TemplateCategory.STANDARD,
        config={
            "data_source": data_source.value,
            "fields": list(fields),
            "filters": filters or {},
            "sort_by": sort_by,
            "sort_dir": sort_dir,
            "limit": limit,
        },
        fields=tuple(fields),
        description=description,
        group=group,
    )


STANDARD_TEMPLATES: Tuple[ReportTemplate, ...] = (
    _standard(
        "budget-vs-actual",
        "Budget vs Actual by Project",
        "Compare estimated costs to actual expenses for each project with variance analysis",
        TemplateGroup.FINANCIAL,
        DataSource.PROJECTS,
        ["project_number", "project_name", "client_name", "estimate_cost", "total_expenses",
         "cost_variance", "cost_variance_percent", "status"],
        sort_by="cost_variance_percent",
    ),
    _standard(
        "project-profitability",
        "Project Profitability Analysis",
        "Analyze profit margins and financial performance across all projects",
        TemplateGroup.FINANCIAL,
        DataSource.PROJECTS,
        ["project_number", "project_name", "client_name", "contracted_amount", "total_expenses",
         "current_margin", "margin_percentage", "status"],
        sort_by="margin_percentage",
    ),
    _standard(
        "cost-variance",
        "Cost Variance Report",
        "Track cost overruns and savings by project with detailed variance metrics",
        TemplateGroup.COST,
        DataSource.PROJECTS,
        ["project_number", "project_name", "estimate_cost", "total_expenses", "cost_variance",
         "cost_variance_percent", "status"],
        sort_by="cost_variance",
    ),
    _standard(
        "active-projects",
        "Active Projects Dashboard",
        "Overview of current projects with budget tracking and expense monitoring",
        TemplateGroup.OPERATIONAL,
        DataSource.PROJECTS,
        ["project_number", "project_name", "client_name", "status", "contracted_amount",
         "total_expenses", "margin_percentage", "budget_utilization_percent"],
        sort_by="project_number",
        sort_dir="ASC",
        filters={"std_active_status": {"field": "status", "operator": "in", "value": ["in_progress", "approved"]}},
    ),
    _standard(
        "projects-summary",
        "Projects Summary",
        "Comprehensive overview of all projects organized by status",
        TemplateGroup.OPERATIONAL,
        DataSource.PROJECTS,
        ["project_number", "project_name", "client_name", "status", "start_date", "end_date",
         "contracted_amount", "total_expenses"],
        sort_by="created_at",
    ),
    _standard(
        "contingency-utilization",
        "Contingency Utilization",
        "Track contingency fund usage and remaining contingency across projects",
        TemplateGroup.OPERATIONAL,
        DataSource.PROJECTS,
        ["project_number", "project_name", "contingency_amount", "contingency_remaining",
         "contingency_utilization_percent", "status"],
        sort_by="contingency_utilization_percent",
    ),
    _standard(
        "expenses-by-category",
        "Expense Report by Category",
        "Detailed breakdown of expenses by category, project, and approval status",
        TemplateGroup.COST,
        DataSource.EXPENSES,
        ["project_name", "category", "expense_date", "amount", "payee_name", "description", "approval_status"],
        sort_by="expense_date",
        limit=500,
    ),
    _standard(
        "quote-comparison",
        "Quote Comparison",
        "Compare vendor quotes by project with pricing and status analysis",
        TemplateGroup.VENDOR,
        DataSource.QUOTES,
        ["project_name", "quote_number", "payee_name", "total_amount", "status", "date_received", "date_expires"],
        sort_by="date_received",
        limit=200,
    ),
    _standard(
        "change-order-impact",
        "Change Order Impact Analysis",
        "Analyze the effects of change orders on project budgets and margins",
        TemplateGroup.FINANCIAL,
        DataSource.PROJECTS,
        ["project_number", "project_name", "change_order_revenue", "change_order_cost",
         "change_order_count", "contracted_amount", "current_margin"],
        sort_by="change_order_revenue",
        filters={"std_has_change_orders": {"field": "change_order_count", "operator": "greater_than", "value": "0"}},
    ),
    _standard(
        "time-entries-summary",
        "Time Entries Summary",
        "Labor hours and costs by employee, project, and approval status",
        TemplateGroup.LABOR,
        DataSource.TIME_ENTRIES,
        ["worker_name", "project_name", "expense_date", "hours", "hourly_rate", "amount", "approval_status"],
        sort_by="expense_date",
        limit=500,
    ),
    _standard(
        "internal-labor-costs",
        "Internal Labor Costs",
        "Track internal labor expenses by project with detailed cost breakdown",
        TemplateGroup.LABOR,
        DataSource.INTERNAL_COSTS,
        ["project_name", "category", "worker_name", "hours", "amount", "expense_date", "approval_status"],
        sort_by="expense_date",
        limit=500,
    ),
)


def normalize_field_order(data_source: Union[DataSource, str], keys: Sequence[str]) -> List[str]:
    """Place `<x>_number` directly before every `<x>_name` when the catalog has it.

    The number field is inserted when missing and moved when it sits
    anywhere other than immediately before the name.
    """
    ordered = list(dict.fromkeys(keys))
    for key in list(ordered):
        if not key.endswith("_name"):
            continue
        number_key = key[: -len("_name")] + "_number"
        if get_field(data_source, number_key) is None:
            continue
        if number_key in ordered:
            ordered.remove(number_key)
        ordered.insert(ordered.index(key), number_key)
    return ordered


def instantiate(template: ReportTemplate) -> Tuple[ReportConfiguration, List[FieldMetadata]]:
    """Rehydrate a template into a configuration and display fields."""
    data_source = template.data_source
    keys = [key for key in (field_key(entry) for entry in template.fields) if key]
    if not keys:
        keys = [key for key in (field_key(entry) for entry in template.config.get("fields") or []) if key]

    keys = normalize_field_order(data_source, keys)
    config = ReportConfiguration.from_dict(template.config, fields=keys)
    fields = [resolve_field(config.data_source, key) for key in keys]

    drifted = [field.key for field in fields if get_field(config.data_source, field.key) is None]
    if drifted:
        logger.info("Template %s references fields missing from the catalog: %s", template.id, drifted)
    return config, fields


class TemplateRegistry:
    """Lists, loads, saves and deletes templates for a requesting user."""

    def __init__(self, template_dao, standard_templates: Sequence[ReportTemplate] = STANDARD_TEMPLATES):
        self.template_dao = template_dao
        self.standard_templates = {template.id: template for template in standard_templates}

    async def list_templates(
        self, category: Optional[Union[TemplateCategory, str]] = None, user_id: Optional[str] = None
    ) -> List[ReportTemplate]:
        """Standard templates plus the user's own, optionally limited to one category."""
        category = TemplateCategory(category) if category else None

        templates: List[ReportTemplate] = []
        if category in (None, TemplateCategory.STANDARD):
            templates.extend(self.standard_templates.values())
        if category != TemplateCategory.STANDARD and user_id:
            records = await self.template_dao.get_for_owner(
                user_id, category=category.value if category else None
            )
            templates.extend(self._from_record(record) for record in records)
        return templates

    async def get_template(self, template_id: str, user_id: Optional[str] = None) -> ReportTemplate:
        if template_id.startswith(STANDARD_PREFIX):
            template = self.standard_templates.get(template_id)
            if template is None:
                raise TemplateNotFoundError(f"Template {template_id} not found")
            return template

        record = await self._owned_record(template_id, user_id)
        return self._from_record(record)

    async def save(
        self,
        name: str,
        config: ReportConfiguration,
        fields: Sequence[Union[FieldMetadata, str]],
        user_id: str,
        description: Optional[str] = None,
        category: Union[TemplateCategory, str] = TemplateCategory.CUSTOM,
        group: Union[TemplateGroup, str] = TemplateGroup.OTHER,
    ) -> ReportTemplate:
        category = TemplateCategory(category)
        if category == TemplateCategory.STANDARD:
            raise TemplateError("Standard templates are read-only")
        if not name or not name.strip():
            raise TemplateError("Template name is required")
        if not user_id:
            raise TemplateError("Saving a template requires a user")

        keys = [getattr(f, "key", f) for f in fields] or list(config.fields)
        record = await self.template_dao.create(
            name=name.strip(),
            description=description,
            category=category.value,
            group_name=TemplateGroup(group).value,
            data_source=config.data_source.value,
            config=config.set_fields(keys).to_dict(),
            fields=keys,
            owner_id=user_id,
        )
        logger.info("Saved template %s (%s) for user %s", record.id, record.name, user_id)
        return self._from_record(record)

    async def update(
        self,
        template_id: str,
        user_id: str,
        name: Optional[str] = None,
        config: Optional[ReportConfiguration] = None,
        fields: Optional[Sequence[Union[FieldMetadata, str]]] = None,
        description: Optional[str] = None,
    ) -> ReportTemplate:
        if template_id.startswith(STANDARD_PREFIX):
            raise TemplateError("Standard templates cannot be overwritten")
        record = await self._owned_record(template_id, user_id)

        data: Dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                raise TemplateError("Template name is required")
            data["name"] = name.strip()
        if description is not None:
            data["description"] = description
        if config is not None or fields is not None:
            config = config or ReportConfiguration.from_dict(record.config)
            keys = [getattr(f, "key", f) for f in fields] if fields else list(config.fields)
            data.update(
                data_source=config.data_source.value,
                config=config.set_fields(keys).to_dict(),
                fields=keys,
            )
        record = await self.template_dao.update(record, **data)
        return self._from_record(record)

    async def delete(self, template_id: str, user_id: str) -> None:
        if template_id.startswith(STANDARD_PREFIX):
            raise TemplateError("Standard templates cannot be deleted")
        record = await self._owned_record(template_id, user_id)
        await self.template_dao.delete(record.id)
        logger.info("Deleted template %s for user %s", template_id, user_id)

    async def _owned_record(self, template_id: str, user_id: Optional[str]):
        try:
            record_id = int(template_id)
        except (TypeError, ValueError):
            raise TemplateNotFoundError(f"Template {template_id} not found")
        record = await self.template_dao.get_by_id(record_id)
        if record is None or record.owner_id != user_id:
            raise TemplateNotFoundError(f"Template {template_id} not found")
        return record

    @staticmethod
    def _from_record(record) -> ReportTemplate:
        try:
            group = TemplateGroup(record.group_name)
        except ValueError:
            group = TemplateGroup.OTHER
        return ReportTemplate(
            id=str(record.id),
            name=record.name,
            category=TemplateCategory(record.category),
            config=dict(record.config or {}),
            fields=tuple(record.fields or ()),
            description=record.description,
            group=group,
            owner_id=record.owner_id,
        )
