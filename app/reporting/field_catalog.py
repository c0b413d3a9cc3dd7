# app/reporting/field_catalog.py
"""Field catalog: the reportable fields of every data source.

The catalog is the single source of truth for how a field is labelled,
filtered, sorted and formatted. It is consulted by the filter model, the
result shaper, the template registry and the builder endpoints.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


class FieldType(str, Enum):
    """Semantic type of a reportable field."""

    TEXT = "text"
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENT = "percent"
    DATE = "date"
    BOOLEAN = "boolean"


class DataSource(str, Enum):
    """Logical entities exposed to the report engine."""

    PROJECTS = "projects"
    EXPENSES = "expenses"
    QUOTES = "quotes"
    TIME_ENTRIES = "time_entries"
    ESTIMATE_LINE_ITEMS = "estimate_line_items"
    INTERNAL_COSTS = "internal_costs"


DATA_SOURCE_LABELS: Dict[DataSource, str] = {
    DataSource.PROJECTS: "Projects",
    DataSource.EXPENSES: "Expenses",
    DataSource.QUOTES: "Quotes",
    DataSource.TIME_ENTRIES: "Time Entries",
    DataSource.ESTIMATE_LINE_ITEMS: "Estimate Line Items",
    DataSource.INTERNAL_COSTS: "Internal Costs",
}


@dataclass(frozen=True)
class FieldMetadata:
    """Display label and semantic type of one field of a data source."""

    key: str
    label: str
    type: FieldType = FieldType.TEXT
    group: Optional[str] = None
    help_text: Optional[str] = None


# Field Catalog
FIELD_CATALOG: Dict[DataSource, List[FieldMetadata]] = {source: [] for source in DataSource}


def register_field(data_source: DataSource, field: FieldMetadata) -> None:
    """Register a field for a data source, replacing an existing key in place."""
    fields = FIELD_CATALOG[data_source]
    for index, existing in enumerate(fields):
        if existing.key == field.key:
            fields[index] = field
            return
    fields.append(field)


def register_fields(data_source: DataSource, *specs: Tuple) -> None:
    """Register (key, label, type[, group[, help_text]]) tuples in order."""
    for spec in specs:
        register_field(data_source, FieldMetadata(*spec))


def _as_data_source(data_source: Union[DataSource, str]) -> Optional[DataSource]:
    try:
        return DataSource(data_source)
    except ValueError:
        return None


def fields_for(data_source: Union[DataSource, str]) -> Tuple[FieldMetadata, ...]:
    """Ordered fields of a data source; unknown data sources have none."""
    source = _as_data_source(data_source)
    if source is None:
        return ()
    return tuple(FIELD_CATALOG[source])


def get_field(data_source: Union[DataSource, str], key: str) -> Optional[FieldMetadata]:
    for field in fields_for(data_source):
        if field.key == key:
            return field
    return None


def humanize_key(key: str) -> str:
    """snake_case key to Title Case label: 'cost_variance' -> 'Cost Variance'."""
    words = [word for word in key.replace("-", "_").split("_") if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def resolve_field(data_source: Union[DataSource, str], key: str) -> FieldMetadata:
    """Catalog metadata for key, or a text field with a humanized label.

    Saved templates may reference fields that no longer exist in the catalog;
    they still render, with a derived label.
    """
    field = get_field(data_source, key)
    if field is not None:
        return field
    return FieldMetadata(key=key, label=humanize_key(key), type=FieldType.TEXT)


T, N, C, P, D, B = (
    FieldType.TEXT,
    FieldType.NUMBER,
    FieldType.CURRENCY,
    FieldType.PERCENT,
    FieldType.DATE,
    FieldType.BOOLEAN,
)

register_fields(
    DataSource.PROJECTS,
    ("project_number", "Project #", T, "project_info"),
    ("project_name", "Project Name", T, "project_info"),
    ("client_name", "Client", T, "project_info"),
    ("status", "Status", T, "status"),
    ("contracted_amount", "Contract Amount", C, "financial"),
    ("estimate_cost", "Estimated Cost", C, "financial"),
    ("total_expenses", "Total Expenses", C, "financial"),
    ("current_margin", "Current Margin", C, "financial"),
    ("margin_percentage", "Margin %", P, "financial"),
    ("cost_variance", "Cost Variance", C, "financial"),
    ("cost_variance_percent", "Cost Variance %", P, "financial"),
    ("budget_utilization_percent", "Budget Utilization %", P, "financial"),
    ("contingency_amount", "Contingency", C, "financial"),
    ("contingency_remaining", "Contingency Remaining", C, "financial"),
    ("contingency_utilization_percent", "Contingency Used %", P, "financial"),
    ("change_order_count", "Change Orders", N, "financial"),
    ("change_order_revenue", "Change Order Revenue", C, "financial"),
    ("change_order_cost", "Change Order Cost", C, "financial"),
    ("start_date", "Start Date", D, "dates"),
    ("end_date", "End Date", D, "dates"),
    ("has_labor_internal", "Has Internal Labor", B, "composition", "Project has internal labor line items"),
    ("has_subcontractors", "Has Subcontractors", B, "composition", "Project has subcontractor line items"),
)

register_fields(
    DataSource.EXPENSES,
    ("expense_date", "Date", D, "dates"),
    ("amount", "Amount", C, "financial"),
    ("category", "Category", T, "status"),
    ("payee_name", "Payee", T, "project_info"),
    ("project_number", "Project #", T, "project_info"),
    ("project_name", "Project Name", T, "project_info"),
    ("client_name", "Client", T, "project_info"),
    ("description", "Description", T, "project_info"),
    ("approval_status", "Status", T, "status"),
)

register_fields(
    DataSource.QUOTES,
    ("quote_number", "Quote #", T, "project_info"),
    ("total_amount", "Total Amount", C, "financial"),
    ("status", "Status", T, "status"),
    ("date_received", "Date Received", D, "dates"),
    ("date_expires", "Expires", D, "dates"),
    ("payee_name", "Vendor", T, "project_info"),
    ("project_number", "Project #", T, "project_info"),
    ("project_name", "Project Name", T, "project_info"),
)

register_fields(
    DataSource.TIME_ENTRIES,
    ("expense_date", "Date", D, "dates", "Date when time was worked"),
    ("worker_name", "Employee", T, "employee", "Employee who worked the hours"),
    ("employee_number", "Employee #", T, "employee"),
    ("hours", "Hours", N, "time"),
    ("amount", "Total Amount", C, "financial", "Total cost (hours x hourly rate)"),
    ("hourly_rate", "Hourly Rate", C, "financial"),
    ("project_number", "Project #", T, "project_info"),
    ("project_name", "Project Name", T, "project_info"),
    ("client_name", "Client", T, "project_info"),
    ("description", "Description", T, "project_info"),
    ("approval_status", "Approval Status", T, "status"),
    ("start_time", "Start Time", T, "time"),
    ("end_time", "End Time", T, "time"),
)

register_fields(
    DataSource.ESTIMATE_LINE_ITEMS,
    ("estimate_number", "Estimate #", T, "project_info"),
    ("project_number", "Project #", T, "project_info"),
    ("project_name", "Project Name", T, "project_info"),
    ("client_name", "Client", T, "project_info"),
    ("category", "Category", T, "status"),
    ("description", "Description", T, "project_info"),
    ("quantity", "Quantity", N, "financial"),
    ("price_per_unit", "Price/Unit", C, "financial"),
    ("total", "Total", C, "financial"),
    ("cost_per_unit", "Cost/Unit", C, "financial"),
    ("total_cost", "Total Cost", C, "financial"),
)

register_fields(
    DataSource.INTERNAL_COSTS,
    ("category", "Category", T, "status", "Internal labor or management expense"),
    ("expense_date", "Date", D, "dates"),
    ("hours", "Hours", N, "time"),
    ("amount", "Amount", C, "financial"),
    ("worker_name", "Employee/Worker", T, "employee"),
    ("hourly_rate", "Hourly Rate", C, "financial"),
    ("project_number", "Project #", T, "project_info"),
    ("project_name", "Project Name", T, "project_info"),
    ("client_name", "Client", T, "project_info"),
    ("description", "Description", T, "project_info"),
    ("approval_status", "Approval Status", T, "status"),
)
