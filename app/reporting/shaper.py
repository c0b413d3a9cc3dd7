# app/reporting/shaper.py
"""Result shaper: type-aware display formatting shared by screen and export."""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from app.reporting.configuration import SortDirection
from app.reporting.field_catalog import FieldMetadata, FieldType
from app.reporting.filters import parse_date

DATE_FORMAT = "%m/%d/%Y"

_NUMERIC_TYPES = (FieldType.NUMBER, FieldType.CURRENCY, FieldType.PERCENT)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def format_value(value: Any, field_type: FieldType) -> str:
    """Format a single value for display. Null values render as an empty string."""
    if value is None:
        return ""

    if field_type == FieldType.CURRENCY:
        number = _as_number(value)
        if number is None:
            return str(value)
        if number < 0:
            return f"(${abs(number):,.2f})"
        return f"${number:,.2f}"

    if field_type == FieldType.PERCENT:
        number = _as_number(value)
        return f"{number:.1f}%" if number is not None else str(value)

    if field_type == FieldType.NUMBER:
        number = _as_number(value)
        if number is None:
            return str(value)
        if number.is_integer():
            return f"{int(number):,}"
        return f"{number:,}"

    if field_type == FieldType.DATE:
        day = parse_date(value)
        # unparseable dates render blank
        return day.strftime(DATE_FORMAT) if day is not None else ""

    return str(value)


def shape(rows: Sequence[Dict[str, Any]], fields: Sequence[FieldMetadata]) -> List[Dict[str, str]]:
    """Display strings for every configured field of every row."""
    return [{field.key: format_value(row.get(field.key), field.type) for field in fields} for row in rows]


def compute_totals(rows: Sequence[Dict[str, Any]], fields: Sequence[FieldMetadata]) -> Dict[str, Optional[float]]:
    """Column totals: sums for currency and number fields, averages for percent fields."""
    totals: Dict[str, Optional[float]] = {}
    for field in fields:
        if field.type not in _NUMERIC_TYPES:
            continue
        numbers = [n for n in (_as_number(row.get(field.key)) for row in rows) if n is not None]
        if field.type == FieldType.PERCENT:
            totals[field.key] = sum(numbers) / len(numbers) if numbers else None
        else:
            totals[field.key] = sum(numbers)
    return totals


def _sort_key(value: Any, field_type: FieldType):
    if field_type in _NUMERIC_TYPES:
        return _as_number(value)
    if field_type == FieldType.DATE:
        return parse_date(value)
    if field_type == FieldType.BOOLEAN:
        return bool(value)
    return str(value).lower()


def sort_rows(
    rows: Sequence[Dict[str, Any]],
    fields: Sequence[FieldMetadata],
    key: str,
    direction: SortDirection = SortDirection.ASC,
) -> List[Dict[str, Any]]:
    """Sort raw rows by one field, type-aware, with nulls last in either direction."""
    field_type = next((field.type for field in fields if field.key == key), FieldType.TEXT)

    present, missing = [], []
    for row in rows:
        value = row.get(key)
        sort_value = None if value is None else _sort_key(value, field_type)
        (missing if sort_value is None else present).append((sort_value, row))

    present.sort(key=lambda item: item[0], reverse=SortDirection(direction) == SortDirection.DESC)
    return [row for _, row in present] + [row for _, row in missing]
