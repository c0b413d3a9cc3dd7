# app/reporting/filters.py
"""Filter model: typed predicates and the operators each field type accepts."""

import logging
import math
import uuid
import dataclasses
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from app.reporting.field_catalog import DataSource, FieldType, get_field

logger = logging.getLogger(__name__)


class FilterOperator(str, Enum):
    """Operators a predicate may use."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GTE = "gte"
    LTE = "lte"
    BETWEEN = "between"
    IN = "in"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


_EQUALITY = frozenset({FilterOperator.EQUALS, FilterOperator.NOT_EQUALS})
_ORDERING = frozenset(
    {
        FilterOperator.GREATER_THAN,
        FilterOperator.LESS_THAN,
        FilterOperator.GTE,
        FilterOperator.LTE,
        FilterOperator.BETWEEN,
    }
)
_NULL_CHECKS = frozenset({FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL})

_NUMERIC_OPERATORS = _EQUALITY | _ORDERING | {FilterOperator.IN} | _NULL_CHECKS

OPERATORS_BY_TYPE: Dict[FieldType, FrozenSet[FilterOperator]] = {
    FieldType.TEXT: _EQUALITY | {FilterOperator.CONTAINS, FilterOperator.IN} | _NULL_CHECKS,
    FieldType.NUMBER: _NUMERIC_OPERATORS,
    # currency and percent are numbers with a display convention
    FieldType.CURRENCY: _NUMERIC_OPERATORS,
    FieldType.PERCENT: _NUMERIC_OPERATORS,
    FieldType.DATE: _EQUALITY | _ORDERING | _NULL_CHECKS,
    FieldType.BOOLEAN: _EQUALITY | _NULL_CHECKS,
}

_NUMERIC_TYPES = frozenset({FieldType.NUMBER, FieldType.CURRENCY, FieldType.PERCENT})


def operators_for(field_type: Union[FieldType, str]) -> FrozenSet[FilterOperator]:
    """Legal operators for a field type."""
    try:
        return OPERATORS_BY_TYPE[FieldType(field_type)]
    except ValueError:
        return frozenset()


# ===== TYPED FILTER VALUES =====


@dataclass(frozen=True)
class TextValue:
    text: str

    @property
    def raw(self) -> str:
        return self.text


@dataclass(frozen=True)
class NumberValue:
    number: float

    @property
    def raw(self) -> float:
        return self.number


@dataclass(frozen=True)
class DateValue:
    day: date

    @property
    def raw(self) -> date:
        return self.day


@dataclass(frozen=True)
class BooleanValue:
    flag: bool

    @property
    def raw(self) -> bool:
        return self.flag


ScalarValue = Union[TextValue, NumberValue, DateValue, BooleanValue]


@dataclass(frozen=True)
class RangeValue:
    """Inclusive range for `between`."""

    low: Union[NumberValue, DateValue]
    high: Union[NumberValue, DateValue]

    @property
    def raw(self) -> Tuple[Any, Any]:
        return (self.low.raw, self.high.raw)


@dataclass(frozen=True)
class ListValue:
    """Non-empty list for `in`."""

    items: Tuple[Union[TextValue, NumberValue], ...]

    @property
    def raw(self) -> List[Any]:
        return [item.raw for item in self.items]


@dataclass(frozen=True)
class NoValue:
    """Value of `is_null` / `is_not_null`."""

    @property
    def raw(self) -> None:
        return None


FilterValue = Union[TextValue, NumberValue, DateValue, BooleanValue, RangeValue, ListValue, NoValue]


def parse_date(raw: Any) -> Optional[date]:
    """Parse a date, datetime or ISO string; None when it cannot be parsed."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str) and raw.strip():
        try:
            return datetime.fromisoformat(raw.strip().replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def _coerce_scalar(field_type: FieldType, raw: Any) -> Optional[ScalarValue]:
    if raw is None:
        return None

    if field_type == FieldType.TEXT:
        if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
            return None
        text = str(raw)
        if not text.strip() or text == "null":
            return None
        return TextValue(text)

    if field_type in _NUMERIC_TYPES:
        if isinstance(raw, bool):
            return None
        try:
            number = float(raw)
        except (TypeError, ValueError):
            return None
        if math.isnan(number) or math.isinf(number):
            return None
        return NumberValue(number)

    if field_type == FieldType.DATE:
        day = parse_date(raw)
        return DateValue(day) if day is not None else None

    if field_type == FieldType.BOOLEAN:
        if isinstance(raw, bool):
            return BooleanValue(raw)
        if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
            return BooleanValue(raw.strip().lower() == "true")
        return None

    return None


def coerce_value(
    field_type: Union[FieldType, str], operator: Union[FilterOperator, str], raw: Any
) -> Optional[FilterValue]:
    """Build the typed value for a predicate, or None when its shape is wrong."""
    try:
        field_type = FieldType(field_type)
        operator = FilterOperator(operator)
    except ValueError:
        return None

    if operator in _NULL_CHECKS:
        return NoValue()

    if operator == FilterOperator.BETWEEN:
        if not isinstance(raw, (list, tuple)) or len(raw) != 2:
            return None
        low = _coerce_scalar(field_type, raw[0])
        high = _coerce_scalar(field_type, raw[1])
        if not isinstance(low, (NumberValue, DateValue)) or not isinstance(high, (NumberValue, DateValue)):
            return None
        return RangeValue(low, high)

    if operator == FilterOperator.IN:
        if isinstance(raw, str):
            raw = [part.strip() for part in raw.split(",") if part.strip()]
        if not isinstance(raw, (list, tuple)) or not raw:
            return None
        items = [_coerce_scalar(field_type, item) for item in raw]
        if any(not isinstance(item, (TextValue, NumberValue)) for item in items):
            return None
        return ListValue(tuple(items))

    if isinstance(raw, (list, tuple, dict)):
        return None
    return _coerce_scalar(field_type, raw)


# ===== PREDICATES =====


def new_filter_id() -> str:
    """Stable opaque identifier for a new predicate."""
    return f"flt_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class FilterPredicate:
    """One filter condition: field, operator and value."""

    field: str
    operator: str
    value: Any = None
    id: str = dataclasses.field(default_factory=new_filter_id)

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "operator": str(getattr(self.operator, "value", self.operator)), "value": self.value}


def typed_value(predicate: FilterPredicate, data_source: Union[DataSource, str]) -> Optional[FilterValue]:
    """Typed value of a predicate, or None if the predicate is invalid."""
    field_meta = get_field(data_source, predicate.field)
    if field_meta is None:
        return None
    try:
        operator = FilterOperator(predicate.operator)
    except ValueError:
        return None
    if operator not in operators_for(field_meta.type):
        return None
    return coerce_value(field_meta.type, operator, predicate.value)


def validate(predicate: FilterPredicate, data_source: Union[DataSource, str]) -> bool:
    """True when the field exists, the operator suits its type and the value has the right shape."""
    return typed_value(predicate, data_source) is not None


def valid_predicates(
    predicates: Iterable[FilterPredicate], data_source: Union[DataSource, str]
) -> List[Tuple[FilterPredicate, FilterValue]]:
    """Valid predicates with their typed values; invalid ones are dropped."""
    valid = []
    for predicate in predicates:
        value = typed_value(predicate, data_source)
        if value is None:
            logger.debug(
                "Dropping invalid filter %s (%s %s %r) for %s",
                predicate.id,
                predicate.field,
                predicate.operator,
                predicate.value,
                data_source,
            )
            continue
        valid.append((predicate, value))
    return valid
