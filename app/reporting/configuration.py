# app/reporting/configuration.py
"""Report configuration: data source, filters, sort, limit and field selection.

Configurations are immutable snapshots. Every edit returns a new value, so
a configuration handed to an in-flight execution never changes underneath it.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from app.core.config import REPORT_DEFAULT_LIMIT, REPORT_MAX_LIMIT
from app.reporting.exceptions import ConfigurationError
from app.reporting.field_catalog import DataSource, get_field
from app.reporting.filters import FilterPredicate, new_filter_id

DEFAULT_SORT_FIELD = "created_at"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _sort_direction(value: Union[SortDirection, str]) -> SortDirection:
    try:
        return SortDirection(str(getattr(value, "value", value)).lower())
    except ValueError:
        raise ConfigurationError(f"Unknown sort direction: {value!r}")


@dataclass(frozen=True)
class ReportConfiguration:
    """Everything needed to run one report."""

    data_source: DataSource
    fields: Tuple[str, ...]
    filters: Mapping[str, FilterPredicate] = field(default_factory=dict)
    sort_by: str = DEFAULT_SORT_FIELD
    sort_direction: SortDirection = SortDirection.DESC
    limit: int = REPORT_DEFAULT_LIMIT

    def __post_init__(self):
        try:
            data_source = DataSource(self.data_source)
        except ValueError:
            raise ConfigurationError(f"Unknown data source: {self.data_source!r}")

        fields = tuple(self.fields)
        if not fields:
            raise ConfigurationError("A report needs at least one field")

        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit <= 0:
            raise ConfigurationError(f"Limit must be a positive integer, got {self.limit!r}")
        if self.limit > REPORT_MAX_LIMIT:
            raise ConfigurationError(f"Limit cannot exceed {REPORT_MAX_LIMIT}")

        object.__setattr__(self, "data_source", data_source)
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))
        object.__setattr__(self, "sort_by", self.sort_by or DEFAULT_SORT_FIELD)
        object.__setattr__(self, "sort_direction", _sort_direction(self.sort_direction))

    @classmethod
    def build(
        cls,
        data_source: Union[DataSource, str],
        fields: Sequence[str],
        filters: Iterable[FilterPredicate] = (),
        sort_by: str = DEFAULT_SORT_FIELD,
        sort_direction: Union[SortDirection, str] = SortDirection.DESC,
        limit: int = REPORT_DEFAULT_LIMIT,
    ) -> "ReportConfiguration":
        """Builder entry point: every field key must exist in the catalog."""
        unknown = [key for key in fields if get_field(data_source, key) is None]
        if unknown:
            raise ConfigurationError(f"Unknown fields for {data_source}: {', '.join(unknown)}")
        return cls(
            data_source=data_source,
            fields=tuple(fields),
            filters={predicate.id: predicate for predicate in filters},
            sort_by=sort_by,
            sort_direction=sort_direction,
            limit=limit,
        )

    # ===== VALUE TRANSFORMS =====

    def add_filter(self, predicate: FilterPredicate) -> "ReportConfiguration":
        return replace(self, filters={**self.filters, predicate.id: predicate})

    def replace_filter(self, predicate: FilterPredicate) -> "ReportConfiguration":
        return self.add_filter(predicate)

    def remove_filter(self, filter_id: str) -> "ReportConfiguration":
        return replace(
            self, filters={key: value for key, value in self.filters.items() if key != filter_id}
        )

    def clear_filters(self) -> "ReportConfiguration":
        return replace(self, filters={})

    def set_sort(
        self, sort_by: str, sort_direction: Union[SortDirection, str] = SortDirection.DESC
    ) -> "ReportConfiguration":
        return replace(self, sort_by=sort_by, sort_direction=sort_direction)

    def set_fields(self, fields: Sequence[str]) -> "ReportConfiguration":
        return replace(self, fields=tuple(fields))

    def set_limit(self, limit: int) -> "ReportConfiguration":
        return replace(self, limit=limit)

    # ===== SERIALIZATION =====

    def predicates(self) -> List[FilterPredicate]:
        return list(self.filters.values())

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form used for template persistence."""
        return {
            "data_source": self.data_source.value,
            "fields": list(self.fields),
            "filters": {key: predicate.to_dict() for key, predicate in self.filters.items()},
            "sort_by": self.sort_by,
            "sort_dir": self.sort_direction.value.upper(),
            "limit": self.limit,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], fields: Optional[Sequence[str]] = None) -> "ReportConfiguration":
        """Rehydrate a stored configuration.

        Accepts filters stored as a mapping (keys are kept as ids) or as a
        list (fresh ids are assigned), and field entries stored either as
        keys or as field objects.
        """
        raw_filters = data.get("filters") or {}
        if isinstance(raw_filters, Mapping):
            items = list(raw_filters.items())
        else:
            items = [(None, raw) for raw in raw_filters]

        filters: Dict[str, FilterPredicate] = {}
        for key, raw in items:
            if not isinstance(raw, Mapping) or not raw.get("field") or not raw.get("operator"):
                continue
            filter_id = key or new_filter_id()
            filters[filter_id] = FilterPredicate(
                field=raw["field"], operator=raw["operator"], value=raw.get("value"), id=filter_id
            )

        if fields is None:
            fields = [field_key(entry) for entry in data.get("fields") or []]

        return cls(
            data_source=data.get("data_source"),
            fields=tuple(key for key in fields if key),
            filters=filters,
            sort_by=data.get("sort_by") or DEFAULT_SORT_FIELD,
            sort_direction=data.get("sort_dir") or data.get("sort_direction") or SortDirection.DESC,
            limit=int(data.get("limit") or REPORT_DEFAULT_LIMIT),
        )


def field_key(entry: Any) -> Optional[str]:
    """Key of a stored field entry: a plain key or an object with key/source_field/field."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, Mapping):
        return entry.get("key") or entry.get("source_field") or entry.get("field")
    return None
