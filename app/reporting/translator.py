# app/reporting/translator.py
"""
Query translator: compiles a ReportConfiguration into a BackendRequest.

The request is backend-neutral. It names entities, join aliases and
columns; a DataClient adapter turns it into a concrete query. Each data
source is described once in SOURCE_DEFINITIONS: its base entity, the fixed
conditions that carve it out of that entity, and the joins that supply
fields the base entity does not own.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from app.reporting.configuration import DEFAULT_SORT_FIELD, ReportConfiguration, SortDirection
from app.reporting.field_catalog import DataSource, get_field
from app.reporting.filters import FilterOperator, valid_predicates

BASE = "base"


@dataclass(frozen=True)
class ColumnRef:
    """A column of the base entity or of a joined alias."""

    source: str
    column: str


@dataclass(frozen=True)
class JoinDefinition:
    """LEFT OUTER join of `entity` as `alias` on parent.local_key = alias.id."""

    alias: str
    entity: str
    parent: str
    local_key: str


@dataclass(frozen=True)
class SourceDefinition:
    entity: str
    joins: Tuple[JoinDefinition, ...] = ()
    # field key -> column supplied by a join or renamed on the base entity
    columns: Mapping[str, ColumnRef] = field(default_factory=dict)
    base_conditions: Tuple["FilterClause", ...] = ()

    def join(self, alias: str) -> Optional[JoinDefinition]:
        for join in self.joins:
            if join.alias == alias:
                return join
        return None


@dataclass(frozen=True)
class FilterClause:
    column: ColumnRef
    operator: FilterOperator
    value: Any = None


@dataclass(frozen=True)
class SortClause:
    column: ColumnRef
    direction: SortDirection


@dataclass(frozen=True)
class BackendRequest:
    """One round-trip to the data store."""

    entity: str
    columns: Tuple[Tuple[str, ColumnRef], ...]
    joins: Tuple[JoinDefinition, ...]
    filters: Tuple[FilterClause, ...]
    sort: SortClause
    limit: int

    @property
    def column_keys(self) -> List[str]:
        return [key for key, _ in self.columns]


# ===== SOURCE DEFINITIONS =====

_PROJECT = JoinDefinition("project", "projects", BASE, "project_id")
_PROJECT_CLIENT = JoinDefinition("client", "clients", "project", "client_id")
_PAYEE = JoinDefinition("payee", "payees", BASE, "payee_id")

_PROJECT_COLUMNS = {
    "project_number": ColumnRef("project", "project_number"),
    "project_name": ColumnRef("project", "project_name"),
    "client_name": ColumnRef("client", "client_name"),
}

_LABOR_COLUMNS = {
    **_PROJECT_COLUMNS,
    "worker_name": ColumnRef("payee", "payee_name"),
    "employee_number": ColumnRef("payee", "employee_number"),
    "hourly_rate": ColumnRef("payee", "hourly_rate"),
}

SOURCE_DEFINITIONS: Dict[DataSource, SourceDefinition] = {
    DataSource.PROJECTS: SourceDefinition(
        entity="projects",
        joins=(JoinDefinition("client", "clients", BASE, "client_id"),),
        columns={"client_name": ColumnRef("client", "client_name")},
    ),
    DataSource.EXPENSES: SourceDefinition(
        entity="expenses",
        joins=(_PROJECT, _PROJECT_CLIENT, _PAYEE),
        columns={**_PROJECT_COLUMNS, "payee_name": ColumnRef("payee", "payee_name")},
    ),
    DataSource.QUOTES: SourceDefinition(
        entity="quotes",
        joins=(_PROJECT, _PAYEE),
        columns={
            "project_number": ColumnRef("project", "project_number"),
            "project_name": ColumnRef("project", "project_name"),
            "payee_name": ColumnRef("payee", "payee_name"),
        },
    ),
    DataSource.TIME_ENTRIES: SourceDefinition(
        entity="expenses",
        joins=(_PROJECT, _PROJECT_CLIENT, _PAYEE),
        columns=_LABOR_COLUMNS,
        base_conditions=(
            FilterClause(ColumnRef(BASE, "category"), FilterOperator.EQUALS, "labor_internal"),
        ),
    ),
    DataSource.INTERNAL_COSTS: SourceDefinition(
        entity="expenses",
        joins=(_PROJECT, _PROJECT_CLIENT, _PAYEE),
        columns=_LABOR_COLUMNS,
        base_conditions=(
            FilterClause(ColumnRef(BASE, "category"), FilterOperator.IN, ["labor_internal", "management"]),
        ),
    ),
    DataSource.ESTIMATE_LINE_ITEMS: SourceDefinition(
        entity="estimate_line_items",
        joins=(
            JoinDefinition("estimate", "estimates", BASE, "estimate_id"),
            JoinDefinition("project", "projects", "estimate", "project_id"),
            _PROJECT_CLIENT,
        ),
        columns={
            **_PROJECT_COLUMNS,
            "estimate_number": ColumnRef("estimate", "estimate_number"),
        },
    ),
}


class QueryTranslator:
    """Deterministic ReportConfiguration -> BackendRequest compiler."""

    def __init__(self, sources: Optional[Mapping[DataSource, SourceDefinition]] = None):
        self.sources = sources if sources is not None else SOURCE_DEFINITIONS

    def resolve_column(self, data_source: DataSource, key: str) -> Optional[ColumnRef]:
        """Column behind a field key; None when the data source has no such field."""
        source = self.sources[data_source]
        if key in source.columns:
            return source.columns[key]
        if key == DEFAULT_SORT_FIELD or get_field(data_source, key) is not None:
            return ColumnRef(BASE, key)
        return None

    def compile(self, config: ReportConfiguration) -> BackendRequest:
        source = self.sources[config.data_source]

        columns = []
        for key in config.fields:
            ref = self.resolve_column(config.data_source, key)
            if ref is not None:
                columns.append((key, ref))

        filters = list(source.base_conditions)
        for predicate, value in valid_predicates(config.predicates(), config.data_source):
            filters.append(
                FilterClause(
                    column=self.resolve_column(config.data_source, predicate.field),
                    operator=FilterOperator(predicate.operator),
                    value=value.raw,
                )
            )

        sort_ref = self.resolve_column(config.data_source, config.sort_by)
        if sort_ref is None:
            sort = SortClause(ColumnRef(BASE, DEFAULT_SORT_FIELD), SortDirection.DESC)
        else:
            sort = SortClause(sort_ref, config.sort_direction)

        used = [ref for _, ref in columns] + [clause.column for clause in filters] + [sort.column]
        return BackendRequest(
            entity=source.entity,
            columns=tuple(columns),
            joins=self._required_joins(source, used),
            filters=tuple(filters),
            sort=sort,
            limit=config.limit,
        )

    def _required_joins(self, source: SourceDefinition, refs: List[ColumnRef]) -> Tuple[JoinDefinition, ...]:
        """Joins the referenced columns need, plus the parents they hang from, in declaration order."""
        needed = set()
        for ref in refs:
            alias = ref.source
            while alias != BASE and alias not in needed:
                needed.add(alias)
                alias = source.join(alias).parent
        return tuple(join for join in source.joins if join.alias in needed)
