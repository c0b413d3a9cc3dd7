# app/reporting/data_client.py
"""Data client port and its SQLAlchemy adapter over the data store."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Type

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from app.datastore.models import Client, Estimate, EstimateLineItem, Expense, Payee, Project, Quote
from app.reporting.configuration import SortDirection
from app.reporting.exceptions import DataClientError
from app.reporting.filters import FilterOperator
from app.reporting.translator import BASE, BackendRequest, ColumnRef, FilterClause, SortClause

logger = logging.getLogger(__name__)


class DataClient(ABC):
    """Generic query interface of the data store."""

    @abstractmethod
    async def execute(self, request: BackendRequest) -> List[Dict[str, Any]]:
        """Run one request and return rows keyed by field key.

        Raises DataClientError on any backend failure.
        """


def _escape_like(value: Any) -> str:
    """Match `%` and `_` literally in a `contains` search."""
    return str(value).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


ENTITY_MODELS: Dict[str, Type] = {
    "clients": Client,
    "payees": Payee,
    "projects": Project,
    "estimates": Estimate,
    "estimate_line_items": EstimateLineItem,
    "expenses": Expense,
    "quotes": Quote,
}


class SqlAlchemyDataClient(DataClient):
    """DataClient that compiles requests into SQLAlchemy selects over the data store session."""

    def __init__(self, db: Session, models: Optional[Mapping[str, Type]] = None):
        self.db = db
        self.models = models if models is not None else ENTITY_MODELS

    async def execute(self, request: BackendRequest) -> List[Dict[str, Any]]:
        try:
            query = self.build_query(request)
            result = self.db.execute(query)
            return [dict(row._mapping) for row in result]
        except (SQLAlchemyError, AttributeError, KeyError) as e:
            logger.error("Data store request for %s failed: %s", request.entity, e)
            raise DataClientError(str(e)) from e

    def build_query(self, request: BackendRequest):
        base = self.models[request.entity]
        sources = {BASE: base}
        for join in request.joins:
            sources[join.alias] = aliased(self.models[join.entity], name=join.alias)

        def column(ref: ColumnRef):
            return getattr(sources[ref.source], ref.column)

        selected = [column(ref).label(key) for key, ref in request.columns]
        # an empty projection still needs a column to select from the base entity
        query = select(*selected) if selected else select(base.id)
        query = query.select_from(base)

        for join in request.joins:
            target = sources[join.alias]
            query = query.outerjoin(target, getattr(sources[join.parent], join.local_key) == target.id)

        conditions = [self._condition(column(clause.column), clause) for clause in request.filters]
        if conditions:
            query = query.where(and_(*conditions))

        # id breaks ties so repeated runs return rows in the same order
        query = query.order_by(self._order(column(request.sort.column), request.sort), base.id)
        return query.limit(request.limit)

    @staticmethod
    def _condition(column, clause: FilterClause):
        op, value = clause.operator, clause.value
        if op == FilterOperator.EQUALS:
            return column == value
        if op == FilterOperator.NOT_EQUALS:
            return column != value
        if op == FilterOperator.CONTAINS:
            return column.ilike(f"%{_escape_like(value)}%", escape="\\")
        if op == FilterOperator.GREATER_THAN:
            return column > value
        if op == FilterOperator.LESS_THAN:
            return column < value
        if op == FilterOperator.GTE:
            return column >= value
        if op == FilterOperator.LTE:
            return column <= value
        if op == FilterOperator.BETWEEN:
            low, high = value
            return column.between(low, high)
        if op == FilterOperator.IN:
            return column.in_(list(value))
        if op == FilterOperator.IS_NULL:
            return column.is_(None)
        if op == FilterOperator.IS_NOT_NULL:
            return column.is_not(None)
        raise DataClientError(f"Unsupported operator: {op}")

    @staticmethod
    def _order(column, sort: SortClause):
        ordered = column.asc() if sort.direction == SortDirection.ASC else column.desc()
        return ordered.nulls_last()
