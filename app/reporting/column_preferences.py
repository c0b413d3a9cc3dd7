# app/reporting/column_preferences.py
"""Per-view column order and visibility, behind an injected persistence port."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from app.reporting.field_catalog import FieldMetadata


class ColumnPreferences(BaseModel):
    """Column order and hidden columns of one report view."""

    order: List[str] = []
    hidden: List[str] = []

    model_config = ConfigDict(frozen=True, from_attributes=True)

    def apply(self, fields: Sequence[FieldMetadata]) -> List[FieldMetadata]:
        """Visible fields in preferred order; fields missing from the order keep theirs, after the ordered ones."""
        by_key = {field.key: field for field in fields}
        ordered = [by_key[key] for key in self.order if key in by_key]
        seen = {field.key for field in ordered}
        ordered.extend(field for field in fields if field.key not in seen)
        hidden = set(self.hidden)
        return [field for field in ordered if field.key not in hidden]

    def with_order(self, order: Sequence[str]) -> "ColumnPreferences":
        return self.model_copy(update={"order": list(dict.fromkeys(order))})

    def hide(self, key: str) -> "ColumnPreferences":
        if key in self.hidden:
            return self
        return self.model_copy(update={"hidden": [*self.hidden, key]})

    def show(self, key: str) -> "ColumnPreferences":
        return self.model_copy(update={"hidden": [k for k in self.hidden if k != key]})


class ColumnPreferenceStore(ABC):
    """Read/write column preferences by a view-scoped key."""

    @abstractmethod
    def read(self, view_key: str) -> Optional[ColumnPreferences]:
        ...

    @abstractmethod
    def write(self, view_key: str, preferences: ColumnPreferences) -> ColumnPreferences:
        ...
