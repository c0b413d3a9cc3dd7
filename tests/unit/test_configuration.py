"""
Unit tests for ReportConfiguration: structural invariants and value transforms.
"""

import pytest

from app.core.config import REPORT_MAX_LIMIT
from app.reporting.configuration import ReportConfiguration, SortDirection
from app.reporting.exceptions import ConfigurationError
from app.reporting.field_catalog import DataSource
from app.reporting.filters import FilterPredicate


@pytest.fixture
def config():
    return ReportConfiguration.build(DataSource.PROJECTS, ["project_number", "project_name", "status"])


class TestConstruction:
    """Test configuration construction"""

    def test_defaults(self, config):
        assert config.sort_by == "created_at"
        assert config.sort_direction == SortDirection.DESC
        assert config.limit == 100
        assert dict(config.filters) == {}

    def test_build_rejects_unknown_fields(self):
        with pytest.raises(ConfigurationError, match="retired_metric"):
            ReportConfiguration.build(DataSource.PROJECTS, ["project_name", "retired_metric"])

    def test_empty_fields_rejected(self):
        with pytest.raises(ConfigurationError):
            ReportConfiguration(data_source=DataSource.PROJECTS, fields=())

    @pytest.mark.parametrize("limit", [0, -5, REPORT_MAX_LIMIT + 1])
    def test_limit_bounds(self, limit):
        with pytest.raises(ConfigurationError):
            ReportConfiguration.build(DataSource.PROJECTS, ["status"], limit=limit)

    def test_unknown_data_source(self):
        with pytest.raises(ConfigurationError):
            ReportConfiguration.build("invoices", ["amount"])

    def test_sort_direction_is_case_insensitive(self):
        config = ReportConfiguration.build(DataSource.PROJECTS, ["status"], sort_direction="ASC")
        assert config.sort_direction == SortDirection.ASC

    def test_bad_sort_direction(self):
        with pytest.raises(ConfigurationError):
            ReportConfiguration.build(DataSource.PROJECTS, ["status"], sort_direction="sideways")

    def test_configuration_is_immutable(self, config):
        with pytest.raises(Exception):
            config.limit = 5
        with pytest.raises(TypeError):
            config.filters["x"] = FilterPredicate("status", "equals", "approved")


class TestTransforms:
    """Test that every edit returns a new configuration"""

    def test_add_filter(self, config):
        predicate = FilterPredicate("status", "equals", "approved")
        updated = config.add_filter(predicate)
        assert updated is not config
        assert dict(config.filters) == {}
        assert updated.filters[predicate.id] == predicate

    def test_remove_filter_keeps_other_ids(self, config):
        first = FilterPredicate("status", "equals", "approved")
        second = FilterPredicate("contracted_amount", "gte", 1000)
        third = FilterPredicate("client_name", "contains", "acme")
        updated = config.add_filter(first).add_filter(second).add_filter(third).remove_filter(second.id)
        assert list(updated.filters) == [first.id, third.id]
        assert updated.filters[third.id] == third

    def test_replace_filter_keeps_position(self, config):
        first = FilterPredicate("status", "equals", "approved")
        second = FilterPredicate("contracted_amount", "gte", 1000)
        edited = FilterPredicate("status", "equals", "complete", id=first.id)
        updated = config.add_filter(first).add_filter(second).replace_filter(edited)
        assert list(updated.filters) == [first.id, second.id]
        assert updated.filters[first.id].value == "complete"

    def test_clear_filters(self, config):
        updated = config.add_filter(FilterPredicate("status", "equals", "approved")).clear_filters()
        assert dict(updated.filters) == {}

    def test_set_sort_fields_and_limit(self, config):
        updated = config.set_sort("contracted_amount", "asc").set_fields(["status"]).set_limit(10)
        assert updated.sort_by == "contracted_amount"
        assert updated.sort_direction == SortDirection.ASC
        assert updated.fields == ("status",)
        assert updated.limit == 10
        assert config.fields == ("project_number", "project_name", "status")

    def test_set_limit_is_validated(self, config):
        with pytest.raises(ConfigurationError):
            config.set_limit(0)


class TestSerialization:
    """Test persistence form"""

    def test_round_trip(self, config):
        config = config.add_filter(FilterPredicate("status", "in", ["approved", "in_progress"]))
        assert ReportConfiguration.from_dict(config.to_dict()) == config

    def test_to_dict_shape(self, config):
        data = config.to_dict()
        assert data["data_source"] == "projects"
        assert data["sort_dir"] == "DESC"
        assert data["fields"] == ["project_number", "project_name", "status"]

    def test_from_dict_accepts_filter_list_and_field_objects(self):
        config = ReportConfiguration.from_dict(
            {
                "data_source": "expenses",
                "fields": [{"key": "amount", "label": "Amount"}, "category"],
                "filters": [{"field": "category", "operator": "equals", "value": "materials"}],
                "sort_by": "expense_date",
                "sort_dir": "ASC",
                "limit": 500,
            }
        )
        assert config.fields == ("amount", "category")
        assert len(config.filters) == 1
        assert config.predicates()[0].field == "category"
        assert config.sort_direction == SortDirection.ASC

    def test_from_dict_skips_incomplete_filters(self):
        config = ReportConfiguration.from_dict(
            {"data_source": "projects", "fields": ["status"], "filters": {"filter_0": {"field": "status"}}}
        )
        assert dict(config.filters) == {}

    def test_from_dict_keeps_unknown_fields(self):
        config = ReportConfiguration.from_dict({"data_source": "projects", "fields": ["status", "retired_metric"]})
        assert config.fields == ("status", "retired_metric")
