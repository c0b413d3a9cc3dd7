"""
Unit tests for the field catalog.
"""

from app.reporting.field_catalog import (
    DataSource,
    FieldType,
    fields_for,
    get_field,
    humanize_key,
    resolve_field,
)


class TestFieldCatalog:
    """Test catalog lookups"""

    def test_every_data_source_has_fields(self):
        for source in DataSource:
            assert len(fields_for(source)) > 0

    def test_fields_keep_declaration_order(self):
        keys = [field.key for field in fields_for(DataSource.PROJECTS)]
        assert keys[:3] == ["project_number", "project_name", "client_name"]
        assert keys.index("project_number") < keys.index("project_name")

    def test_fields_accept_string_data_source(self):
        assert fields_for("quotes") == fields_for(DataSource.QUOTES)

    def test_unknown_data_source_has_no_fields(self):
        assert fields_for("invoices") == ()
        assert get_field("invoices", "amount") is None

    def test_get_field_returns_metadata(self):
        field = get_field(DataSource.EXPENSES, "amount")
        assert field.label == "Amount"
        assert field.type == FieldType.CURRENCY

    def test_percent_fields(self):
        assert get_field(DataSource.PROJECTS, "margin_percentage").type == FieldType.PERCENT

    def test_keys_are_unique_per_source(self):
        for source in DataSource:
            keys = [field.key for field in fields_for(source)]
            assert len(keys) == len(set(keys))


class TestFieldFallback:
    """Test the humanized fallback for keys missing from the catalog"""

    def test_humanize_key(self):
        assert humanize_key("cost_variance") == "Cost Variance"
        assert humanize_key("legacy_field_name") == "Legacy Field Name"
        assert humanize_key("po-number") == "Po Number"

    def test_resolve_known_field_uses_catalog(self):
        field = resolve_field(DataSource.PROJECTS, "contracted_amount")
        assert field.label == "Contract Amount"
        assert field.type == FieldType.CURRENCY

    def test_resolve_unknown_field_falls_back_to_text(self):
        field = resolve_field(DataSource.PROJECTS, "retired_metric")
        assert field.key == "retired_metric"
        assert field.label == "Retired Metric"
        assert field.type == FieldType.TEXT
