"""
Unit tests for the filter model: operator sets, typed values and validation.
"""

from datetime import date

import pytest

from app.reporting.field_catalog import DataSource, FieldType, fields_for
from app.reporting.filters import (
    BooleanValue,
    DateValue,
    FilterOperator,
    FilterPredicate,
    ListValue,
    NoValue,
    NumberValue,
    RangeValue,
    TextValue,
    coerce_value,
    operators_for,
    typed_value,
    valid_predicates,
    validate,
)


class TestOperatorSets:
    """Test operators legal per field type"""

    def test_text_operators(self):
        ops = operators_for(FieldType.TEXT)
        assert FilterOperator.CONTAINS in ops
        assert FilterOperator.IN in ops
        assert FilterOperator.BETWEEN not in ops
        assert FilterOperator.GREATER_THAN not in ops

    def test_number_operators(self):
        ops = operators_for(FieldType.NUMBER)
        assert {FilterOperator.BETWEEN, FilterOperator.GTE, FilterOperator.IN} <= ops
        assert FilterOperator.CONTAINS not in ops

    def test_currency_and_percent_filter_like_numbers(self):
        assert operators_for(FieldType.CURRENCY) == operators_for(FieldType.NUMBER)
        assert operators_for(FieldType.PERCENT) == operators_for(FieldType.NUMBER)

    def test_date_operators(self):
        ops = operators_for(FieldType.DATE)
        assert FilterOperator.BETWEEN in ops
        assert FilterOperator.IN not in ops
        assert FilterOperator.CONTAINS not in ops

    def test_boolean_operators(self):
        assert operators_for(FieldType.BOOLEAN) == {
            FilterOperator.EQUALS,
            FilterOperator.NOT_EQUALS,
            FilterOperator.IS_NULL,
            FilterOperator.IS_NOT_NULL,
        }

    def test_unknown_type_has_no_operators(self):
        assert operators_for("json") == frozenset()

    def test_validate_rejects_every_operator_outside_the_type_set(self):
        sample_values = {
            FieldType.TEXT: "abc",
            FieldType.NUMBER: 5,
            FieldType.CURRENCY: 5,
            FieldType.PERCENT: 5,
            FieldType.DATE: "2024-01-01",
            FieldType.BOOLEAN: True,
        }
        for source in DataSource:
            for field in fields_for(source):
                allowed = operators_for(field.type)
                for operator in FilterOperator:
                    if operator in allowed:
                        continue
                    predicate = FilterPredicate(field.key, operator.value, sample_values[field.type])
                    assert not validate(predicate, source), (source, field.key, operator)


class TestTypedValues:
    """Test coercion of raw values into the typed value union"""

    def test_text_value(self):
        assert coerce_value(FieldType.TEXT, FilterOperator.EQUALS, "approved") == TextValue("approved")

    def test_blank_text_is_rejected(self):
        assert coerce_value(FieldType.TEXT, FilterOperator.EQUALS, "   ") is None
        assert coerce_value(FieldType.TEXT, FilterOperator.EQUALS, None) is None

    def test_number_from_string(self):
        assert coerce_value(FieldType.NUMBER, FilterOperator.GREATER_THAN, "0") == NumberValue(0.0)

    def test_number_rejects_garbage(self):
        assert coerce_value(FieldType.CURRENCY, FilterOperator.EQUALS, "lots") is None
        assert coerce_value(FieldType.NUMBER, FilterOperator.EQUALS, True) is None

    def test_date_value(self):
        value = coerce_value(FieldType.DATE, FilterOperator.GTE, "2024-01-31")
        assert value == DateValue(date(2024, 1, 31))

    def test_boolean_value(self):
        assert coerce_value(FieldType.BOOLEAN, FilterOperator.EQUALS, "true") == BooleanValue(True)
        assert coerce_value(FieldType.BOOLEAN, FilterOperator.EQUALS, "yes") is None

    def test_between_needs_two_values(self):
        value = coerce_value(FieldType.DATE, FilterOperator.BETWEEN, ["2024-01-01", "2024-01-31"])
        assert isinstance(value, RangeValue)
        assert value.raw == (date(2024, 1, 1), date(2024, 1, 31))
        assert coerce_value(FieldType.DATE, FilterOperator.BETWEEN, ["2024-01-01"]) is None
        assert coerce_value(FieldType.NUMBER, FilterOperator.BETWEEN, 5) is None

    def test_in_accepts_list_or_comma_string(self):
        assert coerce_value(FieldType.TEXT, FilterOperator.IN, ["a", "b"]) == ListValue((TextValue("a"), TextValue("b")))
        assert coerce_value(FieldType.TEXT, FilterOperator.IN, "a, b").raw == ["a", "b"]
        assert coerce_value(FieldType.TEXT, FilterOperator.IN, []) is None

    def test_null_checks_take_no_value(self):
        assert coerce_value(FieldType.DATE, FilterOperator.IS_NULL, "ignored") == NoValue()

    def test_scalar_operator_rejects_list(self):
        assert coerce_value(FieldType.TEXT, FilterOperator.EQUALS, ["a"]) is None


class TestPredicates:
    """Test predicate validation against a data source"""

    def test_predicates_get_distinct_stable_ids(self):
        first = FilterPredicate("status", "equals", "approved")
        second = FilterPredicate("status", "equals", "approved")
        assert first.id != second.id
        assert first.id.startswith("flt_")

    def test_unknown_field_is_invalid(self):
        assert not validate(FilterPredicate("nonexistent", "equals", "x"), DataSource.PROJECTS)

    def test_unknown_operator_is_invalid(self):
        assert not validate(FilterPredicate("status", "like", "x"), DataSource.PROJECTS)

    def test_typed_value_of_valid_predicate(self):
        predicate = FilterPredicate("change_order_count", "greater_than", "0")
        assert typed_value(predicate, DataSource.PROJECTS) == NumberValue(0.0)

    def test_valid_predicates_drops_invalid_and_keeps_order(self):
        keep_a = FilterPredicate("status", "equals", "approved")
        drop = FilterPredicate("nonexistent", "equals", "x")
        keep_b = FilterPredicate("contracted_amount", "gte", 1000)
        result = valid_predicates([keep_a, drop, keep_b], DataSource.PROJECTS)
        assert [predicate for predicate, _ in result] == [keep_a, keep_b]

    @pytest.mark.parametrize("value", [None, "", [], "not-a-date"])
    def test_partially_filled_date_filter_is_invalid(self, value):
        assert not validate(FilterPredicate("start_date", "equals", value), DataSource.PROJECTS)
