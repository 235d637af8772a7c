"""
Test cases for FieldTransformer.

Each transformation kind is exercised through a FieldMapping, the same way
DataMapping drives it.
"""

from datetime import date

import pytest

from integration_hub.modules.integration.domain.enums import TransformationType
from integration_hub.modules.integration.domain.errors import TransformationError
from integration_hub.modules.integration.domain.services import FieldTransformer
from integration_hub.modules.integration.domain.value_objects import FieldMapping


def fmt(name: str, **config) -> FieldMapping:
    return FieldMapping(
        "f", "value", "out", TransformationType.FORMAT, {"format": name, **config}
    )


def custom(**config) -> FieldMapping:
    return FieldMapping("c", "value", "out", TransformationType.CUSTOM, config)


class TestFormat:
    """Test the format transformation."""

    @pytest.fixture
    def transformer(self):
        return FieldTransformer()

    @pytest.mark.parametrize(
        ("name", "value", "expected"),
        [
            ("uppercase", "abc", "ABC"),
            ("lowercase", "AbC", "abc"),
            ("trim", "  padded  ", "padded"),
            ("capitalize", "hello world", "Hello world"),
            ("string", True, "true"),
            ("string", 3.0, "3"),
            ("boolean", "Yes", True),
            ("boolean", "no", False),
            ("boolean", 0, False),
            ("array", "a, b,,c", ["a", "b", "c"]),
            ("json", {"a": 1}, '{"a": 1}'),
            ("parse_json", '{"a": [1, 2]}', {"a": [1, 2]}),
        ],
    )
    def test_simple_formats(self, transformer, name, value, expected):
        """Test each named format on a representative value."""
        assert transformer.transform(value, fmt(name), {}, {}) == expected

    def test_number_strips_grouping_and_rounds(self, transformer):
        """Test thousands separators are removed before rounding."""
        result = transformer.transform("1,234.567", fmt("number", decimals=2), {}, {})

        assert result == 1234.57

    def test_number_normalizes_integral_values(self, transformer):
        """Test a whole number comes back as int."""
        result = transformer.transform("42.0", fmt("number"), {}, {})

        assert result == 42
        assert isinstance(result, int)

    @pytest.mark.parametrize("value", ["abc", "nan", "inf"])
    def test_number_rejects_non_finite_input(self, transformer, value):
        """Test text, NaN and infinity are not numbers."""
        with pytest.raises(TransformationError) as exc_info:
            transformer.transform(value, fmt("number"), {}, {})

        assert exc_info.value.message.startswith("Failed to transform field 'out'")

    def test_date_with_pattern(self, transformer):
        """Test the YYYY/MM/DD tokens are honoured."""
        mapping = fmt("date", date_format="DD/MM/YYYY HH:mm")

        result = transformer.transform("2026-03-01T09:05:00", mapping, {}, {})

        assert result == "01/03/2026 09:05"

    def test_date_defaults_to_iso(self, transformer):
        """Test a date object without a pattern is written in ISO form."""
        result = transformer.transform(date(2026, 3, 1), fmt("date"), {}, {})

        assert result == "2026-03-01T00:00:00"

    def test_invalid_date_raises(self, transformer):
        """Test an unparseable date fails."""
        with pytest.raises(TransformationError):
            transformer.transform("not a date", fmt("date"), {}, {})

    def test_array_with_custom_delimiter(self, transformer):
        """Test the delimiter option."""
        result = transformer.transform("a|b", fmt("array", delimiter="|"), {}, {})

        assert result == ["a", "b"]

    def test_none_passes_through(self, transformer):
        """Test formats leave None untouched."""
        assert transformer.transform(None, fmt("uppercase"), {}, {}) is None


class TestLookup:
    """Test the lookup transformation."""

    def test_inline_table_hit(self):
        """Test a value found in the inline table is replaced."""
        mapping = FieldMapping(
            "l",
            "status",
            "state",
            TransformationType.LOOKUP,
            {"lookup_table": {"A": "active", "1": "one"}},
        )

        transformer = FieldTransformer()

        assert transformer.transform("A", mapping, {}, {}) == "active"
        assert transformer.transform(1, mapping, {}, {}) == "one"

    def test_miss_uses_config_default_then_value(self):
        """Test a miss returns the configured default, else the value."""
        with_default = FieldMapping(
            "l",
            "status",
            "state",
            TransformationType.LOOKUP,
            {"lookup_table": {"A": "active"}, "default_value": "unknown"},
        )
        without_default = FieldMapping(
            "l", "status", "state", TransformationType.LOOKUP, {"lookup_table": {}}
        )
        transformer = FieldTransformer()

        assert transformer.transform("Z", with_default, {}, {}) == "unknown"
        assert transformer.transform("Z", without_default, {}, {}) == "Z"

    def test_named_table(self):
        """Test tables registered by name are used."""
        transformer = FieldTransformer()
        transformer.register_lookup_table("countries", {"DE": "Germany"})
        mapping = FieldMapping(
            "l", "code", "country", TransformationType.LOOKUP, {"table_name": "countries"}
        )

        assert transformer.transform("DE", mapping, {}, {}) == "Germany"

    def test_unknown_named_table_raises(self):
        """Test a missing named table is reported."""
        mapping = FieldMapping(
            "l", "code", "country", TransformationType.LOOKUP, {"table_name": "nope"}
        )

        with pytest.raises(TransformationError) as exc_info:
            FieldTransformer().transform("DE", mapping, {}, {})

        assert "lookup table 'nope' is not available" in exc_info.value.message


class TestCalculate:
    """Test the calculate transformation."""

    def test_source_then_target_resolution(self):
        """Test variables fall back to already mapped target fields."""
        mapping = FieldMapping(
            "c",
            "price",
            "total",
            TransformationType.CALCULATE,
            {"expression": "${price} + ${tax}"},
        )

        result = FieldTransformer().transform(10, mapping, {"price": 10}, {"tax": 1.5})

        assert result == 11.5

    def test_round_to(self):
        """Test results can be rounded."""
        mapping = FieldMapping(
            "c",
            "price",
            "third",
            TransformationType.CALCULATE,
            {"expression": "${price} / 3", "round_to": 2},
        )

        assert FieldTransformer().transform(10, mapping, {"price": 10}, {}) == 3.33

    def test_expression_errors_become_transformation_errors(self):
        """Test division by zero names the target field."""
        mapping = FieldMapping(
            "c", "price", "ratio", TransformationType.CALCULATE, {"expression": "${price} / 0"}
        )

        with pytest.raises(TransformationError) as exc_info:
            FieldTransformer().transform(1, mapping, {"price": 1}, {})

        assert "Failed to transform field 'ratio'" in exc_info.value.message
        assert "division by zero" in exc_info.value.message


class TestCustom:
    """Test registered and built-in custom functions."""

    def test_registered_function_receives_parameters(self):
        """Test a registered hook is called with value, parameters and source."""
        transformer = FieldTransformer()
        transformer.register_function(
            "prefix", lambda value, params, source: f"{params['prefix']}{value}"
        )
        mapping = custom(function_name="prefix", parameters={"prefix": "INV-"})

        assert transformer.transform("7", mapping, {}, {}) == "INV-7"

    def test_unregistered_function_raises(self):
        """Test an unknown hook name fails."""
        with pytest.raises(TransformationError) as exc_info:
            FieldTransformer().transform("7", custom(function_name="missing"), {}, {})

        assert "custom function 'missing' is not registered" in exc_info.value.message

    def test_failing_function_is_wrapped(self):
        """Test an exception from a hook becomes a TransformationError."""

        def explode(value, params, source):
            raise RuntimeError("boom")

        transformer = FieldTransformer(custom_functions={"explode": explode})

        with pytest.raises(TransformationError) as exc_info:
            transformer.transform("7", custom(function_name="explode"), {}, {})

        assert exc_info.value.reason == "boom"

    def test_concat(self):
        """Test concat joins source paths and skips missing parts."""
        mapping = custom(
            type="concat", parameters={"fields": ["first", "middle", "last"]}
        )
        source = {"first": "Ada", "last": "Lovelace"}

        assert FieldTransformer().transform(None, mapping, source, {}) == "Ada Lovelace"

    def test_split_with_index(self):
        """Test split returns the requested part or None when out of range."""
        mapping = custom(type="split", parameters={"delimiter": " ", "index": 1})
        out_of_range = custom(type="split", parameters={"index": 5})
        transformer = FieldTransformer()

        assert transformer.transform("Ada Lovelace", mapping, {}, {}) == "Lovelace"
        assert transformer.transform("a,b", out_of_range, {}, {}) is None

    def test_regex_replace(self):
        """Test pattern substitution."""
        mapping = custom(
            type="regex_replace", parameters={"pattern": r"\D", "replacement": ""}
        )

        assert FieldTransformer().transform("+49 (30) 123", mapping, {}, {}) == "4930123"

    def test_conditional(self):
        """Test conditional picks a value from a source condition."""
        mapping = custom(
            type="conditional",
            parameters={
                "condition": "exists(vip)",
                "true_value": "gold",
                "false_value": "standard",
            },
        )
        transformer = FieldTransformer()

        assert transformer.transform(None, mapping, {"vip": True}, {}) == "gold"
        assert transformer.transform(None, mapping, {}, {}) == "standard"
