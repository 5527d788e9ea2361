"""Tests for the error model and message formatting."""

import pytest

from dataknobs_schema.exceptions import (
    DuplicateKeyError,
    SchemaDefinitionError,
    SchemaError,
    SchemaNotFoundError,
    ValidationError,
    ValidationResultError,
)
from dataknobs_schema.messages import MessageTable, format_message, format_path, messages
from dataknobs_schema.node import MISSING, SchemaNode
from dataknobs_schema.verifier import verify


class TestSchemaError:
    """Test the base SchemaError class."""

    def test_basic_exception(self):
        error = SchemaError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.context == {}
        assert error.details == {}

    def test_details_takes_precedence(self):
        error = SchemaError("Error", context={"key": "context"}, details={"key": "details"})
        assert error.context == {"key": "details"}

    def test_hierarchy(self):
        assert issubclass(DuplicateKeyError, SchemaDefinitionError)
        assert issubclass(SchemaDefinitionError, SchemaError)
        assert issubclass(SchemaNotFoundError, SchemaError)
        assert issubclass(ValidationResultError, ValidationError)


class TestValidationError:
    """Test rule-level failures."""

    def test_attributes(self):
        error = ValidationError("min_length", 3)
        assert error.rule_name == "min_length"
        assert error.rule_params == 3
        assert error.context == {"rule_name": "min_length", "rule_params": 3}

    @pytest.mark.parametrize("rule_name", ["", None, 42])
    def test_rule_name_must_be_non_empty_string(self, rule_name):
        with pytest.raises(SchemaDefinitionError):
            ValidationError(rule_name)

    def test_can_be_raised_and_caught(self):
        with pytest.raises(ValidationError) as exc_info:
            raise ValidationError("type", "string")
        assert exc_info.value.rule_params == "string"


class TestValidationResultError:
    """Test value-bound failures."""

    def test_defaults(self):
        error = ValidationResultError("required", True, MISSING)
        assert error.array_item_index is None
        assert error.path == []
        assert error.value is MISSING

    def test_deep_copies_payload(self):
        value = {"tags": ["a"]}
        params = ["a", "b"]
        path = ["root"]
        error = ValidationResultError("available_fields", params, value, 2, path)

        value["tags"].append("b")
        params.append("c")
        path.append("changed")

        assert error.value == {"tags": ["a"]}
        assert error.rule_params == ["a", "b"]
        assert error.path == ["root"]
        assert error.array_item_index == 2

    @pytest.mark.parametrize("index", ["1", 1.5, True, None])
    def test_non_int_index_becomes_none(self, index):
        assert ValidationResultError("type", "object", 1, index).array_item_index is None

    def test_allows_missing_rule_name(self):
        error = ValidationResultError(None, None, "x")
        assert error.rule_name is None
        assert "invalid" in error.message

    def test_to_dict(self):
        error = ValidationResultError("required", True, MISSING, None, ["user", "name"])
        data = error.to_dict()
        assert data["rule_name"] == "required"
        assert data["path"] == ["user", "name"]
        assert data["message"] == "Field 'user.name' is required"


class TestMessages:
    """Test message formatting."""

    def test_format_path(self):
        assert format_path([]) == "<root>"
        assert format_path(["family", "1", "name"]) == "family.1.name"

    def test_builtin_formatters(self):
        assert format_message("required", True, ["name"], MISSING) == "Field 'name' is required"
        assert format_message("type", "array", ["tags"], "x") == "Field 'tags' expects array, got str"
        assert "allowed fields: a, b" in format_message("available_fields", ["a", "b"], [], {})

    def test_default_formatter(self):
        message = format_message("min_length", 3, ["name"], "Al")
        assert message == "Value at 'name' failed rule 'min_length' (3)"

    def test_custom_table(self):
        table = MessageTable()
        table.register("min_length", lambda name, params, path, value: f"too short: {value}")
        assert table.format("min_length", 3, [], "Al") == "too short: Al"
        table.unregister("min_length")
        assert not table.has("min_length")

    def test_default_table_override_affects_message(self):
        messages.register("even", lambda name, params, path, value: f"{value} is odd")
        try:
            assert ValidationResultError("even", None, 3).message == "3 is odd"
        finally:
            messages.unregister("even")

    def test_failing_formatter_falls_back_to_default(self):
        def broken(name, params, path, value):
            raise KeyError("no template")

        table = MessageTable()
        table.register("broken", broken)
        assert table.format("broken", 3, ["name"], "x") == "Value at 'name' failed rule 'broken'"

    async def test_failing_formatter_does_not_escape_verify(self):
        def broken(name, params, path, value):
            raise KeyError("no template")

        async def rule(value):
            raise ValidationError("broken", 1)

        messages.register("broken", broken)
        try:
            result = await verify(SchemaNode().validate(rule), 1)
            assert result.error is None
            assert result.result_error.rule_name == "broken"
            assert str(result.result_error) == "Value at '<root>' failed rule 'broken'"
        finally:
            messages.unregister("broken")
