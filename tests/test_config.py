"""Tests for verification options."""

import pytest

from dataknobs_schema import SchemaDefinitionError, VerifyOptions
from dataknobs_schema.config import ENV_IGNORE_EXCESS, resolve_options


def noop_mapper(descriptors, options):
    return []


class TestVerifyOptions:
    """Test VerifyOptions construction."""

    def test_defaults(self):
        options = VerifyOptions()
        assert options.validator is None
        assert options.ignore_excess is False
        assert options.extra == {}

    def test_from_dict(self):
        options = VerifyOptions.from_dict(
            {"validator": noop_mapper, "ignore_excess": 1, "locale": "en"}
        )
        assert options.validator is noop_mapper
        assert options.ignore_excess is True
        assert options.extra == {"locale": "en"}
        assert options.get("locale") == "en"
        assert options.get("ignore_excess") is True
        assert options.get("missing", "default") == "default"

    def test_camel_case_alias(self):
        assert VerifyOptions.from_dict({"ignoreExcess": True}).ignore_excess is True
        assert "ignoreExcess" not in VerifyOptions.from_dict({"ignoreExcess": True}).extra

    def test_validator_must_be_callable(self):
        with pytest.raises(SchemaDefinitionError):
            VerifyOptions.from_dict({"validator": "type string"})

    def test_without_validator(self):
        options = VerifyOptions(validator=noop_mapper, ignore_excess=True, extra={"a": 1})
        copy = options.without_validator()
        assert copy.validator is None
        assert copy.ignore_excess is True
        assert copy.extra == {"a": 1}
        assert copy.extra is not options.extra

    def test_to_dict(self):
        options = VerifyOptions(ignore_excess=True, extra={"a": 1})
        assert options.to_dict() == {"validator": None, "ignore_excess": True, "a": 1}


class TestFromEnv:
    """Test environment-based options."""

    @pytest.mark.parametrize("raw, expected", [("1", True), ("true", True), ("YES", True), ("0", False), ("off", False)])
    def test_flag_values(self, monkeypatch, raw, expected):
        monkeypatch.setenv(ENV_IGNORE_EXCESS, raw)
        assert VerifyOptions.from_env().ignore_excess is expected

    def test_unset_defaults_to_false(self, monkeypatch):
        monkeypatch.delenv(ENV_IGNORE_EXCESS, raising=False)
        assert VerifyOptions.from_env().ignore_excess is False

    def test_invalid_value(self, monkeypatch):
        monkeypatch.setenv(ENV_IGNORE_EXCESS, "maybe")
        with pytest.raises(SchemaDefinitionError):
            VerifyOptions.from_env()

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv(ENV_IGNORE_EXCESS, "true")
        options = VerifyOptions.from_env(ignore_excess=False, validator=noop_mapper)
        assert options.ignore_excess is False
        assert options.validator is noop_mapper


class TestResolveOptions:
    """Test option coercion."""

    def test_none(self):
        assert resolve_options(None) == VerifyOptions()

    def test_instance_passthrough(self):
        options = VerifyOptions(ignore_excess=True)
        assert resolve_options(options) is options

    def test_mapping(self):
        assert resolve_options({"ignore_excess": True}).ignore_excess is True

    def test_invalid(self):
        with pytest.raises(SchemaDefinitionError):
            resolve_options("ignore_excess")
