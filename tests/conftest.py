"""Pytest configuration and fixtures for dataknobs_schema tests."""

from typing import Any, Callable, Dict, List

import pytest

from dataknobs_schema import SchemaNode, SchemaRegistry, ValidationError

TYPES: Dict[str, Any] = {
    "string": str,
    "number": (int, float),
    "object": dict,
    "array": (list, tuple),
}


def _make_rule(descriptor: str) -> Callable[[Any], Any]:
    name, _, param = descriptor.partition(" ")

    if name == "type":
        expected = TYPES[param]

        async def check_type(value):
            if not isinstance(value, expected) or isinstance(value, bool):
                raise ValidationError("type", param)

        return check_type

    if name in ("min_length", "max_length"):
        limit = int(param)

        async def check_length(value):
            too_short = name == "min_length" and len(value) < limit
            too_long = name == "max_length" and len(value) > limit
            if too_short or too_long:
                raise ValidationError(name, limit)

        return check_length

    if name in ("min_value", "max_value"):
        limit = float(param)

        def check_value(value):
            if name == "min_value":
                return value >= limit
            return value <= limit

        return check_value

    raise KeyError(descriptor)


def descriptor_mapper(descriptors: List[str], options: Any) -> List[Callable[[Any], Any]]:
    """Map "name param" strings to rule callables."""
    return [_make_rule(descriptor) for descriptor in descriptors]


@pytest.fixture
def registry():
    """Isolated schema registry."""
    return SchemaRegistry("test")


@pytest.fixture
def mapper():
    return descriptor_mapper


@pytest.fixture
def person(registry):
    """{name: required string, age: optional number}."""
    return SchemaNode(registry=registry).object(
        lambda required, optional: (
            required("name", "type string"),
            optional("age", "type number"),
        )
    )


@pytest.fixture
def calls():
    """Records rule invocations."""
    return []


@pytest.fixture
def recording_rule(calls):
    def factory(label, outcome=None):
        async def rule(value):
            calls.append((label, value))
            return outcome

        return rule

    return factory
