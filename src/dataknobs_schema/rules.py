"""Rule contract shared by the compiler and the verifier.

A rule is any callable taking the value under test. It may be a plain function
or a coroutine function, and it reports its outcome through its return value
or by raising:

- ``None`` or ``True``: the value passed
- ``False``: the value is invalid, with no further detail
- ``Invalid(rule_name, rule_params)``: the value is invalid, with detail
- raising ``ValidationError``: the value is invalid, with detail
- raising anything else: the rule itself is broken (a hard error)

Rule *descriptors* (what ``SchemaNode.validate`` stores) are opaque data. A
mapper turns a node's descriptors into rule callables, either once at compile
time or on every verify call.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, List, Union

from dataknobs_schema.exceptions import SchemaDefinitionError

Rule = Callable[[Any], Union[Any, Awaitable[Any]]]
Mapper = Callable[[Any, Any], Union[Rule, Sequence[Rule], None]]


@dataclass(frozen=True)
class Invalid:
    """Explicit "invalid" outcome returned by a rule."""

    rule_name: str | None = None
    rule_params: Any = None


def normalize_rules(mapped: Any) -> List[Rule] | None:
    """Check and normalize a mapper's return value.

    Args:
        mapped: What the mapper returned

    Returns:
        A list of rule callables, or None when the mapper returned None

    Raises:
        SchemaDefinitionError: If the value is neither a callable nor a
            sequence of callables
    """
    if mapped is None:
        return None
    if callable(mapped):
        return [mapped]
    if isinstance(mapped, Sequence) and not isinstance(mapped, (str, bytes)):
        rules = list(mapped)
        if all(callable(rule) for rule in rules):
            return rules
    raise SchemaDefinitionError(
        "invalid validation rule type after user-validator mapping",
        context={"mapped_type": type(mapped).__name__},
    )


def apply_mapper(mapper: Mapper, descriptors: Any, options: Any) -> List[Rule] | None:
    """Run ``mapper`` over a node's descriptors and normalize the result."""
    return normalize_rules(mapper(descriptors, options))


async def call_rule(rule: Rule, value: Any) -> Any:
    """Invoke a rule, awaiting its result if it is awaitable."""
    result = rule(value)
    if inspect.isawaitable(result):
        result = await result
    return result


__all__ = ["Invalid", "Mapper", "Rule", "apply_mapper", "call_rule", "normalize_rules"]
