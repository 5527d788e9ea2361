"""Asynchronous verification of values against schema trees.

For every node the verifier runs, in order and stopping at the first failure:

1. required check: a missing value passes only on optional nodes, and then
   nothing else is checked for that node
2. shape check: arrays where ``is_array`` is set, non-arrays elsewhere
3. the node's own rules, in declaration order
4. nested fields, when the node declares any: once on the value, or once
   per item of an array value; each run requires a mapping, rejects
   undeclared keys, then recurses into every declared field

Every check is a coroutine resolving to a sequencer signal (see
``dataknobs_schema.sequencer``). Failures come back as data: ``verify``
always returns a ``VerifyResult`` and never raises for an invalid value.

Example:
    ```python
    result = await verify(person, {"name": "Al"})
    if not result:
        print(result.result_error or result.error)
    ```
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterator, Tuple

from dataknobs_schema.config import VerifyOptions, resolve_options
from dataknobs_schema.exceptions import (
    SchemaDefinitionError,
    ValidationError,
    ValidationResultError,
)
from dataknobs_schema.node import MISSING, SchemaNode
from dataknobs_schema.rules import Invalid, apply_mapper, call_rule
from dataknobs_schema.sequencer import STOP, Signal, iterate_list, iterate_mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Position:
    """Where in the value tree a check runs."""

    path: Tuple[str, ...] = ()
    array_item_index: int | None = None

    def child(self, name: str) -> Position:
        return Position(self.path + (name,), self.array_item_index)

    def item(self, index: int) -> Position:
        return Position(self.path + (str(index),), index)


ROOT = Position()


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of one verify call.

    Exactly one of ``error`` and ``result_error`` is set when ``valid`` is
    False; both are None when it is True. ``error`` means a rule or mapper
    broke; ``result_error`` means the value is invalid.
    """

    error: BaseException | None
    valid: bool
    result_error: ValidationResultError | None

    @classmethod
    def from_signal(cls, signal: Signal) -> VerifyResult:
        if signal is None or signal is STOP:
            return cls(None, True, None)
        if isinstance(signal, ValidationResultError):
            return cls(None, False, signal)
        return cls(signal, False, None)  # type: ignore[arg-type]

    def __bool__(self) -> bool:
        return self.valid

    def __iter__(self) -> Iterator[Any]:
        return iter((self.error, self.valid, self.result_error))


class Verifier:
    """The per-node check pipeline.

    Subclasses may override individual ``check_*`` methods; each receives
    ``(schema, value, options, position)`` and returns a signal.
    """

    async def verify_schema(
        self,
        schema: SchemaNode,
        value: Any,
        options: VerifyOptions,
        position: Position = ROOT,
    ) -> Signal:
        checks = (
            self.check_required,
            self.check_is_array,
            self.check_validations,
            self.check_object,
        )
        return await iterate_list(
            checks, lambda check, _: check(schema, value, options, position)
        )

    async def check_required(
        self, schema: SchemaNode, value: Any, options: VerifyOptions, position: Position
    ) -> Signal:
        if value is not MISSING:
            return None

        if schema.is_required:
            return self.result_error("required", True, value, position)

        return STOP

    async def check_is_array(
        self, schema: SchemaNode, value: Any, options: VerifyOptions, position: Position
    ) -> Signal:
        if bool(schema.is_array) == isinstance(value, (list, tuple)):
            return None

        return self.result_error(
            "type", "array" if schema.is_array else "object", value, position
        )

    async def check_validations(
        self, schema: SchemaNode, value: Any, options: VerifyOptions, position: Position
    ) -> Signal:
        rules: Any = schema.validations
        if not rules:
            return None

        if options.validator is not None:
            try:
                rules = apply_mapper(options.validator, copy.deepcopy(rules), options)
            except Exception as exc:
                logger.debug("Validator mapper failed at %s: %r", list(position.path), exc)
                return exc
            if rules is None:
                return SchemaDefinitionError(
                    "invalid validation rule type after user-validator mapping",
                    context={"mapped_type": "NoneType"},
                )

        async def run_rule(rule: Any, index: int) -> Signal:
            try:
                outcome = await call_rule(rule, value)
                passed = outcome is None or (
                    not isinstance(outcome, Invalid) and bool(outcome)
                )
            except ValidationError as exc:
                return self.result_error(exc.rule_name, exc.rule_params, value, position)
            except Exception as exc:
                logger.debug(
                    "Rule %d raised at %s: %r", index, list(position.path), exc
                )
                return exc

            if passed:
                return None
            if isinstance(outcome, Invalid):
                return self.result_error(
                    outcome.rule_name, outcome.rule_params, value, position
                )
            return self.result_error(None, None, value, position)

        return await iterate_list(rules, run_rule)

    async def check_object(
        self, schema: SchemaNode, value: Any, options: VerifyOptions, position: Position
    ) -> Signal:
        if schema.fields is None:
            return None

        if not schema.is_array:
            return await self.validate_fields(schema, value, options, position)

        return await iterate_list(
            value,
            lambda item, index: self.validate_fields(
                schema, item, options, position.item(index)
            ),
        )

    async def validate_fields(
        self, schema: SchemaNode, value: Any, options: VerifyOptions, position: Position
    ) -> Signal:
        checks = (
            self.check_fields_exist,
            self.check_excess_fields,
            self.check_nested_fields,
        )
        return await iterate_list(
            checks, lambda check, _: check(schema, value, options, position)
        )

    async def check_fields_exist(
        self, schema: SchemaNode, value: Any, options: VerifyOptions, position: Position
    ) -> Signal:
        if isinstance(value, Mapping):
            return None

        return self.result_error("type", "object", value, position)

    async def check_excess_fields(
        self, schema: SchemaNode, value: Any, options: VerifyOptions, position: Position
    ) -> Signal:
        if options.ignore_excess and not schema.is_strict:
            return None

        declared = schema.fields or {}
        if all(key in declared for key in value):
            return None

        return self.result_error("available_fields", sorted(declared), value, position)

    async def check_nested_fields(
        self, schema: SchemaNode, value: Any, options: VerifyOptions, position: Position
    ) -> Signal:
        return await iterate_mapping(
            schema.fields,
            lambda field_schema, name: self.verify_schema(
                field_schema, value.get(name, MISSING), options, position.child(name)
            ),
        )

    @staticmethod
    def result_error(
        rule_name: str | None, rule_params: Any, value: Any, position: Position
    ) -> ValidationResultError:
        return ValidationResultError(
            rule_name, rule_params, value, position.array_item_index, position.path
        )


default_verifier = Verifier()


async def verify(
    schema: SchemaNode,
    value: Any = MISSING,
    options: VerifyOptions | Mapping[str, Any] | None = None,
    verifier: Verifier | None = None,
) -> VerifyResult:
    """Verify ``value`` against ``schema``.

    Args:
        schema: Root schema node
        value: Value to check; ``MISSING`` stands for "no value at all"
        options: ``VerifyOptions`` or a dict with ``validator``/``ignore_excess``
        verifier: Alternative check pipeline (default: ``default_verifier``)

    Returns:
        VerifyResult; unpacks as ``(error, valid, result_error)``

    Raises:
        SchemaDefinitionError: If schema is not a SchemaNode or options are malformed
    """
    if not isinstance(schema, SchemaNode):
        raise SchemaDefinitionError(
            "schema must be instance of SchemaNode",
            context={"type": type(schema).__name__},
        )

    resolved = resolve_options(options)
    signal = await (verifier or default_verifier).verify_schema(schema, value, resolved)
    result = VerifyResult.from_signal(signal)

    if result.error is not None:
        logger.debug("Verification aborted by hard error: %r", result.error)
    elif result.result_error is not None:
        logger.debug("Verification failed: %s", result.result_error)

    return result


__all__ = ["Position", "ROOT", "VerifyResult", "Verifier", "default_verifier", "verify"]
