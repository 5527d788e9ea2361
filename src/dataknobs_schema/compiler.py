"""Compile schemas into reusable verifiers.

Compiling maps every node's rule descriptors to rule callables once, up
front, instead of on every verify call:

    ```python
    def mapper(descriptors, options):
        return [RULES[name] for name in descriptors]

    check_person = person.compile(mapper)
    result = await check_person({"name": "Al"})
    ```

The schema is cloned first; the original tree is never modified.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from dataknobs_schema.config import VerifyOptions, resolve_options
from dataknobs_schema.exceptions import SchemaDefinitionError
from dataknobs_schema.node import MISSING, SchemaNode
from dataknobs_schema.rules import Mapper, apply_mapper
from dataknobs_schema.verifier import Verifier, VerifyResult, verify

logger = logging.getLogger(__name__)


def compile_node(schema: SchemaNode, validator: Mapper, options: Any) -> SchemaNode:
    """Rewrite the validations of ``schema`` and its fields in place.

    Children are compiled before their parent. A mapper returning None leaves
    that node's validations unchanged.

    Raises:
        SchemaDefinitionError: If the mapper returns anything other than a
            callable, a sequence of callables, or None
    """
    for field_schema in (schema.fields or {}).values():
        compile_node(field_schema, validator, options)

    rules = apply_mapper(validator, copy.deepcopy(schema.validations or []), options)
    if rules is not None:
        schema.validations = rules

    return schema


class CompiledSchema:
    """A compiled schema clone plus the options it verifies with.

    Calling the instance verifies a value; the per-call mapper is never
    applied again, since the rules are already callables.
    """

    def __init__(self, schema: SchemaNode, options: VerifyOptions, verifier: Verifier | None = None):
        self._schema = schema
        self._options = options.without_validator()
        self._verifier = verifier

    @property
    def schema(self) -> SchemaNode:
        return self._schema

    @property
    def options(self) -> VerifyOptions:
        return self._options

    async def __call__(self, value: Any = MISSING) -> VerifyResult:
        return await verify(self._schema, value, self._options, verifier=self._verifier)

    def __repr__(self) -> str:
        return f"CompiledSchema({self._schema!r})"


def compile_schema(
    schema: SchemaNode,
    validator: Mapper,
    options: VerifyOptions | Mapping[str, Any] | None = None,
    verifier: Verifier | None = None,
) -> CompiledSchema:
    """Clone ``schema``, map its rule descriptors, and return a verifier.

    Args:
        schema: Schema to compile
        validator: Mapper from rule descriptors to rule callables
        options: Passed to the mapper and used by every call of the result
        verifier: Alternative check pipeline

    Raises:
        SchemaDefinitionError: If the arguments or mapper output are invalid
    """
    if not isinstance(schema, SchemaNode):
        raise SchemaDefinitionError(
            "schema must be instance of SchemaNode",
            context={"type": type(schema).__name__},
        )
    if not callable(validator):
        raise SchemaDefinitionError(
            "validator mapper must be callable",
            context={"type": type(validator).__name__},
        )

    resolved = resolve_options(options)
    compiled = compile_node(schema.clone(), validator, resolved)
    logger.debug("Compiled schema with %d top-level fields", len(compiled.fields or {}))
    return CompiledSchema(compiled, resolved, verifier)


__all__ = ["CompiledSchema", "compile_node", "compile_schema"]
