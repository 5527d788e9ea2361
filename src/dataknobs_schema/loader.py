"""Load schemas from YAML documents or parsed dictionaries.

The loader only translates syntax into builder calls (``field``, ``array``,
``optional``, ``strict``, ``validate``); it adds no semantics of its own.

Document format:

    ```yaml
    schema[]?:              # root key: "schema" plus optional suffixes
      "=": [type object]    # a key made of "=" holds the node's own rules
      name: [type string]   # list value: the field's rules
      nick?: type string    # scalar value: a single rule
      tags[]:               # null value: a bare field
      address!:             # mapping value: nested fields
        city: [type string]
    ```

Key suffixes, in this order: ``[]`` array, ``?`` optional, ``!`` strict.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

import yaml

from dataknobs_schema.exceptions import SchemaDefinitionError
from dataknobs_schema.node import SchemaNode
from dataknobs_schema.registry import SchemaRegistry, default_registry

logger = logging.getLogger(__name__)

KEY_FIELD_RE = re.compile(r"^([^\[?!]*)((?:\[\])?)(\??)(!?)$")
KEY_SCHEMA_RE = re.compile(r"^(schema)((?:\[\])?)(\??)(!?)$")
SELF_RULES_RE = re.compile(r"^=+$")


class SchemaLoader:
    """Builds ``SchemaNode`` trees from the YAML schema format.

    Args:
        registry: Registry for nodes created by this loader, and for ``load``
            and ``loads`` when a name is given
    """

    def __init__(self, registry: SchemaRegistry | None = None):
        self._registry = registry if registry is not None else default_registry

    def _apply_flags(self, match: re.Match, schema: SchemaNode) -> str:
        name, is_array, is_optional, is_strict = match.groups()
        if is_optional:
            schema.optional()
        if is_array:
            schema.array()
        if is_strict:
            schema.strict()
        return name

    def _parse_schema_key(self, key: Any) -> SchemaNode:
        match = KEY_SCHEMA_RE.match(key) if isinstance(key, str) else None
        if match is None:
            raise SchemaDefinitionError(
                f"invalid schema key format, must match {KEY_SCHEMA_RE.pattern}",
                context={"key": key},
            )
        schema = SchemaNode(registry=self._registry)
        self._apply_flags(match, schema)
        return schema

    def _add_field(self, key: Any, parent: SchemaNode) -> SchemaNode:
        match = KEY_FIELD_RE.match(key) if isinstance(key, str) else None
        if match is None:
            raise SchemaDefinitionError(
                f"invalid field key format, must match {KEY_FIELD_RE.pattern}",
                context={"key": key},
            )
        template = SchemaNode(registry=self._registry)
        name = self._apply_flags(match, template)
        return parent.field(name).like(template)

    def _fill(self, schema: SchemaNode, body: Mapping[Any, Any]) -> None:
        for key, value in body.items():
            if isinstance(key, str) and SELF_RULES_RE.match(key):
                schema.validate(value)
                continue

            child = self._add_field(key, schema)
            if isinstance(value, Mapping):
                self._fill(child, value)
            elif value is not None:
                child.validate(value)

    def to_schema(self, data: Mapping[str, Any]) -> SchemaNode:
        """Convert a parsed document to a schema tree.

        Raises:
            SchemaDefinitionError: If the document or one of its keys is malformed
        """
        if not isinstance(data, Mapping) or len(data) != 1:
            raise SchemaDefinitionError(
                "schema document must be a mapping with a single root key",
                context={"type": type(data).__name__},
            )

        (root_key, body), = data.items()
        schema = self._parse_schema_key(root_key)

        if isinstance(body, Mapping):
            self._fill(schema, body)
        elif body is not None:
            schema.validate(body)

        return schema

    def loads(self, text: str, name: str | None = None) -> SchemaNode:
        """Parse a YAML string, optionally registering the result under ``name``."""
        schema = self.to_schema(yaml.safe_load(text))
        if name:
            self._registry.register(name, schema)
        return schema

    def load(self, path: Union[str, Path], name: str | None = None) -> SchemaNode:
        """Load a YAML file, optionally registering the result under ``name``.

        Raises:
            SchemaDefinitionError: If the file does not exist or is malformed
        """
        path = Path(path).resolve()
        if not path.exists():
            raise SchemaDefinitionError(
                f"Schema file not found: {path}", context={"path": str(path)}
            )

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        schema = self.to_schema(data)
        logger.debug("Loaded schema from %s", path)

        if name:
            self._registry.register(name, schema)
        return schema


def to_schema(data: Mapping[str, Any], registry: SchemaRegistry | None = None) -> SchemaNode:
    return SchemaLoader(registry).to_schema(data)


def loads(text: str, name: str | None = None, registry: SchemaRegistry | None = None) -> SchemaNode:
    return SchemaLoader(registry).loads(text, name)


def load(path: Union[str, Path], name: str | None = None, registry: SchemaRegistry | None = None) -> SchemaNode:
    return SchemaLoader(registry).load(path, name)


__all__ = ["SchemaLoader", "load", "loads", "to_schema"]
