"""Named schema registry.

Schemas registered here can be referenced by name anywhere the builder accepts
a node (``attach_to``, ``object``, ``array``), which lets one schema reuse
another without nesting a literal definition.

Names are write-once. The module keeps one process-wide ``default_registry``;
pass an explicit ``SchemaRegistry`` where isolation is needed (tests, plugins).

Example:
    ```python
    from dataknobs_schema import SchemaNode, SchemaRegistry

    registry = SchemaRegistry("models")
    registry.register("address", SchemaNode().object(address_builder))
    person = SchemaNode(registry=registry).object(person_builder)
    person.field("home").object("address")
    ```
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Dict, List

from dataknobs_schema.exceptions import (
    DuplicateKeyError,
    SchemaDefinitionError,
    SchemaNotFoundError,
)

if TYPE_CHECKING:
    from dataknobs_schema.node import SchemaNode

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Thread-safe, write-once mapping from names to schema nodes.

    Attributes:
        name: Name of the registry (for logging/debugging)

    Example:
        ```python
        registry = SchemaRegistry("test")
        registry.register("user", user_schema)
        registry.get("user") is user_schema
        # True
        registry.get("missing", strict=False)
        # None
        ```
    """

    def __init__(self, name: str = "schemas"):
        self._name = name
        self._items: Dict[str, SchemaNode] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        """Get registry name."""
        return self._name

    def register(self, key: str, schema: SchemaNode) -> SchemaNode:
        """Register a schema under a unique name.

        Args:
            key: Non-empty schema name
            schema: Schema node to register

        Returns:
            The registered schema

        Raises:
            SchemaDefinitionError: If the name or schema has the wrong type
            DuplicateKeyError: If the name is already registered
        """
        from dataknobs_schema.node import SchemaNode

        if not key or not isinstance(key, str):
            raise SchemaDefinitionError(
                "invalid name type, must be non-empty string",
                context={"key": key, "registry": self._name},
            )
        if not isinstance(schema, SchemaNode):
            raise SchemaDefinitionError(
                "invalid schema type, must be instance of SchemaNode",
                context={"key": key, "registry": self._name, "type": type(schema).__name__},
            )

        with self._lock:
            if key in self._items:
                raise DuplicateKeyError(
                    f"Schema '{key}' already registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            self._items[key] = schema

        logger.debug("Registered schema '%s' in %s", key, self._name)
        return schema

    def get(self, key: str, strict: bool = True) -> SchemaNode | None:
        """Look up a schema by name.

        Args:
            key: Schema name
            strict: Raise when the name is unknown; otherwise return None

        Returns:
            The registered schema, or None (the "not found" value) for an
            unknown name when strict is False

        Raises:
            SchemaDefinitionError: If key is not a string
            SchemaNotFoundError: If strict and the name is unknown
        """
        if not isinstance(key, str):
            raise SchemaDefinitionError(
                "invalid name type, must be string",
                context={"key": key, "registry": self._name},
            )

        with self._lock:
            if key in self._items:
                return self._items[key]
            if strict:
                raise SchemaNotFoundError(
                    f"Schema '{key}' was not registered",
                    context={
                        "key": key,
                        "registry": self._name,
                        "available_keys": list(self._items.keys()),
                    },
                )
            return None

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def unregister(self, key: str) -> SchemaNode:
        """Remove and return a registered schema.

        Raises:
            SchemaNotFoundError: If the name is unknown
        """
        with self._lock:
            if key not in self._items:
                raise SchemaNotFoundError(
                    f"Schema '{key}' was not registered",
                    context={"key": key, "registry": self._name},
                )
            return self._items.pop(key)

    def list_keys(self) -> List[str]:
        with self._lock:
            return list(self._items.keys())

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"SchemaRegistry(name={self._name!r}, count={self.count()})"


default_registry = SchemaRegistry("schemas")


def register(key: str, schema: SchemaNode) -> SchemaNode:
    """Register a schema in the default registry."""
    return default_registry.register(key, schema)


def get(key: str, strict: bool = True) -> SchemaNode | None:
    """Look up a schema in the default registry; None when not strict and unknown."""
    return default_registry.get(key, strict=strict)


__all__ = ["SchemaRegistry", "default_registry", "get", "register"]
