"""Schema tree nodes and the fluent builder API.

A ``SchemaNode`` describes one position in a nested value: whether it must be
present, whether it is an array, which rule descriptors apply to it, and which
named fields it contains. Builder calls return a node so they chain.

Example:
    ```python
    from dataknobs_schema import SchemaNode

    person = SchemaNode().object(lambda required, optional: (
        required("name", "type string"),
        optional("age", ["type number", "min_value 0"]),
    ))
    person.field("tags").array()
    ```
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Dict, List, Union

from dataknobs_schema.exceptions import DuplicateKeyError, SchemaDefinitionError
from dataknobs_schema.registry import SchemaRegistry, default_registry

if TYPE_CHECKING:
    from dataknobs_schema.compiler import CompiledSchema
    from dataknobs_schema.config import VerifyOptions
    from dataknobs_schema.rules import Mapper
    from dataknobs_schema.verifier import VerifyResult


class _Missing:
    """Marker for an absent value (a key that is not in the parent mapping)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict) -> _Missing:
        return self

    def __reduce__(self) -> str:
        return "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

Builder = Callable[..., Any]
SchemaRef = Union["SchemaNode", str]


class SchemaNode:
    """One field of a schema tree.

    Attributes:
        is_required: Absence of the value is an error unless False
        is_array: None for "object or scalar"; a bool once ``array()`` was called
        is_strict: Excess fields are rejected even when the caller ignores them
        fields: Nested field nodes by name, None until a field is attached
        validations: Opaque rule descriptors, None until ``validate()`` adds one
    """

    def __init__(self, name: str | None = None, registry: SchemaRegistry | None = None):
        """Create a node, optionally registering it.

        Args:
            name: Register the node under this name when given
            registry: Registry used for name lookups (default: process-wide)
        """
        self._registry = registry if registry is not None else default_registry
        self.is_required: bool = True
        self.is_array: bool | None = None
        self.is_strict: bool = False
        self.fields: Dict[str, SchemaNode] | None = None
        self.validations: List[Any] | None = None

        if name is not None:
            self._registry.register(name, self)

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def _resolve(self, ref: Any) -> Any:
        if isinstance(ref, str):
            return self._registry.get(ref)
        return ref

    def attach_to(self, parent: SchemaRef, name: str) -> SchemaNode:
        """Attach this node to ``parent`` as field ``name``.

        Args:
            parent: Parent node or registered schema name
            name: Field name, a non-empty string

        Returns:
            This node

        Raises:
            SchemaDefinitionError: If parent is not a node or name is invalid
            DuplicateKeyError: If parent already has a field called ``name``
        """
        parent = self._resolve(parent)

        if not isinstance(parent, SchemaNode):
            raise SchemaDefinitionError(
                "schema node must be instance of SchemaNode",
                context={"type": type(parent).__name__},
            )

        if not name or not isinstance(name, str):
            raise SchemaDefinitionError(
                f"invalid schema field name, must be non-empty string, {name!r} given",
                context={"name": name, "type": type(name).__name__},
            )

        return parent._attach(self, name)

    def _attach(self, child: SchemaNode, name: str) -> SchemaNode:
        if self.fields is None:
            self.fields = {}
        elif name in self.fields:
            raise DuplicateKeyError(
                f'duplicate key "{name}"',
                context={"name": name, "fields": sorted(self.fields)},
            )

        self.fields[name] = child
        return child

    def validate(self, validations: Any) -> SchemaNode:
        """Append one or more rule descriptors. Falsy input is ignored."""
        if not validations:
            return self

        if self.validations is None:
            self.validations = []

        if isinstance(validations, (list, tuple)):
            self.validations.extend(validations)
        else:
            self.validations.append(validations)

        return self

    def object(self, builder_or_schema: Builder | SchemaRef) -> SchemaNode:
        """Define the nested fields of this node.

        A callable is invoked as ``builder(required, optional)`` where both
        arguments are this node's bound ``required``/``optional`` methods. A
        node, or the name of a registered one, is cloned onto this node.

        Raises:
            SchemaDefinitionError: If fields are already defined or the
                argument is of an unsupported type
        """
        if self.fields is not None:
            raise SchemaDefinitionError(
                "object already defined",
                context={"fields": sorted(self.fields)},
            )

        builder_or_schema = self._resolve(builder_or_schema)

        if isinstance(builder_or_schema, SchemaNode):
            return self._similar(builder_or_schema)

        if not callable(builder_or_schema):
            raise SchemaDefinitionError(
                "nested builder must be callable",
                context={"type": type(builder_or_schema).__name__},
            )

        builder_or_schema(self.required, self.optional)
        return self

    def array(self, builder_or_schema: Builder | SchemaRef | bool | None = None) -> SchemaNode:
        """Mark this node as an array, optionally defining its item fields.

        With no argument the node becomes array-shaped; a bool sets the flag
        without touching fields; anything ``object()`` accepts also defines
        the fields each item must have.
        """
        if builder_or_schema is not None and not isinstance(builder_or_schema, bool):
            self.object(builder_or_schema)

        self.is_array = True if builder_or_schema is None else bool(builder_or_schema)
        return self

    def field(self, name: str) -> SchemaNode:
        """Create, attach and return a new child node."""
        return SchemaNode(registry=self._registry).attach_to(self, name)

    def required(self, name: str | None = None, validations: Any = None) -> SchemaNode:
        """Mark this node required, or add a required child field.

        Returns:
            This node for the zero-argument form, else the new child
        """
        if name is None and validations is None:
            self.is_required = True
            return self

        return self.field(name).validate(validations)  # type: ignore[arg-type]

    def optional(self, name: str | None = None, validations: Any = None) -> SchemaNode:
        """Mark this node optional, or add an optional child field."""
        if name is None and validations is None:
            self.is_required = False
            return self

        child = self.field(name).validate(validations)  # type: ignore[arg-type]
        child.is_required = False
        return child

    def strict(self, flag: bool = True) -> SchemaNode:
        """Reject excess fields on this node regardless of ``ignore_excess``."""
        self.is_strict = bool(flag)
        return self

    def like(self, other: SchemaNode) -> SchemaNode:
        """Copy the required/array/strict modifiers of ``other``."""
        self.is_required = other.is_required
        if other.is_array is not None:
            self.is_array = other.is_array
        self.is_strict = other.is_strict
        return self

    def clone(self) -> SchemaNode:
        """Deep copy this node and all of its fields."""
        clone = SchemaNode(registry=self._registry)._similar(self)
        if self.is_array is not None:
            clone.is_array = self.is_array
        clone.is_strict = self.is_strict
        return clone

    def _similar(self, other: SchemaNode) -> SchemaNode:
        for name, field_schema in (other.fields or {}).items():
            self._attach(field_schema.clone(), name)

        if other.validations is not None:
            self.validations = copy.deepcopy(other.validations)

        self.is_required = other.is_required
        return self

    def compile(
        self,
        validator: Mapper,
        options: VerifyOptions | Dict[str, Any] | None = None,
    ) -> CompiledSchema:
        """Compile a clone of this schema into a reusable verifier.

        Args:
            validator: Mapper from rule descriptors to rule callables
            options: Passed to the mapper, and used by the compiled verifier

        Returns:
            Async callable ``verifier(value) -> VerifyResult``
        """
        from dataknobs_schema.compiler import compile_schema

        return compile_schema(self, validator, options)

    async def verify(
        self,
        value: Any = MISSING,
        options: VerifyOptions | Dict[str, Any] | None = None,
    ) -> VerifyResult:
        """Verify ``value`` against this schema. See ``verifier.verify``."""
        from dataknobs_schema.verifier import verify

        return await verify(self, value, options)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the tree to plain dictionaries."""
        return {
            "is_required": self.is_required,
            "is_array": self.is_array,
            "is_strict": self.is_strict,
            "validations": copy.deepcopy(self.validations),
            "fields": (
                {name: child.to_dict() for name, child in self.fields.items()}
                if self.fields is not None
                else None
            ),
        }

    def __repr__(self) -> str:
        return (
            f"SchemaNode(is_required={self.is_required}, is_array={self.is_array}, "
            f"is_strict={self.is_strict}, fields={sorted(self.fields or [])}, "
            f"validations={self.validations!r})"
        )


__all__ = ["MISSING", "SchemaNode"]
