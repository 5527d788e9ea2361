"""Exception hierarchy for schema construction and verification.

Two families of errors live here:

- Construction errors (``SchemaDefinitionError`` and its subclasses) are
  raised synchronously while a schema is being authored, registered or
  compiled. They are never recovered internally.
- Rule errors (``ValidationError`` and ``ValidationResultError``) describe a
  value that failed a check. Rules raise ``ValidationError``; the verifier
  turns it into a ``ValidationResultError`` bound to the checked value and its
  position in the tree, and hands that back as data.

Example:
    ```python
    from dataknobs_schema.exceptions import ValidationError

    async def min_length_3(value):
        if len(value) < 3:
            raise ValidationError("min_length", 3)
    ```
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Sequence

from dataknobs_schema.messages import format_message


def snapshot(value: Any) -> Any:
    """Copy ``value`` as deeply as it allows.

    Falls back to a shallow copy, then to the value itself, for objects such
    as locks, generators or open files that refuse to be deep-copied.
    """
    try:
        return copy.deepcopy(value)
    except (TypeError, copy.Error):
        pass
    try:
        return copy.copy(value)
    except (TypeError, copy.Error):
        return value


class SchemaError(Exception):
    """Base exception for the dataknobs_schema package.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (takes precedence when both are given)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class SchemaDefinitionError(SchemaError):
    """Raised when a schema is built, compiled or loaded incorrectly.

    Common scenarios include:
    - Attaching a field to something that is not a schema node
    - Empty or non-string field names
    - Redefining the nested fields of a node
    - A validator mapper returning something other than rule callables

    Example:
        ```python
        raise SchemaDefinitionError(
            "object already defined",
            context={"fields": ["name", "age"]}
        )
        ```
    """

    pass


class DuplicateKeyError(SchemaDefinitionError):
    """Raised when a name is attached or registered twice."""

    pass


class SchemaNotFoundError(SchemaError):
    """Raised when a strict registry lookup finds nothing."""

    pass


class ValidationError(SchemaError):
    """A rule-level failure, independent of any value or tree position.

    Raise it from a rule implementation to signal "this rule failed".

    Args:
        rule_name: Name of the failed rule, must be a non-empty string
        rule_params: Parameters of the failed rule

    Raises:
        SchemaDefinitionError: If rule_name is empty or not a string
    """

    def __init__(self, rule_name: str, rule_params: Any = None):
        if not rule_name or not isinstance(rule_name, str):
            raise SchemaDefinitionError(
                "invalid rule_name, must be non-empty string",
                context={"rule_name": rule_name},
            )
        self.rule_name = rule_name
        self.rule_params = rule_params
        super().__init__(
            format_message(rule_name, rule_params, [], None),
            context={"rule_name": rule_name, "rule_params": rule_params},
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rule_name!r}, {self.rule_params!r})"


class ValidationResultError(ValidationError):
    """A value-bound validation failure at one position of the schema tree.

    ``value``, ``rule_params`` and ``path`` are copied (see ``snapshot``) when
    the error is built, so later mutation of the checked object cannot change
    what the error reports.

    Attributes:
        rule_name: Failed rule name (None when a rule failed without detail)
        rule_params: Failed rule parameters
        value: Copy of the value that failed
        array_item_index: Index of the enclosing array item, or None
        path: Field names (and array indexes) leading to the failed value
    """

    def __init__(
        self,
        rule_name: str | None,
        rule_params: Any,
        value: Any,
        array_item_index: int | None = None,
        path: Sequence[str] | None = None,
    ):
        # rule_name may legitimately be None here, so skip the parent check
        self.rule_name = rule_name
        self.rule_params = snapshot(rule_params)
        self.value = snapshot(value)
        self.array_item_index = (
            array_item_index
            if isinstance(array_item_index, int) and not isinstance(array_item_index, bool)
            else None
        )
        self.path: List[str] = list(path or [])
        SchemaError.__init__(
            self,
            format_message(self.rule_name, self.rule_params, self.path, self.value),
            context={
                "rule_name": self.rule_name,
                "rule_params": self.rule_params,
                "array_item_index": self.array_item_index,
                "path": self.path,
            },
        )

    @property
    def message(self) -> str:
        """Human-readable message, formatted with the current message table."""
        return format_message(self.rule_name, self.rule_params, self.path, self.value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a plain dictionary."""
        return {
            "rule_name": self.rule_name,
            "rule_params": snapshot(self.rule_params),
            "value": snapshot(self.value),
            "array_item_index": self.array_item_index,
            "path": list(self.path),
            "message": self.message,
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.rule_name!r}, {self.rule_params!r}, "
            f"value={self.value!r}, array_item_index={self.array_item_index!r}, "
            f"path={self.path!r})"
        )


__all__ = [
    "SchemaError",
    "SchemaDefinitionError",
    "DuplicateKeyError",
    "SchemaNotFoundError",
    "ValidationError",
    "ValidationResultError",
    "snapshot",
]
