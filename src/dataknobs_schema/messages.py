"""Human-readable messages for validation failures.

Each failure is described by ``(rule_name, rule_params, path, value)``. A
``MessageTable`` maps rule names to formatter callables with that signature and
falls back to a generic formatter for names it does not know. The module-level
table is what ``ValidationResultError`` uses; override entries with
``register_message``.

Example:
    ```python
    from dataknobs_schema.messages import register_message

    register_message(
        "min_length",
        lambda name, params, path, value: f"must have at least {params} characters",
    )
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, Dict

logger = logging.getLogger(__name__)

MessageFormatter = Callable[[Any, Any, Sequence[str], Any], str]


def format_path(path: Sequence[str]) -> str:
    """Join a path into dotted notation, ``<root>`` for an empty path."""
    return ".".join(str(part) for part in path) if path else "<root>"


def default_formatter(rule_name: Any, rule_params: Any, path: Sequence[str], value: Any) -> str:
    """Format any failure without rule-specific knowledge."""
    location = format_path(path)
    if rule_name is None:
        return f"Value at '{location}' is invalid"
    if rule_params is None:
        return f"Value at '{location}' failed rule '{rule_name}'"
    return f"Value at '{location}' failed rule '{rule_name}' ({rule_params!r})"


def _required(rule_name: Any, rule_params: Any, path: Sequence[str], value: Any) -> str:
    return f"Field '{format_path(path)}' is required"


def _type(rule_name: Any, rule_params: Any, path: Sequence[str], value: Any) -> str:
    return f"Field '{format_path(path)}' expects {rule_params}, got {type(value).__name__}"


def _available_fields(rule_name: Any, rule_params: Any, path: Sequence[str], value: Any) -> str:
    allowed = ", ".join(str(name) for name in rule_params or [])
    return f"Field '{format_path(path)}' has unknown fields, allowed fields: {allowed}"


class MessageTable:
    """Per-rule-name message formatters with a default fallback."""

    def __init__(self, default: MessageFormatter = default_formatter):
        self._default = default
        self._formatters: Dict[str, MessageFormatter] = {}

    def register(self, rule_name: str, formatter: MessageFormatter) -> None:
        """Set the formatter used for ``rule_name``, replacing any existing one."""
        self._formatters[rule_name] = formatter

    def unregister(self, rule_name: str) -> None:
        """Drop a rule-specific formatter; unknown names are ignored."""
        self._formatters.pop(rule_name, None)

    def has(self, rule_name: str) -> bool:
        return rule_name in self._formatters

    def format(self, rule_name: Any, rule_params: Any, path: Sequence[str], value: Any) -> str:
        """Format a failure.

        A formatter that raises is logged and replaced by a parameterless
        default message, so building an error never fails on formatting.
        """
        formatter = self._formatters.get(rule_name, self._default) if isinstance(rule_name, str) else self._default
        try:
            return formatter(rule_name, rule_params, path, value)
        except Exception as exc:
            logger.warning("Message formatter for %r failed: %r", rule_name, exc)
        return default_formatter(rule_name, None, path, value)


messages = MessageTable()
messages.register("required", _required)
messages.register("type", _type)
messages.register("available_fields", _available_fields)


def register_message(rule_name: str, formatter: MessageFormatter) -> None:
    """Register a formatter in the default message table."""
    messages.register(rule_name, formatter)


def format_message(rule_name: Any, rule_params: Any, path: Sequence[str], value: Any) -> str:
    """Format a failure with the default message table."""
    return messages.format(rule_name, rule_params, path, value)


__all__ = [
    "MessageFormatter",
    "MessageTable",
    "default_formatter",
    "format_message",
    "format_path",
    "messages",
    "register_message",
]
