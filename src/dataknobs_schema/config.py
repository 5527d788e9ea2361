"""Verification options.

``verify`` accepts options as ``None``, a plain dict, or a ``VerifyOptions``
instance. Recognized keys:

- ``validator``: mapper applied to each node's rule descriptors on every call
- ``ignore_excess``: do not report keys that have no declared field

Anything else is kept in ``extra`` and is visible to mappers, which receive
the options object as their second argument.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping

from dataknobs_schema.exceptions import SchemaDefinitionError
from dataknobs_schema.rules import Mapper

ENV_IGNORE_EXCESS = "DATAKNOBS_SCHEMA_IGNORE_EXCESS"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise SchemaDefinitionError(
        f"Invalid boolean value for {name}: {raw!r}",
        context={"variable": name, "value": raw},
    )


@dataclass
class VerifyOptions:
    """Options for a verify call.

    Attributes:
        validator: Optional mapper from rule descriptors to rule callables
        ignore_excess: Skip the excess-field check on non-strict nodes
        extra: Any other caller-supplied settings, passed through to mappers
    """

    validator: Mapper | None = None
    ignore_excess: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VerifyOptions:
        """Build options from a plain mapping.

        ``ignoreExcess`` is accepted as an alias of ``ignore_excess``.
        """
        values = dict(data)
        validator = values.pop("validator", None)
        ignore_excess = values.pop("ignore_excess", values.pop("ignoreExcess", False))
        if validator is not None and not callable(validator):
            raise SchemaDefinitionError(
                "options.validator must be callable",
                context={"type": type(validator).__name__},
            )
        return cls(validator=validator, ignore_excess=bool(ignore_excess), extra=values)

    @classmethod
    def from_env(cls, **overrides: Any) -> VerifyOptions:
        """Build options from ``DATAKNOBS_SCHEMA_*`` environment variables.

        Keyword overrides win over the environment.
        """
        data: Dict[str, Any] = {"ignore_excess": _env_flag(ENV_IGNORE_EXCESS, False)}
        data.update(overrides)
        return cls.from_dict(data)

    def without_validator(self) -> VerifyOptions:
        """Copy of these options with the per-call mapper removed."""
        return replace(self, validator=None, extra=dict(self.extra))

    def get(self, key: str, default: Any = None) -> Any:
        """Dict-style access, so mappers can treat options as a mapping."""
        if key in ("validator", "ignore_excess"):
            return getattr(self, key)
        return self.extra.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {"validator": self.validator, "ignore_excess": self.ignore_excess, **self.extra}


def resolve_options(options: VerifyOptions | Mapping[str, Any] | None) -> VerifyOptions:
    """Coerce the accepted option forms into a ``VerifyOptions``."""
    if options is None:
        return VerifyOptions()
    if isinstance(options, VerifyOptions):
        return options
    if isinstance(options, Mapping):
        return VerifyOptions.from_dict(options)
    raise SchemaDefinitionError(
        "options must be a dict or VerifyOptions",
        context={"type": type(options).__name__},
    )


__all__ = ["ENV_IGNORE_EXCESS", "VerifyOptions", "resolve_options"]
