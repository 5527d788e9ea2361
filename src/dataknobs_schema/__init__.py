"""Declarative schemas for nested data with asynchronous verification.

The dataknobs-schema package describes the expected shape of nested values
(objects, arrays and their fields) as a tree of ``SchemaNode`` objects and
verifies runtime values against it, reporting the first failure as a
path-aware ``ValidationResultError``.

## Modules

### node - Schema trees
``SchemaNode`` with a chainable builder API: ``field``, ``required``,
``optional``, ``object``, ``array``, ``validate``, ``strict``, ``clone``.

### verifier - Verification
``verify(schema, value, options)`` returns a ``VerifyResult`` that unpacks as
``(error, valid, result_error)``.

### compiler - Compiled verifiers
``schema.compile(mapper)`` maps rule descriptors to rule callables once.

### registry - Named schemas
``SchemaRegistry`` and the process-wide ``default_registry``.

### loader - YAML schemas
``load``/``loads`` translate the YAML schema format into builder calls.

## Quick Example

```python
from dataknobs_schema import SchemaNode, ValidationError

async def is_string(value):
    if not isinstance(value, str):
        raise ValidationError("type", "string")

person = SchemaNode().object(lambda required, optional: (
    required("name", is_string),
    optional("age"),
))

error, valid, result_error = await person.verify({"name": "Al"})
```
"""

from dataknobs_schema.compiler import CompiledSchema, compile_schema
from dataknobs_schema.config import VerifyOptions
from dataknobs_schema.exceptions import (
    DuplicateKeyError,
    SchemaDefinitionError,
    SchemaError,
    SchemaNotFoundError,
    ValidationError,
    ValidationResultError,
)
from dataknobs_schema.loader import SchemaLoader, load, loads, to_schema
from dataknobs_schema.messages import MessageTable, format_message, register_message
from dataknobs_schema.node import MISSING, SchemaNode
from dataknobs_schema.registry import SchemaRegistry, default_registry
from dataknobs_schema.rules import Invalid
from dataknobs_schema.sequencer import STOP, iterate_list, iterate_mapping
from dataknobs_schema.verifier import Verifier, VerifyResult, verify

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # Schema tree
    "MISSING",
    "SchemaNode",
    # Verification
    "Invalid",
    "Verifier",
    "VerifyOptions",
    "VerifyResult",
    "verify",
    # Compilation
    "CompiledSchema",
    "compile_schema",
    # Registry
    "SchemaRegistry",
    "default_registry",
    # Loader
    "SchemaLoader",
    "load",
    "loads",
    "to_schema",
    # Errors
    "SchemaError",
    "SchemaDefinitionError",
    "DuplicateKeyError",
    "SchemaNotFoundError",
    "ValidationError",
    "ValidationResultError",
    # Messages
    "MessageTable",
    "format_message",
    "register_message",
    # Sequencer
    "STOP",
    "iterate_list",
    "iterate_mapping",
]
