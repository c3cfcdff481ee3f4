# File: schemabridge/dispatch.py
"""
schemabridge - Structural Dispatch
===================================
Turns the structural facts of one composite type into its ``BridgeResult``.

The shape tag is computed once (``ShapeKind``) and matched exhaustively here:

    named       → { a: A; b: B; }           ObjectSchema (renamed fields)
    newtype     → inner type, unchanged     inner schema
    positional  → [A, B, ...]               TupleSchema
    unit        → null                      NullSchema
    enum        → 'a' | 'b' | ...           EnumSchema (renamed variants)

Field and element types are resolved through the type bridge registry that is
passed in, so composite types nest inside containers and vice versa.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Tuple

from schemabridge.conversion import NameTable
from schemabridge.models import NamingRule, ShapeKind, TypeFacts
from schemabridge.naming import apply_rename
from schemabridge.schema import (
    NULL,
    BridgeResult,
    EnumSchema,
    ObjectSchema,
    Schema,
    TupleSchema,
)
from schemabridge.validators import ensure_valid

if TYPE_CHECKING:
    from schemabridge.registry import TypeBridgeRegistry

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.dispatch")


def _dispatch_named(facts: TypeFacts, registry: "TypeBridgeRegistry") -> BridgeResult:
    rule: NamingRule = facts.options.effective_rule
    parts: List[str] = []
    fields: List[Tuple[str, Schema]] = []
    for field_facts in facts.fields:
        name: str = apply_rename(field_facts.name, rule)
        inner: BridgeResult = registry.bridge(field_facts.annotation)
        parts.append(f"{name}: {inner.ts};")
        fields.append((name, inner.schema))
    return BridgeResult(
        ts="{ " + " ".join(parts) + " }",
        schema=ObjectSchema(fields=tuple(fields)),
    )


def _dispatch_newtype(facts: TypeFacts, registry: "TypeBridgeRegistry") -> BridgeResult:
    return registry.bridge(facts.fields[0].annotation)


def _dispatch_positional(facts: TypeFacts, registry: "TypeBridgeRegistry") -> BridgeResult:
    elements: List[BridgeResult] = [registry.bridge(f.annotation) for f in facts.fields]
    return BridgeResult(
        ts="[" + ", ".join(e.ts for e in elements) + "]",
        schema=TupleSchema(elements=tuple(e.schema for e in elements)),
    )


def _dispatch_enum(facts: TypeFacts) -> BridgeResult:
    table: NameTable = enum_name_table(facts)
    return BridgeResult(
        ts=" | ".join(f"'{display}'" for display in table.display_names),
        schema=EnumSchema(names=table.display_names),
    )


def enum_name_table(facts: TypeFacts) -> NameTable:
    """The name table an enumeration renders with (and converts strings with)."""
    return NameTable.build(facts.name, facts.variants, facts.options.effective_rule)


def dispatch(facts: TypeFacts, registry: "TypeBridgeRegistry") -> BridgeResult:
    """
    Map one composite type to its structural string and schema.

    Raises:
        InvalidTypeDefinitionError: the facts fail validation.
        AmbiguousNameError: two fields/variants render to the same name.
        UnsupportedTypeError: a field type is outside the bridgeable set.
    """
    ensure_valid(facts)
    logger.debug("Dispatching %r", facts)

    kind: ShapeKind = facts.kind
    if kind is ShapeKind.NAMED:
        return _dispatch_named(facts, registry)
    if kind is ShapeKind.NEWTYPE:
        return _dispatch_newtype(facts, registry)
    if kind is ShapeKind.POSITIONAL:
        return _dispatch_positional(facts, registry)
    if kind is ShapeKind.UNIT:
        return BridgeResult(ts="null", schema=NULL)
    if kind is ShapeKind.ENUM:
        return _dispatch_enum(facts)
    raise AssertionError(f"Unhandled shape kind: {kind!r}")


__all__: List[str] = [
    "dispatch",
    "enum_name_table",
]
