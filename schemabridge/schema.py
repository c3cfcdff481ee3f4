# File: schemabridge/schema.py
"""
schemabridge - Schema IR
=========================
The closed type algebra every native type maps to, independent of any target
language's surface syntax.

Each variant is a frozen pydantic model carrying a literal ``kind`` tag, and
``Schema`` is the discriminated union of all of them. Values are immutable and
compare structurally: two schemas are equal iff their tags and recursively
contained schemas are equal. ``ObjectSchema`` keeps its fields in source order
and that order takes part in equality.

A schema never carries the name of the type it was produced for; naming is a
property of the mapping step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.schema")

_SCHEMA_CONFIG: ConfigDict = ConfigDict(frozen=True, extra="forbid")


class _SchemaNode(BaseModel):
    model_config = _SCHEMA_CONFIG


# ---------------------------------------------------------------------------
# Atomic variants
# ---------------------------------------------------------------------------


class StringSchema(_SchemaNode):
    kind: Literal["string"] = "string"


class NumberSchema(_SchemaNode):
    kind: Literal["number"] = "number"


class BooleanSchema(_SchemaNode):
    kind: Literal["boolean"] = "boolean"


class NullSchema(_SchemaNode):
    kind: Literal["null"] = "null"


class AnySchema(_SchemaNode):
    kind: Literal["any"] = "any"


# ---------------------------------------------------------------------------
# Composite variants
# ---------------------------------------------------------------------------


class ArraySchema(_SchemaNode):
    """Homogeneous ordered sequence."""

    kind: Literal["array"] = "array"
    items: Schema


class ObjectSchema(_SchemaNode):
    """Ordered ``(name, schema)`` pairs with unique names."""

    kind: Literal["object"] = "object"
    fields: Tuple[Tuple[str, Schema], ...] = ()

    @model_validator(mode="after")
    def _validate_unique_names(self) -> "ObjectSchema":
        seen: set = set()
        for name, _ in self.fields:
            if name in seen:
                raise ValueError(f"Object field '{name}' appears more than once.")
            seen.add(name)
        return self

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.fields)


class EnumSchema(_SchemaNode):
    """Closed set of string literal values."""

    kind: Literal["enum"] = "enum"
    names: Tuple[str, ...] = ()


class UnionSchema(_SchemaNode):
    """Logical OR of member schemas; the first member renders first."""

    kind: Literal["union"] = "union"
    members: Tuple[Schema, ...] = ()


class TupleSchema(_SchemaNode):
    """Fixed-arity sequence, each position typed independently."""

    kind: Literal["tuple"] = "tuple"
    elements: Tuple[Schema, ...] = ()


class RecordSchema(_SchemaNode):
    """Homogeneous associative container."""

    kind: Literal["record"] = "record"
    key: Schema
    value: Schema


class RefSchema(_SchemaNode):
    """Named reference to a type defined elsewhere; never resolved here."""

    kind: Literal["ref"] = "ref"
    name: str = Field(..., min_length=1)


Schema = Annotated[
    Union[
        StringSchema,
        NumberSchema,
        BooleanSchema,
        NullSchema,
        AnySchema,
        ArraySchema,
        ObjectSchema,
        EnumSchema,
        UnionSchema,
        TupleSchema,
        RecordSchema,
        RefSchema,
    ],
    Field(discriminator="kind"),
]

for _model in (ArraySchema, ObjectSchema, UnionSchema, TupleSchema, RecordSchema):
    _model.model_rebuild()

_SCHEMA_ADAPTER: TypeAdapter = TypeAdapter(Schema)

# Shared atomic instances; equal to any freshly built instance of the same kind.
STRING: StringSchema = StringSchema()
NUMBER: NumberSchema = NumberSchema()
BOOLEAN: BooleanSchema = BooleanSchema()
NULL: NullSchema = NullSchema()
ANY: AnySchema = AnySchema()


# ---------------------------------------------------------------------------
# Bridge result
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BridgeResult:
    """The two parallel representations of one native type."""

    ts: str
    schema: Schema

    def __iter__(self) -> Iterator[object]:
        yield self.ts
        yield self.schema


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

_ATOMIC_TS: Dict[str, str] = {
    "string": "string",
    "number": "number",
    "boolean": "boolean",
    "null": "null",
    "any": "any",
}


def render_ts(schema: Schema) -> str:
    """
    Render a schema to its structural string.

    Produces exactly the text the type bridge produces for the native type the
    schema came from, so ``render_ts(to_schema(T)) == to_ts(T)``. Members are
    never parenthesised: ``Array(Union([String, Null]))`` renders as
    ``string | null[]``, the same text the bridge emits for a list of optionals.
    """
    kind: str = schema.kind
    if kind in _ATOMIC_TS:
        return _ATOMIC_TS[kind]
    if isinstance(schema, ArraySchema):
        return f"{render_ts(schema.items)}[]"
    if isinstance(schema, ObjectSchema):
        parts: List[str] = [f"{name}: {render_ts(sub)};" for name, sub in schema.fields]
        return "{ " + " ".join(parts) + " }"
    if isinstance(schema, EnumSchema):
        return " | ".join(f"'{name}'" for name in schema.names)
    if isinstance(schema, UnionSchema):
        return " | ".join(render_ts(member) for member in schema.members)
    if isinstance(schema, TupleSchema):
        return "[" + ", ".join(render_ts(element) for element in schema.elements) + "]"
    if isinstance(schema, RecordSchema):
        return f"Record<{render_ts(schema.key)}, {render_ts(schema.value)}>"
    if isinstance(schema, RefSchema):
        return schema.name
    raise TypeError(f"Unknown schema variant: {schema!r}")


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------


def schema_to_json(schema: Schema, indent: Optional[int] = None) -> str:
    """Serialise a schema to JSON (tagged by ``kind``)."""
    return _SCHEMA_ADAPTER.dump_json(schema, indent=indent).decode("utf-8")


def schema_to_dict(schema: Schema) -> Dict[str, object]:
    return _SCHEMA_ADAPTER.dump_python(schema, mode="json")


def schema_from_json(text: Union[str, bytes]) -> Schema:
    """Parse a schema previously produced by ``schema_to_json``."""
    return _SCHEMA_ADAPTER.validate_json(text)


__all__: List[str] = [
    "Schema",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "NullSchema",
    "AnySchema",
    "ArraySchema",
    "ObjectSchema",
    "EnumSchema",
    "UnionSchema",
    "TupleSchema",
    "RecordSchema",
    "RefSchema",
    "STRING",
    "NUMBER",
    "BOOLEAN",
    "NULL",
    "ANY",
    "BridgeResult",
    "render_ts",
    "schema_to_json",
    "schema_to_dict",
    "schema_from_json",
]
