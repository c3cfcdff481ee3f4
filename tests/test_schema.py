"""
tests/test_schema.py
Unit tests for schemabridge.schema (the Schema IR).

Tests cover:
- Structural equality and immutability
- Object field order taking part in equality
- Rendering every variant to its structural string
- JSON round trip through the discriminated union
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from schemabridge.schema import (
    ANY,
    BOOLEAN,
    NULL,
    NUMBER,
    STRING,
    ArraySchema,
    BridgeResult,
    EnumSchema,
    NumberSchema,
    ObjectSchema,
    RecordSchema,
    RefSchema,
    StringSchema,
    TupleSchema,
    UnionSchema,
    render_ts,
    schema_from_json,
    schema_to_dict,
    schema_to_json,
)


# ===========================================================================
# Equality & immutability
# ===========================================================================


class TestEquality:
    def test_atomics_compare_by_kind(self) -> None:
        assert StringSchema() == STRING
        assert NumberSchema() == NUMBER
        assert STRING != NUMBER

    def test_nested_equality(self) -> None:
        a = ArraySchema(items=UnionSchema(members=(STRING, NULL)))
        b = ArraySchema(items=UnionSchema(members=(StringSchema(), NULL)))
        assert a == b

    def test_object_field_order_matters(self) -> None:
        first = ObjectSchema(fields=(("a", STRING), ("b", NUMBER)))
        second = ObjectSchema(fields=(("b", NUMBER), ("a", STRING)))
        assert first != second
        assert first.field_names == ("a", "b")

    def test_union_member_order_matters(self) -> None:
        assert UnionSchema(members=(STRING, NULL)) != UnionSchema(members=(NULL, STRING))

    def test_frozen(self) -> None:
        schema = ArraySchema(items=STRING)
        with pytest.raises(ValidationError):
            schema.items = NUMBER

    def test_object_rejects_repeated_field_name(self) -> None:
        with pytest.raises(ValidationError, match="more than once"):
            ObjectSchema(fields=(("a", STRING), ("a", NUMBER)))

    def test_ref_requires_name(self) -> None:
        with pytest.raises(ValidationError):
            RefSchema(name="")

    def test_bridge_result_unpacks(self) -> None:
        ts, schema = BridgeResult("string", STRING)
        assert ts == "string"
        assert schema == STRING


# ===========================================================================
# Rendering
# ===========================================================================


class TestRenderTs:
    @pytest.mark.parametrize(
        "schema, expected",
        [
            (STRING, "string"),
            (NUMBER, "number"),
            (BOOLEAN, "boolean"),
            (NULL, "null"),
            (ANY, "any"),
            (ArraySchema(items=ArraySchema(items=STRING)), "string[][]"),
            (UnionSchema(members=(NUMBER, NULL)), "number | null"),
            (TupleSchema(elements=(NUMBER, NUMBER)), "[number, number]"),
            (RecordSchema(key=STRING, value=BOOLEAN), "Record<string, boolean>"),
            (EnumSchema(names=("active", "inactive")), "'active' | 'inactive'"),
            (RefSchema(name="TreeNode"), "TreeNode"),
        ],
    )
    def test_variants(self, schema, expected: str) -> None:
        assert render_ts(schema) == expected

    def test_object(self) -> None:
        schema = ObjectSchema(fields=(("userName", STRING), ("age", NUMBER)))
        assert render_ts(schema) == "{ userName: string; age: number; }"

    def test_array_of_union_is_not_parenthesised(self) -> None:
        schema = ArraySchema(items=UnionSchema(members=(STRING, NULL)))
        assert render_ts(schema) == "string | null[]"


# ===========================================================================
# JSON round trip
# ===========================================================================


class TestJson:
    def test_round_trip_composite(self) -> None:
        schema = ObjectSchema(
            fields=(
                ("tags", ArraySchema(items=STRING)),
                ("scores", RecordSchema(key=STRING, value=NUMBER)),
                ("status", EnumSchema(names=("on", "off"))),
                ("point", TupleSchema(elements=(NUMBER, NUMBER))),
                ("parent", UnionSchema(members=(RefSchema(name="Node"), NULL))),
            )
        )
        assert schema_from_json(schema_to_json(schema)) == schema

    def test_tagged_by_kind(self) -> None:
        data = json.loads(schema_to_json(ArraySchema(items=NUMBER)))
        assert data == {"kind": "array", "items": {"kind": "number"}}

    def test_to_dict(self) -> None:
        assert schema_to_dict(UnionSchema(members=(STRING, NULL))) == {
            "kind": "union",
            "members": [{"kind": "string"}, {"kind": "null"}],
        }

    def test_repeated_field_name_rejected(self) -> None:
        text = (
            '{"kind": "object", "fields": '
            '[["a", {"kind": "string"}], ["a", {"kind": "number"}]]}'
        )
        with pytest.raises(ValidationError):
            schema_from_json(text)

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            schema_from_json('{"kind": "bigint"}')
