# File: schemabridge/types.py
"""
schemabridge - Native Type Vocabulary
======================================
Python spellings for native shapes the standard typing module has no name for:
sized numeric widths, single characters, ownership wrappers and fallible
results. All of them are ``typing.Annotated`` aliases, so they stay valid
annotations for dataclasses, pydantic models and type checkers::

    @dataclass
    class Packet:
        sequence: uint32
        payload: Box[List[uint8]]
        outcome: Result[str, int]

The type bridge reads the attached marker objects; everything else about the
annotation is plain typing.
"""

from __future__ import annotations

import typing as _typing
from typing import Annotated, Any, List


def _type_repr(obj: Any) -> str:
    """Avoid printing <class 'int'>"""
    if isinstance(obj, type):
        if obj.__module__ == "builtins":
            return obj.__qualname__
        return f"{obj.__module__}.{obj.__qualname__}"
    return repr(obj)


# ---------------------------------------------------------------------------
# Primitive markers
# ---------------------------------------------------------------------------


class primitive:
    """Marks an ``Annotated`` alias as a named native primitive."""

    __slots__ = ("name", "python_type")

    def __init__(self, name: str, python_type: type) -> None:
        self.name: str = name
        self.python_type: type = python_type

    def __repr__(self) -> str:
        return self.name

    def __eq__(self, o: object) -> bool:
        return isinstance(o, primitive) and o.name == self.name

    def __hash__(self) -> int:
        return hash(("primitive", self.name))

    __str__ = __repr__


int8 = Annotated[int, primitive("int8", int)]
int16 = Annotated[int, primitive("int16", int)]
int32 = Annotated[int, primitive("int32", int)]
int64 = Annotated[int, primitive("int64", int)]
int128 = Annotated[int, primitive("int128", int)]
isize = Annotated[int, primitive("isize", int)]
uint8 = Annotated[int, primitive("uint8", int)]
uint16 = Annotated[int, primitive("uint16", int)]
uint32 = Annotated[int, primitive("uint32", int)]
uint64 = Annotated[int, primitive("uint64", int)]
uint128 = Annotated[int, primitive("uint128", int)]
usize = Annotated[int, primitive("usize", int)]
float32 = Annotated[float, primitive("float32", float)]
float64 = Annotated[float, primitive("float64", float)]
char = Annotated[str, primitive("char", str)]
unit = Annotated[type(None), primitive("unit", type(None))]

INTEGER_WIDTHS: _typing.Tuple[Any, ...] = (
    int8, int16, int32, int64, int128, isize,
    uint8, uint16, uint32, uint64, uint128, usize,
)
FLOAT_WIDTHS: _typing.Tuple[Any, ...] = (float32, float64)


# ---------------------------------------------------------------------------
# Ownership wrappers
# ---------------------------------------------------------------------------


class owned:
    """
    Base for ownership-only wrappers. They change how a value is held, never
    what it looks like on the wire, so the bridge erases them.
    """

    __slots__ = ("subtype",)

    @classmethod
    def __class_getitem__(cls, subtype):
        if type(subtype) == tuple:
            raise TypeError(f"{cls.__name__} takes exactly one type argument.")
        return Annotated[subtype, cls(subtype)]

    def __init__(self, subtype: Any) -> None:
        self.subtype: Any = subtype

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{_type_repr(self.subtype)}]"

    def __eq__(self, o: object) -> bool:
        return type(o) is type(self) and o.subtype == self.subtype

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.subtype))

    __str__ = __repr__


class Box(owned):
    """Exclusively owned heap value."""

    __slots__ = ()


class Rc(owned):
    """Reference-counted shared value."""

    __slots__ = ()


class Arc(owned):
    """Reference-counted shared value, safe to share across threads."""

    __slots__ = ()


# ---------------------------------------------------------------------------
# Fallible result
# ---------------------------------------------------------------------------


class Result:
    """
    ``Result[Ok, Err]``: a value that is either a success or an error.

    Unlike ``Union[Ok, Err]`` this never collapses equal members, so
    ``Result[str, str]`` keeps both positions.
    """

    __slots__ = ("ok", "err")

    @classmethod
    def __class_getitem__(cls, tup):
        if type(tup) != tuple or len(tup) != 2:
            raise TypeError("A Result takes two arguments: a success type and an error type.")
        return Annotated[object, cls(*tup)]

    def __init__(self, ok: Any, err: Any) -> None:
        self.ok: Any = ok
        self.err: Any = err

    def __repr__(self) -> str:
        return f"Result[{_type_repr(self.ok)}, {_type_repr(self.err)}]"

    def __eq__(self, o: object) -> bool:
        return isinstance(o, Result) and o.ok == self.ok and o.err == self.err

    def __hash__(self) -> int:
        return hash(("Result", self.ok, self.err))

    __str__ = __repr__


__all__: List[str] = [
    "primitive",
    "int8", "int16", "int32", "int64", "int128", "isize",
    "uint8", "uint16", "uint32", "uint64", "uint128", "usize",
    "float32", "float64",
    "char",
    "unit",
    "INTEGER_WIDTHS",
    "FLOAT_WIDTHS",
    "owned",
    "Box",
    "Rc",
    "Arc",
    "Result",
]
