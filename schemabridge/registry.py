# File: schemabridge/registry.py
"""
schemabridge - Type Bridge Registry
====================================
Recursive mapping from a native type annotation to its ``BridgeResult``
(structural string + Schema).

The set of built-in mappings is closed and fixed at construction time:

    str, char, Path, os.PathLike            → string        String
    int, float, int8 … usize, float32/64    → number        Number
    bool                                    → boolean       Boolean
    None, NoneType, unit                    → null          Null
    typing.Any                              → any           Any
    Optional[T]                             → T | null      Union([T, Null])
    list/set/deque/Sequence/tuple[T, ...]   → T[]           Array(T)
    dict/Mapping/OrderedDict/defaultdict    → Record<K, V>  Record{K, V}
    tuple[A, B] (arity 1..6)                → [A, B]        Tuple([A, B])
    Result[Ok, Err]                         → Ok | Err      Union([Ok, Err])
    Box[T], Rc[T], Arc[T], Annotated, Final → T             (transparent)
    declared composites                     → structural dispatch

Everything else raises ``UnsupportedTypeError``.

Performance strategy:
- Composite results are memoised per registry; the cache and the in-progress
  set are guarded by one ``threading.RLock`` (re-entrant because bridging a
  composite recurses into its fields on the same thread).
- A composite reached again while it is still being bridged yields
  ``Ref(name)``. Results that contain such a reference depend on where the
  cycle was entered, so they are never cached.
"""

from __future__ import annotations

import collections
import collections.abc
import logging
import os
import threading
import types
import typing
from pathlib import PurePath
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from schemabridge.dispatch import dispatch
from schemabridge.errors import UnsupportedTypeError
from schemabridge.introspect import facts_for, is_bridgeable, is_class, type_name
from schemabridge.models import NamingRule, TypeFacts
from schemabridge.schema import (
    ANY,
    BOOLEAN,
    NULL,
    NUMBER,
    STRING,
    ArraySchema,
    BridgeResult,
    RecordSchema,
    RefSchema,
    Schema,
    TupleSchema,
    UnionSchema,
)
from schemabridge.types import Result, owned, primitive

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.registry")

MAX_TUPLE_ARITY: int = 6
BRIDGE_HOOK: str = "__schema_bridge__"

_NONE_TYPE: type = type(None)

_STRING: BridgeResult = BridgeResult("string", STRING)
_NUMBER: BridgeResult = BridgeResult("number", NUMBER)
_BOOLEAN: BridgeResult = BridgeResult("boolean", BOOLEAN)
_NULL: BridgeResult = BridgeResult("null", NULL)
_ANY: BridgeResult = BridgeResult("any", ANY)

_ATOMICS: Dict[Any, BridgeResult] = {
    str: _STRING,
    PurePath: _STRING,
    os.PathLike: _STRING,
    int: _NUMBER,
    float: _NUMBER,
    bool: _BOOLEAN,
    _NONE_TYPE: _NULL,
    typing.Any: _ANY,
}

_SEQUENCE_ORIGINS: FrozenSet[Any] = frozenset({
    list,
    set,
    frozenset,
    collections.deque,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
    collections.abc.Collection,
})

_MAPPING_ORIGINS: FrozenSet[Any] = frozenset({
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
    collections.OrderedDict,
    collections.defaultdict,
})

_UNION_ORIGINS: FrozenSet[Any] = frozenset({typing.Union, types.UnionType})


def _lookup(table: Dict[Any, BridgeResult], annotation: Any) -> Optional[BridgeResult]:
    try:
        return table.get(annotation)
    except TypeError:
        # unhashable annotation
        return None


# ---------------------------------------------------------------------------
# TypeBridgeRegistry
# ---------------------------------------------------------------------------


class TypeBridgeRegistry:
    """
    Maps native annotations to ``(structural string, Schema)`` pairs.

    Usage::

        registry = TypeBridgeRegistry()
        registry.to_ts(Dict[str, List[int]])       # 'Record<string, number[]>'
        registry.to_schema(Optional[str])          # Union([String, Null])

        registry.register(Decimal, "string", STRING)
        registry.to_ts(Decimal)                    # 'string'

    A class may also provide its own mapping through a classmethod
    ``__schema_bridge__(cls, registry) -> BridgeResult``.
    """

    def __init__(
        self,
        *,
        default_rename_all: Optional[NamingRule] = None,
    ) -> None:
        self._default_rename_all: Optional[NamingRule] = default_rename_all
        self._custom: Dict[Any, BridgeResult] = {}
        self._cache: Dict[Any, BridgeResult] = {}
        self._in_progress: Set[Any] = set()
        self._refs_emitted: int = 0
        self._lock: threading.RLock = threading.RLock()

        logger.debug(
            "TypeBridgeRegistry initialised: default_rename_all=%s.",
            default_rename_all.value if default_rename_all else None,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def register(self, tp: Any, ts: str, schema: Schema) -> None:
        """Install a fixed mapping for *tp*, taking precedence over built-ins."""
        with self._lock:
            self._custom[tp] = BridgeResult(ts=ts, schema=schema)
            self._cache.clear()
        logger.debug("Registered custom mapping %s → %s", type_name(tp), ts)

    def bridge(self, annotation: Any) -> BridgeResult:
        """
        Map *annotation* to its structural string and schema.

        Raises:
            UnsupportedTypeError: *annotation* is outside the bridgeable set.
            InvalidTypeDefinitionError: a composite's facts were rejected.
        """
        if annotation is None:
            annotation = _NONE_TYPE

        custom: Optional[BridgeResult] = _lookup(self._custom, annotation)
        if custom is not None:
            return custom

        if typing.get_origin(annotation) is typing.Annotated:
            return self._bridge_annotated(annotation)

        atomic: Optional[BridgeResult] = _lookup(_ATOMICS, annotation)
        if atomic is not None:
            return atomic

        origin: Any = typing.get_origin(annotation)
        if origin is not None:
            return self._bridge_generic(annotation, origin, typing.get_args(annotation))

        if is_class(annotation):
            hook: Any = getattr(annotation, BRIDGE_HOOK, None)
            if hook is not None:
                return self._bridge_hook(annotation, hook)
            if issubclass(annotation, (PurePath, os.PathLike)):
                return _STRING

        if is_bridgeable(annotation):
            return self._bridge_composite(annotation)

        raise UnsupportedTypeError(annotation, self._unsupported_reason(annotation))

    def to_ts(self, annotation: Any) -> str:
        return self.bridge(annotation).ts

    def to_schema(self, annotation: Any) -> Schema:
        return self.bridge(annotation).schema

    def facts(self, tp: Any) -> TypeFacts:
        """Structural facts of *tp* under this registry's default rename rule."""
        return facts_for(tp, self._default_rename_all)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    # -----------------------------------------------------------------
    # Internal: wrappers and hooks
    # -----------------------------------------------------------------

    def _bridge_annotated(self, annotation: Any) -> BridgeResult:
        for marker in annotation.__metadata__:
            if isinstance(marker, primitive):
                return self.bridge(marker.python_type)
            if isinstance(marker, Result):
                ok: BridgeResult = self.bridge(marker.ok)
                err: BridgeResult = self.bridge(marker.err)
                return BridgeResult(
                    ts=f"{ok.ts} | {err.ts}",
                    schema=UnionSchema(members=(ok.schema, err.schema)),
                )
            if isinstance(marker, owned):
                return self.bridge(marker.subtype)
        return self.bridge(annotation.__origin__)

    def _bridge_hook(self, tp: type, hook: Any) -> BridgeResult:
        result: Any = hook(self)
        if not isinstance(result, BridgeResult):
            raise UnsupportedTypeError(
                tp,
                f"{BRIDGE_HOOK} must return a BridgeResult, got {type(result).__name__}",
            )
        return result

    # -----------------------------------------------------------------
    # Internal: parameterised generics
    # -----------------------------------------------------------------

    def _bridge_generic(
        self,
        annotation: Any,
        origin: Any,
        args: Tuple[Any, ...],
    ) -> BridgeResult:
        if origin is typing.Final:
            return self.bridge(args[0])

        if origin in _UNION_ORIGINS:
            return self._bridge_optional(annotation, args)

        if origin is tuple:
            return self._bridge_tuple(annotation, args)

        if origin in _SEQUENCE_ORIGINS:
            if len(args) != 1:
                raise UnsupportedTypeError(annotation, "unparameterised container")
            items: BridgeResult = self.bridge(args[0])
            return BridgeResult(ts=f"{items.ts}[]", schema=ArraySchema(items=items.schema))

        if origin in _MAPPING_ORIGINS:
            if len(args) != 2:
                raise UnsupportedTypeError(annotation, "unparameterised container")
            key: BridgeResult = self.bridge(args[0])
            value: BridgeResult = self.bridge(args[1])
            return BridgeResult(
                ts=f"Record<{key.ts}, {value.ts}>",
                schema=RecordSchema(key=key.schema, value=value.schema),
            )

        raise UnsupportedTypeError(annotation, self._unsupported_reason(annotation))

    def _bridge_optional(self, annotation: Any, args: Tuple[Any, ...]) -> BridgeResult:
        present: List[Any] = [arg for arg in args if arg is not _NONE_TYPE]
        if len(present) != 1 or len(present) == len(args):
            raise UnsupportedTypeError(
                annotation,
                "only Optional[T] unions are bridgeable; use Result[Ok, Err] for alternatives",
            )
        inner: BridgeResult = self.bridge(present[0])
        return BridgeResult(
            ts=f"{inner.ts} | null",
            schema=UnionSchema(members=(inner.schema, NULL)),
        )

    def _bridge_tuple(self, annotation: Any, args: Tuple[Any, ...]) -> BridgeResult:
        if len(args) == 2 and args[1] is Ellipsis:
            items: BridgeResult = self.bridge(args[0])
            return BridgeResult(ts=f"{items.ts}[]", schema=ArraySchema(items=items.schema))

        if args == ((),):
            args = ()
        if not 1 <= len(args) <= MAX_TUPLE_ARITY:
            raise UnsupportedTypeError(
                annotation,
                f"tuple arity {len(args)} is outside 1..{MAX_TUPLE_ARITY}",
            )
        elements: List[BridgeResult] = [self.bridge(arg) for arg in args]
        return BridgeResult(
            ts="[" + ", ".join(e.ts for e in elements) + "]",
            schema=TupleSchema(elements=tuple(e.schema for e in elements)),
        )

    # -----------------------------------------------------------------
    # Internal: composites
    # -----------------------------------------------------------------

    def _bridge_composite(self, tp: Any) -> BridgeResult:
        with self._lock:
            cached: Optional[BridgeResult] = self._cache.get(tp)
            if cached is not None:
                return cached

            if tp in self._in_progress:
                name: str = type_name(tp)
                self._refs_emitted += 1
                logger.debug("Cycle through %s; emitting a named reference.", name)
                return BridgeResult(ts=name, schema=RefSchema(name=name))

            refs_before: int = self._refs_emitted
            self._in_progress.add(tp)
            try:
                result: BridgeResult = dispatch(self.facts(tp), self)
            finally:
                self._in_progress.discard(tp)

            if self._refs_emitted == refs_before:
                self._cache[tp] = result
            return result

    @staticmethod
    def _unsupported_reason(annotation: Any) -> str:
        origin: Any = typing.get_origin(annotation)
        if origin is typing.Literal:
            return "Literal types have no structural mapping"
        if annotation in (list, dict, set, frozenset, tuple) or (
            is_class(annotation) and annotation in _SEQUENCE_ORIGINS | _MAPPING_ORIGINS
        ):
            return "unparameterised container"
        if isinstance(annotation, (str, typing.ForwardRef)):
            return "unresolved forward reference"
        if isinstance(annotation, typing.TypeVar):
            return "type variables cannot be bridged"
        return "no mapping registered for this type"

    def __repr__(self) -> str:
        return (
            f"<TypeBridgeRegistry custom={len(self._custom)} "
            f"cached={len(self._cache)}>"
        )


# ---------------------------------------------------------------------------
# Default registry
# ---------------------------------------------------------------------------

default_registry: TypeBridgeRegistry = TypeBridgeRegistry()


def bridge_type(annotation: Any) -> BridgeResult:
    """``default_registry.bridge``"""
    return default_registry.bridge(annotation)


def to_ts(annotation: Any) -> str:
    """
    Structural string for *annotation*.

    Examples:
        >>> to_ts(Optional[List[str]])
        'string[] | null'
    """
    return default_registry.to_ts(annotation)


def to_schema(annotation: Any) -> Schema:
    return default_registry.to_schema(annotation)


def register(tp: Any, ts: str, schema: Schema) -> None:
    default_registry.register(tp, ts, schema)


__all__: List[str] = [
    "MAX_TUPLE_ARITY",
    "TypeBridgeRegistry",
    "default_registry",
    "bridge_type",
    "to_ts",
    "to_schema",
    "register",
]

logger.debug("schemabridge.registry loaded.")
