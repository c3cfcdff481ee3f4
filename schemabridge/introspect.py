# File: schemabridge/introspect.py
"""
schemabridge - Introspector
============================
The front end that reads structural facts off declared Python types and hands
the core plain ``TypeFacts`` values.

Supported declarations:

    dataclass / pydantic model / annotated class   → named record
    ``typing.NewType``                             → newtype
    ``typing.NamedTuple``                          → positional record
    dataclass with no fields                       → unit record
    ``enum.Enum``                                  → enumeration (member names)

Generation options are declared with the ``@bridge`` decorator::

    @bridge(rename_all="snake_case", string_conversion=True)
    class TalkStyle(Enum):
        Brainstorm = auto()
        DecisionMaking = auto()

    str(TalkStyle.DecisionMaking)            # 'decision_making'
    TalkStyle.parse("decision_making")       # TalkStyle.DecisionMaking
"""

from __future__ import annotations

import dataclasses
import enum
import inspect
import logging
import typing
from typing import Annotated, Any, ClassVar, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from schemabridge.conversion import StringConversion
from schemabridge.dispatch import enum_name_table
from schemabridge.errors import UnsupportedTypeError
from schemabridge.models import BridgeOptions, NamingRule, TypeFacts
from schemabridge.naming import resolve_rule
from schemabridge.validators import ensure_valid

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.introspect")

BRIDGE_OPTIONS_ATTR: str = "__schema_bridge_options__"
STRING_CONVERSION_ATTR: str = "__schema_bridge_conversion__"


# ---------------------------------------------------------------------------
# Kind detection
# ---------------------------------------------------------------------------


def is_class(tp: Any) -> bool:
    """A real class, not a parameterised alias such as ``list[int]``."""
    return isinstance(tp, type) and typing.get_origin(tp) is None


def is_newtype(tp: Any) -> bool:
    return isinstance(tp, typing.NewType)


def is_named_tuple(tp: Any) -> bool:
    return (
        is_class(tp)
        and issubclass(tp, tuple)
        and hasattr(tp, "_fields")
        and hasattr(tp, "__annotations__")
    )


def is_enum(tp: Any) -> bool:
    return is_class(tp) and issubclass(tp, enum.Enum)


def is_pydantic_model(tp: Any) -> bool:
    return is_class(tp) and issubclass(tp, BaseModel) and tp is not BaseModel


def declared_options(tp: Any) -> Optional[BridgeOptions]:
    """Options set by ``@bridge`` on *tp* itself (never inherited)."""
    namespace: Dict[str, Any] = getattr(tp, "__dict__", {})
    options: Any = namespace.get(BRIDGE_OPTIONS_ATTR)
    return options if isinstance(options, BridgeOptions) else None


def is_bridgeable(tp: Any) -> bool:
    """True when *tp* is a composite declaration the introspector can read."""
    if is_newtype(tp):
        return True
    if not is_class(tp):
        return False
    return (
        dataclasses.is_dataclass(tp)
        or is_enum(tp)
        or is_named_tuple(tp)
        or is_pydantic_model(tp)
        or declared_options(tp) is not None
    )


def type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------


def _type_hints(tp: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(tp, include_extras=True)
    except NameError as exc:
        raise UnsupportedTypeError(tp, f"unresolvable forward reference ({exc})") from exc


def _is_class_var(hint: Any) -> bool:
    return hint is ClassVar or typing.get_origin(hint) is ClassVar


def _pydantic_annotation(info: Any) -> Any:
    # pydantic moves Annotated metadata off the annotation; put it back.
    if info.metadata:
        return Annotated[(info.annotation, *info.metadata)]
    return info.annotation


def _record_fields(tp: type) -> List[Tuple[Optional[str], Any]]:
    if is_pydantic_model(tp):
        return [
            (name, _pydantic_annotation(info))
            for name, info in tp.model_fields.items()
        ]

    hints: Dict[str, Any] = _type_hints(tp)

    if is_named_tuple(tp):
        return [(None, hints.get(name, Any)) for name in tp._fields]

    if dataclasses.is_dataclass(tp):
        return [(f.name, hints.get(f.name, f.type)) for f in dataclasses.fields(tp)]

    # Plain annotated class: its own annotations, in declaration order.
    own: Dict[str, Any] = inspect.get_annotations(tp)
    return [
        (name, hints[name])
        for name in own
        if name in hints and not _is_class_var(hints[name])
    ]


def _with_default_rule(
    options: Optional[BridgeOptions],
    default_rename_all: Union[NamingRule, str, None],
) -> BridgeOptions:
    if options is None:
        options = BridgeOptions()
    # A string-converted enum keeps its declared table; str() and parse share it.
    if options.string_conversion:
        return options
    if options.rename_all is None and default_rename_all is not None:
        options = options.model_copy(update={"rename_all": resolve_rule(default_rename_all)})
    return options


def facts_for(
    tp: Any,
    default_rename_all: Union[NamingRule, str, None] = None,
) -> TypeFacts:
    """
    Read the structural facts of one declared type.

    Args:
        tp: A bridgeable declaration (see ``is_bridgeable``).
        default_rename_all: Rule for types that declare none of their own.

    Raises:
        UnsupportedTypeError: *tp* is not a composite declaration, or one of
            its annotations cannot be resolved.
    """
    if not is_bridgeable(tp):
        raise UnsupportedTypeError(tp, "not a dataclass, enum, NamedTuple, NewType or bridged class")

    name: str = type_name(tp)
    options: BridgeOptions = _with_default_rule(declared_options(tp), default_rename_all)

    if is_newtype(tp):
        facts: TypeFacts = TypeFacts.for_record(name, [(None, tp.__supertype__)], options)
    elif is_enum(tp):
        facts = TypeFacts.for_enum(name, [member.name for member in tp], options)
    else:
        facts = TypeFacts.for_record(name, _record_fields(tp), options)

    logger.debug("Introspected %s → %r", name, facts)
    return facts


# ---------------------------------------------------------------------------
# Declaration decorator
# ---------------------------------------------------------------------------


def _install_string_conversion(cls: type) -> StringConversion:
    facts: TypeFacts = facts_for(cls)
    ensure_valid(facts)
    conversion: StringConversion = StringConversion(
        enum_name_table(facts),
        to_identifier=lambda member: member.name,
        from_identifier=lambda identifier: cls[identifier],
    )

    def __str__(self: enum.Enum) -> str:
        return conversion.stringify(self)

    def __format__(self: enum.Enum, format_spec: str) -> str:
        return format(conversion.stringify(self), format_spec)

    def parse(klass: type, text: str) -> enum.Enum:
        """Return the member displayed as *text*, or raise ``ParseError``."""
        return conversion.parse(text)

    cls.__str__ = __str__
    cls.__format__ = __format__
    cls.parse = classmethod(parse)
    setattr(cls, STRING_CONVERSION_ATTR, conversion)
    logger.debug("Installed string conversion on %s: %r", cls.__name__, conversion)
    return conversion


def bridge(
    cls: Optional[type] = None,
    *,
    rename_all: Union[NamingRule, str, None] = None,
    string_conversion: bool = False,
) -> Any:
    """
    Mark a class for bridging and record its generation options.

    Usable bare (``@bridge``) or with arguments. An unrecognised
    *rename_all* spelling behaves like no rule at all.

    Raises:
        InvalidTypeDefinitionError: *string_conversion* was requested on a
            type that is not a payload-free enumeration.
        AmbiguousNameError: two variants display identically under the rule.
    """

    def wrap(target: type) -> type:
        options: BridgeOptions = BridgeOptions(
            rename_all=resolve_rule(rename_all) if rename_all is not None else None,
            string_conversion=string_conversion,
        )
        setattr(target, BRIDGE_OPTIONS_ATTR, options)
        if string_conversion:
            if not is_enum(target):
                ensure_valid(facts_for(target))
            _install_string_conversion(target)
        return target

    if cls is None:
        return wrap
    return wrap(cls)


def string_conversion_for(cls: type) -> Optional[StringConversion]:
    """The conversion ``@bridge(string_conversion=True)`` attached to *cls*."""
    namespace: Dict[str, Any] = getattr(cls, "__dict__", {})
    return namespace.get(STRING_CONVERSION_ATTR)


__all__: List[str] = [
    "BRIDGE_OPTIONS_ATTR",
    "bridge",
    "declared_options",
    "facts_for",
    "is_class",
    "is_bridgeable",
    "string_conversion_for",
    "type_name",
]
