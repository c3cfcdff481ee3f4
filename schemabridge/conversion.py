# File: schemabridge/conversion.py
"""
schemabridge - String-Conversion Generator
===========================================
Opt-in stringify/parse for enumerations whose variants carry no payload.

Both directions go through one ``NameTable``, holding the same per-variant display
names the structural dispatch renders into the ``'a' | 'b'`` literal union,
so a variant always prints the way the client-side type spells it and that
spelling always parses back to the same variant.

Usage::

    table = NameTable.build("TalkStyle", ["Brainstorm", "DecisionMaking"], "snake_case")
    conv = StringConversion(table)
    conv.stringify("DecisionMaking")   # 'decision_making'
    conv.parse("decision_making")      # 'DecisionMaking'
    conv.parse("nope")                 # ParseError: Unknown TalkStyle: nope
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from schemabridge.errors import AmbiguousNameError, ParseError
from schemabridge.models import NamingRule
from schemabridge.naming import apply_rename, resolve_rule
from schemabridge.validators import AMBIGUOUS_NAME, ValidationResult

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.conversion")

V = TypeVar("V")


# ---------------------------------------------------------------------------
# NameTable
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NameTable:
    """
    Bijection between an enumeration's declared variant identifiers and their
    rule-transformed display strings, in declaration order.

    Construction fails with ``AmbiguousNameError`` when two variants would
    display identically, so ``parse`` is always well defined.
    """

    type_name: str
    entries: Tuple[Tuple[str, str], ...]
    _by_identifier: Dict[str, str] = field(init=False, repr=False, compare=False)
    _by_display: Dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        collisions: Dict[str, List[str]] = defaultdict(list)
        for identifier, display in self.entries:
            collisions[display].append(identifier)

        result: ValidationResult = ValidationResult()
        for display, identifiers in collisions.items():
            if len(identifiers) > 1:
                result.add_error(
                    AMBIGUOUS_NAME,
                    f"Variants {', '.join(identifiers)} all display as '{display}'.",
                    {"display": display, "identifiers": identifiers},
                )
        if not result.is_valid:
            raise AmbiguousNameError(self.type_name, result)

        object.__setattr__(self, "_by_identifier", dict(self.entries))
        object.__setattr__(
            self, "_by_display", {display: ident for ident, display in self.entries}
        )

    @classmethod
    def build(
        cls,
        type_name: str,
        identifiers: Sequence[str],
        rule: Union[NamingRule, str, None] = None,
    ) -> "NameTable":
        resolved: NamingRule = resolve_rule(rule)
        entries: Tuple[Tuple[str, str], ...] = tuple(
            (identifier, apply_rename(identifier, resolved)) for identifier in identifiers
        )
        logger.debug("Built name table for %s under %s: %s", type_name, resolved.value, entries)
        return cls(type_name=type_name, entries=entries)

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return tuple(identifier for identifier, _ in self.entries)

    @property
    def display_names(self) -> Tuple[str, ...]:
        return tuple(display for _, display in self.entries)

    def display_for(self, identifier: str) -> str:
        try:
            return self._by_identifier[identifier]
        except KeyError:
            raise KeyError(f"{identifier!r} is not a variant of {self.type_name}") from None

    def identifier_for(self, display: str) -> Optional[str]:
        return self._by_display.get(display)

    def __len__(self) -> int:
        return len(self.entries)


# ---------------------------------------------------------------------------
# StringConversion
# ---------------------------------------------------------------------------


def _same(value: Any) -> Any:
    return value


class StringConversion(Generic[V]):
    """
    Total ``stringify`` and partial ``parse`` over one ``NameTable``.

    By default variants are represented by their identifiers. Pass
    *to_identifier* / *from_identifier* to work with richer variant objects
    (the introspector uses enum members).
    """

    __slots__ = ("table", "_to_identifier", "_from_identifier")

    def __init__(
        self,
        table: NameTable,
        to_identifier: Callable[[V], str] = _same,
        from_identifier: Callable[[str], V] = _same,
    ) -> None:
        self.table: NameTable = table
        self._to_identifier: Callable[[V], str] = to_identifier
        self._from_identifier: Callable[[str], V] = from_identifier

    @property
    def type_name(self) -> str:
        return self.table.type_name

    def stringify(self, variant: V) -> str:
        return self.table.display_for(self._to_identifier(variant))

    def parse(self, text: str) -> V:
        """Return the variant displayed as *text*, or raise ``ParseError``."""
        identifier: Optional[str] = self.table.identifier_for(text)
        if identifier is None:
            raise ParseError(self.table.type_name, text)
        return self._from_identifier(identifier)

    def __repr__(self) -> str:
        return f"<StringConversion {self.table.type_name} ({len(self.table)} variants)>"


__all__: List[str] = [
    "NameTable",
    "StringConversion",
]
