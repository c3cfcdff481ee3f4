# File: schemabridge/validators.py
"""
schemabridge - Structural Fact Validators
==========================================
A **pure-function validation pipeline** over ``TypeFacts``.

Pydantic already guarantees each fact is well-typed. This module adds the
generation-time checks the source system would have rejected at compile time:
shape/field consistency, payload-free enumerations, string conversion only on
enumerations, and names that stay unique after the ``rename_all`` rule has
been applied.

Usage by downstream modules:
    from schemabridge.validators import ensure_valid
    ensure_valid(facts)   # raises InvalidTypeDefinitionError / AmbiguousNameError
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from schemabridge.errors import AmbiguousNameError, InvalidTypeDefinitionError
from schemabridge.models import ShapeKind, TypeFacts
from schemabridge.naming import apply_rename

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.validators")

AMBIGUOUS_NAME: str = "AMBIGUOUS_NAME"

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight error descriptor (no Pydantic overhead)."""

    __slots__ = ("code", "message", "context")

    def __init__(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"[ERROR] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the pipeline."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError(code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    @property
    def errors(self) -> List[ValidationError]:
        return list(self._items)

    @property
    def is_valid(self) -> bool:
        return not self._items

    def has_code(self, code: str) -> bool:
        return any(e.code == code for e in self._items)

    def summary(self) -> str:
        return f"Validation: {len(self._items)} error(s)."

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary()]
        for item in self._items:
            lines.append(f"  ✗ [{item.code}] {item.message}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_shape(facts: TypeFacts) -> ValidationResult:
    """
    Check that the declared shape matches the facts that came with it.

    - named: at least one field, every field named
    - newtype: exactly one unnamed field
    - positional: two or more unnamed fields
    - unit: no fields
    - enum: at least one variant, no fields
    """
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"type": facts.name, "kind": facts.kind.value}
    named: int = sum(1 for f in facts.fields if f.name is not None)
    unnamed: int = len(facts.fields) - named

    if facts.kind is not ShapeKind.ENUM and facts.variants:
        result.add_error(
            "UNEXPECTED_VARIANTS",
            f"{facts.name} is a {facts.kind.value} record but lists enum variants.",
            ctx,
        )

    if facts.kind is ShapeKind.NAMED:
        if not facts.fields or unnamed:
            result.add_error(
                "SHAPE_MISMATCH",
                f"{facts.name} is declared with named fields but has "
                f"{named} named and {unnamed} positional field(s).",
                ctx,
            )
    elif facts.kind is ShapeKind.NEWTYPE:
        if len(facts.fields) != 1 or named:
            result.add_error(
                "SHAPE_MISMATCH",
                f"{facts.name} is a newtype and needs exactly one unnamed field.",
                ctx,
            )
    elif facts.kind is ShapeKind.POSITIONAL:
        if len(facts.fields) < 2 or named:
            result.add_error(
                "SHAPE_MISMATCH",
                f"{facts.name} is positional and needs two or more unnamed fields.",
                ctx,
            )
    elif facts.kind is ShapeKind.UNIT:
        if facts.fields:
            result.add_error(
                "SHAPE_MISMATCH",
                f"{facts.name} is a unit record but has {len(facts.fields)} field(s).",
                ctx,
            )
    elif facts.kind is ShapeKind.ENUM:
        if facts.fields:
            result.add_error(
                "PAYLOAD_VARIANT",
                f"{facts.name}: enumerations with payload-carrying variants are not supported.",
                ctx,
            )
        if not facts.variants:
            result.add_error(
                "EMPTY_ENUM",
                f"{facts.name} declares no variants.",
                ctx,
            )

    return result


def validate_options(facts: TypeFacts) -> ValidationResult:
    """String conversion is only generated for no-payload enumerations."""
    result: ValidationResult = ValidationResult()
    if facts.options.string_conversion and facts.kind is not ShapeKind.ENUM:
        result.add_error(
            "STRING_CONVERSION_NOT_ENUM",
            f"{facts.name}: string_conversion is only valid on enumerations, "
            f"not {facts.kind.value} records.",
            {"type": facts.name},
        )
    return result


def _check_unique(
    result: ValidationResult,
    type_name: str,
    what: str,
    declared: List[str],
    rendered: List[str],
) -> None:
    seen: Dict[str, List[str]] = defaultdict(list)
    for original, display in zip(declared, rendered):
        if not display:
            result.add_error(
                "EMPTY_NAME",
                f"{type_name}: {what} '{original}' renames to an empty string.",
                {"type": type_name, what: original},
            )
            continue
        seen[display].append(original)

    for display, originals in seen.items():
        if len(originals) == len(set(originals)) == 1:
            continue
        if len(set(originals)) < len(originals):
            code: str = f"DUPLICATE_{what.upper()}"
            message: str = f"{type_name}: {what} '{originals[0]}' is declared more than once."
        else:
            code = AMBIGUOUS_NAME
            message = (
                f"{type_name}: {what}s {', '.join(originals)} all render as '{display}'."
            )
        result.add_error(code, message, {"type": type_name, "display": display})


def validate_names(facts: TypeFacts) -> ValidationResult:
    """
    Names must stay non-empty and unique once the rename rule is applied.

    Complexity: O(n) in the number of fields / variants.
    """
    result: ValidationResult = ValidationResult()
    rule = facts.options.effective_rule

    if facts.kind is ShapeKind.NAMED:
        declared: List[str] = [f.name for f in facts.fields if f.name is not None]
        _check_unique(
            result, facts.name, "field", declared,
            [apply_rename(name, rule) for name in declared],
        )
    elif facts.kind is ShapeKind.ENUM:
        declared = list(facts.variants)
        _check_unique(
            result, facts.name, "variant", declared,
            [apply_rename(name, rule) for name in declared],
        )
    return result


# ---------------------------------------------------------------------------
# Master entry points
# ---------------------------------------------------------------------------


def validate_facts(facts: TypeFacts) -> ValidationResult:
    """Run every validator over one type's facts."""
    result: ValidationResult = ValidationResult()
    result.merge(validate_shape(facts))
    result.merge(validate_options(facts))
    if result.is_valid:
        result.merge(validate_names(facts))

    if not result.is_valid:
        logger.debug("Facts for %s rejected. %s", facts.name, result.summary())
    return result


def ensure_valid(facts: TypeFacts) -> ValidationResult:
    """
    Validate *facts* and raise when any error was found.

    Raises:
        AmbiguousNameError: two names render identically.
        InvalidTypeDefinitionError: any other rejected fact.
    """
    result: ValidationResult = validate_facts(facts)
    if result.is_valid:
        return result
    if result.has_code(AMBIGUOUS_NAME):
        raise AmbiguousNameError(facts.name, result)
    raise InvalidTypeDefinitionError(facts.name, result)


__all__: List[str] = [
    "AMBIGUOUS_NAME",
    "ValidationError",
    "ValidationResult",
    "validate_shape",
    "validate_options",
    "validate_names",
    "validate_facts",
    "ensure_valid",
]
