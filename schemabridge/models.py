# File: schemabridge/models.py
"""
schemabridge - Core Data Models
================================
Pydantic V2 models describing the *structural facts* of a declared type and
the options that steer generation. These models are the contract between the
introspector (which reads facts off Python classes) and the core (which only
ever consumes facts):

    Introspector → TypeFacts → Validation → Structural Dispatch

The core never looks at class internals itself; anything it needs to know
about a type is carried by a ``TypeFacts`` instance.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.models")

# ---------------------------------------------------------------------------
# Enums: fixed sets used across the entire project
# ---------------------------------------------------------------------------


class NamingRule(str, Enum):
    """Identifier casing rules a declared type may apply to its names."""

    IDENTITY = "identity"
    LOWERCASE = "lowercase"
    UPPERCASE = "UPPERCASE"
    PASCAL_CASE = "PascalCase"
    CAMEL_CASE = "camelCase"
    SNAKE_CASE = "snake_case"
    SCREAMING_SNAKE_CASE = "SCREAMING_SNAKE_CASE"
    KEBAB_CASE = "kebab-case"


class ShapeKind(str, Enum):
    """Structural classification of a composite type."""

    NAMED = "named"
    NEWTYPE = "newtype"
    POSITIONAL = "positional"
    UNIT = "unit"
    ENUM = "enum"

    @classmethod
    def classify(cls, named_fields: bool, field_count: int) -> "ShapeKind":
        """
        Derive the shape of a record from its field facts.

        Examples:
            >>> ShapeKind.classify(True, 3)
            <ShapeKind.NAMED: 'named'>
            >>> ShapeKind.classify(False, 1)
            <ShapeKind.NEWTYPE: 'newtype'>
            >>> ShapeKind.classify(False, 0)
            <ShapeKind.UNIT: 'unit'>
        """
        if field_count == 0:
            return cls.UNIT
        if named_fields:
            return cls.NAMED
        if field_count == 1:
            return cls.NEWTYPE
        return cls.POSITIONAL


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    frozen=True,
    extra="forbid",
    arbitrary_types_allowed=True,
)

_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Declared options
# ---------------------------------------------------------------------------


class BridgeOptions(BaseModel):
    """Options declared on a composite type (the ``@bridge(...)`` arguments)."""

    model_config = _FROZEN_CONFIG

    rename_all: Optional[NamingRule] = Field(
        default=None,
        description="Casing rule applied to every field / variant name.",
    )
    string_conversion: bool = Field(
        default=False,
        description="Generate stringify/parse for a no-payload enumeration.",
    )

    @property
    def effective_rule(self) -> NamingRule:
        return self.rename_all or NamingRule.IDENTITY


# ---------------------------------------------------------------------------
# Structural facts
# ---------------------------------------------------------------------------


class FieldFacts(BaseModel):
    """One field of a record: its declared name (``None`` when positional) and type."""

    model_config = _FROZEN_CONFIG

    name: Optional[str] = Field(default=None, description="Declared field name.")
    annotation: Any = Field(..., description="Native type annotation of the field.")

    def __repr__(self) -> str:
        label: str = self.name if self.name is not None else "_"
        return f"<Field {label}: {self.annotation!r}>"


class TypeFacts(BaseModel):
    """
    Everything the core needs to know about one declared type.

    Built by ``schemabridge.introspect`` for Python classes, or directly by
    callers who extract facts some other way.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Declared type name.")
    kind: ShapeKind = Field(..., description="Shape classification.")
    fields: Tuple[FieldFacts, ...] = Field(
        default=(), description="Record fields in declaration order."
    )
    variants: Tuple[str, ...] = Field(
        default=(), description="Enumeration variant identifiers in declaration order."
    )
    options: BridgeOptions = Field(
        default_factory=BridgeOptions, description="Declared generation options."
    )

    @classmethod
    def for_record(
        cls,
        name: str,
        fields: Sequence[Tuple[Optional[str], Any]],
        options: Optional[BridgeOptions] = None,
    ) -> "TypeFacts":
        """
        Build facts for a struct-like type from ``(name, annotation)`` pairs.

        Pass ``None`` as every field name for a positional record; the shape
        is classified from the pairs.
        """
        field_facts: Tuple[FieldFacts, ...] = tuple(
            FieldFacts(name=field_name, annotation=annotation)
            for field_name, annotation in fields
        )
        named: bool = any(f.name is not None for f in field_facts)
        return cls(
            name=name,
            kind=ShapeKind.classify(named, len(field_facts)),
            fields=field_facts,
            options=options or BridgeOptions(),
        )

    @classmethod
    def for_enum(
        cls,
        name: str,
        variants: Sequence[str],
        options: Optional[BridgeOptions] = None,
    ) -> "TypeFacts":
        """Build facts for an enumeration whose variants carry no payload."""
        return cls(
            name=name,
            kind=ShapeKind.ENUM,
            variants=tuple(variants),
            options=options or BridgeOptions(),
        )

    def __repr__(self) -> str:
        size: int = len(self.variants) if self.kind is ShapeKind.ENUM else len(self.fields)
        return f"<TypeFacts {self.name} {self.kind.value} ({size})>"


# ---------------------------------------------------------------------------
# Project configuration (CLI / config file)
# ---------------------------------------------------------------------------


class BridgeConfig(BaseModel):
    """
    Project-level settings for one generation run.

    Usually loaded from a YAML or JSON file::

        output: web/src/bindings.ts
        modules:
          - myapp.models
        types: [User, Status]
        default_rename_all: camelCase
    """

    model_config = _SETTINGS_CONFIG

    output: Optional[Path] = Field(
        default=None, description="Destination of the generated TypeScript file."
    )
    modules: List[str] = Field(
        default_factory=list,
        description="Importable modules scanned for bridged types.",
    )
    types: List[str] = Field(
        default_factory=list,
        description="Restrict generation to these type names (all bridged types when empty).",
    )
    default_rename_all: Optional[NamingRule] = Field(
        default=None,
        description="Rule applied to types that declare no rename rule of their own.",
    )

    @field_validator("modules")
    @classmethod
    def _modules_not_blank(cls, value: List[str]) -> List[str]:
        for module_name in value:
            if not module_name.strip():
                raise ValueError("Module names must not be blank.")
        return value


__all__: List[str] = [
    "NamingRule",
    "ShapeKind",
    "BridgeOptions",
    "FieldFacts",
    "TypeFacts",
    "BridgeConfig",
]

logger.debug("schemabridge.models loaded — %d public symbols.", len(__all__))
