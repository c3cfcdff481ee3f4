# File: schemabridge/__init__.py
"""
schemabridge — Python Types to TypeScript & Schema IR
======================================================

Keeps a client-side type definition from drifting away from the server-side
model it describes. Each declared Python type is converted into two parallel
representations: a TypeScript structural type expression and a portable,
language-neutral Schema IR value.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────┐
    │  CLI / Entry │────▶│ BridgeGenerator │────▶│  exporters   │
    │   (cli.py)   │     │ (generator.py)  │     │ (file emit)  │
    └──────────────┘     └───────┬────────┘     └──────────────┘
                                 ▼
                       ┌───────────────────┐
                       │ TypeBridgeRegistry │ ◀── types.py vocabulary
                       │   (registry.py)    │
                       └───────┬───────────┘
                ┌──────────────┼──────────────┐
                ▼              ▼              ▼
         ┌────────────┐ ┌────────────┐ ┌────────────┐
         │ introspect │ │ validators │ │  dispatch  │──▶ naming / conversion
         └────────────┘ └────────────┘ └────────────┘

Usage::

    from dataclasses import dataclass
    from schemabridge import bridge, to_ts, export_types

    @bridge(rename_all="camelCase")
    @dataclass
    class User:
        user_name: str
        is_active: bool

    to_ts(User)                      # '{ userName: string; isActive: boolean; }'
    export_types("bindings.ts", User)

Public API:
    - bridge               — Declaration decorator (rename_all, string_conversion)
    - to_ts / to_schema    — Bridge one annotation with the default registry
    - TypeBridgeRegistry   — Registry with custom mappings and its own cache
    - export_types         — Emit ``export type`` declarations to a file
    - BridgeGenerator      — Module-scanning generation pipeline
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from schemabridge.conversion import NameTable, StringConversion
from schemabridge.dispatch import dispatch
from schemabridge.errors import (
    AmbiguousNameError,
    InvalidTypeDefinitionError,
    ParseError,
    SchemaBridgeError,
    UnsupportedTypeError,
)
from schemabridge.exporters import export_to_file, export_types, generate_ts_file
from schemabridge.generator import BridgeGenerator, GenerationReport
from schemabridge.introspect import bridge, facts_for
from schemabridge.models import (
    BridgeConfig,
    BridgeOptions,
    FieldFacts,
    NamingRule,
    ShapeKind,
    TypeFacts,
)
from schemabridge.naming import apply_rename
from schemabridge.registry import (
    TypeBridgeRegistry,
    bridge_type,
    default_registry,
    register,
    to_schema,
    to_ts,
)
from schemabridge.schema import (
    BridgeResult,
    Schema,
    render_ts,
    schema_from_json,
    schema_to_json,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Declaration & bridging
    "bridge",
    "bridge_type",
    "to_ts",
    "to_schema",
    "register",
    "default_registry",
    "TypeBridgeRegistry",
    "BridgeResult",
    "facts_for",
    "dispatch",
    # Schema IR
    "Schema",
    "render_ts",
    "schema_to_json",
    "schema_from_json",
    # Models
    "BridgeConfig",
    "BridgeOptions",
    "FieldFacts",
    "NamingRule",
    "ShapeKind",
    "TypeFacts",
    # Naming & string conversion
    "apply_rename",
    "NameTable",
    "StringConversion",
    # Emission & pipeline
    "generate_ts_file",
    "export_to_file",
    "export_types",
    "BridgeGenerator",
    "GenerationReport",
    # Errors
    "SchemaBridgeError",
    "UnsupportedTypeError",
    "InvalidTypeDefinitionError",
    "AmbiguousNameError",
    "ParseError",
]
