# File: schemabridge/errors.py
"""
schemabridge - Exception Hierarchy
===================================

Every error raised on purpose by the generation pipeline derives from
``SchemaBridgeError`` so callers can catch the whole family at once.

    SchemaBridgeError
    ├── UnsupportedTypeError        (also a TypeError)
    ├── InvalidTypeDefinitionError
    │   └── AmbiguousNameError
    └── ParseError                  (also a ValueError)

Storage failures during file emission are *not* wrapped: the underlying
``OSError`` reaches the caller unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

if TYPE_CHECKING:
    from schemabridge.validators import ValidationResult


class SchemaBridgeError(Exception):
    """Base class for all schemabridge errors."""


class UnsupportedTypeError(SchemaBridgeError, TypeError):
    """An annotation falls outside the closed set of bridgeable shapes."""

    def __init__(self, annotation: Any, reason: str = "") -> None:
        self.annotation: Any = annotation
        self.reason: str = reason
        message: str = f"Cannot bridge type {annotation!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidTypeDefinitionError(SchemaBridgeError):
    """Structural facts for a declared type were rejected at generation time."""

    def __init__(self, type_name: str, result: "ValidationResult") -> None:
        self.type_name: str = type_name
        self.result: "ValidationResult" = result
        messages: List[str] = [err.message for err in result.errors]
        super().__init__(
            f"Invalid definition for {type_name}: " + "; ".join(messages)
        )


class AmbiguousNameError(InvalidTypeDefinitionError):
    """Two fields or variants of one type render to the same display name."""


class ParseError(SchemaBridgeError, ValueError):
    """Input text matched none of an enumeration's display strings."""

    def __init__(self, type_name: str, text: str) -> None:
        self.type_name: str = type_name
        self.text: str = text
        super().__init__(f"Unknown {type_name}: {text}")

    def __reduce__(self) -> Any:
        return (type(self), (self.type_name, self.text))


__all__: List[str] = [
    "SchemaBridgeError",
    "UnsupportedTypeError",
    "InvalidTypeDefinitionError",
    "AmbiguousNameError",
    "ParseError",
]
