# File: schemabridge/naming.py
"""
schemabridge - Naming-Convention Engine
========================================
Pure string transforms used to re-derive field and variant names under a
declared ``rename_all`` rule.

Case detection is deliberately coarse: a name is *underscored* when it
contains at least one ``_``, otherwise it is *boundary-free*. Boundary-free
names are assumed to be PascalCase already; the engine never tries to tell
camelCase, PascalCase and flatcase apart.

Performance strategy:
- ``apply_rename`` is decorated with ``@lru_cache(maxsize=None)``; the same
  field names recur across every type that is generated.
- No shared mutable state beyond the cache, so concurrent calls are safe.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, Dict, List, Optional, Tuple, Union

from schemabridge.models import NamingRule

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.naming")

_SEPARATOR: str = "_"


# ---------------------------------------------------------------------------
# Case detection & word helpers
# ---------------------------------------------------------------------------


def is_underscored(name: str) -> bool:
    """Return True when *name* contains an explicit ``_`` word separator."""
    return _SEPARATOR in name


def _segments(name: str) -> List[str]:
    return [part for part in name.split(_SEPARATOR) if part]


def _upper_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def _insert_boundaries(name: str, separator: str) -> str:
    """Put *separator* before every upper-case character except the first."""
    return "".join(
        separator + char if char.isupper() and index > 0 else char
        for index, char in enumerate(name)
    )


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------


def underscored_to_pascal(name: str) -> str:
    """
    Examples:
        >>> underscored_to_pascal("database_url")
        'DatabaseUrl'
        >>> underscored_to_pascal("__cache__enabled")
        'CacheEnabled'
    """
    return "".join(_upper_first(part) for part in _segments(name))


def underscored_to_camel(name: str) -> str:
    """
    Examples:
        >>> underscored_to_camel("is_active")
        'isActive'
        >>> underscored_to_camel("MAX_retries")
        'maxRetries'
    """
    parts: List[str] = _segments(name)
    if not parts:
        return ""
    return parts[0].lower() + "".join(_upper_first(part) for part in parts[1:])


def pascal_to_camel(name: str) -> str:
    return name[:1].lower() + name[1:]


def pascal_to_snake(name: str) -> str:
    """
    Examples:
        >>> pascal_to_snake("LowPriority")
        'low_priority'
    """
    return _insert_boundaries(name, "_").lower()


def pascal_to_screaming_snake(name: str) -> str:
    return _insert_boundaries(name, "_").upper()


def pascal_to_kebab(name: str) -> str:
    return _insert_boundaries(name, "-").lower()


def _keep(name: str) -> str:
    return name


# rule -> (converter for underscored input, converter for boundary-free input)
_CONVERTERS: Dict[NamingRule, Tuple[Callable[[str], str], Callable[[str], str]]] = {
    NamingRule.IDENTITY: (_keep, _keep),
    NamingRule.LOWERCASE: (str.lower, str.lower),
    NamingRule.UPPERCASE: (str.upper, str.upper),
    NamingRule.PASCAL_CASE: (underscored_to_pascal, _keep),
    NamingRule.CAMEL_CASE: (underscored_to_camel, pascal_to_camel),
    NamingRule.SNAKE_CASE: (_keep, pascal_to_snake),
    NamingRule.SCREAMING_SNAKE_CASE: (str.upper, pascal_to_screaming_snake),
    NamingRule.KEBAB_CASE: (lambda name: name.replace(_SEPARATOR, "-"), pascal_to_kebab),
}


def resolve_rule(rule: Union[NamingRule, str, None]) -> NamingRule:
    """
    Normalise a rule given as an enum member, its spelling, or ``None``.

    Anything unrecognised resolves to ``NamingRule.IDENTITY``.
    """
    if rule is None:
        return NamingRule.IDENTITY
    if isinstance(rule, NamingRule):
        return rule
    try:
        return NamingRule(rule)
    except ValueError:
        logger.debug("Unknown naming rule %r; treating as identity.", rule)
        return NamingRule.IDENTITY


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _apply(name: str, rule: NamingRule) -> str:
    if not name.strip(_SEPARATOR):
        return ""
    underscored_fn: Callable[[str], str]
    boundary_free_fn: Callable[[str], str]
    underscored_fn, boundary_free_fn = _CONVERTERS[rule]
    if is_underscored(name):
        return underscored_fn(name)
    return boundary_free_fn(name)


def apply_rename(name: str, rule: Union[NamingRule, str, None]) -> str:
    """
    Transform *name* under *rule*.

    Total: an unknown rule passes the name through unchanged, and an empty
    name (or one made only of ``_``) yields ``""``.

    Examples:
        >>> apply_rename("LowPriority", "snake_case")
        'low_priority'
        >>> apply_rename("LowPriority", NamingRule.SCREAMING_SNAKE_CASE)
        'LOW_PRIORITY'
        >>> apply_rename("is_active", "camelCase")
        'isActive'
        >>> apply_rename("Active", "PascalCase")
        'Active'
        >>> apply_rename("max_retries", "kebab-case")
        'max-retries'
    """
    return _apply(name, resolve_rule(rule))


def rename_names(names: List[str], rule: Optional[Union[NamingRule, str]]) -> List[str]:
    """Apply one rule to a list of names, preserving order."""
    resolved: NamingRule = resolve_rule(rule)
    return [_apply(name, resolved) for name in names]


__all__: List[str] = [
    "apply_rename",
    "rename_names",
    "resolve_rule",
    "is_underscored",
    "underscored_to_pascal",
    "underscored_to_camel",
    "pascal_to_camel",
    "pascal_to_snake",
    "pascal_to_screaming_snake",
    "pascal_to_kebab",
]
