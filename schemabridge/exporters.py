# File: schemabridge/exporters.py
"""
schemabridge - File Emitter
============================
Assembles named structural strings into one TypeScript declaration file and
writes it to disk.

Artifact format (byte-stable: identical input yields identical bytes)::

    // This file is auto-generated by schema-bridge
    <blank>
    export type User = { name: string; age: number; };
    <blank>
    export type Status = 'Active' | 'Inactive';
    <blank>

The whole artifact is built in memory first. The write itself happens while
holding an exclusive lock on the destination path, so two emitters targeting
the same file in one process never interleave. Storage errors are not
wrapped; the ``OSError`` reaches the caller as raised.
"""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from schemabridge.introspect import type_name
from schemabridge.registry import TypeBridgeRegistry, default_registry
from schemabridge.utils import count_lines, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.exporters")

GENERATED_HEADER: str = "// This file is auto-generated by schema-bridge\n\n"

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# Emission record
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of one emitted artifact."""

    path: str
    size_bytes: int
    line_count: int
    type_count: int
    sha256: str


# ---------------------------------------------------------------------------
# Per-destination locks
# ---------------------------------------------------------------------------


class _DestinationLock:
    """A ``threading.Lock`` that can sit in a weak-value map."""

    __slots__ = ("_lock", "__weakref__")

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()

    def __enter__(self) -> "_DestinationLock":
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()


# An entry lives only while some emitter holds its lock.
_LOCKS: "weakref.WeakValueDictionary[str, _DestinationLock]" = weakref.WeakValueDictionary()
_LOCKS_GUARD: threading.Lock = threading.Lock()


def _destination_lock(path: Path) -> _DestinationLock:
    key: str = str(path.resolve())
    with _LOCKS_GUARD:
        lock: Optional[_DestinationLock] = _LOCKS.get(key)
        if lock is None:
            lock = _DestinationLock()
            _LOCKS[key] = lock
        return lock


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def generate_ts_file(pairs: Iterable[Tuple[str, str]]) -> str:
    """
    Build the artifact text for ``(type name, structural string)`` pairs,
    in the order given.

    Examples:
        >>> generate_ts_file([("UserId", "string")])
        '// This file is auto-generated by schema-bridge\\n\\nexport type UserId = string;\\n\\n'
    """
    parts: List[str] = [GENERATED_HEADER]
    for name, ts in pairs:
        parts.append(f"export type {name} = {ts};\n\n")
    return "".join(parts)


# ---------------------------------------------------------------------------
# Emission
# ---------------------------------------------------------------------------


def write_artifact(content: str, path: PathLike, type_count: int = 0) -> FileRecord:
    """
    Write already-assembled *content* to *path* under the destination lock.

    Raises:
        OSError: the destination could not be written.
    """
    target: Path = Path(path)
    with _destination_lock(target):
        size_bytes: int = write_file(target, content)

    record: FileRecord = FileRecord(
        path=str(target),
        size_bytes=size_bytes,
        line_count=count_lines(content),
        type_count=type_count,
        sha256=sha256_hex(content),
    )
    logger.info(
        "Emitted %d type(s) to %s (%d bytes).",
        type_count,
        target,
        size_bytes,
    )
    return record


def export_to_file(pairs: Sequence[Tuple[str, str]], path: PathLike) -> int:
    """
    Assemble *pairs* and write them to *path*, replacing any existing file.

    Returns:
        Number of bytes written.

    Raises:
        OSError: the destination could not be written.
    """
    pairs = list(pairs)
    content: str = generate_ts_file(pairs)
    return write_artifact(content, path, type_count=len(pairs)).size_bytes


def type_pairs(
    classes: Iterable[Any],
    registry: Optional[TypeBridgeRegistry] = None,
) -> List[Tuple[str, str]]:
    """Name each class by its ``__name__`` and bridge it to its structural string."""
    active: TypeBridgeRegistry = registry or default_registry
    return [(type_name(cls), active.to_ts(cls)) for cls in classes]


def export_types(
    path: PathLike,
    *classes: Any,
    registry: Optional[TypeBridgeRegistry] = None,
) -> int:
    """
    Bridge *classes* and emit them to *path* in the order given.

    Usage::

        export_types("web/src/bindings.ts", User, Status, UserId)
    """
    return export_to_file(type_pairs(classes, registry), path)


__all__: List[str] = [
    "GENERATED_HEADER",
    "FileRecord",
    "generate_ts_file",
    "write_artifact",
    "export_to_file",
    "type_pairs",
    "export_types",
]
