# File: schemabridge/generator.py
"""
schemabridge - Generation Pipeline (Orchestrator)
==================================================

Connects every phase together:

    Module import → Type collection → Bridging → File emission

The ``BridgeGenerator`` class provides both a programmatic API and the
backend for the CLI.

Workflow::

    1. Load a project config from YAML/JSON (or accept a ``BridgeConfig``).
    2. Import each configured module.
    3. Collect the bridged types it defines, in definition order.
    4. Bridge each type through the registry (introspect → validate → dispatch).
    5. Emit the ``export type`` artifact to the configured output.
    6. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Errors are isolated per type: one bad type doesn't prevent the rest
      from being bridged, but any error fails the run before emission.
    - Import failures are recorded against the module that failed.
    - Storage errors during emission are recorded as export errors.
"""

from __future__ import annotations

import importlib
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from schemabridge.errors import SchemaBridgeError
from schemabridge.exporters import FileRecord, generate_ts_file, write_artifact
from schemabridge.introspect import declared_options, is_bridgeable, type_name
from schemabridge.models import BridgeConfig
from schemabridge.registry import TypeBridgeRegistry
from schemabridge.schema import Schema, schema_to_dict
from schemabridge.utils import Timer, count_lines

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``BridgeGenerator.generate()``.

    ``definitions`` holds the ``(name, structural string)`` pairs in emission
    order and ``schemas`` the Schema IR of the same types.
    """

    success: bool = False
    output_path: str = ""

    definitions: List[Tuple[str, str]] = field(default_factory=list)
    schemas: Dict[str, Schema] = field(default_factory=dict)

    total_types: int = 0
    total_elapsed_seconds: float = 0.0

    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    record: Optional[FileRecord] = None

    @property
    def content(self) -> str:
        """The artifact text for ``definitions``."""
        return generate_ts_file(self.definitions)

    def schemas_as_dict(self) -> Dict[str, Any]:
        return {name: schema_to_dict(schema) for name, schema in self.schemas.items()}

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  schemabridge — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Output:           {self.output_path or '(none)'}")
        lines.append(f"  Types bridged:    {len(self.definitions)}/{self.total_types}")
        if self.record is not None:
            lines.append(f"  Total lines:      {self.record.line_count:,}")
            lines.append(f"  Total bytes:      {self.record.size_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        for title, items in (
            ("Input Errors", self.input_errors),
            ("Generation Errors", self.generation_errors),
            ("Export Errors", self.export_errors),
        ):
            if items:
                lines.append(f"{'─'*60}")
                lines.append(f"  {title} ({len(items)}):")
                for err in items:
                    lines.append(f"    ✗ {err}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        text: str = path.read_text(encoding="utf-8")
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        text: str = path.read_text(encoding="utf-8")
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a project config file (JSON or YAML), dispatching on extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Config path is not a file: {path}")

    suffix: str = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    elif suffix == ".json":
        return _load_json_file(path)
    else:
        logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
        try:
            return _load_json_file(path)
        except ValueError:
            return _load_yaml_file(path)


def parse_config(raw: Dict[str, Any]) -> BridgeConfig:
    """
    Validate a raw config mapping into a ``BridgeConfig``.

    Settings may sit at the top level or under a ``schemabridge`` key.

    Raises:
        ValueError: If validation fails.
    """
    data: Any = raw.get("schemabridge", raw)
    if not isinstance(data, dict):
        raise ValueError("The 'schemabridge' section must be a mapping.")
    try:
        return BridgeConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc


# ---------------------------------------------------------------------------
# Type collection
# ---------------------------------------------------------------------------


def collect_types(module: ModuleType, names: Sequence[str] = ()) -> List[Any]:
    """
    Bridgeable types defined in *module*, in definition order.

    Without *names*, only types declared with ``@bridge`` are collected.
    With *names*, any bridgeable type of those names is, including plain
    dataclasses, enums and ``NewType`` aliases.
    """
    wanted: Optional[set] = set(names) if names else None
    found: List[Any] = []
    for attr_name, obj in vars(module).items():
        if getattr(obj, "__module__", None) != module.__name__:
            continue
        if wanted is not None:
            if attr_name in wanted and is_bridgeable(obj):
                found.append(obj)
        elif declared_options(obj) is not None:
            found.append(obj)
    return found


# ---------------------------------------------------------------------------
# BridgeGenerator: master orchestrator
# ---------------------------------------------------------------------------


class BridgeGenerator:
    """
    Pipeline orchestrator for one generation run.

    Usage::

        generator = BridgeGenerator(BridgeConfig(
            modules=["myapp.models"],
            output=Path("web/src/bindings.ts"),
        ))
        report = generator.generate()
        print(report.summary())

        # Or with explicit types
        report = generator.generate_for([User, Status], output=Path("out.ts"))
    """

    def __init__(
        self,
        config: Optional[BridgeConfig] = None,
        *,
        registry: Optional[TypeBridgeRegistry] = None,
    ) -> None:
        self._config: BridgeConfig = config or BridgeConfig()
        self._registry: TypeBridgeRegistry = registry or TypeBridgeRegistry(
            default_rename_all=self._config.default_rename_all,
        )
        logger.debug(
            "BridgeGenerator initialised: %d module(s), output=%s.",
            len(self._config.modules),
            self._config.output,
        )

    @property
    def config(self) -> BridgeConfig:
        return self._config

    @property
    def registry(self) -> TypeBridgeRegistry:
        return self._registry

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate(self, *, write: bool = True) -> GenerationReport:
        """
        Collect types from the configured modules, bridge them, and emit
        the artifact to ``config.output`` (unless *write* is False).
        """
        report: GenerationReport = GenerationReport()
        pipeline_start: float = time.perf_counter()

        types: List[Any] = self._step_collect(report)
        if report.input_errors:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        return self._run_pipeline(types, self._config.output if write else None, report, pipeline_start)

    def generate_for(
        self,
        types: Sequence[Any],
        *,
        output: Optional[Path] = None,
    ) -> GenerationReport:
        """Bridge explicit *types* and, when *output* is given, emit them."""
        report: GenerationReport = GenerationReport()
        return self._run_pipeline(list(types), output, report, time.perf_counter())

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        types: List[Any],
        output: Optional[Path],
        report: GenerationReport,
        pipeline_start: float,
    ) -> GenerationReport:
        report.total_types = len(types)
        self._step_bridge(types, report)

        if report.generation_errors:
            logger.error(
                "Bridging failed for %d type(s); nothing emitted.",
                len(report.generation_errors),
            )
        elif output is not None:
            self._step_export(output, report)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    # -----------------------------------------------------------------
    # Pipeline step: collect
    # -----------------------------------------------------------------

    def _step_collect(self, report: GenerationReport) -> List[Any]:
        collected: List[Any] = []
        with Timer("collect") as t:
            for module_name in self._config.modules:
                try:
                    module: ModuleType = importlib.import_module(module_name)
                except ImportError as exc:
                    error_msg: str = f"Cannot import module '{module_name}': {exc}"
                    report.input_errors.append(error_msg)
                    logger.error(error_msg)
                    continue
                found: List[Any] = collect_types(module, self._config.types)
                logger.info("Collected %d type(s) from %s.", len(found), module_name)
                collected.extend(found)

            if self._config.types:
                present: set = {type_name(tp) for tp in collected}
                for missing in self._config.types:
                    if missing not in present:
                        report.input_errors.append(
                            f"Type '{missing}' not found in {', '.join(self._config.modules) or 'any module'}."
                        )

        report.step_metrics.append(GenerationStepMetric(
            step_name="Collect Types",
            success=not report.input_errors,
            elapsed_seconds=t.elapsed,
            detail=f"{len(collected)} type(s) from {len(self._config.modules)} module(s)",
        ))
        return collected

    # -----------------------------------------------------------------
    # Pipeline step: bridge
    # -----------------------------------------------------------------

    def _step_bridge(self, types: List[Any], report: GenerationReport) -> None:
        origins: Dict[str, str] = {}
        with Timer("bridge") as t:
            for tp in types:
                name: str = type_name(tp)
                origin: str = getattr(tp, "__module__", None) or "<unknown>"
                if name in origins:
                    error_msg: str = (
                        f"{name}: duplicate type name (already emitted from module "
                        f"{origins[name]})"
                    )
                    report.generation_errors.append(error_msg)
                    logger.error(error_msg)
                    continue
                try:
                    result = self._registry.bridge(tp)
                except SchemaBridgeError as exc:
                    error_msg = f"{name}: {type(exc).__name__}: {exc}"
                    report.generation_errors.append(error_msg)
                    logger.error(error_msg)
                    continue
                origins[name] = origin
                report.definitions.append((name, result.ts))
                report.schemas[name] = result.schema
                logger.debug("Bridged %s → %s", name, result.ts)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Bridge Types",
            success=not report.generation_errors,
            elapsed_seconds=t.elapsed,
            detail=f"{len(report.definitions)}/{len(types)} type(s) bridged",
        ))

    # -----------------------------------------------------------------
    # Pipeline step: export
    # -----------------------------------------------------------------

    def _step_export(self, output: Path, report: GenerationReport) -> None:
        report.output_path = str(output)
        content: str = report.content
        with Timer("export") as t:
            try:
                report.record = write_artifact(
                    content, output, type_count=len(report.definitions)
                )
            except OSError as exc:
                error_msg: str = f"Cannot write {output}: {exc}"
                report.export_errors.append(error_msg)
                logger.error(error_msg)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Emit TypeScript",
            success=not report.export_errors,
            elapsed_seconds=t.elapsed,
            detail=f"{len(report.definitions)} export(s), ~{count_lines(content):,} lines",
        ))

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(
        self,
        report: GenerationReport,
        total_elapsed: float,
    ) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.input_errors or report.generation_errors or report.export_errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "BridgeGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "collect_types",
    "load_config_file",
    "parse_config",
]

logger.debug("schemabridge.generator loaded.")
