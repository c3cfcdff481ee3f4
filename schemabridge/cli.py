# File: schemabridge/cli.py
"""
schemabridge - Command-Line Interface
======================================

Built with the standard-library ``argparse`` module.

Usage examples::

    # Bridge every @bridge type in a module into one TypeScript file
    python -m schemabridge -m myapp.models -o web/src/bindings.ts

    # Settings from a project config file (YAML or JSON)
    schemabridge --config schemabridge.yaml -v

    # Only some types, printed instead of written
    schemabridge -m myapp.models -t User -t Status --dry-run

    # Schema IR as JSON
    schemabridge -m myapp.models --schema-json

Exit codes:
    0 — success
    1 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from schemabridge.models import BridgeConfig, NamingRule

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_GENERATION_ERROR: int = 1
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root schemabridge logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("schemabridge")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from schemabridge import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="schemabridge",
        description=(
            "schemabridge — keep client-side TypeScript types in step with "
            "Python type definitions.\n\n"
            "Bridges dataclasses, enums, NewTypes, NamedTuples and pydantic "
            "models into `export type` declarations and a portable Schema IR."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -m myapp.models -o bindings.ts\n"
            "  %(prog)s -c schemabridge.yaml -v\n"
            "  %(prog)s -m myapp.models -t User --dry-run\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"schemabridge v{__version__}",
    )

    # --- Input ---
    input_group = parser.add_argument_group("input")
    input_group.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Project config file (YAML or JSON).",
    )
    input_group.add_argument(
        "-m", "--module",
        dest="modules",
        action="append",
        default=None,
        metavar="MODULE",
        help="Importable module to scan for bridged types (repeatable).",
    )
    input_group.add_argument(
        "-t", "--type",
        dest="types",
        action="append",
        default=None,
        metavar="NAME",
        help="Only bridge the named type (repeatable).",
    )
    input_group.add_argument(
        "--rename-all",
        type=str,
        default=None,
        choices=[rule.value for rule in NamingRule],
        help="Rule for types that declare no rename rule of their own.",
    )

    # --- Output ---
    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="FILE",
        help="Destination TypeScript file.",
    )
    output_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Print the generated TypeScript to stdout instead of writing it.",
    )
    output_group.add_argument(
        "--schema-json",
        action="store_true",
        default=False,
        help="Print the Schema IR of every type as JSON instead of TypeScript.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config assembly
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.modules:
        overrides["modules"] = args.modules

    if args.types:
        overrides["types"] = args.types

    if args.output is not None:
        overrides["output"] = args.output

    if args.rename_all is not None:
        overrides["default_rename_all"] = args.rename_all

    return overrides


def _load_config(args: argparse.Namespace) -> BridgeConfig:
    """
    Merge the config file (if any) with CLI overrides.

    Raises:
        FileNotFoundError / ValueError: the config cannot be loaded.
    """
    from schemabridge.generator import load_config_file, parse_config

    raw: Dict[str, Any] = {}
    if args.config is not None:
        loaded: Dict[str, Any] = load_config_file(Path(args.config).resolve())
        section: Any = loaded.get("schemabridge", loaded)
        if not isinstance(section, dict):
            raise ValueError("The 'schemabridge' section must be a mapping.")
        raw = dict(section)
    raw.update(_build_config_overrides(args))
    return parse_config(raw)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _run_generation(args: argparse.Namespace) -> int:
    """Run the pipeline and return the appropriate exit code."""
    from schemabridge.generator import BridgeGenerator, GenerationReport

    try:
        config: BridgeConfig = _load_config(args)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load config: %s", exc)
        return EXIT_INPUT_ERROR

    if not config.modules:
        logger.error("No modules to scan. Use -m/--module or a config file.")
        return EXIT_INPUT_ERROR

    print_only: bool = args.dry_run or args.schema_json
    if config.output is None and not print_only:
        logger.error(
            "An output file is required. Use -o/--output, --dry-run or --schema-json."
        )
        return EXIT_INPUT_ERROR

    generator: BridgeGenerator = BridgeGenerator(config)
    report: GenerationReport = generator.generate(write=not print_only)

    if print_only and report.success:
        if args.schema_json:
            print(json.dumps(report.schemas_as_dict(), indent=2, ensure_ascii=False))
        else:
            sys.stdout.write(report.content)
    elif not args.quiet:
        print(report.summary(), file=sys.stderr)

    if report.success:
        return EXIT_SUCCESS
    if report.input_errors:
        return EXIT_INPUT_ERROR
    if report.generation_errors:
        return EXIT_GENERATION_ERROR
    return EXIT_EXPORT_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)

    exit_code: int = _run_generation(args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


def main() -> None:
    """Console-script entry point."""
    cli_main()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "main",
    "EXIT_SUCCESS",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]
