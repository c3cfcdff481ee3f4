"""
tests/test_generator.py
Integration tests for schemabridge.generator and schemabridge.cli.

Tests cover:
- Config file loading (YAML, JSON, unknown extension, malformed input)
- Config validation and the optional ``schemabridge`` section
- Type collection from an imported module
- The full pipeline: collect → bridge → emit, and its failure modes
- The command-line interface and its exit codes
"""

from __future__ import annotations

import importlib
import json
import logging
import pathlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List

import pytest
import yaml

from schemabridge.cli import (
    EXIT_EXPORT_ERROR,
    EXIT_GENERATION_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    cli_main,
)
from schemabridge.exporters import GENERATED_HEADER
from schemabridge.generator import (
    BridgeGenerator,
    collect_types,
    load_config_file,
    parse_config,
)
from schemabridge.models import BridgeConfig, NamingRule
from schemabridge.schema import EnumSchema


CONVERSATION_TS: str = (
    "{ title: string; style: 'brainstorm' | 'casual' | 'decision_making'; "
    "tags: string[]; owner: { userName: string; maxRetries: number; isActive: boolean; } | null; }"
)

EXPECTED_SAMPLE_ARTIFACT: str = (
    GENERATED_HEADER
    + "export type TalkStyle = 'brainstorm' | 'casual' | 'decision_making';\n\n"
    + "export type UserConfig = { userName: string; maxRetries: number; isActive: boolean; };\n\n"
    + f"export type Conversation = {CONVERSATION_TS};\n\n"
)


# ===========================================================================
# Config loading
# ===========================================================================


class TestLoadConfigFile:
    def test_yaml(self, config_yaml_path: pathlib.Path, config_dict: Dict[str, Any]) -> None:
        assert load_config_file(config_yaml_path) == config_dict

    def test_json(self, tmp_path: pathlib.Path, config_dict: Dict[str, Any]) -> None:
        path = tmp_path / "schemabridge.json"
        path.write_text(json.dumps(config_dict), encoding="utf-8")
        assert load_config_file(path) == config_dict

    def test_unknown_extension_falls_back_to_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schemabridge.conf"
        path.write_text("modules:\n  - myapp.models\n", encoding="utf-8")
        assert load_config_file(path) == {"modules": ["myapp.models"]}

    def test_empty_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == {}

    def test_missing(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "nope.yaml")

    def test_directory(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ValueError, match="not a file"):
            load_config_file(tmp_path)

    def test_malformed_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_config_file(path)

    def test_top_level_list(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config_file(path)


class TestParseConfig:
    def test_flat(self) -> None:
        config = parse_config({"modules": ["a.b"], "output": "out.ts"})
        assert config.modules == ["a.b"]
        assert config.output == pathlib.Path("out.ts")
        assert config.types == []
        assert config.default_rename_all is None

    def test_section(self) -> None:
        config = parse_config(
            {"schemabridge": {"modules": ["a.b"], "default_rename_all": "camelCase"}}
        )
        assert config.default_rename_all is NamingRule.CAMEL_CASE

    def test_unknown_key(self) -> None:
        with pytest.raises(ValueError, match="Config validation failed"):
            parse_config({"modules": ["a"], "outptu": "typo.ts"})

    def test_blank_module(self) -> None:
        with pytest.raises(ValueError):
            parse_config({"modules": ["  "]})

    def test_unknown_rule(self) -> None:
        with pytest.raises(ValueError):
            parse_config({"default_rename_all": "Train-Case"})

    def test_section_not_mapping(self) -> None:
        with pytest.raises(ValueError, match="mapping"):
            parse_config({"schemabridge": ["a"]})


# ===========================================================================
# Type collection
# ===========================================================================


class TestCollectTypes:
    def test_bridged_only_in_definition_order(self, sample_module: str) -> None:
        module = importlib.import_module(sample_module)
        assert [tp.__name__ for tp in collect_types(module)] == [
            "TalkStyle",
            "UserConfig",
            "Conversation",
        ]

    def test_by_name(self, sample_module: str) -> None:
        module = importlib.import_module(sample_module)
        found = collect_types(module, ["UserId", "NotBridged", "Missing"])
        assert [tp.__name__ for tp in found] == ["UserId", "NotBridged"]

    def test_imported_names_are_skipped(self, sample_module: str) -> None:
        module = importlib.import_module(sample_module)
        assert collect_types(module, ["bridge", "Optional", "dataclass"]) == []


# ===========================================================================
# Pipeline
# ===========================================================================


class TestBridgeGenerator:
    def test_full_pipeline(self, config_dict: Dict[str, Any]) -> None:
        config = parse_config(config_dict)
        report = BridgeGenerator(config).generate()

        assert report.success, report.summary()
        assert [name for name, _ in report.definitions] == [
            "TalkStyle",
            "UserConfig",
            "Conversation",
        ]
        output = pathlib.Path(config_dict["output"])
        assert output.read_text(encoding="utf-8") == EXPECTED_SAMPLE_ARTIFACT
        assert report.record is not None
        assert report.record.type_count == 3
        assert report.output_path == str(output)

    def test_schemas(self, config_dict: Dict[str, Any]) -> None:
        report = BridgeGenerator(parse_config(config_dict)).generate(write=False)
        assert report.schemas["TalkStyle"] == EnumSchema(
            names=("brainstorm", "casual", "decision_making")
        )
        assert report.schemas_as_dict()["UserConfig"]["kind"] == "object"

    def test_write_false_touches_nothing(self, config_dict: Dict[str, Any]) -> None:
        report = BridgeGenerator(parse_config(config_dict)).generate(write=False)
        assert report.success
        assert report.record is None
        assert not pathlib.Path(config_dict["output"]).exists()
        assert report.content == EXPECTED_SAMPLE_ARTIFACT

    def test_selected_types(self, config_dict: Dict[str, Any]) -> None:
        config_dict["types"] = ["UserId", "Conversation"]
        report = BridgeGenerator(parse_config(config_dict)).generate(write=False)
        assert report.definitions == [
            ("Conversation", CONVERSATION_TS),
            ("UserId", "string"),
        ]

    def test_missing_type(self, config_dict: Dict[str, Any]) -> None:
        config_dict["types"] = ["Ghost"]
        report = BridgeGenerator(parse_config(config_dict)).generate()
        assert not report.success
        assert any("Ghost" in err for err in report.input_errors)
        assert not pathlib.Path(config_dict["output"]).exists()

    def test_missing_module(self, tmp_path: pathlib.Path) -> None:
        config = BridgeConfig(modules=["no_such_module_anywhere"], output=tmp_path / "x.ts")
        report = BridgeGenerator(config).generate()
        assert not report.success
        assert "no_such_module_anywhere" in report.input_errors[0]

    def test_generation_error_blocks_emission(
        self, broken_module: str, tmp_path: pathlib.Path
    ) -> None:
        output = tmp_path / "bindings.ts"
        report = BridgeGenerator(BridgeConfig(modules=[broken_module], output=output)).generate()
        assert not report.success
        assert [name for name, _ in report.definitions] == ["Fine"]
        assert len(report.generation_errors) == 1
        assert report.generation_errors[0].startswith("Broken: UnsupportedTypeError")
        assert not output.exists()

    def test_export_error_recorded(self, sample_module: str, tmp_path: pathlib.Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        config = BridgeConfig(modules=[sample_module], output=blocker / "bindings.ts")
        report = BridgeGenerator(config).generate()
        assert not report.success
        assert len(report.export_errors) == 1
        assert report.record is None

    def test_default_rename_all(self, sample_module: str) -> None:
        config = BridgeConfig(
            modules=[sample_module],
            types=["NotBridged"],
            default_rename_all=NamingRule.UPPERCASE,
        )
        report = BridgeGenerator(config).generate(write=False)
        assert report.definitions == [("NotBridged", "{ VALUE: number; }")]

    def test_generate_for(self, tmp_path: pathlib.Path) -> None:
        class Light(Enum):
            Red = 1
            Green = 2

        output = tmp_path / "light.ts"
        report = BridgeGenerator().generate_for([Light], output=output)
        assert report.success
        assert output.read_text(encoding="utf-8") == (
            GENERATED_HEADER + "export type Light = 'Red' | 'Green';\n\n"
        )

    def test_bad_hook_is_a_generation_error(self) -> None:
        @dataclass
        class Fine:
            value: int

        class BadHook:
            @classmethod
            def __schema_bridge__(cls, registry):
                return "string"

        report = BridgeGenerator().generate_for([Fine, BadHook])
        assert not report.success
        assert [name for name, _ in report.definitions] == ["Fine"]
        assert len(report.generation_errors) == 1
        assert report.generation_errors[0].startswith("BadHook: UnsupportedTypeError")
        assert "BridgeResult" in report.generation_errors[0]

    def test_duplicate_type_name(self) -> None:
        def make_light() -> type:
            class Light(Enum):
                Red = 1

            return Light

        def make_other_light() -> type:
            @dataclass
            class Light:
                lumens: int

            return Light

        first, second = make_light(), make_other_light()
        report = BridgeGenerator().generate_for([first, second])
        assert not report.success
        assert report.definitions == [("Light", "'Red'")]
        assert report.schemas["Light"] == EnumSchema(names=("Red",))
        assert report.generation_errors == [
            f"Light: duplicate type name (already emitted from module {__name__})"
        ]

    def test_summary(self, config_dict: Dict[str, Any]) -> None:
        report = BridgeGenerator(parse_config(config_dict)).generate()
        summary = report.summary()
        assert "SUCCESS" in summary
        assert "Types bridged:    3/3" in summary
        assert "Emit TypeScript" in summary


# ===========================================================================
# CLI
# ===========================================================================


@pytest.fixture()
def run_cli(capsys: pytest.CaptureFixture) -> Iterator[Callable[[List[str]], int]]:
    """Run cli_main and return its exit code, restoring logging afterwards."""

    def _run(argv: List[str]) -> int:
        with pytest.raises(SystemExit) as exc_info:
            cli_main(argv)
        return exc_info.value.code

    yield _run

    package_logger = logging.getLogger("schemabridge")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


class TestCli:
    def test_module_and_output(
        self, run_cli, sample_module: str, tmp_path: pathlib.Path
    ) -> None:
        output = tmp_path / "bindings.ts"
        assert run_cli(["-m", sample_module, "-o", str(output), "-q"]) == EXIT_SUCCESS
        assert output.read_text(encoding="utf-8") == EXPECTED_SAMPLE_ARTIFACT

    def test_config_file(self, run_cli, config_yaml_path: pathlib.Path, config_dict) -> None:
        assert run_cli(["-c", str(config_yaml_path), "-q"]) == EXIT_SUCCESS
        assert pathlib.Path(config_dict["output"]).exists()

    def test_dry_run_prints(self, run_cli, sample_module: str, capsys) -> None:
        assert run_cli(["-m", sample_module, "--dry-run"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == EXPECTED_SAMPLE_ARTIFACT

    def test_schema_json(self, run_cli, sample_module: str, capsys) -> None:
        assert run_cli(["-m", sample_module, "-t", "UserId", "--schema-json"]) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out) == {"UserId": {"kind": "string"}}

    def test_rename_all_option(self, run_cli, sample_module: str, capsys) -> None:
        argv = ["-m", sample_module, "-t", "NotBridged", "--rename-all", "UPPERCASE", "--dry-run"]
        assert run_cli(argv) == EXIT_SUCCESS
        assert "export type NotBridged = { VALUE: number; };" in capsys.readouterr().out

    def test_summary_on_stderr(self, run_cli, sample_module: str, tmp_path, capsys) -> None:
        run_cli(["-m", sample_module, "-o", str(tmp_path / "b.ts")])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Generation Report" in captured.err

    def test_no_modules(self, run_cli, tmp_path: pathlib.Path) -> None:
        assert run_cli(["-o", str(tmp_path / "b.ts"), "-q"]) == EXIT_INPUT_ERROR

    def test_no_output(self, run_cli, sample_module: str) -> None:
        assert run_cli(["-m", sample_module, "-q"]) == EXIT_INPUT_ERROR

    def test_missing_config(self, run_cli, tmp_path: pathlib.Path) -> None:
        assert run_cli(["-c", str(tmp_path / "missing.yaml"), "-q"]) == EXIT_INPUT_ERROR

    def test_config_section_not_mapping(self, run_cli, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"schemabridge": ["x"]}), encoding="utf-8")
        assert run_cli(["-c", str(path), "-q"]) == EXIT_INPUT_ERROR

    def test_generation_error(self, run_cli, broken_module: str, tmp_path) -> None:
        argv = ["-m", broken_module, "-o", str(tmp_path / "b.ts"), "-q"]
        assert run_cli(argv) == EXIT_GENERATION_ERROR

    def test_export_error(self, run_cli, sample_module: str, tmp_path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        argv = ["-m", sample_module, "-o", str(blocker / "b.ts"), "-q"]
        assert run_cli(argv) == EXIT_EXPORT_ERROR

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli_main(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("schemabridge v")
