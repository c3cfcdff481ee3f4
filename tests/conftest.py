"""
tests/conftest.py
Shared fixtures for the schemabridge test suite.

No external mocking libraries are used; real file I/O is performed inside
temporary directories managed by pytest's tmp_path fixtures, and generated
model modules are imported from there.
"""

from __future__ import annotations

import itertools
import pathlib
import sys
import textwrap
from typing import Any, Callable, Dict, Iterator

import pytest
import yaml

from schemabridge.registry import TypeBridgeRegistry


# ---------------------------------------------------------------------------
# Registry fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> TypeBridgeRegistry:
    """A fresh registry so custom mappings and caches never leak between tests."""
    return TypeBridgeRegistry()


# ---------------------------------------------------------------------------
# Importable model modules
# ---------------------------------------------------------------------------

SAMPLE_MODELS_SOURCE: str = textwrap.dedent(
    '''
    from dataclasses import dataclass
    from enum import Enum, auto
    from typing import List, NewType, Optional

    from schemabridge import bridge


    @bridge(rename_all="snake_case", string_conversion=True)
    class TalkStyle(Enum):
        Brainstorm = auto()
        Casual = auto()
        DecisionMaking = auto()


    @bridge(rename_all="camelCase")
    @dataclass
    class UserConfig:
        user_name: str
        max_retries: int
        is_active: bool


    @bridge
    @dataclass
    class Conversation:
        title: str
        style: TalkStyle
        tags: List[str]
        owner: Optional[UserConfig]


    UserId = NewType("UserId", str)


    @dataclass
    class NotBridged:
        value: int
    '''
)

BROKEN_MODELS_SOURCE: str = textwrap.dedent(
    '''
    from dataclasses import dataclass
    from typing import Union

    from schemabridge import bridge


    @bridge
    @dataclass
    class Fine:
        name: str


    @bridge
    @dataclass
    class Broken:
        value: Union[int, str]
    '''
)

_module_counter = itertools.count()


@pytest.fixture()
def make_module(
    tmp_path: pathlib.Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[Callable[[str], str]]:
    """
    Write Python source into an importable module under tmp_path and return
    its (unique) module name.
    """
    monkeypatch.syspath_prepend(str(tmp_path))
    created: list = []

    def _make(source: str) -> str:
        name: str = f"sb_models_{next(_module_counter)}"
        (tmp_path / f"{name}.py").write_text(source, encoding="utf-8")
        created.append(name)
        return name

    yield _make

    for name in created:
        sys.modules.pop(name, None)


@pytest.fixture()
def sample_module(make_module: Callable[[str], str]) -> str:
    return make_module(SAMPLE_MODELS_SOURCE)


@pytest.fixture()
def broken_module(make_module: Callable[[str], str]) -> str:
    return make_module(BROKEN_MODELS_SOURCE)


# ---------------------------------------------------------------------------
# Config file fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config_dict(sample_module: str, tmp_path: pathlib.Path) -> Dict[str, Any]:
    return {
        "output": str(tmp_path / "out" / "bindings.ts"),
        "modules": [sample_module],
        "types": [],
    }


@pytest.fixture()
def config_yaml_path(config_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the config dict to a temporary YAML file and return its path."""
    path = tmp_path / "schemabridge.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(config_dict, fh, default_flow_style=False, allow_unicode=True)
    return path
