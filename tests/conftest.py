"""Shared pytest fixtures and sample object graphs for clonekit tests."""

from __future__ import annotations

import os
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from clonekit import api
from clonekit.config.settings import CloneSettings
from clonekit.domain.markers import Serializable, serializable
from clonekit.services.orchestrator import CloneService
from clonekit.services.telemetry import _current_span, disable_telemetry

# ---------------------------------------------------------------------------
# Sample types (module level so the binary round trip can import them)
# ---------------------------------------------------------------------------


class Node:
    """Plain class with an instance ``__dict__``; may point to itself."""

    def __init__(self, name: str, children: list[Node] | None = None) -> None:
        self.name = name
        self.children = children if children is not None else []
        self.parent: Node | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.name == other.name and len(self.children) == len(other.children)

    __hash__ = object.__hash__


class SlottedPoint:
    __slots__ = ("x", "y")

    def __init__(self, x: Any, y: Any) -> None:
        self.x = x
        self.y = y


@serializable
class Record:
    """Marked class: admitted by both serialization round trips."""

    def __init__(self, key: str, payload: Any = None) -> None:
        self.key = key
        self.payload = payload


class Envelope(Serializable):
    def __init__(self, body: Any) -> None:
        self.body = body


@dataclass(frozen=True)
class FrozenSettings:
    name: str
    values: list[int] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Run every test from an empty directory with no clonekit env overrides."""
    for name in list(os.environ):
        if name.startswith("CLONEKIT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    api.reset()
    yield
    api.reset()
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def service() -> CloneService:
    """CloneService with code-default settings and no plugins."""
    return CloneService(CloneSettings())
