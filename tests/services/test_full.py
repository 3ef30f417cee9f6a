"""Tests for FullCloneStrategy — the pickle round trip."""

from __future__ import annotations

import pickle
import threading

from clonekit.domain.types import FailureKind, StrategyKind
from clonekit.services.full import FullCloneStrategy
from tests.conftest import Envelope, Node, Record


def _explode() -> None:
    raise ValueError("boom")


class _ExplodesOnLoad(Record):
    def __reduce__(self):  # type: ignore[override]
        return (_explode, ())


class TestAuthorization:
    def test_unauthorized_fails(self) -> None:
        result = FullCloneStrategy(authorized=False).attempt([1, 2])
        assert not result.ok
        assert result.value is None
        assert result.failures[0].code is FailureKind.UNAUTHORIZED_TRUST
        assert result.failures[0].strategy is StrategyKind.FULL


class TestRoundTrip:
    def test_builtin_graph(self) -> None:
        source = {"items": [1, 2, (3, 4)], "name": "x"}
        result = FullCloneStrategy(authorized=True).attempt(source)
        assert result.ok
        assert result.fully_succeeded
        assert result.value == source
        assert result.value["items"] is not source["items"]

    def test_marked_objects_with_cycle(self) -> None:
        source = Record("root")
        source.payload = Envelope(source)
        result = FullCloneStrategy(authorized=True).attempt(source)
        assert result.ok
        clone = result.value
        assert clone is not source
        assert clone.payload.body is clone

    def test_configured_protocol(self) -> None:
        result = FullCloneStrategy(authorized=True, protocol=2).attempt([Record("a")])
        assert result.ok
        assert result.value[0].key == "a"

    def test_default_protocol_is_highest(self) -> None:
        strategy = FullCloneStrategy(authorized=True)
        assert strategy._protocol == pickle.HIGHEST_PROTOCOL


class TestMarkers:
    def test_unmarked_root_rejected(self) -> None:
        result = FullCloneStrategy(authorized=True).attempt(Node("n"))
        assert not result.ok
        assert result.failures[0].code is FailureKind.NOT_SERIALIZABLE

    def test_unmarked_nested_object_rejected(self) -> None:
        result = FullCloneStrategy(authorized=True).attempt([Record("a", Node("hidden"))])
        assert not result.ok
        assert result.failures[0].code is FailureKind.NOT_SERIALIZABLE
        assert "Node" in result.failures[0].message

    def test_enforcement_can_be_relaxed(self) -> None:
        strategy = FullCloneStrategy(authorized=True, enforce_markers=False)
        result = strategy.attempt(Record("a", Node("nested")))
        assert result.ok
        assert result.value.payload.name == "nested"


class TestCodecFailures:
    def test_encoding_failure(self) -> None:
        strategy = FullCloneStrategy(authorized=True, enforce_markers=False)
        result = strategy.attempt(Record("a", threading.Lock()))
        assert not result.ok
        assert result.failures[0].code is FailureKind.ENCODING_FAILURE

    def test_decoding_failure(self) -> None:
        result = FullCloneStrategy(authorized=True).attempt(_ExplodesOnLoad("a"))
        assert not result.ok
        assert result.failures[0].code is FailureKind.DECODING_FAILURE
        assert "boom" in result.failures[0].message
