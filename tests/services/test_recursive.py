"""Tests for RecursiveCloner and RecursiveStrategy."""

from __future__ import annotations

import array
import collections
import copy
import threading
import types
from collections.abc import Sequence
from typing import Any

import pytest

from clonekit.domain.fields import FieldAccessor, discover_fields
from clonekit.domain.types import FailureKind, StrategyKind
from clonekit.services.recursive import RecursiveCloner, RecursiveStrategy, VisitedMap
from tests.conftest import FrozenSettings, Node, SlottedPoint

Pair = collections.namedtuple("Pair", "left right")


class _NeedsArgument:
    def __new__(cls, required: int) -> _NeedsArgument:
        return super().__new__(cls)

    def __init__(self, required: int) -> None:
        self.required = required


class _UnreadableSequence(Sequence[int]):
    def __len__(self) -> int:
        return 2

    def __getitem__(self, index: Any) -> int:
        raise RuntimeError("storage offline")


class _UnreadableMapping(dict[str, int]):
    def items(self) -> Any:
        raise RuntimeError("storage offline")


class _Coded(Exception):
    def __init__(self, code: int, reason: str) -> None:
        super().__init__(f"{code}: {reason}")
        self.code = code


@pytest.fixture
def cloner() -> RecursiveCloner:
    return RecursiveCloner()


class TestVisitedMap:
    def test_register_and_lookup_by_identity(self) -> None:
        visited = VisitedMap()
        a, b = [1], [1]
        visited.register(a, "clone-a")
        assert a in visited
        assert b not in visited
        assert visited.get(a) == "clone-a"
        assert len(visited) == 1


class TestDepth:
    def test_scalars_do_not_consume_depth(self, cloner: RecursiveCloner) -> None:
        source = [1, "two", 3.0]
        clone, ok = cloner.clone(source, 1)
        assert clone == source
        assert clone is not source
        assert ok

    def test_depth_horizon_shares_original(self, cloner: RecursiveCloner) -> None:
        innermost = [2]
        source = [[1, innermost]]
        clone, ok, run = cloner.traverse(source, 2)
        assert clone is not source
        assert clone[0] is not source[0]
        assert clone[0][1] is innermost
        assert not ok
        assert run.depth_limited
        assert run.failures == []

    def test_enough_depth_copies_everything(self, cloner: RecursiveCloner) -> None:
        source = [[1, [2]]]
        clone, ok = cloner.clone(source, 3)
        assert clone == source
        assert clone[0][1] is not source[0][1]
        assert ok

    def test_zero_depth_shares_root(self, cloner: RecursiveCloner) -> None:
        source = {"a": 1}
        clone, ok = cloner.clone(source, 0)
        assert clone is source
        assert not ok

    def test_null_and_scalar_root(self, cloner: RecursiveCloner) -> None:
        assert cloner.clone(None, 0) == (None, True)
        assert cloner.clone("s", 0) == ("s", True)


class TestSequences:
    def test_list_cycle(self, cloner: RecursiveCloner) -> None:
        source: list[Any] = []
        source.append(source)
        clone, ok = cloner.clone(source, 3)
        assert clone is not source
        assert clone[0] is clone
        assert ok

    def test_shared_references_stay_shared(self, cloner: RecursiveCloner) -> None:
        shared = [1]
        source = [shared, shared]
        clone, _ok = cloner.clone(source, 3)
        assert clone[0] is clone[1]
        assert clone[0] is not shared

    def test_tuple_through_cycle(self, cloner: RecursiveCloner) -> None:
        inner: list[Any] = []
        source = (inner,)
        inner.append(source)
        clone, ok = cloner.clone(source, 5)
        assert isinstance(clone, tuple)
        assert clone[0] is not inner
        assert clone[0][0] is clone
        assert ok

    def test_namedtuple_rebuilt(self, cloner: RecursiveCloner) -> None:
        source = Pair([1], [2])
        clone, ok = cloner.clone(source, 3)
        assert type(clone) is Pair
        assert clone == source
        assert clone.left is not source.left
        assert ok

    @pytest.mark.parametrize(
        "source",
        [
            {1, 2, (3, 4)},
            frozenset({"a", "b"}),
            collections.deque([1, 2], maxlen=5),
            bytearray(b"abc"),
            array.array("i", [1, 2, 3]),
        ],
    )
    def test_collection_types_preserved(self, cloner: RecursiveCloner, source: Any) -> None:
        clone, ok = cloner.clone(source, 2)
        assert type(clone) is type(source)
        assert clone == source
        assert ok

    def test_deque_maxlen_kept(self, cloner: RecursiveCloner) -> None:
        clone, _ok = cloner.clone(collections.deque([1], maxlen=3), 2)
        assert clone.maxlen == 3


    def test_iteration_error_degrades_branch(self, cloner: RecursiveCloner) -> None:
        clone, ok, run = cloner.traverse([1, _UnreadableSequence()], 2)
        assert clone == [1, None]
        assert not ok
        assert run.failures[0].path == "$[1]"
        assert "storage offline" in run.failures[0].message
    def test_unsupported_element_becomes_none(self, cloner: RecursiveCloner) -> None:
        source = [1, threading.Lock(), 3]
        clone, ok, run = cloner.traverse(source, 2)
        assert clone == [1, None, 3]
        assert not ok
        assert [failure.code for failure in run.failures] == [FailureKind.UNSUPPORTED_TYPE]
        assert run.failures[0].path == "$[1]"


class TestMappings:
    def test_dict_copied(self, cloner: RecursiveCloner) -> None:
        source = {"a": [1], "b": {"c": 2}}
        clone, ok = cloner.clone(source, 3)
        assert clone == source
        assert clone["a"] is not source["a"]
        assert ok

    def test_defaultdict_keeps_factory(self, cloner: RecursiveCloner) -> None:
        source = collections.defaultdict(list, {"a": [1]})
        clone, _ok = cloner.clone(source, 3)
        assert type(clone) is collections.defaultdict
        assert clone.default_factory is list
        assert clone == source

    def test_ordered_dict_order(self, cloner: RecursiveCloner) -> None:
        source = collections.OrderedDict([("z", 1), ("a", 2)])
        clone, _ok = cloner.clone(source, 2)
        assert list(clone) == ["z", "a"]

    def test_read_only_mapping_rebuilt(self, cloner: RecursiveCloner) -> None:
        source = types.MappingProxyType({"a": [1]})
        clone, ok = cloner.clone(source, 3)
        assert isinstance(clone, types.MappingProxyType)
        assert clone["a"] == [1]
        assert clone["a"] is not source["a"]
        assert ok

    def test_self_referencing_dict(self, cloner: RecursiveCloner) -> None:
        source: dict[str, Any] = {}
        source["self"] = source
        clone, _ok = cloner.clone(source, 2)
        assert clone["self"] is clone


    def test_unreadable_entries_degrade_branch(self, cloner: RecursiveCloner) -> None:
        clone, ok, run = cloner.traverse({"ok": [1], "bad": _UnreadableMapping(a=1)}, 3)
        assert clone == {"ok": [1], "bad": None}
        assert not ok
        assert run.failures[0].path == "$['bad']"
        assert run.failures[0].code is FailureKind.REFLECTIVE_ACCESS_DENIED
    def test_unsupported_value_degrades_entry_only(self, cloner: RecursiveCloner) -> None:
        source = {"lock": threading.Lock(), "keep": [1]}
        clone, ok, run = cloner.traverse(source, 3)
        assert clone["lock"] is None
        assert clone["keep"] == [1]
        assert not ok
        assert run.failures[0].path == "$['lock']"


class TestComplex:
    def test_plain_object(self, cloner: RecursiveCloner) -> None:
        source = Node("root", [Node("child")])
        clone, ok = cloner.clone(source, 4)
        assert type(clone) is Node
        assert clone is not source
        assert clone.children[0] is not source.children[0]
        assert clone.children[0].name == "child"
        assert ok

    def test_self_reference_points_to_clone(self, cloner: RecursiveCloner) -> None:
        source = Node("loop")
        source.parent = source
        clone, ok = cloner.clone(source, 2)
        assert clone.parent is clone
        assert ok

    def test_slotted_object(self, cloner: RecursiveCloner) -> None:
        source = SlottedPoint([1], 2)
        clone, ok = cloner.clone(source, 2)
        assert clone.x == [1]
        assert clone.x is not source.x
        assert ok

    def test_frozen_dataclass(self, cloner: RecursiveCloner) -> None:
        source = FrozenSettings("cfg", [1, 2])
        clone, ok = cloner.clone(source, 2)
        assert clone == source
        assert clone.values is not source.values
        assert ok

    def test_uninstantiable_type_becomes_none(self, cloner: RecursiveCloner) -> None:
        clone, ok, run = cloner.traverse([_NeedsArgument(1)], 3)
        assert clone == [None]
        assert not ok
        assert run.failures[0].code is FailureKind.REFLECTIVE_ACCESS_DENIED


    def test_exception_args_survive(self, cloner: RecursiveCloner) -> None:
        source = {"err": ValueError("bad input", [1, 2])}
        clone, ok = cloner.clone(source, 4)
        assert ok
        assert type(clone["err"]) is ValueError
        assert clone["err"] is not source["err"]
        assert clone["err"].args == ("bad input", [1, 2])
        assert clone["err"].args[1] is not source["err"].args[1]

    def test_exception_attributes_kept_when_constructor_differs(
        self, cloner: RecursiveCloner
    ) -> None:
        clone, ok, run = cloner.traverse(_Coded(404, "missing"), 2)
        assert isinstance(clone, _Coded)
        assert clone.code == 404
        assert not ok
        assert "cannot reconstruct" in run.failures[0].message
    def test_unreadable_field_left_unset(self) -> None:
        def provider(value: Any) -> list[FieldAccessor]:
            def broken(_obj: Any) -> Any:
                raise PermissionError("denied")

            return [FieldAccessor("secret", broken, setattr), *discover_fields(value)]

        source = Node("n")
        clone, ok, run = RecursiveCloner(field_provider=provider).traverse(source, 2)
        assert clone.name == "n"
        assert not hasattr(clone, "secret")
        assert not ok
        assert run.failures[0].path == "$.secret"
        assert run.failures[0].code is FailureKind.REFLECTIVE_ACCESS_DENIED

    def test_unwritable_field_recorded(self) -> None:
        def provider(value: Any) -> list[FieldAccessor]:
            def refuse(_obj: Any, _new: Any) -> None:
                raise AttributeError("read-only")

            return [FieldAccessor("name", lambda obj: obj.name, refuse)]

        clone, ok, run = RecursiveCloner(field_provider=provider).traverse(Node("n"), 2)
        assert isinstance(clone, Node)
        assert not ok
        assert "cannot write field" in run.failures[0].message

    def test_source_never_mutated(self, cloner: RecursiveCloner) -> None:
        source = {"nodes": [Node("a"), Node("b")], "meta": {"k": (1, [2])}}
        snapshot = copy.deepcopy(source)
        clone, _ok = cloner.clone(source, 4)
        clone["nodes"].append(Node("c"))
        clone["meta"]["k"][1].append(3)
        assert source == snapshot


class TestRecursiveStrategy:
    def test_reports_depth_limit(self) -> None:
        result = RecursiveStrategy(1).attempt({"a": {"b": 1}})
        assert result.ok
        assert result.strategy is StrategyKind.RECURSIVE
        assert result.depth_limited
        assert not result.fully_succeeded

    def test_fully_succeeded(self) -> None:
        result = RecursiveStrategy(3).attempt({"a": {"b": 1}})
        assert result.ok
        assert result.fully_succeeded
        assert result.value == {"a": {"b": 1}}

    def test_unsupported_root_fails(self) -> None:
        result = RecursiveStrategy(2).attempt(threading.Lock())
        assert not result.ok
        assert result.value is None
        assert result.failures[0].code is FailureKind.UNSUPPORTED_TYPE

    def test_recursion_error_aborts(self) -> None:
        def exhausted(_value: Any) -> list[FieldAccessor]:
            raise RecursionError("maximum recursion depth exceeded")

        strategy = RecursiveStrategy(2, cloner=RecursiveCloner(field_provider=exhausted))
        result = strategy.attempt(Node("n"))
        assert not result.ok
        assert result.failures[0].code is FailureKind.TRAVERSAL_ABORTED

    def test_root_without_clone_fails(self) -> None:
        result = RecursiveStrategy(2).attempt(_NeedsArgument(5))
        assert not result.ok
        assert result.value is None
        assert result.failures[0].code is FailureKind.REFLECTIVE_ACCESS_DENIED
        assert result.failures[0].path == "$"

    def test_unreadable_root_fails(self) -> None:
        result = RecursiveStrategy(2).attempt(_UnreadableSequence())
        assert not result.ok
        assert "cannot iterate" in result.failures[0].message

    def test_null_root_still_succeeds(self) -> None:
        result = RecursiveStrategy(2).attempt(None)
        assert result.ok
        assert result.value is None
