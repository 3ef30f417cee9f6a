"""RecursiveCloner — depth-bounded, cycle-safe graph copy.

Each descent into a Sequence, Mapping or Complex value consumes one unit
of depth. At depth zero the original reference is shared instead of
copied. Containers are registered in the VisitedMap before their children
are visited, so self-references resolve to the clone under construction.

INVARIANT: per-node failures are absorbed into the run's failure list and
success flag. Only RecursionError and MemoryError unwind the traversal.
"""

from __future__ import annotations

import array
import collections
import copy
import copyreg
import logging
import reprlib
from collections.abc import Callable, Mapping, MutableMapping, MutableSequence, MutableSet
from dataclasses import dataclass
from typing import Any

from clonekit.domain.classify import classify
from clonekit.domain.errors import (
    CloneError,
    ReflectiveAccessError,
    TraversalAbortedError,
    UnsupportedTypeError,
)
from clonekit.domain.fields import FieldAccessor, discover_fields, slot_names
from clonekit.domain.types import Category, StrategyKind
from clonekit.services.base import BaseStrategy
from clonekit.services.result import CloneFailure, StrategyResult

logger = logging.getLogger(__name__)

FieldProvider = Callable[[Any], list[FieldAccessor]]

_FATAL = (RecursionError, MemoryError)
_REDUCE_PROTOCOL = 4
_MUTABLE_SEQUENCES = (MutableSequence, MutableSet, collections.deque, bytearray, array.array)
_FRESH_CONSTRUCTIBLE = frozenset({list, dict, set, bytearray})

_path_repr = reprlib.Repr()
_path_repr.maxstring = 24
_path_repr.maxother = 24


@dataclass(frozen=True)
class TraversalNode:
    """Transient record for one recursion step."""

    source_id: int
    remaining_depth: int
    category: Category


class VisitedMap:
    """Identity-keyed ``source -> clone`` table for a single clone call.

    Source objects are pinned for the lifetime of the map so that their
    ``id()`` values cannot be recycled mid-traversal.
    """

    __slots__ = ("_clones", "_pinned")

    def __init__(self) -> None:
        self._clones: dict[int, Any] = {}
        self._pinned: list[Any] = []

    def __contains__(self, source: Any) -> bool:
        return id(source) in self._clones

    def __len__(self) -> int:
        return len(self._clones)

    def get(self, source: Any) -> Any:
        return self._clones[id(source)]

    def register(self, source: Any, clone: Any) -> None:
        self._clones[id(source)] = clone
        self._pinned.append(source)


def _empty_like(value: Any) -> Any:
    """Same-typed empty container: fresh construction or shallow-copy-then-clear."""
    cls = type(value)
    if cls in _FRESH_CONSTRUCTIBLE:
        return cls()
    clone = copy.copy(value)
    if hasattr(clone, "clear"):
        clone.clear()
    else:
        del clone[:]
    return clone


def _constructor_call(value: Any) -> tuple[Callable[..., Any], tuple[Any, ...]] | None:
    """Constructor and arguments recorded by ``__reduce_ex__``.

    Only reductions that carry arguments are returned; a bare
    ``copyreg.__newobj__(cls)`` adds nothing over :func:`_instantiate`.
    Exceptions, for instance, keep ``args`` outside ``__dict__`` and are
    rebuilt through this call.
    """
    try:
        reduced = value.__reduce_ex__(_REDUCE_PROTOCOL)
    except _FATAL:
        raise
    except Exception:
        return None
    if not isinstance(reduced, tuple) or len(reduced) < 2:
        return None
    factory, args = reduced[0], reduced[1]
    if not callable(factory) or not isinstance(args, tuple):
        return None
    if factory is copyreg.__newobj_ex__:
        return None
    if factory is copyreg.__newobj__ and len(args) <= 1:
        return None
    return factory, args


def _rebuild(value: Any, items: list[Any]) -> Any:
    cls = type(value)
    if cls is tuple:
        return tuple(items)
    make = getattr(cls, "_make", None)
    if make is not None:
        return make(items)
    return cls(items)


def _instantiate(value: Any) -> Any:
    """Allocate an unpopulated instance of ``type(value)``.

    Tries ``cls.__new__(cls)`` first; types whose constructor needs
    arguments fall back to a shallow copy with every field removed.
    """
    cls = type(value)
    try:
        return cls.__new__(cls)
    except TypeError:
        pass

    clone = copy.copy(value)
    for name in slot_names(cls):
        try:
            object.__delattr__(clone, name)
        except AttributeError:
            continue
    instance_dict = getattr(clone, "__dict__", None)
    if isinstance(instance_dict, dict):
        instance_dict.clear()
    return clone


class _Traversal:
    """State of one top-level recursive run."""

    def __init__(self, visited: VisitedMap, fields: FieldProvider) -> None:
        self.visited = visited
        self.fields = fields
        self.failures: list[CloneFailure] = []
        self.depth_limited = False
        self.shared_nodes = 0

    def fail(self, error: CloneError) -> None:
        self.failures.append(CloneFailure.from_error(error, strategy=StrategyKind.RECURSIVE))

    def visit(self, value: Any, remaining_depth: int, path: str) -> tuple[Any, bool]:
        category = classify(value)
        if category is Category.NULL:
            return None, True
        if value in self.visited:
            return self.visited.get(value), True
        if category is Category.SCALAR:
            return value, True
        if category is Category.UNSUPPORTED:
            self.fail(
                UnsupportedTypeError(
                    f"{type(value).__qualname__} has no clonable structure", path=path
                )
            )
            return None, False
        if remaining_depth <= 0:
            self.depth_limited = True
            self.shared_nodes += 1
            return value, False

        node = TraversalNode(id(value), remaining_depth, category)
        if category is Category.SEQUENCE:
            return self._sequence(value, node, path)
        if category is Category.MAPPING:
            return self._mapping(value, node, path)
        return self._complex(value, node, path)

    # ------------------------------------------------------------------
    # Sequences
    # ------------------------------------------------------------------

    def _elements(self, value: Any, path: str, read: Callable[[Any], list[Any]]) -> list[Any] | None:
        """Snapshot the children of *value*; ``None`` when iteration fails."""
        try:
            return read(value)
        except _FATAL:
            raise
        except Exception as exc:
            self.fail(
                ReflectiveAccessError(
                    f"cannot iterate {type(value).__qualname__}: {exc}", path=path
                )
            )
            return None

    def _sequence(self, value: Any, node: TraversalNode, path: str) -> tuple[Any, bool]:
        items = self._elements(value, path, list)
        if items is None:
            return None, False
        if not isinstance(value, _MUTABLE_SEQUENCES):
            return self._immutable_sequence(value, items, node, path)
        try:
            clone = _empty_like(value)
        except _FATAL:
            raise
        except Exception:
            return self._immutable_sequence(value, items, node, path)

        self.visited.register(value, clone)
        add = clone.add if isinstance(clone, MutableSet) else clone.append
        ok = True
        for index, item in enumerate(items):
            child, child_ok = self.visit(item, node.remaining_depth - 1, f"{path}[{index}]")
            try:
                add(child)
            except _FATAL:
                raise
            except Exception as exc:
                self.fail(
                    ReflectiveAccessError(f"could not add element: {exc}", path=f"{path}[{index}]")
                )
                child_ok = False
            ok = ok and child_ok
        return clone, ok

    def _immutable_sequence(
        self, value: Any, items: list[Any], node: TraversalNode, path: str
    ) -> tuple[Any, bool]:
        children: list[Any] = []
        ok = True
        for index, item in enumerate(items):
            child, child_ok = self.visit(item, node.remaining_depth - 1, f"{path}[{index}]")
            children.append(child)
            ok = ok and child_ok

        # A cycle through this node may already have produced its clone.
        if value in self.visited:
            return self.visited.get(value), ok
        try:
            clone = _rebuild(value, children)
        except _FATAL:
            raise
        except Exception as exc:
            self.fail(
                ReflectiveAccessError(
                    f"cannot rebuild {type(value).__qualname__}: {exc}", path=path
                )
            )
            return None, False
        self.visited.register(value, clone)
        return clone, ok

    # ------------------------------------------------------------------
    # Mappings
    # ------------------------------------------------------------------

    def _mapping(self, value: Mapping[Any, Any], node: TraversalNode, path: str) -> tuple[Any, bool]:
        entries = self._elements(value, path, lambda mapping: list(mapping.items()))
        if entries is None:
            return None, False
        target: MutableMapping[Any, Any]
        mutable = isinstance(value, MutableMapping)
        if mutable:
            try:
                target = _empty_like(value)
            except _FATAL:
                raise
            except Exception:
                mutable = False
        if mutable:
            self.visited.register(value, target)
        else:
            target = {}

        ok = True
        for key, item in entries:
            entry_path = f"{path}[{_path_repr.repr(key)}]"
            key_clone, key_ok = self.visit(key, node.remaining_depth - 1, entry_path)
            if not key_ok:
                key_clone = key
            item_clone, item_ok = self.visit(item, node.remaining_depth - 1, entry_path)
            try:
                target[key_clone] = item_clone
            except _FATAL:
                raise
            except Exception as exc:
                self.fail(ReflectiveAccessError(f"could not insert entry: {exc}", path=entry_path))
                item_ok = False
            ok = ok and key_ok and item_ok

        if mutable:
            return target, ok
        if value in self.visited:
            return self.visited.get(value), ok
        try:
            clone = type(value)(target)
        except _FATAL:
            raise
        except Exception as exc:
            self.fail(
                ReflectiveAccessError(f"cannot rebuild {type(value).__qualname__}: {exc}", path=path)
            )
            return None, False
        self.visited.register(value, clone)
        return clone, ok

    # ------------------------------------------------------------------
    # Complex values
    # ------------------------------------------------------------------

    def _complex(self, value: Any, node: TraversalNode, path: str) -> tuple[Any, bool]:
        cls = type(value)
        ok = True
        clone = None
        call = _constructor_call(value)
        if call is not None:
            clone, ok = self._reconstruct(value, call, node, path)
            if value in self.visited:
                return self.visited.get(value), ok
        if clone is None:
            try:
                clone = _instantiate(value)
            except _FATAL:
                raise
            except Exception as exc:
                self.fail(
                    ReflectiveAccessError(f"cannot instantiate {cls.__qualname__}: {exc}", path=path)
                )
                return None, False
        self.visited.register(value, clone)

        try:
            accessors = self.fields(value)
        except _FATAL:
            raise
        except Exception as exc:
            self.fail(
                ReflectiveAccessError(f"cannot enumerate fields of {cls.__qualname__}: {exc}", path=path)
            )
            return clone, False

        for accessor in accessors:
            field_path = f"{path}.{accessor.name}"
            try:
                field_value = accessor.get(value)
            except _FATAL:
                raise
            except Exception as exc:
                self.fail(ReflectiveAccessError(f"cannot read field: {exc}", path=field_path))
                ok = False
                continue

            child, child_ok = self.visit(field_value, node.remaining_depth - 1, field_path)
            try:
                accessor.set(clone, child)
            except _FATAL:
                raise
            except Exception as exc:
                self.fail(ReflectiveAccessError(f"cannot write field: {exc}", path=field_path))
                child_ok = False
            ok = ok and child_ok
        return clone, ok

    def _reconstruct(
        self,
        value: Any,
        call: tuple[Callable[..., Any], tuple[Any, ...]],
        node: TraversalNode,
        path: str,
    ) -> tuple[Any, bool]:
        """Rebuild *value* from its reduce constructor with cloned arguments."""
        factory, args = call
        cloned: list[Any] = []
        ok = True
        for index, arg in enumerate(args):
            child, child_ok = self.visit(arg, node.remaining_depth - 1, f"{path}.args[{index}]")
            cloned.append(child)
            ok = ok and child_ok
        try:
            return factory(*cloned), ok
        except _FATAL:
            raise
        except Exception as exc:
            self.fail(
                ReflectiveAccessError(
                    f"cannot reconstruct {type(value).__qualname__}: {exc}", path=path
                )
            )
            return None, False


class RecursiveCloner:
    """Depth-bounded graph copy.

    Args:
        field_provider: Returns the accessors of a Complex value. Defaults
            to reflective discovery via ``__slots__`` and ``__dict__``.
    """

    def __init__(self, *, field_provider: FieldProvider | None = None) -> None:
        self._field_provider = field_provider or discover_fields

    def traverse(
        self,
        value: Any,
        remaining_depth: int,
        visited: VisitedMap | None = None,
    ) -> tuple[Any, bool, _Traversal]:
        """Clone *value* and also return the run state for diagnostics."""
        run = _Traversal(visited if visited is not None else VisitedMap(), self._field_provider)
        clone, ok = run.visit(value, remaining_depth, "$")
        return clone, ok, run

    def clone(
        self,
        value: Any,
        remaining_depth: int,
        visited: VisitedMap | None = None,
    ) -> tuple[Any, bool]:
        """Return ``(clone, fully_succeeded)``."""
        clone, ok, _run = self.traverse(value, remaining_depth, visited)
        return clone, ok


class RecursiveStrategy(BaseStrategy):
    """Adapts :class:`RecursiveCloner` to the strategy protocol for a fixed depth."""

    kind = StrategyKind.RECURSIVE

    def __init__(self, depth: int, *, cloner: RecursiveCloner | None = None) -> None:
        self._depth = depth
        self._cloner = cloner or RecursiveCloner()

    def _attempt(self, value: Any) -> StrategyResult:
        # Nothing to traverse: the run cannot produce a clone at all.
        if classify(value) is Category.UNSUPPORTED:
            raise UnsupportedTypeError(f"{type(value).__qualname__} has no clonable structure")
        try:
            clone, ok, run = self._cloner.traverse(value, self._depth, VisitedMap())
        except _FATAL as exc:
            raise TraversalAbortedError(
                f"recursive traversal aborted: {type(exc).__name__}"
            ) from exc

        if clone is None and classify(value) is not Category.NULL:
            logger.debug("recursive traversal produced no root clone for %s", type(value).__qualname__)
            return StrategyResult(strategy=self.kind, ok=False, failures=run.failures)

        if run.shared_nodes:
            logger.debug("depth horizon reached; %d node(s) shared with the source", run.shared_nodes)
        return StrategyResult(
            strategy=self.kind,
            ok=True,
            value=clone,
            fully_succeeded=ok,
            depth_limited=run.depth_limited,
            failures=run.failures,
        )
