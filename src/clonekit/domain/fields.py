"""Reflective field discovery for Complex values.

A Complex value exposes an ordered list of :class:`FieldAccessor` entries:
first the populated ``__slots__`` declared anywhere in the MRO, then the
keys of the instance ``__dict__``. Writes bypass ``__setattr__`` overrides
(frozen dataclasses, frozen pydantic models) the same way :mod:`copy`
restores instance state.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, NamedTuple

_SKIPPED_SLOTS = frozenset({"__dict__", "__weakref__"})


class FieldAccessor(NamedTuple):
    """Name plus read/write callables for one field of an object."""

    name: str
    get: Callable[[Any], Any]
    set: Callable[[Any, Any], None]


def _mangle(cls: type, name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return f"_{cls.__name__.lstrip('_')}{name}"
    return name


def slot_names(cls: type) -> list[str]:
    """All slot attribute names declared along *cls*'s MRO, base classes first."""
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        declared = klass.__dict__.get("__slots__", ())
        if isinstance(declared, str):
            declared = (declared,)
        for name in declared:
            if name in _SKIPPED_SLOTS:
                continue
            mangled = _mangle(klass, name)
            if mangled not in names:
                names.append(mangled)
    return names


def has_discoverable_fields(value: Any) -> bool:
    """True when *value* carries an instance ``__dict__`` or declared slots."""
    if isinstance(getattr(value, "__dict__", None), dict):
        return True
    return bool(slot_names(type(value)))


def _slot_accessor(name: str) -> FieldAccessor:
    def get(obj: Any) -> Any:
        return object.__getattribute__(obj, name)

    def set_(obj: Any, value: Any) -> None:
        object.__setattr__(obj, name, value)

    return FieldAccessor(name, get, set_)


def _dict_accessor(name: str) -> FieldAccessor:
    def get(obj: Any) -> Any:
        return obj.__dict__[name]

    def set_(obj: Any, value: Any) -> None:
        obj.__dict__[name] = value

    return FieldAccessor(name, get, set_)


def discover_fields(value: Any) -> list[FieldAccessor]:
    """Return accessors for every populated field of *value*.

    Unpopulated slots are skipped so the clone leaves them unset as well.
    """
    accessors: list[FieldAccessor] = []
    for name in slot_names(type(value)):
        try:
            object.__getattribute__(value, name)
        except AttributeError:
            continue
        accessors.append(_slot_accessor(name))

    instance_dict = getattr(value, "__dict__", None)
    if isinstance(instance_dict, dict):
        for name in list(instance_dict):
            accessors.append(_dict_accessor(name))
    return accessors


def reflection_available() -> bool:
    """Probe the runtime for the primitives reflective traversal relies on."""
    try:
        probe = type("_ReflectionProbe", (), {})
        instance = object.__new__(probe)
        object.__setattr__(instance, "field", 1)
        return vars(instance) == {"field": 1} and hasattr(probe, "__mro__")
    except (TypeError, AttributeError):
        return False
