"""Type-level serializability marker for the binary round trip.

Builtin containers and immutable stdlib value types are serializable by
nature. User classes opt in explicitly, either by decorating the class
with :func:`serializable`, subclassing :class:`Serializable`, or setting
``__clone_serializable__ = True``. The marker is inherited by subclasses.
"""

from __future__ import annotations

import array
import collections
import datetime
import decimal
import fractions
import pathlib
import types
import uuid
from enum import Enum
from typing import Any, TypeVar

MARKER_ATTR = "__clone_serializable__"

_T = TypeVar("_T", bound=type)

NATIVE_SERIALIZABLE: frozenset[type] = frozenset(
    {
        type(None),
        bool,
        int,
        float,
        complex,
        str,
        bytes,
        bytearray,
        list,
        tuple,
        dict,
        set,
        frozenset,
        range,
        slice,
        types.EllipsisType,
        types.NotImplementedType,
        decimal.Decimal,
        fractions.Fraction,
        uuid.UUID,
        datetime.date,
        datetime.time,
        datetime.datetime,
        datetime.timedelta,
        datetime.timezone,
        collections.deque,
        collections.OrderedDict,
        collections.defaultdict,
        collections.Counter,
        array.array,
        pathlib.PurePosixPath,
        pathlib.PureWindowsPath,
        pathlib.PosixPath,
        pathlib.WindowsPath,
    }
)


class Serializable:
    """Mixin marking a class as safe for the binary round trip."""

    __clone_serializable__ = True
    __slots__ = ()


def serializable(cls: _T) -> _T:
    """Class decorator equivalent of subclassing :class:`Serializable`."""
    setattr(cls, MARKER_ATTR, True)
    return cls


def is_serializable_type(cls: type) -> bool:
    """Whether instances of *cls* self-report as binary-serializable."""
    if cls in NATIVE_SERIALIZABLE:
        return True
    if issubclass(cls, Enum):
        return True
    return getattr(cls, MARKER_ATTR, False) is True


def is_serializable(value: Any) -> bool:
    """Whether *value* itself may be handed to the binary service.

    Classes and functions are pickled by qualified name rather than by
    state, so they are always admitted.
    """
    if isinstance(value, (type, types.FunctionType, types.BuiltinFunctionType)):
        return True
    return is_serializable_type(type(value))
