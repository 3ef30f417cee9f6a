"""Type classification driving the recursive traversal.

``classify`` is a pure function of the value's runtime type. Scalars are
immutable values (and atomic references such as classes and functions,
which :mod:`copy` also never duplicates). Unsupported values are native
resources whose state cannot be reproduced by copying fields.
"""

from __future__ import annotations

import array
import collections
import datetime
import decimal
import fractions
import io
import mmap
import pathlib
import socket
import threading
import types
import uuid
import weakref
from collections.abc import Mapping, Sequence, Set
from enum import Enum
from typing import Any

from clonekit.domain.fields import has_discoverable_fields
from clonekit.domain.types import Category

SCALAR_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    decimal.Decimal,
    fractions.Fraction,
    uuid.UUID,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    datetime.tzinfo,
    pathlib.PurePath,
    range,
    slice,
    types.EllipsisType,
    types.NotImplementedType,
)

ATOMIC_REFERENCE_TYPES: tuple[type, ...] = (
    type,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.ModuleType,
    types.CodeType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
    types.MethodWrapperType,
    property,
    weakref.ref,
)

UNSUPPORTED_TYPES: tuple[type, ...] = (
    io.IOBase,
    socket.socket,
    threading.Thread,
    type(threading.Lock()),
    type(threading.RLock()),
    threading.Condition,
    threading.Semaphore,
    threading.Event,
    threading.Barrier,
    types.GeneratorType,
    types.CoroutineType,
    types.AsyncGeneratorType,
    types.FrameType,
    types.TracebackType,
    memoryview,
    mmap.mmap,
)

_EXTRA_SEQUENCE_TYPES: tuple[type, ...] = (collections.deque, bytearray, array.array)


def classify(value: Any) -> Category:
    """Return the structural :class:`Category` of *value*."""
    if value is None:
        return Category.NULL
    if isinstance(value, Enum):
        return Category.SCALAR
    if isinstance(value, UNSUPPORTED_TYPES):
        return Category.UNSUPPORTED
    if isinstance(value, SCALAR_TYPES) or isinstance(value, ATOMIC_REFERENCE_TYPES):
        return Category.SCALAR
    if type(value) is object:
        return Category.SCALAR
    if isinstance(value, Mapping):
        return Category.MAPPING
    if isinstance(value, (Sequence, Set, *_EXTRA_SEQUENCE_TYPES)):
        return Category.SEQUENCE
    if has_discoverable_fields(value):
        return Category.COMPLEX
    return Category.UNSUPPORTED


def is_terminal(category: Category) -> bool:
    """Categories that are never descended into."""
    return category in (Category.NULL, Category.SCALAR, Category.UNSUPPORTED)
