"""Destination slot for the out-parameter style ``clone()`` call."""

from __future__ import annotations

from typing import Any

_UNSET: Any = object()


class Slot:
    """A single mutable reference.

    ``clone(dest, source)`` writes the produced clone (or ``None``) into
    ``dest.value``. A fresh slot may be seeded with a prior value; the clone
    call always overwrites it.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any = _UNSET) -> None:
        self._value = value

    @property
    def value(self) -> Any:
        if self._value is _UNSET:
            return None
        return self._value

    @value.setter
    def value(self, new: Any) -> None:
        self._value = new

    @property
    def assigned(self) -> bool:
        """Whether anything has been written to the slot."""
        return self._value is not _UNSET

    def clear(self) -> None:
        self._value = _UNSET

    def __repr__(self) -> str:
        if not self.assigned:
            return "Slot(<unset>)"
        return f"Slot({self._value!r})"
