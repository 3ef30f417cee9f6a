"""Pluggy hook specifications for clonekit extension points.

Two setup-style hooks let plugins teach the engine about types it cannot
handle reflectively: custom field accessors for the recursive cloner and
extra classes for the text round trip.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from clonekit.domain.fields import FieldAccessor

hookspec = pluggy.HookspecMarker("clonekit")
hookimpl = pluggy.HookimplMarker("clonekit")


class CloneHookSpec:
    """Hook specifications for the clonekit plugin system."""

    @hookspec(firstresult=True)
    def clone_field_accessors(self, value: Any) -> list[FieldAccessor] | None:
        """Return the field accessors for *value*, or None to defer.

        The first non-None answer wins; reflective discovery is used when
        every plugin defers.
        """

    @hookspec
    def text_clone_types(self) -> list[type] | None:
        """Return classes whose instances the text round trip may encode."""
