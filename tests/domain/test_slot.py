"""Tests for the destination Slot."""

from __future__ import annotations

from clonekit.domain.slot import Slot


class TestSlot:
    def test_fresh_slot_is_unassigned(self) -> None:
        slot = Slot()
        assert slot.value is None
        assert not slot.assigned
        assert repr(slot) == "Slot(<unset>)"

    def test_seeded_slot(self) -> None:
        slot = Slot("stale")
        assert slot.assigned
        assert slot.value == "stale"

    def test_assign_none_counts_as_assigned(self) -> None:
        slot = Slot()
        slot.value = None
        assert slot.assigned
        assert repr(slot) == "Slot(None)"

    def test_clear(self) -> None:
        slot = Slot([1])
        slot.clear()
        assert not slot.assigned
        assert slot.value is None
