"""Tests for the category tree behind the classify command."""

from __future__ import annotations

import threading

from clonekit.commands.classify import category_tree
from tests.conftest import Node


class TestCategoryTree:
    def test_rows_in_pre_order(self) -> None:
        rows = category_tree({"a": [1, None]}, depth=2)
        assert [(row["path"], row["category"]) for row in rows] == [
            ("$", "mapping"),
            ("$['a']", "sequence"),
            ("$['a'][0]", "scalar"),
            ("$['a'][1]", "null"),
        ]

    def test_depth_bounds_descent(self) -> None:
        rows = category_tree({"a": [1]}, depth=1)
        assert len(rows) == 2

    def test_complex_fields(self) -> None:
        rows = category_tree(Node("n"), depth=1)
        paths = [row["path"] for row in rows]
        assert paths == ["$", "$.name", "$.children", "$.parent"]
        assert rows[0]["type"] == "Node"

    def test_unsupported_is_terminal(self) -> None:
        rows = category_tree({"lock": threading.Lock()}, depth=3)
        assert rows[-1]["category"] == "unsupported"
        assert len(rows) == 2

    def test_cycle_visited_once(self) -> None:
        node = Node("loop")
        node.parent = node
        rows = category_tree(node, depth=5)
        assert [row["path"] for row in rows] == ["$", "$.name", "$.children", "$.parent"]
