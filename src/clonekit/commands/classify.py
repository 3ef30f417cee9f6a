"""Command: show the category tree of a document."""

from __future__ import annotations

import reprlib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from clonekit.commands._base import CloneKitCommand
from clonekit.domain.classify import classify as classify_value
from clonekit.domain.classify import is_terminal
from clonekit.domain.fields import discover_fields
from clonekit.domain.types import Category
from clonekit.output.report import CommandReport

if TYPE_CHECKING:
    from clonekit.commands._context import AppContext


def _children(value: Any, category: Category) -> list[tuple[str, Any]]:
    if category is Category.MAPPING:
        return [(f"[{reprlib.repr(key)}]", item) for key, item in value.items()]
    if category is Category.SEQUENCE:
        return [(f"[{index}]", item) for index, item in enumerate(value)]
    return [(f".{accessor.name}", accessor.get(value)) for accessor in discover_fields(value)]


def category_tree(value: Any, depth: int) -> list[dict[str, Any]]:
    """Pre-order ``(path, category, type)`` rows down to *depth* levels."""
    rows: list[dict[str, Any]] = []
    seen: set[int] = set()

    def walk(node: Any, path: str, remaining: int) -> None:
        category = classify_value(node)
        rows.append({"path": path, "category": category.value, "type": type(node).__qualname__})
        if is_terminal(category) or remaining <= 0 or id(node) in seen:
            return
        seen.add(id(node))
        for suffix, child in _children(node, category):
            walk(child, f"{path}{suffix}", remaining - 1)

    walk(value, "$", depth)
    return rows


@click.command(
    cls=CloneKitCommand,
    examples="""\
  clonekit classify data.yaml
  clonekit classify data.yaml --depth 1""",
)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--depth", type=click.IntRange(min=0), default=None, help="Levels to descend.")
@click.pass_obj
def classify(app: AppContext, path: Path, depth: int | None) -> None:
    """Classify the top levels of the document at PATH."""
    source = app.load_document(path)
    levels = depth if depth is not None else app.settings.engine.default_depth
    items = category_tree(source, levels)
    app.emit(
        CommandReport(
            ok=True,
            op="classify",
            data={"source": str(path), "depth": levels, "items": items, "count": len(items)},
        )
    )
