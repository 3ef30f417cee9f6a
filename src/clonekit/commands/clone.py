"""Command: clone a document through the engine and verify the copy."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from clonekit.commands._base import CloneKitCommand
from clonekit.domain.classify import classify, is_terminal
from clonekit.output.report import CommandError, CommandReport

if TYPE_CHECKING:
    from clonekit.commands._context import AppContext
    from clonekit.services.result import CloneOutcome


def _verify(source: Any, outcome: CloneOutcome) -> dict[str, Any]:
    """Equality and top-level independence of the clone."""
    if not outcome.ok:
        return {}
    value = outcome.value
    independent = is_terminal(classify(source)) or value is not source
    return {"equal": bool(value == source), "independent": independent}


def build_clone_report(source_path: Path, source: Any, outcome: CloneOutcome) -> CommandReport:
    data = {"source": str(source_path), **outcome.summary(), **_verify(source, outcome)}
    warnings: list[str] = []
    if outcome.depth_limited:
        warnings.append("depth limit reached; nested values are shared with the source")
    if data.get("equal") is False:
        warnings.append("clone is not equal to the source")

    if outcome.ok:
        return CommandReport(ok=True, op="clone", data=data, warnings=warnings, meta=outcome.meta)

    message = outcome.failures[-1].message if outcome.failures else "no strategy produced a clone"
    return CommandReport(
        ok=False,
        op="clone",
        data=data,
        error=CommandError(code="clone_failed", message=message, detail={"attempted": data["attempted"]}),
        meta=outcome.meta,
    )


@click.command(
    cls=CloneKitCommand,
    examples="""\
  clonekit clone data.yaml
  clonekit clone data.json --depth 5
  clonekit clone data.yaml --safe
  clonekit --json clone data.yaml""",
)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--depth", type=click.IntRange(min=1), default=None, help="Recursive clone depth.")
@click.option("--safe", is_flag=True, help="Assert the document is safe for the binary round trip.")
@click.pass_obj
def clone(app: AppContext, path: Path, depth: int | None, safe: bool) -> None:
    """Clone the document at PATH and report how it was copied."""
    source = app.load_document(path)
    outcome = app.service.clone(source, depth, source_is_safe=safe)
    app.emit(build_clone_report(path, source, outcome))
