"""Operation-specific Rich renderers for CommandReport.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``report.op`` in :func:`render_report`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from clonekit.output.console import (
    create_console,
    get_output,
    style_for_category,
    style_for_status,
)

if TYPE_CHECKING:
    from rich.console import Console

    from clonekit.output.report import CommandReport


# ── Public API ────────────────────────────────────────────────────────


def render_report(report: CommandReport, *, verbose: bool = False) -> str:
    """Render a CommandReport to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if report.ok:
        renderer = _OP_RENDERERS.get(report.op, _render_generic)
        renderer(report, console, verbose=verbose)
    else:
        _render_error(report, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(report: CommandReport) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not report.ok:
        msg = report.error.message if report.error else "Unknown error"
        return f"ERROR: {report.op} - {msg}"
    if "status_name" in report.data:
        return str(report.data["status_name"])
    return f"OK: {report.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, report: CommandReport) -> None:
    label = Text("OK", style="ck.ok")
    op = Text(f"  {report.op}", style="ck.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any, *, style: str = "") -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ck.key")
    v = Text(str(value), style=style or ("ck.path" if key == "source" else ""))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, report: CommandReport) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not report.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in report.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += f"  ({', '.join(f'{k}={v}' for k, v in annotations.items())})"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _render_warnings(console: Console, report: CommandReport) -> None:
    for warning in report.warnings:
        console.print(Text("  warning: ", style="ck.warning"), Text(warning), end="")
        console.print()


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(report: CommandReport, console: Console, *, verbose: bool = False) -> None:
    err = report.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="ck.error")
    op = Text(f"  {report.op}", style="ck.op")
    console.print(label, op, Text(" - "), msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Clone renderers ───────────────────────────────────────────────────


def _render_clone(report: CommandReport, console: Console, *, verbose: bool = False) -> None:
    d = report.data
    _status_line(console, report)
    _field(console, "source", d.get("source", ""))
    status_name = str(d.get("status_name", ""))
    _field(console, "status", f"{d.get('status')} ({status_name})", style=style_for_status(status_name))
    _field(console, "strategy", d.get("strategy") or "-")
    for key in ("fully_succeeded", "depth_limited", "equal", "independent"):
        if key in d:
            _field(console, key, d[key])
    if verbose and d.get("attempted"):
        _field(console, "attempted", ", ".join(d["attempted"]))

    failures = d.get("failures") or []
    if failures:
        console.print()
        console.print(_failure_table(failures))
    _render_warnings(console, report)
    if verbose:
        _render_meta(console, report)


def _failure_table(failures: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Path", style="ck.path", no_wrap=True)
    table.add_column("Code", style="ck.warning")
    table.add_column("Strategy")
    table.add_column("Message")
    for failure in failures:
        table.add_row(
            str(failure.get("path", "")),
            str(failure.get("code", "")),
            str(failure.get("strategy") or ""),
            str(failure.get("message", "")),
        )
    return table


def _render_classify(report: CommandReport, console: Console, *, verbose: bool = False) -> None:
    items = report.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Path", style="ck.path", no_wrap=True)
    table.add_column("Category")
    table.add_column("Type")
    for item in items:
        category = str(item.get("category", ""))
        table.add_row(
            str(item.get("path", "")),
            Text(category, style=style_for_category(category)),
            str(item.get("type", "")),
        )
    console.print(table)
    console.print(f"\n{report.data.get('count', len(items))} nodes")
    if verbose:
        _render_meta(console, report)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(report: CommandReport, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, report)
    for key, value in report.data.items():
        _field(console, key, value)
    _render_warnings(console, report)
    if verbose:
        _render_meta(console, report)


_OP_RENDERERS: dict[str, Any] = {
    "clone": _render_clone,
    "classify": _render_classify,
}
