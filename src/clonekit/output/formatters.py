"""Rich/JSON output helpers.

The CLI renders CommandReport for humans (Rich output) or machines
(--json). The formatter layer picks the mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from clonekit.output.report import CommandReport


class OutputSettings(BaseModel):
    """Output-mode flags taken from the global CLI options."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_report(report: CommandReport, *, settings: OutputSettings | None = None) -> str:
    """Format a CommandReport for display."""
    from clonekit.output.renderers import render_quiet, render_report

    settings = settings or OutputSettings()
    if settings.json_output:
        return report.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(report)
    return render_report(report, verbose=settings.verbose)
