"""Rich Console factory and theme for clonekit output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_report() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CLONEKIT_THEME = Theme(
    {
        "ck.ok": "bold green",
        "ck.error": "bold red",
        "ck.warning": "bold yellow",
        "ck.op": "bold cyan",
        "ck.key": "dim",
        "ck.path": "dim",
        "ck.status.full": "bold green",
        "ck.status.partial": "bold yellow",
        "ck.status.failed": "bold red",
        "ck.category.null": "dim",
        "ck.category.scalar": "green",
        "ck.category.sequence": "blue",
        "ck.category.mapping": "magenta",
        "ck.category.complex": "cyan",
        "ck.category.unsupported": "red",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=CLONEKIT_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status_name: str) -> str:
    return f"ck.status.{status_name.lower()}"


def style_for_category(category: str) -> str:
    return f"ck.category.{category}"
