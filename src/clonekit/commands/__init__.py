"""Subcommand modules for clonekit.

Provides register_commands() which uses deferred imports to keep
``clonekit --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from clonekit.commands.classify import classify
    from clonekit.commands.clone import clone

    cli.add_command(clone)
    cli.add_command(classify)
