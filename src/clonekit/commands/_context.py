"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy CloneService initialization, document
loading and centralized report emission (stdout/stderr routing + exit
codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from clonekit.output.formatters import OutputSettings, format_report

if TYPE_CHECKING:
    from clonekit.config.settings import CloneSettings
    from clonekit.output.report import CommandReport
    from clonekit.services.orchestrator import CloneService


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The service (and with it plugin discovery) is created on first use so
    ``--help`` and ``--version`` never load plugins.
    """

    def __init__(self, settings: CloneSettings) -> None:
        self.settings = settings
        self._service: CloneService | None = None

        from clonekit.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from clonekit.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def service(self) -> CloneService:
        """The clone service (created lazily on first access)."""
        if self._service is None:
            from clonekit.api import build_service

            self._service = build_service(self.settings)
        return self._service

    @staticmethod
    def load_document(path: Path) -> Any:
        """Parse a YAML or JSON document with the safe loader.

        Raises:
            click.ClickException: The file is not a valid document.
        """
        yaml = YAML(typ="safe", pure=True)
        try:
            return yaml.load(path.read_text(encoding="utf-8"))
        except (YAMLError, UnicodeDecodeError) as exc:
            msg = f"Invalid document {path}: {exc}"
            raise click.ClickException(msg) from exc

    def emit(self, report: CommandReport) -> None:
        """Format and output a CommandReport with correct exit semantics.

        * Success (``report.ok``): writes to stdout, returns normally.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_report(report, settings=settings)
        if report.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
