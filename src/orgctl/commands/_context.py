"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy Workspace initialization and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.config.logging import configure_logging
from orgctl.domain.errors import OrgError
from orgctl.output.formatters import OutputSettings, format_result
from orgctl.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from orgctl.config.settings import OrgSettings
    from orgctl.infrastructure.workspace import Workspace
    from orgctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``. The workspace is lazily
    opened on first use so ``--help`` and ``--version`` never touch the
    database.
    """

    def __init__(self, settings: OrgSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @property
    def workspace(self) -> Workspace:
        """The workspace, opened and loaded on first access.

        A database that cannot be rebuilt into a valid book is reported as a
        usage error instead of surfacing from inside a service.
        """
        if self._workspace is None:
            from orgctl.infrastructure.workspace import Workspace

            workspace = Workspace(self.settings)
            try:
                _ = workspace.book
            except OrgError as exc:
                workspace.close()
                raise click.ClickException(exc.message) from exc
            self._workspace = workspace
        return self._workspace

    def close(self) -> None:
        if self._workspace is not None:
            self._workspace.close()
            self._workspace = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            if output:
                click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
