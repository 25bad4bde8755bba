"""Root CLI group for orgctl with global flags and command registration."""

from __future__ import annotations

import click

from orgctl import __version__
from orgctl.commands import register_commands
from orgctl.commands._base import OrgGroup
from orgctl.commands._context import AppContext
from orgctl.config.logging import bind_command
from orgctl.config.settings import OrgSettings


@click.group(cls=OrgGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="orgctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (IDs only).")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """orgctl — manage persons, teams and the team hierarchy."""
    settings = OrgSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    bind_command(ctx.invoked_subcommand)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
