"""Command: help."""

from __future__ import annotations

import click

from orgctl.commands._base import OrgCommand
from orgctl.domain.types import Action


@click.command("help", cls=OrgCommand, action=Action.HELP)
@click.argument("command", required=False)
@click.pass_context
def help_cmd(ctx: click.Context, command: str | None) -> None:
    """Show help for orgctl or one of its commands."""
    root = ctx.find_root()
    group = root.command
    if command is None:
        click.echo(root.get_help())
        return
    assert isinstance(group, click.Group)
    target = group.get_command(root, command)
    if target is None:
        raise click.UsageError(f"No such command: {command}", ctx=ctx)
    with click.Context(target, info_name=command, parent=root) as sub:
        click.echo(target.get_help(sub))
