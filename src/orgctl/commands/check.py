"""Command: workspace integrity check."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgCommand
from orgctl.domain.types import Action

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext


@click.command(
    cls=OrgCommand,
    action=Action.CHECK,
    examples="""\
  orgctl check
  orgctl check --strict
  orgctl -v check""",
)
@click.option("--strict", is_flag=True, help="Exit with status 1 when errors are found.")
@click.pass_obj
def check(app: AppContext, strict: bool) -> None:
    """Verify membership, leader and nesting consistency of stored data."""
    from orgctl.services.check import CheckService

    result = CheckService(app.workspace).check()
    app.emit(result)
    if strict and result.data.get("errors", 0):
        raise SystemExit(1)
