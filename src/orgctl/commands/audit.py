"""Command: show the audit log."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgCommand
from orgctl.domain.types import Action

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext


@click.command(
    cls=OrgCommand,
    action=Action.AUDIT,
    examples="""\
  orgctl audit
  orgctl audit --limit 20
  orgctl --json audit""",
)
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Show only the newest N entries.",
)
@click.pass_obj
def audit(app: AppContext, limit: int | None) -> None:
    """Show every recorded change, oldest first."""
    from orgctl.services.audit import AuditService

    app.emit(AuditService(app.workspace).list_entries(limit=limit))
