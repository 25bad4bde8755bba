"""Commands: read-only views (list, view, teams, hierarchy)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgCommand
from orgctl.domain.types import Action
from orgctl.services.query import QueryService

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext


@click.command(
    "list",
    cls=OrgCommand,
    action=Action.LIST,
    examples="""\
  orgctl list
  orgctl list --tag backend
  orgctl list --team T0001""",
)
@click.option("--tag", default=None, help="Only persons with this tag.")
@click.option("--team", "team_id", default=None, help="Only members of this team.")
@click.pass_obj
def list_cmd(app: AppContext, tag: str | None, team_id: str | None) -> None:
    """List persons in stored order."""
    app.emit(QueryService(app.workspace).list_persons(tag=tag, team_id=team_id))


@click.command(
    cls=OrgCommand,
    action=Action.VIEW,
    examples="""\
  orgctl view alex
  orgctl view alex bernice""",
)
@click.argument("keywords", nargs=-1, required=True)
@click.pass_obj
def view(app: AppContext, keywords: tuple[str, ...]) -> None:
    """Find persons by name keywords, closest matches first."""
    app.emit(QueryService(app.workspace).view(keywords))


@click.command(cls=OrgCommand, action=Action.TEAMS, examples="  orgctl teams")
@click.pass_obj
def teams(app: AppContext) -> None:
    """List teams with leader, size and nesting."""
    app.emit(QueryService(app.workspace).list_teams())


@click.command(cls=OrgCommand, action=Action.HIERARCHY, examples="  orgctl hierarchy")
@click.pass_obj
def hierarchy(app: AppContext) -> None:
    """Show the team hierarchy as a tree."""
    app.emit(QueryService(app.workspace).hierarchy())
