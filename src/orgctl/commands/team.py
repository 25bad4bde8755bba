"""Commands: teams, membership and nesting."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgCommand
from orgctl.domain.types import Action
from orgctl.services.team import TeamService

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext


@click.command(
    "create-team",
    cls=OrgCommand,
    action=Action.CREATE_TEAM,
    examples="  orgctl create-team Alpha E0001",
)
@click.argument("name")
@click.argument("leader_id")
@click.pass_obj
def create_team(app: AppContext, name: str, leader_id: str) -> None:
    """Create a team led by an existing person."""
    app.emit(TeamService(app.workspace).create_team(name, leader_id))


@click.command(
    "add-to-team",
    cls=OrgCommand,
    action=Action.ADD_TO_TEAM,
    examples="  orgctl add-to-team T0001 E0002",
)
@click.argument("team_id")
@click.argument("person_id")
@click.pass_obj
def add_to_team(app: AppContext, team_id: str, person_id: str) -> None:
    """Add a person to a team."""
    app.emit(TeamService(app.workspace).add_to_team(team_id, person_id))


@click.command(
    "remove-from-team",
    cls=OrgCommand,
    action=Action.REMOVE_FROM_TEAM,
    examples="  orgctl remove-from-team T0001 E0002",
)
@click.argument("team_id")
@click.argument("person_id")
@click.pass_obj
def remove_from_team(app: AppContext, team_id: str, person_id: str) -> None:
    """Remove a person from a team. Removing the leader leaves it leaderless."""
    app.emit(TeamService(app.workspace).remove_from_team(team_id, person_id))


@click.command(
    "set-subteam",
    cls=OrgCommand,
    action=Action.SET_SUBTEAM,
    examples="  orgctl set-subteam T0001 T0002",
)
@click.argument("parent_id")
@click.argument("child_id")
@click.pass_obj
def set_subteam(app: AppContext, parent_id: str, child_id: str) -> None:
    """Nest CHILD_ID under PARENT_ID. Cycles are rejected."""
    app.emit(TeamService(app.workspace).set_subteam(parent_id, child_id))


@click.command(
    "remove-subteam",
    cls=OrgCommand,
    action=Action.REMOVE_SUBTEAM,
    examples="  orgctl remove-subteam T0001 T0002",
)
@click.argument("parent_id")
@click.argument("child_id")
@click.pass_obj
def remove_subteam(app: AppContext, parent_id: str, child_id: str) -> None:
    """Detach CHILD_ID from PARENT_ID."""
    app.emit(TeamService(app.workspace).remove_subteam(parent_id, child_id))


@click.command(
    "delete-team",
    cls=OrgCommand,
    action=Action.DELETE_TEAM,
    examples="  orgctl delete-team T0002",
)
@click.argument("team_id")
@click.pass_obj
def delete_team(app: AppContext, team_id: str) -> None:
    """Delete a team that has no subteams."""
    app.emit(TeamService(app.workspace).delete_team(team_id))
