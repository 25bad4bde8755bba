"""Subcommand modules for orgctl.

Provides register_commands(), which imports the command modules only when
the root group is built, keeping ``orgctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every standalone command on the root CLI group.

    One command per :class:`~orgctl.domain.types.Action`.
    """
    # --- Persons ---
    from orgctl.commands.person import (
        add,
        clear,
        delete,
        edit,
        import_cmd,
        set_salary,
        sort,
        tag,
        untag,
    )

    for cmd in (add, edit, delete, set_salary, tag, untag, sort, import_cmd, clear):
        cli.add_command(cmd)

    # --- Teams ---
    from orgctl.commands.team import (
        add_to_team,
        create_team,
        delete_team,
        remove_from_team,
        remove_subteam,
        set_subteam,
    )

    for cmd in (
        create_team,
        add_to_team,
        remove_from_team,
        set_subteam,
        remove_subteam,
        delete_team,
    ):
        cli.add_command(cmd)

    # --- Read-only ---
    from orgctl.commands.audit import audit
    from orgctl.commands.check import check
    from orgctl.commands.help_cmd import help_cmd
    from orgctl.commands.query import hierarchy, list_cmd, teams, view

    for cmd in (list_cmd, view, teams, hierarchy, audit, check, help_cmd):
        cli.add_command(cmd)
