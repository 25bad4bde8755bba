"""Custom Click base classes with --examples support and action tagging.

Provides OrgCommand and OrgGroup that accept an ``examples`` parameter.
When ``--examples`` is passed, the command prints usage examples and exits.
This keeps ``--help`` concise while making examples available on demand.

Every leaf command also names the :class:`Action` it performs, so the set of
commands can be checked against the closed set of command kinds.
"""

from __future__ import annotations

from typing import Any

import click

from orgctl.domain.types import Action


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class OrgCommand(click.Command):
    """Click Command subclass with ``--examples`` and an :class:`Action` tag."""

    def __init__(
        self,
        *args: Any,
        examples: str | None = None,
        action: Action | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        self.action = action
        if examples:
            _add_examples_option(self, examples)


class OrgGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag.

    Sets ``command_class = OrgCommand`` so all subcommands automatically
    accept the ``examples`` and ``action`` parameters.
    """

    command_class = OrgCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)

    def actions(self) -> dict[Action, str]:
        """Map each tagged subcommand's action to its command name."""
        return {
            cmd.action: name
            for name, cmd in self.commands.items()
            if isinstance(cmd, OrgCommand) and cmd.action is not None
        }
