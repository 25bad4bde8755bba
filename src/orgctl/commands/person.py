"""Commands: person records (add, edit, delete, set-salary, tag, untag, sort, import, clear)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgCommand
from orgctl.domain.types import Action
from orgctl.services.person import SORT_FIELDS, PersonService

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext


@click.command(
    cls=OrgCommand,
    action=Action.ADD,
    examples="""\
  orgctl add -n "Alex Yeoh" -p 87438807 -e alexyeoh@example.com -a "Blk 30 Geylang Street 29"
  orgctl add -n "Bernice Yu" -p 99272758 -e berniceyu@example.com -a "Blk 30 Lorong 3" \\
      -g bernice-yu -s 5200 -t colleagues -t friends""",
)
@click.option("-n", "--name", required=True, help="Full name (unique).")
@click.option("-p", "--phone", required=True, help="Phone number, digits only.")
@click.option("-e", "--email", required=True, help="Email address.")
@click.option("-a", "--address", required=True, help="Postal address.")
@click.option("-g", "--github", default=None, help="GitHub username.")
@click.option("-s", "--salary", default="0", show_default=True, help="Salary, up to 2 decimals.")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag (repeatable).")
@click.pass_obj
def add(
    app: AppContext,
    name: str,
    phone: str,
    email: str,
    address: str,
    github: str | None,
    salary: str,
    tags: tuple[str, ...],
) -> None:
    """Add a person. A new employee ID (Exxxx) is assigned."""
    app.emit(
        PersonService(app.workspace).add_person(
            name=name,
            phone=phone,
            email=email,
            address=address,
            github=github,
            salary=salary,
            tags=tags,
        )
    )


def _reject_tags(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> None:
    if value:
        raise click.UsageError("Use the tag/untag command to add/remove tags", ctx=ctx)


@click.command(
    cls=OrgCommand,
    action=Action.EDIT,
    examples="""\
  orgctl edit E0001 -p 91234567 -e alex@example.com
  orgctl edit E0002 -n 'Bernice Tan'""",
)
@click.argument("person_id")
@click.option("-n", "--name", default=None, help="New full name (must stay unique).")
@click.option("-p", "--phone", default=None, help="New phone number.")
@click.option("-e", "--email", default=None, help="New email address.")
@click.option("-a", "--address", default=None, help="New postal address.")
@click.option("-g", "--github", default=None, help="New GitHub username.")
@click.option(
    "-t", "--tag", "tags", multiple=True, hidden=True, expose_value=False, callback=_reject_tags
)
@click.pass_obj
def edit(
    app: AppContext,
    person_id: str,
    name: str | None,
    phone: str | None,
    email: str | None,
    address: str | None,
    github: str | None,
) -> None:
    """Edit a person's contact details. Tags are changed with tag/untag."""
    app.emit(
        PersonService(app.workspace).edit_person(
            person_id, name=name, phone=phone, email=email, address=address, github=github
        )
    )


@click.command(cls=OrgCommand, action=Action.DELETE, examples="  orgctl delete E0003")
@click.argument("person_id")
@click.pass_obj
def delete(app: AppContext, person_id: str) -> None:
    """Delete a person and remove them from all their teams."""
    app.emit(PersonService(app.workspace).delete_person(person_id))


@click.command(
    "set-salary",
    cls=OrgCommand,
    action=Action.SET_SALARY,
    examples="  orgctl set-salary E0001 4200.50",
)
@click.argument("person_id")
@click.argument("salary")
@click.pass_obj
def set_salary(app: AppContext, person_id: str, salary: str) -> None:
    """Set a person's salary."""
    app.emit(PersonService(app.workspace).set_salary(person_id, salary))


@click.command(cls=OrgCommand, action=Action.TAG, examples="  orgctl tag E0001 backend oncall")
@click.argument("person_id")
@click.argument("tags", nargs=-1)
@click.pass_obj
def tag(app: AppContext, person_id: str, tags: tuple[str, ...]) -> None:
    """Add one or more tags to a person."""
    app.emit(PersonService(app.workspace).tag(person_id, tags))


@click.command(cls=OrgCommand, action=Action.UNTAG, examples="  orgctl untag E0001 oncall")
@click.argument("person_id")
@click.argument("tags", nargs=-1)
@click.pass_obj
def untag(app: AppContext, person_id: str, tags: tuple[str, ...]) -> None:
    """Remove tags from a person. Every tag must be present."""
    app.emit(PersonService(app.workspace).untag(person_id, tags))


@click.command(
    cls=OrgCommand,
    action=Action.SORT,
    examples="""\
  orgctl sort name
  orgctl sort salary --desc""",
)
@click.argument("field", type=click.Choice(list(SORT_FIELDS)), default="name")
@click.option("--desc", is_flag=True, help="Sort in descending order.")
@click.pass_obj
def sort(app: AppContext, field: str, desc: bool) -> None:
    """Reorder the person list by a field."""
    app.emit(PersonService(app.workspace).sort_persons(field, reverse=desc))


@click.command(
    "import",
    cls=OrgCommand,
    action=Action.IMPORT,
    examples="  orgctl import data/contacts.json",
)
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def import_cmd(app: AppContext, path: Path) -> None:
    """Import persons from a JSON file with a "persons" list."""
    app.emit(PersonService(app.workspace).import_persons(path))


@click.command(
    cls=OrgCommand,
    action=Action.CLEAR,
    examples="  orgctl clear --yes",
)
@click.confirmation_option(prompt="Delete every person, team and audit entry?")
@click.pass_obj
def clear(app: AppContext) -> None:
    """Delete all data. The audit log keeps a single CLEAR entry."""
    app.emit(PersonService(app.workspace).clear())
