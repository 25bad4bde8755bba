"""PersonService — person records, tags, salary, ordering, import and clear.

Same pipeline as :mod:`orgctl.services.team`: validate against the committed
book, stage replacements on one transaction, stage the audit entry, commit,
then persist.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from orgctl.domain.errors import DuplicateEntity, InvalidField, OrgError
from orgctl.domain.ids import require_id
from orgctl.domain.person import Person
from orgctl.domain.types import Action, EntityType
from orgctl.infrastructure.filesystem import read_person_records
from orgctl.services.base import BaseService
from orgctl.services.result import ServiceResult
from orgctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

NO_TAGS_PROVIDED = "At least one tag must be provided."
NO_FIELDS_EDITED = "At least one field to edit must be provided."
CONTACT_FIELDS = ("name", "phone", "email", "address", "github")

# Sort keys for ``orgctl sort``. Missing GitHub usernames sort last.
SORT_FIELDS: dict[str, Callable[[Person], Any]] = {
    "name": lambda p: p.name.lower(),
    "id": lambda p: p.id,
    "salary": lambda p: p.salary,
    "phone": lambda p: p.phone,
    "email": lambda p: p.email.lower(),
    "address": lambda p: p.address.lower(),
    "github": lambda p: (p.github is None, (p.github or "").lower()),
    "team": lambda p: (not p.team_ids, sorted(p.team_ids)),
}


def _label(person: Person) -> str:
    return f"{person.id} {person.name}"


class PersonService(BaseService):
    """Person lifecycle commands."""

    @traced
    def add_person(
        self,
        *,
        name: str,
        phone: str,
        email: str,
        address: str,
        github: str | None = None,
        salary: Any = 0,
        tags: Iterable[str] = (),
    ) -> ServiceResult:
        op = "add_person"
        book = self._book
        try:
            with book.transaction() as txn:
                person = Person.create(
                    txn.allocate_person_id(),
                    name=name,
                    phone=phone,
                    email=email,
                    address=address,
                    github=github,
                    salary=salary,
                    tags=set(tags),
                )
                if book.has_person(person):
                    raise DuplicateEntity("This person already exists in the address book")
                txn.add_person(person)
                detail = f"New person added: {_label(person)}"
                txn.record(Action.ADD, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, name=name)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": person.id, "person": person.to_record(), "message": detail},
        )

    @traced
    def delete_person(self, person_id: str) -> ServiceResult:
        """Delete a person and detach them from every team they belong to."""
        op = "delete_person"
        book = self._book
        try:
            with book.transaction() as txn:
                person = book.get_person(require_id(person_id, EntityType.PERSON))
                teams = [
                    t
                    for t in book.teams
                    if person.id in t.members or t.leader_id == person.id or t.id in person.team_ids
                ]
                for team in teams:
                    txn.replace_team(team, team.remove_member(person.id))
                txn.remove_person(person)
                detail = f"Deleted Person: {_label(person)}"
                txn.record(Action.DELETE, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, person_id=person_id)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": person.id,
                "person": person.to_record(),
                "teams": [t.id for t in teams],
                "message": detail,
            },
        )

    @traced
    def edit_person(self, person_id: str, **changes: str | None) -> ServiceResult:
        """Replace contact details of a person.

        Keyword arguments are any of ``name``, ``phone``, ``email``,
        ``address`` and ``github``; None means unchanged. Team memberships
        follow the person because teams hold IDs only. A rename onto another
        person's name is rejected by the person store on commit.
        """
        op = "edit_person"
        book = self._book
        try:
            with book.transaction() as txn:
                person = book.get_person(require_id(person_id, EntityType.PERSON))
                given = {k: v for k, v in changes.items() if v is not None}
                unknown = sorted(set(given) - set(CONTACT_FIELDS))
                if unknown:
                    raise InvalidField(f"Cannot edit field(s): {', '.join(unknown)}")
                if not given:
                    raise InvalidField(NO_FIELDS_EDITED)
                edited = person.with_contact(**given)
                txn.replace_person(person, edited)
                fields = ", ".join(f for f in CONTACT_FIELDS if f in given)
                detail = f"Edited Person: {_label(edited)} ({fields})"
                txn.record(Action.EDIT, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, person_id=person_id)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": edited.id, "person": edited.to_record(), "message": detail},
        )

    @traced
    def set_salary(self, person_id: str, salary: Any) -> ServiceResult:
        op = "set_salary"
        book = self._book
        try:
            with book.transaction() as txn:
                person = book.get_person(require_id(person_id, EntityType.PERSON))
                edited = person.with_salary(salary)
                txn.replace_person(person, edited)
                detail = f"Set salary {edited.salary} for: {_label(edited)}"
                txn.record(Action.SET_SALARY, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, person_id=person_id)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": edited.id, "person": edited.to_record(), "message": detail},
        )

    @traced
    def tag(self, person_id: str, tags: Iterable[str]) -> ServiceResult:
        """Add *tags* to a person. Tags already present are kept as-is."""
        op = "tag"
        wanted = set(tags)
        book = self._book
        try:
            with book.transaction() as txn:
                person = book.get_person(require_id(person_id, EntityType.PERSON))
                if not wanted:
                    raise InvalidField(NO_TAGS_PROVIDED)
                edited = person.with_tags(person.tags | wanted)
                txn.replace_person(person, edited)
                detail = f"Added tags to Person: {_label(edited)}"
                txn.record(Action.TAG, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, person_id=person_id)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": edited.id, "person": edited.to_record(), "message": detail},
        )

    @traced
    def untag(self, person_id: str, tags: Iterable[str]) -> ServiceResult:
        """Remove *tags*; every one of them must be on the person."""
        op = "untag"
        unwanted = set(tags)
        book = self._book
        try:
            with book.transaction() as txn:
                person = book.get_person(require_id(person_id, EntityType.PERSON))
                if not unwanted:
                    raise InvalidField(NO_TAGS_PROVIDED)
                missing = unwanted - person.tags
                if missing:
                    msg = f"Some tags were not found on this person: {', '.join(sorted(missing))}"
                    raise InvalidField(msg)
                edited = person.with_tags(person.tags - unwanted)
                txn.replace_person(person, edited)
                detail = f"Removed tags from Person: {_label(edited)}"
                txn.record(Action.UNTAG, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, person_id=person_id)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": edited.id, "person": edited.to_record(), "message": detail},
        )

    @traced
    def sort_persons(self, field: str = "name", *, reverse: bool = False) -> ServiceResult:
        """Reorder the stored person list by *field*. The order is persisted."""
        op = "sort"
        book = self._book
        try:
            with book.transaction() as txn:
                key = SORT_FIELDS.get(field)
                if key is None:
                    valid = ", ".join(SORT_FIELDS)
                    raise InvalidField(f"Cannot sort by {field!r}; choose one of: {valid}")
                txn.sort_persons(key, reverse=reverse)
                direction = " (descending)" if reverse else ""
                detail = f"Sorted the list of persons by {field}{direction}"
                txn.record(Action.SORT, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, field=field)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"ids": [p.id for p in book.persons], "field": field, "message": detail},
        )

    @traced
    def import_persons(self, path: Path) -> ServiceResult:
        """Append persons from a JSON file.

        Each imported person gets a fresh ID and no team memberships. Records
        whose name already exists (in the book or earlier in the file) are
        skipped with a warning. Any invalid record aborts the whole import.
        """
        op = "import"
        book = self._book
        warnings: list[str] = []
        imported: list[Person] = []
        try:
            with trace_span("read"):
                records = read_person_records(path)

            with book.transaction() as txn:
                seen = {p.name for p in book.persons}
                for index, record in enumerate(records, start=1):
                    name = str(record.get("name", ""))
                    if name in seen:
                        warnings.append(f"Record {index}: skipped duplicate person {name!r}")
                        continue
                    person = self._person_from_record(txn.allocate_person_id(), index, record)
                    seen.add(person.name)
                    imported.append(person)
                    txn.add_person(person)
                detail = f"Imported file from: {path} ({len(imported)} persons)"
                txn.record(Action.IMPORT, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, path=str(path))

        self._persist()
        logger.info("imported %d persons from %s", len(imported), path)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "ids": [p.id for p in imported],
                "count": len(imported),
                "skipped": len(warnings),
                "message": detail,
            },
            warnings=warnings,
        )

    @traced
    def clear(self) -> ServiceResult:
        """Wipe every person, team and audit entry, then record the wipe."""
        op = "clear"
        book = self._book
        count = len(book.persons)
        with book.transaction() as txn:
            txn.reset()
            detail = f"Cleared all data ({count} persons)"
            txn.record(Action.CLEAR, detail)

        self._persist()
        logger.info("cleared workspace (%d persons)", count)
        return ServiceResult(ok=True, op=op, data={"count": count, "message": detail})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _person_from_record(person_id: str, index: int, record: Mapping[str, Any]) -> Person:
        tags = record.get("tags") or []
        if not isinstance(tags, list):
            raise InvalidField(f"Record {index}: tags must be a list")
        github = record.get("github") or record.get("githubUsername") or None
        if github is not None and not isinstance(github, str):
            raise InvalidField(f"Record {index}: github must be a string")
        try:
            return Person.create(
                person_id,
                name=str(record.get("name", "")),
                phone=str(record.get("phone", "")),
                email=str(record.get("email", "")),
                address=str(record.get("address", "")),
                github=github,
                salary=record.get("salary") or 0,
                tags={str(t) for t in tags},
            )
        except InvalidField as exc:
            raise InvalidField(f"Record {index}: {exc.message}") from exc
