"""Person entity and field validation.

Persons are immutable values. Every edit goes through a ``with_*`` method that
returns a new Person; the store then swaps the old value for the new one.

Identity for duplicate detection is the *name* (see :meth:`Person.is_same_person`),
unlike teams which are identified by ID.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, Field

from orgctl.domain.errors import InvalidField

NAME_CONSTRAINTS = (
    "Names should only contain alphanumeric characters with a single space "
    "between words, and it should be 1-50 characters long."
)
PHONE_CONSTRAINTS = "Phone numbers should only contain digits, and be at least 3 digits long."
EMAIL_CONSTRAINTS = "Emails should be of the format local-part@domain."
ADDRESS_CONSTRAINTS = "Addresses can take any values, and should not be blank."
GITHUB_CONSTRAINTS = (
    "GitHub usernames may only contain alphanumeric characters and single hyphens, "
    "cannot begin or end with a hyphen, and must be 1-39 characters long."
)
SALARY_CONSTRAINTS = "Salary should be a non-negative number with at most 2 decimal places."
TAG_CONSTRAINTS = "Tags should be alphanumeric."

_NAME_RE = re.compile(r"^(?=.{1,50}$)[A-Za-z0-9]+( [A-Za-z0-9]+)*$")
_PHONE_RE = re.compile(r"^\d{3,}$")
_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9]+([+_.-][A-Za-z0-9]+)*"
    r"@[A-Za-z0-9]+(-[A-Za-z0-9]+)*(\.[A-Za-z0-9]+(-[A-Za-z0-9]+)*)*$"
)
_GITHUB_RE = re.compile(r"^(?!-)(?!.*--)[A-Za-z0-9-]{1,39}(?<!-)$")
_TAG_RE = re.compile(r"^[A-Za-z0-9]+$")

_CENTS = Decimal("0.01")


def is_valid_name(value: str) -> bool:
    return _NAME_RE.match(value) is not None


def is_valid_phone(value: str) -> bool:
    return _PHONE_RE.match(value) is not None


def is_valid_email(value: str) -> bool:
    return _EMAIL_RE.match(value) is not None


def is_valid_address(value: str) -> bool:
    return bool(value.strip())


def is_valid_github(value: str) -> bool:
    return _GITHUB_RE.match(value) is not None


def is_valid_tag(value: str) -> bool:
    return _TAG_RE.match(value) is not None


def parse_salary(value: Any) -> Decimal:
    """Parse *value* into a non-negative Decimal rounded to cents.

    Raises:
        InvalidField: If the value is not a finite non-negative number.
    """
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise InvalidField(SALARY_CONSTRAINTS) from exc
    if not amount.is_finite() or amount < 0:
        raise InvalidField(SALARY_CONSTRAINTS)
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def check_tags(tags: set[str] | frozenset[str]) -> frozenset[str]:
    bad = sorted(t for t in tags if not is_valid_tag(t))
    if bad:
        raise InvalidField(f"{TAG_CONSTRAINTS} Invalid: {', '.join(bad)}")
    return frozenset(tags)


def check_contact(
    *, name: str, phone: str, email: str, address: str, github: str | None
) -> None:
    """Raise :class:`InvalidField` for the first contact field that breaks its rule."""
    if not is_valid_name(name):
        raise InvalidField(NAME_CONSTRAINTS)
    if not is_valid_phone(phone):
        raise InvalidField(PHONE_CONSTRAINTS)
    if not is_valid_email(email):
        raise InvalidField(EMAIL_CONSTRAINTS)
    if not is_valid_address(address):
        raise InvalidField(ADDRESS_CONSTRAINTS)
    if github is not None and not is_valid_github(github):
        raise InvalidField(GITHUB_CONSTRAINTS)


class Person(BaseModel):
    """An employee record.

    Attributes:
        id: ``Exxxx`` identifier, permanent once assigned.
        team_ids: IDs of every team this person is a member of. Must agree
            with the ``members`` list of each of those teams.
    """

    model_config = {"frozen": True}

    id: str
    name: str
    phone: str
    email: str
    address: str
    github: str | None = None
    salary: Decimal = Decimal("0.00")
    tags: frozenset[str] = Field(default_factory=frozenset)
    team_ids: frozenset[str] = Field(default_factory=frozenset)

    @classmethod
    def create(
        cls,
        person_id: str,
        *,
        name: str,
        phone: str,
        email: str,
        address: str,
        github: str | None = None,
        salary: Any = 0,
        tags: set[str] | frozenset[str] | None = None,
    ) -> Person:
        """Validate every field and build a Person with no team memberships.

        Raises:
            InvalidField: On the first field that fails validation.
        """
        check_contact(name=name, phone=phone, email=email, address=address, github=github)
        return cls(
            id=person_id,
            name=name,
            phone=phone,
            email=email,
            address=address.strip(),
            github=github,
            salary=parse_salary(salary),
            tags=check_tags(tags or frozenset()),
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Person:
        """Rebuild a stored person, re-checking every field rule.

        Raises:
            pydantic.ValidationError: A field has the wrong type.
            InvalidField: A field breaks a person rule.
        """
        person = cls.model_validate(dict(record))
        check_contact(
            name=person.name,
            phone=person.phone,
            email=person.email,
            address=person.address,
            github=person.github,
        )
        parse_salary(person.salary)
        check_tags(person.tags)
        return person

    def is_same_person(self, other: Person | None) -> bool:
        """Weaker identity used for duplicate detection: same name."""
        return other is not None and other.name == self.name

    # -- copy-on-write edits ---------------------------------------------

    def with_added_team(self, team_id: str) -> Person:
        return self.model_copy(update={"team_ids": self.team_ids | {team_id}})

    def with_removed_team(self, team_id: str) -> Person:
        return self.model_copy(update={"team_ids": self.team_ids - {team_id}})

    def with_contact(self, **changes: str | None) -> Person:
        """Copy with the given contact fields replaced; None leaves a field as-is.

        Raises:
            InvalidField: The merged contact details break a person rule.
        """
        merged: dict[str, Any] = {
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "github": self.github,
        }
        merged.update({k: v for k, v in changes.items() if v is not None})
        check_contact(**merged)
        merged["address"] = merged["address"].strip()
        return self.model_copy(update=merged)

    def with_salary(self, salary: Any) -> Person:
        return self.model_copy(update={"salary": parse_salary(salary)})

    def with_tags(self, tags: set[str] | frozenset[str]) -> Person:
        return self.model_copy(update={"tags": check_tags(tags)})

    def to_record(self) -> dict[str, Any]:
        """Plain serialisable shape for persistence and JSON output."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "github": self.github,
            "salary": str(self.salary),
            "tags": sorted(self.tags),
            "team_ids": sorted(self.team_ids),
        }
