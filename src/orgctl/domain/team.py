"""Team entity with cycle-safe nesting.

Teams reference persons and other teams by ID only. Nesting is stored on
both ends: the parent lists the child in ``subteam_ids`` and the child points
back through ``parent_id``.

INVARIANT: Following ``subteam_ids`` edges never leads back to the start team.
INVARIANT: A set ``leader_id`` is always present in ``members``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from orgctl.domain.errors import InvalidField, InvalidSubteamNesting

TEAM_NAME_CONSTRAINTS = (
    "Team names must be 1 to 40 alphanumeric characters and must not contain spaces"
)

_TEAM_NAME_RE = re.compile(r"^[A-Za-z0-9]{1,40}$")


def is_valid_team_name(value: str) -> bool:
    return _TEAM_NAME_RE.match(value) is not None


def require_team_name(value: str) -> str:
    if not is_valid_team_name(value):
        raise InvalidField(TEAM_NAME_CONSTRAINTS)
    return value


class Team(BaseModel):
    """A team of persons, optionally nested under a parent team."""

    model_config = {"frozen": True}

    id: str
    name: str
    leader_id: str | None = None
    members: tuple[str, ...] = ()
    subteam_ids: tuple[str, ...] = ()
    parent_id: str | None = None

    @classmethod
    def create(cls, team_id: str, name: str, leader_id: str) -> Team:
        """New team whose only member is its leader."""
        return cls(id=team_id, name=require_team_name(name)).with_leader(leader_id)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Team:
        """Rebuild a stored team. Cross-references are left to ``orgctl check``."""
        team = cls.model_validate(dict(record))
        require_team_name(team.name)
        return team

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def with_leader(self, person_id: str) -> Team:
        """Set the leader, appending them to members first if needed.

        Does not check that the person exists; the caller owns that.
        """
        members = self.members if person_id in self.members else (*self.members, person_id)
        return self.model_copy(update={"leader_id": person_id, "members": members})

    def with_members(self, members: Sequence[str]) -> Team:
        return self.model_copy(update={"members": tuple(members)})

    def with_added_member(self, person_id: str) -> Team:
        if person_id in self.members:
            return self
        return self.with_members((*self.members, person_id))

    def remove_member(self, person_id: str) -> Team:
        """Drop *person_id*; a removed leader is cleared, never reassigned."""
        update: dict[str, Any] = {"members": tuple(m for m in self.members if m != person_id)}
        if self.leader_id == person_id:
            update["leader_id"] = None
        return self.model_copy(update=update)

    # ------------------------------------------------------------------
    # Nesting
    # ------------------------------------------------------------------

    def with_parent(self, parent_id: str | None) -> Team:
        return self.model_copy(update={"parent_id": parent_id})

    def with_subteams(self, subteams: Sequence[Team]) -> tuple[Team, list[Team]]:
        """Replace the subteam list.

        Returns the updated team together with copies of *subteams* whose
        parent pointer now names this team.
        """
        updated = self.model_copy(update={"subteam_ids": tuple(t.id for t in subteams)})
        return updated, [t.with_parent(self.id) for t in subteams]

    def without_subteam(self, team_id: str) -> Team:
        return self.model_copy(
            update={"subteam_ids": tuple(s for s in self.subteam_ids if s != team_id)}
        )

    def reaches(self, target_id: str, lookup: Mapping[str, Team]) -> bool:
        """Whether *target_id* is reachable from this team via subteam edges.

        Includes this team itself. Iterative DFS with a visited set, so
        already-malformed data cannot loop forever; the walk never expands
        more teams than *lookup* holds.
        """
        stack: list[str] = [self.id]
        visited: set[str] = set()
        budget = len(lookup) + 1
        while stack and len(visited) < budget:
            current = stack.pop()
            if current == target_id:
                return True
            if current in visited:
                continue
            visited.add(current)
            node = self if current == self.id else lookup.get(current)
            if node is None:
                continue
            stack.extend(s for s in reversed(node.subteam_ids) if s not in visited)
        return False

    def add_to_subteam(self, candidate: Team, lookup: Mapping[str, Team]) -> Team:
        """Return this team with *candidate* appended as a subteam.

        Raises:
            InvalidSubteamNesting: If this team is already reachable from
                *candidate* (nesting would close a cycle), or *candidate* is
                already a direct subteam.
        """
        if candidate.id in self.subteam_ids:
            msg = f"Team {candidate.id} is already a subteam of team {self.id}"
            raise InvalidSubteamNesting(msg)
        if candidate.reaches(self.id, lookup):
            msg = f"Team {candidate.id} cannot be a subteam of team {self.id}"
            raise InvalidSubteamNesting(msg)
        return self.model_copy(update={"subteam_ids": (*self.subteam_ids, candidate.id)})

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def is_same_team(self, other: Team | None) -> bool:
        """Deep identity: id, name, parent, leader, members and subteam ids."""
        if other is self:
            return True
        if other is None:
            return False
        return (
            self.id == other.id
            and self.name == other.name
            and self.parent_id == other.parent_id
            and self.leader_id == other.leader_id
            and self.members == other.members
            and self.subteam_ids == other.subteam_ids
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "leader_id": self.leader_id,
            "members": list(self.members),
            "subteam_ids": list(self.subteam_ids),
            "parent_id": self.parent_id,
        }
