"""TeamService — the hierarchy and membership consistency engine.

Every command follows one pipeline inside a single book transaction:

    VALIDATE → COMPUTE → STAGE → AUDIT → (commit) → PERSIST → RESPOND

Validation reads committed state from both stores. Replacement values are
computed from immutable entities and staged on the transaction; the audit
entry is staged alongside them. A rejected command raises before commit, so
the book (counters included) is restored and nothing is written.

INVARIANT: a person lists team T iff T lists the person as a member.
INVARIANT: subteam edges form a forest; no team reaches itself.
"""

from __future__ import annotations

import logging

from orgctl.domain.errors import (
    AlreadyMember,
    DuplicateEntity,
    HasSubteams,
    InvalidSubteamNesting,
    NotMember,
    OrgError,
)
from orgctl.domain.ids import require_id
from orgctl.domain.team import Team, require_team_name
from orgctl.domain.types import Action, EntityType
from orgctl.services.base import BaseService
from orgctl.services.result import ServiceResult
from orgctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class TeamService(BaseService):
    """Team creation, membership and nesting commands."""

    @traced
    def create_team(self, name: str, leader_id: str) -> ServiceResult:
        """Create a team whose first and only member is its leader."""
        op = "create_team"
        book = self._book
        try:
            with book.transaction() as txn:
                with trace_span("validate"):
                    require_team_name(name)
                    require_id(leader_id, EntityType.PERSON)
                    leader = book.get_person(leader_id)
                    if book.team_named(name) is not None:
                        raise DuplicateEntity(f"A team named {name} already exists")

                team = Team.create(txn.allocate_team_id(), name, leader.id)
                txn.add_team(team)
                txn.replace_person(leader, leader.with_added_team(team.id))
                detail = f"New team created: {team.id} {team.name} (leader {leader.id})"
                txn.record(Action.CREATE_TEAM, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, name=name, leader_id=leader_id)

        self._persist()
        logger.info("created team %s", team.id)
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": team.id, "team": team.to_record(), "message": detail},
        )

    @traced
    def add_to_team(self, team_id: str, person_id: str) -> ServiceResult:
        op = "add_to_team"
        book = self._book
        try:
            with book.transaction() as txn:
                with trace_span("validate"):
                    team = book.get_team(require_id(team_id, EntityType.TEAM))
                    person = book.get_person(require_id(person_id, EntityType.PERSON))
                    if person.id in team.members:
                        msg = f"Person {person.id} is already a member of team {team.id}"
                        raise AlreadyMember(msg)

                edited_team = team.with_added_member(person.id)
                txn.replace_person(person, person.with_added_team(team.id))
                txn.replace_team(team, edited_team)
                detail = f"Person {person.id} added to team {team.id}"
                txn.record(Action.ADD_TO_TEAM, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, team_id=team_id, person_id=person_id)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": team_id, "team": edited_team.to_record(), "message": detail},
        )

    @traced
    def remove_from_team(self, team_id: str, person_id: str) -> ServiceResult:
        """Drop a member. A removed leader leaves the team leaderless."""
        op = "remove_from_team"
        book = self._book
        warnings: list[str] = []
        try:
            with book.transaction() as txn:
                with trace_span("validate"):
                    team = book.get_team(require_id(team_id, EntityType.TEAM))
                    person = book.get_person(require_id(person_id, EntityType.PERSON))
                    if person.id not in team.members:
                        msg = f"Person {person.id} is not a member of team {team.id}"
                        raise NotMember(msg)

                edited_team = team.remove_member(person.id)
                if team.leader_id == person.id:
                    warnings.append(f"Team {team.id} no longer has a leader")
                txn.replace_person(person, person.with_removed_team(team.id))
                txn.replace_team(team, edited_team)
                detail = f"Person {person.id} removed from team {team.id}"
                txn.record(Action.REMOVE_FROM_TEAM, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, team_id=team_id, person_id=person_id)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": team_id, "team": edited_team.to_record(), "message": detail},
            warnings=warnings,
        )

    @traced
    def set_subteam(self, parent_id: str, child_id: str) -> ServiceResult:
        """Nest *child_id* under *parent_id*.

        Rejected when the edge would close a cycle (self-nesting included),
        when the child is already a direct subteam, or when the child already
        has another parent.
        """
        op = "set_subteam"
        book = self._book
        try:
            with book.transaction() as txn:
                with trace_span("validate"):
                    parent = book.get_team(require_id(parent_id, EntityType.TEAM))
                    child = book.get_team(require_id(child_id, EntityType.TEAM))
                    if child.parent_id is not None and child.parent_id != parent.id:
                        msg = f"Team {child.id} is already a subteam of team {child.parent_id}"
                        raise InvalidSubteamNesting(msg)

                with trace_span("cycle_check") as span:
                    lookup = book.team_lookup()
                    edited_parent = parent.add_to_subteam(child, lookup)
                    if span:
                        span.annotate("teams", len(lookup))

                txn.replace_team(parent, edited_parent)
                txn.replace_team(child, child.with_parent(parent.id))
                detail = f"Team {child.id} added as a subteam to team {parent.id}"
                txn.record(Action.SET_SUBTEAM, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, parent_id=parent_id, child_id=child_id)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": parent_id, "team": edited_parent.to_record(), "message": detail},
        )

    @traced
    def remove_subteam(self, parent_id: str, child_id: str) -> ServiceResult:
        """Detach *child_id* from *parent_id*; the child becomes a root team."""
        op = "remove_subteam"
        book = self._book
        try:
            with book.transaction() as txn:
                with trace_span("validate"):
                    parent = book.get_team(require_id(parent_id, EntityType.TEAM))
                    require_id(child_id, EntityType.TEAM)
                    if child_id not in parent.subteam_ids:
                        msg = f"Team {child_id} is not a subteam of team {parent.id}"
                        raise InvalidSubteamNesting(msg)

                edited_parent = parent.without_subteam(child_id)
                txn.replace_team(parent, edited_parent)
                # A dangling subteam ID only needs the parent side cleaned up.
                child = book.find_team(child_id)
                if child is not None and child.parent_id == parent.id:
                    txn.replace_team(child, child.with_parent(None))
                detail = f"Team {child_id} removed as a subteam of team {parent.id}"
                txn.record(Action.REMOVE_SUBTEAM, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, parent_id=parent_id, child_id=child_id)

        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": parent_id, "team": edited_parent.to_record(), "message": detail},
        )

    @traced
    def delete_team(self, team_id: str) -> ServiceResult:
        """Delete a team with no subteams.

        Cascades: the team ID is dropped from every member's team set and
        from the subteam list of any team that nests it.
        """
        op = "delete_team"
        book = self._book
        warnings: list[str] = []
        try:
            with book.transaction() as txn:
                with trace_span("validate"):
                    team = book.get_team(require_id(team_id, EntityType.TEAM))
                    if team.subteam_ids:
                        msg = f"Cannot delete team {team.id} because it has subteams"
                        raise HasSubteams(msg)

                with trace_span("cascade") as span:
                    affected = [
                        p for p in book.persons if p.id in team.members or team.id in p.team_ids
                    ]
                    for person in affected:
                        txn.replace_person(person, person.with_removed_team(team.id))
                    for member_id in team.members:
                        if book.find_person(member_id) is None:
                            warnings.append(f"Skipped missing member {member_id}")
                    parents = [
                        t for t in book.teams if t.id != team.id and team.id in t.subteam_ids
                    ]
                    for parent in parents:
                        txn.replace_team(parent, parent.without_subteam(team.id))
                    if span:
                        span.annotate("members", len(affected))
                        span.annotate("parents", len(parents))

                txn.remove_team(team)
                detail = f"Deleted Team: {team.id} {team.name}"
                txn.record(Action.DELETE_TEAM, detail)
        except OrgError as exc:
            return ServiceResult.failure(op, exc, team_id=team_id)

        self._persist()
        logger.info("deleted team %s (%d members detached)", team.id, len(affected))
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": team.id, "team": team.to_record(), "message": detail},
            warnings=warnings,
        )
