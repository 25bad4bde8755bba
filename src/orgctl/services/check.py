"""CheckService — integrity report over loaded data.

Commands keep the book consistent, but a workspace database can still be
edited by hand or written by an older build. ``check`` re-verifies the
structural rules on whatever was loaded, linter style, without modifying
anything. Three categories:

- **references**: IDs that name no person or team
- **membership**: person/team membership and leader agreement
- **nesting**: parent/subteam agreement, multiple parents, cycles
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from orgctl.domain.address_book import AddressBook
from orgctl.infrastructure.graph.engine import TeamGraph
from orgctl.services.base import BaseService
from orgctl.services.result import ServiceResult
from orgctl.services.telemetry import trace_span, traced

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

CAT_REFERENCES = "references"
CAT_MEMBERSHIP = "membership"
CAT_NESTING = "nesting"


def _issue(category: str, severity: str, entity_id: str, message: str) -> dict[str, Any]:
    return {
        "category": category,
        "severity": severity,
        "entity_id": entity_id,
        "message": message,
    }


class CheckService(BaseService):
    """Read-only integrity checks."""

    @traced
    def check(self) -> ServiceResult:
        """Report integrity issues without modifying anything."""
        book = self._book
        graph = self._workspace.graph
        issues: list[dict[str, Any]] = []
        with trace_span("references"):
            issues.extend(self._check_references(book, graph))
        with trace_span("membership"):
            issues.extend(self._check_membership(book))
        with trace_span("nesting"):
            issues.extend(self._check_nesting(book, graph))

        errors = sum(1 for i in issues if i["severity"] == SEVERITY_ERROR)
        return ServiceResult(
            ok=True,
            op="check",
            data={
                "issues": issues,
                "count": len(issues),
                "errors": errors,
                "warnings": len(issues) - errors,
                "stats": {
                    "persons": len(book.persons),
                    "teams": len(book.teams),
                    "roots": len(graph.roots()),
                    "depth": graph.depth(),
                },
            },
        )

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def _check_references(self, book: AddressBook, graph: TeamGraph) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []
        person_ids = {p.id for p in book.persons}
        team_ids = {t.id for t in book.teams}

        for person in book.persons:
            for team_id in sorted(person.team_ids - team_ids):
                issues.append(
                    _issue(
                        CAT_REFERENCES,
                        SEVERITY_ERROR,
                        person.id,
                        f"Person {person.id} lists unknown team {team_id}",
                    )
                )
        for team in book.teams:
            for member_id in team.members:
                if member_id not in person_ids:
                    issues.append(
                        _issue(
                            CAT_REFERENCES,
                            SEVERITY_ERROR,
                            team.id,
                            f"Team {team.id} lists unknown member {member_id}",
                        )
                    )
            if team.parent_id is not None and team.parent_id not in team_ids:
                issues.append(
                    _issue(
                        CAT_REFERENCES,
                        SEVERITY_ERROR,
                        team.id,
                        f"Team {team.id} points to unknown parent {team.parent_id}",
                    )
                )
        for parent_id, child_id in graph.missing_subteams():
            issues.append(
                _issue(
                    CAT_REFERENCES,
                    SEVERITY_ERROR,
                    parent_id,
                    f"Team {parent_id} lists unknown subteam {child_id}",
                )
            )
        return issues

    def _check_membership(self, book: AddressBook) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []
        teams = book.team_lookup()

        for team in book.teams:
            if team.leader_id is not None and team.leader_id not in team.members:
                issues.append(
                    _issue(
                        CAT_MEMBERSHIP,
                        SEVERITY_ERROR,
                        team.id,
                        f"Leader {team.leader_id} of team {team.id} is not a member",
                    )
                )
            for member_id in team.members:
                person = book.find_person(member_id)
                if person is not None and team.id not in person.team_ids:
                    issues.append(
                        _issue(
                            CAT_MEMBERSHIP,
                            SEVERITY_ERROR,
                            team.id,
                            f"Team {team.id} lists {member_id}, who does not list the team",
                        )
                    )
            duplicates = [m for m, n in Counter(team.members).items() if n > 1]
            for member_id in duplicates:
                issues.append(
                    _issue(
                        CAT_MEMBERSHIP,
                        SEVERITY_WARNING,
                        team.id,
                        f"Team {team.id} lists member {member_id} more than once",
                    )
                )

        for person in book.persons:
            for team_id in sorted(person.team_ids):
                team = teams.get(team_id)
                if team is not None and person.id not in team.members:
                    issues.append(
                        _issue(
                            CAT_MEMBERSHIP,
                            SEVERITY_ERROR,
                            person.id,
                            f"Person {person.id} lists team {team_id}, which does not list them",
                        )
                    )

        names = Counter(t.name for t in book.teams)
        for name, n in sorted(names.items()):
            if n > 1:
                issues.append(
                    _issue(
                        CAT_MEMBERSHIP,
                        SEVERITY_WARNING,
                        name,
                        f"{n} teams share the name {name}",
                    )
                )
        return issues

    def _check_nesting(self, book: AddressBook, graph: TeamGraph) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []
        teams = book.team_lookup()

        for team in book.teams:
            for child_id in team.subteam_ids:
                child = teams.get(child_id)
                if child is not None and child.parent_id != team.id:
                    issues.append(
                        _issue(
                            CAT_NESTING,
                            SEVERITY_ERROR,
                            child_id,
                            f"Team {team.id} lists subteam {child_id}, whose parent is "
                            f"{child.parent_id or 'unset'}",
                        )
                    )
            parent = teams.get(team.parent_id) if team.parent_id else None
            if parent is not None and team.id not in parent.subteam_ids:
                issues.append(
                    _issue(
                        CAT_NESTING,
                        SEVERITY_ERROR,
                        team.id,
                        f"Team {team.id} names parent {parent.id}, which does not list it",
                    )
                )

        for team_id in graph.multi_parent():
            issues.append(
                _issue(
                    CAT_NESTING,
                    SEVERITY_ERROR,
                    team_id,
                    f"Team {team_id} is a subteam of more than one team",
                )
            )
        for cycle in graph.cycles():
            issues.append(
                _issue(
                    CAT_NESTING,
                    SEVERITY_ERROR,
                    cycle[0],
                    f"Subteam cycle among teams {', '.join(cycle)}",
                )
            )
        return issues
