"""QueryService — read-only views of persons, teams and the hierarchy.

Nothing here opens a transaction or records an audit entry.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from orgctl.domain.hierarchy import root_teams
from orgctl.domain.person import Person
from orgctl.domain.team import Team
from orgctl.services.base import BaseService
from orgctl.services.result import ServiceResult
from orgctl.services.telemetry import trace_span, traced

# Closeness of one keyword to a name; lower is closer.
SCORE_EXACT = 0
SCORE_WORD = 1
SCORE_SUBSTRING = 2
SCORE_NONE = 3


def keyword_score(name: str, keyword: str) -> int:
    """Score *keyword* against *name*, case-insensitively.

    Examples:
        >>> keyword_score("Alex Yeoh", "alex yeoh")
        0
        >>> keyword_score("Alex Yeoh", "yeoh")
        1
        >>> keyword_score("Alex Yeoh", "eo")
        2
    """
    lowered = name.lower()
    key = keyword.lower()
    if lowered == key:
        return SCORE_EXACT
    if key in lowered.split():
        return SCORE_WORD
    if key in lowered:
        return SCORE_SUBSTRING
    return SCORE_NONE


def rank_key(person: Person, keywords: Sequence[str]) -> tuple[int, int, int, str]:
    """Sort key: most keywords matched, closest total, earliest keyword, name."""
    scores = [keyword_score(person.name, k) for k in keywords]
    matched = [i for i, s in enumerate(scores) if s < SCORE_NONE]
    first = matched[0] if matched else len(keywords)
    return (-len(matched), sum(scores), first, person.name.lower())


class QueryService(BaseService):
    """Read-only queries over the loaded book."""

    @traced
    def list_persons(self, *, tag: str | None = None, team_id: str | None = None) -> ServiceResult:
        """Every person in store order, optionally filtered by tag or team."""
        persons: Iterable[Person] = self._book.persons
        if tag is not None:
            persons = [p for p in persons if tag in p.tags]
        if team_id is not None:
            persons = [p for p in persons if team_id in p.team_ids]
        items = [p.to_record() for p in persons]
        return ServiceResult(
            ok=True,
            op="list",
            data={"persons": items, "count": len(items)},
        )

    @traced
    def view(self, keywords: Sequence[str]) -> ServiceResult:
        """Persons whose name matches any keyword, best matches first."""
        words = [k for k in keywords if k.strip()]
        with trace_span("rank") as span:
            hits = [
                p
                for p in self._book.persons
                if any(keyword_score(p.name, k) < SCORE_NONE for k in words)
            ]
            hits.sort(key=lambda p: rank_key(p, words))
            if span:
                span.annotate("candidates", len(self._book.persons))
        items = [p.to_record() for p in hits]
        return ServiceResult(
            ok=True,
            op="view",
            data={
                "persons": items,
                "count": len(items),
                "keywords": words,
                "message": f"{len(items)} persons listed!",
            },
        )

    @traced
    def list_teams(self) -> ServiceResult:
        items = [self._team_item(t) for t in self._book.teams]
        return ServiceResult(ok=True, op="teams", data={"teams": items, "count": len(items)})

    @traced
    def hierarchy(self) -> ServiceResult:
        """The team forest as nested items plus the plain ``tree`` text."""
        config = self._workspace.settings.hierarchy
        book = self._book
        teams = book.teams
        report = book.hierarchy_report(
            show_leader=config.show_leader,
            show_member_count=config.show_member_count,
        )
        return ServiceResult(
            ok=True,
            op="hierarchy",
            data={
                "roots": self._nest(teams),
                "report": report,
                "count": len(teams),
                "show_leader": config.show_leader,
                "show_member_count": config.show_member_count,
            },
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _team_item(self, team: Team) -> dict[str, Any]:
        leader = self._book.find_person(team.leader_id) if team.leader_id else None
        return {
            **team.to_record(),
            "leader_name": leader.name if leader else None,
            "member_count": len(team.members),
        }

    def _nest(self, teams: Sequence[Team]) -> list[dict[str, Any]]:
        """Build ``{..., "children": [...]}`` trees without recursion."""
        lookup = {t.id: t for t in teams}
        seen: set[str] = set()
        roots: list[dict[str, Any]] = []
        starts = root_teams(teams)
        starts += [t for t in teams if t not in starts]
        for start in starts:
            if start.id in seen:
                continue
            seen.add(start.id)
            root_item = {**self._team_item(start), "children": []}
            roots.append(root_item)
            stack: list[tuple[Team, dict[str, Any]]] = [(start, root_item)]
            while stack:
                team, item = stack.pop()
                for child_id in team.subteam_ids:
                    child = lookup.get(child_id)
                    if child is None or child.id in seen:
                        continue
                    seen.add(child.id)
                    child_item = {**self._team_item(child), "children": []}
                    item["children"].append(child_item)
                    stack.append((child, child_item))
        return roots
