"""Organisation hierarchy as ``tree``-style text.

Roots are teams without a parent, in store order. Children follow each
parent's ``subteam_ids`` order. Teams that cannot be reached from any root
(only possible with malformed data) are listed last as extra roots.
"""

from __future__ import annotations

from collections.abc import Sequence

from orgctl.domain.team import Team

_BRANCH = "├── "
_LAST = "└── "
_PIPE = "│   "
_SPACE = "    "


def team_label(team: Team, *, show_leader: bool = True, show_member_count: bool = True) -> str:
    """One-line description of *team*, e.g. ``T0001 Alpha (leader: E0001, 2 members)``."""
    extras: list[str] = []
    if show_leader:
        extras.append(f"leader: {team.leader_id or '-'}")
    if show_member_count:
        count = len(team.members)
        extras.append(f"{count} member{'' if count == 1 else 's'}")
    label = f"{team.id} {team.name}"
    return f"{label} ({', '.join(extras)})" if extras else label


def root_teams(teams: Sequence[Team]) -> list[Team]:
    known = {t.id for t in teams}
    return [t for t in teams if t.parent_id is None or t.parent_id not in known]


def render_hierarchy(
    teams: Sequence[Team],
    *,
    show_leader: bool = True,
    show_member_count: bool = True,
) -> str:
    """Render every team as an indented tree, one team per line."""
    if not teams:
        return "No teams."

    lookup = {t.id: t for t in teams}
    lines: list[str] = []
    seen: set[str] = set()

    def label(t: Team) -> str:
        return team_label(t, show_leader=show_leader, show_member_count=show_member_count)

    roots = root_teams(teams)
    pending = roots + [t for t in teams if t not in roots]
    for root in pending:
        if root.id in seen:
            continue
        seen.add(root.id)
        lines.append(label(root))
        # (team, prefix, is_last) worklist; reversed so output keeps list order
        stack: list[tuple[Team, str, bool]] = []
        children = [lookup[c] for c in root.subteam_ids if c in lookup]
        for i, child in reversed(list(enumerate(children))):
            stack.append((child, "", i == len(children) - 1))
        while stack:
            team, prefix, is_last = stack.pop()
            if team.id in seen:
                continue
            seen.add(team.id)
            lines.append(f"{prefix}{_LAST if is_last else _BRANCH}{label(team)}")
            child_prefix = prefix + (_SPACE if is_last else _PIPE)
            kids = [lookup[c] for c in team.subteam_ids if c in lookup and c not in seen]
            for i, kid in reversed(list(enumerate(kids))):
                stack.append((kid, child_prefix, i == len(kids) - 1))

    return "\n".join(lines)
