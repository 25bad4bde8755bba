"""TeamGraph — NetworkX view of team nesting.

Built per invocation from the in-memory team list; no cache. Edges run from
parent to subteam. Subteam IDs that name no known team still become nodes,
flagged ``missing=True``, so integrity checks can report them.

The consistency engine does not use this graph for its own cycle check
(that lives on the Team entity); it is an analysis tool for ``check`` and
hierarchy statistics.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from orgctl.domain.team import Team

type _Graph = nx.DiGraph


class TeamGraph:
    """Directed parent -> subteam graph."""

    def __init__(self, graph: _Graph) -> None:
        self._graph = graph

    @classmethod
    def from_teams(cls, teams: Iterable[Team]) -> TeamGraph:
        g: _Graph = nx.DiGraph()
        team_list = list(teams)
        for team in team_list:
            g.add_node(team.id, name=team.name, parent_id=team.parent_id, missing=False)
        for team in team_list:
            for child_id in team.subteam_ids:
                if child_id not in g:
                    g.add_node(child_id, name=None, parent_id=None, missing=True)
                g.add_edge(team.id, child_id)
        return cls(g)

    @property
    def graph(self) -> _Graph:
        return self._graph

    def roots(self) -> list[str]:
        """Known teams nobody lists as a subteam."""
        return [
            n
            for n, data in self._graph.nodes(data=True)
            if not data["missing"] and self._graph.in_degree(n) == 0
        ]

    def is_forest(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph) and all(
            self._graph.in_degree(n) <= 1 for n in self._graph
        )

    def cycles(self) -> list[list[str]]:
        return [sorted(c) for c in nx.simple_cycles(self._graph)]

    def missing_subteams(self) -> list[tuple[str, str]]:
        """``(parent, child)`` pairs where the child names no known team."""
        return [
            (parent, child)
            for parent, child in self._graph.edges
            if self._graph.nodes[child]["missing"]
        ]

    def multi_parent(self) -> list[str]:
        return [n for n in self._graph if self._graph.in_degree(n) > 1]

    def descendants(self, team_id: str) -> set[str]:
        if team_id not in self._graph:
            return set()
        return set(nx.descendants(self._graph, team_id))

    def depth(self) -> int:
        """Longest nesting chain (edges). 0 for a flat or empty organisation."""
        if not nx.is_directed_acyclic_graph(self._graph):
            return -1
        return int(nx.dag_longest_path_length(self._graph)) if len(self._graph) else 0
