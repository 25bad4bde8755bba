"""Tests for TeamGraph — NetworkX view of team nesting."""

from orgctl.domain.team import Team
from orgctl.infrastructure.graph.engine import TeamGraph


def _tree() -> TeamGraph:
    return TeamGraph.from_teams(
        [
            Team(id="T0001", name="Eng", subteam_ids=("T0002", "T0003")),
            Team(id="T0002", name="Web", parent_id="T0001", subteam_ids=("T0004",)),
            Team(id="T0003", name="Infra", parent_id="T0001"),
            Team(id="T0004", name="Design", parent_id="T0002"),
            Team(id="T0005", name="Sales"),
        ]
    )


class TestTeamGraph:
    def test_nodes_carry_attributes(self) -> None:
        graph = _tree().graph
        assert graph.nodes["T0002"]["name"] == "Web"
        assert graph.nodes["T0002"]["parent_id"] == "T0001"
        assert graph.has_edge("T0001", "T0002")

    def test_roots(self) -> None:
        assert _tree().roots() == ["T0001", "T0005"]

    def test_forest_and_depth(self) -> None:
        graph = _tree()
        assert graph.is_forest()
        assert graph.depth() == 2
        assert graph.cycles() == []

    def test_descendants(self) -> None:
        graph = _tree()
        assert graph.descendants("T0001") == {"T0002", "T0003", "T0004"}
        assert graph.descendants("T0404") == set()

    def test_empty(self) -> None:
        graph = TeamGraph.from_teams([])
        assert graph.depth() == 0
        assert graph.roots() == []

    def test_missing_subteam(self) -> None:
        graph = TeamGraph.from_teams([Team(id="T0001", name="A", subteam_ids=("T0404",))])
        assert graph.missing_subteams() == [("T0001", "T0404")]
        assert graph.roots() == ["T0001"]

    def test_cycle(self) -> None:
        graph = TeamGraph.from_teams(
            [
                Team(id="T0002", name="B", subteam_ids=("T0001",)),
                Team(id="T0001", name="A", subteam_ids=("T0002",)),
            ]
        )
        assert graph.cycles() == [["T0001", "T0002"]]
        assert not graph.is_forest()
        assert graph.depth() == -1

    def test_multi_parent(self) -> None:
        graph = TeamGraph.from_teams(
            [
                Team(id="T0001", name="A", subteam_ids=("T0003",)),
                Team(id="T0002", name="B", subteam_ids=("T0003",)),
                Team(id="T0003", name="C"),
            ]
        )
        assert graph.multi_parent() == ["T0003"]
        assert not graph.is_forest()
