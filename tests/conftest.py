"""Shared pytest fixtures and test helpers for orgctl tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from orgctl.config.settings import OrgSettings
from orgctl.domain.address_book import AddressBook
from orgctl.infrastructure.database.engine import init_database
from orgctl.infrastructure.workspace import Workspace
from orgctl.services.telemetry import _current_span, disable_telemetry


@pytest.fixture(autouse=True)
def _reset_process_state() -> Generator[None]:
    """Undo the logging and telemetry setup each CLI invocation performs."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    root_level = root.level
    org_level = logging.getLogger("orgctl").level
    yield
    root.handlers = handlers
    root.setLevel(root_level)
    logging.getLogger("orgctl").setLevel(org_level)
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def workspace_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary workspace directory, isolated from any ambient config."""
    monkeypatch.delenv("ORGCTL_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def workspace(workspace_root: Path) -> Generator[Workspace]:
    """Fully initialized workspace on a temp directory."""
    settings = OrgSettings.from_cli(workspace_root=workspace_root)
    ws = Workspace(settings)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def book() -> AddressBook:
    """Empty in-memory book, no persistence."""
    return AddressBook()


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp workspace root so the CLI creates an isolated workspace.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command test
    classes. Tests that need the path can also request ``tmp_path`` directly
    (pytest deduplicates, it's the same directory).
    """
    monkeypatch.chdir(workspace_root)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------

_PHONES = iter(range(90000001, 99999999))


def add_person(workspace: Workspace, name: str, **kwargs: Any) -> dict[str, Any]:
    """Add a person via PersonService, asserting success."""
    from orgctl.services.person import PersonService

    slug = name.lower().replace(" ", "")
    fields: dict[str, Any] = {
        "phone": str(next(_PHONES)),
        "email": f"{slug}@example.com",
        "address": f"{len(name)} Main Street",
        **kwargs,
    }
    result = PersonService(workspace).add_person(name=name, **fields)
    assert result.ok, result.error
    return result.data


def create_team(workspace: Workspace, name: str, leader_id: str) -> dict[str, Any]:
    """Create a team via TeamService, asserting success."""
    from orgctl.services.team import TeamService

    result = TeamService(workspace).create_team(name, leader_id)
    assert result.ok, result.error
    return result.data


def add_to_team(workspace: Workspace, team_id: str, person_id: str) -> dict[str, Any]:
    from orgctl.services.team import TeamService

    result = TeamService(workspace).add_to_team(team_id, person_id)
    assert result.ok, result.error
    return result.data


def set_subteam(workspace: Workspace, parent_id: str, child_id: str) -> dict[str, Any]:
    from orgctl.services.team import TeamService

    result = TeamService(workspace).set_subteam(parent_id, child_id)
    assert result.ok, result.error
    return result.data


def assert_consistent(book: AddressBook) -> None:
    """Assert every structural rule the engine promises after each command."""
    persons = {p.id: p for p in book.persons}
    teams = book.team_lookup()

    names = [p.name for p in book.persons]
    assert len(names) == len(set(names)), "person names must be unique"
    assert len(teams) == len(book.teams), "team IDs must be unique"

    for person in book.persons:
        for team_id in person.team_ids:
            assert team_id in teams, f"{person.id} lists unknown team {team_id}"
            assert person.id in teams[team_id].members
    for team in book.teams:
        for member_id in team.members:
            assert member_id in persons, f"{team.id} lists unknown member {member_id}"
            assert team.id in persons[member_id].team_ids
        if team.leader_id is not None:
            assert team.leader_id in team.members
        for child_id in team.subteam_ids:
            assert child_id in teams
            assert teams[child_id].parent_id == team.id
        assert not any(
            teams[c].reaches(team.id, teams) for c in team.subteam_ids
        ), f"cycle through {team.id}"
