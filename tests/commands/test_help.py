"""Tests for the help command and --examples flags."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from orgctl.cli import cli

EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["add", "--examples"], ["orgctl add -n"]),
    (["create-team", "--examples"], ["orgctl create-team Alpha E0001"]),
    (["set-subteam", "--examples"], ["orgctl set-subteam T0001 T0002"]),
    (["sort", "--examples"], ["--desc"]),
    (["list", "--examples"], ["--tag backend", "--team T0001"]),
    (["audit", "--examples"], ["--limit 20"]),
    (["check", "--examples"], ["--strict"]),
    (["clear", "--examples"], ["orgctl clear --yes"]),
]


@pytest.mark.usefixtures("_isolated_workspace")
class TestHelpCommand:
    def test_root_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["help"])
        assert result.exit_code == 0
        assert "create-team" in result.stdout
        assert "hierarchy" in result.stdout

    def test_command_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["help", "set-subteam"])
        assert result.exit_code == 0
        assert "PARENT_ID" in result.stdout
        assert "Cycles are rejected" in result.stdout

    def test_unknown_command(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["help", "frobnicate"])
        assert result.exit_code == 2
        assert "No such command" in result.output


@pytest.mark.usefixtures("_isolated_workspace")
class TestExamples:
    @pytest.mark.parametrize(("args", "keywords"), EXAMPLES_COMMANDS)
    def test_examples(self, cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert "Examples for" in result.output
        for keyword in keywords:
            assert keyword in result.output
