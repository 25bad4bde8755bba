"""Tests for person CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from orgctl.cli import cli

ADD_ALICE = ["add", "-n", "Alice", "-p", "123", "-e", "alice@example.com", "-a", "1 Road"]


@pytest.mark.usefixtures("_isolated_workspace")
class TestAddCommand:
    def test_add(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", *ADD_ALICE, "-t", "a", "-t", "b", "-s", "10"])
        assert result.exit_code == 0, result.output
        person = json.loads(result.stdout)["data"]["person"]
        assert person["id"] == "E0001"
        assert person["tags"] == ["a", "b"]
        assert person["salary"] == "10.00"

    def test_human_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ADD_ALICE)
        assert result.exit_code == 0
        assert "New person added: E0001 Alice" in result.stdout

    def test_duplicate(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        result = cli_runner.invoke(cli, ADD_ALICE)
        assert result.exit_code == 1
        assert "already exists" in result.stderr

    def test_missing_option(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["add", "-n", "Alice"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("_isolated_workspace")
class TestEditCommands:
    def test_set_salary(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        result = cli_runner.invoke(cli, ["--json", "set-salary", "E0001", "99.999"])
        assert json.loads(result.stdout)["data"]["person"]["salary"] == "100.00"

    def test_tag_untag(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        assert cli_runner.invoke(cli, ["tag", "E0001", "x", "y"]).exit_code == 0
        result = cli_runner.invoke(cli, ["--json", "untag", "E0001", "x"])
        assert json.loads(result.stdout)["data"]["person"]["tags"] == ["y"]

    def test_delete(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        assert cli_runner.invoke(cli, ["delete", "E0001"]).exit_code == 0
        result = cli_runner.invoke(cli, ["--json", "list"])
        assert json.loads(result.stdout)["data"]["count"] == 0

    def test_edit(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        result = cli_runner.invoke(cli, ["--json", "edit", "E0001", "-p", "91234567", "-g", "ali"])
        assert result.exit_code == 0, result.output
        person = json.loads(result.stdout)["data"]["person"]
        assert person["phone"] == "91234567"
        assert person["github"] == "ali"

    def test_edit_rename_collision(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        bob = ["add", "-n", "Bob", "-p", "456", "-e", "bob@example.com", "-a", "2 Road"]
        cli_runner.invoke(cli, bob)
        result = cli_runner.invoke(cli, ["--json", "edit", "E0002", "-n", "Alice"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "DUPLICATE"

    def test_edit_rejects_tags(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        result = cli_runner.invoke(cli, ["edit", "E0001", "-t", "x"])
        assert result.exit_code == 2
        assert "Use the tag/untag command to add/remove tags" in result.stderr

    def test_edit_without_fields(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        result = cli_runner.invoke(cli, ["edit", "E0001"])
        assert result.exit_code == 1
        assert "At least one field to edit must be provided." in result.stderr

    def test_bad_id(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "delete", "alice"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "INVALID_ID"


@pytest.mark.usefixtures("_isolated_workspace")
class TestSortCommand:
    def test_sort_desc(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        cli_runner.invoke(cli, ["add", "-n", "Bob", "-p", "456", "-e", "b@example.com", "-a", "x"])
        result = cli_runner.invoke(cli, ["-q", "sort", "name", "--desc"])
        assert result.stdout.split() == ["E0002", "E0001"]

    def test_invalid_field(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["sort", "height"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("_isolated_workspace")
class TestImportCommand:
    def test_import(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        src = tmp_path / "people.json"
        src.write_text(
            json.dumps(
                {"persons": [{"name": "Dan", "phone": "999", "email": "d@example.com",
                              "address": "y"}]}
            )
        )
        result = cli_runner.invoke(cli, ["--json", "import", str(src)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["data"]["ids"] == ["E0001"]

    def test_export_then_import_skips_existing(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        exported = json.loads(cli_runner.invoke(cli, ["--json", "list"]).stdout)["data"]
        src = tmp_path / "export.json"
        src.write_text(json.dumps(exported))
        result = cli_runner.invoke(cli, ["import", str(src)])
        assert result.exit_code == 0
        assert "skipped duplicate person 'Alice'" in result.stderr


@pytest.mark.usefixtures("_isolated_workspace")
class TestClearCommand:
    def test_requires_confirmation(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        result = cli_runner.invoke(cli, ["clear"], input="n\n")
        assert result.exit_code == 1
        listed = json.loads(cli_runner.invoke(cli, ["--json", "list"]).stdout)
        assert listed["data"]["count"] == 1

    def test_yes(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ALICE)
        result = cli_runner.invoke(cli, ["--json", "clear", "--yes"])
        assert result.exit_code == 0
        audit = json.loads(cli_runner.invoke(cli, ["--json", "audit"]).stdout)
        assert [e["action"] for e in audit["data"]["entries"]] == ["CLEAR"]
