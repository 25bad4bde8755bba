"""Tests for PersonService — person lifecycle, tags, salary, sort, import, clear."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from orgctl.infrastructure.workspace import Workspace
from orgctl.services.person import PersonService
from tests.conftest import add_person, add_to_team, assert_consistent, create_team


class TestAddPerson:
    def test_assigns_sequential_ids(self, workspace: Workspace) -> None:
        assert add_person(workspace, "Alice")["id"] == "E0001"
        assert add_person(workspace, "Bob")["id"] == "E0002"

    def test_records_audit(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        entry = workspace.book.audit_entries[-1]
        assert entry.action == "ADD"
        assert entry.detail == "New person added: E0001 Alice"

    def test_all_fields(self, workspace: Workspace) -> None:
        data = add_person(workspace, "Bernice Yu", github="bernice-yu", salary="5200.5",
                          tags=["friends", "colleagues"])
        person = data["person"]
        assert person["github"] == "bernice-yu"
        assert person["salary"] == "5200.50"
        assert person["tags"] == ["colleagues", "friends"]
        assert person["team_ids"] == []

    def test_duplicate_name_rejected(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        result = PersonService(workspace).add_person(
            name="Alice", phone="999", email="other@example.com", address="Elsewhere"
        )
        assert result.error is not None
        assert result.error.code == "DUPLICATE"
        assert result.error.message == "This person already exists in the address book"
        assert add_person(workspace, "Bob")["id"] == "E0002"

    def test_invalid_field(self, workspace: Workspace) -> None:
        result = PersonService(workspace).add_person(
            name="Alice", phone="12", email="a@example.com", address="x"
        )
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        assert workspace.book.audit_entries == ()


class TestEditPerson:
    def test_edits_contact_fields(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice", tags=["x"])
        result = PersonService(workspace).edit_person(
            "E0001", phone="91234567", email="alice@corp.example.com"
        )
        assert result.ok
        person = workspace.book.get_person("E0001")
        assert person.phone == "91234567"
        assert person.email == "alice@corp.example.com"
        assert person.tags == {"x"}
        entry = workspace.book.audit_entries[-1]
        assert entry.action == "EDIT"
        assert entry.detail == "Edited Person: E0001 Alice (phone, email)"

    def test_rename_keeps_team_membership(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        create_team(workspace, "Alpha", "E0001")
        result = PersonService(workspace).edit_person("E0001", name="Alicia")
        assert result.ok
        assert workspace.book.get_person("E0001").team_ids == {"T0001"}
        assert workspace.book.get_team("T0001").leader_id == "E0001"
        assert_consistent(workspace.book)

    def test_rename_onto_another_person_rejected(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        add_person(workspace, "Bob")
        before = workspace.book.audit_entries
        result = PersonService(workspace).edit_person("E0002", name="Alice")
        assert result.error is not None
        assert result.error.code == "DUPLICATE"
        assert workspace.book.get_person("E0002").name == "Bob"
        assert workspace.book.audit_entries == before

    def test_keeping_own_name_is_allowed(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        result = PersonService(workspace).edit_person("E0001", name="Alice", phone="5550001")
        assert result.ok

    def test_nothing_to_edit(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        result = PersonService(workspace).edit_person("E0001", name=None)
        assert result.error is not None
        assert result.error.message == "At least one field to edit must be provided."

    def test_tags_not_editable(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        result = PersonService(workspace).edit_person("E0001", tags="x")
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"

    def test_invalid_value_and_unknown_person(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        bad = PersonService(workspace).edit_person("E0001", email="nope")
        assert bad.error is not None
        assert bad.error.code == "VALIDATION_FAILED"
        missing = PersonService(workspace).edit_person("E0404", phone="123")
        assert missing.error is not None
        assert missing.error.code == "NOT_FOUND"


class TestDeletePerson:
    def test_cascades_to_teams(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        add_person(workspace, "Bob")
        create_team(workspace, "Alpha", "E0001")
        add_to_team(workspace, "T0001", "E0002")
        result = PersonService(workspace).delete_person("E0001")
        assert result.ok
        assert result.data["teams"] == ["T0001"]
        team = workspace.book.get_team("T0001")
        assert team.members == ("E0002",)
        assert team.leader_id is None
        assert_consistent(workspace.book)

    def test_unknown(self, workspace: Workspace) -> None:
        result = PersonService(workspace).delete_person("E0404")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_ids_not_reused(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        PersonService(workspace).delete_person("E0001")
        assert add_person(workspace, "Bob")["id"] == "E0002"


class TestSalaryAndTags:
    def test_set_salary(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        result = PersonService(workspace).set_salary("E0001", "1234")
        assert result.ok
        assert workspace.book.get_person("E0001").salary == Decimal("1234.00")
        assert result.data["message"] == "Set salary 1234.00 for: E0001 Alice"

    def test_negative_salary(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        result = PersonService(workspace).set_salary("E0001", "-1")
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"

    def test_tag_and_untag(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice", tags=["a"])
        svc = PersonService(workspace)
        assert svc.tag("E0001", ["b", "c"]).ok
        assert workspace.book.get_person("E0001").tags == {"a", "b", "c"}
        assert svc.untag("E0001", ["a", "c"]).ok
        assert workspace.book.get_person("E0001").tags == {"b"}
        assert [e.action for e in workspace.book.audit_entries][-2:] == ["TAG", "UNTAG"]

    def test_untag_missing(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice", tags=["a"])
        result = PersonService(workspace).untag("E0001", ["a", "zz"])
        assert result.error is not None
        assert result.error.message == "Some tags were not found on this person: zz"
        assert workspace.book.get_person("E0001").tags == {"a"}

    def test_tag_requires_tags(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        result = PersonService(workspace).tag("E0001", [])
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"


class TestSort:
    def test_sort_by_name(self, workspace: Workspace) -> None:
        for name in ("Carol", "alice", "Bob"):
            add_person(workspace, name)
        result = PersonService(workspace).sort_persons("name")
        assert result.ok
        assert [p.name for p in workspace.book.persons] == ["alice", "Bob", "Carol"]
        assert result.data["message"] == "Sorted the list of persons by name"

    def test_sort_salary_descending(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice", salary="10")
        add_person(workspace, "Bob", salary="30")
        add_person(workspace, "Carol", salary="20")
        result = PersonService(workspace).sort_persons("salary", reverse=True)
        assert result.data["ids"] == ["E0002", "E0003", "E0001"]
        assert result.data["message"].endswith("(descending)")

    def test_sort_order_persists(self, workspace: Workspace) -> None:
        add_person(workspace, "Bob")
        add_person(workspace, "Alice")
        PersonService(workspace).sort_persons("name")
        assert [p.name for p in workspace.load().persons] == ["Alice", "Bob"]

    def test_unknown_field(self, workspace: Workspace) -> None:
        result = PersonService(workspace).sort_persons("height")
        assert result.error is not None
        assert "Cannot sort by 'height'" in result.error.message
        assert workspace.book.audit_entries == ()


class TestImport:
    def _write(self, path: Path, persons: list[dict[str, object]]) -> Path:
        path.write_text(json.dumps({"persons": persons}), encoding="utf-8")
        return path

    def test_imports_with_fresh_ids(self, workspace: Workspace, tmp_path: Path) -> None:
        add_person(workspace, "Alice")
        path = self._write(
            tmp_path / "in.json",
            [
                {"id": "E0777", "name": "Bob", "phone": "123", "email": "b@example.com",
                 "address": "1 Road", "githubUsername": "bob-b", "team_ids": ["T0001"]},
                {"name": "Carol", "phone": "456", "email": "c@example.com",
                 "address": "2 Road", "salary": "99.9", "tags": ["x"]},
            ],
        )
        result = PersonService(workspace).import_persons(path)
        assert result.ok
        assert result.data["ids"] == ["E0002", "E0003"]
        bob = workspace.book.get_person("E0002")
        assert bob.github == "bob-b"
        assert bob.team_ids == frozenset()
        assert workspace.book.get_person("E0003").salary == Decimal("99.90")
        entry = workspace.book.audit_entries[-1]
        assert entry.action == "IMPORT"
        assert entry.detail == f"Imported file from: {path} (2 persons)"

    def test_skips_duplicates(self, workspace: Workspace, tmp_path: Path) -> None:
        add_person(workspace, "Alice")
        record = {"name": "Alice", "phone": "123", "email": "a@example.com", "address": "x"}
        path = self._write(tmp_path / "in.json", [record])
        result = PersonService(workspace).import_persons(path)
        assert result.ok
        assert result.data["count"] == 0
        assert result.data["skipped"] == 1
        assert result.warnings == ["Record 1: skipped duplicate person 'Alice'"]

    def test_invalid_record_aborts_everything(
        self, workspace: Workspace, tmp_path: Path
    ) -> None:
        path = self._write(
            tmp_path / "in.json",
            [
                {"name": "Bob", "phone": "123", "email": "b@example.com", "address": "x"},
                {"name": "Carol", "phone": "no", "email": "c@example.com", "address": "x"},
            ],
        )
        result = PersonService(workspace).import_persons(path)
        assert result.error is not None
        assert result.error.message.startswith("Record 2: ")
        assert workspace.book.persons == ()
        assert add_person(workspace, "Dave")["id"] == "E0001"

    @pytest.mark.parametrize("key", ["github", "githubUsername"])
    @pytest.mark.parametrize("value", [123, ["alice"], {"user": "alice"}])
    def test_non_string_github_fails_record(
        self, workspace: Workspace, tmp_path: Path, key: str, value: object
    ) -> None:
        record = {"name": "Alice", "phone": "123", "email": "a@example.com", "address": "x"}
        path = self._write(tmp_path / "in.json", [{**record, key: value}])
        result = PersonService(workspace).import_persons(path)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        assert result.error.message == "Record 1: github must be a string"
        assert workspace.book.persons == ()

    @pytest.mark.parametrize("content", ["not json", "[]", '{"persons": [1, 2]}'])
    def test_bad_file(self, workspace: Workspace, tmp_path: Path, content: str) -> None:
        path = tmp_path / "in.json"
        path.write_text(content, encoding="utf-8")
        result = PersonService(workspace).import_persons(path)
        assert result.error is not None
        assert result.error.code == "IMPORT_FAILED"

    def test_missing_file(self, workspace: Workspace, tmp_path: Path) -> None:
        result = PersonService(workspace).import_persons(tmp_path / "nope.json")
        assert result.error is not None
        assert result.error.code == "IMPORT_FAILED"


class TestClear:
    def test_wipes_everything_and_records_clear(self, workspace: Workspace) -> None:
        add_person(workspace, "Alice")
        create_team(workspace, "Alpha", "E0001")
        result = PersonService(workspace).clear()
        assert result.ok
        assert result.data["count"] == 1
        book = workspace.book
        assert book.persons == ()
        assert book.teams == ()
        assert [e.action for e in book.audit_entries] == ["CLEAR"]
        assert add_person(workspace, "Bob")["id"] == "E0001"
