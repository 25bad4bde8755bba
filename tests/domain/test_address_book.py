"""Tests for the AddressBook aggregate root and its transactions."""

import pytest

from orgctl.domain.address_book import AddressBook
from orgctl.domain.errors import DuplicateEntity, EntityNotFound, NotMember
from orgctl.domain.person import Person
from orgctl.domain.team import Team
from orgctl.domain.types import Action


def _person(pid: str, name: str) -> Person:
    return Person.create(pid, name=name, phone="12345", email="p@example.com", address="1 Road")


def _seeded() -> AddressBook:
    book = AddressBook()
    with book.transaction() as txn:
        alice = _person(txn.allocate_person_id(), "Alice")
        txn.add_person(alice)
        team = Team.create(txn.allocate_team_id(), "Alpha", alice.id)
        txn.add_team(team)
        txn.replace_person(alice, alice.with_added_team(team.id))
        txn.record(Action.CREATE_TEAM, "seed")
    return book


class TestLookups:
    def test_get_person_missing(self, book: AddressBook) -> None:
        with pytest.raises(EntityNotFound, match="No person with ID E0001"):
            book.get_person("E0001")

    def test_get_team_missing(self, book: AddressBook) -> None:
        with pytest.raises(EntityNotFound, match="No team with ID T0001"):
            book.get_team("T0001")

    def test_find_and_team_named(self) -> None:
        book = _seeded()
        assert book.find_person("E0001") is not None
        assert book.find_team("T0404") is None
        team = book.team_named("Alpha")
        assert team is not None
        assert team.id == "T0001"

    def test_views_are_tuples(self) -> None:
        book = _seeded()
        assert isinstance(book.persons, tuple)
        assert isinstance(book.teams, tuple)


class TestTransaction:
    def test_commit_applies_ops_and_audit(self) -> None:
        book = _seeded()
        assert [p.team_ids for p in book.persons] == [frozenset({"T0001"})]
        assert [e.action for e in book.audit_entries] == ["CREATE-TEAM"]

    def test_nothing_applied_until_commit(self, book: AddressBook) -> None:
        with book.transaction() as txn:
            txn.add_person(_person(txn.allocate_person_id(), "Alice"))
            assert book.persons == ()
        assert len(book.persons) == 1

    def test_exception_in_block_rolls_back_counters(self, book: AddressBook) -> None:
        with pytest.raises(NotMember), book.transaction() as txn:
            txn.allocate_person_id()
            txn.allocate_team_id()
            raise NotMember("nope")
        assert book.ids.next_person_id() == "E0001"
        assert book.ids.next_team_id() == "T0001"

    def test_failing_op_rolls_back_earlier_ops(self) -> None:
        book = _seeded()
        before_persons = book.persons
        before_audit = book.audit_entries
        with pytest.raises(DuplicateEntity), book.transaction() as txn:
            txn.add_person(_person(txn.allocate_person_id(), "Bob"))
            txn.add_person(_person(txn.allocate_person_id(), "Alice"))
            txn.record(Action.ADD, "never recorded")
        assert book.persons == before_persons
        assert book.audit_entries == before_audit
        assert book.ids.next_person_id() == "E0002"

    def test_stale_replace_fails_whole_transaction(self) -> None:
        book = _seeded()
        alice = book.get_person("E0001")
        with book.transaction() as txn:
            txn.replace_person(alice, alice.with_salary(1))
        with pytest.raises(EntityNotFound), book.transaction() as txn:
            txn.replace_person(alice, alice.with_salary(2))
        assert str(book.get_person("E0001").salary) == "1.00"

    def test_reset_then_record(self) -> None:
        book = _seeded()
        with book.transaction() as txn:
            txn.reset()
            txn.record(Action.CLEAR, "wiped")
        assert book.persons == ()
        assert book.teams == ()
        assert [e.detail for e in book.audit_entries] == ["wiped"]
        assert book.ids.next_person_id() == "E0001"

    def test_sort_persons(self, book: AddressBook) -> None:
        with book.transaction() as txn:
            txn.add_person(_person(txn.allocate_person_id(), "Zed"))
            txn.add_person(_person(txn.allocate_person_id(), "Amy"))
        with book.transaction() as txn:
            txn.sort_persons(lambda p: p.name)
        assert [p.name for p in book.persons] == ["Amy", "Zed"]

    def test_remove_team(self) -> None:
        book = _seeded()
        with book.transaction() as txn:
            txn.remove_team(book.get_team("T0001"))
        assert book.teams == ()

    @pytest.mark.parametrize("action", [a for a in Action if not a.mutating])
    def test_read_only_action_is_never_audited(self, action: Action) -> None:
        book = _seeded()
        before = book.audit_entries
        with pytest.raises(ValueError, match="read-only"), book.transaction() as txn:
            txn.record(action, "looked around")
        assert book.audit_entries == before

    def test_mutating_action_is_audited(self, book: AddressBook) -> None:
        with book.transaction() as txn:
            txn.record(Action.SORT, "Sorted the list of persons by name")
        assert [e.action for e in book.audit_entries] == ["SORT"]


class TestRecords:
    def test_round_trip_reseeds_counters(self) -> None:
        book = _seeded()
        restored = AddressBook.from_records(**book.to_records())
        assert restored == book
        assert len(restored.audit_entries) == 1
        assert restored.ids.next_person_id() == "E0002"
        assert restored.ids.next_team_id() == "T0002"

    def test_duplicate_names_rejected(self) -> None:
        record = _person("E0001", "Alice").to_record()
        with pytest.raises(DuplicateEntity):
            AddressBook.from_records([record, {**record, "id": "E0002"}])

    def test_hierarchy_report(self) -> None:
        assert _seeded().hierarchy_report() == "T0001 Alpha (leader: E0001, 1 member)"
