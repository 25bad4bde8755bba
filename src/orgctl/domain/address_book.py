"""AddressBook — the aggregate root over persons, teams and the audit log.

All mutation goes through :meth:`AddressBook.transaction`. Inside the block
callers validate against the committed state and *stage* replacements on the
yielded :class:`BookTransaction`; nothing touches the stores until the block
exits cleanly. The staged operations are then applied in order. If any of
them fails (or the block itself raises), the whole root is restored from the
snapshot taken on entry, ID counters and audit log included:

- **Stores**: lists of immutable values, so a shallow copy is a full snapshot.
- **Audit**: entries staged with :meth:`BookTransaction.record` are appended
  only after every store operation succeeded.
- **IDs**: counters claimed during the block are handed back on rollback.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from orgctl.domain.audit import AuditLog, AuditLogEntry
from orgctl.domain.errors import EntityNotFound
from orgctl.domain.hierarchy import render_hierarchy
from orgctl.domain.ids import IdAllocator
from orgctl.domain.person import Person
from orgctl.domain.store import UniquePersonList, UniqueTeamList
from orgctl.domain.team import Team
from orgctl.domain.types import Action, EntityType

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Snapshot for rollback
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Snapshot:
    persons: tuple[Person, ...]
    teams: tuple[Team, ...]
    audit: tuple[AuditLogEntry, ...]
    ids: dict[str, int]


# ---------------------------------------------------------------------------
# BookTransaction — yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class BookTransaction:
    """Staging area for one command's writes.

    Reads go straight to the book (committed state). Writes are queued and
    applied together on commit, so a precondition failure anywhere in the
    command leaves nothing half-applied.
    """

    _book: AddressBook
    _ops: list[tuple[str, Callable[[], None]]] = field(default_factory=list, repr=False)
    _records: list[tuple[str, str]] = field(default_factory=list, repr=False)

    @property
    def book(self) -> AddressBook:
        return self._book

    def allocate_person_id(self) -> str:
        return self._book._ids.next_person_id()

    def allocate_team_id(self) -> str:
        return self._book._ids.next_team_id()

    # -- persons ---------------------------------------------------------

    def add_person(self, person: Person) -> None:
        self._ops.append((f"add_person {person.id}", lambda: self._book._persons.add(person)))

    def replace_person(self, target: Person, edited: Person) -> None:
        self._ops.append(
            (f"replace_person {target.id}", lambda: self._book._persons.replace(target, edited))
        )

    def remove_person(self, person: Person) -> None:
        self._ops.append(
            (f"remove_person {person.id}", lambda: self._book._persons.remove(person))
        )

    def sort_persons(self, key: Callable[[Person], Any], *, reverse: bool = False) -> None:
        self._ops.append(("sort_persons", lambda: self._book._persons.sort(key, reverse=reverse)))

    # -- teams -----------------------------------------------------------

    def add_team(self, team: Team) -> None:
        self._ops.append((f"add_team {team.id}", lambda: self._book._teams.add(team)))

    def replace_team(self, target: Team, edited: Team) -> None:
        self._ops.append(
            (f"replace_team {target.id}", lambda: self._book._teams.replace(target, edited))
        )

    def remove_team(self, team: Team) -> None:
        self._ops.append((f"remove_team {team.id}", lambda: self._book._teams.remove(team)))

    # -- whole book ------------------------------------------------------

    def reset(self) -> None:
        """Drop every person, team and audit entry and restart the ID counters."""
        self._ops.append(("reset", self._book._reset))

    def record(self, action: Action, detail: str) -> None:
        """Stage the audit entry for this command.

        Raises:
            ValueError: *action* is a read-only command kind.
        """
        if not action.mutating:
            raise ValueError(f"{action} is read-only and is never audited")
        self._records.append((str(action), detail))

    @property
    def pending(self) -> int:
        return len(self._ops)

    def _commit(self) -> None:
        for label, op in self._ops:
            logger.debug("apply %s", label)
            op()
        now = datetime.now().replace(microsecond=0)
        for action, detail in self._records:
            self._book._audit.append(action, detail, now)


# ---------------------------------------------------------------------------
# AddressBook — the aggregate root
# ---------------------------------------------------------------------------


class AddressBook:
    """Owns the person store, team store, audit log and ID allocator."""

    def __init__(self) -> None:
        self._persons = UniquePersonList()
        self._teams = UniqueTeamList()
        self._audit = AuditLog()
        self._ids = IdAllocator()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Construction from / export to plain records
    # ------------------------------------------------------------------

    @classmethod
    def from_records(
        cls,
        persons: Iterable[Mapping[str, Any]] = (),
        teams: Iterable[Mapping[str, Any]] = (),
        audit: Iterable[Mapping[str, Any]] = (),
    ) -> AddressBook:
        """Rebuild a book from persisted records and re-seed the ID counters."""
        book = cls()
        book._persons.replace_all([Person.from_record(p) for p in persons])
        book._teams.replace_all([Team.from_record(t) for t in teams])
        for entry in audit:
            parsed = AuditLogEntry.model_validate(dict(entry))
            book._audit.append(parsed.action, parsed.detail, parsed.timestamp)
        book.reseed_ids()
        return book

    def to_records(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "persons": [p.to_record() for p in self._persons],
            "teams": [t.to_record() for t in self._teams],
            "audit": [e.to_record() for e in self._audit.entries()],
        }

    def reseed_ids(self) -> None:
        self._ids.seed(EntityType.PERSON, (p.id for p in self._persons))
        self._ids.seed(EntityType.TEAM, (t.id for t in self._teams))

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def persons(self) -> tuple[Person, ...]:
        return self._persons.as_view()

    @property
    def teams(self) -> tuple[Team, ...]:
        return self._teams.as_view()

    @property
    def audit_entries(self) -> tuple[AuditLogEntry, ...]:
        return self._audit.entries()

    @property
    def ids(self) -> IdAllocator:
        return self._ids

    def has_person(self, person: Person) -> bool:
        return self._persons.contains(person)

    def find_person(self, person_id: str) -> Person | None:
        return self._persons.find(lambda p: p.id == person_id)

    def find_team(self, team_id: str) -> Team | None:
        return self._teams.find(lambda t: t.id == team_id)

    def get_person(self, person_id: str) -> Person:
        person = self.find_person(person_id)
        if person is None:
            raise EntityNotFound(f"No person with ID {person_id} found")
        return person

    def get_team(self, team_id: str) -> Team:
        team = self.find_team(team_id)
        if team is None:
            raise EntityNotFound(f"No team with ID {team_id} found")
        return team

    def team_named(self, name: str) -> Team | None:
        return self._teams.find(lambda t: t.name == name)

    def team_lookup(self) -> dict[str, Team]:
        return self._teams.lookup()

    def hierarchy_report(self, *, show_leader: bool = True, show_member_count: bool = True) -> str:
        """Human-readable ``tree`` view of the current team nesting."""
        return render_hierarchy(
            self.teams, show_leader=show_leader, show_member_count=show_member_count
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[BookTransaction]:
        """Stage writes, then apply them all or none.

        Usage::

            with book.transaction() as txn:
                person = book.get_person(pid)          # validate
                txn.replace_person(person, edited)     # stage
                txn.replace_team(team, edited_team)
                txn.record(Action.ADD_TO_TEAM, "...")  # audit on commit
        """
        with self._lock:
            snapshot = self._snapshot()
            txn = BookTransaction(self)
            try:
                yield txn
                txn._commit()
            except BaseException:
                self._restore(snapshot)
                logger.debug("transaction rolled back (%d staged ops)", txn.pending)
                raise
            logger.debug("transaction committed (%d ops)", txn.pending)

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            persons=self._persons.as_view(),
            teams=self._teams.as_view(),
            audit=self._audit.entries(),
            ids=self._ids.snapshot(),
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self._persons.replace_all(list(snapshot.persons))
        self._teams.replace_all(list(snapshot.teams))
        self._audit.clear()
        for entry in snapshot.audit:
            self._audit.append(entry.action, entry.detail, entry.timestamp)
        self._ids.restore(snapshot.ids)

    def _reset(self) -> None:
        self._persons.clear()
        self._teams.clear()
        self._audit.clear()
        self._ids.reset()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AddressBook):
            return NotImplemented
        return self._persons == other._persons and self._teams == other._teams
