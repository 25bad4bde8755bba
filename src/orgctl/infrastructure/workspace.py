"""Workspace — repository owning the database and the loaded aggregate root.

The Workspace is the single dependency injected into every service. It loads
the :class:`AddressBook` from SQLite on first access and writes it back with
:meth:`save` after a command has committed in memory. The engine itself
never performs I/O; persistence always follows a completed command.

- **Load**: rows are read in ``position`` order and handed to
  :meth:`AddressBook.from_records`, which re-seeds the ID counters.
- **Save**: all three tables are rewritten inside one ``engine.begin()``
  block, so a failed save leaves the previous snapshot intact.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import delete, insert, select

from orgctl.domain.address_book import AddressBook
from orgctl.domain.errors import CorruptWorkspace, OrgError
from orgctl.infrastructure.database.engine import init_database
from orgctl.infrastructure.database.schema import audit_log, persons, teams
from orgctl.infrastructure.graph.engine import TeamGraph

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from orgctl.config.settings import OrgSettings

logger = logging.getLogger(__name__)


class Workspace:
    """Repository encapsulating database access and the in-memory book.

    Constructed lazily by the CLI context from :class:`OrgSettings`.
    Services receive the Workspace via their :class:`BaseService` constructor.
    """

    def __init__(self, settings: OrgSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(self.root, settings.workspace.db_filename)
        self._book: AddressBook | None = None

    @property
    def root(self) -> Path:
        """The workspace root directory."""
        return self._settings.workspace_root

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def settings(self) -> OrgSettings:
        return self._settings

    @property
    def book(self) -> AddressBook:
        """The aggregate root (loaded from the DB on first access)."""
        if self._book is None:
            self._book = self.load()
        return self._book

    @property
    def graph(self) -> TeamGraph:
        """A fresh team-nesting graph built from the current book."""
        return TeamGraph.from_teams(self.book.teams)

    def close(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self) -> AddressBook:
        """Read every table and rebuild the book.

        Raises:
            CorruptWorkspace: A row does not decode or breaks an entity rule.
        """
        with self._engine.connect() as conn:
            raw_persons = _ordered(conn, persons).all()
            raw_teams = _ordered(conn, teams).all()
            audit_rows = [
                {"timestamp": r.timestamp, "action": r.action, "detail": r.detail}
                for r in conn.execute(select(audit_log).order_by(audit_log.c.seq))
            ]
        try:
            person_rows = [_person_record(r) for r in raw_persons]
            team_rows = [_team_record(r) for r in raw_teams]
            book = AddressBook.from_records(person_rows, team_rows, audit_rows)
        except (ValidationError, OrgError, json.JSONDecodeError) as exc:
            msg = f"Cannot load workspace at {self.root}: {exc}"
            raise CorruptWorkspace(msg) from exc
        logger.debug(
            "loaded workspace: %d persons, %d teams, %d audit entries",
            len(person_rows),
            len(team_rows),
            len(audit_rows),
        )
        return book

    def save(self) -> None:
        """Write the whole book back in one DB transaction."""
        if self._book is None:
            return
        records = self._book.to_records()
        with self._engine.begin() as conn:
            conn.execute(delete(persons))
            conn.execute(delete(teams))
            conn.execute(delete(audit_log))
            for pos, rec in enumerate(records["persons"]):
                conn.execute(
                    insert(persons).values(
                        position=pos,
                        **{
                            **rec,
                            "tags": json.dumps(rec["tags"]),
                            "team_ids": json.dumps(rec["team_ids"]),
                        },
                    )
                )
            for pos, rec in enumerate(records["teams"]):
                conn.execute(
                    insert(teams).values(
                        position=pos,
                        **{
                            **rec,
                            "members": json.dumps(rec["members"]),
                            "subteam_ids": json.dumps(rec["subteam_ids"]),
                        },
                    )
                )
            if records["audit"]:
                conn.execute(insert(audit_log), records["audit"])
        logger.debug("saved workspace to %s", self._engine.url)


def _ordered(conn: Connection, table: Any) -> Any:
    return conn.execute(select(table).order_by(table.c.position))


def _person_record(row: Any) -> dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "phone": row.phone,
        "email": row.email,
        "address": row.address,
        "github": row.github,
        "salary": row.salary,
        "tags": json.loads(row.tags or "[]"),
        "team_ids": json.loads(row.team_ids or "[]"),
    }


def _team_record(row: Any) -> dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "leader_id": row.leader_id,
        "parent_id": row.parent_id,
        "members": json.loads(row.members or "[]"),
        "subteam_ids": json.loads(row.subteam_ids or "[]"),
    }
