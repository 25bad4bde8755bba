"""SQLAlchemy Core table definitions for the orgctl database.

The database is a snapshot store: every save rewrites all three tables from
the in-memory aggregate root. List-valued fields are stored as JSON arrays.
``position`` preserves store order (persons can be re-sorted by command).
"""

from __future__ import annotations

from sqlalchemy import Column, Index, Integer, MetaData, Table, Text

metadata = MetaData()

persons = Table(
    "persons",
    metadata,
    Column("id", Text, primary_key=True),  # Exxxx
    Column("position", Integer, nullable=False),
    Column("name", Text, nullable=False, unique=True),
    Column("phone", Text, nullable=False),
    Column("email", Text, nullable=False),
    Column("address", Text, nullable=False),
    Column("github", Text),
    Column("salary", Text, nullable=False, default="0.00", server_default="0.00"),
    Column("tags", Text, nullable=False, default="[]", server_default="[]"),  # JSON array
    Column("team_ids", Text, nullable=False, default="[]", server_default="[]"),  # JSON array
)

teams = Table(
    "teams",
    metadata,
    Column("id", Text, primary_key=True),  # Txxxx
    Column("position", Integer, nullable=False),
    Column("name", Text, nullable=False),
    Column("leader_id", Text),
    Column("parent_id", Text),
    Column("members", Text, nullable=False, default="[]", server_default="[]"),  # JSON array
    Column("subteam_ids", Text, nullable=False, default="[]", server_default="[]"),  # JSON array
)

audit_log = Table(
    "audit_log",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("timestamp", Text, nullable=False),  # ISO 8601
    Column("action", Text, nullable=False),
    Column("detail", Text, nullable=False),
)

Index("ix_persons_position", persons.c.position)
Index("ix_teams_position", teams.c.position)
