"""Database engine setup for SQLite with WAL mode.

The DB is stored at ``{workspace_root}/.orgctl/{db_filename}``.

SQLAlchemy Core (not ORM) is used because orgctl is a short-lived CLI
process that loads the whole book once and writes it back once.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from orgctl.infrastructure.database.schema import metadata

DATA_DIRNAME = ".orgctl"
DEFAULT_DB_FILENAME = "orgctl.db"


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(root: Path, db_filename: str = DEFAULT_DB_FILENAME) -> Engine:
    """Initialize the orgctl database under ``{root}/.orgctl/``.

    Creates the data directory and all tables from :data:`schema.metadata`.
    Idempotent — safe to call on an existing workspace.
    """
    data_dir = root / DATA_DIRNAME
    data_dir.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(data_dir / db_filename)
    metadata.create_all(engine)
    return engine
