"""SQLite database engine and schema via SQLAlchemy Core."""

from orgctl.infrastructure.database.engine import create_db_engine, init_database
from orgctl.infrastructure.database.schema import audit_log, metadata, persons, teams

__all__ = [
    "audit_log",
    "create_db_engine",
    "init_database",
    "metadata",
    "persons",
    "teams",
]
