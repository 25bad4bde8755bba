"""Append-only audit log.

One entry per successful state-mutating command. Entries are never edited;
the only way to drop them is a full reset (``clear``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class AuditLogEntry(BaseModel):
    """Immutable ``(timestamp, action, detail)`` record."""

    model_config = {"frozen": True}

    timestamp: datetime
    action: str
    detail: str

    def format(self, time_format: str = TIMESTAMP_FORMAT) -> str:
        return f"[{self.timestamp.strftime(time_format)}] {self.action}: {self.detail}"

    def __str__(self) -> str:
        return self.format()

    def to_record(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "action": self.action,
            "detail": self.detail,
        }


class AuditLog:
    def __init__(self) -> None:
        self._entries: list[AuditLogEntry] = []

    def append(self, action: str, detail: str, timestamp: datetime | None = None) -> AuditLogEntry:
        entry = AuditLogEntry(
            timestamp=timestamp or datetime.now().replace(microsecond=0),
            action=action,
            detail=detail,
        )
        self._entries.append(entry)
        return entry

    def entries(self) -> tuple[AuditLogEntry, ...]:
        """Oldest first."""
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries = []

    def __len__(self) -> int:
        return len(self._entries)
