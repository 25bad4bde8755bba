"""AuditService — read access to the audit log."""

from __future__ import annotations

from orgctl.services.base import BaseService
from orgctl.services.result import ServiceResult
from orgctl.services.telemetry import traced

EMPTY_MESSAGE = "No actions recorded in audit log."


class AuditService(BaseService):
    @traced
    def list_entries(self, *, limit: int | None = None) -> ServiceResult:
        """Audit entries oldest first, numbered from 1.

        With *limit*, only the newest *limit* entries are returned (their
        numbers still count from the start of the log). Falls back to
        ``[audit] default_limit`` when *limit* is None.
        """
        config = self._workspace.settings.audit
        if limit is None:
            limit = config.default_limit
        entries = list(enumerate(self._book.audit_entries, start=1))
        total = len(entries)
        if limit is not None and limit >= 0:
            entries = entries[max(total - limit, 0) :]
        items = [
            {
                "index": index,
                "timestamp": entry.timestamp.isoformat(),
                "action": entry.action,
                "detail": entry.detail,
                "line": entry.format(config.time_format),
            }
            for index, entry in entries
        ]
        return ServiceResult(
            ok=True,
            op="audit",
            data={
                "entries": items,
                "count": len(items),
                "total": total,
                "message": EMPTY_MESSAGE if not items else f"Audit Log: {len(items)} entries",
            },
        )
