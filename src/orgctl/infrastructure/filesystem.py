"""Filesystem reads for person import files.

An import file is a JSON object with a ``persons`` list, the same shape
``orgctl list --json`` emits under ``data``. Parsing into validated
:class:`Person` values is the service layer's job; this module only reads
and checks the outer shape.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from orgctl.domain.errors import InvalidImportFile


def read_person_records(path: Path) -> list[dict[str, Any]]:
    """Return the raw person records held in *path*.

    Raises:
        InvalidImportFile: If the file cannot be read, is not JSON, or has no
            ``persons`` list of objects.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read {path}: {exc.strerror or exc}"
        raise InvalidImportFile(msg) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc.msg} (line {exc.lineno})"
        raise InvalidImportFile(msg) from exc

    records = data.get("persons") if isinstance(data, dict) else None
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        msg = f"{path} does not contain a 'persons' list"
        raise InvalidImportFile(msg)
    return records
