"""ID patterns, validation, and sequential allocation.

Two namespaces, both sequential:
- Persons (employees): ``E`` + 4 digits, e.g. ``E0001``.
- Teams: ``T`` + 4 digits, e.g. ``T0001``.

INVARIANT: IDs are permanent. Once allocated, an ID never changes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from orgctl.domain.errors import IdSpaceExhausted, InvalidIdentifierFormat
from orgctl.domain.types import EntityType

ID_PATTERNS: dict[str, re.Pattern[str]] = {
    EntityType.PERSON: re.compile(r"^E(\d{4})$"),
    EntityType.TEAM: re.compile(r"^T(\d{4})$"),
}

TYPE_PREFIXES: dict[str, str] = {
    EntityType.PERSON: "E",
    EntityType.TEAM: "T",
}

DEFAULT_START = 1
MAX_VALUE = 9999


def format_id(entity_type: str, value: int) -> str:
    """Render *value* as a zero-padded ID in *entity_type*'s namespace."""
    return f"{TYPE_PREFIXES[entity_type]}{value:04d}"


def validate_id(entity_id: str, entity_type: str) -> bool:
    """Check whether *entity_id* matches the expected pattern for *entity_type*."""
    pattern = ID_PATTERNS.get(entity_type)
    if pattern is None:
        return False
    return pattern.match(entity_id) is not None


def require_id(entity_id: str, entity_type: str) -> str:
    """Return *entity_id* unchanged, or raise :class:`InvalidIdentifierFormat`."""
    if not validate_id(entity_id, entity_type):
        prefix = TYPE_PREFIXES.get(entity_type, "?")
        msg = f"Invalid {entity_type} ID: {entity_id!r} (expected {prefix}xxxx)"
        raise InvalidIdentifierFormat(msg)
    return entity_id


def _suffix(entity_id: str, entity_type: str) -> int | None:
    match = ID_PATTERNS[entity_type].match(entity_id)
    if match is None:
        return None
    return int(match.group(1))


class IdAllocator:
    """Per-namespace monotonically increasing counters.

    Owned by the aggregate root. Seeded from the maximum suffix present in
    loaded data, so a reopened workspace continues after its highest stored
    ID. IDs above that maximum that were freed by deletes can come back.
    """

    def __init__(self) -> None:
        self._next: dict[str, int] = {t: DEFAULT_START for t in EntityType}

    def seed(self, entity_type: str, ids: Iterable[str]) -> None:
        """Reset the counter to one past the highest well-formed ID in *ids*.

        IDs outside the namespace pattern are ignored. With no usable IDs the
        counter falls back to the default start.
        """
        suffixes = [s for s in (_suffix(i, entity_type) for i in ids) if s is not None]
        self._next[entity_type] = max(suffixes) + 1 if suffixes else DEFAULT_START

    def allocate(self, entity_type: str) -> str:
        """Claim the next ID in *entity_type*'s namespace."""
        value = self._next[entity_type]
        if value > MAX_VALUE:
            msg = f"No {entity_type} IDs left (limit {format_id(entity_type, MAX_VALUE)})"
            raise IdSpaceExhausted(msg)
        self._next[entity_type] = value + 1
        return format_id(entity_type, value)

    def next_person_id(self) -> str:
        return self.allocate(EntityType.PERSON)

    def next_team_id(self) -> str:
        return self.allocate(EntityType.TEAM)

    def snapshot(self) -> dict[str, int]:
        return dict(self._next)

    def restore(self, state: dict[str, int]) -> None:
        self._next = dict(state)

    def reset(self) -> None:
        self._next = {t: DEFAULT_START for t in EntityType}
