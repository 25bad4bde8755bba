"""Ordered entity stores that enforce identity uniqueness.

:class:`UniqueList` is generic over the identity rule. The two concrete
stores differ only in that rule: persons collide on name, teams on ID.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any

from orgctl.domain.errors import DuplicateEntity, EntityNotFound
from orgctl.domain.person import Person
from orgctl.domain.team import Team


class UniqueList[T]:
    """Insertion-ordered list with no two members sharing an identity.

    Subclasses implement :meth:`_same` and set ``kind`` for error messages.
    """

    kind = "entity"

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: list[T] = []
        self.replace_all(list(items))

    def _same(self, a: T, b: T) -> bool:
        raise NotImplementedError

    def _unchanged_identity(self, target: T, replacement: T) -> bool:
        """Fast path for :meth:`replace`: skip the collision scan when True."""
        return False

    def _describe(self, item: T) -> str:
        return str(getattr(item, "id", item))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def contains(self, candidate: T) -> bool:
        return any(self._same(candidate, existing) for existing in self._items)

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        return next((item for item in self._items if predicate(item)), None)

    def get_by_id(self, entity_id: str) -> T:
        item = self.find(lambda i: getattr(i, "id", None) == entity_id)
        if item is None:
            raise EntityNotFound(f"No {self.kind} with ID {entity_id} found")
        return item

    def as_view(self) -> tuple[T, ...]:
        """Read-only snapshot in insertion order."""
        return tuple(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UniqueList):
            return NotImplemented
        return type(self) is type(other) and self._items == other._items

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, entity: T) -> None:
        if self.contains(entity):
            raise DuplicateEntity(f"This {self.kind} already exists: {self._describe(entity)}")
        self._items.append(entity)

    def replace(self, target: T, replacement: T) -> None:
        """Swap *target* for *replacement* in place.

        Raises:
            EntityNotFound: If *target* is not stored (stale copies included).
            DuplicateEntity: If *replacement* collides with a different entity.
        """
        try:
            index = self._items.index(target)
        except ValueError:
            raise EntityNotFound(
                f"{self.kind.capitalize()} {self._describe(target)} no longer exists"
            ) from None
        if not self._unchanged_identity(target, replacement):
            for i, existing in enumerate(self._items):
                if i != index and self._same(replacement, existing):
                    raise DuplicateEntity(
                        f"This {self.kind} already exists: {self._describe(replacement)}"
                    )
        self._items[index] = replacement

    def remove(self, entity: T) -> None:
        try:
            self._items.remove(entity)
        except ValueError:
            raise EntityNotFound(
                f"{self.kind.capitalize()} {self._describe(entity)} no longer exists"
            ) from None

    def replace_all(self, items: list[T]) -> None:
        """Bulk overwrite after a pairwise uniqueness check of *items*."""
        for i in range(len(items) - 1):
            for j in range(i + 1, len(items)):
                if self._same(items[i], items[j]):
                    raise DuplicateEntity(
                        f"Duplicate {self.kind} in input: {self._describe(items[j])}"
                    )
        self._items = list(items)

    def sort(self, key: Callable[[T], Any], *, reverse: bool = False) -> None:
        self._items.sort(key=key, reverse=reverse)

    def clear(self) -> None:
        self._items = []


class UniquePersonList(UniqueList[Person]):
    """Persons, unique by name."""

    kind = "person"

    def _same(self, a: Person, b: Person) -> bool:
        return a.is_same_person(b)


class UniqueTeamList(UniqueList[Team]):
    """Teams, unique by ID."""

    kind = "team"

    def _same(self, a: Team, b: Team) -> bool:
        return a.id == b.id

    def _unchanged_identity(self, target: Team, replacement: Team) -> bool:
        return target.is_same_team(replacement)

    def lookup(self) -> dict[str, Team]:
        """ID -> team map, for nesting traversal."""
        return {t.id: t for t in self._items}
