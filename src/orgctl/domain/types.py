"""Entity namespaces and the closed set of command kinds.

Every command the CLI exposes maps to exactly one :class:`Action`. Audit
eligibility is a property of the action itself, never of the handler.
"""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """The two identifier namespaces."""

    PERSON = "person"
    TEAM = "team"


class Action(StrEnum):
    """Command kinds. The value doubles as the audit action name."""

    # Persons
    ADD = "ADD"
    EDIT = "EDIT"
    DELETE = "DELETE"
    SET_SALARY = "SET-SALARY"
    TAG = "TAG"
    UNTAG = "UNTAG"
    SORT = "SORT"
    IMPORT = "IMPORT"
    CLEAR = "CLEAR"

    # Teams
    CREATE_TEAM = "CREATE-TEAM"
    ADD_TO_TEAM = "ADD-TO-TEAM"
    REMOVE_FROM_TEAM = "REMOVE-FROM-TEAM"
    SET_SUBTEAM = "SET-SUBTEAM"
    REMOVE_SUBTEAM = "REMOVE-SUBTEAM"
    DELETE_TEAM = "DELETE-TEAM"

    # Read-only
    LIST = "LIST"
    VIEW = "VIEW"
    TEAMS = "TEAMS"
    HIERARCHY = "HIERARCHY"
    AUDIT = "AUDIT"
    CHECK = "CHECK"
    HELP = "HELP"

    @property
    def mutating(self) -> bool:
        """Whether a successful run of this command is recorded in the audit log."""
        return self not in _READ_ONLY


_READ_ONLY = frozenset(
    {
        Action.LIST,
        Action.VIEW,
        Action.TEAMS,
        Action.HIERARCHY,
        Action.AUDIT,
        Action.CHECK,
        Action.HELP,
    }
)
