"""Error taxonomy for the organisation model.

Every error carries a stable ``code`` so the service layer can turn it into a
``ServiceError`` without inspecting the exception type. All of them are
per-command failures; none is fatal to the process.
"""

from __future__ import annotations


class OrgError(Exception):
    """Base class for recoverable model errors."""

    code: str = "ORG_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EntityNotFound(OrgError):
    """A referenced person or team does not exist."""

    code = "NOT_FOUND"


class DuplicateEntity(OrgError):
    """Identity collision on insert or replace."""

    code = "DUPLICATE"


class AlreadyMember(OrgError):
    code = "ALREADY_MEMBER"


class NotMember(OrgError):
    code = "NOT_MEMBER"


class InvalidSubteamNesting(OrgError):
    """The requested edge would create a cycle or otherwise malform the tree."""

    code = "INVALID_NESTING"


class HasSubteams(OrgError):
    """Deletion blocked because the team still has subteams."""

    code = "HAS_SUBTEAMS"


class InvalidIdentifierFormat(OrgError):
    code = "INVALID_ID"


class InvalidField(OrgError):
    """A name, contact field, salary or tag failed validation."""

    code = "VALIDATION_FAILED"


class IdSpaceExhausted(OrgError):
    code = "ID_EXHAUSTED"


class InvalidImportFile(OrgError):
    """An import file is unreadable or not shaped like an export."""

    code = "IMPORT_FAILED"


class CorruptWorkspace(OrgError):
    """Stored records cannot be rebuilt into a valid book."""

    code = "CORRUPT_WORKSPACE"
