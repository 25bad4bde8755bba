"""BaseService — foundation for all orgctl services.

Every service receives a :class:`Workspace` at construction time. The
Workspace owns the loaded :class:`AddressBook` and its persistence.
Services own their transaction boundaries via ``self._book.transaction()``
and call :meth:`_persist` once the transaction has committed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orgctl.domain.address_book import AddressBook
    from orgctl.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class TeamService(BaseService):
            def create_team(self, name: str, leader_id: str) -> ServiceResult:
                try:
                    with self._book.transaction() as txn:
                        ...
                except OrgError as exc:
                    return ServiceResult.failure("create_team", exc)
                self._persist()
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @property
    def _book(self) -> AddressBook:
        return self._workspace.book

    def _persist(self) -> None:
        """Write the committed book back to the workspace database."""
        self._workspace.save()
        logger.debug("%s: workspace saved", type(self).__name__)
