"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, orgctl.toml only contains overrides.
A fresh workspace needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from orgctl.domain.audit import TIMESTAMP_FORMAT

# --- orgctl.toml sections ---


class WorkspaceConfig(BaseModel):
    """[workspace] section."""

    model_config = {"frozen": True}

    name: str = "my-org"
    db_filename: str = "orgctl.db"


class HierarchyConfig(BaseModel):
    """[hierarchy] section."""

    model_config = {"frozen": True}

    show_leader: bool = True
    show_member_count: bool = True


class AuditConfig(BaseModel):
    """[audit] section.

    ``default_limit`` caps ``orgctl audit`` output to the newest N entries
    when ``--limit`` is not given. None shows everything.
    """

    model_config = {"frozen": True}

    time_format: str = TIMESTAMP_FORMAT
    default_limit: int | None = Field(default=None, ge=1)
