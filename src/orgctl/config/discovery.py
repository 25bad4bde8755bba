"""Locating and reading ``orgctl.toml``.

The file is found by walking up from the working directory, the way git
finds ``.git/``. ``ORGCTL_CONFIG`` points at a file explicitly and disables
the walk.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "orgctl.toml"
CONFIG_ENV_VAR = "ORGCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``orgctl.toml`` at or above *start*, or None.

    A set ``ORGCTL_CONFIG`` is used as-is; if it names a missing file no
    config is used at all.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        return path if path.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Parse *path* into raw section tables.

    Raises:
        click.ClickException: The file is not valid TOML.
    """
    raw = path.read_text(encoding="utf-8")
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc
