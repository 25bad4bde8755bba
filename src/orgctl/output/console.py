"""Rich Console factory and theme for orgctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ORG_THEME = Theme(
    {
        "org.ok": "bold green",
        "org.error": "bold red",
        "org.warning": "bold yellow",
        "org.op": "bold cyan",
        "org.key": "dim",
        "org.id": "bold blue",
        "org.name": "bold",
        "org.team": "magenta",
        "org.leader": "yellow",
        "org.tag": "green",
        "org.action": "bold cyan",
        "org.time": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=ORG_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
