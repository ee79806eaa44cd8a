"""Rich Console factory and theme for gitosisctl output.

Consoles render into a StringIO buffer so formatting stays a pure
``ServiceResult -> str`` function. Rich drops color codes automatically
when there is no terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

THEME = Theme(
    {
        "gitosis.ok": "bold green",
        "gitosis.error": "bold red",
        "gitosis.warning": "bold yellow",
        "gitosis.op": "bold cyan",
        "gitosis.key": "dim",
        "gitosis.group": "bold",
        "gitosis.commit": "bold blue",
    }
)


def create_console(*, width: int | None = None) -> Console:
    return Console(file=StringIO(), theme=THEME, highlight=False, width=width or 120)


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
