"""ServiceResult formatting: JSON, quiet, or Rich human output.

Human output is dispatched on ``result.op``; ops without a dedicated
renderer fall back to indented key-value lines.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from gitosisctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from gitosisctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return _format_quiet(result)

    console = create_console()
    if result.ok:
        _RENDERERS.get(result.op, _render_generic)(result, console)
    else:
        _render_error(result, console, verbose=settings.verbose)
    return get_output(console).rstrip("\n")


def _format_quiet(result: ServiceResult) -> str:
    if not result.ok:
        message = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {message}"
    if result.op == "list_groups":
        return "\n".join(item["name"] for item in result.data.get("items", []))
    if result.op == "show_group":
        return "\n".join(result.data.get("members", []))
    if result.op == "conf_path":
        return str(result.data.get("path", ""))
    return f"OK: {result.op}"


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="gitosis.ok"), Text(f"  {result.op}", style="gitosis.op"))


def _field(console: Console, key: str, value: Any) -> None:
    style = "gitosis.commit" if key in ("commit", "head") else ""
    if isinstance(value, list):
        value = " ".join(str(v) for v in value)
    console.print(Text(f"  {key}: ", style="gitosis.key"), Text(str(value), style=style))


def _render_generic(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


def _render_groups(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    items = result.data.get("items", [])
    if not items:
        console.print("  (no groups)")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Group", style="gitosis.group")
    table.add_column("Members")
    for item in items:
        table.add_row(item["name"], " ".join(item["members"]))
    console.print(table)


def _render_history(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for entry in result.data.get("commits", []):
        console.print(
            Text(f"  {entry['id'][:12]} ", style="gitosis.commit"), Text(entry["subject"])
        )


def _render_error(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    error = result.error
    message = error.message if error else "Unknown error"
    console.print(
        Text("ERROR", style="gitosis.error"),
        Text(f"  {result.op}", style="gitosis.op"),
        Text(f" - {message}"),
    )
    if error is None:
        return
    console.print(Text(f"  code: {error.code}", style="gitosis.key"))
    if error.retryable:
        console.print(Text("  retryable: resubmit the request", style="gitosis.warning"))
    if verbose:
        for key, value in error.detail.items():
            _field(console, key, value)


_RENDERERS: dict[str, Callable[[ServiceResult, Console], None]] = {
    "list_groups": _render_groups,
    "history": _render_history,
}
