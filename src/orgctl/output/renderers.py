"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from orgctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from orgctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: IDs where there are any."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    for key in ("persons", "teams"):
        items = result.data.get(key)
        if isinstance(items, list):
            return "\n".join(str(item["id"]) for item in items if "id" in item)
    if "ids" in result.data:
        return "\n".join(result.data["ids"])
    if "id" in result.data:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="org.ok")
    op = Text(f"  {result.op}", style="org.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="org.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="org.id")
    elif key == "name":
        v = Text(str(value), style="org.name")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{ak}={av}" for ak, av in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _person_table(persons: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="org.id", no_wrap=True)
    table.add_column("Name", style="org.name")
    table.add_column("Phone")
    table.add_column("Email")
    table.add_column("Teams", style="org.team")
    table.add_column("Tags", style="org.tag")
    if verbose:
        table.add_column("Address")
        table.add_column("GitHub")
        table.add_column("Salary", justify="right")

    for p in persons:
        row: list[Any] = [
            str(p.get("id", "")),
            str(p.get("name", "")),
            str(p.get("phone", "")),
            str(p.get("email", "")),
            ", ".join(p.get("team_ids", [])),
            ", ".join(p.get("tags", [])),
        ]
        if verbose:
            row += [
                Text(str(p.get("address", ""))),
                str(p.get("github") or ""),
                str(p.get("salary", "")),
            ]
        table.add_row(*row)
    return table


def _team_text(team: dict[str, Any], *, show_leader: bool, show_member_count: bool) -> Text:
    text = Text()
    text.append(str(team.get("id", "")), style="org.id")
    text.append(" ")
    text.append(str(team.get("name", "")), style="org.name")
    extras: list[str] = []
    if show_leader:
        extras.append(f"leader: {team.get('leader_id') or '-'}")
    if show_member_count:
        count = team.get("member_count", len(team.get("members", [])))
        extras.append(f"{count} member{'' if count == 1 else 's'}")
    if extras:
        text.append(f" ({', '.join(extras)})", style="dim")
    return text


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="org.error")
    op = Text(f"  {result.op}", style="org.op")
    console.print(label, op, Text(" — "), Text(msg))

    if verbose and err:
        console.print(Text(f"  code: {err.code}", style="dim"))
        if err.detail:
            console.print(Text("  detail:", style="dim"))
            for k, v in err.detail.items():
                console.print(Text(f"    {k}: {v}"))


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render every state-changing command: status, ID, summary message."""
    _status_line(console, result)
    for key in ("id", "count", "skipped", "message"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        for key in ("person", "team"):
            if key in result.data:
                _field(console, key, json.dumps(result.data[key], separators=(",", ":")))
        _render_meta(console, result)


# ── Query renderers ───────────────────────────────────────────────────


def _render_persons(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    persons = result.data.get("persons", [])
    if not persons:
        console.print("No persons found.")
        return
    console.print(_person_table(persons, verbose=verbose))
    console.print(f"\n{result.data.get('count', len(persons))} persons listed!")


def _render_teams(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    teams = result.data.get("teams", [])
    if not teams:
        console.print("No teams.")
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="org.id", no_wrap=True)
    table.add_column("Name", style="org.name")
    table.add_column("Leader", style="org.leader")
    table.add_column("Members", justify="right")
    table.add_column("Parent", style="org.team")
    table.add_column("Subteams", style="org.team")
    if verbose:
        table.add_column("Member IDs")
    for t in teams:
        leader = t.get("leader_id") or "-"
        if t.get("leader_name"):
            leader = f"{leader} {t['leader_name']}"
        row = [
            str(t.get("id", "")),
            str(t.get("name", "")),
            leader,
            str(t.get("member_count", len(t.get("members", [])))),
            str(t.get("parent_id") or "-"),
            ", ".join(t.get("subteam_ids", [])) or "-",
        ]
        if verbose:
            row.append(", ".join(t.get("members", [])))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{len(teams)} teams")


def _render_hierarchy(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the team forest as Rich trees, one per root."""
    roots = result.data.get("roots", [])
    if not roots:
        console.print("No teams.")
        return
    show_leader = bool(result.data.get("show_leader", True))
    show_count = bool(result.data.get("show_member_count", True))

    def label(team: dict[str, Any]) -> Text:
        return _team_text(team, show_leader=show_leader, show_member_count=show_count)

    for root in roots:
        tree = Tree(label(root))
        stack: list[tuple[dict[str, Any], Tree]] = [(root, tree)]
        while stack:
            team, node = stack.pop()
            for child in team.get("children", []):
                branch = node.add(label(child))
                stack.append((child, branch))
        console.print(tree)
    if verbose:
        _render_meta(console, result)


def _render_audit(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    entries = result.data.get("entries", [])
    if not entries:
        console.print(result.data.get("message", "No actions recorded in audit log."))
        return
    console.print(Text("Audit Log:", style="bold"))
    for entry in entries:
        line = Text(f"{entry.get('index', '')}. ")
        line.append(str(entry.get("line", "")))
        console.print(line)
    total = result.data.get("total", len(entries))
    if total > len(entries):
        console.print(Text(f"\nshowing {len(entries)} of {total} entries", style="dim"))


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render check results with issues grouped by category."""
    issues = result.data.get("issues", [])
    count = result.data.get("count", len(issues))
    stats = result.data.get("stats", {})

    if count == 0:
        console.print("[org.ok]OK[/org.ok]  No issues found.")
    else:
        severity_styles = {"error": "org.error", "warning": "org.warning"}
        by_category: dict[str, list[dict[str, Any]]] = {}
        for issue in issues:
            by_category.setdefault(str(issue.get("category", "unknown")), []).append(issue)

        for cat, cat_issues in by_category.items():
            console.print(f"\n[bold]{escape(cat)}[/bold]")
            for issue in cat_issues:
                sev = str(issue.get("severity", "warning"))
                style = severity_styles.get(sev, "")
                prefix = f"[{style}]{sev}[/{style}]" if style else sev
                eid = issue.get("entity_id")
                where = f" {escape(f'[{eid}]')}" if eid else ""
                message = escape(str(issue.get("message", "")))
                console.print(f"  {prefix}{where}: {message}")

        errors = result.data.get("errors", 0)
        console.print(f"\n{errors} errors, {result.data.get('warnings', count - errors)} warnings")

    if verbose and stats:
        console.print()
        for key, value in stats.items():
            _field(console, key, value)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Persons
    "add_person": _render_mutation,
    "edit_person": _render_mutation,
    "delete_person": _render_mutation,
    "set_salary": _render_mutation,
    "tag": _render_mutation,
    "untag": _render_mutation,
    "sort": _render_mutation,
    "import": _render_mutation,
    "clear": _render_mutation,
    # Teams
    "create_team": _render_mutation,
    "add_to_team": _render_mutation,
    "remove_from_team": _render_mutation,
    "set_subteam": _render_mutation,
    "remove_subteam": _render_mutation,
    "delete_team": _render_mutation,
    # Queries
    "list": _render_persons,
    "view": _render_persons,
    "teams": _render_teams,
    "hierarchy": _render_hierarchy,
    "audit": _render_audit,
    "check": _render_check,
}
