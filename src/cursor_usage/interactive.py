"""Interactive table browser with /commands."""

from __future__ import annotations

from dataclasses import replace

from rich.console import Console
from rich.table import Table

from .config import get_recent_days
from .dashboard import render_daily, render_models, render_summary, render_table
from .models import ALL, COLUMNS, TableQuery, UsageRow
from .table_query import clear_filters, distinct_kinds, distinct_models, query_table, toggle_sort

console = Console()

COMMANDS = {
    "/next": "Show the next page",
    "/prev": "Show the previous page",
    "/page": "Jump to a page: /page 3",
    "/sort": "Sort by a column, again to flip: /sort Cost",
    "/search": "Match Model, Kind, Max Mode or Date: /search sonnet",
    "/model": "Only one model (no argument for all): /model gpt-4",
    "/kind": "Only one request kind (no argument for all): /kind Included",
    "/clear": "Drop search, model and kind filters",
    "/summary": "Show the summary panel",
    "/daily": "Show usage per day",
    "/models": "Show usage per model",
    "/help": "List available commands",
    "/quit": "Exit the browser",
}

SHORTCUT_MAP = {
    "/n": "/next", "/p": "/prev", "/s": "/search", "/q": "/quit",
    "/?": "/help", "/exit": "/quit",
}


def apply_command(query: TableQuery, line: str,
                  rows: list[UsageRow]) -> tuple[TableQuery, str | None]:
    """Apply one command line to the query.

    Returns the new query and an error message, or None when the command is
    valid. Display-only commands return the query unchanged.
    """
    cmd, _, arg = line.strip().partition(" ")
    cmd = SHORTCUT_MAP.get(cmd.lower(), cmd.lower())
    arg = arg.strip()

    if cmd == "/next":
        return replace(query, page=query.page + 1), None
    if cmd == "/prev":
        return replace(query, page=max(query.page - 1, 1)), None
    if cmd == "/page":
        if not arg.isdigit():
            return query, "Usage: /page N"
        return replace(query, page=int(arg)), None
    if cmd == "/sort":
        field = _match_column(arg)
        if field is None:
            return query, f"Unknown column {arg!r}. Columns: {', '.join(COLUMNS)}"
        return toggle_sort(query, field), None
    if cmd == "/search":
        return replace(query, search=arg, page=1), None
    if cmd == "/model":
        if arg and arg not in distinct_models(rows):
            return query, f"Unknown model {arg!r}"
        return replace(query, model=arg or ALL, page=1), None
    if cmd == "/kind":
        if arg and arg not in distinct_kinds(rows):
            return query, f"Unknown kind {arg!r}"
        return replace(query, kind=arg or ALL, page=1), None
    if cmd == "/clear":
        return clear_filters(query), None
    if cmd in COMMANDS:
        return query, None
    return query, f"Unknown command: {cmd}"


def _match_column(name: str) -> str | None:
    for column in COLUMNS:
        if column.lower() == name.lower():
            return column
    return None


def run_interactive(rows: list[UsageRow], config: dict, query: TableQuery | None = None) -> None:
    """Run the interactive REPL loop over already loaded rows."""
    console.print("[bold cyan]📊 Cursor Usage Browser[/bold cyan]")
    console.print("[dim]Type /help to see commands · /quit to exit[/dim]\n")

    query = query or TableQuery()
    _show_page(rows, query)

    while True:
        try:
            line = console.input("\n> ")
        except (EOFError, KeyboardInterrupt):
            console.print("\n[dim]Goodbye![/dim]")
            break

        if not line.strip():
            continue

        cmd = SHORTCUT_MAP.get(line.split()[0].lower(), line.split()[0].lower())
        if cmd == "/quit":
            console.print("[dim]Goodbye![/dim]")
            break
        if cmd == "/help":
            _do_help()
            continue

        query, error = apply_command(query, line, rows)
        if error:
            console.print(f"[red]{error}[/red] — type [bold]/help[/bold] for options")
        elif cmd == "/summary":
            render_summary(rows)
        elif cmd == "/daily":
            render_daily(rows, get_recent_days(config))
        elif cmd == "/models":
            render_models(rows)
        else:
            query = _show_page(rows, query)


def _show_page(rows: list[UsageRow], query: TableQuery) -> TableQuery:
    """Render the current page and return the query with its page clamped."""
    page = query_table(rows, query)
    render_table(page, query)
    return replace(query, page=page.page)


def _do_help() -> None:
    table = Table(title="Available Commands", show_lines=True)
    table.add_column("Command", style="cyan bold")
    table.add_column("Shortcut", style="dim")
    table.add_column("Description")

    shortcuts = {full: short for short, full in SHORTCUT_MAP.items() if short != "/exit"}
    for cmd, desc in COMMANDS.items():
        table.add_row(cmd, shortcuts.get(cmd, ""), desc)

    console.print(table)
