"""Rich terminal dashboard for visualizing Cursor usage and spend."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .calculator import model_totals, summarize, usage_by_day, usage_by_model_and_day
from .date_filter import available_days, available_months, available_years
from .formatters import format_currency, format_date, format_number, format_tokens
from .models import (
    COLUMNS,
    SORT_ASC,
    AllDates,
    DailyUsage,
    DateFilterSpec,
    TablePage,
    TableQuery,
    UsageRow,
)

console = Console()

NUMERIC_COLUMNS = {
    "Input (w/ Cache Write)",
    "Input (w/o Cache Write)",
    "Cache Read",
    "Output Tokens",
    "Total Tokens",
}


def render_summary(rows: list[UsageRow], spec: DateFilterSpec | None = None) -> None:
    """Render the headline summary panel for already filtered rows."""
    stats = summarize(rows)
    spec = spec or AllDates()

    lines = []
    lines.append(f"[dim]{spec.description}[/dim]")
    lines.append("")
    lines.append(f"[bold]Total Tokens:[/bold]   {format_number(stats.total_tokens)} "
                 f"[dim]({format_number(stats.average_tokens_per_request)} avg per request)[/dim]")
    lines.append(f"[bold]Total Cost:[/bold]     [green]{format_currency(stats.total_cost)}[/green] "
                 f"[dim]({format_currency(stats.average_cost_per_request)} avg per request)[/dim]")
    lines.append(f"[bold]Total Requests:[/bold] {format_number(stats.total_requests)}")
    lines.append(f"[bold]Models Used:[/bold]    {stats.model_count} different models")

    panel = Panel(
        "\n".join(lines),
        title="[bold cyan]📊 Cursor Usage Summary[/bold cyan]",
        border_style="cyan",
    )
    console.print(panel)


def render_daily(rows: list[UsageRow], recent_days: int = 14) -> None:
    """Render daily usage for the most recent days."""
    daily = usage_by_day(rows)
    if not daily:
        console.print("[yellow]No usage data for the selected period.[/yellow]")
        return
    _render_daily_table(daily[-recent_days:], recent_days)


def _render_daily_table(daily: list[DailyUsage], recent_days: int) -> None:
    table = Table(title=f"📆 Daily Usage (last {recent_days} days)", show_lines=True)
    table.add_column("Date", style="cyan")
    table.add_column("Requests", justify="right")
    table.add_column("Tokens", justify="right", style="yellow")
    table.add_column("Cost", justify="right", style="green")
    table.add_column("Bar", min_width=20)

    max_tokens = max((d.total_tokens for d in daily), default=1) or 1

    for d in daily:
        bar_width = 15
        filled = int(bar_width * max(d.total_tokens, 0) / max_tokens)
        bar = f"[yellow]{'█' * filled}{'░' * (bar_width - filled)}[/yellow]"

        table.add_row(
            d.label,
            format_number(d.requests),
            format_tokens(d.total_tokens),
            format_currency(d.total_cost),
            bar,
        )

    console.print(table)


def render_models(rows: list[UsageRow]) -> None:
    """Render per-model totals followed by the model x day breakdown."""
    totals = model_totals(rows)
    if not totals:
        console.print("[yellow]No usage data for the selected period.[/yellow]")
        return

    table = Table(title="📋 Usage by Model", show_lines=True)
    table.add_column("Model", style="cyan")
    table.add_column("Requests", justify="right")
    table.add_column("Tokens", justify="right", style="yellow")
    table.add_column("% of Tokens", justify="right")
    table.add_column("Cost", justify="right", style="green")

    all_tokens = sum(t.total_tokens for t in totals.values()) or 1
    for model, t in totals.items():
        pct = (t.total_tokens / all_tokens) * 100
        table.add_row(
            model,
            format_number(t.requests),
            format_tokens(t.total_tokens),
            f"{pct:.1f}%",
            format_currency(t.total_cost),
        )
    console.print(table)
    console.print()

    by_model = usage_by_model_and_day(rows)
    breakdown = Table(title="Tokens by Model and Day", show_lines=True)
    breakdown.add_column("Day", style="cyan")
    models = list(totals)
    for model in models:
        breakdown.add_column(model, justify="right")
    for d in usage_by_day(rows):
        cells = []
        for model in models:
            t = by_model.get(model, {}).get(d.key)
            cells.append(format_tokens(t.total_tokens) if t else "-")
        breakdown.add_row(d.label, *cells)
    console.print(breakdown)


def render_table(page: TablePage, query: TableQuery) -> None:
    """Render one page of the usage data table."""
    arrow = "▲" if query.sort_direction == SORT_ASC else "▼"
    table = Table(title="Usage Data Table", show_lines=False)
    for column in COLUMNS:
        header = f"{column} {arrow}" if column == query.sort_field else column
        justify = "right" if column in NUMERIC_COLUMNS or column == "Cost" else "left"
        table.add_column(header, justify=justify, style="cyan" if column == "Model" else None)

    for row in page.rows:
        table.add_row(*[_display_cell(row, column) for column in COLUMNS])

    console.print(table)
    if page.total_count == 0:
        console.print("[yellow]No rows match the current filters.[/yellow]")
        return
    console.print(
        f"[dim]Showing {page.start_index} to {page.end_index} of "
        f"{page.total_count} results │ Page {page.page} of {page.total_pages}[/dim]"
    )


def _display_cell(row: UsageRow, column: str) -> str:
    value = row.get(column)
    if column == "Date":
        return format_date(value)
    if column == "Cost":
        return format_currency(value)
    if column in NUMERIC_COLUMNS:
        return format_number(value)
    return value


def render_dates(dates: list) -> None:
    """Render the years, months and days available for filtering."""
    if not dates:
        console.print("[yellow]No valid dates found.[/yellow]")
        return

    table = Table(title="📅 Available Dates", show_lines=True)
    table.add_column("Years", style="cyan")
    table.add_column("Months")
    table.add_column("Days", style="dim")
    table.add_row(
        "\n".join(str(y) for y in available_years(dates)),
        "\n".join(available_months(dates)),
        "\n".join(available_days(dates)),
    )
    console.print(table)
    console.print(f"[dim]{format_date(dates[0])} – {format_date(dates[-1])}[/dim]")
