"""CLI entry point for cursor-usage."""

from __future__ import annotations

import functools
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from .config import (
    build_default_config,
    config_exists,
    get_default_file,
    get_log_level,
    get_recent_days,
    get_sort_defaults,
    load_config,
    save_config,
)
from .csv_parser import UsageFileError, load_usage_file
from .dashboard import render_daily, render_dates, render_models, render_summary, render_table
from .date_filter import available_dates, build_date_filter, filter_by_date
from .interactive import run_interactive
from .models import ALL, COLUMNS, SORT_ASC, SORT_DESC, TableQuery
from .table_query import distinct_kinds, distinct_models, export_csv, export_filename, filter_and_sort, query_table

console = Console()
log = logging.getLogger(__name__)


def _setup_logging(verbose: bool, config: dict) -> None:
    level = "DEBUG" if verbose else get_log_level(config)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def date_filter_options(fn):
    """Add the CSV argument and date filter options; pass the loaded, filtered rows."""

    @click.argument("csv_file", required=False, type=click.Path(dir_okay=False))
    @click.option("--day", help="Only this day (YYYY-MM-DD)")
    @click.option("--month", help="Only this month (YYYY-MM)")
    @click.option("--year", help="Only this year (YYYY)")
    @click.option("--from", "start", help="Range start, inclusive (YYYY-MM-DD)")
    @click.option("--to", "end", help="Range end, inclusive (YYYY-MM-DD)")
    @click.pass_context
    @functools.wraps(fn)
    def wrapper(ctx, csv_file, day, month, year, start, end, **kwargs):
        config = ctx.obj["config"]
        path = csv_file or get_default_file(config)
        if not path:
            console.print("[red]No CSV file given and no default_file configured.[/red]")
            ctx.exit(1)

        try:
            spec = build_date_filter(day=day, month=month, year=year, start=start, end=end)
        except ValueError as e:
            raise click.BadParameter(str(e), ctx=ctx) from e

        try:
            rows = load_usage_file(path)
        except UsageFileError as e:
            console.print(f"[red]{e}[/red]")
            ctx.exit(1)

        if not rows:
            console.print(f"[yellow]No usage rows found in {path}[/yellow]")
        filtered = filter_by_date(rows, spec)
        log.info("Loaded %d rows from %s, %d after date filter", len(rows), path, len(filtered))
        return fn(rows=filtered, spec=spec, config=config, **kwargs)

    return wrapper


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx, verbose: bool):
    """Cursor Usage Analyzer — summarize, chart and browse exported Cursor usage CSVs."""
    config = load_config()
    _setup_logging(verbose, config)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command()
@click.option("--file", "default_file", type=click.Path(dir_okay=False),
              help="CSV to use when no path is given")
@click.option("--force", is_flag=True, help="Overwrite an existing config")
def setup(default_file: str | None, force: bool):
    """Write a default configuration file."""
    if config_exists() and not force:
        console.print("[yellow]Config already exists. Use --force to overwrite.[/yellow]")
        return
    path = str(Path(default_file).expanduser().resolve()) if default_file else None
    save_config(build_default_config(path))
    console.print("[green]✓ Config saved![/green]")


@main.command()
@date_filter_options
def summary(rows, spec, config):
    """Show total tokens, cost and requests."""
    render_summary(rows, spec)


@main.command()
@click.option("--days", type=click.IntRange(min=1), default=None,
              help="Number of recent days to show")
@date_filter_options
def daily(rows, spec, config, days):
    """Show usage per day."""
    render_daily(rows, days or get_recent_days(config))


@main.command()
@date_filter_options
def models(rows, spec, config):
    """Show usage per model and per model per day."""
    render_models(rows)


@main.command()
@date_filter_options
def dates(rows, spec, config):
    """List the years, months and days present in the data."""
    render_dates(available_dates(rows))


def table_options(fn):
    """Attach the search, filter and sort options shared by table and export."""
    options = [
        click.option("-s", "--search", default="", help="Match Model, Kind, Max Mode or Date"),
        click.option("--model", default=ALL, show_default=True, help="Only this model"),
        click.option("--kind", default=ALL, show_default=True, help="Only this request kind"),
        click.option("--sort", "sort_field", type=click.Choice(COLUMNS), default=None,
                     help="Sort column"),
        click.option("--order", type=click.Choice([SORT_ASC, SORT_DESC]), default=None,
                     help="Sort direction"),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _build_query(config, search, model, kind, sort_field, order, page=1) -> TableQuery:
    default_field, default_direction = get_sort_defaults(config)
    return TableQuery(
        search=search,
        model=model,
        kind=kind,
        sort_field=sort_field or default_field,
        sort_direction=order or default_direction,
        page=page,
    )


@main.command()
@table_options
@click.option("-p", "--page", type=int, default=1, show_default=True, help="Page number")
@date_filter_options
def table(rows, spec, config, search, model, kind, sort_field, order, page):
    """Browse usage rows 20 at a time."""
    query = _build_query(config, search, model, kind, sort_field, order, page)
    result = query_table(rows, query)
    if result.page != page:
        console.print(f"[yellow]Page {page} is out of range, showing page {result.page}.[/yellow]")
    render_table(result, query)

    options = distinct_models(rows)
    if options:
        console.print(f"[dim]Models: {', '.join(options)}[/dim]")
    kinds = distinct_kinds(rows)
    if kinds:
        console.print(f"[dim]Kinds: {', '.join(kinds)}[/dim]")


@main.command()
@table_options
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None,
              help="Output path (default cursor-usage-YYYY-MM-DD.csv)")
@date_filter_options
def export(rows, spec, config, search, model, kind, sort_field, order, output):
    """Write the filtered and sorted rows to a CSV file."""
    query = _build_query(config, search, model, kind, sort_field, order)
    result = filter_and_sort(rows, query)
    out_path = Path(output or export_filename())
    try:
        out_path.write_text(export_csv(result), encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error writing {out_path}: {e}[/red]")
        raise SystemExit(1) from e
    console.print(f"[green]✓ Exported {len(result)} rows to {out_path}[/green]")


@main.command()
@table_options
@date_filter_options
def browse(rows, spec, config, search, model, kind, sort_field, order):
    """Page through rows interactively, changing sort and filters as you go."""
    query = _build_query(config, search, model, kind, sort_field, order)
    run_interactive(rows, config, query)


if __name__ == "__main__":
    main()
