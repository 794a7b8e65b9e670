"""CLI helpers for date option resolution."""

from datetime import date

import click

from billwise.utils.date_parser import parse_date


def resolve_cli_date(ctx, value: str | None, label: str = "date") -> date | None:
    """Parse an optional CLI date, exiting with an error if it is invalid."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_today(ctx, value: str | None) -> date:
    """Resolve the --today option, defaulting to the current date."""
    return resolve_cli_date(ctx, value, "reference date") or date.today()


today_option = click.option(
    "--today",
    "today_str",
    help="Reference date for statuses and projections (defaults to today)",
)
