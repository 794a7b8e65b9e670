"""Upcoming bill commands."""

from datetime import timedelta

import click
from billwise.cli.date_filters import resolve_cli_date, resolve_today, today_option
from billwise.cli.error_handling import handle_domain_error
from billwise.domain.bills import BillAggregationService
from billwise.domain.entities import UpcomingBill


def _format_bill(bill: UpcomingBill) -> str:
    return (
        f"{bill.due_date.isoformat()} | {bill.status.value:13s} | {bill.amount:>10.2f} | "
        f"{bill.display_name} [{bill.id}]"
    )


@click.group()
def bills_group():
    """View and settle upcoming bills."""
    pass


@bills_group.command("upcoming")
@click.option("--start-date", help="Start of range (default: today)")
@click.option("--end-date", help="End of range (default: 30 days after start)")
@today_option
@click.pass_context
def upcoming(ctx, start_date: str | None, end_date: str | None, today_str: str | None):
    """List bills due in a date range."""
    service = BillAggregationService(ctx.obj["db"])
    today = resolve_today(ctx, today_str)
    start = resolve_cli_date(ctx, start_date, "start date") or today
    end = resolve_cli_date(ctx, end_date, "end date") or start + timedelta(days=30)

    if start > end:
        click.echo("Error: Start date must be on or before end date", err=True)
        ctx.exit(1)

    bills = service.get_upcoming_bills(start, end, today)
    if not bills:
        click.echo("No upcoming bills.")
        return

    for bill in bills:
        click.echo(_format_bill(bill))


@bills_group.command("summary")
@today_option
@click.pass_context
def summary(ctx, today_str: str | None):
    """Show this month's and next month's bill totals."""
    service = BillAggregationService(ctx.obj["db"])
    result = service.get_bill_summary(resolve_today(ctx, today_str))

    for month in (result.this_month, result.next_month):
        click.echo(f"{month.display_month:15s} {month.total_amount:>12.2f} ({month.bill_count} bills)")
    if result.has_urgent_bills:
        click.echo(f"Overdue: {result.overdue_count} | Due today: {result.due_today_count}")


@bills_group.command("groups")
@today_option
@click.pass_context
def groups(ctx, today_str: str | None):
    """Show bills grouped by how soon they are due."""
    service = BillAggregationService(ctx.obj["db"])

    bill_groups = service.get_grouped_bills(resolve_today(ctx, today_str))
    if not bill_groups:
        click.echo("No upcoming bills.")
        return

    for group in bill_groups:
        click.echo(f"\n{group.label} ({group.bill_count}, total {group.total_amount:.2f})")
        for bill in group.bills:
            click.echo(f"  {_format_bill(bill)}")


@bills_group.command("calendar")
@click.argument("year", type=int)
@click.argument("month", type=click.IntRange(1, 12))
@today_option
@click.pass_context
def calendar(ctx, year: int, month: int, today_str: str | None):
    """Show a month's bills by due date."""
    service = BillAggregationService(ctx.obj["db"])

    by_date = service.get_bills_for_calendar(year, month, resolve_today(ctx, today_str))
    if not by_date:
        click.echo("No bills this month.")
        return

    for due_date, bills in by_date.items():
        click.echo(due_date.strftime("%a %d %b"))
        for bill in bills:
            click.echo(f"  {bill.display_name}: {bill.amount:.2f} ({bill.status.value})")


@bills_group.command("pay")
@click.argument("bill_id")
@click.option("--transaction-id", type=int, help="Transaction that settled the bill")
@today_option
@click.pass_context
def pay(ctx, bill_id: str, transaction_id: int | None, today_str: str | None):
    """Mark a recurring-rule bill as paid.

    BILL_ID is the identifier shown in brackets by the other bills commands,
    e.g. RECURRING_RULE_3.
    """
    service = BillAggregationService(ctx.obj["db"])
    today = resolve_today(ctx, today_str)

    bill = service.find_bill(bill_id, today)
    if bill is None:
        click.echo(f"Error: Bill {bill_id} not found", err=True)
        ctx.exit(1)

    try:
        changed = service.mark_bill_as_paid(bill, transaction_id=transaction_id, today=today)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not changed:
        click.echo(f"Error: Bill {bill_id} cannot be marked paid here", err=True)
        ctx.exit(1)
    click.echo(f"Marked {bill.display_name} as paid")


def register_commands(cli):
    """Register bill commands with main CLI."""
    cli.add_command(bills_group, name="bills")
