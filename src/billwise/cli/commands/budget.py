"""Budget commands."""

import click
from billwise.cli.date_filters import resolve_today, today_option
from billwise.cli.error_handling import handle_domain_error
from billwise.domain.budget import BudgetService
from billwise.utils.amount_parser import parse_amount
from billwise.utils.date_parser import get_period_bounds


@click.group()
def budget_group():
    """Check spending against a budget."""
    pass


@budget_group.command("status")
@click.argument("amount", metavar="BUDGET")
@click.option(
    "--period",
    type=click.Choice(["this-week", "this-month", "this-year"]),
    default="this-month",
    help="Budget period (default: this-month)",
)
@today_option
@click.pass_context
def status(ctx, amount: str, period: str, today_str: str | None):
    """Show spend so far and the projected total for a budget period.

    Examples:
        billwise budget status 20000
        billwise budget status 250000 --period this-year
    """
    service = BudgetService(ctx.obj["db"])
    today = resolve_today(ctx, today_str)

    try:
        budget_amount = parse_amount(amount)
        start, end = get_period_bounds(period, today)
        result = service.get_status(budget_amount, start, end, today)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Period:     {start.isoformat()} to {end.isoformat()}")
    click.echo(f"Spent:      {result.spent:.2f} of {result.budget_amount:.2f} ({result.percentage_used:.1f}%)")
    click.echo(f"Remaining:  {result.remaining:.2f}")
    click.echo(f"Daily avg:  {result.daily_average:.2f}")
    click.echo(f"Projected:  {result.projected_total:.2f}")
    click.echo(f"Alert:      {result.alert_level.value}")
    if result.projected_over_budget:
        click.echo("Warning: on track to exceed the budget")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
