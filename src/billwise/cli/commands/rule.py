"""Recurring rule commands."""

import click
from billwise.cli.date_filters import resolve_cli_date
from billwise.cli.error_handling import handle_domain_error
from billwise.domain.entities import RecurringFrequency
from billwise.domain.rules import RecurringRuleService
from billwise.utils.amount_parser import parse_amount


@click.group()
def rule_group():
    """Manage recurring rules."""
    pass


@rule_group.command("add")
@click.argument("merchant", metavar="MERCHANT")
@click.argument("amount", metavar="AMOUNT")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in RecurringFrequency], case_sensitive=False),
    default=RecurringFrequency.MONTHLY.value,
    help="How often the bill repeats (default: MONTHLY)",
)
@click.option("--next-due", help="Next due date")
@click.option("--day", "day_of_period", type=int, help="Day of month (or ISO weekday for WEEKLY)")
@click.option("--category-id", type=int, help="Category ID")
@click.pass_context
def add_rule(
    ctx,
    merchant: str,
    amount: str,
    frequency: str,
    next_due: str | None,
    day_of_period: int | None,
    category_id: int | None,
):
    """Add a recurring rule by hand.

    Use --frequency ONE_TIME for a single bill that should disappear once paid.

    Examples:
        billwise rule add "Netflix" 499 --next-due 2024-04-01
        billwise rule add "Car insurance" 12000 --frequency YEARLY --next-due 2024-09-15
        billwise rule add "Plumber" 1500 --frequency ONE_TIME --next-due tomorrow
    """
    service = RecurringRuleService(ctx.obj["db"])
    next_expected = resolve_cli_date(ctx, next_due, "next due date")

    try:
        rule_id = service.create_rule(
            merchant_pattern=merchant,
            expected_amount=parse_amount(amount),
            frequency=RecurringFrequency(frequency.upper()),
            category_id=category_id,
            day_of_period=day_of_period,
            next_expected=next_expected,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created rule {rule_id} for {merchant}")


@rule_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List active recurring rules."""
    service = RecurringRuleService(ctx.obj["db"])

    rules = service.list_active_rules()
    if not rules:
        click.echo("No active rules found.")
        return

    click.echo("\nActive rules:")
    click.echo("-" * 70)
    for r in rules:
        next_due = r.next_expected.isoformat() if r.next_expected else "-"
        click.echo(
            f"ID: {r.id:3d} | {r.merchant_pattern:20s} | {r.expected_amount:>10.2f} | "
            f"{r.frequency.value:8s} | Next: {next_due}"
        )


@rule_group.command("deactivate")
@click.argument("rule_id", type=int)
@click.pass_context
def deactivate_rule(ctx, rule_id: int):
    """Stop tracking a recurring rule."""
    service = RecurringRuleService(ctx.obj["db"])
    try:
        service.deactivate_rule(rule_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deactivated rule {rule_id}")


def register_commands(cli):
    """Register recurring rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
