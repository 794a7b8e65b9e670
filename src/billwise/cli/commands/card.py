"""Credit card commands."""

import click
from billwise.cli.date_filters import resolve_cli_date
from billwise.cli.error_handling import handle_domain_error
from billwise.domain.cards import CreditCardService
from billwise.utils.amount_parser import parse_amount


@click.group()
def card_group():
    """Manage credit cards."""
    pass


@card_group.command("add")
@click.argument("bank_name", metavar="BANK")
@click.argument("last_four", metavar="LAST_FOUR")
@click.option("--due", help="Amount due on the latest statement")
@click.option("--due-date", help="Statement due date (YYYY-MM-DD or relative like 'tomorrow')")
@click.pass_context
def add_card(ctx, bank_name: str, last_four: str, due: str | None, due_date: str | None):
    """Add a credit card.

    Examples:
        billwise card add "HDFC" 1234
        billwise card add "ICICI" 9876 --due 15000 --due-date 2024-03-20
    """
    service = CreditCardService(ctx.obj["db"])
    previous_due_date = resolve_cli_date(ctx, due_date, "due date")

    try:
        previous_due = parse_amount(due) if due is not None else parse_amount("0")
        card_id = service.add_card(
            bank_name=bank_name,
            last_four_digits=last_four,
            previous_due=previous_due,
            previous_due_date=previous_due_date,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Added card {bank_name} ****{last_four} (ID: {card_id})")


@card_group.command("list")
@click.pass_context
def list_cards(ctx):
    """List tracked credit cards."""
    service = CreditCardService(ctx.obj["db"])

    cards = service.list_active_cards()
    if not cards:
        click.echo("No credit cards found.")
        return

    click.echo("\nCredit cards:")
    click.echo("-" * 60)
    for c in cards:
        due_date = c.previous_due_date.isoformat() if c.previous_due_date else "-"
        click.echo(
            f"ID: {c.id:3d} | {c.bank_name:15s} | ****{c.last_four_digits} | "
            f"Due: {c.previous_due:>10.2f} on {due_date}"
        )


@card_group.command("due")
@click.argument("card_id", type=int)
@click.argument("amount", metavar="AMOUNT")
@click.option("--due-date", help="Statement due date (YYYY-MM-DD or relative like 'tomorrow')")
@click.pass_context
def update_card_due(ctx, card_id: int, amount: str, due_date: str | None):
    """Record a new statement due for a card.

    Examples:
        billwise card due 1 15000 --due-date 2024-04-20
        billwise card due 1 0
    """
    service = CreditCardService(ctx.obj["db"])
    previous_due_date = resolve_cli_date(ctx, due_date, "due date")

    try:
        service.update_due(card_id, parse_amount(amount), previous_due_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated due for card {card_id}: {amount}")

def register_commands(cli):
    """Register credit card commands with main CLI."""
    cli.add_command(card_group, name="card")
