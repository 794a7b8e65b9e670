"""Transaction commands."""

import click
from billwise.cli.date_filters import resolve_cli_date
from billwise.cli.error_handling import handle_domain_error
from billwise.domain.entities import TransactionType
from billwise.domain.transactions import TransactionService
from billwise.utils.amount_parser import parse_amount


@click.group()
def transaction_group():
    """Record and list transactions."""
    pass


@transaction_group.command("add")
@click.argument("merchant", metavar="MERCHANT")
@click.argument("amount", metavar="AMOUNT")
@click.option("--date", "date_str", default="today", help="Transaction date (default: today)")
@click.option(
    "--type",
    "type_str",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    default=TransactionType.DEBIT.value,
    help="Transaction type (default: DEBIT)",
)
@click.option("--category-id", type=int, help="Category ID")
@click.pass_context
def add_transaction(
    ctx, merchant: str, amount: str, date_str: str, type_str: str, category_id: int | None
):
    """Record a transaction.

    Examples:
        billwise transaction add "Netflix" 499 --date 2024-03-01
        billwise transaction add "Salary" 85000 --type CREDIT
    """
    service = TransactionService(ctx.obj["db"])
    txn_date = resolve_cli_date(ctx, date_str, "date")

    try:
        txn_id = service.create_transaction(
            amount=parse_amount(amount),
            merchant_name=merchant,
            date=txn_date,
            type=TransactionType(type_str.upper()),
            category_id=category_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Recorded transaction {txn_id}: {merchant} {amount} on {txn_date}")


@transaction_group.command("list")
@click.option("--start-date", help="Only transactions on or after this date")
@click.option("--end-date", help="Only transactions on or before this date")
@click.pass_context
def list_transactions(ctx, start_date: str | None, end_date: str | None):
    """List transactions in date order."""
    service = TransactionService(ctx.obj["db"])
    start = resolve_cli_date(ctx, start_date, "start date")
    end = resolve_cli_date(ctx, end_date, "end date")

    transactions = service.list_transactions(start, end)
    if not transactions:
        click.echo("No transactions found.")
        return

    for t in transactions:
        txn_date = t.date.isoformat() if t.date else "----------"
        click.echo(f"{t.id:5d} | {txn_date} | {t.type.value:7s} | {t.amount:>10.2f} | {t.merchant_name}")


@transaction_group.command("pay")
@click.argument("transaction_id", type=int)
@click.pass_context
def pay_transaction(ctx, transaction_id: int):
    """Mark a transaction as paid."""
    service = TransactionService(ctx.obj["db"])

    try:
        service.mark_paid(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Marked transaction {transaction_id} as paid")

def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
