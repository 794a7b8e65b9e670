"""Main CLI entry point."""

import logging

import click
from billwise.database.factories import create_sqlite_database

# Import and register all commands at module level
from billwise.cli.commands import (
    card,
    transaction,
    rule,
    suggestion,
    bills,
    budget,
    predict,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BILLWISE_DB_PATH environment variable)",
    envvar="BILLWISE_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Billwise - Recurring expense and upcoming bill tracking.

    Detects subscriptions and other recurring payments in your transaction
    history, and merges them with credit card dues into one list of
    upcoming bills.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
card.register_commands(cli)
transaction.register_commands(cli)
rule.register_commands(cli)
suggestion.register_commands(cli)
bills.register_commands(cli)
budget.register_commands(cli)
predict.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
