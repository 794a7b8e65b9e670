"""Prediction commands."""

import click
from billwise.cli.date_filters import resolve_today, today_option
from billwise.domain.predictions import RecurringPredictionService


@click.group()
def predict_group():
    """Forecast recurring expenses."""
    pass


@predict_group.command("next-month")
@today_option
@click.pass_context
def next_month(ctx, today_str: str | None):
    """List expenses expected next month."""
    service = RecurringPredictionService(ctx.obj["db"])

    predictions = service.predict_next_month_expenses(resolve_today(ctx, today_str))
    if not predictions:
        click.echo("No expenses predicted for next month.")
        return

    for p in predictions:
        click.echo(
            f"{p.expected_date.isoformat()} | {p.amount:>10.2f} | {p.display_name} "
            f"({p.source.value}, {p.confidence:.0%})"
        )


@predict_group.command("health")
@today_option
@click.pass_context
def health(ctx, today_str: str | None):
    """Summarize recurring expense health."""
    service = RecurringPredictionService(ctx.obj["db"])
    today = resolve_today(ctx, today_str)

    summary = service.get_recurring_health_summary(today)
    click.echo(f"Predicted next month:   {summary.next_month_predicted_total:.2f} "
               f"({summary.predicted_expense_count} expenses)")
    click.echo(f"  Confirmed rules:      {summary.confirmed_recurring_total:.2f}")
    click.echo(f"  Detected patterns:    {summary.detected_pattern_total:.2f}")
    click.echo(f"New subscriptions:      {summary.new_subscription_count}")
    click.echo(f"Dormant subscriptions:  {summary.dormant_subscription_count}")
    click.echo(f"Potential savings:      {summary.potential_savings:.2f}")

    for d in service.flag_dormant_subscriptions(today):
        click.echo(
            f"  {d.merchant_name}: {d.status.value}, {d.missed_payments} missed "
            f"since {d.last_transaction_date.isoformat()}"
        )


def register_commands(cli):
    """Register prediction commands with main CLI."""
    cli.add_command(predict_group, name="predict")
