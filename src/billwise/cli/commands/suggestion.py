"""Pattern suggestion commands."""

import click
from billwise.cli.error_handling import handle_domain_error
from billwise.domain.suggestions import SuggestionService


@click.group()
def suggestion_group():
    """Review detected recurring patterns."""
    pass


@suggestion_group.command("detect")
@click.pass_context
def detect(ctx):
    """Scan transactions for recurring patterns and save new suggestions."""
    service = SuggestionService(ctx.obj["db"])

    created = service.run_detection()
    if not created:
        click.echo("No new recurring patterns found.")
        return

    click.echo(f"Found {len(created)} new recurring pattern(s):")
    for s in created:
        click.echo(
            f"  [{s.id}] {s.display_name} - {s.average_amount:.2f} {s.frequency.value} "
            f"(confidence {s.confidence:.0%})"
        )


@suggestion_group.command("list")
@click.pass_context
def list_suggestions(ctx):
    """List pending suggestions."""
    service = SuggestionService(ctx.obj["db"])

    suggestions = service.list_pending()
    if not suggestions:
        click.echo("No pending suggestions.")
        return

    click.echo("\nPending suggestions:")
    click.echo("-" * 80)
    for s in suggestions:
        click.echo(
            f"ID: {s.id:3d} | {s.display_name:20s} | {s.average_amount:>10.2f} | "
            f"{s.frequency.value:8s} | Next: {s.next_expected.isoformat()} | "
            f"{s.confidence:.0%} ({s.source.value})"
        )


@suggestion_group.command("confirm")
@click.argument("suggestion_id", type=int)
@click.pass_context
def confirm(ctx, suggestion_id: int):
    """Confirm a suggestion, turning it into a recurring rule."""
    service = SuggestionService(ctx.obj["db"])
    try:
        rule_id = service.confirm_suggestion(suggestion_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Confirmed suggestion {suggestion_id} as rule {rule_id}")


@suggestion_group.command("dismiss")
@click.argument("suggestion_id", type=int)
@click.pass_context
def dismiss(ctx, suggestion_id: int):
    """Dismiss a suggestion."""
    service = SuggestionService(ctx.obj["db"])
    try:
        service.dismiss_suggestion(suggestion_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Dismissed suggestion {suggestion_id}")


@suggestion_group.command("cleanup")
@click.pass_context
def cleanup(ctx):
    """Purge suggestions dismissed more than 30 days ago."""
    service = SuggestionService(ctx.obj["db"])
    deleted = service.cleanup_dismissed()
    click.echo(f"Purged {deleted} dismissed suggestion(s)")


def register_commands(cli):
    """Register suggestion commands with main CLI."""
    cli.add_command(suggestion_group, name="suggestion")
