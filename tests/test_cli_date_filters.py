"""Tests for CLI date helpers."""

from datetime import date

import click
import pytest

from billwise.cli.date_filters import resolve_cli_date, resolve_today


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_resolve_cli_date_passes_none_through():
    assert resolve_cli_date(_ctx(), None) is None


def test_resolve_cli_date_parses_value():
    assert resolve_cli_date(_ctx(), "2024-01-02") == date(2024, 1, 2)


def test_resolve_cli_date_rejects_invalid_value(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date(_ctx(), "someday", "due date")

    assert excinfo.value.exit_code == 1
    assert "Invalid due date" in capsys.readouterr().err


def test_resolve_today_defaults_to_current_date():
    assert resolve_today(_ctx(), None) == date.today()
    assert resolve_today(_ctx(), "2024-03-15") == date(2024, 3, 15)
