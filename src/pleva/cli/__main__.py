#!/usr/bin/env python3
"""Main CLI module for the PLEVA diary."""

from __future__ import annotations

import sys

import click

from ..config.settings import generate_example_env
from .pleva_entry import add_cli, delete_cli, list_cli
from .pleva_exchange import export_cli, import_cli
from .pleva_summary import cli as summary_cli
from .pleva_trend import cli as trend_cli

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
EPILOG = """
Examples:
  pleva add --severity 2 --region face=3 --region back=1
  pleva trend                  # Daily averages for the last week
  pleva trend --range Y        # Monthly averages for the last year
  pleva list --range M         # Entries from the last 30 days
  pleva export backup.plevadiary
  pleva import backup.plevadiary
  pleva summary --range W      # Ask the summary service about last week
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="PLEVA diary - record symptoms and follow their trend",
    epilog=EPILOG,
)
def cli() -> None:
    """Root CLI command."""


@cli.group("config")
def config_cli() -> None:
    """Configuration helpers."""


@config_cli.command("example")
def config_example() -> int:
    """Print an example .env file."""
    click.echo(generate_example_env(), nl=False)
    return 0


cli.add_command(add_cli, "add")
cli.add_command(list_cli, "list")
cli.add_command(delete_cli, "delete")
cli.add_command(trend_cli, "trend")
cli.add_command(export_cli, "export")
cli.add_command(import_cli, "import")
cli.add_command(summary_cli, "summary")


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    if args is None:
        args = sys.argv[1:]

    try:
        return cli.main(args=list(args), prog_name="pleva", standalone_mode=False) or 0
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        return 1
    except SystemExit as exc:
        return int(exc.code) if exc.code is not None else 0


if __name__ == "__main__":
    sys.exit(main())
