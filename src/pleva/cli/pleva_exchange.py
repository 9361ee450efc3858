"""`pleva export` / `pleva import`: move entries between diaries."""

from __future__ import annotations

from pathlib import Path

import click

from ..diary.exchange import export_to_file, import_from_file
from .cli_common import CLIContext, ExitCode, bootstrap, handle_cli_error


@click.command("export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def export_cli(path: Path, json_output: bool, verbose: bool) -> int:
    """Export all entries (one per timestamp) to PATH."""
    ctx = CLIContext(json_output=json_output, verbose=verbose)
    try:
        _, store = bootstrap(verbose)
        count = export_to_file(store, path)
        photos = sum(len(entry.photos) for entry in store.fetch_entries())
        if json_output:
            ctx.output({"path": str(path), "entries": count, "photos": photos})
        else:
            ctx.output(f"Successfully exported {count} entries with {photos} photos")
        return int(ExitCode.SUCCESS)

    except Exception as exc:
        return handle_cli_error(ctx, exc, "export")


@click.command("import")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def import_cli(path: Path, json_output: bool, verbose: bool) -> int:
    """Import entries from PATH, skipping timestamps already in the diary."""
    ctx = CLIContext(json_output=json_output, verbose=verbose)
    try:
        _, store = bootstrap(verbose)
        result = import_from_file(store, path)
        if json_output:
            ctx.output({"imported": result.imported, "duplicates": result.duplicates, "photos": result.photos})
        else:
            ctx.output(f"{result.message} with {result.photos} photos")
        return int(ExitCode.SUCCESS)

    except Exception as exc:
        return handle_cli_error(ctx, exc, "import")
