"""`pleva add`, `pleva list`, `pleva delete`: manage diary entries."""

from __future__ import annotations

import click

from ..core.time import get_current_time
from ..diary import DiaryEntry, Region, severity_label
from ..summary import entries_in_range
from ..trends import TimeRange
from .cli_common import CLIContext, ExitCode, bootstrap, handle_cli_error, parse_moment

REGION_NAMES = [region.value for region in Region]


def parse_region_counts(values: tuple[str, ...]) -> dict[Region, int]:
    """Parse ``name=count`` pairs (e.g. ``left_arm=3``).

    Raises
    ------
    ValueError
        On malformed pairs, unknown regions or non-integer counts
    """
    counts: dict[Region, int] = {}
    for value in values:
        name, sep, count = value.partition("=")
        if not sep:
            raise ValueError(f"Invalid region count {value!r}: expected name=count")
        try:
            region = Region(name.strip().lower().replace("-", "_"))
        except ValueError:
            raise ValueError(f"Unknown region {name!r}; choose from {', '.join(REGION_NAMES)}") from None
        counts[region] = int(count)
    return counts


@click.command("add")
@click.option("--severity", type=click.IntRange(1, 5), default=1, show_default=True, help="Severity 1-5")
@click.option("--region", "regions", multiple=True, help="Lesion count as name=count (repeatable)")
@click.option("--notes", default="", help="Free-text notes")
@click.option("--location", default="", help="Where the observation was made")
@click.option("--at", "at_value", type=str, help="Timestamp (ISO-8601, default: now)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def add_cli(
    severity: int,
    regions: tuple[str, ...],
    notes: str,
    location: str,
    at_value: str | None,
    json_output: bool,
    verbose: bool,
) -> int:
    """Record a new diary entry."""
    ctx = CLIContext(json_output=json_output, verbose=verbose)
    try:
        settings, store = bootstrap(verbose)
        timestamp = parse_moment(at_value, settings.default_timezone) or get_current_time(settings.default_timezone)
        entry = store.add(
            DiaryEntry(
                timestamp=timestamp,
                severity=severity,
                notes=notes,
                location=location,
                region_counts=parse_region_counts(regions),
            )
        )
        ctx.output(entry.to_dict() if json_output else f"Added entry {entry.id} ({entry.metric_value} papules)")
        return int(ExitCode.SUCCESS)

    except Exception as exc:
        return handle_cli_error(ctx, exc, "add")


@click.command("list")
@click.option("--range", "range_label", type=click.Choice([r.label for r in TimeRange], case_sensitive=False))
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def list_cli(range_label: str | None, json_output: bool, verbose: bool) -> int:
    """List entries, newest first (optionally only those in a range)."""
    ctx = CLIContext(json_output=json_output, verbose=verbose)
    try:
        settings, store = bootstrap(verbose)
        entries = store.fetch_entries()
        if range_label:
            now = get_current_time(settings.default_timezone)
            entries = entries_in_range(entries, TimeRange.from_label(range_label), now, settings.default_timezone)

        if json_output:
            ctx.output([entry.to_dict() for entry in entries], meta={"count": len(entries)})
        else:
            ctx.output(
                [
                    f"{entry.timestamp.strftime('%Y-%m-%d %H:%M')}  {severity_label(entry.severity):<15} "
                    f"{entry.metric_value:>4} papules  {entry.id}"
                    for entry in entries
                ]
            )
        return int(ExitCode.SUCCESS)

    except Exception as exc:
        return handle_cli_error(ctx, exc, "list")


@click.command("delete")
@click.argument("entry_id")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def delete_cli(entry_id: str, json_output: bool, verbose: bool) -> int:
    """Delete an entry by id."""
    ctx = CLIContext(json_output=json_output, verbose=verbose)
    try:
        _, store = bootstrap(verbose)
        store.delete(entry_id)
        ctx.output({"deleted": entry_id} if json_output else f"Deleted entry {entry_id}")
        return int(ExitCode.SUCCESS)

    except Exception as exc:
        return handle_cli_error(ctx, exc, "delete")
