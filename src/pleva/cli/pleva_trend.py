"""`pleva trend`: print the average lesion count per period."""

from __future__ import annotations

import click

from ..observability import timing_context
from ..trends import TimeRange, TrendPoint, compute_trend
from .cli_common import CLIContext, ExitCode, bootstrap, handle_cli_error, parse_moment

RANGE_LABELS = [time_range.label for time_range in TimeRange]


def period_label(point: TrendPoint, time_range: TimeRange) -> str:
    """Axis label: ``Mar 07`` for day periods, ``Mar 2025`` otherwise."""
    if time_range in (TimeRange.WEEK, TimeRange.MONTH):
        return point.period_start.strftime("%b %d")
    return point.period_start.strftime("%b %Y")


def format_point(point: TrendPoint, time_range: TimeRange) -> str:
    line = f"{period_label(point, time_range):<9} {point.average_value:6.1f}"
    if point.entry_count:
        line += f"  ({point.entry_count} {'entry' if point.entry_count == 1 else 'entries'})"
    return line


@click.command("trend")
@click.option(
    "--range",
    "range_label",
    type=click.Choice(RANGE_LABELS, case_sensitive=False),
    default=None,
    help="Time range (default: PLEVA_DEFAULT_RANGE)",
)
@click.option("--now", "now_value", type=str, help="Reference date/time (ISO-8601, default: now)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def cli(range_label: str | None, now_value: str | None, json_output: bool, verbose: bool) -> int:
    """Show the papule count trend for a time range."""
    ctx = CLIContext(json_output=json_output, verbose=verbose)
    try:
        settings, store = bootstrap(verbose)
        time_range = TimeRange.from_label(range_label or settings.default_range)
        reference_now = parse_moment(now_value, settings.default_timezone)

        with timing_context("compute_trend", component="trends", range=time_range.label) as timing:
            points = compute_trend(store.fetch_entries(), time_range, reference_now, settings.default_timezone)
            timing["points"] = len(points)

        if json_output:
            ctx.output(
                [point.to_dict() for point in points],
                meta={"range": time_range.label, "granularity": time_range.granularity.value},
            )
        else:
            click.echo(f"{time_range.label} papule count trend ({time_range.granularity.value} averages)")
            ctx.output([format_point(point, time_range) for point in points])
        return int(ExitCode.SUCCESS)

    except Exception as exc:
        return handle_cli_error(ctx, exc, "trend")
