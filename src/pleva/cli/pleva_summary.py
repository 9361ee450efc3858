"""`pleva summary`: generate a natural-language summary for a range."""

from __future__ import annotations

import click

from ..config.settings import ConfigError
from ..summary import create_summary_service
from ..trends import TimeRange
from .cli_common import CLIContext, ExitCode, bootstrap, handle_cli_error


@click.command("summary")
@click.option("--range", "range_label", type=click.Choice([r.label for r in TimeRange], case_sensitive=False))
@click.option("--test", "test_only", is_flag=True, help="Only test the connection to the summary service")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def cli(range_label: str | None, test_only: bool, json_output: bool, verbose: bool) -> int:
    """Summarize entries in a range and store the summary on the latest one."""
    ctx = CLIContext(json_output=json_output, verbose=verbose)
    try:
        settings, store = bootstrap(verbose)
        if not settings.summary_enabled:
            raise ConfigError("Summary is disabled. Set PLEVA_SUMMARY_ENABLED=true and an API key in .env")

        service = create_summary_service(settings)

        if test_only:
            reply = service.test_connection()
            ctx.output({"connected": True, "reply": reply} if json_output else "Connection successful")
            return int(ExitCode.SUCCESS)

        time_range = TimeRange.from_label(range_label or settings.default_range)
        result = service.summarize(store, time_range)

        if result is None:
            ctx.output(None if json_output else "No entries in the selected time range", meta={"range": time_range.label})
        elif json_output:
            ctx.output(
                {
                    "summary": result.text,
                    "entry_id": result.entry_id,
                    "entries": result.entries_count,
                    "generated_at": result.generated_at.isoformat(),
                }
            )
        else:
            ctx.output(result.text)
        return int(ExitCode.SUCCESS)

    except Exception as exc:
        return handle_cli_error(ctx, exc, "summary")
