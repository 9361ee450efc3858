"""Natural-language summaries of diary entries.

Entries in the selected range are formatted into a prompt and sent to an LLM
adapter. The returned text is stored on the most recent entry of the range.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Iterable

from .adapters.llm import LLMAdapter, Message, OpenAIAdapter
from .core.time import get_current_time
from .diary.models import DiaryEntry, Region, severity_label
from .observability import get_logger, timing_context
from .trends.periods import TimeRange, window_start

if TYPE_CHECKING:
    from .config.settings import Settings
    from .diary.store import EntryStore

__all__ = [
    "SYSTEM_PROMPT",
    "SummaryResult",
    "SummaryService",
    "build_summary_prompt",
    "create_summary_service",
    "entries_in_range",
    "format_entries_for_prompt",
]

log = get_logger("summary")

SYSTEM_PROMPT = (
    "You are a medical diary analysis assistant specialized in PLEVA "
    "(Pityriasis Lichenoides et Varioliformis Acuta)."
)


@dataclass(frozen=True)
class SummaryResult:
    """Generated summary and the entry it was stored on."""

    text: str
    entry_id: str
    entries_count: int
    generated_at: datetime


def format_entries_for_prompt(entries: Iterable[DiaryEntry]) -> str:
    blocks = []
    for entry in entries:
        affected = ", ".join(
            f"{region.label} {entry.count(region)}" for region in Region if entry.count(region) > 0
        )
        blocks.append(
            "\n".join(
                [
                    f"Date: {entry.timestamp.strftime('%Y-%m-%d %H:%M')}",
                    f"Location: {entry.location}",
                    f"Severity: {entry.severity} ({severity_label(entry.severity)})",
                    f"Papules: {entry.metric_value} total" + (f" ({affected})" if affected else ""),
                    f"Photos: {len(entry.photos)} photos attached",
                    f"Notes: {entry.notes}",
                ]
            )
        )
    return "\n\n".join(blocks)


def build_summary_prompt(entries: Iterable[DiaryEntry]) -> str:
    """User prompt asking for a concise summary of ``entries``."""
    return (
        "Analyze these PLEVA diary entries and provide a concise weekly summary focusing on:\n"
        "1. Overall trend in severity\n"
        "2. Most affected areas\n"
        "3. Key observations or patterns\n"
        "4. Recommendations based on the patterns\n\n"
        "Entries:\n"
        f"{format_entries_for_prompt(entries)}"
    )


def entries_in_range(
    entries: Iterable[DiaryEntry],
    time_range: TimeRange,
    reference_now: datetime,
    tz: str | None = None,
) -> list[DiaryEntry]:
    """Entries with ``timestamp >= window start``, newest first."""
    lower = window_start(reference_now, time_range.lookback_days, tz)
    selected = [entry for entry in entries if entry.timestamp >= lower]
    return sorted(selected, key=lambda e: e.timestamp, reverse=True)


class SummaryService:
    """Generates and stores summaries through an LLM adapter.

    Example:
        >>> service = SummaryService(OpenAIAdapter(api_key="sk-..."))
        >>> result = service.summarize(store, TimeRange.WEEK)
        >>> print(result.text if result else "No entries")
    """

    def __init__(
        self,
        adapter: LLMAdapter,
        *,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float = 30.0,
        tz: str | None = None,
    ) -> None:
        self.adapter = adapter
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.tz = tz

    def summarize(
        self,
        store: EntryStore,
        time_range: TimeRange,
        reference_now: datetime | None = None,
    ) -> SummaryResult | None:
        """Summarize the range and store the text on its latest entry.

        Returns None, without calling the model, when the range has no entries.

        Raises
        ------
        LLMError
            If the model call fails; nothing is stored in that case
        """
        now = reference_now or get_current_time(self.tz)
        selected = entries_in_range(store.fetch_entries(), time_range, now, self.tz)
        if not selected:
            log.info("No entries found for selected time range", range=time_range.label)
            return None

        messages = [
            Message(role="system", content=SYSTEM_PROMPT),
            Message(role="user", content=build_summary_prompt(selected)),
        ]
        with timing_context("generate_summary", component="summary", entries=len(selected)) as ctx:
            response = self.adapter.chat(
                messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
            )
            ctx["usage"] = response.usage

        latest = selected[0]
        generated_at = get_current_time(self.tz)
        store.update(latest.id, weekly_summary=response.content, summary_date=generated_at)
        log.info("Summary stored", entry_id=latest.id, entries=len(selected))

        return SummaryResult(
            text=response.content,
            entry_id=latest.id,
            entries_count=len(selected),
            generated_at=generated_at,
        )

    def test_connection(self) -> str:
        """Send a short message and return the reply.

        Raises
        ------
        LLMError
            If the endpoint cannot be reached or rejects the request
        """
        response = self.adapter.chat(
            [
                Message(role="system", content="You are a helpful assistant."),
                Message(role="user", content="Hello, this is a test message."),
            ],
            temperature=self.temperature,
            max_tokens=50,
            timeout=self.timeout,
        )
        return response.content


def create_summary_service(settings: Settings) -> SummaryService:
    """Build a summary service from settings."""
    adapter = OpenAIAdapter(
        settings.openai_api_key,
        endpoint=settings.openai_endpoint,
        deployment=settings.openai_deployment,
        default_model=settings.openai_default_model,
    )
    return SummaryService(
        adapter,
        temperature=settings.summary_temperature,
        max_tokens=settings.summary_max_tokens,
        timeout=settings.summary_timeout,
        tz=settings.default_timezone,
    )
