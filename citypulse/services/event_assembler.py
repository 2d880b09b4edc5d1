"""
Event Assembler - merges candidate events with summarizer output.

CONCURRENCY:
- One summarizer call per candidate, all launched together and joined
- Sync summarizers run in worker threads, async ones are awaited directly
- Each call may carry a deadline; a slow or failing call only degrades
  its own candidate

FALLBACK POLICY:
- Raise, timeout, error result or unusable shape
    -> "Clustered event: {category} in {area}", severity "Medium"
- Result without a summary -> templated summary, severity kept if valid
- Output is always 1:1 with the input candidates, in the same order
"""

from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union
import asyncio
import inspect
import logging

from citypulse.core.settings import settings
from citypulse.models.event import DEFAULT_SEVERITY, CandidateEvent, SynthesizedEvent
from citypulse.models.report import Report
from citypulse.services.grouping import to_instant
from citypulse.services.summarizer.base import Summarizer, SummaryResult, normalize_severity

logger = logging.getLogger(__name__)


SummarizerLike = Union[Summarizer, Callable[..., Any]]

# Marks "no deadline given"; None is a real value meaning "no deadline"
DEFAULT_DEADLINE: Any = object()


def resolve_deadline(summarizer: SummarizerLike, timeout_seconds: Any = DEFAULT_DEADLINE) -> Optional[float]:
    """
    Per-call deadline for ``summarizer``.

    An explicit ``timeout_seconds`` (None included) wins. Otherwise
    SUMMARIZER_DEADLINE_SECONDS applies when set, and failing that the
    summarizer's own get_timeout_seconds(), so a registry always has time
    to reach its last fallback. Plain callables get no deadline.
    """
    if timeout_seconds is not DEFAULT_DEADLINE:
        return timeout_seconds
    if settings.SUMMARIZER_DEADLINE_SECONDS is not None:
        return settings.SUMMARIZER_DEADLINE_SECONDS
    get_timeout = getattr(summarizer, "get_timeout_seconds", None)
    return get_timeout() if callable(get_timeout) else None


def fallback_summary(category: str, area: str) -> str:
    return f"Clustered event: {category} in {area}"


def join_descriptions(reports: Sequence[Report], separator: str = " ") -> str:
    """Order-preserving join of report descriptions."""
    return separator.join(report.description for report in reports)


def _coerce_result(raw: Any) -> Optional[SummaryResult]:
    """Accept SummaryResult or a mapping; None for errors and unknown shapes."""
    if isinstance(raw, SummaryResult):
        if raw.error:
            logger.debug(f"Summarizer reported an error: {raw.error}")
            return None
        summary, severity, top_issues = raw.summary, raw.severity, raw.top_issues
    elif isinstance(raw, Mapping):
        if raw.get("error"):
            return None
        summary = raw.get("summary")
        severity = raw.get("severity")
        top_issues = raw.get("topIssues", raw.get("top_issues"))
    else:
        logger.debug(f"Summarizer returned an unsupported shape: {type(raw).__name__}")
        return None

    if not isinstance(top_issues, (list, tuple)):
        top_issues = []

    return SummaryResult(
        summary=summary if isinstance(summary, str) else "",
        severity=normalize_severity(severity) or DEFAULT_SEVERITY,
        top_issues=[str(issue) for issue in top_issues],
        model_name=getattr(raw, "model_name", "") if isinstance(raw, SummaryResult) else "",
    )


async def _invoke(summarizer: SummarizerLike, text: str, category: Optional[str], area: Optional[str]) -> Any:
    call = getattr(summarizer, "summarize", summarizer)
    if inspect.iscoroutinefunction(call):
        return await call(text, category, area)

    result = await asyncio.to_thread(call, text, category, area)
    if inspect.isawaitable(result):
        result = await result
    return result


async def request_summary(
    summarizer: SummarizerLike,
    text: str,
    category: Optional[str] = None,
    area: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> Optional[SummaryResult]:
    """
    Call a summarizer once, isolating every failure.

    Returns:
        Normalized SummaryResult, or None if the call raised, timed out,
        reported an error or returned something unusable
    """
    try:
        raw = await asyncio.wait_for(_invoke(summarizer, text, category, area), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(f"⚠️ Summarizer timed out after {timeout_seconds}s ({category} / {area})")
        return None
    except Exception as e:
        logger.warning(f"⚠️ Summarizer failed ({category} / {area}): {e}")
        return None

    return _coerce_result(raw)


class EventAssembler:
    """
    Turns CandidateEvents into SynthesizedEvents using an injected summarizer.

    Has no side effects beyond calling the summarizer.
    """

    def __init__(self, summarizer: SummarizerLike, timeout_seconds: Optional[float] = None):
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self.summarizer = summarizer
        self.timeout_seconds = timeout_seconds

    async def assemble(
        self,
        candidates: Sequence[CandidateEvent],
        now: Optional[datetime] = None,
    ) -> List[SynthesizedEvent]:
        """
        Summarize every candidate concurrently and build the final events.

        Args:
            candidates: Candidates in SpikeDetector order
            now: Timestamp stamped on every event (defaults to current UTC time)

        Returns:
            One SynthesizedEvent per candidate, same order
        """
        instant = to_instant(now) if now is not None else datetime.now(timezone.utc)
        if not candidates:
            return []

        events = await asyncio.gather(*(self._assemble_one(candidate, instant) for candidate in candidates))
        return list(events)

    async def _assemble_one(self, candidate: CandidateEvent, now: datetime) -> SynthesizedEvent:
        area = candidate.location_key
        category = candidate.category_key
        text = join_descriptions(candidate.reports)

        result = await request_summary(self.summarizer, text, category, area, self.timeout_seconds)

        if result is None:
            summary, severity, top_issues = fallback_summary(category, area), DEFAULT_SEVERITY, []
        else:
            summary = result.summary.strip() or fallback_summary(category, area)
            severity = result.severity
            top_issues = result.top_issues

        return SynthesizedEvent(
            area=area,
            category=category,
            summary=summary,
            count=candidate.count,
            severity=severity,
            timestamp=now,
            top_issues=top_issues,
        )


async def assemble(
    candidates: Sequence[CandidateEvent],
    summarizer: SummarizerLike,
    now: Optional[datetime] = None,
    timeout_seconds: Optional[float] = None,
) -> List[SynthesizedEvent]:
    """Functional shorthand for EventAssembler(summarizer).assemble(candidates)."""
    return await EventAssembler(summarizer, timeout_seconds).assemble(candidates, now)
