"""Event date ranking by vendor availability weighted by priority tier."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, Optional, Sequence

import pandas as pd

from marchen.domain.constraints import PlanningLimits, validate_planning_limits
from marchen.domain.models import (
    CandidateRange,
    DayLike,
    ScoredDate,
    VendorAvailability,
    VendorPriority,
)
from marchen.repository.data_repository import DataRepository
from marchen.services.event_service import EventNotFoundError
from marchen.utils.config import Settings, get_settings
from marchen.utils.logger import get_logger


logger = get_logger(__name__)

MUST_HAVE_WEIGHT = 10
NICE_TO_HAVE_WEIGHT = 3
BACKUP_WEIGHT = 1

RANKING_COLUMNS = [
    "rank",
    "date",
    "score",
    "must_have_count",
    "must_have_total",
    "nice_to_have_count",
    "backup_count",
    "all_must_have_available",
]


class ScheduleValidationError(Exception):
    """Raised when a date ranking request is outside configured limits."""


def to_calendar_day(value: DayLike, tz: Optional[tzinfo] = None) -> date:
    """Drop time-of-day; aware datetimes are shifted into ``tz`` first."""
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def enumerate_days(start: date, end: date) -> list[date]:
    # Never steps past ``end``, so a range ending on date.max cannot overflow.
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def _count_available(
    vendor_days: Sequence[set[date]],
    day: date,
) -> int:
    return sum(1 for days in vendor_days if day in days)


def find_optimal_dates(
    vendors: Iterable[VendorAvailability],
    candidate_range: CandidateRange,
    tz: Optional[tzinfo] = None,
) -> list[ScoredDate]:
    """Score every day of ``candidate_range`` and rank the results.

    MUST_HAVE vendors weigh 10 points, NICE_TO_HAVE 3 and BACKUP 1. Days on
    which every MUST_HAVE vendor is available come first, then higher scores;
    the sort is stable so equal days stay in chronological order. With no
    MUST_HAVE vendors every day counts as fully satisfied. An inverted range
    yields an empty list.
    """
    days_by_priority: dict[VendorPriority, list[set[date]]] = {
        VendorPriority.MUST_HAVE: [],
        VendorPriority.NICE_TO_HAVE: [],
        VendorPriority.BACKUP: [],
    }
    for vendor in vendors:
        days_by_priority[VendorPriority(vendor.priority)].append(
            {to_calendar_day(value, tz) for value in vendor.available_dates}
        )
    must_have_days = days_by_priority[VendorPriority.MUST_HAVE]
    must_have_total = len(must_have_days)

    start = to_calendar_day(candidate_range.start, tz)
    end = to_calendar_day(candidate_range.end, tz)

    scored: list[ScoredDate] = []
    for day in enumerate_days(start, end):
        must_have_count = _count_available(must_have_days, day)
        nice_to_have_count = _count_available(days_by_priority[VendorPriority.NICE_TO_HAVE], day)
        backup_count = _count_available(days_by_priority[VendorPriority.BACKUP], day)
        scored.append(
            ScoredDate(
                date=day,
                score=(
                    must_have_count * MUST_HAVE_WEIGHT
                    + nice_to_have_count * NICE_TO_HAVE_WEIGHT
                    + backup_count * BACKUP_WEIGHT
                ),
                must_have_count=must_have_count,
                must_have_total=must_have_total,
                nice_to_have_count=nice_to_have_count,
                backup_count=backup_count,
                all_must_have_available=must_have_count == must_have_total,
            )
        )

    return sorted(
        scored,
        key=lambda item: (not item.all_must_have_available, -item.score),
    )


def scored_dates_to_frame(scored: list[ScoredDate]) -> pd.DataFrame:
    """Tabulate a ranking with a 1-based ``rank`` column for export."""
    frame = pd.DataFrame(
        [
            {
                "date": item.date.isoformat(),
                "score": item.score,
                "must_have_count": item.must_have_count,
                "must_have_total": item.must_have_total,
                "nice_to_have_count": item.nice_to_have_count,
                "backup_count": item.backup_count,
                "all_must_have_available": item.all_must_have_available,
            }
            for item in scored
        ],
        columns=RANKING_COLUMNS[1:],
    )
    frame.insert(0, "rank", range(1, len(frame) + 1))
    return frame


class ScheduleOptimizationService:
    """Loads vendor availability and ranks candidate event dates."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._limits = PlanningLimits(
            schedule_max_candidate_days=self._settings.schedule_max_candidate_days,
            staffing_default_max_vendors=self._settings.staffing_default_max_vendors,
            event_utc_offset_hours=self._settings.event_utc_offset_hours,
        )
        validate_planning_limits(self._limits)
        self._tz = timezone(timedelta(hours=self._limits.event_utc_offset_hours))

    def _validate_range(self, candidate_range: CandidateRange) -> None:
        start = to_calendar_day(candidate_range.start, self._tz)
        end = to_calendar_day(candidate_range.end, self._tz)
        span_days = (end - start).days + 1
        if span_days > self._limits.schedule_max_candidate_days:
            raise ScheduleValidationError(
                f"candidate range spans {span_days} days; "
                f"at most {self._limits.schedule_max_candidate_days} are allowed"
            )

    def rank_dates(
        self,
        *,
        vendors: list[VendorAvailability],
        start: DayLike,
        end: DayLike,
    ) -> list[ScoredDate]:
        candidate_range = CandidateRange(start=start, end=end)
        self._validate_range(candidate_range)
        ranking = find_optimal_dates(vendors, candidate_range, tz=self._tz)
        logger.info(
            "Date ranking completed | vendors=%s | candidate_days=%s | best=%s",
            len(vendors),
            len(ranking),
            ranking[0].date.isoformat() if ranking else None,
        )
        return ranking

    def rank_dates_for_event(
        self,
        *,
        event_id: int,
        start: DayLike,
        end: DayLike,
    ) -> list[ScoredDate]:
        if self._repository.get_event(event_id) is None:
            raise EventNotFoundError(f"Event {event_id} not found")
        vendors = [
            record.to_availability()
            for record in self._repository.list_event_vendors(event_id)
        ]
        logger.debug("Loaded vendor availability | event_id=%s | vendors=%s", event_id, len(vendors))
        return self.rank_dates(vendors=vendors, start=start, end=end)

    def export_ranking_csv(
        self,
        *,
        event_id: int,
        start: DayLike,
        end: DayLike,
    ) -> str:
        ranking = self.rank_dates_for_event(event_id=event_id, start=start, end=end)
        return scored_dates_to_frame(ranking).to_csv(index=False)
