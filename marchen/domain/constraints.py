"""Domain-level validation rules for planning requests."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlanningLimits:
    schedule_max_candidate_days: int
    staffing_default_max_vendors: int
    event_utc_offset_hours: float


def validate_planning_limits(limits: PlanningLimits) -> None:
    if limits.schedule_max_candidate_days <= 0:
        raise ValueError("schedule_max_candidate_days must be > 0")
    if limits.staffing_default_max_vendors < 0:
        raise ValueError("staffing_default_max_vendors must be >= 0")
    if not -24.0 < limits.event_utc_offset_hours < 24.0:
        raise ValueError("event_utc_offset_hours must be strictly between -24 and 24")
