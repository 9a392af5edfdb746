"""Staffing headcount estimates per operational role."""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional

from marchen.domain.models import StaffingInput, StaffingPlan, StaffingRecommendation, StaffingRole
from marchen.repository.data_repository import DataRepository
from marchen.services.event_service import EventNotFoundError
from marchen.utils.config import Settings, get_settings
from marchen.utils.logger import get_logger


logger = get_logger(__name__)

VISITORS_PER_VENDOR = 100
DEFAULT_DURATION_HOURS = 6
LONG_EVENT_THRESHOLD_HOURS = 8
LONG_EVENT_MULTIPLIER = 1.5
PARKING_AREA_THRESHOLD_SQ_M = 1000
PARKING_SQ_M_PER_STAFF = 2000


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _headcount(value: float, minimum: int = 0) -> float:
    """Round up and apply ``minimum``; NaN and infinities pass through unchanged."""
    if not math.isfinite(value):
        return value
    return max(minimum, math.ceil(value))


def resolve_staffing_input(staffing_input: StaffingInput) -> StaffingInput:
    """Fill in the default visitor count and duration."""
    vendors = staffing_input.max_vendors
    return replace(
        staffing_input,
        expected_visitors=(
            staffing_input.expected_visitors
            if staffing_input.expected_visitors is not None
            else vendors * VISITORS_PER_VENDOR
        ),
        duration_hours=(
            staffing_input.duration_hours
            if staffing_input.duration_hours is not None
            else DEFAULT_DURATION_HOURS
        ),
    )


def calculate_staffing(staffing_input: StaffingInput) -> list[StaffingRecommendation]:
    """Recommend headcounts for the five baseline roles plus optional parking.

    Inputs are not validated; zero or negative vendor counts fall back to the
    per-role minimums and non-finite numbers come back as non-finite
    headcounts. Events longer than eight hours get every headcount scaled by
    1.5 (rounded up) for shift relief.
    """
    resolved = resolve_staffing_input(staffing_input)
    vendors = resolved.max_vendors
    visitors = resolved.expected_visitors
    hours = resolved.duration_hours
    vendors_text = _format_number(vendors)
    visitors_text = _format_number(visitors)

    reception = _headcount(vendors / 15, minimum=2)
    guidance = _headcount(visitors / 200, minimum=2)
    setup = _headcount(vendors / 5, minimum=4)
    recommendations = [
        StaffingRecommendation(
            role=StaffingRole.RECEPTION,
            headcount=reception,
            rationale=f"{reception} reception staff for {vendors_text} vendors",
        ),
        StaffingRecommendation(
            role=StaffingRole.GUIDANCE,
            headcount=guidance,
            rationale=f"{guidance} guides for an expected {visitors_text} visitors",
        ),
        StaffingRecommendation(
            role=StaffingRole.SETUP_TEARDOWN,
            headcount=setup,
            rationale=f"{setup} staff to set up and tear down tents for {vendors_text} vendors",
        ),
        StaffingRecommendation(
            role=StaffingRole.HEADQUARTERS,
            headcount=_headcount(vendors / 20, minimum=2),
            rationale="Overall event management and emergency response",
        ),
        StaffingRecommendation(
            role=StaffingRole.FIRST_AID,
            headcount=2 if visitors > 500 else 1,
            rationale=f"First aid coverage for around {visitors_text} visitors",
        ),
    ]

    area = staffing_input.area_sq_m
    if area is not None and area > PARKING_AREA_THRESHOLD_SQ_M:
        recommendations.append(
            StaffingRecommendation(
                role=StaffingRole.PARKING,
                headcount=_headcount(area / PARKING_SQ_M_PER_STAFF),
                rationale=f"Parking management for a {_format_number(area)} m² venue",
            )
        )

    if hours > LONG_EVENT_THRESHOLD_HOURS:
        note = f" (includes shift relief for a {_format_number(hours)}-hour event)"
        recommendations = [
            replace(
                item,
                headcount=_headcount(item.headcount * LONG_EVENT_MULTIPLIER),
                rationale=f"{item.rationale}{note}",
            )
            for item in recommendations
        ]

    return recommendations


class StaffingPlanService:
    """Builds staffing plans from ad-hoc input or stored events."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def plan(self, staffing_input: StaffingInput) -> StaffingPlan:
        plan = StaffingPlan(
            staffing_input=resolve_staffing_input(staffing_input),
            recommendations=calculate_staffing(staffing_input),
        )
        logger.info(
            "Staffing plan computed | max_vendors=%s | roles=%s | total_headcount=%s",
            staffing_input.max_vendors,
            len(plan.recommendations),
            plan.total_headcount,
        )
        return plan

    def plan_for_event(self, event_id: int) -> StaffingPlan:
        event = self._repository.get_event(event_id)
        if event is None:
            raise EventNotFoundError(f"Event {event_id} not found")
        max_vendors = (
            event.max_vendors
            if event.max_vendors is not None
            else self._settings.staffing_default_max_vendors
        )
        return self.plan(
            StaffingInput(
                max_vendors=max_vendors,
                area_sq_m=event.area_sq_m,
                expected_visitors=event.expected_visitors,
                duration_hours=event.duration_hours,
            )
        )
