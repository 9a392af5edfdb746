"""Tests for role-based staffing estimates."""

from __future__ import annotations

import math
from dataclasses import replace

import pytest

from marchen.domain.models import StaffingInput, StaffingRole
from marchen.repository.data_repository import DataRepository
from marchen.services.event_service import EventNotFoundError
from marchen.services.staffing_calculator import StaffingPlanService, calculate_staffing
from marchen.utils.config import get_settings


BASELINE_ROLES = [
    StaffingRole.RECEPTION,
    StaffingRole.GUIDANCE,
    StaffingRole.SETUP_TEARDOWN,
    StaffingRole.HEADQUARTERS,
    StaffingRole.FIRST_AID,
]


def _headcounts(recommendations) -> dict[StaffingRole, int]:
    return {item.role: item.headcount for item in recommendations}


def test_thirty_vendors_with_defaults() -> None:
    recommendations = calculate_staffing(StaffingInput(max_vendors=30))

    assert [item.role for item in recommendations] == BASELINE_ROLES
    assert _headcounts(recommendations) == {
        StaffingRole.RECEPTION: 2,
        StaffingRole.GUIDANCE: 15,
        StaffingRole.SETUP_TEARDOWN: 6,
        StaffingRole.HEADQUARTERS: 2,
        StaffingRole.FIRST_AID: 2,
    }
    assert "30 vendors" in recommendations[0].rationale
    assert "3000 visitors" in recommendations[1].rationale


def test_long_event_scales_every_role_and_notes_shift_relief() -> None:
    base = calculate_staffing(StaffingInput(max_vendors=10))
    long_event = calculate_staffing(StaffingInput(max_vendors=10, duration_hours=10))

    assert _headcounts(long_event)[StaffingRole.RECEPTION] == 3
    for before, after in zip(base, long_event):
        assert after.role == before.role
        assert after.headcount == math.ceil(before.headcount * 1.5)
        assert after.rationale.startswith(before.rationale)
        assert "shift relief" in after.rationale
        assert "10-hour" in after.rationale


def test_eight_hour_event_is_not_scaled() -> None:
    base = calculate_staffing(StaffingInput(max_vendors=10))
    eight_hours = calculate_staffing(StaffingInput(max_vendors=10, duration_hours=8))
    assert eight_hours == base


def test_large_venue_adds_parking_role() -> None:
    recommendations = calculate_staffing(StaffingInput(max_vendors=5, area_sq_m=2500))

    assert recommendations[-1].role is StaffingRole.PARKING
    assert recommendations[-1].headcount == 2
    assert "2500 m²" in recommendations[-1].rationale


def test_small_or_missing_area_has_no_parking_role() -> None:
    for area in (None, 0, 1000):
        recommendations = calculate_staffing(StaffingInput(max_vendors=5, area_sq_m=area))
        assert StaffingRole.PARKING not in _headcounts(recommendations)


def test_parking_role_is_scaled_for_long_events() -> None:
    recommendations = calculate_staffing(
        StaffingInput(max_vendors=5, area_sq_m=4500, duration_hours=9)
    )
    # ceil(4500 / 2000) = 3, then ceil(3 * 1.5) = 5.
    assert _headcounts(recommendations)[StaffingRole.PARKING] == 5
    assert "shift relief" in recommendations[-1].rationale


def test_explicit_visitor_count_drives_guidance_and_first_aid() -> None:
    recommendations = calculate_staffing(StaffingInput(max_vendors=40, expected_visitors=500))
    headcounts = _headcounts(recommendations)

    assert headcounts[StaffingRole.GUIDANCE] == 3
    assert headcounts[StaffingRole.FIRST_AID] == 1
    assert headcounts[StaffingRole.RECEPTION] == 3
    assert headcounts[StaffingRole.SETUP_TEARDOWN] == 8


def test_zero_and_negative_vendor_counts_fall_back_to_minimums() -> None:
    for vendors in (0, -5):
        headcounts = _headcounts(calculate_staffing(StaffingInput(max_vendors=vendors)))
        assert headcounts == {
            StaffingRole.RECEPTION: 2,
            StaffingRole.GUIDANCE: 2,
            StaffingRole.SETUP_TEARDOWN: 4,
            StaffingRole.HEADQUARTERS: 2,
            StaffingRole.FIRST_AID: 1,
        }


def test_nan_vendor_count_yields_nan_headcounts_without_raising() -> None:
    headcounts = _headcounts(calculate_staffing(StaffingInput(max_vendors=float("nan"))))

    for role in BASELINE_ROLES[:4]:
        assert math.isnan(headcounts[role])
    assert headcounts[StaffingRole.FIRST_AID] == 1


def test_infinite_inputs_pass_through_without_raising() -> None:
    recommendations = calculate_staffing(
        StaffingInput(max_vendors=float("inf"), area_sq_m=float("inf"), duration_hours=12)
    )
    headcounts = _headcounts(recommendations)

    assert headcounts[StaffingRole.RECEPTION] == math.inf
    assert headcounts[StaffingRole.PARKING] == math.inf
    # ceil(2 * 1.5) = 3
    assert headcounts[StaffingRole.FIRST_AID] == 3


def _build_service(tmp_path) -> tuple[StaffingPlanService, DataRepository]:
    get_settings.cache_clear()
    settings = replace(get_settings(), database_path=tmp_path / "staffing.db")
    repository = DataRepository(settings)
    repository.initialize_database()
    return StaffingPlanService(repository=repository, settings=settings), repository


def test_plan_totals_headcount(tmp_path) -> None:
    service, _ = _build_service(tmp_path)
    plan = service.plan(StaffingInput(max_vendors=30))
    assert plan.total_headcount == 27


def test_event_without_capacity_defaults_to_ten_vendors(tmp_path) -> None:
    service, repository = _build_service(tmp_path)
    event_id = repository.create_event(title="Pop-up Marché")

    plan = service.plan_for_event(event_id)

    assert plan.staffing_input.max_vendors == 10
    assert plan.staffing_input.expected_visitors == 1000
    assert plan.staffing_input.duration_hours == 6
    assert plan.total_headcount == 15


def test_event_plan_uses_stored_scale(tmp_path) -> None:
    service, repository = _build_service(tmp_path)
    event_id = repository.create_event(
        title="Harbour Marché",
        max_vendors=30,
        area_sq_m=2500.0,
        duration_hours=6.0,
    )

    plan = service.plan_for_event(event_id)

    assert _headcounts(plan.recommendations)[StaffingRole.PARKING] == 2
    assert plan.total_headcount == 29


def test_plan_for_unknown_event_raises(tmp_path) -> None:
    service, _ = _build_service(tmp_path)
    with pytest.raises(EventNotFoundError):
        service.plan_for_event(404)
