"""Tests for candidate date ranking by vendor availability."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from marchen.domain.models import CandidateRange, VendorAvailability, VendorPriority
from marchen.repository.data_repository import DataRepository
from marchen.services.event_service import EventNotFoundError
from marchen.services.schedule_optimizer import (
    RANKING_COLUMNS,
    ScheduleOptimizationService,
    ScheduleValidationError,
    find_optimal_dates,
    scored_dates_to_frame,
)
from marchen.utils.config import get_settings


def _vendor(name: str, priority: VendorPriority, *days) -> VendorAvailability:
    return VendorAvailability(vendor_name=name, priority=priority, available_dates=list(days))


def _assert_sorted(ranking) -> None:
    for previous, current in zip(ranking, ranking[1:]):
        assert previous.all_must_have_available >= current.all_must_have_available
        if previous.all_must_have_available == current.all_must_have_available:
            assert previous.score >= current.score


def test_two_day_example_ranks_must_have_day_first() -> None:
    vendors = [
        _vendor("Bakery A", VendorPriority.MUST_HAVE, date(2026, 4, 1)),
        _vendor("Bakery B", VendorPriority.NICE_TO_HAVE, date(2026, 4, 1), date(2026, 4, 2)),
    ]

    ranking = find_optimal_dates(vendors, CandidateRange(date(2026, 4, 1), date(2026, 4, 2)))

    assert [item.date for item in ranking] == [date(2026, 4, 1), date(2026, 4, 2)]
    first, second = ranking
    assert (first.must_have_count, first.nice_to_have_count, first.score) == (1, 1, 13)
    assert first.all_must_have_available is True
    assert first.must_have_total == 1
    assert (second.must_have_count, second.nice_to_have_count, second.score) == (0, 1, 3)
    assert second.all_must_have_available is False


def test_inverted_range_returns_empty_list() -> None:
    vendors = [_vendor("Bakery A", VendorPriority.MUST_HAVE, date(2026, 4, 1))]
    assert find_optimal_dates(vendors, CandidateRange(date(2026, 4, 5), date(2026, 4, 1))) == []


def test_range_ending_on_last_representable_day() -> None:
    ranking = find_optimal_dates([], CandidateRange(date.max, date.max))
    assert [item.date for item in ranking] == [date.max]

    ranking = find_optimal_dates([], CandidateRange(date.max - timedelta(days=2), date.max))
    assert len(ranking) == 3


def test_one_entry_per_day_in_inclusive_range() -> None:
    ranking = find_optimal_dates([], CandidateRange(date(2026, 2, 25), date(2026, 3, 3)))
    assert len(ranking) == 7
    assert {item.date for item in ranking} == {
        date(2026, 2, 25) + timedelta(days=offset) for offset in range(7)
    }


def test_no_vendors_scores_zero_and_keeps_chronological_order() -> None:
    ranking = find_optimal_dates([], CandidateRange(date(2026, 4, 1), date(2026, 4, 4)))
    assert [item.score for item in ranking] == [0, 0, 0, 0]
    assert [item.date.day for item in ranking] == [1, 2, 3, 4]


def test_without_must_have_vendors_every_day_is_fully_satisfied() -> None:
    vendors = [
        _vendor("Bagel Corner", VendorPriority.NICE_TO_HAVE, date(2026, 4, 2)),
        _vendor("Sourdough Lab", VendorPriority.BACKUP, date(2026, 4, 3)),
    ]
    ranking = find_optimal_dates(vendors, CandidateRange(date(2026, 4, 1), date(2026, 4, 3)))

    assert all(item.all_must_have_available for item in ranking)
    assert all(item.must_have_total == 0 for item in ranking)
    assert [item.date.day for item in ranking] == [2, 3, 1]


def test_score_formula_and_sort_order_hold_for_mixed_tiers() -> None:
    vendors = [
        _vendor("Soleil", VendorPriority.MUST_HAVE, date(2026, 5, 1), date(2026, 5, 3)),
        _vendor("Kobo", VendorPriority.MUST_HAVE, date(2026, 5, 2), date(2026, 5, 3)),
        _vendor("Atelier", VendorPriority.NICE_TO_HAVE, date(2026, 5, 1), date(2026, 5, 2)),
        _vendor("Melonpan", VendorPriority.NICE_TO_HAVE, date(2026, 5, 1)),
        _vendor("Curry Pan", VendorPriority.BACKUP, date(2026, 5, 4)),
        _vendor("Lab", VendorPriority.BACKUP, date(2026, 5, 3), date(2026, 5, 4)),
    ]
    ranking = find_optimal_dates(vendors, CandidateRange(date(2026, 5, 1), date(2026, 5, 5)))

    for item in ranking:
        assert item.score == (
            item.must_have_count * 10 + item.nice_to_have_count * 3 + item.backup_count
        )
    _assert_sorted(ranking)
    assert ranking[0].date == date(2026, 5, 3)
    assert ranking[0].all_must_have_available is True
    # 05-01 (10 + 6) outranks 05-02 (10 + 3) among partially covered days.
    assert [item.date.day for item in ranking[1:3]] == [1, 2]


def test_fully_covered_day_beats_higher_scoring_partial_day() -> None:
    vendors = [
        _vendor("Soleil", VendorPriority.MUST_HAVE, date(2026, 6, 1), date(2026, 6, 2)),
        _vendor("Kobo", VendorPriority.MUST_HAVE, date(2026, 6, 2)),
    ] + [
        _vendor(f"Nice {index}", VendorPriority.NICE_TO_HAVE, date(2026, 6, 1))
        for index in range(10)
    ]
    ranking = find_optimal_dates(vendors, CandidateRange(date(2026, 6, 1), date(2026, 6, 2)))

    assert ranking[0].date == date(2026, 6, 2)
    assert ranking[0].score == 20
    assert ranking[1].score == 40


def test_time_of_day_is_ignored() -> None:
    vendors = [
        _vendor("Soleil", VendorPriority.MUST_HAVE, datetime(2026, 4, 1, 23, 30)),
        _vendor("Kobo", VendorPriority.BACKUP, datetime(2026, 4, 2, 0, 5)),
    ]
    ranking = find_optimal_dates(
        vendors,
        CandidateRange(datetime(2026, 4, 1, 18, 0), datetime(2026, 4, 2, 6, 0)),
    )

    by_day = {item.date: item for item in ranking}
    assert set(by_day) == {date(2026, 4, 1), date(2026, 4, 2)}
    assert by_day[date(2026, 4, 1)].must_have_count == 1
    assert by_day[date(2026, 4, 2)].backup_count == 1


def test_aware_datetimes_use_requested_time_zone() -> None:
    jst = timezone(timedelta(hours=9))
    vendors = [
        _vendor(
            "Soleil",
            VendorPriority.MUST_HAVE,
            datetime(2026, 3, 31, 20, 0, tzinfo=timezone.utc),
        )
    ]
    ranking = find_optimal_dates(
        vendors,
        CandidateRange(date(2026, 3, 31), date(2026, 4, 1)),
        tz=jst,
    )
    assert ranking[0].date == date(2026, 4, 1)
    assert ranking[0].must_have_count == 1


def test_duplicate_availability_counts_vendor_once() -> None:
    vendors = [_vendor("Soleil", VendorPriority.NICE_TO_HAVE, date(2026, 4, 1), date(2026, 4, 1))]
    ranking = find_optimal_dates(vendors, CandidateRange(date(2026, 4, 1), date(2026, 4, 1)))
    assert ranking[0].nice_to_have_count == 1
    assert ranking[0].score == 3


def test_scored_dates_frame_has_rank_column() -> None:
    vendors = [_vendor("Bakery A", VendorPriority.MUST_HAVE, date(2026, 4, 2))]
    ranking = find_optimal_dates(vendors, CandidateRange(date(2026, 4, 1), date(2026, 4, 3)))

    frame = scored_dates_to_frame(ranking)

    assert list(frame.columns) == RANKING_COLUMNS
    assert frame["rank"].tolist() == [1, 2, 3]
    assert frame.iloc[0]["date"] == "2026-04-02"
    assert scored_dates_to_frame([]).empty


def _build_service(tmp_path, **overrides) -> tuple[ScheduleOptimizationService, DataRepository]:
    get_settings.cache_clear()
    settings = replace(get_settings(), database_path=tmp_path / "schedule.db", **overrides)
    repository = DataRepository(settings)
    repository.initialize_database()
    return ScheduleOptimizationService(repository=repository, settings=settings), repository


def test_service_rejects_range_longer_than_limit(tmp_path) -> None:
    service, _ = _build_service(tmp_path, schedule_max_candidate_days=7)
    with pytest.raises(ScheduleValidationError):
        service.rank_dates(vendors=[], start=date(2026, 4, 1), end=date(2026, 4, 8))
    assert len(service.rank_dates(vendors=[], start=date(2026, 4, 1), end=date(2026, 4, 7))) == 7


def test_service_returns_empty_ranking_for_inverted_range(tmp_path) -> None:
    service, _ = _build_service(tmp_path)
    assert service.rank_dates(vendors=[], start=date(2026, 4, 9), end=date(2026, 4, 1)) == []


def test_service_ranks_stored_event_availability(tmp_path) -> None:
    service, repository = _build_service(tmp_path)
    event_id = repository.create_event(title="Autumn Marché", max_vendors=12)
    soleil = repository.get_or_create_vendor("Boulangerie Soleil")
    bagel = repository.get_or_create_vendor("Bagel Corner")
    repository.upsert_event_vendor(event_id, soleil, VendorPriority.MUST_HAVE, ["2026-10-10"])
    repository.upsert_event_vendor(
        event_id, bagel, VendorPriority.NICE_TO_HAVE, ["2026-10-10", "2026-10-11"]
    )

    ranking = service.rank_dates_for_event(
        event_id=event_id,
        start=date(2026, 10, 10),
        end=date(2026, 10, 11),
    )

    assert [item.date for item in ranking] == [date(2026, 10, 10), date(2026, 10, 11)]
    assert ranking[0].score == 13

    csv_text = service.export_ranking_csv(
        event_id=event_id,
        start=date(2026, 10, 10),
        end=date(2026, 10, 11),
    )
    lines = csv_text.strip().splitlines()
    assert lines[0] == ",".join(RANKING_COLUMNS)
    assert len(lines) == 3


def test_service_raises_for_unknown_event(tmp_path) -> None:
    service, _ = _build_service(tmp_path)
    with pytest.raises(EventNotFoundError):
        service.rank_dates_for_event(event_id=999, start=date(2026, 4, 1), end=date(2026, 4, 2))
