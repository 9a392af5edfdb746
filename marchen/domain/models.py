"""Domain models for event date ranking and staffing estimation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union


DayLike = Union[date, datetime]


class VendorPriority(str, Enum):
    MUST_HAVE = "MUST_HAVE"
    NICE_TO_HAVE = "NICE_TO_HAVE"
    BACKUP = "BACKUP"


class StaffingRole(str, Enum):
    RECEPTION = "Reception"
    GUIDANCE = "Guidance"
    SETUP_TEARDOWN = "Setup/Teardown"
    HEADQUARTERS = "Headquarters"
    FIRST_AID = "First Aid"
    PARKING = "Parking"


class EventStatus(str, Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class VendorAvailability:
    vendor_name: str
    priority: VendorPriority
    available_dates: list[DayLike] = field(default_factory=list)


@dataclass(frozen=True)
class CandidateRange:
    start: DayLike
    end: DayLike


@dataclass(frozen=True)
class ScoredDate:
    date: date
    score: int
    must_have_count: int
    must_have_total: int
    nice_to_have_count: int
    backup_count: int
    all_must_have_available: bool


@dataclass(frozen=True)
class StaffingInput:
    max_vendors: float
    area_sq_m: Optional[float] = None
    expected_visitors: Optional[float] = None
    duration_hours: Optional[float] = None


@dataclass(frozen=True)
class StaffingRecommendation:
    role: StaffingRole
    headcount: int
    rationale: str


@dataclass(frozen=True)
class StaffingPlan:
    # Defaults already resolved: visitors and duration are always set.
    staffing_input: StaffingInput
    recommendations: list[StaffingRecommendation]

    @property
    def total_headcount(self) -> int:
        return sum(item.headcount for item in self.recommendations)


@dataclass(frozen=True)
class Event:
    event_id: int
    title: str
    location: Optional[str]
    event_date: Optional[str]
    max_vendors: Optional[int]
    area_sq_m: Optional[float]
    expected_visitors: Optional[int]
    duration_hours: Optional[float]
    status: EventStatus


@dataclass(frozen=True)
class EventVendorRecord:
    vendor_id: int
    vendor_name: str
    priority: VendorPriority
    available_dates: list[str]

    def to_availability(self) -> VendorAvailability:
        return VendorAvailability(
            vendor_name=self.vendor_name,
            priority=self.priority,
            available_dates=[date.fromisoformat(value) for value in self.available_dates],
        )
