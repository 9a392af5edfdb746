"""Request/response DTOs shared by the HTTP controllers."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from marchen.domain.models import (
    Event,
    EventStatus,
    EventVendorRecord,
    ScoredDate,
    StaffingPlan,
    VendorAvailability,
    VendorPriority,
)


class VendorAvailabilityPayload(BaseModel):
    vendor_name: str = Field(min_length=1)
    priority: VendorPriority
    available_dates: list[date] = Field(default_factory=list)

    def to_domain(self) -> VendorAvailability:
        return VendorAvailability(
            vendor_name=self.vendor_name,
            priority=self.priority,
            available_dates=list(self.available_dates),
        )


class OptimalDatesRequest(BaseModel):
    """Ad-hoc ranking input; ``start`` after ``end`` yields an empty ranking."""

    vendors: list[VendorAvailabilityPayload] = Field(default_factory=list)
    start: date
    end: date


class ScoredDateResponse(BaseModel):
    date: date
    score: int = Field(ge=0)
    must_have_count: int = Field(ge=0)
    must_have_total: int = Field(ge=0)
    nice_to_have_count: int = Field(ge=0)
    backup_count: int = Field(ge=0)
    all_must_have_available: bool

    @classmethod
    def from_domain(cls, item: ScoredDate) -> "ScoredDateResponse":
        return cls(
            date=item.date,
            score=item.score,
            must_have_count=item.must_have_count,
            must_have_total=item.must_have_total,
            nice_to_have_count=item.nice_to_have_count,
            backup_count=item.backup_count,
            all_must_have_available=item.all_must_have_available,
        )


class OptimalDatesResponse(BaseModel):
    ranking: list[ScoredDateResponse]


class StaffingRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    max_vendors: int = Field(ge=0)
    area_sq_m: Optional[float] = Field(default=None, ge=0.0)
    expected_visitors: Optional[int] = Field(default=None, ge=0)
    duration_hours: Optional[float] = Field(default=None, gt=0.0)


class StaffingRecommendationResponse(BaseModel):
    role: str
    headcount: int
    rationale: str


class StaffingPlanResponse(BaseModel):
    max_vendors: float
    area_sq_m: Optional[float] = None
    expected_visitors: Optional[float] = None
    duration_hours: Optional[float] = None
    recommendations: list[StaffingRecommendationResponse]
    total_headcount: int

    @classmethod
    def from_domain(cls, plan: StaffingPlan) -> "StaffingPlanResponse":
        return cls(
            max_vendors=plan.staffing_input.max_vendors,
            area_sq_m=plan.staffing_input.area_sq_m,
            expected_visitors=plan.staffing_input.expected_visitors,
            duration_hours=plan.staffing_input.duration_hours,
            recommendations=[
                StaffingRecommendationResponse(
                    role=item.role.value,
                    headcount=item.headcount,
                    rationale=item.rationale,
                )
                for item in plan.recommendations
            ],
            total_headcount=plan.total_headcount,
        )


class EventCreateRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    title: str = Field(min_length=1)
    location: Optional[str] = None
    event_date: Optional[date] = None
    max_vendors: Optional[int] = Field(default=None, ge=0)
    area_sq_m: Optional[float] = Field(default=None, ge=0.0)
    expected_visitors: Optional[int] = Field(default=None, ge=0)
    duration_hours: Optional[float] = Field(default=None, gt=0.0)


class EventUpdateRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    title: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = None
    event_date: Optional[date] = None
    max_vendors: Optional[int] = Field(default=None, ge=0)
    area_sq_m: Optional[float] = Field(default=None, ge=0.0)
    expected_visitors: Optional[int] = Field(default=None, ge=0)
    duration_hours: Optional[float] = Field(default=None, gt=0.0)


class EventResponse(BaseModel):
    event_id: int = Field(gt=0)
    title: str
    location: Optional[str] = None
    event_date: Optional[date] = None
    max_vendors: Optional[int] = None
    area_sq_m: Optional[float] = None
    expected_visitors: Optional[int] = None
    duration_hours: Optional[float] = None
    status: EventStatus

    @classmethod
    def from_domain(cls, event: Event) -> "EventResponse":
        return cls(
            event_id=event.event_id,
            title=event.title,
            location=event.location,
            event_date=event.event_date,
            max_vendors=event.max_vendors,
            area_sq_m=event.area_sq_m,
            expected_visitors=event.expected_visitors,
            duration_hours=event.duration_hours,
            status=event.status,
        )


class EventVendorResponse(BaseModel):
    vendor_id: int = Field(gt=0)
    vendor_name: str
    priority: VendorPriority
    available_dates: list[date]

    @classmethod
    def from_domain(cls, record: EventVendorRecord) -> "EventVendorResponse":
        return cls(
            vendor_id=record.vendor_id,
            vendor_name=record.vendor_name,
            priority=record.priority,
            available_dates=[date.fromisoformat(value) for value in record.available_dates],
        )


class RegisterVendorRequest(VendorAvailabilityPayload):
    @field_validator("vendor_name")
    @classmethod
    def validate_vendor_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("vendor_name must contain non-whitespace characters")
        return value


class LoginRequest(BaseModel):
    organizer_token: str = Field(min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class HealthResponse(BaseModel):
    status: str
    app_name: str
    version: str
