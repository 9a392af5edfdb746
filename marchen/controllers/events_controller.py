"""HTTP controller layer for events, vendor availability and event plans."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from marchen.controllers.dependencies import (
    get_event_service,
    get_schedule_service,
    get_staffing_service,
    require_organizer,
)
from marchen.controllers.schemas import (
    EventCreateRequest,
    EventResponse,
    EventUpdateRequest,
    EventVendorResponse,
    OptimalDatesResponse,
    RegisterVendorRequest,
    ScoredDateResponse,
    StaffingPlanResponse,
)
from marchen.services.event_service import (
    EventNotFoundError,
    EventService,
    EventStateError,
    EventValidationError,
)
from marchen.services.schedule_optimizer import (
    ScheduleOptimizationService,
    ScheduleValidationError,
)
from marchen.services.staffing_calculator import StaffingPlanService
from marchen.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(
    prefix="/events",
    tags=["events"],
    dependencies=[Depends(require_organizer)],
)


def _not_found(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("", response_model=list[EventResponse], status_code=status.HTTP_200_OK)
async def list_events(
    service: EventService = Depends(get_event_service),
) -> list[EventResponse]:
    return [EventResponse.from_domain(event) for event in service.list_events()]


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreateRequest,
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    try:
        event = service.create_event(**payload.model_dump())
        return EventResponse.from_domain(event)
    except EventValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get("/{event_id}", response_model=EventResponse, status_code=status.HTTP_200_OK)
async def get_event(
    event_id: int,
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    try:
        return EventResponse.from_domain(service.get_event(event_id))
    except EventNotFoundError as exc:
        raise _not_found(exc) from exc


@router.patch("/{event_id}", response_model=EventResponse, status_code=status.HTTP_200_OK)
async def update_event(
    event_id: int,
    payload: EventUpdateRequest,
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    """Edit a DRAFT event; only fields present in the body are changed."""
    try:
        event = service.update_event(event_id, payload.model_dump(exclude_unset=True))
        return EventResponse.from_domain(event)
    except EventNotFoundError as exc:
        raise _not_found(exc) from exc
    except EventStateError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except EventValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.post("/{event_id}/publish", response_model=EventResponse, status_code=status.HTTP_200_OK)
async def publish_event(
    event_id: int,
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    try:
        return EventResponse.from_domain(service.publish_event(event_id))
    except EventNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/{event_id}/close", response_model=EventResponse, status_code=status.HTTP_200_OK)
async def close_event(
    event_id: int,
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    try:
        return EventResponse.from_domain(service.close_event(event_id))
    except EventNotFoundError as exc:
        raise _not_found(exc) from exc


@router.get(
    "/{event_id}/vendors",
    response_model=list[EventVendorResponse],
    status_code=status.HTTP_200_OK,
)
async def list_vendors(
    event_id: int,
    service: EventService = Depends(get_event_service),
) -> list[EventVendorResponse]:
    try:
        return [EventVendorResponse.from_domain(record) for record in service.list_vendors(event_id)]
    except EventNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post(
    "/{event_id}/vendors",
    response_model=EventVendorResponse,
    status_code=status.HTTP_200_OK,
)
async def register_vendor(
    event_id: int,
    payload: RegisterVendorRequest,
    service: EventService = Depends(get_event_service),
) -> EventVendorResponse:
    """Register a vendor's priority tier and replace its available dates."""
    try:
        record = service.register_vendor(
            event_id=event_id,
            vendor_name=payload.vendor_name,
            priority=payload.priority,
            available_dates=payload.available_dates,
        )
        return EventVendorResponse.from_domain(record)
    except EventNotFoundError as exc:
        raise _not_found(exc) from exc
    except EventValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get(
    "/{event_id}/optimal_dates",
    response_model=OptimalDatesResponse,
    status_code=status.HTTP_200_OK,
)
async def event_optimal_dates(
    event_id: int,
    start: date = Query(...),
    end: date = Query(...),
    service: ScheduleOptimizationService = Depends(get_schedule_service),
) -> OptimalDatesResponse:
    try:
        ranking = service.rank_dates_for_event(event_id=event_id, start=start, end=end)
        return OptimalDatesResponse(
            ranking=[ScoredDateResponse.from_domain(item) for item in ranking]
        )
    except EventNotFoundError as exc:
        raise _not_found(exc) from exc
    except ScheduleValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected event date ranking failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to rank candidate dates",
        ) from exc


@router.get("/{event_id}/optimal_dates.csv", status_code=status.HTTP_200_OK)
async def event_optimal_dates_csv(
    event_id: int,
    start: date = Query(...),
    end: date = Query(...),
    service: ScheduleOptimizationService = Depends(get_schedule_service),
) -> Response:
    try:
        content = service.export_ranking_csv(event_id=event_id, start=start, end=end)
    except EventNotFoundError as exc:
        raise _not_found(exc) from exc
    except ScheduleValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="event-{event_id}-optimal-dates.csv"'
        },
    )


@router.get(
    "/{event_id}/staffing",
    response_model=StaffingPlanResponse,
    status_code=status.HTTP_200_OK,
)
async def event_staffing(
    event_id: int,
    service: StaffingPlanService = Depends(get_staffing_service),
) -> StaffingPlanResponse:
    try:
        return StaffingPlanResponse.from_domain(service.plan_for_event(event_id))
    except EventNotFoundError as exc:
        raise _not_found(exc) from exc
