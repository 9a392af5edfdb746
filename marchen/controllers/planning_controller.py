"""HTTP controller layer for ad-hoc date ranking and staffing estimates."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from marchen.controllers.dependencies import (
    get_auth_service,
    get_schedule_service,
    get_staffing_service,
    require_organizer,
)
from marchen.controllers.schemas import (
    HealthResponse,
    LoginRequest,
    LoginResponse,
    OptimalDatesRequest,
    OptimalDatesResponse,
    ScoredDateResponse,
    StaffingPlanResponse,
    StaffingRequest,
)
from marchen.domain.models import StaffingInput
from marchen.services.auth_service import (
    AuthService,
    InvalidOrganizerTokenError,
    OrganizerTokenNotConfiguredError,
)
from marchen.services.schedule_optimizer import (
    ScheduleOptimizationService,
    ScheduleValidationError,
)
from marchen.services.staffing_calculator import StaffingPlanService
from marchen.utils.config import get_settings
from marchen.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["planning"])


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health(request: Request) -> HealthResponse:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return HealthResponse(status="ok", app_name=settings.app_name, version=settings.app_version)


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    try:
        bearer = auth_service.login(payload.organizer_token)
        return LoginResponse(access_token=bearer)
    except (OrganizerTokenNotConfiguredError, InvalidOrganizerTokenError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected login failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to login",
        ) from exc


@router.post(
    "/optimal_dates",
    response_model=OptimalDatesResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_organizer)],
)
async def optimal_dates(
    payload: OptimalDatesRequest,
    service: ScheduleOptimizationService = Depends(get_schedule_service),
) -> OptimalDatesResponse:
    """Rank candidate days for a vendor list supplied in the request body."""
    try:
        ranking = service.rank_dates(
            vendors=[vendor.to_domain() for vendor in payload.vendors],
            start=payload.start,
            end=payload.end,
        )
        return OptimalDatesResponse(
            ranking=[ScoredDateResponse.from_domain(item) for item in ranking]
        )
    except ScheduleValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected date ranking failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to rank candidate dates",
        ) from exc


@router.post(
    "/staffing",
    response_model=StaffingPlanResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_organizer)],
)
async def staffing(
    payload: StaffingRequest,
    service: StaffingPlanService = Depends(get_staffing_service),
) -> StaffingPlanResponse:
    try:
        plan = service.plan(
            StaffingInput(
                max_vendors=payload.max_vendors,
                area_sq_m=payload.area_sq_m,
                expected_visitors=payload.expected_visitors,
                duration_hours=payload.duration_hours,
            )
        )
        return StaffingPlanResponse.from_domain(plan)
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected staffing estimate failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to estimate staffing",
        ) from exc
