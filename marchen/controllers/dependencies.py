"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from marchen.services.auth_service import (
    AuthService,
    InvalidOrganizerTokenError,
    OrganizerTokenNotConfiguredError,
)
from marchen.services.event_service import EventService
from marchen.services.schedule_optimizer import ScheduleOptimizationService
from marchen.services.staffing_calculator import StaffingPlanService
from marchen.utils.config import get_settings


bearer_scheme = HTTPBearer(auto_error=False)


def _service_from_state(request: Request, attribute: str, label: str) -> Any:
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} service is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        service = AuthService(settings=get_settings())
        request.app.state.auth_service = service
    return service


def get_event_service(request: Request) -> EventService:
    return _service_from_state(request, "event_service", "Event")


def get_schedule_service(request: Request) -> ScheduleOptimizationService:
    return _service_from_state(request, "schedule_service", "Schedule")


def get_staffing_service(request: Request) -> StaffingPlanService:
    return _service_from_state(request, "staffing_service", "Staffing")


async def require_organizer(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> None:
    if not auth_service.auth_enabled:
        return
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
        )
    try:
        auth_service.validate_bearer_token(credentials.credentials)
    except (OrganizerTokenNotConfiguredError, InvalidOrganizerTokenError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
