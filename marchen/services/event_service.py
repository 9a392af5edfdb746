"""Event and vendor-availability management feeding the planning cores."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from marchen.domain.models import Event, EventStatus, EventVendorRecord, VendorPriority
from marchen.repository.data_repository import DataRepository
from marchen.utils.config import Settings, get_settings
from marchen.utils.logger import get_logger


logger = get_logger(__name__)


class EventNotFoundError(Exception):
    """Raised when the requested event does not exist."""


class EventStateError(Exception):
    """Raised when an event's status forbids the requested change."""


class EventValidationError(Exception):
    """Raised when event or vendor payloads are invalid."""


class EventService:
    """Create, edit and inspect events and their vendor availability."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def _require_event(self, event_id: int) -> Event:
        event = self._repository.get_event(event_id)
        if event is None:
            raise EventNotFoundError(f"Event {event_id} not found")
        return event

    def create_event(
        self,
        *,
        title: str,
        location: Optional[str] = None,
        event_date: Optional[date] = None,
        max_vendors: Optional[int] = None,
        area_sq_m: Optional[float] = None,
        expected_visitors: Optional[int] = None,
        duration_hours: Optional[float] = None,
    ) -> Event:
        if not title.strip():
            raise EventValidationError("title must be non-empty")
        event_id = self._repository.create_event(
            title=title.strip(),
            location=location,
            event_date=event_date.isoformat() if event_date else None,
            max_vendors=max_vendors,
            area_sq_m=area_sq_m,
            expected_visitors=expected_visitors,
            duration_hours=duration_hours,
        )
        logger.info("Event created | event_id=%s | title=%s", event_id, title)
        return self._require_event(event_id)

    def get_event(self, event_id: int) -> Event:
        return self._require_event(event_id)

    def list_events(self) -> list[Event]:
        return self._repository.list_events()

    def update_event(self, event_id: int, changes: dict[str, Any]) -> Event:
        """Apply partial changes; only DRAFT events may be edited."""
        event = self._require_event(event_id)
        if event.status is not EventStatus.DRAFT:
            raise EventStateError(
                f"Can only edit events in DRAFT status (event {event_id} is {event.status.value})"
            )
        if "title" in changes:
            title = str(changes["title"] or "").strip()
            if not title:
                raise EventValidationError("title must be non-empty")
            changes = {**changes, "title": title}
        normalized = {
            key: value.isoformat() if isinstance(value, date) else value
            for key, value in changes.items()
        }
        self._repository.update_event(event_id, **normalized)
        logger.info("Event updated | event_id=%s | fields=%s", event_id, sorted(normalized))
        return self._require_event(event_id)

    def _set_status(self, event_id: int, status: EventStatus) -> Event:
        self._require_event(event_id)
        self._repository.update_event(event_id, status=status)
        logger.info("Event status changed | event_id=%s | status=%s", event_id, status.value)
        return self._require_event(event_id)

    def publish_event(self, event_id: int) -> Event:
        return self._set_status(event_id, EventStatus.OPEN)

    def close_event(self, event_id: int) -> Event:
        return self._set_status(event_id, EventStatus.CLOSED)

    def register_vendor(
        self,
        *,
        event_id: int,
        vendor_name: str,
        priority: VendorPriority,
        available_dates: list[date],
    ) -> EventVendorRecord:
        """Attach a vendor to an event, replacing any earlier tier and dates."""
        self._require_event(event_id)
        name = vendor_name.strip()
        if not name:
            raise EventValidationError("vendor_name must be non-empty")
        vendor_id = self._repository.get_or_create_vendor(name)
        self._repository.upsert_event_vendor(
            event_id=event_id,
            vendor_id=vendor_id,
            priority=priority,
            available_dates=[value.isoformat() for value in available_dates],
        )
        logger.info(
            "Vendor registered | event_id=%s | vendor=%s | priority=%s | dates=%s",
            event_id,
            name,
            priority.value,
            len(available_dates),
        )
        for record in self._repository.list_event_vendors(event_id):
            if record.vendor_id == vendor_id:
                return record
        raise RuntimeError(f"Vendor {vendor_id} missing after registration")

    def list_vendors(self, event_id: int) -> list[EventVendorRecord]:
        self._require_event(event_id)
        return self._repository.list_event_vendors(event_id)
