"""Organizer token authentication service."""

from __future__ import annotations

import secrets
from threading import Lock
from typing import Optional

from marchen.utils.config import Settings, get_settings
from marchen.utils.logger import get_logger


logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Base authentication failure."""


class OrganizerTokenNotConfiguredError(AuthenticationError):
    """Raised when MARCHEN_ORGANIZER_TOKEN is missing."""


class InvalidOrganizerTokenError(AuthenticationError):
    """Raised when provided token is invalid."""


class AuthService:
    """Exchanges the organizer token for a session token and validates it."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._session_token: str | None = None
        self._lock = Lock()

    @property
    def auth_enabled(self) -> bool:
        return bool(self._settings.organizer_token)

    def _expected_token(self) -> str:
        if not self._settings.organizer_token:
            raise OrganizerTokenNotConfiguredError(
                "Organizer token is not configured. Set MARCHEN_ORGANIZER_TOKEN."
            )
        return self._settings.organizer_token

    def login(self, provided_token: str) -> str:
        expected = self._expected_token()
        if not secrets.compare_digest(provided_token, expected):
            logger.warning("Organizer login rejected")
            raise InvalidOrganizerTokenError("Invalid organizer token")
        session_token = secrets.token_urlsafe(32)
        with self._lock:
            self._session_token = session_token
        return session_token

    def validate_bearer_token(self, bearer_token: str) -> None:
        if not self.auth_enabled:
            return
        with self._lock:
            session_token = self._session_token
        if session_token is None:
            raise InvalidOrganizerTokenError("No active session. Login first.")
        if not secrets.compare_digest(bearer_token, session_token):
            raise InvalidOrganizerTokenError("Invalid bearer token")
