"""Coordinator session authentication service."""

from __future__ import annotations

import secrets
from threading import RLock
from typing import Optional

from backend.utils.config import Settings, get_settings


class AuthenticationError(Exception):
    """Base authentication failure."""


class AccessTokenNotConfiguredError(AuthenticationError):
    """Raised when ADMIN_TOKEN is missing."""


class InvalidAccessTokenError(AuthenticationError):
    """Raised when provided token is invalid."""


class AuthService:
    """Issues bearer sessions and resolves them to a coordinator id.

    With no ADMIN_TOKEN configured, authentication is disabled and every
    caller acts as ``default_coordinator_id``.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._lock = RLock()
        self._sessions: dict[str, str] = {}

    @property
    def auth_enabled(self) -> bool:
        return bool(self._settings.admin_token)

    @property
    def default_coordinator_id(self) -> str:
        return self._settings.default_coordinator_id

    def _expected_token(self) -> str:
        if not self._settings.admin_token:
            raise AccessTokenNotConfiguredError(
                "ADMIN_TOKEN is not configured. Set ADMIN_TOKEN in environment variables."
            )
        return self._settings.admin_token

    def login(self, coordinator_id: str, provided_access_token: str) -> str:
        expected = self._expected_token()
        if not coordinator_id.strip():
            raise InvalidAccessTokenError("coordinator_id must be non-empty")
        if not secrets.compare_digest(provided_access_token, expected):
            raise InvalidAccessTokenError("Invalid access token")
        session_token = secrets.token_urlsafe(32)
        with self._lock:
            self._sessions[session_token] = coordinator_id.strip()
        return session_token

    def resolve_coordinator(self, bearer_token: str | None) -> str:
        """Return the coordinator id owning ``bearer_token``."""
        if not self.auth_enabled:
            return self.default_coordinator_id
        if bearer_token is None:
            raise InvalidAccessTokenError("No active session. Login first.")
        with self._lock:
            for session_token, coordinator_id in self._sessions.items():
                if secrets.compare_digest(bearer_token, session_token):
                    return coordinator_id
        raise InvalidAccessTokenError("Invalid bearer token")

    def logout(self, bearer_token: str) -> None:
        with self._lock:
            self._sessions.pop(bearer_token, None)
