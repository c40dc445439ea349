"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.repository.data_repository import StoreError
from backend.services.auth_service import AuthenticationError, AuthService
from backend.services.notification_service import NotificationChannel
from backend.services.roster_service import RosterService
from backend.services.slot_assigner import SlotAssigner
from backend.utils.config import get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        service = AuthService(settings=get_settings())
        request.app.state.auth_service = service
    return service


def _require_state(request: Request, name: str, label: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_notification_channel(request: Request) -> NotificationChannel:
    return _require_state(request, "notifications", "Notification channel")


def get_slot_assigner(request: Request) -> SlotAssigner:
    return _require_state(request, "slot_assigner", "Slot assigner")


def get_roster_service(request: Request) -> RosterService:
    return _require_state(request, "roster_service", "Roster service")


async def current_coordinator(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    """Resolve the coordinator id that owns every record touched by the request."""
    try:
        return auth_service.resolve_coordinator(
            credentials.credentials if credentials is not None else None
        )
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


def store_failure(exc: StoreError, action: str) -> HTTPException:
    """Log a store failure and translate it to a 500 for the caller."""
    logger.error("Store failure while trying to %s: %s", action, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )
