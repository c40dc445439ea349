"""Professor and room management for a coordinator's roster."""

from __future__ import annotations

from typing import Optional, Sequence

from backend.domain.models import Professor, Room
from backend.repository.data_repository import DataRepository, StoreError
from backend.services.notification_service import NotificationChannel
from backend.services.slot_assigner import SlotAssigner
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)

WORK_SHIFT_OPTIONS: tuple[str, ...] = ("Manhã", "Tarde", "Noite")
DEFAULT_ROOM_TYPE = "sala"


class RosterValidationError(Exception):
    """Raised when a professor or room payload is invalid."""


class RosterRecordNotFoundError(Exception):
    """Raised when deleting a record the coordinator does not own."""


def _validate_professor(full_name: str, email: str, work_shifts: Sequence[str]) -> None:
    if not full_name.strip():
        raise RosterValidationError("full_name must be non-empty")
    local_part, _, domain = email.strip().partition("@")
    if not local_part or not domain:
        raise RosterValidationError("email must be a valid address")
    unknown = sorted(set(work_shifts) - set(WORK_SHIFT_OPTIONS))
    if unknown:
        raise RosterValidationError(
            f"work_shifts must be drawn from {', '.join(WORK_SHIFT_OPTIONS)}; got {', '.join(unknown)}"
        )


def _validate_room(name: str, room_type: str, capacity: int) -> None:
    if not name.strip():
        raise RosterValidationError("name must be non-empty")
    if not room_type.strip():
        raise RosterValidationError("type must be non-empty")
    if capacity <= 0:
        raise RosterValidationError("capacity must be > 0")


class RosterService:
    """Create, list and delete the professors and rooms a coordinator owns."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        notifications: Optional[NotificationChannel] = None,
        settings: Optional[Settings] = None,
        slot_assigner: Optional[SlotAssigner] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._notifications = notifications or NotificationChannel(self._settings)
        self._slot_assigner = slot_assigner

    def _roster_changed(self, coordinator_id: str) -> None:
        # Deletes cascade to schedule rows, so the cached snapshot must be reloaded.
        if self._slot_assigner is not None:
            self._slot_assigner.invalidate(coordinator_id)

    def list_professors(self, coordinator_id: str) -> list[Professor]:
        return self._repository.list_professors(coordinator_id)

    def list_rooms(self, coordinator_id: str) -> list[Room]:
        return self._repository.list_rooms(coordinator_id)

    def create_professor(
        self,
        coordinator_id: str,
        *,
        full_name: str,
        email: str,
        additional_institution: str = "",
        work_shifts: Sequence[str] = (),
    ) -> Professor:
        _validate_professor(full_name, email, work_shifts)
        try:
            professor = self._repository.create_professor(
                coordinator_id=coordinator_id,
                full_name=full_name.strip(),
                email=email.strip(),
                additional_institution=additional_institution.strip(),
                work_shifts=list(dict.fromkeys(work_shifts)),
                availability=(),
                calendar_connected=False,
            )
        except StoreError:
            self._notifications.error(coordinator_id, "Failed to register professor")
            raise
        self._roster_changed(coordinator_id)
        self._notifications.success(coordinator_id, "Professor registered successfully")
        logger.info("Professor %s created for %s", professor.professor_id, coordinator_id)
        return professor

    def create_room(
        self,
        coordinator_id: str,
        *,
        name: str,
        capacity: int,
        room_type: str = DEFAULT_ROOM_TYPE,
        equipment: Sequence[str] = (),
    ) -> Room:
        _validate_room(name, room_type, capacity)
        try:
            room = self._repository.create_room(
                coordinator_id=coordinator_id,
                name=name.strip(),
                room_type=room_type.strip(),
                capacity=int(capacity),
                equipment=list(dict.fromkeys(item.strip() for item in equipment if item.strip())),
            )
        except StoreError:
            self._notifications.error(coordinator_id, "Failed to register room")
            raise
        self._roster_changed(coordinator_id)
        self._notifications.success(coordinator_id, "Room registered successfully")
        logger.info("Room %s created for %s", room.room_id, coordinator_id)
        return room

    def delete_professor(self, coordinator_id: str, professor_id: str) -> None:
        if not self._repository.delete_professor(coordinator_id, professor_id):
            raise RosterRecordNotFoundError(f"Professor {professor_id} not found")
        self._roster_changed(coordinator_id)
        self._notifications.success(coordinator_id, "Professor removed successfully")

    def delete_room(self, coordinator_id: str, room_id: str) -> None:
        if not self._repository.delete_room(coordinator_id, room_id):
            raise RosterRecordNotFoundError(f"Room {room_id} not found")
        self._roster_changed(coordinator_id)
        self._notifications.success(coordinator_id, "Room removed successfully")
