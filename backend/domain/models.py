"""Domain models for roster records, schedule entries and dashboard state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EntityType(str, Enum):
    PROFESSOR = "professor"
    ROOM = "room"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Coordinator:
    coordinator_id: str
    email: str
    full_name: str
    institution: str


@dataclass(frozen=True)
class Professor:
    professor_id: str
    coordinator_id: str
    full_name: str
    email: str
    additional_institution: str = ""
    work_shifts: tuple[str, ...] = ()
    availability: tuple[str, ...] = ()
    calendar_connected: bool = False


@dataclass(frozen=True)
class Room:
    room_id: str
    coordinator_id: str
    name: str
    room_type: str
    capacity: int
    equipment: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScheduleEntry:
    entry_id: str
    coordinator_id: str
    professor_id: str
    room_id: str
    day_of_week: str
    start_time: str
    end_time: str
    has_conflict: bool
    conflict_reason: str
    created_at: str = ""


@dataclass(frozen=True)
class ConflictResult:
    has_conflict: bool
    reason: str


@dataclass(frozen=True)
class DragPayload:
    entity_type: EntityType
    entity_id: str
    display_name: str


@dataclass(frozen=True)
class Notification:
    notification_id: str
    level: NotificationLevel
    message: str
    created_at: str


@dataclass(frozen=True)
class RosterSnapshot:
    """Read-only copies of the three collections fetched per page load."""

    professors: tuple[Professor, ...] = ()
    rooms: tuple[Room, ...] = ()
    schedules: tuple[ScheduleEntry, ...] = ()
