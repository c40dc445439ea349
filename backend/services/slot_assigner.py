"""Drag-and-drop slot assignment with conflict flagging."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from threading import RLock
from typing import Optional

from backend.domain.assignment import EMPTY_ASSIGNMENT, AssignmentBuilder
from backend.domain.conflicts import detect_conflict
from backend.domain.models import (
    ConflictResult,
    DragPayload,
    EntityType,
    RosterSnapshot,
    ScheduleEntry,
)
from backend.domain.timetable import TimeSlot, TimetableGrid, build_timetable_grid
from backend.repository.data_repository import DataRepository, StoreError
from backend.services.notification_service import NotificationChannel
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)

SUCCESS_MESSAGE = "Schedule updated successfully"
CONFLICT_MESSAGE_TEMPLATE = "Conflict detected: {reason}"


class AssignmentValidationError(Exception):
    """Raised when a drag, drop or commit targets an unknown grid position."""


class DropStatus(str, Enum):
    NO_DRAG = "no_drag"
    BREAK_SLOT = "break_slot"
    PENDING = "pending"
    COMMITTED = "committed"
    COMMIT_FAILED = "commit_failed"


@dataclass(frozen=True)
class DashboardState:
    snapshot: RosterSnapshot = RosterSnapshot()
    drag: Optional[DragPayload] = None
    assignment: AssignmentBuilder = EMPTY_ASSIGNMENT
    loaded: bool = False


@dataclass(frozen=True)
class DropOutcome:
    status: DropStatus
    assignment: AssignmentBuilder
    entry: Optional[ScheduleEntry] = None


class SlotAssigner:
    """Binds dragged professors and rooms to grid cells for each coordinator.

    State transitions run under a lock; store round-trips do not, so two
    drops that complete the same assignment concurrently can both commit.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        notifications: Optional[NotificationChannel] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._notifications = notifications or NotificationChannel(self._settings)
        self._grid = build_timetable_grid(self._settings.schedule_days, self._settings.time_slots)
        self._lock = RLock()
        self._states: dict[str, DashboardState] = {}

    @property
    def grid(self) -> TimetableGrid:
        return self._grid

    def _current(self, coordinator_id: str) -> DashboardState:
        with self._lock:
            return self._states.get(coordinator_id, DashboardState())

    def _update(self, coordinator_id: str, **changes) -> DashboardState:
        with self._lock:
            state = replace(self._states.get(coordinator_id, DashboardState()), **changes)
            self._states[coordinator_id] = state
            return state

    def load_state(self, coordinator_id: str) -> RosterSnapshot:
        """Full refresh of professors, rooms and schedules from the stores."""
        snapshot = RosterSnapshot(
            professors=tuple(self._repository.list_professors(coordinator_id)),
            rooms=tuple(self._repository.list_rooms(coordinator_id)),
            schedules=tuple(self._repository.list_schedules(coordinator_id)),
        )
        self._update(coordinator_id, snapshot=snapshot, loaded=True)
        logger.debug(
            "Loaded %s professors, %s rooms, %s schedules for %s",
            len(snapshot.professors),
            len(snapshot.rooms),
            len(snapshot.schedules),
            coordinator_id,
        )
        return snapshot

    def invalidate(self, coordinator_id: str) -> None:
        """Mark the snapshot stale so the next read reloads it from the stores.

        The pending drag and half-built assignment are kept.
        """
        self._update(coordinator_id, loaded=False)
        logger.debug("Snapshot for %s marked stale", coordinator_id)

    def get_state(self, coordinator_id: str) -> DashboardState:
        state = self._current(coordinator_id)
        if not state.loaded:
            self.load_state(coordinator_id)
            state = self._current(coordinator_id)
        return state

    def begin_drag(
        self,
        coordinator_id: str,
        entity_type: EntityType,
        entity_id: str,
        display_name: str,
    ) -> DragPayload:
        payload = DragPayload(
            entity_type=EntityType(entity_type),
            entity_id=entity_id,
            display_name=display_name,
        )
        self._update(coordinator_id, drag=payload)
        return payload

    def _require_cell(self, day: str, slot_id: str) -> TimeSlot:
        if not self._grid.has_day(day):
            raise AssignmentValidationError(
                f"day must be one of {', '.join(self._grid.days)}"
            )
        slot = self._grid.find_slot(slot_id)
        if slot is None:
            raise AssignmentValidationError(f"Unknown time slot: {slot_id}")
        return slot

    def drop_on_cell(self, coordinator_id: str, day: str, slot_id: str) -> DropOutcome:
        slot = self._require_cell(day, slot_id)

        with self._lock:
            state = self._current(coordinator_id)
            drag = state.drag
            if drag is None:
                return DropOutcome(status=DropStatus.NO_DRAG, assignment=state.assignment)
            if slot.is_break:
                return DropOutcome(status=DropStatus.BREAK_SLOT, assignment=state.assignment)

            assignment = state.assignment.with_entity(
                drag.entity_type,
                drag.entity_id,
                day,
                slot.slot_id,
            )
            # The accumulator is cleared as soon as it is ready, before the
            # commit outcome is known.
            self._update(
                coordinator_id,
                drag=None,
                assignment=EMPTY_ASSIGNMENT if assignment.is_ready else assignment,
            )

        if not assignment.is_ready:
            return DropOutcome(status=DropStatus.PENDING, assignment=assignment)

        entry = self.commit(
            coordinator_id,
            professor_id=str(assignment.professor_id),
            room_id=str(assignment.room_id),
            day=day,
            start_time=slot.start_time,
            end_time=slot.end_time,
        )
        status = DropStatus.COMMITTED if entry is not None else DropStatus.COMMIT_FAILED
        return DropOutcome(status=status, assignment=assignment, entry=entry)

    def detect_conflict(
        self,
        coordinator_id: str,
        professor_id: str,
        room_id: str,
        day: str,
        start_time: str,
    ) -> ConflictResult:
        """Check a proposed binding against the in-memory schedule snapshot."""
        schedules = self.get_state(coordinator_id).snapshot.schedules
        return detect_conflict(schedules, professor_id, room_id, day, start_time)

    def _require_assignable_slot(self, day: str, start_time: str, end_time: str) -> None:
        if not self._grid.has_day(day):
            raise AssignmentValidationError(
                f"day must be one of {', '.join(self._grid.days)}"
            )
        for slot in self._grid.assignable_slots:
            if slot.start_time == start_time and slot.end_time == end_time:
                return
        raise AssignmentValidationError(
            f"{start_time}-{end_time} is not an assignable time slot"
        )

    def commit(
        self,
        coordinator_id: str,
        *,
        professor_id: str,
        room_id: str,
        day: str,
        start_time: str,
        end_time: str,
    ) -> Optional[ScheduleEntry]:
        """Store a schedule entry, flagging rather than rejecting conflicts.

        Returns ``None`` when the store write fails; in that case nothing is
        refreshed and no notification is published.
        """
        self._require_assignable_slot(day, start_time, end_time)
        conflict = self.detect_conflict(coordinator_id, professor_id, room_id, day, start_time)

        try:
            entry_id = self._repository.create_schedule_entry(
                coordinator_id=coordinator_id,
                professor_id=professor_id,
                room_id=room_id,
                day_of_week=day,
                start_time=start_time,
                end_time=end_time,
                has_conflict=conflict.has_conflict,
                conflict_reason=conflict.reason,
            )
        except StoreError as exc:
            logger.warning("Schedule commit for %s dropped: %s", coordinator_id, exc)
            return None

        entry = ScheduleEntry(
            entry_id=entry_id,
            coordinator_id=coordinator_id,
            professor_id=professor_id,
            room_id=room_id,
            day_of_week=day,
            start_time=start_time,
            end_time=end_time,
            has_conflict=conflict.has_conflict,
            conflict_reason=conflict.reason,
        )
        try:
            snapshot = self.load_state(coordinator_id)
        except StoreError as exc:
            logger.warning("Refresh after commit failed for %s: %s", coordinator_id, exc)
        else:
            entry = next(
                (item for item in snapshot.schedules if item.entry_id == entry_id),
                entry,
            )

        if conflict.has_conflict:
            logger.warning(
                "Conflicting schedule %s stored for %s: %s",
                entry_id,
                coordinator_id,
                conflict.reason,
            )
            self._notifications.error(
                coordinator_id,
                CONFLICT_MESSAGE_TEMPLATE.format(reason=conflict.reason),
            )
        else:
            logger.info("Schedule %s stored for %s", entry_id, coordinator_id)
            self._notifications.success(coordinator_id, SUCCESS_MESSAGE)
        return entry
