"""Double-booking rules applied before a schedule entry is stored."""

from __future__ import annotations

from typing import Iterable

from backend.domain.models import ConflictResult, ScheduleEntry


PROFESSOR_CONFLICT_REASON = "professor already has a class at this time."
ROOM_CONFLICT_REASON = "room already occupied at this time."

NO_CONFLICT = ConflictResult(has_conflict=False, reason="")


def detect_conflict(
    schedules: Iterable[ScheduleEntry],
    professor_id: str,
    room_id: str,
    day: str,
    start_time: str,
) -> ConflictResult:
    """Flag a proposed slot binding that collides with an existing entry.

    Both scans are linear over ``schedules``. A professor collision is
    reported ahead of a room collision, so when both apply only the
    professor reason is surfaced.
    """
    existing = list(schedules)

    professor_conflict = any(
        entry.professor_id == professor_id
        and entry.day_of_week == day
        and entry.start_time == start_time
        for entry in existing
    )
    if professor_conflict:
        return ConflictResult(has_conflict=True, reason=PROFESSOR_CONFLICT_REASON)

    room_conflict = any(
        entry.room_id == room_id
        and entry.day_of_week == day
        and entry.start_time == start_time
        for entry in existing
    )
    if room_conflict:
        return ConflictResult(has_conflict=True, reason=ROOM_CONFLICT_REASON)

    return NO_CONFLICT
