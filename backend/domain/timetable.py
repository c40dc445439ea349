"""Static weekly time grid and its validation rules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from backend.domain.models import ScheduleEntry


_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


@dataclass(frozen=True)
class TimeSlot:
    slot_id: str
    label: str
    start_time: str
    end_time: str
    is_break: bool = False


DEFAULT_DAYS: tuple[str, ...] = ("Segunda", "Terça", "Quarta", "Quinta", "Sexta")

DEFAULT_TIME_SLOTS: tuple[TimeSlot, ...] = (
    TimeSlot("slot-19h00", "19:00 - 20:30", "19:00", "20:30"),
    TimeSlot("slot-20h30", "Intervalo", "20:30", "20:45", is_break=True),
    TimeSlot("slot-20h45", "20:45 - 22:15", "20:45", "22:15"),
)


@dataclass(frozen=True)
class TimetableGrid:
    days: tuple[str, ...]
    time_slots: tuple[TimeSlot, ...]

    def find_slot(self, slot_id: str) -> Optional[TimeSlot]:
        for slot in self.time_slots:
            if slot.slot_id == slot_id:
                return slot
        return None

    def has_day(self, day: str) -> bool:
        return day in self.days

    @property
    def assignable_slots(self) -> tuple[TimeSlot, ...]:
        return tuple(slot for slot in self.time_slots if not slot.is_break)


@dataclass(frozen=True)
class GridCell:
    day: str
    slot: TimeSlot
    entry: Optional[ScheduleEntry]


def _to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def validate_timetable_grid(grid: TimetableGrid) -> None:
    if not grid.days:
        raise ValueError("timetable grid must define at least one day")
    if len(set(grid.days)) != len(grid.days):
        raise ValueError("timetable days must be unique")
    if not grid.time_slots:
        raise ValueError("timetable grid must define at least one time slot")

    slot_ids = [slot.slot_id for slot in grid.time_slots]
    if len(set(slot_ids)) != len(slot_ids):
        raise ValueError("time slot ids must be unique")

    previous_end: int | None = None
    for slot in grid.time_slots:
        if not _TIME_PATTERN.match(slot.start_time) or not _TIME_PATTERN.match(slot.end_time):
            raise ValueError(f"time slot {slot.slot_id} must use HH:MM times")
        start, end = _to_minutes(slot.start_time), _to_minutes(slot.end_time)
        if start >= end:
            raise ValueError(f"time slot {slot.slot_id} must start before it ends")
        if previous_end is not None and start < previous_end:
            raise ValueError(f"time slot {slot.slot_id} overlaps the previous slot")
        previous_end = end

    if not grid.assignable_slots:
        raise ValueError("timetable grid must contain at least one assignable slot")


def build_timetable_grid(days: Sequence[str], time_slots: Iterable[TimeSlot]) -> TimetableGrid:
    grid = TimetableGrid(days=tuple(days), time_slots=tuple(time_slots))
    validate_timetable_grid(grid)
    return grid


def find_entry_for_cell(
    schedules: Sequence[ScheduleEntry],
    day: str,
    slot: TimeSlot,
) -> Optional[ScheduleEntry]:
    """Return the first entry occupying a cell, matched by day and start time."""
    if slot.is_break:
        return None
    for entry in schedules:
        if entry.day_of_week == day and entry.start_time == slot.start_time:
            return entry
    return None


def build_grid_view(
    grid: TimetableGrid,
    schedules: Sequence[ScheduleEntry],
) -> list[GridCell]:
    """Lay the schedule snapshot over the grid, row by row (slot-major)."""
    return [
        GridCell(day=day, slot=slot, entry=find_entry_for_cell(schedules, day, slot))
        for slot in grid.time_slots
        for day in grid.days
    ]
