"""Tests for timetable grid configuration and cell lookup."""

from __future__ import annotations

import pytest

from backend.domain.models import ScheduleEntry
from backend.domain.timetable import (
    DEFAULT_DAYS,
    DEFAULT_TIME_SLOTS,
    TimeSlot,
    TimetableGrid,
    build_grid_view,
    build_timetable_grid,
    validate_timetable_grid,
)


def grid(days=DEFAULT_DAYS, slots=DEFAULT_TIME_SLOTS) -> TimetableGrid:
    return TimetableGrid(days=tuple(days), time_slots=tuple(slots))


# --- Baseline pass ---

def test_default_grid_passes() -> None:
    validate_timetable_grid(grid())


def test_default_grid_shape() -> None:
    built = build_timetable_grid(DEFAULT_DAYS, DEFAULT_TIME_SLOTS)
    assert built.days == ("Segunda", "Terça", "Quarta", "Quinta", "Sexta")
    assert [slot.slot_id for slot in built.assignable_slots] == ["slot-19h00", "slot-20h45"]
    assert built.find_slot("slot-20h30").is_break is True
    assert built.find_slot("missing") is None


# --- Invalid configurations ---

def test_no_days_raises() -> None:
    with pytest.raises(ValueError):
        validate_timetable_grid(grid(days=()))


def test_duplicate_days_raises() -> None:
    with pytest.raises(ValueError):
        validate_timetable_grid(grid(days=("Segunda", "Segunda")))


def test_duplicate_slot_ids_raises() -> None:
    slots = (
        TimeSlot("a", "A", "08:00", "09:00"),
        TimeSlot("a", "B", "09:00", "10:00"),
    )
    with pytest.raises(ValueError):
        validate_timetable_grid(grid(slots=slots))


def test_malformed_time_raises() -> None:
    with pytest.raises(ValueError):
        validate_timetable_grid(grid(slots=(TimeSlot("a", "A", "8h", "09:00"),)))


def test_slot_ending_before_start_raises() -> None:
    with pytest.raises(ValueError):
        validate_timetable_grid(grid(slots=(TimeSlot("a", "A", "10:00", "09:00"),)))


def test_overlapping_slots_raise() -> None:
    slots = (
        TimeSlot("a", "A", "08:00", "09:30"),
        TimeSlot("b", "B", "09:00", "10:00"),
    )
    with pytest.raises(ValueError):
        validate_timetable_grid(grid(slots=slots))


def test_grid_of_only_breaks_raises() -> None:
    with pytest.raises(ValueError):
        validate_timetable_grid(grid(slots=(TimeSlot("a", "A", "08:00", "09:00", is_break=True),)))


# --- Grid view ---

def test_grid_view_places_entries_by_day_and_start_time() -> None:
    entry = ScheduleEntry(
        entry_id="e1",
        coordinator_id="coord",
        professor_id="p1",
        room_id="r1",
        day_of_week="Quarta",
        start_time="20:45",
        end_time="22:15",
        has_conflict=False,
        conflict_reason="",
    )
    cells = build_grid_view(grid(), [entry])

    assert len(cells) == len(DEFAULT_DAYS) * len(DEFAULT_TIME_SLOTS)
    occupied = [cell for cell in cells if cell.entry is not None]
    assert len(occupied) == 1
    assert occupied[0].day == "Quarta"
    assert occupied[0].slot.slot_id == "slot-20h45"
    assert all(cell.entry is None for cell in cells if cell.slot.is_break)
