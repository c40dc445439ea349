"""Tests for professor/room double-booking detection."""

from __future__ import annotations

from backend.domain.conflicts import (
    PROFESSOR_CONFLICT_REASON,
    ROOM_CONFLICT_REASON,
    detect_conflict,
)
from backend.domain.models import ScheduleEntry


def entry(professor_id: str, room_id: str, day: str = "Segunda", start: str = "19:00") -> ScheduleEntry:
    return ScheduleEntry(
        entry_id=f"{professor_id}-{room_id}-{day}-{start}",
        coordinator_id="coord",
        professor_id=professor_id,
        room_id=room_id,
        day_of_week=day,
        start_time=start,
        end_time="20:30",
        has_conflict=False,
        conflict_reason="",
    )


def test_empty_schedule_has_no_conflict() -> None:
    result = detect_conflict([], "profX", "roomY", "Segunda", "19:00")
    assert result.has_conflict is False
    assert result.reason == ""


def test_same_professor_same_day_and_start_is_flagged() -> None:
    result = detect_conflict([entry("profX", "roomY")], "profX", "roomZ", "Segunda", "19:00")
    assert result.has_conflict is True
    assert result.reason == PROFESSOR_CONFLICT_REASON


def test_same_room_with_different_professor_is_flagged() -> None:
    result = detect_conflict([entry("profX", "roomY")], "profW", "roomY", "Segunda", "19:00")
    assert result.has_conflict is True
    assert result.reason == ROOM_CONFLICT_REASON


def test_professor_reason_masks_room_reason() -> None:
    schedules = [entry("profX", "roomA"), entry("profB", "roomY")]
    result = detect_conflict(schedules, "profX", "roomY", "Segunda", "19:00")
    assert result.reason == PROFESSOR_CONFLICT_REASON


def test_identical_binding_reports_professor_reason() -> None:
    result = detect_conflict([entry("profX", "roomY")], "profX", "roomY", "Segunda", "19:00")
    assert result.reason == PROFESSOR_CONFLICT_REASON


def test_other_day_or_start_time_is_not_a_conflict() -> None:
    schedules = [entry("profX", "roomY", day="Terça"), entry("profX", "roomY", start="20:45")]
    result = detect_conflict(schedules, "profX", "roomY", "Segunda", "19:00")
    assert result.has_conflict is False


def test_flagged_entries_still_count_as_occupying_the_slot() -> None:
    flagged = ScheduleEntry(
        entry_id="flagged",
        coordinator_id="coord",
        professor_id="profX",
        room_id="roomY",
        day_of_week="Segunda",
        start_time="19:00",
        end_time="20:30",
        has_conflict=True,
        conflict_reason=PROFESSOR_CONFLICT_REASON,
    )
    result = detect_conflict([flagged], "profW", "roomY", "Segunda", "19:00")
    assert result.reason == ROOM_CONFLICT_REASON


def test_sequential_inserts_follow_documented_example() -> None:
    """A is clean, B collides on the professor, C collides on the room."""
    stored: list[ScheduleEntry] = []

    a = detect_conflict(stored, "profX", "roomY", "Segunda", "19:00")
    stored.append(entry("profX", "roomY"))
    b = detect_conflict(stored, "profX", "roomZ", "Segunda", "19:00")
    stored.append(entry("profX", "roomZ"))
    c = detect_conflict(stored, "profW", "roomY", "Segunda", "19:00")

    assert a.has_conflict is False
    assert (b.has_conflict, b.reason) == (True, PROFESSOR_CONFLICT_REASON)
    assert (c.has_conflict, c.reason) == (True, ROOM_CONFLICT_REASON)
