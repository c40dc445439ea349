from __future__ import annotations

from backend.domain.assignment import EMPTY_ASSIGNMENT, AssignmentPhase
from backend.domain.models import EntityType


def test_empty_builder_is_not_ready() -> None:
    assert EMPTY_ASSIGNMENT.phase is AssignmentPhase.EMPTY
    assert not EMPTY_ASSIGNMENT.is_ready


def test_single_half_stays_pending() -> None:
    professor_only = EMPTY_ASSIGNMENT.with_professor("p1", "Segunda", "slot-19h00")
    room_only = EMPTY_ASSIGNMENT.with_room("r1", "Segunda", "slot-19h00")

    assert professor_only.phase is AssignmentPhase.PROFESSOR_PENDING
    assert room_only.phase is AssignmentPhase.ROOM_PENDING
    assert not professor_only.is_ready
    assert not room_only.is_ready


def test_both_halves_in_either_order_are_ready() -> None:
    professor_first = (
        EMPTY_ASSIGNMENT
        .with_professor("p1", "Segunda", "slot-19h00")
        .with_room("r1", "Segunda", "slot-19h00")
    )
    room_first = (
        EMPTY_ASSIGNMENT
        .with_room("r1", "Segunda", "slot-19h00")
        .with_professor("p1", "Segunda", "slot-19h00")
    )
    assert professor_first.is_ready
    assert professor_first == room_first


def test_repeated_professor_drop_replaces_the_half() -> None:
    builder = (
        EMPTY_ASSIGNMENT
        .with_professor("p1", "Segunda", "slot-19h00")
        .with_professor("p2", "Segunda", "slot-19h00")
    )
    assert builder.professor_id == "p2"
    assert builder.phase is AssignmentPhase.PROFESSOR_PENDING


def test_latest_drop_decides_the_cell() -> None:
    builder = (
        EMPTY_ASSIGNMENT
        .with_entity(EntityType.PROFESSOR, "p1", "Segunda", "slot-19h00")
        .with_entity(EntityType.ROOM, "r1", "Sexta", "slot-20h45")
    )
    assert (builder.day, builder.slot_id) == ("Sexta", "slot-20h45")
    assert builder.is_ready


def test_builder_is_immutable_and_clears_to_empty() -> None:
    pending = EMPTY_ASSIGNMENT.with_room("r1", "Segunda", "slot-19h00")
    assert EMPTY_ASSIGNMENT.room_id is None
    assert pending.clear() == EMPTY_ASSIGNMENT
