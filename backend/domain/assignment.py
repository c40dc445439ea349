"""Two-phase builder that pairs a professor drop with a room drop."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from backend.domain.models import EntityType


class AssignmentPhase(str, Enum):
    EMPTY = "empty"
    PROFESSOR_PENDING = "professor_pending"
    ROOM_PENDING = "room_pending"
    READY = "ready"


@dataclass(frozen=True)
class AssignmentBuilder:
    """Immutable accumulator: Empty -> ProfessorPending/RoomPending -> Ready.

    The target cell always follows the most recent drop, and dropping the
    same entity type twice replaces that half.
    """

    professor_id: Optional[str] = None
    room_id: Optional[str] = None
    day: Optional[str] = None
    slot_id: Optional[str] = None

    @property
    def phase(self) -> AssignmentPhase:
        if self.professor_id and self.room_id and self.day and self.slot_id:
            return AssignmentPhase.READY
        if self.professor_id:
            return AssignmentPhase.PROFESSOR_PENDING
        if self.room_id:
            return AssignmentPhase.ROOM_PENDING
        return AssignmentPhase.EMPTY

    @property
    def is_ready(self) -> bool:
        return self.phase is AssignmentPhase.READY

    def with_professor(self, professor_id: str, day: str, slot_id: str) -> AssignmentBuilder:
        return replace(self, professor_id=professor_id, day=day, slot_id=slot_id)

    def with_room(self, room_id: str, day: str, slot_id: str) -> AssignmentBuilder:
        return replace(self, room_id=room_id, day=day, slot_id=slot_id)

    def with_entity(
        self,
        entity_type: EntityType,
        entity_id: str,
        day: str,
        slot_id: str,
    ) -> AssignmentBuilder:
        if entity_type is EntityType.PROFESSOR:
            return self.with_professor(entity_id, day, slot_id)
        return self.with_room(entity_id, day, slot_id)

    def clear(self) -> AssignmentBuilder:
        return EMPTY_ASSIGNMENT


EMPTY_ASSIGNMENT = AssignmentBuilder()
