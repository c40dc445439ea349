"""HTTP controller layer for professor and room management."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, field_validator

from backend.controllers.dependencies import current_coordinator, get_roster_service, store_failure
from backend.domain.models import Professor, Room
from backend.repository.data_repository import StoreError
from backend.services.roster_service import (
    DEFAULT_ROOM_TYPE,
    RosterRecordNotFoundError,
    RosterService,
    RosterValidationError,
)


router = APIRouter(tags=["roster"])


class ProfessorCreateRequest(BaseModel):
    """Input DTO validated before entering service layer."""

    full_name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    additional_institution: str = ""
    work_shifts: list[str] = Field(default_factory=list)


class ProfessorResponse(BaseModel):
    professor_id: str
    full_name: str
    email: str
    additional_institution: str
    work_shifts: list[str]
    availability: list[str]
    calendar_connected: bool


class RoomCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    type: str = Field(default=DEFAULT_ROOM_TYPE, min_length=1)
    capacity: int = Field(gt=0)
    equipment: list[str] = Field(default_factory=list)

    @field_validator("equipment")
    @classmethod
    def validate_equipment(cls, value: list[str]) -> list[str]:
        for item in value:
            if not item.strip():
                raise ValueError("equipment labels must be non-empty")
        return value


class RoomResponse(BaseModel):
    room_id: str
    name: str
    type: str
    capacity: int = Field(gt=0)
    equipment: list[str]


def _professor_response(professor: Professor) -> ProfessorResponse:
    return ProfessorResponse(
        professor_id=professor.professor_id,
        full_name=professor.full_name,
        email=professor.email,
        additional_institution=professor.additional_institution,
        work_shifts=list(professor.work_shifts),
        availability=list(professor.availability),
        calendar_connected=professor.calendar_connected,
    )


def _room_response(room: Room) -> RoomResponse:
    return RoomResponse(
        room_id=room.room_id,
        name=room.name,
        type=room.room_type,
        capacity=room.capacity,
        equipment=list(room.equipment),
    )


@router.get("/professors", response_model=list[ProfessorResponse], status_code=status.HTTP_200_OK)
async def list_professors(
    coordinator_id: str = Depends(current_coordinator),
    service: RosterService = Depends(get_roster_service),
) -> list[ProfessorResponse]:
    try:
        return [_professor_response(item) for item in service.list_professors(coordinator_id)]
    except StoreError as exc:
        raise store_failure(exc, "list professors") from exc


@router.post("/professors", response_model=ProfessorResponse, status_code=status.HTTP_201_CREATED)
async def create_professor(
    payload: ProfessorCreateRequest,
    coordinator_id: str = Depends(current_coordinator),
    service: RosterService = Depends(get_roster_service),
) -> ProfessorResponse:
    try:
        professor = service.create_professor(
            coordinator_id,
            full_name=payload.full_name,
            email=payload.email,
            additional_institution=payload.additional_institution,
            work_shifts=payload.work_shifts,
        )
        return _professor_response(professor)
    except RosterValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StoreError as exc:
        raise store_failure(exc, "register professor") from exc


@router.delete("/professors/{professor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_professor(
    professor_id: str,
    coordinator_id: str = Depends(current_coordinator),
    service: RosterService = Depends(get_roster_service),
) -> Response:
    try:
        service.delete_professor(coordinator_id, professor_id)
    except RosterRecordNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except StoreError as exc:
        raise store_failure(exc, "remove professor") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/rooms", response_model=list[RoomResponse], status_code=status.HTTP_200_OK)
async def list_rooms(
    coordinator_id: str = Depends(current_coordinator),
    service: RosterService = Depends(get_roster_service),
) -> list[RoomResponse]:
    try:
        return [_room_response(item) for item in service.list_rooms(coordinator_id)]
    except StoreError as exc:
        raise store_failure(exc, "list rooms") from exc


@router.post("/rooms", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    payload: RoomCreateRequest,
    coordinator_id: str = Depends(current_coordinator),
    service: RosterService = Depends(get_roster_service),
) -> RoomResponse:
    try:
        room = service.create_room(
            coordinator_id,
            name=payload.name,
            room_type=payload.type,
            capacity=payload.capacity,
            equipment=payload.equipment,
        )
        return _room_response(room)
    except RosterValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StoreError as exc:
        raise store_failure(exc, "register room") from exc


@router.delete("/rooms/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: str,
    coordinator_id: str = Depends(current_coordinator),
    service: RosterService = Depends(get_roster_service),
) -> Response:
    try:
        service.delete_room(coordinator_id, room_id)
    except RosterRecordNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except StoreError as exc:
        raise store_failure(exc, "remove room") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
