"""Controller layer for coordinator dashboard and timetable endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from backend.controllers.dependencies import (
    current_coordinator,
    get_auth_service,
    get_notification_channel,
    get_slot_assigner,
    store_failure,
)
from backend.domain.assignment import AssignmentBuilder
from backend.domain.models import EntityType, Notification, ScheduleEntry
from backend.domain.timetable import build_grid_view
from backend.repository.data_repository import DataRepository, StoreError
from backend.services.auth_service import (
    AccessTokenNotConfiguredError,
    AuthService,
    InvalidAccessTokenError,
)
from backend.services.notification_service import NotificationChannel
from backend.services.slot_assigner import (
    AssignmentValidationError,
    DropOutcome,
    SlotAssigner,
)


router = APIRouter(tags=["dashboard"])

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class LoginRequest(BaseModel):
    coordinator_id: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    email: str = ""
    full_name: str = ""
    institution: str = ""


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    coordinator_id: str


class CoordinatorResponse(BaseModel):
    coordinator_id: str
    email: str
    full_name: str
    institution: str


class TimeSlotResponse(BaseModel):
    slot_id: str
    label: str
    start_time: str
    end_time: str
    is_break: bool


class ScheduleEntryResponse(BaseModel):
    entry_id: str
    professor_id: str
    room_id: str
    day_of_week: str
    start_time: str
    end_time: str
    has_conflict: bool
    conflict_reason: str
    created_at: str = ""


class GridCellResponse(BaseModel):
    day: str
    slot_id: str
    is_break: bool
    entry: Optional[ScheduleEntryResponse] = None
    professor_name: Optional[str] = None
    room_name: Optional[str] = None


class TimetableResponse(BaseModel):
    days: list[str]
    time_slots: list[TimeSlotResponse]
    cells: list[GridCellResponse]


class DragRequest(BaseModel):
    entity_type: EntityType
    entity_id: str = Field(min_length=1)
    display_name: str = ""


class DragResponse(BaseModel):
    entity_type: EntityType
    entity_id: str
    display_name: str


class DropRequest(BaseModel):
    day: str = Field(min_length=1)
    slot_id: str = Field(min_length=1)


class PendingAssignmentResponse(BaseModel):
    phase: str
    professor_id: Optional[str] = None
    room_id: Optional[str] = None
    day: Optional[str] = None
    slot_id: Optional[str] = None


class DropResponse(BaseModel):
    status: str
    assignment: PendingAssignmentResponse
    entry: Optional[ScheduleEntryResponse] = None


class CommitRequest(BaseModel):
    professor_id: str = Field(min_length=1)
    room_id: str = Field(min_length=1)
    day: str = Field(min_length=1)
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)


class ConflictCheckRequest(BaseModel):
    professor_id: str = Field(min_length=1)
    room_id: str = Field(min_length=1)
    day: str = Field(min_length=1)
    start_time: str = Field(pattern=TIME_PATTERN)


class ConflictCheckResponse(BaseModel):
    has_conflict: bool
    reason: str


class NotificationResponse(BaseModel):
    notification_id: str
    level: str
    message: str
    created_at: str


class DashboardStateResponse(BaseModel):
    professor_count: int = Field(ge=0)
    room_count: int = Field(ge=0)
    schedule_count: int = Field(ge=0)
    conflict_count: int = Field(ge=0)
    drag: Optional[DragResponse] = None
    assignment: PendingAssignmentResponse


def _entry_response(entry: ScheduleEntry) -> ScheduleEntryResponse:
    return ScheduleEntryResponse(
        entry_id=entry.entry_id,
        professor_id=entry.professor_id,
        room_id=entry.room_id,
        day_of_week=entry.day_of_week,
        start_time=entry.start_time,
        end_time=entry.end_time,
        has_conflict=entry.has_conflict,
        conflict_reason=entry.conflict_reason,
        created_at=entry.created_at,
    )


def _assignment_response(assignment: AssignmentBuilder) -> PendingAssignmentResponse:
    return PendingAssignmentResponse(
        phase=assignment.phase.value,
        professor_id=assignment.professor_id,
        room_id=assignment.room_id,
        day=assignment.day,
        slot_id=assignment.slot_id,
    )


def _drop_response(outcome: DropOutcome) -> DropResponse:
    return DropResponse(
        status=outcome.status.value,
        assignment=_assignment_response(outcome.assignment),
        entry=_entry_response(outcome.entry) if outcome.entry is not None else None,
    )


def _notification_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        notification_id=notification.notification_id,
        level=notification.level.value,
        message=notification.message,
        created_at=notification.created_at,
    )


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    try:
        bearer = auth_service.login(payload.coordinator_id, payload.access_token)
    except (AccessTokenNotConfiguredError, InvalidAccessTokenError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    repository: DataRepository | None = getattr(request.app.state, "repository", None)
    if repository is not None:
        try:
            repository.ensure_coordinator(
                payload.coordinator_id,
                email=payload.email,
                full_name=payload.full_name,
                institution=payload.institution,
            )
        except StoreError as exc:
            raise store_failure(exc, "register coordinator") from exc
    return LoginResponse(access_token=bearer, coordinator_id=payload.coordinator_id)


@router.get("/me", response_model=CoordinatorResponse, status_code=status.HTTP_200_OK)
async def me(
    request: Request,
    coordinator_id: str = Depends(current_coordinator),
) -> CoordinatorResponse:
    repository: DataRepository | None = getattr(request.app.state, "repository", None)
    coordinator = repository.get_coordinator(coordinator_id) if repository is not None else None
    if coordinator is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Coordinator {coordinator_id} has no profile",
        )
    return CoordinatorResponse(
        coordinator_id=coordinator.coordinator_id,
        email=coordinator.email,
        full_name=coordinator.full_name,
        institution=coordinator.institution,
    )


@router.get("/timetable", response_model=TimetableResponse, status_code=status.HTTP_200_OK)
async def timetable(
    coordinator_id: str = Depends(current_coordinator),
    assigner: SlotAssigner = Depends(get_slot_assigner),
) -> TimetableResponse:
    try:
        state = assigner.get_state(coordinator_id)
    except StoreError as exc:
        raise store_failure(exc, "load timetable") from exc

    professor_names = {item.professor_id: item.full_name for item in state.snapshot.professors}
    room_names = {item.room_id: item.name for item in state.snapshot.rooms}
    cells = [
        GridCellResponse(
            day=cell.day,
            slot_id=cell.slot.slot_id,
            is_break=cell.slot.is_break,
            entry=_entry_response(cell.entry) if cell.entry is not None else None,
            professor_name=professor_names.get(cell.entry.professor_id) if cell.entry else None,
            room_name=room_names.get(cell.entry.room_id) if cell.entry else None,
        )
        for cell in build_grid_view(assigner.grid, state.snapshot.schedules)
    ]
    return TimetableResponse(
        days=list(assigner.grid.days),
        time_slots=[
            TimeSlotResponse(
                slot_id=slot.slot_id,
                label=slot.label,
                start_time=slot.start_time,
                end_time=slot.end_time,
                is_break=slot.is_break,
            )
            for slot in assigner.grid.time_slots
        ],
        cells=cells,
    )


@router.get(
    "/dashboard_state",
    response_model=DashboardStateResponse,
    status_code=status.HTTP_200_OK,
)
async def dashboard_state(
    coordinator_id: str = Depends(current_coordinator),
    assigner: SlotAssigner = Depends(get_slot_assigner),
) -> DashboardStateResponse:
    try:
        state = assigner.get_state(coordinator_id)
    except StoreError as exc:
        raise store_failure(exc, "load dashboard state") from exc
    snapshot = state.snapshot
    return DashboardStateResponse(
        professor_count=len(snapshot.professors),
        room_count=len(snapshot.rooms),
        schedule_count=len(snapshot.schedules),
        conflict_count=sum(1 for entry in snapshot.schedules if entry.has_conflict),
        drag=(
            DragResponse(
                entity_type=state.drag.entity_type,
                entity_id=state.drag.entity_id,
                display_name=state.drag.display_name,
            )
            if state.drag is not None
            else None
        ),
        assignment=_assignment_response(state.assignment),
    )


@router.post("/refresh", response_model=DashboardStateResponse, status_code=status.HTTP_200_OK)
async def refresh(
    coordinator_id: str = Depends(current_coordinator),
    assigner: SlotAssigner = Depends(get_slot_assigner),
) -> DashboardStateResponse:
    try:
        assigner.load_state(coordinator_id)
    except StoreError as exc:
        raise store_failure(exc, "refresh dashboard") from exc
    return await dashboard_state(coordinator_id=coordinator_id, assigner=assigner)


@router.post("/drag", response_model=DragResponse, status_code=status.HTTP_200_OK)
async def drag(
    payload: DragRequest,
    coordinator_id: str = Depends(current_coordinator),
    assigner: SlotAssigner = Depends(get_slot_assigner),
) -> DragResponse:
    result = assigner.begin_drag(
        coordinator_id,
        entity_type=payload.entity_type,
        entity_id=payload.entity_id,
        display_name=payload.display_name,
    )
    return DragResponse(
        entity_type=result.entity_type,
        entity_id=result.entity_id,
        display_name=result.display_name,
    )


@router.post("/drop", response_model=DropResponse, status_code=status.HTTP_200_OK)
async def drop(
    payload: DropRequest,
    coordinator_id: str = Depends(current_coordinator),
    assigner: SlotAssigner = Depends(get_slot_assigner),
) -> DropResponse:
    try:
        outcome = assigner.drop_on_cell(coordinator_id, payload.day, payload.slot_id)
        return _drop_response(outcome)
    except AssignmentValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StoreError as exc:
        raise store_failure(exc, "drop onto timetable") from exc


@router.get(
    "/schedules",
    response_model=list[ScheduleEntryResponse],
    status_code=status.HTTP_200_OK,
)
async def list_schedules(
    coordinator_id: str = Depends(current_coordinator),
    assigner: SlotAssigner = Depends(get_slot_assigner),
) -> list[ScheduleEntryResponse]:
    try:
        state = assigner.get_state(coordinator_id)
    except StoreError as exc:
        raise store_failure(exc, "load schedules") from exc
    return [_entry_response(entry) for entry in state.snapshot.schedules]


@router.post(
    "/schedules",
    response_model=ScheduleEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def commit_schedule(
    payload: CommitRequest,
    coordinator_id: str = Depends(current_coordinator),
    assigner: SlotAssigner = Depends(get_slot_assigner),
) -> ScheduleEntryResponse:
    try:
        entry = assigner.commit(
            coordinator_id,
            professor_id=payload.professor_id,
            room_id=payload.room_id,
            day=payload.day,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
    except AssignmentValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StoreError as exc:
        raise store_failure(exc, "commit schedule") from exc
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Schedule entry was not stored",
        )
    return _entry_response(entry)


@router.post(
    "/conflicts/check",
    response_model=ConflictCheckResponse,
    status_code=status.HTTP_200_OK,
)
async def check_conflict(
    payload: ConflictCheckRequest,
    coordinator_id: str = Depends(current_coordinator),
    assigner: SlotAssigner = Depends(get_slot_assigner),
) -> ConflictCheckResponse:
    try:
        result = assigner.detect_conflict(
            coordinator_id,
            professor_id=payload.professor_id,
            room_id=payload.room_id,
            day=payload.day,
            start_time=payload.start_time,
        )
    except StoreError as exc:
        raise store_failure(exc, "check conflicts") from exc
    return ConflictCheckResponse(has_conflict=result.has_conflict, reason=result.reason)


@router.get(
    "/notifications",
    response_model=list[NotificationResponse],
    status_code=status.HTTP_200_OK,
)
async def notifications(
    drain: bool = False,
    coordinator_id: str = Depends(current_coordinator),
    channel: NotificationChannel = Depends(get_notification_channel),
) -> list[NotificationResponse]:
    items = channel.drain(coordinator_id) if drain else channel.list(coordinator_id)
    return [_notification_response(item) for item in items]
