from __future__ import annotations

from dataclasses import replace

import pytest

from backend.domain.models import NotificationLevel
from backend.repository.data_repository import DataRepository, StoreError
from backend.services.notification_service import NotificationChannel
from backend.services.roster_service import (
    RosterRecordNotFoundError,
    RosterService,
    RosterValidationError,
)
from backend.services.slot_assigner import SlotAssigner
from backend.utils.config import get_settings


COORDINATOR = "coord-roster"


def _build_service(tmp_path):
    settings = replace(get_settings(), database_path=tmp_path / "roster.db", seed_demo_roster=False)
    repository = DataRepository(settings)
    repository.initialize_database()
    notifications = NotificationChannel(settings)
    service = RosterService(repository=repository, notifications=notifications, settings=settings)
    return service, repository, notifications


def test_professors_are_listed_by_name_with_defaults(tmp_path):
    service, _, notifications = _build_service(tmp_path)
    service.create_professor(COORDINATOR, full_name="Zeca", email="zeca@example.edu")
    created = service.create_professor(
        COORDINATOR,
        full_name="  Alice  ",
        email="alice@example.edu",
        work_shifts=["Noite", "Tarde", "Noite"],
    )

    professors = service.list_professors(COORDINATOR)
    assert [item.full_name for item in professors] == ["Alice", "Zeca"]
    assert created.work_shifts == ("Noite", "Tarde")
    assert created.availability == ()
    assert created.calendar_connected is False
    assert [item.level for item in notifications.list(COORDINATOR)] == [NotificationLevel.SUCCESS] * 2


def test_rooms_are_listed_by_name(tmp_path):
    service, _, _ = _build_service(tmp_path)
    service.create_room(COORDINATOR, name="Sala 202", capacity=30)
    service.create_room(
        COORDINATOR,
        name="Laboratório",
        capacity=20,
        room_type="laboratorio",
        equipment=["Projetor", "Projetor", "Computadores"],
    )

    rooms = service.list_rooms(COORDINATOR)
    assert [item.name for item in rooms] == ["Laboratório", "Sala 202"]
    assert rooms[0].equipment == ("Projetor", "Computadores")
    assert rooms[1].room_type == "sala"


@pytest.mark.parametrize(
    "overrides",
    [
        {"full_name": " "},
        {"email": "not-an-email"},
        {"work_shifts": ["Madrugada"]},
    ],
)
def test_invalid_professor_is_rejected(tmp_path, overrides):
    service, repository, _ = _build_service(tmp_path)
    payload = {"full_name": "Ana", "email": "ana@example.edu", "work_shifts": ["Noite"]}
    payload.update(overrides)
    with pytest.raises(RosterValidationError):
        service.create_professor(COORDINATOR, **payload)
    assert repository.list_professors(COORDINATOR) == []


def test_room_capacity_must_be_positive(tmp_path):
    service, _, _ = _build_service(tmp_path)
    with pytest.raises(RosterValidationError):
        service.create_room(COORDINATOR, name="Sala", capacity=0)


def test_failed_insert_publishes_error_and_reraises(monkeypatch, tmp_path):
    service, repository, notifications = _build_service(tmp_path)

    def failing_insert(**kwargs):
        raise StoreError("Room insert failed")

    monkeypatch.setattr(repository, "create_room", failing_insert)
    with pytest.raises(StoreError):
        service.create_room(COORDINATOR, name="Sala", capacity=10)
    assert [item.level for item in notifications.list(COORDINATOR)] == [NotificationLevel.ERROR]


def test_delete_cascades_to_schedules(tmp_path):
    service, repository, _ = _build_service(tmp_path)
    professor = service.create_professor(COORDINATOR, full_name="Ana", email="ana@example.edu")
    room = service.create_room(COORDINATOR, name="Sala", capacity=10)
    repository.create_schedule_entry(
        coordinator_id=COORDINATOR,
        professor_id=professor.professor_id,
        room_id=room.room_id,
        day_of_week="Segunda",
        start_time="19:00",
        end_time="20:30",
        has_conflict=False,
        conflict_reason="",
    )

    service.delete_professor(COORDINATOR, professor.professor_id)

    assert service.list_professors(COORDINATOR) == []
    assert repository.count_schedules(COORDINATOR) == 0


def test_delete_is_scoped_to_owner(tmp_path):
    service, _, _ = _build_service(tmp_path)
    room = service.create_room(COORDINATOR, name="Sala", capacity=10)
    with pytest.raises(RosterRecordNotFoundError):
        service.delete_room("someone-else", room.room_id)
    service.delete_room(COORDINATOR, room.room_id)
    with pytest.raises(RosterRecordNotFoundError):
        service.delete_room(COORDINATOR, room.room_id)


def test_roster_changes_mark_assigner_snapshot_stale(tmp_path):
    settings = replace(get_settings(), database_path=tmp_path / "stale.db", seed_demo_roster=False)
    repository = DataRepository(settings)
    repository.initialize_database()
    notifications = NotificationChannel(settings)
    assigner = SlotAssigner(repository=repository, notifications=notifications, settings=settings)
    service = RosterService(
        repository=repository,
        notifications=notifications,
        settings=settings,
        slot_assigner=assigner,
    )
    first = service.create_professor(COORDINATOR, full_name="Ana", email="ana@example.edu")
    second = service.create_professor(COORDINATOR, full_name="Bia", email="bia@example.edu")
    room = service.create_room(COORDINATOR, name="Sala", capacity=10)
    assert len(assigner.get_state(COORDINATOR).snapshot.professors) == 2

    assigner.commit(
        COORDINATOR,
        professor_id=first.professor_id,
        room_id=room.room_id,
        day="Segunda",
        start_time="19:00",
        end_time="20:30",
    )
    service.delete_professor(COORDINATOR, first.professor_id)

    assert assigner.get_state(COORDINATOR).snapshot.schedules == ()
    replacement = assigner.commit(
        COORDINATOR,
        professor_id=second.professor_id,
        room_id=room.room_id,
        day="Segunda",
        start_time="19:00",
        end_time="20:30",
    )
    assert replacement is not None
    assert replacement.has_conflict is False
