from __future__ import annotations

import sqlite3
from dataclasses import replace

import pytest

from backend.repository.data_repository import DataRepository, StoreError
from backend.utils.config import get_settings


COORDINATOR = "coord-repo"


class _TrackingConnection(sqlite3.Connection):
    was_closed = False

    def close(self) -> None:
        self.was_closed = True
        super().close()


def _track_connections(monkeypatch) -> list[_TrackingConnection]:
    opened: list[_TrackingConnection] = []
    original_connect = sqlite3.connect

    def tracking_connect(database, **kwargs):
        connection = original_connect(database, factory=_TrackingConnection, **kwargs)
        opened.append(connection)
        return connection

    monkeypatch.setattr(sqlite3, "connect", tracking_connect)
    return opened


def _build_repository(tmp_path) -> DataRepository:
    settings = replace(get_settings(), database_path=tmp_path / "repository.db", seed_demo_roster=False)
    repository = DataRepository(settings)
    repository.initialize_database()
    return repository


def test_every_call_closes_its_connection(monkeypatch, tmp_path):
    repository = _build_repository(tmp_path)
    opened = _track_connections(monkeypatch)

    professor = repository.create_professor(COORDINATOR, "Ana", "ana@example.edu")
    repository.list_professors(COORDINATOR)
    repository.delete_professor(COORDINATOR, professor.professor_id)
    repository.count_schedules(COORDINATOR)

    assert len(opened) == 4
    assert all(connection.was_closed for connection in opened)


def test_failed_write_rolls_back_and_closes(monkeypatch, tmp_path):
    repository = _build_repository(tmp_path)
    opened = _track_connections(monkeypatch)

    with pytest.raises(StoreError):
        repository.create_schedule_entry(
            coordinator_id=COORDINATOR,
            professor_id="missing-professor",
            room_id="missing-room",
            day_of_week="Segunda",
            start_time="19:00",
            end_time="20:30",
            has_conflict=False,
            conflict_reason="",
        )

    assert [connection.was_closed for connection in opened] == [True]
    assert repository.count_schedules(COORDINATOR) == 0
