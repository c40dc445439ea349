"""Repository layer responsible for all database access."""

from __future__ import annotations

import json
import sqlite3
import uuid
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

from backend.domain.models import Coordinator, Professor, Room, ScheduleEntry
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class StoreError(RuntimeError):
    """Raised when the roster or schedule store cannot complete a call."""


def _new_id() -> str:
    return uuid.uuid4().hex


def _dump_labels(values: Sequence[str]) -> str:
    return json.dumps(list(values), ensure_ascii=False)


def _load_labels(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(str(item) for item in json.loads(raw))


def _to_professor(row: sqlite3.Row) -> Professor:
    return Professor(
        professor_id=str(row["id"]),
        coordinator_id=str(row["coordinator_id"]),
        full_name=str(row["full_name"]),
        email=str(row["email"]),
        additional_institution=str(row["additional_institution"] or ""),
        work_shifts=_load_labels(row["work_shifts"]),
        availability=_load_labels(row["availability"]),
        calendar_connected=bool(row["calendar_connected"]),
    )


def _to_room(row: sqlite3.Row) -> Room:
    return Room(
        room_id=str(row["id"]),
        coordinator_id=str(row["coordinator_id"]),
        name=str(row["name"]),
        room_type=str(row["type"]),
        capacity=int(row["capacity"]),
        equipment=_load_labels(row["equipment"]),
    )


def _to_schedule_entry(row: sqlite3.Row) -> ScheduleEntry:
    return ScheduleEntry(
        entry_id=str(row["id"]),
        coordinator_id=str(row["coordinator_id"]),
        professor_id=str(row["professor_id"]),
        room_id=str(row["room_id"]),
        day_of_week=str(row["day_of_week"]),
        start_time=str(row["start_time"]),
        end_time=str(row["end_time"]),
        has_conflict=bool(row["has_conflict"]),
        conflict_reason=str(row["conflict_reason"] or ""),
        created_at=str(row["created_at"] or ""),
    )


class DataRepository:
    """Roster and schedule tables behind one SQLite file.

    Every query is scoped to the owning coordinator id, mirroring the
    row-level ownership of the hosted table store.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection for one call: commit or roll back, then close."""
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        with closing(connection), connection:
            yield connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Coordinators (
                        id TEXT PRIMARY KEY,
                        email TEXT NOT NULL,
                        full_name TEXT NOT NULL,
                        institution TEXT NOT NULL DEFAULT '',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Professors (
                        id TEXT PRIMARY KEY,
                        coordinator_id TEXT NOT NULL,
                        full_name TEXT NOT NULL,
                        email TEXT NOT NULL,
                        additional_institution TEXT NOT NULL DEFAULT '',
                        work_shifts TEXT NOT NULL DEFAULT '[]',
                        availability TEXT NOT NULL DEFAULT '[]',
                        calendar_connected INTEGER NOT NULL DEFAULT 0
                            CHECK (calendar_connected IN (0,1)),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Rooms (
                        id TEXT PRIMARY KEY,
                        coordinator_id TEXT NOT NULL,
                        name TEXT NOT NULL,
                        type TEXT NOT NULL,
                        capacity INTEGER NOT NULL CHECK (capacity > 0),
                        equipment TEXT NOT NULL DEFAULT '[]',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Schedules (
                        id TEXT PRIMARY KEY,
                        coordinator_id TEXT NOT NULL,
                        professor_id TEXT NOT NULL,
                        room_id TEXT NOT NULL,
                        day_of_week TEXT NOT NULL,
                        start_time TEXT NOT NULL,
                        end_time TEXT NOT NULL,
                        has_conflict INTEGER NOT NULL DEFAULT 0
                            CHECK (has_conflict IN (0,1)),
                        conflict_reason TEXT NOT NULL DEFAULT '',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (professor_id) REFERENCES Professors(id) ON DELETE CASCADE,
                        FOREIGN KEY (room_id) REFERENCES Rooms(id) ON DELETE CASCADE
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_professors_coordinator_name
                    ON Professors(coordinator_id, full_name);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_rooms_coordinator_name
                    ON Rooms(coordinator_id, name);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_schedules_coordinator
                    ON Schedules(coordinator_id);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise StoreError(f"Database initialization failed: {exc}") from exc

    def seed_demo_roster(self, coordinator_id: str) -> int:
        """Seed a small roster for a coordinator only when they own none.

        Returns the number of inserted professor and room rows.
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT COUNT(*) AS count FROM Professors WHERE coordinator_id = ?;",
                    (coordinator_id,),
                )
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Demo roster already present for %s; skipping seed", coordinator_id)
                    return 0

                professors = [
                    ("Ana Souza", "ana.souza@example.edu", ["Noite"]),
                    ("Bruno Lima", "bruno.lima@example.edu", ["Tarde", "Noite"]),
                    ("Carla Mendes", "carla.mendes@example.edu", ["Noite"]),
                ]
                rooms = [
                    ("Laboratório 1", "laboratorio", 25, ["Computadores", "Projetor"]),
                    ("Sala 101", "sala", 40, ["Projetor", "Quadro Branco"]),
                    ("Auditório", "auditorio", 120, ["Projetor", "Som"]),
                ]
                cursor.executemany(
                    """
                    INSERT INTO Professors (id, coordinator_id, full_name, email, work_shifts)
                    VALUES (?, ?, ?, ?, ?);
                    """,
                    [
                        (_new_id(), coordinator_id, name, email, _dump_labels(shifts))
                        for name, email, shifts in professors
                    ],
                )
                cursor.executemany(
                    """
                    INSERT INTO Rooms (id, coordinator_id, name, type, capacity, equipment)
                    VALUES (?, ?, ?, ?, ?, ?);
                    """,
                    [
                        (_new_id(), coordinator_id, name, room_type, capacity, _dump_labels(equipment))
                        for name, room_type, capacity, equipment in rooms
                    ],
                )
                conn.commit()
            inserted = len(professors) + len(rooms)
            logger.info("Demo roster seeded for %s with %s records", coordinator_id, inserted)
            return inserted
        except sqlite3.Error as exc:
            raise StoreError(f"Demo roster seeding failed: {exc}") from exc

    # --- Coordinators ---

    def get_coordinator(self, coordinator_id: str) -> Optional[Coordinator]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, email, full_name, institution FROM Coordinators WHERE id = ?;",
                (coordinator_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return Coordinator(
                coordinator_id=str(row["id"]),
                email=str(row["email"]),
                full_name=str(row["full_name"]),
                institution=str(row["institution"] or ""),
            )

    def ensure_coordinator(
        self,
        coordinator_id: str,
        email: str = "",
        full_name: str = "",
        institution: str = "",
    ) -> Coordinator:
        """Insert the coordinator profile row if the identity is new."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT OR IGNORE INTO Coordinators (id, email, full_name, institution)
                    VALUES (?, ?, ?, ?);
                    """,
                    (coordinator_id, email, full_name or coordinator_id, institution),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Coordinator insert failed: {exc}") from exc
        coordinator = self.get_coordinator(coordinator_id)
        if coordinator is None:
            raise StoreError(f"Coordinator {coordinator_id} could not be loaded")
        return coordinator

    # --- Roster store ---

    def list_professors(self, coordinator_id: str) -> list[Professor]:
        """Return professors ordered by name."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT *
                    FROM Professors
                    WHERE coordinator_id = ?
                    ORDER BY full_name ASC, id ASC;
                    """,
                    (coordinator_id,),
                )
                return [_to_professor(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise StoreError(f"Professor select failed: {exc}") from exc

    def list_rooms(self, coordinator_id: str) -> list[Room]:
        """Return rooms ordered by name."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT *
                    FROM Rooms
                    WHERE coordinator_id = ?
                    ORDER BY name ASC, id ASC;
                    """,
                    (coordinator_id,),
                )
                return [_to_room(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise StoreError(f"Room select failed: {exc}") from exc

    def create_professor(
        self,
        coordinator_id: str,
        full_name: str,
        email: str,
        additional_institution: str = "",
        work_shifts: Sequence[str] = (),
        availability: Sequence[str] = (),
        calendar_connected: bool = False,
    ) -> Professor:
        professor = Professor(
            professor_id=_new_id(),
            coordinator_id=coordinator_id,
            full_name=full_name,
            email=email,
            additional_institution=additional_institution,
            work_shifts=tuple(work_shifts),
            availability=tuple(availability),
            calendar_connected=calendar_connected,
        )
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO Professors (
                        id,
                        coordinator_id,
                        full_name,
                        email,
                        additional_institution,
                        work_shifts,
                        availability,
                        calendar_connected
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        professor.professor_id,
                        coordinator_id,
                        full_name,
                        email,
                        additional_institution,
                        _dump_labels(professor.work_shifts),
                        _dump_labels(professor.availability),
                        int(calendar_connected),
                    ),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Professor insert failed: {exc}") from exc
        return professor

    def create_room(
        self,
        coordinator_id: str,
        name: str,
        room_type: str,
        capacity: int,
        equipment: Sequence[str] = (),
    ) -> Room:
        room = Room(
            room_id=_new_id(),
            coordinator_id=coordinator_id,
            name=name,
            room_type=room_type,
            capacity=capacity,
            equipment=tuple(equipment),
        )
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO Rooms (id, coordinator_id, name, type, capacity, equipment)
                    VALUES (?, ?, ?, ?, ?, ?);
                    """,
                    (
                        room.room_id,
                        coordinator_id,
                        name,
                        room_type,
                        capacity,
                        _dump_labels(room.equipment),
                    ),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Room insert failed: {exc}") from exc
        return room

    def _delete_by_id(self, table: str, coordinator_id: str, record_id: str) -> bool:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"DELETE FROM {table} WHERE id = ? AND coordinator_id = ?;",
                    (record_id, coordinator_id),
                )
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as exc:
            raise StoreError(f"{table} delete failed: {exc}") from exc

    def delete_professor(self, coordinator_id: str, professor_id: str) -> bool:
        """Delete a professor; their schedule entries go with them."""
        return self._delete_by_id("Professors", coordinator_id, professor_id)

    def delete_room(self, coordinator_id: str, room_id: str) -> bool:
        """Delete a room; its schedule entries go with it."""
        return self._delete_by_id("Rooms", coordinator_id, room_id)

    # --- Schedule store ---

    def list_schedules(self, coordinator_id: str) -> list[ScheduleEntry]:
        """Return every schedule entry in insertion order."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT *
                    FROM Schedules
                    WHERE coordinator_id = ?
                    ORDER BY rowid ASC;
                    """,
                    (coordinator_id,),
                )
                return [_to_schedule_entry(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise StoreError(f"Schedule select failed: {exc}") from exc

    def create_schedule_entry(
        self,
        coordinator_id: str,
        professor_id: str,
        room_id: str,
        day_of_week: str,
        start_time: str,
        end_time: str,
        has_conflict: bool,
        conflict_reason: str,
    ) -> str:
        """Insert a schedule row and return the created id."""
        entry_id = _new_id()
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO Schedules (
                        id,
                        coordinator_id,
                        professor_id,
                        room_id,
                        day_of_week,
                        start_time,
                        end_time,
                        has_conflict,
                        conflict_reason
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        entry_id,
                        coordinator_id,
                        professor_id,
                        room_id,
                        day_of_week,
                        start_time,
                        end_time,
                        int(has_conflict),
                        conflict_reason,
                    ),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Schedule insert failed: {exc}") from exc
        return entry_id

    def count_schedules(self, coordinator_id: str) -> int:
        """Return persisted schedule count for diagnostics and tests."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM Schedules WHERE coordinator_id = ?;",
                (coordinator_id,),
            )
            return int(cursor.fetchone()["count"])
