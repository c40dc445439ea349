#!/usr/bin/env python3
"""Validate local timetable environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.domain.timetable import build_timetable_grid
from backend.repository.data_repository import DataRepository
from backend.services.notification_service import NotificationChannel
from backend.services.slot_assigner import SlotAssigner
from backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44
VALIDATION_COORDINATOR = "env-check"


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="timetable-env-")

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("pandas", "pandas"),
        ("requests", "requests"),
        ("streamlit", "streamlit"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{dist_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        base_settings = get_settings()
        validation_settings = replace(
            base_settings,
            database_path=Path(temp_dir) / "timetable_validation.db",
        )

        # CHECK 3: Timetable grid configuration
        try:
            grid = build_timetable_grid(
                validation_settings.schedule_days,
                validation_settings.time_slots,
            )
            ok, line = _print_result(
                "Timetable grid",
                True,
                f": {len(grid.days)} days x {len(grid.assignable_slots)} assignable slots",
            )
        except ValueError as exc:
            ok, line = _print_result("Timetable grid", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        repository = DataRepository(validation_settings)

        # CHECK 4: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Demo roster seeding (3 professors + 3 rooms)
        try:
            seeded = repository.seed_demo_roster(VALIDATION_COORDINATOR)
            if seeded != 6:
                raise RuntimeError(f"expected 6 roster rows, got {seeded}")
            ok, line = _print_result("Demo roster: 6 rows", True)
        except Exception as exc:
            ok, line = _print_result("Demo roster", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 6: Sample commit with conflict flagging
        try:
            assigner = SlotAssigner(
                repository=repository,
                notifications=NotificationChannel(validation_settings),
                settings=validation_settings,
            )
            snapshot = assigner.load_state(VALIDATION_COORDINATOR)
            professor = snapshot.professors[0]
            room = snapshot.rooms[0]
            slot = assigner.grid.assignable_slots[0]
            day = assigner.grid.days[0]
            first = assigner.commit(
                VALIDATION_COORDINATOR,
                professor_id=professor.professor_id,
                room_id=room.room_id,
                day=day,
                start_time=slot.start_time,
                end_time=slot.end_time,
            )
            second = assigner.commit(
                VALIDATION_COORDINATOR,
                professor_id=professor.professor_id,
                room_id=room.room_id,
                day=day,
                start_time=slot.start_time,
                end_time=slot.end_time,
            )
            if first is None or second is None:
                raise RuntimeError("schedule insert failed")
            if first.has_conflict or not second.has_conflict:
                raise RuntimeError("conflict flags do not match expectations")
            ok, line = _print_result(
                "Sample commit",
                True,
                f": duplicate flagged ({second.conflict_reason})",
            )
        except Exception as exc:
            ok, line = _print_result("Sample commit", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Timetable Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
