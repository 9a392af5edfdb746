#!/usr/bin/env python3
"""Validate local Marchen environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from marchen.domain.models import StaffingInput
from marchen.repository.data_repository import DataRepository
from marchen.services.schedule_optimizer import ScheduleOptimizationService
from marchen.services.staffing_calculator import calculate_staffing
from marchen.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="marchen-env-")

    # CHECK 1 - Python version >= 3.10
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

    # CHECK 2 - Required packages importable
    package_names = ["fastapi", "uvicorn", "pydantic", "pandas", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_names:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
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
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "marchen_validation.db",
        )
        repository = DataRepository(validation_settings)

        # CHECK 3 - Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except RuntimeError as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4 - Demo seeding
        try:
            seeded_rows = repository.seed_demo_data()
            if seeded_rows <= 0:
                raise RuntimeError("demo seed wrote no availability rows")
            ok, line = _print_result("Demo seed", True, f": {seeded_rows} availability rows")
        except RuntimeError as exc:
            ok, line = _print_result("Demo seed", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5 - Date ranking over the demo event
        try:
            service = ScheduleOptimizationService(repository=repository, settings=validation_settings)
            event_id = repository.list_events()[0].event_id
            ranking = service.rank_dates_for_event(
                event_id=event_id,
                start=date(2026, 4, 1),
                end=date(2026, 4, 30),
            )
            if len(ranking) != 30:
                raise RuntimeError(f"expected 30 ranked days, got {len(ranking)}")
            ok, line = _print_result(
                "Date ranking",
                True,
                f": best={ranking[0].date.isoformat()} score={ranking[0].score}",
            )
        except Exception as exc:
            ok, line = _print_result("Date ranking", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 6 - Staffing estimate
        try:
            recommendations = calculate_staffing(StaffingInput(max_vendors=30))
            total = sum(item.headcount for item in recommendations)
            ok, line = _print_result("Staffing estimate", True, f": total_headcount={total}")
        except Exception as exc:
            ok, line = _print_result("Staffing estimate", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Marchen Environment Validation")
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
