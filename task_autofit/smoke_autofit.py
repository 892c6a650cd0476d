"""Smoke test: auto-fit on a fixed sample day (no network, no writes).

Reads:
- AUTOFIT_SMOKE_TZ (IANA zone, default America/Toronto; invalid values fall back to UTC)

Behavior:
- Plans a fixed target date (2025-12-15)
- Two working periods (09:00-12:00 with a "-errand" filter, 13:00-17:00 unfiltered)
- One meeting 10:00-11:00 and one placement the user already dragged in at 14:00
- Runs the single global pass first, then the per-period pass, and prints both

Run:
    python -u -m task_autofit.smoke_autofit
"""

from __future__ import annotations

import os

from task_autofit import config
from task_autofit.autofit import auto_fit_tasks
from task_autofit.models import (
    AutoFitResult,
    CalendarEvent,
    Placement,
    Settings,
    Task,
    WorkingHourFilter,
    WorkingHours,
)
from task_autofit.timezone import instant_in_zone, wall_time_to_instant, zone_or_utc

TARGET_DATE = "2025-12-15"


def sample_tasks() -> list[Task]:
    return [
        Task(id="t1", title="Write report", list_id="work", list_title="Work", due="2025-12-16T00:00:00Z"),
        Task(id="t2", title="Pick up parcel", notes="errand", list_id="home", list_title="Home"),
        Task(id="t3", title="Review PRs", list_id="work", list_title="Work", starred=True),
        Task(id="t4", title="Plan sprint", list_id="work", list_title="Work", has_subtasks=True),
        Task(id="t5", title="Call plumber", list_id="home", list_title="Home", due="2025-12-15T00:00:00Z"),
        Task(id="t6", title="Inbox zero", list_id="work", list_title="Work"),
    ]


def print_result(title: str, result: AutoFitResult, tz_name: str) -> None:
    print(f"\n=== {title} ===")
    for p in result.placements:
        local = instant_in_zone(p.start_time, tz_name)
        color = f" [{p.working_hour_color}]" if p.working_hour_color else ""
        print(f"- {local:%H:%M} ({p.duration} min) {p.task_title}{color}")
    for t in result.unplaced_tasks:
        print(f"  unplaced: {t.title}")
    print(result.message)


def main() -> None:
    config.configure_logging()
    tz_name = zone_or_utc(os.getenv("AUTOFIT_SMOKE_TZ", "America/Toronto"))

    settings = Settings(
        default_task_duration=30,
        min_time_between_tasks=15,
        slot_min_time="08:00",
        slot_max_time="20:00",
        working_hours=[
            WorkingHours(id="morning", start="09:00", end="12:00", color="#7ae7bf"),
            WorkingHours(id="afternoon", start="13:00", end="17:00"),
        ],
    )

    meeting = CalendarEvent(
        id="evt-1",
        summary="Team sync",
        start={"dateTime": wall_time_to_instant(TARGET_DATE, "10:00", tz_name).isoformat()},
        end={"dateTime": wall_time_to_instant(TARGET_DATE, "11:00", tz_name).isoformat()},
    )
    dragged = Placement(
        id="manual-1",
        task_id="t0",
        task_title="Already placed",
        start_time=wall_time_to_instant(TARGET_DATE, "14:00", tz_name),
        duration=30,
    )

    print(f"Date: {TARGET_DATE}  Zone: {tz_name}")

    legacy = auto_fit_tasks(sample_tasks(), [meeting], [dragged], settings, TARGET_DATE, tz_name)
    print_result("GLOBAL PASS", legacy, tz_name)

    filters = {"morning": WorkingHourFilter(search_text="-errand")}
    per_period = auto_fit_tasks(sample_tasks(), [meeting], [dragged], settings, TARGET_DATE, tz_name, filters)
    print_result("PER-PERIOD PASS", per_period, tz_name)


if __name__ == "__main__":
    main()
