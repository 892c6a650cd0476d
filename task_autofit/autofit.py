# task_autofit/autofit.py
"""
Auto-fit: pack tasks into a day's free working time.

Pipeline (one call, no shared state):
1) calendar visible range + working-hour periods -> instants (viewing timezone)
2) periods clipped to the visible range -> global availability
3) minus past time (if the date is today), minus busy time (events, placements, min gap)
4) tasks sorted by priority, each placed at the earliest slot that fits

Two modes share one fill loop:
- no filter map: a single global pass; a task that doesn't fit is skipped, the pass continues
- filter map (even empty): periods in configured order, each with its own optional filter;
  a period stops at its first task that doesn't fit, leftovers carry to later periods

Greedy and final: nothing is revisited once placed.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Set, Tuple

from task_autofit.models import (
    AutoFitRequest,
    AutoFitResult,
    CalendarEvent,
    Placement,
    Settings,
    Task,
    WorkingHourFilter,
    WorkingHours,
)
from task_autofit.planner import (
    Interval,
    blocked_intervals,
    clip_to_range,
    find_first_fit,
    round_up_to_slot,
    subtract,
)
from task_autofit.planning.filters import apply_task_filter
from task_autofit.planning.priority import sort_by_priority
from task_autofit.timezone import local_date_iso, wall_time_to_instant, zone_or_utc

logger = logging.getLogger(__name__)


def summarize(placed_count: int, unplaced_count: int) -> str:
    """
    Human-readable result line, chosen only from the two counts.
    """
    if unplaced_count == 0:
        return f"Successfully placed {placed_count} task(s)."

    if placed_count == 0:
        return "Could not place any tasks. No available time slots."

    return f"Placed {placed_count} task(s). {unplaced_count} task(s) could not fit."


def new_placement_id(task_id: str) -> str:
    """
    {task_id}-{epoch ms}-{random suffix}: unique without a shared counter.
    """
    return f"{task_id}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def _union(intervals: Iterable[Interval]) -> List[Interval]:
    """
    Sort and merge overlapping intervals (periods may overlap each other).
    """
    merged: List[Interval] = []
    for it in sorted(intervals, key=lambda x: x.start):
        if merged and it.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Interval(start=last.start, end=max(last.end, it.end))
        else:
            merged.append(it)
    return merged


def period_ranges(
    working_hours: Iterable[WorkingHours],
    date: str,
    zone: str,
    visible_start: datetime,
    visible_end: datetime,
) -> List[Tuple[WorkingHours, Interval]]:
    """
    Each working-hour period as instants, clipped to the calendar's visible range.

    Periods that end up empty (outside the visible range, or end <= start) are dropped.
    """
    out: List[Tuple[WorkingHours, Interval]] = []
    for period in working_hours:
        start = wall_time_to_instant(date, period.start, zone)
        end = wall_time_to_instant(date, period.end, zone)
        clipped = clip_to_range([Interval(start=start, end=end)], visible_start, visible_end)
        if not clipped:
            logger.debug("Working hours %s-%s (%s) contribute no visible time", period.start, period.end, period.id)
            continue
        out.append((period, clipped[0]))
    return out


class _Allocation:
    """
    Working state for a single auto-fit call. Never shared between calls.
    """

    def __init__(self, available: List[Interval], duration: int, gap: int):
        self.available = list(available)
        self.duration = duration
        self.consumed = timedelta(minutes=duration + gap)
        self.placements: List[Placement] = []
        self.placed_ids: Set[str] = set()

    def _place(self, task: Task, slot: Interval, color: Optional[str]) -> None:
        self.placements.append(
            Placement(
                id=new_placement_id(task.id),
                task_id=task.id,
                task_title=task.title,
                list_id=task.list_id or None,
                list_title=task.list_title or None,
                start_time=slot.start,
                duration=self.duration,
                working_hour_color=color,
            )
        )
        self.placed_ids.add(task.id)

    def fill(
        self,
        tasks: Iterable[Task],
        slots: List[Interval],
        color: Optional[str] = None,
        stop_on_miss: bool = False,
    ) -> List[Interval]:
        """
        Place tasks (already in priority order) into `slots`, earliest fit first.

        Every placement removes [start, start + duration + gap) from both `slots` and
        the global availability. Returns what is left of `slots`.
        """
        for task in tasks:
            if task.id in self.placed_ids:
                continue

            slot = find_first_fit(slots, self.duration)
            if slot is None:
                if stop_on_miss:
                    logger.debug("Task %s does not fit, closing period", task.id)
                    break
                continue

            self._place(task, slot, color)
            block_end = slot.start + self.consumed
            slots = subtract(slots, slot.start, block_end)
            self.available = subtract(self.available, slot.start, block_end)

        return slots


def auto_fit_tasks(
    tasks: List[Task],
    existing_events: List[CalendarEvent],
    existing_placements: List[Placement],
    settings: Settings,
    date: str,
    time_zone: Optional[str] = None,
    working_hour_filters: Optional[Dict[str, WorkingHourFilter]] = None,
    now: Optional[datetime] = None,
) -> AutoFitResult:
    """
    Place as many tasks as fit into the free working time of `date`.

    Args:
        tasks: candidate tasks (not mutated)
        existing_events: calendar events for the day; only timed events block time
        existing_placements: placements already on the day; they block time too
        settings: durations, min gap, visible range, working hours
        date: target day, YYYY-MM-DD, in the viewing timezone
        time_zone: IANA zone the user is viewing in (falls back to settings.timezone, then UTC)
        working_hour_filters: period id -> filter; None selects the single global pass
        now: current instant (injectable for tests); past time is excluded when date is today

    Returns:
        AutoFitResult with the new placements only, the tasks left unplaced (input order)
        and a summary message.

    Raises:
        TimezoneResolutionError if a wall time can't be resolved in the zone.
    """
    zone = zone_or_utc(time_zone or settings.timezone)
    duration = settings.default_task_duration
    gap = settings.min_time_between_tasks

    visible_start = wall_time_to_instant(date, settings.slot_min_time, zone)
    visible_end = wall_time_to_instant(date, settings.slot_max_time, zone)

    periods = period_ranges(settings.working_hours, date, zone, visible_start, visible_end)
    available = _union(rng for _, rng in periods)

    now = datetime.now(timezone.utc) if now is None else now
    if local_date_iso(now, zone) == date:
        day_start = wall_time_to_instant(date, "00:00", zone)
        available = subtract(available, day_start, round_up_to_slot(now, zone))

    for blocked in blocked_intervals(existing_events, existing_placements, gap):
        available = subtract(available, blocked.start, blocked.end)

    candidates = [t for t in tasks if not (settings.ignore_container_tasks and t.has_subtasks)]
    run = _Allocation(available, duration, gap)

    if working_hour_filters is None:
        run.fill(sort_by_priority(candidates), run.available)
    else:
        for period, rng in periods:
            slots = clip_to_range(run.available, rng.start, rng.end)
            if not slots:
                continue

            remaining = [t for t in candidates if t.id not in run.placed_ids]
            period_filter = working_hour_filters.get(period.id) if period.id else None
            if period_filter is not None:
                remaining = apply_task_filter(remaining, period_filter)

            before = len(run.placements)
            run.fill(sort_by_priority(remaining), slots, color=period.placement_color, stop_on_miss=True)
            logger.debug(
                "Period %s-%s (%s): %d candidate(s), %d placed",
                period.start, period.end, period.id, len(remaining), len(run.placements) - before,
            )

    unplaced = [t for t in candidates if t.id not in run.placed_ids]
    message = summarize(len(run.placements), len(unplaced))
    logger.info(
        "Auto-fit %s (%s): %d placed, %d unplaced, %d period(s)",
        date, zone, len(run.placements), len(unplaced), len(periods),
    )

    return AutoFitResult(placements=run.placements, unplaced_tasks=unplaced, message=message)


def run_auto_fit(request: AutoFitRequest, now: Optional[datetime] = None) -> AutoFitResult:
    """
    Convenience entry point taking the whole request contract.
    """
    return auto_fit_tasks(
        tasks=request.tasks,
        existing_events=request.existing_events,
        existing_placements=request.existing_placements,
        settings=request.settings,
        date=request.date,
        time_zone=request.time_zone,
        working_hour_filters=request.working_hour_filters,
        now=now,
    )
