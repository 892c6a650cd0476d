# task_autofit/planner.py
"""
Interval math: turn a day's working periods and busy time into free slots.

This module is deterministic and testable:
- clip_to_range: restrict intervals to a sub-range (e.g. the calendar's visible hours)
- subtract: remove a blocked range from an ordered availability list
- blocked_intervals: existing events + placements -> busy intervals padded by the min gap
- find_first_fit: earliest interval that can hold a task of a given length
- round_up_to_slot: "now" rounded up to the next calendar slot boundary

All functions are pure: they return new lists and never mutate their inputs, so one
auto-fit run can't leak state into another.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from task_autofit import config
from task_autofit.models import CalendarEvent, Placement
from task_autofit.timezone import as_utc, instant_in_zone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interval:
    """
    Half-open time interval [start, end).
    """
    start: datetime
    end: datetime

    def minutes(self) -> int:
        """
        Return the length of the interval in whole minutes.
        """
        # Floor to whole minutes to keep behavior deterministic and predictable
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end


def clip_to_range(intervals: Iterable[Interval], range_start: datetime, range_end: datetime) -> List[Interval]:
    """
    Keep only the parts of each interval that fall inside [range_start, range_end).

    Intervals entirely outside the range (or clipped down to nothing) are dropped.
    """
    if range_end <= range_start:
        return []

    clipped: List[Interval] = []
    for it in intervals:
        start = max(it.start, range_start)
        end = min(it.end, range_end)
        if end > start:
            clipped.append(Interval(start=start, end=end))
    return clipped


def subtract(intervals: Iterable[Interval], block_start: datetime, block_end: datetime) -> List[Interval]:
    """
    Remove [block_start, block_end) from an ordered list of disjoint intervals.

    For each interval one of four things happens:
    - no overlap: kept as-is
    - block covers it: dropped
    - block strictly inside it: split in two (left fragment, then right fragment)
    - block overlaps one edge: start or end trimmed

    Returns a new list in the same order; empty or inverted blocks change nothing.
    """
    result: List[Interval] = []
    if block_end <= block_start:
        return list(intervals)

    for it in intervals:
        if block_end <= it.start or block_start >= it.end:
            result.append(it)
            continue

        if block_start <= it.start and block_end >= it.end:
            continue

        if block_start > it.start and block_end < it.end:
            result.append(Interval(start=it.start, end=block_start))
            result.append(Interval(start=block_end, end=it.end))
            continue

        if block_start <= it.start:
            result.append(Interval(start=block_end, end=it.end))
        else:
            result.append(Interval(start=it.start, end=block_start))

    return result


def blocked_intervals(
    events: Iterable[CalendarEvent],
    placements: Iterable[Placement],
    min_gap_minutes: int,
) -> List[Interval]:
    """
    Busy time for one day: every timed event and every existing placement, each widened
    by min_gap_minutes on both sides.

    Notes:
    - All-day events (no dateTime) and events with unparseable times are skipped.
    - Overlapping results are NOT merged; subtract() is applied once per interval.
    """
    gap = timedelta(minutes=int(min_gap_minutes))
    blocked: List[Interval] = []

    for event in events:
        if not event.is_timed:
            logger.debug("Skipping event %r without a timed start/end", event.id)
            continue
        blocked.append(Interval(start=event.start_instant - gap, end=event.end_instant + gap))

    for placement in placements:
        blocked.append(Interval(start=placement.start_time - gap, end=placement.end_time + gap))

    return blocked


def find_first_fit(intervals: Iterable[Interval], duration_minutes: int) -> Optional[Interval]:
    """
    Return [start, start + duration) for the earliest-starting interval long enough
    to hold the duration, or None if nothing fits.
    """
    needed = timedelta(minutes=int(duration_minutes))
    for it in sorted(intervals, key=lambda x: x.start):
        if it.end - it.start >= needed:
            return Interval(start=it.start, end=it.start + needed)
    return None


def round_up_to_slot(instant: datetime, zone: Optional[str], granularity_minutes: Optional[int] = None) -> datetime:
    """
    Round an instant up to the next slot boundary on the viewing zone's wall clock.

    Instants already on a boundary (zero seconds) are returned unchanged.
    """
    granularity = config.slot_interval_minutes() if granularity_minutes is None else int(granularity_minutes)
    utc = as_utc(instant)
    local = instant_in_zone(utc, zone)

    remainder = timedelta(
        minutes=local.minute % granularity,
        seconds=local.second,
        microseconds=local.microsecond,
    )
    if not remainder:
        return utc
    return utc - remainder + timedelta(minutes=granularity)
