"""
Task priority ordering.

Scope:
- One deterministic ordering applied before greedy placement (never re-sorted mid-run).
- Score = 2 x starred + 1 x has due date, highest first.
- Ties with due dates: earlier due first. Everything else keeps its input order.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Tuple

from task_autofit.models import Task

STARRED_WEIGHT = 2
DUE_DATE_WEIGHT = 1


def priority_score(task: Task) -> int:
    return STARRED_WEIGHT * int(bool(task.starred)) + DUE_DATE_WEIGHT * int(task.due is not None)


def _sort_key(task: Task) -> Tuple[int, float]:
    # Equal scores imply equal due-date presence, so comparing timestamps is safe
    due_ts = task.due.timestamp() if isinstance(task.due, datetime) else 0.0
    return (-priority_score(task), due_ts)


def sort_by_priority(tasks: Iterable[Task]) -> List[Task]:
    """
    Return a new list ordered by priority. sorted() is stable, so ties keep input order.
    """
    return sorted(tasks, key=_sort_key)
