"""
Per-period task filters.

A WorkingHourFilter narrows which tasks a working-hour period will accept. Every set
field must hold for a task to pass; unset fields don't constrain anything.

Search text:
- lowercased and split on whitespace into terms
- "-term" excludes tasks where term appears in title, notes or list title
- any other term must appear in at least one of those fields
"""

from __future__ import annotations

from typing import Iterable, List

from task_autofit.models import Task, WorkingHourFilter


def _search_fields(task: Task) -> List[str]:
    return [
        task.title.lower(),
        (task.notes or "").lower(),
        task.list_title.lower(),
    ]


def matches_search(task: Task, search_text: str) -> bool:
    """
    True if the task satisfies every term of `search_text`.
    """
    fields = _search_fields(task)
    for term in search_text.lower().split():
        if term.startswith("-") and len(term) > 1:
            negative = term[1:]
            if any(negative in f for f in fields):
                return False
        elif not any(term in f for f in fields):
            return False
    return True


def task_matches(task: Task, task_filter: WorkingHourFilter) -> bool:
    if task_filter.list_ids is not None:
        # An explicit empty list selects nothing
        if not task_filter.list_ids or task.list_id not in task_filter.list_ids:
            return False

    if task_filter.has_due_date is not None and task_filter.has_due_date != (task.due is not None):
        return False

    if task_filter.hide_container_tasks and task.has_subtasks:
        return False

    if task_filter.starred_only and not task.starred:
        return False

    if task_filter.search_text and not matches_search(task, task_filter.search_text):
        return False

    return True


def apply_task_filter(tasks: Iterable[Task], task_filter: WorkingHourFilter) -> List[Task]:
    """
    Return the tasks that pass `task_filter`, in their original order.
    """
    return [t for t in tasks if task_matches(t, task_filter)]
