"""
Tests for per-period task filters.

What these tests prove:
- "-term" excludes a task if the term appears in its title, notes or list title (any case).
- Positive terms must all match somewhere.
- Flag filters (due date, starred, containers, lists) combine with AND.
"""

from __future__ import annotations

from task_autofit.models import Task, WorkingHourFilter
from task_autofit.planning.filters import apply_task_filter, matches_search


def _tasks() -> list[Task]:
    return [
        Task(id="t1", title="URGENT: fix prod", list_id="work", list_title="Work"),
        Task(id="t2", title="Water plants", notes="balcony, urgent-ish", list_id="home", list_title="Home"),
        Task(id="t3", title="Book flights", list_id="trip", list_title="Urgent trips"),
        Task(id="t4", title="Write Q3 report", list_id="work", list_title="Work", due="2025-01-06T00:00:00Z"),
        Task(id="t5", title="Plan offsite", list_id="work", list_title="Work", starred=True, has_subtasks=True),
    ]


def _ids(tasks) -> list[str]:
    return [t.id for t in tasks]


def test_negative_term_excludes_title_notes_and_list_title():
    out = apply_task_filter(_tasks(), WorkingHourFilter(search_text="-urgent"))
    assert _ids(out) == ["t4", "t5"]


def test_positive_terms_must_all_match():
    assert _ids(apply_task_filter(_tasks(), WorkingHourFilter(search_text="report q3"))) == ["t4"]
    assert _ids(apply_task_filter(_tasks(), WorkingHourFilter(search_text="work   -report"))) == ["t1", "t5"]


def test_search_is_case_insensitive():
    task = Task(id="x", title="Call Mom", list_title="Family")
    assert matches_search(task, "CALL family")
    assert not matches_search(task, "-FAMILY")


def test_empty_search_text_matches_everything():
    assert len(apply_task_filter(_tasks(), WorkingHourFilter(search_text="   "))) == 5
    assert len(apply_task_filter(_tasks(), WorkingHourFilter())) == 5


def test_flag_filters():
    assert _ids(apply_task_filter(_tasks(), WorkingHourFilter(has_due_date=True))) == ["t4"]
    assert "t4" not in _ids(apply_task_filter(_tasks(), WorkingHourFilter(has_due_date=False)))
    assert _ids(apply_task_filter(_tasks(), WorkingHourFilter(starred_only=True))) == ["t5"]
    assert "t5" not in _ids(apply_task_filter(_tasks(), WorkingHourFilter(hide_container_tasks=True)))


def test_list_ids_filter():
    assert _ids(apply_task_filter(_tasks(), WorkingHourFilter(list_ids=["home", "trip"]))) == ["t2", "t3"]
    assert apply_task_filter(_tasks(), WorkingHourFilter(list_ids=[])) == []


def test_filters_combine():
    f = WorkingHourFilter(search_text="-urgent", starred_only=True, hide_container_tasks=True)
    assert apply_task_filter(_tasks(), f) == []
