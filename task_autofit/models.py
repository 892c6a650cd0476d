# task_autofit/models.py
"""
Data contracts for the auto-fit core.

Field names are snake_case in Python and camelCase on the wire, so payloads coming
from the task/calendar provider (listTitle, hasSubtasks, dateTime, ...) validate as-is.
Validation rules (HH:MM times, #RRGGBB colors, duration bounds) happen here, at the
boundary, so the engine can assume well-formed input.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from task_autofit import config
from task_autofit.timezone import as_utc, instant_to_utc_iso, parse_rfc3339

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"
WORKING_HOUR_ID_PATTERN = r"^[a-zA-Z0-9_-]{1,64}$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class ContractModel(BaseModel):
    """
    Base for every wire-facing model (camelCase aliases, snake_case attributes).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    return None if value is None else as_utc(value)


class Task(ContractModel):
    """
    A task that can be placed on the calendar. Never mutated by the engine.

    starred is the "favored" flag; has_subtasks marks a container/parent task.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=256)
    title: str = ""
    notes: Optional[str] = None
    status: Literal["needsAction", "completed"] = "needsAction"
    due: Optional[datetime] = None
    parent: Optional[str] = None
    list_id: str = ""
    list_title: str = ""
    has_subtasks: Optional[bool] = None
    starred: Optional[bool] = None

    @field_validator("due")
    @classmethod
    def _due_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_utc(value)


class EventDateTime(ContractModel):
    """
    Provider start/end: timed events carry date_time, all-day events carry date.
    """
    date_time: Optional[str] = None
    date: Optional[str] = None
    time_zone: Optional[str] = None

    def instant(self) -> Optional[datetime]:
        """
        Return the aware UTC instant, or None for all-day or unparseable values.

        A date_time without an offset is wall time in time_zone.
        """
        if not self.date_time:
            return None
        try:
            return parse_rfc3339(self.date_time, self.time_zone)
        except ValueError:
            return None


class CalendarEvent(ContractModel):
    """
    An existing calendar event (read-only busy time).
    """
    id: str = ""
    summary: str = "Untitled Event"
    description: Optional[str] = None
    start: EventDateTime = Field(default_factory=EventDateTime)
    end: EventDateTime = Field(default_factory=EventDateTime)
    color_id: Optional[str] = None

    @property
    def start_instant(self) -> Optional[datetime]:
        return self.start.instant()

    @property
    def end_instant(self) -> Optional[datetime]:
        return self.end.instant()

    @property
    def is_timed(self) -> bool:
        return self.start_instant is not None and self.end_instant is not None


class Placement(ContractModel):
    """
    A task placed at a concrete instant for a whole number of minutes.
    """
    id: str = Field(..., min_length=1)
    task_id: str = Field(..., min_length=1)
    task_title: str = ""
    list_id: Optional[str] = None
    list_title: Optional[str] = None
    start_time: datetime
    duration: int = Field(..., ge=1, le=1440, description="Minutes")
    working_hour_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)

    @field_validator("start_time")
    @classmethod
    def _start_to_utc(cls, value: datetime) -> datetime:
        return _to_utc(value)

    @field_serializer("start_time")
    def _serialize_start(self, value: datetime) -> str:
        return instant_to_utc_iso(value)

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration)


class WorkingHours(ContractModel):
    """
    One recurring daily working period. List order = allocation priority.
    """
    id: Optional[str] = Field(None, pattern=WORKING_HOUR_ID_PATTERN)
    start: str = Field(..., pattern=TIME_PATTERN)
    end: str = Field(..., pattern=TIME_PATTERN)
    name: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    use_color_for_tasks: Optional[bool] = None

    @property
    def placement_color(self) -> Optional[str]:
        """
        Color handed down to placements made in this period, if any.
        """
        if self.color and self.use_color_for_tasks is not False:
            return self.color
        return None


def _default_working_hours() -> List[WorkingHours]:
    return [WorkingHours(**wh) for wh in config.DEFAULT_WORKING_HOURS]


class Settings(ContractModel):
    """
    The subset of user settings the engine reads.

    Other stored settings (task color, target calendar, ...) are ignored on input.
    """
    default_task_duration: int = Field(config.DEFAULT_TASK_DURATION, ge=5, le=480)
    min_time_between_tasks: int = Field(config.DEFAULT_MIN_TIME_BETWEEN_TASKS, ge=0, le=120)
    slot_min_time: str = Field(config.DEFAULT_SLOT_MIN_TIME, pattern=TIME_PATTERN)
    slot_max_time: str = Field(config.DEFAULT_SLOT_MAX_TIME, pattern=TIME_PATTERN)
    ignore_container_tasks: bool = True
    working_hours: List[WorkingHours] = Field(
        default_factory=_default_working_hours, max_length=config.MAX_WORKING_HOURS
    )
    timezone: Optional[str] = Field(None, max_length=100)


class WorkingHourFilter(ContractModel):
    """
    Independent task filter attached to one working-hour period.

    Unset fields do not constrain anything.
    """
    search_text: Optional[str] = Field(None, max_length=config.MAX_SEARCH_TEXT_LENGTH)
    starred_only: Optional[bool] = None
    hide_container_tasks: Optional[bool] = None
    has_due_date: Optional[bool] = None
    list_ids: Optional[List[str]] = None


class AutoFitRequest(ContractModel):
    """
    Everything one auto-fit run needs (an already-fetched snapshot).
    """
    tasks: List[Task] = Field(default_factory=list)
    existing_events: List[CalendarEvent] = Field(default_factory=list)
    existing_placements: List[Placement] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)
    date: str = Field(..., pattern=DATE_PATTERN, description="Target date in YYYY-MM-DD")
    time_zone: Optional[str] = Field(None, description="IANA timezone (UTC if absent/invalid)")
    working_hour_filters: Optional[Dict[str, WorkingHourFilter]] = None


class AutoFitResult(ContractModel):
    placements: List[Placement] = Field(default_factory=list)
    unplaced_tasks: List[Task] = Field(default_factory=list)
    message: str = ""
