# task_autofit/errors.py
"""
Exceptions raised by the auto-fit core.

Only genuinely unrecoverable input raises; "no slot" or "nothing matched a filter"
are ordinary results, not errors.
"""

from __future__ import annotations


class AutoFitError(Exception):
    """
    Base class for errors raised by task_autofit.
    """


class TimezoneResolutionError(AutoFitError):
    """
    A wall-clock time could not be mapped to a real instant, even after pushing it
    forward across a DST gap.
    """

    def __init__(self, label: str, zone: str, max_minutes: int):
        self.label = label
        self.zone = zone
        self.max_minutes = max_minutes
        super().__init__(
            f'Invalid local time "{label}" in zone "{zone}" '
            f"(could not coerce within {max_minutes} minutes)"
        )


class InvalidWallTimeError(AutoFitError, ValueError):
    """
    A date (YYYY-MM-DD) or wall time (HH:MM) string could not be parsed.
    """
