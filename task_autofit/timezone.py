# task_autofit/timezone.py
"""
Wall-clock <-> instant conversion.

Everything downstream (interval math, placements) works on timezone-aware UTC
datetimes. This module is the only place that knows about the user's viewing zone:

- zone_or_utc: normalize unknown/invalid IANA names to "UTC" (never raises)
- wall_time_to_instant: "2025-03-09" + "02:30" + "America/New_York" -> aware UTC datetime
  (DST spring-forward gaps are pushed forward minute by minute)
- instant_to_utc_iso: canonical "YYYY-MM-DDTHH:MM:SSZ"
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from task_autofit import config
from task_autofit.errors import InvalidWallTimeError, TimezoneResolutionError

logger = logging.getLogger(__name__)

UTC_ZONE = "UTC"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

# Files the host zoneinfo directory may carry that are not IANA identifiers
_NON_IANA_NAMES = frozenset({"localtime", "posixrules"})


@lru_cache(maxsize=1)
def _iana_zones() -> frozenset:
    return (frozenset(available_timezones()) - _NON_IANA_NAMES) | {UTC_ZONE}


def zone_or_utc(zone: Optional[str]) -> str:
    """
    Return `zone` if it names a real IANA zone, otherwise "UTC".

    Names are checked against the IANA zone list rather than whatever the host
    zoneinfo directory happens to resolve.
    """
    if not zone or not isinstance(zone, str):
        return UTC_ZONE
    if zone not in _iana_zones():
        logger.warning("Unknown time zone %r, falling back to UTC", zone)
        return UTC_ZONE
    try:
        ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning("Unknown time zone %r, falling back to UTC", zone)
        return UTC_ZONE
    return zone


def get_zone(zone: Optional[str]) -> ZoneInfo:
    return ZoneInfo(zone_or_utc(zone))


def parse_iso_date(date_iso: str) -> date:
    """
    Parse a strict YYYY-MM-DD calendar date.
    """
    if not isinstance(date_iso, str) or not _DATE_RE.match(date_iso):
        raise InvalidWallTimeError(f'Invalid ISO date "{date_iso}"')
    try:
        return date.fromisoformat(date_iso)
    except ValueError as e:
        raise InvalidWallTimeError(f'Invalid ISO date "{date_iso}"') from e


def parse_hhmm(value: str) -> time:
    """
    Parse a 24h "HH:MM" wall time.
    """
    match = _HHMM_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise InvalidWallTimeError(f'Invalid wall time "{value}" (expected HH:MM)')
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidWallTimeError(f'Invalid wall time "{value}" (expected HH:MM)')
    return time(hours, minutes)


def _exists_in_zone(local: datetime, tz: ZoneInfo) -> bool:
    """
    A naive wall time exists in `tz` if converting it to UTC and back gives the same wall time.

    zoneinfo never raises for times inside a DST gap; it silently maps them using the
    pre-transition offset, so the round trip lands on a different wall clock.
    """
    aware = local.replace(tzinfo=tz)
    roundtrip = aware.astimezone(timezone.utc).astimezone(tz)
    return roundtrip.replace(tzinfo=None) == local


def wall_time_to_instant(
    date_iso: str,
    wall_time_hhmm: str,
    zone: Optional[str],
    max_coerce_minutes: Optional[int] = None,
) -> datetime:
    """
    Interpret `wall_time_hhmm` on `date_iso` in `zone` and return the UTC instant.

    Notes:
    - Unknown zones are treated as UTC (see zone_or_utc).
    - Ambiguous times (DST fall-back) resolve to the earlier instant.
    - Nonexistent times (DST spring-forward) move forward one minute at a time, up to
      max_coerce_minutes (AUTOFIT_MAX_DST_COERCE_MINUTES by default). If no valid
      time is found, TimezoneResolutionError is raised rather than guessing.
    """
    zone_name = zone_or_utc(zone)
    tz = ZoneInfo(zone_name)
    local = datetime.combine(parse_iso_date(date_iso), parse_hhmm(wall_time_hhmm))

    if _exists_in_zone(local, tz):
        return local.replace(tzinfo=tz).astimezone(timezone.utc)

    limit = config.max_dst_coerce_minutes() if max_coerce_minutes is None else int(max_coerce_minutes)
    for minutes in range(1, limit + 1):
        candidate = local + timedelta(minutes=minutes)
        if _exists_in_zone(candidate, tz):
            logger.debug(
                "Coerced nonexistent wall time %sT%s in %s forward %d minute(s)",
                date_iso, wall_time_hhmm, zone_name, minutes,
            )
            return candidate.replace(tzinfo=tz).astimezone(timezone.utc)

    raise TimezoneResolutionError(f"{date_iso}T{wall_time_hhmm}", zone_name, limit)


def as_utc(instant: datetime) -> datetime:
    # Naive datetimes are taken to already be UTC
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def instant_to_utc_iso(instant: datetime) -> str:
    """
    Canonical UTC representation: seconds precision, no fractional part, "Z" suffix.
    """
    return as_utc(instant).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_rfc3339(dt_str: str, zone: Optional[str] = None) -> datetime:
    """
    Parse an RFC3339 / ISO-8601 datetime string into an aware UTC datetime.

    Notes:
    - Google returns RFC3339 with offsets (e.g., +00:00, -05:00) or a trailing 'Z'.
    - 'Z' is rewritten to '+00:00' for datetime.fromisoformat.
    - A string without an offset is wall time in `zone` (UTC when absent or unknown).
    """
    parsed = datetime.fromisoformat(dt_str.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=get_zone(zone))
    return as_utc(parsed)


def instant_in_zone(instant: datetime, zone: Optional[str]) -> datetime:
    """
    Same instant, expressed in the viewing zone (for display).
    """
    return as_utc(instant).astimezone(get_zone(zone))


def local_date_iso(instant: datetime, zone: Optional[str]) -> str:
    """
    Calendar date (YYYY-MM-DD) of `instant` as seen in `zone`.
    """
    return instant_in_zone(instant, zone).date().isoformat()


def utc_offset_minutes(zone: Optional[str], at: Optional[datetime] = None) -> int:
    """
    UTC offset of `zone` at instant `at` (default: now), in minutes east of UTC.
    """
    at = datetime.now(timezone.utc) if at is None else at
    offset = instant_in_zone(at, zone).utcoffset() or timedelta(0)
    return int(offset.total_seconds() // 60)
