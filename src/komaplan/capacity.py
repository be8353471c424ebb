"""Per-day work capacity from rest days, holidays and sprint settings."""

from __future__ import annotations

import math
from collections.abc import Container
from datetime import date

import holidays

from komaplan.models import HOLIDAY_SENTINEL, ProjectSettings

SATURDAY = 6
SUNDAY = 0


def holiday_calendar(settings: ProjectSettings) -> Container[date]:
    """Public holidays of the configured country. Years are filled lazily."""
    return holidays.country_holidays(settings.holiday_country)


def weekday_index(d: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return d.isoweekday() % 7


def is_weekend(d: date) -> bool:
    return weekday_index(d) in (SATURDAY, SUNDAY)


def is_rest_day(d: date, settings: ProjectSettings, holiday_dates: Container[date]) -> bool:
    if weekday_index(d) in settings.rest_days:
        return True
    return HOLIDAY_SENTINEL in settings.rest_days and d in holiday_dates


def capacity_minutes(
    d: date,
    day_index: int,
    settings: ProjectSettings,
    holiday_dates: Container[date],
) -> int:
    """Minutes of work available on *d*.

    *day_index* counts days back from the deadline (the deadline is 0) and
    drives the final sprint. Warm-up is not applied here.
    """
    if is_rest_day(d, settings, holiday_dates):
        return 0

    if settings.final_sprint_enabled and day_index < settings.final_sprint_days:
        return _hours_to_minutes(settings.final_sprint_max_hours)

    if is_weekend(d) or (settings.include_holidays and d in holiday_dates):
        return _hours_to_minutes(settings.weekend_max_hours)
    return _hours_to_minutes(settings.weekday_max_hours)


def warmup_capacity(minutes: int, settings: ProjectSettings) -> int:
    """Scale *minutes* by the warm-up factor, rounding half up."""
    return _round_half_up(minutes * settings.warmup_factor)


def _hours_to_minutes(hours: float) -> int:
    return _round_half_up(hours * 60)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
