"""Weekly roll-up of a day-by-day schedule."""

from __future__ import annotations

from datetime import date, timedelta

from komaplan.capacity import is_weekend, weekday_index
from komaplan.models import DayLabel, DaySchedule, PanelCounts, PanelSize, WeekSummary


def week_start(d: date) -> date:
    """The Sunday on or before *d*."""
    return d - timedelta(days=weekday_index(d))


def generate_week_summaries(schedule: list[DaySchedule]) -> list[WeekSummary]:
    """Group days into Sunday-based weeks and total their hours.

    Weeks without any work are left out. The peak label is the label of
    the busiest day, not a label of the weekly total.
    """
    weeks: dict[date, list[DaySchedule]] = {}
    for day in schedule:
        weeks.setdefault(week_start(day.date), []).append(day)

    summaries: list[WeekSummary] = []
    for start, days in weeks.items():
        total = weekday = weekend = 0
        max_day = 0
        peak = DayLabel.VERY_LIGHT
        seen: dict[PanelSize, set[str]] = {PanelSize.S: set(), PanelSize.M: set(), PanelSize.L: set()}

        for day in days:
            total += day.used_minutes
            if is_weekend(day.date):
                weekend += day.used_minutes
            else:
                weekday += day.used_minutes
            if day.used_minutes > max_day:
                max_day = day.used_minutes
                peak = day.label
            for occurrence in day.panels:
                if occurrence.size in seen:
                    seen[occurrence.size].add(occurrence.id)

        if total <= 0:
            continue
        summaries.append(
            WeekSummary(
                week_start=start,
                week_end=start + timedelta(days=6),
                total_hours=total / 60,
                weekday_hours=weekday / 60,
                weekend_hours=weekend / 60,
                max_day_hours=max_day / 60,
                peak_label=peak,
                panel_counts=PanelCounts(
                    S=len(seen[PanelSize.S]),
                    M=len(seen[PanelSize.M]),
                    L=len(seen[PanelSize.L]),
                ),
            )
        )

    summaries.sort(key=lambda s: s.week_start)
    return summaries
