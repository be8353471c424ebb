"""Deadline-backward scheduling of panels onto calendar days."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Container
from datetime import date, timedelta

from komaplan.capacity import capacity_minutes, holiday_calendar, warmup_capacity
from komaplan.models import DayLabel, DaySchedule, Page, Panel, PanelSize, ProjectSettings

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 365

# (minimum hours, label), checked top-down
_LABEL_STEPS: list[tuple[float, DayLabel]] = [
    (10, DayLabel.VERY_HARSH),
    (6, DayLabel.HARSH),
    (4, DayLabel.HIGH),
    (2, DayLabel.MODERATE),
    (1, DayLabel.LIGHT),
]


def day_label(hours: float) -> DayLabel:
    for threshold, label in _LABEL_STEPS:
        if hours >= threshold:
            return label
    return DayLabel.VERY_LIGHT


def sort_panels_by_priority(pages: list[Page]) -> list[Panel]:
    """Flatten pages into one work sequence: every L, then every M, then every S.

    Pages are first ordered by ``priority``. Only two defined priorities are
    compared; a missing one keeps the input order.
    """
    ordered_pages = _stable_priority_sort(pages)
    buckets: dict[PanelSize, list[Panel]] = {PanelSize.L: [], PanelSize.M: [], PanelSize.S: []}
    for page in ordered_pages:
        for panel in page.panels:
            if panel.size in buckets:
                buckets[panel.size].append(panel)
    return buckets[PanelSize.L] + buckets[PanelSize.M] + buckets[PanelSize.S]


def _stable_priority_sort(pages: list[Page]) -> list[Page]:
    # Undefined priorities compare equal to everything, which is not a total
    # order, so this is an insertion sort rather than sorted() with a key.
    result: list[Page] = []
    for page in pages:
        pos = len(result)
        while pos > 0 and _comes_before(page, result[pos - 1]):
            pos -= 1
        result.insert(pos, page)
    return result


def _comes_before(a: Page, b: Page) -> bool:
    return a.priority is not None and b.priority is not None and a.priority < b.priority


def lookback_days(settings: ProjectSettings) -> int:
    """How many days back from the deadline (inclusive) may receive work."""
    if settings.start_date is None:
        return DEFAULT_LOOKBACK_DAYS
    return (settings.deadline - settings.start_date).days + 1


# ---------------------------------------------------------------------------
# Backward fill
# ---------------------------------------------------------------------------


def _skip_finished(queue: list[Panel], cursor: int, progress: dict[str, int]) -> int:
    while cursor < len(queue) and queue[cursor].estimated_minutes - progress.get(queue[cursor].id, 0) <= 0:
        cursor += 1
    return cursor


def _fill_day(
    day: DaySchedule,
    queue: list[Panel],
    cursor: int,
    progress: dict[str, int],
    allow_split: bool,
) -> int:
    """Consume *queue* from *cursor* into *day*. Returns the new cursor."""
    while cursor < len(queue) and day.used_minutes < day.capacity_minutes:
        panel = queue[cursor]
        done = progress.get(panel.id, 0)
        remaining = panel.estimated_minutes - done
        if remaining <= 0:
            cursor += 1
            continue

        available = day.capacity_minutes - day.used_minutes
        if not allow_split and remaining > available:
            # Leave the whole panel for an earlier day.
            break

        take = min(remaining, available)
        progress[panel.id] = done + take
        day.used_minutes += take
        day.panels.append(panel.with_progress(take))
        if done + take >= panel.estimated_minutes:
            cursor += 1
    return cursor


def _drop_partial(days: list[DaySchedule], panel: Panel) -> None:
    """Remove every occurrence of a panel whose placement ran out of days."""
    for day in days:
        kept = [p for p in day.panels if p.id != panel.id]
        if len(kept) != len(day.panels):
            day.used_minutes -= sum(p.progress_minutes or 0 for p in day.panels if p.id == panel.id)
            day.panels = kept
            day.label = day_label(day.used_hours)


def _backfill(
    queue: list[Panel],
    settings: ProjectSettings,
    holiday_dates: Container[date],
    bound: int,
    warm_from: date | None = None,
) -> list[DaySchedule]:
    """Walk back from the deadline filling days from *queue*.

    *queue* is consumed front to back, so its head lands nearest the
    deadline. When *warm_from* is given, the ``warmup_days`` days starting
    there get warm-up capacity and the walk always reaches *warm_from*.
    """
    warm_until = warm_from + timedelta(days=settings.warmup_days) if warm_from else None
    progress: dict[str, int] = {}
    cursor = _skip_finished(queue, 0, progress)
    days: list[DaySchedule] = []
    current = settings.deadline
    day_index = 0

    while day_index < bound and (cursor < len(queue) or (warm_from is not None and current >= warm_from)):
        capacity = capacity_minutes(current, day_index, settings, holiday_dates)
        if warm_from is not None and warm_from <= current < warm_until:
            capacity = warmup_capacity(capacity, settings)

        day = DaySchedule(date=current, capacity_minutes=capacity)
        cursor = _fill_day(day, queue, cursor, progress, settings.allow_split_panels)
        cursor = _skip_finished(queue, cursor, progress)
        day.label = day_label(day.used_hours)
        days.append(day)

        current -= timedelta(days=1)
        day_index += 1

    if cursor < len(queue) and progress.get(queue[cursor].id):
        _drop_partial(days, queue[cursor])

    days.reverse()
    return days


def _fit_warmup(
    queue: list[Panel],
    settings: ProjectSettings,
    holiday_dates: Container[date],
    bound: int,
    first_day: date,
) -> list[DaySchedule]:
    """Reschedule so the first ``warmup_days`` days carry warm-up capacity.

    The warm-up window is moved back one day at a time until the work fits
    without spilling in front of it. Days inside the window that end up with
    no work are still emitted.
    """
    start = first_day
    while True:
        days = _backfill(queue, settings, holiday_dates, bound, warm_from=start)
        if days[0].date >= start:
            return days
        start -= timedelta(days=1)


def schedule_pages(
    pages: list[Page],
    settings: ProjectSettings,
    holiday_dates: Container[date] | None = None,
) -> list[DaySchedule]:
    """Build a dense, chronological day-by-day plan ending on the deadline.

    Work that does not fit inside the lookback window is left out; use
    :func:`unscheduled_panels` to find it.
    """
    if holiday_dates is None:
        holiday_dates = holiday_calendar(settings)

    # Walking back from the deadline, the head of the L-M-S sequence is
    # placed first, so L panels end up nearest the deadline.
    queue = sort_panels_by_priority(pages)
    bound = lookback_days(settings)
    days = _backfill(queue, settings, holiday_dates, bound)

    if settings.warmup_enabled and settings.warmup_days > 0 and days:
        days = _fit_warmup(queue, settings, holiday_dates, bound, days[0].date)

    placed = sum(d.used_minutes for d in days)
    required = sum(p.estimated_minutes for p in queue)
    logger.debug(
        "Scheduled %d of %d minutes over %d day(s) ending %s",
        placed, required, len(days), settings.deadline.isoformat(),
    )
    if placed < required:
        logger.warning(
            "%d minute(s) of work did not fit before %s",
            required - placed,
            days[0].date.isoformat() if days else settings.deadline.isoformat(),
        )
    return days


# ---------------------------------------------------------------------------
# Shortfall
# ---------------------------------------------------------------------------


def _placed_minutes(schedule: list[DaySchedule]) -> dict[str, int]:
    placed: dict[str, int] = defaultdict(int)
    for day in schedule:
        for occurrence in day.panels:
            placed[occurrence.id] += occurrence.progress_minutes or 0
    return placed


def unscheduled_panels(pages: list[Page], schedule: list[DaySchedule]) -> list[Panel]:
    """Panels that were not fully placed in *schedule*."""
    placed = _placed_minutes(schedule)
    return [
        panel
        for page in pages
        for panel in page.panels
        if panel.size != PanelSize.P and placed.get(panel.id, 0) < panel.estimated_minutes
    ]


def shortfall_minutes(pages: list[Page], schedule: list[DaySchedule]) -> int:
    placed = _placed_minutes(schedule)
    return sum(
        panel.estimated_minutes - placed.get(panel.id, 0)
        for panel in unscheduled_panels(pages, schedule)
    )
