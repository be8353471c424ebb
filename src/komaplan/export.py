"""CSV, JSON and Markdown renderings of a plan."""

from __future__ import annotations

import csv
import io
import json
import re

from komaplan.models import DaySchedule, Panel, Project, WeekSummary

_PAGE_NUM = re.compile(r"page-(\d+)")
_PANEL_NUM = re.compile(r"panel-(\d+)")

WEEKLY_HEADERS = [
    "week_start",
    "week_end",
    "total_hours",
    "weekday_hours",
    "weekend_hours",
    "max_day",
    "S_count",
    "M_count",
    "L_count",
    "peak_label",
]
DAILY_HEADERS = ["date", "used_hours", "panels_detail", "label"]


def export_to_json(project: Project) -> str:
    return json.dumps(project.to_dict(), indent=2)


def panel_ref(panel: Panel) -> str:
    """Short ``SIZE: page-panel`` reference, e.g. ``L: 3-1``."""
    page = _PAGE_NUM.search(panel.page_id)
    num = _PANEL_NUM.search(panel.id)
    if page and num:
        return f"{panel.size.value}: {page.group(1)}-{num.group(1)}"
    return panel.size.value


def _write_rows(headers: list[str], rows: list[list]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buf.getvalue()


def export_weekly_csv(summaries: list[WeekSummary]) -> str:
    rows = [
        [
            s.week_start.isoformat(),
            s.week_end.isoformat(),
            f"{s.total_hours:.2f}",
            f"{s.weekday_hours:.2f}",
            f"{s.weekend_hours:.2f}",
            f"{s.max_day_hours:.2f}",
            s.panel_counts.S,
            s.panel_counts.M,
            s.panel_counts.L,
            s.peak_label.value,
        ]
        for s in summaries
    ]
    return _write_rows(WEEKLY_HEADERS, rows)


def export_daily_csv(schedule: list[DaySchedule]) -> str:
    rows = [
        [
            d.date.isoformat(),
            f"{d.used_hours:.2f}",
            ", ".join(panel_ref(p) for p in d.panels) or "-",
            d.label.value,
        ]
        for d in schedule
    ]
    return _write_rows(DAILY_HEADERS, rows)


def export_to_markdown(summaries: list[WeekSummary], schedule: list[DaySchedule]) -> str:
    """Markdown report with a weekly table, totals and a daily table."""
    lines = ["# Production schedule", "", "## Weekly summary", ""]
    lines.append("| Week | Total | Weekday | Weekend | Max day | SML | Peak |")
    lines.append("|---|---|---|---|---|---|---|")
    for w in summaries:
        week = f"{w.week_start.month}/{w.week_start.day} - {w.week_end.month}/{w.week_end.day}"
        counts = f"S:{w.panel_counts.S} M:{w.panel_counts.M} L:{w.panel_counts.L}"
        lines.append(
            f"| {week} | {w.total_hours:.1f}h | {w.weekday_hours:.1f}h | {w.weekend_hours:.1f}h "
            f"| {w.max_day_hours:.1f}h | {counts} | {w.peak_label.value} |"
        )
    lines.append("")

    if summaries:
        total = sum(w.total_hours for w in summaries)
        lines += [
            "### Totals",
            "",
            f"- **Total hours**: {total:.1f}h",
            f"- **Average per week**: {total / len(summaries):.1f}h",
            f"- **Busiest day**: {max(w.max_day_hours for w in summaries):.1f}h",
            "",
        ]

    lines += ["## Daily schedule", "", "| Date | Hours | Panels | Load |", "|---|---|---|---|"]
    for d in schedule:
        when = d.date.strftime("%m/%d (%a)")
        if d.used_minutes > 0:
            detail = ", ".join(panel_ref(p) for p in d.panels) or "-"
            lines.append(f"| {when} | {d.used_hours:.1f}h | {detail} | {d.label.value} |")
        else:
            lines.append(f"| {when} | rest | - | - |")
    return "\n".join(lines) + "\n"
