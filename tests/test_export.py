import json
from datetime import date, datetime

from komaplan.export import (
    export_daily_csv,
    export_to_json,
    export_to_markdown,
    export_weekly_csv,
    panel_ref,
)
from komaplan.models import Panel, PanelSize, Project, ProjectSettings
from komaplan.scheduler import schedule_pages
from komaplan.weekly import generate_week_summaries

NO_HOLIDAYS: frozenset[date] = frozenset()


def _plan(settings, pages):
    settings.weekday_max_hours = 1.25
    schedule = schedule_pages(pages, settings, NO_HOLIDAYS)
    return schedule, generate_week_summaries(schedule)


def test_panel_ref():
    assert panel_ref(Panel("page-3-panel-2", "page-3", PanelSize.M, 60)) == "M: 3-2"
    assert panel_ref(Panel("x", "y", PanelSize.S, 30)) == "S"


def test_daily_csv(settings, pages):
    schedule, _ = _plan(settings, pages)
    lines = export_daily_csv(schedule).splitlines()
    assert lines[0] == "date,used_hours,panels_detail,label"
    assert lines[-1] == "2026-03-13,1.25,L: 1-3,light"
    assert '"L: 1-3, M: 1-1"' in lines[-2]


def test_daily_csv_marks_empty_days(settings, pages):
    settings.deadline = date(2026, 3, 15)  # Sunday
    schedule, _ = _plan(settings, pages)
    assert export_daily_csv(schedule).splitlines()[-1] == "2026-03-15,0.00,-,very-light"


def test_weekly_csv(settings, pages):
    _, weeks = _plan(settings, pages)
    lines = export_weekly_csv(weeks).splitlines()
    assert lines[0] == (
        "week_start,week_end,total_hours,weekday_hours,weekend_hours,"
        "max_day,S_count,M_count,L_count,peak_label"
    )
    assert lines[1] == "2026-03-08,2026-03-14,5.50,5.50,0.00,1.25,2,2,1,light"


def test_json_export_round_trips(settings, pages):
    schedule, weeks = _plan(settings, pages)
    project = Project(
        id="project-1",
        name="Test",
        settings=settings,
        pages=pages,
        schedule=schedule,
        week_summaries=weeks,
        created_at=datetime(2026, 3, 1),
        updated_at=datetime(2026, 3, 1),
    )
    data = json.loads(export_to_json(project))
    assert data["settings"]["deadline"] == "2026-03-13"
    assert data["weekSummaries"][0]["totalHours"] == 5.5
    assert Project.from_dict(data) == project


def test_markdown(settings, pages):
    settings.deadline = date(2026, 3, 15)
    schedule, weeks = _plan(settings, pages)
    md = export_to_markdown(weeks, schedule)
    assert md.startswith("# Production schedule")
    assert "| 3/8 - 3/14 | 5.5h | 5.5h | 0.0h | 1.2h | S:2 M:2 L:1 | light |" in md
    assert "- **Total hours**: 5.5h" in md
    assert "| rest | - | - |" in md
    assert "L: 1-3" in md
