from datetime import date

import pytest

from komaplan.models import Page, Panel, PanelSize, ProjectSettings, TimeSettings

# 2026-03-13 is a Friday.
DEADLINE = date(2026, 3, 13)


def _make_page(number: int, sizes: str, priority: int | None = None) -> Page:
    times = TimeSettings()
    page_id = f"page-{number}"
    panels = [
        Panel(
            id=f"{page_id}-panel-{k}",
            page_id=page_id,
            size=PanelSize(ch),
            estimated_minutes=times.minutes_for(PanelSize(ch)),
        )
        for k, ch in enumerate(sizes, start=1)
    ]
    return Page(id=page_id, number=number, panels=panels, priority=priority)


@pytest.fixture
def settings() -> ProjectSettings:
    return ProjectSettings(
        deadline=DEADLINE,
        smlp_string="MMLPSS",
        time_settings=TimeSettings(S=30, M=60, L=90),
        rest_days=[0, 6],
        include_holidays=True,
        weekday_max_hours=8,
        weekend_max_hours=0,
        allow_split_panels=True,
    )


@pytest.fixture
def pages() -> list[Page]:
    return [_make_page(1, "MML"), _make_page(2, "SS")]


@pytest.fixture
def make_page():
    """Builder for a numbered page from a size string such as "MML"."""
    return _make_page
