"""Panel size auto-assignment and page construction."""

from __future__ import annotations

from komaplan.models import Page, Panel, PanelSize, TimeSettings

# Size layout for pages with a known panel count.
_LAYOUTS: dict[int, str] = {
    1: "L",
    2: "LL",
    3: "LSM",
    4: "LLMM",
    5: "LLMMS",
    6: "LLMMSS",
    7: "LLMMMSS",
    8: "LLMMMMSS",
    9: "LLMMMMSSS",
    10: "LLMMMMMSSS",
    11: "LLMMMMMMSSS",
    12: "LLMMMMMMMSSSS",
}


def assign_panel_sizes(count: int) -> list[PanelSize]:
    """Pick panel sizes for a page with *count* panels."""
    if count <= 0:
        return []
    if count in _LAYOUTS:
        return [PanelSize(ch) for ch in _LAYOUTS[count]]

    l_count = max(2, int(count * 0.2))
    s_count = max(3, int(count * 0.25))
    m_count = count - l_count - s_count
    return [PanelSize.L] * l_count + [PanelSize.M] * m_count + [PanelSize.S] * s_count


def create_pages_from_smlp(
    smlp_pages: list[list[PanelSize]],
    time_settings: TimeSettings,
) -> list[Page]:
    """Build Page/Panel objects from parsed sizes. Ids are 1-based."""
    pages: list[Page] = []
    for index, sizes in enumerate(smlp_pages):
        number = index + 1
        page_id = f"page-{number}"
        panels = [
            Panel(
                id=f"{page_id}-panel-{k}",
                page_id=page_id,
                size=size,
                estimated_minutes=time_settings.minutes_for(size),
            )
            for k, size in enumerate(sizes, start=1)
            if size != PanelSize.P
        ]
        pages.append(Page(id=page_id, number=number, panels=panels))
    return pages


def recalculate_minutes(pages: list[Page], time_settings: TimeSettings) -> list[Page]:
    """Return copies of *pages* with estimates re-derived from panel sizes."""
    return [
        Page(
            id=page.id,
            number=page.number,
            panels=[
                Panel(
                    id=p.id,
                    page_id=p.page_id,
                    size=p.size,
                    estimated_minutes=time_settings.minutes_for(p.size),
                    note=p.note,
                )
                for p in page.panels
            ],
            note=page.note,
            priority=page.priority,
        )
        for page in pages
    ]
