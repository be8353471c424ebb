"""Typer CLI for komaplan."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from komaplan.autoassign import create_pages_from_smlp, recalculate_minutes
from komaplan.export import (
    export_daily_csv,
    export_to_json,
    export_to_markdown,
    export_weekly_csv,
    panel_ref,
)
from komaplan.models import PanelSize, Project, ProjectSettings, TimeSettings
from komaplan.parser import (
    convert_numbers_to_smlp,
    is_numeric_only,
    parse_smlp_string,
    validate_smlp_string,
)
from komaplan.persistence import DEFAULT_DB_FILE, Store
from komaplan.scheduler import schedule_pages, shortfall_minutes, unscheduled_panels
from komaplan.weekly import generate_week_summaries

app = typer.Typer(
    name="komaplan",
    help="Deadline-first work planner for manga manuscripts.",
    no_args_is_help=True,
)
console = Console()

_LABEL_STYLES = {
    "very-harsh": "bold red",
    "harsh": "red",
    "high": "yellow",
    "moderate": None,
    "light": "green",
    "very-light": "dim",
}

_state = {"db": DEFAULT_DB_FILE}


@app.callback()
def main(
    file: Annotated[str, typer.Option("--file", "-f", help="Project file")] = DEFAULT_DB_FILE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show scheduler debug logs")] = False,
) -> None:
    _state["db"] = file
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _get_store() -> Store:
    return Store(_state["db"])


def _require_project(store: Store) -> Project:
    project = store.load()
    if project is None:
        console.print("[red]No project found. Run 'komaplan init' first.[/red]")
        raise typer.Exit(1)
    return project


def _parse_date(value: str, what: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Invalid {what} '{value}'. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(1)


def _parse_rest_days(value: str) -> list[int]:
    """'0,6' -> [0, 6]; '' -> []."""
    try:
        return sorted({int(part) for part in value.split(",") if part.strip()})
    except ValueError:
        console.print(f"[red]Invalid rest days '{value}'. Use comma-separated 0-7.[/red]")
        raise typer.Exit(1)


def _expand_input(text: str) -> str:
    """Accept either an SMLP string or the numeric per-page shorthand."""
    text = text.strip()
    if is_numeric_only(text):
        return convert_numbers_to_smlp(text)
    return text


def _validate(settings: ProjectSettings) -> None:
    try:
        settings.validate()
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def init(
    smlp: Annotated[str, typer.Argument(help="SMLP string (e.g. MMLPSSM) or per-page panel counts (e.g. 4530)")],
    deadline: Annotated[str, typer.Option(help="Deadline (YYYY-MM-DD)", prompt="Deadline (YYYY-MM-DD)")],
    start: Annotated[Optional[str], typer.Option(help="Earliest working day (YYYY-MM-DD)")] = None,
    name: Annotated[str, typer.Option(help="Project name")] = "Manuscript",
    s_minutes: Annotated[int, typer.Option("--s-min", help="Minutes per S panel")] = 30,
    m_minutes: Annotated[int, typer.Option("--m-min", help="Minutes per M panel")] = 60,
    l_minutes: Annotated[int, typer.Option("--l-min", help="Minutes per L panel")] = 90,
    rest_days: Annotated[str, typer.Option(help="Rest days, 0=Sun..6=Sat, 7=holidays")] = "0,6",
    include_holidays: Annotated[bool, typer.Option(help="Give public holidays weekend hours")] = True,
    weekday_hours: float = 8.0,
    weekend_hours: float = 4.0,
    warmup_factor: Annotated[Optional[float], typer.Option(help="Enable warm-up with this capacity factor (0-1)")] = None,
    warmup_days: int = 3,
    sprint_hours: Annotated[Optional[float], typer.Option(help="Enable final sprint with these daily hours")] = None,
    sprint_days: int = 3,
    split: Annotated[bool, typer.Option("--split/--no-split", help="Allow a panel to span several days")] = True,
    country: Annotated[str, typer.Option(help="Country code for public holidays")] = "JP",
) -> None:
    """Create (or replace) the project from an SMLP string."""
    smlp_string = _expand_input(smlp)
    if not validate_smlp_string(smlp_string):
        console.print("[red]Input contains no S/M/L/P panels.[/red]")
        raise typer.Exit(1)

    settings = ProjectSettings(
        deadline=_parse_date(deadline, "deadline"),
        smlp_string=smlp_string,
        time_settings=TimeSettings(S=s_minutes, M=m_minutes, L=l_minutes),
        start_date=_parse_date(start, "start date") if start else None,
        rest_days=_parse_rest_days(rest_days),
        include_holidays=include_holidays,
        weekday_max_hours=weekday_hours,
        weekend_max_hours=weekend_hours,
        warmup_enabled=warmup_factor is not None,
        warmup_factor=warmup_factor if warmup_factor is not None else 1.0,
        warmup_days=warmup_days if warmup_factor is not None else 0,
        final_sprint_enabled=sprint_hours is not None,
        final_sprint_days=sprint_days if sprint_hours is not None else 0,
        final_sprint_max_hours=sprint_hours or 0.0,
        allow_split_panels=split,
        holiday_country=country,
    )
    _validate(settings)

    pages = create_pages_from_smlp(parse_smlp_string(smlp_string), settings.time_settings)
    now = datetime.now()
    project = Project(
        id=f"project-{int(now.timestamp() * 1000)}",
        name=name,
        settings=settings,
        pages=pages,
        created_at=now,
        updated_at=now,
    )
    _get_store().save(project)
    panel_total = sum(len(p.panels) for p in pages)
    console.print(f"[green]Created '{name}': {len(pages)} page(s), {panel_total} panel(s). Deadline {deadline}.[/green]")


@app.command("settings")
def update_settings(
    deadline: Annotated[Optional[str], typer.Option(help="New deadline (YYYY-MM-DD)")] = None,
    start: Annotated[Optional[str], typer.Option(help="Earliest working day (YYYY-MM-DD), '' to clear")] = None,
    s_minutes: Annotated[Optional[int], typer.Option("--s-min", help="Minutes per S panel")] = None,
    m_minutes: Annotated[Optional[int], typer.Option("--m-min", help="Minutes per M panel")] = None,
    l_minutes: Annotated[Optional[int], typer.Option("--l-min", help="Minutes per L panel")] = None,
    rest_days: Annotated[Optional[str], typer.Option(help="Rest days, 0=Sun..6=Sat, 7=holidays")] = None,
    include_holidays: Annotated[Optional[bool], typer.Option("--include-holidays/--no-include-holidays")] = None,
    weekday_hours: Optional[float] = None,
    weekend_hours: Optional[float] = None,
    warmup: Annotated[Optional[bool], typer.Option("--warmup/--no-warmup")] = None,
    warmup_factor: Optional[float] = None,
    warmup_days: Optional[int] = None,
    sprint: Annotated[Optional[bool], typer.Option("--sprint/--no-sprint")] = None,
    sprint_hours: Optional[float] = None,
    sprint_days: Optional[int] = None,
    split: Annotated[Optional[bool], typer.Option("--split/--no-split")] = None,
    country: Optional[str] = None,
) -> None:
    """Update scheduling options. Unset options keep their value."""
    store = _get_store()
    project = _require_project(store)
    s = project.settings

    if deadline is not None:
        s.deadline = _parse_date(deadline, "deadline")
    if start is not None:
        s.start_date = _parse_date(start, "start date") if start else None
    if s_minutes is not None:
        s.time_settings.S = s_minutes
    if m_minutes is not None:
        s.time_settings.M = m_minutes
    if l_minutes is not None:
        s.time_settings.L = l_minutes
    if rest_days is not None:
        s.rest_days = _parse_rest_days(rest_days)
    if include_holidays is not None:
        s.include_holidays = include_holidays
    if weekday_hours is not None:
        s.weekday_max_hours = weekday_hours
    if weekend_hours is not None:
        s.weekend_max_hours = weekend_hours
    if warmup is not None:
        s.warmup_enabled = warmup
    if warmup_factor is not None:
        s.warmup_factor = warmup_factor
    if warmup_days is not None:
        s.warmup_days = warmup_days
    if sprint is not None:
        s.final_sprint_enabled = sprint
    if sprint_hours is not None:
        s.final_sprint_max_hours = sprint_hours
    if sprint_days is not None:
        s.final_sprint_days = sprint_days
    if split is not None:
        s.allow_split_panels = split
    if country is not None:
        s.holiday_country = country

    _validate(s)
    project.pages = recalculate_minutes(project.pages, s.time_settings)
    project.updated_at = datetime.now()
    store.save(project)

    table = Table(title="Settings", show_header=False)
    for key, value in s.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def pages() -> None:
    """List pages and their panels."""
    project = _require_project(_get_store())
    if not project.pages:
        console.print("No pages.")
        return

    table = Table(title=f"Pages - {project.name}")
    table.add_column("Page", justify="right")
    table.add_column("Priority", justify="right")
    table.add_column("Panels")
    table.add_column("Minutes", justify="right")
    table.add_column("Note")
    for page in project.pages:
        table.add_row(
            str(page.number),
            str(page.priority) if page.priority is not None else "-",
            " ".join(f"{p.size.value}{p.id.rsplit('-', 1)[-1]}" for p in page.panels),
            str(sum(p.estimated_minutes for p in page.panels)),
            page.note or "",
        )
    console.print(table)
    total = sum(p.estimated_minutes for page in project.pages for p in page.panels)
    console.print(f"[dim]{total / 60:.1f}h of work across {len(project.pages)} page(s)[/dim]")


@app.command("set-panel")
def set_panel(
    panel_id: Annotated[str, typer.Argument(help="Panel id, e.g. page-2-panel-3")],
    size: Annotated[Optional[str], typer.Option("--size", "-s", help="S, M or L")] = None,
    note: Annotated[Optional[str], typer.Option(help="Free-form note")] = None,
) -> None:
    """Change a panel's size or note."""
    store = _get_store()
    project = _require_project(store)
    panel = project.find_panel(panel_id)
    if panel is None:
        console.print(f"[red]Panel {panel_id} not found.[/red]")
        raise typer.Exit(1)

    if size is not None:
        if size.upper() not in ("S", "M", "L"):
            console.print(f"[red]Invalid size '{size}'. Use S, M or L.[/red]")
            raise typer.Exit(1)
        panel.size = PanelSize(size.upper())
    if note is not None:
        panel.note = note

    project.pages = recalculate_minutes(project.pages, project.settings.time_settings)
    project.updated_at = datetime.now()
    store.save(project)
    console.print(f"[green]Updated {panel_id}.[/green]")


@app.command("set-page")
def set_page(
    number: Annotated[int, typer.Argument(help="Page number")],
    priority: Annotated[Optional[int], typer.Option(help="Lower is scheduled first; -1 clears")] = None,
    note: Annotated[Optional[str], typer.Option(help="Free-form note")] = None,
) -> None:
    """Change a page's priority or note."""
    store = _get_store()
    project = _require_project(store)
    page = project.find_page(number)
    if page is None:
        console.print(f"[red]Page {number} not found.[/red]")
        raise typer.Exit(1)

    if priority is not None:
        page.priority = None if priority < 0 else priority
    if note is not None:
        page.note = note

    project.updated_at = datetime.now()
    store.save(project)
    console.print(f"[green]Updated page {number}.[/green]")


@app.command()
def plan(
    show_all: Annotated[bool, typer.Option("--all", "-a", help="Also show days without work")] = False,
) -> None:
    """Schedule all panels back from the deadline and show the daily plan."""
    store = _get_store()
    project = _require_project(store)
    _validate(project.settings)

    project.pages = recalculate_minutes(project.pages, project.settings.time_settings)
    schedule = schedule_pages(project.pages, project.settings)
    project.schedule = schedule
    project.week_summaries = generate_week_summaries(schedule)
    project.updated_at = datetime.now()
    store.save(project)

    if not schedule:
        console.print("Nothing to schedule.")
        return

    table = Table(title=f"Daily plan - deadline {project.settings.deadline.isoformat()}")
    table.add_column("Date")
    table.add_column("Used", justify="right")
    table.add_column("Capacity", justify="right")
    table.add_column("Panels")
    table.add_column("Load")
    for day in schedule:
        if not show_all and day.used_minutes == 0:
            continue
        table.add_row(
            day.date.strftime("%a %Y-%m-%d"),
            f"{day.used_hours:.1f}h",
            f"{day.capacity_minutes / 60:.1f}h",
            ", ".join(panel_ref(p) for p in day.panels) or "-",
            day.label.value,
            style=_LABEL_STYLES.get(day.label.value),
        )
    console.print(table)

    work_days = sum(1 for d in schedule if d.used_minutes > 0)
    console.print(f"Start: [bold]{schedule[0].date.isoformat()}[/bold]  Working days: {work_days}")

    missing = unscheduled_panels(project.pages, schedule)
    if missing:
        short = shortfall_minutes(project.pages, schedule)
        console.print(
            f"[bold red]{len(missing)} panel(s) ({short / 60:.1f}h) do not fit before the deadline.[/bold red]"
        )
        console.print(f"[red]  {', '.join(p.id for p in missing)}[/red]")


@app.command()
def weekly() -> None:
    """Show weekly totals of the last plan."""
    project = _require_project(_get_store())
    if not project.week_summaries:
        console.print("No plan yet. Run 'komaplan plan' first.")
        return

    table = Table(title="Weekly summary")
    table.add_column("Week")
    table.add_column("Total", justify="right")
    table.add_column("Weekday", justify="right")
    table.add_column("Weekend", justify="right")
    table.add_column("Max day", justify="right")
    table.add_column("S/M/L", justify="right")
    table.add_column("Peak")
    for w in project.week_summaries:
        table.add_row(
            f"{w.week_start.isoformat()} - {w.week_end.isoformat()}",
            f"{w.total_hours:.1f}h",
            f"{w.weekday_hours:.1f}h",
            f"{w.weekend_hours:.1f}h",
            f"{w.max_day_hours:.1f}h",
            f"{w.panel_counts.S}/{w.panel_counts.M}/{w.panel_counts.L}",
            w.peak_label.value,
            style=_LABEL_STYLES.get(w.peak_label.value),
        )
    console.print(table)


@app.command("export")
def export_plan(
    fmt: Annotated[str, typer.Argument(help="json, csv-daily, csv-weekly or markdown")],
    output: Annotated[Optional[str], typer.Option("-o", "--output", help="Output file (default: stdout)")] = None,
) -> None:
    """Export the project or its last plan."""
    project = _require_project(_get_store())
    if fmt != "json" and project.schedule is None:
        console.print("[red]No plan yet. Run 'komaplan plan' first.[/red]")
        raise typer.Exit(1)

    if fmt == "json":
        text = export_to_json(project)
    elif fmt == "csv-daily":
        text = export_daily_csv(project.schedule)
    elif fmt == "csv-weekly":
        text = export_weekly_csv(project.week_summaries or [])
    elif fmt == "markdown":
        text = export_to_markdown(project.week_summaries or [], project.schedule)
    else:
        console.print(f"[red]Unknown format '{fmt}'. Use json, csv-daily, csv-weekly or markdown.[/red]")
        raise typer.Exit(1)

    if output:
        Path(output).write_text(text)
        console.print(f"[green]Exported {fmt} to {output}[/green]")
    else:
        typer.echo(text, nl=False)


if __name__ == "__main__":
    app()
