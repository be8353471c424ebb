"""Panel, page and schedule models plus project settings."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import date, datetime

import holidays


class PanelSize(enum.StrEnum):
    S = "S"
    M = "M"
    L = "L"
    P = "P"  # page break, only ever seen by the parser


class DayLabel(enum.StrEnum):
    VERY_LIGHT = "very-light"
    LIGHT = "light"
    MODERATE = "moderate"
    HIGH = "high"
    HARSH = "harsh"
    VERY_HARSH = "very-harsh"


HOLIDAY_SENTINEL = 7


@dataclass
class TimeSettings:
    """Minutes of work per panel size."""

    S: int = 30
    M: int = 60
    L: int = 90

    def minutes_for(self, size: PanelSize) -> int:
        if size == PanelSize.P:
            return 0
        return getattr(self, size.value)

    def to_dict(self) -> dict:
        return {"S": self.S, "M": self.M, "L": self.L}

    @classmethod
    def from_dict(cls, d: dict) -> TimeSettings:
        return cls(S=d.get("S", 30), M=d.get("M", 60), L=d.get("L", 90))


@dataclass
class Panel:
    """A single unit of drawing work.

    ``progress_minutes`` is only set on a scheduled occurrence and holds the
    minutes worked on this panel on that one day.
    """

    id: str
    page_id: str
    size: PanelSize
    estimated_minutes: int
    progress_minutes: int | None = None
    note: str | None = None

    def with_progress(self, minutes: int) -> Panel:
        return replace(self, progress_minutes=minutes)

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "pageId": self.page_id,
            "size": self.size.value,
            "estimatedMinutes": self.estimated_minutes,
        }
        if self.progress_minutes is not None:
            d["progressMinutes"] = self.progress_minutes
        if self.note is not None:
            d["note"] = self.note
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Panel:
        return cls(
            id=d["id"],
            page_id=d["pageId"],
            size=PanelSize(d["size"]),
            estimated_minutes=d["estimatedMinutes"],
            progress_minutes=d.get("progressMinutes"),
            note=d.get("note"),
        )


@dataclass
class Page:
    id: str
    number: int
    panels: list[Panel] = field(default_factory=list)
    note: str | None = None
    priority: int | None = None  # lower is scheduled first

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "number": self.number,
            "panels": [p.to_dict() for p in self.panels],
        }
        if self.note is not None:
            d["note"] = self.note
        if self.priority is not None:
            d["priority"] = self.priority
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Page:
        return cls(
            id=d["id"],
            number=d["number"],
            panels=[Panel.from_dict(p) for p in d.get("panels", [])],
            note=d.get("note"),
            priority=d.get("priority"),
        )


@dataclass
class DaySchedule:
    """One calendar day of the produced plan."""

    date: date
    capacity_minutes: int
    used_minutes: int = 0
    panels: list[Panel] = field(default_factory=list)
    label: DayLabel = DayLabel.VERY_LIGHT

    @property
    def used_hours(self) -> float:
        return self.used_minutes / 60

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "capacityMinutes": self.capacity_minutes,
            "usedMinutes": self.used_minutes,
            "panels": [p.to_dict() for p in self.panels],
            "label": self.label.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> DaySchedule:
        return cls(
            date=date.fromisoformat(d["date"]),
            capacity_minutes=d["capacityMinutes"],
            used_minutes=d.get("usedMinutes", 0),
            panels=[Panel.from_dict(p) for p in d.get("panels", [])],
            label=DayLabel(d.get("label", DayLabel.VERY_LIGHT.value)),
        )


@dataclass
class PanelCounts:
    S: int = 0
    M: int = 0
    L: int = 0

    def to_dict(self) -> dict:
        return {"S": self.S, "M": self.M, "L": self.L}

    @classmethod
    def from_dict(cls, d: dict) -> PanelCounts:
        return cls(S=d.get("S", 0), M=d.get("M", 0), L=d.get("L", 0))


@dataclass
class WeekSummary:
    week_start: date
    week_end: date
    total_hours: float
    weekday_hours: float
    weekend_hours: float
    max_day_hours: float
    peak_label: DayLabel
    panel_counts: PanelCounts = field(default_factory=PanelCounts)

    def to_dict(self) -> dict:
        return {
            "weekStart": self.week_start.isoformat(),
            "weekEnd": self.week_end.isoformat(),
            "totalHours": self.total_hours,
            "weekdayHours": self.weekday_hours,
            "weekendHours": self.weekend_hours,
            "maxDayHours": self.max_day_hours,
            "peakLabel": self.peak_label.value,
            "panelCounts": self.panel_counts.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> WeekSummary:
        return cls(
            week_start=date.fromisoformat(d["weekStart"]),
            week_end=date.fromisoformat(d["weekEnd"]),
            total_hours=d["totalHours"],
            weekday_hours=d["weekdayHours"],
            weekend_hours=d["weekendHours"],
            max_day_hours=d["maxDayHours"],
            peak_label=DayLabel(d["peakLabel"]),
            panel_counts=PanelCounts.from_dict(d.get("panelCounts", {})),
        )


@dataclass
class ProjectSettings:
    """Project-level scheduling options stored alongside the pages."""

    deadline: date
    smlp_string: str = ""
    time_settings: TimeSettings = field(default_factory=TimeSettings)
    start_date: date | None = None
    rest_days: list[int] = field(default_factory=lambda: [0, 6])
    include_holidays: bool = True  # holidays get weekend hours
    weekday_max_hours: float = 8.0
    weekend_max_hours: float = 4.0
    warmup_enabled: bool = False
    warmup_factor: float = 1.0
    warmup_days: int = 0
    final_sprint_enabled: bool = False
    final_sprint_days: int = 0
    final_sprint_max_hours: float = 0.0
    allow_split_panels: bool = True
    holiday_country: str = "JP"

    def validate(self) -> None:
        """Raise ValueError when the settings fall outside the supported domain."""
        for name in ("weekday_max_hours", "weekend_max_hours", "final_sprint_max_hours"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        for name in ("warmup_days", "final_sprint_days"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        for size in ("S", "M", "L"):
            if getattr(self.time_settings, size) < 0:
                raise ValueError(f"Minutes for size {size} must not be negative")
        if not 0 <= self.warmup_factor <= 1:
            raise ValueError("warmup_factor must be between 0 and 1")
        bad = [d for d in self.rest_days if not 0 <= d <= HOLIDAY_SENTINEL]
        if bad:
            raise ValueError(f"Invalid rest day value(s): {bad} (use 0=Sun..6=Sat, 7=holidays)")
        if self.start_date is not None and self.start_date > self.deadline:
            raise ValueError("start_date must not be after the deadline")
        if self.holiday_country not in holidays.list_supported_countries():
            raise ValueError(f"Unsupported holiday country '{self.holiday_country}'")

    def to_dict(self) -> dict:
        d = {
            "smlpString": self.smlp_string,
            "timeSettings": self.time_settings.to_dict(),
            "deadline": self.deadline.isoformat(),
            "restDays": self.rest_days,
            "includeHolidays": self.include_holidays,
            "weekdayMaxHours": self.weekday_max_hours,
            "weekendMaxHours": self.weekend_max_hours,
            "warmupEnabled": self.warmup_enabled,
            "warmupFactor": self.warmup_factor,
            "warmupDays": self.warmup_days,
            "finalSprintEnabled": self.final_sprint_enabled,
            "finalSprintDays": self.final_sprint_days,
            "finalSprintMaxHours": self.final_sprint_max_hours,
            "allowSplitPanels": self.allow_split_panels,
            "holidayCountry": self.holiday_country,
        }
        if self.start_date is not None:
            d["startDate"] = self.start_date.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> ProjectSettings:
        start = d.get("startDate")
        return cls(
            deadline=date.fromisoformat(d["deadline"]),
            smlp_string=d.get("smlpString", ""),
            time_settings=TimeSettings.from_dict(d.get("timeSettings", {})),
            start_date=date.fromisoformat(start) if start else None,
            rest_days=d.get("restDays", [0, 6]),
            include_holidays=d.get("includeHolidays", True),
            weekday_max_hours=d.get("weekdayMaxHours", 8.0),
            weekend_max_hours=d.get("weekendMaxHours", 4.0),
            warmup_enabled=d.get("warmupEnabled", False),
            warmup_factor=d.get("warmupFactor", 1.0),
            warmup_days=d.get("warmupDays", 0),
            final_sprint_enabled=d.get("finalSprintEnabled", False),
            final_sprint_days=d.get("finalSprintDays", 0),
            final_sprint_max_hours=d.get("finalSprintMaxHours", 0.0),
            allow_split_panels=d.get("allowSplitPanels", True),
            holiday_country=d.get("holidayCountry", "JP"),
        )


@dataclass
class Project:
    """Settings, pages and the last produced plan."""

    id: str
    name: str
    settings: ProjectSettings
    pages: list[Page] = field(default_factory=list)
    schedule: list[DaySchedule] | None = None
    week_summaries: list[WeekSummary] | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def find_panel(self, panel_id: str) -> Panel | None:
        for page in self.pages:
            for panel in page.panels:
                if panel.id == panel_id:
                    return panel
        return None

    def find_page(self, number: int) -> Page | None:
        return next((p for p in self.pages if p.number == number), None)

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "name": self.name,
            "settings": self.settings.to_dict(),
            "pages": [p.to_dict() for p in self.pages],
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        if self.schedule is not None:
            d["schedule"] = [day.to_dict() for day in self.schedule]
        if self.week_summaries is not None:
            d["weekSummaries"] = [w.to_dict() for w in self.week_summaries]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Project:
        schedule = d.get("schedule")
        weeks = d.get("weekSummaries")
        return cls(
            id=d["id"],
            name=d.get("name", ""),
            settings=ProjectSettings.from_dict(d["settings"]),
            pages=[Page.from_dict(p) for p in d.get("pages", [])],
            schedule=[DaySchedule.from_dict(x) for x in schedule] if schedule is not None else None,
            week_summaries=[WeekSummary.from_dict(x) for x in weeks] if weeks is not None else None,
            created_at=datetime.fromisoformat(d["createdAt"]),
            updated_at=datetime.fromisoformat(d["updatedAt"]),
        )
