"""JSON file persistence for a project."""

from __future__ import annotations

import json
from pathlib import Path

from komaplan.models import Project

DEFAULT_DB_FILE = "komaplan_project.json"


class Store:
    """Reads and writes the project file (JSON)."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_FILE):
        self.db_path = Path(db_path)

    def load(self) -> Project | None:
        """Return the stored project, or None when there is no file yet."""
        if not self.db_path.exists():
            return None
        raw = json.loads(self.db_path.read_text())
        return Project.from_dict(raw)

    def save(self, project: Project) -> None:
        self.db_path.write_text(json.dumps(project.to_dict(), indent=4))
