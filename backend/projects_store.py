"""
Store and retrieve presentation projects as JSON files on disk.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Protocol

from models import PROJECT_ID_PATTERN, Project

logger = logging.getLogger(__name__)

_PROJECT_ID_RE = re.compile(PROJECT_ID_PATTERN)


class ProjectStore(Protocol):
    def get(self, project_id: str) -> Project | None: ...

    def save(self, project: Project) -> Project: ...

    def list(self) -> list[Project]: ...


def validate_project_id(project_id: str) -> str:
    if not _PROJECT_ID_RE.match(project_id or ""):
        raise ValueError(f"Invalid project id: {project_id!r}")
    return project_id


class JsonFileProjectStore:
    """One <project_id>.json per project under root."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def ensure_dir(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def _path(self, project_id: str) -> Path:
        return self.root / f"{validate_project_id(project_id)}.json"

    def get(self, project_id: str) -> Project | None:
        path = self._path(project_id)
        if not path.is_file():
            return None
        with open(path, encoding="utf-8") as f:
            return Project.model_validate(json.load(f))

    def save(self, project: Project) -> Project:
        path = self._path(project.id)
        self.ensure_dir()
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(project.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
        tmp.replace(path)
        return project

    def list(self) -> list[Project]:
        if not self.root.is_dir():
            return []
        projects = []
        for path in sorted(self.root.glob("*.json")):
            try:
                with open(path, encoding="utf-8") as f:
                    projects.append(Project.model_validate(json.load(f)))
            except (OSError, ValueError) as e:
                # pydantic.ValidationError and JSONDecodeError are ValueErrors.
                logger.warning("PROJECT_SKIPPED path=%s err=%s", path.name, str(e)[:200])
        return projects
