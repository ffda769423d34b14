"""Project management utilities."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Project

LOGGER = logging.getLogger(__name__)


class ProjectNotFound(LookupError):
    """Raised when a project id does not exist."""


def to_pairs(files: Any) -> list[dict[str, str]]:
    """Convert incoming ``files`` into the stored pair list.

    ``files`` may be a mapping of path to content or a sequence of entries
    with ``path`` and ``content`` (pydantic models or plain mappings).
    Duplicate paths keep their first position and their last content.
    """

    if files is None:
        return []
    if isinstance(files, Mapping):
        items: Iterable[tuple[str, Any]] = files.items()
    else:
        items = (_entry_item(entry) for entry in files)
    merged: dict[str, str] = {}
    for path, content in items:
        if not path:
            continue
        merged[path] = "" if content is None else str(content)
    return [{"path": path, "content": content} for path, content in merged.items()]


def _entry_item(entry: Any) -> tuple[str, Any]:
    if isinstance(entry, Mapping):
        return str(entry["path"]), entry.get("content", entry.get("code"))
    return entry.path, entry.content


def stored_pairs(files: Any) -> list[dict[str, str]]:
    """Read a stored ``files`` column, tolerating legacy mapping rows."""

    try:
        return to_pairs(files)
    except (KeyError, TypeError, AttributeError):
        LOGGER.warning("Ignoring malformed stored files payload")
        return []


class ProjectService:
    """Responsible for creating, reading, updating and deleting projects."""

    def __init__(self, session: Session, *, max_files: int = 500) -> None:
        self.session = session
        self.max_files = max_files

    def _checked_pairs(self, files: Any) -> list[dict[str, str]]:
        pairs = to_pairs(files)
        if len(pairs) > self.max_files:
            raise ValueError(
                f"Projects may contain at most {self.max_files} files",
            )
        return pairs

    def list(self) -> list[Project]:
        """Return every project, most recently updated first."""

        return list(
            self.session.scalars(select(Project).order_by(Project.updated_at.desc()))
        )

    def get(self, project_id: str) -> Project:
        project = self.session.get(Project, project_id)
        if project is None:
            raise ProjectNotFound(f"Project '{project_id}' not found")
        return project

    def create(self, name: str | None, files: Any) -> Project:
        project = Project(name=name, files=self._checked_pairs(files))
        self.session.add(project)
        self.session.commit()
        self.session.refresh(project)
        LOGGER.info("Created project %s", project.id)
        return project

    def update(
        self, project_id: str, *, name: str | None = None, files: Any = None
    ) -> Project:
        project = self.get(project_id)
        if name is not None:
            project.name = name
        if files is not None:
            project.files = self._checked_pairs(files)
        self.session.commit()
        self.session.refresh(project)
        return project

    def delete(self, project_id: str) -> None:
        project = self.get(project_id)
        self.session.delete(project)
        self.session.commit()
        LOGGER.info("Deleted project %s", project_id)


__all__ = ["ProjectNotFound", "ProjectService", "stored_pairs", "to_pairs"]
