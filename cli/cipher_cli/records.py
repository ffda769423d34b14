"""Project record shared by the persistence tiers."""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .files import ProjectFiles, normalize

DEFAULT_PROJECT_NAME = "MyProject"
ID_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
ID_LENGTH = 6


def make_project_id(length: int = ID_LENGTH) -> str:
    """Return a short, human-typeable project id."""

    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def normalize_project_id(project_id: str) -> str:
    return project_id.strip().upper()


@dataclass(slots=True)
class ProjectRecord:
    """A named project and its file set at a point in time."""

    id: str
    name: str = DEFAULT_PROJECT_NAME
    files: ProjectFiles = field(default_factory=dict)
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    remote_id: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            self.name = DEFAULT_PROJECT_NAME
        self.files = normalize(self.files)


@dataclass(slots=True, frozen=True)
class ProjectSummary:
    """Id and display name of a stored project."""

    id: str
    name: str


__all__ = [
    "DEFAULT_PROJECT_NAME",
    "ProjectRecord",
    "ProjectSummary",
    "make_project_id",
    "normalize_project_id",
]
