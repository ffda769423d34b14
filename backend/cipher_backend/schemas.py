"""Pydantic schemas for the project store API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class FileEntry(BaseModel):
    """A single file on the wire."""

    path: str = Field(..., min_length=1)
    content: str = ""


class ProjectCreateRequest(BaseModel):
    """Request body for creating a project."""

    name: str | None = None
    files: list[FileEntry] | dict[str, str] = Field(default_factory=list)


class ProjectUpdateRequest(BaseModel):
    """Request body for updating a project; omitted fields are left alone."""

    name: str | None = None
    files: list[FileEntry] | dict[str, str] | None = None


class ProjectSummary(BaseModel):
    """Id and name of a stored project."""

    id: str
    name: str


class ProjectCreatedResponse(BaseModel):
    id: str


class ProjectResponse(BaseModel):
    """Full project payload."""

    id: str
    name: str
    files: list[FileEntry]
    updated_at: datetime | None = None


class AckResponse(BaseModel):
    ok: bool = True


__all__ = [
    "AckResponse",
    "FileEntry",
    "ProjectCreateRequest",
    "ProjectCreatedResponse",
    "ProjectResponse",
    "ProjectSummary",
    "ProjectUpdateRequest",
]
