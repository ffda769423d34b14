"""FastAPI application for the Cipher Studio project store."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from .config import get_settings
from .database import Base, get_engine, get_session
from .models import Project
from .projects import ProjectNotFound, ProjectService, stored_pairs
from .schemas import (
    AckResponse,
    FileEntry,
    ProjectCreatedResponse,
    ProjectCreateRequest,
    ProjectResponse,
    ProjectSummary,
    ProjectUpdateRequest,
)

LOGGER = logging.getLogger(__name__)

settings = get_settings()
engine = get_engine()

SessionDep = Annotated[Session, Depends(get_session)]

DEFAULT_NAME = "Untitled"


def get_service(session: SessionDep) -> ProjectService:
    return ProjectService(session, max_files=settings.max_files)


ServiceDep = Annotated[ProjectService, Depends(get_service)]

app = FastAPI(title="Cipher Studio API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

router = APIRouter(prefix="/api/projects", tags=["projects"])


@app.on_event("startup")
def on_startup() -> None:
    logging.getLogger("cipher_backend").setLevel(settings.log_level.upper())
    Base.metadata.create_all(bind=engine)


@app.get("/healthz")
async def healthcheck() -> dict[str, str]:
    """Health check endpoint."""

    return {"status": "ok"}


@app.get("/api")
async def api_root() -> dict[str, object]:
    return {"ok": True, "hint": "Use /api/projects"}


def _response_for(project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name or DEFAULT_NAME,
        files=[FileEntry(**pair) for pair in stored_pairs(project.files)],
        updated_at=project.updated_at,
    )


def _get_or_404(service: ProjectService, project_id: str) -> Project:
    try:
        return service.get(project_id)
    except ProjectNotFound as exc:
        raise HTTPException(status_code=404, detail="Project not found") from exc


@router.get("", response_model=list[ProjectSummary])
def list_projects(service: ServiceDep) -> list[ProjectSummary]:
    return [
        ProjectSummary(id=project.id, name=project.name or DEFAULT_NAME)
        for project in service.list()
    ]


@router.post("", response_model=ProjectCreatedResponse, status_code=201)
def create_project(
    payload: ProjectCreateRequest, service: ServiceDep
) -> ProjectCreatedResponse:
    try:
        project = service.create(payload.name, payload.files)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ProjectCreatedResponse(id=project.id)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, service: ServiceDep) -> ProjectResponse:
    return _response_for(_get_or_404(service, project_id))


@router.put("/{project_id}", response_model=AckResponse)
def update_project(
    project_id: str, payload: ProjectUpdateRequest, service: ServiceDep
) -> AckResponse:
    _get_or_404(service, project_id)
    try:
        service.update(project_id, name=payload.name, files=payload.files)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return AckResponse()


@router.delete("/{project_id}", response_model=AckResponse)
def delete_project(project_id: str, service: ServiceDep) -> AckResponse:
    _get_or_404(service, project_id)
    service.delete(project_id)
    return AckResponse()


app.include_router(router)
