from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cipher_backend.app import app
from cipher_backend.database import Base, get_session
from cipher_cli.errors import NotFound
from cipher_cli.local import LocalPersistenceAdapter, MemoryStorage
from cipher_cli.records import ProjectRecord, ProjectSummary


@dataclass
class FakeHandle:
    when: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimer:
    """Manually advanced replacement for ``loop.call_later``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[FakeHandle] = []

    def clock(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def armed(self) -> list[FakeHandle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [handle for handle in self.armed if handle.when <= self.now]
        for handle in sorted(due, key=lambda handle: handle.when):
            handle.cancelled = True
            handle.callback()


@dataclass
class FakeRemote:
    """In-memory stand-in for :class:`cipher_cli.client.ApiClient`.

    ``gate`` makes calls block until released so tests can interleave
    other work while a request is in flight.
    """

    projects: dict[str, ProjectRecord] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    gates: dict[str, tuple[threading.Event, threading.Event]] = field(
        default_factory=dict
    )
    fail_with: Exception | None = None
    _next_id: int = 0

    def gate(self, key: str) -> tuple[threading.Event, threading.Event]:
        started, release = threading.Event(), threading.Event()
        self.gates[key] = (started, release)
        return started, release

    def _wait(self, key: str) -> None:
        if key in self.gates:
            started, release = self.gates.pop(key)
            started.set()
            release.wait(timeout=5)
        if self.fail_with is not None:
            raise self.fail_with

    def list_projects(self) -> list[ProjectSummary]:
        self._wait("list")
        return [
            ProjectSummary(id=key, name=record.name)
            for key, record in self.projects.items()
        ]

    def create_project(self, name, files) -> str:
        self._next_id += 1
        project_id = f"r{self._next_id}"
        self._wait("create")
        self.calls.append(("create", project_id))
        self.projects[project_id] = ProjectRecord(
            id=project_id, name=name, files=dict(files), remote_id=project_id
        )
        return project_id

    def fetch_project(self, project_id: str) -> ProjectRecord:
        self._wait(project_id)
        self.calls.append(("fetch", project_id))
        if project_id not in self.projects:
            raise NotFound(project_id)
        record = self.projects[project_id]
        return ProjectRecord(
            id=project_id,
            name=record.name,
            files=dict(record.files),
            remote_id=project_id,
        )

    def update_project(self, project_id: str, *, name=None, files=None) -> None:
        self._wait("update")
        self.calls.append(("update", project_id))
        record = self.projects[project_id]
        if name is not None:
            record.name = name
        if files is not None:
            record.files = dict(files)

    def delete_project(self, project_id: str) -> None:
        self._wait(project_id)
        self.calls.append(("delete", project_id))
        self.projects.pop(project_id, None)


@pytest.fixture()
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def local(storage: MemoryStorage) -> LocalPersistenceAdapter:
    return LocalPersistenceAdapter(storage)


@pytest.fixture()
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def override_session():
        session = testing_session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = override_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        engine.dispose()
