"""Editing session tying the file store to the persistence tiers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .autosave import AutosaveScheduler, CallLater
from .bridge import EditingSurface, SnapshotBridge
from .client import ApiClient
from .config import Settings, get_settings
from .errors import NotFound, StaleResponse, TransportError
from .files import DEPENDENCIES, ENTRY_POINT, display_order
from .local import JsonFileStorage, LocalPersistenceAdapter
from .records import (
    DEFAULT_PROJECT_NAME,
    ProjectRecord,
    ProjectSummary,
    make_project_id,
)
from .store import FileStore

_LOGGER = logging.getLogger(__name__)


class StudioSession:
    """State of the single project open in an editor.

    The session owns the :class:`FileStore`, knows the open project's id,
    name and remote id, and mediates every save and load. Each load bumps a
    generation counter; remote responses issued under an older generation
    are discarded instead of being applied to the project now open.
    """

    def __init__(
        self,
        local: LocalPersistenceAdapter,
        remote: ApiClient | None = None,
        *,
        surface: EditingSurface | None = None,
        autosave_enabled: bool = True,
        autosave_delay: float = 1.0,
        call_later: CallLater | None = None,
    ) -> None:
        self.local = local
        self.remote = remote
        self.store = FileStore()
        self.bridge = SnapshotBridge(self.store, surface)
        self.project_id = make_project_id()
        self.project_name = DEFAULT_PROJECT_NAME
        self.remote_id: str | None = None
        self.generation = 0
        self._save_seq = 0
        self._open_seq = 0
        self._remote_lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        self.autosave = AutosaveScheduler(
            self.save_local,
            autosave_delay,
            enabled=autosave_enabled,
            call_later=call_later,
        )
        self.store.on_mutation(self.autosave.touch)
        self.store.on_load(self._on_load)

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, **kwargs: Any
    ) -> "StudioSession":
        settings = settings or get_settings()
        kwargs.setdefault("autosave_enabled", settings.autosave_enabled)
        kwargs.setdefault("autosave_delay", settings.autosave_delay)
        return cls(
            LocalPersistenceAdapter(JsonFileStorage(settings.storage_path)),
            ApiClient(settings.api_url, timeout=settings.request_timeout),
            **kwargs,
        )

    def _on_load(self) -> None:
        self.generation += 1
        self.autosave.cancel()

    def open_record(self, record: ProjectRecord) -> None:
        """Make ``record`` the open project."""

        self.project_id = record.id
        self.project_name = record.name
        self.remote_id = record.remote_id
        self.store.load(record.files)
        _LOGGER.info("Opened project %s (%s)", record.id, record.name)

    def _ensure_current(self, generation: int, action: str) -> None:
        if generation != self.generation:
            raise StaleResponse(
                f"{action} belongs to a project that is no longer open"
            )

    def _require_remote(self) -> ApiClient:
        if self.remote is None:
            raise TransportError("No remote project store is configured")
        return self.remote

    def _save_lock(self) -> asyncio.Lock:
        # A lock waits on the loop it was first contended in.
        loop = asyncio.get_running_loop()
        if self._remote_lock is None or self._lock_loop is not loop:
            self._remote_lock = asyncio.Lock()
            self._lock_loop = loop
        return self._remote_lock

    # Editing surface hooks

    def attach_surface(self, surface: EditingSurface | None) -> None:
        self.bridge.attach(surface)

    def mark_dirty(self) -> None:
        """Notify the session that the editing surface holds new keystrokes."""

        self.autosave.touch()

    def surface_config(self) -> dict[str, Any]:
        """Return what the editing surface needs to render the project."""

        files = self.store.snapshot()
        return {
            "files": files,
            "entry": ENTRY_POINT,
            "dependencies": dict(DEPENDENCIES),
            "visible_files": display_order(files),
        }

    # Project lifecycle

    def new_project(self, name: str | None = None) -> ProjectRecord:
        record = ProjectRecord(
            id=make_project_id(), name=name or DEFAULT_PROJECT_NAME
        )
        self.open_record(record)
        return record

    def rename_project(self, name: str) -> None:
        self.project_name = name.strip() or DEFAULT_PROJECT_NAME
        self.autosave.touch()

    def set_autosave(self, enabled: bool) -> None:
        self.autosave.set_enabled(enabled)

    def snapshot(self) -> ProjectRecord:
        """Return the open project with the freshest content from the surface."""

        return ProjectRecord(
            id=self.project_id,
            name=self.project_name,
            files=self.bridge.reconcile(),
            remote_id=self.remote_id,
        )

    # Local tier

    def save_local(self) -> ProjectRecord:
        stored = self.local.save(self.snapshot())
        self.project_id = stored.id
        return stored

    def open_local(self, project_id: str) -> ProjectRecord:
        record = self.local.load(project_id)
        self.open_record(record)
        return record

    def resume(self) -> ProjectRecord:
        """Reopen the last used local project, or start a fresh one."""

        last_id = self.local.last_project_id()
        if last_id:
            try:
                return self.open_local(last_id)
            except NotFound:
                _LOGGER.warning("Last project %s is gone; starting fresh", last_id)
        return self.new_project()

    def delete_local(self, project_id: str) -> None:
        self.local.delete(project_id)

    def list_local(self) -> list[ProjectSummary]:
        return self.local.list()

    # Remote tier

    async def list_remote(self) -> list[ProjectSummary]:
        remote = self._require_remote()
        return await asyncio.to_thread(remote.list_projects)

    async def open_remote(self, project_id: str) -> ProjectRecord | None:
        """Fetch and open a remote project.

        Returns ``None`` when another project was opened, or another remote
        open was started, while the fetch was in flight; the response is then
        discarded.
        """

        remote = self._require_remote()
        generation = self.generation
        self._open_seq += 1
        seq = self._open_seq
        record = await asyncio.to_thread(remote.fetch_project, project_id)
        try:
            self._ensure_current(generation, f"Fetch of {project_id}")
            if seq != self._open_seq:
                raise StaleResponse(
                    f"Fetch of {project_id} was superseded by a later open"
                )
        except StaleResponse as exc:
            _LOGGER.info("Discarding stale response: %s", exc)
            return None
        self.open_record(record)
        return record

    async def save_remote(self) -> str | None:
        """Create or update the open project remotely and return its remote id.

        Saves are sent one at a time in the order they were requested. A
        queued save that a later request has already superseded is skipped,
        so the most recently requested snapshot is always the last one
        written. Returns ``None`` when the save was skipped or discarded.
        """

        remote = self._require_remote()
        generation = self.generation
        self._save_seq += 1
        seq = self._save_seq
        files = self.bridge.reconcile()
        name = self.project_name

        async with self._save_lock():
            try:
                self._ensure_current(generation, "Remote save")
                if seq != self._save_seq:
                    _LOGGER.debug(
                        "Skipping remote save %d superseded by %d", seq, self._save_seq
                    )
                    return None
                if self.remote_id is None:
                    remote_id = await asyncio.to_thread(
                        remote.create_project, name, files
                    )
                    self._ensure_current(generation, "Remote create")
                    self.remote_id = remote_id
                else:
                    remote_id = self.remote_id
                    await asyncio.to_thread(
                        remote.update_project, remote_id, name=name, files=files
                    )
                    self._ensure_current(generation, "Remote update")
            except StaleResponse as exc:
                _LOGGER.info("Discarding stale response: %s", exc)
                return None
        return remote_id

    async def delete_remote(self, project_id: str) -> None:
        remote = self._require_remote()
        await asyncio.to_thread(remote.delete_project, project_id)
        if self.remote_id == project_id:
            self.remote_id = None


__all__ = ["StudioSession"]
