"""Client-local persistence of project records.

Records live in a key-value store with string keys and string values, in
the manner of browser local storage. The whole collection of projects is a
single JSON blob under :data:`PROJECTS_KEY`::

    {
      "K3M9QZ": {
        "name": "MyProject",
        "files": {"/public/index.html": "...", "/src/App.js": "..."},
        "updatedAt": "2025-01-01T12:00:00+00:00"
      }
    }

Saving reads the blob, upserts one record and writes the blob back. This
read-modify-write is not atomic: two contexts sharing the same store
overwrite each other and the last writer wins.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Protocol

from .errors import NotFound
from .records import (
    DEFAULT_PROJECT_NAME,
    ProjectRecord,
    ProjectSummary,
    normalize_project_id,
)

_LOGGER = logging.getLogger(__name__)

PROJECTS_KEY = "cipherstudio:projects"
LAST_PROJECT_KEY = "cipherstudio:last_project"


class KeyValueStorage(Protocol):
    """Durable string-to-string storage."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Volatile storage, mainly for tests and throwaway sessions."""

    def __init__(self, items: Mapping[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStorage:
    """Storage persisted as a JSON object in a single file.

    The file is re-read on every access so that separate processes sharing
    it observe each other's writes.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except ValueError as exc:
            raise ValueError(f"Storage file is not valid JSON: {self.path}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"Storage file must contain a JSON object: {self.path}")
        return data

    def _write(self, data: Mapping[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(data, indent=2, sort_keys=True), encoding="utf-8"
        )

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


class LocalPersistenceAdapter:
    """Save, load and delete project records in a :class:`KeyValueStorage`."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self.storage = storage

    def _read_collection(self) -> dict[str, dict[str, Any]]:
        blob = self.storage.get_item(PROJECTS_KEY)
        if not blob:
            return {}
        try:
            collection = json.loads(blob)
        except ValueError as exc:
            raise ValueError("Local project collection is not valid JSON") from exc
        if not isinstance(collection, dict):
            raise ValueError("Local project collection must be a JSON object")
        return collection

    def _write_collection(self, collection: Mapping[str, Any]) -> None:
        self.storage.set_item(PROJECTS_KEY, json.dumps(collection))

    def save(self, record: ProjectRecord) -> ProjectRecord:
        """Upsert ``record`` and return it as stored."""

        project_id = normalize_project_id(record.id)
        stored = ProjectRecord(
            id=project_id,
            name=record.name,
            files=record.files,
            updated_at=datetime.now(timezone.utc),
            remote_id=record.remote_id,
        )
        collection = self._read_collection()
        collection[project_id] = {
            "name": stored.name,
            "files": stored.files,
            "updatedAt": stored.updated_at.isoformat(),
        }
        if stored.remote_id:
            collection[project_id]["remoteId"] = stored.remote_id
        self._write_collection(collection)
        self.storage.set_item(LAST_PROJECT_KEY, project_id)
        _LOGGER.info(
            "Saved project %s locally (%d files)", project_id, len(stored.files)
        )
        return stored

    def load(self, project_id: str) -> ProjectRecord:
        key = normalize_project_id(project_id)
        entry = self._read_collection().get(key)
        if not isinstance(entry, dict):
            raise NotFound(f"Project {key} is not stored locally")
        return ProjectRecord(
            id=key,
            name=entry.get("name") or entry.get("projectName") or "",
            files=entry.get("files") or {},
            updated_at=_parse_timestamp(entry.get("updatedAt")),
            remote_id=entry.get("remoteId"),
        )

    def delete(self, project_id: str) -> None:
        key = normalize_project_id(project_id)
        collection = self._read_collection()
        if key not in collection:
            return
        del collection[key]
        self._write_collection(collection)
        if self.storage.get_item(LAST_PROJECT_KEY) == key:
            self.storage.remove_item(LAST_PROJECT_KEY)
        _LOGGER.info("Deleted local project %s", key)

    def list(self) -> list[ProjectSummary]:
        summaries = []
        for key, entry in self._read_collection().items():
            name = ""
            if isinstance(entry, dict):
                name = entry.get("name") or entry.get("projectName") or ""
            summaries.append(ProjectSummary(id=key, name=name or DEFAULT_PROJECT_NAME))
        return summaries

    def last_project_id(self) -> str | None:
        return self.storage.get_item(LAST_PROJECT_KEY)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            _LOGGER.warning("Ignoring malformed timestamp %r", value)
    return datetime.now(timezone.utc)


__all__ = [
    "JsonFileStorage",
    "KeyValueStorage",
    "LAST_PROJECT_KEY",
    "LocalPersistenceAdapter",
    "MemoryStorage",
    "PROJECTS_KEY",
]
