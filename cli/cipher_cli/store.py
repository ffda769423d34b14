"""Authoritative in-process file set for the open project."""

from __future__ import annotations

import logging
from typing import Callable, Mapping

from .errors import DuplicatePath, PathNotFound
from .files import ProjectFiles, default_files, normalize, resolve_rename, validate_path

_LOGGER = logging.getLogger(__name__)

Listener = Callable[[], None]


class FileStore:
    """Holds the normalized file set of the single open project.

    Every mutator validates first and only then applies the change, so a
    failed call leaves the held set exactly as it was. The set is
    re-normalized after each successful mutation.
    """

    def __init__(self, files: Mapping[str, str] | None = None) -> None:
        self._files: ProjectFiles = normalize(files) if files else default_files()
        self._mutation_listeners: list[Listener] = []
        self._load_listeners: list[Listener] = []

    def on_mutation(self, listener: Listener) -> None:
        """Register ``listener`` to run after every successful mutation."""

        self._mutation_listeners.append(listener)

    def on_load(self, listener: Listener) -> None:
        """Register ``listener`` to run whenever a new file set is loaded."""

        self._load_listeners.append(listener)

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def get(self, path: str) -> str:
        try:
            return self._files[path]
        except KeyError:
            raise PathNotFound(f"No such file: {path}") from None

    def paths(self) -> list[str]:
        return list(self._files)

    def snapshot(self) -> ProjectFiles:
        """Return a copy of the held file set."""

        return dict(self._files)

    def load(self, raw: Mapping[str, str] | None) -> None:
        """Replace the held set with the normalized form of ``raw``."""

        self._files = normalize(raw)
        _LOGGER.debug("Loaded %d files", len(self._files))
        for listener in self._load_listeners:
            listener()

    def add(self, path: str, content: str = "") -> None:
        validate_path(path)
        if path in self._files:
            raise DuplicatePath(f"File already exists: {path}")
        files = dict(self._files)
        files[path] = content
        self._commit(files)

    def write(self, path: str, content: str) -> None:
        """Replace the content of an existing file."""

        if path not in self._files:
            raise PathNotFound(f"No such file: {path}")
        if self._files[path] == content:
            return
        files = dict(self._files)
        files[path] = content
        self._commit(files)

    def delete(self, path: str) -> None:
        if path not in self._files:
            raise PathNotFound(f"No such file: {path}")
        files = dict(self._files)
        del files[path]
        self._commit(files)

    def rename(self, old_path: str, new_path: str) -> str:
        """Move ``old_path`` to ``new_path`` and return the resolved target.

        ``new_path`` may be a bare file name, which keeps the file in its
        current directory, or an absolute path.
        """

        if old_path not in self._files:
            raise PathNotFound(f"No such file: {old_path}")
        target = resolve_rename(old_path, new_path)
        if target == old_path:
            return target
        if target in self._files:
            raise DuplicatePath(f"File already exists: {target}")
        files = {
            (target if path == old_path else path): content
            for path, content in self._files.items()
        }
        self._commit(files)
        return target

    def _commit(self, files: ProjectFiles) -> None:
        self._files = normalize(files)
        for listener in self._mutation_listeners:
            listener()


__all__ = ["FileStore"]
