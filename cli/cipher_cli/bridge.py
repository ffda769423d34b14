"""Reconciliation between the file store and the live editing surface."""

from __future__ import annotations

import logging
from typing import Mapping, Protocol, runtime_checkable

from .files import ProjectFiles, normalize
from .store import FileStore

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class EditingSurface(Protocol):
    """The editor/preview the project is rendered in.

    The surface may hold keystrokes the file store has not seen yet, so
    :meth:`current_files` must report the freshest per-path content.
    Returning ``None`` means no live content is available.
    """

    def current_files(self) -> Mapping[str, str] | None: ...


class SnapshotBridge:
    """Pull the freshest content from the editing surface before persisting."""

    def __init__(self, store: FileStore, surface: EditingSurface | None = None) -> None:
        self.store = store
        self.surface = surface

    def attach(self, surface: EditingSurface | None) -> None:
        self.surface = surface

    def reconcile(self) -> ProjectFiles:
        """Return the normalized file set to persist.

        File existence comes from the store and content from the surface
        whenever it reports the path. The store is not modified.
        """

        files = self.store.snapshot()
        live = self.surface.current_files() if self.surface is not None else None
        if live is None:
            return normalize(files)

        updated = 0
        for path in files:
            if path in live and live[path] != files[path]:
                files[path] = live[path]
                updated += 1
        if updated:
            _LOGGER.debug("Reconciled %d file(s) from the editing surface", updated)
        return normalize(files)


__all__ = ["EditingSurface", "SnapshotBridge"]
