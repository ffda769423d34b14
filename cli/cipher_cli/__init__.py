"""Project file model and synchronization engine for Cipher Studio."""

from .bridge import EditingSurface, SnapshotBridge
from .cli import main
from .client import ApiClient
from .config import Settings, get_settings, load_manifest
from .files import normalize
from .local import JsonFileStorage, LocalPersistenceAdapter, MemoryStorage
from .records import ProjectRecord
from .session import StudioSession
from .store import FileStore

__all__ = [
    "ApiClient",
    "EditingSurface",
    "FileStore",
    "JsonFileStorage",
    "LocalPersistenceAdapter",
    "MemoryStorage",
    "ProjectRecord",
    "Settings",
    "SnapshotBridge",
    "StudioSession",
    "get_settings",
    "load_manifest",
    "main",
    "normalize",
]
