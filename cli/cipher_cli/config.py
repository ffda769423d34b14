"""Settings and project manifest loading for the Cipher Studio client."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from .client import pairs_to_files
from .files import ProjectFiles, normalize
from .records import DEFAULT_PROJECT_NAME


class Settings(BaseSettings):
    """Runtime configuration for the client engine."""

    model_config = SettingsConfigDict(
        env_prefix="CIPHER_", env_file=".env", extra="ignore"
    )

    api_url: str = "http://localhost:3001"
    storage_path: Path = Path("~/.cipherstudio/storage.json")
    autosave_enabled: bool = True
    autosave_delay: float = 1.0
    request_timeout: float = 30.0
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of :class:`Settings`."""

    return Settings()


@dataclass(slots=True)
class ProjectManifest:
    """A project described in a YAML or JSON file."""

    name: str = DEFAULT_PROJECT_NAME
    files: ProjectFiles = field(default_factory=dict)
    id: str | None = None


def load_manifest(manifest_path: str | Path) -> ProjectManifest:
    """Load a project manifest in JSON or YAML format.

    The manifest is a mapping with an optional ``name`` (or ``projectName``),
    an optional ``id`` and ``files`` given either as a mapping of path to
    content or as a list of ``{path, content}`` entries. File content may
    also be read from disk with ``{path, source}`` where ``source`` is
    relative to the manifest.

    Args:
        manifest_path: Path to the manifest file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be parsed or is not a mapping.

    Returns:
        ProjectManifest: The parsed manifest with normalized files.
    """

    path = Path(manifest_path)
    if not path.exists():
        raise FileNotFoundError(f"Manifest file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem errors are rare
        raise ValueError(f"Failed to read manifest file: {path}") from exc

    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported manifest format; expected JSON or YAML: {path}")

    if not isinstance(data, Mapping):
        raise ValueError("Manifest must be a mapping of keys to values")

    name = data.get("name") or data.get("projectName") or DEFAULT_PROJECT_NAME
    if not isinstance(name, str):
        raise ValueError("Manifest name must be a string")
    project_id = data.get("id")

    return ProjectManifest(
        name=name,
        files=normalize(_read_sources(data.get("files"), path.parent)),
        id=str(project_id) if project_id else None,
    )


def _read_sources(files: Any, base_dir: Path) -> ProjectFiles:
    if isinstance(files, list):
        resolved = []
        for entry in files:
            if isinstance(entry, Mapping) and "source" in entry:
                source = (base_dir / str(entry["source"])).expanduser()
                entry = {
                    "path": entry.get("path"),
                    "content": source.read_text(encoding="utf-8"),
                }
            resolved.append(entry)
        files = resolved
    elif files is not None and not isinstance(files, Mapping):
        raise ValueError("Manifest files must be a mapping or a list of entries")
    return pairs_to_files(files)


__all__ = ["ProjectManifest", "Settings", "get_settings", "load_manifest"]
