"""HTTP client for the remote Cipher Studio project store."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from .errors import NotFound, TransportError
from .files import ProjectFiles, normalize
from .records import ProjectRecord, ProjectSummary

_LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3001"


def api_base(url: str) -> str:
    """Return ``url`` without trailing slashes and ending in ``/api``."""

    root = url.rstrip("/")
    return root if root.endswith("/api") else f"{root}/api"


def files_to_pairs(files: Mapping[str, str]) -> list[dict[str, str]]:
    """Convert a file mapping into the ordered wire form."""

    return [{"path": path, "content": content} for path, content in files.items()]


def pairs_to_files(payload: Any) -> ProjectFiles:
    """Convert wire or stored ``files`` into a mapping.

    Both the pair-list form and a plain mapping are accepted; pairs may carry
    their text under ``content`` or the older ``code`` key.
    """

    if payload is None:
        return {}
    if isinstance(payload, Mapping):
        return {str(path): content for path, content in payload.items()}
    files: ProjectFiles = {}
    for entry in payload:
        if not isinstance(entry, Mapping) or not isinstance(entry.get("path"), str):
            _LOGGER.warning("Skipping malformed file entry %r", entry)
            continue
        content = entry.get("content", entry.get("code"))
        files[entry["path"]] = "" if content is None else content
    return files


class ApiClient:
    """Maps project records to and from the remote CRUD API.

    Calls are plain request/response without retries; failures surface as
    :class:`~cipher_cli.errors.NotFound` or
    :class:`~cipher_cli.errors.TransportError`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = api_base(base_url or DEFAULT_API_URL)
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(
        self, method: str, path: str, payload: Mapping[str, Any] | None = None
    ) -> Any:
        url = f"{self.base_url}{path}"
        _LOGGER.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method, url, json=payload, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFound(f"Remote project not found: {path}")
        if response.status_code >= 400:
            _LOGGER.error(
                "API returned error %s: %s", response.status_code, response.text
            )
            raise TransportError(
                f"API returned error {response.status_code}: {response.text}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError("API response was not valid JSON") from exc

    def list_projects(self) -> list[ProjectSummary]:
        """Return id and name of every remote project; content is not fetched."""

        data = self._request("GET", "/projects")
        if not isinstance(data, list):
            raise TransportError("Expected a list of projects")
        return [
            ProjectSummary(
                id=str(item.get("id") or item.get("_id")),
                name=item.get("name") or item.get("projectName") or "Untitled",
            )
            for item in data
            if isinstance(item, Mapping)
        ]

    def create_project(self, name: str, files: Mapping[str, str]) -> str:
        data = self._request(
            "POST", "/projects", {"name": name, "files": files_to_pairs(files)}
        )
        project_id = data.get("id") if isinstance(data, Mapping) else None
        if not project_id:
            raise TransportError("API did not return a project id")
        _LOGGER.info("Created remote project %s", project_id)
        return str(project_id)

    def fetch_project(self, project_id: str) -> ProjectRecord:
        data = self._request("GET", f"/projects/{project_id}")
        if not isinstance(data, Mapping):
            raise TransportError("Expected a project object")
        remote_id = str(data.get("id") or project_id)
        return ProjectRecord(
            id=remote_id,
            name=data.get("name") or data.get("projectName") or "",
            files=normalize(pairs_to_files(data.get("files"))),
            remote_id=remote_id,
        )

    def update_project(
        self,
        project_id: str,
        *,
        name: str | None = None,
        files: Mapping[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {}
        if name is not None:
            payload["name"] = name
        if files is not None:
            payload["files"] = files_to_pairs(files)
        self._request("PUT", f"/projects/{project_id}", payload)
        _LOGGER.info("Updated remote project %s", project_id)

    def delete_project(self, project_id: str) -> None:
        self._request("DELETE", f"/projects/{project_id}")
        _LOGGER.info("Deleted remote project %s", project_id)


__all__ = [
    "ApiClient",
    "api_base",
    "files_to_pairs",
    "pairs_to_files",
]
