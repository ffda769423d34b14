"""Canonical layout rules for a project's virtual file set.

A project is a flat mapping of absolute paths to source text. Only two
top-level directories are permitted (``/public`` for the HTML entry document
and ``/src`` for everything else) and four canonical files must always be
present. :func:`normalize` enforces this layout and migrates legacy
root-level names into their canonical location.
"""

from __future__ import annotations

from typing import Any, Mapping

from .errors import InvalidPath

ProjectFiles = dict[str, str]

INDEX_HTML = "/public/index.html"
APP_JS = "/src/App.js"
INDEX_JS = "/src/index.js"
INDEX_CSS = "/src/index.css"

PERMITTED_PREFIXES: tuple[str, ...] = ("/public/", "/src/")
DEFAULT_DIRECTORY = "/src"

DEFAULT_INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>CipherStudio</title>
  </head>
  <body>
    <div id="root"></div>
  </body>
</html>"""

DEFAULT_APP_JS = """
export default function App() {
  return (
    <div style={{
      position: "absolute",
      inset: 0,
      display: "flex",
      alignItems: "center",
      justifyContent: "center",
      flexDirection: "column",
      fontFamily: "Segoe UI, Roboto, sans-serif",
      textAlign: "center",
      backgroundColor: "#ffffff",
      color: "#111111"
    }}>
      <h1>Hello from CipherStudio!</h1>
    </div>
  );
}
"""

DEFAULT_INDEX_JS = """
import React from "react";
import { createRoot } from "react-dom/client";
import App from "./App";
import "./index.css";
const root = createRoot(document.getElementById("root"));
root.render(<App />);
"""

DEFAULT_INDEX_CSS = """
html, body, #root { height: 100%; margin: 0; }
body { background: #ffffff; color: #111111; }
"""

# Order matters: it is also the display order of the canonical files.
CANONICAL_FILES: tuple[tuple[str, str], ...] = (
    (INDEX_HTML, DEFAULT_INDEX_HTML),
    (APP_JS, DEFAULT_APP_JS),
    (INDEX_JS, DEFAULT_INDEX_JS),
    (INDEX_CSS, DEFAULT_INDEX_CSS),
)
CANONICAL_PATHS: tuple[str, ...] = tuple(path for path, _ in CANONICAL_FILES)

PROMOTIONS: tuple[tuple[str, str], ...] = (
    ("/App.js", APP_JS),
    ("/index.js", INDEX_JS),
    ("/index.css", INDEX_CSS),
    ("/index.html", INDEX_HTML),
)

MIGRATIONS: tuple[tuple[str, str], ...] = (("/styles.css", INDEX_CSS),)

EXCLUDED_PATHS: frozenset[str] = frozenset({"/package.json"})

ENTRY_POINT = INDEX_JS
DEPENDENCIES: dict[str, str] = {"react": "18.2.0", "react-dom": "18.2.0"}


def default_files() -> ProjectFiles:
    """Return the four-file skeleton of a fresh project."""

    return dict(CANONICAL_FILES)


def _apply_rules(
    files: ProjectFiles, rules: tuple[tuple[str, str], ...]
) -> None:
    for legacy, canonical in rules:
        if legacy not in files:
            continue
        if canonical not in files:
            files[canonical] = files[legacy]
        del files[legacy]


def is_permitted(path: str) -> bool:
    """Return ``True`` when ``path`` lies under a permitted top-level directory."""

    return path.startswith(PERMITTED_PREFIXES) and not path.endswith("/")


def normalize(raw: Mapping[Any, Any] | None) -> ProjectFiles:
    """Return the canonical form of ``raw``.

    Legacy root-level files are promoted into ``/public`` or ``/src`` unless
    the canonical file already exists; the first applicable rule wins and
    legacy keys never survive. Missing canonical files are backfilled with
    default content and anything outside the permitted directories is
    dropped. The function never fails and is idempotent.
    """

    files: ProjectFiles = {}
    for path, content in (raw or {}).items():
        if not isinstance(path, str):
            continue
        files[path] = "" if content is None else str(content)

    _apply_rules(files, PROMOTIONS)
    _apply_rules(files, MIGRATIONS)

    for path in EXCLUDED_PATHS:
        files.pop(path, None)

    for path, content in CANONICAL_FILES:
        files.setdefault(path, content)

    return {path: content for path, content in files.items() if is_permitted(path)}


def display_order(files: Mapping[str, str]) -> list[str]:
    """Return paths with the canonical files first, the rest alphabetically."""

    weights = {path: index for index, path in enumerate(CANONICAL_PATHS)}
    return sorted(files, key=lambda path: (weights.get(path, len(weights)), path))


def validate_path(path: str) -> str:
    """Ensure ``path`` is a well-formed file path inside a permitted directory."""

    if not path or not path.startswith("/"):
        raise InvalidPath(f"Path must be absolute: {path!r}")
    segments = path[1:].split("/")
    if any(segment in {"", ".", ".."} for segment in segments):
        raise InvalidPath(f"Path contains an empty or relative segment: {path!r}")
    if not is_permitted(path):
        raise InvalidPath(
            f"Path must live under {' or '.join(PERMITTED_PREFIXES)}: {path!r}"
        )
    return path


def _dirname(path: str) -> str:
    return path[: path.rfind("/")]


def _resolve(name: str, directory: str) -> str:
    candidate = name.strip()
    if not candidate:
        raise InvalidPath("File name cannot be empty")
    if candidate.startswith("/"):
        return validate_path(candidate)
    if "/" in candidate:
        raise InvalidPath(
            f"Use a bare file name or an absolute path, not {candidate!r}"
        )
    return validate_path(f"{directory}/{candidate}")


def resolve_new_path(name: str) -> str:
    """Resolve user input for a new file; bare names go into ``/src``."""

    return _resolve(name, DEFAULT_DIRECTORY)


def resolve_rename(old_path: str, name: str) -> str:
    """Resolve a rename target; bare names stay in the directory of ``old_path``."""

    return _resolve(name, _dirname(old_path))


__all__ = [
    "APP_JS",
    "CANONICAL_FILES",
    "CANONICAL_PATHS",
    "DEPENDENCIES",
    "ENTRY_POINT",
    "EXCLUDED_PATHS",
    "INDEX_CSS",
    "INDEX_HTML",
    "INDEX_JS",
    "MIGRATIONS",
    "PERMITTED_PREFIXES",
    "PROMOTIONS",
    "ProjectFiles",
    "default_files",
    "display_order",
    "is_permitted",
    "normalize",
    "resolve_new_path",
    "resolve_rename",
    "validate_path",
]
