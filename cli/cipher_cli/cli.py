"""CLI entry point for the ``cipher`` command."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import get_settings, load_manifest
from .errors import NotFound, StudioError, TransportError
from .files import display_order, resolve_new_path
from .records import ProjectRecord, ProjectSummary, make_project_id
from .session import StudioSession

_LOGGER = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cipher Studio project tool")
    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new", help="Create an empty local project")
    new_parser.add_argument("--name", default=None, help="Display name")

    import_parser = subparsers.add_parser(
        "import", help="Save a YAML or JSON project manifest locally"
    )
    import_parser.add_argument("manifest", type=Path, help="Path to the manifest")

    show_parser = subparsers.add_parser("show", help="List files or print one file")
    show_parser.add_argument("project_id")
    show_parser.add_argument("--path", default=None, help="File to print")

    list_parser = subparsers.add_parser("list", help="List stored projects")
    list_parser.add_argument(
        "--remote", action="store_true", help="List the remote store instead"
    )

    add_parser = subparsers.add_parser("add", help="Add a file to a local project")
    add_parser.add_argument("project_id")
    add_parser.add_argument("path", help="Bare file name or absolute path")
    add_parser.add_argument("--content", default="// new file")

    rm_parser = subparsers.add_parser("rm", help="Delete a file from a local project")
    rm_parser.add_argument("project_id")
    rm_parser.add_argument("path")

    mv_parser = subparsers.add_parser("mv", help="Rename a file in a local project")
    mv_parser.add_argument("project_id")
    mv_parser.add_argument("old_path")
    mv_parser.add_argument("new_path", help="Bare file name or absolute path")

    push_parser = subparsers.add_parser("push", help="Save a local project remotely")
    push_parser.add_argument("project_id")

    pull_parser = subparsers.add_parser("pull", help="Copy a remote project locally")
    pull_parser.add_argument("remote_id")

    delete_parser = subparsers.add_parser("delete", help="Delete a stored project")
    delete_parser.add_argument("project_id")
    delete_parser.add_argument(
        "--remote", action="store_true", help="Delete from the remote store instead"
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)",
    )

    parser.add_argument(
        "--api-url",
        dest="api_url",
        default=None,
        help="Override the API base URL",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure root logger for console output."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(name)s - %(message)s",
    )


def _print_summaries(summaries: list[ProjectSummary]) -> None:
    for summary in summaries:
        print(f"{summary.id}  {summary.name}")


def handle_import(session: StudioSession, manifest_path: Path) -> int:
    """Handle ``cipher import`` commands."""

    _LOGGER.debug("Loading manifest from %s", manifest_path)
    try:
        manifest = load_manifest(manifest_path)
    except (FileNotFoundError, ValueError) as exc:
        _LOGGER.error("Failed to load manifest: %s", exc)
        return 1

    record = ProjectRecord(
        id=manifest.id or make_project_id(), name=manifest.name, files=manifest.files
    )
    session.open_record(record)
    stored = session.save_local()
    print(stored.id)
    return 0


def handle_show(session: StudioSession, project_id: str, path: str | None) -> int:
    """Handle ``cipher show`` commands."""

    record = session.open_local(project_id)
    if path is None:
        print(f"{record.id}  {record.name}")
        for file_path in display_order(record.files):
            print(f"  {file_path}")
        return 0
    sys.stdout.write(session.store.get(path))
    return 0


def handle_file_op(session: StudioSession, args: argparse.Namespace) -> int:
    """Handle ``cipher add``, ``rm`` and ``mv`` against a local project."""

    session.open_local(args.project_id)
    if args.command == "add":
        path = resolve_new_path(args.path)
        session.store.add(path, args.content)
        _LOGGER.info("Added %s", path)
    elif args.command == "rm":
        session.store.delete(args.path)
        _LOGGER.info("Deleted %s", args.path)
    else:
        target = session.store.rename(args.old_path, args.new_path)
        _LOGGER.info("Renamed %s to %s", args.old_path, target)
    session.save_local()
    return 0


async def handle_push(session: StudioSession, project_id: str) -> int:
    """Handle ``cipher push`` commands."""

    session.open_local(project_id)
    remote_id = await session.save_remote()
    if remote_id is None:
        _LOGGER.error("Remote save was superseded")
        return 2
    session.save_local()
    _LOGGER.info("Project %s saved remotely as %s", session.project_id, remote_id)
    print(remote_id)
    return 0


async def handle_pull(session: StudioSession, remote_id: str) -> int:
    """Handle ``cipher pull`` commands."""

    record = await session.open_remote(remote_id)
    if record is None:
        return 2
    stored = session.save_local()
    print(stored.id)
    return 0


async def _dispatch(session: StudioSession, args: argparse.Namespace) -> int:
    command = args.command
    if command == "new":
        session.new_project(args.name)
        print(session.save_local().id)
        return 0
    if command == "import":
        return handle_import(session, args.manifest)
    if command == "show":
        return handle_show(session, args.project_id, args.path)
    if command == "list":
        if args.remote:
            _print_summaries(await session.list_remote())
        else:
            _print_summaries(session.list_local())
        return 0
    if command in {"add", "rm", "mv"}:
        return handle_file_op(session, args)
    if command == "push":
        return await handle_push(session, args.project_id)
    if command == "pull":
        return await handle_pull(session, args.remote_id)
    if command == "delete":
        if args.remote:
            await session.delete_remote(args.project_id)
        else:
            session.delete_local(args.project_id)
        return 0
    return 1


def main(argv: list[str] | None = None, session: StudioSession | None = None) -> int:
    """Entry point for the ``cipher`` CLI."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)
    _LOGGER.debug("CLI arguments: %s", args)

    if session is None:
        if args.api_url:
            settings = settings.model_copy(update={"api_url": args.api_url})
        session = StudioSession.from_settings(settings, autosave_enabled=False)

    try:
        return asyncio.run(_dispatch(session, args))
    except NotFound as exc:
        _LOGGER.error("%s", exc)
        return 1
    except TransportError as exc:
        _LOGGER.error("Remote request failed: %s", exc)
        return 2
    except (StudioError, ValueError) as exc:
        _LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
