"""Error taxonomy shared by the Cipher Studio client components."""

from __future__ import annotations


class StudioError(Exception):
    """Base class for all errors raised by the client engine."""


class InvalidPath(StudioError, ValueError):
    """Raised when a path supplied to add/rename is malformed."""


class DuplicatePath(StudioError):
    """Raised when an add or rename would collide with an existing path."""


class PathNotFound(StudioError, KeyError):
    """Raised when a mutation targets a path that does not exist."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0]) if self.args else ""


class NotFound(StudioError):
    """Raised when a project id is unknown to the local or remote tier."""


class TransportError(StudioError, RuntimeError):
    """Raised when a remote call fails at the network or HTTP layer."""


class StaleResponse(StudioError):
    """Raised when a remote response belongs to a project that is no longer open."""


ApiError = TransportError


__all__ = [
    "ApiError",
    "DuplicatePath",
    "InvalidPath",
    "NotFound",
    "PathNotFound",
    "StaleResponse",
    "StudioError",
    "TransportError",
]
