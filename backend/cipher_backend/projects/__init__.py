"""Project storage helpers for the project store service."""

from .service import ProjectNotFound, ProjectService, stored_pairs, to_pairs

__all__ = ["ProjectNotFound", "ProjectService", "stored_pairs", "to_pairs"]
