"""Version control access for semcommit.

Two interchangeable backends implement :class:`Repository`:
:class:`GitRepository` runs the ``git`` executable and
:class:`GitPythonRepository` uses GitPython.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from semcommit.vcs.base import Commit, Repository, RevWalkOptions, WalkItem
from semcommit.vcs.git import GitRepository
from semcommit.vcs.gitpython import GitPythonRepository
from semcommit.vcs.releases import ReleaseIndex, VersionAndTag, find_last_version
from semcommit.vcs.walk import walk

if TYPE_CHECKING:
    from pathlib import Path

Backend = Literal["git", "gitpython"]


def open_repository(path: Path | str | None = None, backend: Backend = "git") -> Repository:
    """Open the repository containing ``path`` with the chosen backend.

    Raises:
        RepositoryNotFoundError: If ``path`` is not inside a git repository
        ValueError: If ``backend`` is unknown
    """
    if backend == "git":
        return GitRepository(path)
    if backend == "gitpython":
        return GitPythonRepository(path)
    raise ValueError(f"Unknown git backend: {backend!r}")


__all__ = [
    "Backend",
    "Commit",
    "GitPythonRepository",
    "GitRepository",
    "ReleaseIndex",
    "Repository",
    "RevWalkOptions",
    "VersionAndTag",
    "WalkItem",
    "find_last_version",
    "open_repository",
    "walk",
]
