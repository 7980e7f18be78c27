"""Git backend built on GitPython."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import git
from git.exc import BadName, BadObject, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from semcommit.exceptions import GitError, RepositoryNotFoundError, RevisionNotFoundError
from semcommit.vcs.base import Commit

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

logger = logging.getLogger(__name__)


def _to_commit(commit: git.Commit) -> Commit:
    message = commit.message
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    return Commit(
        sha=commit.hexsha,
        message=message,
        author_name=commit.author.name or "",
        author_email=commit.author.email or "",
        date=commit.committed_datetime,
        parents=tuple(parent.hexsha for parent in commit.parents),
    )


class GitPythonRepository:
    """A git repository accessed through GitPython.

    Args:
        path: Any directory inside the working tree

    Raises:
        RepositoryNotFoundError: If ``path`` is not inside a git repository
    """

    def __init__(self, path: Path | str | None = None) -> None:
        start = Path(path) if path is not None else Path.cwd()
        try:
            self._repo = git.Repo(start, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryNotFoundError(f"Not a git repository: {start}") from e
        self.path = Path(self._repo.working_tree_dir or self._repo.git_dir)

    def _commit(self, spec: str) -> git.Commit:
        try:
            return self._repo.commit(spec)
        except (BadName, BadObject, ValueError) as e:
            raise RevisionNotFoundError(spec) from e

    def revparse_single(self, spec: str) -> Commit:
        return _to_commit(self._commit(spec))

    def iter_commits(
        self,
        start: str,
        hide: Iterable[str] = (),
        first_parent: bool = False,
    ) -> Iterator[Commit]:
        revisions = [start, *(f"^{sha}" for sha in hide)]
        try:
            for commit in self._repo.iter_commits(revisions, first_parent=first_parent):
                yield _to_commit(commit)
        except GitCommandError as e:
            raise GitError("git rev-list failed", str(e.stderr)) from e

    def commit_touches_paths(self, commit: Commit, paths: Sequence[str]) -> bool:
        current = self._commit(commit.sha)
        try:
            if not current.parents:
                return len(current.diff(git.NULL_TREE, paths=list(paths))) > 0
            return any(
                len(parent.diff(current, paths=list(paths))) > 0 for parent in current.parents
            )
        except GitCommandError as e:
            raise GitError("git diff failed", str(e.stderr)) from e

    def tag_targets(self, pattern: str) -> list[tuple[str, str]]:
        targets = []
        for tag in self._repo.tags:
            if not fnmatch.fnmatchcase(tag.name, pattern):
                continue
            try:
                targets.append((tag.name, tag.commit.hexsha))
            except ValueError:
                logger.debug("Skipping tag %s, it does not point to a commit", tag.name)
        return targets

    def remote_url(self, name: str = "origin") -> str | None:
        try:
            remote = self._repo.remote(name)
        except ValueError:
            return None
        return next(iter(remote.urls), None)
