"""Read-only repository interface shared by all git backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from datetime import datetime
    from pathlib import Path

    from semcommit.core.commits import CommitParser, ConventionalCommit
    from semcommit.exceptions import CommitParseError


@dataclass(frozen=True)
class Commit:
    """A commit as returned by a repository backend.

    Attributes:
        sha: Full object id
        message: Raw commit message
        author_name: Author name
        author_email: Author email
        date: Commit timestamp, timezone aware
        parents: Object ids of the parents, first parent first
    """

    sha: str
    message: str
    author_name: str
    author_email: str
    date: datetime
    parents: tuple[str, ...] = ()

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0]

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def is_root(self) -> bool:
        return not self.parents


@runtime_checkable
class Repository(Protocol):
    """What the traversal engine and the release resolver need from git."""

    path: Path

    def revparse_single(self, spec: str) -> Commit:
        """Resolve a single revision expression (no ranges) to a commit.

        Raises:
            RevisionNotFoundError: If ``spec`` does not name a commit
        """
        ...

    def iter_commits(
        self,
        start: str,
        hide: Iterable[str] = (),
        first_parent: bool = False,
    ) -> Iterator[Commit]:
        """Yield ``start`` and its ancestors in native git order.

        Commits in ``hide`` and all of their ancestors are left out.
        """
        ...

    def commit_touches_paths(self, commit: Commit, paths: Sequence[str]) -> bool:
        """True if the tree of ``commit`` differs from any parent's under ``paths``.

        Root commits are compared with the empty tree.
        """
        ...

    def tag_targets(self, pattern: str) -> list[tuple[str, str]]:
        """Return ``(tag name, commit sha)`` for tags matching a glob.

        Annotated tags are peeled to the commit they point to.
        """
        ...

    def remote_url(self, name: str = "origin") -> str | None:
        """Return the URL of a remote, or ``None`` if it does not exist."""
        ...


@dataclass(frozen=True)
class RevWalkOptions:
    """Options for a history walk.

    Attributes:
        to_rev: Commit the walk starts from
        from_rev: Boundary commits; they and their ancestors are hidden
        first_parent: Only follow first parents
        no_merge_commits: Drop commits with more than one parent
        no_revert_commits: Drop commits created by ``git revert``
        paths: Only keep commits changing one of these paths (all if empty)
        parser: Parser used for the surviving commits
    """

    to_rev: Commit
    parser: CommitParser
    from_rev: tuple[Commit, ...] = ()
    first_parent: bool = False
    no_merge_commits: bool = True
    no_revert_commits: bool = False
    paths: tuple[str, ...] = field(default=())


@dataclass(frozen=True)
class WalkItem:
    """One walked commit with its parse outcome.

    Exactly one of ``conventional`` and ``error`` is set.
    """

    commit: Commit
    conventional: ConventionalCommit | None = None
    error: CommitParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
