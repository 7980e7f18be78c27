"""Validate commit messages in a revision or range."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import islice
from typing import TYPE_CHECKING

from semcommit.core.commits import CommitParser
from semcommit.exceptions import InvalidTypeError
from semcommit.vcs.base import RevWalkOptions
from semcommit.vcs.walk import walk

if TYPE_CHECKING:
    from collections.abc import Sequence

    from semcommit.config.models import SemcommitConfig
    from semcommit.exceptions import CommitParseError
    from semcommit.vcs.base import Commit, Repository

logger = logging.getLogger(__name__)

SUMMARY_LENGTH = 40


@dataclass(frozen=True)
class CheckFailure:
    short_id: str
    reason: str
    summary: str

    def __str__(self) -> str:
        return f"FAIL  {self.short_id}  {self.reason}  {self.summary}"


@dataclass(frozen=True)
class CheckReport:
    """Result of a check run."""

    total: int = 0
    failures: list[CheckFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        if self.failures:
            return f"{len(self.failures)}/{self.total} failed"
        if self.total == 0:
            return "no commits checked"
        if self.total == 1:
            return "no errors in 1 commit"
        return f"no errors in {self.total} commits"


def summarize(message: str) -> str:
    """First line of ``message``, cut to 40 characters."""
    first_line = message.split("\n", 1)[0]
    if len(first_line) > SUMMARY_LENGTH:
        return first_line[:SUMMARY_LENGTH] + "..."
    return first_line


def split_range(rev: str) -> tuple[str | None, str]:
    """Split ``A..B`` into ``(A, B)``; a plain revision has no lower bound.

    An empty side means ``HEAD``, as in git.

    >>> split_range("v1.0.0..main")
    ('v1.0.0', 'main')
    >>> split_range("HEAD")
    (None, 'HEAD')
    """
    if ".." not in rev:
        return None, rev
    lower, upper = rev.split("..", 1)
    return lower or "HEAD", upper or "HEAD"


def check_commits(
    repo: Repository,
    config: SemcommitConfig,
    rev: str = "HEAD",
    *,
    max_count: int | None = None,
    paths: Sequence[str] | None = None,
) -> CheckReport:
    """Check the commits of ``rev`` against the conventional commit grammar.

    Args:
        repo: Repository to read
        config: Configuration (scope pattern, allowed types, walk filters)
        rev: A revision or a ``<from>..<to>`` range
        max_count: Check at most this many commits
        paths: Only check commits touching these paths; defaults to the
            configured paths

    Returns:
        The number of checked commits and the failures

    Raises:
        GitError: If the repository cannot be queried
    """
    commits_config = config.commits
    lower, upper = split_range(rev)
    hide: tuple[Commit, ...] = ()
    if lower is not None:
        hide = (repo.revparse_single(lower),)

    options = RevWalkOptions(
        to_rev=repo.revparse_single(upper),
        from_rev=hide,
        parser=CommitParser.from_config(commits_config),
        first_parent=commits_config.first_parent,
        no_merge_commits=not commits_config.merges,
        no_revert_commits=commits_config.ignore_reverts,
        paths=tuple(paths if paths is not None else commits_config.paths),
    )

    allowed = set(commits_config.type_names)
    total = 0
    failures: list[CheckFailure] = []
    for item in islice(walk(repo, options), max_count):
        total += 1
        error: CommitParseError | None = item.error
        if item.conventional is not None and item.conventional.type not in allowed:
            error = InvalidTypeError(item.conventional.type)
        if error is None:
            continue
        logger.debug("%s failed: %s", item.commit.short_sha, error)
        summary = summarize(item.commit.message)
        failures.append(CheckFailure(item.commit.short_sha, str(error), summary))

    return CheckReport(total=total, failures=failures)
