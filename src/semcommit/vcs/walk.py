"""History traversal.

A walk is a chain of generator stages over the repository's commit
producer::

    iter_commits -> drop merges -> keep path changes -> drop reverts -> parse

Each stage is a plain function from an iterator of commits to an iterator,
so nothing is read from git before the consumer asks for the next item.
Parse failures do not end a walk: the commit is yielded together with the
error and the caller decides what to do with it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from semcommit.core.commits import is_revert
from semcommit.exceptions import CommitParseError
from semcommit.vcs.base import WalkItem

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from semcommit.core.commits import CommitParser, ConventionalCommit
    from semcommit.vcs.base import Commit, Repository, RevWalkOptions


def drop_merge_commits(commits: Iterable[Commit]) -> Iterator[Commit]:
    return (commit for commit in commits if not commit.is_merge)


def keep_path_changes(
    repo: Repository,
    commits: Iterable[Commit],
    paths: Sequence[str],
) -> Iterator[Commit]:
    if not paths:
        yield from commits
        return
    for commit in commits:
        if repo.commit_touches_paths(commit, paths):
            yield commit


def drop_revert_commits(commits: Iterable[Commit]) -> Iterator[Commit]:
    return (commit for commit in commits if not is_revert(commit.message))


def parse_commits(commits: Iterable[Commit], parser: CommitParser) -> Iterator[WalkItem]:
    for commit in commits:
        try:
            yield WalkItem(commit=commit, conventional=parser.parse(commit.message))
        except CommitParseError as e:
            yield WalkItem(commit=commit, error=e)


def walk(repo: Repository, options: RevWalkOptions) -> Iterator[WalkItem]:
    """Walk the history described by ``options``.

    Args:
        repo: Repository to read from
        options: Start, boundaries and filters of the walk

    Returns:
        Lazy iterator of walked commits in native git order

    Raises:
        GitError: If the repository cannot be queried
    """
    commits: Iterator[Commit] = repo.iter_commits(
        options.to_rev.sha,
        hide=[commit.sha for commit in options.from_rev],
        first_parent=options.first_parent,
    )
    if options.no_merge_commits:
        commits = drop_merge_commits(commits)
    commits = keep_path_changes(repo, commits, options.paths)
    if options.no_revert_commits:
        commits = drop_revert_commits(commits)
    return parse_commits(commits, options.parser)


def conventional_commits(
    items: Iterable[WalkItem],
) -> Iterator[tuple[Commit, ConventionalCommit]]:
    """Yield ``(commit, conventional commit)`` pairs, skipping parse failures."""
    for item in items:
        if item.conventional is not None:
            yield item.commit, item.conventional
