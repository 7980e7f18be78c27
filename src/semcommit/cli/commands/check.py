"""Implementation of the 'check' command.

The check command validates commit messages against the conventional
commit grammar and the configured commit types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from semcommit.cli.commands.common import open_project
from semcommit.core.check import check_commits
from semcommit.exceptions import GitError

if TYPE_CHECKING:
    from rich.console import Console

    from semcommit.cli.commands.common import CliState


def run_check(
    state: CliState,
    rev: str,
    max_count: int | None,
    merges: bool,
    first_parent: bool,
    ignore_reverts: bool,
    paths: list[str] | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the check command.

    Args:
        state: Global CLI options
        rev: Revision or ``<from>..<to>`` range to check
        max_count: Check at most this many commits
        merges: Also check merge commits
        first_parent: Only follow first parents
        ignore_reverts: Skip commits created by ``git revert``
        paths: Only check commits touching these paths
        console: Console for standard output
        err_console: Console for error output

    Raises:
        SystemExit: If a commit fails the check or git cannot be queried
    """
    config, repo = open_project(state, err_console)

    # Flags only switch filters on
    commits = config.commits.model_copy(
        update={
            "merges": merges or config.commits.merges,
            "first_parent": first_parent or config.commits.first_parent,
            "ignore_reverts": ignore_reverts or config.commits.ignore_reverts,
        }
    )
    config = config.model_copy(update={"commits": commits})

    try:
        report = check_commits(repo, config, rev, max_count=max_count, paths=paths or None)
    except GitError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    for failure in report.failures:
        console.print(str(failure), markup=False, highlight=False, soft_wrap=True)

    if report.ok:
        console.print(f"[green]{report.summary()}[/]")
        return

    console.print(f"\n[red]{report.summary()}[/]")
    raise SystemExit(1)
