"""Implementation of the 'version' command.

Prints the current version of a revision, or with ``--bump`` the next one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from semcommit.cli.commands.common import open_project
from semcommit.core.bump import bump_version
from semcommit.exceptions import GitError
from semcommit.vcs.releases import ReleaseIndex, find_last_version

if TYPE_CHECKING:
    from rich.console import Console

    from semcommit.cli.commands.common import CliState


def run_version(
    state: CliState,
    rev: str,
    prefix: str | None,
    bump: bool,
    label: bool,
    major: bool,
    minor: bool,
    patch: bool,
    prerelease: str | None,
    ignore_prereleases: bool,
    paths: list[str] | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the version command.

    Args:
        state: Global CLI options
        rev: Revision to show the version for
        prefix: Tag prefix overriding the configured one
        bump: Print the next version instead of the current one
        label: Print the bump label (major, minor, patch, ...) instead
        major: Force a major bump
        minor: Force a minor bump
        patch: Force a patch bump
        prerelease: Pre-release suffix, e.g. "rc"
        ignore_prereleases: Skip pre-release tags when finding the last release
        console: Console for standard output
        err_console: Console for error output
    """
    if sum((major, minor, patch)) > 1:
        err_console.print("[red]Error:[/] --major, --minor and --patch are mutually exclusive")
        raise SystemExit(2)

    config, repo = open_project(state, err_console, prefix)
    ignore = ignore_prereleases or config.version.ignore_prereleases

    try:
        index = ReleaseIndex.from_repo(repo, config.tag_prefix)
        if not (bump or label or major or minor or patch or prerelease):
            head = repo.revparse_single(rev)
            last = find_last_version(repo, head, index, ignore)
            console.print(str(last.version) if last else "0.0.0", highlight=False)
            return

        result = bump_version(
            repo,
            config,
            rev,
            prerelease=prerelease,
            ignore_prereleases=ignore,
            major=major,
            minor=minor,
            patch=patch,
            paths=paths or None,
            index=index,
        )
    except GitError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    console.print(str(result.label) if label else str(result.version), highlight=False)
