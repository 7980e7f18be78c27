"""Command line interface for semcommit."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import cast, get_args

import typer
from rich.console import Console
from rich.logging import RichHandler

from semcommit import __version__
from semcommit.cli.commands.changelog import run_changelog
from semcommit.cli.commands.check import run_check
from semcommit.cli.commands.common import CliState
from semcommit.cli.commands.version import run_version
from semcommit.vcs import Backend

app = typer.Typer(
    name="semcommit",
    help="Conventional commits, semantic versions and changelogs from git history.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"semcommit {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    path: str | None = typer.Option(
        None, "-C", help="Run as if started in this directory"
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Configuration file (.versionrc or pyproject.toml)"
    ),
    backend: str = typer.Option(
        "git", "--backend", help="Git backend: git (executable) or gitpython"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the semcommit version and exit",
    ),
) -> None:
    setup_logging(verbose)
    if backend not in get_args(Backend):
        err_console.print(f"[red]Error:[/] Unknown git backend: {backend}")
        raise typer.Exit(2)
    selected = cast("Backend", backend)
    ctx.obj = CliState(path=path, config_file=config_file, backend=selected)


@app.command()
def check(
    ctx: typer.Context,
    rev: str = typer.Argument("HEAD", help="Revision or range <from>..<to>"),
    max_count: int | None = typer.Option(
        None, "--max-count", "-n", min=0, help="Check at most this many commits"
    ),
    merges: bool = typer.Option(False, "--merges", help="Also check merge commits"),
    first_parent: bool = typer.Option(
        False, "--first-parent", help="Only follow the first parent of merges"
    ),
    ignore_reverts: bool = typer.Option(
        False, "--ignore-reverts", help="Skip commits created by git revert"
    ),
    paths: list[str] | None = typer.Option(
        None, "--paths", "-P", help="Only check commits touching these paths"
    ),
) -> None:
    """Check that commit messages follow the conventional commit format.

    Examples:
        semcommit check
        semcommit check v1.0.0..HEAD
        semcommit check -n 10
    """
    run_check(
        ctx.obj,
        rev,
        max_count,
        merges,
        first_parent,
        ignore_reverts,
        paths,
        console,
        err_console,
    )


@app.command()
def version(
    ctx: typer.Context,
    rev: str = typer.Argument("HEAD", help="Revision to show the version for"),
    prefix: str | None = typer.Option(
        None, "--prefix", "-p", help="Tag prefix in front of the version"
    ),
    bump: bool = typer.Option(False, "--bump", "-b", help="Print the next version"),
    label: bool = typer.Option(
        False, "--label", "-l", help="Print the bump label instead of the version"
    ),
    major: bool = typer.Option(False, "--major", help="Force a major bump"),
    minor: bool = typer.Option(False, "--minor", help="Force a minor bump"),
    patch: bool = typer.Option(False, "--patch", help="Force a patch bump"),
    prerelease: str | None = typer.Option(
        None, "--prerelease", help="Pre-release suffix, e.g. alpha, beta, rc"
    ),
    ignore_prereleases: bool = typer.Option(
        False, "--ignore-prereleases", help="Ignore pre-release tags"
    ),
    paths: list[str] | None = typer.Option(
        None, "--paths", "-P", help="Only consider commits touching these paths"
    ),
) -> None:
    """Show the current or the next version.

    Examples:
        semcommit version
        semcommit version --bump
        semcommit version --bump --prerelease rc
    """
    run_version(
        ctx.obj,
        rev,
        prefix,
        bump,
        label,
        major,
        minor,
        patch,
        prerelease,
        ignore_prereleases,
        paths,
        console,
        err_console,
    )


@app.command()
def changelog(
    ctx: typer.Context,
    rev: str = typer.Argument("HEAD", help="Revision to start from"),
    prefix: str | None = typer.Option(
        None, "--prefix", "-p", help="Tag prefix in front of the version"
    ),
    skip_empty: bool = typer.Option(
        False, "--skip-empty", help="Leave out releases without visible changes"
    ),
    include_hidden: bool = typer.Option(
        False, "--include-hidden", help="Also include hidden sections"
    ),
    oldest_first: bool = typer.Option(
        False, "--oldest-first", help="Show the oldest release first"
    ),
    max_majors: int | None = typer.Option(
        None, "--max-majors", min=1, help="Limit the number of major versions"
    ),
    max_minors: int | None = typer.Option(
        None, "--max-minors", min=1, help="Limit the number of minor versions"
    ),
    max_patches: int | None = typer.Option(
        None, "--max-patches", min=1, help="Limit the number of releases"
    ),
    unreleased: str | None = typer.Option(
        None, "--unreleased", "-u", help="Title of the unreleased section"
    ),
    bump: bool = typer.Option(
        False, "--bump", "-b", help="Title unreleased changes with the next version"
    ),
    paths: list[str] | None = typer.Option(
        None, "--paths", "-P", help="Only include commits touching these paths"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the changelog to this file"
    ),
) -> None:
    """Write a changelog.

    Examples:
        semcommit changelog
        semcommit changelog --max-minors 2 -o CHANGELOG.md
    """
    run_changelog(
        ctx.obj,
        rev,
        prefix,
        skip_empty,
        include_hidden,
        oldest_first,
        max_majors,
        max_minors,
        max_patches,
        unreleased,
        bump,
        paths,
        output,
        console,
        err_console,
    )


def main() -> None:
    app()
