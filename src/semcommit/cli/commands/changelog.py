"""Implementation of the 'changelog' command.

The changelog command renders the history of a revision as Markdown,
one section per release.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from semcommit.cli.commands.common import open_project
from semcommit.core.bump import bump_version
from semcommit.core.changelog import ChangelogAssembler
from semcommit.core.render import ChangelogRenderer, ChangelogWriter
from semcommit.exceptions import GitError, TemplateError
from semcommit.vcs.releases import ReleaseIndex

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from semcommit.cli.commands.common import CliState


def run_changelog(
    state: CliState,
    rev: str,
    prefix: str | None,
    skip_empty: bool,
    include_hidden: bool,
    oldest_first: bool,
    max_majors: int | None,
    max_minors: int | None,
    max_patches: int | None,
    unreleased: str | None,
    bump: bool,
    paths: list[str] | None,
    output: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the changelog command.

    Args:
        state: Global CLI options
        rev: Revision to start from
        prefix: Tag prefix overriding the configured one
        skip_empty: Leave out releases without visible changes
        include_hidden: Also render hidden commit types
        oldest_first: Render the oldest release first
        max_majors: Limit the number of major versions
        max_minors: Limit the number of minor versions
        max_patches: Limit the number of releases
        unreleased: Title of the section with unreleased changes
        bump: Title unreleased changes with the next version instead
        paths: Only include commits touching these paths
        output: Write to this file instead of standard output
        console: Console for standard output
        err_console: Console for error output
    """
    config, repo = open_project(state, err_console, prefix)

    updates: dict[str, object] = {}
    for key, value in (
        ("max_majors", max_majors),
        ("max_minors", max_minors),
        ("max_patches", max_patches),
        ("unreleased", unreleased),
    ):
        if value is not None:
            updates[key] = value
    if updates:
        changelog = config.changelog.model_copy(update=updates)
        config = config.model_copy(update={"changelog": changelog})

    try:
        renderer = ChangelogRenderer(config.changelog)
    except TemplateError as e:
        err_console.print(f"[red]Error loading template:[/] {e}")
        raise SystemExit(1) from e

    try:
        index = ReleaseIndex.from_repo(repo, config.tag_prefix)
        forecast = None
        if bump:
            forecast = bump_version(repo, config, rev, paths=paths or None, index=index).version
        assembler = ChangelogAssembler(repo, config, index=index)
        contexts = list(
            assembler.contexts(
                rev,
                skip_empty=skip_empty or None,
                include_hidden=include_hidden or None,
                oldest_first=oldest_first or None,
                unreleased_version=forecast,
                paths=paths or None,
            )
        )
    except GitError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    stream = output.open("w", encoding="utf-8") if output else console.file
    try:
        writer = ChangelogWriter(stream, renderer)
        writer.write_header(config.changelog.header)
        for context in contexts:
            writer.write_context(context)
    except TemplateError as e:
        err_console.print(f"[red]Error rendering changelog:[/] {e}")
        raise SystemExit(1) from e
    finally:
        if output:
            stream.close()

    if output:
        err_console.print(f"[green]✓[/] Wrote {output}")
