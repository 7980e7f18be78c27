"""Shared setup for the CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from semcommit.config import load_config
from semcommit.exceptions import ConfigError, GitError
from semcommit.vcs import open_repository

if TYPE_CHECKING:
    from rich.console import Console

    from semcommit.config.models import SemcommitConfig
    from semcommit.vcs import Backend, Repository


@dataclass
class CliState:
    """Options given before the command name."""

    path: str | None = None
    config_file: str | None = None
    backend: Backend = "git"


def open_project(
    state: CliState,
    err_console: Console,
    prefix: str | None = None,
) -> tuple[SemcommitConfig, Repository]:
    """Load the configuration and open the repository.

    Args:
        state: Global CLI options
        err_console: Console for error output
        prefix: Tag prefix overriding the configured one

    Returns:
        The configuration and the repository

    Raises:
        SystemExit: If either cannot be loaded
    """
    project_path = Path(state.path) if state.path else Path.cwd()

    try:
        config = load_config(
            project_path,
            Path(state.config_file) if state.config_file else None,
        )
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e
    if prefix is not None:
        config = config.model_copy(update={"tag_prefix": prefix})

    try:
        repo = open_repository(project_path, state.backend)
    except GitError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    return config, repo
