"""Shared fixtures: throw-away git repositories built with the git executable."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from semcommit.config.models import SemcommitConfig
from semcommit.vcs import GitPythonRepository, GitRepository, Repository

# 2024-01-01T00:00:00Z; every commit is one hour after the previous one.
EPOCH = 1704067200


class GitRepoBuilder:
    """Creates commits, branches and tags in a temporary repository."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._counter = 0
        path.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")
        self.git("config", "user.name", "Test User")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str, input: str | None = None) -> str:
        self._counter += 1
        stamp = f"@{EPOCH + self._counter * 3600} +0000"
        env = {
            **os.environ,
            "GIT_AUTHOR_DATE": stamp,
            "GIT_COMMITTER_DATE": stamp,
            "GIT_CONFIG_NOSYSTEM": "1",
        }
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            env=env,
            input=input,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def commit(self, message: str, files: dict[str, str] | None = None) -> str:
        """Commit ``files`` (a fresh file when omitted) and return the sha."""
        if files is None:
            files = {f"file{self._counter}.txt": message}
        for name, content in files.items():
            file_path = self.path / name
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content)
            self.git("add", name)
        self.git("commit", "-q", "--cleanup=verbatim", "-F", "-", input=message)
        return self.head()

    def tag(self, name: str, rev: str = "HEAD", annotated: bool = False) -> None:
        if annotated:
            self.git("tag", "-a", name, "-m", f"Release {name}", rev)
        else:
            self.git("tag", name, rev)

    def branch(self, name: str, rev: str = "HEAD") -> None:
        self.git("checkout", "-q", "-b", name, rev)

    def checkout(self, name: str) -> None:
        self.git("checkout", "-q", name)

    def merge(self, name: str, message: str | None = None) -> str:
        self.git("merge", "-q", "--no-ff", "-m", message or f"Merge branch '{name}'", name)
        return self.head()

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")


OpenRepo = Callable[[GitRepoBuilder], Repository]


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepoBuilder:
    """An empty repository on branch ``main``."""
    return GitRepoBuilder(tmp_path / "repo")


@pytest.fixture(params=["git", "gitpython"])
def open_repo(request: pytest.FixtureRequest) -> OpenRepo:
    """Factory opening a builder's repository with each backend."""
    backend = GitRepository if request.param == "git" else GitPythonRepository

    def _open(builder: GitRepoBuilder) -> Repository:
        return backend(builder.path)

    return _open


@pytest.fixture
def config() -> SemcommitConfig:
    """Default configuration."""
    return SemcommitConfig()


@pytest.fixture
def released_repo(git_repo: GitRepoBuilder) -> GitRepoBuilder:
    """History with two releases and unreleased work on top::

        feat: A -> v1.0.0 -> fix: B -> v1.0.1 -> feat: C -> chore: D
    """
    git_repo.commit("feat: A")
    git_repo.tag("v1.0.0")
    git_repo.commit("fix: B")
    git_repo.tag("v1.0.1", annotated=True)
    git_repo.commit("feat: C")
    git_repo.commit("chore: D")
    return git_repo
