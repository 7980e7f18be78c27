"""Core business logic for semcommit.

This module contains the fundamental building blocks:
- Conventional commit parsing (``semcommit.core.commits``)
- Semantic version parsing and precedence (``semcommit.core.version``)
- Next-version calculation (``semcommit.core.bump``)
- Changelog assembly and rendering (``semcommit.core.changelog``,
  ``semcommit.core.render``)
- Commit message validation (``semcommit.core.check``)

Only the first two are re-exported here; the others depend on
``semcommit.vcs`` and are imported from their modules.
"""

from __future__ import annotations

from semcommit.core.commits import (
    CommitParser,
    ConventionalCommit,
    Footer,
    FooterKey,
    Reference,
    is_revert,
    parse_commit,
)
from semcommit.core.version import BumpLabel, Version, parse_version

__all__ = [
    # Version
    "BumpLabel",
    # Commits
    "CommitParser",
    "ConventionalCommit",
    "Footer",
    "FooterKey",
    "Reference",
    "Version",
    "is_revert",
    "parse_commit",
    "parse_version",
]
