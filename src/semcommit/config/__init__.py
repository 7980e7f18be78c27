"""Configuration management for semcommit."""

from __future__ import annotations

from semcommit.config.loader import load_config
from semcommit.config.models import (
    ChangelogConfig,
    CommitsConfig,
    CommitTypeConfig,
    IncrementPolicy,
    RemoteConfig,
    SemcommitConfig,
    VersionConfig,
)

__all__ = [
    "ChangelogConfig",
    "CommitTypeConfig",
    "CommitsConfig",
    "IncrementPolicy",
    "RemoteConfig",
    "SemcommitConfig",
    "VersionConfig",
    "load_config",
]
