"""Pydantic models for semcommit configuration.

The keys follow the conventional-changelog configuration format, so a
``.versionrc`` written for other conventional tooling (camelCase keys such
as ``commitUrlFormat``) loads as-is. Python-style snake_case names are
accepted as well, which is what ``[tool.semcommit]`` in ``pyproject.toml``
normally uses.
"""

from __future__ import annotations

import re
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_SCOPE_REGEX = r"^[a-zA-Z0-9]+(?:[-_/][a-zA-Z0-9]+)*$"


class IncrementPolicy(StrEnum):
    """Version component a commit type increments when released."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


def _check_regex(value: str) -> str:
    try:
        re.compile(value)
    except re.error as e:
        raise ValueError(f"invalid regular expression {value!r}: {e}") from e
    return value


class CommitTypeConfig(_Model):
    """A commit type, the changelog section it belongs to and its increment."""

    type: str
    section: str = ""
    hidden: bool = False
    increment: IncrementPolicy = IncrementPolicy.NONE

    @model_validator(mode="before")
    @classmethod
    def _default_increment(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("increment") is None:
            data = dict(data)
            data["increment"] = {
                "feat": IncrementPolicy.MINOR,
                "fix": IncrementPolicy.PATCH,
            }.get(str(data.get("type", "")).lower(), IncrementPolicy.NONE)
        return data

    @field_validator("type")
    @classmethod
    def _lower_type(cls, value: str) -> str:
        return value.lower()

    @field_validator("increment", mode="before")
    @classmethod
    def _lower_increment(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


def _default_types() -> list[CommitTypeConfig]:
    return [
        CommitTypeConfig(type="feat", section="Features"),
        CommitTypeConfig(type="fix", section="Fixes"),
        CommitTypeConfig(type="build", section="Other", hidden=True),
        CommitTypeConfig(type="chore", section="Other", hidden=True),
        CommitTypeConfig(type="ci", section="Other", hidden=True),
        CommitTypeConfig(type="docs", section="Documentation", hidden=True),
        CommitTypeConfig(type="style", section="Other", hidden=True),
        CommitTypeConfig(type="refactor", section="Other", hidden=True),
        CommitTypeConfig(type="perf", section="Other", hidden=True),
        CommitTypeConfig(type="test", section="Other", hidden=True),
    ]


class CommitsConfig(_Model):
    """How commit messages are parsed and which commits are walked."""

    types: list[CommitTypeConfig] = Field(default_factory=_default_types)
    scope_regex: str = DEFAULT_SCOPE_REGEX
    strip_regex: str = ""
    issue_prefixes: list[str] = Field(default_factory=lambda: ["#"])
    merges: bool = False
    first_parent: bool = False
    ignore_reverts: bool = False
    paths: list[str] = Field(default_factory=list)

    @field_validator("scope_regex", "strip_regex")
    @classmethod
    def _valid_regex(cls, value: str) -> str:
        return _check_regex(value)

    @field_validator("issue_prefixes")
    @classmethod
    def _non_empty_prefixes(cls, value: list[str]) -> list[str]:
        if any(not prefix for prefix in value):
            raise ValueError("issue prefixes must not be empty strings")
        return value

    def get_type(self, name: str) -> CommitTypeConfig | None:
        """Return the configuration of a commit type, if it is known."""
        name = name.lower()
        for commit_type in self.types:
            if commit_type.type == name:
                return commit_type
        return None

    @property
    def type_names(self) -> list[str]:
        return [t.type for t in self.types]


class ChangelogConfig(_Model):
    """Changelog rendering options."""

    header: str = "# Changelog\n"
    template: Path | None = None
    line_length: int = Field(default=80, ge=10)
    wrap_disabled: bool = False
    link_compare: bool = True
    link_references: bool = True
    commit_url_format: str = "{{host}}/{{owner}}/{{repository}}/commit/{{hash}}"
    compare_url_format: str = (
        "{{host}}/{{owner}}/{{repository}}/compare/{{previousTag}}...{{currentTag}}"
    )
    issue_url_format: str = "{{host}}/{{owner}}/{{repository}}/issues/{{id}}"
    user_url_format: str = "{{host}}/{{user}}"
    release_commit_message_format: str = "chore(release): {{currentTag}}"
    unreleased: str = "Unreleased"
    skip_empty: bool = False
    include_hidden: bool = False
    oldest_first: bool = False
    max_majors: int | None = Field(default=None, ge=1)
    max_minors: int | None = Field(default=None, ge=1)
    max_patches: int | None = Field(default=None, ge=1)


class VersionConfig(_Model):
    """Version bump options."""

    prerelease: str | None = None
    ignore_prereleases: bool = False

    @field_validator("prerelease")
    @classmethod
    def _valid_prerelease(cls, value: str | None) -> str | None:
        if value is not None and not re.fullmatch(r"[0-9A-Za-z-]+", value):
            raise ValueError(f"invalid pre-release identifier {value!r}")
        return value


class RemoteConfig(_Model):
    """Where the repository is hosted, used for links in the changelog.

    When ``host``, ``owner`` and ``repository`` are all unset they are
    derived from the URL of the ``name`` remote.
    """

    name: str = "origin"
    host: str | None = None
    owner: str | None = None
    repository: str | None = None

    @property
    def is_configured(self) -> bool:
        return any((self.host, self.owner, self.repository))


# Sections whose keys may also appear at the top level, as in a flat
# conventional-changelog ``.versionrc``. ``remote.name`` is too generic to lift.
_FLAT_SECTIONS: dict[str, type[_Model]] = {
    "commits": CommitsConfig,
    "changelog": ChangelogConfig,
    "version": VersionConfig,
    "remote": RemoteConfig,
}
_NOT_LIFTED = {"name"}


class SemcommitConfig(_Model):
    """Root configuration."""

    tag_prefix: str = "v"
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for section, model in _FLAT_SECTIONS.items():
            lifted = {}
            for name in model.model_fields:
                if name in _NOT_LIFTED:
                    continue
                for key in (name, to_camel(name)):
                    if key in data:
                        lifted[key] = data.pop(key)
            if not lifted:
                continue
            nested = data.get(section) or {}
            if isinstance(nested, dict):
                data[section] = {**lifted, **nested}
        return data
