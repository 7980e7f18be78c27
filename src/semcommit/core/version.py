"""Semantic version parsing, ordering and increments.

Implements `Semantic Versioning 2.0.0 <https://semver.org>`_ precedence:
build metadata is ignored when comparing, pre-release versions sort before
the associated normal version, and pre-release identifiers compare
numerically when they are numbers and lexically otherwise.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from enum import StrEnum

from semcommit.exceptions import InvalidVersionError

SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


class BumpLabel(StrEnum):
    """Classification of a version bump."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    RELEASE = "release"
    PRERELEASE = "prerelease"


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    # Numeric identifiers have lower precedence than alphanumeric ones.
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version.

    Attributes:
        major: Major version component
        minor: Minor version component
        patch: Patch version component
        pre: Pre-release identifiers, e.g. ``("rc", "1")``
        build: Build metadata identifiers
    """

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a semantic version string.

        Raises:
            InvalidVersionError: If ``text`` is not a valid semantic version
        """
        match = SEMVER_PATTERN.match(text.strip())
        if not match:
            raise InvalidVersionError(f"Invalid semantic version: {text!r}")
        pre = match.group("pre")
        build = match.group("build")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            pre=tuple(pre.split(".")) if pre else (),
            build=tuple(build.split(".")) if build else (),
        )

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def _precedence(self) -> tuple:
        # A version without pre-release identifiers sorts after any pre-release.
        pre_key = (1,) if not self.pre else (0, tuple(_identifier_key(i) for i in self.pre))
        return (self.major, self.minor, self.patch, pre_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence() == other._precedence()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __hash__(self) -> int:
        return hash(self._precedence())

    @property
    def is_prerelease(self) -> bool:
        return bool(self.pre)

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def release(self) -> Version:
        """Return this version without pre-release and build metadata."""
        return Version(self.major, self.minor, self.patch)

    def bump_major(self) -> Version:
        return Version(self.major + 1, 0, 0)

    def bump_minor(self) -> Version:
        return Version(self.major, self.minor + 1, 0)

    def bump_patch(self) -> Version:
        return Version(self.major, self.minor, self.patch + 1)

    def bump(self, label: BumpLabel) -> Version:
        """Increment the component named by ``label``.

        ``RELEASE`` and ``PRERELEASE`` only strip pre-release and build
        metadata; the numeric pre-release counter is handled by the bump
        engine, which knows the sibling releases.
        """
        if label is BumpLabel.MAJOR:
            return self.bump_major()
        if label is BumpLabel.MINOR:
            return self.bump_minor()
        if label is BumpLabel.PATCH:
            return self.bump_patch()
        return self.release()

    def with_prerelease(self, suffix: str, number: int) -> Version:
        """Return ``<major>.<minor>.<patch>-<suffix>.<number>``."""
        return Version(self.major, self.minor, self.patch, pre=(suffix, str(number)))

    def prerelease_number(self, suffix: str) -> int | None:
        """Return ``n`` when this version is ``*-<suffix>.<n>``."""
        if len(self.pre) == 2 and self.pre[0] == suffix and self.pre[1].isdigit():
            return int(self.pre[1])
        return None


def parse_version(text: str, prefix: str = "") -> Version:
    """Parse ``text`` after removing ``prefix`` (e.g. a tag like ``v1.2.3``).

    Raises:
        InvalidVersionError: If the remainder is not a semantic version
    """
    if prefix and text.startswith(prefix):
        text = text[len(prefix) :]
    return Version.parse(text)
