"""Release resolution from version tags.

A release is a tag named ``<prefix><semver>`` (``v1.2.3`` with the default
prefix). The index of releases is built once per prefix and never changes
during a run.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from semcommit.core.version import parse_version
from semcommit.exceptions import InvalidVersionError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from semcommit.core.version import Version
    from semcommit.vcs.base import Commit, Repository

logger = logging.getLogger(__name__)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class VersionAndTag:
    """A release point. Compared by semantic version only."""

    tag: str
    version: Version
    sha: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionAndTag):
            return NotImplemented
        return self.version == other.version

    def __lt__(self, other: VersionAndTag) -> bool:
        if not isinstance(other, VersionAndTag):
            return NotImplemented
        return self.version < other.version

    def __hash__(self) -> int:
        return hash(self.version)


class ReleaseIndex:
    """Maps commit ids to the releases tagged on them.

    Args:
        prefix: Tag prefix the releases were read with
        releases: The releases to index
    """

    def __init__(self, prefix: str, releases: Iterable[VersionAndTag]) -> None:
        self.prefix = prefix
        by_commit: dict[str, list[VersionAndTag]] = {}
        for release in releases:
            by_commit.setdefault(release.sha, []).append(release)
        self._by_commit: Mapping[str, tuple[VersionAndTag, ...]] = MappingProxyType(
            {sha: tuple(sorted(items, reverse=True)) for sha, items in by_commit.items()}
        )
        self._releases = tuple(
            sorted((r for items in self._by_commit.values() for r in items), reverse=True)
        )

    @classmethod
    def from_repo(cls, repo: Repository, prefix: str = "v") -> ReleaseIndex:
        """Read every ``<prefix>*.*.*`` tag that holds a semantic version.

        Raises:
            GitError: If tags cannot be listed
        """
        releases = []
        for tag, sha in repo.tag_targets(f"{prefix}*.*.*"):
            if not tag.startswith(prefix):
                continue
            try:
                version = parse_version(tag, prefix)
            except InvalidVersionError:
                logger.debug("Ignoring tag %s, not a semantic version", tag)
                continue
            releases.append(VersionAndTag(tag=tag, version=version, sha=sha))
        logger.debug("Indexed %d release tags with prefix %r", len(releases), prefix)
        return cls(prefix, releases)

    def __len__(self) -> int:
        return len(self._releases)

    def __bool__(self) -> bool:
        return bool(self._releases)

    @property
    def releases(self) -> tuple[VersionAndTag, ...]:
        """All releases, highest version first."""
        return self._releases

    @property
    def commits(self) -> frozenset[str]:
        return frozenset(self._by_commit)

    def for_commit(self, sha: str) -> tuple[VersionAndTag, ...]:
        """Releases tagged on ``sha``, highest version first."""
        return self._by_commit.get(sha, ())

    def versions_from(self, release: VersionAndTag) -> list[VersionAndTag]:
        """Stable releases below ``release``, lowest version first.

        Releases sharing a version (several tags, one version) appear once.
        """
        seen: set[Version] = set()
        result = []
        for candidate in sorted(self._releases):
            if candidate.version.is_prerelease or not candidate < release:
                continue
            if candidate.version in seen:
                continue
            seen.add(candidate.version)
            result.append(candidate)
        return result

    def siblings(self, version: Version) -> list[VersionAndTag]:
        """Releases with the same ``major.minor.patch`` as ``version``."""
        return [r for r in self._releases if r.version.core == version.core]


def find_last_version(
    repo: Repository,
    start: Commit,
    index: ReleaseIndex,
    ignore_prereleases: bool = False,
) -> VersionAndTag | None:
    """Find the highest release reachable from ``start`` (inclusive).

    The result is chosen by semantic version, not by distance in the graph.

    Args:
        repo: Repository to walk
        start: Commit to look back from
        index: Releases of the repository
        ignore_prereleases: Do not consider pre-release versions

    Returns:
        The release, or ``None`` if no release is reachable
    """
    candidates: dict[str, tuple[VersionAndTag, ...]] = {}
    for sha in index.commits:
        releases = index.for_commit(sha)
        if ignore_prereleases:
            releases = tuple(r for r in releases if not r.version.is_prerelease)
        if releases:
            candidates[sha] = releases
    if not candidates:
        return None

    found: list[VersionAndTag] = []
    remaining = set(candidates)
    for commit in repo.iter_commits(start.sha):
        if commit.sha in remaining:
            found.extend(candidates[commit.sha])
            remaining.discard(commit.sha)
            if not remaining:
                break
    return max(found, default=None)
