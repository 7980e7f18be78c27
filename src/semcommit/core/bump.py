"""Next-version calculation from conventional commits.

The commits between the last release and the target revision decide the
increment:

- a breaking change bumps major (minor while the major version is 0),
- otherwise each commit type's configured increment policy applies
  (a minor policy bumps patch, and a major policy bumps minor, while the
  major version is 0),
- the highest increment wins; with none the version is only re-stamped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from semcommit.config.models import IncrementPolicy
from semcommit.core.commits import CommitParser
from semcommit.core.version import BumpLabel, Version
from semcommit.vcs.base import RevWalkOptions
from semcommit.vcs.releases import ReleaseIndex, find_last_version
from semcommit.vcs.walk import walk

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from semcommit.config.models import CommitsConfig, SemcommitConfig
    from semcommit.core.commits import ConventionalCommit
    from semcommit.vcs.base import Commit, Repository, WalkItem
    from semcommit.vcs.releases import VersionAndTag

logger = logging.getLogger(__name__)

_POLICY_LABELS = {
    IncrementPolicy.MAJOR: BumpLabel.MAJOR,
    IncrementPolicy.MINOR: BumpLabel.MINOR,
    IncrementPolicy.PATCH: BumpLabel.PATCH,
}


@dataclass(frozen=True)
class BumpResult:
    """Outcome of a version bump.

    Attributes:
        version: The computed version
        label: What kind of bump produced it
        commit: Id of the commit the version applies to
        previous: The release the bump started from, if any
    """

    version: Version
    label: BumpLabel
    commit: str
    previous: VersionAndTag | None = None


def commit_increment(
    commit: ConventionalCommit,
    config: CommitsConfig,
    major_zero: bool = False,
) -> BumpLabel | None:
    """The increment a single commit asks for."""
    if commit.is_breaking:
        return BumpLabel.MINOR if major_zero else BumpLabel.MAJOR

    commit_type = config.get_type(commit.type)
    if commit_type is None:
        return None
    label = _POLICY_LABELS.get(commit_type.increment)
    if major_zero and label is BumpLabel.MAJOR:
        return BumpLabel.MINOR
    if major_zero and label is BumpLabel.MINOR:
        return BumpLabel.PATCH
    return label


def scan_increments(
    commits: Iterable[ConventionalCommit],
    config: CommitsConfig,
    major_zero: bool = False,
) -> BumpLabel | None:
    """Fold the increments of ``commits`` into one label.

    Stops at the first breaking change, nothing can outrank it.
    """
    major = minor = patch = False
    for commit in commits:
        label = commit_increment(commit, config, major_zero)
        if label is BumpLabel.MAJOR:
            major = True
        elif label is BumpLabel.MINOR:
            minor = True
        elif label is BumpLabel.PATCH:
            patch = True
        if commit.is_breaking:
            break

    if major:
        return BumpLabel.MAJOR
    if minor:
        return BumpLabel.MINOR
    if patch:
        return BumpLabel.PATCH
    return None


def _parsed(items: Iterable[WalkItem]) -> Iterable[ConventionalCommit]:
    for item in items:
        if item.conventional is None:
            logger.debug("Skipping %s: %s", item.commit.short_sha, item.error)
            continue
        yield item.conventional


def next_prerelease(version: Version, suffix: str, index: ReleaseIndex) -> Version:
    """``<version>-<suffix>.<n>`` continuing after the highest released ``n``."""
    numbers = [
        number
        for sibling in index.siblings(version)
        if (number := sibling.version.prerelease_number(suffix)) is not None
    ]
    return version.with_prerelease(suffix, max(numbers, default=0) + 1)


def bump_version(
    repo: Repository,
    config: SemcommitConfig,
    rev: str = "HEAD",
    *,
    prerelease: str | None = None,
    ignore_prereleases: bool | None = None,
    major: bool = False,
    minor: bool = False,
    patch: bool = False,
    paths: Sequence[str] | None = None,
    index: ReleaseIndex | None = None,
) -> BumpResult:
    """Compute the next version for ``rev``.

    Args:
        repo: Repository to read
        config: Configuration (tag prefix, commit types, walk filters)
        rev: Revision the new version is for
        prerelease: Pre-release suffix such as ``rc``; overrides the config
        ignore_prereleases: Skip pre-release tags when finding the last
            release; defaults to the config value
        major: Force a major bump
        minor: Force a minor bump
        patch: Force a patch bump
        paths: Only consider commits touching these paths; defaults to the
            configured paths
        index: Pre-built release index

    Returns:
        The new version, its label and the commit it belongs to

    Raises:
        GitError: If the repository cannot be queried
    """
    if index is None:
        index = ReleaseIndex.from_repo(repo, config.tag_prefix)
    if ignore_prereleases is None:
        ignore_prereleases = config.version.ignore_prereleases
    prerelease = prerelease or config.version.prerelease

    head = repo.revparse_single(rev)
    last = find_last_version(repo, head, index, ignore_prereleases)
    current = last.version if last is not None else Version(0, 0, 0)
    logger.debug("Last release for %s: %s", rev, last.tag if last else "none")

    if major or minor or patch:
        label = BumpLabel.MAJOR if major else BumpLabel.MINOR if minor else BumpLabel.PATCH
        version = current.bump(label)
    elif last is not None and current.is_prerelease:
        label = BumpLabel.RELEASE
        version = current.release()
    else:
        boundary: tuple[Commit, ...] = ()
        if last is not None:
            boundary = (repo.revparse_single(last.sha),)
        options = RevWalkOptions(
            to_rev=head,
            from_rev=boundary,
            parser=CommitParser.from_config(config.commits),
            first_parent=config.commits.first_parent,
            no_merge_commits=not config.commits.merges,
            no_revert_commits=config.commits.ignore_reverts,
            paths=tuple(paths if paths is not None else config.commits.paths),
        )
        increment = scan_increments(
            _parsed(walk(repo, options)),
            config.commits,
            major_zero=current.major == 0,
        )
        label = increment or BumpLabel.RELEASE
        version = current.bump(label)

    if prerelease:
        if version <= current and not current.is_prerelease:
            # A pre-release of the current stable version would sort below it.
            version = version.bump_patch()
        version = next_prerelease(version, prerelease, index)
        label = BumpLabel.PRERELEASE

    return BumpResult(version=version, label=label, commit=head.sha, previous=last)
