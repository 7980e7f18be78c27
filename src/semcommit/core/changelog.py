"""Changelog assembly.

The history is cut into release windows, newest first::

    HEAD..v1.1.0   v1.1.0..v1.0.0   v1.0.0..<root>

Each window is walked, its conventional commits are grouped into the
configured sections and the result is frozen into a
:class:`ChangelogContext` for the renderer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import pairwise
from typing import TYPE_CHECKING

from semcommit.core.commits import CommitParser
from semcommit.vcs.base import RevWalkOptions
from semcommit.vcs.releases import ReleaseIndex, find_last_version
from semcommit.vcs.remote import HostInfo, resolve_host_info
from semcommit.vcs.walk import walk

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from datetime import date

    from semcommit.config.models import SemcommitConfig
    from semcommit.core.commits import ConventionalCommit, Reference
    from semcommit.core.version import Version
    from semcommit.vcs.base import Commit, Repository
    from semcommit.vcs.releases import VersionAndTag

logger = logging.getLogger(__name__)


# =============================================================================
# Rendering context
# =============================================================================


@dataclass(frozen=True)
class CommitContext:
    hash: str
    short_hash: str
    date: date
    subject: str
    scope: str | None
    body: str | None
    breaking: bool
    references: tuple[Reference, ...]


@dataclass(frozen=True)
class CommitGroup:
    title: str
    commits: tuple[CommitContext, ...]


@dataclass(frozen=True)
class Note:
    scope: str | None
    text: str


@dataclass(frozen=True)
class NoteGroup:
    title: str
    notes: tuple[Note, ...]


@dataclass(frozen=True)
class ChangelogContext:
    """Everything the template needs to render one release window.

    Attributes:
        version: Tag name of the release, or the unreleased label
        date: Date of the newest commit of the window
        is_patch: The release only increments the patch component
        commit_groups: Sections in configured order
        note_groups: Breaking change notes grouped by footer token
        previous_tag: Older boundary of the window ("" for the first release)
        current_tag: Newer boundary of the window
        host: Web host, e.g. ``https://github.com``
        owner: Repository owner or group path
        repository: Repository name
        link_compare: Render a compare link between the two tags
        link_references: Render links for commits and issues
        unreleased: The window is not released yet
    """

    version: str
    date: date | None
    is_patch: bool
    commit_groups: tuple[CommitGroup, ...]
    note_groups: tuple[NoteGroup, ...]
    previous_tag: str
    current_tag: str
    host: str | None
    owner: str | None
    repository: str | None
    link_compare: bool
    link_references: bool
    unreleased: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.commit_groups and not self.note_groups


# =============================================================================
# Windows
# =============================================================================


@dataclass(frozen=True)
class Rev:
    """A window boundary: a release tag or an unreleased revision."""

    name: str
    commit: Commit
    version: Version | None = None
    released: bool = True


@dataclass(frozen=True)
class ReleaseWindow:
    """Commits reachable from ``to_rev`` but not from ``from_rev``."""

    to_rev: Rev
    from_rev: Rev | None


def cap_releases(
    releases: Sequence[VersionAndTag],
    max_majors: int | None = None,
    max_minors: int | None = None,
    max_patches: int | None = None,
) -> list[VersionAndTag]:
    """Keep the most recent releases within the given limits.

    Args:
        releases: Releases, highest version first
        max_majors: Number of distinct major versions to keep
        max_minors: Number of distinct minor versions to keep
        max_patches: Number of releases to keep

    Returns:
        The leading part of ``releases`` that fits all limits
    """
    kept: list[VersionAndTag] = []
    majors: set[int] = set()
    minors: set[tuple[int, int]] = set()
    for release in releases:
        major = release.version.major
        minor = (release.version.major, release.version.minor)
        if max_majors is not None and major not in majors and len(majors) >= max_majors:
            break
        if max_minors is not None and minor not in minors and len(minors) >= max_minors:
            break
        if max_patches is not None and len(kept) >= max_patches:
            break
        majors.add(major)
        minors.add(minor)
        kept.append(release)
    return kept


# =============================================================================
# Assembly
# =============================================================================


class ChangelogAssembler:
    """Builds changelog contexts for the history of a repository.

    Args:
        repo: Repository to read
        config: Configuration
        index: Pre-built release index
        host_info: Host, owner and repository for links; derived from the
            configured remote when omitted
    """

    def __init__(
        self,
        repo: Repository,
        config: SemcommitConfig,
        index: ReleaseIndex | None = None,
        host_info: HostInfo | None = None,
    ) -> None:
        self.repo = repo
        self.config = config
        if index is None:
            index = ReleaseIndex.from_repo(repo, config.tag_prefix)
        if host_info is None:
            host_info = resolve_host_info(repo, config.remote)
        self.index = index
        self.host_info = host_info
        self.parser = CommitParser.from_config(config.commits)

        self._sections: dict[str, str] = {}
        self._hidden: set[str] = set()
        self._section_order: dict[str, int] = {}
        for position, commit_type in enumerate(config.commits.types):
            self._sections[commit_type.type] = commit_type.section
            if commit_type.hidden:
                self._hidden.add(commit_type.type)
            self._section_order.setdefault(commit_type.section, position)

    def windows(self, rev: str = "HEAD") -> list[ReleaseWindow]:
        """Cut the history of ``rev`` into release windows, newest first.

        Raises:
            RevisionNotFoundError: If ``rev`` cannot be resolved
        """
        changelog = self.config.changelog
        head = self.repo.revparse_single(rev)
        last = find_last_version(
            self.repo, head, self.index, self.config.version.ignore_prereleases
        )

        releases: list[VersionAndTag] = []
        if last is not None:
            releases = [last, *reversed(self.index.versions_from(last))]

        kept = cap_releases(
            releases,
            changelog.max_majors,
            changelog.max_minors,
            changelog.max_patches,
        )
        boundaries: list[Rev | None] = []
        if last is None or last.sha != head.sha:
            boundaries.append(Rev(rev, head, released=False))
        boundaries.extend(self._release_rev(release) for release in kept)
        # The newest release left out by the limits bounds the oldest window.
        if len(kept) < len(releases):
            boundaries.append(self._release_rev(releases[len(kept)]))
        else:
            boundaries.append(None)

        return [
            ReleaseWindow(to_rev=to_rev, from_rev=from_rev)
            for to_rev, from_rev in pairwise(boundaries)
            if to_rev is not None
        ]

    def _release_rev(self, release: VersionAndTag) -> Rev:
        return Rev(release.tag, self.repo.revparse_single(release.sha), release.version)

    def build_context(
        self,
        window: ReleaseWindow,
        *,
        include_hidden: bool | None = None,
        unreleased_version: Version | None = None,
        paths: Sequence[str] | None = None,
    ) -> ChangelogContext:
        """Walk one window and freeze it into a context."""
        commits_config = self.config.commits
        changelog = self.config.changelog
        if include_hidden is None:
            include_hidden = changelog.include_hidden

        options = RevWalkOptions(
            to_rev=window.to_rev.commit,
            from_rev=(window.from_rev.commit,) if window.from_rev else (),
            parser=self.parser,
            first_parent=commits_config.first_parent,
            no_merge_commits=not commits_config.merges,
            no_revert_commits=commits_config.ignore_reverts,
            paths=tuple(paths if paths is not None else commits_config.paths),
        )

        groups: dict[str, list[CommitContext]] = {}
        notes: dict[str, list[Note]] = {}
        for item in walk(self.repo, options):
            if item.conventional is None:
                logger.debug("Skipping %s: %s", item.commit.short_sha, item.error)
                continue
            conventional = item.conventional
            for title, note in self._notes(conventional):
                notes.setdefault(title, []).append(note)
            section = self._section(conventional.type, include_hidden)
            if section is None:
                continue
            groups.setdefault(section, []).append(self._commit_context(item.commit, conventional))

        to_rev = window.to_rev
        version = to_rev.version
        if to_rev.released:
            label = current_tag = to_rev.name
        elif unreleased_version is not None:
            version = unreleased_version
            label = current_tag = f"{self.config.tag_prefix}{unreleased_version}"
        else:
            label = changelog.unreleased
            current_tag = to_rev.name
        previous_tag = window.from_rev.name if window.from_rev else ""
        has_host = self.host_info.host is not None

        ordered = sorted(
            groups.items(),
            key=lambda kv: self._section_order.get(kv[0], len(self._section_order)),
        )
        return ChangelogContext(
            version=label,
            date=to_rev.commit.date.date(),
            is_patch=version is not None and version.patch != 0,
            commit_groups=tuple(CommitGroup(title, tuple(items)) for title, items in ordered),
            note_groups=tuple(NoteGroup(title, tuple(items)) for title, items in notes.items()),
            previous_tag=previous_tag,
            current_tag=current_tag,
            host=self.host_info.host,
            owner=self.host_info.owner,
            repository=self.host_info.repository,
            link_compare=changelog.link_compare and has_host and bool(previous_tag),
            link_references=changelog.link_references and has_host,
            unreleased=not to_rev.released,
        )

    def contexts(
        self,
        rev: str = "HEAD",
        *,
        skip_empty: bool | None = None,
        include_hidden: bool | None = None,
        oldest_first: bool | None = None,
        unreleased_version: Version | None = None,
        paths: Sequence[str] | None = None,
    ) -> Iterator[ChangelogContext]:
        """Yield one context per release window of ``rev``.

        Options left at ``None`` fall back to the changelog configuration.

        Raises:
            GitError: If the repository cannot be queried
        """
        changelog = self.config.changelog
        if skip_empty is None:
            skip_empty = changelog.skip_empty
        if oldest_first is None:
            oldest_first = changelog.oldest_first

        windows = self.windows(rev)
        if oldest_first:
            windows.reverse()
        for window in windows:
            logger.debug(
                "Building window %s..%s",
                window.from_rev.name if window.from_rev else "<root>",
                window.to_rev.name,
            )
            context = self.build_context(
                window,
                include_hidden=include_hidden,
                unreleased_version=unreleased_version,
                paths=paths,
            )
            if skip_empty and context.is_empty:
                continue
            yield context

    def _section(self, commit_type: str, include_hidden: bool) -> str | None:
        if commit_type not in self._sections:
            return None
        if commit_type in self._hidden and not include_hidden:
            return None
        return self._sections[commit_type]

    @staticmethod
    def _notes(commit: ConventionalCommit) -> list[tuple[str, Note]]:
        breaking = commit.breaking_footers
        if breaking:
            return [(str(footer.key), Note(commit.scope, footer.value)) for footer in breaking]
        if commit.breaking:
            return [("BREAKING CHANGE", Note(commit.scope, commit.description))]
        return []

    @staticmethod
    def _commit_context(commit: Commit, conventional: ConventionalCommit) -> CommitContext:
        return CommitContext(
            hash=commit.sha,
            short_hash=commit.short_sha,
            date=commit.date.date(),
            subject=conventional.description,
            scope=conventional.scope,
            body=conventional.body,
            breaking=conventional.is_breaking,
            references=conventional.references,
        )
