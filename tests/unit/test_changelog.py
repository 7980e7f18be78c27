"""Tests for changelog assembly."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from semcommit.config.models import (
    ChangelogConfig,
    RemoteConfig,
    SemcommitConfig,
    VersionConfig,
)
from semcommit.core.changelog import ChangelogAssembler, ChangelogContext, cap_releases
from semcommit.core.version import Version
from semcommit.vcs.releases import VersionAndTag
from semcommit.vcs.remote import HostInfo

if TYPE_CHECKING:
    from conftest import GitRepoBuilder, OpenRepo

NO_HOST = HostInfo()
GITHUB = HostInfo("https://github.com", "octo", "project")


def _titles(context: ChangelogContext) -> list[str]:
    return [group.title for group in context.commit_groups]


def _subjects(context: ChangelogContext, title: str) -> list[str]:
    for group in context.commit_groups:
        if group.title == title:
            return [commit.subject for commit in group.commits]
    return []


def _releases(*tags: str) -> list[VersionAndTag]:
    return [VersionAndTag(tag, Version.parse(tag[1:]), "a" * 40) for tag in tags]


class TestCapReleases:
    """Tests for cap_releases()."""

    RELEASES = _releases("v2.1.0", "v2.0.1", "v2.0.0", "v1.1.0", "v1.0.0", "v0.9.0")

    def test_no_limits(self):
        """Without limits every release is kept."""
        assert cap_releases(self.RELEASES) == self.RELEASES

    def test_max_majors(self):
        """Releases of the two newest majors are kept."""
        kept = cap_releases(self.RELEASES, max_majors=2)

        assert [r.tag for r in kept] == ["v2.1.0", "v2.0.1", "v2.0.0", "v1.1.0", "v1.0.0"]

    def test_max_minors(self):
        """Releases of the two newest minors are kept."""
        kept = cap_releases(self.RELEASES, max_minors=2)

        assert [r.tag for r in kept] == ["v2.1.0", "v2.0.1", "v2.0.0"]

    def test_max_patches(self):
        """Only the two newest releases are kept."""
        kept = cap_releases(self.RELEASES, max_patches=2)

        assert [r.tag for r in kept] == ["v2.1.0", "v2.0.1"]

    def test_tightest_limit_wins(self):
        """The limit that cuts first decides."""
        kept = cap_releases(self.RELEASES, max_majors=1, max_patches=5)

        assert [r.tag for r in kept] == ["v2.1.0", "v2.0.1", "v2.0.0"]


class TestWindows:
    """Tests for cutting history into release windows."""

    def test_three_windows(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Unreleased work, each release and a root window."""
        repo = open_repo(released_repo)
        assembler = ChangelogAssembler(repo, config, host_info=NO_HOST)

        windows = assembler.windows()

        assert [(w.to_rev.name, w.from_rev.name if w.from_rev else None) for w in windows] == [
            ("HEAD", "v1.0.1"),
            ("v1.0.1", "v1.0.0"),
            ("v1.0.0", None),
        ]
        assert not windows[0].to_rev.released
        assert windows[1].to_rev.version == Version(1, 0, 1)

    def test_head_on_release(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """A tagged HEAD starts with the release window itself."""
        git_repo.commit("feat: a")
        git_repo.tag("v1.0.0")
        repo = open_repo(git_repo)

        windows = ChangelogAssembler(repo, config, host_info=NO_HOST).windows()

        assert [w.to_rev.name for w in windows] == ["v1.0.0"]
        assert windows[0].from_rev is None

    def test_no_releases(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Untagged history is a single unreleased window."""
        git_repo.commit("feat: a")
        repo = open_repo(git_repo)

        windows = ChangelogAssembler(repo, config, host_info=NO_HOST).windows()

        assert len(windows) == 1
        assert windows[0].to_rev.name == "HEAD"
        assert windows[0].from_rev is None

    def test_capped_windows_end_at_next_release(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo
    ):
        """The newest release cut by a limit bounds the oldest window."""
        config = SemcommitConfig(changelog=ChangelogConfig(max_patches=1))
        repo = open_repo(released_repo)

        windows = ChangelogAssembler(repo, config, host_info=NO_HOST).windows()

        assert [(w.to_rev.name, w.from_rev.name) for w in windows] == [
            ("HEAD", "v1.0.1"),
            ("v1.0.1", "v1.0.0"),
        ]

    def test_prerelease_window(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """A reachable pre-release tag bounds the unreleased window."""
        git_repo.commit("feat: a")
        git_repo.tag("v1.0.0")
        git_repo.commit("feat: b")
        git_repo.tag("v1.1.0-rc.1")
        git_repo.commit("fix: c")
        repo = open_repo(git_repo)

        windows = ChangelogAssembler(repo, config, host_info=NO_HOST).windows()

        assert [w.to_rev.name for w in windows] == ["HEAD", "v1.1.0-rc.1", "v1.0.0"]

    def test_ignore_prereleases(self, git_repo: GitRepoBuilder, open_repo: OpenRepo):
        """Ignored pre-release tags do not start a window of their own."""
        git_repo.commit("feat: a")
        git_repo.tag("v1.0.0")
        git_repo.commit("feat: b")
        git_repo.tag("v1.1.0-rc.1")
        git_repo.commit("fix: c")
        config = SemcommitConfig(version=VersionConfig(ignore_prereleases=True))
        repo = open_repo(git_repo)
        assembler = ChangelogAssembler(repo, config, host_info=NO_HOST)

        windows = assembler.windows()
        contexts = list(assembler.contexts())

        assert [(w.to_rev.name, w.from_rev.name if w.from_rev else None) for w in windows] == [
            ("HEAD", "v1.0.0"),
            ("v1.0.0", None),
        ]
        assert _subjects(contexts[0], "Features") == ["b"]
        assert _subjects(contexts[0], "Fixes") == ["c"]


class TestContexts:
    """Tests for the rendered contexts."""

    def test_end_to_end(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Newest window first; each window only holds its own commits."""
        repo = open_repo(released_repo)

        contexts = list(ChangelogAssembler(repo, config, host_info=NO_HOST).contexts())

        assert [c.version for c in contexts] == ["Unreleased", "v1.0.1", "v1.0.0"]
        assert _subjects(contexts[0], "Features") == ["C"]
        assert _subjects(contexts[1], "Fixes") == ["B"]
        assert _subjects(contexts[2], "Features") == ["A"]
        assert contexts[0].unreleased
        assert contexts[0].current_tag == "HEAD"
        assert contexts[0].previous_tag == "v1.0.1"
        assert contexts[2].previous_tag == ""
        assert contexts[1].is_patch
        assert not contexts[2].is_patch

    def test_release_with_features_and_fixes(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """A release holding a feat and a fix lists both sections in order."""
        git_repo.commit("feat: initial")
        git_repo.tag("v1.0.0")
        git_repo.commit("feat: add search")
        git_repo.commit("fix: handle empty query")
        git_repo.tag("v1.1.0")
        git_repo.commit("fix: trim whitespace")
        git_repo.commit("fix: escape quotes")
        repo = open_repo(git_repo)

        contexts = list(ChangelogAssembler(repo, config, host_info=NO_HOST).contexts())

        assert [c.version for c in contexts] == ["Unreleased", "v1.1.0", "v1.0.0"]
        assert _titles(contexts[0]) == ["Fixes"]
        assert _subjects(contexts[0], "Fixes") == ["escape quotes", "trim whitespace"]
        assert _titles(contexts[1]) == ["Features", "Fixes"]
        assert _subjects(contexts[1], "Features") == ["add search"]
        assert _subjects(contexts[1], "Fixes") == ["handle empty query"]
        assert contexts[1].previous_tag == "v1.0.0"
        assert not contexts[1].is_patch
        assert _subjects(contexts[2], "Features") == ["initial"]

    def test_hidden_sections(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Hidden types only appear when asked for."""
        repo = open_repo(released_repo)
        assembler = ChangelogAssembler(repo, config, host_info=NO_HOST)

        hidden = next(assembler.contexts())
        shown = next(assembler.contexts(include_hidden=True))

        assert _titles(hidden) == ["Features"]
        assert _titles(shown) == ["Features", "Other"]
        assert _subjects(shown, "Other") == ["D"]

    def test_section_order_follows_config(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Sections follow the configured type order, not commit order."""
        git_repo.commit("fix: first")
        git_repo.commit("feat: second")
        repo = open_repo(git_repo)

        context = next(ChangelogAssembler(repo, config, host_info=NO_HOST).contexts())

        assert _titles(context) == ["Features", "Fixes"]

    def test_types_sharing_a_section(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Types with the same section title are merged into one group."""
        git_repo.commit("chore: a")
        git_repo.commit("ci: b")
        repo = open_repo(git_repo)
        assembler = ChangelogAssembler(repo, config, host_info=NO_HOST)

        context = next(assembler.contexts(include_hidden=True))

        assert _titles(context) == ["Other"]
        assert _subjects(context, "Other") == ["b", "a"]

    def test_unknown_types_and_failures_are_left_out(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Unconfigured types and unparsable messages are dropped."""
        git_repo.commit("feat: a")
        git_repo.commit("wip: b")
        git_repo.commit("random message")
        repo = open_repo(git_repo)

        context = next(ChangelogAssembler(repo, config, host_info=NO_HOST).contexts())

        assert _titles(context) == ["Features"]

    def test_breaking_notes(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Breaking footers and ! commits both produce notes."""
        git_repo.commit("feat(api): new endpoint\n\nBREAKING CHANGE: old endpoint removed")
        git_repo.commit("fix!: stricter parsing")
        repo = open_repo(git_repo)

        context = next(ChangelogAssembler(repo, config, host_info=NO_HOST).contexts())

        assert [group.title for group in context.note_groups] == ["BREAKING CHANGE"]
        notes = context.note_groups[0].notes
        assert [(n.scope, n.text) for n in notes] == [
            (None, "stricter parsing"),
            ("api", "old endpoint removed"),
        ]
        breaking = {c.subject: c.breaking for g in context.commit_groups for c in g.commits}
        assert breaking == {"new endpoint": True, "stricter parsing": True}

    def test_skip_empty(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Windows without visible commits can be skipped."""
        released_repo.tag("v1.1.0")
        released_repo.commit("docs: readme")
        repo = open_repo(released_repo)
        assembler = ChangelogAssembler(repo, config, host_info=NO_HOST)

        all_versions = [c.version for c in assembler.contexts()]
        non_empty = [c.version for c in assembler.contexts(skip_empty=True)]

        assert all_versions == ["Unreleased", "v1.1.0", "v1.0.1", "v1.0.0"]
        assert non_empty == ["v1.1.0", "v1.0.1", "v1.0.0"]

    def test_oldest_first(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Windows can be produced oldest release first."""
        repo = open_repo(released_repo)
        assembler = ChangelogAssembler(repo, config, host_info=NO_HOST)

        versions = [c.version for c in assembler.contexts(oldest_first=True)]

        assert versions == ["v1.0.0", "v1.0.1", "Unreleased"]

    def test_unreleased_version(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """A forecast version titles the unreleased window."""
        repo = open_repo(released_repo)
        assembler = ChangelogAssembler(repo, config, host_info=NO_HOST)

        context = next(assembler.contexts(unreleased_version=Version(1, 1, 0)))

        assert context.version == "v1.1.0"
        assert context.current_tag == "v1.1.0"
        assert context.unreleased
        assert not context.is_patch

    def test_unreleased_label_from_config(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo
    ):
        """The unreleased label comes from the configuration."""
        config = SemcommitConfig(changelog=ChangelogConfig(unreleased="Next"))
        repo = open_repo(released_repo)

        context = next(ChangelogAssembler(repo, config, host_info=NO_HOST).contexts())

        assert context.version == "Next"

    def test_paths(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Only commits touching the given paths are listed."""
        git_repo.commit("feat: api", files={"api/a.py": "1"})
        git_repo.commit("feat: web", files={"web/a.js": "1"})
        repo = open_repo(git_repo)
        assembler = ChangelogAssembler(repo, config, host_info=NO_HOST)

        context = next(assembler.contexts(paths=["web"]))

        assert _subjects(context, "Features") == ["web"]

    def test_commit_context(
        self, git_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Commit contexts carry hash, scope, body and footer references."""
        sha = git_repo.commit("fix(core): crash\n\nDetails here.\n\nCloses #12")
        repo = open_repo(git_repo)

        context = next(ChangelogAssembler(repo, config, host_info=NO_HOST).contexts())
        commit = context.commit_groups[0].commits[0]

        assert commit.hash == sha
        assert commit.short_hash == sha[:7]
        assert commit.scope == "core"
        assert commit.body == "Details here."
        assert [(r.action, r.issue) for r in commit.references] == [("Closes", "12")]
        assert context.date == commit.date


class TestLinks:
    """Tests for link flags derived from host info."""

    def test_links_need_a_host(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """Without a host no links are rendered."""
        repo = open_repo(released_repo)

        context = next(ChangelogAssembler(repo, config, host_info=NO_HOST).contexts())

        assert not context.link_compare
        assert not context.link_references

    def test_links_with_host(
        self, released_repo: GitRepoBuilder, open_repo: OpenRepo, config: SemcommitConfig
    ):
        """A known host enables compare and reference links."""
        repo = open_repo(released_repo)

        contexts = list(ChangelogAssembler(repo, config, host_info=GITHUB).contexts())

        assert contexts[0].link_compare
        assert contexts[0].link_references
        assert contexts[0].owner == "octo"
        # The first release has nothing to compare with.
        assert not contexts[-1].link_compare

    def test_links_disabled_in_config(self, released_repo: GitRepoBuilder, open_repo: OpenRepo):
        """Configuration can switch links off even with a host."""
        config = SemcommitConfig(
            changelog=ChangelogConfig(link_compare=False, link_references=False)
        )
        repo = open_repo(released_repo)

        context = next(ChangelogAssembler(repo, config, host_info=GITHUB).contexts())

        assert not context.link_compare
        assert not context.link_references

    @pytest.mark.parametrize(
        "url",
        ["git@github.com:octo/project.git", "https://github.com/octo/project.git"],
    )
    def test_host_from_remote(
        self,
        released_repo: GitRepoBuilder,
        open_repo: OpenRepo,
        config: SemcommitConfig,
        url: str,
    ):
        """Host info is derived from the origin remote."""
        released_repo.git("remote", "add", "origin", url)
        repo = open_repo(released_repo)

        assembler = ChangelogAssembler(repo, config)

        assert assembler.host_info == GITHUB

    def test_configured_host_wins(self, released_repo: GitRepoBuilder, open_repo: OpenRepo):
        """Configured host values take precedence over the remote."""
        released_repo.git("remote", "add", "origin", "git@github.com:octo/project.git")
        config = SemcommitConfig(
            remote=RemoteConfig(host="https://git.example.com", owner="team", repository="tool")
        )
        repo = open_repo(released_repo)

        assembler = ChangelogAssembler(repo, config)

        assert assembler.host_info == HostInfo("https://git.example.com", "team", "tool")
