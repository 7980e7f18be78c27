"""Changelog rendering with Jinja2.

The default templates ship with the package (``semcommit/templates``). A
custom template directory may override any of them: ``template.md.j2`` is
the entry point and includes ``header.md.j2``, ``commit.md.j2`` and
``footer.md.j2``.

URL formats from the configuration are small templates themselves and use
the conventional-changelog variable names (``host``, ``owner``,
``repository``, ``hash``, ``issue``, ``previousTag``, ``currentTag``,
``user``).
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any

import jinja2

from semcommit.exceptions import TemplateError

if TYPE_CHECKING:
    from typing import TextIO

    from semcommit.config.models import ChangelogConfig
    from semcommit.core.changelog import ChangelogContext, CommitContext
    from semcommit.core.commits import Reference

ENTRY_TEMPLATE = "template.md.j2"


def word_wrap(text: str, line_length: int = 80) -> str:
    """Wrap ``text`` at spaces so lines stay below ``line_length - 2``.

    Words longer than a line are not split.
    """
    lines: list[str] = []
    for word in text.split(" "):
        if lines and len(lines[-1]) + len(word) < line_length - 2:
            lines[-1] = f"{lines[-1]} {word}"
        else:
            lines.append(word)
    return "\n".join(lines)


class ChangelogRenderer:
    """Renders :class:`ChangelogContext` objects to Markdown.

    Args:
        config: Changelog configuration

    Raises:
        TemplateError: If a template or URL format cannot be compiled
    """

    def __init__(self, config: ChangelogConfig) -> None:
        self.config = config
        loaders: list[jinja2.BaseLoader] = []
        if config.template is not None:
            if not config.template.is_dir():
                raise TemplateError(f"Template directory not found: {config.template}")
            loaders.append(jinja2.FileSystemLoader(config.template))
        loaders.append(jinja2.PackageLoader("semcommit", "templates"))

        self.env = jinja2.Environment(
            loader=jinja2.ChoiceLoader(loaders),
            undefined=jinja2.StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        if config.wrap_disabled:
            self.env.filters["word_wrap"] = lambda text: text
        else:
            self.env.filters["word_wrap"] = functools.partial(
                word_wrap, line_length=config.line_length
            )

        try:
            self._template = self.env.get_template(ENTRY_TEMPLATE)
            self._formats = {
                "commit": self.env.from_string(config.commit_url_format),
                "compare": self.env.from_string(config.compare_url_format),
                "issue": self.env.from_string(config.issue_url_format),
                "user": self.env.from_string(config.user_url_format),
                "release": self.env.from_string(config.release_commit_message_format),
            }
        except jinja2.TemplateError as e:
            raise TemplateError(f"Invalid changelog template: {e}") from e

    @staticmethod
    def _url_vars(context: ChangelogContext) -> dict[str, Any]:
        return {
            "host": context.host or "",
            "owner": context.owner or "",
            "repository": context.repository or "",
            "previousTag": context.previous_tag,
            "currentTag": context.current_tag,
        }

    def commit_url(self, context: ChangelogContext, commit: CommitContext) -> str:
        return self._formats["commit"].render(self._url_vars(context), hash=commit.hash)

    def issue_url(self, context: ChangelogContext, reference: Reference) -> str:
        # ``id`` is the conventional-changelog name, ``issue`` its alias
        return self._formats["issue"].render(
            self._url_vars(context),
            id=reference.issue,
            issue=reference.issue,
            prefix=reference.prefix,
        )

    def compare_url(self, context: ChangelogContext) -> str:
        return self._formats["compare"].render(self._url_vars(context))

    def user_url(self, context: ChangelogContext, user: str) -> str:
        return self._formats["user"].render(self._url_vars(context), user=user)

    def release_commit_message(self, context: ChangelogContext) -> str:
        return self._formats["release"].render(self._url_vars(context))

    def references(self, context: ChangelogContext, commit: CommitContext) -> str:
        """Trailer such as ``, closes [#12](...)`` for footer references."""
        parts = []
        for reference in commit.references:
            if reference.action is None:
                continue
            issue = f"{reference.prefix}{reference.issue}"
            if context.link_references:
                issue = f"[{issue}]({self.issue_url(context, reference)})"
            parts.append(f"{reference.action.lower()} {issue}")
        if not parts:
            return ""
        return ", " + ", ".join(parts)

    def render(self, context: ChangelogContext) -> str:
        """Render one release window.

        Raises:
            TemplateError: If rendering fails (e.g. an undefined variable)
        """
        try:
            return self._template.render(
                context=context,
                compare_url=self.compare_url(context) if context.link_compare else "",
                commit_url=functools.partial(self.commit_url, context),
                issue_url=functools.partial(self.issue_url, context),
                user_url=functools.partial(self.user_url, context),
                references=functools.partial(self.references, context),
                release_commit_message=self.release_commit_message(context),
            )
        except jinja2.TemplateError as e:
            raise TemplateError(f"Failed to render changelog for {context.version}: {e}") from e


class ChangelogWriter:
    """Writes a header followed by rendered release windows to a stream."""

    def __init__(self, stream: TextIO, renderer: ChangelogRenderer) -> None:
        self.stream = stream
        self.renderer = renderer

    def write_header(self, header: str) -> None:
        if header:
            self.stream.write(header.rstrip("\n") + "\n\n")

    def write_context(self, context: ChangelogContext) -> None:
        self.stream.write(self.renderer.render(context))
