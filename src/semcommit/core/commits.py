"""Conventional commit parsing.

Implements the grammar of `Conventional Commits 1.0.0
<https://www.conventionalcommits.org/en/v1.0.0/>`_::

    <type>[(<scope>)][!]: <description>

    [body]

    [footer(s)]

A footer is ``Token: value`` or ``Token #value``. ``BREAKING CHANGE`` is
the only token allowed to contain a space and, together with its synonym
``BREAKING-CHANGE``, the only one that is case-sensitive. A footer value
continues over the following lines until the next valid footer starts.

Parsing is pure: no I/O, no logging.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from semcommit.config.models import DEFAULT_SCOPE_REGEX
from semcommit.exceptions import (
    EmptyCommitMessageError,
    InvalidFirstLineError,
    InvalidScopeError,
    NoDescriptionError,
    NoTypeError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from semcommit.config.models import CommitsConfig

FIRST_LINE_PATTERN = re.compile(
    r"^(?P<type>[a-zA-Z]*)"
    r"(?:\((?P<scope>[^()\r\n]*)\))?"
    r"(?P<breaking>!)?"
    r":(?:\x20(?P<desc>.*))?$"
)

FOOTER_PATTERN = re.compile(
    r"^(?:(?P<key>BREAKING[\x20-]CHANGE|[a-zA-Z]+(?:-[a-zA-Z]+)*):\x20"
    r"|(?P<ref>[a-zA-Z]+(?:-[a-zA-Z]+)*)\x20\#)"
    r"(?P<value>.+)$"
)

REVERT_MARKER = 'Revert "'


class FooterKey(StrEnum):
    """Normalized footer tokens."""

    BREAKING_CHANGE = "BREAKING CHANGE"


def normalize_footer_key(token: str) -> FooterKey | str:
    """Map ``BREAKING CHANGE`` and ``BREAKING-CHANGE`` to one key."""
    if token in ("BREAKING CHANGE", "BREAKING-CHANGE"):
        return FooterKey.BREAKING_CHANGE
    return token


@dataclass(frozen=True)
class Footer:
    key: FooterKey | str
    value: str

    @property
    def is_breaking(self) -> bool:
        return self.key == FooterKey.BREAKING_CHANGE


@dataclass(frozen=True)
class Reference:
    """An issue reference such as ``#42``.

    Attributes:
        action: Footer token the reference was found under (``Closes``),
            or ``None`` when found in the description or body
        prefix: The issue prefix that matched, e.g. ``#``
        issue: The issue number
    """

    action: str | None
    prefix: str
    issue: str


@dataclass(frozen=True)
class ConventionalCommit:
    """A parsed conventional commit message."""

    type: str
    description: str
    scope: str | None = None
    breaking: bool = False
    body: str | None = None
    footers: tuple[Footer, ...] = ()
    references: tuple[Reference, ...] = field(default=())

    @property
    def is_breaking(self) -> bool:
        """True for a ``!`` marker or any breaking-change footer."""
        return self.breaking or any(footer.is_breaking for footer in self.footers)

    @property
    def breaking_footers(self) -> list[Footer]:
        return [footer for footer in self.footers if footer.is_breaking]


def build_reference_pattern(issue_prefixes: Iterable[str]) -> re.Pattern[str]:
    """Build the pattern matching ``<prefix><digits>`` for the given prefixes."""
    # Longest first so `GH-` wins over `G` style overlaps.
    prefixes = sorted(set(issue_prefixes), key=len, reverse=True)
    alternatives = "|".join(re.escape(prefix) for prefix in prefixes)
    return re.compile(rf"(?<![\w])(?P<prefix>{alternatives})(?P<issue>[0-9]+)\b")


class CommitParser:
    """Parses raw commit messages into :class:`ConventionalCommit` objects.

    Args:
        scope_regex: Pattern every scope must match
        strip_regex: Pattern whose match at the start of a message is
            removed before parsing (e.g. merge request boilerplate)
        issue_prefixes: Symbols that introduce an issue reference
    """

    def __init__(
        self,
        scope_regex: str = DEFAULT_SCOPE_REGEX,
        strip_regex: str = "",
        issue_prefixes: Sequence[str] = ("#",),
    ) -> None:
        self.scope_regex = scope_regex
        self._scope_pattern = re.compile(scope_regex)
        self._strip_pattern = re.compile(strip_regex) if strip_regex else None
        self._reference_pattern = build_reference_pattern(issue_prefixes or ("#",))

    @classmethod
    def from_config(cls, config: CommitsConfig) -> CommitParser:
        return cls(
            scope_regex=config.scope_regex,
            strip_regex=config.strip_regex,
            issue_prefixes=config.issue_prefixes,
        )

    def strip(self, message: str) -> str:
        if self._strip_pattern is None:
            return message
        match = self._strip_pattern.match(message)
        if match:
            return message[match.end() :]
        return message

    def parse(self, message: str) -> ConventionalCommit:
        """Parse a commit message.

        Args:
            message: The full commit message

        Returns:
            The parsed commit

        Raises:
            EmptyCommitMessageError: If nothing is left after stripping
            InvalidFirstLineError: If the first line is not ``type: desc``
            NoTypeError: If the type is missing
            NoDescriptionError: If the description is missing
            InvalidScopeError: If the scope does not match the scope regex
        """
        message = self.strip(message)
        if not message.strip():
            raise EmptyCommitMessageError()

        first_line, *lines = message.splitlines()
        match = FIRST_LINE_PATTERN.match(first_line)
        if not match:
            raise InvalidFirstLineError()

        commit_type = match.group("type")
        description = match.group("desc") or ""
        if not commit_type:
            raise NoTypeError()
        if not description.strip():
            raise NoDescriptionError()

        scope = match.group("scope")
        if scope is not None and not self._scope_pattern.search(scope):
            raise InvalidScopeError(scope, self.scope_regex)

        references = self._references(description, action=None)
        body_lines: list[str] = []
        # (key, value lines) of the footers seen so far
        footers: list[tuple[FooterKey | str, list[str]]] = []

        for line in lines:
            footer_match = FOOTER_PATTERN.match(line)
            if footer_match:
                token = footer_match.group("key") or footer_match.group("ref")
                key = normalize_footer_key(token)
                value = footer_match.group("value")
                footers.append((key, [value]))
                if footer_match.group("ref"):
                    # `Refs #133`: the separator is the issue prefix.
                    references.extend(self._references(f"#{value}", action=str(key)))
                else:
                    references.extend(self._references(value, action=str(key)))
            elif footers:
                footers[-1][1].append(line)
                references.extend(self._references(line, action=str(footers[-1][0])))
            else:
                body_lines.append(line)
                references.extend(self._references(line, action=None))

        body = "\n".join(body_lines).strip() or None

        return ConventionalCommit(
            type=commit_type.lower(),
            scope=scope,
            breaking=match.group("breaking") is not None,
            description=description,
            body=body,
            footers=tuple(Footer(key, "\n".join(value).rstrip()) for key, value in footers),
            references=tuple(references),
        )

    def _references(self, text: str, action: str | None) -> list[Reference]:
        return [
            Reference(action=action, prefix=m.group("prefix"), issue=m.group("issue"))
            for m in self._reference_pattern.finditer(text)
        ]


def parse_commit(message: str, config: CommitsConfig | None = None) -> ConventionalCommit:
    """Parse ``message`` with a parser built from ``config`` (or defaults)."""
    parser = CommitParser.from_config(config) if config is not None else CommitParser()
    return parser.parse(message)


def is_revert(message: str) -> bool:
    """True for messages generated by ``git revert``."""
    return message.startswith(REVERT_MARKER)
