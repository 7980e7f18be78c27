"""Exception hierarchy for semcommit.

All errors raised by the package derive from :class:`SemcommitError`.

Three families matter to callers:

- :class:`CommitParseError` and its subclasses describe a single commit
  message that does not follow the conventional commit grammar. They are
  recoverable: a history walk reports them next to the offending commit
  and carries on.
- :class:`GitError` and its subclasses are raised when the repository
  cannot be opened or queried. They abort the current operation.
- :class:`ConfigError` and :class:`TemplateError` are raised while the
  configuration or the changelog templates are loaded.
"""

from __future__ import annotations


class SemcommitError(Exception):
    """Base class for all semcommit errors."""


# =============================================================================
# Commit parsing
# =============================================================================


class CommitParseError(SemcommitError):
    """A commit message does not follow the conventional commit grammar."""

    reason = "invalid commit message"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


class EmptyCommitMessageError(CommitParseError):
    reason = "commit message is empty"


class InvalidFirstLineError(CommitParseError):
    reason = "first line does not match `<type>[optional scope]: <description>`"


class NoTypeError(CommitParseError):
    reason = "first line does not contain a <type>"


class NoDescriptionError(CommitParseError):
    reason = "first line does not contain a <description>"


class InvalidScopeError(CommitParseError):
    """The scope does not match the configured scope pattern."""

    def __init__(self, scope: str, pattern: str) -> None:
        self.scope = scope
        self.pattern = pattern
        super().__init__(f"scope `{scope}` does not match the pattern `{pattern}`")


class InvalidTypeError(CommitParseError):
    """The type is not one of the configured commit types."""

    def __init__(self, commit_type: str) -> None:
        self.commit_type = commit_type
        super().__init__(f"wrong type: {commit_type}")


# =============================================================================
# Repository access
# =============================================================================


class GitError(SemcommitError):
    """A git query failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class RepositoryNotFoundError(GitError):
    """The path is not inside a git repository."""


class RevisionNotFoundError(GitError):
    """A revision expression does not resolve to a commit."""

    def __init__(self, revision: str, stderr: str | None = None) -> None:
        self.revision = revision
        super().__init__(f"Unknown revision `{revision}`", stderr=stderr)


# =============================================================================
# Configuration and rendering
# =============================================================================


class ConfigError(SemcommitError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """The requested configuration file does not exist."""


class ConfigValidationError(ConfigError):
    """The configuration file has invalid content."""


class TemplateError(SemcommitError):
    """A changelog template could not be loaded or rendered."""


class InvalidVersionError(SemcommitError, ValueError):
    """A string is not a valid semantic version."""
