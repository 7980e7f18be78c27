"""Git backend built on the ``git`` command line.

Every query is a ``git`` subprocess run in the repository directory. The
history walk streams ``git log`` output, so commits are produced one at a
time and a walk that is abandoned early stops the subprocess.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from semcommit.exceptions import GitError, RepositoryNotFoundError, RevisionNotFoundError
from semcommit.vcs.base import Commit

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

logger = logging.getLogger(__name__)

FIELD_SEP = "\x1f"
RECORD_SEP = "\x00"
# sha, parents, author name, author email, committer date (ISO 8601), raw body
LOG_FORMAT = FIELD_SEP.join(["%H", "%P", "%an", "%ae", "%cI", "%B"])
READ_CHUNK = 64 * 1024


def _parse_record(record: str) -> Commit:
    sha, parents, author_name, author_email, date, message = record.split(FIELD_SEP, 5)
    return Commit(
        sha=sha.strip(),
        message=message,
        author_name=author_name,
        author_email=author_email,
        date=datetime.fromisoformat(date),
        parents=tuple(parents.split()),
    )


class GitRepository:
    """A git repository accessed through the ``git`` executable.

    Args:
        path: Any directory inside the working tree

    Raises:
        RepositoryNotFoundError: If ``path`` is not inside a git repository
    """

    def __init__(self, path: Path | str | None = None) -> None:
        start = Path(path) if path is not None else Path.cwd()
        try:
            toplevel = self._git(start, "rev-parse", "--show-toplevel")
        except GitError as e:
            raise RepositoryNotFoundError(f"Not a git repository: {start}", e.stderr) from e
        self.path = Path(toplevel.strip())

    @staticmethod
    def _git(cwd: Path, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"git {args[0]} failed with exit code {e.returncode}", e.stderr) from e
        return result.stdout

    def _run(self, *args: str) -> str:
        return self._git(self.path, *args)

    def revparse_single(self, spec: str) -> Commit:
        try:
            sha = self._run("rev-parse", "--verify", "--quiet", f"{spec}^{{commit}}")
        except GitError as e:
            raise RevisionNotFoundError(spec, e.stderr) from e
        output = self._run("log", "-1", "-z", f"--format={LOG_FORMAT}", sha.strip(), "--")
        return _parse_record(output.rstrip(RECORD_SEP))

    def iter_commits(
        self,
        start: str,
        hide: Iterable[str] = (),
        first_parent: bool = False,
    ) -> Iterator[Commit]:
        args = ["git", "log", "-z", f"--format={LOG_FORMAT}"]
        if first_parent:
            args.append("--first-parent")
        args.append(start)
        args.extend(f"^{sha}" for sha in hide)
        args.append("--")
        logger.debug("Running %s", " ".join(args))

        # stderr is spooled to a file, only stdout is a pipe
        with tempfile.TemporaryFile(mode="w+", encoding="utf-8", errors="replace") as errors:
            try:
                proc = subprocess.Popen(
                    args,
                    cwd=self.path,
                    stdout=subprocess.PIPE,
                    stderr=errors,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                )
            except FileNotFoundError as e:
                raise GitError("git executable not found") from e

            stdout = proc.stdout
            if stdout is None:
                proc.kill()
                raise GitError("git log produced no output stream")
            finished = False
            try:
                pending = ""
                while chunk := stdout.read(READ_CHUNK):
                    pending += chunk
                    *records, pending = pending.split(RECORD_SEP)
                    for record in records:
                        yield _parse_record(record)
                if pending.strip():
                    yield _parse_record(pending)
                finished = True
            finally:
                if not finished:
                    proc.kill()
                stdout.close()
                returncode = proc.wait()
            if returncode != 0:
                errors.seek(0)
                raise GitError(f"git log failed with exit code {returncode}", errors.read())

    def commit_touches_paths(self, commit: Commit, paths: Sequence[str]) -> bool:
        if commit.is_root:
            comparisons = [["--root", commit.sha]]
        else:
            comparisons = [[parent, commit.sha] for parent in commit.parents]

        for revisions in comparisons:
            result = subprocess.run(
                ["git", "diff-tree", "--quiet", "-r", *revisions, "--", *paths],
                capture_output=True,
                text=True,
                cwd=self.path,
            )
            if result.returncode == 1:
                return True
            if result.returncode != 0:
                raise GitError(
                    f"git diff-tree failed with exit code {result.returncode}", result.stderr
                )
        return False

    def tag_targets(self, pattern: str) -> list[tuple[str, str]]:
        fmt = "%00".join(
            [
                "%(refname:strip=2)",
                "%(objecttype)",
                "%(objectname)",
                "%(*objecttype)",
                "%(*objectname)",
            ]
        )
        output = self._run("for-each-ref", f"--format={fmt}", f"refs/tags/{pattern}")
        targets = []
        for line in output.splitlines():
            if not line:
                continue
            name, obj_type, obj_sha, peeled_type, peeled_sha = line.split(RECORD_SEP)
            if obj_type == "commit":
                targets.append((name, obj_sha))
            elif peeled_type == "commit":
                targets.append((name, peeled_sha))
            else:
                logger.debug("Skipping tag %s, it does not point to a commit", name)
        return targets

    def remote_url(self, name: str = "origin") -> str | None:
        result = subprocess.run(
            ["git", "config", "--get", f"remote.{name}.url"],
            capture_output=True,
            text=True,
            cwd=self.path,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None
