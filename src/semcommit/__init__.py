"""semcommit: conventional commits, semantic versions and changelogs from git history.

Typical use::

    from semcommit.config import load_config
    from semcommit.core.bump import bump_version
    from semcommit.vcs import open_repository

    repo = open_repository(".")
    result = bump_version(repo, load_config())
    print(result.version, result.label)
"""

from __future__ import annotations

__version__ = "0.4.0"

__all__ = ["__version__"]
