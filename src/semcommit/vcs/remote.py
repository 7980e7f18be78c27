"""Derive host, owner and repository name from a remote URL."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from semcommit.config.models import RemoteConfig
    from semcommit.vcs.base import Repository

# Schemes that are not browsable; links use https instead.
_NON_WEB_SCHEMES = {"scheme", "ssh", "git", "git+ssh", "ssh+git"}


class HostInfo(NamedTuple):
    host: str | None = None
    owner: str | None = None
    repository: str | None = None


def host_info_from_url(url: str) -> HostInfo:
    """Split a remote URL into web host, owner and repository.

    Handles ``https://host/owner/repo.git`` as well as the scp-like
    ``git@host:owner/repo.git``. Nested groups keep the full owner path,
    e.g. ``group/subgroup``.

    >>> host_info_from_url("git@github.com:octo/project.git")
    HostInfo(host='https://github.com', owner='octo', repository='project')
    """
    if "://" not in url:
        colon = url.find(":")
        if colon != -1:
            if url[colon + 1 : colon + 2].isdigit():
                url = f"scheme://{url}"
            else:
                url = f"scheme://{url[:colon]}/{url[colon + 1:]}"
    parts = urlsplit(url)
    scheme = "https" if parts.scheme in _NON_WEB_SCHEMES else parts.scheme
    host = f"{scheme}://{parts.hostname}" if parts.hostname else None

    path = parts.path.rstrip("/")
    if "/" not in path:
        return HostInfo(host, None, None)
    owner, repository = path.rsplit("/", 1)
    owner = owner.lstrip("/") or None
    repository = repository.removesuffix(".git") or None
    return HostInfo(host, owner, repository)


def resolve_host_info(repo: Repository, remote: RemoteConfig) -> HostInfo:
    """Use the configured host info, or derive it from the remote URL."""
    if remote.is_configured:
        return HostInfo(remote.host, remote.owner, remote.repository)
    url = repo.remote_url(remote.name)
    if url is None:
        return HostInfo()
    return host_info_from_url(url)
