"""Determine which forge repository the current checkout refers to."""

import re
from typing import Any, Optional

from ..utils.rich_logger import get_logger
from .gateway import ApiGateway
from .git import Remote, VersionControlQuery
from .errors import RemoteNotFoundError

logger = get_logger(__name__)

DEFAULT_HOST = "github.com"
FETCH_DIRECTION = "(fetch)"


def remote_pattern(host: str) -> re.Pattern:
    """
    Build the pattern that extracts `owner/name` from a remote URL.

    Matches both `git@host:owner/name.git` and `https://host/owner/name.git`,
    with or without the `.git` suffix.
    """
    return re.compile(rf"{re.escape(host)}[:/]+(?P<repo>[^/\s]+/[^/\s]+?)(?:\.git)?/?$")


def repository_from_url(url: str, host: str = DEFAULT_HOST) -> Optional[str]:
    """Extract `owner/name` from a remote URL, or None if it is not on `host`."""
    match = remote_pattern(host).search(url)
    return match.group("repo") if match else None


class RemoteResolver:
    """
    Resolves the canonical upstream repository identifier.

    Contributors usually have a remote pointing at their own fork, while
    pull requests live on the upstream repository, so a fork always resolves
    to its parent.
    """

    def __init__(
        self,
        gateway: ApiGateway,
        vcs: VersionControlQuery,
        host: str = DEFAULT_HOST,
        override: Optional[str] = None,
        debug: bool = False,
    ):
        """
        Initialize RemoteResolver.

        Args:
            gateway: API gateway used to fetch repository metadata
            vcs: Source of local remotes
            host: Forge hostname remotes must reference
            override: Repository identifier used instead of remote discovery
            debug: Log resolution steps
        """
        self.gateway = gateway
        self.vcs = vcs
        self.host = host
        self.override = override
        self.debug = debug

    def find_candidate(self) -> str:
        """
        Find the repository named by the override or the first forge remote.

        No network access happens here.

        Raises:
            RemoteNotFoundError: If no candidate can be found
        """
        if self.override:
            self._trace("Using repository override", repo=self.override)
            return self.override

        for remote in self.vcs.remotes():
            repo = self._candidate_from_remote(remote)
            if repo:
                self._trace("Found forge remote", remote=remote.name, repo=repo)
                return repo

        raise RemoteNotFoundError("No valid GitHub remote repo found.")

    def _candidate_from_remote(self, remote: Remote) -> Optional[str]:
        if remote.direction != FETCH_DIRECTION:
            return None
        if self.host not in remote.url:
            return None
        return repository_from_url(remote.url, self.host)

    def resolve(self) -> str:
        """
        Resolve the repository to operate on.

        Returns:
            `owner/name` of the candidate, or of its parent if it is a fork

        Raises:
            RemoteNotFoundError: If no candidate exists or its metadata is unusable
        """
        repo = self.find_candidate()
        repo_url = self.gateway.build_url(f"repos/{repo}")
        metadata: Any = self.gateway.read(repo_url)
        if not isinstance(metadata, dict):
            raise RemoteNotFoundError(f"Unable to fetch repo information for {repo_url}.")

        if metadata.get("fork"):
            parent = (metadata.get("parent") or {}).get("full_name")
            if not parent:
                raise RemoteNotFoundError(f"Repository {repo} is a fork but has no parent information.")
            self._trace("Repository is a fork, using parent", fork=repo, parent=parent)
            return parent

        return repo

    def _trace(self, message: str, **kwargs) -> None:
        if self.debug:
            logger.info(message, **kwargs)
