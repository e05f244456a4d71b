"""Fork detection for the current repository."""

import logging
from typing import AbstractSet

from forkwatch.adapters.base import GitPlatformAdapter, GitPlatformError
from forkwatch.models import ForkStatus


class ForkInspector:
    """Determines fork status of a repository, honoring an exclusion list.

    Read-only. Metadata fetch failures (GitPlatformError) propagate.
    """

    def __init__(self, adapter: GitPlatformAdapter, log: logging.Logger | None = None) -> None:
        self._adapter = adapter
        self._log = log or logging.getLogger("forkwatch.inspector")

    def evaluate(self, repository_full_name: str, excluded: AbstractSet[str] = frozenset()) -> ForkStatus:
        """Return the parent of a non-excluded fork, else an empty status.

        An excluded repository is treated as untracked even when it is a
        fork.
        """
        self._log.info("Fetching fork parent repo info for: %s", repository_full_name)
        metadata = self._adapter.get_repository(repository_full_name)

        if not metadata.is_fork:
            self._log.info("Repo is not a fork.")
            return ForkStatus.empty()

        if not metadata.parent_full_name:
            raise GitPlatformError(f"Repository {repository_full_name} is a fork but has no parent")
        self._log.info("Repo is a fork. Parent repo: %s", metadata.parent_full_name)
        if repository_full_name in excluded:
            self._log.info("Repo %s is in the exclusion list, treating as not a fork", repository_full_name)
            return ForkStatus.empty()
        return ForkStatus.of_parent(metadata.parent_full_name)
