"""
Keep the fork status branch, status file and pull request in line with the
computed fork status.

Branch and file steps are safe to repeat. Opening the pull request is not:
when one already exists for the branch pair the platform rejects the
request and the run fails.
"""

import base64
import logging

from forkwatch.adapters.base import GitPlatformAdapter, GitPlatformError
from forkwatch.config import ForkStatusConfig
from forkwatch.models import ForkStatus, PullRequest, ReconcileResult, RepositoryIdentity


def encode_status_content(fork_status: ForkStatus) -> str:
    """Base64 status file content for the contents API."""
    return base64.b64encode(fork_status.to_file_content().encode("utf-8")).decode("ascii")


class ForkStatusPrManager:
    """Creates or updates the status branch, file and pull request."""

    def __init__(
        self,
        adapter: GitPlatformAdapter,
        settings: ForkStatusConfig | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._adapter = adapter
        self._settings = settings or ForkStatusConfig()
        self._log = log or logging.getLogger("forkwatch.status_pr")

    @property
    def settings(self) -> ForkStatusConfig:
        return self._settings

    def ensure_branch(self, repository: RepositoryIdentity) -> bool:
        """Create the status branch from the target branch tip if missing.

        An existing branch is left untouched (its tip is never reset).

        Returns:
            True if the branch was created.
        """
        repo = repository.full_name
        branch = self._settings.branch_name
        if self._adapter.get_branch(repo, branch) is not None:
            self._log.info("Branch %s already exists.", branch)
            return False

        self._log.info("Branch %s does not exist. Creating new branch.", branch)
        target = self._adapter.get_branch(repo, self._settings.target_branch)
        if target is None:
            raise GitPlatformError(f"Target branch {self._settings.target_branch!r} not found in {repo}")
        self._adapter.create_branch(repo, branch, target.sha)
        self._log.info("Branch %s created successfully from %s (%s).", branch, self._settings.target_branch, target.sha)
        return True

    def write_status_file(self, repository: RepositoryIdentity, fork_status: ForkStatus) -> None:
        """Commit the status file to the status branch.

        When the file already exists its blob sha is sent so the commit
        applies as an update of that revision.
        """
        repo = repository.full_name
        s = self._settings
        existing = self._adapter.get_file(repo, s.status_file, s.branch_name)
        sha = existing.sha if existing is not None else None
        if existing is not None and existing.content == fork_status.to_file_content():
            self._log.debug("%s already contains %s, committing anyway", s.status_file, existing.content)
        self._adapter.put_file(
            repo,
            s.status_file,
            encode_status_content(fork_status),
            s.branch_name,
            s.commit_message,
            sha=sha,
        )
        self._log.info("Committed %s to %s: %s", s.status_file, s.branch_name, fork_status.to_file_content())

    def open_pull_request(self, repository: RepositoryIdentity) -> PullRequest:
        """Open the status pull request from the status branch into the
        target branch."""
        s = self._settings
        pr = self._adapter.create_pr(
            repository.full_name,
            title=s.pr_title,
            body=s.pr_body,
            head=s.branch_name,
            base=s.target_branch,
        )
        self._log.info("PR created: %s", pr.html_url)
        return pr

    def reconcile(self, repository: RepositoryIdentity, fork_status: ForkStatus) -> ReconcileResult:
        """Ensure branch, status file and pull request.

        Platform errors are logged and returned as a failed result; the
        caller must not link other pull requests in that case.
        """
        if fork_status.is_empty:
            return ReconcileResult.failure("Fork status is empty; nothing to reconcile")

        self._log.info("Starting PR creation process for %s", repository.full_name)
        try:
            self.ensure_branch(repository)
            self.write_status_file(repository, fork_status)
            pr = self.open_pull_request(repository)
        except GitPlatformError as e:
            self._log.error("Failed to create PR: %s", e)
            return ReconcileResult.failure(f"Failed to create PR: {e}")
        return ReconcileResult.success(pr)
