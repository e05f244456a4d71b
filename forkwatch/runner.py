"""
One fork status run: inspect, reconcile the status pull request, link the
other open pull requests.

The run stops after inspection when the repository is not a fork (or is
excluded), and never links when reconciliation fails.
"""

import logging
from typing import AbstractSet

from forkwatch.adapters.base import GitPlatformAdapter, GitPlatformError
from forkwatch.config import ForkStatusConfig
from forkwatch.inspector import ForkInspector
from forkwatch.linker import PrDependencyLinker
from forkwatch.models import RepositoryIdentity, RunResult
from forkwatch.status_pr import ForkStatusPrManager


def run(
    adapter: GitPlatformAdapter,
    repository: RepositoryIdentity,
    excluded: AbstractSet[str] = frozenset(),
    settings: ForkStatusConfig | None = None,
    log: logging.Logger | None = None,
) -> RunResult:
    """Run inspection, reconciliation and linking against repository."""
    logger = log or logging.getLogger("forkwatch.runner")
    logger.info("Action started for repo: %s", repository.full_name)

    try:
        fork_status = ForkInspector(adapter).evaluate(repository.full_name, excluded)
    except GitPlatformError as e:
        logger.error("Fork inspection failed: %s", e)
        return RunResult(success=False, message=f"Action failed with error: {e}")

    if fork_status.is_empty:
        message = "Repository is not a fork or is excluded. No PR created."
        logger.info(message)
        return RunResult(success=True, message=message, fork_status=fork_status)

    logger.info("Creating PR for repo: %s with fork status: %s", repository.full_name, fork_status.to_file_content())
    result = ForkStatusPrManager(adapter, settings).reconcile(repository, fork_status)
    if not result.ok:
        return RunResult(success=False, message=result.error or "Failed to create PR", fork_status=fork_status)

    pr = result.pull_request
    try:
        linked = PrDependencyLinker(adapter).relink(repository, pr.number)
    except GitPlatformError as e:
        logger.error("Failed to update other PRs: %s", e)
        return RunResult(
            success=False,
            message=f"Failed to update other PRs: {e}",
            fork_status=fork_status,
            pr_url=pr.html_url,
            pr_number=pr.number,
        )

    return RunResult(
        success=True,
        message=f"PR created: {pr.html_url}",
        fork_status=fork_status,
        pr_url=pr.html_url,
        pr_number=pr.number,
        linked_prs=linked,
    )
