"""Point every other open pull request at the fork status pull request."""

import logging
from typing import List

from forkwatch.adapters.base import GitPlatformAdapter
from forkwatch.annotations import (
    block_annotation,
    blocked_comment,
    find_block_annotations,
    rewrite_block_annotation,
)
from forkwatch.models import RepositoryIdentity


class PrDependencyLinker:
    """Rewrites the block annotation of open pull requests.

    Pull requests are processed in ascending number order. The first
    GitPlatformError aborts the loop and propagates; bodies and comments
    already written stay as they are.
    """

    def __init__(self, adapter: GitPlatformAdapter, log: logging.Logger | None = None) -> None:
        self._adapter = adapter
        self._log = log or logging.getLogger("forkwatch.linker")

    def relink(self, repository: RepositoryIdentity, canonical_pr_number: int) -> List[int]:
        """Annotate all open pull requests except the canonical one as
        blocked by it.

        Returns:
            Numbers of the pull requests that were updated.
        """
        repo = repository.full_name
        prs = sorted(self._adapter.list_open_prs(repo), key=lambda p: p.number)
        comment = blocked_comment(canonical_pr_number)
        updated: List[int] = []

        for pr in prs:
            if pr.number == canonical_pr_number:
                continue
            existing = find_block_annotations(pr.body)
            if existing:
                self._log.info("PR #%s: replacing %s with %s", pr.number, existing[0], block_annotation(canonical_pr_number))
            else:
                self._log.info("PR #%s: no block annotation, appending one", pr.number)

            new_body = rewrite_block_annotation(pr.body, canonical_pr_number)
            self._adapter.update_pr_body(repo, pr.number, new_body)
            self._log.info("Updated PR #%s body.", pr.number)

            self._adapter.create_comment(repo, pr.number, comment)
            updated.append(pr.number)

        self._log.info("Linked %d PR(s) to #%s", len(updated), canonical_pr_number)
        return updated
