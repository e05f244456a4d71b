"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import List

from forkwatch.models import Branch, FileContent, PullRequest, RepositoryMetadata


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConflictError(GitPlatformError):
    """Raised when the platform rejects a write as conflicting (409, 422).

    E.g. a pull request already exists for the branch pair, or the file
    revision changed since it was read.
    """

    pass


class GitPlatformAdapter(ABC):
    """Abstract interface for Git hosting platforms.

    Repositories are addressed by full name ("owner/name"). Lookups
    return None when the object does not exist; every other failure
    raises GitPlatformError.
    """

    @abstractmethod
    def get_repository(self, repo: str) -> RepositoryMetadata:
        """Fetch repository metadata (fork flag and parent)."""
        ...

    @abstractmethod
    def get_branch(self, repo: str, branch: str) -> Branch | None:
        """Fetch branch tip, or None if the branch does not exist."""
        ...

    @abstractmethod
    def create_branch(self, repo: str, branch: str, sha: str) -> None:
        """Create a branch pointing at the given commit."""
        ...

    @abstractmethod
    def get_file(self, repo: str, path: str, ref: str) -> FileContent | None:
        """Fetch a file on ref, or None if it does not exist."""
        ...

    @abstractmethod
    def put_file(
        self,
        repo: str,
        path: str,
        content_b64: str,
        branch: str,
        message: str,
        sha: str | None = None,
    ) -> None:
        """Create or update a file; sha is required to update an existing
        one."""
        ...

    @abstractmethod
    def create_pr(
        self,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> PullRequest:
        """Create a pull request."""
        ...

    @abstractmethod
    def list_open_prs(self, repo: str) -> List[PullRequest]:
        """List all open pull requests."""
        ...

    @abstractmethod
    def update_pr_body(self, repo: str, pr_number: int, body: str) -> None:
        """Replace the body of a pull request."""
        ...

    @abstractmethod
    def create_comment(self, repo: str, issue_number: int, body: str) -> None:
        """Post a comment on an issue or pull request."""
        ...
