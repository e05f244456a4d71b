"""Data models for repositories, fork status, files and pull requests
(Pydantic)."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class RepositoryIdentity(BaseModel):
    """Repository owner and name (immutable)."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, full_name: str) -> "RepositoryIdentity":
        """Build identity from "owner/name".

        Raises:
            ValueError: If the value is not exactly two non-empty parts.
        """
        parts = (full_name or "").strip().split("/")
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise ValueError(f"Invalid repository name: {full_name!r} (expected owner/name)")
        return cls(owner=parts[0].strip(), name=parts[1].strip())

    def __str__(self) -> str:
        return self.full_name


class RepositoryMetadata(BaseModel):
    """Repository metadata relevant to fork detection."""

    full_name: str
    is_fork: bool = False
    parent_full_name: str | None = None


class ForkStatus(BaseModel):
    """Fork status: empty (not a fork, or excluded) or the parent full name."""

    model_config = ConfigDict(frozen=True)

    parent: str | None = None

    @classmethod
    def empty(cls) -> "ForkStatus":
        return cls()

    @classmethod
    def of_parent(cls, parent_full_name: str) -> "ForkStatus":
        return cls(parent=parent_full_name)

    @property
    def is_empty(self) -> bool:
        return self.parent is None

    def to_file_content(self) -> str:
        """Serialize to status file content: ``{}`` or ``{"parent": "..."}``."""
        if self.parent is None:
            return "{}"
        return '{"parent": "%s"}' % self.parent


class Branch(BaseModel):
    """Branch and its tip commit."""

    name: str
    sha: str


class FileContent(BaseModel):
    """File on a branch; sha is the blob revision used for updates."""

    path: str
    content: str = ""
    sha: str


class PullRequest(BaseModel):
    """Pull request."""

    number: int
    title: str = ""
    body: str = ""
    head_branch: str = ""
    base_branch: str = ""
    state: str = "open"
    html_url: str | None = None


class ReconcileResult(BaseModel):
    """Outcome of reconciling the fork status pull request.

    Exactly one of pull_request and error is set.
    """

    pull_request: PullRequest | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.pull_request is not None and self.error is None

    @classmethod
    def success(cls, pull_request: PullRequest) -> "ReconcileResult":
        return cls(pull_request=pull_request)

    @classmethod
    def failure(cls, error: str) -> "ReconcileResult":
        return cls(error=error)


class RunResult(BaseModel):
    """Terminal status of one run."""

    success: bool
    message: str
    fork_status: ForkStatus = Field(default_factory=ForkStatus.empty)
    pr_url: str | None = None
    pr_number: int | None = None
    linked_prs: List[int] = Field(default_factory=list)
