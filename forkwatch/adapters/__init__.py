"""Git platform adapters (base and implementations)."""

from forkwatch.adapters.base import ConflictError, GitPlatformAdapter, GitPlatformError
from forkwatch.adapters.github import GitHubAdapter

__all__ = ["ConflictError", "GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
