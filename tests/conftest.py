"""Shared fixtures: in-memory Git platform adapter."""

import base64
import hashlib
from typing import Dict, List, Tuple

import pytest

from forkwatch.adapters.base import ConflictError, GitPlatformAdapter, GitPlatformError
from forkwatch.models import Branch, FileContent, PullRequest, RepositoryMetadata


def _blob_sha(content: str) -> str:
    return hashlib.sha1(content.encode("utf-8")).hexdigest()


class FakeAdapter(GitPlatformAdapter):
    """In-memory platform for one repository; records every write call."""

    def __init__(
        self,
        full_name: str = "octo/widgets",
        is_fork: bool = False,
        parent: str | None = None,
        branches: Dict[str, str] | None = None,
    ) -> None:
        self.metadata = RepositoryMetadata(full_name=full_name, is_fork=is_fork, parent_full_name=parent)
        self.branches: Dict[str, str] = dict(branches if branches is not None else {"main": "sha-main"})
        self.files: Dict[Tuple[str, str], str] = {}
        self.prs: Dict[int, PullRequest] = {}
        self.comments: List[Tuple[int, str]] = []
        self.calls: List[Tuple] = []
        self._next_number = 1

    def add_pr(self, number: int, body: str = "", head: str = "feature", base: str = "main") -> PullRequest:
        pr = PullRequest(
            number=number,
            title=f"PR {number}",
            body=body,
            head_branch=head,
            base_branch=base,
            html_url=f"https://github.com/{self.metadata.full_name}/pull/{number}",
        )
        self.prs[number] = pr
        self._next_number = max(self._next_number, number + 1)
        return pr

    def get_repository(self, repo: str) -> RepositoryMetadata:
        self.calls.append(("get_repository", repo))
        return self.metadata

    def get_branch(self, repo: str, branch: str) -> Branch | None:
        self.calls.append(("get_branch", branch))
        sha = self.branches.get(branch)
        return Branch(name=branch, sha=sha) if sha else None

    def create_branch(self, repo: str, branch: str, sha: str) -> None:
        self.calls.append(("create_branch", branch, sha))
        if branch in self.branches:
            raise ConflictError("422: Reference already exists", status_code=422)
        source = next((name for name, tip in self.branches.items() if tip == sha), None)
        if source is None:
            raise GitPlatformError("422: Object does not exist", status_code=422)
        for (ref, path), content in list(self.files.items()):
            if ref == source:
                self.files[(branch, path)] = content
        self.branches[branch] = sha

    def get_file(self, repo: str, path: str, ref: str) -> FileContent | None:
        self.calls.append(("get_file", path, ref))
        content = self.files.get((ref, path))
        if content is None:
            return None
        return FileContent(path=path, content=content, sha=_blob_sha(content))

    def put_file(
        self,
        repo: str,
        path: str,
        content_b64: str,
        branch: str,
        message: str,
        sha: str | None = None,
    ) -> None:
        self.calls.append(("put_file", path, branch, message, sha))
        current = self.files.get((branch, path))
        if current is not None and sha != _blob_sha(current):
            raise ConflictError(f"409: {path} does not match {sha}", status_code=409)
        self.files[(branch, path)] = base64.b64decode(content_b64).decode("utf-8")

    def create_pr(self, repo: str, title: str, body: str, head: str, base: str) -> PullRequest:
        self.calls.append(("create_pr", title, head, base))
        for pr in self.prs.values():
            if pr.head_branch == head and pr.base_branch == base:
                raise ConflictError(f"422: A pull request already exists for {head}.", status_code=422)
        pr = self.add_pr(self._next_number, body=body, head=head, base=base)
        pr.title = title
        return pr

    def list_open_prs(self, repo: str) -> List[PullRequest]:
        self.calls.append(("list_open_prs",))
        return [pr.model_copy() for pr in self.prs.values() if pr.state == "open"]

    def update_pr_body(self, repo: str, pr_number: int, body: str) -> None:
        self.calls.append(("update_pr_body", pr_number, body))
        self.prs[pr_number].body = body

    def create_comment(self, repo: str, issue_number: int, body: str) -> None:
        self.calls.append(("create_comment", issue_number, body))
        self.comments.append((issue_number, body))

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_adapter_factory():
    """Build a FakeAdapter with the given constructor arguments."""
    return FakeAdapter
