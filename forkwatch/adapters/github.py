"""GitHub API adapter."""

import base64
import binascii
from typing import Any, Callable, Dict, List, TypeVar
from urllib.parse import quote

import requests

from forkwatch.adapters.base import ConflictError, GitPlatformAdapter, GitPlatformError
from forkwatch.models import Branch, FileContent, PullRequest, RepositoryMetadata

# Statuses GitHub uses to reject conflicting writes
_CONFLICT_STATUSES = (409, 422)

T = TypeVar("T")


def _repository_from_api(data: Dict[str, Any]) -> RepositoryMetadata:
    is_fork = bool(data.get("fork"))
    parent = data.get("parent") or {}
    parent_name = parent.get("full_name") if isinstance(parent, dict) else None
    return RepositoryMetadata(
        full_name=data.get("full_name") or "",
        is_fork=is_fork,
        parent_full_name=parent_name if is_fork else None,
    )


def _pr_from_api(data: Dict[str, Any]) -> PullRequest:
    head = data.get("head") or {}
    base = data.get("base") or {}
    return PullRequest(
        number=data["number"],
        title=data.get("title") or "",
        body=data.get("body") or "",
        head_branch=head.get("ref", ""),
        base_branch=base.get("ref", ""),
        state=data.get("state", "open"),
        html_url=data.get("html_url"),
    )


def _decode_content(data: Dict[str, Any]) -> str:
    raw = data.get("content") or ""
    if data.get("encoding", "base64") != "base64":
        return raw
    try:
        return base64.b64decode(raw).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise GitPlatformError(f"Cannot decode content of {data.get('path')!r}: {e}") from e


def _parse(resp: requests.Response, what: str, mapper: Callable[[Any], T]) -> T:
    """Map the JSON body of resp; malformed bodies raise GitPlatformError."""
    try:
        return mapper(resp.json())
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise GitPlatformError(f"Malformed response for {what}: {e!r}") from e


def _branch_from_api(data: Dict[str, Any], branch: str) -> Branch:
    return Branch(name=data.get("name", branch), sha=data["commit"]["sha"])


def _prs_from_api(data: Any) -> List[PullRequest]:
    if not isinstance(data, list):
        raise TypeError(f"expected a list, got {type(data).__name__}")
    return [_pr_from_api(d) for d in data]


class GitHubAdapter(GitPlatformAdapter):
    """GitHub REST API implementation."""

    def __init__(self, token: str, api_url: str = "https://api.github.com", timeout: float = 30) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"Bearer {token}"
        self._session.headers["Accept"] = "application/vnd.github+json"
        self._session.headers["X-GitHub-Api-Version"] = "2022-11-28"
        self._session.headers["User-Agent"] = "forkwatch"

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
        allow_404: bool = False,
    ) -> requests.Response | None:
        """Send request; return None on 404 when allow_404, raise
        GitPlatformError on other errors."""
        try:
            resp = self._session.request(method, self._url(path), params=params, json=json, timeout=self._timeout)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {path} failed: {e}") from e
        if resp.status_code == 404 and allow_404:
            return None
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except (ValueError, AttributeError):
                pass
            error_cls = ConflictError if resp.status_code in _CONFLICT_STATUSES else GitPlatformError
            raise error_cls(f"{resp.status_code}: {msg}", status_code=resp.status_code)
        return resp

    def get_repository(self, repo: str) -> RepositoryMetadata:
        resp = self._request("GET", f"/repos/{repo}")
        return _parse(resp, f"repository {repo}", _repository_from_api)

    def get_branch(self, repo: str, branch: str) -> Branch | None:
        resp = self._request("GET", f"/repos/{repo}/branches/{quote(branch, safe='')}", allow_404=True)
        if resp is None:
            return None
        return _parse(resp, f"branch {branch}", lambda data: _branch_from_api(data, branch))

    def create_branch(self, repo: str, branch: str, sha: str) -> None:
        self._request(
            "POST",
            f"/repos/{repo}/git/refs",
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )

    def get_file(self, repo: str, path: str, ref: str) -> FileContent | None:
        resp = self._request(
            "GET",
            f"/repos/{repo}/contents/{quote(path)}",
            params={"ref": ref},
            allow_404=True,
        )
        if resp is None:
            return None
        data = _parse(resp, f"file {path}", lambda d: d)
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise GitPlatformError(f"{path!r} on {ref!r} is not a file")
        content = _decode_content(data)
        sha = data.get("sha")
        if not sha:
            raise GitPlatformError(f"Malformed response for file {path}: missing sha")
        return FileContent(path=data.get("path", path), content=content, sha=sha)

    def put_file(
        self,
        repo: str,
        path: str,
        content_b64: str,
        branch: str,
        message: str,
        sha: str | None = None,
    ) -> None:
        payload: Dict[str, Any] = {"message": message, "content": content_b64, "branch": branch}
        if sha:
            payload["sha"] = sha
        self._request("PUT", f"/repos/{repo}/contents/{quote(path)}", json=payload)

    def create_pr(
        self,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> PullRequest:
        resp = self._request(
            "POST",
            f"/repos/{repo}/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )
        return _parse(resp, f"pull request in {repo}", _pr_from_api)

    def list_open_prs(self, repo: str) -> List[PullRequest]:
        prs: List[PullRequest] = []
        path: str | None = f"/repos/{repo}/pulls"
        params: Dict[str, Any] | None = {"state": "open", "per_page": 100}
        while path:
            resp = self._request("GET", path, params=params)
            prs.extend(_parse(resp, f"open pull requests of {repo}", _prs_from_api))
            # next page URL already carries the query string
            path = (resp.links or {}).get("next", {}).get("url")
            params = None
        return prs

    def update_pr_body(self, repo: str, pr_number: int, body: str) -> None:
        self._request("PATCH", f"/repos/{repo}/pulls/{pr_number}", json={"body": body})

    def create_comment(self, repo: str, issue_number: int, body: str) -> None:
        self._request("POST", f"/repos/{repo}/issues/{issue_number}/comments", json={"body": body})
