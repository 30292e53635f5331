"""Repository source client - the only layer that talks to the network.

``RepositorySourceClient`` is the capability the pipeline depends on;
``GitHubSourceClient`` implements it against the GitHub REST API.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from .config import GITHUB_API_URL, REQUEST_TIMEOUT
from .models import (
    CommitRecord,
    CommitStats,
    DirectoryEntry,
    RepoIdentity,
    RepositoryMetadata,
    Signature,
)

BRANCH_PAGE_SIZE = 100
MAX_BRANCH_PAGES = 10  # 1000 branches max


class SourceError(Exception):
    """Error fetching data from the repository host."""


class NotFoundError(SourceError):
    """The requested repository, branch, path or commit does not exist."""


class TransientSourceError(SourceError):
    """Network failure, server error or rate limit; retrying later may succeed."""


class RepositorySourceClient(Protocol):
    def get_metadata(self, identity: RepoIdentity) -> RepositoryMetadata: ...

    def list_branches(self, identity: RepoIdentity) -> list[str]: ...

    def list_directory(
        self, identity: RepoIdentity, path: str, branch: str
    ) -> list[DirectoryEntry]: ...

    def fetch_content(self, ref: str) -> str: ...

    def list_commits(
        self, identity: RepoIdentity, page: int, page_size: int
    ) -> list[CommitRecord]: ...

    def fetch_commit_stats(self, identity: RepoIdentity, sha: str) -> CommitStats: ...


def api_url_for_host(host: str) -> str:
    """REST endpoint for github.com or a GitHub Enterprise host."""
    if host.lower() in ("github.com", "www.github.com"):
        return GITHUB_API_URL
    return f"https://{host}/api/v3"


class GitHubSourceClient:
    """Client for the GitHub REST API (v3)."""

    def __init__(
        self,
        base_url: str = GITHUB_API_URL,
        token: str | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(timeout=timeout, headers=headers, follow_redirects=True)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubSourceClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        try:
            resp = self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise TransientSourceError(f"Request timed out: {url}") from e
        except httpx.HTTPError as e:
            raise TransientSourceError(f"Request failed: {url}: {e}") from e

        if resp.status_code == 404:
            raise NotFoundError(f"Not found: {url}")
        if resp.status_code != 200:
            raise TransientSourceError(
                f"GitHub returned {resp.status_code} for {url}: {resp.text[:200]}"
            )
        return resp

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        resp = self._get(f"{self.base_url}{path}", params=params)
        try:
            return resp.json()
        except ValueError as e:
            raise TransientSourceError(f"Invalid JSON from {path}") from e

    def get_metadata(self, identity: RepoIdentity) -> RepositoryMetadata:
        data = self._get_json(f"/repos/{identity.full_name}")
        parent = data.get("parent") or {}
        return RepositoryMetadata(
            is_fork=bool(data.get("fork")),
            parent_full_name=parent.get("full_name"),
            parent_url=parent.get("html_url"),
        )

    def list_branches(self, identity: RepoIdentity) -> list[str]:
        names: list[str] = []
        for page in range(1, MAX_BRANCH_PAGES + 1):
            data = self._get_json(
                f"/repos/{identity.full_name}/branches",
                {"page": page, "per_page": BRANCH_PAGE_SIZE},
            )
            names.extend(b["name"] for b in data if b.get("name"))
            if len(data) < BRANCH_PAGE_SIZE:
                break
        return names

    def list_directory(
        self, identity: RepoIdentity, path: str, branch: str
    ) -> list[DirectoryEntry]:
        data = self._get_json(
            f"/repos/{identity.full_name}/contents/{path}".rstrip("/"),
            {"ref": branch},
        )
        items = data if isinstance(data, list) else [data]
        return [
            DirectoryEntry(
                name=item.get("name", ""),
                path=item.get("path", ""),
                kind=item.get("type", "file"),
                size=item.get("size") or 0,
                content_ref=item.get("download_url"),
            )
            for item in items
        ]

    def fetch_content(self, ref: str) -> str:
        return self._get(ref).text

    def list_commits(
        self, identity: RepoIdentity, page: int, page_size: int
    ) -> list[CommitRecord]:
        data = self._get_json(
            f"/repos/{identity.full_name}/commits",
            {"page": page, "per_page": page_size},
        )
        return [_commit_from_payload(item) for item in data]

    def fetch_commit_stats(self, identity: RepoIdentity, sha: str) -> CommitStats:
        data = self._get_json(f"/repos/{identity.full_name}/commits/{sha}")
        stats = data.get("stats") or {}
        return CommitStats(
            additions=stats.get("additions", 0),
            deletions=stats.get("deletions", 0),
            total=stats.get("total", 0),
        )


def _signature(data: dict[str, Any] | None) -> Signature:
    data = data or {}
    return Signature(
        name=data.get("name", ""),
        email=data.get("email", ""),
        timestamp=data.get("date", ""),
    )


def _commit_from_payload(item: dict[str, Any]) -> CommitRecord:
    commit = item.get("commit", {})
    return CommitRecord(
        sha=item["sha"],
        message=commit.get("message", ""),
        author=_signature(commit.get("author")),
        committer=_signature(commit.get("committer")),
        source_url=item.get("html_url", ""),
    )
