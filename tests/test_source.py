"""Tests for the GitHub source client."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from vibecheck_cli.models import RepoIdentity
from vibecheck_cli.source import (
    GitHubSourceClient,
    NotFoundError,
    TransientSourceError,
    api_url_for_host,
)

REPO = RepoIdentity(host="github.com", owner="octo", repo="app")


def _response(status_code=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.text = text
    return resp


class TestClientConfig:
    """Test GitHubSourceClient configuration."""

    def test_default_config(self):
        client = GitHubSourceClient()
        assert client.base_url == "https://api.github.com"
        assert "Authorization" not in client._client.headers

    def test_token_header(self):
        client = GitHubSourceClient(token="s3cret")
        assert client._client.headers["Authorization"] == "Bearer s3cret"

    def test_api_url_for_host(self):
        assert api_url_for_host("github.com") == "https://api.github.com"
        assert api_url_for_host("ghe.corp.io") == "https://ghe.corp.io/api/v3"


class TestErrors:
    """Test mapping of HTTP failures to source errors."""

    @patch("httpx.Client.get")
    def test_404_is_not_found(self, mock_get):
        mock_get.return_value = _response(404)
        with pytest.raises(NotFoundError):
            GitHubSourceClient().list_branches(REPO)

    @patch("httpx.Client.get")
    def test_server_error_is_transient(self, mock_get):
        mock_get.return_value = _response(502, text="bad gateway")
        with pytest.raises(TransientSourceError, match="502"):
            GitHubSourceClient().get_metadata(REPO)

    @patch("httpx.Client.get")
    def test_rate_limit_is_transient(self, mock_get):
        mock_get.return_value = _response(403, text="API rate limit exceeded")
        with pytest.raises(TransientSourceError):
            GitHubSourceClient().list_commits(REPO, 1, 100)

    @patch("httpx.Client.get")
    def test_connection_error_is_transient(self, mock_get):
        mock_get.side_effect = httpx.ConnectError("connection refused")
        with pytest.raises(TransientSourceError):
            GitHubSourceClient().fetch_content("https://raw.example/x")

    @patch("httpx.Client.get")
    def test_not_found_is_a_source_error_but_not_transient(self, mock_get):
        mock_get.return_value = _response(404)
        with pytest.raises(NotFoundError) as info:
            GitHubSourceClient().get_metadata(REPO)
        assert not isinstance(info.value, TransientSourceError)


class TestPayloads:
    """Test parsing of GitHub API payloads."""

    @patch("httpx.Client.get")
    def test_fork_metadata(self, mock_get):
        mock_get.return_value = _response(
            payload={
                "fork": True,
                "parent": {"full_name": "up/app", "html_url": "https://github.com/up/app"},
            }
        )
        metadata = GitHubSourceClient().get_metadata(REPO)
        assert metadata.is_fork is True
        assert metadata.parent_full_name == "up/app"
        assert metadata.parent_url == "https://github.com/up/app"

    @patch("httpx.Client.get")
    def test_plain_repo_metadata(self, mock_get):
        mock_get.return_value = _response(payload={"fork": False})
        metadata = GitHubSourceClient().get_metadata(REPO)
        assert metadata.is_fork is False
        assert metadata.parent_full_name is None

    @patch("httpx.Client.get")
    def test_list_branches(self, mock_get):
        mock_get.return_value = _response(
            payload=[{"name": "main", "commit": {"sha": "1"}}, {"name": "dev", "commit": {"sha": "2"}}]
        )
        assert GitHubSourceClient().list_branches(REPO) == ["main", "dev"]

    @patch("httpx.Client.get")
    def test_list_branches_follows_pages(self, mock_get):
        full_page = [{"name": f"feature-{i}"} for i in range(100)]
        mock_get.side_effect = [
            _response(payload=full_page),
            _response(payload=[{"name": "main"}, {"name": "dev"}]),
        ]
        branches = GitHubSourceClient().list_branches(REPO)

        assert len(branches) == 102
        assert branches[-2:] == ["main", "dev"]
        assert mock_get.call_count == 2
        assert mock_get.call_args[1]["params"] == {"page": 2, "per_page": 100}

    @patch("httpx.Client.get")
    def test_list_branches_page_limit(self, mock_get):
        mock_get.return_value = _response(payload=[{"name": f"b{i}"} for i in range(100)])
        branches = GitHubSourceClient().list_branches(REPO)
        assert mock_get.call_count == 10
        assert len(branches) == 1000

    @patch("httpx.Client.get")
    def test_list_directory(self, mock_get):
        mock_get.return_value = _response(
            payload=[
                {"name": "src", "path": "src", "type": "dir", "size": 0, "download_url": None},
                {
                    "name": "README.md",
                    "path": "README.md",
                    "type": "file",
                    "size": 120,
                    "download_url": "https://raw.githubusercontent.com/octo/app/main/README.md",
                },
            ]
        )
        entries = GitHubSourceClient().list_directory(REPO, "", "main")

        assert entries[0].is_directory
        assert entries[1].size == 120
        assert entries[1].content_ref.endswith("README.md")
        url = mock_get.call_args[0][0]
        assert url == "https://api.github.com/repos/octo/app/contents"
        assert mock_get.call_args[1]["params"] == {"ref": "main"}

    @patch("httpx.Client.get")
    def test_single_file_listing_is_wrapped(self, mock_get):
        mock_get.return_value = _response(
            payload={"name": "a.py", "path": "a.py", "type": "file", "size": 3, "download_url": "u"}
        )
        entries = GitHubSourceClient().list_directory(REPO, "a.py", "main")
        assert len(entries) == 1

    @patch("httpx.Client.get")
    def test_list_commits(self, mock_get):
        mock_get.return_value = _response(
            payload=[
                {
                    "sha": "deadbeef",
                    "html_url": "https://github.com/octo/app/commit/deadbeef",
                    "commit": {
                        "message": "fix: thing",
                        "author": {"name": "Ann", "email": "ann@x.io", "date": "2024-01-01T10:00:00Z"},
                        "committer": {"name": "GitHub", "email": "noreply@github.com", "date": "2024-01-02T10:00:00Z"},
                    },
                }
            ]
        )
        commits = GitHubSourceClient().list_commits(REPO, 2, 50)

        assert commits[0].sha == "deadbeef"
        assert commits[0].author.timestamp == "2024-01-01T10:00:00Z"
        assert commits[0].committer.name == "GitHub"
        assert commits[0].stats.total == 0
        assert mock_get.call_args[1]["params"] == {"page": 2, "per_page": 50}

    @patch("httpx.Client.get")
    def test_commit_stats(self, mock_get):
        mock_get.return_value = _response(payload={"stats": {"additions": 7, "deletions": 3, "total": 10}})
        stats = GitHubSourceClient().fetch_commit_stats(REPO, "deadbeef")
        assert (stats.additions, stats.deletions, stats.total) == (7, 3, 10)

    @patch("httpx.Client.get")
    def test_commit_stats_missing(self, mock_get):
        mock_get.return_value = _response(payload={"sha": "deadbeef"})
        stats = GitHubSourceClient().fetch_commit_stats(REPO, "deadbeef")
        assert stats.total == 0

    @patch("httpx.Client.get")
    def test_fetch_content(self, mock_get):
        mock_get.return_value = _response(text="print('hi')\n")
        assert GitHubSourceClient().fetch_content("https://raw.example/a.py") == "print('hi')\n"
