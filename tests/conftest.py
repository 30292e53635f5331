"""Shared fixtures: an in-memory repository host and commit builders."""

import pytest

from vibecheck_cli.models import (
    ClassifiedCommit,
    CommitRecord,
    CommitStats,
    DirectoryEntry,
    RepositoryMetadata,
    Signature,
)
from vibecheck_cli.source import NotFoundError


class FakeSourceClient:
    """RepositorySourceClient backed by dictionaries.

    Any stored value that is an exception instance is raised instead of
    returned.
    """

    def __init__(self, metadata=None, branches=None):
        self.metadata = metadata or RepositoryMetadata()
        self.branches = branches if branches is not None else []
        self.listings = {}  # (branch, path) -> list[DirectoryEntry] | Exception
        self.contents = {}  # ref -> str | Exception
        self.commits = []  # list[CommitRecord]
        self.stats = {}  # sha -> CommitStats | Exception
        self.commit_error = None
        self.calls = []

    @staticmethod
    def _unwrap(value):
        if isinstance(value, Exception):
            raise value
        return value

    def add_branch(self, branch, files):
        """Build directory listings for ``{path: size}`` or ``{path: (size, content)}``."""
        self.listings.setdefault((branch, ""), [])
        for path, entry in files.items():
            size, content = entry if isinstance(entry, tuple) else (entry, f"// {path}\nconst x = 1;\n")
            parts = path.split("/")
            for depth in range(len(parts) - 1):
                parent = "/".join(parts[:depth])
                child = "/".join(parts[: depth + 1])
                listing = self.listings.setdefault((branch, parent), [])
                if not any(e.path == child for e in listing):
                    listing.append(DirectoryEntry(name=parts[depth], path=child, kind="dir"))
                self.listings.setdefault((branch, child), [])
            ref = f"{branch}:{path}"
            parent = "/".join(parts[:-1])
            self.listings.setdefault((branch, parent), []).append(
                DirectoryEntry(name=parts[-1], path=path, kind="file", size=size, content_ref=ref)
            )
            self.contents[ref] = content

    def get_metadata(self, identity):
        self.calls.append(("get_metadata", identity.full_name))
        return self._unwrap(self.metadata)

    def list_branches(self, identity):
        self.calls.append(("list_branches", identity.full_name))
        return list(self._unwrap(self.branches))

    def list_directory(self, identity, path, branch):
        self.calls.append(("list_directory", branch, path))
        key = (branch, path)
        if key not in self.listings:
            raise NotFoundError(f"{path} not found on {branch}")
        return list(self._unwrap(self.listings[key]))

    def fetch_content(self, ref):
        self.calls.append(("fetch_content", ref))
        if ref not in self.contents:
            raise NotFoundError(ref)
        return self._unwrap(self.contents[ref])

    def list_commits(self, identity, page, page_size):
        self.calls.append(("list_commits", page))
        if self.commit_error is not None:
            raise self.commit_error
        start = (page - 1) * page_size
        return self.commits[start : start + page_size]

    def fetch_commit_stats(self, identity, sha):
        self.calls.append(("fetch_commit_stats", sha))
        return self._unwrap(self.stats.get(sha, CommitStats()))


@pytest.fixture
def fake_client():
    return FakeSourceClient(branches=["main"])


@pytest.fixture
def make_record():
    """Build a CommitRecord with sensible defaults."""

    def _make(
        sha="abc123",
        message="wip",
        name="alice",
        email="alice@example.com",
        date="2024-01-01T10:00:00Z",
        total=0,
        additions=None,
        deletions=0,
        committer_date=None,
    ):
        return CommitRecord(
            sha=sha,
            message=message,
            author=Signature(name=name, email=email, timestamp=date),
            committer=Signature(name=name, email=email, timestamp=committer_date or date),
            stats=CommitStats(
                additions=total if additions is None else additions,
                deletions=deletions,
                total=total,
            ),
            source_url=f"https://github.com/o/r/commit/{sha}",
        )

    return _make


@pytest.fixture
def make_commit(make_record):
    """Build a ClassifiedCommit; ``is_ai`` is set directly instead of scored."""

    def _make(is_ai=False, confidence=None, **kwargs):
        record = make_record(**kwargs)
        return ClassifiedCommit(
            record=record,
            is_ai=is_ai,
            confidence=confidence if confidence is not None else (0.9 if is_ai else 0.0),
        )

    return _make
