"""Data model shared by the harvesting, commit and reporting layers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as returned by the GitHub API.

    Timestamps without an offset are taken to be UTC.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def calendar_date(timestamp: str) -> str:
    """UTC calendar date (``YYYY-MM-DD``) of an ISO timestamp."""
    return parse_timestamp(timestamp).astimezone(timezone.utc).date().isoformat()


# --- Repository identity ---


@dataclass(frozen=True)
class RepoIdentity:
    """A ``host/owner/repo`` reference."""

    host: str
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def url(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.repo}"


@dataclass(frozen=True)
class ResolvedIdentity:
    """The repository actually analyzed, after following a fork to its parent."""

    identity: RepoIdentity
    is_fork: bool = False
    original_url: str | None = None

    @property
    def canonical_url(self) -> str:
        return self.identity.url


@dataclass(frozen=True)
class RepositoryMetadata:
    is_fork: bool = False
    parent_full_name: str | None = None
    parent_url: str | None = None


# --- Files ---


@dataclass(frozen=True)
class DirectoryEntry:
    """One item of a directory listing."""

    name: str
    path: str
    kind: str  # "file" or "dir"
    size: int = 0
    content_ref: str | None = None

    @property
    def is_directory(self) -> bool:
        return self.kind == "dir"


@dataclass(frozen=True)
class FileRecord:
    """A file seen on some branch of the repository."""

    path: str
    name: str
    size: int
    branch: str
    download_ref: str | None = None
    is_directory: bool = False

    @property
    def dedup_key(self) -> tuple[str, int]:
        return (self.path, self.size)

    @property
    def display_path(self) -> str:
        return f"{self.path} ({self.branch})" if self.branch else self.path


# --- Commits ---


@dataclass(frozen=True)
class Signature:
    name: str
    email: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "email": self.email, "date": self.timestamp}


@dataclass(frozen=True)
class CommitStats:
    additions: int = 0
    deletions: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"additions": self.additions, "deletions": self.deletions, "total": self.total}


@dataclass(frozen=True)
class CommitRecord:
    """A commit as fetched from the source, one per distinct sha."""

    sha: str
    message: str
    author: Signature
    committer: Signature
    stats: CommitStats = field(default_factory=CommitStats)
    source_url: str = ""

    def with_stats(self, stats: CommitStats) -> "CommitRecord":
        return replace(self, stats=stats)


@dataclass(frozen=True)
class CommitVerdict:
    """Outcome of scoring one commit message."""

    is_ai: bool
    confidence: float
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit together with its authorship verdict."""

    record: CommitRecord
    is_ai: bool
    confidence: float
    reasons: tuple[str, ...] = ()

    @property
    def sha(self) -> str:
        return self.record.sha

    @property
    def message(self) -> str:
        return self.record.message

    @property
    def author(self) -> Signature:
        return self.record.author

    @property
    def stats(self) -> CommitStats:
        return self.record.stats

    @property
    def contributor_key(self) -> tuple[str, str]:
        return (self.record.author.name, self.record.author.email)

    @property
    def author_date(self) -> str:
        return calendar_date(self.record.author.timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sha": self.record.sha,
            "message": self.record.message,
            "author": self.record.author.to_dict(),
            "committer": self.record.committer.to_dict(),
            "stats": self.record.stats.to_dict(),
            "is_ai": self.is_ai,
            "confidence": self.confidence,
            "reasons": list(self.reasons),
            "url": self.record.source_url,
        }


@dataclass
class ContributorAggregate:
    """Rollup for one ``(name, email)`` author."""

    name: str
    email: str
    first_commit: str
    last_commit: str
    total_commits: int = 0
    total_additions: int = 0
    total_deletions: int = 0
    estimated_hours: float = 0.0
    ai_commit_percentage: float = 0.0
    commit_days: list[str] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.email)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "total_commits": self.total_commits,
            "total_additions": self.total_additions,
            "total_deletions": self.total_deletions,
            "estimated_hours": self.estimated_hours,
            "ai_commit_percentage": self.ai_commit_percentage,
            "first_commit": self.first_commit,
            "last_commit": self.last_commit,
            "commit_days": list(self.commit_days),
        }


@dataclass
class TimelineBucket:
    """Rollup for one calendar day (author date)."""

    date: str
    commits: int = 0
    additions: int = 0
    deletions: int = 0
    ai_commits: int = 0
    estimated_hours: float = 0.0
    contributors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "commits": self.commits,
            "additions": self.additions,
            "deletions": self.deletions,
            "ai_commits": self.ai_commits,
            "estimated_hours": self.estimated_hours,
            "contributors": list(self.contributors),
        }


@dataclass
class CommitHistory:
    """Commit-level section of the report."""

    total_commits: int = 0
    commits: list[ClassifiedCommit] = field(default_factory=list)
    contributors: list[ContributorAggregate] = field(default_factory=list)
    timeline: list[TimelineBucket] = field(default_factory=list)
    total_estimated_hours: float = 0.0
    ai_commit_percentage: float = 0.0
    project_start_date: str = ""
    project_end_date: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_commits": self.total_commits,
            "commits": [c.to_dict() for c in self.commits],
            "contributors": [c.to_dict() for c in self.contributors],
            "timeline": [t.to_dict() for t in self.timeline],
            "total_estimated_hours": self.total_estimated_hours,
            "ai_commit_percentage": self.ai_commit_percentage,
            "project_start_date": self.project_start_date,
            "project_end_date": self.project_end_date,
        }


# --- Line analysis ---


class Evidence(enum.Enum):
    """Why a line was flagged."""

    INVISIBLE_CHAR = "invisible_char"
    EMOJI = "emoji"
    PATTERN = "pattern"


@dataclass(frozen=True)
class LineResult:
    line_number: int
    is_ai: bool
    confidence: float = 0.0
    reasons: tuple[str, ...] = ()
    evidence: frozenset[Evidence] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return {
            "line_number": self.line_number,
            "is_ai": self.is_ai,
            "confidence": self.confidence,
            "reasons": list(self.reasons),
            "evidence": sorted(e.value for e in self.evidence),
        }


@dataclass
class CodeAnalysis:
    """Result of running a LineClassifier over one file."""

    total_lines: int
    ai_lines: int
    human_lines: int
    overall_confidence: float
    lines: list[LineResult] = field(default_factory=list)

    @property
    def ai_percentage(self) -> float:
        return self.ai_lines / self.total_lines * 100 if self.total_lines else 0.0

    def has_evidence(self, tag: Evidence) -> bool:
        return any(line.is_ai and tag in line.evidence for line in self.lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_lines": self.total_lines,
            "ai_lines": self.ai_lines,
            "human_lines": self.human_lines,
            "ai_percentage": self.ai_percentage,
            "overall_confidence": self.overall_confidence,
            "flagged_lines": [line.to_dict() for line in self.lines if line.is_ai],
        }


@dataclass
class FileAnalysis:
    path: str
    language: str
    analysis: CodeAnalysis
    size: int
    branch: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "language": self.language,
            "size": self.size,
            "branch": self.branch,
            "analysis": self.analysis.to_dict(),
        }


@dataclass
class OverallStats:
    total_lines: int = 0
    ai_lines: int = 0
    human_lines: int = 0
    ai_percentage: float = 0.0
    human_percentage: float = 0.0
    overall_confidence: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class RepositorySnapshot:
    """Complete report for one repository."""

    canonical_url: str
    is_fork: bool
    total_files: int
    analyzed_files: int
    total_branches: int
    files: list[FileAnalysis]
    overall_stats: OverallStats
    has_marker_keyword: bool
    original_url: str | None = None
    commit_history: CommitHistory | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "canonical_url": self.canonical_url,
            "is_fork": self.is_fork,
            "total_files": self.total_files,
            "analyzed_files": self.analyzed_files,
            "total_branches": self.total_branches,
            "files": [f.to_dict() for f in self.files],
            "overall_stats": self.overall_stats.to_dict(),
            "has_marker_keyword": self.has_marker_keyword,
        }
        if self.original_url:
            data["original_url"] = self.original_url
        if self.commit_history is not None:
            data["commit_history"] = self.commit_history.to_dict()
        return data
