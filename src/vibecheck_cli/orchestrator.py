"""Repository analysis pipeline.

Runs one analysis from a ``host/owner/repo`` reference to a
``RepositorySnapshot``:

    resolve identity -> harvest files -> scan marker keyword
        -> analyze files -> analyze commit history -> assemble report

Only a malformed reference and a repository with nothing analyzable stop
the run. Every other failure is logged and the report is produced without
the affected part.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from .aggregation import aggregate_history
from .classifier import HeuristicLineClassifier, LineClassifier
from .commits import classify_commits
from .config import Settings
from .filters import language_for_path, should_analyze_file
from .harvester import FileHarvester
from .logging import get_logger
from .models import (
    CommitHistory,
    CommitRecord,
    CommitStats,
    Evidence,
    FileAnalysis,
    FileRecord,
    OverallStats,
    RepoIdentity,
    RepositorySnapshot,
    ResolvedIdentity,
)
from .source import RepositorySourceClient

logger = get_logger("orchestrator")

ProgressCallback = Callable[[str, int, int], None]

DEFAULT_HOST = "github.com"
MARKER_ROOT_FILES = ("index.html", "package.json")
MARKER_SOURCE_DIR = "src/"


class VibecheckError(Exception):
    """Base error for fatal analysis failures."""


class InvalidRepositoryError(VibecheckError):
    """The repository reference could not be parsed."""


class NoAnalyzableFilesError(VibecheckError):
    """No file in the repository passed filtering and size limits."""


_SCHEME_RE = re.compile(r"^[a-z]+://", re.IGNORECASE)


def parse_repository_ref(ref: str) -> RepoIdentity:
    """Parse ``host/owner/repo`` (scheme, ``.git`` and trailing paths allowed).

    A bare ``owner/repo`` is taken to live on github.com.
    """
    cleaned = _SCHEME_RE.sub("", ref.strip()).split("#")[0].split("?")[0]
    parts = [p for p in cleaned.split("/") if p]

    if len(parts) >= 3 and ("." in parts[0] or ":" in parts[0]):
        host, owner, repo = parts[0], parts[1], parts[2]
    elif len(parts) == 2 and "." not in parts[0]:
        host, owner, repo = DEFAULT_HOST, parts[0], parts[1]
    else:
        raise InvalidRepositoryError(
            f"Invalid repository reference {ref!r}. Use host/owner/repo, "
            "e.g. https://github.com/owner/repo"
        )

    repo = repo.removesuffix(".git")
    if not owner or not repo:
        raise InvalidRepositoryError(f"Invalid repository reference {ref!r}")
    return RepoIdentity(host=host.lower().removeprefix("www."), owner=owner, repo=repo)


def resolve_identity(
    client: RepositorySourceClient, identity: RepoIdentity
) -> ResolvedIdentity:
    """Follow a fork to its upstream parent; keep the given identity on failure."""
    try:
        metadata = client.get_metadata(identity)
    except Exception as e:
        logger.warning("Could not fetch repository info, using %s as given: %s", identity.url, e)
        return ResolvedIdentity(identity=identity)

    if not metadata.is_fork or not metadata.parent_full_name:
        return ResolvedIdentity(identity=identity)

    owner, _, repo = metadata.parent_full_name.partition("/")
    if not owner or not repo:
        return ResolvedIdentity(identity=identity)

    logger.info("Fork detected, analyzing upstream %s", metadata.parent_full_name)
    return ResolvedIdentity(
        identity=RepoIdentity(host=identity.host, owner=owner, repo=repo),
        is_fork=True,
        original_url=identity.url,
    )


def select_analyzable(files: list[FileRecord], max_size: int) -> list[FileRecord]:
    return [
        f
        for f in files
        if should_analyze_file(f.path) and 0 < f.size < max_size and f.download_ref
    ]


def summarize(files: list[FileAnalysis]) -> OverallStats:
    total = sum(f.analysis.total_lines for f in files)
    ai = sum(f.analysis.ai_lines for f in files)
    human = sum(f.analysis.human_lines for f in files)
    confidence = sum(f.analysis.overall_confidence for f in files)
    return OverallStats(
        total_lines=total,
        ai_lines=ai,
        human_lines=human,
        ai_percentage=ai / total * 100 if total else 0.0,
        human_percentage=human / total * 100 if total else 0.0,
        overall_confidence=confidence / len(files) if files else 0.0,
    )


def prioritize_files(files: list[FileAnalysis]) -> list[FileAnalysis]:
    """Invisible-character evidence first, then emoji, then highest AI share."""
    return sorted(
        files,
        key=lambda f: (
            not f.analysis.has_evidence(Evidence.INVISIBLE_CHAR),
            not f.analysis.has_evidence(Evidence.EMOJI),
            -f.analysis.ai_percentage,
        ),
    )


class RepositoryAnalyzer:
    """Runs the full analysis of one repository."""

    def __init__(
        self,
        client: RepositorySourceClient,
        classifier: LineClassifier | None = None,
        settings: Settings | None = None,
    ):
        self.client = client
        self.classifier = classifier or HeuristicLineClassifier()
        self.settings = settings or Settings()

    def analyze(
        self,
        ref: str,
        progress_callback: ProgressCallback | None = None,
        include_commit_history: bool | None = None,
    ) -> RepositorySnapshot:
        identity = parse_repository_ref(ref)
        if include_commit_history is None:
            include_commit_history = self.settings.include_commit_history

        def progress(status: str, current: int = 0, total: int = 1) -> None:
            if progress_callback:
                progress_callback(status, current, total)

        progress("Checking repository info...")
        resolved = resolve_identity(self.client, identity)
        if resolved.is_fork:
            progress(f"Fork detected, analyzing original repository: {resolved.identity.full_name}")
        target = resolved.identity

        progress("Fetching files from all branches...")
        harvest = FileHarvester(self.client, self.settings.max_depth).harvest(target)

        progress("Checking for marker keyword...")
        has_marker = self.scan_marker_keyword(harvest.files)

        candidates = select_analyzable(harvest.files, self.settings.max_file_size)
        if not candidates:
            raise NoAnalyzableFilesError(
                f"No analyzable code files found in {target.full_name}"
            )

        analyses = self.analyze_files(candidates, progress)

        history = None
        if include_commit_history:
            progress("Analyzing commit history...", len(candidates), len(candidates) + 1)
            try:
                history = self.analyze_commit_history(target)
            except Exception as e:
                logger.warning("Commit history analysis failed, omitting it: %s", e)

        return RepositorySnapshot(
            canonical_url=resolved.canonical_url,
            original_url=resolved.original_url,
            is_fork=resolved.is_fork,
            total_files=len(harvest.files),
            analyzed_files=len(analyses),
            total_branches=harvest.total_branches,
            files=prioritize_files(analyses),
            overall_stats=summarize(analyses),
            has_marker_keyword=has_marker,
            commit_history=history,
        )

    def scan_marker_keyword(self, files: list[FileRecord]) -> bool:
        """Case-insensitive marker search in root manifest/entry files and under ``src/``."""
        marker = self.settings.marker_keyword.lower()

        root_files = [
            f for name in MARKER_ROOT_FILES for f in files if f.name == name and f.path == name
        ]
        source_files = [f for f in files if f.path.startswith(MARKER_SOURCE_DIR)]

        for record in root_files + source_files:
            if not record.download_ref:
                continue
            try:
                content = self.client.fetch_content(record.download_ref)
            except Exception as e:
                logger.debug("Marker scan skipped %s: %s", record.path, e)
                continue
            if marker in content.lower():
                return True
        return False

    def analyze_files(
        self,
        files: list[FileRecord],
        progress: Callable[[str, int, int], None] | None = None,
    ) -> list[FileAnalysis]:
        results: list[FileAnalysis] = []
        total = len(files)

        for i, record in enumerate(files):
            if progress:
                progress(record.display_path, i + 1, total)
            try:
                content = self.client.fetch_content(record.download_ref)
                if not content.strip():
                    continue
                language = language_for_path(record.path)
                analysis = self.classifier.analyze(content, language)
            except Exception as e:
                logger.warning("Failed to analyze %s: %s", record.display_path, e)
                continue

            results.append(
                FileAnalysis(
                    path=record.path,
                    language=language,
                    analysis=analysis,
                    size=record.size,
                    branch=record.branch,
                )
            )

        return results

    def fetch_commits(self, identity: RepoIdentity) -> list[CommitRecord]:
        """Page through the commit list, fetching per-commit stats through a bounded pool."""
        page_size = self.settings.commit_page_size
        commits: list[CommitRecord] = []

        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
            for page in range(1, self.settings.max_commit_pages + 1):
                records = self.client.list_commits(identity, page, page_size)
                if not records:
                    break

                stats = pool.map(lambda r: self._commit_stats(identity, r.sha), records)
                commits.extend(r.with_stats(s) for r, s in zip(records, stats))

                if len(records) < page_size:
                    break

        return commits

    def _commit_stats(self, identity: RepoIdentity, sha: str) -> CommitStats:
        try:
            return self.client.fetch_commit_stats(identity, sha)
        except Exception as e:
            logger.warning("Failed to fetch stats for commit %s: %s", sha[:8], e)
            return CommitStats()

    def analyze_commit_history(self, identity: RepoIdentity) -> CommitHistory:
        records = self.fetch_commits(identity)
        classified = classify_commits(records)
        return aggregate_history(classified, self.settings.session_gap_hours)
