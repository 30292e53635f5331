"""File harvesting across every branch of a repository."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import DEFAULT_MAX_DEPTH
from .filters import should_skip_directory
from .logging import get_logger
from .models import FileRecord, RepoIdentity
from .source import NotFoundError, RepositorySourceClient

logger = get_logger("harvester")

DEFAULT_BRANCH = "main"
FALLBACK_BRANCH = "master"
PRIMARY_BRANCHES = ("main", "master")


@dataclass
class HarvestResult:
    files: list[FileRecord] = field(default_factory=list)
    total_branches: int = 0


def order_branches(branches: list[str]) -> list[str]:
    """main/master first, everything else alphabetically."""
    return sorted(branches, key=lambda name: (name not in PRIMARY_BRANCHES, name))


class FileHarvester:
    """Walks the directory tree of every branch and deduplicates the files found.

    A file is identified by ``(path, size)``: the same file on several
    branches is kept once (first branch wins), while a branch-specific
    variant with a different size is kept as its own entry.
    """

    def __init__(self, client: RepositorySourceClient, max_depth: int = DEFAULT_MAX_DEPTH):
        self.client = client
        self.max_depth = max_depth

    def harvest(self, identity: RepoIdentity) -> HarvestResult:
        try:
            branches = self.client.list_branches(identity)
        except Exception as e:
            logger.warning("Could not list branches for %s: %s", identity.full_name, e)
            branches = []

        result = HarvestResult(total_branches=len(branches))
        seen: set[tuple[str, int]] = set()

        # No branch list: fall back to walking the default branch.
        to_walk = order_branches(branches) or [DEFAULT_BRANCH]

        for branch in to_walk:
            try:
                branch_files = self.walk(identity, branch)
            except Exception as e:
                logger.warning("Skipping branch %s: %s", branch, e)
                continue

            for record in branch_files:
                if record.dedup_key in seen:
                    continue
                seen.add(record.dedup_key)
                result.files.append(record)

        logger.debug(
            "Harvested %d unique files from %d branches", len(result.files), len(to_walk)
        )
        return result

    def walk(self, identity: RepoIdentity, branch: str) -> list[FileRecord]:
        """Files reachable from the root of one branch.

        A failure listing the root propagates; failures below the root only
        drop that subtree.
        """
        return self._walk(identity, "", branch, self.max_depth)

    def _walk(
        self, identity: RepoIdentity, path: str, branch: str, depth: int
    ) -> list[FileRecord]:
        if depth <= 0:
            return []

        entries, branch = self._list(identity, path, branch)
        files: list[FileRecord] = []

        for entry in entries:
            if not entry.is_directory:
                files.append(
                    FileRecord(
                        path=entry.path,
                        name=entry.name,
                        size=entry.size,
                        branch=branch,
                        download_ref=entry.content_ref,
                    )
                )
            elif not should_skip_directory(entry.path, entry.name):
                try:
                    files.extend(self._walk(identity, entry.path, branch, depth - 1))
                except Exception as e:
                    logger.warning("Skipping directory %s on branch %s: %s", entry.path, branch, e)

        return files

    def _list(self, identity: RepoIdentity, path: str, branch: str):
        """List a directory; ``main`` falls back to ``master`` when not found."""
        try:
            return self.client.list_directory(identity, path, branch), branch
        except NotFoundError:
            if branch != DEFAULT_BRANCH:
                raise
            logger.debug("%s not found on %s, retrying on %s", path or "/", branch, FALLBACK_BRANCH)
            return self.client.list_directory(identity, path, FALLBACK_BRANCH), FALLBACK_BRANCH
