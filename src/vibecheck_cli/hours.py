"""Work-hour estimation from commit timestamps.

Commits no more than ``session_gap`` hours apart are treated as one
continuous session and the gap between them counts as work. A larger gap
starts a new session, which costs a fixed base time instead. On top of
that every commit adds a size term capped at two hours.
"""

from __future__ import annotations

import math
from typing import Iterable

from .config import DEFAULT_SESSION_GAP_HOURS
from .models import ClassifiedCommit, parse_timestamp

SESSION_BASE_HOURS = 0.5
MAX_COMMIT_HOURS = 2.0
LINES_PER_HOUR = 10


def round_hours(hours: float) -> float:
    """Round half up to one decimal."""
    return math.floor(hours * 10 + 0.5) / 10


def estimate_work_hours(
    commits: Iterable[ClassifiedCommit],
    session_gap: float = DEFAULT_SESSION_GAP_HOURS,
) -> float:
    ordered = sorted(commits, key=lambda c: parse_timestamp(c.author.timestamp))
    if not ordered:
        return 0

    total = 0.0
    previous = None
    for commit in ordered:
        when = parse_timestamp(commit.author.timestamp)
        if previous is None:
            total += SESSION_BASE_HOURS
        else:
            gap = (when - previous).total_seconds() / 3600
            total += gap if gap <= session_gap else SESSION_BASE_HOURS

        total += min(commit.stats.total / LINES_PER_HOUR, MAX_COMMIT_HOURS)
        previous = when

    return round_hours(total)
