"""Contributor and timeline rollups over classified commits.

The fold functions build fresh accumulators from a commit list and return
them; nothing is kept between calls. Derived fields (hours, AI share) are
filled in a separate finalize step over each group's full commit subset.
"""

from __future__ import annotations

from collections import defaultdict

from .config import DEFAULT_SESSION_GAP_HOURS
from .hours import estimate_work_hours
from .models import (
    ClassifiedCommit,
    CommitHistory,
    ContributorAggregate,
    TimelineBucket,
    parse_timestamp,
)

ContributorKey = tuple[str, str]


def ai_percentage(commits: list[ClassifiedCommit]) -> float:
    if not commits:
        return 0.0
    return 100 * sum(1 for c in commits if c.is_ai) / len(commits)


def fold_contributors(
    commits: list[ClassifiedCommit],
) -> dict[ContributorKey, ContributorAggregate]:
    """Group commits by ``(author name, author email)`` in first-seen order."""
    contributors: dict[ContributorKey, ContributorAggregate] = {}

    for commit in commits:
        key = commit.contributor_key
        timestamp = commit.author.timestamp
        stats = contributors.get(key)
        if stats is None:
            stats = ContributorAggregate(
                name=commit.author.name,
                email=commit.author.email,
                first_commit=timestamp,
                last_commit=timestamp,
            )
            contributors[key] = stats

        stats.total_commits += 1
        stats.total_additions += commit.stats.additions
        stats.total_deletions += commit.stats.deletions

        day = commit.author_date
        if day not in stats.commit_days:
            stats.commit_days.append(day)

        when = parse_timestamp(timestamp)
        if when < parse_timestamp(stats.first_commit):
            stats.first_commit = timestamp
        if when > parse_timestamp(stats.last_commit):
            stats.last_commit = timestamp

    return contributors


def fold_timeline(commits: list[ClassifiedCommit]) -> dict[str, TimelineBucket]:
    """Group commits by the calendar date of their author timestamp."""
    timeline: dict[str, TimelineBucket] = {}

    for commit in commits:
        day = commit.author_date
        bucket = timeline.get(day)
        if bucket is None:
            bucket = TimelineBucket(date=day)
            timeline[day] = bucket

        bucket.commits += 1
        bucket.additions += commit.stats.additions
        bucket.deletions += commit.stats.deletions
        if commit.is_ai:
            bucket.ai_commits += 1
        if commit.author.name not in bucket.contributors:
            bucket.contributors.append(commit.author.name)

    return timeline


def finalize_contributors(
    contributors: dict[ContributorKey, ContributorAggregate],
    commits: list[ClassifiedCommit],
    session_gap: float = DEFAULT_SESSION_GAP_HOURS,
) -> list[ContributorAggregate]:
    """Fill hours and AI share, then order by commit count (ties keep first-seen order)."""
    by_key: dict[ContributorKey, list[ClassifiedCommit]] = defaultdict(list)
    for commit in commits:
        by_key[commit.contributor_key].append(commit)

    for key, stats in contributors.items():
        own = by_key.get(key, [])
        stats.estimated_hours = estimate_work_hours(own, session_gap)
        stats.ai_commit_percentage = ai_percentage(own)

    return sorted(contributors.values(), key=lambda s: -s.total_commits)


def finalize_timeline(
    timeline: dict[str, TimelineBucket],
    commits: list[ClassifiedCommit],
    session_gap: float = DEFAULT_SESSION_GAP_HOURS,
) -> list[TimelineBucket]:
    by_day: dict[str, list[ClassifiedCommit]] = defaultdict(list)
    for commit in commits:
        by_day[commit.author_date].append(commit)

    for day, bucket in timeline.items():
        bucket.estimated_hours = estimate_work_hours(by_day.get(day, []), session_gap)

    return sorted(timeline.values(), key=lambda b: b.date)


def aggregate_history(
    commits: list[ClassifiedCommit],
    session_gap: float = DEFAULT_SESSION_GAP_HOURS,
) -> CommitHistory:
    """Build the full commit-history section from classified commits."""
    if not commits:
        return CommitHistory()

    contributors = finalize_contributors(fold_contributors(commits), commits, session_gap)
    timeline = finalize_timeline(fold_timeline(commits), commits, session_gap)

    # Sum of per-contributor (already rounded) estimates, not a global re-estimate.
    total_hours = sum(c.estimated_hours for c in contributors)

    timestamps = sorted((c.author.timestamp for c in commits), key=parse_timestamp)

    return CommitHistory(
        total_commits=len(commits),
        commits=sorted(
            commits, key=lambda c: parse_timestamp(c.author.timestamp), reverse=True
        ),
        contributors=contributors,
        timeline=timeline,
        total_estimated_hours=total_hours,
        ai_commit_percentage=ai_percentage(commits),
        project_start_date=timestamps[0],
        project_end_date=timestamps[-1],
    )
