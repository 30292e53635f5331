"""Commit-message authorship heuristics.

Each signal proposes a confidence; the verdict keeps the highest one.
Signals never add up, so a message hitting many weak patterns stays weak.
"""

from __future__ import annotations

import re

from .models import ClassifiedCommit, CommitRecord, CommitVerdict
from .signals import has_emoji, has_invisible_chars

AI_THRESHOLD = 0.5
EMOJI_CONFIDENCE = 0.9
LONG_MESSAGE_CONFIDENCE = 0.6
LONG_MESSAGE_LENGTH = 100

# Conventional-commit / imperative / generic assistant phrasing
STRUCTURAL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^(feat|fix|docs|style|refactor|test|chore|ci|build|perf)(\(.+\))?:\s.+$",
        r"^(add|update|implement|create|fix|remove|delete|improve)\s",
        r"^(initial commit|first commit)$",
        r"update\s+(readme|documentation)",
        r"^(resolve|address)\s+issue",
        r"minor\s+(changes|updates|fixes)",
        r"code\s+(cleanup|optimization|refactoring)",
        r"improve\s+(performance|functionality|user\s+experience)",
        r"enhance\s+(feature|component|ui)",
        r"update\s+(dependencies|packages)",
    )
]

FORMALITY_PATTERNS = [
    re.compile(r"^\w[^.!?]*[.!?]$"),  # one complete, punctuated sentence
    re.compile(r"\b(implement|establish|utilize|facilitate|optimize)\b", re.IGNORECASE),
    re.compile(r"\b(furthermore|additionally|moreover|consequently)\b", re.IGNORECASE),
]


def structural_confidence(matches: int) -> float:
    return min(0.8, 0.3 + 0.15 * matches)


def formality_confidence(matches: int) -> float:
    return 0.5 + 0.1 * matches


def classify_message(message: str) -> CommitVerdict:
    """Score one commit message for probability of AI authorship."""
    if has_invisible_chars(message):
        return CommitVerdict(
            is_ai=True, confidence=1.0, reasons=("Contains invisible Unicode characters",)
        )

    reasons: list[str] = []
    confidence = 0.0

    if has_emoji(message):
        reasons.append("Contains emojis")
        confidence = max(confidence, EMOJI_CONFIDENCE)

    matched = [p.pattern for p in STRUCTURAL_PATTERNS if p.search(message)]
    if matched:
        reasons.append(f"Matches {len(matched)} AI commit pattern(s): {', '.join(matched)}")
        confidence = max(confidence, structural_confidence(len(matched)))

    if len(message) > LONG_MESSAGE_LENGTH:
        reasons.append("Unusually long commit message")
        confidence = max(confidence, LONG_MESSAGE_CONFIDENCE)

    formal = sum(1 for p in FORMALITY_PATTERNS if p.search(message))
    if formal:
        reasons.append(f"Perfect grammar/formal language ({formal} indicator(s))")
        confidence = max(confidence, formality_confidence(formal))

    return CommitVerdict(
        is_ai=confidence > AI_THRESHOLD,
        confidence=confidence,
        reasons=tuple(reasons),
    )


def classify_commit(record: CommitRecord) -> ClassifiedCommit:
    verdict = classify_message(record.message)
    return ClassifiedCommit(
        record=record,
        is_ai=verdict.is_ai,
        confidence=verdict.confidence,
        reasons=verdict.reasons,
    )


def classify_commits(records: list[CommitRecord]) -> list[ClassifiedCommit]:
    return [classify_commit(r) for r in records]
