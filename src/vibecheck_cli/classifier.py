"""Per-line authorship classification.

The orchestrator only needs something satisfying ``LineClassifier``;
``HeuristicLineClassifier`` is the built-in default.
"""

from __future__ import annotations

import re
from typing import Protocol

from .models import CodeAnalysis, Evidence, LineResult
from .signals import has_emoji, has_invisible_chars


class LineClassifier(Protocol):
    def analyze(self, content: str, language: str) -> CodeAnalysis: ...


COMMENT_PREFIXES = ("#", "//", "/*", "*", "<!--", "--", ";")

# Phrasing typical of assistant-written comments
COMMENT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bthis (function|method|component|class|hook) (handles|is responsible for|will)\b",
        r"\b(helper|utility) function (to|that|for)\b",
        r"\bensure[sd]? that\b",
        r"\bfor better (readability|maintainability|performance)\b",
        r"\b(you can|you may|you might) (also )?(add|replace|customize|modify)\b",
        r"\badd (your|more) .+ here\b",
        r"\bin a real (app|application|implementation|world scenario)\b",
        r"\bcomprehensive\b",
        r"\bseamless(ly)?\b",
        r"\brobust (error handling|solution|implementation)\b",
    )
]

INVISIBLE_CONFIDENCE = 1.0
EMOJI_CONFIDENCE = 0.9
PATTERN_CONFIDENCE = 0.7


def _is_comment(stripped: str) -> bool:
    return stripped.startswith(COMMENT_PREFIXES)


class HeuristicLineClassifier:
    """Flags lines with invisible characters, emoji, or assistant-style comments."""

    def analyze(self, content: str, language: str) -> CodeAnalysis:
        results: list[LineResult] = []

        for number, line in enumerate(content.splitlines(), start=1):
            stripped = line.strip()
            if not stripped:
                continue
            results.append(self._classify_line(number, stripped, language))

        flagged = [r for r in results if r.is_ai]
        confidence = (
            sum(r.confidence for r in flagged) / len(flagged) if flagged else 0.0
        )
        return CodeAnalysis(
            total_lines=len(results),
            ai_lines=len(flagged),
            human_lines=len(results) - len(flagged),
            overall_confidence=confidence,
            lines=results,
        )

    def _classify_line(self, number: int, line: str, language: str) -> LineResult:
        reasons: list[str] = []
        evidence: set[Evidence] = set()
        confidence = 0.0

        if has_invisible_chars(line):
            reasons.append("Contains invisible Unicode characters")
            evidence.add(Evidence.INVISIBLE_CHAR)
            confidence = INVISIBLE_CONFIDENCE

        if has_emoji(line):
            reasons.append("Contains emojis")
            evidence.add(Evidence.EMOJI)
            confidence = max(confidence, EMOJI_CONFIDENCE)

        # Markdown and plain text are all prose; elsewhere only comments count.
        if language in ("markdown", "text") or _is_comment(line):
            for pattern in COMMENT_PATTERNS:
                if pattern.search(line):
                    reasons.append(f"Matches AI comment pattern: {pattern.pattern}")
                    evidence.add(Evidence.PATTERN)
                    confidence = max(confidence, PATTERN_CONFIDENCE)
                    break

        return LineResult(
            line_number=number,
            is_ai=confidence > 0.5,
            confidence=confidence,
            reasons=tuple(reasons),
            evidence=frozenset(evidence),
        )
