"""Character-level signals shared by the commit and line classifiers."""

from __future__ import annotations

import re

# Zero-width and invisible formatting characters (inclusive code point ranges)
INVISIBLE_RANGES = [
    (0x200B, 0x200D),  # zero-width space / non-joiner / joiner
    (0xFEFF, 0xFEFF),  # byte order mark
    (0x2060, 0x2060),  # word joiner
    (0x180E, 0x180E),  # mongolian vowel separator
    (0x2061, 0x2064),  # invisible math operators
]

EMOJI_RANGES = [
    (0x1F600, 0x1F64F),  # emoticons
    (0x1F300, 0x1F5FF),  # symbols & pictographs
    (0x1F680, 0x1F6FF),  # transport & map
    (0x1F1E0, 0x1F1FF),  # flags
    (0x2600, 0x26FF),  # misc symbols
    (0x2700, 0x27BF),  # dingbats
]


def _char_class(ranges: list[tuple[int, int]]) -> re.Pattern[str]:
    parts = []
    for start, end in ranges:
        if start == end:
            parts.append(re.escape(chr(start)))
        else:
            parts.append(f"{re.escape(chr(start))}-{re.escape(chr(end))}")
    return re.compile("[" + "".join(parts) + "]")


INVISIBLE_CHARS_RE = _char_class(INVISIBLE_RANGES)
EMOJI_RE = _char_class(EMOJI_RANGES)


def has_invisible_chars(text: str) -> bool:
    return INVISIBLE_CHARS_RE.search(text) is not None


def has_emoji(text: str) -> bool:
    return EMOJI_RE.search(text) is not None
