"""Grapheme cluster helpers.

Clusters are approximated with ``unicodedata``: combining marks, variation
selectors, emoji modifiers and zero-width-joiner sequences stay attached to
their base character, regional indicators pair into flags and CR LF is kept
together. Every cluster occupies a single cell. The approximation does not
join Hangul L/V/T jamo sequences or prepended marks, so text in those
scripts may split into more clusters than UAX #29 would give.
"""

from __future__ import annotations

import unicodedata
from typing import Iterator, List

ZWJ = "\u200d"


def _is_extender(char: str) -> bool:
    if unicodedata.category(char) in {"Mn", "Mc", "Me"}:
        return True
    code = ord(char)
    return 0x1F3FB <= code <= 0x1F3FF or 0xFE00 <= code <= 0xFE0F or 0xE0020 <= code <= 0xE007F


def _is_regional_indicator(char: str) -> bool:
    return 0x1F1E6 <= ord(char) <= 0x1F1FF


def iter_graphemes(text: str) -> Iterator[str]:
    if not text:
        return
    cluster = text[0]
    ri_run = 1 if _is_regional_indicator(cluster) else 0
    for char in text[1:]:
        prev = cluster[-1]
        if prev == "\r" and char == "\n" and len(cluster) == 1:
            cluster += char
            continue
        if cluster in {"\r\n", "\n", "\r"}:
            yield cluster
            cluster = char
            ri_run = 1 if _is_regional_indicator(char) else 0
            continue
        if char == ZWJ or _is_extender(char) or prev == ZWJ:
            cluster += char
            continue
        if _is_regional_indicator(char) and ri_run % 2 == 1:
            cluster += char
            ri_run += 1
            continue
        yield cluster
        cluster = char
        ri_run = 1 if _is_regional_indicator(char) else 0
    yield cluster


def graphemes(text: str) -> List[str]:
    return list(iter_graphemes(text))


def grapheme_count(text: str) -> int:
    return sum(1 for _ in iter_graphemes(text))
