from __future__ import annotations

import logging
import re
from typing import List, Optional

import pyphen

logger = logging.getLogger(__name__)

WORD_RE = re.compile(r"^([^A-Za-zÀ-ÖØ-öø-ÿ'’]*)([A-Za-zÀ-ÖØ-öø-ÿ'’]+)([^A-Za-zÀ-ÖØ-öø-ÿ'’]*)$")
MIN_WORD_LENGTH = 5


class Hyphenator:
    def __init__(self, lang: str) -> None:
        self.lang = lang
        self._dic = pyphen.Pyphen(lang=lang)

    def break_points(self, word: str) -> List[int]:
        """Character offsets where ``word`` may be split with a hyphen.

        Leading and trailing punctuation stay attached to the outer pieces.
        """
        match = WORD_RE.match(word)
        if not match:
            return []
        leading, core, _trailing = match.groups()
        if len(core) < MIN_WORD_LENGTH:
            return []
        offset = len(leading)
        return [offset + position for position in self._dic.positions(core)]


def build_hyphenator(lang: str) -> Optional[Hyphenator]:
    try:
        return Hyphenator(lang or "en_US")
    except KeyError:
        logger.warning("No hyphenation dictionary for '%s'; hyphenation disabled.", lang)
        return None
