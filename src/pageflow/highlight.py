"""Syntax highlighting for code blocks.

A highlighter is any callable ``(lang, text) -> lines`` where each line is a
list of ``(text, fg, bg)`` spans. The pygments-backed default is built once
per theme and shared.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional, Protocol, Tuple

from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.style import StyleMeta
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .models import RgbColor

HighlightSpan = Tuple[str, Optional[RgbColor], Optional[RgbColor]]
HighlightLine = List[HighlightSpan]

DEFAULT_THEME = "default"
TAB_SIZE = 4


class Highlighter(Protocol):
    def __call__(self, lang: Optional[str], text: str) -> List[HighlightLine]:
        ...


def parse_hex_color(value: Optional[str]) -> Optional[RgbColor]:
    if not value:
        return None
    value = value.lstrip("#")
    if len(value) == 3:
        value = "".join(char * 2 for char in value)
    if len(value) != 6:
        return None
    try:
        return RgbColor(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    except ValueError:
        return None


def split_lines(text: str) -> List[str]:
    text = text.replace("\r\n", "\n")
    lines = text.split("\n")
    if lines and lines[-1] == "" and len(lines) > 1:
        lines.pop()
    return lines


def plain_highlight(lang: Optional[str], text: str) -> List[HighlightLine]:
    return [[(line.expandtabs(TAB_SIZE), None, None)] if line else [] for line in split_lines(text)]


class PygmentsHighlighter:
    def __init__(self, theme: str = DEFAULT_THEME) -> None:
        try:
            self.style: StyleMeta = get_style_by_name(theme)
        except ClassNotFound:
            self.style = get_style_by_name(DEFAULT_THEME)
        self.background = parse_hex_color(self.style.background_color)

    def lexer_for(self, lang: Optional[str]) -> Lexer:
        options = {"stripnl": False, "ensurenl": False, "tabsize": TAB_SIZE}
        if lang:
            try:
                return get_lexer_by_name(lang.strip().lower(), **options)
            except ClassNotFound:
                pass
        return TextLexer(**options)

    def __call__(self, lang: Optional[str], text: str) -> List[HighlightLine]:
        text = text.replace("\r\n", "\n")
        lines: List[HighlightLine] = [[]]
        for token_type, value in self.lexer_for(lang).get_tokens(text):
            token_style = self.style.style_for_token(token_type)
            fg = parse_hex_color(token_style.get("color"))
            bg = parse_hex_color(token_style.get("bgcolor")) or self.background
            parts = value.split("\n")
            for idx, part in enumerate(parts):
                if idx > 0:
                    lines.append([])
                if part:
                    lines[-1].append((part, fg, bg))
        if len(lines) > 1 and not lines[-1] and text.endswith("\n"):
            lines.pop()
        return lines


@lru_cache(maxsize=None)
def default_highlighter(theme: str = DEFAULT_THEME) -> PygmentsHighlighter:
    return PygmentsHighlighter(theme)
