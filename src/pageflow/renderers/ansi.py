from __future__ import annotations

from typing import Any, List

from ..models import LayoutOptions, Segment, StyledLine, TextStyle
from ..plugins import register_renderer
from .text import TextRenderer, segment_text

_RESET = "\x1b[0m"
_STYLE_CODES = (
    ("bold", "1"),
    ("dim", "2"),
    ("italic", "3"),
    ("underline", "4"),
    ("reverse", "7"),
    ("strikethrough", "9"),
)


def sgr_codes(style: TextStyle) -> List[str]:
    return [code for name, code in _STYLE_CODES if getattr(style, name)]


def segment_sgr(segment: Segment) -> str:
    codes = sgr_codes(segment.style)
    if segment.fg is not None:
        codes.append("38;2;{};{};{}".format(*segment.fg))
    if segment.bg is not None:
        codes.append("48;2;{};{};{}".format(*segment.bg))
    if not codes:
        return ""
    return f"\x1b[{';'.join(codes)}m"


class AnsiRenderer(TextRenderer):
    """Render pages with SGR escapes for styles and 24-bit colours."""

    def render_line(self, line: StyledLine) -> str:
        parts: List[str] = []
        for segment in line.segments:
            if not segment.text:
                continue
            sgr = segment_sgr(segment)
            if sgr:
                parts.append(f"{sgr}{segment_text(segment)}{_RESET}")
            else:
                parts.append(segment_text(segment))
        return "".join(parts).rstrip(" ")


def _ansi_renderer_factory(*, options: LayoutOptions, **kwargs: Any) -> AnsiRenderer:
    return AnsiRenderer(options, **kwargs)


try:
    register_renderer("ansi", _ansi_renderer_factory)
except ValueError:
    pass
