from __future__ import annotations

from typing import Any, List

from ..models import LayoutOptions, Page, Segment, StyledLine
from ..plugins import register_renderer

PAGE_BREAK = "\f"


def segment_text(segment: Segment) -> str:
    if segment.style.small_caps:
        return segment.text.upper()
    return segment.text


class TextRenderer:
    """Render pages as plain lines, one form feed line between pages."""

    def __init__(self, options: LayoutOptions, *, page_break: str = PAGE_BREAK, **_: Any) -> None:
        self.options = options
        self.page_break = page_break
        self.output: List[str] = []
        self.page_count = 0

    def handle_page(self, page: Page) -> None:
        if self.page_count and self.page_break:
            self.output.append(self.page_break)
        self.output.extend(self.render_line(line) for line in page.lines)
        self.page_count += 1

    def finalize(self) -> List[str]:
        return self.output

    def render_line(self, line: StyledLine) -> str:
        return "".join(segment_text(segment) for segment in line.segments).rstrip()


def _text_renderer_factory(*, options: LayoutOptions, **kwargs: Any) -> TextRenderer:
    return TextRenderer(options, **kwargs)


try:
    register_renderer("text", _text_renderer_factory)
except ValueError:
    pass
