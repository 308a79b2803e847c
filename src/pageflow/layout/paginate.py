from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pyfiglet import CharNotPrinted, Figlet, FontNotFound

from ..graphemes import grapheme_count, iter_graphemes
from ..highlight import Highlighter, HighlightLine, default_highlighter, plain_highlight
from ..hyphenation import Hyphenator, build_hyphenator
from ..images import fallback_text, image_dimensions, image_rows
from ..markers import strip_markers
from ..models import (
    Block,
    BlockKind,
    CodeBlock,
    Heading,
    Image,
    ImagePlacement,
    LayoutOptions,
    ListBlock,
    Page,
    Pagination,
    Paragraph,
    Quote,
    Segment,
    Size,
    StyledLine,
    Table,
)
from .chapters import has_visible_content, is_chapter_separator
from .inline import (
    WrappedLines,
    clip_segments,
    justify_styled_line,
    uppercase_segments,
    wrap_styled_text,
)
from .table import render_table

logger = logging.getLogger(__name__)

RULE_PREFIX = "│ "
INDENT_PREFIX = "  "
# Figlet renders unwrapped; overflow is checked against the page width.
FIGLET_RENDER_WIDTH = 100000


@dataclass
class _PageState:
    """Accumulator threaded through a single pagination pass."""

    height: int
    pages: List[Page] = field(default_factory=list)
    current: List[StyledLine] = field(default_factory=list)
    chapter_starts: List[int] = field(default_factory=lambda: [0])
    anchors: Dict[str, int] = field(default_factory=dict)
    pending_chapter: bool = False
    page_index: int = 0

    def push_line(self, line: StyledLine, anchors: Iterable[str] = ()) -> None:
        for name in anchors:
            self.anchors.setdefault(name, self.page_index)
        self.current.append(line)
        if len(self.current) >= self.height:
            self.flush_page()

    def push_blank(self) -> None:
        self.push_line(StyledLine.plain(""))

    def flush_page(self) -> None:
        self.pages.append(Page(self.current))
        self.current = []
        self.page_index += 1

    def start_chapter(self) -> None:
        self.pending_chapter = False
        if self.current:
            self.flush_page()
        if self.page_index > self.chapter_starts[-1]:
            self.chapter_starts.append(self.page_index)

    def finish(self) -> Pagination:
        if self.current or not self.pages:
            self.flush_page()
        return Pagination(pages=self.pages, chapter_starts=self.chapter_starts, anchors=self.anchors)


class Paginator:
    def __init__(
        self,
        size: Size,
        options: Optional[LayoutOptions] = None,
        highlighter: Optional[Highlighter] = None,
    ) -> None:
        self.size = Size(*size).clamped()
        self.width = self.size.width
        self.options = options or LayoutOptions()
        self.highlighter = highlighter or default_highlighter(self.options.code_theme)
        self.hyphenator: Optional[Hyphenator] = (
            build_hyphenator(self.options.hyphen_lang) if self.options.hyphenate else None
        )
        self.figlets: Dict[str, Optional[Figlet]] = {}
        self._handlers: Dict[BlockKind, Callable[[object, _PageState], None]] = {
            BlockKind.PARAGRAPH: self._render_paragraph,
            BlockKind.HEADING: self._render_heading,
            BlockKind.LIST: self._render_list,
            BlockKind.QUOTE: self._render_quote,
            BlockKind.CODE: self._render_code_block,
            BlockKind.TABLE: self._render_table,
            BlockKind.IMAGE: self._render_image,
        }

    def paginate(self, blocks: Sequence[Block]) -> Pagination:
        state = _PageState(height=self.size.height)
        for idx, block in enumerate(blocks):
            if state.pending_chapter and has_visible_content(block):
                state.start_chapter()
            self._handlers[block.kind](block, state)
            if is_chapter_separator(blocks, idx):
                state.pending_chapter = True
            if not is_chapter_separator(blocks, idx + 1):
                state.push_blank()
        result = state.finish()
        logger.debug(
            "Paginated %d blocks at %dx%d into %d pages, %d chapters, %d anchors",
            len(blocks),
            self.size.width,
            self.size.height,
            result.page_count,
            len(result.chapter_starts),
            len(result.anchors),
        )
        return result

    def _wrap(self, text: str, width: Optional[int] = None) -> WrappedLines:
        return wrap_styled_text(text, self.width if width is None else width, self.hyphenator)

    def _push_wrapped(self, wrapped: WrappedLines, state: _PageState, justify: bool = False) -> None:
        last = len(wrapped) - 1
        for idx, (line, anchors) in enumerate(wrapped):
            if justify and idx < last:
                line = justify_styled_line(line, self.width)
            state.push_line(line, anchors)

    def _render_paragraph(self, block: Paragraph, state: _PageState) -> None:
        self._push_wrapped(self._wrap(block.text), state, justify=self.options.justify)

    def _render_list(self, block: ListBlock, state: _PageState) -> None:
        bullet = self.options.list_bullet
        for item in block.items:
            text = f"{bullet} {item}" if bullet else item
            self._push_wrapped(self._wrap(text), state, justify=self.options.justify)

    def _render_heading(self, block: Heading, state: _PageState) -> None:
        wrapped = self._wrap(block.text)
        figlet_lines = self._render_figlet_heading(block.level, block.text)
        if figlet_lines:
            anchors = [name for names in wrapped.anchors for name in names]
            for idx, text in enumerate(figlet_lines):
                state.push_line(StyledLine.plain(text), anchors if idx == 0 else ())
            return
        for line, anchors in wrapped:
            state.push_line(StyledLine(uppercase_segments(line.segments), line.image), anchors)

    def _render_figlet_heading(self, level: int, text: str) -> Optional[List[str]]:
        font_name = self.options.heading_font(level)
        if not font_name:
            return None
        plain = strip_markers(text).strip()
        if not plain:
            return None
        cache_key = font_name
        if cache_key not in self.figlets:
            try:
                self.figlets[cache_key] = Figlet(font=font_name, width=FIGLET_RENDER_WIDTH)
            except FontNotFound:
                logger.warning("Unknown figlet font '%s'; using plain headings.", font_name)
                self.figlets[cache_key] = None
        figlet = self.figlets[cache_key]
        if figlet is None:
            return None
        try:
            rendered = figlet.renderText(plain)
        except CharNotPrinted:
            return None
        lines = [line.rstrip() for line in rendered.rstrip("\n").splitlines()]
        if not lines or any(grapheme_count(line) > self.width for line in lines):
            return None
        return lines

    def _prefix(self, min_width: int) -> str:
        if self.width >= min_width and self.width > len(RULE_PREFIX):
            return RULE_PREFIX
        if self.width > len(INDENT_PREFIX):
            return INDENT_PREFIX
        return ""

    def _render_quote(self, block: Quote, state: _PageState) -> None:
        prefix = self._prefix(self.options.quote_rule_min_width)
        wrapped = self._wrap(block.text, self.width - len(prefix))
        for line, anchors in wrapped:
            segments = [Segment(prefix)] + line.segments if prefix else line.segments
            state.push_line(StyledLine(segments), anchors)

    def _highlight(self, block: CodeBlock) -> List[HighlightLine]:
        try:
            lines = self.highlighter(block.lang, block.text)
        except Exception as exc:
            logger.debug("Highlighter failed for %r, rendering plain: %s", block.lang, exc)
            lines = None
        if not lines:
            lines = plain_highlight(block.lang, block.text)
        return lines

    def _render_code_block(self, block: CodeBlock, state: _PageState) -> None:
        prefix = self._prefix(self.options.code_rule_min_width)
        for spans in self._highlight(block):
            segments = [Segment(text, fg=fg, bg=bg) for text, fg, bg in spans if text]
            if not self.options.wrap_code_blocks:
                state.push_line(clip_segments([Segment(prefix)] + segments, self.width))
                continue
            for chunk in _chunk_segments(segments, self.width - len(prefix)):
                state.push_line(StyledLine([Segment(prefix)] + chunk if prefix else chunk))

    def _render_table(self, block: Table, state: _PageState) -> None:
        for line, anchors in render_table(block, self.width, self.hyphenator):
            state.push_line(line, anchors)

    def _render_image(self, block: Image, state: _PageState) -> None:
        label = block.caption or block.alt
        if block.data:
            width, height = image_dimensions(block)
            rows = image_rows(width, height, self.width, self.size.height)
            for row in range(rows):
                line = StyledLine.plain(" " * self.width)
                if row == 0:
                    line.image = ImagePlacement(id=block.id, cols=self.width, rows=rows)
                state.push_line(line)
        else:
            label = block.caption or fallback_text(block.alt, block.width, block.height)
        if label:
            self._push_wrapped(self._wrap(label), state)


def _chunk_segments(segments: Sequence[Segment], width: int) -> List[List[Segment]]:
    """Split a line into consecutive runs of at most ``width`` graphemes."""
    width = max(1, width)
    chunks: List[List[Segment]] = [[]]
    used = 0
    for segment in segments:
        clusters: List[str] = []
        for cluster in iter_graphemes(segment.text):
            if used == width:
                if clusters:
                    chunks[-1].append(replace(segment, text="".join(clusters)))
                    clusters = []
                chunks.append([])
                used = 0
            clusters.append(cluster)
            used += 1
        if clusters:
            chunks[-1].append(replace(segment, text="".join(clusters)))
    return chunks


SizeLike = Union[Size, Tuple[int, int]]


def paginate(
    blocks: Sequence[Block],
    size: SizeLike,
    justify: bool = False,
    *,
    options: Optional[LayoutOptions] = None,
    highlighter: Optional[Highlighter] = None,
) -> Pagination:
    """Lay ``blocks`` out into pages of ``size`` cells.

    Returns the pages together with the page index of every chapter start and
    the first page on which each anchor appears. Never raises for any block
    list; zero sizes are treated as one.
    """
    options = options or LayoutOptions()
    if justify and not options.justify:
        options = replace(options, justify=True)
    return Paginator(Size(*size), options, highlighter).paginate(blocks)


def paginate_pages(blocks: Sequence[Block], size: SizeLike, justify: bool = False) -> List[Page]:
    return paginate(blocks, size, justify).pages
