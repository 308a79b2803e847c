from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from .graphemes import grapheme_count, iter_graphemes


class BlockKind(Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    QUOTE = "quote"
    CODE = "code"
    TABLE = "table"
    IMAGE = "image"


@dataclass
class Paragraph:
    kind: ClassVar[BlockKind] = BlockKind.PARAGRAPH
    text: str


@dataclass
class Heading:
    kind: ClassVar[BlockKind] = BlockKind.HEADING
    text: str
    level: int = 1


@dataclass
class ListBlock:
    kind: ClassVar[BlockKind] = BlockKind.LIST
    items: List[str] = field(default_factory=list)


@dataclass
class Quote:
    kind: ClassVar[BlockKind] = BlockKind.QUOTE
    text: str


@dataclass
class CodeBlock:
    kind: ClassVar[BlockKind] = BlockKind.CODE
    text: str
    lang: Optional[str] = None


@dataclass
class TableCell:
    text: str
    is_header: bool = False


@dataclass
class Table:
    kind: ClassVar[BlockKind] = BlockKind.TABLE
    rows: List[List[TableCell]] = field(default_factory=list)


@dataclass
class Image:
    kind: ClassVar[BlockKind] = BlockKind.IMAGE
    id: str
    data: Optional[bytes] = None
    alt: Optional[str] = None
    caption: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


Block = Union[Paragraph, Heading, ListBlock, Quote, CodeBlock, Table, Image]


class RgbColor(NamedTuple):
    r: int
    g: int
    b: int


@dataclass(frozen=True)
class TextStyle:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    dim: bool = False
    reverse: bool = False
    strikethrough: bool = False
    small_caps: bool = False

    def with_bold(self) -> TextStyle:
        return replace(self, bold=True)


PLAIN = TextStyle()


@dataclass
class Segment:
    text: str
    fg: Optional[RgbColor] = None
    bg: Optional[RgbColor] = None
    style: TextStyle = PLAIN
    link: Optional[str] = None

    def mergeable_with(self, style: TextStyle, link: Optional[str]) -> bool:
        """True when a grapheme with ``style``/``link`` can extend this segment."""
        return self.fg is None and self.bg is None and self.style == style and self.link == link

    @property
    def width(self) -> int:
        return grapheme_count(self.text)


@dataclass
class ImagePlacement:
    id: str
    cols: int
    rows: int


@dataclass
class StyledLine:
    segments: List[Segment] = field(default_factory=list)
    image: Optional[ImagePlacement] = None

    @classmethod
    def plain(cls, text: str = "") -> StyledLine:
        return cls(segments=[Segment(text)])

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)

    @property
    def width(self) -> int:
        return sum(segment.width for segment in self.segments)

    def link_at(self, column: int) -> Optional[str]:
        offset = 0
        for segment in self.segments:
            for _ in iter_graphemes(segment.text):
                if offset == column:
                    return segment.link
                offset += 1
        return None


@dataclass
class Page:
    lines: List[StyledLine] = field(default_factory=list)


class Size(NamedTuple):
    width: int
    height: int

    def clamped(self) -> Size:
        return Size(max(1, self.width), max(1, self.height))


@dataclass
class Pagination:
    pages: List[Page] = field(default_factory=list)
    chapter_starts: List[int] = field(default_factory=lambda: [0])
    anchors: Dict[str, int] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def clamp_page(self, index: int) -> int:
        return max(0, min(index, len(self.pages) - 1))

    def chapter_index_for_page(self, page: int) -> Optional[int]:
        if not self.chapter_starts:
            return None
        found = 0
        for idx, start in enumerate(self.chapter_starts):
            if start <= page:
                found = idx
            else:
                break
        return found

    def chapter_page_range(self, idx: int) -> Optional[Tuple[int, int]]:
        if idx < 0 or idx >= len(self.chapter_starts):
            return None
        start = self.chapter_starts[idx]
        if idx + 1 < len(self.chapter_starts):
            end = self.chapter_starts[idx + 1]
        else:
            end = len(self.pages)
        if end <= start:
            return None
        return start, end

    def resolve_target(
        self,
        target: str,
        chapter_hrefs: Sequence[str] = (),
        current_page: int = 0,
    ) -> Optional[int]:
        """Resolve an in-document link target to a page index.

        Tries an exact anchor match first, then a bare ``#fragment`` joined to
        the current chapter's href, then the chapter whose href matches the
        target's path.
        """
        target = target.strip()
        if not target:
            return None
        if target in self.anchors:
            return self.anchors[target]
        if target.startswith("#"):
            chapter = self.chapter_index_for_page(current_page)
            if chapter is not None and chapter < len(chapter_hrefs):
                full = f"{chapter_hrefs[chapter]}{target}"
                if full in self.anchors:
                    return self.anchors[full]
        path = target.split("#", 1)[0]
        for idx, href in enumerate(chapter_hrefs):
            if href == path and idx < len(self.chapter_starts):
                return self.chapter_starts[idx]
        return None


@dataclass
class WordToken:
    text: str
    is_sentence_end: bool = False
    is_comma: bool = False
    chapter_index: Optional[int] = None


@dataclass
class LayoutOptions:
    justify: bool = False
    hyphenate: bool = False
    hyphen_lang: str = "en_US"
    h1_font: str = ""
    h2_font: str = ""
    h3_font: str = ""
    wrap_code_blocks: bool = False
    code_theme: str = "default"
    quote_rule_min_width: int = 16
    code_rule_min_width: int = 12
    list_bullet: str = "•"

    def heading_font(self, level: int) -> str:
        if level < 1 or level > 3:
            return ""
        return getattr(self, f"h{level}_font", "") or ""
