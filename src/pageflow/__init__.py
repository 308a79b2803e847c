"""Fixed-size page layout for styled long-form text."""

from .layout import extract_words, paginate, paginate_pages
from .markers import anchor, linked, strip_markers, styled
from .models import (
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
    RgbColor,
    Segment,
    Size,
    StyledLine,
    Table,
    TableCell,
    TextStyle,
    WordToken,
)

__all__ = [
    "Block",
    "BlockKind",
    "CodeBlock",
    "Heading",
    "Image",
    "ImagePlacement",
    "LayoutOptions",
    "ListBlock",
    "Page",
    "Pagination",
    "Paragraph",
    "Quote",
    "RgbColor",
    "Segment",
    "Size",
    "StyledLine",
    "Table",
    "TableCell",
    "TextStyle",
    "WordToken",
    "anchor",
    "extract_words",
    "linked",
    "paginate",
    "paginate_pages",
    "strip_markers",
    "styled",
]
