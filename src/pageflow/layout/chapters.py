from __future__ import annotations

from typing import Sequence

from ..markers import strip_markers
from ..models import Block, BlockKind

CHAPTER_SEPARATOR = "───"


def normalized_text(block: Block) -> str:
    return strip_markers(block.text).strip()


def _is_empty_paragraph(block: Block) -> bool:
    return block.kind is BlockKind.PARAGRAPH and not normalized_text(block)


def is_separator_text(block: Block) -> bool:
    return block.kind is BlockKind.PARAGRAPH and normalized_text(block) == CHAPTER_SEPARATOR


def is_chapter_separator(blocks: Sequence[Block], idx: int) -> bool:
    """A ``───`` paragraph flanked by empty paragraphs marks a chapter boundary."""
    if idx <= 0 or idx + 1 >= len(blocks):
        return False
    if not is_separator_text(blocks[idx]):
        return False
    return _is_empty_paragraph(blocks[idx - 1]) and _is_empty_paragraph(blocks[idx + 1])


def has_visible_content(block: Block) -> bool:
    """False only for paragraphs with nothing to show once markers are stripped."""
    if block.kind is not BlockKind.PARAGRAPH:
        return True
    return bool(normalized_text(block))
