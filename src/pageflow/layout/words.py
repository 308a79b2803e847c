"""Flatten blocks into a word stream for word-at-a-time playback."""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from ..markers import strip_markers
from ..models import Block, BlockKind, WordToken
from .chapters import CHAPTER_SEPARATOR, is_chapter_separator

IMAGE_PLACEHOLDER = "[image]"
TRAILING_CLOSERS = ")]\"'"
SENTENCE_END = (".", "!", "?", ":", ";")
COMMA_PAUSE = (",", "-", ")")


def is_sentence_end(word: str) -> bool:
    return word.rstrip(TRAILING_CLOSERS).endswith(SENTENCE_END)


def is_comma(word: str) -> bool:
    return word.rstrip(TRAILING_CLOSERS).endswith(COMMA_PAUSE)


def make_token(word: str, chapter_index: Optional[int]) -> WordToken:
    return WordToken(
        text=word,
        is_sentence_end=is_sentence_end(word),
        is_comma=is_comma(word),
        chapter_index=chapter_index,
    )


def _block_texts(block: Block) -> Iterator[str]:
    kind = block.kind
    if kind in (BlockKind.PARAGRAPH, BlockKind.HEADING, BlockKind.QUOTE):
        yield block.text
    elif kind is BlockKind.LIST:
        yield from block.items
    elif kind is BlockKind.TABLE:
        for row in block.rows:
            for cell in row:
                yield cell.text
    elif kind is BlockKind.IMAGE:
        label = block.caption or block.alt
        if label:
            yield label


def extract_words(blocks: Sequence[Block]) -> List[WordToken]:
    words: List[WordToken] = []
    chapter: Optional[int] = None
    counter = 0
    for idx, block in enumerate(blocks):
        if block.kind is BlockKind.CODE:
            continue
        if block.kind is BlockKind.PARAGRAPH:
            cleaned = strip_markers(block.text).strip()
            if cleaned == CHAPTER_SEPARATOR:
                if is_chapter_separator(blocks, idx):
                    counter += 1
                    chapter = counter
                continue
            if cleaned == IMAGE_PLACEHOLDER:
                continue
        for text in _block_texts(block):
            for word in strip_markers(text).split():
                words.append(make_token(word, chapter))
    return words
