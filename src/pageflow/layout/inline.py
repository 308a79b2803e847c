from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple, Union

from ..graphemes import grapheme_count, iter_graphemes
from ..hyphenation import Hyphenator
from ..markers import MARKER_CHARS, AnchorEvent, Piece, decode
from ..models import PLAIN, Segment, StyledLine, TextStyle

ELLIPSIS = "…"
NEWLINES = {"\n", "\r\n"}
JUSTIFY_MIN_FILL_TENTHS = 7
JUSTIFY_MIN_GAPS = 3


@dataclass
class Word:
    segments: List[Segment] = field(default_factory=list)
    width: int = 0


@dataclass
class Space:
    style: TextStyle = PLAIN
    link: Optional[str] = None


@dataclass
class Newline:
    pass


@dataclass
class AnchorToken:
    name: str


Token = Union[Word, Space, Newline, AnchorToken]


@dataclass
class WrappedLines:
    lines: List[StyledLine] = field(default_factory=list)
    anchors: List[List[str]] = field(default_factory=list)

    def __iter__(self):
        return iter(zip(self.lines, self.anchors))

    def __len__(self) -> int:
        return len(self.lines)


def is_blank(cluster: str) -> bool:
    return all(char.isspace() and char not in MARKER_CHARS for char in cluster)


def _append_grapheme(segments: List[Segment], cluster: str, style: TextStyle, link: Optional[str]) -> None:
    if segments and segments[-1].mergeable_with(style, link):
        segments[-1].text += cluster
    else:
        segments.append(Segment(cluster, style=style, link=link))


def tokenize(pieces: Sequence[Piece]) -> List[Token]:
    """Turn decoded spans into words, collapsed spaces, newlines and anchors."""
    tokens: List[Token] = []
    word = Word()

    def flush_word() -> None:
        nonlocal word
        if word.segments:
            tokens.append(word)
            word = Word()

    for piece in pieces:
        if isinstance(piece, AnchorEvent):
            flush_word()
            tokens.append(AnchorToken(piece.name))
            continue
        for cluster in iter_graphemes(piece.text):
            if cluster in NEWLINES:
                flush_word()
                tokens.append(Newline())
                continue
            if is_blank(cluster):
                flush_word()
                if not tokens or not isinstance(tokens[-1], (Space, Newline)):
                    tokens.append(Space(piece.style, piece.link))
                continue
            _append_grapheme(word.segments, cluster, piece.style, piece.link)
            word.width += 1
    flush_word()
    return tokens


def split_word(word: Word, width: int) -> List[Word]:
    """Force-split ``word`` into chunks of ``width`` graphemes; the last may be shorter."""
    width = max(1, width)
    parts: List[Word] = []
    current = Word()
    for segment in word.segments:
        for cluster in iter_graphemes(segment.text):
            _append_grapheme(current.segments, cluster, segment.style, segment.link)
            current.width += 1
            if current.width == width:
                parts.append(current)
                current = Word()
    if current.segments or not parts:
        parts.append(current)
    return parts


def _split_at(word: Word, count: int) -> Tuple[Word, Word]:
    head = Word()
    tail = Word()
    for segment in word.segments:
        for cluster in iter_graphemes(segment.text):
            target = head if head.width < count else tail
            _append_grapheme(target.segments, cluster, segment.style, segment.link)
            target.width += 1
    return head, tail


def _hyphenate(word: Word, room: int, hyphenator: Hyphenator) -> Optional[Tuple[Word, Word]]:
    plain = "".join(segment.text for segment in word.segments)
    if room < 2 or len(plain) != word.width:
        return None
    fitting = [point for point in hyphenator.break_points(plain) if 0 < point <= room - 1]
    if not fitting:
        return None
    head, tail = _split_at(word, max(fitting))
    last = head.segments[-1]
    head.segments[-1] = replace(last, text=last.text + "-")
    head.width += 1
    return head, tail


class _LineBuilder:
    def __init__(self, width: int) -> None:
        self.width = width
        self.result = WrappedLines()
        self.segments: List[Segment] = []
        self.anchors: List[str] = []
        self.used = 0

    def flush(self) -> None:
        self.result.lines.append(StyledLine(self.segments))
        self.result.anchors.append(self.anchors)
        self.segments = []
        self.anchors = []
        self.used = 0

    def emit_full(self, word: Word) -> None:
        self.result.lines.append(StyledLine(list(word.segments)))
        self.result.anchors.append([])

    def start_with(self, word: Word) -> None:
        if word.width > self.width:
            parts = split_word(word, self.width)
            for part in parts[:-1]:
                self.emit_full(part)
            word = parts[-1]
        self.segments = list(word.segments)
        self.used = word.width

    def finish(self) -> WrappedLines:
        if self.segments or self.anchors or not self.result.lines:
            self.flush()
        return self.result


def wrap_tokens(tokens: Sequence[Token], width: int, hyphenator: Optional[Hyphenator] = None) -> WrappedLines:
    width = max(1, width)
    builder = _LineBuilder(width)
    pending: Optional[Space] = None

    for token in tokens:
        if isinstance(token, Space):
            pending = token
            continue
        if isinstance(token, AnchorToken):
            builder.anchors.append(token.name)
            continue
        if isinstance(token, Newline):
            pending = None
            builder.flush()
            continue

        space = 1 if pending is not None and builder.segments else 0
        if builder.used + space + token.width <= width:
            if space:
                builder.segments.append(Segment(" ", style=pending.style, link=pending.link))
                builder.used += 1
            builder.segments.extend(token.segments)
            builder.used += token.width
        else:
            word = token
            if builder.segments:
                if hyphenator is not None:
                    split = _hyphenate(word, width - builder.used - space, hyphenator)
                    if split is not None:
                        head, word = split
                        if space:
                            builder.segments.append(Segment(" ", style=pending.style, link=pending.link))
                        builder.segments.extend(head.segments)
                builder.flush()
            builder.start_with(word)
        pending = None

    return builder.finish()


def wrap_styled_text(text: str, width: int, hyphenator: Optional[Hyphenator] = None) -> WrappedLines:
    """Decode, tokenize and greedily wrap marker-annotated text."""
    return wrap_tokens(tokenize(decode(text)), width, hyphenator)


def is_space_segment(segment: Segment) -> bool:
    return bool(segment.text) and all(char == " " for char in segment.text)


def line_width(line: StyledLine) -> int:
    return sum(grapheme_count(segment.text) for segment in line.segments)


def justify_styled_line(line: StyledLine, width: int) -> StyledLine:
    """Widen inter-word gaps so the line fills ``width`` exactly.

    Lines that are already full, less than 70% full, or have fewer than three
    gaps come back unchanged.
    """
    current = line_width(line)
    if current >= width or current * 10 < width * JUSTIFY_MIN_FILL_TENTHS:
        return line
    gaps = [idx for idx, segment in enumerate(line.segments) if is_space_segment(segment)]
    if len(gaps) < JUSTIFY_MIN_GAPS:
        return line
    extra = width - current
    base, remainder = divmod(extra, len(gaps))
    segments = list(line.segments)
    for position, idx in enumerate(gaps):
        add = base + (1 if position < remainder else 0)
        if add:
            segments[idx] = replace(segments[idx], text=segments[idx].text + " " * add)
    return StyledLine(segments, line.image)


def uppercase_segments(segments: List[Segment]) -> List[Segment]:
    return [
        replace(segment, text="".join(char.upper() if char.isascii() else char for char in segment.text))
        for segment in segments
    ]


def clip_segments(segments: Sequence[Segment], width: int) -> StyledLine:
    """Truncate to ``width`` cells, ending in an ellipsis when anything was cut."""
    width = max(1, width)
    total = sum(grapheme_count(segment.text) for segment in segments)
    if total <= width:
        return StyledLine([segment for segment in segments if segment.text])
    keep = width - 1
    out: List[Segment] = []
    used = 0
    for segment in segments:
        if used >= keep:
            break
        clusters: List[str] = []
        for cluster in iter_graphemes(segment.text):
            if used >= keep:
                break
            clusters.append(cluster)
            used += 1
        if clusters:
            out.append(replace(segment, text="".join(clusters)))
    tail = out[-1] if out else (segments[0] if segments else Segment(""))
    out.append(replace(tail, text=ELLIPSIS))
    return StyledLine(out)
