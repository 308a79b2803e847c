"""In-band inline markup.

Block text carries styling, links and anchors as private control characters
instead of a tree:

* ``STYLE_START`` / ``STYLE_END`` followed by one code letter (``b`` bold,
  ``i`` italic, ``u`` underline, ``c`` code, ``x`` strikethrough, ``s`` small
  caps). Styles are reference counted so overlapping spans nest.
* ``LINK_START target LINK_END`` opens a link; an empty target closes it.
* ``ANCHOR_START name ANCHOR_END`` marks a zero-width named position.

Malformed sequences decode to literal text; nothing is dropped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .models import PLAIN, TextStyle

STYLE_START = "\x1e"
STYLE_END = "\x1f"
LINK_START = "\x1c"
LINK_END = "\x1d"
ANCHOR_START = "\x18"
ANCHOR_END = "\x17"

MARKER_CHARS = frozenset({STYLE_START, STYLE_END, LINK_START, LINK_END, ANCHOR_START, ANCHOR_END})

BOLD = "b"
ITALIC = "i"
UNDERLINE = "u"
CODE = "c"
STRIKE = "x"
SMALL_CAPS = "s"
STYLE_CODES = (BOLD, ITALIC, UNDERLINE, CODE, STRIKE, SMALL_CAPS)


def style_start(code: str) -> str:
    return f"{STYLE_START}{code}"


def style_end(code: str) -> str:
    return f"{STYLE_END}{code}"


def styled(text: str, code: str) -> str:
    return f"{style_start(code)}{text}{style_end(code)}"


def link_start(target: str) -> str:
    target = target.strip()
    if not target:
        return ""
    return f"{LINK_START}{target}{LINK_END}"


def link_end() -> str:
    return f"{LINK_START}{LINK_END}"


def linked(text: str, target: str) -> str:
    opener = link_start(target)
    if not opener:
        return text
    return f"{opener}{text}{link_end()}"


def anchor(name: str, prefix: Optional[str] = None) -> str:
    name = name.strip()
    if name.startswith("#"):
        name = name[1:].strip()
    if not name:
        return ""
    return f"{ANCHOR_START}{prefix or ''}#{name}{ANCHOR_END}"


def has_markers(text: str) -> bool:
    return any(char in MARKER_CHARS for char in text)


def strip_markers(text: str) -> str:
    """Remove every marker, including link targets and anchor names."""
    if not has_markers(text):
        return text
    out: List[str] = []
    idx = 0
    length = len(text)
    while idx < length:
        char = text[idx]
        if char in (STYLE_START, STYLE_END):
            idx += 2
            continue
        if char == LINK_START:
            end = text.find(LINK_END, idx + 1)
            idx = length if end == -1 else end + 1
            continue
        if char == ANCHOR_START:
            end = text.find(ANCHOR_END, idx + 1)
            idx = length if end == -1 else end + 1
            continue
        out.append(char)
        idx += 1
    return "".join(out)


_COUNT_FIELDS: Dict[str, str] = {
    BOLD: "bold",
    ITALIC: "italic",
    UNDERLINE: "underline",
    CODE: "code",
    STRIKE: "strike",
    SMALL_CAPS: "small_caps",
}


@dataclass
class StyleCounts:
    bold: int = 0
    italic: int = 0
    underline: int = 0
    code: int = 0
    strike: int = 0
    small_caps: int = 0

    def apply(self, code: str, opening: bool) -> bool:
        name = _COUNT_FIELDS.get(code)
        if name is None:
            return False
        value = getattr(self, name)
        # Unmatched closes saturate at zero.
        setattr(self, name, value + 1 if opening else max(0, value - 1))
        return True

    def style(self) -> TextStyle:
        if not (self.bold or self.italic or self.underline or self.code or self.strike or self.small_caps):
            return PLAIN
        return TextStyle(
            bold=self.bold > 0,
            italic=self.italic > 0,
            underline=self.underline > 0,
            dim=self.code > 0,
            reverse=self.code > 0,
            strikethrough=self.strike > 0,
            small_caps=self.small_caps > 0,
        )


@dataclass
class Span:
    text: str
    style: TextStyle = PLAIN
    link: Optional[str] = None


@dataclass
class AnchorEvent:
    name: str


Piece = Union[Span, AnchorEvent]


def decode(text: str) -> List[Piece]:
    """Decode marker-annotated text into spans and anchor events, in order."""
    pieces: List[Piece] = []
    current: List[str] = []
    counts = StyleCounts()
    link: Optional[str] = None

    def flush() -> None:
        if current:
            pieces.append(Span("".join(current), counts.style(), link))
            current.clear()

    idx = 0
    length = len(text)
    while idx < length:
        char = text[idx]
        if char in (STYLE_START, STYLE_END):
            if idx + 1 >= length:
                current.append(char)
                break
            code = text[idx + 1]
            if code in STYLE_CODES:
                flush()
                counts.apply(code, char == STYLE_START)
            else:
                current.append(char)
                current.append(code)
            idx += 2
            continue
        if char in (LINK_START, ANCHOR_START):
            closer = LINK_END if char == LINK_START else ANCHOR_END
            end = text.find(closer, idx + 1)
            if end == -1:
                current.append(text[idx:])
                break
            target = text[idx + 1 : end]
            flush()
            if char == LINK_START:
                link = target.strip() or None
            else:
                name = target.strip()
                if name:
                    pieces.append(AnchorEvent(name))
            idx = end + 1
            continue
        current.append(char)
        idx += 1
    flush()
    return pieces


_EDGE_BLANK_RE = re.compile(r"^[^\S\x1c-\x1f]+|[^\S\x1c-\x1f]+$")


def trim(text: str) -> str:
    """``str.strip`` that leaves marker characters in place."""
    return _EDGE_BLANK_RE.sub("", text)
