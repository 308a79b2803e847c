from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from ..graphemes import grapheme_count
from ..hyphenation import Hyphenator
from ..markers import AnchorEvent, decode, strip_markers, trim
from ..models import Segment, StyledLine, Table, TableCell
from .inline import WrappedLines, line_width, wrap_styled_text

WIDE_SEPARATOR = " | "
NARROW_SEPARATOR = " "
WIDE_RULE_SEPARATOR = "-+-"
RULE_CHAR = "-"
PREFERRED_MIN_WIDTH = 3


def table_separator(width: int, cols: int) -> str:
    if cols <= 1:
        return ""
    if width >= cols + (cols - 1) * 3:
        return WIDE_SEPARATOR
    if width >= cols + (cols - 1):
        return NARROW_SEPARATOR
    return ""


def normalized_rows(table: Table) -> List[List[TableCell]]:
    """Rows padded with empty cells up to the widest row."""
    cols = max((len(row) for row in table.rows), default=0)
    return [list(row) + [TableCell("")] * (cols - len(row)) for row in table.rows]


def column_content_widths(rows: Sequence[Sequence[TableCell]], cols: int) -> List[int]:
    widths = [0] * cols
    for row in rows:
        for idx, cell in enumerate(row[:cols]):
            plain = strip_markers(cell.text)
            widest = max((grapheme_count(line) for line in plain.split("\n")), default=0)
            widths[idx] = max(widths[idx], widest)
    return widths


def compute_column_widths(content_widths: Sequence[int], available: int) -> List[int]:
    """Share ``available`` cells between columns.

    Every column starts at a minimum (3 when there is room for it, else 1);
    single cells then go to the column furthest from its content width, and
    once all columns fit their content the narrowest column takes the rest.
    """
    cols = len(content_widths)
    if cols == 0:
        return []
    available = max(0, available)
    minimum = PREFERRED_MIN_WIDTH if available >= cols * PREFERRED_MIN_WIDTH else 1
    if available < cols:
        return [1 if idx < available else 0 for idx in range(cols)]
    widths = [minimum] * cols
    remaining = available - minimum * cols
    capacity = [max(0, content - minimum) for content in content_widths]
    while remaining > 0:
        best = max(range(cols), key=lambda idx: (capacity[idx], -idx))
        if capacity[best] > 0:
            capacity[best] -= 1
        else:
            best = min(range(cols), key=lambda idx: (widths[idx], idx))
        widths[best] += 1
        remaining -= 1
    return widths


def header_run_end(rows: Sequence[Sequence[TableCell]]) -> Optional[int]:
    """Index of the last row in the leading run of header rows."""
    last: Optional[int] = None
    for idx, row in enumerate(rows):
        if not any(cell.is_header for cell in row):
            break
        last = idx
    return last


def cell_anchors(text: str) -> List[str]:
    """Anchor names in a cell that is too narrow to be drawn."""
    return [piece.name for piece in decode(text) if isinstance(piece, AnchorEvent)]


def rule_line(widths: Sequence[int], separator: str) -> StyledLine:
    rule_sep = WIDE_RULE_SEPARATOR if separator == WIDE_SEPARATOR else separator
    return StyledLine.plain(rule_sep.join(RULE_CHAR * width for width in widths))


def render_table(
    table: Table,
    width: int,
    hyphenator: Optional[Hyphenator] = None,
) -> List[Tuple[StyledLine, List[str]]]:
    """Lay out ``table`` at ``width`` cells as lines paired with their anchors."""
    width = max(1, width)
    rows = normalized_rows(table)
    cols = len(rows[0]) if rows else 0
    if cols == 0:
        return []

    separator = table_separator(width, cols)
    available = width - grapheme_count(separator) * (cols - 1)
    widths = compute_column_widths(column_content_widths(rows, cols), available)
    visible = [idx for idx, col_width in enumerate(widths) if col_width > 0]
    hidden = [idx for idx, col_width in enumerate(widths) if col_width == 0]
    header_end = header_run_end(rows)

    out: List[Tuple[StyledLine, List[str]]] = []
    for row_idx, row in enumerate(rows):
        is_header = any(cell.is_header for cell in row)
        wrapped: List[WrappedLines] = [
            wrap_styled_text(trim(row[idx].text), widths[idx], hyphenator) for idx in visible
        ]
        height = max((len(cell) for cell in wrapped), default=1)
        hidden_anchors = [name for idx in hidden for name in cell_anchors(row[idx].text)]
        for line_idx in range(height):
            segments: List[Segment] = []
            anchors: List[str] = list(hidden_anchors) if line_idx == 0 else []
            for position, (idx, cell) in enumerate(zip(visible, wrapped)):
                if line_idx < len(cell.lines):
                    cell_segments = list(cell.lines[line_idx].segments)
                    anchors.extend(cell.anchors[line_idx])
                else:
                    cell_segments = []
                if is_header:
                    cell_segments = [replace(seg, style=seg.style.with_bold()) for seg in cell_segments]
                pad = widths[idx] - line_width(StyledLine(cell_segments))
                if pad > 0:
                    cell_segments.append(Segment(" " * pad))
                segments.extend(cell_segments)
                if separator and position + 1 < len(visible):
                    segments.append(Segment(separator))
            out.append((StyledLine(segments), anchors))
        if header_end == row_idx:
            out.append((rule_line([widths[idx] for idx in visible], separator), []))
    return out
