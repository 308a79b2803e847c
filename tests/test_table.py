"""Tests for table layout."""

from pageflow.layout.table import (
    column_content_widths,
    compute_column_widths,
    header_run_end,
    normalized_rows,
    render_table,
    table_separator,
)
from pageflow.markers import styled
from pageflow.models import Table, TableCell


def _table(*rows, header_rows=0):
    return Table(
        [[TableCell(text, idx < header_rows) for text in row] for idx, row in enumerate(rows)]
    )


def test_column_widths_narrow_column_takes_the_rest():
    """Test allocation once the wide column is satisfied."""
    assert compute_column_widths([4, 20], 30) == [10, 20]


def test_column_widths_prefer_largest_shortfall():
    """Test that extra width goes where content is widest."""
    assert compute_column_widths([3, 30], 20) == [3, 17]


def test_column_widths_minimum_one_when_tight():
    """Test the fallback minimum when three cells per column do not fit."""
    assert compute_column_widths([10, 10, 10], 5) == [2, 2, 1]


def test_column_widths_fewer_cells_than_columns():
    """Test that columns without room get zero width."""
    assert compute_column_widths([5, 5, 5], 2) == [1, 1, 0]


def test_separator_selection():
    """Test the separator chosen for each width."""
    assert table_separator(80, 3) == " | "
    assert table_separator(5, 3) == " "
    assert table_separator(4, 3) == ""
    assert table_separator(80, 1) == ""


def test_rows_are_padded_to_widest_row():
    """Test normalization of ragged rows."""
    rows = normalized_rows(_table(["a", "b", "c"], ["d"]))
    assert [cell.text for cell in rows[1]] == ["d", "", ""]


def test_content_widths_ignore_markers():
    """Test that styling markers do not count towards width."""
    rows = normalized_rows(_table([styled("abc", "b"), "line one\nx"]))
    assert column_content_widths(rows, 2) == [3, 8]


def test_header_run_is_leading_only():
    """Test that only a leading run of header rows counts."""
    table = Table(
        [
            [TableCell("h", True)],
            [TableCell("a")],
            [TableCell("h2", True)],
        ]
    )
    assert header_run_end(table.rows) == 0
    assert header_run_end([[TableCell("a")]]) is None


def test_render_table_layout():
    """Test a small table with a header rule."""
    lines = render_table(_table(["Name", "Qty"], ["apple", "3"], header_rows=1), 20)
    texts = [line.text for line, _ in lines]
    assert texts == [
        "Name      | Qty     ",
        "---------" + "-+-" + "--------",
        "apple     | 3       ",
    ]
    header_line = lines[0][0]
    assert header_line.segments[0].style.bold
    assert all(line.width <= 20 for line, _ in lines)


def test_render_table_wraps_cells():
    """Test that long cells wrap within their column."""
    lines = render_table(_table(["one two three", "x"]), 11)
    assert len(lines) > 1
    assert all(line.width <= 11 for line, _ in lines)


def test_render_table_reports_anchors():
    """Test that anchors inside cells reach the output lines."""
    lines = render_table(Table([[TableCell("\x18#cell\x17value")]]), 20)
    assert lines[0][1] == ["#cell"]


def test_render_table_narrow_width_bound():
    """Test that degenerate widths never overflow."""
    table = _table(["a", "b", "c", "d", "e"], ["f", "g", "h", "i", "j"])
    for width in range(1, 12):
        for line, _ in render_table(table, width):
            assert line.width <= width


def test_render_empty_table():
    """Test that an empty table produces no lines."""
    assert render_table(Table([]), 20) == []
    assert render_table(Table([[]]), 20) == []


def test_render_table_keeps_anchors_of_hidden_columns():
    """Test that anchors in columns too narrow to draw are still reported."""
    table = Table([[TableCell("a"), TableCell("b"), TableCell("\x18#note\x17c")]])
    lines = render_table(table, 2)
    assert [line.text for line, _ in lines] == ["ab"]
    assert lines[0][1] == ["#note"]
    assert all(line.width <= 2 for line, _ in lines)
