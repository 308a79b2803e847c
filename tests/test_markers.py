"""Tests for the inline marker codec."""

from pageflow.markers import (
    ANCHOR_END,
    ANCHOR_START,
    LINK_START,
    STYLE_START,
    AnchorEvent,
    Span,
    anchor,
    decode,
    link_end,
    link_start,
    linked,
    strip_markers,
    style_end,
    style_start,
    styled,
    trim,
)


def test_strip_markers_removes_styles_links_and_anchors():
    """Test that stripping leaves only visible text."""
    text = f"{anchor('top')}{styled('Bold', 'b')} and {linked('a link', 'ch1.xhtml')}."
    assert strip_markers(text) == "Bold and a link."


def test_strip_markers_plain_text_unchanged():
    """Test that text without markers passes through."""
    assert strip_markers("plain text") == "plain text"


def test_decode_styles_and_links():
    """Test decoding of nested style and link spans."""
    pieces = decode(f"{styled('bold', 'b')} {linked('go', 'http://example.com')}")
    assert pieces[0] == Span("bold", pieces[0].style, None)
    assert pieces[0].style.bold
    assert not pieces[1].style.bold
    assert pieces[-1].text == "go"
    assert pieces[-1].link == "http://example.com"


def test_decode_reference_counts_styles():
    """Test that overlapping identical styles stay active until fully closed."""
    text = f"{style_start('b')}{style_start('b')}x{style_end('b')}y{style_end('b')}z"
    pieces = decode(text)
    assert [(piece.text, piece.style.bold) for piece in pieces] == [("x", True), ("y", True), ("z", False)]


def test_decode_unmatched_close_saturates():
    """Test that a stray close does not push a style below zero."""
    pieces = decode(f"{style_end('i')}a{style_start('i')}b")
    assert [(piece.text, piece.style.italic) for piece in pieces] == [("a", False), ("b", True)]


def test_decode_code_style_is_dim_reverse():
    """Test the code style mapping."""
    (piece,) = decode(styled("x", "c"))
    assert piece.style.dim and piece.style.reverse


def test_decode_empty_link_closes_link():
    """Test that an empty link span ends the active link."""
    pieces = decode(f"{linked('x', 't')}y")
    assert [(piece.text, piece.link) for piece in pieces] == [("x", "t"), ("y", None)]


def test_decode_anchor_events_are_zero_width():
    """Test that anchors decode to events between spans."""
    pieces = decode(f"a{anchor('note1', 'ch.xhtml')}b")
    assert pieces == [Span("a"), AnchorEvent("ch.xhtml#note1"), Span("b")]


def test_decode_keeps_invalid_style_code():
    """Test that an unknown style code is kept as literal text."""
    pieces = decode(f"a{STYLE_START}q b")
    assert len(pieces) == 1
    assert pieces[0].text == f"a{STYLE_START}q b"


def test_decode_keeps_unterminated_link():
    """Test that an opener without a closer is kept verbatim."""
    pieces = decode(f"see {LINK_START}http://x")
    assert "".join(piece.text for piece in pieces) == f"see {LINK_START}http://x"


def test_decode_keeps_trailing_style_marker():
    """Test that a style marker at end of input is not dropped."""
    pieces = decode(f"end{STYLE_START}")
    assert pieces[0].text == f"end{STYLE_START}"


def test_decode_drops_blank_anchor_names():
    """Test that whitespace-only anchor names produce no event."""
    pieces = decode(f"a{ANCHOR_START}  {ANCHOR_END}b")
    assert all(not isinstance(piece, AnchorEvent) for piece in pieces)


def test_encoders_skip_empty_targets():
    """Test that empty link targets and anchor names encode to nothing."""
    assert link_start("  ") == ""
    assert linked("text", "") == "text"
    assert anchor("#") == ""
    assert link_end() == f"{LINK_START}\x1d"


def test_trim_keeps_markers():
    """Test that trimming removes whitespace but not marker characters."""
    text = f"  {STYLE_START}b word{style_end('b')}  "
    assert trim(text) == f"{STYLE_START}b word{style_end('b')}"
