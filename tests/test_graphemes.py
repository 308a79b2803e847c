"""Tests for grapheme clustering."""

from pageflow.graphemes import grapheme_count, graphemes


def test_combining_marks_attach_to_base():
    """Test that a combining accent does not count as a cell."""
    assert grapheme_count("e\u0301") == 1


def test_regional_indicators_pair():
    """Test that flags are formed from pairs of regional indicators."""
    assert grapheme_count("\U0001F1FA\U0001F1F8\U0001F1EB\U0001F1F7") == 2


def test_zwj_sequence_is_one_cluster():
    """Test that zero-width-joiner sequences stay together."""
    family = "\U0001F468\u200d\U0001F469\u200d\U0001F467"
    assert graphemes(family) == [family]


def test_crlf_is_one_cluster():
    """Test that CR LF is treated as a single break."""
    assert graphemes("a\r\nb") == ["a", "\r\n", "b"]


def test_empty_text():
    """Test that empty text has no clusters."""
    assert graphemes("") == []


def test_hangul_jamo_split_per_code_point():
    """Test that conjoining jamo are counted one cell each."""
    assert grapheme_count("\u1100\u1161") == 2
    assert grapheme_count("\uac00") == 1
