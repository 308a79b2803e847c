"""Tests for document loading and settings."""

import base64
import json
from io import BytesIO

import pytest
from PIL import Image as PILImage

from pageflow.conversion import (
    DocumentError,
    block_from_json,
    load_document,
    parse_document,
    parse_settings,
    render_pages,
    run_pagination,
)
from pageflow.models import (
    CodeBlock,
    Heading,
    Image,
    LayoutOptions,
    ListBlock,
    Paragraph,
    Quote,
    Table,
    TableCell,
)
from pageflow.renderers import TextRenderer


def _png_bytes() -> bytes:
    buffer = BytesIO()
    PILImage.new("RGB", (30, 10)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_parse_settings_forgiving_values():
    """Test loose parsing of booleans and integers."""
    options = parse_settings(
        {
            "justify": "yes",
            "quote_rule_min_width": "20px",
            "hyphenate": "maybe",
            "h1_font": " standard ",
        }
    )
    assert options.justify is True
    assert options.quote_rule_min_width == 20
    assert options.hyphenate is False
    assert options.h1_font == "standard"


def test_parse_settings_accepts_json_types():
    """Test booleans and numbers straight from JSON."""
    options = parse_settings({"wrap_code_blocks": True, "code_rule_min_width": 8, "unknown": 1})
    assert options.wrap_code_blocks is True
    assert options.code_rule_min_width == 8


def test_parse_settings_defaults():
    """Test that an empty mapping gives default options."""
    assert parse_settings({}) == LayoutOptions()


def test_block_from_json_each_kind():
    """Test conversion of every block type."""
    assert block_from_json({"type": "paragraph", "text": "p"}) == Paragraph("p")
    assert block_from_json({"type": "heading", "text": "h", "level": 9}) == Heading("h", 6)
    assert block_from_json({"type": "list", "items": ["a", "b"]}) == ListBlock(["a", "b"])
    assert block_from_json({"type": "quote", "text": "q"}) == Quote("q")
    assert block_from_json({"type": "code", "text": "x", "lang": "py"}) == CodeBlock("x", "py")
    table = block_from_json({"type": "table", "rows": [["a", {"text": "b", "header": True}]]})
    assert table == Table([[TableCell("a"), TableCell("b", True)]])


def test_block_from_json_rejects_bad_input():
    """Test validation errors."""
    with pytest.raises(DocumentError):
        block_from_json({"type": "poem", "text": "x"})
    with pytest.raises(DocumentError):
        block_from_json({"type": "paragraph", "text": 3})
    with pytest.raises(DocumentError):
        block_from_json(["not", "an", "object"])
    with pytest.raises(DocumentError):
        block_from_json({"type": "image", "data": "!!!"})


def test_parse_document_accepts_bare_list():
    """Test that a list of blocks is a valid document."""
    document = parse_document([{"type": "paragraph", "text": "x"}])
    assert document.blocks == [Paragraph("x")]
    assert document.settings == {}


def test_load_document_with_images(tmp_path):
    """Test loading blocks, settings and image data from disk."""
    png = _png_bytes()
    (tmp_path / "pic.png").write_bytes(png)
    payload = {
        "settings": {"justify": True},
        "blocks": [
            {"type": "paragraph", "text": "hello"},
            {"type": "image", "id": "inline", "data": base64.b64encode(png).decode("ascii")},
            {"type": "image", "path": "pic.png", "caption": "From disk"},
        ],
    }
    path = tmp_path / "doc.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    document = load_document(path)
    assert document.settings == {"justify": "true"}
    assert document.source == path
    inline, on_disk = document.blocks[1], document.blocks[2]
    assert isinstance(inline, Image) and inline.data == png and inline.id == "inline"
    assert on_disk.data == png and on_disk.id == "image-2"


def test_load_document_errors(tmp_path):
    """Test failures at the file boundary."""
    with pytest.raises(FileNotFoundError):
        load_document(tmp_path / "missing.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(DocumentError):
        load_document(broken)
    missing_image = tmp_path / "image.json"
    missing_image.write_text(json.dumps([{"type": "image", "path": "nope.png"}]), encoding="utf-8")
    with pytest.raises(FileNotFoundError):
        load_document(missing_image)


def test_run_pagination_and_render_pages():
    """Test the pipeline helpers end to end."""
    pagination = run_pagination([Paragraph("one two"), Paragraph("three")], (3, 3))
    lines = render_pages(pagination.pages, TextRenderer(LayoutOptions()))
    assert lines == ["one", "two", "", "\f", "thr", "ee", ""]
