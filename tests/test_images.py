"""Tests for image sizing."""

import struct
import zlib
from io import BytesIO

from PIL import Image as PILImage

from pageflow.images import fallback_text, image_dimensions, image_rows, probe_dimensions
from pageflow.layout.paginate import paginate
from pageflow.models import Image, Size


def _png(width: int, height: int) -> bytes:
    buffer = BytesIO()
    PILImage.new("RGB", (width, height)).save(buffer, format="PNG")
    return buffer.getvalue()


def _chunk(kind: bytes, payload: bytes) -> bytes:
    return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", zlib.crc32(kind + payload))


def _huge_png_header() -> bytes:
    """PNG bytes whose header declares a 100000x100000 image."""
    ihdr = struct.pack(">IIBBBBB", 100000, 100000, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + _chunk(b"IHDR", ihdr) + _chunk(b"IDAT", b"") + _chunk(b"IEND", b"")


def test_image_rows_from_aspect_ratio():
    """Test row sizing from dimensions."""
    assert image_rows(100, 50, 20, 24) == 10


def test_image_rows_default_without_dimensions():
    """Test the default row count."""
    assert image_rows(None, None, 20, 24) == 6


def test_image_rows_are_clamped():
    """Test the minimum and maximum row counts."""
    assert image_rows(1000, 10, 20, 24) == 3
    assert image_rows(10, 1000, 20, 10) == 8
    assert image_rows(10, 1000, 20, 2) == 3


def test_probe_dimensions_reads_header():
    """Test Pillow dimension probing."""
    assert probe_dimensions(_png(40, 20)) == (40, 20)


def test_probe_dimensions_invalid_bytes():
    """Test that unreadable data gives no dimensions."""
    assert probe_dimensions(b"not an image") == (None, None)


def test_image_dimensions_prefers_declared_size():
    """Test declared sizes over probing."""
    image = Image(id="x", data=_png(40, 20), width=8, height=4)
    assert image_dimensions(image) == (8, 4)
    assert image_dimensions(Image(id="y", data=_png(40, 20))) == (40, 20)


def test_fallback_text():
    """Test text used for images without bytes."""
    assert fallback_text(" Cat ", None, None) == "Image: Cat"
    assert fallback_text(None, 640, 480) == "Image (640x480)"
    assert fallback_text("", None, 480) == "Image"


def test_probe_dimensions_oversized_header():
    """Test that a decompression-bomb sized header gives no dimensions."""
    assert probe_dimensions(_huge_png_header()) == (None, None)


def test_oversized_image_uses_default_rows():
    """Test that pagination survives an oversized image header."""
    result = paginate([Image(id="big", data=_huge_png_header())], Size(20, 10))
    first = result.pages[0].lines[0]
    assert first.image is not None
    assert first.image.rows == 6
