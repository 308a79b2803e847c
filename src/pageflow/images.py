from __future__ import annotations

import logging
import math
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from .models import Image

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 6
MIN_ROWS = 3


def fallback_text(alt: Optional[str], width: Optional[int], height: Optional[int]) -> str:
    if alt and alt.strip():
        return f"Image: {alt.strip()}"
    if width and height:
        return f"Image ({width}x{height})"
    return "Image"


def probe_dimensions(data: bytes) -> Tuple[Optional[int], Optional[int]]:
    """Pixel size read from the image header, or ``(None, None)``."""
    try:
        with PILImage.open(BytesIO(data)) as img:
            width, height = img.size
    except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, ValueError) as exc:
        logger.debug("Could not read image dimensions: %s", exc)
        return None, None
    return width, height


def image_dimensions(image: Image) -> Tuple[Optional[int], Optional[int]]:
    if image.width and image.height:
        return image.width, image.height
    if image.data:
        return probe_dimensions(image.data)
    return image.width, image.height


def image_rows(width: Optional[int], height: Optional[int], cols: int, viewport_height: int) -> int:
    cols = max(1, cols)
    if width and height:
        rows = math.ceil(height / max(1, width) * cols)
    else:
        rows = DEFAULT_ROWS
    max_rows = max(MIN_ROWS, viewport_height - 2)
    return min(max(rows, MIN_ROWS), max_rows)
