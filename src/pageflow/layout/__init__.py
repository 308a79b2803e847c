"""Line wrapping, table layout and pagination."""

from .chapters import CHAPTER_SEPARATOR, is_chapter_separator
from .inline import justify_styled_line, wrap_styled_text
from .paginate import Paginator, paginate, paginate_pages
from .table import compute_column_widths, render_table
from .words import extract_words

__all__ = [
    "CHAPTER_SEPARATOR",
    "Paginator",
    "compute_column_widths",
    "extract_words",
    "is_chapter_separator",
    "justify_styled_line",
    "paginate",
    "paginate_pages",
    "render_table",
    "wrap_styled_text",
]
