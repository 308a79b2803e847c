"""Document loading and pipeline helpers."""

from .core import (
    Document,
    DocumentError,
    HighlighterFactory,
    PageRenderer,
    RendererFactory,
    block_from_json,
    blocks_from_json,
    load_document,
    parse_document,
    parse_settings,
    render_pages,
    run_pagination,
)

__all__ = [
    "Document",
    "DocumentError",
    "HighlighterFactory",
    "PageRenderer",
    "RendererFactory",
    "block_from_json",
    "blocks_from_json",
    "load_document",
    "parse_document",
    "parse_settings",
    "render_pages",
    "run_pagination",
]
