"""Bundled page renderers."""

from .ansi import AnsiRenderer
from .text import TextRenderer

__all__ = ["AnsiRenderer", "TextRenderer"]
