from __future__ import annotations

from typing import List

from ..conversion.core import HighlighterFactory, RendererFactory
from ..highlight import Highlighter, default_highlighter, plain_highlight
from .registry import PluginRegistry


renderer_plugins = PluginRegistry[RendererFactory]("Renderer")
highlighter_plugins = PluginRegistry[HighlighterFactory]("Highlighter")


def register_renderer(name: str, factory: RendererFactory) -> None:
    renderer_plugins.register(name, factory)


def register_highlighter(name: str, factory: HighlighterFactory) -> None:
    highlighter_plugins.register(name, factory)


def get_renderer_factory(name: str) -> RendererFactory:
    return renderer_plugins.get(name)


def get_highlighter_factory(name: str) -> HighlighterFactory:
    return highlighter_plugins.get(name)


def available_renderers() -> List[str]:
    return renderer_plugins.names()


def available_highlighters() -> List[str]:
    return highlighter_plugins.names()


def _plain_highlighter_factory(theme: str) -> Highlighter:
    return plain_highlight


register_highlighter("pygments", default_highlighter)
register_highlighter("plain", _plain_highlighter_factory)


__all__ = [
    "PluginRegistry",
    "available_highlighters",
    "available_renderers",
    "get_highlighter_factory",
    "get_renderer_factory",
    "register_highlighter",
    "register_renderer",
]
