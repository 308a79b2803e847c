"""
Lay a JSON block document out into fixed-size pages.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from . import renderers  # noqa: F401  # register bundled renderers
from .conversion import load_document, parse_settings, render_pages, run_pagination
from .layout import extract_words
from .models import WordToken
from .plugins import (
    available_highlighters,
    available_renderers,
    get_highlighter_factory,
    get_renderer_factory,
)

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Configure a simple console logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )


def _split_option(token: str) -> Tuple[str, str]:
    if "=" not in token:
        raise argparse.ArgumentTypeError("Expected KEY=VALUE format.")
    key, value = token.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Option key cannot be empty.")
    return key, value


def format_word(token: WordToken) -> str:
    chapter = "-" if token.chapter_index is None else str(token.chapter_index)
    if token.is_sentence_end:
        pause = "sentence"
    elif token.is_comma:
        pause = "comma"
    else:
        pause = ""
    return f"{chapter}\t{token.text}\t{pause}".rstrip("\t")


def write_output(path: Optional[Path], lines: List[str]) -> None:
    content = "\n".join(lines)
    if path is None:
        sys.stdout.write(content + "\n")
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content + "\n", encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lay a JSON block document out into fixed-size text pages.")
    parser.add_argument("input_path", type=Path, help="Path to the JSON document.")
    parser.add_argument("-o", "--output", type=Path, help="Optional path to write the rendered pages.")
    parser.add_argument("--width", type=int, default=80, help="Page width in cells (default: 80).")
    parser.add_argument("--height", type=int, default=24, help="Page height in lines (default: 24).")
    parser.add_argument("--justify", action="store_true", help="Fully justify paragraphs and list items.")
    parser.add_argument(
        "--renderer",
        default="text",
        choices=available_renderers() or ["text"],
        help="Name of the renderer plugin to use.",
    )
    parser.add_argument(
        "--highlighter",
        default="pygments",
        choices=available_highlighters() or ["pygments"],
        help="Name of the syntax highlighter plugin to use.",
    )
    parser.add_argument("--page", type=int, help="Render only this page (0-based, clamped).")
    parser.add_argument("--words", action="store_true", help="Print the word stream instead of pages.")
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        type=_split_option,
        metavar="KEY=VALUE",
        help="Override a layout setting in KEY=VALUE form (may repeat).",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    try:
        document = load_document(args.input_path)
        if args.words:
            write_output(args.output, [format_word(token) for token in extract_words(document.blocks)])
            return 0
        settings: Dict[str, str] = dict(document.settings)
        settings.update(dict(args.set or []))
        options = parse_settings(settings)
        if args.justify:
            options.justify = True
        highlighter = get_highlighter_factory(args.highlighter)(options.code_theme)
        pagination = run_pagination(
            document.blocks,
            (args.width, args.height),
            options=options,
            highlighter=highlighter,
        )
        pages = pagination.pages
        if args.page is not None:
            pages = [pages[pagination.clamp_page(args.page)]]
        renderer = get_renderer_factory(args.renderer)(options=options)
        lines = render_pages(pages, renderer)
    except (FileNotFoundError, KeyError, ValueError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 2
    logger.debug("Rendered %d of %d pages", len(pages), pagination.page_count)
    write_output(args.output, lines)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
