from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..highlight import Highlighter
from ..layout.paginate import paginate
from ..models import (
    Block,
    CodeBlock,
    Heading,
    Image,
    LayoutOptions,
    ListBlock,
    Page,
    Pagination,
    Paragraph,
    Quote,
    Size,
    Table,
    TableCell,
)

logger = logging.getLogger(__name__)

MAX_HEADING_LEVEL = 6


class DocumentError(ValueError):
    """Raised when a JSON document does not describe a valid block list."""


class PageRenderer(Protocol):
    def handle_page(self, page: Page) -> None:
        ...

    def finalize(self) -> List[str]:
        ...


class RendererFactory(Protocol):
    def __call__(self, *, options: LayoutOptions, **kwargs: Any) -> PageRenderer:
        ...


class HighlighterFactory(Protocol):
    def __call__(self, theme: str) -> Highlighter:
        ...


@dataclass
class Document:
    blocks: List[Block] = field(default_factory=list)
    settings: Dict[str, str] = field(default_factory=dict)
    source: Optional[Path] = None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_int(value: Optional[str], default: int = 0) -> int:
    if value is None:
        return default
    match = re.search(r"-?\d+", value)
    if not match:
        return default
    try:
        return int(match.group())
    except ValueError:
        return default


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in {"true", "yes", "1", "on"}:
        return True
    if lowered in {"false", "no", "0", "off"}:
        return False
    return default


def _parse_str(value: Optional[str], default: str) -> str:
    if value is None:
        return default
    return value.strip()


def parse_settings(settings: Mapping[str, Any]) -> LayoutOptions:
    """Build layout options from loosely typed key/value pairs.

    Unknown keys are ignored and unparseable values fall back to defaults.
    """
    values: Dict[str, Optional[str]] = {str(key).strip(): _as_text(value) for key, value in settings.items()}
    defaults = LayoutOptions()
    known = set(LayoutOptions.__dataclass_fields__)
    for key in values:
        if key not in known:
            logger.debug("Ignoring unknown setting '%s'", key)
    return LayoutOptions(
        justify=_parse_bool(values.get("justify"), defaults.justify),
        hyphenate=_parse_bool(values.get("hyphenate"), defaults.hyphenate),
        hyphen_lang=_parse_str(values.get("hyphen_lang"), defaults.hyphen_lang) or defaults.hyphen_lang,
        h1_font=_parse_str(values.get("h1_font"), defaults.h1_font),
        h2_font=_parse_str(values.get("h2_font"), defaults.h2_font),
        h3_font=_parse_str(values.get("h3_font"), defaults.h3_font),
        wrap_code_blocks=_parse_bool(values.get("wrap_code_blocks"), defaults.wrap_code_blocks),
        code_theme=_parse_str(values.get("code_theme"), defaults.code_theme) or defaults.code_theme,
        quote_rule_min_width=max(0, _parse_int(values.get("quote_rule_min_width"), defaults.quote_rule_min_width)),
        code_rule_min_width=max(0, _parse_int(values.get("code_rule_min_width"), defaults.code_rule_min_width)),
        list_bullet=_parse_str(values.get("list_bullet"), defaults.list_bullet),
    )


def _require_text(item: Mapping[str, Any], key: str, position: int, default: Optional[str] = None) -> str:
    value = item.get(key, default)
    if value is None:
        raise DocumentError(f"Block {position}: missing '{key}'.")
    if not isinstance(value, str):
        raise DocumentError(f"Block {position}: '{key}' must be a string.")
    return value


def _optional_text(item: Mapping[str, Any], key: str, position: int) -> Optional[str]:
    value = item.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DocumentError(f"Block {position}: '{key}' must be a string.")
    return value


def _optional_int(item: Mapping[str, Any], key: str, position: int) -> Optional[int]:
    value = item.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise DocumentError(f"Block {position}: '{key}' must be an integer.")
    return value


def _table_cell(raw: Any, position: int) -> TableCell:
    if isinstance(raw, str):
        return TableCell(raw)
    if isinstance(raw, Mapping):
        text = raw.get("text", "")
        if not isinstance(text, str):
            raise DocumentError(f"Block {position}: table cell text must be a string.")
        header = raw.get("is_header", raw.get("header", False))
        return TableCell(text, bool(header))
    raise DocumentError(f"Block {position}: table cells must be strings or objects.")


def _image_data(item: Mapping[str, Any], position: int, base_dir: Path) -> Optional[bytes]:
    data = item.get("data")
    if data is not None:
        if not isinstance(data, str):
            raise DocumentError(f"Block {position}: image 'data' must be base64 text.")
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DocumentError(f"Block {position}: invalid base64 image data.") from exc
    path = _optional_text(item, "path", position)
    if path is None:
        return None
    target = (base_dir / path).resolve()
    if not target.exists():
        raise FileNotFoundError(f"Image file '{target}' was not found.")
    return target.read_bytes()


def block_from_json(item: Any, position: int = 0, base_dir: Optional[Path] = None) -> Block:
    if not isinstance(item, Mapping):
        raise DocumentError(f"Block {position}: expected an object.")
    kind = str(item.get("type", "")).strip().lower()
    if kind == "paragraph":
        return Paragraph(_require_text(item, "text", position, ""))
    if kind == "heading":
        level = _optional_int(item, "level", position) or 1
        return Heading(_require_text(item, "text", position, ""), max(1, min(MAX_HEADING_LEVEL, level)))
    if kind == "list":
        items = item.get("items", [])
        if not isinstance(items, list) or not all(isinstance(entry, str) for entry in items):
            raise DocumentError(f"Block {position}: 'items' must be a list of strings.")
        return ListBlock(list(items))
    if kind == "quote":
        return Quote(_require_text(item, "text", position, ""))
    if kind == "code":
        return CodeBlock(_require_text(item, "text", position, ""), _optional_text(item, "lang", position))
    if kind == "table":
        rows = item.get("rows", [])
        if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
            raise DocumentError(f"Block {position}: 'rows' must be a list of lists.")
        return Table([[_table_cell(cell, position) for cell in row] for row in rows])
    if kind == "image":
        return Image(
            id=_optional_text(item, "id", position) or f"image-{position}",
            data=_image_data(item, position, base_dir or Path.cwd()),
            alt=_optional_text(item, "alt", position),
            caption=_optional_text(item, "caption", position),
            width=_optional_int(item, "width", position),
            height=_optional_int(item, "height", position),
        )
    raise DocumentError(f"Block {position}: unknown block type '{kind}'.")


def blocks_from_json(items: Iterable[Any], base_dir: Optional[Path] = None) -> List[Block]:
    return [block_from_json(item, position, base_dir) for position, item in enumerate(items)]


def parse_document(payload: Any, base_dir: Optional[Path] = None) -> Document:
    """Accept either a bare block list or ``{"settings": {...}, "blocks": [...]}``."""
    if isinstance(payload, list):
        return Document(blocks=blocks_from_json(payload, base_dir))
    if not isinstance(payload, Mapping):
        raise DocumentError("Document must be a JSON object or a list of blocks.")
    raw_blocks = payload.get("blocks", [])
    if not isinstance(raw_blocks, list):
        raise DocumentError("'blocks' must be a list.")
    raw_settings = payload.get("settings", {})
    if not isinstance(raw_settings, Mapping):
        raise DocumentError("'settings' must be an object.")
    settings = {str(key): _as_text(value) or "" for key, value in raw_settings.items()}
    return Document(blocks=blocks_from_json(raw_blocks, base_dir), settings=settings)


def load_document(path: Path) -> Document:
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentError(f"{path}: invalid JSON ({exc.msg} at line {exc.lineno}).") from exc
    document = parse_document(payload, path.parent)
    document.source = path
    logger.debug("Loaded %d blocks from %s", len(document.blocks), path)
    return document


def run_pagination(
    blocks: Sequence[Block],
    size: Tuple[int, int],
    *,
    options: Optional[LayoutOptions] = None,
    highlighter: Optional[Highlighter] = None,
) -> Pagination:
    return paginate(blocks, Size(*size), options=options, highlighter=highlighter)


def render_pages(pages: Iterable[Page], renderer: PageRenderer) -> List[str]:
    for page in pages:
        renderer.handle_page(page)
    return renderer.finalize()
