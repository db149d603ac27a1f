import logging
import re
from typing import Any, Dict, List, Optional

from markupsafe import Markup, escape

from app.services.image_service import ImageUrlBuilder

logger = logging.getLogger(__name__)

BLOCK_TAGS = {
    "normal": "p",
    "h1": "h1",
    "h2": "h2",
    "h3": "h3",
    "h4": "h4",
    "h5": "h5",
    "h6": "h6",
    "blockquote": "blockquote",
}

DECORATOR_TAGS = {
    "strong": "strong",
    "em": "em",
    "code": "code",
    "underline": "u",
    "strike-through": "s",
}

LIST_TAGS = {"bullet": "ul", "number": "ol"}

SAFE_LINK_SCHEMES = ("http", "https", "mailto", "tel")

URL_SCHEME_RE = re.compile(r"([a-zA-Z][a-zA-Z0-9+.-]*):")


def render_portable_text(
    blocks: Any, image_builder: Optional[ImageUrlBuilder] = None
) -> Markup:
    """
    Render Sanity Portable Text to HTML.
    Unknown block types and malformed entries are skipped.
    """
    if not isinstance(blocks, list):
        return Markup("")

    html: List[str] = []
    open_list: Optional[str] = None

    for block in blocks:
        if not isinstance(block, dict):
            continue

        list_tag = None
        if block.get("_type") == "block":
            list_tag = _lookup(LIST_TAGS, block.get("listItem"))
        if open_list and list_tag != open_list:
            html.append(f"</{open_list}>")
            open_list = None
        if list_tag and not open_list:
            html.append(f"<{list_tag}>")
            open_list = list_tag

        if block.get("_type") == "block":
            inner = _render_children(block.get("children"), block.get("markDefs"))
            if list_tag:
                html.append(f"<li>{inner}</li>")
            else:
                tag = _lookup(BLOCK_TAGS, block.get("style")) or "p"
                html.append(f"<{tag}>{inner}</{tag}>")
        elif block.get("_type") == "image":
            rendered = _render_image(block, image_builder)
            if rendered:
                html.append(rendered)
        else:
            logger.debug(f"Skipping unsupported block type {block.get('_type')}")

    if open_list:
        html.append(f"</{open_list}>")

    return Markup("".join(html))


def _lookup(tags: Dict[str, str], key: Any) -> Optional[str]:
    return tags.get(key) if isinstance(key, str) else None


def _render_children(children: Any, mark_defs: Any) -> str:
    if not isinstance(children, list):
        return ""

    defs: Dict[str, dict] = {}
    if isinstance(mark_defs, list):
        defs = {
            d["_key"]: d
            for d in mark_defs
            if isinstance(d, dict) and isinstance(d.get("_key"), str)
        }

    parts = []
    for child in children:
        if not isinstance(child, dict) or child.get("_type") != "span":
            continue
        text = child.get("text")
        if not isinstance(text, str):
            continue
        rendered = str(escape(text)).replace("\n", "<br>")
        marks = child.get("marks")
        for mark in marks if isinstance(marks, list) else []:
            rendered = _apply_mark(rendered, mark, defs)
        parts.append(rendered)
    return "".join(parts)


def _apply_mark(text: str, mark: Any, defs: Dict[str, dict]) -> str:
    if not isinstance(mark, str):
        return text

    tag = DECORATOR_TAGS.get(mark)
    if tag:
        return f"<{tag}>{text}</{tag}>"

    definition = defs.get(mark)
    if definition and definition.get("_type") == "link":
        href = definition.get("href")
        if _is_safe_href(href):
            return f'<a href="{escape(href.strip())}">{text}</a>'
        logger.debug(f"Dropping link with unsupported href {href!r}")
    return text


def _is_safe_href(href: Any) -> bool:
    """Relative and fragment links pass; absolute ones need an allowed scheme."""
    if not isinstance(href, str) or not href.strip():
        return False
    # browsers ignore whitespace and control characters inside a scheme
    compact = re.sub(r"[\x00-\x20]", "", href)
    match = URL_SCHEME_RE.match(compact)
    if match is None:
        return True
    return match.group(1).lower() in SAFE_LINK_SCHEMES


def _render_image(block: dict, image_builder: Optional[ImageUrlBuilder]) -> str:
    if image_builder is None:
        return ""
    url = image_builder.url(block, 1200, 675, fit="max")
    if not url:
        return ""
    alt = block.get("alt") if isinstance(block.get("alt"), str) else ""
    return f'<figure><img src="{escape(url)}" alt="{escape(alt)}" loading="lazy"></figure>'
