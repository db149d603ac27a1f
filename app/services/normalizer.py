"""
Turns loosely shaped Sanity records into the DTOs the templates render.

Every function here is total: a field with an unexpected shape becomes the
empty value for its type, and a record that is not a mapping becomes None.
"""

import datetime
import logging
from typing import Any, Callable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from app.schemas.blog import (
    AuthorDetail,
    AuthorRef,
    CategoryDetail,
    CategoryRef,
    PostDetail,
    PostSummary,
    SlugRef,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Tokyo"

# (source, width, height) -> url or None
ImageUrlFn = Callable[[Any, int, int], Optional[str]]


def normalize_slug(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, SlugRef):
        return value.current
    if isinstance(value, dict):
        try:
            return SlugRef.model_validate(value).current
        except ValidationError:
            return ""
    return ""


def has_image_asset(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    asset = value.get("asset")
    if not isinstance(asset, dict):
        return False
    ref = asset.get("_ref")
    return isinstance(ref, str) and bool(ref)


def format_display_date(value: Any, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Format an ISO timestamp as a Japanese calendar date, e.g. 2024年3月5日."""
    parsed = _parse_datetime(value)
    if parsed is None:
        return ""
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(_zone(tz_name))
        except (OverflowError, ValueError):
            return ""
    return f"{parsed.year}年{parsed.month}月{parsed.day}日"


def _parse_datetime(value: Any) -> Optional[datetime.datetime]:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.datetime.fromisoformat(text)
    except ValueError:
        return None


def _zone(tz_name: str) -> datetime.tzinfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {tz_name}, using UTC")
        return datetime.timezone.utc


def _text(record: dict, key: str) -> Optional[str]:
    value = record.get(key)
    return value if isinstance(value, str) and value else None


def to_category_ref(record: Any) -> Optional[CategoryRef]:
    if not isinstance(record, dict):
        return None
    category_id = _text(record, "_id")
    title = _text(record, "title")
    if not category_id or not title:
        return None
    return CategoryRef(id=category_id, title=title, slug=normalize_slug(record.get("slug")))


def to_category(record: Any) -> Optional[CategoryDetail]:
    """A category page only needs an id; a missing title falls back to the slug."""
    if not isinstance(record, dict):
        return None
    category_id = _text(record, "_id")
    if not category_id:
        return None
    slug = normalize_slug(record.get("slug"))
    return CategoryDetail(
        id=category_id,
        title=_text(record, "title") or slug,
        slug=slug,
        description=_text(record, "description"),
    )


def to_category_refs(records: Any) -> List[CategoryRef]:
    if not isinstance(records, list):
        return []
    refs = (to_category_ref(r) for r in records)
    return [r for r in refs if r is not None]


def to_author_ref(record: Any, image_url: Optional[ImageUrlFn] = None) -> Optional[AuthorRef]:
    if not isinstance(record, dict):
        return None
    author_id = _text(record, "_id")
    if not author_id:
        return None
    picture_url = image_url(record.get("picture"), 160, 160) if image_url else None
    return AuthorRef(
        id=author_id,
        name=_text(record, "name"),
        slug=normalize_slug(record.get("slug")),
        picture_url=picture_url,
    )


def to_author(
    record: Any,
    image_url: Optional[ImageUrlFn] = None,
    render_rich_text: Optional[Callable[[Any], str]] = None,
) -> Optional[AuthorDetail]:
    ref = to_author_ref(record, image_url)
    if ref is None:
        return None
    name = ref.name or ""
    picture = record.get("picture")
    alt = picture.get("alt") if isinstance(picture, dict) else None
    bio = record.get("bio")
    return AuthorDetail(
        **ref.model_dump(),
        picture_alt=alt if isinstance(alt, str) and alt else (f"{name} portrait" if name else ""),
        bio_html=render_rich_text(bio) if render_rich_text and bio else "",
    )


def _post_fields(
    record: dict, image_url: Optional[ImageUrlFn], tz_name: str
) -> Optional[dict]:
    post_id = _text(record, "_id")
    if not post_id:
        return None
    published_at = _text(record, "publishedAt") or _text(record, "_createdAt")
    return {
        "id": post_id,
        "title": _text(record, "title") or "Untitled",
        "slug": normalize_slug(record.get("slug")),
        "image_url": image_url(record.get("mainImage"), 1200, 630) if image_url else None,
        "published_at": published_at,
        "display_date": format_display_date(published_at, tz_name),
        "excerpt": _text(record, "excerpt"),
        "author": to_author_ref(record.get("author"), image_url),
        "categories": to_category_refs(record.get("categories")),
    }


def to_post_summary(
    record: Any,
    image_url: Optional[ImageUrlFn] = None,
    tz_name: str = DEFAULT_TIMEZONE,
) -> Optional[PostSummary]:
    if not isinstance(record, dict):
        return None
    fields = _post_fields(record, image_url, tz_name)
    return PostSummary(**fields) if fields else None


def to_post_summaries(
    records: Any,
    image_url: Optional[ImageUrlFn] = None,
    tz_name: str = DEFAULT_TIMEZONE,
) -> List[PostSummary]:
    if not isinstance(records, list):
        return []
    posts = (to_post_summary(r, image_url, tz_name) for r in records)
    return [p for p in posts if p is not None]


def to_post_detail(
    record: Any,
    image_url: Optional[ImageUrlFn] = None,
    render_rich_text: Optional[Callable[[Any], str]] = None,
    tz_name: str = DEFAULT_TIMEZONE,
) -> Optional[PostDetail]:
    if not isinstance(record, dict):
        return None
    fields = _post_fields(record, image_url, tz_name)
    if not fields:
        return None
    body = record.get("body")
    body_html = render_rich_text(body) if render_rich_text and body else ""
    return PostDetail(**fields, body_html=body_html)


def to_total(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(0, value)
