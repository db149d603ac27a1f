import math
from typing import Any

from app.schemas.blog import Pagination


def parse_page(value: Any) -> int:
    """Page query values that are not integers fall back to page 1."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 1


def clamp_page(page: int, total: int, page_size: int) -> Pagination:
    last_page = max(1, math.ceil(max(0, total) / page_size))
    return Pagination(page=min(max(page, 1), last_page), page_size=page_size, total=total)
