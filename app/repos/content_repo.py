from typing import Any, List, Optional

from app.repos import queries
from app.schemas.blog import (
    AuthorDetail,
    CategoryRef,
    CategoryWithPosts,
    PaginatedPosts,
    PostDetail,
    PostSummary,
)
from app.services import normalizer
from app.services.image_service import ImageUrlBuilder
from app.services.portable_text import render_portable_text


class SanityContentRepo:
    """
    Runs catalog queries against the content client and hands back DTOs.
    Record shapes are resolved here; nothing past this layer sees raw Sanity data.
    """

    def __init__(
        self,
        client,
        image_builder: ImageUrlBuilder,
        tz_name: str = normalizer.DEFAULT_TIMEZONE,
    ):
        self.client = client
        self.image_builder = image_builder
        self.tz_name = tz_name

    def _image_url(self, source: Any, width: int, height: int) -> Optional[str]:
        return self.image_builder.url(source, width, height)

    def _rich_text(self, blocks: Any) -> str:
        return render_portable_text(blocks, self.image_builder)

    def _summaries(self, records: Any) -> List[PostSummary]:
        return normalizer.to_post_summaries(records, self._image_url, self.tz_name)

    async def list_recent_posts(self, limit: int) -> List[PostSummary]:
        result = await self.client.fetch(queries.POSTS_QUERY, {"limit": limit})
        return self._summaries(result)

    async def paginated_posts(self, start: int, end: int) -> PaginatedPosts:
        result = await self.client.fetch(
            queries.PAGINATED_POSTS_QUERY, {"start": start, "end": end}
        )
        if not isinstance(result, dict):
            return PaginatedPosts()
        return PaginatedPosts(
            items=self._summaries(result.get("items")),
            total=normalizer.to_total(result.get("total")),
        )

    async def get_post(self, slug: str) -> Optional[PostDetail]:
        result = await self.client.fetch(queries.POST_BY_SLUG_QUERY, {"slug": slug})
        return normalizer.to_post_detail(
            result, self._image_url, self._rich_text, self.tz_name
        )

    async def get_author(self, slug: str) -> Optional[AuthorDetail]:
        result = await self.client.fetch(queries.AUTHOR_BY_SLUG_QUERY, {"slug": slug})
        return normalizer.to_author(result, self._image_url, self._rich_text)

    async def posts_by_author(self, slug: str) -> List[PostSummary]:
        result = await self.client.fetch(queries.POSTS_BY_AUTHOR_QUERY, {"slug": slug})
        return self._summaries(result)

    async def category_with_posts(
        self, slug: str, start: int, end: int
    ) -> Optional[CategoryWithPosts]:
        result = await self.client.fetch(
            queries.CATEGORY_WITH_POSTS_QUERY,
            {"slug": slug, "start": start, "end": end},
        )
        if not isinstance(result, dict):
            return None
        category = normalizer.to_category(result.get("category"))
        if category is None:
            return None
        return CategoryWithPosts(
            category=category,
            posts=self._summaries(result.get("posts")),
            total=normalizer.to_total(result.get("total")),
        )

    async def related_posts(
        self, category_ids: List[str], current_post_id: str
    ) -> List[PostSummary]:
        result = await self.client.fetch(
            queries.RELATED_POSTS_QUERY,
            {"categoryIds": list(category_ids), "currentPostId": current_post_id},
        )
        return self._summaries(result)

    async def list_categories(self) -> List[CategoryRef]:
        result = await self.client.fetch(queries.CATEGORIES_NAV_QUERY)
        return normalizer.to_category_refs(result)

    async def all_category_slugs(self) -> List[str]:
        result = await self.client.fetch(queries.ALL_CATEGORY_SLUGS_QUERY)
        return _slugs(result)

    async def all_post_slugs(self) -> List[str]:
        result = await self.client.fetch(queries.ALL_POST_SLUGS_QUERY)
        return _slugs(result)


def _slugs(records: Any) -> List[str]:
    if not isinstance(records, list):
        return []
    slugs = (
        normalizer.normalize_slug(r.get("slug")) for r in records if isinstance(r, dict)
    )
    return [s for s in slugs if s]
