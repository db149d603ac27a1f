import asyncio
import logging
from typing import Awaitable, List, Optional, Tuple, TypeVar
from urllib.parse import quote

from app.schemas.blog import CategoryRef, PageMetadata, PaginatedPosts, Pagination
from app.schemas.pages import AuthorView, CategoryView, HomeView, PostView
from app.services.image_service import PLACEHOLDER_IMAGE
from app.settings import Settings, settings
from app.utils import clamp_page

logger = logging.getLogger(__name__)

T = TypeVar("T")

POST_NOT_FOUND_TITLE = "記事が見つかりません"
AUTHOR_NOT_FOUND_TITLE = "Author not found"
CATEGORY_NOT_FOUND_TITLE = "Category not found"

POST_IMAGE_SIZE = (1200, 630)
AUTHOR_IMAGE_SIZE = (160, 160)


class BlogService:
    def __init__(self, repo, settings_obj: Settings = settings):
        self.repo = repo
        self.settings = settings_obj

    async def home_page(self, page: int) -> HomeView:
        (result, pagination), recent, categories = await asyncio.gather(
            self._paginated_posts(page),
            self._auxiliary(
                self.repo.list_recent_posts(self.settings.RECENT_POSTS_LIMIT),
                [],
                "recent posts",
            ),
            self.nav_categories(),
        )
        return HomeView(
            posts=result.items,
            pagination=pagination,
            recent_posts=recent,
            nav_categories=categories,
            meta=self.home_metadata(pagination),
        )

    async def post_page(self, slug: str) -> Optional[PostView]:
        post, categories = await asyncio.gather(
            self.repo.get_post(slug), self.nav_categories()
        )
        if post is None:
            return None

        related = []
        if post.category_ids:
            related = await self._auxiliary(
                self.repo.related_posts(post.category_ids, post.id),
                [],
                f"related posts for {slug}",
            )
        return PostView(
            post=post,
            related=[p for p in related if p.id != post.id],
            nav_categories=categories,
        )

    async def author_page(self, slug: str) -> Optional[AuthorView]:
        author, posts, categories = await asyncio.gather(
            self.repo.get_author(slug),
            self._auxiliary(self.repo.posts_by_author(slug), [], f"posts by {slug}"),
            self.nav_categories(),
        )
        if author is None:
            return None
        return AuthorView(author=author, posts=posts, nav_categories=categories)

    async def category_page(self, slug: str, page: int) -> Optional[CategoryView]:
        requested = max(page, 1)
        start = (requested - 1) * self.settings.PAGE_SIZE
        data, categories = await asyncio.gather(
            self.repo.category_with_posts(slug, start, start + self.settings.PAGE_SIZE),
            self.nav_categories(),
        )
        if data is None:
            return None

        pagination = clamp_page(requested, data.total, self.settings.PAGE_SIZE)
        if pagination.page != requested:
            data = await self.repo.category_with_posts(
                slug, pagination.start, pagination.end
            )
            if data is None:
                return None
            pagination = Pagination(
                page=pagination.page, page_size=self.settings.PAGE_SIZE, total=data.total
            )

        return CategoryView(
            category=data.category,
            posts=data.posts,
            pagination=pagination,
            nav_categories=categories,
        )

    async def nav_categories(self) -> List[CategoryRef]:
        return await self._auxiliary(
            self.repo.list_categories(), [], "navigation categories"
        )

    # Metadata runs its own lookup, separate from the page render.

    def home_metadata(self, pagination: Pagination) -> PageMetadata:
        path = "/" if pagination.page == 1 else f"/?page={pagination.page}"
        return PageMetadata(
            title=self.settings.SITE_NAME,
            description=self.settings.SITE_DESCRIPTION,
            canonical_url=self._absolute(path),
            image_url=self._absolute(PLACEHOLDER_IMAGE),
            image_width=None,
            image_height=None,
        )

    async def post_metadata(self, slug: str) -> PageMetadata:
        post = await self.repo.get_post(slug)
        if post is None:
            return PageMetadata(title=POST_NOT_FOUND_TITLE)
        return PageMetadata(
            title=post.title,
            description=post.excerpt or self.settings.SITE_DESCRIPTION,
            canonical_url=self._absolute(f"/{quote(post.slug)}"),
            og_type="article",
            **self._preview_image(post.image_url, POST_IMAGE_SIZE),
        )

    async def author_metadata(self, slug: str) -> PageMetadata:
        author = await self.repo.get_author(slug)
        if author is None:
            return PageMetadata(title=AUTHOR_NOT_FOUND_TITLE)
        return PageMetadata(
            title=f"{author.name or author.slug} – Author",
            description=f"Articles by {author.name or author.slug}",
            canonical_url=self._absolute(f"/author/{quote(author.slug)}"),
            og_type="profile",
            **self._preview_image(author.picture_url, AUTHOR_IMAGE_SIZE),
        )

    async def category_metadata(self, slug: str) -> PageMetadata:
        data = await self.repo.category_with_posts(slug, 0, self.settings.PAGE_SIZE)
        if data is None:
            return PageMetadata(title=CATEGORY_NOT_FOUND_TITLE)
        category = data.category
        return PageMetadata(
            title=f"{category.title} – Category",
            description=category.description or f"{category.title} に属する記事一覧",
            canonical_url=self._absolute(f"/category/{quote(category.slug)}"),
            **self._preview_image(None, POST_IMAGE_SIZE),
        )

    async def _paginated_posts(self, page: int) -> Tuple[PaginatedPosts, Pagination]:
        size = self.settings.PAGE_SIZE
        requested = max(page, 1)
        start = (requested - 1) * size
        result = await self.repo.paginated_posts(start, start + size)

        pagination = clamp_page(requested, result.total, size)
        if pagination.page != requested:
            result = await self.repo.paginated_posts(pagination.start, pagination.end)
            pagination = Pagination(page=pagination.page, page_size=size, total=result.total)
        return result, pagination

    async def _auxiliary(self, awaitable: Awaitable[T], default: T, label: str) -> T:
        try:
            return await awaitable
        except Exception as e:
            logger.warning(f"Failed to load {label}: {e}")
            return default

    def _absolute(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.settings.site_url}{path}"

    def _preview_image(self, url: Optional[str], size: Tuple[int, int]) -> dict:
        if url:
            return {"image_url": url, "image_width": size[0], "image_height": size[1]}
        return {
            "image_url": self._absolute(PLACEHOLDER_IMAGE),
            "image_width": None,
            "image_height": None,
        }
