import math
from typing import List, Optional

from pydantic import BaseModel, Field


class SlugRef(BaseModel):
    """Sanity's wrapped slug shape: {"_type": "slug", "current": "..."}"""

    current: str


class CategoryRef(BaseModel):
    id: str
    title: str
    slug: str = ""


class CategoryDetail(CategoryRef):
    description: Optional[str] = None


class AuthorRef(BaseModel):
    id: str
    name: Optional[str] = None
    slug: str = ""
    picture_url: Optional[str] = None


class AuthorDetail(AuthorRef):
    picture_alt: str = ""
    bio_html: str = ""


class PostSummary(BaseModel):
    id: str
    title: str
    slug: str = ""
    image_url: Optional[str] = None
    published_at: Optional[str] = None
    display_date: str = ""
    excerpt: Optional[str] = None
    author: Optional[AuthorRef] = None
    categories: List[CategoryRef] = Field(default_factory=list)

    @property
    def category_ids(self) -> List[str]:
        return [c.id for c in self.categories if c.id]

    @property
    def primary_category(self) -> Optional[CategoryRef]:
        return next((c for c in self.categories if c.title), None)


class PostDetail(PostSummary):
    body_html: str = ""


class PaginatedPosts(BaseModel):
    items: List[PostSummary] = Field(default_factory=list)
    total: int = 0


class CategoryWithPosts(BaseModel):
    category: CategoryDetail
    posts: List[PostSummary] = Field(default_factory=list)
    total: int = 0


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    @property
    def start(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def end(self) -> int:
        return self.start + self.page_size

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


class PageMetadata(BaseModel):
    title: str
    description: str = ""
    canonical_url: Optional[str] = None
    image_url: Optional[str] = None
    image_width: Optional[int] = None
    image_height: Optional[int] = None
    og_type: str = "website"
