from typing import List

from pydantic import BaseModel, Field

from app.schemas.blog import (
    AuthorDetail,
    CategoryDetail,
    CategoryRef,
    PageMetadata,
    Pagination,
    PostDetail,
    PostSummary,
)


class HomeView(BaseModel):
    posts: List[PostSummary] = Field(default_factory=list)
    pagination: Pagination
    recent_posts: List[PostSummary] = Field(default_factory=list)
    nav_categories: List[CategoryRef] = Field(default_factory=list)
    meta: PageMetadata


class PostView(BaseModel):
    post: PostDetail
    related: List[PostSummary] = Field(default_factory=list)
    nav_categories: List[CategoryRef] = Field(default_factory=list)


class AuthorView(BaseModel):
    author: AuthorDetail
    posts: List[PostSummary] = Field(default_factory=list)
    nav_categories: List[CategoryRef] = Field(default_factory=list)


class CategoryView(BaseModel):
    category: CategoryDetail
    posts: List[PostSummary] = Field(default_factory=list)
    pagination: Pagination
    nav_categories: List[CategoryRef] = Field(default_factory=list)
