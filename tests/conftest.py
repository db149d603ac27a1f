from app.schemas.blog import (
    AuthorDetail,
    CategoryDetail,
    CategoryRef,
    CategoryWithPosts,
    PaginatedPosts,
    PostDetail,
    PostSummary,
)
from app.services.image_service import ImageUrlBuilder


class FakeSanityClient:
    """
    Minimal in-memory content client.
    `responses` maps a query string to its result (or a callable taking params).
    Every call is recorded as (query, params).
    """

    def __init__(self, responses: dict | None = None, default=None):
        self.responses = responses or {}
        self.default = default
        self.calls = []
        self.closed = False

    async def fetch(self, query: str, params: dict | None = None):
        self.calls.append((query, params))
        result = self.responses.get(query, self.default)
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(params or {})
        return result

    async def aclose(self):
        self.closed = True


class FakeRepo:
    """
    Content repo stand-in used in service tests.
    Posts are served in list order; pagination slices that list.
    """

    def __init__(
        self,
        posts=None,
        post=None,
        author=None,
        category=None,
        categories=None,
        related=None,
        failures=None,
    ):
        self.posts = posts or []
        self.post = post
        self.author = author
        self.category = category
        self.categories = categories or []
        self.related = related or []
        self.failures = failures or {}
        self.calls = []

    def _maybe_fail(self, name):
        if name in self.failures:
            raise self.failures[name]

    async def list_recent_posts(self, limit):
        self.calls.append(("list_recent_posts", limit))
        self._maybe_fail("list_recent_posts")
        return self.posts[:limit]

    async def paginated_posts(self, start, end):
        self.calls.append(("paginated_posts", start, end))
        self._maybe_fail("paginated_posts")
        return PaginatedPosts(items=self.posts[start:end], total=len(self.posts))

    async def get_post(self, slug):
        self.calls.append(("get_post", slug))
        self._maybe_fail("get_post")
        if self.post and self.post.slug == slug:
            return self.post
        return None

    async def get_author(self, slug):
        self.calls.append(("get_author", slug))
        self._maybe_fail("get_author")
        if self.author and self.author.slug == slug:
            return self.author
        return None

    async def posts_by_author(self, slug):
        self.calls.append(("posts_by_author", slug))
        self._maybe_fail("posts_by_author")
        return list(self.posts)

    async def category_with_posts(self, slug, start, end):
        self.calls.append(("category_with_posts", slug, start, end))
        self._maybe_fail("category_with_posts")
        if not self.category or self.category.slug != slug:
            return None
        return CategoryWithPosts(
            category=self.category, posts=self.posts[start:end], total=len(self.posts)
        )

    async def related_posts(self, category_ids, current_post_id):
        self.calls.append(("related_posts", list(category_ids), current_post_id))
        self._maybe_fail("related_posts")
        return list(self.related)

    async def list_categories(self):
        self.calls.append(("list_categories",))
        self._maybe_fail("list_categories")
        return list(self.categories)


class FakeBlogService:
    """
    Minimal blog service stand-in for router tests.
    """

    def __init__(self, home=None, post=None, author=None, category=None, meta=None):
        self.home = home
        self.post = post
        self.author = author
        self.category = category
        self.meta = meta
        self.calls = []

    async def home_page(self, page):
        self.calls.append(("home_page", page))
        return self.home

    async def post_page(self, slug):
        self.calls.append(("post_page", slug))
        return self.post

    async def author_page(self, slug):
        return self.author

    async def category_page(self, slug, page):
        self.calls.append(("category_page", slug, page))
        return self.category

    async def post_metadata(self, slug):
        return self.meta

    async def author_metadata(self, slug):
        return self.meta

    async def category_metadata(self, slug):
        return self.meta

    async def nav_categories(self):
        return []


# --- Record and DTO builders ---


def make_image(ref="image-abc123-2000x1000-jpg", **extra):
    return {"_type": "image", "asset": {"_ref": ref, "_type": "reference"}, **extra}


def make_post_record(
    post_id="post1",
    slug="hello-world",
    title="Hello World",
    published_at="2024-03-05T00:00:00Z",
    categories=None,
    **extra,
):
    record = {
        "_id": post_id,
        "title": title,
        "slug": slug,
        "mainImage": make_image(),
        "publishedAt": published_at,
        "_createdAt": "2024-01-01T00:00:00Z",
        "excerpt": "An excerpt",
        "author": {"_id": "author1", "name": "Ada", "slug": "ada"},
        "categories": categories
        if categories is not None
        else [{"_id": "catA", "title": "Python", "slug": "python"}],
    }
    record.update(extra)
    return record


def make_summary(post_id, slug=None, category_ids=("catA",)):
    return PostSummary(
        id=post_id,
        title=f"Post {post_id}",
        slug=slug or f"slug-{post_id}",
        categories=[CategoryRef(id=c, title=c, slug=c.lower()) for c in category_ids],
    )


def make_detail(post_id="post1", slug="hello-world", category_ids=("catA", "catB")):
    return PostDetail(
        id=post_id,
        title="Hello World",
        slug=slug,
        excerpt="An excerpt",
        image_url="https://cdn.sanity.io/images/proj/production/abc-1200x630.jpg",
        published_at="2024-03-05T00:00:00Z",
        display_date="2024年3月5日",
        categories=[CategoryRef(id=c, title=c, slug=c.lower()) for c in category_ids],
        body_html="<p>Body</p>",
    )


def make_author(slug="ada"):
    return AuthorDetail(id="author1", name="Ada", slug=slug, picture_alt="Ada portrait")


def make_category(slug="python", description=None):
    return CategoryDetail(id="catA", title="Python", slug=slug, description=description)


def make_builder():
    return ImageUrlBuilder(project_id="proj", dataset="production")
