"""
GROQ queries used by the blog.

Every post query skips drafts and orders by the effective publish date
(publishedAt, falling back to _createdAt), then by _createdAt.
"""

NOT_DRAFT = "!(_id in path('drafts.**'))"

POST_ORDER = "order(coalesce(publishedAt, _createdAt) desc, _createdAt desc)"

AUTHOR_REF_PROJECTION = '{ _id, name, picture, "slug": slug.current }'

CATEGORY_REF_PROJECTION = '{ _id, title, "slug": slug.current }'

POST_SUMMARY_PROJECTION = f"""{{
    _id,
    title,
    "slug": slug.current,
    mainImage,
    "publishedAt": coalesce(publishedAt, _createdAt),
    _createdAt,
    excerpt,
    author->{AUTHOR_REF_PROJECTION},
    categories[]->{CATEGORY_REF_PROJECTION}
  }}"""

POST_DETAIL_PROJECTION = f"""{{
    _id,
    title,
    "slug": slug.current,
    mainImage,
    body,
    "publishedAt": coalesce(publishedAt, _createdAt),
    _createdAt,
    excerpt,
    author->{AUTHOR_REF_PROJECTION},
    categories[]->{CATEGORY_REF_PROJECTION}
  }}"""

# Params: $limit
POSTS_QUERY = f"""
  *[_type == "post" && {NOT_DRAFT}]
    | {POST_ORDER}[0...$limit]{POST_SUMMARY_PROJECTION}
"""

# Params: $start, $end (half-open window)
PAGINATED_POSTS_QUERY = f"""
  {{
    "total": count(*[_type == "post" && {NOT_DRAFT}]),
    "items": *[_type == "post" && {NOT_DRAFT}]
      | {POST_ORDER}[$start...$end]{POST_SUMMARY_PROJECTION}
  }}
"""

# Params: $slug
POST_BY_SLUG_QUERY = f"""
  *[_type == "post" && slug.current == $slug && {NOT_DRAFT}][0]{POST_DETAIL_PROJECTION}
"""

# Params: $slug
AUTHOR_BY_SLUG_QUERY = """
  *[_type == "author" && slug.current == $slug][0]{
    _id,
    name,
    "slug": slug.current,
    picture{ ..., alt },
    bio
  }
"""

# Params: $slug
POSTS_BY_AUTHOR_QUERY = f"""
  *[_type == "post" && author->slug.current == $slug && {NOT_DRAFT}]
    | {POST_ORDER}[0...20]{POST_SUMMARY_PROJECTION}
"""

# Params: $slug, $start, $end
CATEGORY_WITH_POSTS_QUERY = f"""
  {{
    "category": *[_type == "category" && slug.current == $slug][0]{{
      _id,
      title,
      description,
      "slug": slug.current
    }},
    "total": count(*[
      _type == "post" &&
      {NOT_DRAFT} &&
      count(categories[@->slug.current == $slug]) > 0
    ]),
    "posts": *[
      _type == "post" &&
      {NOT_DRAFT} &&
      count(categories[@->slug.current == $slug]) > 0
    ]
    | {POST_ORDER}[$start...$end]{POST_SUMMARY_PROJECTION}
  }}
"""

# Params: $categoryIds, $currentPostId
RELATED_POSTS_QUERY = f"""
  *[
    _type == "post" &&
    {NOT_DRAFT} &&
    count(categories[@._ref in $categoryIds]) > 0 &&
    _id != $currentPostId
  ]
  | {POST_ORDER}[0...4]{POST_SUMMARY_PROJECTION}
"""

CATEGORIES_NAV_QUERY = """
  *[_type == "category" && defined(slug.current)]
  | order(title asc){
    _id,
    title,
    "slug": slug.current
  }
"""

ALL_CATEGORY_SLUGS_QUERY = """
  *[_type == "category" && defined(slug.current)]{
    "slug": slug.current
  }
"""

ALL_POST_SLUGS_QUERY = f"""
  *[_type == "post" && {NOT_DRAFT} && defined(slug.current)]{{
    "slug": slug.current
  }}
"""
