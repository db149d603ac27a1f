import asyncio
import logging
import sys
from typing import List

import httpx

from app.db.sanity import get_sanity_client
from app.repos.content_repo import SanityContentRepo
from app.services.image_service import ImageUrlBuilder
from app.settings import settings

logger = logging.getLogger(__name__)


async def collect_paths(repo: SanityContentRepo) -> List[str]:
    """Every page path the site can render: home, posts and categories."""
    post_slugs, category_slugs = await asyncio.gather(
        repo.all_post_slugs(), repo.all_category_slugs()
    )
    return (
        ["/"]
        + [f"/{slug}" for slug in post_slugs]
        + [f"/category/{slug}" for slug in category_slugs]
    )


async def warm_pages(base_url: str, repo: SanityContentRepo, http: httpx.AsyncClient) -> int:
    """Request every page once so the cache in front of the app holds a fresh copy."""
    failures = 0
    for path in await collect_paths(repo):
        try:
            response = await http.get(f"{base_url.rstrip('/')}{path}")
            if response.status_code >= 400:
                failures += 1
                logger.warning(f"{path} answered {response.status_code}")
            else:
                logger.info(f"Warmed {path}")
        except httpx.HTTPError as e:
            failures += 1
            logger.error(f"Failed to warm {path}: {e}")
    return failures


async def main(base_url: str) -> int:
    client = get_sanity_client(settings)
    repo = SanityContentRepo(
        client,
        ImageUrlBuilder(settings.SANITY_PROJECT_ID, settings.SANITY_DATASET),
        tz_name=settings.DISPLAY_TIMEZONE,
    )
    try:
        async with httpx.AsyncClient() as http:
            return await warm_pages(base_url, repo, http)
    finally:
        await client.aclose()


if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    target = sys.argv[1] if len(sys.argv) > 1 else settings.site_url
    failed = asyncio.run(main(target))
    if failed:
        logger.error(f"{failed} page(s) failed to warm")
    sys.exit(1 if failed else 0)
