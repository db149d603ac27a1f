import asyncio
import datetime
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import dependencies as deps
from app.schemas.blog import PageMetadata
from app.services.blog_service import BlogService
from app.services.image_service import PLACEHOLDER_IMAGE
from app.settings import Settings
from app.utils import parse_page

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["placeholder_image"] = PLACEHOLDER_IMAGE
templates.env.globals["current_year"] = lambda: datetime.date.today().year

router = APIRouter()


def render_page(
    request: Request,
    template: str,
    context: dict,
    current_settings: Settings,
    status_code: int = 200,
):
    response = templates.TemplateResponse(
        request,
        template,
        {
            "site_name": current_settings.SITE_NAME,
            "site_description": current_settings.SITE_DESCRIPTION,
            **context,
        },
        status_code=status_code,
    )
    if status_code < 500:
        response.headers["Cache-Control"] = (
            f"public, max-age=0, s-maxage={current_settings.REVALIDATE_SECONDS}"
        )
    else:
        response.headers["Cache-Control"] = "no-store"
    return response


async def render_not_found(
    request: Request,
    service: BlogService,
    meta: PageMetadata,
    current_settings: Settings,
):
    categories = await service.nav_categories()
    return render_page(
        request,
        "not_found.html",
        {"meta": meta, "nav_categories": categories},
        current_settings,
        status_code=404,
    )


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    page: Optional[str] = Query(None),
    service: BlogService = Depends(deps.get_blog_service),
    current_settings: Settings = Depends(deps.get_settings),
):
    """Paginated list of posts."""
    try:
        view = await service.home_page(parse_page(page))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error rendering home page: {e}")
        raise HTTPException(status_code=500, detail="Failed to render page")

    return render_page(
        request,
        "home.html",
        {"view": view, "meta": view.meta, "nav_categories": view.nav_categories},
        current_settings,
    )


@router.get("/author/{slug}", response_class=HTMLResponse)
async def author_detail(
    slug: str,
    request: Request,
    service: BlogService = Depends(deps.get_blog_service),
    current_settings: Settings = Depends(deps.get_settings),
):
    """Author profile with their posts."""
    try:
        view, meta = await asyncio.gather(
            service.author_page(slug), service.author_metadata(slug)
        )
        if view is None:
            return await render_not_found(request, service, meta, current_settings)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error rendering author {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to render page")

    return render_page(
        request,
        "author.html",
        {"view": view, "meta": meta, "nav_categories": view.nav_categories},
        current_settings,
    )


@router.get("/category/{slug}", response_class=HTMLResponse)
async def category_detail(
    slug: str,
    request: Request,
    page: Optional[str] = Query(None),
    service: BlogService = Depends(deps.get_blog_service),
    current_settings: Settings = Depends(deps.get_settings),
):
    """Category description with a page of its posts."""
    try:
        view, meta = await asyncio.gather(
            service.category_page(slug, parse_page(page)),
            service.category_metadata(slug),
        )
        if view is None:
            return await render_not_found(request, service, meta, current_settings)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error rendering category {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to render page")

    return render_page(
        request,
        "category.html",
        {"view": view, "meta": meta, "nav_categories": view.nav_categories},
        current_settings,
    )


@router.get("/{slug}", response_class=HTMLResponse)
async def post_detail(
    slug: str,
    request: Request,
    service: BlogService = Depends(deps.get_blog_service),
    current_settings: Settings = Depends(deps.get_settings),
):
    """A single post with related posts."""
    try:
        view, meta = await asyncio.gather(
            service.post_page(slug), service.post_metadata(slug)
        )
        if view is None:
            return await render_not_found(request, service, meta, current_settings)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error rendering post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to render page")

    return render_page(
        request,
        "post.html",
        {"view": view, "meta": meta, "nav_categories": view.nav_categories},
        current_settings,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render framework-level errors (unknown routes, failed renders) as HTML."""
    title = "ページが見つかりません" if exc.status_code == 404 else "エラーが発生しました"
    # handlers run outside dependency injection
    current_settings = request.app.dependency_overrides.get(deps.get_settings, deps.get_settings)()
    return render_page(
        request,
        "error.html",
        {
            "meta": PageMetadata(title=title),
            "status_code": exc.status_code,
            "detail": exc.detail,
            "nav_categories": [],
        },
        current_settings,
        status_code=exc.status_code,
    )
