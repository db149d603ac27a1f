from fastapi import Depends, Request

from app.repos.content_repo import SanityContentRepo
from app.services.blog_service import BlogService
from app.services.image_service import ImageUrlBuilder
from app.settings import Settings, settings


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def get_content_client(request: Request):
    # Built once in the app lifespan
    return request.app.state.content_client


def get_image_builder(current_settings: Settings = Depends(get_settings)):
    return ImageUrlBuilder(
        project_id=current_settings.SANITY_PROJECT_ID,
        dataset=current_settings.SANITY_DATASET,
    )


def get_content_repo(
    client=Depends(get_content_client),
    image_builder=Depends(get_image_builder),
    current_settings: Settings = Depends(get_settings),
):
    return SanityContentRepo(
        client, image_builder, tz_name=current_settings.DISPLAY_TIMEZONE
    )


def get_blog_service(
    repo=Depends(get_content_repo),
    current_settings: Settings = Depends(get_settings),
):
    return BlogService(repo=repo, settings_obj=current_settings)
