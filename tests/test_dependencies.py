from types import SimpleNamespace

from app.dependencies import (
    get_blog_service,
    get_content_client,
    get_content_repo,
    get_image_builder,
)
from app.repos.content_repo import SanityContentRepo
from app.services.blog_service import BlogService
from app.services.image_service import ImageUrlBuilder
from app.settings import Settings


def test_get_content_client_reads_app_state():
    client = object()
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(content_client=client)))

    assert get_content_client(request) is client


def test_get_image_builder_uses_store_identity():
    builder = get_image_builder(
        current_settings=Settings(SANITY_PROJECT_ID="proj", SANITY_DATASET="prod")
    )

    assert isinstance(builder, ImageUrlBuilder)
    assert (builder.project_id, builder.dataset) == ("proj", "prod")


def test_get_content_repo_constructs_repo():
    client = object()
    builder = ImageUrlBuilder("proj", "prod")

    repo = get_content_repo(
        client=client,
        image_builder=builder,
        current_settings=Settings(DISPLAY_TIMEZONE="UTC"),
    )

    assert isinstance(repo, SanityContentRepo)
    assert repo.client is client
    assert repo.image_builder is builder
    assert repo.tz_name == "UTC"


def test_get_blog_service_constructs_service():
    class FakeRepo:
        pass

    repo = FakeRepo()
    s = Settings(PAGE_SIZE=3)

    svc = get_blog_service(repo=repo, current_settings=s)

    assert isinstance(svc, BlogService)
    assert svc.repo is repo
    assert svc.settings is s
