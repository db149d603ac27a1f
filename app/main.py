import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.db.sanity import get_sanity_client
from app.routers import pages
from app.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

app = FastAPI(title=settings.SITE_NAME, description=settings.SITE_DESCRIPTION)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.content_client = get_sanity_client(settings)
    logger.info(
        f"Content client ready (project={settings.SANITY_PROJECT_ID or '-'}, "
        f"dataset={settings.SANITY_DATASET or '-'}, cdn={settings.SANITY_USE_CDN})"
    )

    try:
        yield
    finally:
        await app.state.content_client.aclose()
        logger.info("Content client closed")


app.router.lifespan_context = lifespan

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
app.add_exception_handler(StarletteHTTPException, pages.http_exception_handler)
app.include_router(pages.router)
