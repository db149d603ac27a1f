from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Sanity
    SANITY_PROJECT_ID: str = ""
    SANITY_DATASET: str = ""
    SANITY_API_VERSION: str = "2025-01-01"
    SANITY_USE_CDN: bool = True
    SANITY_TOKEN: str = ""

    # Site
    SITE_URL: str = "http://localhost:3000"
    SITE_NAME: str = "My Blog"
    SITE_DESCRIPTION: str = "Sanity + FastAPI blog"

    # Rendering
    PAGE_SIZE: int = 8
    RECENT_POSTS_LIMIT: int = 5
    REVALIDATE_SECONDS: int = 60
    DISPLAY_TIMEZONE: str = "Asia/Tokyo"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def is_sanity_configured(self) -> bool:
        return bool(self.SANITY_PROJECT_ID and self.SANITY_DATASET)

    @property
    def site_url(self) -> str:
        return (self.SITE_URL or "http://localhost:3000").rstrip("/")


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
