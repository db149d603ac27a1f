import json
import logging
from typing import Any, Dict, Optional

import httpx

from app.settings import Settings

logger = logging.getLogger(__name__)


class ContentFetchError(Exception):
    """Raised when the content API cannot be reached or answers with an error."""


class SanityClient:
    """
    Read-only GROQ client for the Sanity HTTP query API.
    One attempt per call; timeouts are httpx defaults.
    """

    def __init__(
        self,
        project_id: str,
        dataset: str,
        api_version: str,
        use_cdn: bool = True,
        token: str = "",
        http_client: httpx.AsyncClient | None = None,
    ):
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version
        self.use_cdn = use_cdn
        self.token = token
        self.http = http_client or httpx.AsyncClient()

    @property
    def query_url(self) -> str:
        host = "apicdn" if self.use_cdn else "api"
        return (
            f"https://{self.project_id}.{host}.sanity.io"
            f"/v{self.api_version}/data/query/{self.dataset}"
        )

    async def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        request_params = {"query": query}
        for name, value in (params or {}).items():
            request_params[f"${name}"] = json.dumps(value, ensure_ascii=False)

        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self.http.get(
                self.query_url, params=request_params, headers=headers
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise ContentFetchError(f"Sanity query failed: {e}") from e
        except ValueError as e:
            raise ContentFetchError(f"Sanity returned invalid JSON: {e}") from e

        if not isinstance(body, dict):
            return None
        return body.get("result")

    async def aclose(self) -> None:
        await self.http.aclose()


class NullSanityClient:
    """
    Stand-in used when the project id or dataset is missing.
    Every query returns an empty list; the missing config is reported once.
    """

    def __init__(self):
        self._warned = False

    async def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self._warned:
            logger.warning(
                "Sanity is not configured; set SANITY_PROJECT_ID and SANITY_DATASET. "
                "Serving empty results."
            )
            self._warned = True
        return []

    async def aclose(self) -> None:
        return None


def get_sanity_client(
    settings_obj: Settings, http_client: httpx.AsyncClient | None = None
) -> SanityClient | NullSanityClient:
    """
    Build the content client once for the process.
    Falls back to the null client when the store identity is absent.
    """
    if not settings_obj.is_sanity_configured:
        return NullSanityClient()

    return SanityClient(
        project_id=settings_obj.SANITY_PROJECT_ID,
        dataset=settings_obj.SANITY_DATASET,
        api_version=settings_obj.SANITY_API_VERSION,
        use_cdn=settings_obj.SANITY_USE_CDN,
        token=settings_obj.SANITY_TOKEN,
        http_client=http_client,
    )
