"""
Client for the NewsData.io latest-news API.
"""

from typing import Dict, Any, List, Optional

import httpx

from config.settings import settings
from utils.errors import ExternalServiceError

NEWS_URL = "https://newsdata.io/api/1/news"


class NewsDataClient:
    """Fetch English news articles matching a query."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.NEWSDATA_API_KEY
        self.http = http or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)

    async def search(self, query: str, language: str = "en") -> List[Dict[str, Any]]:
        """Return the ``results`` list of the NewsData.io response."""
        if not self.api_key:
            raise ExternalServiceError(
                "NewsData.io", "NEWSDATA_API_KEY is not configured", status_code=503
            )

        try:
            resp = await self.http.get(
                NEWS_URL,
                params={"apikey": self.api_key, "q": query, "language": language},
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            raise ExternalServiceError("NewsData.io", str(exc)) from exc
        except ValueError as exc:
            raise ExternalServiceError("NewsData.io", "Invalid response from news service") from exc

        return data.get("results") or []

    async def aclose(self) -> None:
        await self.http.aclose()
