"""
Client for the OpenStreetMap Nominatim geocoding API.
Free-text search, bounded search around a point, and reverse geocoding.
No API key required, but every request must carry a User-Agent.
"""

from typing import Dict, Any, List, Optional

import httpx

from config.settings import settings
from utils.errors import ExternalServiceError

SEARCH_URL = "https://nominatim.openstreetmap.org/search"
REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"

RATE_LIMIT_MESSAGE = (
    "Too many requests to the location service. "
    "Please try again in a moment. (Max 1 request per second)"
)


class NominatimClient:
    """Async client for place lookup via Nominatim."""

    def __init__(
        self,
        http: Optional[httpx.AsyncClient] = None,
        user_agent: Optional[str] = None,
    ):
        self.http = http or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
        self.user_agent = user_agent or settings.NOMINATIM_USER_AGENT

    async def search(
        self,
        query: str,
        limit: int = 5,
        country_codes: Optional[str] = None,
        viewbox: Optional[str] = None,
        bounded: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Search places matching a free-text query.

        Args:
            query: Place description, e.g. "Sarangpur, Botad".
            limit: Maximum number of results.
            country_codes: Comma-separated ISO codes to restrict results.
            viewbox: "minLon,maxLat,maxLon,minLat" search window.
            bounded: Only return results inside ``viewbox``.

        Returns:
            Raw Nominatim result dicts, ranked by the service.
        """
        params: Dict[str, Any] = {
            "q": query,
            "format": "json",
            "addressdetails": 1,
            "limit": limit,
        }
        if country_codes:
            params["countrycodes"] = country_codes
        if viewbox:
            params["viewbox"] = viewbox
            if bounded:
                params["bounded"] = 1

        data = await self._get_json(SEARCH_URL, params)
        return data or []

    async def reverse(
        self,
        lat: float,
        lon: float,
        country_codes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return the Nominatim record for the place at (lat, lon)."""
        params: Dict[str, Any] = {
            "lat": lat,
            "lon": lon,
            "format": "json",
            "addressdetails": 1,
        }
        if country_codes:
            params["countrycodes"] = country_codes

        data = await self._get_json(REVERSE_URL, params)
        if not data or not data.get("display_name"):
            raise ExternalServiceError("Nominatim", "Location name not found", status_code=404)
        return data

    async def coordinates(self, place: str) -> Dict[str, float]:
        """Convert a place name to {"lat", "lon"} using the top search hit."""
        results = await self.search(place, limit=1)
        if not results:
            raise ExternalServiceError(
                "Nominatim", f"No coordinates found for {place}", status_code=404
            )
        return {
            "lat": float(results[0]["lat"]),
            "lon": float(results[0]["lon"]),
        }

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        try:
            resp = await self.http.get(
                url,
                params=params,
                headers={"User-Agent": self.user_agent},
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 429:
                raise ExternalServiceError("Nominatim", RATE_LIMIT_MESSAGE, status_code=429) from exc
            raise ExternalServiceError(
                "Nominatim",
                f"External API error: {status} {exc.response.reason_phrase}",
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceError("Nominatim", str(exc)) from exc
        except ValueError as exc:
            raise ExternalServiceError("Nominatim", "Invalid response from location service") from exc

    async def aclose(self) -> None:
        await self.http.aclose()
