"""
Place lookup for the trip form and the "near me" finder.

- ``suggest``: autocomplete candidates for start / end / waypoint inputs.
- ``reverse_lookup``: name of the place at the user's coordinates.
- ``find_nearby``: places matching a query inside a radius around the user,
  sorted nearest first.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from clients.nominatim_client import NominatimClient
from config.settings import settings

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.0

# Suggestion filter: these place types only need "name, region"
_SETTLEMENT_TYPES = {"city", "town", "village", "hamlet"}
_MIN_QUERY_LENGTH = 3
_SUGGESTION_LIMIT = 5


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounding_box(lat: float, lon: float, radius_km: float) -> Tuple[float, float, float, float]:
    """(min_lon, max_lat, max_lon, min_lat) of a square around the point."""
    d_lat = radius_km / KM_PER_DEGREE_LAT
    d_lon = radius_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(lat)))
    return (lon - d_lon, lat + d_lat, lon + d_lon, lat - d_lat)


def format_viewbox(box: Tuple[float, float, float, float]) -> str:
    return ",".join(str(v) for v in box)


class PlacesService:
    """Geocoding-backed place search."""

    def __init__(self, nominatim: NominatimClient):
        self.nominatim = nominatim

    async def suggest(self, query: str) -> List[Dict[str, Any]]:
        """
        Autocomplete suggestions for a partially typed place.

        Queries shorter than three characters return nothing. Bare country
        entries are dropped; settlements need at least two display-name
        parts, anything else at least three.
        """
        if not query or len(query.strip()) < _MIN_QUERY_LENGTH:
            return []

        results = await self.nominatim.search(
            query,
            limit=_SUGGESTION_LIMIT,
            country_codes=settings.SUGGESTION_COUNTRY_CODES or None,
        )
        return [
            {
                "place_id": str(r.get("place_id", "")),
                "display_name": r["display_name"],
                "lat": float(r["lat"]),
                "lon": float(r["lon"]),
                "type": r.get("type"),
            }
            for r in results
            if self._keep_suggestion(r)
        ]

    @staticmethod
    def _keep_suggestion(result: Dict[str, Any]) -> bool:
        parts = [p.strip() for p in result.get("display_name", "").split(",") if p.strip()]
        place_type = (result.get("type") or "").lower()

        if (
            place_type == "country"
            and len(parts) == 1
            and parts[0].lower() == settings.SUGGESTION_COUNTRY_NAME.lower()
        ):
            return False
        if place_type in _SETTLEMENT_TYPES and len(parts) >= 2:
            return True
        return len(parts) >= 3

    async def reverse_lookup(self, lat: float, lon: float) -> Dict[str, Any]:
        data = await self.nominatim.reverse(
            lat, lon, country_codes=settings.SUGGESTION_COUNTRY_CODES or None,
        )
        return {
            "display_name": data["display_name"],
            "name": data["display_name"].split(",")[0],
            "lat": lat,
            "lon": lon,
        }

    async def find_nearby(
        self,
        lat: float,
        lng: float,
        query: str,
        radius_km: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        """Places matching ``query`` within ``radius_km`` of (lat, lng), nearest first."""
        radius = radius_km if radius_km is not None else settings.PLACES_RADIUS_KM
        viewbox = format_viewbox(bounding_box(lat, lng, radius))

        results = await self.nominatim.search(
            query,
            limit=settings.PLACES_LIMIT,
            viewbox=viewbox,
            bounded=True,
        )

        places = []
        for r in results:
            place_lat = float(r["lat"])
            place_lng = float(r["lon"])
            distance_km = haversine_km(lat, lng, place_lat, place_lng)
            places.append({
                "id": str(r["place_id"]),
                "name": r["display_name"].split(",")[0],
                "address": r["display_name"],
                "lat": place_lat,
                "lng": place_lng,
                "type": r.get("type"),
                "class": r.get("class"),
                "distance_km": round(distance_km, 2),
                "distance": f"{distance_km:.2f} km",
                "icon": r.get("icon"),
            })

        places.sort(key=lambda p: p["distance_km"])
        logger.info(
            "Nearby search returned %d places", len(places),
            extra={"query": query, "radius_km": radius},
        )
        return places
