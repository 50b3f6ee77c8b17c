"""Tests for place suggestions, reverse lookup and the nearby finder."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import AsyncMock, MagicMock

import pytest

from services.places_service import (
    PlacesService,
    bounding_box,
    format_viewbox,
    haversine_km,
)


def _nominatim(search=None, reverse=None):
    client = MagicMock()
    client.search = AsyncMock(return_value=search or [])
    client.reverse = AsyncMock(return_value=reverse)
    return client


def test_haversine_zero_distance():
    assert haversine_km(22.17, 71.67, 22.17, 71.67) == 0


def test_haversine_one_degree_latitude():
    assert haversine_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)


def test_bounding_box_is_centred():
    min_lon, max_lat, max_lon, min_lat = bounding_box(23.0, 72.0, 20)

    assert max_lat - 23.0 == pytest.approx(23.0 - min_lat)
    assert max_lon - 72.0 == pytest.approx(72.0 - min_lon)
    assert max_lat - min_lat == pytest.approx(40 / 111.0)


def test_format_viewbox():
    assert format_viewbox((1.5, 2, 3, 4)) == "1.5,2,3,4"


class TestSuggest:

    @pytest.mark.asyncio
    async def test_short_query_skips_lookup(self):
        nominatim = _nominatim()
        service = PlacesService(nominatim)

        assert await service.suggest("Bo") == []
        nominatim.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_filters_vague_results(self):
        nominatim = _nominatim(search=[
            {"place_id": 1, "display_name": "India", "lat": "22", "lon": "79", "type": "country"},
            {"place_id": 2, "display_name": "Botad, Gujarat", "lat": "22.17", "lon": "71.67", "type": "town"},
            {"place_id": 3, "display_name": "Botad Road, Botad", "lat": "22.1", "lon": "71.6", "type": "road"},
            {"place_id": 4, "display_name": "Bus Stand, Botad, Gujarat", "lat": "22.2", "lon": "71.7", "type": "bus_stop"},
        ])
        service = PlacesService(nominatim)

        suggestions = await service.suggest("Botad")

        assert [s["place_id"] for s in suggestions] == ["2", "4"]
        assert suggestions[0] == {
            "place_id": "2",
            "display_name": "Botad, Gujarat",
            "lat": 22.17,
            "lon": 71.67,
            "type": "town",
        }
        assert nominatim.search.await_args.kwargs["limit"] == 5


class TestReverseLookup:

    @pytest.mark.asyncio
    async def test_returns_short_name(self):
        nominatim = _nominatim(reverse={"display_name": "Sargasan, Gandhinagar, Gujarat, India"})
        service = PlacesService(nominatim)

        result = await service.reverse_lookup(23.19, 72.62)

        assert result == {
            "display_name": "Sargasan, Gandhinagar, Gujarat, India",
            "name": "Sargasan",
            "lat": 23.19,
            "lon": 72.62,
        }


class TestFindNearby:

    @pytest.mark.asyncio
    async def test_sorted_nearest_first(self):
        nominatim = _nominatim(search=[
            {"place_id": 10, "display_name": "Far Cafe, Gandhinagar", "lat": "23.30", "lon": "72.62",
             "type": "cafe", "class": "amenity"},
            {"place_id": 11, "display_name": "Near Cafe, Gandhinagar", "lat": "23.20", "lon": "72.62",
             "type": "cafe", "class": "amenity", "icon": "https://example.test/cafe.png"},
        ])
        service = PlacesService(nominatim)

        places = await service.find_nearby(23.19, 72.62, "cafe", radius_km=20)

        assert [p["name"] for p in places] == ["Near Cafe", "Far Cafe"]
        nearest = places[0]
        assert nearest["id"] == "11"
        assert nearest["class"] == "amenity"
        assert nearest["distance"] == f"{nearest['distance_km']:.2f} km"
        assert nearest["icon"] == "https://example.test/cafe.png"

    @pytest.mark.asyncio
    async def test_search_is_bounded_to_radius(self):
        nominatim = _nominatim()
        service = PlacesService(nominatim)

        await service.find_nearby(23.0, 72.0, "hospital", radius_km=20)

        kwargs = nominatim.search.await_args.kwargs
        assert kwargs["bounded"] is True
        assert kwargs["viewbox"] == format_viewbox(bounding_box(23.0, 72.0, 20))
