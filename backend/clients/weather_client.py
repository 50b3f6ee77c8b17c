"""
Weather API clients.

- ``OpenMeteoClient``: daily forecasts for a city and current hourly
  conditions at a coordinate. Free, no API key.
- ``IndianWeatherClient``: current weather for a city from the IndianAPI
  weather service (India or global endpoint), authenticated by ``x-api-key``.
"""

from typing import Dict, Any, List, Optional

import httpx

from config.settings import settings
from utils.errors import ExternalServiceError

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

INDIA_WEATHER_URL = "https://weather.indianapi.in/india/weather"
GLOBAL_WEATHER_URL = "https://weather.indianapi.in/global/weather"

# WMO weather codes -> human-readable descriptions
# Range the forecast endpoint accepts for start_date/end_date, relative to today
FORECAST_DAYS = 16
FORECAST_PAST_DAYS = 92

WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snowfall",
    73: "Moderate snowfall",
    75: "Heavy snowfall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


class OpenMeteoClient:
    """Forecasts and current conditions via Open-Meteo (free, no key)."""

    def __init__(self, http: Optional[httpx.AsyncClient] = None):
        self.http = http or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)

    async def get_forecast(self, city: str, dates: List[str]) -> Dict[str, Any]:
        """
        Get the daily forecast for a city on specific dates.

        Args:
            city: City name (e.g. "Botad, Gujarat").
            dates: Dates in YYYY-MM-DD format.

        Returns:
            Dict with resolved city info and one forecast per requested date
            that the service covers.
        """
        if not dates:
            raise ValueError("Need at least one date")

        coords = await self.geocode(city)

        params = {
            "latitude": coords["latitude"],
            "longitude": coords["longitude"],
            "daily": ",".join([
                "weather_code",
                "temperature_2m_max",
                "temperature_2m_min",
                "precipitation_sum",
                "precipitation_probability_max",
                "wind_speed_10m_max",
                "sunrise",
                "sunset",
            ]),
            "timezone": "auto",
            "start_date": min(dates),
            "end_date": max(dates),
        }
        data = await self._get_json(FORECAST_URL, params)

        daily = data["daily"]
        requested = set(dates)
        forecasts = []
        for i, day in enumerate(daily["time"]):
            if day not in requested:
                continue
            code = daily["weather_code"][i]
            forecasts.append({
                "date": day,
                "condition": WEATHER_CODES.get(code, f"Unknown ({code})"),
                "weather_code": code,
                "temp_max_c": daily["temperature_2m_max"][i],
                "temp_min_c": daily["temperature_2m_min"][i],
                "precipitation_mm": daily["precipitation_sum"][i],
                "precipitation_chance": daily["precipitation_probability_max"][i],
                "wind_speed_kmh": daily["wind_speed_10m_max"][i],
                "sunrise": daily["sunrise"][i],
                "sunset": daily["sunset"][i],
            })

        return {
            "city": coords["name"],
            "country": coords["country"],
            "latitude": coords["latitude"],
            "longitude": coords["longitude"],
            "timezone": data.get("timezone", ""),
            "forecasts": forecasts,
        }

    async def get_current_conditions(self, lat: float, lon: float) -> Dict[str, Any]:
        """First hourly precipitation (mm) and WMO code at a coordinate."""
        data = await self._get_json(
            FORECAST_URL,
            {"latitude": lat, "longitude": lon, "hourly": "precipitation,weathercode"},
        )
        hourly = data.get("hourly") or {}
        precipitation = (hourly.get("precipitation") or [0])[0] or 0
        weather_code = (hourly.get("weathercode") or [0])[0] or 0
        return {"precipitation": precipitation, "weather_code": weather_code}

    async def geocode(self, city: str) -> Dict[str, Any]:
        """Convert a city name to coordinates using Open-Meteo geocoding.

        "Botad, Gujarat" searches for "Botad" and prefers a result whose
        region or country matches every extra qualifier.
        """
        parts = [p.strip() for p in city.split(",")]
        search_name = parts[0]
        qualifiers = [q.lower() for q in parts[1:] if q]

        data = await self._get_json(GEOCODING_URL, {"name": search_name, "count": 10})
        results = data.get("results")
        if not results:
            raise ExternalServiceError("Open-Meteo", f"City not found: {city}", status_code=404)

        match = results[0]
        if qualifiers:
            for r in results:
                fields = " ".join([
                    r.get("admin1", ""),
                    r.get("admin2", ""),
                    r.get("country", ""),
                ]).lower()
                if all(q in fields for q in qualifiers):
                    match = r
                    break

        return {
            "name": match["name"],
            "country": match.get("country", ""),
            "latitude": match["latitude"],
            "longitude": match["longitude"],
        }

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = await self.http.get(url, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as exc:
            raise ExternalServiceError("Open-Meteo", str(exc)) from exc
        except ValueError as exc:
            raise ExternalServiceError("Open-Meteo", "Invalid response from weather service") from exc

    async def aclose(self) -> None:
        await self.http.aclose()


class IndianWeatherClient:
    """Current weather for a named place from weather.indianapi.in."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.WEATHER_API_KEY
        self.http = http or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)

    async def get_weather(self, city: str, global_search: bool = False) -> Dict[str, Any]:
        """
        Fetch current weather for ``city``.

        Args:
            city: Place name.
            global_search: Use the worldwide endpoint instead of the India one.

        Returns:
            The provider's JSON payload, unchanged.
        """
        if not self.api_key:
            raise ExternalServiceError(
                "IndianAPI Weather", "WEATHER_API_KEY is not configured", status_code=503
            )

        if global_search:
            url, params = GLOBAL_WEATHER_URL, {"location": city}
        else:
            url, params = INDIA_WEATHER_URL, {"city": city}

        try:
            resp = await self.http.get(url, params=params, headers={"x-api-key": self.api_key})
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ExternalServiceError("IndianAPI Weather", "Failed to fetch weather data") from exc

        if isinstance(data, dict) and data.get("error"):
            raise ExternalServiceError("IndianAPI Weather", str(data["error"]), status_code=404)
        return data

    async def aclose(self) -> None:
        await self.http.aclose()
