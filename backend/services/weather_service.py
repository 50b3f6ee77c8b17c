"""
Weather service: current weather, departure-day forecasts, and weather news
with an alert level derived from live conditions.
"""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Any, List, Optional, Tuple

from clients.news_client import NewsDataClient
from clients.nominatim_client import NominatimClient
from clients.weather_client import (
    FORECAST_DAYS,
    FORECAST_PAST_DAYS,
    IndianWeatherClient,
    OpenMeteoClient,
)

logger = logging.getLogger(__name__)


def classify_conditions(weather_code: int, precipitation: float) -> Tuple[str, str]:
    """
    Map a WMO code and precipitation (mm) to (condition, alert_level).

    Codes >= 80 are showers/thunderstorms, >= 61 rain, >= 1 cloud.
    """
    if weather_code >= 80:
        condition = "Storm"
    elif weather_code >= 61:
        condition = "Rain"
    elif weather_code >= 1:
        condition = "Clouds"
    else:
        condition = "Clear"

    if condition == "Storm" or precipitation > 10:
        level = "red"
    elif condition == "Rain" or precipitation > 5:
        level = "orange"
    elif condition == "Clouds":
        level = "yellow"
    else:
        level = "low"
    return condition, level


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class WeatherService:
    """Weather lookups for the dashboard and the trip report."""

    def __init__(
        self,
        open_meteo: OpenMeteoClient,
        indian_weather: IndianWeatherClient,
        nominatim: NominatimClient,
        news: NewsDataClient,
    ):
        self.open_meteo = open_meteo
        self.indian_weather = indian_weather
        self.nominatim = nominatim
        self.news = news

    async def current_weather(self, city: str, global_search: bool = False) -> Dict[str, Any]:
        """Current conditions for a named city (provider payload, unchanged)."""
        return await self.indian_weather.get_weather(city, global_search=global_search)

    async def departure_forecast(self, city: str, day: date) -> Dict[str, Any]:
        """
        Forecast for ``city`` on the departure day.

        Returns:
            Dict with resolved city info and ``forecast``. When the day is
            outside the provider's forecast window only the city is resolved
            and ``forecast`` is None.
        """
        today = date.today()
        first = today - timedelta(days=FORECAST_PAST_DAYS)
        last = today + timedelta(days=FORECAST_DAYS - 1)
        if not first <= day <= last:
            logger.info(
                "Departure date outside forecast window",
                extra={"city": city, "date": day.isoformat()},
            )
            coords = await self.open_meteo.geocode(city)
            return {
                "city": coords["name"],
                "country": coords["country"],
                "latitude": coords["latitude"],
                "longitude": coords["longitude"],
                "timezone": "",
                "forecast": None,
            }

        result = await self.open_meteo.get_forecast(city, [day.isoformat()])
        forecasts = result.pop("forecasts")
        result["forecast"] = forecasts[0] if forecasts else None
        return result

    async def weather_news(self, location: str) -> List[Dict[str, Any]]:
        """
        Weather news for ``location``, each item tagged with the alert level of
        the location's current conditions.

        Any failure yields a single placeholder item so the notifications view
        always has something to show.
        """
        try:
            coords = await self.nominatim.coordinates(location)
            conditions = await self.open_meteo.get_current_conditions(
                coords["lat"], coords["lon"],
            )
            _, alert_level = classify_conditions(
                conditions["weather_code"], conditions["precipitation"],
            )
            articles = await self.news.search(f"weather {location}")
        except Exception as exc:
            logger.warning(
                "Weather news unavailable",
                extra={"location": location, "error": str(exc)},
            )
            return [self._placeholder(location)]

        return [
            self._to_news_item(item, index, alert_level, location)
            for index, item in enumerate(articles)
        ]

    @staticmethod
    def _to_news_item(
        item: Dict[str, Any],
        index: int,
        alert_level: str,
        location: str,
    ) -> Dict[str, Any]:
        return {
            "id": item.get("article_id") or f"news-{index}",
            "title": item.get("title") or "No title available",
            "description": (
                item.get("description") or item.get("content") or "No description available"
            ),
            "publishedAt": item.get("pubDate") or _now_iso(),
            "alertLevel": alert_level,
            "locations": [location],
            "imageUrl": item.get("image_url"),
        }

    @staticmethod
    def _placeholder(location: str) -> Dict[str, Any]:
        return {
            "id": "error-1",
            "title": "Unable to Fetch News",
            "description": "There was an error fetching weather news. Please try again later.",
            "publishedAt": _now_iso(),
            "alertLevel": "low",
            "locations": [location],
            "imageUrl": None,
        }

    def get_weather_summary(self, forecast_result: Dict[str, Any]) -> Optional[str]:
        """One-line summary of a ``departure_forecast`` result."""
        forecast = forecast_result.get("forecast")
        if not forecast:
            return None
        return (
            f"{forecast_result['city']} on {forecast['date']}: {forecast['condition']}, "
            f"{forecast['temp_min_c']}–{forecast['temp_max_c']}°C, "
            f"{forecast['precipitation_chance']}% chance of precipitation"
        )
