"""
Pydantic models for FastAPI request/response validation.

These are API-boundary schemas only. Internal logic uses the dataclasses in
models/itinerary.py; itineraries cross the boundary as plain dicts in their
JSON wire shape.
"""

import re
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ── Request Models ─────────────────────────────────────────────


class JourneyRequest(BaseModel):
    """POST /api/journey: generate a trip plan."""

    model_config = ConfigDict(populate_by_name=True)

    start_point: str = Field(
        ...,
        alias="startPoint",
        min_length=1,
        json_schema_extra={"examples": ["Sargasan, Gandhinagar"]},
    )
    end_point: str = Field(
        ...,
        alias="endPoint",
        min_length=1,
        json_schema_extra={"examples": ["Sarangpur, Botad"]},
    )
    waypoints: List[str] = Field(
        default_factory=list,
        description="Intermediate stops, in visiting order",
    )
    departure_date: str = Field(
        ...,
        alias="departureDate",
        description="YYYY-MM-DD",
        json_schema_extra={"examples": ["2025-03-10"]},
    )

    @field_validator("start_point", "end_point")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("waypoints")
    @classmethod
    def _drop_blank_waypoints(cls, value: List[str]) -> List[str]:
        return [w.strip() for w in value if w and w.strip()]

    @field_validator("departure_date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        if not _ISO_DATE.match(value):
            raise ValueError("Invalid departureDate format. Please use YYYY-MM-DD.")
        date.fromisoformat(value)
        return value


class SegmentWeather(BaseModel):
    condition: Optional[str] = None
    temperature: Optional[float] = None


class JourneySegment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    to: str
    distance_km: Optional[float] = Field(None, alias="distanceKm")
    travel_time_hours: Optional[float] = Field(None, alias="travelTimeHours")
    weather: Optional[SegmentWeather] = None


class JourneyReportRequest(BaseModel):
    """POST /api/journey/recommendations: advisory texts for a computed route."""

    model_config = ConfigDict(populate_by_name=True)

    segments: List[JourneySegment] = Field(default_factory=list)
    departure_date: Optional[str] = Field(None, alias="departureDate")
    overall_warnings: List[str] = Field(default_factory=list, alias="overallWarnings")
    overall_actions: List[str] = Field(default_factory=list, alias="overallActions")


class ChatWeather(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    condition: Optional[str] = None
    temperature: Optional[float] = None
    precipitation: Optional[float] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = Field(None, alias="windSpeed")


class ChatRequest(BaseModel):
    """POST /api/chat: one question to the journey assistant."""

    message: str = Field(..., description="User question")
    city: str = ""
    weather: Optional[ChatWeather] = None
    report: Optional[Dict[str, Any]] = Field(
        None, description="Trip plan previously returned by /api/journey",
    )


class RegisterRequest(BaseModel):
    """POST /api/auth/register"""

    name: Optional[str] = None
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """POST /api/auth/login"""

    email: Optional[str] = None
    password: Optional[str] = None


# ── Response Models ────────────────────────────────────────────


class HealthResponse(BaseModel):
    """GET /api/health response."""

    status: str
    service: str
    model: str
    generator_configured: bool
    max_attempts: int


class JourneyResponse(BaseModel):
    """POST /api/journey response."""

    report: Dict[str, Any]


class JourneyErrorResponse(BaseModel):
    error: str
    details: str
    kind: str
    raw_response: Optional[str] = None


class RecommendationsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recommendations: List[str]
    best_route_summary: str = Field(..., serialization_alias="bestRouteSummary")


class ChatResponse(BaseModel):
    reply: str


class PlaceResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    address: str
    lat: float
    lng: float
    type: Optional[str] = None
    class_: Optional[str] = Field(None, alias="class")
    distance_km: float
    distance: str
    icon: Optional[str] = None


class PlacesResponse(BaseModel):
    results: List[PlaceResult]


class Suggestion(BaseModel):
    place_id: str
    display_name: str
    lat: float
    lon: float
    type: Optional[str] = None


class SuggestResponse(BaseModel):
    results: List[Suggestion]


class ReverseGeocodeResponse(BaseModel):
    display_name: str
    name: str
    lat: float
    lon: float


class WeatherNewsItem(BaseModel):
    id: str
    title: str
    description: str
    publishedAt: str
    alertLevel: str
    locations: List[str]
    imageUrl: Optional[str] = None


class WeatherNewsResponse(BaseModel):
    results: List[WeatherNewsItem]


class ForecastResponse(BaseModel):
    city: str
    country: str
    latitude: float
    longitude: float
    timezone: str = ""
    forecast: Optional[Dict[str, Any]] = None
    summary: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


class LoginResponse(BaseModel):
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
