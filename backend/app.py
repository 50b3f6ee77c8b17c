"""
WeatherWise Journey: FastAPI application.

Generates AI trip plans for a start point, end point, ordered waypoints and a
departure date, and serves the supporting lookups the dashboard needs:
place suggestions, "near me" search, weather, weather news, AI route advice,
a journey-assistant chat, and user accounts.

Run:
    python backend/app.py          # starts uvicorn with reload
    uvicorn app:app --reload       # (from the backend/ directory)

Auto-generated API docs:
    http://localhost:8000/docs      (Swagger UI)
    http://localhost:8000/redoc     (ReDoc)
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional, Union

# ---------------------------------------------------------------------------
# Path setup: allow short imports like ``from config.settings import …``
# ---------------------------------------------------------------------------
sys.path.insert(0, os.path.dirname(__file__))

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import settings, redact_api_key
from config.logging_config import configure_logging
from clients.gemini_client import GeminiClient
from clients.news_client import NewsDataClient
from clients.nominatim_client import NominatimClient
from clients.weather_client import IndianWeatherClient, OpenMeteoClient
from models.db import get_engine, get_session_factory, init_db
from models.itinerary import TripRequest
from services.auth_service import AccountError, AuthService
from services.chat_service import ChatService, SORRY_MESSAGE
from services.itinerary_service import ItineraryService, RetryingItineraryService
from services.places_service import PlacesService
from services.recommendation_service import RecommendationService
from services.response_parser import plan_from_data
from services.weather_service import WeatherService
from utils.errors import ExternalServiceError, ItineraryGenerationError, SchemaError
from utils.id_generator import generate_request_id
from schemas.api_models import (
    ChatRequest,
    ChatResponse,
    ForecastResponse,
    HealthResponse,
    JourneyErrorResponse,
    JourneyReportRequest,
    JourneyRequest,
    JourneyResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PlacesResponse,
    RecommendationsResponse,
    RegisterRequest,
    ReverseGeocodeResponse,
    SuggestResponse,
    UserResponse,
    WeatherNewsResponse,
)

logger = logging.getLogger(__name__)

JOURNEY_FAILED = "Failed to generate journey plan."

# ---------------------------------------------------------------------------
# Module-level service instances (set during lifespan startup)
# ---------------------------------------------------------------------------
gemini_client: Optional[GeminiClient] = None
http_client: Optional[httpx.AsyncClient] = None
itinerary_service: Optional[Union[ItineraryService, RetryingItineraryService]] = None
recommendation_service: Optional[RecommendationService] = None
chat_service: Optional[ChatService] = None
places_service: Optional[PlacesService] = None
weather_service: Optional[WeatherService] = None
auth_service: Optional[AuthService] = None


# ---------------------------------------------------------------------------
# Lifespan: initialise / tear down services
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialise services on startup; clean up on shutdown."""
    global gemini_client, http_client, itinerary_service, recommendation_service
    global chat_service, places_service, weather_service, auth_service

    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    # One Gemini client for the whole process
    gemini_client = GeminiClient()
    if gemini_client.is_configured:
        logger.info(
            "Gemini client ready",
            extra={"model": gemini_client.model_name, "key": redact_api_key(gemini_client.api_key)},
        )
    else:
        logger.warning("GEMINI_KEY not set; generation endpoints will return configuration errors")

    itinerary_service = RetryingItineraryService(
        ItineraryService(gemini_client),
        max_attempts=settings.ITINERARY_MAX_ATTEMPTS,
        backoff_seconds=settings.ITINERARY_RETRY_BACKOFF,
    )
    recommendation_service = RecommendationService(gemini_client)
    chat_service = ChatService(gemini_client)

    http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
    nominatim = NominatimClient(http=http_client)
    places_service = PlacesService(nominatim)
    weather_service = WeatherService(
        open_meteo=OpenMeteoClient(http=http_client),
        indian_weather=IndianWeatherClient(http=http_client),
        nominatim=nominatim,
        news=NewsDataClient(http=http_client),
    )

    try:
        init_db(get_engine())
        auth_service = AuthService(get_session_factory())
        logger.info("Accounts database ready")
    except Exception:
        logger.error("Accounts database init failed (auth disabled)", exc_info=True)

    yield  # ── application runs here ──

    await http_client.aclose()
    logger.info("Shutting down WeatherWise Journey")


# ---------------------------------------------------------------------------
# App creation
# ---------------------------------------------------------------------------
app = FastAPI(
    title="WeatherWise Journey",
    version="1.0.0",
    description="AI-generated multi-day trip plans with weather and nearby places.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Global exception handlers
# ---------------------------------------------------------------------------
_GENERATION_STATUS = {"configuration": 503, "upstream": 502}


@app.exception_handler(ItineraryGenerationError)
async def _itinerary_error(request: Request, exc: ItineraryGenerationError):
    content = {"error": JOURNEY_FAILED, "details": exc.message, "kind": exc.kind}
    if settings.DEBUG and exc.raw_text is not None:
        content["raw_response"] = exc.raw_text
    return JSONResponse(status_code=_GENERATION_STATUS.get(exc.kind, 502), content=content)


@app.exception_handler(ExternalServiceError)
async def _external_service_error(request: Request, exc: ExternalServiceError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error})


@app.exception_handler(AccountError)
async def _account_error(request: Request, exc: AccountError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.reason})


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())[1:])
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": messages},
    )


def _unavailable(name: str) -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": f"{name} not initialized"})


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

# ── Health check ────────────────────────────────────────────────

@app.get("/api/health", response_model=HealthResponse, tags=["system"])
async def health_check():
    """Return service health and generator configuration."""
    return HealthResponse(
        status="healthy",
        service="WeatherWise Journey",
        model=gemini_client.model_name if gemini_client else settings.GEMINI_MODEL,
        generator_configured=bool(gemini_client and gemini_client.is_configured),
        max_attempts=getattr(itinerary_service, "max_attempts", 1),
    )


# ── Journey plan ───────────────────────────────────────────────

@app.post(
    "/api/journey",
    response_model=JourneyResponse,
    responses={502: {"model": JourneyErrorResponse}, 503: {"model": JourneyErrorResponse}},
    tags=["journey"],
)
async def generate_journey(body: JourneyRequest):
    """
    Generate a day-by-day trip plan.

    Waypoints are visited in the order given. Failures come back as
    ``{"error", "details", "kind"}`` where ``kind`` is one of
    configuration, upstream, extraction, parse or schema.
    """
    if not itinerary_service:
        return _unavailable("Itinerary service")

    trip = TripRequest(
        origin=body.start_point,
        destination=body.end_point,
        waypoints=list(body.waypoints),
        departure_date=date.fromisoformat(body.departure_date),
    )
    plan = await itinerary_service.generate(trip, request_id=generate_request_id())
    return JourneyResponse(report=plan.to_dict())


@app.post(
    "/api/journey/recommendations",
    response_model=RecommendationsResponse,
    tags=["journey"],
)
async def journey_recommendations(body: JourneyReportRequest):
    """Bullet-point recommendations and a best-route summary for a computed route."""
    if not recommendation_service:
        return _unavailable("Recommendation service")

    recommendations, summary = await recommendation_service.advise(
        body.model_dump(by_alias=True),
    )
    return RecommendationsResponse(recommendations=recommendations, best_route_summary=summary)


# ── Journey assistant ──────────────────────────────────────────

@app.post("/api/chat", response_model=ChatResponse, tags=["chat"])
async def chat(body: ChatRequest):
    """Answer a travel question using the current weather and trip plan as context."""
    if not chat_service:
        return _unavailable("Chat service")

    if not body.message.strip():
        return JSONResponse(status_code=400, content={"error": "Please enter a message to send."})

    try:
        plan = plan_from_data(body.report) if body.report else None
    except SchemaError as exc:
        return JSONResponse(status_code=400, content={"error": f"Invalid report: {exc.message}"})
    weather = body.weather.model_dump(by_alias=True) if body.weather else None

    try:
        reply = await chat_service.reply(body.message, weather=weather, plan=plan, city=body.city)
    except ItineraryGenerationError as exc:
        logger.warning("Chat reply failed", extra={"kind": exc.kind})
        return JSONResponse(status_code=502, content={"error": SORRY_MESSAGE, "kind": exc.kind})
    return ChatResponse(reply=reply)


# ── Places ─────────────────────────────────────────────────────

@app.get("/api/places", response_model=PlacesResponse, tags=["places"])
async def nearby_places(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    query: str = Query(..., min_length=1),
):
    """Places matching ``query`` near the user, nearest first."""
    if not places_service:
        return _unavailable("Places service")
    return PlacesResponse(results=await places_service.find_nearby(lat, lng, query))


@app.get("/api/geocode/suggest", response_model=SuggestResponse, tags=["places"])
async def suggest_places(q: str = Query("")):
    """Autocomplete candidates for the trip form."""
    if not places_service:
        return _unavailable("Places service")
    return SuggestResponse(results=await places_service.suggest(q))


@app.get("/api/geocode/reverse", response_model=ReverseGeocodeResponse, tags=["places"])
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
):
    """Name of the place at the user's current position."""
    if not places_service:
        return _unavailable("Places service")
    return ReverseGeocodeResponse(**await places_service.reverse_lookup(lat, lng))


# ── Weather ────────────────────────────────────────────────────

@app.get("/api/weather", tags=["weather"])
async def current_weather(
    q: str = Query("", description="City name"),
    global_search: bool = Query(False, alias="global"),
):
    """Current weather for a city (provider payload passed through)."""
    if not weather_service:
        return _unavailable("Weather service")
    if not q.strip():
        return JSONResponse(status_code=400, content={"error": "City is required"})
    return await weather_service.current_weather(q.strip(), global_search=global_search)


@app.get("/api/weather/forecast", response_model=ForecastResponse, tags=["weather"])
async def departure_forecast(city: str = Query(..., min_length=1), day: date = Query(..., alias="date")):
    """Daily forecast for a city on the departure date."""
    if not weather_service:
        return _unavailable("Weather service")
    result = await weather_service.departure_forecast(city, day)
    return ForecastResponse(**result, summary=weather_service.get_weather_summary(result))


@app.get("/api/weather-news", response_model=WeatherNewsResponse, tags=["weather"])
async def weather_news(location: str = Query(..., min_length=1)):
    """Weather news for a location, tagged with the current alert level."""
    if not weather_service:
        return _unavailable("Weather service")
    return WeatherNewsResponse(results=await weather_service.weather_news(location))


# ── Accounts ───────────────────────────────────────────────────

@app.post("/api/auth/register", response_model=MessageResponse, status_code=201, tags=["auth"])
def register(body: RegisterRequest):
    if not auth_service:
        return _unavailable("Auth service")
    auth_service.register(body.name, body.email, body.password)
    return MessageResponse(message="User created")


@app.post("/api/auth/login", response_model=LoginResponse, tags=["auth"])
def login(body: LoginRequest):
    if not auth_service:
        return _unavailable("Auth service")
    user = auth_service.authenticate(body.email, body.password)
    if user is None:
        return JSONResponse(status_code=401, content={"error": "Invalid email or password"})
    return LoginResponse(user=UserResponse(**user))


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn

    errors = settings.validate()
    if errors:
        for err in errors:
            print(f"❌ Configuration error: {err}")
        print("\nFix the values in backend/.env and run the server again")
        sys.exit(1)

    for warning in settings.missing_keys():
        print(f"⚠️  {warning}")

    print("✅ Settings validated")
    print(f"🌐 Starting server on http://{settings.HOST}:{settings.PORT}")
    print(f"📖 API docs at http://{settings.HOST}:{settings.PORT}/docs")

    uvicorn.run(
        "app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
