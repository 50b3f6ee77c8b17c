"""
HTTP-level tests for the FastAPI app.

The lifespan is not run; each test installs the services it needs on the
``app`` module, so no keys, network or database file are involved.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import app as app_module
from clients.gemini_client import GeminiClient
from config.settings import settings
from models.db import create_db_engine, init_db
from models.itinerary import DetailedTripPlan
from services.auth_service import AuthService
from services.chat_service import SORRY_MESSAGE
from services.itinerary_service import ItineraryService, RetryingItineraryService
from utils.errors import ExternalServiceError, UpstreamError

JOURNEY = {
    "startPoint": "Sargasan, Gandhinagar",
    "endPoint": "Sarangpur, Botad",
    "waypoints": ["Dholka", "  ", "Barwala"],
    "departureDate": "2025-03-10",
}


@pytest.fixture
def client(monkeypatch):
    for name in (
        "gemini_client", "itinerary_service", "recommendation_service", "chat_service",
        "places_service", "weather_service", "auth_service",
    ):
        monkeypatch.setattr(app_module, name, None)
    return TestClient(app_module.app)


def _itinerary_service(gemini_stub):
    return RetryingItineraryService(ItineraryService(gemini_stub), max_attempts=1, backoff_seconds=0)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

def test_health_without_services(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["generator_configured"] is False


# ---------------------------------------------------------------------------
# Journey plan
# ---------------------------------------------------------------------------

class TestJourney:

    def test_success_returns_report(self, client, monkeypatch, gemini_stub, sample_plan, sample_plan_json):
        gemini_stub.generate_content.return_value = f"```json\n{sample_plan_json}\n```"
        service = _itinerary_service(gemini_stub)
        monkeypatch.setattr(app_module, "itinerary_service", service)

        resp = client.post("/api/journey", json=JOURNEY)

        assert resp.status_code == 200
        assert resp.json() == {"report": sample_plan}
        prompt = gemini_stub.generate_content.await_args.kwargs["prompt"]
        assert "via Dholka, Barwala" in prompt

    def test_trip_request_is_built_from_body(self, client, monkeypatch, sample_plan):
        fake = MagicMock()
        fake.generate = AsyncMock(return_value=DetailedTripPlan.from_dict(sample_plan))
        monkeypatch.setattr(app_module, "itinerary_service", fake)

        client.post("/api/journey", json=JOURNEY)

        trip = fake.generate.await_args.args[0]
        assert trip.origin == "Sargasan, Gandhinagar"
        assert trip.waypoints == ["Dholka", "Barwala"]
        assert trip.departure_date_iso == "2025-03-10"

    @pytest.mark.parametrize("field, value", [
        ("departureDate", "10/03/2025"),
        ("departureDate", "2025-02-30"),
        ("startPoint", "   "),
    ])
    def test_invalid_body_is_400(self, client, monkeypatch, gemini_stub, field, value):
        monkeypatch.setattr(app_module, "itinerary_service", _itinerary_service(gemini_stub))

        resp = client.post("/api/journey", json={**JOURNEY, field: value})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request"
        gemini_stub.generate_content.assert_not_called()

    def test_missing_field_is_400(self, client):
        body = {k: v for k, v in JOURNEY.items() if k != "endPoint"}
        assert client.post("/api/journey", json=body).status_code == 400

    def test_missing_key_is_503(self, client, monkeypatch):
        service = _itinerary_service(GeminiClient(api_key=""))
        monkeypatch.setattr(app_module, "itinerary_service", service)

        resp = client.post("/api/journey", json=JOURNEY)

        assert resp.status_code == 503
        data = resp.json()
        assert data["error"] == "Failed to generate journey plan."
        assert data["kind"] == "configuration"
        assert "GEMINI_KEY" in data["details"]

    def test_upstream_failure_is_502(self, client, monkeypatch, gemini_stub):
        gemini_stub.generate_content.side_effect = UpstreamError("Gemini", "timeout after 60s")
        monkeypatch.setattr(app_module, "itinerary_service", _itinerary_service(gemini_stub))

        resp = client.post("/api/journey", json=JOURNEY)

        assert resp.status_code == 502
        assert resp.json()["details"] == "Gemini API failed: timeout after 60s"
        assert resp.json()["kind"] == "upstream"

    def test_raw_reply_hidden_unless_debug(self, client, monkeypatch, gemini_stub):
        gemini_stub.generate_content.return_value = "I cannot help with that."
        monkeypatch.setattr(app_module, "itinerary_service", _itinerary_service(gemini_stub))

        monkeypatch.setattr(settings, "DEBUG", False)
        hidden = client.post("/api/journey", json=JOURNEY).json()
        monkeypatch.setattr(settings, "DEBUG", True)
        shown = client.post("/api/journey", json=JOURNEY).json()

        assert hidden["kind"] == "extraction"
        assert "raw_response" not in hidden
        assert shown["raw_response"] == "I cannot help with that."

    def test_service_not_ready_is_503(self, client):
        resp = client.post("/api/journey", json=JOURNEY)
        assert resp.status_code == 503


# ---------------------------------------------------------------------------
# Recommendations and chat
# ---------------------------------------------------------------------------

def test_recommendations(client, monkeypatch):
    fake = MagicMock()
    fake.advise = AsyncMock(return_value=(["Leave early"], "Take the highway."))
    monkeypatch.setattr(app_module, "recommendation_service", fake)

    resp = client.post("/api/journey/recommendations", json={
        "departureDate": "2025-03-10",
        "segments": [{"from": "Sargasan", "to": "Sarangpur", "distanceKm": 150}],
    })

    assert resp.status_code == 200
    assert resp.json() == {"recommendations": ["Leave early"], "bestRouteSummary": "Take the highway."}
    report = fake.advise.await_args.args[0]
    assert report["segments"][0]["from"] == "Sargasan"
    assert report["segments"][0]["distanceKm"] == 150


class TestChat:

    def test_reply(self, client, monkeypatch, sample_plan):
        fake = MagicMock()
        fake.reply = AsyncMock(return_value="Leave by 6 AM.")
        monkeypatch.setattr(app_module, "chat_service", fake)

        resp = client.post("/api/chat", json={
            "message": "When should I leave?",
            "city": "Botad",
            "weather": {"condition": "Clear", "temperature": 31, "windSpeed": 12},
            "report": sample_plan,
        })

        assert resp.status_code == 200
        assert resp.json() == {"reply": "Leave by 6 AM."}
        kwargs = fake.reply.await_args.kwargs
        assert kwargs["weather"]["windSpeed"] == 12
        assert kwargs["plan"].trip_title == sample_plan["tripTitle"]

    def test_blank_message_is_400(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "chat_service", MagicMock())
        assert client.post("/api/chat", json={"message": "  "}).status_code == 400

    def test_invalid_report_is_400(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "chat_service", MagicMock())

        resp = client.post("/api/chat", json={"message": "Hi", "report": {"tripTitle": "x"}})

        assert resp.status_code == 400
        assert resp.json()["error"].startswith("Invalid report")

    def test_generation_failure_is_apology(self, client, monkeypatch):
        fake = MagicMock()
        fake.reply = AsyncMock(side_effect=UpstreamError("Gemini", "empty response"))
        monkeypatch.setattr(app_module, "chat_service", fake)

        resp = client.post("/api/chat", json={"message": "Hi"})

        assert resp.status_code == 502
        assert resp.json() == {"error": SORRY_MESSAGE, "kind": "upstream"}


# ---------------------------------------------------------------------------
# Places and weather
# ---------------------------------------------------------------------------

def test_nearby_places(client, monkeypatch):
    fake = MagicMock()
    fake.find_nearby = AsyncMock(return_value=[{
        "id": "11", "name": "Near Cafe", "address": "Near Cafe, Gandhinagar",
        "lat": 23.2, "lng": 72.62, "type": "cafe", "class": "amenity",
        "distance_km": 1.11, "distance": "1.11 km", "icon": None,
    }])
    monkeypatch.setattr(app_module, "places_service", fake)

    resp = client.get("/api/places", params={"lat": 23.19, "lng": 72.62, "query": "cafe"})

    assert resp.status_code == 200
    assert resp.json()["results"][0]["class"] == "amenity"
    fake.find_nearby.assert_awaited_once_with(23.19, 72.62, "cafe")


def test_rate_limit_is_passed_through(client, monkeypatch):
    fake = MagicMock()
    fake.suggest = AsyncMock(side_effect=ExternalServiceError("Nominatim", "Too many requests", status_code=429))
    monkeypatch.setattr(app_module, "places_service", fake)

    resp = client.get("/api/geocode/suggest", params={"q": "Botad"})

    assert resp.status_code == 429
    assert resp.json() == {"error": "Too many requests"}


def test_places_needs_coordinates(client, monkeypatch):
    monkeypatch.setattr(app_module, "places_service", MagicMock())
    assert client.get("/api/places", params={"query": "cafe"}).status_code == 400


def test_weather_requires_city(client, monkeypatch):
    monkeypatch.setattr(app_module, "weather_service", MagicMock())

    resp = client.get("/api/weather", params={"q": " "})

    assert resp.status_code == 400
    assert resp.json() == {"error": "City is required"}


def test_weather_news(client, monkeypatch):
    fake = MagicMock()
    fake.weather_news = AsyncMock(return_value=[{
        "id": "error-1", "title": "Unable to Fetch News", "description": "x",
        "publishedAt": "2025-03-09T00:00:00+00:00", "alertLevel": "low",
        "locations": ["Botad"], "imageUrl": None,
    }])
    monkeypatch.setattr(app_module, "weather_service", fake)

    resp = client.get("/api/weather-news", params={"location": "Botad"})

    assert resp.status_code == 200
    assert resp.json()["results"][0]["alertLevel"] == "low"


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

def test_register_and_login(client, monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)
    engine = create_db_engine("sqlite://")
    init_db(engine)
    monkeypatch.setattr(app_module, "auth_service", AuthService(sessionmaker(bind=engine)))

    body = {"name": "Asha", "email": "asha@example.com", "password": "s3cret!"}
    created = client.post("/api/auth/register", json=body)
    duplicate = client.post("/api/auth/register", json=body)
    ok = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "s3cret!"})
    bad = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "nope"})

    assert created.status_code == 201
    assert created.json() == {"message": "User created"}
    assert duplicate.status_code == 400
    assert duplicate.json() == {"error": "Email already exists"}
    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "asha@example.com"
    assert bad.status_code == 401
    engine.dispose()
