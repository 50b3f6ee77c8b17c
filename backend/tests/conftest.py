"""Shared fixtures: sample plans and a stub Gemini client."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import copy
import json
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from models.itinerary import TripRequest

SAMPLE_PLAN = {
    "tripTitle": "Trip Plan: Sargasan to Sarangpur Hanuman Temple & Nearby",
    "startPoint": "Sargasan, Gandhinagar",
    "endPoint": "Sarangpur, Botad",
    "departureDate": "2025-03-10",
    "overallSummary": "A day trip with an early start. Verify temple timings locally.",
    "days": [
        {
            "day": 1,
            "title": "Sargasan to Sarangpur & Back",
            "activities": [
                {
                    "timeRange": "6:00 AM - 7:00 AM",
                    "description": "Start from Sargasan, Gandhinagar.",
                    "details": "The drive takes roughly 90-120 minutes.",
                },
                {
                    "timeRange": "7:00 AM - 9:00 AM",
                    "description": "Arrive at Shree Kashtabhanjan Dev Hanumanji Temple.",
                },
            ],
            "notes": "or stay overnight",
        }
    ],
    "nearbyAttractions": [
        {
            "name": "Salangpur Swaminarayan Temple",
            "description": "A visually stunning Swaminarayan temple.",
            "locationContext": "next to the Hanuman temple",
        }
    ],
    "importantTimings": [
        {
            "name": "Shree Kashtabhanjan Dev Hanumanji Temple",
            "description": "Main temple for the trip.",
            "timings": "Check the official website for aarti timings.",
        }
    ],
    "travelTips": [
        {"category": "Road conditions", "advice": "The roads are generally good."},
    ],
}


@pytest.fixture
def sample_plan():
    """A deep copy of a valid one-day plan in wire format."""
    return copy.deepcopy(SAMPLE_PLAN)


@pytest.fixture
def sample_plan_json(sample_plan):
    return json.dumps(sample_plan, indent=2)


@pytest.fixture
def trip_request():
    return TripRequest(
        origin="Sargasan, Gandhinagar",
        destination="Sarangpur, Botad",
        departure_date=date(2025, 3, 10),
    )


@pytest.fixture
def gemini_stub():
    """Stands in for GeminiClient; set ``generate_content`` return/side effect per test."""
    stub = MagicMock()
    stub.is_configured = True
    stub.model_name = "gemini-test"
    stub.generate_content = AsyncMock()
    return stub
