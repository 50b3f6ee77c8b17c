"""
Journey assistant chat.

Each question is answered in a single stateless Gemini call whose prompt
carries the current weather and the generated plan (when the client has
them), so answers stay tailored to the user's trip.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from clients.gemini_client import GeminiClient
from models.itinerary import DetailedTripPlan

logger = logging.getLogger(__name__)

SORRY_MESSAGE = "Sorry, I couldn't process that. Please try again!"

_PERSONA = (
    "You are a Journey Assistant providing helpful and concise travel advice. "
    "Use the following context to tailor your responses:\n"
)

_GUIDANCE = (
    "Provide a concise, friendly, and tailored response. If suggesting places "
    "to visit or activities, include 1-2 brief, insightful reviews for each "
    "and describe a relevant image for each suggestion (e.g., \"Image: A "
    "bustling market scene.\"). If the question is unrelated to travel, give "
    "a general helpful answer. Aim for around 100-150 words when including "
    "suggestions."
)


def _weather_context(weather: Optional[Dict[str, Any]], city: str) -> str:
    if not weather:
        return "No weather data available. Suggest checking weather if relevant.\n"
    place = city.split(",")[0].strip() or "the selected city"
    return (
        f"Current weather in {place}: {weather.get('condition')}, "
        f"{weather.get('temperature')}°C, {weather.get('precipitation')}% precipitation, "
        f"{weather.get('humidity')}% humidity, {weather.get('windSpeed')} km/h wind speed.\n"
    )


def _plan_context(plan: Optional[DetailedTripPlan]) -> str:
    if plan is None:
        return "No detailed trip plan available. Suggest generating a plan if relevant.\n"

    lines = [f"Trip Plan Title: {plan.trip_title or 'N/A'}"]
    if plan.departure_date:
        lines.append(f"Departure Date: {plan.departure_date}")
    if plan.overall_summary:
        lines.append(f"Overall Summary: {plan.overall_summary}")
    for day in plan.days:
        lines.append(f"Day {day.day} ({day.title}):")
        for activity in day.activities or []:
            details = f" ({activity.details})" if activity.details else ""
            lines.append(f"  - {activity.time_range}: {activity.description}{details}")
    if plan.travel_tips:
        tips = "; ".join(f"{t.category}: {t.advice}" for t in plan.travel_tips)
        lines.append(f"Travel Tips: {tips}")
    return "\n".join(lines) + "\n"


def build_chat_prompt(
    message: str,
    weather: Optional[Dict[str, Any]] = None,
    plan: Optional[DetailedTripPlan] = None,
    city: str = "",
) -> str:
    return (
        _PERSONA
        + _weather_context(weather, city)
        + _plan_context(plan)
        + f"\nUser Question: {message}\n"
        + _GUIDANCE
    )


class ChatService:
    """Answers one user question per call."""

    def __init__(self, gemini_client: GeminiClient):
        self.gemini_client = gemini_client

    async def reply(
        self,
        message: str,
        weather: Optional[Dict[str, Any]] = None,
        plan: Optional[DetailedTripPlan] = None,
        city: str = "",
        request_id: Optional[str] = None,
    ) -> str:
        """
        Raises:
            ValueError: ``message`` is blank.
            ConfigurationError / UpstreamError: from the Gemini client.
        """
        if not message or not message.strip():
            raise ValueError("Please enter a message to send.")

        prompt = build_chat_prompt(message.strip(), weather=weather, plan=plan, city=city)
        text = await self.gemini_client.generate_content(prompt=prompt, request_id=request_id)
        return text.strip()
