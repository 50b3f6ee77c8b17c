"""
AI recommendations for a journey report: a handful of bullet-point tips and
a short best-route summary, generated concurrently.

Unlike itinerary generation these texts are advisory, so a failed call
degrades to a fixed message instead of an error.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Tuple

from clients.gemini_client import GeminiClient
from utils.errors import ItineraryGenerationError

logger = logging.getLogger(__name__)

NO_RECOMMENDATIONS = "No specific recommendations generated. Please review your journey details."
RECOMMENDATIONS_FAILED = "Unable to generate AI recommendations."
SUMMARY_FAILED = "Unable to generate best route summary."

_BULLET = re.compile(r"^[-•*]\s*")


def bullet_lines(text: str) -> List[str]:
    """Lines starting with ``-``, ``•`` or ``*``, with the bullet removed."""
    return [
        _BULLET.sub("", line.strip())
        for line in text.splitlines()
        if _BULLET.match(line.strip())
    ]


def _journey_facts(report: Dict[str, Any]) -> str:
    segments = report.get("segments") or []
    origin = segments[0].get("from") if segments else None
    destination = segments[-1].get("to") if segments else None
    total_km = sum(s.get("distanceKm") or 0 for s in segments)
    total_hours = sum(s.get("travelTimeHours") or 0 for s in segments)

    def _weather(segment: Dict[str, Any]) -> str:
        weather = segment.get("weather") or {}
        temp = weather.get("temperature")
        temp_text = f"{temp}°C" if temp is not None else "N/A"
        return (
            f"{segment.get('from')} to {segment.get('to')}: "
            f"{weather.get('condition') or 'N/A'}, {temp_text}"
        )

    warnings = "; ".join(report.get("overallWarnings") or []) or "None"
    actions = "; ".join(report.get("overallActions") or []) or "None"

    return (
        f"- Route: From {origin or 'N/A'} to {destination or 'N/A'}\n"
        f"- Departure Date: {report.get('departureDate') or 'N/A'}\n"
        f"- Total Distance: {total_km:.1f} km\n"
        f"- Total Travel Time: {total_hours:.1f} hours\n"
        f"- Weather Conditions: {'; '.join(_weather(s) for s in segments)}\n"
        f"- Warnings: {warnings}\n"
        f"- Actions: {actions}\n"
    )


def build_recommendations_prompt(report: Dict[str, Any]) -> str:
    return (
        "As an AI travel assistant, provide 3-5 personalized recommendations "
        "for the journey:\n"
        + _journey_facts(report)
        + "\nConsider safety, comfort, and ways to enhance the travel experience. "
        "Provide recommendations in bullet points.\n"
    )


def build_summary_prompt(report: Dict[str, Any]) -> str:
    return (
        "Based on the journey details, provide a concise summary of the best "
        "route with key considerations:\n"
        + _journey_facts(report)
        + "\nSummary in 2-3 sentences focusing on optimal route, key stops, "
        "and important considerations.\n"
    )


class RecommendationService:
    """Advisory texts for a computed journey."""

    def __init__(self, gemini_client: GeminiClient):
        self.gemini_client = gemini_client

    async def recommendations(self, report: Dict[str, Any]) -> List[str]:
        try:
            text = await self.gemini_client.generate_content(
                prompt=build_recommendations_prompt(report),
            )
        except ItineraryGenerationError as exc:
            logger.warning("Recommendation generation failed", extra={"kind": exc.kind})
            return [RECOMMENDATIONS_FAILED]
        return bullet_lines(text) or [NO_RECOMMENDATIONS]

    async def best_route_summary(self, report: Dict[str, Any]) -> str:
        try:
            text = await self.gemini_client.generate_content(
                prompt=build_summary_prompt(report),
            )
        except ItineraryGenerationError as exc:
            logger.warning("Route summary generation failed", extra={"kind": exc.kind})
            return SUMMARY_FAILED
        return text.strip()

    async def advise(self, report: Dict[str, Any]) -> Tuple[List[str], str]:
        """Run both prompts concurrently."""
        recommendations, summary = await asyncio.gather(
            self.recommendations(report),
            self.best_route_summary(report),
        )
        return recommendations, summary
