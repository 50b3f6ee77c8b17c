"""Tests for journey recommendations and the best-route summary."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from services.recommendation_service import (
    NO_RECOMMENDATIONS,
    RECOMMENDATIONS_FAILED,
    SUMMARY_FAILED,
    RecommendationService,
    build_recommendations_prompt,
    build_summary_prompt,
    bullet_lines,
)
from utils.errors import UpstreamError

REPORT = {
    "departureDate": "2025-03-10",
    "segments": [
        {"from": "Sargasan", "to": "Dholka", "distanceKm": 60.0, "travelTimeHours": 1.2,
         "weather": {"condition": "Clear", "temperature": 31}},
        {"from": "Dholka", "to": "Sarangpur", "distanceKm": 90.5, "travelTimeHours": 1.8,
         "weather": {"condition": "Rain"}},
    ],
    "overallWarnings": ["Rain expected near Sarangpur"],
}


def test_bullet_lines_strips_markers():
    text = "Here are tips:\n- Leave early\n• Carry water\n* Check tyres\nThanks!"
    assert bullet_lines(text) == ["Leave early", "Carry water", "Check tyres"]


def test_prompt_summarises_route():
    prompt = build_recommendations_prompt(REPORT)

    assert "From Sargasan to Sarangpur" in prompt
    assert "Total Distance: 150.5 km" in prompt
    assert "Total Travel Time: 3.0 hours" in prompt
    assert "Dholka to Sarangpur: Rain, N/A" in prompt
    assert "Warnings: Rain expected near Sarangpur" in prompt
    assert "Actions: None" in prompt


def test_summary_prompt_asks_for_short_answer():
    assert "2-3 sentences" in build_summary_prompt(REPORT)


def test_empty_report_does_not_fail():
    assert "From N/A to N/A" in build_recommendations_prompt({})


class TestRecommendationService:

    @pytest.mark.asyncio
    async def test_advise_returns_both_texts(self, gemini_stub):
        async def reply(prompt, **kwargs):
            if "bullet points" in prompt:
                return "- Leave before 6 AM\n- Carry rain gear"
            return "  Take the Dholka route and start early.  "

        gemini_stub.generate_content.side_effect = reply
        service = RecommendationService(gemini_stub)

        recommendations, summary = await service.advise(REPORT)

        assert recommendations == ["Leave before 6 AM", "Carry rain gear"]
        assert summary == "Take the Dholka route and start early."
        assert gemini_stub.generate_content.await_count == 2

    @pytest.mark.asyncio
    async def test_reply_without_bullets(self, gemini_stub):
        gemini_stub.generate_content.return_value = "Have a nice trip."
        service = RecommendationService(gemini_stub)

        assert await service.recommendations(REPORT) == [NO_RECOMMENDATIONS]

    @pytest.mark.asyncio
    async def test_failures_degrade_to_fallback_text(self, gemini_stub):
        gemini_stub.generate_content.side_effect = UpstreamError("Gemini", "empty response")
        service = RecommendationService(gemini_stub)

        recommendations, summary = await service.advise(REPORT)

        assert recommendations == [RECOMMENDATIONS_FAILED]
        assert summary == SUMMARY_FAILED
