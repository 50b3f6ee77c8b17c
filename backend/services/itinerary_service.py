"""
Itinerary generation service.

Accepts a TripRequest, asks Gemini for a multi-day plan, isolates the JSON in
the reply and validates it into a DetailedTripPlan. One attempt per call:

    idle → prompting → generating → extracting → validating → done | failed

``run`` returns a tagged ``ItineraryResult``; ``generate`` returns the plan
or raises the typed error. Retries are layered on top with
``RetryingItineraryService`` and only apply to upstream failures.

Usage:
    from services.itinerary_service import ItineraryService

    service = ItineraryService(gemini_client)
    plan = await service.generate(trip_request, request_id="req-001")
    print(plan.to_dict())
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from clients.gemini_client import GeminiClient
from models.itinerary import DetailedTripPlan, TripRequest
from services.prompt_builder import build_itinerary_prompt
from services.response_parser import extract_json_candidate, validate_trip_plan
from utils.errors import ItineraryGenerationError
from utils.id_generator import generate_request_id

logger = logging.getLogger(__name__)

# Raw model text is only ever logged as a bounded preview
_RAW_PREVIEW_CHARS = 500


class GenerationStage(str, Enum):
    IDLE = "idle"
    PROMPTING = "prompting"
    GENERATING = "generating"
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ItineraryResult:
    """Either a plan or the error that stopped generation."""

    plan: Optional[DetailedTripPlan] = None
    error: Optional[ItineraryGenerationError] = None
    failed_stage: Optional[GenerationStage] = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> DetailedTripPlan:
        if self.error is not None:
            raise self.error
        return self.plan


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ItineraryService:
    """Generates a DetailedTripPlan from a TripRequest via Gemini."""

    def __init__(self, gemini_client: GeminiClient):
        """
        Args:
            gemini_client: Shared client created at application startup.
        """
        self.gemini_client = gemini_client

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        request: TripRequest,
        request_id: Optional[str] = None,
    ) -> ItineraryResult:
        """Make one generation attempt and report the outcome."""
        request_id = request_id or generate_request_id()
        stage = GenerationStage.IDLE
        raw_text: Optional[str] = None

        logger.info(
            "Starting itinerary generation",
            extra={
                "request_id": request_id,
                "origin": request.origin,
                "destination": request.destination,
                "waypoints": len(request.waypoints),
                "departure_date": request.departure_date_iso,
            },
        )

        try:
            stage = self._enter(GenerationStage.PROMPTING, request_id)
            prompt = build_itinerary_prompt(request)

            stage = self._enter(GenerationStage.GENERATING, request_id)
            raw_text = await self.gemini_client.generate_content(
                prompt=prompt,
                request_id=request_id,
            )

            stage = self._enter(GenerationStage.EXTRACTING, request_id)
            candidate = extract_json_candidate(raw_text)

            stage = self._enter(GenerationStage.VALIDATING, request_id)
            plan = validate_trip_plan(candidate)

        except ItineraryGenerationError as exc:
            if raw_text is not None:
                exc.raw_text = raw_text
            self._log_failure(exc, stage, request_id)
            return ItineraryResult(error=exc, failed_stage=stage)

        self._enter(GenerationStage.DONE, request_id)
        logger.info(
            "Itinerary generation complete",
            extra={
                "request_id": request_id,
                "days": len(plan.days),
                "total_activities": plan.total_activities,
            },
        )
        return ItineraryResult(plan=plan)

    async def generate(
        self,
        request: TripRequest,
        request_id: Optional[str] = None,
    ) -> DetailedTripPlan:
        """
        Generate a plan for ``request``.

        Raises:
            ConfigurationError: No Gemini key configured.
            UpstreamError: Gemini call failed, timed out or returned nothing.
            ExtractionError / ParseError / SchemaError: unusable reply.
        """
        result = await self.run(request, request_id=request_id)
        return result.unwrap()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _enter(stage: GenerationStage, request_id: str) -> GenerationStage:
        logger.debug(
            "Itinerary stage: %s", stage.value,
            extra={"request_id": request_id, "stage": stage.value},
        )
        return stage

    @staticmethod
    def _log_failure(
        exc: ItineraryGenerationError,
        stage: GenerationStage,
        request_id: str,
    ) -> None:
        extra = {
            "request_id": request_id,
            "stage": stage.value,
            "kind": exc.kind,
            "error": exc.message,
        }
        if exc.raw_text is not None:
            extra["raw_preview"] = exc.raw_text[:_RAW_PREVIEW_CHARS]
        logger.error("Itinerary generation failed", extra=extra)


# ---------------------------------------------------------------------------
# Retry decorator
# ---------------------------------------------------------------------------


class RetryingItineraryService:
    """
    Wraps a single-attempt service and retries upstream failures.

    Configuration errors and unusable replies (extraction, parse, schema)
    are returned on their first occurrence.
    """

    def __init__(
        self,
        inner: ItineraryService,
        max_attempts: int = 2,
        backoff_seconds: float = 1.0,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.inner = inner
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds

    @property
    def gemini_client(self) -> GeminiClient:
        return self.inner.gemini_client

    async def run(
        self,
        request: TripRequest,
        request_id: Optional[str] = None,
    ) -> ItineraryResult:
        request_id = request_id or generate_request_id()

        for attempt in range(1, self.max_attempts + 1):
            result = await self.inner.run(request, request_id=request_id)
            result.attempts = attempt
            if result.ok or not result.error.retryable:
                return result

            if attempt < self.max_attempts:
                logger.warning(
                    "Retrying itinerary generation (attempt %d/%d)",
                    attempt + 1,
                    self.max_attempts,
                    extra={"request_id": request_id, "kind": result.error.kind},
                )
                await asyncio.sleep(self.backoff_seconds)

        return result

    async def generate(
        self,
        request: TripRequest,
        request_id: Optional[str] = None,
    ) -> DetailedTripPlan:
        result = await self.run(request, request_id=request_id)
        return result.unwrap()
