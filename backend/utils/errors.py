"""
Error types shared by clients, services and the HTTP layer.

Itinerary generation failures all derive from ``ItineraryGenerationError``
and carry a ``kind`` tag so callers can decide whether to retry:

    configuration: no credential; never retried
    upstream: service call failed / timed out / returned nothing
    extraction: no JSON-shaped text in the reply
    parse: JSON-shaped text that is not valid JSON
    schema: valid JSON without the required structure
"""

from typing import Optional


class ItineraryGenerationError(Exception):
    """Base class for a failed itinerary generation attempt."""

    kind = "generation"

    def __init__(self, message: str, raw_text: Optional[str] = None):
        self.message = message
        self.raw_text = raw_text
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return False

    def to_dict(self, include_raw: bool = False) -> dict:
        data = {"kind": self.kind, "message": self.message}
        if include_raw and self.raw_text is not None:
            data["raw_response"] = self.raw_text
        return data


class ConfigurationError(ItineraryGenerationError):
    """Required credential is missing."""

    kind = "configuration"


class UpstreamError(ItineraryGenerationError):
    """The generation service call failed, timed out, or returned empty."""

    kind = "upstream"

    def __init__(self, service: str, error: str, raw_text: Optional[str] = None):
        self.service = service
        self.error = error
        super().__init__(f"{service} API failed: {error}", raw_text=raw_text)

    @property
    def retryable(self) -> bool:
        return True


class ExtractionError(ItineraryGenerationError):
    """No JSON-shaped substring could be isolated from the response."""

    kind = "extraction"


class ParseError(ItineraryGenerationError):
    """Candidate text is not syntactically valid JSON."""

    kind = "parse"


class SchemaError(ItineraryGenerationError):
    """Parsed JSON is missing required itinerary structure."""

    kind = "schema"


class ExternalServiceError(Exception):
    """Raised when a non-LLM third-party lookup (geocoding, weather, news) fails."""

    def __init__(self, service: str, error: str, status_code: int = 502):
        self.service = service
        self.error = error
        self.status_code = status_code
        super().__init__(f"{service} request failed: {error}")
