"""
Turn raw model text into a validated DetailedTripPlan.

Two steps, both deterministic:

1. ``extract_json_candidate`` narrows the reply to a JSON-shaped substring:
   a fenced ```json block wins; otherwise the span from the first ``{`` to
   the last ``}``.
2. ``validate_trip_plan`` parses the candidate and checks the minimum
   structure (title, non-empty days, a title on every day). It accepts or
   rejects; it never repairs or fills in fields.
"""

import json
import re
from typing import Any, Dict

from models.itinerary import DetailedTripPlan
from utils.errors import ExtractionError, ParseError, SchemaError

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)

_OPTIONAL_OBJECT_LISTS = ("nearbyAttractions", "importantTimings", "travelTips")


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def extract_json_candidate(text: str) -> str:
    """Return the JSON-shaped part of ``text`` or raise ExtractionError."""
    if not text:
        raise ExtractionError("Empty response text", raw_text=text)

    match = _FENCED_JSON.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]

    raise ExtractionError("No JSON object found in response", raw_text=text)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _check_object_list(data: Dict[str, Any], key: str, where: str) -> None:
    if key not in data or data[key] is None:
        return
    items = data[key]
    if not isinstance(items, list):
        raise SchemaError(f"{where}'{key}' must be a list")
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise SchemaError(f"{where}'{key}[{i}]' must be an object")


def _check_days(days: Any) -> None:
    if not isinstance(days, list):
        raise SchemaError("'days' must be a list")
    if not days:
        raise SchemaError("'days' must contain at least one day")

    for i, day in enumerate(days):
        if not isinstance(day, dict):
            raise SchemaError(f"'days[{i}]' must be an object")
        if _is_blank(day.get("title")):
            raise SchemaError(f"'days[{i}]' is missing a title")
        _check_object_list(day, "activities", f"days[{i}].")


def validate_trip_plan(candidate: str) -> DetailedTripPlan:
    """Parse ``candidate`` and return the plan, or raise ParseError / SchemaError."""
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}") from exc
    except RecursionError as exc:
        raise ParseError("Invalid JSON: nesting too deep") from exc

    return plan_from_data(data)


def plan_from_data(data: Any) -> DetailedTripPlan:
    """Check an already-parsed document and build the plan, or raise SchemaError."""
    if not isinstance(data, dict):
        raise SchemaError("Top-level JSON value must be an object")

    if _is_blank(data.get("tripTitle")):
        raise SchemaError("Missing 'tripTitle'")

    if "days" not in data:
        raise SchemaError("Missing 'days'")
    _check_days(data["days"])

    for key in _OPTIONAL_OBJECT_LISTS:
        _check_object_list(data, key, "")

    return DetailedTripPlan.from_dict(data)

