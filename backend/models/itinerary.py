"""
Itinerary data models: the trip request and the structured plan returned
by the generator.

Wire names (``tripTitle``, ``timeRange`` ...) are the JSON keys the model is
asked to produce and the API returns. A plan built with ``from_dict`` keeps
the source document, so ``to_dict()`` returns it unchanged, including keys
the dataclasses do not model and explicit nulls. Plans built in code are
serialised from their fields, and None fields are omitted.

Usage:
    request = TripRequest(origin="Sargasan, Gandhinagar",
                          destination="Sarangpur, Botad",
                          departure_date=date(2025, 3, 10))
    plan = DetailedTripPlan.from_dict(parsed_json)
    json_data = plan.to_dict()
"""

import copy
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Dict, Any


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


def _list_of(cls, items: Optional[List[Dict[str, Any]]]):
    if items is None:
        return None
    return [cls.from_dict(item) for item in items]


@dataclass(frozen=True)
class TripRequest:
    """A single user submission. Never persisted."""

    origin: str
    destination: str
    departure_date: date
    waypoints: List[str] = field(default_factory=list)  # visit order

    @property
    def departure_date_iso(self) -> str:
        return self.departure_date.isoformat()


@dataclass
class Activity:
    """One entry in a day's schedule."""

    time_range: Optional[str] = None    # e.g. "6:00 AM - 7:00 AM", never parsed
    description: Optional[str] = None
    details: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Activity":
        return cls(
            time_range=data.get("timeRange"),
            description=data.get("description"),
            details=data.get("details"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "timeRange": self.time_range,
            "description": self.description,
            "details": self.details,
        })


@dataclass
class DayPlan:
    """Single day in the plan."""

    title: str = ""
    day: Optional[int] = None
    activities: Optional[List[Activity]] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DayPlan":
        return cls(
            title=data["title"],
            day=data.get("day"),
            activities=_list_of(Activity, data.get("activities")),
            notes=data.get("notes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "day": self.day,
            "title": self.title,
            "activities": (
                [a.to_dict() for a in self.activities]
                if self.activities is not None else None
            ),
            "notes": self.notes,
        })


@dataclass
class AttractionInfo:
    """A place worth visiting, or a key location with timing advice."""

    name: Optional[str] = None
    description: Optional[str] = None
    timings: Optional[str] = None
    location_context: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttractionInfo":
        return cls(
            name=data.get("name"),
            description=data.get("description"),
            timings=data.get("timings"),
            location_context=data.get("locationContext"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "name": self.name,
            "description": self.description,
            "locationContext": self.location_context,
            "timings": self.timings,
        })


@dataclass
class TravelTip:
    """Practical advice, grouped by category (roads, food, accommodation...)."""

    category: Optional[str] = None
    advice: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TravelTip":
        return cls(category=data.get("category"), advice=data.get("advice"))

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"category": self.category, "advice": self.advice})


@dataclass
class DetailedTripPlan:
    """Complete multi-day trip plan."""

    trip_title: str = ""
    days: List[DayPlan] = field(default_factory=list)

    # Echoed request, so the plan can be displayed without the request object
    start_point: Optional[str] = None
    end_point: Optional[str] = None
    departure_date: Optional[str] = None

    overall_summary: Optional[str] = None
    nearby_attractions: Optional[List[AttractionInfo]] = None
    important_timings: Optional[List[AttractionInfo]] = None
    travel_tips: Optional[List[TravelTip]] = None

    # Document the plan was parsed from; returned as-is by to_dict()
    source: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetailedTripPlan":
        """Build from an already-validated JSON object."""
        return cls(
            trip_title=data["tripTitle"],
            days=[DayPlan.from_dict(d) for d in data["days"]],
            start_point=data.get("startPoint"),
            end_point=data.get("endPoint"),
            departure_date=data.get("departureDate"),
            overall_summary=data.get("overallSummary"),
            nearby_attractions=_list_of(AttractionInfo, data.get("nearbyAttractions")),
            important_timings=_list_of(AttractionInfo, data.get("importantTimings")),
            travel_tips=_list_of(TravelTip, data.get("travelTips")),
            source=copy.deepcopy(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serialisable dictionary using wire names."""
        if self.source is not None:
            return copy.deepcopy(self.source)

        def _items(items):
            return [i.to_dict() for i in items] if items is not None else None

        return _compact({
            "tripTitle": self.trip_title,
            "startPoint": self.start_point,
            "endPoint": self.end_point,
            "departureDate": self.departure_date,
            "overallSummary": self.overall_summary,
            "days": [d.to_dict() for d in self.days],
            "nearbyAttractions": _items(self.nearby_attractions),
            "importantTimings": _items(self.important_timings),
            "travelTips": _items(self.travel_tips),
        })

    @property
    def total_activities(self) -> int:
        return sum(len(d.activities or []) for d in self.days)
