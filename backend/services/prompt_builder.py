"""
Prompt construction for itinerary generation.

``build_itinerary_prompt`` is a pure function of the TripRequest: it restates
the trip, describes the exact JSON document the model must return (with
example values), and tells the model to emit that JSON and nothing else.
"""

from models.itinerary import TripRequest

# ---------------------------------------------------------------------------
# Output format description, field by field, with example values
# ---------------------------------------------------------------------------

_OUTPUT_FORMAT = """\
{{
  "tripTitle": "string (e.g., 'Trip Plan: {origin} to {destination}')",
  "startPoint": "string (original start point, e.g., '{origin}')",
  "endPoint": "string (original end point, e.g., '{destination}')",
  "departureDate": "string (YYYY-MM-DD, e.g., '{date}')",
  "overallSummary": "string (optional, a short introduction to the trip, e.g., 'A relaxed day trip with an early start. Verify opening hours locally as they can change.')",
  "days": [
    {{
      "day": "number (e.g., 1)",
      "title": "string (e.g., '{origin} to {destination}')",
      "activities": [
        {{
          "timeRange": "string (e.g., '6:00 AM - 7:00 AM')",
          "description": "string (e.g., 'Depart from {origin}.')",
          "details": "string (optional, e.g., 'The drive takes roughly 90-120 minutes depending on traffic.')"
        }},
        {{
          "timeRange": "string (e.g., '9:00 AM - 11:00 AM')",
          "description": "string (e.g., 'Arrive in {destination} and visit the main landmark.')",
          "details": "string (optional, e.g., 'Morning crowds are smaller; allow time to explore.')"
        }}
      ],
      "notes": "string (optional, e.g., 'or stay overnight')"
    }}
  ],
  "nearbyAttractions": [
    {{
      "name": "string (e.g., 'Old City Museum')",
      "description": "string (e.g., 'Small museum covering the history of the region.')",
      "locationContext": "string (optional, e.g., 'a ten-minute walk from the main square')",
      "timings": "string (optional, e.g., 'Usually 10:00 AM - 5:00 PM, closed Mondays.')"
    }}
  ],
  "importantTimings": [
    {{
      "name": "string (e.g., 'Main temple')",
      "description": "string (e.g., 'Primary stop of the trip.')",
      "timings": "string (e.g., 'Timings vary by season; check the official website before visiting.')"
    }}
  ],
  "travelTips": [
    {{
      "category": "string (e.g., 'Road conditions', 'Accommodation', 'Food', 'Best time to visit')",
      "advice": "string (e.g., 'Book rooms in advance during festival weekends.')"
    }}
  ]
}}"""

_INSTRUCTIONS = """\
Instructions:
- Populate every field with relevant, specific information.
- Create one object in "days" per day of the trip; a day trip has exactly one.
- If the journey implies an overnight stay or alternatives, say so in the day "title" or "notes".
- List "activities" in chronological order.
- "nearbyAttractions" lists significant places near the destination and stops.
- "importantTimings" highlights opening hours or schedules for key places in the plan.
- "travelTips" gives practical advice on accommodation, food, roads and timing.
- {route_instruction}
- Scale the level of detail to the complexity of the trip.
- Respond with the JSON object only. Do not add any text, comments or markdown before or after it."""


def _route_phrase(request: TripRequest) -> str:
    if request.waypoints:
        return f"via {', '.join(request.waypoints)}"
    return "direct"


def build_itinerary_prompt(request: TripRequest) -> str:
    """Return the full generation prompt for ``request``."""
    route = _route_phrase(request)
    date_iso = request.departure_date_iso

    if request.waypoints:
        route_instruction = (
            f"Visit the waypoints in this order: {', '.join(request.waypoints)}. "
            "Fit each one into the schedule between the start and end points."
        )
    else:
        route_instruction = (
            "This is a direct trip: focus on the start and end points and "
            "sensible stops or activities around them."
        )

    return (
        f'Generate a detailed trip plan from "{request.origin}" to '
        f'"{request.destination}", {route}, for departure on {date_iso}.\n'
        f"The plan should include daily schedules, activities with timings, "
        f"descriptions of places, and practical travel tips.\n\n"
        f"**Trip Details:**\n"
        f"- Start point: {request.origin}\n"
        f"- End point: {request.destination}\n"
        f"- Waypoints: {', '.join(request.waypoints) if request.waypoints else 'none'}\n"
        f"- Departure date: {date_iso}\n\n"
        f"Provide the output strictly as JSON in the following format:\n"
        + _OUTPUT_FORMAT.format(
            origin=request.origin,
            destination=request.destination,
            date=date_iso,
        )
        + "\n\n"
        + _INSTRUCTIONS.format(route_instruction=route_instruction)
        + "\n"
    )
