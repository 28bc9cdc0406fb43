"""Parse free-text, day-by-day LLM itineraries.

The model is asked for output like::

    Day 1:
    • Morning: Visit the Louvre - ...
    • Afternoon: Walk along the Seine - ...

Parsing is best effort and never raises. Day numbers are taken from the
text as-is, while padding days are numbered by position. A reply that
skips "Day 2" therefore yields days ``[1, 3, 3]`` for a 3-day request.
"""

import re

from travelbuddy.models import ItineraryDay

FILLER_ACTIVITY = "Free time / Flexible day for personal exploration"

_DAY_HEADER = re.compile(r"^Day (\d+):?", re.IGNORECASE)
_ACTIVITY_LINE = re.compile(r"^[•\-*\d]")
_ACTIVITY_MARKER = re.compile(r"^[•\-*\d.)\s]+")


def parse_itinerary(raw_text: str, expected_days: int) -> list[ItineraryDay]:
    """Turn LLM text into exactly ``expected_days`` itinerary days.

    Args:
        raw_text: The model's reply.
        expected_days: Number of days requested.

    Returns:
        Parsed days in text order, padded with free days or truncated to
        ``expected_days`` entries.
    """
    itinerary: list[ItineraryDay] = []
    current_day = 0
    activities: list[str] = []

    for line in (raw_text or "").split("\n"):
        stripped = line.strip()

        header = _DAY_HEADER.match(stripped)
        if header:
            if current_day > 0 and activities:
                itinerary.append(ItineraryDay(day=current_day, activities=activities))
            current_day = int(header.group(1))
            activities = []
            continue

        if _ACTIVITY_LINE.match(stripped):
            activity = _ACTIVITY_MARKER.sub("", stripped).strip()
            if activity:
                activities.append(activity)

    if current_day > 0 and activities:
        itinerary.append(ItineraryDay(day=current_day, activities=activities))

    while len(itinerary) < expected_days:
        itinerary.append(
            ItineraryDay(day=len(itinerary) + 1, activities=[FILLER_ACTIVITY])
        )

    return itinerary[:max(expected_days, 0)]
