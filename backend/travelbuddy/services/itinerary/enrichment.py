"""Reconcile LLM trip plans with the places the user actually selected.

The planner model is told to echo coordinates back but regularly drops
them. Missing coordinates are recovered from the input places by a plain
case-insensitive name containment check (first match wins), then every
display field gets a default so the UI never renders blanks.

Places that match nothing keep empty coordinates; consumers treat ``""``
as "no position".
"""

import logging
from typing import Optional

from travelbuddy.models import TIME_SLOTS, EnrichedDay, EnrichedPlace, LLMDay, LLMPlace, PlaceInput

logger = logging.getLogger(__name__)

DEFAULT_RATING = 4.0
DEFAULT_CATEGORY = "tourist_attraction"
DEFAULT_SUBCATEGORY = "point_of_interest"


def find_matching_place(name: Optional[str], input_places: list[PlaceInput]) -> Optional[PlaceInput]:
    """First input place whose name contains ``name`` or is contained in it."""
    if not name:
        return None
    needle = name.lower()
    for place in input_places:
        candidate = (place.name or "").lower()
        if not candidate:
            continue
        if needle in candidate or candidate in needle:
            return place
    return None


def normalize_time_slot(value: Optional[str]) -> Optional[str]:
    """Map the model's time label onto morning, afternoon or evening.

    ``"Late Morning"`` becomes ``"morning"``; labels naming no slot become None.
    """
    if not value:
        return None
    label = value.strip().lower()
    if label in TIME_SLOTS:
        return label
    return next((slot for slot in TIME_SLOTS if slot in label), None)


def _clamp_rating(rating: Optional[float]) -> float:
    if not rating:
        return DEFAULT_RATING
    return min(5.0, max(1.0, rating))


def enrich_place(
    place: LLMPlace, input_places: list[PlaceInput], destination_name: str
) -> EnrichedPlace:
    name = place.name or ""
    lat, lon, place_type = place.lat, place.lon, place.type

    if not lat or not lon:
        match = find_matching_place(name, input_places)
        if match is not None:
            lat, lon, place_type = match.lat, match.lon, match.type
        else:
            logger.info(f"[ENRICH] No input place matches {name!r}; coordinates left empty")

    return EnrichedPlace(
        name=name,
        lat=lat or "",
        lon=lon or "",
        time=normalize_time_slot(place.time),
        type=place_type,
        description=place.description or f"Visit {name} during your trip to {destination_name}",
        rating=_clamp_rating(place.rating),
        address=place.address or f"{destination_name} area",
        category=place.category or place_type or DEFAULT_CATEGORY,
        subcategory=place.subcategory or DEFAULT_SUBCATEGORY,
    )


def enrich_itinerary_days(
    llm_days: list[LLMDay], input_places: list[PlaceInput], destination_name: str
) -> list[EnrichedDay]:
    """Enrich every place, keeping the day structure.

    Days without a usable number are numbered by position.
    """
    enriched_days = []
    for index, day in enumerate(llm_days, 1):
        enriched_days.append(
            EnrichedDay(
                day=day.day if day.day and day.day > 0 else index,
                places=[enrich_place(p, input_places, destination_name) for p in day.places],
            )
        )
    return enriched_days


def enrich_places(
    llm_days: list[LLMDay], input_places: list[PlaceInput], destination_name: str
) -> list[EnrichedPlace]:
    """All enriched places, day-major then in order within each day."""
    return [
        place
        for day in enrich_itinerary_days(llm_days, input_places, destination_name)
        for place in day.places
    ]
