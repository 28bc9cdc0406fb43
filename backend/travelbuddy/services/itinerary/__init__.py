"""Itinerary text parsing and trip-plan enrichment."""

from .enrichment import (
    enrich_itinerary_days,
    enrich_place,
    enrich_places,
    find_matching_place,
    normalize_time_slot,
)
from .parser import FILLER_ACTIVITY, parse_itinerary

__all__ = [
    "FILLER_ACTIVITY",
    "parse_itinerary",
    "enrich_itinerary_days",
    "enrich_place",
    "enrich_places",
    "find_matching_place",
    "normalize_time_slot",
]
