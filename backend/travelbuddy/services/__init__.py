"""TravelBuddy services.

- Geocoding: Nominatim place search and details
- OSM: Overpass queries over the travel category registry
- AI Reasoning: Groq trip plans, free-text itineraries and chat
- Itinerary: parsing and enrichment of LLM output
- Weather: OpenWeatherMap daily forecasts
"""

from .ai_reasoning import AIReasoningService, Completion, GroqReasoningService
from .geocoding import NominatimService
from .osm import OSMOverpassService
from .weather import OpenWeatherService

__all__ = [
    "AIReasoningService",
    "Completion",
    "GroqReasoningService",
    "NominatimService",
    "OSMOverpassService",
    "OpenWeatherService",
]
