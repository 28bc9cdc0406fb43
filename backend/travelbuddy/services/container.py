"""Per-application service instances.

Built once in the FastAPI lifespan and stored on ``app.state.services``.
Route dependencies read from here, so tests can swap in fakes.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from travelbuddy.config import Settings
from travelbuddy.services.ai_reasoning import AIReasoningService, GroqReasoningService
from travelbuddy.services.geocoding import NominatimService
from travelbuddy.services.osm import OSMOverpassService
from travelbuddy.services.weather import OpenWeatherService
from travelbuddy.utils import RateGate, TTLCache

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    cache: TTLCache
    geocoding_gate: RateGate
    llm_gate: RateGate
    geocoding: NominatimService
    overpass: OSMOverpassService
    ai: Optional[AIReasoningService] = None
    weather: Optional[OpenWeatherService] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContainer":
        ai = None
        if settings.groq_api_key:
            ai = GroqReasoningService(settings.groq_api_key, model_name=settings.groq_model)
        else:
            logger.warning("[AI] GROQ_API_KEY not set; /trip/plan, /itinerary and /chat disabled")

        weather = None
        if settings.openweather_api_key:
            weather = OpenWeatherService(settings.openweather_api_key)
        else:
            logger.warning("[WEATHER] OPENWEATHER_API_KEY not set; /weather/forecast disabled")

        return cls(
            cache=TTLCache(ttl_seconds=settings.cache_ttl_seconds),
            geocoding_gate=RateGate("nominatim", settings.geocoding_min_interval_ms / 1000),
            llm_gate=RateGate("groq", settings.llm_min_interval_ms / 1000),
            geocoding=NominatimService(),
            overpass=OSMOverpassService(),
            ai=ai,
            weather=weather,
        )

    async def aclose(self) -> None:
        close = getattr(self.ai, "close", None)
        if close is not None:
            await close()
