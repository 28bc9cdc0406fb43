"""TravelBuddy data models."""

from .core import (
    BUDGET_VALUES,
    TIME_SLOTS,
    AutocompleteResponse,
    Budget,
    CategoryInfo,
    ChatRequest,
    ChatResponse,
    DailyForecast,
    DestinationInput,
    DetailsResponse,
    EnrichedDay,
    EnrichedItinerary,
    EnrichedPlace,
    ItineraryDay,
    ItineraryRequest,
    ItineraryResponse,
    LLMInfo,
    NearbyPlace,
    NearbyResponse,
    PlaceAddress,
    PlaceDetails,
    PlaceInput,
    Prediction,
    TemperatureSummary,
    TripPlanRequest,
    TripPlanResponse,
    DateRange,
    WeatherForecastRequest,
    WeatherForecastResponse,
    WeatherSummary,
)
from .errors import (
    AppError,
    CategoryNotFoundError,
    ConfigurationError,
    ErrorCode,
    LLMResponseParseError,
    RequestValidationFailed,
    UpstreamError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
)
from .upstream import (
    ForecastEntry,
    ForecastResponse,
    LLMDay,
    LLMPlace,
    LLMTripPlan,
    NominatimDetails,
    NominatimSearchResult,
    OverpassElement,
    OverpassResponse,
)

__all__ = [
    "BUDGET_VALUES",
    "TIME_SLOTS",
    "AutocompleteResponse",
    "Budget",
    "CategoryInfo",
    "ChatRequest",
    "ChatResponse",
    "DailyForecast",
    "DestinationInput",
    "DetailsResponse",
    "EnrichedDay",
    "EnrichedItinerary",
    "EnrichedPlace",
    "ItineraryDay",
    "ItineraryRequest",
    "ItineraryResponse",
    "LLMInfo",
    "NearbyPlace",
    "NearbyResponse",
    "PlaceAddress",
    "PlaceDetails",
    "PlaceInput",
    "Prediction",
    "TemperatureSummary",
    "TripPlanRequest",
    "TripPlanResponse",
    "DateRange",
    "WeatherForecastRequest",
    "WeatherForecastResponse",
    "WeatherSummary",
    # Errors
    "AppError",
    "CategoryNotFoundError",
    "ConfigurationError",
    "ErrorCode",
    "LLMResponseParseError",
    "RequestValidationFailed",
    "UpstreamError",
    "UpstreamRateLimitedError",
    "UpstreamTimeoutError",
    # Upstream schemas
    "ForecastEntry",
    "ForecastResponse",
    "LLMDay",
    "LLMPlace",
    "LLMTripPlan",
    "NominatimDetails",
    "NominatimSearchResult",
    "OverpassElement",
    "OverpassResponse",
]
