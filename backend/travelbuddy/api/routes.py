"""API routes for TravelBuddy.

Places (Nominatim + Overpass), LLM trip planning (Groq) and weather
(OpenWeatherMap). Every failure is raised as an ``AppError`` and turned
into ``{"error", "details"}`` JSON by the handlers in ``travelbuddy.main``.
"""

import logging
import re
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from travelbuddy.models import (
    AppError,
    AutocompleteResponse,
    CategoryInfo,
    CategoryNotFoundError,
    ChatRequest,
    ChatResponse,
    ConfigurationError,
    DetailsResponse,
    EnrichedItinerary,
    ItineraryRequest,
    ItineraryResponse,
    LLMInfo,
    NearbyResponse,
    RequestValidationFailed,
    TripPlanRequest,
    TripPlanResponse,
    UpstreamError,
    WeatherForecastRequest,
    WeatherForecastResponse,
)
from travelbuddy.services.ai_reasoning import AIReasoningService
from travelbuddy.services.container import ServiceContainer
from travelbuddy.services.itinerary import enrich_itinerary_days
from travelbuddy.services.osm import (
    available_category_ids,
    get_category_by_id,
    get_category_groups,
)
from travelbuddy.services.weather import MAX_FORECAST_DAYS

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_TRIP_DAYS = 30
MAX_RADIUS_METERS = 50000
MAX_NEARBY_LIMIT = 100

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _leading_int(raw: Optional[str]) -> Optional[int]:
    """Integer prefix of ``raw`` (``"20km"`` -> 20), or None."""
    match = _LEADING_INT.match(raw or "")
    return int(match.group(0)) if match else None


def _leading_float(raw: Optional[str]) -> Optional[float]:
    match = _LEADING_FLOAT.match(raw or "")
    return float(match.group(0)) if match else None


# ─── Dependencies ─────────────────────────────────────────────────────


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def require_ai(services: ServiceContainer) -> AIReasoningService:
    """The LLM service, checked only after the request itself validated."""
    if services.ai is None:
        raise ConfigurationError(
            "Groq API key not configured",
            details="Please set GROQ_API_KEY environment variable",
        )
    return services.ai


# ─── Places ───────────────────────────────────────────────────────────


@router.get("/places/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(
    response: Response,
    q: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> AutocompleteResponse:
    """Place search suggestions, cached for five minutes per query."""
    if not q or not q.strip():
        raise RequestValidationFailed('Query parameter "q" is required')

    cached = services.cache.get(q)
    if cached is not None:
        return cached

    async with services.geocoding_gate.throttle():
        predictions = await services.geocoding.search(q.strip())

    result = AutocompleteResponse(predictions=predictions)
    services.cache.put(q, result)
    response.headers["Cache-Control"] = f"public, max-age={int(services.cache.ttl_seconds)}"
    return result


@router.get("/places/details", response_model=DetailsResponse)
async def place_details(
    place_id: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> DetailsResponse:
    if not place_id:
        raise RequestValidationFailed('Query parameter "place_id" is required')

    async with services.geocoding_gate.throttle():
        details = await services.geocoding.details(place_id)
    return DetailsResponse(details=details)


@router.get("/places/nearby", response_model=NearbyResponse)
async def nearby_places(
    response: Response,
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    radius: Optional[str] = None,
    category: Optional[str] = None,
    limit: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> NearbyResponse:
    """Places of one travel category around a point.

    Every error body carries ``available_categories`` so the client can
    recover from a bad category id.
    """
    category = category or "tourist_attractions"
    available = available_category_ids()
    extra = {"available_categories": available}

    lat_num = _leading_float(lat)
    lon_num = _leading_float(lon)
    if lat_num is None or lon_num is None:
        raise RequestValidationFailed(
            'Valid "lat" and "lon" query parameters are required', extra=extra
        )

    radius_num = _leading_int(radius or "2000")
    if radius_num is None or not 1 <= radius_num <= MAX_RADIUS_METERS:
        raise RequestValidationFailed(
            f"Radius must be between 1 and {MAX_RADIUS_METERS} meters", extra=extra
        )

    limit_num = _leading_int(limit or "50")
    if limit_num is None or not 1 <= limit_num <= MAX_NEARBY_LIMIT:
        raise RequestValidationFailed(
            f"Limit must be between 1 and {MAX_NEARBY_LIMIT}", extra=extra
        )

    config = get_category_by_id(category)
    if config is None:
        raise CategoryNotFoundError(category, available)

    try:
        places = await services.overpass.search_nearby(
            category, lat_num, lon_num, radius_num, limit=limit_num
        )
    except AppError as e:
        e.extra.setdefault("available_categories", available)
        raise

    response.headers["Cache-Control"] = "public, s-maxage=300"
    return NearbyResponse(
        places=places,
        category_info=CategoryInfo(
            requested_category=category,
            category_name=config.name,
            total_results=len(places),
        ),
        available_categories=available,
    )


@router.get("/places/categories")
async def list_categories() -> dict:
    """Category groups for the client's category picker."""
    return {
        "groups": [
            {
                "groupId": group.group_id,
                "groupName": group.group_name,
                "icon": group.icon,
                "categories": [
                    {
                        "id": c.id,
                        "name": c.name,
                        "icon": c.icon,
                        "description": c.description,
                        "color": c.color,
                    }
                    for c in group.categories
                ],
            }
            for group in get_category_groups()
        ]
    }


# ─── Trip planning ────────────────────────────────────────────────────


@router.post("/trip/plan", response_model=TripPlanResponse, response_model_by_alias=True)
async def plan_trip(
    body: TripPlanRequest,
    services: ServiceContainer = Depends(get_services),
) -> TripPlanResponse:
    """Structured day-by-day plan over the user's chosen places.

    Places the model returns without coordinates get them back from the
    request by name; every missing display field gets a default.
    """
    start = time.monotonic()

    errors = body.validation_errors()
    if errors:
        raise RequestValidationFailed("Validation failed", details=", ".join(errors))

    ai = require_ai(services)
    destination = body.destination
    places = body.places or []
    logger.info(
        f"[PLAN] {body.days}-day {body.budget} trip to {destination.name} "
        f"with {len(places)} places"
    )

    async with services.llm_gate.throttle():
        plan, completion = await ai.plan_trip(destination.name, places, body.days, body.budget)

    days = enrich_itinerary_days(plan.itinerary, places, destination.name)
    enriched = [place for day in days for place in day.places]
    generation_time = int((time.monotonic() - start) * 1000)
    logger.info(
        f"[PLAN] Generated {body.days}-day itinerary, {len(enriched)} places, "
        f"{generation_time}ms"
    )

    return TripPlanResponse(
        itinerary=EnrichedItinerary(
            destination=destination.name,
            days=body.days,
            budget=body.budget,
            itinerary=days,
            enriched_places=enriched,
        ),
        llm_info=LLMInfo(
            model=completion.model,
            tokens_used=completion.total_tokens,
            generation_time=generation_time,
        ),
    )


@router.post("/itinerary", response_model=ItineraryResponse)
async def create_itinerary(
    body: ItineraryRequest,
    services: ServiceContainer = Depends(get_services),
) -> ItineraryResponse:
    """Free-text itinerary by interests, parsed into days."""
    missing = body.missing_fields()
    if missing:
        raise RequestValidationFailed(
            "Missing required fields", details=f"Required: {', '.join(missing)}"
        )

    days = body.days
    if not float(days).is_integer() or not 1 <= days <= MAX_TRIP_DAYS:
        raise RequestValidationFailed(
            "Invalid days value",
            details=f"Days must be a positive integer between 1 and {MAX_TRIP_DAYS}",
        )

    ai = require_ai(services)
    try:
        itinerary = await ai.generate_itinerary(body.destination, int(days), body.interests)
    except AppError as e:
        logger.error(f"[ITINERARY] Generation failed: {e.message}")
        raise UpstreamError("Failed to generate itinerary", details=e.message) from e

    return ItineraryResponse(itinerary=itinerary)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    services: ServiceContainer = Depends(get_services),
) -> ChatResponse:
    if not body.message:
        raise RequestValidationFailed("Missing required fields", details="Required: message")

    ai = require_ai(services)
    try:
        reply = await ai.chat(body.message, body.context)
    except AppError as e:
        logger.error(f"[CHAT] Failed: {e.message}")
        raise UpstreamError("Failed to process chat message", details=e.message) from e

    return ChatResponse(reply=reply)


# ─── Weather ──────────────────────────────────────────────────────────


@router.post(
    "/weather/forecast",
    response_model=WeatherForecastResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def weather_forecast(
    body: WeatherForecastRequest,
    services: ServiceContainer = Depends(get_services),
) -> WeatherForecastResponse:
    """Daily weather for the trip dates, within the 5-day forecast window.

    A start date in the past or more than five days ahead is a 400. The
    body still carries ``success: false`` and ``daysFromToday`` the way the
    earlier web client read it from a 200 response.
    """
    if not body.lat or not body.lon or not body.startDate or not body.days:
        raise RequestValidationFailed("Missing required parameters: lat, lon, startDate, days")

    if not 1 <= body.days <= MAX_FORECAST_DAYS:
        raise RequestValidationFailed(
            f"Days must be between 1 and {MAX_FORECAST_DAYS} for weather forecast "
            "(free tier limitation)"
        )

    if services.weather is None:
        raise ConfigurationError("OpenWeatherMap API key not configured")

    return await services.weather.trip_forecast(
        body.lat, body.lon, body.startDate, body.days
    )
