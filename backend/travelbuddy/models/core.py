"""Core data models for TravelBuddy.

Pydantic models for request bodies, internal entities and response
payloads. JSON field names match what the web client expects, so some
fields are camelCase (``windSpeed``) or aliased (``enrichedPlaces``).
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


class Budget(str, Enum):
    """Trip budget levels understood by the planner prompt."""

    LOW = "low"
    MODERATE = "moderate"
    LUXURY = "luxury"


BUDGET_VALUES = [b.value for b in Budget]

TimeSlot = Literal["morning", "afternoon", "evening"]

TIME_SLOTS = ("morning", "afternoon", "evening")


def coerce_coordinate(value: Any) -> Optional[str]:
    """Coordinates travel as decimal-degree strings; accept numbers too."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return str(value).strip()


Coordinate = Annotated[Optional[str], BeforeValidator(coerce_coordinate)]


# ─── Places ───────────────────────────────────────────────────────────


class Prediction(BaseModel):
    """A single autocomplete suggestion."""

    place_id: str
    description: str
    lat: str
    lon: str
    type: str


class AutocompleteResponse(BaseModel):
    predictions: list[Prediction] = Field(default_factory=list)


class PlaceAddress(BaseModel):
    road: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    postcode: Optional[str] = None


class PlaceDetails(BaseModel):
    """Details for one Nominatim place."""

    place_id: str
    name: str
    lat: str
    lon: str
    address: Optional[PlaceAddress] = None
    opening_hours: Optional[str] = None
    website: Optional[str] = None


class DetailsResponse(BaseModel):
    details: PlaceDetails


class NearbyPlace(BaseModel):
    """A point of interest returned by the nearby search."""

    id: str
    name: str
    lat: str
    lon: str
    type: str
    category: str
    subcategory: Optional[str] = None
    address: Optional[str] = None
    amenity: Optional[str] = None


class CategoryInfo(BaseModel):
    requested_category: str
    category_name: str
    total_results: int


class NearbyResponse(BaseModel):
    places: list[NearbyPlace]
    category_info: CategoryInfo
    available_categories: list[str]


# ─── Trip planning ────────────────────────────────────────────────────


class DestinationInput(BaseModel):
    """Trip destination as sent by the client."""

    name: Optional[str] = None
    lat: Coordinate = None
    lon: Coordinate = None


class PlaceInput(BaseModel):
    """A place the user selected on the map."""

    name: Optional[str] = None
    lat: Coordinate = None
    lon: Coordinate = None
    type: Optional[str] = None
    id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class TripPlanRequest(BaseModel):
    """Body of ``POST /trip/plan``.

    Fields are loose; :meth:`validation_errors` reports every problem at once.
    """

    destination: Optional[DestinationInput] = None
    places: Optional[list[PlaceInput]] = None
    days: Optional[int] = None
    budget: Optional[str] = None

    def validation_errors(self) -> list[str]:
        errors: list[str] = []
        dest = self.destination
        if dest is None or not dest.name or not dest.lat or not dest.lon:
            errors.append("Destination must include name, lat, and lon")

        if not self.places:
            errors.append("Places must be a non-empty array")
        else:
            for index, place in enumerate(self.places, 1):
                if not place.name or not place.lat or not place.lon:
                    errors.append(f"Place {index} must include name, lat, and lon")

        if not self.days or self.days <= 0 or self.days > 30:
            errors.append("Days must be between 1 and 30")

        if self.budget not in BUDGET_VALUES:
            errors.append("Budget must be: low, moderate, or luxury")

        return errors


class EnrichedPlace(BaseModel):
    """A planned visit with every display field populated."""

    name: str
    lat: str = ""
    lon: str = ""
    time: Optional[TimeSlot] = None
    type: Optional[str] = None
    description: str
    rating: float = Field(4.0, ge=1, le=5)
    address: str
    category: str
    subcategory: str


class EnrichedDay(BaseModel):
    day: int
    places: list[EnrichedPlace] = Field(default_factory=list)


class EnrichedItinerary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    destination: str
    days: int
    budget: str
    itinerary: list[EnrichedDay]
    enriched_places: list[EnrichedPlace] = Field(
        default_factory=list, alias="enrichedPlaces"
    )


class LLMInfo(BaseModel):
    model: str
    tokens_used: Optional[int] = None
    generation_time: int = Field(..., description="Milliseconds spent on the request")


class TripPlanResponse(BaseModel):
    success: bool = True
    itinerary: EnrichedItinerary
    llm_info: LLMInfo


# ─── Free-text itinerary & chat ───────────────────────────────────────


class ItineraryRequest(BaseModel):
    """Body of ``POST /itinerary``."""

    destination: Optional[str] = None
    days: Union[int, float, None] = None
    interests: Optional[list[str]] = None

    def missing_fields(self) -> list[str]:
        missing = []
        for name in ("destination", "days", "interests"):
            if not getattr(self, name):
                missing.append(name)
        return missing


class ItineraryDay(BaseModel):
    """One day of a parsed free-text itinerary."""

    day: int = Field(..., ge=1)
    activities: list[str] = Field(default_factory=list)


class ItineraryResponse(BaseModel):
    itinerary: list[ItineraryDay]


class ChatRequest(BaseModel):
    message: Optional[str] = None
    context: Optional[str] = None


class ChatResponse(BaseModel):
    reply: str


# ─── Weather ──────────────────────────────────────────────────────────


class WeatherForecastRequest(BaseModel):
    """Body of ``POST /weather/forecast``."""

    lat: Coordinate = None
    lon: Coordinate = None
    startDate: Optional[str] = None
    days: Optional[int] = None


class TemperatureSummary(BaseModel):
    min: int
    max: int
    day: int
    night: int


class WeatherSummary(BaseModel):
    main: str
    description: str
    icon: str


class DailyForecast(BaseModel):
    """Weather for one calendar day of the trip."""

    date: str
    temp: TemperatureSummary
    weather: WeatherSummary
    humidity: int
    windSpeed: int = Field(..., description="km/h")
    precipitation: int = Field(..., description="Probability in percent")
    unavailable: Optional[bool] = None


class DateRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    to: str


class WeatherForecastResponse(BaseModel):
    """Daily forecasts covering the trip, in the web client's field names."""

    success: bool = True
    forecasts: list[DailyForecast]
    location: dict[str, str]
    tripDuration: int
    selectedStartDate: str
    endDate: str
    daysFromToday: int
    note: str
    availableDays: int
    unavailableDays: int
    availableDateRange: DateRange
    message: str
