"""Schemas for upstream API payloads.

Nominatim, Overpass, OpenWeatherMap and the planner's LLM JSON are all
validated here at the boundary. Services convert these into the entities
in ``travelbuddy.models.core`` in exactly one place each.
"""

import math
from typing import Annotated, Any, Optional, Union

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field


def _as_str(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _as_str_or_none(value: Any) -> Optional[str]:
    """Strings and numbers as text; lists, objects and booleans are dropped."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and math.isfinite(value):
        return str(value)
    return None


def _as_rating(value: Any) -> Optional[float]:
    """LLMs sometimes send ratings as strings; anything unparsable is dropped."""
    if value is None or isinstance(value, bool):
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return rating if math.isfinite(rating) else None


def _as_int_or_none(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _objects_only(value: Any) -> list[Any]:
    """Keep the JSON objects of a list; anything else becomes empty."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _object_or_empty(value: Any) -> Any:
    return value if isinstance(value, dict) else {}


def _present(value: Any) -> Any:
    if not value:
        raise ValueError("must be present and non-empty")
    return value


LLMStr = Annotated[Optional[str], BeforeValidator(_as_str_or_none)]


# ─── Nominatim ────────────────────────────────────────────────────────


class NominatimSearchResult(BaseModel):
    """One entry of ``/search?format=json``."""

    place_id: Annotated[str, BeforeValidator(_as_str)]
    display_name: str = ""
    lat: Annotated[str, BeforeValidator(_as_str)]
    lon: Annotated[str, BeforeValidator(_as_str)]
    type: str = ""


class NominatimCentroid(BaseModel):
    type: str = "Point"
    coordinates: list[float] = Field(default_factory=list)


class NominatimDetails(BaseModel):
    """Response of ``/details?format=json``.

    ``address`` is an object for some Nominatim versions and a list of
    address rows for others; only the object form is used.
    """

    namedetails: Optional[dict[str, Any]] = None
    address: Union[dict[str, Any], list[Any], None] = None
    display_name: Optional[str] = None
    localname: Optional[str] = None
    centroid: Optional[NominatimCentroid] = None
    extratags: Optional[dict[str, Any]] = None
    opening_hours: Optional[str] = None
    website: Optional[str] = None

    @property
    def address_fields(self) -> dict[str, Any]:
        return self.address if isinstance(self.address, dict) else {}


# ─── Overpass ─────────────────────────────────────────────────────────


class OverpassCenter(BaseModel):
    lat: Optional[float] = None
    lon: Optional[float] = None


class OverpassElement(BaseModel):
    """A node, way or relation from an Overpass JSON response."""

    type: str
    id: int
    lat: Optional[float] = None
    lon: Optional[float] = None
    center: Optional[OverpassCenter] = None
    tags: dict[str, str] = Field(default_factory=dict)

    @property
    def coordinates(self) -> Optional[tuple[float, float]]:
        """Node coordinates, or the computed center for ways/relations."""
        if self.lat and self.lon:
            return self.lat, self.lon
        if self.center and self.center.lat and self.center.lon:
            return self.center.lat, self.center.lon
        return None


class OverpassResponse(BaseModel):
    elements: list[OverpassElement] = Field(default_factory=list)


# ─── LLM trip plan ────────────────────────────────────────────────────


class LLMPlace(BaseModel):
    """A place as the model returned it.

    Every field may be missing, and a value of the wrong JSON type is read
    as missing so enrichment can fill in a default.
    """

    name: LLMStr = None
    lat: LLMStr = None
    lon: LLMStr = None
    time: LLMStr = None
    type: LLMStr = None
    description: LLMStr = None
    rating: Annotated[Optional[float], BeforeValidator(_as_rating)] = None
    address: LLMStr = None
    category: LLMStr = None
    subcategory: LLMStr = None


class LLMDay(BaseModel):
    day: Annotated[Optional[int], BeforeValidator(_as_int_or_none)] = None
    places: Annotated[list[LLMPlace], BeforeValidator(_objects_only)] = Field(default_factory=list)


class LLMTripPlan(BaseModel):
    """Top-level JSON object the planner prompt asks for.

    Only the shape is checked: ``destination``, ``days`` and ``budget``
    must be present and non-empty, and ``itinerary`` must be an array. The
    response echoes the request's own values for the first three.
    """

    destination: Annotated[Any, AfterValidator(_present)]
    days: Annotated[Any, AfterValidator(_present)]
    budget: Annotated[Any, AfterValidator(_present)]
    itinerary: list[Annotated[LLMDay, BeforeValidator(_object_or_empty)]]


# ─── OpenWeatherMap ───────────────────────────────────────────────────


class ForecastMain(BaseModel):
    temp: float
    temp_min: float
    temp_max: float
    humidity: float


class ForecastCondition(BaseModel):
    main: str
    description: str = ""
    icon: str = ""


class ForecastWind(BaseModel):
    speed: float = 0.0


class ForecastEntry(BaseModel):
    """One 3-hour slot of the 5-day forecast."""

    dt: int
    main: ForecastMain
    weather: list[ForecastCondition] = Field(default_factory=list)
    wind: ForecastWind = Field(default_factory=ForecastWind)
    pop: float = 0.0


class ForecastResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entries: list[ForecastEntry] = Field(default_factory=list, alias="list")
