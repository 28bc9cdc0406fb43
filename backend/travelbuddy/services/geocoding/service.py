"""Nominatim geocoding service.

Wraps the two Nominatim endpoints the map UI needs:
- ``/search`` for destination autocomplete
- ``/details`` for a single place picked from the suggestions

Nominatim's usage policy requires an identifying User-Agent and at most
one request per second; callers are expected to go through a RateGate.
"""

import logging
from typing import Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from travelbuddy.models import (
    NominatimDetails,
    NominatimSearchResult,
    PlaceAddress,
    PlaceDetails,
    Prediction,
    UpstreamError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)

_SEARCH_RESULTS = TypeAdapter(list[NominatimSearchResult])


class NominatimService:
    """OpenStreetMap Nominatim client."""

    SEARCH_URL = "https://nominatim.openstreetmap.org/search"
    DETAILS_URL = "https://nominatim.openstreetmap.org/details"

    HEADERS = {
        "User-Agent": "TravelBuddy/1.0 (travel.buddy.app@example.com)",
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(
        self,
        timeout: float = 10.0,
        result_limit: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._result_limit = result_limit
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout, headers=self.HEADERS, transport=self._transport
        )

    @staticmethod
    def _search_error(status: int) -> UpstreamError:
        """Map a failed ``/search`` status to a user-facing error."""
        if status == 403:
            message = "Geocoding service temporarily unavailable. Please try again later."
        elif status == 429:
            message = "Too many requests. Please wait a moment and try again."
        elif status >= 500:
            message = "Nominatim service is temporarily unavailable."
        else:
            message = "Internal server error"
        return UpstreamError(message, upstream_status=status)

    async def search(self, query: str) -> list[Prediction]:
        """Free-text place search, returned as autocomplete predictions."""
        params = {
            "q": query,
            "format": "json",
            "limit": self._result_limit,
            "addressdetails": 1,
        }
        logger.info(f"[NOMINATIM] Searching: {query!r}")
        try:
            async with self._client() as client:
                response = await client.get(self.SEARCH_URL, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"[NOMINATIM] Timeout for {query!r}")
            raise UpstreamTimeoutError("Request timeout. Please try again.") from e
        except httpx.HTTPError as e:
            logger.error(f"[NOMINATIM] Request failed: {e}")
            raise UpstreamError("Internal server error") from e

        if response.is_error:
            logger.error(f"[NOMINATIM] API error: {response.status_code} {response.reason_phrase}")
            raise self._search_error(response.status_code)

        try:
            results = _SEARCH_RESULTS.validate_python(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"[NOMINATIM] Unexpected search payload: {e}")
            raise UpstreamError("Internal server error") from e

        predictions = [self.to_prediction(r) for r in results]
        logger.info(f"[NOMINATIM] {len(predictions)} results for {query!r}")
        return predictions

    async def details(self, place_id: str) -> PlaceDetails:
        """Look up one place by its Nominatim ``place_id``."""
        params = {"place_id": place_id, "format": "json"}
        try:
            async with self._client() as client:
                response = await client.get(self.DETAILS_URL, params=params)
                response.raise_for_status()
                data = NominatimDetails.model_validate(response.json())
        except httpx.TimeoutException as e:
            logger.error(f"[NOMINATIM] Details timeout for {place_id}")
            raise UpstreamTimeoutError("Request timeout. Please try again.") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"[NOMINATIM] Details error: {e.response.status_code}")
            raise UpstreamError(
                "Internal server error", upstream_status=e.response.status_code
            ) from e
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"[NOMINATIM] Details lookup failed for {place_id}: {e}")
            raise UpstreamError("Internal server error") from e

        return self.to_place_details(place_id, data)

    @staticmethod
    def to_prediction(result: NominatimSearchResult) -> Prediction:
        return Prediction(
            place_id=result.place_id,
            description=result.display_name,
            lat=result.lat,
            lon=result.lon,
            type=result.type,
        )

    @staticmethod
    def to_place_details(place_id: str, data: NominatimDetails) -> PlaceDetails:
        address = data.address_fields
        extratags = data.extratags or {}

        name = "Unnamed Place"
        if data.namedetails and data.namedetails.get("name"):
            name = data.namedetails["name"]
        elif address.get("city") or address.get("town"):
            name = address.get("city") or address.get("town")
        elif data.display_name:
            name = data.display_name.split(",")[0] or name
        elif data.localname:
            name = data.localname

        coords = data.centroid.coordinates if data.centroid else []
        lon, lat = (str(coords[0]), str(coords[1])) if len(coords) >= 2 else ("0", "0")

        return PlaceDetails(
            place_id=place_id,
            name=name,
            lat=lat,
            lon=lon,
            address=PlaceAddress(
                road=address.get("road"),
                city=address.get("city") or address.get("town"),
                country=address.get("country"),
                postcode=address.get("postcode"),
            ),
            opening_hours=data.opening_hours or extratags.get("opening_hours"),
            website=data.website or extratags.get("website"),
        )
