"""OpenStreetMap Overpass API service for nearby POI searches.

Architecture:
1. Compile the requested category into an Overpass QL radius query
2. POST it to the Overpass interpreter
3. Keep named elements that have coordinates (center for ways/relations)
4. Map OSM tags to the flat place records the map UI renders
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from travelbuddy.models import (
    NearbyPlace,
    OverpassElement,
    OverpassResponse,
    UpstreamError,
    UpstreamTimeoutError,
)

from .categories import build_overpass_query, get_category_by_id

logger = logging.getLogger(__name__)

# Tag keys checked in order to pick a place's main type.
TYPE_TAG_PRIORITY = (
    "tourism", "amenity", "shop", "historic",
    "leisure", "natural", "railway", "aeroway",
)

SUBCATEGORY_TAG_PRIORITY = ("cuisine", "shop", "historic", "tourism")


class OSMOverpassService:
    """Overpass API client for category searches around a point."""

    OVERPASS_URL = "https://overpass-api.de/api/interpreter"

    HEADERS = {
        "User-Agent": "TravelBuddy/1.0 (contact@travelbuddy.com)",
        "Accept": "application/json",
    }

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout, headers=self.HEADERS, transport=self._transport
        )

    async def search_nearby(
        self,
        category_id: str,
        lat: float,
        lon: float,
        radius: int,
        limit: int = 50,
    ) -> list[NearbyPlace]:
        """Find places of one category within ``radius`` meters.

        Raises:
            CategoryNotFoundError: Unknown category id.
            UpstreamTimeoutError: Overpass took longer than the timeout.
            UpstreamError: Overpass answered with an error or bad JSON.
        """
        query = build_overpass_query(category_id, lat, lon, radius)
        category = get_category_by_id(category_id)
        logger.info(
            f"[OVERPASS] Searching {category.name} near {lat}, {lon} "
            f"(radius {radius}m, limit {limit})"
        )
        logger.debug(f"[OVERPASS] Query:\n{query}")

        try:
            async with self._client() as client:
                response = await client.post(
                    self.OVERPASS_URL,
                    data={"data": query},
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
                response.raise_for_status()
                data = OverpassResponse.model_validate(response.json())
        except httpx.TimeoutException as e:
            logger.error(f"[OVERPASS] Timeout: {e}")
            raise UpstreamTimeoutError("Request timeout - the search took too long") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                f"[OVERPASS] Error response {e.response.status_code}: {e.response.text[:200]}"
            )
            raise UpstreamError(
                "External mapping service temporarily unavailable",
                upstream_status=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"[OVERPASS] Query error: {e}")
            raise UpstreamError("External mapping service temporarily unavailable") from e

        places = []
        for element in data.elements:
            place = self.element_to_place(element, category_id)
            if place is not None:
                places.append(place)

        places = places[:limit]
        logger.info(f"[OVERPASS] Found {len(places)} {category.name} locations")
        return places

    @staticmethod
    def element_to_place(element: OverpassElement, category_id: str) -> Optional[NearbyPlace]:
        """Convert an Overpass element, or None if it has no name or position."""
        tags = element.tags
        coords = element.coordinates
        if coords is None or not tags.get("name"):
            return None

        main_type = next((tags[k] for k in TYPE_TAG_PRIORITY if tags.get(k)), "unknown")
        subcategory = next((tags[k] for k in SUBCATEGORY_TAG_PRIORITY if tags.get(k)), "")

        if tags.get("addr:full"):
            address = tags["addr:full"]
        else:
            parts = [
                tags.get("addr:housenumber"),
                tags.get("addr:street"),
                tags.get("addr:city"),
                tags.get("addr:postcode"),
            ]
            address = ", ".join(p for p in parts if p)

        lat, lon = coords
        return NearbyPlace(
            id=str(element.id),
            name=tags["name"],
            lat=str(lat),
            lon=str(lon),
            type=main_type,
            category=category_id,
            subcategory=subcategory or None,
            address=address or None,
            amenity=tags.get("amenity") or None,
        )
