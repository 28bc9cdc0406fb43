"""Travel place categories and the Overpass query compiler.

Each category maps to one or more OSM ``key=value`` tags. A place matches a
category when it carries any one of those tags. The registry is static and
built once at import time.
"""

from dataclasses import dataclass
from typing import Optional

from travelbuddy.models import CategoryNotFoundError

# Server-side cap on elements returned by one compiled query.
OVERPASS_RESULT_CAP = 50
OVERPASS_TIMEOUT_SECONDS = 30
OVERPASS_MAXSIZE_BYTES = 1073741824


@dataclass(frozen=True)
class CategoryConfig:
    id: str
    name: str
    icon: str
    description: str
    osm_queries: tuple[str, ...]
    color: str


@dataclass(frozen=True)
class CategoryGroup:
    group_id: str
    group_name: str
    icon: str
    categories: tuple[CategoryConfig, ...]


def _cat(id: str, name: str, icon: str, description: str, osm_queries: list[str], color: str) -> CategoryConfig:
    return CategoryConfig(id, name, icon, description, tuple(osm_queries), color)


TRAVEL_CATEGORIES: tuple[CategoryGroup, ...] = (
    CategoryGroup("eat_drink", "Eat & Drink", "🍽️", (
        _cat("restaurants", "Restaurants", "🍽️", "Dining establishments and restaurants",
             ["amenity=restaurant"], "#ef4444"),
        _cat("cafes", "Cafes", "☕", "Coffee shops and cafes",
             ["amenity=cafe"], "#8b5cf6"),
        _cat("fast_food", "Fast Food", "🍟", "Quick service restaurants",
             ["amenity=fast_food"], "#f59e0b"),
        _cat("pubs_bars", "Pubs & Bars", "🍺", "Pubs, bars, and drinking establishments",
             ["amenity=pub", "amenity=bar", "amenity=biergarten"], "#10b981"),
        _cat("ice_cream", "Ice Cream", "🍦", "Ice cream shops and gelaterias",
             ["amenity=ice_cream"], "#ec4899"),
    )),
    CategoryGroup("accommodation", "Stay", "🏨", (
        _cat("hotels", "Hotels", "🏨", "Hotels and luxury accommodations",
             ["tourism=hotel"], "#3b82f6"),
        _cat("hostels", "Hostels", "🏠", "Budget accommodations and hostels",
             ["tourism=hostel"], "#06b6d4"),
        _cat("guest_houses", "Guest Houses", "🏡", "Guest houses and B&Bs",
             ["tourism=guest_house"], "#84cc16"),
        _cat("camping", "Camping", "⛺", "Campsites and RV parks",
             ["tourism=camp_site", "tourism=caravan_site"], "#22c55e"),
    )),
    CategoryGroup("attractions", "Attractions & Leisure", "🎭", (
        _cat("tourist_attractions", "Tourist Attractions", "🎯", "Popular tourist attractions and landmarks",
             ["tourism=attraction"], "#ef4444"),
        _cat("museums", "Museums", "🏛️", "Museums and cultural institutions",
             ["tourism=museum"], "#8b5cf6"),
        _cat("galleries", "Art Galleries", "🎨", "Art galleries and exhibitions",
             ["tourism=gallery"], "#ec4899"),
        _cat("entertainment", "Entertainment", "🎪", "Zoos, aquariums, theme parks",
             ["tourism=zoo", "tourism=aquarium", "tourism=theme_park"], "#f59e0b"),
        _cat("viewpoints", "Viewpoints", "🌄", "Scenic viewpoints and lookouts",
             ["tourism=viewpoint"], "#06b6d4"),
        _cat("parks_nature", "Parks & Nature", "🌳", "Parks, gardens, and natural areas",
             ["leisure=park", "leisure=garden", "natural=beach"], "#22c55e"),
        _cat("historical", "Historical Sites", "🏰", "Historical landmarks and monuments",
             ["historic=monument", "historic=memorial", "historic=castle",
              "historic=ruins", "historic=archaeological_site"], "#92400e"),
        _cat("entertainment_venues", "Entertainment Venues", "🎭", "Theatres, cinemas, and performance venues",
             ["amenity=theatre", "amenity=cinema"], "#7c3aed"),
    )),
    CategoryGroup("shopping", "Shopping", "🛍️", (
        _cat("malls", "Shopping Malls", "🏢", "Shopping centers and malls",
             ["shop=mall", "building=commercial"], "#3b82f6"),
        _cat("supermarkets", "Supermarkets", "🛒", "Grocery stores and supermarkets",
             ["shop=supermarket"], "#10b981"),
        _cat("convenience", "Convenience Stores", "🏪", "Convenience stores and mini marts",
             ["shop=convenience"], "#f59e0b"),
        _cat("souvenirs", "Souvenirs & Gifts", "🎁", "Souvenir shops and gift stores",
             ["shop=gift", "shop=souvenir"], "#ec4899"),
        _cat("bakeries", "Bakeries", "🥖", "Bakeries and pastry shops",
             ["shop=bakery"], "#92400e"),
        _cat("markets", "Markets", "🏪", "Local markets and marketplaces",
             ["amenity=marketplace"], "#059669"),
    )),
    CategoryGroup("transport", "Transport", "🚇", (
        _cat("train_stations", "Train Stations", "🚂", "Railway and train stations",
             ["railway=station"], "#3b82f6"),
        _cat("metro_subway", "Metro/Subway", "🚇", "Metro and subway stations",
             ["railway=subway_entrance", "station=subway"], "#8b5cf6"),
        _cat("bus_stops", "Bus Stops", "🚌", "Bus stops and terminals",
             ["highway=bus_stop", "amenity=bus_station"], "#f59e0b"),
        _cat("airports", "Airports", "✈️", "Airports and airfields",
             ["aeroway=aerodrome"], "#06b6d4"),
        _cat("ferry", "Ferry Terminals", "⛴️", "Ferry terminals and water transport",
             ["amenity=ferry_terminal"], "#0891b2"),
        _cat("car_rental", "Car Rental", "🚗", "Car rental agencies",
             ["amenity=car_rental"], "#dc2626"),
        _cat("bike_rental", "Bike Rental", "🚲", "Bicycle rental stations",
             ["amenity=bicycle_rental"], "#16a34a"),
    )),
    CategoryGroup("safety_health", "Safety & Health", "⛑️", (
        _cat("hospitals", "Hospitals", "🏥", "Hospitals and medical centers",
             ["amenity=hospital"], "#dc2626"),
        _cat("clinics", "Clinics", "🏥", "Medical clinics and health centers",
             ["amenity=clinic", "amenity=doctors"], "#f97316"),
        _cat("pharmacies", "Pharmacies", "💊", "Pharmacies and drugstores",
             ["amenity=pharmacy"], "#22c55e"),
        _cat("police", "Police Stations", "👮", "Police stations and law enforcement",
             ["amenity=police"], "#1d4ed8"),
        _cat("atms", "ATMs", "🏧", "ATMs and cash machines",
             ["amenity=atm"], "#059669"),
        _cat("banks", "Banks", "🏦", "Banks and financial services",
             ["amenity=bank"], "#0369a1"),
    )),
)

_CATEGORIES_BY_ID: dict[str, CategoryConfig] = {
    category.id: category
    for group in TRAVEL_CATEGORIES
    for category in group.categories
}


def get_category_groups() -> list[CategoryGroup]:
    return list(TRAVEL_CATEGORIES)


def get_category_by_id(category_id: str) -> Optional[CategoryConfig]:
    """Return the category, or None when the id is unknown."""
    return _CATEGORIES_BY_ID.get(category_id)


def get_categories_by_group(group_id: str) -> list[CategoryConfig]:
    for group in TRAVEL_CATEGORIES:
        if group.group_id == group_id:
            return list(group.categories)
    return []


def get_all_categories() -> list[CategoryConfig]:
    """All categories, flattened in group order."""
    return [category for group in TRAVEL_CATEGORIES for category in group.categories]


def available_category_ids() -> list[str]:
    return [category.id for category in get_all_categories()]


def _tag_clauses(osm_query: str, lat: float, lon: float, radius: int) -> list[str]:
    key, _, value = osm_query.partition("=")
    area = f"(around:{radius},{lat},{lon})"
    return [
        f'{element}["{key}"="{value}"]{area};'
        for element in ("node", "way", "relation")
    ]


def build_overpass_query(category_id: str, lat: float, lon: float, radius: int) -> str:
    """Compile a category into an Overpass QL radius search.

    Every tag of the category yields node/way/relation clauses; they all sit
    in one union, so an element matching any tag is returned.

    Raises:
        CategoryNotFoundError: If ``category_id`` is not registered.
    """
    category = get_category_by_id(category_id)
    if category is None:
        raise CategoryNotFoundError(category_id, available_category_ids())

    clauses: list[str] = []
    for osm_query in category.osm_queries:
        clauses.extend(_tag_clauses(osm_query, lat, lon, radius))

    body = "\n  ".join(clauses)
    return (
        f"[out:json][timeout:{OVERPASS_TIMEOUT_SECONDS}][maxsize:{OVERPASS_MAXSIZE_BYTES}];\n"
        f"(\n  {body}\n);\n"
        f"out center meta {OVERPASS_RESULT_CAP};"
    )
