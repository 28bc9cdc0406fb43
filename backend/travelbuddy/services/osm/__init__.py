"""OpenStreetMap Overpass integration and the travel category registry."""

from .categories import (
    OVERPASS_RESULT_CAP,
    TRAVEL_CATEGORIES,
    CategoryConfig,
    CategoryGroup,
    available_category_ids,
    build_overpass_query,
    get_all_categories,
    get_categories_by_group,
    get_category_by_id,
    get_category_groups,
)
from .service import OSMOverpassService

__all__ = [
    "OVERPASS_RESULT_CAP",
    "TRAVEL_CATEGORIES",
    "CategoryConfig",
    "CategoryGroup",
    "available_category_ids",
    "build_overpass_query",
    "get_all_categories",
    "get_categories_by_group",
    "get_category_by_id",
    "get_category_groups",
    "OSMOverpassService",
]
