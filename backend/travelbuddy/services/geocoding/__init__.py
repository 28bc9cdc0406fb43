"""Nominatim geocoding: autocomplete search and place details."""

from .service import NominatimService

__all__ = ["NominatimService"]
