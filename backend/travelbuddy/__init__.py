"""TravelBuddy backend: places, trip planning and weather API."""

__version__ = "0.1.0"
