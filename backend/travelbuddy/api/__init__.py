"""HTTP API for TravelBuddy."""

from .routes import router

__all__ = ["router"]
