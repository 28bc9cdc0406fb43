"""Endpoint tests against a service container over mocked upstreams."""

import json
import logging
from datetime import date, datetime, timedelta, timezone
from urllib.parse import parse_qs

import httpx

from travelbuddy.models import UpstreamError, UpstreamRateLimitedError

NOMINATIM = "nominatim.openstreetmap.org"
OVERPASS = "overpass-api.de"
OPENWEATHER = "api.openweathermap.org"

TRIP_BODY = {
    "destination": {"name": "Paris", "lat": "48.8566", "lon": "2.3522"},
    "places": [
        {"name": "Eiffel Tower", "lat": "48.8584", "lon": "2.2945", "type": "attraction"},
        {"name": "Louvre Museum", "lat": "48.8606", "lon": "2.3376"},
    ],
    "days": 2,
    "budget": "moderate",
}

PLAN_REPLY = {
    "destination": "Paris",
    "days": 2,
    "budget": "moderate",
    "itinerary": [
        {"day": 1, "places": [{"name": "eiffel tower", "time": "morning"}]},
        {"day": 2, "places": [{"name": "Louvre", "time": "afternoon", "rating": 4.8}]},
    ],
}


class TestHealth:
    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "healthy"}


class TestAutocomplete:
    """Tests for GET /places/autocomplete."""

    def test_missing_query(self, client) -> None:
        response = client.get("/places/autocomplete", params={"q": "   "})
        assert response.status_code == 400
        assert response.json() == {"error": 'Query parameter "q" is required'}

    def test_results_are_cached(self, client, http_routes, http_calls) -> None:
        http_routes[NOMINATIM] = lambda r: httpx.Response(200, json=[
            {"place_id": 1, "display_name": "Paris, France", "lat": "48.85", "lon": "2.35", "type": "city"}
        ])
        first = client.get("/places/autocomplete", params={"q": "Paris"})
        second = client.get("/places/autocomplete", params={"q": " PARIS "})

        assert first.status_code == 200
        assert first.headers["Cache-Control"] == "public, max-age=300"
        assert first.json() == {"predictions": [
            {"place_id": "1", "description": "Paris, France", "lat": "48.85", "lon": "2.35", "type": "city"}
        ]}
        assert second.json() == first.json()
        assert len(http_calls) == 1

    def test_upstream_forbidden(self, client, http_routes) -> None:
        http_routes[NOMINATIM] = lambda r: httpx.Response(403)
        response = client.get("/places/autocomplete", params={"q": "Paris"})
        assert response.status_code == 500
        assert response.json()["error"] == (
            "Geocoding service temporarily unavailable. Please try again later."
        )

    def test_failures_are_not_cached(self, client, http_routes, http_calls) -> None:
        http_routes[NOMINATIM] = lambda r: httpx.Response(429)
        client.get("/places/autocomplete", params={"q": "Paris"})
        client.get("/places/autocomplete", params={"q": "Paris"})
        assert len(http_calls) == 2


class TestDetails:
    """Tests for GET /places/details."""

    def test_missing_place_id(self, client) -> None:
        response = client.get("/places/details")
        assert response.status_code == 400
        assert response.json() == {"error": 'Query parameter "place_id" is required'}

    def test_details(self, client, http_routes) -> None:
        http_routes[NOMINATIM] = lambda r: httpx.Response(200, json={
            "namedetails": {"name": "Louvre"},
            "centroid": {"coordinates": [2.3376, 48.8606]},
        })
        response = client.get("/places/details", params={"place_id": "42"})
        assert response.status_code == 200
        details = response.json()["details"]
        assert details["name"] == "Louvre"
        assert (details["lat"], details["lon"]) == ("48.8606", "2.3376")

    def test_upstream_failure(self, client, http_routes) -> None:
        http_routes[NOMINATIM] = lambda r: httpx.Response(500)
        response = client.get("/places/details", params={"place_id": "42"})
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestNearby:
    """Tests for GET /places/nearby."""

    def test_defaults(self, client, http_routes, http_calls) -> None:
        http_routes[OVERPASS] = lambda r: httpx.Response(200, json={"elements": [
            {"type": "node", "id": 7, "lat": 48.86, "lon": 2.34, "tags": {"name": "Pont Neuf", "tourism": "attraction"}},
        ]})
        response = client.get("/places/nearby", params={"lat": "48.86", "lon": "2.34"})
        assert response.status_code == 200
        body = response.json()
        assert body["category_info"] == {
            "requested_category": "tourist_attractions",
            "category_name": "Tourist Attractions",
            "total_results": 1,
        }
        assert body["places"][0]["name"] == "Pont Neuf"
        assert "cafes" in body["available_categories"]
        query = parse_qs(http_calls[0].content.decode())["data"][0]
        assert "around:2000,48.86,2.34" in query

    def test_radius_out_of_range(self, client, http_calls) -> None:
        response = client.get(
            "/places/nearby",
            params={"lat": "48.86", "lon": "2.34", "radius": "50001", "category": "cafes"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Radius must be between 1 and 50000 meters"
        assert "cafes" in body["available_categories"]
        assert http_calls == []

    def test_invalid_coordinates(self, client) -> None:
        response = client.get("/places/nearby", params={"lat": "north", "lon": "2.34"})
        assert response.status_code == 400
        assert response.json()["error"] == 'Valid "lat" and "lon" query parameters are required'
        assert response.json()["available_categories"]

    def test_limit_out_of_range(self, client) -> None:
        response = client.get("/places/nearby", params={"lat": "1", "lon": "1", "limit": "101"})
        assert response.status_code == 400
        assert response.json()["error"] == "Limit must be between 1 and 100"

    def test_unknown_category(self, client) -> None:
        response = client.get(
            "/places/nearby", params={"lat": "1", "lon": "1", "category": "spaceports"}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == (
            "Category 'spaceports' not found. Please use one of the available categories."
        )
        assert "museums" in body["available_categories"]

    def test_upstream_failure_keeps_categories(self, client, http_routes) -> None:
        http_routes[OVERPASS] = lambda r: httpx.Response(502)
        response = client.get("/places/nearby", params={"lat": "1", "lon": "1"})
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "External mapping service temporarily unavailable"
        assert "museums" in body["available_categories"]


class TestCategories:
    def test_lists_groups(self, client) -> None:
        groups = client.get("/places/categories").json()["groups"]
        assert len(groups) == 6
        assert groups[0]["groupId"] == "eat_drink"
        assert groups[0]["categories"][0]["id"] == "restaurants"


class TestTripPlan:
    """Tests for POST /trip/plan."""

    def test_plan(self, client, fake_ai) -> None:
        fake_ai.replies.append(json.dumps(PLAN_REPLY))
        response = client.post("/trip/plan", json=TRIP_BODY)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        itinerary = body["itinerary"]
        assert itinerary["days"] == 2
        assert itinerary["destination"] == "Paris"
        first = itinerary["itinerary"][0]["places"][0]
        assert (first["lat"], first["lon"]) == ("48.8584", "2.2945")
        assert first["category"] == "attraction"
        assert [p["name"] for p in itinerary["enrichedPlaces"]] == ["eiffel tower", "Louvre"]
        assert itinerary["enrichedPlaces"][1]["rating"] == 4.8
        assert body["llm_info"]["model"] == "fake-model"
        assert body["llm_info"]["tokens_used"] == 123
        assert isinstance(body["llm_info"]["generation_time"], int)

    def test_days_out_of_range(self, client, fake_ai) -> None:
        response = client.post("/trip/plan", json={**TRIP_BODY, "days": 31})
        assert response.status_code == 400
        assert response.json() == {
            "error": "Validation failed",
            "details": "Days must be between 1 and 30",
        }
        assert fake_ai.calls == []

    def test_unknown_budget(self, client) -> None:
        response = client.post("/trip/plan", json={**TRIP_BODY, "budget": "premium"})
        assert response.status_code == 400
        assert "Budget" in response.json()["details"]

    def test_all_problems_reported(self, client) -> None:
        response = client.post("/trip/plan", json={
            "destination": {"name": "Paris"},
            "places": [{"name": "Louvre", "lat": "1"}],
            "days": 0,
            "budget": "premium",
        })
        assert response.json()["details"] == ", ".join([
            "Destination must include name, lat, and lon",
            "Place 1 must include name, lat, and lon",
            "Days must be between 1 and 30",
            "Budget must be: low, moderate, or luxury",
        ])

    def test_malformed_body(self, client) -> None:
        response = client.post(
            "/trip/plan", content="not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_non_json_model_output(self, client, fake_ai) -> None:
        fake_ai.replies.append("Here's a lovely trip!")
        response = client.post("/trip/plan", json=TRIP_BODY)
        assert response.status_code == 500
        assert response.json() == {
            "error": "AI returned invalid response format",
            "details": "The AI generated malformed JSON. Please try again.",
        }

    def test_rate_limited(self, client, fake_ai, caplog) -> None:
        fake_ai.replies.append(UpstreamRateLimitedError(
            "Too many requests to AI service", details="Please wait a moment and try again"
        ))
        with caplog.at_level(logging.INFO, logger="travelbuddy.main"):
            response = client.post("/trip/plan", json=TRIP_BODY)
        assert response.status_code == 429
        assert response.json() == {
            "error": "Too many requests to AI service",
            "details": "Please wait a moment and try again",
        }
        assert "POST /trip/plan -> 429 RATE_LIMITED" in caplog.text

    def test_error_code_is_logged(self, client, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="travelbuddy.main"):
            response = client.post("/trip/plan", json={**TRIP_BODY, "days": 0})
        assert response.status_code == 400
        assert "error" in response.json()
        assert "400 VALIDATION_ERROR: Validation failed" in caplog.text

    def test_missing_api_key(self, client, services) -> None:
        services.ai = None
        response = client.post("/trip/plan", json=TRIP_BODY)
        assert response.status_code == 500
        assert response.json()["error"] == "Groq API key not configured"


class TestItinerary:
    """Tests for POST /itinerary."""

    def test_itinerary(self, client, fake_ai) -> None:
        fake_ai.replies.append("Day 1:\n• Colosseum\nDay 2:\n- Vatican")
        response = client.post(
            "/itinerary", json={"destination": "Rome", "days": 3, "interests": ["history"]}
        )
        assert response.status_code == 200
        days = response.json()["itinerary"]
        assert [d["day"] for d in days] == [1, 2, 3]
        assert days[1]["activities"] == ["Vatican"]

    def test_missing_fields(self, client) -> None:
        response = client.post("/itinerary", json={"destination": "Rome"})
        assert response.status_code == 400
        assert response.json() == {
            "error": "Missing required fields",
            "details": "Required: days, interests",
        }

    def test_invalid_days(self, client) -> None:
        for days in (31, 2.5, -1):
            response = client.post(
                "/itinerary", json={"destination": "Rome", "days": days, "interests": ["food"]}
            )
            assert response.status_code == 400
            assert response.json()["error"] == "Invalid days value"

    def test_upstream_failure(self, client, fake_ai) -> None:
        fake_ai.replies.append(UpstreamError("Failed to connect to AI service"))
        response = client.post(
            "/itinerary", json={"destination": "Rome", "days": 1, "interests": ["food"]}
        )
        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to generate itinerary",
            "details": "Failed to connect to AI service",
        }


class TestChat:
    """Tests for POST /chat."""

    def test_chat(self, client, fake_ai) -> None:
        fake_ai.replies.append("Try the Metro.")
        response = client.post("/chat", json={"message": "How do I get around Paris?"})
        assert response.json() == {"reply": "Try the Metro."}

    def test_missing_message(self, client) -> None:
        response = client.post("/chat", json={})
        assert response.status_code == 400

    def test_upstream_failure(self, client, fake_ai) -> None:
        fake_ai.replies.append(UpstreamError("AI service temporarily unavailable"))
        response = client.post("/chat", json={"message": "Hi"})
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process chat message"


class TestWeatherForecast:
    """Tests for POST /weather/forecast."""

    @staticmethod
    def _forecast_payload(start: date) -> dict:
        moment = datetime(start.year, start.month, start.day, 12, tzinfo=timezone.utc)
        return {"list": [{
            "dt": int(moment.timestamp()),
            "main": {"temp": 15, "temp_min": 12, "temp_max": 17, "humidity": 70},
            "weather": [{"main": "Rain"}],
            "wind": {"speed": 3},
            "pop": 0.5,
        }]}

    def test_forecast(self, client, http_routes) -> None:
        start = date.today()
        http_routes[OPENWEATHER] = lambda r: httpx.Response(200, json=self._forecast_payload(start))
        response = client.post("/weather/forecast", json={
            "lat": "48.85", "lon": "2.35", "startDate": start.isoformat(), "days": 2,
        })
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["forecasts"][0]["weather"]["description"] == "light rain"
        assert "unavailable" not in body["forecasts"][0]
        assert body["forecasts"][1]["unavailable"] is True
        assert body["availableDateRange"]["from"] == start.isoformat()
        assert body["note"] == "Using free tier API (5-day forecast limit)"

    def test_missing_parameters(self, client) -> None:
        response = client.post("/weather/forecast", json={"lat": "1", "lon": "1"})
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required parameters: lat, lon, startDate, days"

    def test_too_many_days(self, client) -> None:
        response = client.post("/weather/forecast", json={
            "lat": "1", "lon": "1", "startDate": date.today().isoformat(), "days": 6,
        })
        assert response.status_code == 400
        assert "between 1 and 5" in response.json()["error"]

    def test_start_too_far_ahead(self, client, http_calls) -> None:
        start = date.today() + timedelta(days=8)
        response = client.post("/weather/forecast", json={
            "lat": "1", "lon": "1", "startDate": start.isoformat(), "days": 2,
        })
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Weather forecast not available for selected dates"
        assert body["success"] is False
        assert body["daysFromToday"] == 8
        assert http_calls == []

    def test_start_in_past(self, client) -> None:
        start = date.today() - timedelta(days=1)
        response = client.post("/weather/forecast", json={
            "lat": "1", "lon": "1", "startDate": start.isoformat(), "days": 2,
        })
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid start date"
        assert body["success"] is False

    def test_missing_api_key(self, client, services) -> None:
        services.weather = None
        response = client.post("/weather/forecast", json={
            "lat": "1", "lon": "1", "startDate": date.today().isoformat(), "days": 1,
        })
        assert response.status_code == 500
        assert response.json()["error"] == "OpenWeatherMap API key not configured"
