"""Shared fixtures: a scripted LLM and a service container over mock HTTP."""

from typing import Callable, Optional, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from travelbuddy.config import Settings
from travelbuddy.main import create_app
from travelbuddy.services.ai_reasoning import AIReasoningService, Completion
from travelbuddy.services.container import ServiceContainer
from travelbuddy.services.geocoding import NominatimService
from travelbuddy.services.osm import OSMOverpassService
from travelbuddy.services.weather import OpenWeatherService
from travelbuddy.utils import RateGate, TTLCache


class FakeAIService(AIReasoningService):
    """Replays scripted replies instead of calling a provider."""

    def __init__(self, replies: Optional[list[Union[str, Exception]]] = None) -> None:
        self.replies = list(replies or [])
        self.calls: list[dict] = []
        self._timeout = 60.0

    @property
    def model_name(self) -> str:
        return "fake-model"

    @property
    def provider_name(self) -> str:
        return "Fake"

    async def _generate(self, prompt, system_prompt, temperature=0.7, max_tokens=2048, timeout=None):
        self.calls.append(
            {"prompt": prompt, "system_prompt": system_prompt, "temperature": temperature}
        )
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return Completion(text=reply, model=self.model_name, total_tokens=123)


async def _no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def fake_ai() -> FakeAIService:
    return FakeAIService()


@pytest.fixture
def http_calls() -> list[httpx.Request]:
    return []


@pytest.fixture
def http_routes() -> dict[str, Callable[[httpx.Request], httpx.Response]]:
    """Host -> handler. Tests register what they need."""
    return {}


@pytest.fixture
def transport(http_calls, http_routes) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        http_calls.append(request)
        route = http_routes.get(request.url.host)
        if route is None:
            return httpx.Response(404, json={"error": "no route"})
        return route(request)

    return httpx.MockTransport(handler)


@pytest.fixture
def services(fake_ai, transport) -> ServiceContainer:
    return ServiceContainer(
        cache=TTLCache(ttl_seconds=300),
        geocoding_gate=RateGate("nominatim", 1.1, sleep=_no_sleep),
        llm_gate=RateGate("groq", 1.0, sleep=_no_sleep),
        geocoding=NominatimService(transport=transport),
        overpass=OSMOverpassService(transport=transport),
        ai=fake_ai,
        weather=OpenWeatherService("test-key", transport=transport),
    )


@pytest.fixture
def client(services):
    app = create_app(settings=Settings(), services=services)
    with TestClient(app) as test_client:
        yield test_client
