"""AI Reasoning service backed by Groq.

Provider-agnostic base class with one concrete implementation:
- GroqReasoningService: Groq chat completions (``GROQ_MODEL``)

The base class owns prompt construction and response handling. Subclasses
only implement ``_generate()`` for their API client.

The model never supplies coordinates on its own authority: trip plans are
reconciled against the user's selected places afterwards (see
``travelbuddy.services.itinerary.enrichment``).
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from travelbuddy.models import (
    ItineraryDay,
    LLMResponseParseError,
    LLMTripPlan,
    PlaceInput,
    UpstreamError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
)
from travelbuddy.services.itinerary import parse_itinerary

logger = logging.getLogger(__name__)

# ── Trip planner (strict JSON) ──
PLANNER_SYSTEM_PROMPT = """You are an expert travel planner assistant. Create detailed day-by-day itineraries that are practical and enjoyable.

CRITICAL INSTRUCTIONS:
1. You MUST respond with ONLY valid JSON in the exact format specified
2. Include ALL provided places across the specified days
3. Distribute places logically across days (don't overcrowd)
4. Consider travel time and location proximity
5. Assign appropriate times: morning (9AM-12PM), afternoon (12PM-6PM), evening (6PM-10PM)
6. Provide rich descriptions and context for each place
7. Suggest appropriate ratings and categories based on place types

Budget Guidelines:
- low: Focus on free attractions, street food, walking, public transport
- moderate: Mix of paid attractions, casual dining, some taxi rides
- luxury: Premium experiences, fine dining, private transport, exclusive tours

Response Format: Return ONLY valid JSON with no additional text or explanations."""

# ── Free-text itinerary ──
ITINERARY_SYSTEM_PROMPT = (
    "You are a professional travel itinerary planner. Create detailed, realistic day-by-day "
    "schedules that optimize travel time, consider opening hours, and balance activities with "
    "rest. Always include specific timing, locations, and practical details like transportation "
    "between activities."
)

# ── Travel chat ──
CHAT_SYSTEM_PROMPT = """You are a knowledgeable and friendly travel assistant. You help users with:
- Travel planning and destination advice
- Local customs, culture, and etiquette
- Transportation and accommodation recommendations
- Food and dining suggestions
- Activities and attractions
- Budget planning and money-saving tips
- Travel safety and health considerations
- Visa, documentation, and travel requirements
- Weather and best times to visit
- Local language tips and communication

Always provide helpful, accurate, and practical advice. Be conversational but informative.
If you're not sure about current information (like visa requirements or travel restrictions),
advise the user to check official sources."""


@dataclass
class Completion:
    """Text returned by the provider plus accounting info."""
    text: str
    model: str
    total_tokens: Optional[int] = None


class AIReasoningService(ABC):
    """Base class for AI reasoning services."""

    _timeout: float

    @abstractmethod
    async def _generate(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        timeout: float | None = None,
    ) -> Completion:
        """Send prompt to the AI provider and return the completion.

        Raises:
            UpstreamError: Provider failure (status code already mapped).
            UpstreamTimeoutError: No answer within the timeout.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name for logging."""
        ...

    # ── Utilities ─────────────────────────────────────────────────────

    @staticmethod
    def _sanitize_input(text: str, max_length: int = 500) -> str:
        """Strip control characters and cap length before prompting."""
        cleaned = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)
        return cleaned[:max_length].strip()

    @staticmethod
    def _extract_json(text: str) -> str:
        """Drop markdown code fences around a JSON answer."""
        text = re.sub(r"```json\s*", "", text)
        text = re.sub(r"```\s*", "", text)
        return text.strip()

    # ── Prompts ───────────────────────────────────────────────────────

    @staticmethod
    def build_trip_prompt(
        destination: str, places: list[PlaceInput], days: int, budget: str
    ) -> str:
        place_lines = "\n".join(
            f"- {p.name} ({p.lat}, {p.lon})" + (f" [{p.type}]" if p.type else "")
            for p in places
        )
        return f"""Create a {days}-day travel itinerary for {destination} with a {budget} budget.

Places to include (with coordinates):
{place_lines}

Requirements:
1. Include ALL {len(places)} places across {days} days
2. Distribute places logically by proximity and travel time
3. Each day should have 2-4 activities maximum
4. Consider {budget} budget constraints
5. Assign morning, afternoon, or evening times appropriately
6. Provide rich descriptions for each place
7. Suggest realistic ratings (1-5) and categories

Respond with this EXACT JSON format:
{{
  "destination": "{destination}",
  "days": {days},
  "budget": "{budget}",
  "itinerary": [
    {{
      "day": 1,
      "places": [
        {{
          "name": "Exact Place Name",
          "lat": "coordinates from input",
          "lon": "coordinates from input",
          "time": "morning",
          "type": "attraction type if available",
          "description": "Rich description of what to expect",
          "rating": 4.2,
          "address": "General area or street",
          "category": "Main category like 'tourist_attraction'",
          "subcategory": "Specific type like 'museum' or 'park'"
        }}
      ]
    }}
  ]
}}

Important: Use the EXACT place names and coordinates I provided above."""

    @staticmethod
    def build_itinerary_prompt(destination: str, days: int, interests: list[str]) -> str:
        return f"""Create a {days}-day detailed itinerary for {destination} based on these interests: {', '.join(interests)}.

Requirements:
- Provide exactly {days} days of activities
- Each day should have 4-6 specific activities
- Include timing suggestions (morning, afternoon, evening)
- Consider travel time between locations
- Mix must-see attractions with local experiences
- Include meal suggestions and rest breaks
- Provide brief descriptions for each activity

Format your response as a structured day-by-day breakdown. For each day, list the activities as separate bullet points.

Example format:
Day 1:
• Morning: Visit [Location] - [Brief description]
• Late Morning: [Activity] - [Brief description]
• Afternoon: [Activity] - [Brief description]
• etc."""

    # ── Shared implementations ────────────────────────────────────────

    async def plan_trip(
        self,
        destination: str,
        places: list[PlaceInput],
        days: int,
        budget: str,
    ) -> tuple[LLMTripPlan, Completion]:
        """Ask the model for a structured, day-by-day trip plan.

        Raises:
            LLMResponseParseError: The reply is not JSON, or lacks the
                destination/days/budget/itinerary fields.
        """
        destination = self._sanitize_input(destination, max_length=200)
        prompt = self.build_trip_prompt(destination, places, days, budget)
        completion = await self._generate(
            prompt, PLANNER_SYSTEM_PROMPT, temperature=0.3, max_tokens=4000
        )
        if not completion.text:
            raise UpstreamError(
                "Empty response from AI service",
                details="The AI failed to generate an itinerary",
            )
        logger.info(f"[{self.provider_name}] Raw plan preview: {completion.text[:200]}...")

        try:
            payload = json.loads(self._extract_json(completion.text))
        except json.JSONDecodeError as e:
            logger.error(f"[{self.provider_name}] Failed to parse plan JSON: {e}")
            raise LLMResponseParseError() from e

        try:
            plan = LLMTripPlan.model_validate(payload)
        except ValidationError as e:
            logger.error(f"[{self.provider_name}] Incomplete plan: {e}")
            raise LLMResponseParseError(
                "AI returned incomplete itinerary",
                "Missing required fields: destination, days, budget, or itinerary array",
            ) from e
        return plan, completion

    async def generate_itinerary(
        self, destination: str, days: int, interests: list[str]
    ) -> list[ItineraryDay]:
        """Free-text itinerary, parsed into exactly ``days`` entries."""
        destination = self._sanitize_input(destination, max_length=200)
        interests = [self._sanitize_input(i, max_length=50) for i in interests]
        prompt = self.build_itinerary_prompt(destination, days, interests)
        completion = await self._generate(prompt, ITINERARY_SYSTEM_PROMPT, temperature=0.6)
        return parse_itinerary(completion.text, days)

    async def chat(self, message: str, context: str | None = None) -> str:
        prompt = message
        if context:
            prompt = (
                f"Context from our previous conversation:\n{context}\n\n"
                f"Current question: {message}"
            )
        completion = await self._generate(prompt, CHAT_SYSTEM_PROMPT, temperature=0.8)
        return completion.text


# ═══════════════════════════════════════════════════════════════════════
# Provider: Groq
# ═══════════════════════════════════════════════════════════════════════

class GroqReasoningService(AIReasoningService):
    """Groq chat completions via the official SDK."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "llama3-70b-8192",
        timeout_seconds: float = 60.0,
    ) -> None:
        from groq import AsyncGroq

        if not api_key:
            raise ValueError("GROQ_API_KEY not provided")
        self._client = AsyncGroq(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self._model_name = model_name
        self._timeout = timeout_seconds
        logger.info(f"[AI] Groq ready: {self._model_name}")

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def provider_name(self) -> str:
        return "Groq"

    async def close(self) -> None:
        await self._client.close()

    async def _generate(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        timeout: float | None = None,
    ) -> Completion:
        import groq

        t = timeout or self._timeout
        try:
            resp = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model_name,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=temperature,
                    max_tokens=max_tokens,
                    top_p=1,
                    stream=False,
                ),
                timeout=t,
            )
        except (asyncio.TimeoutError, groq.APITimeoutError) as e:
            logger.warning(f"[Groq] Timeout after {t}s")
            raise UpstreamTimeoutError(
                "AI service timeout - the request took too long",
                details="Please try again with fewer places or shorter trip duration",
            ) from e
        except groq.RateLimitError as e:
            logger.warning(f"[Groq] Rate limited: {e}")
            raise UpstreamRateLimitedError(
                "Too many requests to AI service",
                details="Please wait a moment and try again",
                upstream_status=429,
            ) from e
        except groq.AuthenticationError as e:
            # Key problems are logged, never echoed to the client.
            logger.error(f"[Groq] Authentication failed: {e}")
            raise UpstreamError(
                "AI service temporarily unavailable",
                details="Please try again in a few minutes",
                upstream_status=401,
            ) from e
        except groq.APIConnectionError as e:
            logger.warning(f"[Groq] Connection error: {e}")
            raise UpstreamError(
                "Failed to connect to AI service",
                details="Please check your internet connection and try again",
            ) from e
        except groq.APIStatusError as e:
            logger.warning(f"[Groq] Error {e.status_code}: {e}")
            raise UpstreamError(
                "AI service temporarily unavailable",
                details="Please try again in a few minutes",
                upstream_status=e.status_code,
            ) from e

        if not resp.choices:
            raise UpstreamError(
                "Empty response from AI service",
                details="The AI failed to generate an itinerary",
            )
        text = (resp.choices[0].message.content or "").strip()
        tokens = resp.usage.total_tokens if resp.usage else None
        return Completion(text=text, model=self._model_name, total_tokens=tokens)
