"""AI reasoning: Groq chat completions for planning and chat."""

from .service import (
    AIReasoningService,
    Completion,
    GroqReasoningService,
)

__all__ = [
    "AIReasoningService",
    "Completion",
    "GroqReasoningService",
]
