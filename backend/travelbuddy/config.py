"""Runtime settings, read from the environment (and ``.env`` if present)."""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:5173",
]


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class Settings:
    groq_api_key: Optional[str] = None
    groq_model: str = "llama3-70b-8192"
    openweather_api_key: Optional[str] = None
    allowed_origins: list[str] = field(default_factory=lambda: list(DEFAULT_ORIGINS))
    log_level: str = "INFO"
    cache_ttl_seconds: float = 300
    geocoding_min_interval_ms: float = 1100
    llm_min_interval_ms: float = 1000

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        extra_origins = [
            o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()
        ]
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY") or None,
            groq_model=os.getenv("GROQ_MODEL") or "llama3-70b-8192",
            openweather_api_key=os.getenv("OPENWEATHER_API_KEY") or None,
            allowed_origins=DEFAULT_ORIGINS + extra_origins,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            cache_ttl_seconds=_float_env("CACHE_TTL_SECONDS", 300),
            geocoding_min_interval_ms=_float_env("GEOCODING_MIN_INTERVAL_MS", 1100),
            llm_min_interval_ms=_float_env("LLM_MIN_INTERVAL_MS", 1000),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
