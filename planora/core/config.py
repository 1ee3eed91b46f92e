import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env(key: str) -> Optional[str]:
    value = os.environ.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_float(key: str, default: float) -> float:
    raw = _env(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    google_api_key: Optional[str] = None
    gemini_model: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    ai_timeout_seconds: float = 30.0
    openweather_api_key: Optional[str] = None
    hotel_cache_ttl_seconds: float = 30 * 60
    weather_cache_ttl_seconds: float = 5 * 60
    log_file: str = "server.log"

    @property
    def ai_configured(self) -> bool:
        return bool(self.google_api_key or self.openrouter_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            google_api_key=_env("GOOGLE_API_KEY"),
            gemini_model=_env("GEMINI_MODEL"),
            openrouter_api_key=_env("OPENROUTER_API_KEY"),
            ai_timeout_seconds=_env_float("AI_TIMEOUT_SECONDS", 30.0),
            openweather_api_key=_env("OPENWEATHER_API_KEY"),
            hotel_cache_ttl_seconds=_env_float("HOTEL_CACHE_TTL_SECONDS", 30 * 60),
            weather_cache_ttl_seconds=_env_float("WEATHER_CACHE_TTL_SECONDS", 5 * 60),
            log_file=_env("PLANORA_LOG_FILE") or "server.log",
        )
