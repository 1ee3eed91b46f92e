import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic_core import PydanticCustomError

from planora.core.config import Settings
from planora.core.errors import EnrichmentError, EnrichmentUnavailable
from planora.models.domain import normalize_budget
from planora.services.cache import TTLCache
from planora.services.hotels import HotelService
from planora.services.weather import WeatherService

logger = logging.getLogger("planora.api")

router = APIRouter(tags=["Enrichment"])

settings = Settings.from_env()
hotel_service = HotelService(TTLCache(settings.hotel_cache_ttl_seconds))
weather_service = WeatherService(
    settings.openweather_api_key, TTLCache(settings.weather_cache_ttl_seconds)
)


def split_dates(dates: Optional[str]):
    """'2024-05-01,2024-05-03' -> ('2024-05-01', '2024-05-03')"""
    if not dates:
        return None, None
    parts = [part.strip() for part in dates.split(",")]
    if len(parts) != 2 or not all(parts):
        return None, None
    return parts[0], parts[1]


@router.get("/hotels")
def get_hotels(destination: Optional[str] = None, budget: str = "medium", dates: Optional[str] = None):
    if not destination or not destination.strip():
        raise HTTPException(status_code=400, detail="Destination is required")
    try:
        level = normalize_budget(budget)
    except PydanticCustomError as e:
        raise HTTPException(status_code=400, detail=e.message())

    check_in, check_out = split_dates(dates)
    response, hit = hotel_service.recommendations(destination, level, check_in, check_out)
    return {**response.model_dump(by_alias=True), "cached": hit}


@router.get("/weather")
def get_weather(destination: Optional[str] = None):
    if not destination or not destination.strip():
        raise HTTPException(status_code=400, detail="Destination is required")
    try:
        report, hit = weather_service.forecast(destination)
    except EnrichmentUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except EnrichmentError as e:
        logger.error(f"Weather lookup failed for {destination}: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {**report.model_dump(by_alias=True), "cached": hit}
