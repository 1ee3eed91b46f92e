import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import requests

from planora.core.errors import EnrichmentError, EnrichmentUnavailable
from planora.models.enrichment import CurrentWeather, ForecastDay, WeatherReport
from planora.services.cache import TTLCache
from planora.services.hotels import extract_city_name

logger = logging.getLogger("planora.weather")

GEO_URL = "https://api.openweathermap.org/geo/1.0/direct"
FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"

MAJOR_CITIES_COORDS: Dict[str, Tuple[float, float]] = {
    "paris": (48.8566, 2.3522),
    "tokyo": (35.6762, 139.6503),
    "kyoto": (35.0116, 135.7681),
    "new york": (40.7128, -74.006),
    "barcelona": (41.3874, 2.1686),
    "bali": (-8.3405, 115.092),
    "london": (51.5074, -0.1278),
    "rome": (41.9028, 12.4964),
    "dubai": (25.2048, 55.2708),
    "singapore": (1.3521, 103.8198),
    "sydney": (-33.8688, 151.2093),
}

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def travel_tip(forecast: List[ForecastDay]) -> str:
    """Packing advice from the forecast's rain, cold and heat."""
    if not forecast:
        return "Check the forecast and pack accordingly for your trip."

    avg_temp = sum(day.temp for day in forecast) / len(forecast)
    has_rain = any((day.precipitation or 0) > 0.3 for day in forecast)
    has_cold = any(day.temp < 10 for day in forecast)
    has_hot = any(day.temp > 30 for day in forecast)

    if has_rain and has_cold:
        return "Pack layers, a warm jacket, and waterproof gear. Rain and cooler temperatures expected."
    if has_rain:
        return "Don't forget an umbrella and a light rain jacket. Showers are in the forecast."
    if has_cold:
        return "Bring warm layers and a jacket. Temperatures will be on the cooler side."
    if has_hot:
        return "Stay hydrated and wear sunscreen. Hot weather ahead!"
    if 20 < avg_temp < 28:
        return "Perfect weather for outdoor activities. Light layers recommended."
    return "Check the forecast and pack accordingly for your trip."


def summarize_forecast(payload: dict, days: int = 5) -> Tuple[CurrentWeather, List[ForecastDay]]:
    """One forecast entry per date, preferring the 12:00 slot."""
    items = payload.get("list") or []
    if not items:
        raise EnrichmentError("Weather forecast response contained no entries.")

    first = items[0]
    current = CurrentWeather(
        temp=round(first["main"]["temp"]),
        description=first["weather"][0]["description"],
        icon=first["weather"][0]["icon"],
    )

    by_date: Dict[str, dict] = {}
    for item in items:
        day = item["dt_txt"].split(" ")[0]
        if day not in by_date or "12:00:00" in item["dt_txt"]:
            by_date[day] = item

    forecast = []
    for day, item in list(by_date.items())[:days]:
        stamp = datetime.fromtimestamp(item["dt"], tz=timezone.utc)
        forecast.append(
            ForecastDay(
                date=day,
                day=WEEKDAYS[stamp.weekday()],
                temp_min=round(item["main"]["temp_min"]),
                temp_max=round(item["main"]["temp_max"]),
                temp=round(item["main"]["temp"]),
                description=item["weather"][0]["description"],
                icon=item["weather"][0]["icon"],
                precipitation=item.get("pop"),
            )
        )
    return current, forecast


class WeatherService:
    def __init__(self, api_key: Optional[str], cache: TTLCache, timeout: float = 10.0):
        self.api_key = api_key
        self.cache = cache
        self.timeout = timeout

    def _get(self, url: str, params: dict):
        try:
            response = requests.get(
                url, params={**params, "appid": self.api_key}, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise EnrichmentError(f"Weather service unreachable: {e}") from e
        if not response.ok:
            logger.error(f"Weather request failed: {response.status_code} {response.text[:200]}")
            raise EnrichmentError(f"Weather request failed with status {response.status_code}")
        return response.json()

    def coordinates(self, city: str) -> Tuple[float, float]:
        known = MAJOR_CITIES_COORDS.get(city.lower())
        if known:
            return known
        results = self._get(GEO_URL, {"q": city, "limit": 1})
        if not results:
            raise EnrichmentError(f"Location not found: {city}", status_code=404)
        return results[0]["lat"], results[0]["lon"]

    def _fetch(self, city: str) -> WeatherReport:
        lat, lon = self.coordinates(city)
        payload = self._get(FORECAST_URL, {"lat": lat, "lon": lon, "units": "metric"})
        try:
            current, forecast = summarize_forecast(payload)
        except (KeyError, IndexError, TypeError) as e:
            raise EnrichmentError(f"Unexpected weather payload: {e}") from e
        return WeatherReport(
            city=city, current=current, forecast=forecast, travel_tip=travel_tip(forecast)
        )

    def forecast(self, destination: str) -> Tuple[WeatherReport, bool]:
        if not self.api_key:
            raise EnrichmentUnavailable("Weather service not configured")
        city = extract_city_name(destination)
        report, hit = self.cache.get_or_set(city.lower(), lambda: self._fetch(city))
        logger.info(f"Weather for {city} ({'HIT' if hit else 'MISS'})")
        return report, hit
