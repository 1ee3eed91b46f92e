from typing import List, Optional

from pydantic import Field

from planora.models.domain import CamelModel


class Hotel(CamelModel):
    id: str
    name: str
    price: int
    currency: str = "USD"
    rating: int
    image: str
    amenities: List[str] = Field(default_factory=list)
    location: str
    booking_url: str


class HotelsResponse(CamelModel):
    hotels: List[Hotel]
    city: str
    budget: str
    currency: str = "USD"


class CurrentWeather(CamelModel):
    temp: int
    description: str
    icon: str


class ForecastDay(CamelModel):
    date: str
    day: str
    temp_min: int
    temp_max: int
    temp: int
    description: str
    icon: str
    precipitation: Optional[float] = None


class WeatherReport(CamelModel):
    city: str
    current: CurrentWeather
    forecast: List[ForecastDay]
    travel_tip: str
