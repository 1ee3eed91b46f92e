import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Optional, Tuple
from urllib.parse import urlencode

from planora.models.domain import BudgetLevel
from planora.models.enrichment import Hotel, HotelsResponse
from planora.services.cache import TTLCache

logger = logging.getLogger("planora.hotels")


@dataclass(frozen=True)
class CityPricing:
    low: int
    medium: int
    high: int
    areas: Tuple[str, ...]

    def nightly(self, budget: BudgetLevel) -> int:
        return getattr(self, budget.value)


# Typical nightly rates in USD
CITY_PRICING: Dict[str, CityPricing] = {
    "bangkok": CityPricing(25, 60, 180, ("Sukhumvit", "Silom", "Riverside", "Old City", "Siam")),
    "paris": CityPricing(80, 180, 450, ("Marais", "Latin Quarter", "Champs-Élysées", "Montmartre", "Saint-Germain")),
    "tokyo": CityPricing(65, 140, 380, ("Shinjuku", "Shibuya", "Ginza", "Asakusa", "Roppongi")),
    "kyoto": CityPricing(60, 150, 400, ("Gion", "Higashiyama", "Kawaramachi", "Arashiyama", "Kyoto Station")),
    "new york": CityPricing(120, 250, 550, ("Manhattan", "Brooklyn", "Times Square", "SoHo", "Upper East Side")),
    "london": CityPricing(90, 200, 480, ("Westminster", "Covent Garden", "Shoreditch", "Kensington", "Camden")),
    "barcelona": CityPricing(70, 150, 380, ("Gothic Quarter", "Eixample", "Gracia", "Barceloneta", "El Born")),
    "bali": CityPricing(35, 85, 250, ("Seminyak", "Ubud", "Canggu", "Nusa Dua", "Sanur")),
    "dubai": CityPricing(95, 220, 600, ("Downtown", "Marina", "Palm Jumeirah", "JBR", "Business Bay")),
    "rome": CityPricing(75, 160, 400, ("Trastevere", "Centro Storico", "Vatican", "Monti", "Trevi")),
    "singapore": CityPricing(85, 170, 420, ("Marina Bay", "Orchard", "Chinatown", "Sentosa", "Clarke Quay")),
    "sydney": CityPricing(95, 190, 450, ("CBD", "Darling Harbour", "Bondi", "The Rocks", "Surry Hills")),
}

DEFAULT_PRICING = CityPricing(
    60, 130, 300, ("Downtown", "City Center", "Historic District", "Waterfront", "Old Town")
)

PRICE_FACTORS = (0.9, 1.0, 1.15)
# Booking search price window per hotel slot
PRICE_WINDOWS = ((0.85, 1.15), (0.80, 1.20), (0.75, 1.25))

UNSPLASH_PHOTOS = (
    "1566073771259-6a8506099945",
    "1542314831-068cd1dbfeeb",
    "1551882547-ff40c63fe5fa",
)

AMENITIES = {
    BudgetLevel.LOW: ["Free WiFi", "24-Hour Reception", "Luggage Storage"],
    BudgetLevel.MEDIUM: ["Free WiFi", "Breakfast Included", "Gym", "Airport Shuttle"],
    BudgetLevel.HIGH: ["Free WiFi", "Spa & Wellness", "Pool", "Fine Dining", "Concierge"],
}

RATINGS = {BudgetLevel.LOW: 3, BudgetLevel.MEDIUM: 4, BudgetLevel.HIGH: 5}


def extract_city_name(destination: str) -> str:
    return destination.split(",")[0].strip()


def get_city_pricing(city: str) -> CityPricing:
    return CITY_PRICING.get(city.lower(), DEFAULT_PRICING)


def hotel_name(city: str, area: str, budget: BudgetLevel, index: int) -> str:
    if budget is BudgetLevel.LOW:
        names = (f"{city} Express Hotel", f"Budget Inn {area}", f"{city} Hostel {area}")
    elif budget is BudgetLevel.MEDIUM:
        names = (f"Novotel {city} {area}", f"{city} Grand Hotel", f"Mercure {area}")
    else:
        names = (f"The {area} Palace", f"{city} Luxury Suites", f"Grand Hotel {city}")
    return names[index % len(names)]


def booking_url(
    city: str,
    budget: BudgetLevel,
    pricing: CityPricing,
    check_in: Optional[str],
    check_out: Optional[str],
    index: int,
    today: Optional[date] = None,
) -> str:
    if not check_in or not check_out:
        start = (today or date.today()) + timedelta(days=30)
        check_in = start.isoformat()
        check_out = (start + timedelta(days=2)).isoformat()

    low, high = PRICE_WINDOWS[index] if index < len(PRICE_WINDOWS) else PRICE_WINDOWS[0]
    base = pricing.nightly(budget)
    params = {
        "ss": city,
        "checkin": check_in,
        "checkout": check_out,
        "group_adults": "2",
        "group_children": "0",
        "no_rooms": "1",
        "nflt": f"price=USD-{math.floor(base * low)}-{math.ceil(base * high)}-1",
    }
    return f"https://www.booking.com/searchresults.html?{urlencode(params)}"


def recommend_hotels(
    destination: str,
    budget: BudgetLevel,
    check_in: Optional[str] = None,
    check_out: Optional[str] = None,
    today: Optional[date] = None,
) -> HotelsResponse:
    """Three deterministic hotel suggestions for a destination and budget level."""
    city = extract_city_name(destination)
    pricing = get_city_pricing(city)
    base = pricing.nightly(budget)
    amenities = AMENITIES[budget][:3]

    hotels = []
    for index, factor in enumerate(PRICE_FACTORS):
        area = pricing.areas[index % len(pricing.areas)]
        hotels.append(
            Hotel(
                id=f"{city.lower()}-{budget.value}-{index}",
                name=hotel_name(city, area, budget, index),
                price=round(base * factor),
                rating=RATINGS[budget],
                image=f"https://images.unsplash.com/photo-{UNSPLASH_PHOTOS[index % len(UNSPLASH_PHOTOS)]}?w=400&h=300&fit=crop&q=80",
                amenities=list(amenities),
                location=f"{area}, {city}",
                booking_url=booking_url(
                    city, budget, pricing, check_in, check_out, index, today
                ),
            )
        )
    return HotelsResponse(hotels=hotels, city=city, budget=budget.value)


class HotelService:
    def __init__(self, cache: TTLCache):
        self.cache = cache

    def recommendations(
        self,
        destination: str,
        budget: BudgetLevel,
        check_in: Optional[str] = None,
        check_out: Optional[str] = None,
    ) -> Tuple[HotelsResponse, bool]:
        city = extract_city_name(destination)
        key = (city.lower(), budget.value, check_in or "default", check_out or "default")
        response, hit = self.cache.get_or_set(
            key, lambda: recommend_hotels(destination, budget, check_in, check_out)
        )
        logger.info(f"Hotel recommendations for {key} ({'HIT' if hit else 'MISS'})")
        return response, hit
