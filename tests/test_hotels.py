import math
from datetime import date
from urllib.parse import parse_qs, urlparse

from planora.models.domain import BudgetLevel
from planora.services.cache import TTLCache
from planora.services.hotels import (
    DEFAULT_PRICING,
    HotelService,
    booking_url,
    extract_city_name,
    get_city_pricing,
    recommend_hotels,
)


def query(url):
    return {key: values[0] for key, values in parse_qs(urlparse(url).query).items()}


def test_extract_city_name():
    assert extract_city_name("Kyoto, Japan") == "Kyoto"
    assert extract_city_name("  Paris ") == "Paris"


def test_unknown_city_uses_default_pricing():
    assert get_city_pricing("Atlantis") is DEFAULT_PRICING
    assert get_city_pricing("TOKYO").medium == 140


def test_three_hotels_priced_around_city_rate():
    response = recommend_hotels("Tokyo, Japan", BudgetLevel.MEDIUM, "2024-05-01", "2024-05-03")

    assert response.city == "Tokyo"
    assert response.budget == "medium"
    assert [hotel.price for hotel in response.hotels] == [126, 140, 161]
    assert all(hotel.rating == 4 for hotel in response.hotels)
    assert response.hotels[0].location == "Shinjuku, Tokyo"
    assert len({hotel.id for hotel in response.hotels}) == 3


def test_booking_url_carries_dates_and_price_window():
    pricing = get_city_pricing("Paris")
    params = query(booking_url("Paris", BudgetLevel.LOW, pricing, "2024-05-01", "2024-05-03", 0))

    assert params["ss"] == "Paris"
    assert params["checkin"] == "2024-05-01"
    assert params["checkout"] == "2024-05-03"
    low, high = math.floor(80 * 0.85), math.ceil(80 * 1.15)
    assert params["nflt"] == f"price=USD-{low}-{high}-1"
    assert 67 <= low < 80 < high <= 93


def test_booking_url_defaults_to_a_month_out():
    pricing = get_city_pricing("Paris")
    url = booking_url("Paris", BudgetLevel.HIGH, pricing, None, None, 1, today=date(2024, 1, 1))
    params = query(url)

    assert params["checkin"] == "2024-01-31"
    assert params["checkout"] == "2024-02-02"


def test_recommendations_are_deterministic():
    first = recommend_hotels("Bali", BudgetLevel.HIGH, today=date(2024, 1, 1))
    second = recommend_hotels("Bali", BudgetLevel.HIGH, today=date(2024, 1, 1))
    assert first == second


def test_service_caches_by_city_budget_and_dates():
    service = HotelService(TTLCache(1800))

    _, hit = service.recommendations("Rome, Italy", BudgetLevel.LOW, "2024-05-01", "2024-05-02")
    assert not hit
    _, hit = service.recommendations("rome", BudgetLevel.LOW, "2024-05-01", "2024-05-02")
    assert hit
    _, hit = service.recommendations("Rome", BudgetLevel.HIGH, "2024-05-01", "2024-05-02")
    assert not hit
