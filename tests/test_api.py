import json
import threading
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from planora.api.routers import enrichment, plan
from planora.core.ai_client import AIItineraryClient
from planora.core.config import Settings
from planora.core.errors import EnrichmentError
from planora.core.orchestrator import ItineraryOrchestrator
from planora.core.validation import validate_preferences
from planora.main import app
from planora.services.cache import TTLCache
from planora.services.weather import WeatherService

client = TestClient(app, raise_server_exceptions=False)

KYOTO = {
    "destination": "Kyoto, Japan",
    "startDate": "2024-05-01",
    "endDate": "2024-05-03",
    "budget": "medium",
    "interests": ["food", "culture"],
}


@pytest.fixture(autouse=True)
def offline_orchestrator():
    """Rule-based planning only, regardless of the environment's API keys."""
    orchestrator = ItineraryOrchestrator(ai_client=AIItineraryClient(Settings()))
    with patch.object(plan, "orchestrator", orchestrator):
        yield orchestrator


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "ai": False}


def test_itinerary_endpoint_success():
    response = client.post("/itinerary", json=KYOTO)

    assert response.status_code == 200
    itinerary = response.json()["itinerary"]
    assert itinerary["destination"] == "Kyoto, Japan"
    assert itinerary["duration"] == "3 days"
    assert len(itinerary["days"]) == 3
    assert "specialRequests" in itinerary


def test_itinerary_validation_errors_are_field_keyed():
    response = client.post("/itinerary", json=dict(KYOTO, startDate="2024-05-05"))

    assert response.status_code == 400
    body = response.json()
    assert body["error"]
    assert "endDate" in body["fieldErrors"]


def test_itinerary_rejects_non_object_body():
    response = client.post("/itinerary", json=["Kyoto"])

    assert response.status_code == 400
    assert response.json()["fieldErrors"] == {"body": "Request body must be a JSON object"}


def test_itinerary_rejects_malformed_json():
    response = client.post(
        "/itinerary", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert "body" in response.json()["fieldErrors"]


def test_unexpected_errors_are_sanitized(offline_orchestrator):
    with patch.object(offline_orchestrator, "plan", side_effect=Exception("Wait 429 Error")):
        response = client.post("/itinerary", json=KYOTO)

    assert response.status_code == 500
    assert "429" not in response.json()["error"]


def test_itinerary_stream_structure():
    """Verifies POST /itinerary/stream returns NDJSON events."""
    response = client.post("/itinerary/stream", json=KYOTO)

    assert response.status_code == 200
    lines = response.text.strip().split("\n")
    assert len(lines) >= 2

    first = json.loads(lines[0])
    assert first["type"] == "status"

    last = json.loads(lines[-1])
    assert last["type"] == "result"
    assert last["data"]["destination"] == "Kyoto, Japan"


def test_stream_error_event(offline_orchestrator):
    with patch.object(offline_orchestrator, "plan_stream", side_effect=Exception("Wait 429 Error")):
        response = client.post("/itinerary/stream", json=KYOTO)

    assert response.status_code == 200  # Streaming response starts 200
    event = json.loads(response.text.strip().split("\n")[0])
    assert event["type"] == "error"
    assert "429" not in event["message"]


def test_stream_validates_before_streaming():
    response = client.post("/itinerary/stream", json=dict(KYOTO, budget="gold-plated"))

    assert response.status_code == 400
    assert "budget" in response.json()["fieldErrors"]


def test_models_unavailable_without_key():
    assert client.get("/models").status_code == 503


def test_models_lists_gemini_models(offline_orchestrator):
    model = MagicMock()
    model.name = "models/gemini-2.5-flash"
    offline_orchestrator.ai_client.client = MagicMock()
    offline_orchestrator.ai_client.client.models.list.return_value = [model]

    response = client.get("/models")

    assert response.status_code == 200
    assert response.json()["models"] == ["models/gemini-2.5-flash"]


def test_hotels_endpoint():
    response = client.get(
        "/hotels", params={"destination": "Paris, France", "budget": "luxe", "dates": "2024-05-01,2024-05-03"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["city"] == "Paris"
    assert body["budget"] == "high"
    assert len(body["hotels"]) == 3
    assert "checkin=2024-05-01" in body["hotels"][0]["bookingUrl"]


def test_hotels_requires_destination_and_known_budget():
    assert client.get("/hotels").status_code == 400
    assert client.get("/hotels", params={"destination": "Paris", "budget": "gold"}).status_code == 400


def test_weather_without_key_is_503():
    with patch.object(enrichment, "weather_service", WeatherService(None, TTLCache(300))):
        response = client.get("/weather", params={"destination": "Paris"})
    assert response.status_code == 503


def test_weather_upstream_errors_keep_status():
    service = MagicMock()
    service.forecast.side_effect = EnrichmentError("Location not found: Nowhere", status_code=404)

    with patch.object(enrichment, "weather_service", service):
        response = client.get("/weather", params={"destination": "Nowhere"})

    assert response.status_code == 404


def test_calendar_export():
    itinerary = client.post("/itinerary", json=KYOTO).json()["itinerary"]

    response = client.post("/calendar", params={"start_date": "2024-05-01"}, json=itinerary)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/calendar")
    assert "Trip_to_Kyoto_Japan.ics" in response.headers["content-disposition"]
    assert "DTSTART;VALUE=DATE:20240503" in response.text


def test_pdf_export():
    itinerary = client.post("/itinerary", json=KYOTO).json()["itinerary"]

    response = client.post("/pdf", json=itinerary)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_stream_planning_runs_off_the_event_loop(offline_orchestrator):
    threads = {}
    real_stream = offline_orchestrator.plan_stream

    def recording_validate(payload):
        threads["loop"] = threading.get_ident()
        return validate_preferences(payload)

    def recording_stream(preferences):
        threads["planner"] = threading.get_ident()
        yield from real_stream(preferences)

    with patch.object(plan, "validate_preferences", side_effect=recording_validate), patch.object(
        offline_orchestrator, "plan_stream", side_effect=recording_stream
    ):
        response = client.post("/itinerary/stream", json=KYOTO)

    assert json.loads(response.text.strip().split("\n")[-1])["type"] == "result"
    assert threads["planner"] != threads["loop"]
