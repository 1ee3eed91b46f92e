import json
import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import requests
from google import genai
from google.genai import types
from pydantic import ValidationError

from planora.core.config import Settings
from planora.core.errors import (
    ProviderContractError,
    ProviderError,
    ProviderTransportError,
)
from planora.core.synthesizer import travel_days
from planora.models.domain import ItineraryCandidate, Prefs, TravelDay

logger = logging.getLogger("planora.ai")


# Prioritized list of models to try
MODEL_CANDIDATES = [
    "gemini-2.5-flash",
    "gemini-2.0-flash",
    "gemini-flash-latest",
]

OPENROUTER_CANDIDATES = [
    "google/gemini-2.0-flash-exp:free",
    "meta-llama/llama-3.3-70b-instruct:free",
]

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"

SYSTEM_INSTRUCTION = """You are an expert travel planner.
Produce balanced, realistic itineraries that reflect the highlights of the destination and the traveler's stated interests.
- Cover every travel day you are given, in order, with one entry in "days" per travel day.
- Do not repeat the same marquee attraction on more than one day unless the traveler explicitly asks for it.
- Mix cultural, outdoor, dining and neighborhood experiences across the trip.
- Give every day a title, the travel day's date label, a one-paragraph summary and at least three activities with a time.
- Respond with JSON only. No markdown, no commentary."""

# (system instruction, user message, response schema) -> raw response text
ProviderCall = Callable[[str, str, Dict], str]

_FENCE_PATTERN = re.compile(r"```[a-zA-Z0-9_-]*\s*(.*?)```", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences a provider may wrap around its JSON."""
    cleaned = text.strip()
    match = _FENCE_PATTERN.search(cleaned)
    if match:
        return match.group(1).strip()
    # Unterminated fence
    return cleaned.replace("```json", "").replace("```", "").strip()


def itinerary_json_schema(min_days: int) -> Dict:
    """JSON schema mirroring the Itinerary shape, with one day per travel day at least."""
    activity = {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "time": {"type": "string"},
            "description": {"type": "string"},
            "location": {"type": "string"},
        },
        "required": ["title", "time", "description"],
    }
    day = {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "date": {"type": "string"},
            "summary": {"type": "string"},
            "activities": {"type": "array", "items": activity, "minItems": 1},
        },
        # Missing dates are filled from the travel-day labels
        "required": ["title", "summary", "activities"],
    }
    return {
        "type": "object",
        "properties": {
            "destination": {"type": "string"},
            "duration": {"type": "string"},
            "budget": {"type": "string"},
            "interests": {"type": "array", "items": {"type": "string"}},
            "overview": {"type": "string"},
            "tips": {"type": "array", "items": {"type": "string"}},
            "days": {"type": "array", "items": day, "minItems": max(min_days, 1)},
        },
        "required": [
            "destination",
            "duration",
            "budget",
            "interests",
            "overview",
            "tips",
            "days",
        ],
    }


def parse_itinerary_response(response_text: str, min_days: int) -> ItineraryCandidate:
    """
    Parses the provider's JSON, accepting either {"itinerary": {...}} or the bare
    itinerary object. Raises ProviderContractError on anything else.
    """
    cleaned_text = strip_code_fences(response_text or "")
    try:
        data = json.loads(cleaned_text)
    except json.JSONDecodeError as e:
        logger.debug(f"RAW Response: {response_text}")
        raise ProviderContractError(f"Provider response is not valid JSON: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("itinerary"), dict):
        data = data["itinerary"]
    if not isinstance(data, dict):
        raise ProviderContractError("Provider response must be a JSON object.")

    try:
        candidate = ItineraryCandidate.model_validate(data)
    except ValidationError as e:
        raise ProviderContractError(
            f"Provider response does not match the itinerary schema: {e}"
        ) from e

    returned = len(candidate.days or [])
    if returned < min_days:
        raise ProviderContractError(
            f"Provider returned {returned} days, expected at least {min_days}."
        )
    return candidate


def build_user_message(prefs: Prefs, days: Sequence[TravelDay]) -> str:
    payload = {
        "request": prefs.model_dump(mode="json", by_alias=True, exclude_none=True),
        "travelDays": [day.model_dump(by_alias=True) for day in days],
    }
    return (
        f"Plan a {len(days)}-day trip to {prefs.destination}.\n"
        "Trip request and the travel days to cover:\n"
        f"{json.dumps(payload, indent=2)}"
    )


class AIItineraryClient:
    """
    Calls the generative provider with a strict JSON contract.
    generate() returns None when no provider credential is configured.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        providers: Optional[List[Tuple[str, ProviderCall]]] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.timeout = self.settings.ai_timeout_seconds
        self.client = None
        self._providers = providers

        if self.settings.google_api_key:
            self.client = genai.Client(
                api_key=self.settings.google_api_key,
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        elif providers is None and not self.settings.openrouter_api_key:
            logger.warning("No AI provider key configured, using rule-based itineraries.")

    @property
    def configured(self) -> bool:
        if self._providers is not None:
            return bool(self._providers)
        return self.client is not None or bool(self.settings.openrouter_api_key)

    def model_candidates(self) -> List[str]:
        models = []
        if self.settings.gemini_model:
            models.append(self.settings.gemini_model)
        models.extend(m for m in MODEL_CANDIDATES if m not in models)
        return models

    def _gemini_call(self, model_name: str) -> ProviderCall:
        def call(system: str, user: str, schema: Dict) -> str:
            config = types.GenerateContentConfig(
                system_instruction=system,
                response_mime_type="application/json",
                response_json_schema=schema,
            )
            try:
                response = self.client.models.generate_content(
                    model=model_name, contents=user, config=config
                )
            except Exception as e:
                raise ProviderTransportError(f"{model_name}: {e}") from e
            text = response.text
            if not text:
                raise ProviderContractError(f"{model_name} returned an empty response.")
            return text

        return call

    def _openrouter_call(self, model_name: str) -> ProviderCall:
        def call(system: str, user: str, schema: Dict) -> str:
            headers = {
                "Authorization": f"Bearer {self.settings.openrouter_api_key}",
                "Content-Type": "application/json",
                "User-Agent": "Planora/1.0",
            }
            data = {
                "model": model_name,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                "response_format": {
                    "type": "json_schema",
                    "json_schema": {"name": "itinerary", "schema": schema},
                },
            }
            try:
                response = requests.post(
                    OPENROUTER_URL, headers=headers, json=data, timeout=self.timeout
                )
            except requests.RequestException as e:
                raise ProviderTransportError(f"{model_name}: {e}") from e
            if not response.ok:
                raise ProviderTransportError(
                    f"{model_name}: HTTP {response.status_code} {response.text[:200]}"
                )
            try:
                result = response.json()
                return str(result["choices"][0]["message"]["content"])
            except (ValueError, KeyError, IndexError, TypeError) as e:
                raise ProviderContractError(
                    f"{model_name}: unexpected completion payload ({e})"
                ) from e

        return call

    def providers(self) -> List[Tuple[str, ProviderCall]]:
        """Provider calls in preference order: pinned/Gemini models, then OpenRouter."""
        if self._providers is not None:
            return list(self._providers)
        chain = []
        if self.client is not None:
            chain.extend((m, self._gemini_call(m)) for m in self.model_candidates())
        if self.settings.openrouter_api_key:
            chain.extend(
                (f"openrouter:{m}", self._openrouter_call(m))
                for m in OPENROUTER_CANDIDATES
            )
        return chain

    def generate(
        self, prefs: Prefs, days: Optional[Sequence[TravelDay]] = None
    ) -> Optional[ItineraryCandidate]:
        """
        Tries each provider in order, one at a time; the first schema-valid
        response wins. Raises the last ProviderError when every candidate fails.
        """
        if not self.configured:
            return None

        days = list(days) if days is not None else travel_days(prefs)
        user_message = build_user_message(prefs, days)
        schema = itinerary_json_schema(len(days))

        last_error: Optional[ProviderError] = None
        for name, call in self.providers():
            try:
                logger.info(f"Attempting itinerary generation with {name}...")
                response_text = call(SYSTEM_INSTRUCTION, user_message, schema)
                candidate = parse_itinerary_response(response_text, len(days))
                logger.info(f"Success with {name}!")
                return candidate
            except ProviderError as e:
                logger.warning(f"Provider {name} failed: {e}")
                last_error = e

        if last_error is None:
            raise ProviderTransportError("No provider candidates are available.")
        raise last_error

    def list_models(self) -> List[str]:
        if self.client is None:
            return []
        try:
            return [model.name for model in self.client.models.list()]
        except Exception as e:
            raise ProviderTransportError(f"Listing models failed: {e}") from e
