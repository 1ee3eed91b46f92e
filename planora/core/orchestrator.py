import logging
from typing import Any, Iterator, List, Optional, Sequence, Union

from planora.core.ai_client import AIItineraryClient
from planora.core.errors import ProviderError
from planora.core.synthesizer import ItinerarySynthesizer, travel_days
from planora.core.validation import validate_preferences
from planora.models.domain import (
    Activity,
    DayPlan,
    DayPlanCandidate,
    Itinerary,
    ItineraryCandidate,
    Prefs,
    TravelDay,
)

logger = logging.getLogger("planora.orchestrator")

# Fields taken from the provider when present, otherwise from the fallback.
MERGED_FIELDS = ("destination", "duration", "budget", "interests", "overview", "tips")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _convert_days(
    days: Sequence[DayPlanCandidate], calendar: Sequence[TravelDay]
) -> List[DayPlan]:
    converted = []
    for index, day in enumerate(days):
        label = calendar[index].label if index < len(calendar) else ""
        converted.append(
            DayPlan(
                title=day.title,
                date=day.date or label,
                summary=day.summary,
                activities=[
                    Activity(
                        title=activity.title,
                        time=activity.time,
                        description=activity.description or activity.location or "",
                        location=activity.location,
                    )
                    for activity in day.activities
                ],
            )
        )
    return converted


def merge_itineraries(
    candidate: ItineraryCandidate,
    fallback: Itinerary,
    calendar: Sequence[TravelDay] = (),
) -> Itinerary:
    """
    Overlay provider output on the deterministic itinerary field by field.
    Days are taken whole from one source, never mixed.
    """
    merged = {}
    for name in MERGED_FIELDS:
        value = getattr(candidate, name)
        merged[name] = getattr(fallback, name) if _is_empty(value) else value

    if _is_empty(candidate.days):
        merged["days"] = fallback.days
    else:
        merged["days"] = _convert_days(candidate.days, calendar)

    return Itinerary(
        **merged,
        group_type=fallback.group_type,
        accommodation=fallback.accommodation,
        special_requests=fallback.special_requests,
    )


class ItineraryOrchestrator:
    def __init__(
        self,
        ai_client: Optional[AIItineraryClient] = None,
        synthesizer: Optional[ItinerarySynthesizer] = None,
    ):
        self.ai_client = ai_client if ai_client is not None else AIItineraryClient()
        self.synthesizer = synthesizer if synthesizer is not None else ItinerarySynthesizer()

    def plan_stream(self, preferences: Prefs) -> Iterator[Union[str, Itinerary]]:
        """
        Yields status messages, then the final Itinerary.
        1. Build the rule-based fallback.
        2. Ask the AI provider.
        3. Merge, or keep the fallback on any provider failure.
        """
        calendar = travel_days(preferences)
        yield f"Preparing a {len(calendar)}-day plan for {preferences.destination}..."
        fallback = self.synthesizer.synthesize(preferences)

        if not self.ai_client.configured:
            yield "AI provider not configured. Using the rule-based itinerary."
            yield fallback
            return

        yield "Asking the AI planner for a tailored itinerary..."
        try:
            candidate = self.ai_client.generate(preferences, calendar)
            merged = (
                merge_itineraries(candidate, fallback, calendar)
                if candidate is not None
                else None
            )
        except ProviderError as e:
            logger.warning(
                f"AI itinerary failed ({type(e).__name__}), using rule-based plan: {e}"
            )
            merged = None
        except Exception:
            logger.exception("Unexpected AI itinerary failure, using rule-based plan.")
            merged = None

        if merged is None:
            yield "AI planner unavailable. Using the rule-based itinerary."
            yield fallback
            return

        yield "Merged the AI itinerary with rule-based defaults."
        yield merged

    def plan_prefs(self, preferences: Prefs) -> Itinerary:
        result = None
        for item in self.plan_stream(preferences):
            if isinstance(item, Itinerary):
                result = item
            else:
                logger.debug(item)
        if result is None:
            raise RuntimeError("Planning failed to produce an itinerary result.")
        return result

    def plan(self, raw_request: Any) -> Itinerary:
        """Validate a raw request and plan it. Only PreferenceValidationError escapes."""
        preferences = validate_preferences(raw_request)
        return self.plan_prefs(preferences)
