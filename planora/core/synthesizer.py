from datetime import date, timedelta
from typing import List, Optional, Tuple

from planora.core.errors import SynthesisInvariantViolation
from planora.core.interests import InterestRegistry, default_registry
from planora.models.domain import Activity, DayPlan, Itinerary, Prefs, TravelDay

# strftime's %B depends on the process locale, labels must not.
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

SEGMENTS: Tuple[Tuple[str, str], ...] = (
    ("Morning", "8:30 AM"),
    ("Afternoon", "1:30 PM"),
    ("Evening", "7:00 PM"),
)

DEFAULT_TIPS = (
    "Block off a little buffer time each day for spontaneous discoveries.",
    "Check opening hours a day ahead, local schedules can shift seasonally.",
    "Bookmark directions offline in case your connection drops while exploring.",
)

NO_INTEREST_FOCUS = "local highlights"
NO_INTEREST_SUMMARY = "a mix of culture, dining, and relaxation"


def format_date_label(day: date) -> str:
    return f"{MONTH_NAMES[day.month - 1]} {day.day}, {day.year}"


def format_duration(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


def travel_days(prefs: Prefs) -> List[TravelDay]:
    """One TravelDay per calendar day from start_date to end_date inclusive."""
    days = []
    current = prefs.start_date
    number = 1
    while current <= prefs.end_date:
        days.append(
            TravelDay(
                day_number=number,
                iso_date=current.isoformat(),
                label=format_date_label(current),
            )
        )
        current += timedelta(days=1)
        number += 1
    return days


def interest_for(interests, day_index: int, segment_index: int) -> Optional[str]:
    if not interests:
        return None
    return interests[(day_index + segment_index) % len(interests)]


class ItinerarySynthesizer:
    """
    Rule-based itinerary generator used whenever the AI provider is unavailable.
    Pure: the same Prefs always produce the same Itinerary.
    """

    def __init__(self, registry: Optional[InterestRegistry] = None):
        self.registry = registry if registry is not None else default_registry()

    def _generic_activity(self, segment: str, time: str, destination: str) -> Activity:
        return Activity(
            title=f"{segment} adventure",
            time=time,
            description=(
                f"Spend your {segment.lower()} discovering a new corner of {destination}. "
                "Mix in cafes, museums, or parks based on the vibe you're feeling."
            ),
        )

    def _interest_activity(
        self, segment: str, time: str, destination: str, interest: str
    ) -> Activity:
        curated = self.registry.match(interest)
        if curated is not None:
            activity = curated.activity_for(segment, destination, interest)
            if activity is not None:
                return activity
        return Activity(
            title=f"{segment} – {interest}",
            time=time,
            description=(
                f"Immerse yourself in {interest.lower()} experiences around {destination}. "
                "Reserve a little time to wander and see what surprises you find."
            ),
            interest=interest,
        )

    def build_activities(self, prefs: Prefs, day_index: int) -> List[Activity]:
        activities = []
        for segment_index, (segment, time) in enumerate(SEGMENTS):
            interest = interest_for(prefs.interests, day_index, segment_index)
            if interest is None:
                activities.append(
                    self._generic_activity(segment, time, prefs.destination)
                )
            else:
                activities.append(
                    self._interest_activity(segment, time, prefs.destination, interest)
                )
        return activities

    def build_summary(self, prefs: Prefs, day_index: int) -> str:
        focus = interest_for(prefs.interests, day_index, 0)
        if focus is not None:
            curated = self.registry.match(focus)
            if curated is not None:
                summary = curated.summary_for(prefs.destination, focus)
                if summary:
                    return summary
        else:
            focus = NO_INTEREST_FOCUS
        return (
            f"Spend the day exploring {focus.lower()} in {prefs.destination}. "
            "Balance anchor activities with time to relax and soak in the atmosphere."
        )

    def build_overview(self, prefs: Prefs, day_count: int) -> str:
        if prefs.interests:
            interest_summary = ", ".join(prefs.interests[:3])
        else:
            interest_summary = NO_INTEREST_SUMMARY
        return (
            f"A {day_count}-day escape to {prefs.destination} tailored to a "
            f"{prefs.budget.value} budget. Expect a balance of must-see highlights "
            f"with time to follow your curiosity around {interest_summary}."
        )

    def synthesize(self, prefs: Prefs) -> Itinerary:
        days = []
        for index, day in enumerate(travel_days(prefs)):
            days.append(
                DayPlan(
                    title=f"Day {day.day_number}",
                    date=day.label,
                    summary=self.build_summary(prefs, index),
                    activities=self.build_activities(prefs, index),
                )
            )

        return Itinerary(
            destination=prefs.destination,
            duration=format_duration(len(days)),
            budget=prefs.budget.value,
            interests=list(prefs.interests),
            overview=self.build_overview(prefs, len(days)),
            tips=list(DEFAULT_TIPS),
            days=days,
            group_type=prefs.group_type,
            accommodation=prefs.accommodation,
            special_requests=prefs.special_requests,
        )


def synthesize_itinerary(prefs: Prefs) -> Itinerary:
    return ItinerarySynthesizer().synthesize(prefs)


def check_itinerary_invariants(itinerary: Itinerary) -> Itinerary:
    if not itinerary.days:
        raise SynthesisInvariantViolation("Itinerary has no days.")
    for day in itinerary.days:
        if not day.activities:
            raise SynthesisInvariantViolation(f"{day.title} has no activities.")
        for activity in day.activities:
            if not (activity.title and activity.time and activity.description):
                raise SynthesisInvariantViolation(
                    f"{day.title} has an incomplete activity: {activity.title!r}"
                )
    return itinerary
