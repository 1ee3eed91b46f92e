"""
Curated content for well-known interests.

The synthesizer asks the registry for the entry matching an interest string
(case-insensitive substring match on any keyword, or an exact match on one of
the short terms that would be ambiguous as substrings, like "art" in "party").
Entries are checked in registration order and the first match wins, so more
specific entries should be registered before broader ones.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from planora.models.domain import Activity


@dataclass(frozen=True)
class CuratedActivity:
    title: str
    time: str
    description: str

    def render(self, destination: str, interest: str) -> Activity:
        return Activity(
            title=self.title.format(destination=destination, interest=interest),
            time=self.time,
            description=self.description.format(
                destination=destination, interest=interest
            ),
            interest=interest,
        )


@dataclass(frozen=True)
class CuratedInterest:
    name: str
    keywords: Tuple[str, ...]
    activities: Dict[str, CuratedActivity] = field(default_factory=dict)
    summary: Optional[str] = None
    exact_terms: Tuple[str, ...] = ()

    def matches(self, interest: str) -> bool:
        text = interest.strip().lower()
        if text == self.name or text in self.exact_terms:
            return True
        return any(keyword in text for keyword in self.keywords)

    def activity_for(
        self, segment: str, destination: str, interest: str
    ) -> Optional[Activity]:
        curated = self.activities.get(segment)
        if curated is None:
            return None
        return curated.render(destination, interest)

    def summary_for(self, destination: str, interest: str) -> Optional[str]:
        if not self.summary:
            return None
        return self.summary.format(destination=destination, interest=interest)


class InterestRegistry:
    def __init__(self, entries=()):
        self._entries: List[CuratedInterest] = []
        for entry in entries:
            self.register(entry)

    def register(self, entry: CuratedInterest) -> CuratedInterest:
        self._entries.append(entry)
        return entry

    def match(self, interest: str) -> Optional[CuratedInterest]:
        for entry in self._entries:
            if entry.matches(interest):
                return entry
        return None

    def __iter__(self) -> Iterator[CuratedInterest]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


DEFAULT_INTERESTS = (
    CuratedInterest(
        name="food",
        keywords=("food", "culinary", "cuisine", "dining"),
        activities={
            "Morning": CuratedActivity(
                "Market breakfast crawl",
                "8:30 AM",
                "Graze through a morning market in {destination}, sampling pastries, street snacks and local coffee.",
            ),
            "Afternoon": CuratedActivity(
                "Hands-on cooking class",
                "1:30 PM",
                "Learn a signature dish of {destination} from a local cook, then sit down to eat what you made.",
            ),
            "Evening": CuratedActivity(
                "Neighborhood tasting dinner",
                "7:00 PM",
                "Book a table at a well-loved local spot in {destination} and order the house specialties to share.",
            ),
        },
        summary="A day built around the flavors of {destination}: markets, kitchens and a long dinner.",
    ),
    CuratedInterest(
        name="culture",
        keywords=("culture", "history", "heritage", "museum", "historic"),
        activities={
            "Morning": CuratedActivity(
                "Old town heritage walk",
                "9:00 AM",
                "Follow a guided walk through the historic core of {destination} before the crowds arrive.",
            ),
            "Afternoon": CuratedActivity(
                "Museum deep dive",
                "1:30 PM",
                "Spend the afternoon with the collection that best tells the story of {destination}.",
            ),
            "Evening": CuratedActivity(
                "Traditional performance",
                "7:30 PM",
                "Catch a traditional music, dance or theater performance rooted in the culture of {destination}.",
            ),
        },
        summary="Trace the story of {destination} through its streets, museums and living traditions.",
    ),
    CuratedInterest(
        name="nature",
        keywords=("nature", "outdoor", "hiking", "hike", "park"),
        activities={
            "Morning": CuratedActivity(
                "Sunrise trail",
                "7:30 AM",
                "Head out early for a scenic trail or viewpoint within easy reach of {destination}.",
            ),
            "Afternoon": CuratedActivity(
                "Gardens and green spaces",
                "1:30 PM",
                "Slow down in the best-loved park or botanical garden of {destination}.",
            ),
            "Evening": CuratedActivity(
                "Golden hour lookout",
                "6:30 PM",
                "Find a waterfront or hilltop spot in {destination} to watch the sun go down.",
            ),
        },
        summary="Trade the city center for trails, gardens and open views around {destination}.",
    ),
    CuratedInterest(
        name="nightlife",
        keywords=("nightlife", "night life", "clubbing", "cocktail"),
        activities={
            "Morning": CuratedActivity(
                "Slow brunch",
                "10:30 AM",
                "Start late with a relaxed brunch in a lively neighborhood of {destination}.",
            ),
            "Afternoon": CuratedActivity(
                "Rooftop warm-up",
                "4:30 PM",
                "Scout the evening's neighborhoods from a rooftop terrace in {destination}.",
            ),
            "Evening": CuratedActivity(
                "Live music and late bars",
                "9:00 PM",
                "Catch a live set, then follow the locals to the late-night bars of {destination}.",
            ),
        },
        summary="Pace the day for a late night out in {destination}.",
    ),
    CuratedInterest(
        name="art",
        keywords=("arts", "artwork", "art gallery", "street art", "design", "gallery", "galleries", "architecture"),
        exact_terms=("art",),
        activities={
            "Morning": CuratedActivity(
                "Gallery opening hours",
                "9:30 AM",
                "Visit the headline art museum of {destination} while the rooms are still quiet.",
            ),
            "Afternoon": CuratedActivity(
                "Studios and street art",
                "1:30 PM",
                "Wander the creative quarter of {destination}, dropping into independent studios and murals.",
            ),
            "Evening": CuratedActivity(
                "Design-forward dinner",
                "7:00 PM",
                "End at a restaurant or bar in {destination} known for its architecture or interiors.",
            ),
        },
        summary="Galleries, studios and buildings that shape the look of {destination}.",
    ),
    CuratedInterest(
        name="relaxation",
        keywords=("relax", "spa day", "spa treatment", "wellness", "beach"),
        exact_terms=("spa", "spas"),
        activities={
            "Morning": CuratedActivity(
                "Unhurried start",
                "9:30 AM",
                "Sleep in, then ease into the day with a long breakfast somewhere calm in {destination}.",
            ),
            "Afternoon": CuratedActivity(
                "Spa or beach time",
                "2:00 PM",
                "Book a spa session or claim a quiet stretch of shoreline near {destination}.",
            ),
            "Evening": CuratedActivity(
                "Sunset stroll",
                "6:30 PM",
                "Take an easy walk through {destination} as the evening cools down.",
            ),
        },
        summary="A deliberately slow day in {destination} with room to recharge.",
    ),
    CuratedInterest(
        name="shopping",
        keywords=("shopping", "market", "boutique"),
        exact_terms=("shop", "shops"),
        activities={
            "Morning": CuratedActivity(
                "Artisan market",
                "9:00 AM",
                "Browse local makers and crafts at a morning market in {destination}.",
            ),
            "Afternoon": CuratedActivity(
                "Boutique district",
                "1:30 PM",
                "Work through the independent boutiques and concept stores of {destination}.",
            ),
            "Evening": CuratedActivity(
                "Night market",
                "7:00 PM",
                "Finish at an evening market in {destination} for last finds and street food.",
            ),
        },
        summary="Markets and boutiques across {destination}, from morning stalls to night bazaars.",
    ),
    CuratedInterest(
        name="family",
        keywords=("family", "kids", "children"),
        activities={
            "Morning": CuratedActivity(
                "Hands-on discovery",
                "9:00 AM",
                "Start at an interactive museum, aquarium or zoo in {destination} that works for every age.",
            ),
            "Afternoon": CuratedActivity(
                "Playground picnic",
                "1:00 PM",
                "Pick up picnic supplies and let everyone unwind in a family-friendly park in {destination}.",
            ),
            "Evening": CuratedActivity(
                "Early family dinner",
                "6:00 PM",
                "Choose a relaxed, kid-friendly restaurant in {destination} and call it an early night.",
            ),
        },
        summary="A family-paced day in {destination} with plenty of breaks.",
    ),
)


def default_registry() -> InterestRegistry:
    return InterestRegistry(DEFAULT_INTERESTS)
