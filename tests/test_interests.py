import pytest

from planora.core.interests import (
    DEFAULT_INTERESTS,
    CuratedInterest,
    InterestRegistry,
    default_registry,
)
from planora.core.synthesizer import synthesize_itinerary
from planora.core.validation import validate_preferences


def test_default_registry_matches_case_insensitive_substrings():
    registry = default_registry()

    assert registry.match("Street FOOD").name == "food"
    assert registry.match("Museum hopping").name == "culture"
    assert registry.match("hiking").name == "nature"
    assert registry.match("Quantum Physics") is None
    assert len(registry) == len(DEFAULT_INTERESTS)


def test_every_default_entry_has_three_segments_and_a_summary():
    for entry in default_registry():
        assert set(entry.activities) == {"Morning", "Afternoon", "Evening"}
        assert "{destination}" in entry.summary


def test_registration_order_breaks_ties():
    registry = InterestRegistry()
    registry.register(CuratedInterest(name="first", keywords=("food",)))
    registry.register(CuratedInterest(name="second", keywords=("food", "market")))

    assert registry.match("food market").name == "first"
    assert registry.match("night market").name == "second"


def test_curated_activity_renders_destination():
    food = default_registry().match("food")
    activity = food.activity_for("Morning", "Lisbon", "food")

    assert "Lisbon" in activity.description or "Lisbon" in activity.title
    assert activity.interest == "food"
    assert food.summary_for("Lisbon", "food")


@pytest.mark.parametrize("interest", ["party", "Spanish lessons", "pottery workshop", "Martial"])
def test_short_words_inside_other_words_do_not_match(interest):
    assert default_registry().match(interest) is None


@pytest.mark.parametrize(
    "interest, expected",
    [("Art", "art"), ("street art", "art"), ("Spa", "relaxation"), ("spa day", "relaxation"), ("shop", "shopping")],
)
def test_short_terms_match_exactly(interest, expected):
    assert default_registry().match(interest).name == expected


def test_unmatched_interest_falls_through_to_template():
    itinerary = synthesize_itinerary(
        validate_preferences(
            {
                "destination": "Lisbon",
                "startDate": "2024-05-01",
                "endDate": "2024-05-01",
                "budget": "low",
                "interests": ["party"],
            }
        )
    )
    titles = [activity.title for activity in itinerary.days[0].activities]
    assert titles == ["Morning – party", "Afternoon – party", "Evening – party"]
