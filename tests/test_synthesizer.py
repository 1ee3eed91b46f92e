from datetime import date

import pytest

from planora.core.errors import SynthesisInvariantViolation
from planora.core.interests import CuratedActivity, CuratedInterest, InterestRegistry
from planora.core.synthesizer import (
    ItinerarySynthesizer,
    check_itinerary_invariants,
    format_date_label,
    synthesize_itinerary,
    travel_days,
)
from planora.core.validation import validate_preferences
from planora.models.domain import DayPlan, Itinerary


def make_prefs(**overrides):
    request = {
        "destination": "Kyoto, Japan",
        "startDate": "2024-05-01",
        "endDate": "2024-05-03",
        "budget": "medium",
        "interests": ["food", "culture"],
    }
    request.update(overrides)
    return validate_preferences(request)


def test_kyoto_scenario():
    itinerary = synthesize_itinerary(make_prefs())

    assert len(itinerary.days) == 3
    assert itinerary.duration == "3 days"
    assert "Kyoto, Japan" in itinerary.overview
    assert "medium" in itinerary.overview
    assert itinerary.budget == "medium"
    assert [day.date for day in itinerary.days] == ["May 1, 2024", "May 2, 2024", "May 3, 2024"]
    assert [day.title for day in itinerary.days] == ["Day 1", "Day 2", "Day 3"]


@pytest.mark.parametrize(
    "start, end, expected_days",
    [
        ("2024-05-01", "2024-05-01", 1),
        ("2024-02-27", "2024-03-01", 4),
        ("2023-12-30", "2024-01-02", 4),
        ("2024-01-01", "2024-01-14", 14),
    ],
)
def test_one_day_plan_per_calendar_day(start, end, expected_days):
    itinerary = synthesize_itinerary(make_prefs(startDate=start, endDate=end))

    assert len(itinerary.days) == expected_days
    for day in itinerary.days:
        assert len(day.activities) == 3
        for activity in day.activities:
            assert activity.title and activity.time and activity.description
    check_itinerary_invariants(itinerary)


def test_single_day_trip_uses_singular_duration():
    itinerary = synthesize_itinerary(make_prefs(endDate="2024-05-01"))
    assert itinerary.duration == "1 day"


def test_empty_interests_take_the_generic_path():
    itinerary = synthesize_itinerary(make_prefs(interests=[]))

    for day in itinerary.days:
        assert "local highlights" in day.summary
        for activity in day.activities:
            assert activity.title.endswith("adventure")
            assert activity.interest is None


def test_round_robin_interest_assignment():
    prefs = make_prefs(interests=["culture", "food"], endDate="2024-05-04")
    itinerary = synthesize_itinerary(prefs)

    assert len(itinerary.days) == 4
    for day_index, day in enumerate(itinerary.days):
        for segment_index, activity in enumerate(day.activities):
            expected = prefs.interests[(day_index + segment_index) % len(prefs.interests)]
            assert activity.interest == expected

    first_day = [activity.interest for activity in itinerary.days[0].activities]
    second_day = [activity.interest for activity in itinerary.days[1].activities]
    assert first_day == ["culture", "food", "culture"]
    assert second_day == ["food", "culture", "food"]


def test_template_segments_have_fixed_times():
    itinerary = synthesize_itinerary(make_prefs(interests=["Quantum Physics"]))
    for day in itinerary.days:
        assert [activity.time for activity in day.activities] == ["8:30 AM", "1:30 PM", "7:00 PM"]


def test_synthesis_is_idempotent():
    prefs = make_prefs(groupType="family", specialRequests="stroller friendly")

    first = ItinerarySynthesizer().synthesize(prefs)
    second = ItinerarySynthesizer().synthesize(prefs)

    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


def test_pass_through_fields_are_copied():
    itinerary = synthesize_itinerary(make_prefs(groupType="couple", accommodation="ryokan"))
    assert itinerary.group_type == "couple"
    assert itinerary.accommodation == "ryokan"
    assert itinerary.special_requests is None


def test_unknown_interest_uses_template_activity():
    itinerary = synthesize_itinerary(make_prefs(interests=["Quantum Physics"]))
    activity = itinerary.days[0].activities[0]

    assert activity.title == "Morning – Quantum Physics"
    assert "quantum physics" in activity.description
    assert "quantum physics" in itinerary.days[0].summary


def test_first_registered_interest_wins():
    first = CuratedInterest(
        name="street food",
        keywords=("street",),
        activities={"Morning": CuratedActivity("Street stalls of {destination}", "8:30 AM", "Snack crawl.")},
    )
    second = CuratedInterest(
        name="food",
        keywords=("food",),
        activities={"Morning": CuratedActivity("Food hall in {destination}", "8:30 AM", "Lunch.")},
    )
    synthesizer = ItinerarySynthesizer(InterestRegistry([first, second]))

    itinerary = synthesizer.synthesize(make_prefs(interests=["Street Food"], endDate="2024-05-01"))

    assert itinerary.days[0].activities[0].title == "Street stalls of Kyoto, Japan"
    # Segments without curated content fall back to the template
    assert itinerary.days[0].activities[1].title == "Afternoon – Street Food"


def test_travel_days_labels():
    days = travel_days(make_prefs(startDate="2024-02-28", endDate="2024-03-01"))

    assert [day.iso_date for day in days] == ["2024-02-28", "2024-02-29", "2024-03-01"]
    assert [day.day_number for day in days] == [1, 2, 3]
    assert format_date_label(date(2024, 12, 9)) == "December 9, 2024"


def test_invariant_checker_rejects_incomplete_activity():
    itinerary = synthesize_itinerary(make_prefs(endDate="2024-05-01"))
    broken_day = itinerary.days[0].model_copy(
        update={
            "activities": [itinerary.days[0].activities[0].model_copy(update={"description": ""})]
        }
    )
    broken = itinerary.model_copy(update={"days": [broken_day]})

    with pytest.raises(SynthesisInvariantViolation):
        check_itinerary_invariants(broken)


def test_invariant_checker_rejects_empty_day():
    day = DayPlan.model_construct(title="Day 1", date="May 1, 2024", summary="", activities=[])
    itinerary = Itinerary.model_construct(
        destination="Kyoto", duration="1 day", budget="low", days=[day]
    )

    with pytest.raises(SynthesisInvariantViolation):
        check_itinerary_invariants(itinerary)
