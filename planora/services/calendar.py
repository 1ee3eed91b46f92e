from datetime import date, datetime, time, timedelta
from typing import Optional

from ics import Calendar, Event

from planora.models.domain import DATE_FORMATS, Itinerary

ACTIVITY_DURATION = timedelta(hours=2)
TRAVEL_BUFFER = timedelta(minutes=30)
TIME_FORMATS = ("%I:%M %p", "%I %p", "%H:%M")


def parse_start_date(start_date_str: Optional[str]) -> date:
    """Accepts YYYY-MM-DD or DD-MM-YYYY. Defaults to tomorrow."""
    if start_date_str:
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(start_date_str.strip(), fmt).date()
            except ValueError:
                continue
    return (datetime.now() + timedelta(days=1)).date()


def parse_activity_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    cleaned = value.strip().upper()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).time()
        except ValueError:
            continue
    return None


def generate_ics(itinerary: Itinerary, start_date_str: Optional[str] = None) -> bytes:
    """
    Generates an iCalendar (.ics) file content from an itinerary.
    Each day gets an all-day summary event and each activity a timed event.
    """
    start_date = parse_start_date(start_date_str)
    cal = Calendar()

    for index, day in enumerate(itinerary.days):
        current_day_date = start_date + timedelta(days=index)

        summary_event = Event()
        summary_event.name = f"Day {index + 1}: {itinerary.destination} Trip"
        summary_event.begin = datetime.combine(current_day_date, time.min)
        summary_event.make_all_day()
        summary_event.description = day.summary or day.title
        cal.events.add(summary_event)

        # Activities without a readable time are laid out from 09:00
        cursor = datetime.combine(current_day_date, time(9, 0))

        for activity in day.activities:
            parsed = parse_activity_time(activity.time)
            begin = datetime.combine(current_day_date, parsed) if parsed else cursor

            event = Event()
            event.name = f"{activity.title} ({itinerary.destination})"
            event.description = activity.description
            if activity.location:
                event.location = activity.location
            event.begin = begin
            event.duration = ACTIVITY_DURATION
            cal.events.add(event)

            cursor = max(cursor, begin + ACTIVITY_DURATION + TRAVEL_BUFFER)

    return cal.serialize().encode("utf-8")
