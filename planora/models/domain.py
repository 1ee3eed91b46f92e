from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

MAX_DESTINATION_LENGTH = 120
MAX_BUDGET_LENGTH = 60
MAX_SPECIAL_REQUESTS_LENGTH = 500

DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y")

FIELD_LABELS = {
    "destination": "Destination",
    "start_date": "Start date",
    "end_date": "End date",
    "budget": "Budget",
    "interests": "Interests",
    "group_type": "Group type",
    "accommodation": "Accommodation",
    "special_requests": "Special requests",
}


class BudgetLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Free-text labels used by the different trip forms.
BUDGET_ALIASES: Dict[str, BudgetLevel] = {
    "saver": BudgetLevel.LOW,
    "budget": BudgetLevel.LOW,
    "cheap": BudgetLevel.LOW,
    "economy": BudgetLevel.LOW,
    "smart": BudgetLevel.MEDIUM,
    "mid": BudgetLevel.MEDIUM,
    "moderate": BudgetLevel.MEDIUM,
    "standard": BudgetLevel.MEDIUM,
    "luxe": BudgetLevel.HIGH,
    "luxury": BudgetLevel.HIGH,
    "premium": BudgetLevel.HIGH,
}


def normalize_budget(value: str) -> BudgetLevel:
    """Map an enum value or a known free-text label to a BudgetLevel."""
    key = value.strip().lower()
    try:
        return BudgetLevel(key)
    except ValueError:
        pass
    if key in BUDGET_ALIASES:
        return BUDGET_ALIASES[key]
    raise PydanticCustomError(
        "budget_level", "Budget must be one of low, medium or high"
    )


def parse_calendar_date(value, label: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError("required", "{label} is required", {"label": label})

    text = value.strip()
    # Date-times are cut to their calendar day, no timezone conversion.
    if "T" in text:
        text = text.split("T", 1)[0]
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise PydanticCustomError(
        "date_invalid",
        "{label} must be a valid date (YYYY-MM-DD)",
        {"label": label},
    )


def normalize_interests(values) -> Tuple[str, ...]:
    """Trim, drop empty entries and de-duplicate keeping first-seen order."""
    seen = []
    for value in values:
        cleaned = value.strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return tuple(seen)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Prefs(CamelModel):
    """Validated, canonical trip request."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    destination: str
    start_date: date
    end_date: date
    budget: BudgetLevel
    interests: Tuple[str, ...] = ()
    group_type: Optional[str] = None
    accommodation: Optional[str] = None
    special_requests: Optional[str] = None

    @field_validator("destination", mode="before")
    @classmethod
    def _check_destination(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise PydanticCustomError("required", "Destination is required")
        value = value.strip()
        if len(value) > MAX_DESTINATION_LENGTH:
            raise PydanticCustomError(
                "too_long",
                "Destination must be {max} characters or fewer",
                {"max": MAX_DESTINATION_LENGTH},
            )
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value, info: ValidationInfo):
        return parse_calendar_date(value, FIELD_LABELS[info.field_name])

    @field_validator("end_date")
    @classmethod
    def _check_date_order(cls, value: date, info: ValidationInfo):
        start = info.data.get("start_date")
        if start is not None and start > value:
            raise PydanticCustomError(
                "date_order", "End date must be on or after the start date"
            )
        return value

    @field_validator("budget", mode="before")
    @classmethod
    def _check_budget(cls, value):
        if isinstance(value, BudgetLevel):
            return value
        if not isinstance(value, str) or not value.strip():
            raise PydanticCustomError("required", "Budget is required")
        if len(value.strip()) > MAX_BUDGET_LENGTH:
            raise PydanticCustomError(
                "too_long",
                "Budget must be {max} characters or fewer",
                {"max": MAX_BUDGET_LENGTH},
            )
        return normalize_budget(value)

    @field_validator("interests", mode="before")
    @classmethod
    def _check_interests(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)) or not all(
            isinstance(item, str) for item in value
        ):
            raise PydanticCustomError(
                "interests_type", "Interests must be a list of strings"
            )
        return normalize_interests(value)

    @field_validator("group_type", "accommodation", "special_requests", mode="before")
    @classmethod
    def _clean_optional(cls, value, info: ValidationInfo):
        if value is None:
            return None
        if not isinstance(value, str):
            raise PydanticCustomError(
                "string_type",
                "{label} must be text",
                {"label": FIELD_LABELS[info.field_name]},
            )
        value = value.strip()
        if not value:
            return None
        if (
            info.field_name == "special_requests"
            and len(value) > MAX_SPECIAL_REQUESTS_LENGTH
        ):
            raise PydanticCustomError(
                "too_long",
                "Special requests must be {max} characters or fewer",
                {"max": MAX_SPECIAL_REQUESTS_LENGTH},
            )
        return value

    @property
    def trip_length(self) -> int:
        return (self.end_date - self.start_date).days + 1


class TravelDay(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    day_number: int
    iso_date: str
    label: str


class Activity(CamelModel):
    title: str
    time: str
    description: str = ""
    location: Optional[str] = None
    interest: Optional[str] = None


class DayPlan(CamelModel):
    title: str
    date: str
    summary: str = ""
    activities: List[Activity] = Field(min_length=1)


class Itinerary(CamelModel):
    destination: str
    duration: str
    budget: str
    interests: List[str] = Field(default_factory=list)
    overview: str = ""
    tips: List[str] = Field(default_factory=list)
    days: List[DayPlan] = Field(min_length=1)
    group_type: Optional[str] = None
    accommodation: Optional[str] = None
    special_requests: Optional[str] = None


# Provider output. Top-level fields may be omitted and are filled from the
# deterministic itinerary; days and activities must be complete.


class ActivityCandidate(CamelModel):
    title: str = Field(min_length=1)
    time: str = Field(min_length=1)
    description: str = ""
    location: Optional[str] = None

    @model_validator(mode="after")
    def _check_details(self):
        if not (self.description.strip() or (self.location or "").strip()):
            raise PydanticCustomError(
                "activity_details", "Activity needs a description or a location"
            )
        return self


class DayPlanCandidate(CamelModel):
    title: str = Field(min_length=1)
    date: Optional[str] = None
    day: Optional[int] = None
    summary: str = Field(min_length=1)
    activities: List[ActivityCandidate] = Field(min_length=1)


class ItineraryCandidate(CamelModel):
    destination: Optional[str] = None
    duration: Optional[str] = None
    budget: Optional[str] = None
    interests: Optional[List[str]] = None
    overview: Optional[str] = None
    tips: Optional[List[str]] = None
    days: Optional[List[DayPlanCandidate]] = None
