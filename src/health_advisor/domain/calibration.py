"""Domain models for the five-weekday meal calibration period."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

CALIBRATION_DAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
)

MEAL_TYPES: tuple[str, ...] = (
    "breakfast",
    "morningSnack",
    "lunch",
    "afternoonSnack",
    "dinner",
    "eveningSnack",
    "snack",
    "custom",
)

MEAL_LABELS: dict[str, str] = {
    "breakfast": "Breakfast",
    "morningSnack": "Morning Snack",
    "lunch": "Lunch",
    "afternoonSnack": "Afternoon Snack",
    "dinner": "Dinner",
    "eveningSnack": "Evening Snack/Dessert",
    "snack": "Snack",
    "custom": "Custom",
}

MIN_FILLED_MEALS = 2

TrackingMode = Literal["unset", "detailed", "journal", "paused"]
DayStatus = Literal["locked", "open-today", "missed", "logged"]

SELECTABLE_TRACKING_MODES = frozenset({"detailed", "journal", "paused"})


class CalibrationError(Exception):
    """Base error for calibration operations."""


class IneligibleTransitionError(CalibrationError):
    """Raised when an operation is not allowed in the current state."""


class CalibrationNotStartedError(CalibrationError):
    """Raised when a user has no calibration period yet."""


class UnknownDayError(CalibrationError):
    """Raised for day keys outside monday..friday."""


class MealNotFoundError(CalibrationError):
    """Raised when a meal id does not exist in the given day."""


def _validate_meal_type(value: str) -> str:
    if value not in MEAL_TYPES:
        raise ValueError(f"unknown meal type: {value}")
    return value


class MealTemplate(BaseModel):
    """One slot of a user's default meal pattern."""

    type: str
    label: str
    order: int = 0

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        return _validate_meal_type(value)


class MealEntry(BaseModel):
    """A labeled, freely described food record within a day."""

    id: str
    type: str
    label: str
    content: str = ""
    order: int = 0
    calorie_override: int | None = None

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        return _validate_meal_type(value)

    def has_content(self) -> bool:
        """Return True when the meal has non-blank content."""
        return bool(self.content.strip())


class DayRecord(BaseModel):
    """Meals logged for a single calibration weekday."""

    meals: list[MealEntry] = Field(default_factory=list)
    completed: bool = False
    completed_at: datetime | None = None

    def find_meal(self, meal_id: str) -> MealEntry | None:
        """Return the meal with the given id, if present."""
        for meal in self.meals:
            if meal.id == meal_id:
                return meal
        return None

    def filled_meal_count(self) -> int:
        """Return how many meals have non-blank content."""
        return sum(1 for meal in self.meals if meal.has_content())


class CalibrationPeriod(BaseModel):
    """A user's guided five-weekday logging period."""

    start_date: date
    started_at: datetime
    days: dict[str, DayRecord]
    current_day: str | None = "monday"
    completed_at: datetime | None = None
    dismissed: bool = False
    tracking_mode: TrackingMode = "unset"

    @field_validator("days")
    @classmethod
    def _exact_weekdays(cls, value: dict[str, DayRecord]) -> dict[str, DayRecord]:
        if set(value) != set(CALIBRATION_DAYS):
            raise ValueError("days must contain exactly monday..friday")
        return {day: value[day] for day in CALIBRATION_DAYS}

    def day(self, day: str) -> DayRecord:
        """Return the record for a weekday key."""
        if day not in self.days:
            raise UnknownDayError(day)
        return self.days[day]

    def completed_count(self) -> int:
        """Return the number of completed days."""
        return sum(1 for record in self.days.values() if record.completed)


class MealUpdate(BaseModel):
    """Partial meal update; only explicitly passed fields are applied."""

    content: str | None = None
    calorie_override: int | None = Field(default=None, ge=0)

    def sets_content(self) -> bool:
        """Return True when content was passed."""
        return "content" in self.model_fields_set and self.content is not None

    def sets_override(self) -> bool:
        """Return True when calorie_override was passed (including None)."""
        return "calorie_override" in self.model_fields_set
