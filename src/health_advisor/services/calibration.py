"""Calibration period state machine with write-through persistence."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Protocol
from uuid import UUID, uuid4

from health_advisor.domain.calibration import (
    CALIBRATION_DAYS,
    MEAL_LABELS,
    MEAL_TYPES,
    MIN_FILLED_MEALS,
    SELECTABLE_TRACKING_MODES,
    CalibrationNotStartedError,
    CalibrationPeriod,
    DayRecord,
    DayStatus,
    IneligibleTransitionError,
    MealEntry,
    MealNotFoundError,
    MealTemplate,
    MealUpdate,
    UnknownDayError,
)
from health_advisor.services.clock import Clock
from health_advisor.services.nutrition_profile import NutritionProfileService

_logger = logging.getLogger(__name__)

_SUNDAY = 6
_TRAILING_NUMBER = re.compile(r"\d+$")

DEFAULT_MEAL_PATTERN: tuple[MealTemplate, ...] = (
    MealTemplate(type="breakfast", label="Breakfast", order=0),
    MealTemplate(type="lunch", label="Lunch", order=1),
    MealTemplate(type="dinner", label="Dinner", order=2),
    MealTemplate(type="snack", label="Snack", order=3),
)


class CalibrationRepository(Protocol):
    """Persistence interface for calibration periods and meal patterns."""

    def get_period(self, user_id: UUID) -> CalibrationPeriod | None:
        """Return the user's calibration period, if any."""

    def save_period(self, user_id: UUID, period: CalibrationPeriod) -> None:
        """Replace the user's calibration period."""

    def get_meal_pattern(self, user_id: UUID) -> list[MealTemplate] | None:
        """Return the user's saved default meal pattern, if any."""

    def save_meal_pattern(self, user_id: UUID, pattern: list[MealTemplate]) -> None:
        """Replace the user's default meal pattern."""


@dataclass(frozen=True)
class CalibrationStatus:
    """Read model of a period at a point in calendar time."""

    period: CalibrationPeriod
    day_statuses: dict[str, DayStatus]
    completed_count: int
    remaining_count: int
    percentage: int
    today_key: str | None
    next_day: str | None
    in_effect: bool
    tracking_mode_required: bool


@dataclass(frozen=True)
class ChatMealLog:
    """Where a chat-reported meal was recorded."""

    day: str
    meal: MealEntry


def week_monday(day: date) -> date:
    """Return the Monday of the Sunday-to-Saturday week containing ``day``."""
    if day.weekday() == _SUNDAY:
        return day + timedelta(days=1)
    return day - timedelta(days=day.weekday())


def day_date(week_start: date, day_key: str) -> date:
    """Return the calendar date of a weekday key within a period week."""
    if day_key not in CALIBRATION_DAYS:
        raise UnknownDayError(day_key)
    return week_start + timedelta(days=CALIBRATION_DAYS.index(day_key))


def day_status(
    today: date, day_key: str, completed: bool, week_start: date | None = None
) -> DayStatus:
    """Derive a weekday's status from the calendar and its completed flag."""
    if completed:
        return "logged"
    target = day_date(week_start or week_monday(today), day_key)
    if target == today:
        return "open-today"
    if target < today:
        return "missed"
    return "locked"


def today_key(today: date) -> str | None:
    """Return the weekday key for a date, or None on weekends."""
    index = today.weekday()
    return CALIBRATION_DAYS[index] if index < len(CALIBRATION_DAYS) else None


def is_in_effect(period: CalibrationPeriod, today: date) -> bool:
    """Return True while the period still drives meal logging."""
    if period.dismissed:
        return False
    if period.completed_at is None:
        return True
    return today <= day_date(period.start_date, CALIBRATION_DAYS[-1])


def _new_meal_id() -> str:
    return uuid4().hex[:12]


@dataclass
class CalibrationService:
    """Service for the five-weekday meal calibration period."""

    repository: CalibrationRepository
    clock: Clock
    profile_service: NutritionProfileService | None = None
    meal_id_factory: Callable[[], str] = field(default=_new_meal_id)

    def get_period(self, user_id: UUID) -> CalibrationPeriod | None:
        """Return the stored period without applying calendar rules."""
        return self.repository.get_period(user_id)

    def start_period(self, user_id: UUID) -> CalibrationPeriod:
        """Create a period anchored to this week's Monday, or return the existing one."""
        existing = self.repository.get_period(user_id)
        if existing is not None:
            return existing
        now = self.clock.now()
        period = CalibrationPeriod(
            start_date=week_monday(now.date()),
            started_at=now,
            days={
                day: DayRecord(meals=self._pattern_meals(user_id))
                for day in CALIBRATION_DAYS
            },
        )
        self.repository.save_period(user_id, period)
        _logger.info("Started calibration period for %s", user_id)
        return period

    def align_to_current_week(self, user_id: UUID) -> CalibrationPeriod:
        """Re-base a prior-week period onto this week, keeping its content."""
        period = self._require_period(user_id)
        if self._align(period):
            self.repository.save_period(user_id, period)
        return period

    def update_meal(
        self, user_id: UUID, day: str, meal_id: str, update: MealUpdate
    ) -> MealEntry:
        """Apply a partial meal update.

        Changing content clears an existing calorie override unless the same
        update also sets one.
        """
        period = self._require_period(user_id)
        meal = _require_meal(period.day(day), meal_id)
        if update.sets_content() and update.content != meal.content:
            meal.content = update.content or ""
            if not update.sets_override():
                meal.calorie_override = None
        if update.sets_override():
            meal.calorie_override = update.calorie_override
        self.repository.save_period(user_id, period)
        return meal

    def reorder_meals(self, user_id: UUID, day: str, meal_ids: list[str]) -> DayRecord:
        """Reorder a day's meals; ``meal_ids`` must be a permutation."""
        period = self._require_period(user_id)
        record = period.day(day)
        by_id = {meal.id: meal for meal in record.meals}
        if len(meal_ids) != len(by_id) or set(meal_ids) != set(by_id):
            raise IneligibleTransitionError("new order must be a permutation of meals")
        record.meals = [by_id[meal_id] for meal_id in meal_ids]
        _renumber(record)
        self.repository.save_period(user_id, period)
        return record

    def add_meal(
        self, user_id: UUID, day: str, meal_type: str, label: str | None = None
    ) -> MealEntry:
        """Append a meal, numbering labels when the type repeats."""
        if meal_type not in MEAL_TYPES:
            raise ValueError(f"unknown meal type: {meal_type}")
        period = self._require_period(user_id)
        record = period.day(day)
        if not label:
            label = MEAL_LABELS[meal_type]
            same_type = [meal for meal in record.meals if meal.type == meal_type]
            if same_type:
                label = f"{label} {len(same_type) + 1}"
                first = same_type[0]
                if not _TRAILING_NUMBER.search(first.label):
                    first.label = f"{first.label} 1"
        meal = MealEntry(
            id=self.meal_id_factory(),
            type=meal_type,
            label=label,
            order=len(record.meals),
        )
        record.meals.append(meal)
        self.repository.save_period(user_id, period)
        return meal

    def remove_meal(self, user_id: UUID, day: str, meal_id: str) -> DayRecord:
        """Remove a meal; a day always keeps at least one."""
        period = self._require_period(user_id)
        record = period.day(day)
        _require_meal(record, meal_id)
        if len(record.meals) == 1:
            raise IneligibleTransitionError("cannot remove the last meal of a day")
        record.meals = [meal for meal in record.meals if meal.id != meal_id]
        _renumber(record)
        self.repository.save_period(user_id, period)
        return record

    def reset_day(self, user_id: UUID, day: str) -> DayRecord:
        """Replace a day's meals with the default meal pattern."""
        period = self._require_period(user_id)
        record = period.day(day)
        record.meals = self._pattern_meals(user_id)
        self.repository.save_period(user_id, period)
        return record

    def can_complete(self, user_id: UUID, day: str) -> bool:
        """Return True when the day has enough filled meals to complete."""
        period = self._require_period(user_id)
        return period.day(day).filled_meal_count() >= MIN_FILLED_MEALS

    def complete_day(self, user_id: UUID, day: str) -> CalibrationPeriod:
        """Mark a day complete and advance the period."""
        period = self._require_period(user_id)
        record = period.day(day)
        if record.completed:
            return period
        if record.filled_meal_count() < MIN_FILLED_MEALS:
            raise IneligibleTransitionError(
                f"{day} needs at least {MIN_FILLED_MEALS} meals with content"
            )
        now = self.clock.now()
        finished = _mark_complete(period, day, now)
        self.repository.save_period(user_id, period)
        _logger.info("Completed calibration day %s for %s", day, user_id)
        if finished:
            self._on_period_complete(user_id, period, now)
        return period

    def set_tracking_mode(self, user_id: UUID, mode: str) -> CalibrationPeriod:
        """Record the post-calibration tracking choice."""
        if mode not in SELECTABLE_TRACKING_MODES:
            raise ValueError(f"unsupported tracking mode: {mode}")
        period = self._require_period(user_id)
        if period.completed_at is None:
            raise IneligibleTransitionError(
                "tracking mode can only be chosen after calibration"
            )
        period.tracking_mode = mode  # type: ignore[assignment]
        self.repository.save_period(user_id, period)
        return period

    def dismiss(self, user_id: UUID) -> CalibrationPeriod:
        """Opt out of calibration, creating the period record if needed."""
        return self._set_dismissed(user_id, dismissed=True)

    def opt_in(self, user_id: UUID) -> CalibrationPeriod:
        """Undo a previous dismissal."""
        return self._set_dismissed(user_id, dismissed=False)

    def get_status(self, user_id: UUID) -> CalibrationStatus:
        """Return the period's status, applying week alignment and auto-completion.

        Past weekdays that already qualify are completed implicitly; today is
        never auto-completed.
        """
        period = self._require_period(user_id)
        now = self.clock.now()
        today = now.date()
        in_effect = is_in_effect(period, today)
        finished = False
        if in_effect:
            # Dates are judged against the stored week, before re-basing.
            changed = False
            for day in CALIBRATION_DAYS:
                record = period.days[day]
                if record.completed or day_date(period.start_date, day) >= today:
                    continue
                if record.filled_meal_count() >= MIN_FILLED_MEALS:
                    finished = _mark_complete(period, day, now) or finished
                    changed = True
                    _logger.info("Auto-completed calibration day %s for %s", day, user_id)
            if period.completed_at is None:
                changed = self._align(period) or changed
            if changed:
                self.repository.save_period(user_id, period)
        if finished:
            self._on_period_complete(user_id, period, now)

        completed = period.completed_count()
        return CalibrationStatus(
            period=period,
            day_statuses={
                day: day_status(today, day, record.completed, period.start_date)
                for day, record in period.days.items()
            },
            completed_count=completed,
            remaining_count=len(CALIBRATION_DAYS) - completed,
            percentage=round(completed * 100 / len(CALIBRATION_DAYS)),
            today_key=today_key(today),
            next_day=period.current_day,
            in_effect=is_in_effect(period, today),
            tracking_mode_required=(
                period.completed_at is not None and period.tracking_mode == "unset"
            ),
        )

    def get_meal_pattern(self, user_id: UUID) -> list[MealTemplate]:
        """Return the saved meal pattern or the system default."""
        saved = self.repository.get_meal_pattern(user_id)
        if saved:
            return saved
        return [template.model_copy() for template in DEFAULT_MEAL_PATTERN]

    def save_meal_pattern(
        self, user_id: UUID, pattern: list[MealTemplate]
    ) -> list[MealTemplate]:
        """Persist a default meal pattern used for new or reset days."""
        if not pattern:
            raise ValueError("meal pattern needs at least one meal")
        ordered = [
            template.model_copy(update={"order": index})
            for index, template in enumerate(pattern)
        ]
        self.repository.save_meal_pattern(user_id, ordered)
        return ordered

    def log_meal_from_chat(
        self, user_id: UUID, meal_type: str, description: str
    ) -> ChatMealLog | None:
        """Record a meal mentioned in chat on the current calibration day.

        Returns None when no active period can take the entry.
        """
        if meal_type not in MEAL_TYPES:
            raise ValueError(f"unknown meal type: {meal_type}")
        period = self.repository.get_period(user_id)
        if period is None or period.completed_at is not None:
            return None
        if not is_in_effect(period, self.clock.now().date()):
            return None
        day = period.current_day
        if day is None or period.days[day].completed:
            return None
        record = period.days[day]
        meal = next((m for m in record.meals if m.type == meal_type), None)
        if meal is None:
            meal = MealEntry(
                id=self.meal_id_factory(),
                type=meal_type,
                label=MEAL_LABELS[meal_type],
                order=len(record.meals),
            )
            record.meals.append(meal)
        if meal.content != description:
            meal.content = description
            meal.calorie_override = None
        self.repository.save_period(user_id, period)
        return ChatMealLog(day=day, meal=meal)

    def _require_period(self, user_id: UUID) -> CalibrationPeriod:
        period = self.repository.get_period(user_id)
        if period is None:
            raise CalibrationNotStartedError(str(user_id))
        return period

    def _align(self, period: CalibrationPeriod) -> bool:
        current = week_monday(self.clock.now().date())
        if period.start_date >= current:
            return False
        period.start_date = current
        return True

    def _pattern_meals(self, user_id: UUID) -> list[MealEntry]:
        return [
            MealEntry(
                id=self.meal_id_factory(),
                type=template.type,
                label=template.label,
                order=index,
            )
            for index, template in enumerate(self.get_meal_pattern(user_id))
        ]

    def _set_dismissed(self, user_id: UUID, *, dismissed: bool) -> CalibrationPeriod:
        period = self.start_period(user_id)
        if period.dismissed != dismissed:
            period.dismissed = dismissed
            self.repository.save_period(user_id, period)
        return period

    def _on_period_complete(
        self, user_id: UUID, period: CalibrationPeriod, now: datetime
    ) -> None:
        _logger.info("Calibration period complete for %s", user_id)
        if self.profile_service is not None:
            self.profile_service.generate(user_id, period, generated_at=now)


def _require_meal(record: DayRecord, meal_id: str) -> MealEntry:
    meal = record.find_meal(meal_id)
    if meal is None:
        raise MealNotFoundError(meal_id)
    return meal


def _renumber(record: DayRecord) -> None:
    for index, meal in enumerate(record.meals):
        meal.order = index


def _mark_complete(period: CalibrationPeriod, day: str, now: datetime) -> bool:
    """Complete a day; return True when this finished the whole period."""
    record = period.days[day]
    record.completed = True
    if record.completed_at is None:
        record.completed_at = now
    period.current_day = _next_incomplete_day(period, day)
    if period.current_day is None and period.completed_at is None:
        period.completed_at = now
        return True
    return False


def _next_incomplete_day(period: CalibrationPeriod, after: str) -> str | None:
    index = CALIBRATION_DAYS.index(after)
    for day in CALIBRATION_DAYS[index + 1 :] + CALIBRATION_DAYS[: index + 1]:
        if not period.days[day].completed:
            return day
    return None
