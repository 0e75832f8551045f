"""
Appointment slot composition.

Turns the four independently edited booking fields (date, hour, minute,
duration) into one validated time window:

    date + hour + minute  ->  start instant in the business time zone
    start + duration      ->  AppointmentTimeWindow

Two "not in the past" checks exist and both are needed:

- picker level: a calendar day is selectable unless its midnight is before
  today's midnight (a day picked as "today" is always selectable);
- submission level: the composed instant must not be before the live clock,
  so "today at 09:00" is rejected at 14:00 even though the day was selectable.

Availability against other bookings is not checked here; the booking
backend owns that.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from functools import cached_property
from zoneinfo import ZoneInfo

from bookline.config import Settings, settings as app_settings
from bookline.errors import ValidationError, ValidationErrorKind
from bookline.scheduling.clock import Clock, SystemClock


@dataclass(frozen=True)
class SlotPolicy:
    """Business-configured booking window."""

    open_hour: int = 8
    close_hour: int = 20            # inclusive
    minute_steps: tuple[int, ...] = (0, 15, 30, 45)
    min_duration: int = 15
    max_duration: int = 480
    default_duration: int = 60
    timezone: str = "America/New_York"

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "SlotPolicy":
        s = s or app_settings
        return cls(
            open_hour=s.business_open_hour,
            close_hour=s.business_close_hour,
            minute_steps=s.minute_steps,
            min_duration=s.min_duration_minutes,
            max_duration=s.max_duration_minutes,
            default_duration=s.default_duration_minutes,
            timezone=s.business_timezone,
        )

    @cached_property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class AppointmentSlotRequest:
    """The in-progress scheduling fields of one booking form."""

    date: date | None
    hour: int | None
    minute: int | None
    duration_minutes: int | None = None


@dataclass(frozen=True)
class AppointmentTimeWindow:
    start: datetime
    duration_minutes: int

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration_minutes": self.duration_minutes,
        }


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SlotComposer:

    def __init__(self, policy: SlotPolicy | None = None, clock: Clock | None = None):
        self.policy = policy or SlotPolicy.from_settings()
        self.clock = clock or SystemClock()

    # ── Options offered to the picker ──

    def hour_options(self) -> list[int]:
        return list(range(self.policy.open_hour, self.policy.close_hour + 1))

    def minute_options(self) -> list[int]:
        return sorted(self.policy.minute_steps)

    # ── Field-level predicates ──

    def is_valid_hour(self, hour) -> bool:
        return _is_int(hour) and self.policy.open_hour <= hour <= self.policy.close_hour

    def is_valid_minute(self, minute) -> bool:
        # Quantized: off-grid minutes are rejected, never rounded
        return _is_int(minute) and minute in self.policy.minute_steps

    def validate_duration(self, minutes) -> bool:
        return _is_int(minutes) and self.policy.min_duration <= minutes <= self.policy.max_duration

    # ── Composition ──

    def compose_instant(self, day: date, hour: int, minute: int) -> datetime:
        """Place hour:minute:00.000 on `day` in the business time zone."""
        errors: dict[str, str] = {}
        if not self.is_valid_hour(hour):
            errors["hour"] = (
                f"Hour must be between {self.policy.open_hour} and {self.policy.close_hour}"
            )
        if not self.is_valid_minute(minute):
            errors["minute"] = f"Minute must be one of {self.minute_options()}"
        if errors:
            raise ValidationError(ValidationErrorKind.INVALID_TIME, "Invalid appointment time", errors)
        return datetime(day.year, day.month, day.day, hour, minute, 0, 0, tzinfo=self.policy.tzinfo)

    def now(self) -> datetime:
        return self.clock.now()

    def validate_not_past(self, instant: datetime, now: datetime | None = None) -> bool:
        """False iff `instant` is strictly before `now`."""
        now = now or self.now()
        return not instant < now

    def is_date_selectable(self, day: date, now: datetime | None = None) -> bool:
        """Calendar-level check: compare midnights in the business time zone."""
        now = now or self.now()
        today = now.astimezone(self.policy.tzinfo).date()
        return self.validate_not_past(
            datetime(day.year, day.month, day.day, tzinfo=self.policy.tzinfo),
            datetime(today.year, today.month, today.day, tzinfo=self.policy.tzinfo),
        )

    def to_submission_payload(
        self,
        request: AppointmentSlotRequest,
        now: datetime | None = None,
    ) -> AppointmentTimeWindow:
        """Consume a slot request into an absolute time window.

        Raises ValidationError(INVALID_TIME) for a missing, malformed or past
        start and ValidationError(INVALID_DURATION) for an out-of-range
        duration. An omitted duration takes the policy default.
        """
        if request.date is None:
            raise ValidationError(
                ValidationErrorKind.INVALID_TIME, "Please select a date", {"date": "Date is required"},
            )
        start = self.compose_instant(request.date, request.hour, request.minute)
        if not self.validate_not_past(start, now):
            raise ValidationError(
                ValidationErrorKind.INVALID_TIME,
                "Appointment time is in the past",
                {"hour": "Please choose a time later than now"},
            )

        duration = request.duration_minutes
        if duration is None:
            duration = self.policy.default_duration
        if not self.validate_duration(duration):
            raise ValidationError(
                ValidationErrorKind.INVALID_DURATION,
                "Invalid appointment duration",
                {
                    "duration_minutes": (
                        f"Duration must be between {self.policy.min_duration} "
                        f"and {self.policy.max_duration} minutes"
                    ),
                },
            )

        return AppointmentTimeWindow(start=start, duration_minutes=duration)
