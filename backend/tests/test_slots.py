"""Tests for appointment slot composition and the two "not in the past" checks."""

from datetime import date, datetime, timezone

import pytest

from bookline.errors import ValidationError, ValidationErrorKind
from bookline.scheduling.clock import FixedClock
from bookline.scheduling.slots import AppointmentSlotRequest, SlotComposer, SlotPolicy
from tests.conftest import local


class TestCompose:
    def test_compose_instant_in_business_time(self, composer):
        instant = composer.compose_instant(date(2025, 3, 10), 9, 30)
        assert instant == local(2025, 3, 10, 9, 30)
        assert (instant.second, instant.microsecond) == (0, 0)
        assert instant.utcoffset().total_seconds() == -4 * 3600   # EDT

    def test_hour_outside_window_rejected_not_wrapped(self, composer):
        for hour in (24, 7, 21, -1):
            with pytest.raises(ValidationError) as exc_info:
                composer.compose_instant(date(2025, 3, 11), hour, 0)
            assert exc_info.value.kind is ValidationErrorKind.INVALID_TIME
            assert "hour" in exc_info.value.field_errors

    def test_off_grid_minute_rejected_not_rounded(self, composer):
        with pytest.raises(ValidationError) as exc_info:
            composer.compose_instant(date(2025, 3, 11), 10, 20)
        assert set(exc_info.value.field_errors) == {"minute"}

    def test_options_are_fixed(self, composer):
        assert composer.hour_options() == list(range(8, 21))
        assert composer.minute_options() == [0, 15, 30, 45]


class TestDuration:
    @pytest.mark.parametrize("minutes,valid", [
        (14, False), (15, True), (60, True), (480, True), (481, False), (0, False), (True, False),
    ])
    def test_bounds(self, composer, minutes, valid):
        assert composer.validate_duration(minutes) is valid


class TestPickerLevel:
    def test_same_day_late_evening_is_selectable(self, composer):
        now = local(2025, 3, 10, 23, 0)
        assert composer.is_date_selectable(date(2025, 3, 10), now) is True
        assert composer.is_date_selectable(date(2025, 3, 9), now) is False
        assert composer.is_date_selectable(date(2025, 3, 11), now) is True

    def test_today_follows_business_time_zone(self, composer):
        # 02:00 UTC on the 11th is still the 10th in New York
        now = datetime(2025, 3, 11, 2, 0, tzinfo=timezone.utc)
        assert composer.is_date_selectable(date(2025, 3, 10), now) is True


class TestSubmissionLevel:
    def test_same_day_earlier_time_is_past(self, composer):
        now = local(2025, 3, 10, 14, 0)
        assert composer.is_date_selectable(date(2025, 3, 10), now) is True
        assert composer.validate_not_past(composer.compose_instant(date(2025, 3, 10), 9, 0), now) is False
        assert composer.validate_not_past(composer.compose_instant(date(2025, 3, 10), 15, 0), now) is True

    def test_exactly_now_is_not_past(self, composer):
        now = local(2025, 3, 10, 14, 0)
        assert composer.validate_not_past(local(2025, 3, 10, 14, 0), now) is True

    def test_uses_injected_clock(self, policy):
        clock = FixedClock(local(2025, 3, 10, 8, 0))
        composer = SlotComposer(policy, clock)
        instant = composer.compose_instant(date(2025, 3, 10), 9, 0)
        assert composer.validate_not_past(instant) is True
        clock.set(local(2025, 3, 10, 10, 0))
        assert composer.validate_not_past(instant) is False


class TestSubmissionPayload:
    def test_default_duration_applied_when_omitted(self, composer):
        window = composer.to_submission_payload(AppointmentSlotRequest(date(2025, 3, 10), 15, 0))
        assert window.start == local(2025, 3, 10, 15, 0)
        assert window.duration_minutes == 60
        assert window.end == local(2025, 3, 10, 16, 0)

    def test_past_time_is_invalid_time(self, composer):
        with pytest.raises(ValidationError) as exc_info:
            composer.to_submission_payload(AppointmentSlotRequest(date(2025, 3, 10), 9, 0))
        assert exc_info.value.kind is ValidationErrorKind.INVALID_TIME

    def test_bad_duration_is_invalid_duration(self, composer):
        with pytest.raises(ValidationError) as exc_info:
            composer.to_submission_payload(AppointmentSlotRequest(date(2025, 3, 11), 9, 0, 500))
        assert exc_info.value.kind is ValidationErrorKind.INVALID_DURATION
        assert "duration_minutes" in exc_info.value.field_errors

    def test_missing_date_is_invalid_time(self, composer):
        with pytest.raises(ValidationError) as exc_info:
            composer.to_submission_payload(AppointmentSlotRequest(None, 9, 0))
        assert exc_info.value.kind is ValidationErrorKind.INVALID_TIME

    def test_idempotent(self, composer):
        request = AppointmentSlotRequest(date(2025, 3, 12), 11, 45, 90)
        assert composer.to_submission_payload(request) == composer.to_submission_payload(request)

    def test_custom_policy(self, clock):
        policy = SlotPolicy(open_hour=6, close_hour=22, minute_steps=(0, 30), timezone="UTC")
        composer = SlotComposer(policy, clock)
        window = composer.to_submission_payload(AppointmentSlotRequest(date(2025, 3, 11), 6, 30, 15))
        assert window.start == datetime(2025, 3, 11, 6, 30, tzinfo=timezone.utc)
        with pytest.raises(ValidationError):
            composer.compose_instant(date(2025, 3, 11), 7, 15)
