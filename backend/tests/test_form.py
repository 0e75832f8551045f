"""Tests for the Client -> Schedule -> Notes appointment form."""

from datetime import date

import pytest

from bookline.errors import ValidationError, ValidationErrorKind
from bookline.scheduling.form import (
    SECTION_FIELDS,
    AppointmentForm,
    FormStep,
    is_section_complete,
)
from tests.conftest import local

CLIENT = {
    "client_name": "Jane Doe",
    "client_email": "jane@example.com",
    "client_phone": "555-123-4567",
}
SCHEDULE = {
    "service_id": 3,
    "provider_id": 7,
    "date": date(2025, 3, 11),
    "hour": 10,
    "minute": 15,
}


class TestSectionCompleteness:
    def test_client_section_ignores_other_sections(self):
        errors = {"service_id": "Please select a service", "hour": "bad"}
        assert is_section_complete(SECTION_FIELDS[FormStep.CLIENT], errors) is True

    @pytest.mark.parametrize("field", ["client_name", "client_email", "client_phone"])
    def test_any_client_error_blocks(self, field):
        assert is_section_complete(SECTION_FIELDS[FormStep.CLIENT], {field: "x"}) is False


class TestNavigation:
    def test_advance_validates_only_current_section(self, composer):
        form = AppointmentForm(composer, {"client_name": "J", "client_email": "nope"})
        assert form.advance() is False
        assert form.step is FormStep.CLIENT
        assert set(form.errors) == {"client_name", "client_email", "client_phone"}

    def test_advance_through_all_steps(self, composer):
        form = AppointmentForm(composer, {**CLIENT, **SCHEDULE})
        assert form.advance() is True
        assert form.step is FormStep.SCHEDULE
        assert form.advance() is True
        assert form.step is FormStep.NOTES
        assert form.advance() is False       # last step
        assert form.errors == {}

    def test_schedule_guard_rejects_past_date(self, composer):
        form = AppointmentForm(composer, {**CLIENT, **SCHEDULE, "date": date(2025, 3, 9)},
                               step=FormStep.SCHEDULE)
        assert form.advance() is False
        assert form.errors == {"date": "Date cannot be in the past"}

    def test_notes_guard_checks_duration(self, composer):
        form = AppointmentForm(composer, {**CLIENT, **SCHEDULE, "duration_minutes": 600},
                               step=FormStep.NOTES)
        assert form.advance() is False
        assert set(form.errors) == {"duration_minutes"}
        assert form.is_section_complete(FormStep.NOTES) is False

        form.update(duration_minutes=90)
        form.advance()
        assert form.is_section_complete(FormStep.NOTES) is True

    def test_editing_clears_stale_error(self, composer):
        form = AppointmentForm(composer)
        form.advance()
        assert "client_name" in form.errors
        form.update(client_name="Jane Doe")
        assert "client_name" not in form.errors

    def test_go_to_forward_passes_guards(self, composer):
        form = AppointmentForm(composer, CLIENT)
        assert form.go_to(FormStep.NOTES) is False
        assert form.step is FormStep.SCHEDULE
        assert "service_id" in form.errors
        assert form.go_to(FormStep.CLIENT) is True

    def test_unknown_field_rejected(self, composer):
        with pytest.raises(ValueError):
            AppointmentForm(composer, {"stylist": 3})


class TestSubmit:
    def test_submit_composes_window(self, composer):
        form = AppointmentForm(composer, {**CLIENT, **SCHEDULE, "notes": "Window seat"})
        submission = form.submit()
        assert submission.window.start == local(2025, 3, 11, 10, 15)
        assert submission.window.duration_minutes == 60
        payload = submission.to_backend_payload()
        assert payload["stylistId"] == 7
        assert payload["date"] == "2025-03-11T10:15:00-04:00"
        assert payload["emailConfirmation"] is True
        assert payload["smsConfirmation"] is False

    def test_incomplete_section_reported_and_focused(self, composer):
        form = AppointmentForm(composer, {**SCHEDULE, "client_email": "bad"}, step=FormStep.NOTES)
        with pytest.raises(ValidationError) as exc_info:
            form.submit()
        assert exc_info.value.kind is ValidationErrorKind.INCOMPLETE_SECTION
        assert form.step is FormStep.CLIENT
        assert "client_email" in exc_info.value.field_errors

    def test_same_day_earlier_time_rejected_at_submit(self, composer):
        # clock is 2025-03-10 14:00; the day itself is selectable
        form = AppointmentForm(composer, {**CLIENT, **SCHEDULE, "date": date(2025, 3, 10), "hour": 9})
        assert form.go_to(FormStep.NOTES) is True
        with pytest.raises(ValidationError) as exc_info:
            form.submit()
        assert exc_info.value.kind is ValidationErrorKind.INVALID_TIME
        assert form.step is FormStep.SCHEDULE
        assert "hour" in form.errors

        form.update(hour=15, minute=0)
        assert form.submit().window.start == local(2025, 3, 10, 15, 0)

    def test_invalid_duration_blocks_notes_section(self, composer):
        form = AppointmentForm(composer, {**CLIENT, **SCHEDULE, "duration_minutes": 600})
        with pytest.raises(ValidationError) as exc_info:
            form.submit()
        assert exc_info.value.kind is ValidationErrorKind.INCOMPLETE_SECTION
        assert form.step is FormStep.NOTES
        assert "duration_minutes" in exc_info.value.field_errors

    def test_submit_is_repeatable(self, composer):
        form = AppointmentForm(composer, {**CLIENT, **SCHEDULE, "duration_minutes": 90})
        assert form.submit() == form.submit()
