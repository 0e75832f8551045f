"""
Multi-step appointment form: Client -> Schedule -> Notes.

Each step owns a section of fields. Moving forward out of a step is guarded:
the guard validates exactly that step's fields (surfacing their errors) and
lets the form advance only when none of them is in error. Moving back is
always allowed. Submission validates every section, then composes the time
window through the SlotComposer.

A form instance belongs to one booking session and is never shared.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from bookline.errors import ValidationError, ValidationErrorKind
from bookline.middleware.metrics import appointment_validation_failures_total
from bookline.scheduling.slots import AppointmentSlotRequest, AppointmentTimeWindow, SlotComposer

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


class FormStep(str, Enum):
    CLIENT = "client"
    SCHEDULE = "schedule"
    NOTES = "notes"


STEP_ORDER: tuple[FormStep, ...] = (FormStep.CLIENT, FormStep.SCHEDULE, FormStep.NOTES)

SECTION_FIELDS: dict[FormStep, tuple[str, ...]] = {
    FormStep.CLIENT: ("client_name", "client_email", "client_phone"),
    FormStep.SCHEDULE: ("service_id", "provider_id", "date", "hour", "minute"),
    FormStep.NOTES: ("notes", "professional_notes", "duration_minutes"),
}

FORM_FIELDS: tuple[str, ...] = (
    "client_name", "client_email", "client_phone",
    "service_id", "provider_id", "date", "hour", "minute", "duration_minutes",
    "notes", "professional_notes",
    "email_confirmation", "sms_confirmation",
)


def is_section_complete(section_fields: Iterable[str], field_errors: Mapping[str, str]) -> bool:
    """True iff none of `section_fields` currently holds an error."""
    return not any(name in field_errors for name in section_fields)


def validate_field(name: str, value: Any, composer: SlotComposer) -> str | None:
    """Return the error message for one field, or None when it is valid."""
    if name == "client_name":
        if not isinstance(value, str) or len(value) < 2:
            return "Name must be at least 2 characters"
    elif name == "client_email":
        try:
            _email_adapter.validate_python(value)
        except PydanticValidationError:
            return "Invalid email address"
    elif name == "client_phone":
        if not isinstance(value, str) or len(value) < 10:
            return "Phone number must be at least 10 characters"
    elif name == "service_id":
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            return "Please select a service"
    elif name == "provider_id":
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            return "Please select a provider"
    elif name == "date":
        if not isinstance(value, date):
            return "Please select a date"
        if not composer.is_date_selectable(value):
            return "Date cannot be in the past"
    elif name == "hour":
        if not composer.is_valid_hour(value):
            p = composer.policy
            return f"Hour must be between {p.open_hour} and {p.close_hour}"
    elif name == "minute":
        if not composer.is_valid_minute(value):
            return f"Minute must be one of {composer.minute_options()}"
    elif name == "duration_minutes":
        if value is not None and not composer.validate_duration(value):
            p = composer.policy
            return f"Duration must be between {p.min_duration} and {p.max_duration} minutes"
    return None


@dataclass(frozen=True)
class AppointmentSubmission:
    """A fully validated form, ready for the booking backend."""

    window: AppointmentTimeWindow
    service_id: int
    provider_id: int
    client_name: str
    client_email: str
    client_phone: str
    notes: str = ""
    professional_notes: str = ""
    email_confirmation: bool = True
    sms_confirmation: bool = False

    def to_backend_payload(self) -> dict:
        """Wire format of the booking backend's appointment create/update call."""
        return {
            "serviceId": self.service_id,
            "stylistId": self.provider_id,
            "clientName": self.client_name,
            "clientEmail": self.client_email,
            "clientPhone": self.client_phone,
            "date": self.window.start.isoformat(),
            "durationMinutes": self.window.duration_minutes,
            "notes": self.notes,
            "professionalNotes": self.professional_notes,
            "emailConfirmation": self.email_confirmation,
            "smsConfirmation": self.sms_confirmation,
        }


class AppointmentForm:

    def __init__(
        self,
        composer: SlotComposer,
        values: Mapping[str, Any] | None = None,
        step: FormStep = FormStep.CLIENT,
    ):
        self.composer = composer
        self.step = step
        self.errors: dict[str, str] = {}
        self.values: dict[str, Any] = {
            "client_name": "",
            "client_email": "",
            "client_phone": "",
            "service_id": 0,
            "provider_id": 0,
            "date": None,
            "hour": composer.policy.open_hour,
            "minute": composer.minute_options()[0],
            "duration_minutes": None,
            "notes": "",
            "professional_notes": "",
            "email_confirmation": True,
            "sms_confirmation": False,
        }
        if values:
            self.update(**values)

    # ── Editing ──

    def update(self, **fields: Any) -> None:
        """Set field values. A touched field's previous error no longer applies."""
        unknown = set(fields) - set(FORM_FIELDS)
        if unknown:
            raise ValueError(f"Unknown form field(s): {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            self.values[name] = value
            self.errors.pop(name, None)

    def validate_fields(self, names: Iterable[str]) -> dict[str, str]:
        """Validate exactly `names`; returns the errors found among them."""
        found: dict[str, str] = {}
        for name in names:
            message = validate_field(name, self.values.get(name), self.composer)
            if message is None:
                self.errors.pop(name, None)
            else:
                self.errors[name] = message
                found[name] = message
        return found

    def is_section_complete(self, step: FormStep) -> bool:
        return is_section_complete(SECTION_FIELDS[step], self.errors)

    # ── Navigation ──

    def can_leave(self, step: FormStep) -> bool:
        """Transition guard for the edge step -> next(step)."""
        self.validate_fields(SECTION_FIELDS[step])
        return self.is_section_complete(step)

    def advance(self) -> bool:
        """Move to the next step if the current section is valid.

        Returns False when blocked by the guard or already on the last step.
        """
        if not self.can_leave(self.step):
            appointment_validation_failures_total.labels(
                kind=ValidationErrorKind.INCOMPLETE_SECTION.value,
            ).inc()
            return False
        index = STEP_ORDER.index(self.step)
        if index == len(STEP_ORDER) - 1:
            return False
        self.step = STEP_ORDER[index + 1]
        return True

    def go_to(self, target: FormStep) -> bool:
        """Jump to `target`; forward jumps must pass every guard on the way."""
        while STEP_ORDER.index(target) > STEP_ORDER.index(self.step):
            if not self.advance():
                return False
        self.step = target
        return True

    # ── Submission ──

    def slot_request(self) -> AppointmentSlotRequest:
        return AppointmentSlotRequest(
            date=self.values["date"],
            hour=self.values["hour"],
            minute=self.values["minute"],
            duration_minutes=self.values["duration_minutes"],
        )

    def submit(self) -> AppointmentSubmission:
        """Validate every section and compose the submission.

        On failure the errors are recorded on the form (which stays editable,
        positioned on the first incomplete step) and raised as ValidationError.
        """
        for step in STEP_ORDER:
            self.validate_fields(SECTION_FIELDS[step])
        incomplete = [s for s in STEP_ORDER if not self.is_section_complete(s)]
        if incomplete:
            self.step = incomplete[0]
            self._fail(ValidationError(
                ValidationErrorKind.INCOMPLETE_SECTION,
                f"Please complete the {incomplete[0].value} section",
                dict(self.errors),
            ))

        try:
            window = self.composer.to_submission_payload(self.slot_request())
        except ValidationError as exc:
            self.errors.update(exc.field_errors)
            self.step = FormStep.SCHEDULE
            self._fail(exc)

        v = self.values
        return AppointmentSubmission(
            window=window,
            service_id=v["service_id"],
            provider_id=v["provider_id"],
            client_name=v["client_name"],
            client_email=v["client_email"],
            client_phone=v["client_phone"],
            notes=v["notes"] or "",
            professional_notes=v["professional_notes"] or "",
            email_confirmation=True if v["email_confirmation"] is None else bool(v["email_confirmation"]),
            sms_confirmation=False if v["sms_confirmation"] is None else bool(v["sms_confirmation"]),
        )

    def _fail(self, exc: ValidationError) -> None:
        appointment_validation_failures_total.labels(kind=exc.kind.value).inc()
        logger.info("Appointment form rejected (%s): %s", exc.kind.value, exc.field_errors)
        raise exc
