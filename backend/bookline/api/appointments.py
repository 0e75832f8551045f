"""
Appointments API

Server side of the three-step booking form (Client -> Schedule -> Notes):
slot options for the picker, per-section validation that gates the form's
"Next" button, and submission, which composes the time window and forwards
it to the booking backend.
"""

import datetime as dt
import logging

from fastapi import APIRouter, Depends, Query

from bookline.api.deps import (
    appointment_form_access,
    get_booking_client,
    get_slot_composer,
    require,
)
from bookline.auth.context import RequestContext
from bookline.auth.permissions import Permission
from bookline.scheduling.form import STEP_ORDER, AppointmentForm, FormStep
from bookline.scheduling.slots import SlotComposer
from bookline.schemas.schemas import (
    AppointmentFormValues,
    AppointmentSubmitResponse,
    SectionValidationRequest,
    SectionValidationResponse,
    SlotOptions,
    TimeWindowSchema,
)
from bookline.services.booking_client import BookingBackendClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


@router.get("/slot-options", response_model=SlotOptions)
async def slot_options(date: dt.date | None = Query(None),
                       ctx: RequestContext = Depends(appointment_form_access),
                       composer: SlotComposer = Depends(get_slot_composer)):
    """Hours, minutes and duration bounds offered by the picker."""
    policy = composer.policy
    return SlotOptions(
        timezone=policy.timezone,
        hours=composer.hour_options(),
        minutes=composer.minute_options(),
        min_duration_minutes=policy.min_duration,
        max_duration_minutes=policy.max_duration,
        default_duration_minutes=policy.default_duration,
        date=date,
        date_selectable=composer.is_date_selectable(date) if date is not None else None,
    )


@router.post("/validate-section", response_model=SectionValidationResponse)
async def validate_section(body: SectionValidationRequest,
                           ctx: RequestContext = Depends(appointment_form_access),
                           composer: SlotComposer = Depends(get_slot_composer)):
    """Run one step's transition guard; the form may advance iff `complete`."""
    step = FormStep(body.section)
    form = AppointmentForm(composer, body.values.model_dump(), step=step)
    advanced = form.advance()

    index = STEP_ORDER.index(step)
    next_section = STEP_ORDER[index + 1].value if index + 1 < len(STEP_ORDER) else None
    return SectionValidationResponse(
        section=step.value,
        complete=form.is_section_complete(step),
        errors=form.errors,
        next_section=next_section if advanced else None,
    )


def _compose_submission(values: AppointmentFormValues, composer: SlotComposer):
    return AppointmentForm(composer, values.model_dump()).submit()


@router.post("", response_model=AppointmentSubmitResponse, status_code=201)
async def create_appointment(body: AppointmentFormValues,
                             ctx: RequestContext = Depends(require(Permission.APPOINTMENTS_CREATE)),
                             composer: SlotComposer = Depends(get_slot_composer),
                             booking: BookingBackendClient = Depends(get_booking_client)):
    submission = _compose_submission(body, composer)
    result = await booking.create_appointment(ctx.business_id, submission)
    logger.info(
        "Appointment requested for %s by %s", submission.window.start.isoformat(), ctx.label,
    )
    return AppointmentSubmitResponse(
        window=TimeWindowSchema(**submission.window.to_dict()),
        booking=result,
    )


@router.patch("/{appointment_id}", response_model=AppointmentSubmitResponse)
async def update_appointment(appointment_id: int,
                             body: AppointmentFormValues,
                             ctx: RequestContext = Depends(require(Permission.APPOINTMENTS_EDIT)),
                             composer: SlotComposer = Depends(get_slot_composer),
                             booking: BookingBackendClient = Depends(get_booking_client)):
    submission = _compose_submission(body, composer)
    result = await booking.update_appointment(ctx.business_id, appointment_id, submission)
    logger.info("Appointment %s rescheduled by %s", appointment_id, ctx.label)
    return AppointmentSubmitResponse(
        window=TimeWindowSchema(**submission.window.to_dict()),
        booking=result,
    )
