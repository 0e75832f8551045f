from bookline.scheduling.clock import Clock, FixedClock, SystemClock
from bookline.scheduling.slots import (
    AppointmentSlotRequest,
    AppointmentTimeWindow,
    SlotComposer,
    SlotPolicy,
)
from bookline.scheduling.form import (
    SECTION_FIELDS,
    AppointmentForm,
    AppointmentSubmission,
    FormStep,
    is_section_complete,
)

__all__ = [
    "Clock", "FixedClock", "SystemClock",
    "AppointmentSlotRequest", "AppointmentTimeWindow", "SlotComposer", "SlotPolicy",
    "SECTION_FIELDS", "AppointmentForm", "AppointmentSubmission", "FormStep",
    "is_section_complete",
]
