"""
Pydantic schemas for API request/response models.
"""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


# ── Auth ──

class TeamLoginRequest(BaseModel):
    business_id: str
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    member: "TeamMemberSchema"


# ── Permissions ──

class PermissionCatalog(BaseModel):
    resources: dict[str, list[str]]


class MeResponse(BaseModel):
    actor_id: str
    business_id: str
    kind: Literal["owner", "delegate"]
    role: str
    permissions: list[str] | None = None      # None: unrestricted
    sections: list[str]


class PermissionCheckRequest(BaseModel):
    permission: str = Field(..., min_length=1)
    target_id: str | None = None
    alters_access: bool = False


class PermissionCheckResponse(BaseModel):
    permission: str
    allowed: bool
    decision: str


# ── Team ──

class TeamMemberCreate(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str | None = None
    role: Literal["ADMIN", "MANAGER", "STAFF"] = "STAFF"
    hourly_rate: float | None = Field(None, ge=0)
    specializations: list[str] = Field(default_factory=list)
    permissions: list[str] | None = None     # None: role preset
    working_hours: str | None = None
    password: str | None = Field(None, min_length=6)


class TeamMemberUpdate(BaseModel):
    name: str | None = Field(None, min_length=2)
    email: EmailStr | None = None
    phone: str | None = None
    role: Literal["ADMIN", "MANAGER", "STAFF"] | None = None
    hourly_rate: float | None = Field(None, ge=0)
    specializations: list[str] | None = None
    permissions: list[str] | None = None
    working_hours: str | None = None
    is_active: bool | None = None
    password: str | None = Field(None, min_length=6)


class TeamMemberSchema(BaseModel):
    id: str
    business_id: str
    name: str
    email: str
    phone: str | None
    role: str
    permissions: list[str]
    hourly_rate: float | None
    specializations: list[str]
    working_hours: str | None
    is_active: bool
    created_at: str


# ── Appointments ──

class SlotOptions(BaseModel):
    timezone: str
    hours: list[int]
    minutes: list[int]
    min_duration_minutes: int
    max_duration_minutes: int
    default_duration_minutes: int
    date: dt.date | None = None
    date_selectable: bool | None = None


class AppointmentFormValues(BaseModel):
    """Raw form values; field rules are applied by the form, not here."""

    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""
    service_id: int = 0
    provider_id: int = 0
    date: dt.date | None = None
    hour: int | None = None
    minute: int | None = None
    duration_minutes: int | None = None
    notes: str | None = ""
    professional_notes: str | None = ""
    email_confirmation: bool | None = True
    sms_confirmation: bool | None = False


class SectionValidationRequest(BaseModel):
    section: Literal["client", "schedule", "notes"]
    values: AppointmentFormValues


class SectionValidationResponse(BaseModel):
    section: str
    complete: bool
    errors: dict[str, str]
    next_section: str | None = None


class TimeWindowSchema(BaseModel):
    start: str
    end: str
    duration_minutes: int


class AppointmentSubmitResponse(BaseModel):
    window: TimeWindowSchema
    booking: dict


TokenResponse.model_rebuild()
