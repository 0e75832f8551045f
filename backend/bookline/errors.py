"""
Domain error taxonomy.

Domain code raises these; the HTTP layer (see ``bookline.main``) turns them
into 400/403/422/502 responses. None of them is fatal to the process.
"""

from __future__ import annotations

from enum import Enum


class AccessDenied(Exception):
    """The permission gate refused an action. Not retryable."""

    message = "Access Denied"

    def __init__(self, permission: str, actor: str = "", detail: str | None = None):
        self.permission = permission
        self.actor = actor
        super().__init__(detail or f"{self.message}: requires {permission}")


class SelfModificationDenied(AccessDenied):
    """An actor targeted their own team-member record."""

    message = (
        "You cannot modify your own team membership. "
        "Please contact your administrator."
    )

    def __init__(self, permission: str, actor: str = "", target_id: str | None = None):
        self.target_id = target_id
        super().__init__(permission, actor, detail=self.message)


class ValidationErrorKind(str, Enum):
    INVALID_TIME = "INVALID_TIME"
    INVALID_DURATION = "INVALID_DURATION"
    INCOMPLETE_SECTION = "INCOMPLETE_SECTION"


class ValidationError(Exception):
    """Local, recoverable form-state error.

    ``field_errors`` maps field names to user-facing messages so the caller
    can render them next to the offending inputs.
    """

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: str,
        field_errors: dict[str, str] | None = None,
    ):
        self.kind = kind
        self.message = message
        self.field_errors = dict(field_errors or {})
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "detail": self.message,
            "errors": self.field_errors,
        }


class UnknownPermissionError(ValueError):
    """A permission identifier is not part of the catalog (load-time error)."""

    def __init__(self, identifiers: list[str]):
        self.identifiers = identifiers
        super().__init__(f"Unknown permission identifier(s): {', '.join(identifiers)}")


class BookingBackendError(Exception):
    """The booking backend rejected or failed to process a request."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Booking backend error {status_code}: {message}")


class TeamMemberNotFound(LookupError):
    def __init__(self, member_id: str):
        self.member_id = member_id
        super().__init__(f"Team member {member_id} not found")


class DuplicateTeamMember(ValueError):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"A team member with email {email} already exists")
