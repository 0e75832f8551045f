"""
API Dependencies: Auth context, permission guards, and service singletons.

`get_request_context`:
  1. Extracts the Bearer token from the Authorization header
  2. Decodes and validates the JWT
  3. Rebuilds the Actor (Owner or Delegate) from its claims
  4. Returns a RequestContext scoped to the token's business

Services (team directory, slot composer, booking client) are provided as
dependencies so tests can override them through `app.dependency_overrides`.
"""

import logging

from fastapi import Depends, HTTPException, Request
from jose import JWTError

from bookline.auth.context import RequestContext
from bookline.auth.jwt import actor_from_claims, decode_access_token
from bookline.auth.permissions import Permission
from bookline.middleware.request_context import bind_actor
from bookline.scheduling.slots import SlotComposer, SlotPolicy
from bookline.services.booking_client import BookingBackendClient
from bookline.services.team_directory import TeamDirectory, team_directory

logger = logging.getLogger(__name__)


# ── Request context (JWT authentication) ──────────────────────────────────────

async def get_request_context(request: Request) -> RequestContext:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    token = auth_header[7:]  # strip "Bearer "
    try:
        actor = actor_from_claims(decode_access_token(token))
    except JWTError as e:
        logger.debug("JWT rejected: %s", e)
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    bind_actor(request, actor.label)
    return RequestContext(actor=actor)


# ── Permission guards ────────────────────────────────────────────────────────

def require(*perms: Permission):
    """
    FastAPI dependency that checks the caller has ALL listed permissions.

    Usage:
        @router.post("/api/appointments")
        async def create(ctx: RequestContext = Depends(require(Permission.APPOINTMENTS_CREATE))):
            ...
    """
    async def _check(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        for p in perms:
            ctx.require_permission(p)
        return ctx
    return _check


def require_any(*perms: Permission):
    """FastAPI dependency that checks the caller has AT LEAST ONE of the listed permissions."""
    async def _check(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        ctx.require_any(*perms)
        return ctx
    return _check


# Picker options and step checks serve anyone who can open the booking form
appointment_form_access = require_any(
    Permission.APPOINTMENTS_VIEW, Permission.APPOINTMENTS_CREATE, Permission.APPOINTMENTS_EDIT,
)


# ── Services ─────────────────────────────────────────────────────────────────

_composer: SlotComposer | None = None


def get_team_directory() -> TeamDirectory:
    return team_directory


def get_slot_composer() -> SlotComposer:
    global _composer
    if _composer is None:
        _composer = SlotComposer(SlotPolicy.from_settings())
    return _composer


def get_booking_client() -> BookingBackendClient:
    return BookingBackendClient()
