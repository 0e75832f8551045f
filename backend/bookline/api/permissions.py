"""
Permissions API

Lets the dashboard ask the server for decisions instead of re-implementing
them: the permission catalog, the caller's own grants and reachable
sections, and one-off checks.
"""

from fastapi import APIRouter, Depends

from bookline.api.deps import get_request_context
from bookline.auth.actor import Delegate
from bookline.auth.context import RequestContext
from bookline.auth.gate import gate
from bookline.auth.permissions import catalog_as_dict
from bookline.schemas.schemas import (
    MeResponse,
    PermissionCatalog,
    PermissionCheckRequest,
    PermissionCheckResponse,
)

router = APIRouter(prefix="/api", tags=["permissions"])


@router.get("/permissions/catalog", response_model=PermissionCatalog)
async def permission_catalog(ctx: RequestContext = Depends(get_request_context)):
    return PermissionCatalog(resources=catalog_as_dict())


@router.get("/me", response_model=MeResponse)
async def whoami(ctx: RequestContext = Depends(get_request_context)):
    actor = ctx.actor
    is_delegate = isinstance(actor, Delegate)
    return MeResponse(
        actor_id=actor.actor_id,
        business_id=actor.business_id,
        kind="delegate" if is_delegate else "owner",
        role=actor.role.value,
        permissions=sorted(p.value for p in actor.permissions) if is_delegate else None,
        sections=gate.accessible_sections(actor),
    )


@router.post("/permissions/check", response_model=PermissionCheckResponse)
async def check_permission(body: PermissionCheckRequest,
                           ctx: RequestContext = Depends(get_request_context)):
    decision = gate.decide(
        ctx.actor, body.permission, target_id=body.target_id, alters_access=body.alters_access,
    )
    return PermissionCheckResponse(
        permission=body.permission,
        allowed=decision.allowed,
        decision=decision.value,
    )
