"""
Team Directory Service

Per-business registry of team members (the people a business owner
delegates dashboard access to):
- List / get / create / update / delete, each authorized through the
  PermissionGate via the caller's RequestContext
- Permission lists validated against the catalog; role presets applied when
  a member is created without an explicit list
- Password verification for team login

Members live in process memory; persistence belongs to the booking backend.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Iterable

from bookline.auth.actor import Delegate
from bookline.auth.context import RequestContext
from bookline.auth.passwords import hash_password, verify_password
from bookline.auth.permissions import Permission, parse_permissions
from bookline.auth.roles import DELEGATE_ROLES, ROLE_PRESETS, Role
from bookline.errors import DuplicateTeamMember, TeamMemberNotFound

logger = logging.getLogger(__name__)

# Fields a PATCH may touch; role/permissions additionally count as access changes
_EDITABLE_FIELDS = frozenset({
    "name", "email", "phone", "role", "permissions",
    "hourly_rate", "specializations", "working_hours", "is_active", "password",
})
_ACCESS_FIELDS = frozenset({"role", "permissions", "is_active"})


@dataclass(frozen=True)
class TeamMember:
    id: str
    business_id: str
    name: str
    email: str
    role: Role
    permissions: frozenset[Permission]
    phone: str | None = None
    hourly_rate: float | None = None
    specializations: tuple[str, ...] = ()
    working_hours: str | None = None
    is_active: bool = True
    password_hash: str | None = field(default=None, repr=False)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_actor(self) -> Delegate:
        return Delegate(
            actor_id=self.id,
            business_id=self.business_id,
            role=self.role,
            permissions=self.permissions,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role.value,
            "permissions": sorted(p.value for p in self.permissions),
            "hourly_rate": self.hourly_rate,
            "specializations": list(self.specializations),
            "working_hours": self.working_hours,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
        }


def _parse_role(raw: Role | str) -> Role:
    role = Role(raw)
    if role not in DELEGATE_ROLES:
        raise ValueError(
            f"Invalid role. Must be one of: {sorted(r.value for r in DELEGATE_ROLES)}"
        )
    return role


class TeamDirectory:

    def __init__(self):
        self._members: dict[str, TeamMember] = {}
        self._seq = 0
        self._lock = threading.Lock()

    # ── Reads ──

    def list_members(self, ctx: RequestContext) -> list[TeamMember]:
        ctx.require_permission(Permission.TEAM_VIEW)
        with self._lock:
            members = [m for m in self._members.values() if m.business_id == ctx.business_id]
        return sorted(members, key=lambda m: m.created_at)

    def get_member(self, ctx: RequestContext, member_id: str) -> TeamMember:
        ctx.require_permission(Permission.TEAM_VIEW)
        with self._lock:
            return self._get_scoped(ctx.business_id, member_id)

    def _get_scoped(self, business_id: str, member_id: str) -> TeamMember:
        member = self._members.get(member_id)
        # Other tenants' members are indistinguishable from missing ones
        if member is None or member.business_id != business_id:
            raise TeamMemberNotFound(member_id)
        return member

    # ── Writes ──

    def create_member(
        self,
        ctx: RequestContext,
        *,
        name: str,
        email: str,
        role: Role | str = Role.STAFF,
        permissions: Iterable[str] | None = None,
        password: str | None = None,
        phone: str | None = None,
        hourly_rate: float | None = None,
        specializations: Iterable[str] = (),
        working_hours: str | None = None,
    ) -> TeamMember:
        ctx.require_permission(Permission.TEAM_CREATE)

        role = _parse_role(role)
        perms = ROLE_PRESETS[role] if permissions is None else parse_permissions(permissions)
        password_hash = hash_password(password) if password else None

        with self._lock:
            self._ensure_unique_email(ctx.business_id, email)
            self._seq += 1
            member = TeamMember(
                id=f"team_{self._seq}",
                business_id=ctx.business_id,
                name=name,
                email=email,
                role=role,
                permissions=perms,
                phone=phone,
                hourly_rate=hourly_rate,
                specializations=tuple(specializations),
                working_hours=working_hours,
                password_hash=password_hash,
            )
            self._members[member.id] = member

        logger.info("Team member created: %s (%s) by %s", member.email, member.role.value, ctx.label)
        return member

    def update_member(self, ctx: RequestContext, member_id: str, **changes) -> TeamMember:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown team member field(s): {', '.join(sorted(unknown))}")

        updates: dict = {}
        if "role" in changes:
            updates["role"] = _parse_role(changes["role"])
        if "permissions" in changes:
            updates["permissions"] = parse_permissions(changes["permissions"] or [])
        if "specializations" in changes:
            updates["specializations"] = tuple(changes["specializations"] or ())
        for key in ("name", "email", "phone", "hourly_rate", "working_hours", "is_active"):
            if key in changes:
                updates[key] = changes[key]

        with self._lock:
            current = self._members.get(member_id)
            if current is not None and current.business_id != ctx.business_id:
                current = None
            # Resubmitting an unchanged role/permission list is not an access change
            alters_access = any(
                current is None or getattr(current, key) != updates[key]
                for key in _ACCESS_FIELDS & set(updates)
            )
            ctx.require_permission(
                Permission.TEAM_EDIT, target_id=member_id, alters_access=alters_access,
            )
            if current is None:
                raise TeamMemberNotFound(member_id)
            if "email" in updates and updates["email"].lower() != current.email.lower():
                self._ensure_unique_email(ctx.business_id, updates["email"])
            if changes.get("password"):
                updates["password_hash"] = hash_password(changes["password"])
            member = replace(current, **updates)
            self._members[member_id] = member

        logger.info("Team member updated: %s by %s", member.email, ctx.label)
        return member

    def delete_member(self, ctx: RequestContext, member_id: str) -> None:
        ctx.require_permission(Permission.TEAM_DELETE, target_id=member_id)

        with self._lock:
            member = self._get_scoped(ctx.business_id, member_id)
            del self._members[member_id]

        logger.info("Team member removed: %s by %s", member.email, ctx.label)

    def _ensure_unique_email(self, business_id: str, email: str) -> None:
        wanted = email.lower()
        for m in self._members.values():
            if m.business_id == business_id and m.email.lower() == wanted:
                raise DuplicateTeamMember(email)

    # ── Team login ──

    def authenticate(self, business_id: str, email: str, password: str) -> TeamMember | None:
        """Return the active member matching the credentials, else None."""
        wanted = email.lower()
        with self._lock:
            member = next(
                (m for m in self._members.values()
                 if m.business_id == business_id and m.email.lower() == wanted),
                None,
            )
        # bcrypt runs outside the lock
        if member is not None and member.is_active and verify_password(password, member.password_hash):
            return member
        return None


team_directory = TeamDirectory()
