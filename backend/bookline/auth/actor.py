"""
Actor: Who is acting, as an explicit variant.

    Owner     the business account acting on its own data; unrestricted
    Delegate  a team member with a role and an explicit permission set

Both are frozen: an actor is built once per authenticated session and is
replaced wholesale (new token) when the member's role or permissions change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union

from bookline.auth.permissions import Permission, parse_permissions
from bookline.auth.roles import DELEGATE_ROLES, Role


@dataclass(frozen=True)
class Owner:
    actor_id: str
    business_id: str

    @property
    def role(self) -> Role:
        return Role.OWNER

    @property
    def label(self) -> str:
        """Identity string for audit logging."""
        return f"{self.role.value.lower()}:{self.actor_id}"


@dataclass(frozen=True)
class Delegate:
    actor_id: str
    business_id: str
    role: Role = Role.STAFF
    permissions: frozenset[Permission] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.role not in DELEGATE_ROLES:
            raise ValueError(f"Delegate role must be one of {sorted(r.value for r in DELEGATE_ROLES)}")
        if not isinstance(self.permissions, frozenset):
            object.__setattr__(self, "permissions", frozenset(self.permissions))

    @classmethod
    def from_grants(
        cls,
        actor_id: str,
        business_id: str,
        role: Role | str,
        grants: Iterable[str | Permission],
    ) -> "Delegate":
        """Build a delegate from raw identifiers, validating them against the catalog."""
        return cls(
            actor_id=actor_id,
            business_id=business_id,
            role=Role(role),
            permissions=parse_permissions(grants),
        )

    @property
    def label(self) -> str:
        return f"{self.role.value.lower()}:{self.actor_id}"


Actor = Union[Owner, Delegate]
