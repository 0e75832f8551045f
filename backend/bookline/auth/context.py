"""
RequestContext: The "who is asking, for which business, what can they do" abstraction.

Every API request gets a RequestContext built from its bearer token (see
`bookline.api.deps`). It carries:
- actor: Owner or Delegate (see `bookline.auth.actor`)
- business_id: the tenant the request is scoped to

Endpoints never read tenant identity from anywhere else; there is no
module-level "current business".
"""

from __future__ import annotations

from dataclasses import dataclass

from bookline.auth.actor import Actor, Owner
from bookline.auth.gate import Decision, gate
from bookline.auth.permissions import Permission
from bookline.middleware.metrics import authorization_decisions_total


@dataclass(frozen=True)
class RequestContext:
    actor: Actor

    @property
    def business_id(self) -> str:
        return self.actor.business_id

    @property
    def is_owner(self) -> bool:
        return isinstance(self.actor, Owner)

    def has_permission(self, perm: Permission | str, *, target_id: str | None = None) -> bool:
        return gate.can_perform(self.actor, perm, target_id=target_id)

    def require_permission(
        self,
        perm: Permission | str,
        *,
        target_id: str | None = None,
        alters_access: bool = False,
    ) -> None:
        """Raise AccessDenied if the caller may not perform `perm`."""
        decision: Decision = gate.decide(
            self.actor, perm, target_id=target_id, alters_access=alters_access,
        )
        authorization_decisions_total.labels(decision=decision.value).inc()
        gate.require(self.actor, perm, target_id=target_id, alters_access=alters_access)

    def require_any(self, *perms: Permission) -> None:
        """Raise AccessDenied if the caller lacks ALL of the given permissions."""
        if not perms:
            raise ValueError("require_any() needs at least one permission")
        if any(self.has_permission(p) for p in perms):
            return
        self.require_permission(perms[0])

    @property
    def label(self) -> str:
        """Identity string for audit logging."""
        return self.actor.label
