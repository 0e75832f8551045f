"""
PermissionGate: Decides whether an actor may perform an action.

Rules, in priority order:

1. Self-modification: an actor may never delete their own team-member record,
   nor change their own role/permissions, whatever they hold.
2. Owners (or no actor at all, meaning no delegation is configured for the
   session) are unrestricted.
3. Delegates are allowed iff the identifier is in the catalog and in their
   permission set. Unknown identifiers fail closed.

The gate is a pure predicate: no I/O, no state, never raises. `require()` is
the caller-side translation of a refusal into AccessDenied.
"""

from __future__ import annotations

import logging
from enum import Enum

from bookline.auth.actor import Actor, Owner
from bookline.auth.permissions import PERMISSION_CATALOG, Permission, lookup_permission
from bookline.errors import AccessDenied, SelfModificationDenied

logger = logging.getLogger(__name__)

# Actions an actor may never take against their own record
SELF_GUARDED: frozenset[Permission] = frozenset({Permission.TEAM_DELETE})

# Any of these grants entry to a dashboard section
_SECTION_VERBS = ("view", "edit", "create")


class Decision(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"
    SELF_MODIFICATION_DENIED = "self_modification_denied"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOWED


def _is_self_target(actor: Actor | None, target_id: str | None) -> bool:
    return actor is not None and target_id is not None and str(target_id) == str(actor.actor_id)


class PermissionGate:

    def decide(
        self,
        actor: Actor | None,
        permission_id: str | Permission,
        *,
        target_id: str | None = None,
        alters_access: bool = False,
    ) -> Decision:
        perm = lookup_permission(permission_id)

        if _is_self_target(actor, target_id) and (alters_access or perm in SELF_GUARDED):
            return Decision.SELF_MODIFICATION_DENIED

        if actor is None or isinstance(actor, Owner):
            return Decision.ALLOWED

        if perm is not None and perm in actor.permissions:
            return Decision.ALLOWED
        return Decision.DENIED

    def can_perform(
        self,
        actor: Actor | None,
        permission_id: str | Permission,
        *,
        target_id: str | None = None,
    ) -> bool:
        return self.decide(actor, permission_id, target_id=target_id).allowed

    def can_access_section(self, actor: Actor | None, resource: str) -> bool:
        """A section is reachable with any of its view/edit/create permissions."""
        if actor is None or isinstance(actor, Owner):
            return True
        return any(
            self.can_perform(actor, f"{resource}.{verb}") for verb in _SECTION_VERBS
        )

    def accessible_sections(self, actor: Actor | None) -> list[str]:
        return [r for r in PERMISSION_CATALOG if self.can_access_section(actor, r)]

    def require(
        self,
        actor: Actor | None,
        permission_id: str | Permission,
        *,
        target_id: str | None = None,
        alters_access: bool = False,
    ) -> None:
        """Raise AccessDenied (or SelfModificationDenied) unless the action is allowed."""
        decision = self.decide(
            actor, permission_id, target_id=target_id, alters_access=alters_access,
        )
        if decision.allowed:
            return

        perm = lookup_permission(permission_id)
        perm_str = perm.value if perm is not None else str(permission_id)
        label = actor.label if actor is not None else "anonymous"

        if decision is Decision.SELF_MODIFICATION_DENIED:
            logger.warning(
                "Self-modification blocked: %s on own record (%s)", label, perm_str,
                extra={"permission": perm_str, "decision": decision.value},
            )
            raise SelfModificationDenied(perm_str, label, target_id=target_id)

        logger.info(
            "Access denied: %s lacks %s", label, perm_str,
            extra={"permission": perm_str, "decision": decision.value},
        )
        raise AccessDenied(perm_str, label)


gate = PermissionGate()
