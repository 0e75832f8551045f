"""
Role definitions and the permission presets offered for each delegated role.

    STAFF < MANAGER < ADMIN

OWNER is the business account itself. It has no preset because it is never
checked against a permission set (see `bookline.auth.actor.Owner`).

Presets only seed a new team member's permission list when none is given.
After creation the member's explicit permissions are authoritative; the role
is a label and is not re-expanded at check time.
"""

from enum import Enum

from bookline.auth.permissions import Permission


class Role(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"


# Roles that can be assigned to a team member
DELEGATE_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.MANAGER, Role.STAFF})


# ── Staff: see the day, book and edit appointments ──
_STAFF_PERMS: frozenset[Permission] = frozenset({
    Permission.OVERVIEW_VIEW,
    Permission.APPOINTMENTS_VIEW,
    Permission.APPOINTMENTS_CREATE,
    Permission.APPOINTMENTS_EDIT,
    Permission.SERVICES_VIEW,
})

# ── Manager: staff + services, leads, team roster, analytics ──
_MANAGER_PERMS: frozenset[Permission] = frozenset({
    *_STAFF_PERMS,
    Permission.APPOINTMENTS_DELETE,
    Permission.SERVICES_CREATE,
    Permission.SERVICES_EDIT,
    Permission.LEADS_VIEW,
    Permission.LEADS_CREATE,
    Permission.LEADS_EDIT,
    Permission.LEADS_CONVERT,
    Permission.TEAM_VIEW,
    Permission.ANALYTICS_VIEW,
    Permission.PAYMENTS_VIEW,
})

# ── Admin: everything ──
_ADMIN_PERMS: frozenset[Permission] = frozenset(Permission)


ROLE_PRESETS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: _ADMIN_PERMS,
    Role.MANAGER: _MANAGER_PERMS,
    Role.STAFF: _STAFF_PERMS,
}
