from bookline.auth.permissions import Permission, PERMISSION_CATALOG, parse_permissions
from bookline.auth.roles import Role, ROLE_PRESETS
from bookline.auth.actor import Actor, Owner, Delegate
from bookline.auth.gate import Decision, PermissionGate, gate
from bookline.auth.context import RequestContext

__all__ = [
    "Permission", "PERMISSION_CATALOG", "parse_permissions",
    "Role", "ROLE_PRESETS",
    "Actor", "Owner", "Delegate",
    "Decision", "PermissionGate", "gate",
    "RequestContext",
]
