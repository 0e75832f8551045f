"""
Permission constants: The closed catalog of actions a team member can be granted.

Each permission follows the pattern `resource.verb`, where `resource` is a
dashboard tab. Team members carry an explicit set of these; business owners
are unrestricted and never consult the catalog.

Raw strings coming from configuration or request bodies are validated with
`parse_permissions()`, so an unknown identifier is a load-time error instead
of a string that silently never matches.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from bookline.errors import UnknownPermissionError


class Permission(str, Enum):
    # ── Overview ──
    OVERVIEW_VIEW = "overview.view"

    # ── Appointments ──
    APPOINTMENTS_VIEW = "appointments.view"
    APPOINTMENTS_CREATE = "appointments.create"
    APPOINTMENTS_EDIT = "appointments.edit"
    APPOINTMENTS_DELETE = "appointments.delete"

    # ── Services ──
    SERVICES_VIEW = "services.view"
    SERVICES_CREATE = "services.create"
    SERVICES_EDIT = "services.edit"
    SERVICES_DELETE = "services.delete"

    # ── Leads / CRM ──
    LEADS_VIEW = "leads.view"
    LEADS_CREATE = "leads.create"
    LEADS_EDIT = "leads.edit"
    LEADS_DELETE = "leads.delete"
    LEADS_CONVERT = "leads.convert"             # lead -> appointment

    # ── Team ──
    TEAM_VIEW = "team.view"
    TEAM_CREATE = "team.create"
    TEAM_EDIT = "team.edit"
    TEAM_DELETE = "team.delete"

    # ── AI voice agent ──
    AI_FEATURES_VIEW = "ai_features.view"
    AI_FEATURES_EDIT = "ai_features.edit"

    # ── Google Business Profile ──
    GOOGLE_BUSINESS_VIEW = "google_business.view"
    GOOGLE_BUSINESS_EDIT = "google_business.edit"
    GOOGLE_BUSINESS_PUBLISH = "google_business.publish"

    # ── Analytics ──
    ANALYTICS_VIEW = "analytics.view"
    ANALYTICS_EXPORT = "analytics.export"

    # ── Website ──
    WEBSITE_VIEW = "website.view"
    WEBSITE_EDIT = "website.edit"
    WEBSITE_PUBLISH = "website.publish"

    # ── Settings (SMTP, notifications, branding) ──
    SETTINGS_VIEW = "settings.view"
    SETTINGS_MANAGE = "settings.manage"

    # ── Payments ──
    PAYMENTS_VIEW = "payments.view"
    PAYMENTS_MANAGE = "payments.manage"

    # ── Custom domains ──
    DOMAINS_VIEW = "domains.view"
    DOMAINS_CREATE = "domains.create"
    DOMAINS_EDIT = "domains.edit"
    DOMAINS_DELETE = "domains.delete"

    @property
    def resource(self) -> str:
        return self.value.split(".", 1)[0]

    @property
    def verb(self) -> str:
        return self.value.split(".", 1)[1]


def _build_catalog() -> dict[str, frozenset[Permission]]:
    grouped: dict[str, set[Permission]] = {}
    for perm in Permission:
        grouped.setdefault(perm.resource, set()).add(perm)
    return {resource: frozenset(perms) for resource, perms in grouped.items()}


# Resource -> its permissions, in declaration (tab) order.
PERMISSION_CATALOG: dict[str, frozenset[Permission]] = _build_catalog()

RESOURCES: tuple[str, ...] = tuple(PERMISSION_CATALOG)

_BY_VALUE: dict[str, Permission] = {p.value: p for p in Permission}


def lookup_permission(raw: str | Permission) -> Permission | None:
    """Resolve an identifier to a catalog permission, or None if unknown."""
    if isinstance(raw, Permission):
        return raw
    if not isinstance(raw, str):
        return None
    return _BY_VALUE.get(raw)


def parse_permission(raw: str | Permission) -> Permission:
    perm = lookup_permission(raw)
    if perm is None:
        raise UnknownPermissionError([str(raw)])
    return perm


def parse_permissions(raws: Iterable[str | Permission]) -> frozenset[Permission]:
    """Validate a collection of identifiers against the catalog.

    Duplicates collapse. Every unknown identifier is reported at once.
    """
    known: set[Permission] = set()
    unknown: list[str] = []
    for raw in raws:
        perm = lookup_permission(raw)
        if perm is None:
            unknown.append(str(raw))
        else:
            known.add(perm)
    if unknown:
        raise UnknownPermissionError(sorted(set(unknown)))
    return frozenset(known)


def catalog_as_dict() -> dict[str, list[str]]:
    return {
        resource: sorted(p.value for p in perms)
        for resource, perms in PERMISSION_CATALOG.items()
    }
